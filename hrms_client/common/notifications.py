"""Transient user notifications — toasts and blocking alerts."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional

logger = logging.getLogger(__name__)


@dataclass
class Toast:
    title: str
    description: str = ""
    variant: str = "default"  # default | destructive | alert
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_error(self) -> bool:
        return self.variant in ("destructive", "alert")


class Notifier:
    """Collects notifications for the front-end to display.

    An optional *sink* is called with each toast as it is raised (the CLI
    prints them); all toasts are also kept in ``history``.
    """

    def __init__(self, sink: Optional[Callable[[Toast], None]] = None) -> None:
        self.sink = sink
        self.history: list[Toast] = []

    def toast(self, title: str, description: str = "", *, variant: str = "default") -> Toast:
        item = Toast(title=title, description=description, variant=variant)
        if item.is_error:
            logger.warning("%s: %s", title, description)
        else:
            logger.info("%s: %s", title, description)
        self.history.append(item)
        if self.sink is not None:
            self.sink(item)
        return item

    def alert(self, message: str) -> Toast:
        """Blocking-alert equivalent; shown as a toast with the ``alert`` variant."""
        return self.toast(message, variant="alert")

    @property
    def last(self) -> Optional[Toast]:
        return self.history[-1] if self.history else None

    def clear(self) -> None:
        self.history.clear()
