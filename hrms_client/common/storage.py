"""Durable key/value storage backing the session (token / user / role)."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from hrms_client.common.constants import SESSION_KEYS

logger = logging.getLogger(__name__)


class FileStorage:
    """String key/value pairs persisted as one JSON document on disk.

    Every write rewrites the file, so state survives process restarts the
    same way the browser's local storage survives reloads.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._data: dict[str, str] = self._read()

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._write()

    def remove(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._write()

    def clear_session(self) -> None:
        """Remove the token, user and role keys in one write."""
        removed = [key for key in SESSION_KEYS if self._data.pop(key, None) is not None]
        if removed:
            self._write()

    # ── File I/O ────────────────────────────────────────────────────

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Ignoring unreadable storage file %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items() if v is not None}

    def _write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._data, indent=2), encoding="utf-8")
