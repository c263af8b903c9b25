"""Best-effort device position with a fixed fallback coordinate."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


class GeolocationError(Exception):
    """Position denied by the user or unavailable on this device."""


PositionProvider = Callable[[], Awaitable[Coordinates]]


class Geolocator:
    """Resolve the current position, falling back when it cannot be read.

    *provider* is a coroutine function returning ``Coordinates`` (e.g. a
    GPS daemon or OS location service); ``None`` means unsupported.
    """

    def __init__(
        self,
        provider: Optional[PositionProvider],
        *,
        timeout: float,
        fallback: Coordinates,
    ) -> None:
        self.provider = provider
        self.timeout = timeout
        self.fallback = fallback

    async def locate(self) -> Coordinates:
        if self.provider is None:
            return self.fallback
        try:
            return await asyncio.wait_for(self.provider(), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.info("Geolocation timed out after %.1fs; using fallback", self.timeout)
        except GeolocationError as exc:
            logger.info("Geolocation unavailable (%s); using fallback", exc)
        return self.fallback
