"""Frame-coalescing throttle for pointer samples."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_FRAME_INTERVAL = 1 / 60


class FrameThrottle:
    """Coalesces bursts of (lat, lon) samples into one update per frame.

    At most one update is pending at a time. Samples arriving while an update
    is pending replace its position; when the frame fires the callback sees
    only the latest sample.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        callback: Callable[[float, float], None],
        frame_interval: float = DEFAULT_FRAME_INTERVAL,
    ):
        self._loop = loop
        self._callback = callback
        self.frame_interval = frame_interval
        self._latest: Optional[tuple[float, float]] = None
        self._handle: Optional[asyncio.TimerHandle] = None

    def submit(self, lat: float, lon: float) -> None:
        """Record a sample and make sure a frame is scheduled."""
        self._latest = (lat, lon)
        if self._handle is None:
            self._handle = self._loop.call_later(self.frame_interval, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        if self._latest is None:
            return
        lat, lon = self._latest
        try:
            self._callback(lat, lon)
        except Exception:
            logger.exception("Frame update failed")
