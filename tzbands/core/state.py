"""Session state for one explorer window, with observer pattern.

The controller owns a single :class:`SessionState` and hands it to the
resolver and renderer. Sections are frozen dataclasses; every change
replaces the section and notifies observers, so readers never see a
half-updated value.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Optional

from .cache import DEFAULT_CACHE_SIZE, PlaceCache
from .rate_limiter import DEFAULT_MIN_INTERVAL, RateLimiter

logger = logging.getLogger(__name__)


class LookupPhase(str, Enum):
    """Place lookup lifecycle for a click or search."""

    IDLE = "idle"
    LOCATING = "locating"
    RESOLVED = "resolved"
    FAILED = "failed"


@dataclass(frozen=True)
class HoverState:
    """Last known pointer position."""

    lat: Optional[float] = None
    lon: Optional[float] = None
    offset: Optional[int] = None

    @property
    def known(self) -> bool:
        return self.lat is not None and self.lon is not None


@dataclass(frozen=True)
class ClickState:
    """Most recent clicked or searched point."""

    lat: Optional[float] = None
    lon: Optional[float] = None
    offset: Optional[int] = None
    label: str = ""
    phase: LookupPhase = LookupPhase.IDLE
    seq: int = 0

    @property
    def known(self) -> bool:
        return self.lat is not None and self.lon is not None


@dataclass(frozen=True)
class SearchState:
    busy: bool = False
    query: str = ""
    message: str = ""


@dataclass(frozen=True)
class ViewState:
    center_lat: float = 22.0
    center_lon: float = 0.0
    show_bands: bool = True


Observer = Callable[[str, Any], None]


class SessionState:
    """Single source of truth for the explorer session.

    Holds the UI sections plus the place cache and the shared rate limiter
    used by every lookup in this session.
    """

    SECTIONS = ("hover", "click", "search", "view")

    def __init__(
        self,
        cache: Optional[PlaceCache] = None,
        limiter: Optional[RateLimiter] = None,
        view: Optional[ViewState] = None,
    ):
        self.cache = cache if cache is not None else PlaceCache(DEFAULT_CACHE_SIZE)
        self.limiter = limiter if limiter is not None else RateLimiter(DEFAULT_MIN_INTERVAL)
        self._sections: dict[str, Any] = {
            "hover": HoverState(),
            "click": ClickState(),
            "search": SearchState(),
            "view": view or ViewState(),
        }
        self._observers: list[Observer] = []
        self._seq = 0

    # --- Typed accessors ---

    @property
    def hover(self) -> HoverState:
        return self._sections["hover"]

    @property
    def click(self) -> ClickState:
        return self._sections["click"]

    @property
    def search(self) -> SearchState:
        return self._sections["search"]

    @property
    def view(self) -> ViewState:
        return self._sections["view"]

    def next_seq(self) -> int:
        """Claim a sequence number for a new click or search."""
        self._seq += 1
        return self._seq

    @property
    def current_seq(self) -> int:
        return self._seq

    # --- Observer pattern ---

    def subscribe(self, callback: Observer) -> Callable[[], None]:
        """
        Subscribe to state changes.

        Args:
            callback: Function called with (section, new_value) on changes

        Returns:
            Unsubscribe function
        """
        self._observers.append(callback)

        def unsubscribe():
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    def get(self, section: str) -> Any:
        return self._sections.get(section)

    def update(self, section: str, notify: bool = True, **changes) -> Any:
        """
        Replace fields of a section and notify observers.

        Args:
            section: One of SECTIONS
            notify: Whether to notify observers (default True)
            **changes: Field values to replace

        Returns:
            The new section value
        """
        if section not in self._sections:
            raise KeyError(f"Unknown state section: {section}")
        value = replace(self._sections[section], **changes)
        self._sections[section] = value
        if notify:
            self._notify(section, value)
        return value

    def _notify(self, section: str, value: Any) -> None:
        # Copy to avoid mutation during iteration
        for observer in list(self._observers):
            try:
                observer(section, value)
            except Exception as e:
                logger.warning(f"Observer failed for section '{section}': {e}")

    def touch(self, section: str) -> None:
        """Re-notify observers with the unchanged section (clock refresh)."""
        self._notify(section, self._sections[section])
