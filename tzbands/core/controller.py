"""Explorer controller: hover sampling, click/search lookups, clock tick.

Click and search lookups follow ``idle -> locating -> resolved | failed``.
The longitude band offset is shown right away; a successful reverse geocode
may replace it with a country override. Lookup failures never escape: they
become a message in the session state and the prior display stays put.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Mapping, Optional

from .bands import offset_from_lon
from .overrides import COUNTRY_TZ_OVERRIDE, override_for
from .state import ClickState, LookupPhase, SessionState
from .throttle import DEFAULT_FRAME_INTERVAL, FrameThrottle
from ..services.geocoding import GeocodingError

if TYPE_CHECKING:
    from ..services.geocoding import PlaceResolver

logger = logging.getLogger(__name__)

MSG_LOOKING_UP = "Looking up place name…"
MSG_LOOKUP_FAILED = "Could not reverse-geocode (network issue or rate limit)."
MSG_NO_RESULTS = "No results. Try a different query."
MSG_SEARCH_FAILED = "Search failed. Please try again later."


class ExplorerController:
    """Owns the session state and turns map events into state changes."""

    def __init__(
        self,
        session: SessionState,
        resolver: PlaceResolver,
        overrides: Optional[Mapping[str, int]] = None,
    ):
        self.session = session
        self.resolver = resolver
        self.overrides = dict(COUNTRY_TZ_OVERRIDE if overrides is None else overrides)
        self._throttle: Optional[FrameThrottle] = None

    def attach(
        self,
        loop: asyncio.AbstractEventLoop,
        frame_interval: float = DEFAULT_FRAME_INTERVAL,
    ) -> None:
        """Enable frame coalescing of pointer samples on *loop*."""
        self._throttle = FrameThrottle(loop, self.update_hover, frame_interval)

    def detach(self) -> None:
        """Drop any pointer sample still waiting for its frame."""
        if self._throttle is not None:
            self._throttle.cancel()

    def start(self) -> None:
        """Fill the hover panel from the map center."""
        view = self.session.view
        self.update_hover(view.center_lat, view.center_lon)

    # --- Hover ---

    def pointer_moved(self, lat: float, lon: float) -> None:
        """Pointer sample from the map surface (coalesced per frame)."""
        if self._throttle is None:
            self.update_hover(lat, lon)
        else:
            self._throttle.submit(lat, lon)

    def update_hover(self, lat: float, lon: float) -> None:
        self.session.update("hover", lat=lat, lon=lon, offset=offset_from_lon(lon))

    def tick(self) -> None:
        """Periodic clock refresh using the last known coordinates."""
        hover = self.session.hover
        if hover.known:
            self.update_hover(hover.lat, hover.lon)
        if self.session.click.known:
            self.session.touch("click")

    # --- Click ---

    def _resolved_offset(self, country_code: str, fallback: int) -> int:
        forced = override_for(country_code, self.overrides)
        return fallback if forced is None else forced

    def _is_stale(self, seq: int) -> bool:
        if seq != self.session.current_seq:
            logger.debug("Discarding stale lookup #%d (current #%d)", seq, self.session.current_seq)
            return True
        return False

    async def click(self, lat: float, lon: float) -> ClickState:
        """Handle a map click: show the band offset, then refine it."""
        seq = self.session.next_seq()
        offset = offset_from_lon(lon)
        self.session.update(
            "click",
            lat=lat,
            lon=lon,
            offset=offset,
            label=MSG_LOOKING_UP,
            phase=LookupPhase.LOCATING,
            seq=seq,
        )

        try:
            place = await self.resolver.reverse_geocode(lat, lon)
        except GeocodingError:
            if not self._is_stale(seq):
                self.session.update("click", label=MSG_LOOKUP_FAILED, phase=LookupPhase.FAILED)
            return self.session.click

        if not self._is_stale(seq):
            self.session.update(
                "click",
                label=place.label,
                offset=self._resolved_offset(place.country_code, offset),
                phase=LookupPhase.RESOLVED,
            )
        return self.session.click

    # --- Search ---

    async def search(self, query: str) -> Optional[ClickState]:
        """Find *query*, recenter on it and make it the clicked location.

        Returns the new click state, or None when nothing changed (empty
        query, search already running, no match, failure, superseded).
        """
        query = query.strip()
        if not query or self.session.search.busy:
            return None

        self.session.update("search", busy=True, query=query, message="")
        try:
            return await self._search(query)
        finally:
            self.session.update("search", busy=False)

    async def _search(self, query: str) -> Optional[ClickState]:
        # A click made while the request is in flight wins over its answer
        before = self.session.current_seq
        try:
            result = await self.resolver.search(query)
        except GeocodingError:
            self.session.update("search", message=MSG_SEARCH_FAILED)
            return None
        if result is None:
            self.session.update("search", message=MSG_NO_RESULTS)
            return None
        if self._is_stale(before):
            return None

        seq = self.session.next_seq()
        self.session.update("view", center_lat=result.lat, center_lon=result.lon)

        offset = offset_from_lon(result.lon)
        label = result.label
        try:
            # Only for the country code and a shorter label
            place = await self.resolver.reverse_geocode(result.lat, result.lon)
        except GeocodingError:
            pass
        else:
            label = place.label
            offset = self._resolved_offset(place.country_code, offset)

        if self._is_stale(seq):
            return None
        return self.session.update(
            "click",
            lat=result.lat,
            lon=result.lon,
            offset=offset,
            label=label,
            phase=LookupPhase.RESOLVED,
            seq=seq,
        )

    # --- View ---

    def toggle_bands(self) -> bool:
        show = not self.session.view.show_bands
        self.session.update("view", show_bands=show)
        return show
