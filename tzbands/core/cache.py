"""In-memory cache of reverse-geocoding results."""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

# 3 decimals is roughly 111 m at the equator
KEY_PRECISION = 3
DEFAULT_CACHE_SIZE = 1024


@dataclass(frozen=True)
class Place:
    """A resolved place: display label and lowercase ISO country code."""

    label: str
    country_code: str = ""


def cache_key(lat: float, lon: float) -> str:
    """Key for a coordinate, rounded the same way for every caller."""
    return f"{lat:.{KEY_PRECISION}f},{lon:.{KEY_PRECISION}f}"


class PlaceCache:
    """LRU cache of :class:`Place` keyed by rounded coordinates.

    ``max_entries=0`` keeps every entry forever.
    """

    def __init__(self, max_entries: int = DEFAULT_CACHE_SIZE):
        self.max_entries = max(0, max_entries)
        self._entries: OrderedDict[str, Place] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def get(self, lat: float, lon: float) -> Optional[Place]:
        key = cache_key(lat, lon)
        place = self._entries.get(key)
        if place is not None:
            self._entries.move_to_end(key)
            logger.debug("Place cache hit for %s", key)
        return place

    def put(self, lat: float, lon: float, place: Place) -> None:
        key = cache_key(lat, lon)
        self._entries[key] = place
        self._entries.move_to_end(key)
        if self.max_entries and len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Evicted %s from place cache", evicted)

    def clear(self) -> None:
        self._entries.clear()
