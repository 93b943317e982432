"""Longitude-band timezone model.

Timezones are approximated as 15-degree longitude bands centered on
multiples of 15 degrees. Band edges sit at +/-7.5 degrees from each center,
and a longitude lying exactly on an edge belongs to the eastern (more
positive) band. Offsets are clamped to the real-world range [-12, +14].

Nothing here knows about DST, politics or calendars: a local time is the
UTC instant shifted by ``offset`` whole hours.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterator, Optional, Union

import numpy as np

MIN_OFFSET = -12
MAX_OFFSET = 14
BAND_WIDTH = 15.0
HALF_BAND = BAND_WIDTH / 2

WORLD_WEST = -180.0
WORLD_EAST = 180.0

Instant = Union[datetime, float, int]


@dataclass(frozen=True)
class Band:
    """A longitude interval associated with one UTC offset."""

    offset: int
    west: float
    east: float


def normalize_lon(lon: float) -> float:
    """Wrap any longitude into [-180, 180)."""
    # Python's % already returns a non-negative result for a positive modulus
    x = (lon + 180.0) % 360.0 - 180.0
    # Float rounding can land exactly on +180 for tiny negative inputs
    return WORLD_WEST if x >= WORLD_EAST else x


def clamp_offset(offset: int) -> int:
    return max(MIN_OFFSET, min(MAX_OFFSET, offset))


def offset_from_lon(lon: float) -> int:
    """Map a longitude (any real value) to its UTC offset band.

    Total and pure: always returns an int in [MIN_OFFSET, MAX_OFFSET].

    Examples:
        >>> offset_from_lon(7.4), offset_from_lon(7.6)
        (0, 1)
        >>> offset_from_lon(180)
        -12
    """
    x = normalize_lon(lon)
    return clamp_offset(math.floor((x + HALF_BAND) / BAND_WIDTH))


def offsets_from_lons(lons: np.ndarray) -> np.ndarray:
    """Vectorized :func:`offset_from_lon` over an array of longitudes."""
    x = np.mod(np.asarray(lons, dtype=float) + 180.0, 360.0) - 180.0
    x = np.where(x >= WORLD_EAST, WORLD_WEST, x)
    offsets = np.floor((x + HALF_BAND) / BAND_WIDTH).astype(int)
    return np.clip(offsets, MIN_OFFSET, MAX_OFFSET)


def lon_range_for_offset(offset: int) -> tuple[float, float]:
    """Return the (west, east) longitude interval drawn for *offset*.

    Both ends are clamped to the world bounds [-180, 180].
    """
    west = offset * BAND_WIDTH - HALF_BAND
    east = offset * BAND_WIDTH + HALF_BAND
    return max(WORLD_WEST, west), min(WORLD_EAST, east)


def band_for_offset(offset: int) -> Band:
    west, east = lon_range_for_offset(offset)
    return Band(offset=offset, west=west, east=east)


def all_bands() -> Iterator[Band]:
    """Yield every band from MIN_OFFSET to MAX_OFFSET, west to east."""
    for offset in range(MIN_OFFSET, MAX_OFFSET + 1):
        yield band_for_offset(offset)


# --- Formatting ---

# datetime's own range; instants outside it are clamped to the nearest end
MIN_INSTANT = datetime(1, 1, 1, tzinfo=timezone.utc)
MAX_INSTANT = datetime(9999, 12, 31, 23, 59, 59, tzinfo=timezone.utc)
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MIN_EPOCH_SECONDS = (MIN_INSTANT - _EPOCH) // timedelta(seconds=1)
_MAX_EPOCH_SECONDS = (MAX_INSTANT - _EPOCH) // timedelta(seconds=1)


def _as_utc(instant: Optional[Instant]) -> datetime:
    if instant is None:
        return datetime.now(timezone.utc)
    if isinstance(instant, datetime):
        if instant.tzinfo is None:
            return instant.replace(tzinfo=timezone.utc)
        try:
            return instant.astimezone(timezone.utc)
        except OverflowError:
            # Only possible within a day of either end of the range
            return MIN_INSTANT if instant.year == MIN_INSTANT.year else MAX_INSTANT
    if math.isnan(instant):
        raise ValueError("instant is not a number")
    seconds = min(max(instant, _MIN_EPOCH_SECONDS), _MAX_EPOCH_SECONDS)
    return _EPOCH + timedelta(seconds=seconds)


def _shift(moment: datetime, offset: int) -> datetime:
    try:
        return moment + timedelta(hours=offset)
    except OverflowError:
        return MAX_INSTANT if offset > 0 else MIN_INSTANT


def format_local_time(offset: int, instant: Optional[Instant] = None) -> str:
    """Format *instant* shifted by *offset* hours as ``YYYY-MM-DD HH:MM:SS``.

    Args:
        offset: Whole hours relative to UTC.
        instant: Aware datetime, naive datetime (taken as UTC) or epoch
            seconds. Defaults to now.

    Returns:
        The shifted wall-clock string. Day, month and year rollovers fall out
        of the datetime arithmetic. Results are clamped to years 1-9999 and
        the year is always four digits.

    Raises:
        ValueError: If *instant* is a NaN epoch value.
    """
    shifted = _shift(_as_utc(instant), offset)
    return shifted.replace(tzinfo=None).isoformat(sep=" ", timespec="seconds")


def format_utc(instant: Optional[Instant] = None) -> str:
    return format_local_time(0, instant)


def format_offset(offset: int) -> str:
    """Human label for an offset: ``UTC+9``, ``UTC−5``, ``UTC±0``."""
    if offset == 0:
        return "UTC±0"
    sign = "+" if offset > 0 else "−"
    return f"UTC{sign}{abs(offset)}"


def format_latlon(lat: float, lon: float) -> str:
    return f"{lat:.4f}, {lon:.4f}"
