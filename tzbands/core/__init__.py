"""Core model - timezone bands, overrides, session state, scheduling.

ExplorerController lives in .controller and is not re-exported here: it
depends on services.geocoding, which itself imports from this package.
"""

from .bands import (
    MAX_OFFSET,
    MIN_OFFSET,
    Band,
    all_bands,
    band_for_offset,
    format_latlon,
    format_local_time,
    format_offset,
    format_utc,
    lon_range_for_offset,
    offset_from_lon,
    offsets_from_lons,
)
from .overrides import COUNTRY_TZ_OVERRIDE, build_override_table, override_for
from .cache import Place, PlaceCache, cache_key
from .rate_limiter import RateLimiter
from .throttle import FrameThrottle
from .scheduler import Scheduler
from .state import ClickState, HoverState, LookupPhase, SearchState, SessionState, ViewState

__all__ = [
    # Bands
    "MIN_OFFSET",
    "MAX_OFFSET",
    "Band",
    "all_bands",
    "band_for_offset",
    "lon_range_for_offset",
    "offset_from_lon",
    "offsets_from_lons",
    # Formatting
    "format_latlon",
    "format_local_time",
    "format_offset",
    "format_utc",
    # Overrides
    "COUNTRY_TZ_OVERRIDE",
    "build_override_table",
    "override_for",
    # Cache
    "Place",
    "PlaceCache",
    "cache_key",
    # Timing
    "RateLimiter",
    "FrameThrottle",
    "Scheduler",
    # State
    "ClickState",
    "HoverState",
    "LookupPhase",
    "SearchState",
    "SessionState",
    "ViewState",
]
