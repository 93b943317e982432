"""Country-level offset overrides.

The longitude bands are a rough approximation. When reverse geocoding tells
us which country a point is in, a few countries with a single national
timezone far from their band get their real offset instead.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional

from .bands import MAX_OFFSET, MIN_OFFSET

logger = logging.getLogger(__name__)

COUNTRY_TZ_OVERRIDE: dict[str, int] = {
    "kr": 9,  # South Korea
    "kp": 9,  # North Korea
    "jp": 9,  # Japan
    "cn": 8,  # China (single national timezone)
}


def build_override_table(extra: Optional[Mapping[str, object]] = None) -> dict[str, int]:
    """Merge user-supplied overrides over the built-in table.

    Keys are lowercased. Entries whose value is not an integer offset in
    [MIN_OFFSET, MAX_OFFSET] are dropped with a warning.
    """
    table = dict(COUNTRY_TZ_OVERRIDE)
    for code, offset in (extra or {}).items():
        key = str(code).strip().lower()
        if isinstance(offset, bool) or not isinstance(offset, int):
            logger.warning("Ignoring override for %r: offset %r is not an integer", code, offset)
            continue
        if not MIN_OFFSET <= offset <= MAX_OFFSET:
            logger.warning("Ignoring override for %r: offset %d out of range", code, offset)
            continue
        if len(key) != 2:
            logger.warning("Ignoring override for %r: not a 2-letter country code", code)
            continue
        table[key] = offset
    return table


def override_for(country_code: str, table: Optional[Mapping[str, int]] = None) -> Optional[int]:
    """Fixed offset for *country_code*, or None when the band value stands."""
    if not country_code:
        return None
    table = COUNTRY_TZ_OVERRIDE if table is None else table
    return table.get(country_code.lower())
