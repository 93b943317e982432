"""Explorer configuration with clean, readable structure."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path

from ..core.cache import DEFAULT_CACHE_SIZE
from ..core.rate_limiter import DEFAULT_MIN_INTERVAL
from ..core.throttle import DEFAULT_FRAME_INTERVAL
from ..services.geocoding import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT, NOMINATIM_URL

logger = logging.getLogger(__name__)

# Project root
PROJECT_ROOT = Path(__file__).parent.parent.parent
CONFIG_PATH = PROJECT_ROOT / "config.json"


def _known(cls, d: dict) -> dict:
    """Keep only keys that are fields of dataclass *cls*."""
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in d.items() if k in names}


@dataclass
class MapConfig:
    """Terminal map surface settings."""
    width: int = 72
    height: int = 24
    center_lat: float = 22.0
    center_lon: float = 0.0
    show_bands: bool = True
    # Band rectangles stop short of the poles, like a web map
    lat_limit: float = 85.0


@dataclass
class GeocodingConfig:
    """Place resolver settings."""
    base_url: str = NOMINATIM_URL
    user_agent: str = DEFAULT_USER_AGENT
    accept_language: str = "en"
    min_interval: float = DEFAULT_MIN_INTERVAL  # seconds between requests
    timeout: float = DEFAULT_TIMEOUT
    cache_size: int = DEFAULT_CACHE_SIZE  # 0 = unbounded


@dataclass
class ClockConfig:
    """Refresh cadence."""
    tick_interval: float = 1.0
    frame_interval: float = DEFAULT_FRAME_INTERVAL


@dataclass
class ExplorerConfig:
    """Main configuration combining all sections."""
    map: MapConfig = field(default_factory=MapConfig)
    geocoding: GeocodingConfig = field(default_factory=GeocodingConfig)
    clock: ClockConfig = field(default_factory=ClockConfig)
    overrides: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "map": asdict(self.map),
            "geocoding": asdict(self.geocoding),
            "clock": asdict(self.clock),
            "overrides": dict(self.overrides),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "ExplorerConfig":
        overrides = d.get("overrides", {})
        if not isinstance(overrides, dict):
            logger.warning("Ignoring overrides: expected an object, got %s", type(overrides).__name__)
            overrides = {}
        return cls(
            map=MapConfig(**_known(MapConfig, d.get("map", {}))),
            geocoding=GeocodingConfig(**_known(GeocodingConfig, d.get("geocoding", {}))),
            clock=ClockConfig(**_known(ClockConfig, d.get("clock", {}))),
            overrides=overrides,
        )

    def save(self, path: Path = CONFIG_PATH):
        temp = path.with_suffix(".tmp")
        temp.write_text(json.dumps(self.to_dict(), indent=2))
        temp.rename(path)

    @classmethod
    def load(cls, path: Path = CONFIG_PATH) -> "ExplorerConfig":
        try:
            if path.exists():
                return cls.from_dict(json.loads(path.read_text()))
        except (json.JSONDecodeError, IOError, TypeError, AttributeError) as e:
            logger.warning("Could not load config from %s: %s", path, e)
        return cls()
