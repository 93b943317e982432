"""Shared test fixtures."""

import asyncio
from datetime import datetime, timezone
from typing import Optional

import pytest

from tzbands.core.cache import Place, PlaceCache
from tzbands.core.rate_limiter import RateLimiter
from tzbands.core.state import SessionState
from tzbands.services.geocoding import GeocodingHTTPError, SearchResult


class FakeClock:
    """Monotonic clock that only advances when something sleeps on it."""

    def __init__(self, start: float = 100.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeClient:
    """Stands in for NominatimClient; records the clock at each call."""

    def __init__(self, clock: Optional[FakeClock] = None):
        self.clock = clock
        self.places: dict[tuple[float, float], Place] = {}
        self.search_results: dict[str, Optional[SearchResult]] = {}
        self.fail_reverse = False
        self.fail_search = False
        self.reverse_calls: list[tuple[float, float]] = []
        self.search_calls: list[str] = []
        self.call_times: list[float] = []

    def _record(self) -> None:
        if self.clock is not None:
            self.call_times.append(self.clock())

    def reverse(self, lat: float, lon: float) -> Place:
        self._record()
        self.reverse_calls.append((lat, lon))
        if self.fail_reverse:
            raise GeocodingHTTPError("Reverse geocode failed (503)", 503)
        return self.places.get((lat, lon), Place("Somewhere, Nowhere", ""))

    def search(self, query: str) -> Optional[SearchResult]:
        self._record()
        self.search_calls.append(query)
        if self.fail_search:
            raise GeocodingHTTPError("Search failed (500)", 500)
        return self.search_results.get(query)


class FakeResolver:
    """Async resolver whose answers are scripted per test.

    ``gates`` and ``search_gates`` (asyncio.Event values) hold a reverse
    lookup or a search until released, to interleave overlapping requests.
    """

    def __init__(self):
        self.places: dict[tuple[float, float], object] = {}
        self.search_results: dict[str, object] = {}
        self.gates: dict[tuple[float, float], asyncio.Event] = {}
        self.search_gates: dict[str, asyncio.Event] = {}
        self.reverse_calls: list[tuple[float, float]] = []
        self.search_calls: list[str] = []

    async def reverse_geocode(self, lat, lon):
        self.reverse_calls.append((lat, lon))
        gate = self.gates.get((lat, lon))
        if gate is not None:
            await gate.wait()
        answer = self.places.get((lat, lon), Place("Open Ocean", ""))
        if isinstance(answer, Exception):
            raise answer
        return answer

    async def search(self, query):
        self.search_calls.append(query)
        gate = self.search_gates.get(query)
        if gate is not None:
            await gate.wait()
        answer = self.search_results.get(query)
        if isinstance(answer, Exception):
            raise answer
        return answer


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def session(fake_clock):
    """Session with a fake-clock rate limiter."""
    limiter = RateLimiter(1.2, clock=fake_clock, sleep=fake_clock.sleep)
    return SessionState(cache=PlaceCache(16), limiter=limiter)


@pytest.fixture
def fake_client(fake_clock):
    return FakeClient(fake_clock)


@pytest.fixture
def fake_resolver():
    return FakeResolver()


@pytest.fixture
def new_year_utc():
    return datetime(2024, 1, 1, 0, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def mock_reverse_response():
    """Mock Nominatim /reverse response for Seoul."""
    return {
        "place_id": 1,
        "lat": "37.5665",
        "lon": "126.978",
        "display_name": "Seoul, South Korea",
        "address": {
            "city": "Seoul",
            "country": "South Korea",
            "country_code": "KR",
        },
    }


@pytest.fixture
def mock_reverse_response_rural():
    """Mock /reverse response with no city, only a state."""
    return {
        "address": {
            "state": "Xinjiang",
            "country": "China",
            "country_code": "cn",
        },
    }


@pytest.fixture
def mock_search_response():
    """Mock Nominatim /search response."""
    return [
        {
            "lat": "35.6768601",
            "lon": "139.7638947",
            "display_name": "Tokyo, Japan",
        }
    ]
