"""Reverse geocoding and place search via a Nominatim-compatible API."""

from __future__ import annotations

import asyncio
import functools
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

import requests

from ..core.cache import Place, cache_key

if TYPE_CHECKING:
    from ..core.state import SessionState

logger = logging.getLogger(__name__)

NOMINATIM_URL = "https://nominatim.openstreetmap.org"
DEFAULT_USER_AGENT = "tzbands/0.1 (world timezone explorer)"
DEFAULT_TIMEOUT = 10.0
REVERSE_ZOOM = 5

# Address fields tried in order for the locality part of the label
LOCALITY_FIELDS = ("city", "town", "village", "state", "county")
UNKNOWN_COUNTRY = "Unknown country"


class GeocodingError(Exception):
    """A lookup failed; ``str(err)`` is a human-readable label."""


class GeocodingHTTPError(GeocodingError):
    """The endpoint answered with a non-success status."""

    def __init__(self, message: str, status: int):
        super().__init__(message)
        self.status = status


class GeocodingTransportError(GeocodingError):
    """The request never produced a usable response."""


@dataclass(frozen=True)
class SearchResult:
    """Best match for a free-text query."""

    lat: float
    lon: float
    label: str


def place_from_response(data: dict) -> Place:
    """Build a :class:`Place` from a ``/reverse`` JSON body.

    Label is ``"{locality}, {country}"`` when a locality is known, else just
    the country.
    """
    address = data.get("address") or {}
    country = address.get("country") or UNKNOWN_COUNTRY
    country_code = (address.get("country_code") or "").lower()
    locality = next((address[k] for k in LOCALITY_FIELDS if address.get(k)), "")
    label = f"{locality}, {country}" if locality else country
    return Place(label=label, country_code=country_code)


def search_result_from_response(results: Any) -> Optional[SearchResult]:
    """First element of a ``/search`` JSON array, or None when empty."""
    if not results:
        return None
    first = results[0]
    try:
        return SearchResult(
            lat=float(first["lat"]),
            lon=float(first["lon"]),
            label=first.get("display_name", ""),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise GeocodingTransportError(f"Search returned a malformed result: {e}") from e


class NominatimClient:
    """Blocking HTTP client for the ``/reverse`` and ``/search`` endpoints."""

    def __init__(
        self,
        base_url: str = NOMINATIM_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        accept_language: str = "en",
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.accept_language = accept_language
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Accept": "application/json",
            "User-Agent": user_agent,
        })

    def _get(self, path: str, params: dict, what: str) -> Any:
        url = f"{self.base_url}/{path}"
        logger.debug("GET %s %s", url, params)
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise GeocodingTransportError(f"{what} failed ({e.__class__.__name__})") from e

        if not response.ok:
            raise GeocodingHTTPError(f"{what} failed ({response.status_code})", response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise GeocodingTransportError(f"{what} returned invalid JSON") from e

    def reverse(self, lat: float, lon: float) -> Place:
        """
        Resolve coordinates to a place label and country code.

        Raises:
            GeocodingHTTPError: On non-success status
            GeocodingTransportError: On network errors or a bad body
        """
        data = self._get("reverse", {
            "format": "jsonv2",
            "lat": str(lat),
            "lon": str(lon),
            "zoom": str(REVERSE_ZOOM),
            "addressdetails": "1",
            "accept-language": self.accept_language,
        }, "Reverse geocode")
        if not isinstance(data, dict):
            raise GeocodingTransportError("Reverse geocode returned an unexpected body")
        return place_from_response(data)

    def search(self, query: str) -> Optional[SearchResult]:
        """Best match for *query*, or None when nothing matches."""
        results = self._get("search", {
            "format": "jsonv2",
            "q": query,
            "limit": "1",
            "accept-language": self.accept_language,
        }, "Search")
        if results and not isinstance(results, list):
            raise GeocodingTransportError("Search returned an unexpected body")
        return search_result_from_response(results)


class PlaceResolver:
    """Cached, rate-limited async front for :class:`NominatimClient`.

    Cache and rate limiter live on the session, so every lookup in a session
    (reverse geocode and search alike) shares one limiter. Blocking HTTP
    calls run in the loop's default executor.
    """

    def __init__(self, client: NominatimClient, session: SessionState):
        self.client = client
        self.session = session
        self.network_calls = 0
        self._inflight: dict[str, asyncio.Future] = {}

    async def _call(self, func, *args):
        await self.session.limiter.acquire()
        self.network_calls += 1
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(func, *args))

    async def reverse_geocode(self, lat: float, lon: float) -> Place:
        """Place for (lat, lon), served from the session cache when possible.

        Concurrent lookups of the same rounded coordinate share one request.
        Failures are not cached.
        """
        cached = self.session.cache.get(lat, lon)
        if cached is not None:
            return cached

        key = cache_key(lat, lon)
        pending = self._inflight.get(key)
        if pending is not None:
            return await asyncio.shield(pending)

        future = asyncio.get_running_loop().create_future()
        self._inflight[key] = future
        try:
            place = await self._call(self.client.reverse, lat, lon)
        except Exception as e:
            logger.info("Reverse geocode of %s failed: %s", key, e)
            future.set_exception(e)
            # Mark retrieved so an unshared failure does not warn on GC
            future.exception()
            raise
        else:
            self.session.cache.put(lat, lon, place)
            future.set_result(place)
            return place
        finally:
            self._inflight.pop(key, None)
            if not future.done():
                # Owner was cancelled; release anyone sharing the request
                future.cancel()

    async def search(self, query: str) -> Optional[SearchResult]:
        result = await self._call(self.client.search, query)
        if result is None:
            logger.info("Search for %r returned no results", query)
        return result
