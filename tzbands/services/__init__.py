"""External services - place lookup via Nominatim."""

from .geocoding import (
    GeocodingError,
    GeocodingHTTPError,
    GeocodingTransportError,
    NominatimClient,
    PlaceResolver,
    SearchResult,
)

__all__ = [
    "GeocodingError",
    "GeocodingHTTPError",
    "GeocodingTransportError",
    "NominatimClient",
    "PlaceResolver",
    "SearchResult",
]
