from .base import GeocodingAdapter, GeocodingError
from .nominatim import NominatimGeocodingAdapter

__all__ = ["GeocodingAdapter", "GeocodingError", "NominatimGeocodingAdapter"]
