"""
Clients des services HTTP externes.

- NominatimGeocoder: geocodage des adresses (OpenStreetMap)

Infrastructure partagee:
- GeocodingCache: Cache persistant (adresse resolue 30j, introuvable 24h)
- RateLimitError: Exception pour les reponses 429 / 503
- request_with_retry: Requete relancee avec backoff exponentiel

Les clients implementent les ports definis dans core/ports/.
"""

from memberflow.adapters.api.cache import GeocodingCache
from memberflow.adapters.api.nominatim_client import NominatimGeocoder
from memberflow.adapters.api.retry import RateLimitError, request_with_retry, with_retry

__all__ = [
    "GeocodingCache",
    "NominatimGeocoder",
    "RateLimitError",
    "request_with_retry",
    "with_retry",
]
