"""
Client de geocodage Nominatim (OpenStreetMap).

Implemente l'interface IGeocoder : une adresse en texte libre est resolue en
coordonnees. Utilise le cache persistant (cache-first) et le mecanisme de
retry pour respecter la limitation de debit du service public.

Usage:
    cache = GeocodingCache()
    geocoder = NominatimGeocoder(endpoint=url, user_agent="memberflow/1.0", cache=cache)
    coordinates = await geocoder.resolve(address)
    await geocoder.close()
"""

from typing import Optional

import httpx
from loguru import logger

from memberflow.adapters.api.cache import GeocodingCache
from memberflow.adapters.api.retry import request_with_retry
from memberflow.core.entities.member import Address
from memberflow.core.ports.geocoder import IGeocoder
from memberflow.core.value_objects.geo import Coordinates


def build_query(address: Address) -> str:
    """Construit la requete texte (ligne 1, ville, etat, code postal, pays)."""
    parts = [address.line1, address.city, address.state, address.zip, address.country]
    return ", ".join(p.strip() for p in parts if p and p.strip())


class NominatimGeocoder(IGeocoder):
    """
    Geocodeur adosse a l'API de recherche Nominatim.

    Les erreurs HTTP sont propagees : l'appelant traite le geocodage comme
    un meilleur effort.

    Example:
        geocoder = NominatimGeocoder(
            endpoint="https://nominatim.openstreetmap.org/search",
            user_agent="memberflow/1.0",
            cache=GeocodingCache(".cache/geocoding"),
        )
        coordinates = await geocoder.resolve(Address(city="Dubai", country="UAE"))
    """

    def __init__(
        self,
        endpoint: str,
        user_agent: str,
        cache: Optional[GeocodingCache] = None,
        timeout: float = 10.0,
        max_attempts: int = 3,
    ) -> None:
        """
        Args:
            endpoint: URL de l'API de recherche
            user_agent: User-Agent exige par la politique d'usage de Nominatim
            cache: Cache persistant des resultats (optionnel)
            timeout: Delai maximum d'une requete en secondes
            max_attempts: Tentatives sur 429 / 503
        """
        self._endpoint = endpoint
        self._user_agent = user_agent
        self._cache = cache
        self._timeout = timeout
        self._max_attempts = max_attempts
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """Retourne le client HTTP, le cree si necessaire (lazy init)."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                headers={"User-Agent": self._user_agent, "Accept": "application/json"},
                timeout=self._timeout,
            )
        return self._client

    async def resolve(self, address: Address) -> Optional[Coordinates]:
        """
        Resout une adresse en coordonnees.

        Returns:
            Les coordonnees, ou None si l'adresse est vide ou introuvable
        """
        query = build_query(address)
        if not query:
            return None

        cache_key = f"geocode:{query.lower()}"
        if self._cache is not None:
            hit, cached = await self._cache.lookup(cache_key)
            if hit:
                return cached

        response = await request_with_retry(
            self._get_client(),
            "GET",
            self._endpoint,
            max_attempts=self._max_attempts,
            params={"q": query, "format": "jsonv2", "limit": 1},
        )
        coordinates = self._parse(response.json())
        if coordinates is None:
            logger.debug(f"Adresse introuvable: {query}")

        if self._cache is not None:
            await self._cache.store(cache_key, coordinates)
        return coordinates

    @staticmethod
    def _parse(data) -> Optional[Coordinates]:
        if not isinstance(data, list) or not data:
            return None
        first = data[0]
        try:
            coordinates = Coordinates(
                latitude=float(first["lat"]), longitude=float(first["lon"])
            )
        except (KeyError, TypeError, ValueError):
            return None
        return coordinates if coordinates.is_set else None

    async def close(self) -> None:
        """Ferme le client HTTP."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
