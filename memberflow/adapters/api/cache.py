"""
Cache persistant des resultats de geocodage.

Le cache utilise diskcache pour la persistence sur disque : une adresse deja
resolue n'est pas redemandee au service public entre deux redemarrages.

TTL:
- Adresse resolue (FOUND_TTL): 30 jours
- Adresse introuvable (MISS_TTL): 24 heures, pour retenter apres correction du service
"""

import asyncio
from functools import partial
from typing import Optional

from diskcache import Cache

from memberflow.core.value_objects.geo import Coordinates


class GeocodingCache:
    """
    Cache asynchrone des coordonnees par requete d'adresse normalisee.

    Utilise run_in_executor pour ne pas bloquer la boucle sur les acces disque.

    Example:
        cache = GeocodingCache(cache_dir=".cache/geocoding")
        await cache.store("geocode:dubai, united arab emirates", coordinates)
        hit, coordinates = await cache.lookup("geocode:dubai, united arab emirates")
    """

    FOUND_TTL = 30 * 24 * 60 * 60  # 30 jours
    MISS_TTL = 24 * 60 * 60  # 24 heures

    def __init__(self, cache_dir: str = ".cache/geocoding") -> None:
        self._cache = Cache(str(cache_dir))

    async def lookup(self, key: str) -> tuple[bool, Optional[Coordinates]]:
        """
        Recherche une adresse dans le cache.

        Returns:
            (True, coordonnees ou None si introuvable) si en cache, (False, None) sinon
        """
        loop = asyncio.get_running_loop()
        value = await loop.run_in_executor(None, self._cache.get, key)
        if value is None:
            return False, None
        if not value:
            return True, None
        return True, Coordinates(latitude=value[0], longitude=value[1])

    async def store(self, key: str, coordinates: Optional[Coordinates]) -> None:
        """Enregistre un resultat (None = adresse introuvable, TTL court)."""
        if coordinates is None:
            value, ttl = (), self.MISS_TTL
        else:
            value, ttl = (coordinates.latitude, coordinates.longitude), self.FOUND_TTL
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, partial(self._cache.set, key, value, expire=ttl))

    async def clear(self) -> None:
        """Supprime toutes les entrees du cache."""
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._cache.clear)

    def close(self) -> None:
        """Ferme la connexion au cache (a appeler a la fin)."""
        self._cache.close()
