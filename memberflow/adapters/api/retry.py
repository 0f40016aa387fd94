"""
Mecanisme de retry avec backoff exponentiel pour les services HTTP externes.

Le geocodeur public (Nominatim) limite le debit : les reponses 429 et 503
sont relancees avec un delai croissant et du jitter aleatoire, en respectant
l'en-tete Retry-After quand il est present.

Usage:
    response = await request_with_retry(client, "GET", url, max_attempts=3)
"""

from typing import Optional

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random_exponential,
)

# Statuts HTTP signalant une surcharge temporaire du service
RETRYABLE_STATUS_CODES = frozenset({429, 503})


class RateLimitError(Exception):
    """
    Le service a refuse la requete pour cause de surcharge (429 ou 503).

    Attributes:
        status_code: Code HTTP recu
        retry_after: Secondes a attendre (en-tete Retry-After), ou None
    """

    def __init__(self, status_code: int, retry_after: Optional[int] = None) -> None:
        self.status_code = status_code
        self.retry_after = retry_after
        super().__init__(f"HTTP {status_code}, retry after: {retry_after}s")


def _parse_retry_after(value: Optional[str]) -> Optional[int]:
    if value and value.strip().isdigit():
        return int(value.strip())
    return None


def with_retry(max_attempts: int = 3, max_wait: int = 30):
    """
    Decorateur pour relancer sur RateLimitError avec backoff exponentiel.

    Args:
        max_attempts: Nombre maximum de tentatives (defaut: 3)
        max_wait: Delai maximum entre les tentatives en secondes (defaut: 30)

    Returns:
        Decorateur a appliquer sur une fonction async
    """
    return retry(
        retry=retry_if_exception_type(RateLimitError),
        wait=wait_random_exponential(multiplier=1, min=1, max=max_wait),
        stop=stop_after_attempt(max_attempts),
        reraise=True,
    )


async def request_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    max_attempts: int = 3,
    **kwargs,
) -> httpx.Response:
    """
    Execute une requete HTTP relancee sur 429 / 503.

    Les autres erreurs HTTP sont propagees immediatement.

    Args:
        client: Client httpx async a utiliser
        method: Methode HTTP
        url: URL a appeler
        max_attempts: Nombre maximum de tentatives
        **kwargs: Arguments passes a client.request()

    Raises:
        RateLimitError: Service toujours surcharge apres epuisement des tentatives
        httpx.HTTPStatusError: Autres erreurs HTTP
    """

    @with_retry(max_attempts=max_attempts)
    async def _do_request() -> httpx.Response:
        response = await client.request(method, url, **kwargs)
        if response.status_code in RETRYABLE_STATUS_CODES:
            raise RateLimitError(
                response.status_code, _parse_retry_after(response.headers.get("Retry-After"))
            )
        response.raise_for_status()
        return response

    return await _do_request()
