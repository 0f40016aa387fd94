"""
Pont asynchrone vers les depots SQL synchrones.

Les requetes SQLModel sont executees dans l'executeur par defaut de la boucle.
Les lectures ont un delai borne (asyncio.wait_for) et sont relancees avec
backoff exponentiel (tenacity).

Les ecritures ne sont jamais relancees ni abandonnees en cours de route :
annuler l'attente ne stoppe pas le thread, qui pourrait encore valider la
transaction. Leur duree est bornee par le pilote (voir create_db_engine),
qui annule la transaction avant de lever une erreur operationnelle.

Un delai depasse ou une erreur operationnelle du pilote devient une
ExternalLookupError (recuperable).
"""

import asyncio
from functools import partial
from typing import Any, Callable, Optional, TypeVar

from loguru import logger
from sqlalchemy.exc import OperationalError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random_exponential,
)

from memberflow.core.errors import ExternalLookupError

T = TypeVar("T")


class StoreExecutor:
    """
    Execute des fonctions bloquantes avec delai et tentatives bornes.

    Example:
        executor = StoreExecutor(timeout_seconds=5.0, max_attempts=3)
        entries = await executor.read("dropdown.lookup", self._lookup_sync, category)
    """

    def __init__(
        self,
        timeout_seconds: float = 5.0,
        max_attempts: int = 3,
        max_wait: int = 2,
    ) -> None:
        """
        Args:
            timeout_seconds: Delai maximum d'un appel
            max_attempts: Nombre maximum de tentatives pour une lecture
            max_wait: Delai maximum entre deux tentatives en secondes
        """
        self._timeout = timeout_seconds
        self._max_attempts = max_attempts
        self._max_wait = max_wait

    async def read(self, operation: str, func: Callable[..., T], *args: Any) -> T:
        """Execute une lecture, relancee sur ExternalLookupError."""

        @retry(
            retry=retry_if_exception_type(ExternalLookupError),
            wait=wait_random_exponential(multiplier=0.2, max=self._max_wait),
            stop=stop_after_attempt(self._max_attempts),
            reraise=True,
        )
        async def _attempt() -> T:
            return await self._run(operation, func, *args, timeout=self._timeout)

        return await _attempt()

    async def write(self, operation: str, func: Callable[..., T], *args: Any) -> T:
        """Execute une ecriture (une seule tentative, attendue jusqu'a son issue)."""
        return await self._run(operation, func, *args, timeout=None)

    async def _run(
        self,
        operation: str,
        func: Callable[..., T],
        *args: Any,
        timeout: Optional[float],
    ) -> T:
        loop = asyncio.get_running_loop()
        try:
            return await asyncio.wait_for(
                loop.run_in_executor(None, partial(func, *args)),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Delai depasse pour {operation} ({timeout}s)")
            raise ExternalLookupError(operation, "timeout") from None
        except OperationalError as e:
            logger.warning(f"Stockage indisponible pour {operation}: {e.orig}")
            raise ExternalLookupError(operation, str(e.orig)) from e
