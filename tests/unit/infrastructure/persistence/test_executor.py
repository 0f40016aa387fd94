"""
Tests pour StoreExecutor.

Verifie :
- Le delai borne des lectures (asyncio.wait_for) traduit en ExternalLookupError
- Les ecritures attendues jusqu'a leur issue, meme au-dela du delai
- La traduction des OperationalError du pilote
- Les lectures relancees, les ecritures jamais
"""

import time

import pytest
from sqlalchemy.exc import OperationalError

from memberflow.core.errors import ExternalLookupError
from memberflow.infrastructure.persistence.executor import StoreExecutor


def _flaky(failures: int):
    """Fonction qui echoue `failures` fois avant de reussir."""
    calls = []

    def func(value):
        calls.append(value)
        if len(calls) <= failures:
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))
        return value * 2

    return func, calls


class TestStoreExecutor:
    @pytest.mark.asyncio
    async def test_returns_result(self):
        executor = StoreExecutor(timeout_seconds=1.0, max_attempts=1)
        assert await executor.read("op", lambda a, b: a + b, 2, 3) == 5

    @pytest.mark.asyncio
    async def test_timeout_becomes_external_lookup_error(self):
        executor = StoreExecutor(timeout_seconds=0.05, max_attempts=1)

        with pytest.raises(ExternalLookupError) as exc_info:
            await executor.read("members.get", time.sleep, 0.5)

        assert exc_info.value.operation == "members.get"
        assert exc_info.value.reason == "timeout"
        assert exc_info.value.retryable

    @pytest.mark.asyncio
    async def test_slow_write_is_awaited_until_committed(self):
        committed = []

        def slow_commit(row):
            time.sleep(0.3)
            committed.append(row)
            return row

        executor = StoreExecutor(timeout_seconds=0.05, max_attempts=1)

        assert await executor.write("members.add", slow_commit, "row") == "row"
        assert committed == ["row"]

    @pytest.mark.asyncio
    async def test_operational_error_is_translated(self):
        func, _ = _flaky(failures=5)
        executor = StoreExecutor(timeout_seconds=1.0, max_attempts=1)

        with pytest.raises(ExternalLookupError, match="database is locked"):
            await executor.read("dropdown.lookup", func, 1)

    @pytest.mark.asyncio
    async def test_reads_are_retried(self):
        func, calls = _flaky(failures=2)
        executor = StoreExecutor(timeout_seconds=1.0, max_attempts=3, max_wait=0)

        assert await executor.read("members.get", func, 21) == 42
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_writes_are_not_retried(self):
        func, calls = _flaky(failures=1)
        executor = StoreExecutor(timeout_seconds=1.0, max_attempts=3, max_wait=0)

        with pytest.raises(ExternalLookupError):
            await executor.write("members.update_status", func, 1)
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_other_errors_propagate_unchanged(self):
        def boom():
            raise KeyError("x")

        executor = StoreExecutor(timeout_seconds=1.0, max_attempts=3, max_wait=0)
        with pytest.raises(KeyError):
            await executor.read("op", boom)
