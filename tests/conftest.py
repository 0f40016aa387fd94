"""
Fixtures pytest partagees pour les tests memberflow.

Ce module contient les fixtures communes utilisees dans les tests:
- Fakes en memoire des ports (catalogues, annuaire, depot)
- Orchestrateur et services construits sur ces fakes
- Base SQLite temporaire alimentee avec les catalogues initiaux
- Settings de test avec chemins temporaires
"""

from pathlib import Path

import pytest

from memberflow.config import Settings
from memberflow.infrastructure.persistence.database import create_db_engine, init_db
from memberflow.infrastructure.persistence.executor import StoreExecutor
from memberflow.infrastructure.persistence.seed import seed_dropdown_values, seed_form_fields
from memberflow.services.directory import DirectoryService
from memberflow.services.field_validator import DynamicFieldValidator
from memberflow.services.identity_validator import IdentityUniquenessValidator
from memberflow.services.orchestrator import WorkflowOrchestrator
from tests.fixtures.applications import FIXED_NOW
from tests.fixtures.fakes import (
    FakeDropdownCatalog,
    FakeFieldSchemaCatalog,
    FakeIdentityStore,
    InMemoryMemberRepository,
)


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """
    Settings de test avec chemins temporaires.

    Le geocodage est desactive et les lectures ne sont tentees qu'une fois.
    """
    return Settings(
        database_url=f"sqlite:///{tmp_path}/test.db",
        store_timeout_seconds=5.0,
        lookup_max_attempts=1,
        lookup_max_wait_seconds=1,
        geocoding_enabled=False,
        cache_dir=tmp_path / "cache",
        log_file=tmp_path / "test.log",
        audit_log_file=tmp_path / "audit.jsonl",
    )


@pytest.fixture
def dropdown_catalog() -> FakeDropdownCatalog:
    return FakeDropdownCatalog()


@pytest.fixture
def schema_catalog() -> FakeFieldSchemaCatalog:
    return FakeFieldSchemaCatalog()


@pytest.fixture
def identity_store() -> FakeIdentityStore:
    return FakeIdentityStore()


@pytest.fixture
def member_repository() -> InMemoryMemberRepository:
    return InMemoryMemberRepository()


@pytest.fixture
def orchestrator(
    member_repository, schema_catalog, dropdown_catalog, identity_store
) -> WorkflowOrchestrator:
    """Orchestrateur sur fakes en memoire, sans geocodeur, horloge figee."""
    return WorkflowOrchestrator(
        member_repository=member_repository,
        field_schema_catalog=schema_catalog,
        field_validator=DynamicFieldValidator(dropdown_catalog),
        identity_validator=IdentityUniquenessValidator(identity_store),
        geocoder=None,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def directory(member_repository) -> DirectoryService:
    return DirectoryService(member_repository)


@pytest.fixture
def store_executor() -> StoreExecutor:
    """Executeur sans nouvelle tentative pour des tests deterministes."""
    return StoreExecutor(timeout_seconds=5.0, max_attempts=1, max_wait=1)


@pytest.fixture
def engine(tmp_path: Path):
    """Base SQLite temporaire avec tables creees et catalogues alimentes."""
    engine = create_db_engine(f"sqlite:///{tmp_path}/memberflow-test.db")
    init_db(engine)
    seed_dropdown_values(engine)
    seed_form_fields(engine)
    yield engine
    engine.dispose()
