"""
Container d'injection de dependances via dependency-injector.

Fournit une gestion centralisee des dependances pour la CLI et pour les
couches de transport qui embarquent le moteur. Toutes les dependances sont
explicites : aucun service n'accede a un etat global.
"""

from dependency_injector import containers, providers

from .adapters.api.cache import GeocodingCache
from .adapters.api.nominatim_client import NominatimGeocoder
from .config import Settings
from .infrastructure.persistence.database import create_db_engine, init_db
from .infrastructure.persistence.executor import StoreExecutor
from .infrastructure.persistence.repositories import (
    SQLModelDropdownCatalog,
    SQLModelFieldSchemaCatalog,
    SQLModelIdentityStore,
    SQLModelMemberRepository,
)
from .services.directory import DirectoryService
from .services.field_validator import DynamicFieldValidator
from .services.identity_validator import IdentityUniquenessValidator
from .services.orchestrator import WorkflowOrchestrator


def _geocoding_switch(settings: Settings) -> str:
    return "enabled" if settings.geocoding_enabled else "disabled"


class Container(containers.DeclarativeContainer):
    """Container DI de l'application.

    Utilisation :
        container = Container()
        container.database.init()  # Cree les tables une fois
        orchestrator = container.orchestrator()
        directory = container.directory_service()

    En test, les providers se surchargent :
        container.config.override(providers.Object(Settings(database_url=url)))
    """

    # Configuration - singleton charge une seule fois
    config = providers.Singleton(Settings)

    # Database - engine partage, tables creees une seule fois
    engine = providers.Singleton(
        create_db_engine,
        database_url=config.provided.database_url,
        timeout_seconds=config.provided.store_timeout_seconds,
    )
    database = providers.Resource(init_db, engine=engine)

    # Pont asynchrone vers le stockage (delai borne + tentatives)
    store_executor = providers.Singleton(
        StoreExecutor,
        timeout_seconds=config.provided.store_timeout_seconds,
        max_attempts=config.provided.lookup_max_attempts,
        max_wait=config.provided.lookup_max_wait_seconds,
    )

    # Referentiels et depot - Factory, une session par appel dans l'adaptateur
    dropdown_catalog = providers.Factory(
        SQLModelDropdownCatalog, engine=engine, executor=store_executor
    )
    field_schema_catalog = providers.Factory(
        SQLModelFieldSchemaCatalog, engine=engine, executor=store_executor
    )
    identity_store = providers.Factory(
        SQLModelIdentityStore, engine=engine, executor=store_executor
    )
    member_repository = providers.Factory(
        SQLModelMemberRepository, engine=engine, executor=store_executor
    )

    # Geocodage - Singleton pour partager le client HTTP et le cache disque
    geocoding_cache = providers.Singleton(
        GeocodingCache,
        cache_dir=config.provided.cache_dir,
    )
    geocoder = providers.Selector(
        providers.Callable(_geocoding_switch, config),
        enabled=providers.Singleton(
            NominatimGeocoder,
            endpoint=config.provided.geocoding_endpoint,
            user_agent=config.provided.geocoding_user_agent,
            cache=geocoding_cache,
            timeout=config.provided.geocoding_timeout_seconds,
        ),
        disabled=providers.Object(None),
    )

    # Validateurs (sans etat)
    field_validator = providers.Factory(
        DynamicFieldValidator, dropdown_catalog=dropdown_catalog
    )
    identity_validator = providers.Factory(
        IdentityUniquenessValidator, identity_store=identity_store
    )

    # Services
    orchestrator = providers.Factory(
        WorkflowOrchestrator,
        member_repository=member_repository,
        field_schema_catalog=field_schema_catalog,
        field_validator=field_validator,
        identity_validator=identity_validator,
        geocoder=geocoder,
    )
    directory_service = providers.Factory(
        DirectoryService,
        member_repository=member_repository,
    )
