"""
Implementations SQLModel des ports de persistance.

Exports:
- SQLModelMemberRepository: Depot des demandes d'adhesion
- SQLModelIdentityStore: Annuaire des utilisateurs
- SQLModelDropdownCatalog: Catalogue des listes deroulantes
- SQLModelFieldSchemaCatalog: Catalogue des champs dynamiques
"""

from .dropdown_catalog import SQLModelDropdownCatalog
from .field_schema_catalog import SQLModelFieldSchemaCatalog
from .identity_store import SQLModelIdentityStore
from .member_repository import SQLModelMemberRepository

__all__ = [
    "SQLModelMemberRepository",
    "SQLModelIdentityStore",
    "SQLModelDropdownCatalog",
    "SQLModelFieldSchemaCatalog",
]
