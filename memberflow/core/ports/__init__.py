"""
Ports (interfaces abstraites) définissant les contrats pour les adaptateurs.

Ports repository :
- IMemberRepository : Stockage des demandes d'adhésion

Ports référentiels :
- IDropdownCatalog : Valeurs des listes déroulantes
- IFieldSchemaCatalog : Définitions des champs dynamiques
- IIdentityStore : Annuaire des utilisateurs

Ports services externes :
- IGeocoder : Géocodage des adresses
"""

from memberflow.core.ports.repositories import IMemberRepository
from memberflow.core.ports.catalogs import (
    IDropdownCatalog,
    IFieldSchemaCatalog,
    IIdentityStore,
)
from memberflow.core.ports.geocoder import IGeocoder

__all__ = [
    # Repositories
    "IMemberRepository",
    # Référentiels
    "IDropdownCatalog",
    "IFieldSchemaCatalog",
    "IIdentityStore",
    # Services externes
    "IGeocoder",
]
