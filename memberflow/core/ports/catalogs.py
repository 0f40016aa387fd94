"""
Interfaces ports pour les référentiels consultés par la validation.

Les trois référentiels sont des feuilles en lecture seule du point de vue du
moteur. Chaque appel relit la source : aucune donnée n'est mise en cache
d'une passe de validation à l'autre.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from memberflow.core.entities.catalog import DropdownEntry, FieldDefinition, IdentityUser


class IDropdownCatalog(ABC):
    """Catalogue des valeurs de listes déroulantes."""

    @abstractmethod
    async def lookup(self, category: str) -> list[DropdownEntry]:
        """
        Retourne les entrées actives d'une catégorie.

        Une liste vide signifie que la catégorie n'a aucune entrée active.

        Raises:
            ExternalLookupError: Stockage indisponible ou délai dépassé
        """
        ...


class IFieldSchemaCatalog(ABC):
    """Catalogue des définitions de champs par type d'adhésion."""

    @abstractmethod
    async def list_fields(
        self,
        membership_type: str,
        sections: Optional[Sequence[str]] = None,
    ) -> list[FieldDefinition]:
        """Retourne les champs applicables, filtrés par section si demandé."""
        ...


class IIdentityStore(ABC):
    """Annuaire des utilisateurs (lecture seule pour le moteur)."""

    @abstractmethod
    async def find_active_by_email(
        self, email: str, exclude_id: Optional[str] = None
    ) -> Optional[IdentityUser]:
        """Utilisateur non supprimé avec cet email (insensible à la casse)."""
        ...

    @abstractmethod
    async def find_active_primary_by_domain(
        self, domain: str, exclude_id: Optional[str] = None
    ) -> Optional[IdentityUser]:
        """Utilisateur Primary non supprimé dont l'email porte ce domaine."""
        ...
