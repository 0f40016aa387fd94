"""
Interface port pour le dépôt des demandes d'adhésion.

Toutes les opérations sont des coroutines : l'adaptateur SQL exécute ses
requêtes dans un exécuteur avec un délai borné.
"""

from abc import ABC, abstractmethod
from typing import Optional

from memberflow.core.entities.member import (
    Member,
    MemberStatus,
    StatusHistoryEntry,
    UserSnapshot,
)


class IMemberRepository(ABC):
    """
    Interface de stockage des demandes d'adhésion.

    Les demandes supprimées logiquement (deleted_at renseigné) ne sont jamais
    retournées par les lectures.
    """

    @abstractmethod
    async def get(self, member_id: str) -> Optional[Member]:
        """Récupère une demande par son memberId."""
        ...

    @abstractmethod
    async def get_by_application_number(self, application_number: str) -> Optional[Member]:
        """Récupère une demande par son numéro de dossier (APP-xxx)."""
        ...

    @abstractmethod
    async def add(self, member: Member) -> Member:
        """
        Insère une nouvelle demande dans une seule transaction.

        Attribue member_id et application_number, écrit les snapshots et
        l'historique initial.

        Raises:
            DuplicateEmailError: Violation de l'index unique sur l'email
            DuplicatePrimaryDomainError: Violation de l'index unique sur le domaine
        """
        ...

    @abstractmethod
    async def update_status(
        self,
        member: Member,
        expected_status: MemberStatus,
        entry: StatusHistoryEntry,
    ) -> Member:
        """
        Écrit le nouveau statut si le statut stocké vaut toujours expected_status.

        L'entrée d'historique est ajoutée dans la même transaction.

        Raises:
            ConcurrentModificationError: Le statut a changé depuis la lecture
        """
        ...

    @abstractmethod
    async def save_profile(self, member: Member) -> Member:
        """Met à jour le profil, la catégorie et les snapshots sans toucher au statut."""
        ...

    @abstractmethod
    async def refresh_user_snapshots(self, snapshot: UserSnapshot) -> int:
        """Remplace les snapshots de l'utilisateur snapshot.id. Retourne le nombre modifié."""
        ...

    @abstractmethod
    async def search(
        self,
        query: Optional[str] = None,
        status: Optional[MemberStatus] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[Member], int]:
        """Recherche paginée par nom d'organisation ou numéro. Retourne (page, total)."""
        ...

    @abstractmethod
    async def list_active(self) -> list[Member]:
        """Liste les demandes au statut active."""
        ...

    @abstractmethod
    async def list_all(self) -> list[Member]:
        """Liste toutes les demandes non supprimées."""
        ...

    @abstractmethod
    async def soft_delete(self, member_id: str) -> bool:
        """Renseigne deleted_at. Retourne True si une demande a été retirée."""
        ...
