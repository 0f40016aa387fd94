"""
Implementations en memoire des ports pour les tests des services.

Chaque fake enregistre ses appels pour permettre les assertions sur le
nombre de requetes (un appel par categorie, relecture a chaque passe, ...).
"""

from copy import deepcopy
from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional, Sequence

from memberflow.core.entities.catalog import DropdownEntry, FieldDefinition, IdentityUser
from memberflow.core.entities.member import (
    Member,
    MemberStatus,
    StatusHistoryEntry,
    UserSnapshot,
    UserType,
)
from memberflow.core.errors import ConcurrentModificationError, ExternalLookupError, NotFoundError
from memberflow.core.ports.catalogs import IDropdownCatalog, IFieldSchemaCatalog, IIdentityStore
from memberflow.core.ports.repositories import IMemberRepository
from memberflow.core.value_objects.field_types import parse_field_type
from memberflow.utils.constants import CATEGORY_COUNTRY, DROPDOWN_SEED, FORM_FIELD_SEED
from memberflow.utils.helpers import email_domain, normalize_email

TEST_COUNTRIES = ("France", "India", "United Arab Emirates", "United States", "Brazil")


class FakeDropdownCatalog(IDropdownCatalog):
    """Catalogue en memoire alimente avec les valeurs initiales et quelques pays."""

    def __init__(self, entries: Optional[Sequence[DropdownEntry]] = None) -> None:
        if entries is None:
            entries = [DropdownEntry(c, code, label) for c, code, label in DROPDOWN_SEED]
            entries += [DropdownEntry(CATEGORY_COUNTRY, name, name) for name in TEST_COUNTRIES]
        self.entries = list(entries)
        self.lookups: list[str] = []
        self.unavailable: set[str] = set()

    async def lookup(self, category: str) -> list[DropdownEntry]:
        self.lookups.append(category)
        if category in self.unavailable:
            raise ExternalLookupError(f"dropdown.lookup:{category}", "timeout")
        return [e for e in self.entries if e.category == category and e.is_active]


def seed_schema() -> list[FieldDefinition]:
    """Definitions du formulaire initial converties en FieldDefinition."""
    return [
        FieldDefinition(
            key=key,
            field_type=parse_field_type(raw_type, category, multiple),
            label=label,
            required=required,
            section=section,
            order=order,
        )
        for order, (key, raw_type, section, category, multiple, required, label)
        in enumerate(FORM_FIELD_SEED)
    ]


class FakeFieldSchemaCatalog(IFieldSchemaCatalog):
    """Catalogue des champs en memoire (formulaire initial par defaut)."""

    def __init__(self, definitions: Optional[Sequence[FieldDefinition]] = None) -> None:
        self.definitions = list(definitions) if definitions is not None else seed_schema()
        self.calls: list[tuple[str, Optional[tuple[str, ...]]]] = []

    async def list_fields(
        self, membership_type: str, sections: Optional[Sequence[str]] = None
    ) -> list[FieldDefinition]:
        self.calls.append((membership_type, tuple(sections) if sections is not None else None))
        return [
            d for d in self.definitions
            if (sections is None or d.section in sections)
            and (not d.membership_types or membership_type in d.membership_types)
        ]


class FakeIdentityStore(IIdentityStore):
    """Annuaire en memoire."""

    def __init__(self, users: Optional[Sequence[IdentityUser]] = None) -> None:
        self.users = list(users or [])
        self.email_lookups: list[str] = []
        self.domain_lookups: list[str] = []

    async def find_active_by_email(
        self, email: str, exclude_id: Optional[str] = None
    ) -> Optional[IdentityUser]:
        self.email_lookups.append(email)
        for user in self.users:
            if normalize_email(user.email) == normalize_email(email) and user.id != exclude_id:
                return user
        return None

    async def find_active_primary_by_domain(
        self, domain: str, exclude_id: Optional[str] = None
    ) -> Optional[IdentityUser]:
        self.domain_lookups.append(domain)
        for user in self.users:
            if (
                user.user_type == UserType.PRIMARY
                and email_domain(user.email) == domain.lower()
                and user.id != exclude_id
            ):
                return user
        return None


class InMemoryMemberRepository(IMemberRepository):
    """
    Depot en memoire avec la meme semantique d'ecriture conditionnelle
    que le depot SQL.
    """

    def __init__(self) -> None:
        self.members: dict[str, Member] = {}
        self._next_pk = 1
        self._next_user = 1
        self.status_writes = 0

    def _assign_user_ids(self, snapshots: list[UserSnapshot]) -> list[UserSnapshot]:
        assigned = []
        for snapshot in snapshots:
            if not snapshot.id:
                snapshot = replace(snapshot, id=str(self._next_user))
                self._next_user += 1
            assigned.append(snapshot)
        return assigned

    def _active(self, member_id: str) -> Optional[Member]:
        member = self.members.get(member_id)
        if member is None or member.deleted_at is not None:
            return None
        return member

    async def get(self, member_id: str) -> Optional[Member]:
        member = self._active(member_id)
        return deepcopy(member) if member else None

    async def get_by_application_number(self, application_number: str) -> Optional[Member]:
        for member in self.members.values():
            if member.application_number == application_number and member.deleted_at is None:
                return deepcopy(member)
        return None

    async def add(self, member: Member) -> Member:
        pk = self._next_pk
        self._next_pk += 1
        stored = replace(
            deepcopy(member),
            member_id=f"MEMBER-{pk:03d}",
            application_number=f"APP-{pk:03d}",
            user_snapshots=self._assign_user_ids(list(member.user_snapshots)),
        )
        self.members[stored.member_id] = stored
        return deepcopy(stored)

    async def update_status(
        self, member: Member, expected_status: MemberStatus, entry: StatusHistoryEntry
    ) -> Member:
        current = self._active(member.member_id)
        if current is None or current.status != expected_status:
            raise ConcurrentModificationError(member.member_id, MemberStatus(expected_status).value)
        stored = replace(
            current,
            status=member.status,
            status_history=[*current.status_history, entry],
            updated_at=member.updated_at,
        )
        self.members[stored.member_id] = stored
        self.status_writes += 1
        return deepcopy(stored)

    async def save_profile(self, member: Member) -> Member:
        current = self._active(member.member_id)
        if current is None:
            raise NotFoundError(member.member_id)
        stored = replace(
            deepcopy(member),
            status=current.status,
            status_history=current.status_history,
            user_snapshots=self._assign_user_ids(list(member.user_snapshots)),
        )
        self.members[stored.member_id] = stored
        return deepcopy(stored)

    async def refresh_user_snapshots(self, snapshot: UserSnapshot) -> int:
        count = 0
        for member in self.members.values():
            for index, existing in enumerate(member.user_snapshots):
                if existing.id == snapshot.id:
                    member.user_snapshots[index] = replace(
                        snapshot, correspondance_user=existing.correspondance_user
                    )
                    count += 1
        return count

    async def search(
        self,
        query: Optional[str] = None,
        status: Optional[MemberStatus] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[Member], int]:
        matches = []
        for member in self.members.values():
            if member.deleted_at is not None:
                continue
            if status is not None and member.status != status:
                continue
            if query and query.lower() not in (
                f"{member.organisation_info.company_name} {member.member_id} "
                f"{member.application_number}"
            ).lower():
                continue
            matches.append(member)
        return [deepcopy(m) for m in matches[offset:offset + limit]], len(matches)

    async def list_active(self) -> list[Member]:
        return [deepcopy(m) for m in self.members.values()
                if m.deleted_at is None and m.status == MemberStatus.ACTIVE]

    async def list_all(self) -> list[Member]:
        return [deepcopy(m) for m in self.members.values() if m.deleted_at is None]

    async def soft_delete(self, member_id: str) -> bool:
        member = self._active(member_id)
        if member is None:
            return False
        member.deleted_at = datetime.now(timezone.utc)
        return True
