"""
Modeles SQLModel pour la base de donnees memberflow.

Ces modeles representent les tables de la base de donnees.
Ils sont distincts des entites de domaine (dataclass dans core/entities/)
selon l'architecture hexagonale.

Tables:
- members: Demandes d'adhesion (profil, adresse, consentements)
- member_user_snapshots: Copies des utilisateurs associes a une demande
- member_status_history: Historique des transitions de statut
- users: Annuaire des utilisateurs (index uniques partiels)
- dropdown_values: Catalogue des listes deroulantes
- form_fields: Catalogue des champs du formulaire dynamique

Les champs JSON (*_json) stockent des listes ou objets serialises.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone

from sqlalchemy import DateTime, UniqueConstraint, text
from sqlmodel import Field, Index, SQLModel

# Condition des index uniques partiels : seules les lignes non supprimees comptent
_ACTIVE_ROWS = text("deleted_at IS NULL")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite relit les dates sans fuseau : elles sont stockees en UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class MemberModel(SQLModel, table=True):
    """
    Modele representant une demande d'adhesion.

    member_id et application_number sont derives de l'id apres insertion.
    """

    __tablename__ = "members"

    id: int | None = Field(default=None, primary_key=True)
    member_id: str | None = Field(default=None, unique=True, index=True)
    application_number: str | None = Field(default=None, unique=True, index=True)
    category: str = Field(index=True)
    status: str = Field(index=True)
    featured_member: bool = Field(default=False, index=True)

    company_name: str = Field(default="", index=True)
    type_of_organization: str | None = None
    industries_json: str | None = None  # JSON: ["logistics", "maritime"]
    website_url: str | None = None
    contact_number: str | None = None
    member_logo_url: str | None = None
    member_licence_url: str | None = None
    social_links_json: str | None = None  # JSON: {"linkedin": "...", ...}

    has_address: bool = Field(default=False)
    address_line1: str | None = None
    address_line2: str | None = None
    address_city: str | None = None
    address_state: str | None = None
    address_country: str | None = Field(default=None, index=True)
    address_country_code: str | None = None
    address_zip: str | None = None
    latitude: float | None = None
    longitude: float | None = None

    article_of_association_consent: bool = Field(default=False)
    article_of_association_criteria_consent: bool = Field(default=False)
    authorized_person_declaration: bool = Field(default=False)

    created_at: datetime | None = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: datetime | None = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    deleted_at: datetime | None = Field(default=None, index=True, sa_type=DateTime(timezone=True))

    @property
    def industries(self) -> list[str]:
        """Retourne les secteurs deserialises."""
        if self.industries_json:
            return json.loads(self.industries_json)
        return []


class MemberUserSnapshotModel(SQLModel, table=True):
    """Copie d'un utilisateur associe a une demande (ordre conserve par position)."""

    __tablename__ = "member_user_snapshots"

    id: int | None = Field(default=None, primary_key=True)
    member_pk: int = Field(foreign_key="members.id", index=True)
    position: int = Field(default=0)
    user_id: str | None = Field(default=None, index=True)
    email: str
    user_type: str
    first_name: str | None = None
    last_name: str | None = None
    correspondance_user: bool = Field(default=False)
    marketing_focal_point: bool = Field(default=False)
    investor_focal_point: bool = Field(default=False)
    designation: str | None = None
    contact_number: str | None = None
    newsletter_subscription: bool = Field(default=False)
    last_synced_at: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))


class MemberStatusHistoryModel(SQLModel, table=True):
    """Entree d'audit d'une transition de statut."""

    __tablename__ = "member_status_history"

    id: int | None = Field(default=None, primary_key=True)
    member_pk: int = Field(foreign_key="members.id", index=True)
    actor_id: str
    timestamp: datetime = Field(sa_type=DateTime(timezone=True))
    from_status: str
    to_status: str
    action: str
    stage: str | None = None
    comment: str | None = None


class UserModel(SQLModel, table=True):
    """
    Utilisateur de l'annuaire.

    email_normalized et primary_domain portent les index uniques partiels
    qui garantissent l'unicite meme en cas d'ecritures concurrentes.
    primary_domain n'est renseigne que pour les utilisateurs Primary.
    """

    __tablename__ = "users"
    __table_args__ = (
        Index(
            "ux_users_email_normalized_active",
            "email_normalized",
            unique=True,
            sqlite_where=_ACTIVE_ROWS,
            postgresql_where=_ACTIVE_ROWS,
        ),
        Index(
            "ux_users_primary_domain_active",
            "primary_domain",
            unique=True,
            sqlite_where=_ACTIVE_ROWS,
            postgresql_where=_ACTIVE_ROWS,
        ),
    )

    id: int | None = Field(default=None, primary_key=True)
    email: str
    email_normalized: str
    user_type: str
    primary_domain: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    member_id: str | None = Field(default=None, index=True)
    created_at: datetime | None = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    deleted_at: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))


class DropdownValueModel(SQLModel, table=True):
    """Valeur du catalogue des listes deroulantes."""

    __tablename__ = "dropdown_values"
    __table_args__ = (UniqueConstraint("category", "code", name="uq_dropdown_category_code"),)

    id: int | None = Field(default=None, primary_key=True)
    category: str = Field(index=True)
    code: str
    label: str
    is_active: bool = Field(default=True)
    sort_order: int = Field(default=0)


class FormFieldModel(SQLModel, table=True):
    """
    Definition d'un champ du formulaire dynamique.

    field_type est le type brut ("text", "dropdown", "button", ...) converti
    en variante FieldType a la lecture.
    """

    __tablename__ = "form_fields"

    id: int | None = Field(default=None, primary_key=True)
    field_key: str = Field(unique=True, index=True)
    field_type: str
    section: str = Field(index=True)
    label: str = ""
    dropdown_category: str | None = None
    multiple: bool = Field(default=False)
    required: bool = Field(default=True)
    membership_types_json: str | None = None  # JSON: ["votingMember", ...]
    sort_order: int = Field(default=0)
    is_active: bool = Field(default=True)

    @property
    def membership_types(self) -> list[str]:
        """Retourne les types d'adhesion deserialises (vide = tous)."""
        if self.membership_types_json:
            return json.loads(self.membership_types_json)
        return []
