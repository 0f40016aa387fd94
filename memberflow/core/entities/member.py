"""
Entités de la demande d'adhésion (Member).

Une demande d'adhésion regroupe le profil de l'organisation, les utilisateurs
associés (copiés sous forme de snapshots), les consentements juridiques et
l'historique des transitions de statut.

Les clés de champs (camelCase) sont celles du catalogue des champs dynamiques :
elles servent de vocabulaire commun entre la validation et les mises à jour
partielles de profil.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class MemberStatus(str, Enum):
    """Statut d'une demande d'adhésion."""

    DRAFT = "draft"
    PENDING_FORM_SUBMISSION = "pendingFormSubmission"
    PENDING_COMMITTEE_APPROVAL = "pendingCommitteeApproval"
    PENDING_BOARD_APPROVAL = "pendingBoardApproval"
    ACTIVE = "active"
    REJECTED = "rejected"


class MemberCategory(str, Enum):
    """Catégorie d'adhésion."""

    VOTING = "votingMember"
    ASSOCIATE = "associateMember"
    STRATEGIC = "strategicMembers"
    PARTNER_AND_OBSERVER = "partnerAndObserver"


class WorkflowAction(str, Enum):
    """Action appliquée à une demande par un acteur."""

    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"
    RESUBMIT = "resubmit"


class ApprovalStage(str, Enum):
    """Niveau d'approbation auquel s'applique une action."""

    COMMITTEE = "committee"
    BOARD = "board"


# Valeurs historiques acceptées en entrée et relues depuis la base
_LEGACY_USER_TYPES = {
    "secondry": "Secondary",
    "nonmember": "Non Member",
    "non-member": "Non Member",
}


class UserType(str, Enum):
    """Type d'utilisateur rattaché à une organisation."""

    PRIMARY = "Primary"
    SECONDARY = "Secondary"
    NON_MEMBER = "Non Member"
    INTERNAL = "Internal"

    @classmethod
    def parse(cls, raw: "UserType | str") -> "UserType":
        """
        Convertit une valeur brute en UserType.

        Accepte la casse libre et l'orthographe historique "Secondry",
        qui est ramenée à SECONDARY.

        Raises:
            ValueError: Valeur inconnue
        """
        if isinstance(raw, cls):
            return raw
        text = str(raw or "").strip()
        legacy = _LEGACY_USER_TYPES.get(text.lower())
        if legacy is not None:
            return cls(legacy)
        for member in cls:
            if member.value.lower() == text.lower():
                return member
        raise ValueError(f"Unknown user type: {raw!r}")


@dataclass
class Address:
    """
    Adresse de l'organisation.

    Les coordonnées sont renseignées par le géocodeur (meilleur effort).
    """

    line1: Optional[str] = None
    line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    country_code: Optional[str] = None
    zip: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @property
    def has_coordinates(self) -> bool:
        """Vrai si des coordonnées non nulles sont présentes."""
        return bool(self.latitude) and bool(self.longitude)

    @property
    def is_geocodable(self) -> bool:
        """Vrai si l'adresse porte au moins une ville ou un pays."""
        return bool((self.city or "").strip() or (self.country or "").strip())


@dataclass
class SocialLinks:
    """Liens vers les réseaux sociaux de l'organisation."""

    linkedin: Optional[str] = None
    twitter: Optional[str] = None
    facebook: Optional[str] = None
    instagram: Optional[str] = None
    youtube: Optional[str] = None


# Clé de champ -> attribut de OrganisationInfo
ORGANISATION_FIELD_KEYS = {
    "companyName": "company_name",
    "typeOfTheOrganization": "type_of_organization",
    "industries": "industries",
    "websiteUrl": "website_url",
    "organizationContactNumber": "contact_number",
    "logoDocumentUpload": "member_logo_url",
    "licenseDocumentUpload": "member_licence_url",
}

# Clé de champ -> attribut de Address
ADDRESS_FIELD_KEYS = {
    "addressLine1": "line1",
    "addressLine2": "line2",
    "addressCity": "city",
    "addressState": "state",
    "addressCountry": "country",
    "addressZip": "zip",
}

# Clé de champ -> attribut de SocialLinks
SOCIAL_FIELD_KEYS = {
    "linkedInUrl": "linkedin",
    "twitterUrl": "twitter",
    "facebookUrl": "facebook",
    "instagramUrl": "instagram",
    "youtubeUrl": "youtube",
}

# Clé de champ -> attribut de MemberConsent
CONSENT_FIELD_KEYS = {
    "articleOfAssociationConsent": "article_of_association_consent",
    "articleOfAssociationCriteriaConsent": "article_of_association_criteria_consent",
    "authorizedPersonDeclaration": "authorized_person_declaration",
}


@dataclass
class OrganisationInfo:
    """
    Profil de l'organisation candidate.

    Attributs :
        company_name : Raison sociale
        type_of_organization : Code du catalogue "organizationType"
        industries : Codes du catalogue "industries"
        website_url : Site web (normalisé en https://)
        contact_number : Téléphone de l'organisation
        member_logo_url : Référence du logo (stockage externe)
        member_licence_url : Référence de la licence (stockage externe)
        address : Adresse, éventuellement géocodée
        social_links : Réseaux sociaux
    """

    company_name: str = ""
    type_of_organization: Optional[str] = None
    industries: list[str] = field(default_factory=list)
    website_url: Optional[str] = None
    contact_number: Optional[str] = None
    member_logo_url: Optional[str] = None
    member_licence_url: Optional[str] = None
    address: Optional[Address] = None
    social_links: SocialLinks = field(default_factory=SocialLinks)

    def to_field_values(self) -> dict[str, Any]:
        """Aplatit le profil en mapping clé de champ -> valeur."""
        values: dict[str, Any] = {
            key: getattr(self, attr) for key, attr in ORGANISATION_FIELD_KEYS.items()
        }
        address = self.address or Address()
        values.update({key: getattr(address, attr) for key, attr in ADDRESS_FIELD_KEYS.items()})
        values.update(
            {key: getattr(self.social_links, attr) for key, attr in SOCIAL_FIELD_KEYS.items()}
        )
        return values

    def with_field_values(self, values: dict[str, Any]) -> "OrganisationInfo":
        """
        Retourne une copie du profil avec les champs fournis fusionnés.

        Les clés inconnues sont ignorées ; les coordonnées sont effacées
        quand un champ d'adresse change, pour déclencher un nouveau géocodage.
        """
        org_changes = {
            attr: values[key] for key, attr in ORGANISATION_FIELD_KEYS.items() if key in values
        }
        address_changes = {
            attr: values[key] for key, attr in ADDRESS_FIELD_KEYS.items() if key in values
        }
        social_changes = {
            attr: values[key] for key, attr in SOCIAL_FIELD_KEYS.items() if key in values
        }

        updated = replace(self, **org_changes)
        if "industries" in org_changes:
            updated.industries = list(org_changes["industries"] or [])
        if address_changes:
            base = self.address or Address()
            updated.address = replace(base, latitude=None, longitude=None, **address_changes)
        if social_changes:
            updated.social_links = replace(self.social_links, **social_changes)
        return updated


@dataclass
class MemberConsent:
    """Consentements juridiques capturés à la soumission (immuables ensuite)."""

    article_of_association_consent: bool = False
    article_of_association_criteria_consent: bool = False
    authorized_person_declaration: bool = False

    def to_field_values(self) -> dict[str, bool]:
        """Aplatit les consentements en mapping clé de champ -> valeur."""
        return {key: getattr(self, attr) for key, attr in CONSENT_FIELD_KEYS.items()}


@dataclass
class MemberUser:
    """
    Utilisateur fourni en entrée d'une demande.

    id est renseigné pour un utilisateur existant (exclu des contrôles
    d'unicité contre lui-même), None pour un nouvel utilisateur.
    """

    email: str
    user_type: UserType = UserType.SECONDARY
    id: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    correspondance_user: bool = False
    marketing_focal_point: bool = False
    investor_focal_point: bool = False
    designation: Optional[str] = None
    contact_number: Optional[str] = None
    newsletter_subscription: bool = False

    def __post_init__(self) -> None:
        self.user_type = UserType.parse(self.user_type)


@dataclass
class UserSnapshot:
    """
    Copie dénormalisée d'un utilisateur au moment de son association.

    Les snapshots ne sont pas synchronisés automatiquement avec l'annuaire :
    ils sont rafraîchis explicitement par un processus externe.
    """

    email: str
    user_type: UserType
    id: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    correspondance_user: bool = False
    marketing_focal_point: bool = False
    investor_focal_point: bool = False
    designation: Optional[str] = None
    contact_number: Optional[str] = None
    newsletter_subscription: bool = False
    last_synced_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        self.user_type = UserType.parse(self.user_type)

    @classmethod
    def from_member_user(
        cls, user: MemberUser, synced_at: Optional[datetime] = None
    ) -> "UserSnapshot":
        """Construit un snapshot depuis un utilisateur fourni en entrée."""
        values = {f.name: getattr(user, f.name) for f in fields(MemberUser)}
        return cls(**values, last_synced_at=synced_at)

    def to_member_user(self) -> MemberUser:
        """Reconstruit l'entrée utilisateur correspondante (pour revalidation)."""
        values = {f.name: getattr(self, f.name) for f in fields(MemberUser)}
        return MemberUser(**values)


@dataclass(frozen=True)
class StatusHistoryEntry:
    """
    Entrée d'audit pour une transition appliquée.

    Attributs :
        actor_id : Identifiant de l'acteur
        timestamp : Date de la transition (UTC)
        from_status : Statut avant la transition
        to_status : Statut après la transition
        action : Action appliquée
        stage : Niveau d'approbation (déduit du statut si non fourni)
        comment : Commentaire (note de revue pour un rejet)
    """

    actor_id: str
    timestamp: datetime
    from_status: MemberStatus
    to_status: MemberStatus
    action: WorkflowAction
    stage: Optional[ApprovalStage] = None
    comment: Optional[str] = None


# Statuts dans lesquels le profil reste modifiable sans dérogation
PRE_APPROVAL_STATUSES = frozenset({
    MemberStatus.DRAFT,
    MemberStatus.PENDING_FORM_SUBMISSION,
    MemberStatus.PENDING_COMMITTEE_APPROVAL,
    MemberStatus.PENDING_BOARD_APPROVAL,
    MemberStatus.REJECTED,
})


@dataclass
class Member:
    """
    Demande d'adhésion (Application Record).

    member_id et application_number sont attribués par le dépôt à la création.
    Le statut n'est modifié que par la machine à états.
    """

    category: MemberCategory
    organisation_info: OrganisationInfo
    status: MemberStatus = MemberStatus.PENDING_FORM_SUBMISSION
    member_id: Optional[str] = None
    application_number: Optional[str] = None
    featured_member: bool = False
    user_snapshots: list[UserSnapshot] = field(default_factory=list)
    member_consent: MemberConsent = field(default_factory=MemberConsent)
    status_history: list[StatusHistoryEntry] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        """Vrai si la demande a été approuvée par le conseil."""
        return self.status == MemberStatus.ACTIVE

    @property
    def is_pre_approval(self) -> bool:
        """Vrai tant que la demande n'est pas approuvée."""
        return self.status in PRE_APPROVAL_STATUSES

    @property
    def correspondance_user(self) -> Optional[UserSnapshot]:
        """Retourne l'utilisateur de correspondance, s'il existe."""
        for snapshot in self.user_snapshots:
            if snapshot.correspondance_user:
                return snapshot
        return None

    def field_values(self) -> dict[str, Any]:
        """Mapping complet clé de champ -> valeur (profil et consentements)."""
        values = self.organisation_info.to_field_values()
        values.update(self.member_consent.to_field_values())
        return values
