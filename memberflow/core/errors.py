"""
Taxonomie des erreurs du domaine.

Toutes les erreurs heritent de MemberflowError. Les erreurs de validation de
champs sont agregees (FieldValidationError), les conflits d'identite et les
transitions invalides sont levees des la premiere violation.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class FieldErrorKind(str, Enum):
    """Nature d'une erreur de champ (journalisee sans la valeur saisie)."""

    REQUIRED = "required"
    INVALID_FORMAT = "invalid_format"
    INVALID_TYPE = "invalid_type"
    INVALID_CHOICE = "invalid_choice"
    CATALOG_UNAVAILABLE = "catalog_unavailable"
    BUSINESS_RULE = "business_rule"


@dataclass(frozen=True)
class FieldError:
    """
    Erreur attachee a un champ du formulaire.

    Attributs :
        kind : Nature de l'erreur
        message : Message destine au demandeur
        category : Categorie de catalogue concernee (dropdown uniquement)
    """

    kind: FieldErrorKind
    message: str
    category: Optional[str] = None


class MemberflowError(Exception):
    """Erreur de base du moteur de workflow."""

    retryable: bool = False


class FieldValidationError(MemberflowError):
    """
    Ensemble d'erreurs de champs (ValidationErrorSet).

    Recuperable : l'appelant corrige les champs et renvoie la demande.
    Rien n'est persiste quand cette erreur est levee.
    """

    def __init__(self, errors: dict[str, FieldError]) -> None:
        self.errors = dict(errors)
        super().__init__(f"{len(self.errors)} invalid field(s): {', '.join(sorted(self.errors))}")

    @property
    def messages(self) -> dict[str, str]:
        """Retourne le mapping champ -> message."""
        return {key: error.message for key, error in self.errors.items()}


class ConflictKind(str, Enum):
    """Nature d'un conflit d'identite."""

    DUPLICATE_EMAIL = "DuplicateEmail"
    DUPLICATE_PRIMARY_DOMAIN = "DuplicatePrimaryDomain"


class ConflictError(MemberflowError):
    """Conflit d'identite : terminal pour la soumission en cours."""

    def __init__(self, kind: ConflictKind, detail: str) -> None:
        self.kind = kind
        self.detail = detail
        super().__init__(detail)


class DuplicateEmailError(ConflictError):
    """Un utilisateur actif utilise deja cet email."""

    def __init__(self, email: str, masked_email: str) -> None:
        self.email = email
        self.masked_email = masked_email
        super().__init__(
            ConflictKind.DUPLICATE_EMAIL,
            "Registration already exists: this email address is already registered "
            f"(registered email: {masked_email}). Please contact the membership team.",
        )


class DuplicatePrimaryDomainError(ConflictError):
    """Un utilisateur Primary actif utilise deja ce domaine email."""

    def __init__(self, domain: str, masked_email: str) -> None:
        self.domain = domain
        self.masked_email = masked_email
        super().__init__(
            ConflictKind.DUPLICATE_PRIMARY_DOMAIN,
            "Registration already exists: someone from your organization has already "
            f"registered using the domain @{domain} (registered email: {masked_email}). "
            "Please contact the membership team.",
        )


class InvalidTransitionError(MemberflowError):
    """Combinaison (statut, action, etape) non definie par le workflow."""

    def __init__(self, from_status: str, action: str, stage: Optional[str]) -> None:
        self.from_status = from_status
        self.action = action
        self.stage = stage
        super().__init__(
            f"Transition not allowed: status={from_status!r} action={action!r} stage={stage!r}"
        )


class NotFoundError(MemberflowError):
    """Aucune demande active pour cet identifiant."""

    def __init__(self, member_id: str) -> None:
        self.member_id = member_id
        super().__init__(f"Member {member_id} not found")


class ConcurrentModificationError(MemberflowError):
    """
    Ecriture conditionnelle rejetee : le statut a change depuis la lecture.

    L'appelant doit relire la demande puis rejouer l'action.
    """

    retryable = True

    def __init__(self, member_id: str, expected_status: str) -> None:
        self.member_id = member_id
        self.expected_status = expected_status
        super().__init__(
            f"Member {member_id} is no longer in status {expected_status!r}; re-read and retry"
        )


class ExternalLookupError(MemberflowError):
    """Echec ou expiration d'un appel au stockage (catalogue, annuaire, depot)."""

    retryable = True

    def __init__(self, operation: str, reason: str = "") -> None:
        self.operation = operation
        self.reason = reason
        message = f"External lookup failed: {operation}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class ProfileLockedError(MemberflowError):
    """Modification de profil interdite dans l'etat courant."""

    def __init__(self, member_id: str, reason: str) -> None:
        self.member_id = member_id
        self.reason = reason
        super().__init__(f"Profile of member {member_id} cannot be changed: {reason}")
