"""
Lecture des fichiers JSON de demande passes a la CLI.

Format attendu (cles camelCase du formulaire) :

    {
      "category": "votingMember",
      "organisationInfo": {"companyName": "Acme", "addressCountry": "France", ...},
      "memberUsers": [{"email": "ceo@acme.io", "userType": "Primary", ...}],
      "consent": {"articleOfAssociationConsent": true, ...}
    }
"""

import json
from pathlib import Path
from typing import Any

from memberflow.core.entities.member import (
    CONSENT_FIELD_KEYS,
    MemberConsent,
    MemberUser,
    OrganisationInfo,
)

# Cle JSON -> attribut de MemberUser
USER_KEYS = {
    "id": "id",
    "email": "email",
    "userType": "user_type",
    "firstName": "first_name",
    "lastName": "last_name",
    "correspondanceUser": "correspondance_user",
    "marketingFocalPoint": "marketing_focal_point",
    "investorFocalPoint": "investor_focal_point",
    "designation": "designation",
    "contactNumber": "contact_number",
    "newsletterSubscription": "newsletter_subscription",
}


class PayloadError(ValueError):
    """Fichier de demande illisible ou mal forme."""


def parse_member_user(raw: dict[str, Any]) -> MemberUser:
    """Construit un MemberUser depuis un objet JSON (cles inconnues ignorees)."""
    values = {attr: raw[key] for key, attr in USER_KEYS.items() if key in raw}
    if "email" not in values:
        raise PayloadError("Each member user requires an email")
    try:
        return MemberUser(**values)
    except ValueError as e:
        raise PayloadError(str(e)) from e


def parse_consent(raw: dict[str, Any]) -> MemberConsent:
    return MemberConsent(
        **{attr: bool(raw[key]) for key, attr in CONSENT_FIELD_KEYS.items() if key in raw}
    )


def load_application(path: Path) -> tuple[OrganisationInfo, list[MemberUser], MemberConsent, str]:
    """
    Charge un fichier de demande.

    Returns:
        (profil, utilisateurs, consentements, categorie)

    Raises:
        PayloadError: JSON invalide ou structure inattendue
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise PayloadError(f"Cannot read {path}: {e}") from e
    if not isinstance(data, dict):
        raise PayloadError("The payload must be a JSON object")

    organisation = OrganisationInfo().with_field_values(data.get("organisationInfo") or {})
    users = [parse_member_user(raw) for raw in data.get("memberUsers") or []]
    consent = parse_consent(data.get("consent") or {})
    return organisation, users, consent, str(data.get("category", ""))
