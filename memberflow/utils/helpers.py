"""
Fonctions utilitaires partagees dans le projet memberflow.

Ce module centralise les fonctions reutilisees a travers le codebase :
- normalize_email / email_domain / mask_email : manipulation des emails
- normalize_url : ajout du schema https:// manquant
- count_digits : comptage des chiffres d'un numero de telephone
- country_to_alpha2 / continent_for_country : resolution geographique
"""

from typing import Any, Optional

import pycountry

from memberflow.utils.constants import (
    ALPHA2_TO_CONTINENT,
    COUNTRY_ALIASES,
    UNKNOWN_CONTINENT,
)


def is_blank(value: Any) -> bool:
    """True pour None, une chaine vide apres trim ou une collection vide."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, frozenset)):
        return len(value) == 0
    return False


def normalize_email(email: str) -> str:
    """Email en minuscules, sans espaces autour."""
    return (email or "").strip().lower()


def email_domain(email: str) -> str:
    """Domaine de l'email en minuscules (chaine vide si absent)."""
    _, separator, domain = normalize_email(email).rpartition("@")
    return domain if separator else ""


def mask_email(email: str) -> str:
    """
    Masque un email pour les messages d'erreur.

    Conserve les 3 premiers caracteres de la partie locale puis "**@domaine".

    Example:
        >>> mask_email("johnsmith@acme.com")
        'joh**@acme.com'
    """
    local, separator, domain = (email or "").strip().rpartition("@")
    if not separator:
        local, domain = domain, ""
    return f"{local[:3]}**@{domain}"


def normalize_url(url: str) -> str:
    """Ajoute https:// quand l'URL n'a pas de schema."""
    text = (url or "").strip()
    if not text:
        return text
    if text.lower().startswith(("http://", "https://")):
        return text
    return f"https://{text}"


def count_digits(value: str) -> int:
    """Nombre de chiffres dans la chaine."""
    return sum(1 for char in str(value or "") if char.isdigit())


def country_to_alpha2(country: Optional[str]) -> Optional[str]:
    """
    Resout un nom ou code de pays en code ISO alpha-2.

    Consulte d'abord la table des variantes, puis pycountry (nom, nom
    officiel, alpha-2, alpha-3).

    Returns:
        Le code alpha-2, ou None si le pays est inconnu
    """
    text = (country or "").strip()
    if not text:
        return None
    alias = COUNTRY_ALIASES.get(text.lower())
    if alias:
        return alias
    try:
        return pycountry.countries.lookup(text).alpha_2
    except LookupError:
        return None


def continent_for_country(country: Optional[str]) -> str:
    """Nom du continent d'un pays, "Other" si inconnu."""
    code = country_to_alpha2(country)
    if code is None:
        return UNKNOWN_CONTINENT
    return ALPHA2_TO_CONTINENT.get(code, UNKNOWN_CONTINENT)
