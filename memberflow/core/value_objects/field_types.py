"""
Objets valeur pour les types de champs des formulaires dynamiques.

Chaque variante ne porte que les parametres dont sa regle de validation a besoin.
FieldType est l'union des variantes ; parse_field_type convertit le type brut
stocke dans le catalogue des champs vers la variante correspondante.
"""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class TextField:
    """Champ texte libre (multiline pour les textarea)."""

    multiline: bool = False


@dataclass(frozen=True)
class EmailField:
    """Adresse email."""


@dataclass(frozen=True)
class UrlField:
    """URL de site web (https:// ajoute si aucun schema)."""


@dataclass(frozen=True)
class PhoneField:
    """Numero de telephone (nombre minimum de chiffres)."""

    min_digits: int = 10


@dataclass(frozen=True)
class DropdownField:
    """Valeur unique choisie dans une categorie du catalogue."""

    category: str


@dataclass(frozen=True)
class MultiDropdownField:
    """Liste de valeurs choisies dans une categorie du catalogue (ex: industries)."""

    category: str


@dataclass(frozen=True)
class CheckboxField:
    """Case a cocher (consentements, declarations)."""


@dataclass(frozen=True)
class FileRefField:
    """Reference vers un fichier deja televerse (le televersement est externe)."""


FieldType = Union[
    TextField,
    EmailField,
    UrlField,
    PhoneField,
    DropdownField,
    MultiDropdownField,
    CheckboxField,
    FileRefField,
]


def parse_field_type(
    raw_type: str,
    dropdown_category: Optional[str] = None,
    multiple: bool = False,
) -> FieldType:
    """
    Convertit un type brut du catalogue des champs en variante FieldType.

    Args:
        raw_type: Type stocke ("text", "textarea", "email", "url", "phone",
                  "dropdown", "radio", "checkbox", "file", "button", "number", "date")
        dropdown_category: Categorie du catalogue pour les listes deroulantes
        multiple: True si la liste accepte plusieurs valeurs

    Returns:
        La variante FieldType correspondante

    Raises:
        ValueError: Type inconnu, ou liste deroulante sans categorie
    """
    kind = (raw_type or "").strip().lower()

    if kind in ("text", "number", "date"):
        return TextField()
    if kind == "textarea":
        return TextField(multiline=True)
    if kind == "email":
        return EmailField()
    if kind == "url":
        return UrlField()
    if kind == "phone":
        return PhoneField()
    if kind == "checkbox":
        return CheckboxField()
    if kind in ("file", "button"):
        return FileRefField()
    if kind in ("dropdown", "radio"):
        if not dropdown_category:
            raise ValueError(f"Field type {raw_type!r} requires a dropdown category")
        if multiple:
            return MultiDropdownField(category=dropdown_category)
        return DropdownField(category=dropdown_category)

    raise ValueError(f"Unknown field type: {raw_type!r}")
