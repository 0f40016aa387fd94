"""
Objets valeur immutables representant des concepts du domaine sans identite.

Exports :
- FieldType et ses variantes : types de champs des formulaires dynamiques
- parse_field_type : conversion depuis le type brut du catalogue
- Coordinates : coordonnees GPS d'une adresse
"""

from memberflow.core.value_objects.field_types import (
    CheckboxField,
    DropdownField,
    EmailField,
    FieldType,
    FileRefField,
    MultiDropdownField,
    PhoneField,
    TextField,
    UrlField,
    parse_field_type,
)
from memberflow.core.value_objects.geo import Coordinates

__all__ = [
    "CheckboxField",
    "DropdownField",
    "EmailField",
    "FieldType",
    "FileRefField",
    "MultiDropdownField",
    "PhoneField",
    "TextField",
    "UrlField",
    "parse_field_type",
    "Coordinates",
]
