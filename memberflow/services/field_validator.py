"""
Validation des champs dynamiques du formulaire d'adhesion.

Les regles dependent du type de chaque champ (FieldType) et de sa definition
dans le catalogue des champs. Une table de regles associe chaque cle de champ
a sa fonction de controle ; un moteur unique evalue la table et agrege toutes
les erreurs (jamais d'arret a la premiere).

Les listes deroulantes sont verifiees contre le catalogue, relu a chaque
passe : une seule requete par categorie distincte, lancees en parallele.
"""

import asyncio
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from loguru import logger

from memberflow.core.entities.catalog import FieldDefinition
from memberflow.core.errors import FieldError, FieldErrorKind, FieldValidationError
from memberflow.core.ports.catalogs import IDropdownCatalog
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
)
from memberflow.utils.helpers import count_digits, is_blank, normalize_url


EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
URL_PATTERN = re.compile(r"^https?://([a-zA-Z0-9-]+\.)+[a-zA-Z]{2,}(/\S*)?$")

# Valeur nettoyee inchangee
_UNCHANGED = object()

CheckOutcome = tuple[Optional[FieldError], Any]
Checker = Callable[[FieldDefinition, Any, Optional[frozenset[str]]], CheckOutcome]


@dataclass
class FieldValidationResult:
    """
    Resultat d'une passe de validation.

    Attributes:
        errors: Erreurs par cle de champ
        cleaned: Valeurs normalisees par cle (ex: URL prefixee par https://)
    """

    errors: dict[str, FieldError] = field(default_factory=dict)
    cleaned: dict[str, Any] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        """True si aucune erreur."""
        return not self.errors

    def raise_if_invalid(self) -> None:
        """Leve FieldValidationError si des erreurs ont ete collectees."""
        if self.errors:
            raise FieldValidationError(self.errors)


def _label(definition: FieldDefinition) -> str:
    return definition.label or definition.key


def _required_error(definition: FieldDefinition) -> FieldError:
    return FieldError(FieldErrorKind.REQUIRED, f"{_label(definition)} is required")


def _type_error(definition: FieldDefinition, expected: str) -> FieldError:
    return FieldError(
        FieldErrorKind.INVALID_TYPE, f"{_label(definition)} must be {expected}"
    )


def _check_text(definition, value, choices) -> CheckOutcome:
    if is_blank(value):
        return None, _UNCHANGED
    if not isinstance(value, (str, int, float)) or isinstance(value, bool):
        return _type_error(definition, "a text value"), _UNCHANGED
    return None, _UNCHANGED


def _check_email(definition, value, choices) -> CheckOutcome:
    if is_blank(value):
        return None, _UNCHANGED
    if not isinstance(value, str):
        return _type_error(definition, "a text value"), _UNCHANGED
    if not EMAIL_PATTERN.match(value.strip()):
        return FieldError(
            FieldErrorKind.INVALID_FORMAT, f"{_label(definition)} must be a valid email address"
        ), _UNCHANGED
    return None, _UNCHANGED


def _check_url(definition, value, choices) -> CheckOutcome:
    if is_blank(value):
        return None, _UNCHANGED
    if not isinstance(value, str):
        return _type_error(definition, "a text value"), _UNCHANGED
    normalized = normalize_url(value)
    if not URL_PATTERN.match(normalized):
        return FieldError(
            FieldErrorKind.INVALID_FORMAT, f"{_label(definition)} must be a valid URL"
        ), _UNCHANGED
    return None, normalized


def _check_phone(definition, value, choices) -> CheckOutcome:
    if is_blank(value):
        return None, _UNCHANGED
    if not isinstance(value, str):
        return _type_error(definition, "a text value"), _UNCHANGED
    min_digits = definition.field_type.min_digits
    if count_digits(value) < min_digits:
        return FieldError(
            FieldErrorKind.INVALID_FORMAT,
            f"{_label(definition)} must contain at least {min_digits} digits",
        ), _UNCHANGED
    return None, _UNCHANGED


def _catalog_unavailable(definition: FieldDefinition) -> FieldError:
    category = definition.field_type.category
    return FieldError(
        FieldErrorKind.CATALOG_UNAVAILABLE,
        f"No active values are configured for {_label(definition)}",
        category=category,
    )


def _check_dropdown(definition, value, choices) -> CheckOutcome:
    if is_blank(value):
        return None, _UNCHANGED
    if not isinstance(value, str):
        return _type_error(definition, "a single value"), _UNCHANGED
    if not choices:
        return _catalog_unavailable(definition), _UNCHANGED
    if value not in choices:
        return FieldError(
            FieldErrorKind.INVALID_CHOICE,
            f"{_label(definition)} has an invalid value",
            category=definition.field_type.category,
        ), _UNCHANGED
    return None, _UNCHANGED


def _check_multi_dropdown(definition, value, choices) -> CheckOutcome:
    if is_blank(value):
        return None, _UNCHANGED
    if isinstance(value, str):
        value = [value]
    elif isinstance(value, (set, frozenset)):
        value = sorted(value, key=str)
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        return _type_error(definition, "a list of values"), _UNCHANGED
    if not choices:
        return _catalog_unavailable(definition), _UNCHANGED
    invalid = [code for code in value if code not in choices]
    if invalid:
        return FieldError(
            FieldErrorKind.INVALID_CHOICE,
            f"{_label(definition)} has invalid values: {', '.join(invalid)}",
            category=definition.field_type.category,
        ), _UNCHANGED
    return None, list(value)


def _check_checkbox(definition, value, choices) -> CheckOutcome:
    if value is None:
        return None, _UNCHANGED
    if not isinstance(value, bool):
        return _type_error(definition, "true or false"), _UNCHANGED
    return None, _UNCHANGED


def _check_file_ref(definition, value, choices) -> CheckOutcome:
    if is_blank(value):
        return None, _UNCHANGED
    if not isinstance(value, str):
        return _type_error(definition, "a file reference"), _UNCHANGED
    return None, _UNCHANGED


# Variante de type -> fonction de controle
CHECKERS: dict[type, Checker] = {
    TextField: _check_text,
    EmailField: _check_email,
    UrlField: _check_url,
    PhoneField: _check_phone,
    DropdownField: _check_dropdown,
    MultiDropdownField: _check_multi_dropdown,
    CheckboxField: _check_checkbox,
    FileRefField: _check_file_ref,
}


def _is_missing(field_type: FieldType, value: Any) -> bool:
    """Regle de presence : une case obligatoire non cochee est absente."""
    if isinstance(field_type, CheckboxField):
        return value is None or value is False
    return is_blank(value)


def build_rule_table(
    schema: Sequence[FieldDefinition],
    only: Optional[Iterable[str]] = None,
) -> dict[str, tuple[FieldDefinition, Checker]]:
    """
    Construit la table cle de champ -> (definition, controle).

    Args:
        schema: Definitions de champs applicables
        only: Restreint la table a ces cles (mise a jour partielle)
    """
    keys = set(only) if only is not None else None
    table: dict[str, tuple[FieldDefinition, Checker]] = {}
    for definition in schema:
        if keys is not None and definition.key not in keys:
            continue
        table[definition.key] = (definition, CHECKERS[type(definition.field_type)])
    return table


def evaluate_rules(
    table: Mapping[str, tuple[FieldDefinition, Checker]],
    values: Mapping[str, Any],
    choices_by_category: Mapping[str, frozenset[str]],
    enforce_required: bool = True,
) -> FieldValidationResult:
    """
    Evalue la table de regles sur les valeurs fournies.

    Fonction pure : les choix des listes deroulantes sont passes en argument.
    """
    result = FieldValidationResult()

    for key, (definition, checker) in table.items():
        value = values.get(key)

        if _is_missing(definition.field_type, value):
            if enforce_required and definition.required:
                result.errors[key] = _required_error(definition)
            continue

        category = getattr(definition.field_type, "category", None)
        choices = choices_by_category.get(category) if category else None
        error, cleaned = checker(definition, value, choices)
        if error is not None:
            result.errors[key] = error
        elif cleaned is not _UNCHANGED:
            result.cleaned[key] = cleaned

    return result


class DynamicFieldValidator:
    """
    Validateur des champs dynamiques pilote par le catalogue des champs.

    Sans etat : chaque appel a validate() relit le catalogue des listes
    deroulantes.

    Example:
        validator = DynamicFieldValidator(dropdown_catalog)
        result = await validator.validate(schema, values)
        result.raise_if_invalid()
    """

    def __init__(self, dropdown_catalog: IDropdownCatalog) -> None:
        self._dropdown_catalog = dropdown_catalog

    async def validate(
        self,
        schema: Sequence[FieldDefinition],
        values: Mapping[str, Any],
        only: Optional[Iterable[str]] = None,
        enforce_required: bool = True,
    ) -> FieldValidationResult:
        """
        Valide les valeurs contre le schema.

        Args:
            schema: Definitions de champs applicables au type d'adhesion
            values: Valeurs par cle de champ
            only: Ne valider que ces cles (mise a jour partielle)
            enforce_required: False pour un brouillon (formats uniquement)

        Returns:
            FieldValidationResult avec toutes les erreurs collectees

        Raises:
            ExternalLookupError: Catalogue indisponible
        """
        table = build_rule_table(schema, only)
        choices = await self._load_choices(table, values)
        result = evaluate_rules(table, values, choices, enforce_required)

        if result.errors:
            # Cles et natures uniquement : jamais les valeurs saisies
            summary = ", ".join(f"{k}={e.kind.value}" for k, e in sorted(result.errors.items()))
            logger.info(f"Validation des champs en echec: {summary}")
        return result

    async def _load_choices(
        self,
        table: Mapping[str, tuple[FieldDefinition, Checker]],
        values: Mapping[str, Any],
    ) -> dict[str, frozenset[str]]:
        """Charge les codes actifs des categories utilisees par des valeurs non vides."""
        categories: list[str] = []
        for key, (definition, _) in table.items():
            category = getattr(definition.field_type, "category", None)
            if category and not is_blank(values.get(key)) and category not in categories:
                categories.append(category)

        if not categories:
            return {}

        entries = await asyncio.gather(
            *(self._dropdown_catalog.lookup(category) for category in categories)
        )
        return {
            category: frozenset(e.code for e in category_entries if e.is_active)
            for category, category_entries in zip(categories, entries)
        }
