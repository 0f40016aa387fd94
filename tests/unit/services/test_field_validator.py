"""
Tests unitaires pour DynamicFieldValidator.

Verifie :
- Agregation de toutes les erreurs (jamais d'arret a la premiere)
- Regles par type (email, URL, telephone, listes, cases a cocher)
- Listes deroulantes controlees contre le catalogue relu a chaque passe
- Catalogue vide : CATALOG_UNAVAILABLE, catalogue en echec : ExternalLookupError
- Validation partielle (only) et brouillon (enforce_required=False)
"""

import pytest

from memberflow.core.entities.catalog import DropdownEntry, FieldDefinition
from memberflow.core.errors import ExternalLookupError, FieldErrorKind, FieldValidationError
from memberflow.core.value_objects.field_types import (
    CheckboxField,
    DropdownField,
    EmailField,
    MultiDropdownField,
    PhoneField,
    TextField,
    UrlField,
)
from memberflow.services.field_validator import (
    DynamicFieldValidator,
    build_rule_table,
    evaluate_rules,
)
from tests.fixtures.applications import full_consent, make_organisation
from tests.fixtures.fakes import FakeDropdownCatalog, seed_schema


def _values(**overrides):
    values = make_organisation().to_field_values()
    values.update(full_consent().to_field_values())
    values.update(overrides)
    return values


@pytest.fixture
def validator(dropdown_catalog) -> DynamicFieldValidator:
    return DynamicFieldValidator(dropdown_catalog)


class TestValidApplication:
    @pytest.mark.asyncio
    async def test_complete_application_is_valid(self, validator):
        result = await validator.validate(seed_schema(), _values())
        assert result.is_valid
        result.raise_if_invalid()

    @pytest.mark.asyncio
    async def test_website_is_normalized(self, validator):
        result = await validator.validate(seed_schema(), _values())
        assert result.cleaned["websiteUrl"] == "https://acme-logistics.io"

    @pytest.mark.asyncio
    async def test_one_lookup_per_category(self, validator, dropdown_catalog):
        await validator.validate(seed_schema(), _values())
        assert sorted(dropdown_catalog.lookups) == ["country", "industries", "organizationType"]

    @pytest.mark.asyncio
    async def test_catalog_is_reread_on_each_pass(self, validator, dropdown_catalog):
        await validator.validate(seed_schema(), _values())
        await validator.validate(seed_schema(), _values())
        assert len(dropdown_catalog.lookups) == 6


class TestErrorAggregation:
    @pytest.mark.asyncio
    async def test_all_errors_are_collected(self, validator):
        """3 champs obligatoires manquants + 1 code invalide = 4 erreurs."""
        values = _values(
            companyName="",
            addressLine1=None,
            authorizedPersonDeclaration=False,
            typeOfTheOrganization="spaceAgency",
        )

        result = await validator.validate(seed_schema(), values)

        assert len(result.errors) == 4
        assert result.errors["companyName"].kind == FieldErrorKind.REQUIRED
        assert result.errors["addressLine1"].kind == FieldErrorKind.REQUIRED
        assert result.errors["authorizedPersonDeclaration"].kind == FieldErrorKind.REQUIRED
        choice = result.errors["typeOfTheOrganization"]
        assert choice.kind == FieldErrorKind.INVALID_CHOICE
        assert choice.category == "organizationType"

    @pytest.mark.asyncio
    async def test_raise_if_invalid_carries_every_error(self, validator):
        result = await validator.validate(seed_schema(), _values(companyName="", websiteUrl="not a url"))
        with pytest.raises(FieldValidationError) as exc_info:
            result.raise_if_invalid()
        assert set(exc_info.value.errors) == {"companyName", "websiteUrl"}

    @pytest.mark.asyncio
    async def test_optional_blank_fields_are_accepted(self, validator):
        result = await validator.validate(seed_schema(), _values(addressZip="", linkedInUrl=None))
        assert result.is_valid


class TestTypeRules:
    def _run(self, definition, value, choices=None):
        table = build_rule_table([definition])
        return evaluate_rules(table, {definition.key: value}, choices or {})

    def test_invalid_email(self):
        result = self._run(FieldDefinition("contactEmail", EmailField()), "ceo@acme")
        assert result.errors["contactEmail"].kind == FieldErrorKind.INVALID_FORMAT

    def test_valid_email(self):
        assert self._run(FieldDefinition("contactEmail", EmailField()), "ceo@acme.io").is_valid

    def test_invalid_url(self):
        result = self._run(FieldDefinition("websiteUrl", UrlField()), "acme")
        assert result.errors["websiteUrl"].kind == FieldErrorKind.INVALID_FORMAT

    def test_phone_too_short(self):
        result = self._run(FieldDefinition("phone", PhoneField()), "+33 1 23")
        assert result.errors["phone"].kind == FieldErrorKind.INVALID_FORMAT
        assert "10" in result.errors["phone"].message

    def test_phone_with_ten_digits(self):
        assert self._run(FieldDefinition("phone", PhoneField()), "01 23 45 67 89").is_valid

    def test_text_rejects_structured_value(self):
        result = self._run(FieldDefinition("companyName", TextField()), {"name": "Acme"})
        assert result.errors["companyName"].kind == FieldErrorKind.INVALID_TYPE

    def test_checkbox_must_be_boolean(self):
        result = self._run(FieldDefinition("consent", CheckboxField(), required=False), "yes")
        assert result.errors["consent"].kind == FieldErrorKind.INVALID_TYPE

    def test_required_checkbox_must_be_true(self):
        result = self._run(FieldDefinition("consent", CheckboxField()), False)
        assert result.errors["consent"].kind == FieldErrorKind.REQUIRED

    def test_multi_dropdown_reports_invalid_codes(self):
        definition = FieldDefinition("industries", MultiDropdownField("industries"))
        result = self._run(
            definition, ["logistics", "piracy"], {"industries": frozenset({"logistics"})}
        )
        error = result.errors["industries"]
        assert error.kind == FieldErrorKind.INVALID_CHOICE
        assert "piracy" in error.message

    def test_multi_dropdown_accepts_single_string(self):
        definition = FieldDefinition("industries", MultiDropdownField("industries"))
        result = self._run(definition, "logistics", {"industries": frozenset({"logistics"})})
        assert result.is_valid
        assert result.cleaned["industries"] == ["logistics"]

    @pytest.mark.parametrize("value", [{"maritime", "logistics"}, frozenset({"maritime", "logistics"})])
    def test_multi_dropdown_accepts_sets(self, value):
        definition = FieldDefinition("industries", MultiDropdownField("industries"))
        result = self._run(
            definition, value, {"industries": frozenset({"logistics", "maritime"})}
        )
        assert result.is_valid
        assert result.cleaned["industries"] == ["logistics", "maritime"]

    def test_single_dropdown_rejects_list(self):
        definition = FieldDefinition("country", DropdownField("country"))
        result = self._run(definition, ["France"], {"country": frozenset({"France"})})
        assert result.errors["country"].kind == FieldErrorKind.INVALID_TYPE

    def test_missing_definition_required_by_default(self):
        assert FieldDefinition("companyName", TextField()).required


class TestCatalogAvailability:
    @pytest.mark.asyncio
    async def test_empty_category_reports_catalog_unavailable(self):
        catalog = FakeDropdownCatalog(entries=[DropdownEntry("industries", "logistics", "Logistics")])
        validator = DynamicFieldValidator(catalog)
        schema = [FieldDefinition("typeOfTheOrganization", DropdownField("organizationType"))]

        result = await validator.validate(schema, {"typeOfTheOrganization": "privateCompany"})

        error = result.errors["typeOfTheOrganization"]
        assert error.kind == FieldErrorKind.CATALOG_UNAVAILABLE
        assert error.category == "organizationType"

    @pytest.mark.asyncio
    async def test_inactive_entries_are_not_choices(self):
        catalog = FakeDropdownCatalog(
            entries=[DropdownEntry("organizationType", "privateCompany", "Private", is_active=False)]
        )
        validator = DynamicFieldValidator(catalog)
        schema = [FieldDefinition("typeOfTheOrganization", DropdownField("organizationType"))]

        result = await validator.validate(schema, {"typeOfTheOrganization": "privateCompany"})

        assert result.errors["typeOfTheOrganization"].kind == FieldErrorKind.CATALOG_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_failing_catalog_propagates(self, validator, dropdown_catalog):
        dropdown_catalog.unavailable.add("industries")
        with pytest.raises(ExternalLookupError):
            await validator.validate(seed_schema(), _values())

    @pytest.mark.asyncio
    async def test_blank_dropdown_does_not_query_catalog(self, validator, dropdown_catalog):
        schema = [FieldDefinition("typeOfTheOrganization", DropdownField("organizationType"), required=False)]
        result = await validator.validate(schema, {"typeOfTheOrganization": ""})
        assert result.is_valid
        assert dropdown_catalog.lookups == []


class TestPartialValidation:
    @pytest.mark.asyncio
    async def test_only_given_keys_are_checked(self, validator):
        result = await validator.validate(
            seed_schema(), {"companyName": "Acme Group"}, only={"companyName"}
        )
        assert result.is_valid

    @pytest.mark.asyncio
    async def test_blanking_a_required_key_is_rejected(self, validator):
        result = await validator.validate(seed_schema(), {"companyName": " "}, only={"companyName"})
        assert result.errors["companyName"].kind == FieldErrorKind.REQUIRED

    @pytest.mark.asyncio
    async def test_draft_skips_required_but_checks_formats(self, validator):
        result = await validator.validate(
            seed_schema(),
            {"companyName": "", "websiteUrl": "not a url"},
            enforce_required=False,
        )
        assert set(result.errors) == {"websiteUrl"}
