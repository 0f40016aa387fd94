"""
Implementation SQLModel du catalogue des champs dynamiques.

Les types bruts stockes dans form_fields sont convertis en variantes
FieldType a la lecture ; une definition inconvertible est ignoree.
"""

from typing import Optional, Sequence

from loguru import logger
from sqlalchemy import Engine
from sqlmodel import Session, select

from memberflow.core.entities.catalog import FieldDefinition
from memberflow.core.ports.catalogs import IFieldSchemaCatalog
from memberflow.core.value_objects.field_types import parse_field_type
from memberflow.infrastructure.persistence.executor import StoreExecutor
from memberflow.infrastructure.persistence.models import FormFieldModel


class SQLModelFieldSchemaCatalog(IFieldSchemaCatalog):
    """Catalogue des champs adosse a la table form_fields."""

    def __init__(self, engine: Engine, executor: StoreExecutor) -> None:
        self._engine = engine
        self._executor = executor

    async def list_fields(
        self,
        membership_type: str,
        sections: Optional[Sequence[str]] = None,
    ) -> list[FieldDefinition]:
        """Definitions actives applicables au type d'adhesion."""
        return await self._executor.read(
            f"form_fields.list:{membership_type}",
            self._list_fields_sync,
            membership_type,
            tuple(sections) if sections is not None else None,
        )

    def _list_fields_sync(
        self, membership_type: str, sections: Optional[tuple[str, ...]]
    ) -> list[FieldDefinition]:
        statement = (
            select(FormFieldModel)
            .where(FormFieldModel.is_active == True)  # noqa: E712
            .order_by(FormFieldModel.sort_order, FormFieldModel.id)
        )
        if sections is not None:
            statement = statement.where(FormFieldModel.section.in_(sections))

        with Session(self._engine) as session:
            models = session.exec(statement).all()

        definitions = []
        for model in models:
            types = model.membership_types
            if types and membership_type not in types:
                continue
            definition = self._to_definition(model)
            if definition is not None:
                definitions.append(definition)
        return definitions

    @staticmethod
    def _to_definition(model: FormFieldModel) -> Optional[FieldDefinition]:
        try:
            field_type = parse_field_type(
                model.field_type, model.dropdown_category, model.multiple
            )
        except ValueError as e:
            logger.warning(f"Champ {model.field_key} ignore: {e}")
            return None
        return FieldDefinition(
            key=model.field_key,
            field_type=field_type,
            label=model.label,
            required=model.required,
            section=model.section,
            membership_types=tuple(model.membership_types),
            order=model.sort_order,
        )
