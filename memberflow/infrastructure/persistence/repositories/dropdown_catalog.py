"""
Implementation SQLModel du catalogue des listes deroulantes.

Implemente l'interface IDropdownCatalog : chaque appel relit la table
dropdown_values (aucun cache entre deux passes de validation).
"""

from sqlalchemy import Engine
from sqlmodel import Session, select

from memberflow.core.entities.catalog import DropdownEntry
from memberflow.core.ports.catalogs import IDropdownCatalog
from memberflow.infrastructure.persistence.executor import StoreExecutor
from memberflow.infrastructure.persistence.models import DropdownValueModel


class SQLModelDropdownCatalog(IDropdownCatalog):
    """Catalogue des listes deroulantes adosse a la table dropdown_values."""

    def __init__(self, engine: Engine, executor: StoreExecutor) -> None:
        self._engine = engine
        self._executor = executor

    async def lookup(self, category: str) -> list[DropdownEntry]:
        """Retourne les entrees actives de la categorie, dans l'ordre d'affichage."""
        return await self._executor.read(
            f"dropdown.lookup:{category}", self._lookup_sync, category
        )

    def _lookup_sync(self, category: str) -> list[DropdownEntry]:
        statement = (
            select(DropdownValueModel)
            .where(DropdownValueModel.category == category)
            .where(DropdownValueModel.is_active == True)  # noqa: E712
            .order_by(DropdownValueModel.sort_order, DropdownValueModel.label)
        )
        with Session(self._engine) as session:
            return [
                DropdownEntry(
                    category=model.category,
                    code=model.code,
                    label=model.label,
                    is_active=model.is_active,
                )
                for model in session.exec(statement).all()
            ]
