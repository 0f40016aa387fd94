"""
Alimentation initiale des catalogues.

Les fonctions sont idempotentes : une valeur deja presente (meme categorie et
code, ou meme cle de champ) est mise a jour au lieu d'etre dupliquee.
"""

import json
from typing import Iterable, Optional

import pycountry
from sqlalchemy import Engine
from sqlmodel import Session, select

from memberflow.infrastructure.persistence.models import DropdownValueModel, FormFieldModel
from memberflow.utils.constants import (
    CATEGORY_COUNTRY,
    DROPDOWN_SEED,
    FORM_FIELD_SEED,
    MEMBERSHIP_TYPES,
)


def country_dropdown_values() -> list[tuple[str, str, str]]:
    """Valeurs de la categorie "country" : le nom du pays sert de code et de libelle."""
    names = sorted(country.name for country in pycountry.countries)
    return [(CATEGORY_COUNTRY, name, name) for name in names]


def seed_dropdown_values(
    engine: Engine,
    values: Optional[Iterable[tuple[str, str, str]]] = None,
) -> int:
    """
    Insere ou met a jour les valeurs du catalogue des listes deroulantes.

    Args:
        engine: Engine de la base
        values: Tuples (categorie, code, libelle) ; par defaut les valeurs
                initiales et la liste des pays

    Returns:
        Nombre de valeurs inserees
    """
    if values is None:
        values = [*DROPDOWN_SEED, *country_dropdown_values()]

    inserted = 0
    with Session(engine) as session:
        for order, (category, code, label) in enumerate(values):
            model = session.exec(
                select(DropdownValueModel).where(
                    DropdownValueModel.category == category,
                    DropdownValueModel.code == code,
                )
            ).first()
            if model is None:
                model = DropdownValueModel(category=category, code=code, label=label)
                inserted += 1
            model.label = label
            model.is_active = True
            model.sort_order = order
            session.add(model)
        session.commit()
    return inserted


def seed_form_fields(engine: Engine, definitions: Optional[Iterable[tuple]] = None) -> int:
    """
    Insere ou met a jour les definitions du formulaire dynamique.

    Args:
        engine: Engine de la base
        definitions: Tuples (cle, type brut, section, categorie, multiple,
                     obligatoire, libelle) ; par defaut FORM_FIELD_SEED

    Returns:
        Nombre de definitions inserees
    """
    inserted = 0
    with Session(engine) as session:
        for order, row in enumerate(definitions or FORM_FIELD_SEED):
            key, raw_type, section, category, multiple, required, label = row
            model = session.exec(
                select(FormFieldModel).where(FormFieldModel.field_key == key)
            ).first()
            if model is None:
                model = FormFieldModel(field_key=key, field_type=raw_type, section=section)
                inserted += 1
            model.field_type = raw_type
            model.section = section
            model.dropdown_category = category
            model.multiple = multiple
            model.required = required
            model.label = label
            model.membership_types_json = json.dumps(list(MEMBERSHIP_TYPES))
            model.sort_order = order
            model.is_active = True
            session.add(model)
        session.commit()
    return inserted
