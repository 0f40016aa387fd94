"""
Commandes CLI des catalogues (seed, fields).
"""

import asyncio
from typing import Annotated, Optional

import typer
from rich.table import Table

from memberflow.adapters.cli.helpers import console, print_error, with_container
from memberflow.core.entities.member import MemberCategory
from memberflow.core.errors import MemberflowError
from memberflow.infrastructure.persistence.seed import seed_dropdown_values, seed_form_fields


def seed() -> None:
    """Alimente les catalogues (listes deroulantes, pays, champs du formulaire)."""
    asyncio.run(_seed_async())


@with_container()
async def _seed_async(container) -> None:
    """Implementation async de la commande seed."""
    engine = container.engine()
    dropdowns = seed_dropdown_values(engine)
    form_fields = seed_form_fields(engine)
    console.print(f"Valeurs de listes ajoutees : [green]{dropdowns}[/green]")
    console.print(f"Champs de formulaire ajoutes : [green]{form_fields}[/green]")


def fields(
    category: Annotated[
        MemberCategory,
        typer.Option("--category", "-c", help="Categorie d'adhesion"),
    ] = MemberCategory.VOTING,
    section: Annotated[
        Optional[list[str]],
        typer.Option("--section", help="Restreindre a une section (repetable)"),
    ] = None,
) -> None:
    """Affiche le schema du formulaire pour une categorie."""
    asyncio.run(_fields_async(category, section))


@with_container()
async def _fields_async(container, category: MemberCategory, section: Optional[list[str]]) -> None:
    """Implementation async de la commande fields."""
    catalog = container.field_schema_catalog()
    try:
        schema = await catalog.list_fields(category.value, section or None)
    except MemberflowError as e:
        print_error(e)
        raise typer.Exit(1)

    if not schema:
        console.print("[yellow]Aucun champ. Lancer d'abord 'memberflow seed'.[/yellow]")
        return

    table = Table(title=f"Formulaire {category.value}")
    table.add_column("Section", style="dim")
    table.add_column("Cle", style="bold")
    table.add_column("Type")
    table.add_column("Obligatoire")
    table.add_column("Libelle")
    for definition in schema:
        table.add_row(
            definition.section,
            definition.key,
            type(definition.field_type).__name__,
            "oui" if definition.required else "",
            definition.label,
        )
    console.print(table)
