"""
Commandes CLI de l'annuaire public (map-data, featured, partners).
"""

import asyncio
from enum import Enum
from typing import Annotated

import typer
from rich.table import Table

from memberflow.adapters.cli.helpers import console, print_error, with_container
from memberflow.core.errors import MemberflowError
from memberflow.services.directory import DirectoryEntry


class MapAction(str, Enum):
    """Vue de la carte demandee."""

    VIEW_MAP = "view-map"
    VIEW_MEMBER = "view-member"


def map_data(
    action: Annotated[
        MapAction,
        typer.Option("--action", help="view-map (agregats) ou view-member (positions)"),
    ] = MapAction.VIEW_MAP,
) -> None:
    """Affiche les agregats de la carte des membres actifs."""
    asyncio.run(_map_data_async(action))


@with_container()
async def _map_data_async(container, action: MapAction) -> None:
    """Implementation async de la commande map-data."""
    directory = container.directory_service()
    try:
        data = await directory.map_data(action.value)
    except MemberflowError as e:
        print_error(e)
        raise typer.Exit(1)

    continents = Table(title="Membres par continent")
    continents.add_column("Continent")
    continents.add_column("Membres", justify="right")
    for name, count in sorted(data.continent_member_count.items(), key=lambda i: -i[1]):
        continents.add_row(name, str(count))
    console.print(continents)

    countries = Table(title="Membres par pays")
    countries.add_column("Pays")
    countries.add_column("Membres", justify="right")
    countries.add_column("Position", style="dim")
    for item in data.country_member_count:
        position = f"{item.latitude:.2f}, {item.longitude:.2f}" if item.latitude is not None else "-"
        countries.add_row(item.country, str(item.count), position)
    console.print(countries)

    if data.members is not None:
        console.print(
            f"Membres geolocalises : [green]{data.members_with_coordinates}[/green]"
            f" / {data.total_members}"
        )


def featured() -> None:
    """Liste les membres mis en avant."""
    asyncio.run(_featured_async())


@with_container()
async def _featured_async(container) -> None:
    """Implementation async de la commande featured."""
    directory = container.directory_service()
    try:
        members = await directory.list_featured()
    except MemberflowError as e:
        print_error(e)
        raise typer.Exit(1)

    if not members:
        console.print("[yellow]Aucun membre mis en avant.[/yellow]")
        return
    for member in members:
        industries = ", ".join(member.industries) or "-"
        console.print(f"  [bold]{member.member_code}[/bold] {member.name} [dim]({industries})[/dim]")


def partners() -> None:
    """Liste les partenaires et sponsors actifs."""
    asyncio.run(_partners_async())


@with_container()
async def _partners_async(container) -> None:
    """Implementation async de la commande partners."""
    directory = container.directory_service()
    try:
        result = await directory.list_partners_and_sponsors()
    except MemberflowError as e:
        print_error(e)
        raise typer.Exit(1)

    _print_entries("Partenaires", result.partners)
    _print_entries("Sponsors", result.sponsors)


def _print_entries(title: str, entries: list[DirectoryEntry]) -> None:
    table = Table(title=f"{title} ({len(entries)})")
    table.add_column("ID", style="bold")
    table.add_column("Organisation")
    table.add_column("Pays", style="dim")
    table.add_column("Site web")
    for entry in entries:
        table.add_row(entry.id, entry.name, entry.country or "-", entry.website_url or "-")
    console.print(table)
