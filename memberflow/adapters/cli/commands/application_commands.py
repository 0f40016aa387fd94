"""
Commandes CLI des demandes d'adhesion (create, applications, show, transition, retire).
"""

import asyncio
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.panel import Panel
from rich.table import Table

from memberflow.adapters.cli.helpers import console, print_error, with_container
from memberflow.adapters.cli.payloads import PayloadError, load_application
from memberflow.core.entities.member import (
    ApprovalStage,
    Member,
    MemberStatus,
    WorkflowAction,
)
from memberflow.core.errors import MemberflowError

STATUS_STYLES = {
    MemberStatus.DRAFT: "dim",
    MemberStatus.PENDING_FORM_SUBMISSION: "yellow",
    MemberStatus.PENDING_COMMITTEE_APPROVAL: "cyan",
    MemberStatus.PENDING_BOARD_APPROVAL: "blue",
    MemberStatus.ACTIVE: "green",
    MemberStatus.REJECTED: "red",
}


def _status_label(status: MemberStatus) -> str:
    style = STATUS_STYLES.get(status, "white")
    return f"[{style}]{status.value}[/{style}]"


def create(
    payload: Annotated[
        Path,
        typer.Argument(help="Fichier JSON de la demande", exists=True, dir_okay=False),
    ],
    category: Annotated[
        Optional[str],
        typer.Option("--category", "-c", help="Categorie (remplace celle du fichier)"),
    ] = None,
    draft: Annotated[
        bool,
        typer.Option("--draft", help="Creer un brouillon (champs obligatoires non exiges)"),
    ] = False,
) -> None:
    """
    Cree une demande d'adhesion depuis un fichier JSON.

    Exemples:
      memberflow create acme.json
      memberflow create acme.json --category associateMember --draft
    """
    asyncio.run(_create_async(payload, category, draft))


@with_container()
async def _create_async(container, payload: Path, category: Optional[str], draft: bool) -> None:
    """Implementation async de la commande create."""
    try:
        organisation, users, consent, file_category = load_application(payload)
    except PayloadError as e:
        console.print(f"[red]Fichier invalide : {e}[/red]")
        raise typer.Exit(1)

    orchestrator = container.orchestrator()
    try:
        member = await orchestrator.create_application(
            organisation, users, consent, category or file_category, draft=draft
        )
    except MemberflowError as e:
        print_error(e)
        raise typer.Exit(1)

    console.print(
        f"[green]Demande creee[/green] : [bold]{member.member_id}[/bold] "
        f"({member.application_number}) {_status_label(member.status)}"
    )


def applications(
    query: Annotated[
        Optional[str],
        typer.Option("--query", "-q", help="Recherche sur le nom, l'identifiant ou le numero"),
    ] = None,
    status: Annotated[
        Optional[MemberStatus],
        typer.Option("--status", "-s", help="Filtrer par statut"),
    ] = None,
    page: Annotated[int, typer.Option("--page", min=1, help="Numero de page")] = 1,
    page_size: Annotated[
        int, typer.Option("--page-size", min=1, max=200, help="Resultats par page")
    ] = 20,
) -> None:
    """Liste les demandes d'adhesion (recherche paginee)."""
    asyncio.run(_applications_async(query, status, page, page_size))


@with_container()
async def _applications_async(
    container, query: Optional[str], status: Optional[MemberStatus], page: int, page_size: int
) -> None:
    """Implementation async de la commande applications."""
    orchestrator = container.orchestrator()
    try:
        result = await orchestrator.search(query=query, status=status, page=page, page_size=page_size)
    except MemberflowError as e:
        print_error(e)
        raise typer.Exit(1)

    if not result.items:
        console.print("[yellow]Aucune demande trouvee.[/yellow]")
        return

    table = Table(title=f"Demandes ({result.total}) - page {result.page}/{result.pages}")
    table.add_column("ID", style="bold")
    table.add_column("Numero")
    table.add_column("Organisation")
    table.add_column("Categorie")
    table.add_column("Statut")
    table.add_column("Pays", style="dim")

    for member in result.items:
        address = member.organisation_info.address
        table.add_row(
            member.member_id or "",
            member.application_number or "",
            member.organisation_info.company_name,
            member.category.value,
            _status_label(member.status),
            (address.country if address else None) or "-",
        )
    console.print(table)


def show(
    member_id: Annotated[str, typer.Argument(help="Identifiant (MEMBER-001) ou numero (APP-001)")],
) -> None:
    """Affiche le detail d'une demande et son historique."""
    asyncio.run(_show_async(member_id))


@with_container()
async def _show_async(container, member_id: str) -> None:
    """Implementation async de la commande show."""
    orchestrator = container.orchestrator()
    try:
        if member_id.upper().startswith("APP-"):
            member = await orchestrator.get_by_application_number(member_id.upper())
        else:
            member = await orchestrator.get_application(member_id)
    except MemberflowError as e:
        print_error(e)
        raise typer.Exit(1)

    _display_member(member)


def _display_member(member: Member) -> None:
    org = member.organisation_info
    lines = [
        f"[bold]Organisation :[/bold] {org.company_name}",
        f"[bold]Categorie :[/bold] {member.category.value}",
        f"[bold]Statut :[/bold] {_status_label(member.status)}",
        f"[bold]Secteurs :[/bold] {', '.join(org.industries) or '-'}",
        f"[bold]Site web :[/bold] {org.website_url or '-'}",
    ]
    if org.address:
        address = org.address
        location = ", ".join(p for p in (address.city, address.country) if p)
        lines.append(f"[bold]Adresse :[/bold] {location or '-'}")
        if address.has_coordinates:
            lines.append(f"[bold]Coordonnees :[/bold] {address.latitude:.4f}, {address.longitude:.4f}")
    if member.featured_member:
        lines.append("[magenta]Membre mis en avant[/magenta]")

    console.print(
        Panel(
            "\n".join(lines),
            title=f"{member.member_id} ({member.application_number})",
            border_style="blue",
        )
    )

    users = Table(title="Utilisateurs")
    users.add_column("Email")
    users.add_column("Type")
    users.add_column("Nom")
    users.add_column("Correspondance")
    for snapshot in member.user_snapshots:
        name = " ".join(p for p in (snapshot.first_name, snapshot.last_name) if p)
        users.add_row(
            snapshot.email,
            snapshot.user_type.value,
            name or "-",
            "oui" if snapshot.correspondance_user else "",
        )
    console.print(users)

    if member.status_history:
        history = Table(title="Historique")
        history.add_column("Date", style="dim")
        history.add_column("Acteur")
        history.add_column("Action")
        history.add_column("Transition")
        history.add_column("Commentaire")
        for entry in member.status_history:
            history.add_row(
                entry.timestamp.strftime("%Y-%m-%d %H:%M"),
                entry.actor_id,
                f"{entry.action.value}" + (f" ({entry.stage.value})" if entry.stage else ""),
                f"{entry.from_status.value} -> {entry.to_status.value}",
                entry.comment or "",
            )
        console.print(history)


def transition(
    member_id: Annotated[str, typer.Argument(help="Identifiant de la demande")],
    action: Annotated[WorkflowAction, typer.Argument(help="Action a appliquer")],
    actor: Annotated[str, typer.Option("--actor", "-a", help="Identifiant de l'acteur")],
    stage: Annotated[
        Optional[ApprovalStage],
        typer.Option("--stage", help="Niveau d'approbation (committee, board)"),
    ] = None,
    comment: Annotated[
        Optional[str],
        typer.Option("--comment", "-m", help="Commentaire (obligatoire pour un rejet)"),
    ] = None,
) -> None:
    """
    Applique une action du workflow a une demande.

    Exemples:
      memberflow transition MEMBER-001 submit --actor applicant-1
      memberflow transition MEMBER-001 approve --stage committee --actor admin-1
      memberflow transition MEMBER-001 reject --stage board --actor admin-2 -m "Statuts incomplets"
    """
    asyncio.run(_transition_async(member_id, action, stage, actor, comment))


@with_container()
async def _transition_async(
    container,
    member_id: str,
    action: WorkflowAction,
    stage: Optional[ApprovalStage],
    actor: str,
    comment: Optional[str],
) -> None:
    """Implementation async de la commande transition."""
    orchestrator = container.orchestrator()
    try:
        member = await orchestrator.update_application_status(
            member_id, action, stage, actor_id=actor, comment=comment
        )
    except MemberflowError as e:
        print_error(e)
        raise typer.Exit(1)

    console.print(
        f"[green]{action.value}[/green] : {member.member_id} -> {_status_label(member.status)}"
    )


def retire(
    member_id: Annotated[str, typer.Argument(help="Identifiant de la demande")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Ne pas demander de confirmation")] = False,
) -> None:
    """Retire logiquement une demande (conservee en base, exclue des lectures)."""
    if not yes and not typer.confirm(f"Retirer la demande {member_id} ?"):
        raise typer.Exit(0)
    asyncio.run(_retire_async(member_id))


@with_container()
async def _retire_async(container, member_id: str) -> None:
    """Implementation async de la commande retire."""
    orchestrator = container.orchestrator()
    try:
        await orchestrator.retire_application(member_id)
    except MemberflowError as e:
        print_error(e)
        raise typer.Exit(1)
    console.print(f"[green]Demande retiree[/green] : {member_id}")
