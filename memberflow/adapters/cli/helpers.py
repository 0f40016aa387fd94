"""
Utilitaires partages pour les commandes CLI de memberflow.

Ce module fournit :
- console : instance Rich Console partagee
- with_container : decorateur injectant un container initialise
- print_error : affichage d'une erreur du domaine
"""

from functools import wraps

from rich.console import Console

from memberflow.container import Container
from memberflow.core.errors import (
    ConflictError,
    FieldValidationError,
    MemberflowError,
)

console = Console()


def with_container(requires_db: bool = True):
    """
    Decorateur qui injecte un container initialise en premier argument.

    Args:
        requires_db: Si True (defaut), initialise la base de donnees.

    Usage:
        @with_container()
        async def my_command(container, ...):
            orchestrator = container.orchestrator()
    """
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            container = Container()
            if requires_db:
                container.database.init()
            return await func(container, *args, **kwargs)
        return wrapper
    return decorator


def print_error(error: MemberflowError) -> None:
    """Affiche une erreur du domaine (detail par champ pour la validation)."""
    if isinstance(error, FieldValidationError):
        console.print(f"[red]Demande invalide ({len(error.errors)} champ(s)) :[/red]")
        for key, field_error in sorted(error.errors.items()):
            console.print(f"  [yellow]{key}[/yellow] [dim]({field_error.kind.value})[/dim] {field_error.message}")
    elif isinstance(error, ConflictError):
        console.print(f"[red]{error.kind.value}[/red] : {error.detail}")
    else:
        console.print(f"[red]Erreur : {error}[/red]")
        if error.retryable:
            console.print("[dim]Operation recuperable : relire puis relancer la commande.[/dim]")
