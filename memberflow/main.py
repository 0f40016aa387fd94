"""
Point d'entrée CLI de memberflow.

Initialise le container DI, configure le logging et fournit les commandes CLI.
"""

from typing import Annotated

import typer
from loguru import logger

from . import __version__
from .adapters.cli.commands import (
    applications,
    create,
    featured,
    fields,
    map_data,
    partners,
    retire,
    seed,
    show,
    transition,
)
from .config import Settings
from .container import Container
from .logging_config import configure_logging

app = typer.Typer(
    name="memberflow",
    help="Workflow des demandes d'adhésion",
)
container = Container()

# Etat global pour les options de verbosite
state = {"verbose": 0, "quiet": False}


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Augmenter la verbosite (-v, -vv, -vvv)"
        ),
    ] = 0,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Mode silencieux (erreurs uniquement)"),
    ] = False,
) -> None:
    """memberflow - Gestion des demandes d'adhésion."""
    if quiet:
        state["quiet"] = True
    else:
        state["verbose"] = verbose


# Demandes d'adhesion
app.command()(create)
app.command()(applications)
app.command()(show)
app.command()(transition)
app.command()(retire)

# Catalogues
app.command()(seed)
app.command()(fields)

# Annuaire public
app.command(name="map-data")(map_data)
app.command()(featured)
app.command()(partners)


def get_config() -> Settings:
    """Récupère les paramètres de l'application depuis le container DI."""
    return container.config()


@app.command()
def info() -> None:
    """Affiche la configuration actuelle."""
    config = get_config()
    logger.info("Configuration memberflow")
    typer.echo(f"Base de données : {config.database_url}")
    typer.echo(f"Délai du stockage : {config.store_timeout_seconds} s")
    typer.echo(f"Tentatives de lecture : {config.lookup_max_attempts}")
    typer.echo(f"Géocodage : {'activé' if config.geocoding_enabled else 'désactivé'}")
    typer.echo(f"Cache géocodage : {config.cache_dir}")
    typer.echo(f"Niveau de log : {config.log_level}")


@app.command()
def version() -> None:
    """Affiche les informations de version."""
    typer.echo(f"memberflow v{__version__}")


def main() -> None:
    """Point d'entrée de l'application."""
    # Charge la configuration et configure le logging
    settings = container.config()
    configure_logging(
        log_level=settings.log_level,
        log_file=settings.log_file,
        audit_file=settings.audit_log_file,
        rotation_size=settings.log_rotation_size,
        retention_count=settings.log_retention_count,
    )

    # Initialise la base de données (crée les tables si nécessaire)
    container.database.init()

    logger.info("Démarrage de memberflow", version=__version__)

    # Lance la CLI
    app()


if __name__ == "__main__":
    main()
