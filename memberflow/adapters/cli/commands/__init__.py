"""Sous-package CLI commands - re-exporte les commandes publiques."""

from memberflow.adapters.cli.commands.application_commands import (
    applications,
    create,
    retire,
    show,
    transition,
)
from memberflow.adapters.cli.commands.catalog_commands import (
    fields,
    seed,
)
from memberflow.adapters.cli.commands.directory_commands import (
    MapAction,
    featured,
    map_data,
    partners,
)

__all__ = [
    # applications
    "applications",
    "create",
    "retire",
    "show",
    "transition",
    # catalogues
    "fields",
    "seed",
    # annuaire
    "MapAction",
    "featured",
    "map_data",
    "partners",
]
