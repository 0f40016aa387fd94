"""
Module de persistance pour memberflow.

Ce module fournit l'infrastructure de stockage utilisant SQLModel (SQLAlchemy).
Il contient :

- database.py : Configuration de l'engine, initialisation des tables
- models.py : Modeles SQLModel representant les tables de la base de donnees
- executor.py : Pont asynchrone (executeur, delai borne, tentatives)
- seed.py : Alimentation initiale des catalogues
- repositories/ : Implementations des ports de persistance

Usage:
    from memberflow.infrastructure.persistence import init_db

    engine = init_db()  # Cree les tables si necessaire
"""

from memberflow.infrastructure.persistence.database import (
    create_db_engine,
    get_engine,
    init_db,
)

__all__ = [
    "create_db_engine",
    "get_engine",
    "init_db",
]
