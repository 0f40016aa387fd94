"""
Configuration de la base de donnees pour memberflow.

Ce module fournit :
- Engine SQLAlchemy (SQLite par defaut, configure pour le multi-thread)
- Fonction d'initialisation des tables

La base de donnees est configuree via MEMBERFLOW_DATABASE_URL (defaut: sqlite:///memberflow.db).
"""

from pathlib import Path
from typing import Optional

from sqlalchemy import Engine
from sqlmodel import SQLModel, create_engine

# Engine global - initialise lors du premier appel a get_engine()
_engine: Optional[Engine] = None


def create_db_engine(database_url: str, timeout_seconds: Optional[float] = None) -> Engine:
    """
    Cree un engine pour l'URL donnee.

    Pour un fichier SQLite, le repertoire parent est cree et l'engine est
    partageable entre threads (les depots executent leurs requetes dans un
    executeur).

    Args:
        database_url: URL SQLAlchemy
        timeout_seconds: Duree maximale d'attente d'un verrou (SQLite) ou
            d'une requete (PostgreSQL). Le pilote annule alors la transaction
            et leve une OperationalError.
    """
    connect_args: dict = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        if timeout_seconds is not None:
            connect_args["timeout"] = timeout_seconds
        if database_url.startswith("sqlite:///") and ":memory:" not in database_url:
            db_path = Path(database_url.replace("sqlite:///", "", 1))
            db_path.parent.mkdir(exist_ok=True, parents=True)
    elif database_url.startswith("postgresql") and timeout_seconds is not None:
        connect_args["options"] = f"-c statement_timeout={int(timeout_seconds * 1000)}"

    return create_engine(database_url, echo=False, connect_args=connect_args)


def get_engine() -> Engine:
    """
    Retourne l'engine global, en le creant si necessaire.

    Utilise la configuration de l'application pour l'URL de la BDD.
    """
    global _engine
    if _engine is None:
        from memberflow.config import Settings

        settings = Settings()
        _engine = create_db_engine(settings.database_url, settings.store_timeout_seconds)
    return _engine


def init_db(engine: Optional[Engine] = None) -> Engine:
    """
    Initialise la base de donnees en creant toutes les tables.

    Les modeles sont importes ici pour enregistrer leurs metadonnees dans
    SQLModel.metadata sans import circulaire.

    Returns:
        L'engine initialise
    """
    from memberflow.infrastructure.persistence import models  # noqa: F401

    engine = engine or get_engine()
    SQLModel.metadata.create_all(engine)
    return engine
