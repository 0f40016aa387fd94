"""
Configuration du logging de l'application via loguru.

Trois sorties :
- Console : lisible, colorée, pour la surveillance en temps réel
- Fichier applicatif : texte avec rotation, tout le détail (DEBUG)
- Journal d'audit : JSON, uniquement les enregistrements liés à un acteur

Une transition de statut est journalisée avec logger.bind(actor_id=..., ...) :
c'est la présence de actor_id dans "extra" qui l'envoie vers l'audit, avec
member_id, action, stage, from_status et to_status.
"""

import sys
from pathlib import Path
from typing import Any

from loguru import logger

# Champ "extra" qui identifie un enregistrement d'audit
AUDIT_KEY = "actor_id"


def is_audit_record(record: dict[str, Any]) -> bool:
    """Vrai si l'enregistrement porte un acteur (transition de statut)."""
    return record["extra"].get(AUDIT_KEY) is not None


def configure_logging(
    log_level: str = "INFO",
    log_file: Path = Path("logs/memberflow.log"),
    audit_file: Path = Path("logs/audit.jsonl"),
    rotation_size: str = "10 MB",
    retention_count: int = 5,
) -> None:
    """Configure le logging de l'application.

    Args :
        log_level : Niveau minimum pour la console (DEBUG, INFO, WARNING, ERROR)
        log_file : Fichier applicatif
        audit_file : Journal d'audit des transitions (JSON, une ligne par enregistrement)
        rotation_size : Taille maximale d'un fichier avant rotation (ex: "10 MB")
        retention_count : Nombre de fichiers applicatifs rotatifs à conserver
    """
    logger.remove()

    logger.add(
        sys.stderr,
        level=log_level,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan> | "
            "<level>{message}</level>"
        ),
        colorize=True,
    )

    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_file,
        level="DEBUG",
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{line} | {message} | {extra}",
        rotation=rotation_size,
        retention=retention_count,
        compression="zip",
        enqueue=True,
    )

    # L'audit n'est jamais purgé : rotation seule, sans retention
    audit_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        audit_file,
        level="INFO",
        format="{message}",
        filter=is_audit_record,
        serialize=True,
        rotation=rotation_size,
        enqueue=True,
    )

    logger.bind(log_file=str(log_file), audit_file=str(audit_file)).debug("Logging configuré")
