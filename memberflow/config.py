"""
Configuration de l'application via pydantic-settings.

La configuration est chargée depuis les variables d'environnement avec le préfixe MEMBERFLOW_,
et peut optionnellement être fournie via un fichier .env.

Le géocodage est optionnel - les adresses sont enregistrées sans coordonnées s'il est désactivé.
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Trouver le fichier .env à la racine du projet (parent de memberflow/)
_PROJECT_ROOT = Path(__file__).parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Paramètres de l'application avec support des variables d'environnement.

    Tous les paramètres peuvent être surchargés via des variables d'environnement
    avec le préfixe MEMBERFLOW_.
    Exemple : MEMBERFLOW_STORE_TIMEOUT_SECONDS=2.5

    Les chemins sont automatiquement étendus (~ -> répertoire home).
    """

    model_config = SettingsConfigDict(
        env_prefix="MEMBERFLOW_",
        env_file=_ENV_FILE if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Base de données
    database_url: str = Field(default="sqlite:///memberflow.db")

    # Accès aux catalogues et à l'annuaire (timeout borné + tentatives)
    store_timeout_seconds: float = Field(default=5.0, gt=0)
    lookup_max_attempts: int = Field(default=3, ge=1, le=10)
    lookup_max_wait_seconds: int = Field(default=2, ge=1)

    # Géocodage (Nominatim / OpenStreetMap)
    geocoding_enabled: bool = Field(default=True)
    geocoding_endpoint: str = Field(default="https://nominatim.openstreetmap.org/search")
    geocoding_timeout_seconds: float = Field(default=10.0, gt=0)
    geocoding_user_agent: str = Field(default="memberflow-geocoder/1.0")
    cache_dir: Path = Field(default=Path(".cache/geocoding"))

    # Logging (fichier + stderr, rotation 10MB, 5 fichiers de rétention)
    log_level: str = Field(default="INFO")
    log_file: Path = Field(default=Path("logs/memberflow.log"))
    audit_log_file: Path = Field(default=Path("logs/audit.jsonl"))
    log_rotation_size: str = Field(default="10 MB")
    log_retention_count: int = Field(default=5)

    @field_validator("cache_dir", "log_file", "audit_log_file", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        """Étend ~ vers le répertoire home dans les chemins."""
        return Path(v).expanduser()
