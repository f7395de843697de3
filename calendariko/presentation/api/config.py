"""
Configuration API - Settings Pydantic.

Responsabilite unique:
----------------------
Charger et valider la configuration API depuis les variables d'env.

Variables requises:
-------------------
- JWT_SECRET_KEY: Cle secrete pour signer les tokens
- JWT_ALGORITHM: Algorithme (defaut: HS256)
- JWT_ACCESS_EXPIRE_MINUTES: Duree de vie access token
- JWT_LEEWAY_SECONDS: Tolerance d'horloge sur exp (defaut: 0)
- JWT_ISSUER: Emetteur attendu (vide: non verifie)
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class APISettings(BaseSettings):
    """
    Configuration de l'API REST.

    Chargee depuis les variables d'environnement.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # JWT
    jwt_secret_key: str = "CHANGE_ME_IN_PRODUCTION"
    jwt_algorithm: str = "HS256"
    jwt_access_expire_minutes: int = 30
    jwt_leeway_seconds: int = 0
    jwt_issuer: str = ""

    # API
    api_title: str = "Calendariko Backup API"
    api_version: str = "1.0.0"
    api_prefix: str = "/api"

    # CORS
    cors_origins: list[str] = ["*"]

    # Environnement
    env: str = "development"
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.env == "production"


@lru_cache
def get_settings() -> APISettings:
    """Retourne la configuration (cached)."""
    return APISettings()
