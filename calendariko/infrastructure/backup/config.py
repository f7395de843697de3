"""
Backup Config - Configuration des sauvegardes.

Responsabilite unique:
----------------------
Configurer les parametres de backup, de retention et de planification.

Variables:
----------
- DATABASE_URL: URL PostgreSQL de la base a sauvegarder
- BACKUP_DIR: Repertoire de stockage local
- BACKUP_RETENTION_DAYS: Nombre de jours de retention (0: aucun backup conserve)
- BACKUP_MAX_COUNT: Nombre maximum de backups (0: aucun backup conserve)
- BACKUP_AUTO_ENABLED: Active le backup automatique
- BACKUP_SCHEDULE: Expression cron (defaut: tous les jours a 2h)
- TZ: Fuseau horaire du cron
- BACKUP_NOTIFICATIONS_ENABLED / BACKUP_NOTIFICATION_EMAIL: Notifications
- PG_DUMP_PATH / PSQL_PATH: Binaires PostgreSQL
- BACKUP_ADMIN_DATABASE: Base de maintenance utilisee par psql lors d'une restauration
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from calendariko.domain.entities.backup import RetentionPolicy
from calendariko.domain.entities.schedule import SchedulerConfig


class BackupSettings(BaseSettings):
    """
    Configuration des sauvegardes.

    Chargee depuis les variables d'environnement.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Base de donnees
    database_url: str = ""

    # Stockage local
    backup_dir: str = "./backups"

    # Retention
    backup_retention_days: int = Field(default=30, ge=0)
    backup_max_count: int = Field(default=50, ge=0)

    # Schedule (cron)
    backup_auto_enabled: bool = False
    backup_schedule: str = "0 2 * * *"  # tous les jours a 2h
    tz: str = "Europe/Rome"

    # Notifications
    backup_notifications_enabled: bool = False
    backup_notification_email: str = ""  # une ou plusieurs adresses, separees par des virgules

    # Outils externes
    pg_dump_path: str = "pg_dump"
    psql_path: str = "psql"
    backup_admin_database: str = "postgres"
    backup_dump_timeout_seconds: int = Field(default=300, gt=0)
    backup_restore_timeout_seconds: int = Field(default=600, gt=0)

    @property
    def backup_path(self) -> Path:
        """Retourne le chemin de backup."""
        return Path(self.backup_dir)

    @property
    def retention_policy(self) -> RetentionPolicy:
        """Retourne la politique de retention."""
        return RetentionPolicy(
            retention_days=self.backup_retention_days,
            max_count=self.backup_max_count,
        )

    @property
    def scheduler_config(self) -> SchedulerConfig:
        """Retourne la configuration du planificateur."""
        return SchedulerConfig(
            enabled=self.backup_auto_enabled,
            cron_expression=self.backup_schedule,
            timezone=self.tz,
        )

    @property
    def notifications_active(self) -> bool:
        """Retourne True si les notifications sont activees et adressees."""
        return bool(
            self.backup_notifications_enabled
            and self.backup_notification_email
        )


@lru_cache
def get_backup_settings() -> BackupSettings:
    """Retourne la configuration backup (cached)."""
    return BackupSettings()
