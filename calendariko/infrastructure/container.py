"""
Container d'injection de dependances.

Ce module assemble le moteur de sauvegarde, le planificateur et
leurs adapters (base, audit, email) a partir de la configuration.
"""

from dataclasses import dataclass
from typing import Optional

from calendariko.domain.ports.audit_repository import AuditRepository
from calendariko.infrastructure.backup.config import BackupSettings, get_backup_settings
from calendariko.infrastructure.backup.notifier import BackupNotifier
from calendariko.infrastructure.backup.scheduler import BackupScheduler
from calendariko.infrastructure.backup.service import BackupService
from calendariko.infrastructure.backup.strategies import JsonExportStrategy, NativeDumpStrategy
from calendariko.infrastructure.email import EmailService
from calendariko.infrastructure.persistence.audit import SqlAlchemyAuditRepository
from calendariko.infrastructure.persistence.database import DatabaseManager
from calendariko.infrastructure.persistence.snapshot_repository import (
    SqlAlchemySnapshotRepository,
)


@dataclass
class BackupContainer:
    """
    Conteneur d'injection de dependances du sous-systeme de backup.

    Example:
        >>> container = BackupContainer.create()
        >>> container.scheduler.start()
        >>> container.service.list_backups()
    """

    settings: BackupSettings
    db: DatabaseManager
    audit_repository: AuditRepository
    service: BackupService
    scheduler: BackupScheduler
    notifier: BackupNotifier

    @classmethod
    def create(
        cls,
        settings: Optional[BackupSettings] = None,
        db: Optional[DatabaseManager] = None,
        audit_repository: Optional[AuditRepository] = None,
        email_service: Optional[EmailService] = None,
    ) -> "BackupContainer":
        """
        Factory pour creer un conteneur avec toutes les dependances.

        Args:
            settings: Configuration (defaut: get_backup_settings()).
            db: DatabaseManager (defaut: construit depuis DATABASE_URL).
            audit_repository: Journal d'audit (defaut: table audit_logs).
            email_service: Service email (defaut: SendGrid via SENDGRID_API_KEY).

        Returns:
            BackupContainer configure.
        """
        settings = settings or get_backup_settings()
        db = db or DatabaseManager(settings.database_url or None)
        audit_repository = audit_repository or SqlAlchemyAuditRepository(db)

        service = BackupService(
            settings=settings,
            audit_repository=audit_repository,
            native_strategy=NativeDumpStrategy(settings, db),
            fallback_strategy=JsonExportStrategy(SqlAlchemySnapshotRepository(db)),
        )
        notifier = BackupNotifier(settings, email_service or EmailService())
        scheduler = BackupScheduler(service, notifier, settings.scheduler_config)

        return cls(
            settings=settings,
            db=db,
            audit_repository=audit_repository,
            service=service,
            scheduler=scheduler,
            notifier=notifier,
        )

    def shutdown(self) -> None:
        """Arrete le planificateur et ferme le pool de connexions."""
        self.scheduler.stop()
        self.db.dispose()
