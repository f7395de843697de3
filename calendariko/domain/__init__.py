"""
Domain Layer - Coeur metier des sauvegardes.

Ce module contient:
    - entities/: Entites du domaine (BackupRecord, RetentionPolicy)
    - services/: Services metier purs (selection des backups a purger)
    - ports/: Interfaces vers l'infrastructure (audit, notifications, snapshots)
    - exceptions: Exceptions metier

Principes:
    - AUCUNE dependance vers les couches externes
    - Logique metier pure
    - Testable sans infrastructure
"""

from calendariko.domain.exceptions import (
    BackupError,
    BackupInProgressError,
    BackupNotFoundError,
    ConfigurationError,
    DomainException,
    DumpToolError,
    FallbackExportError,
    InvalidBackupError,
    RestoreError,
    RestoreTimeoutError,
    StorageError,
)

__all__ = [
    "DomainException",
    "BackupError",
    "ConfigurationError",
    "DumpToolError",
    "RestoreTimeoutError",
    "RestoreError",
    "StorageError",
    "FallbackExportError",
    "InvalidBackupError",
    "BackupNotFoundError",
    "BackupInProgressError",
]
