"""
Backup Infrastructure - Sauvegarde automatisee.

Responsabilite:
---------------
Gerer les sauvegardes PostgreSQL manuelles et planifiees.

Features:
---------
- Dump natif pg_dump, export JSON de repli
- Retention configurable (age et nombre)
- Verification structurelle avant restauration
- Backup planifie (cron) avec notifications
"""

from calendariko.infrastructure.backup.config import BackupSettings, get_backup_settings
from calendariko.infrastructure.backup.notifier import BackupNotifier
from calendariko.infrastructure.backup.scheduler import BackupScheduler
from calendariko.infrastructure.backup.service import BackupService
from calendariko.infrastructure.backup.strategies import JsonExportStrategy, NativeDumpStrategy

__all__ = [
    "BackupSettings",
    "get_backup_settings",
    "BackupService",
    "BackupScheduler",
    "BackupNotifier",
    "NativeDumpStrategy",
    "JsonExportStrategy",
]
