"""
Entites du domaine.

Entites principales:
    - BackupRecord: Artefact de sauvegarde present sur le stockage
    - RetentionPolicy: Regles d'age et de nombre pour la purge
    - SchedulerConfig / ScheduleStatus: Configuration et etat du cron
"""

from calendariko.domain.entities.backup import (
    BackupFormat,
    BackupOrigin,
    BackupOutcome,
    BackupRecord,
    BackupStats,
    CleanupResult,
    RetentionPolicy,
    VerificationResult,
)
from calendariko.domain.entities.schedule import (
    ScheduleStatus,
    SchedulerConfig,
    SchedulerState,
)

__all__ = [
    "BackupFormat",
    "BackupOrigin",
    "BackupOutcome",
    "BackupRecord",
    "BackupStats",
    "CleanupResult",
    "RetentionPolicy",
    "VerificationResult",
    "ScheduleStatus",
    "SchedulerConfig",
    "SchedulerState",
]
