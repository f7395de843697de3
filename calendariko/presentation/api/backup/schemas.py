"""
Backup Schemas - Modeles Pydantic pour les endpoints backup.

Responsabilite unique:
----------------------
Definir les schemas de requete/reponse des operations de sauvegarde.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from calendariko.domain.entities.backup import (
    BackupRecord,
    BackupStats,
    CleanupResult,
    VerificationResult,
    format_size_mb,
)
from calendariko.domain.entities.schedule import ScheduleStatus


class BackupResponse(BaseModel):
    """Representation d'un backup."""

    id: str
    filename: str
    size_bytes: int
    size_formatted: str
    created_at: datetime
    origin: str
    outcome: str
    format: Optional[str] = None

    @classmethod
    def from_record(cls, record: BackupRecord) -> "BackupResponse":
        return cls(
            id=record.id,
            filename=record.filename,
            size_bytes=record.size_bytes,
            size_formatted=format_size_mb(record.size_bytes),
            created_at=record.created_at,
            origin=record.origin.value,
            outcome=record.outcome.value,
            format=record.format.value if record.format else None,
        )


class BackupListResponse(BaseModel):
    """Liste des backups (plus recent en premier)."""

    items: list[BackupResponse]
    total: int


class ScheduleStatusResponse(BaseModel):
    """Etat du planificateur."""

    enabled: bool
    cron_expression: Optional[str] = None
    timezone: str
    state: str
    next_run: Optional[datetime] = None

    @classmethod
    def from_status(cls, status: ScheduleStatus) -> "ScheduleStatusResponse":
        return cls(**status.to_dict())


class BackupStatsResponse(BaseModel):
    """Statistiques agregees."""

    total_count: int
    total_size_bytes: int
    total_size_formatted: str
    avg_size_bytes: int
    avg_size_formatted: str
    oldest: Optional[datetime] = None
    newest: Optional[datetime] = None
    scheduling: ScheduleStatusResponse

    @classmethod
    def build(cls, stats: BackupStats, status: ScheduleStatus) -> "BackupStatsResponse":
        return cls(
            total_count=stats.total_count,
            total_size_bytes=stats.total_size_bytes,
            total_size_formatted=format_size_mb(stats.total_size_bytes),
            avg_size_bytes=stats.avg_size_bytes,
            avg_size_formatted=format_size_mb(stats.avg_size_bytes),
            oldest=stats.oldest,
            newest=stats.newest,
            scheduling=ScheduleStatusResponse.from_status(status),
        )


class BackupConfigResponse(ScheduleStatusResponse):
    """Configuration de retention, planification et notifications."""

    retention_days: int
    max_count: int
    notifications_enabled: bool
    notification_email: Optional[str] = None


class VerificationResponse(BaseModel):
    """Resultat de verification d'un backup."""

    backup_id: str
    filename: str
    valid: bool
    reason: Optional[str] = None
    format: Optional[str] = None

    @classmethod
    def build(cls, record: BackupRecord, result: VerificationResult) -> "VerificationResponse":
        return cls(
            backup_id=record.id,
            filename=record.filename,
            valid=result.valid,
            reason=result.reason,
            format=result.format.value if result.format else None,
        )


class CleanupResponse(BaseModel):
    """Resultat d'une purge manuelle."""

    removed: int
    kept: int
    failed: int
    removed_filenames: list[str]
    message: str

    @classmethod
    def from_result(cls, result: CleanupResult) -> "CleanupResponse":
        return cls(
            removed=result.removed,
            kept=result.kept,
            failed=result.failed,
            removed_filenames=result.removed_filenames,
            message=f"Purge terminee: {result.removed} backup(s) supprime(s), {result.kept} conserve(s)",
        )


class RestoreRequest(BaseModel):
    """Confirmation explicite d'une restauration."""

    confirm_restore: bool = False


class RestoreResponse(BaseModel):
    """Resultat d'une restauration."""

    filename: str
    message: str
    warning: str


class BackupTestResponse(BaseModel):
    """Resultat du test du systeme de backup."""

    message: str
    backup: BackupResponse


class MessageResponse(BaseModel):
    """Reponse simple."""

    success: bool = True
    message: str
