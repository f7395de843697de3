"""
BackupService - Moteur de sauvegarde PostgreSQL.

Responsabilite unique:
----------------------
Creer, lister, verifier, purger, supprimer et restaurer les backups.

Usage:
------
    service = BackupService(settings, audit_repo, native, fallback)
    record = service.create_backup(BackupOrigin.MANUAL, operator_id="admin-1")
    service.restore_from_backup(record, operator_id="admin-1")

Concurrence:
------------
Creation et restauration partagent un verrou non bloquant: une seconde
operation concurrente leve BackupInProgressError au lieu d'attendre.
"""

import os
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from calendariko.domain.entities.backup import (
    BackupFormat,
    BackupOrigin,
    BackupOutcome,
    BackupRecord,
    BackupStats,
    CleanupResult,
    VerificationResult,
    backup_filename_for,
    backup_id_for,
    is_backup_filename,
)
from calendariko.domain.exceptions import (
    BackupInProgressError,
    BackupNotFoundError,
    DumpToolError,
    FallbackExportError,
    InvalidBackupError,
    StorageError,
)
from calendariko.domain.ports.audit_repository import (
    AuditAction,
    AuditEntity,
    AuditRepository,
)
from calendariko.domain.ports.backup_strategy import BackupStrategy
from calendariko.domain.services.retention_planner import RetentionPlanner
from calendariko.infrastructure.backup.config import BackupSettings
from calendariko.infrastructure.backup.strategies import parse_database_url
from calendariko.infrastructure.backup.verification import verify_artifact
from calendariko.infrastructure.logging import get_logger, operation_context

logger = get_logger(__name__)

MAX_FILENAME_ATTEMPTS = 100


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BackupService:
    """
    Moteur de sauvegarde.

    Choisit a chaque creation la strategie native (pg_dump) si elle est
    disponible, sinon l'export applicatif JSON.
    """

    def __init__(
        self,
        settings: BackupSettings,
        audit_repository: AuditRepository,
        native_strategy: BackupStrategy,
        fallback_strategy: BackupStrategy,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialise le moteur.

        Args:
            settings: Configuration des sauvegardes.
            audit_repository: Journal d'audit des operations manuelles.
            native_strategy: Strategie pg_dump/psql.
            fallback_strategy: Strategie d'export applicatif.
            clock: Horloge UTC (injectable pour les tests).
        """
        self._settings = settings
        self._audit_repo = audit_repository
        self._native = native_strategy
        self._fallback = fallback_strategy
        self._clock = clock or _utc_now
        self._lock = threading.Lock()

    @property
    def backup_dir(self) -> Path:
        return self._settings.backup_path

    def is_busy(self) -> bool:
        """True si une creation ou restauration est en cours."""
        return self._lock.locked()

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create_backup(
        self,
        origin: BackupOrigin = BackupOrigin.MANUAL,
        operator_id: Optional[str] = None,
    ) -> BackupRecord:
        """
        Cree un backup complet de la base.

        Args:
            origin: AUTOMATIC (planificateur) ou MANUAL (operateur).
            operator_id: Identifiant de l'operateur (audit si fourni).

        Returns:
            BackupRecord de l'artefact finalise.

        Raises:
            ConfigurationError: DATABASE_URL absente ou invalide.
            StorageError: Repertoire de backup inutilisable.
            DumpToolError: pg_dump en echec ou timeout.
            FallbackExportError: Export applicatif en echec.
            BackupInProgressError: Une operation est deja en cours.
        """
        if not self._lock.acquire(blocking=False):
            raise BackupInProgressError("create_backup")

        try:
            with operation_context("create_backup", origin=origin.value, operator_id=operator_id):
                record = self._create_locked(origin, operator_id)
                try:
                    self._cleanup_locked()
                except Exception as e:
                    logger.error("cleanup_failed", error=str(e))
                return record
        finally:
            self._lock.release()

    def _create_locked(
        self,
        origin: BackupOrigin,
        operator_id: Optional[str],
    ) -> BackupRecord:
        start_time = self._clock()
        target: Optional[Path] = None
        strategy: Optional[BackupStrategy] = None

        try:
            parse_database_url(self._settings.database_url)
            backup_dir = self._ensure_storage()
            target = self._reserve_target(backup_dir, start_time)
            strategy = self._select_strategy()

            logger.info(
                "backup_started",
                filename=target.name,
                strategy=strategy.name,
                origin=origin.value,
            )

            strategy.dump(target, origin)

            if target.stat().st_size == 0:
                if strategy.format is BackupFormat.NATIVE:
                    raise DumpToolError(strategy.name, "artefact vide")
                raise FallbackExportError("artefact vide")

            record = self._record_from_path(target, origin, strategy.format)

        except Exception as e:
            self._discard(target)
            logger.error(
                "backup_failed",
                filename=target.name if target else None,
                strategy=strategy.name if strategy else None,
                origin=origin.value,
                error=str(e),
            )
            if operator_id:
                self._audit(
                    AuditAction.CREATE_DATABASE_BACKUP,
                    operator_id,
                    details={
                        "filename": target.name if target else None,
                        "origin": origin.value,
                        "error": str(e),
                    },
                    success=False,
                    error_message=str(e),
                )
            raise

        duration = (self._clock() - start_time).total_seconds()
        logger.info(
            "backup_completed",
            backup_id=record.id,
            filename=record.filename,
            size_bytes=record.size_bytes,
            format=record.format.value if record.format else None,
            duration_seconds=duration,
        )

        if operator_id:
            self._audit(
                AuditAction.CREATE_DATABASE_BACKUP,
                operator_id,
                entity_id=record.id,
                details={
                    "filename": record.filename,
                    "size": record.size_bytes,
                    "format": record.format.value if record.format else None,
                    "duration_seconds": duration,
                },
            )

        return record

    def _ensure_storage(self) -> Path:
        backup_dir = self.backup_dir
        try:
            backup_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(backup_dir, str(e)) from e

        if not os.access(backup_dir, os.W_OK):
            raise StorageError(backup_dir, "non accessible en ecriture")
        return backup_dir

    def _reserve_target(self, backup_dir: Path, created_at: datetime) -> Path:
        """Cree un fichier vide au nom unique (les fichiers vides ne sont pas listes)."""
        for counter in range(MAX_FILENAME_ATTEMPTS):
            target = backup_dir / backup_filename_for(created_at, counter)
            try:
                with open(target, "x"):
                    pass
                return target
            except FileExistsError:
                continue
            except OSError as e:
                raise StorageError(backup_dir, str(e)) from e

        raise StorageError(backup_dir, "aucun nom de fichier disponible")

    def _select_strategy(self) -> BackupStrategy:
        if self._native.is_available():
            strategy = self._native
        else:
            logger.warning("native_dump_unavailable", fallback=self._fallback.name)
            strategy = self._fallback

        logger.info("backup_strategy_selected", strategy=strategy.name)
        return strategy

    @staticmethod
    def _discard(target: Optional[Path]) -> None:
        if target is None:
            return
        try:
            target.unlink(missing_ok=True)
        except OSError as e:
            logger.error("partial_backup_cleanup_failed", filename=target.name, error=str(e))

    # ------------------------------------------------------------------
    # Lecture
    # ------------------------------------------------------------------

    def list_backups(self) -> List[BackupRecord]:
        """
        Liste les backups disponibles.

        Returns:
            BackupRecords du plus recent au plus ancien ([] si le
            repertoire est absent ou illisible).
        """
        backup_dir = self.backup_dir
        try:
            entries = [p for p in backup_dir.iterdir() if is_backup_filename(p.name)]
        except OSError:
            return []

        records = []
        for path in entries:
            try:
                record = self._record_from_path(path)
            except OSError:
                continue
            if record.size_bytes > 0:
                records.append(record)

        records.sort(key=lambda r: (r.created_at, r.filename), reverse=True)
        return records

    def get_backup(self, backup_id: str) -> BackupRecord:
        """
        Retrouve un backup par identifiant.

        Raises:
            BackupNotFoundError: Identifiant inconnu.
        """
        for record in self.list_backups():
            if record.id == backup_id:
                return record
        raise BackupNotFoundError(backup_id)

    def verify_backup(self, record: BackupRecord) -> VerificationResult:
        """Verification structurelle (ne leve jamais)."""
        result = verify_artifact(record.storage_path)
        logger.info(
            "backup_verified",
            filename=record.filename,
            valid=result.valid,
            format=result.format.value if result.format else None,
            reason=result.reason,
        )
        return result

    def get_stats(self) -> BackupStats:
        return BackupStats.from_records(self.list_backups())

    # ------------------------------------------------------------------
    # Restauration
    # ------------------------------------------------------------------

    def restore_from_backup(self, record: BackupRecord, operator_id: Optional[str]) -> None:
        """
        Restaure la base depuis un backup.

        Args:
            record: Backup a restaurer.
            operator_id: Identifiant de l'operateur.

        Raises:
            InvalidBackupError: Le backup ne passe pas la verification.
            DumpToolError: psql en echec.
            RestoreTimeoutError: Restauration trop longue.
            RestoreError: Import JSON en echec.
            BackupInProgressError: Une operation est deja en cours.

        Warning:
            Cette operation ecrase les donnees existantes!
        """
        if not self._lock.acquire(blocking=False):
            raise BackupInProgressError("restore_from_backup")

        try:
            with operation_context("restore_from_backup", operator_id=operator_id):
                self._restore_locked(record, operator_id)
        finally:
            self._lock.release()

    def _restore_locked(self, record: BackupRecord, operator_id: Optional[str]) -> None:
        start_time = self._clock()
        details: Dict[str, Any] = {"filename": record.filename, "size": record.size_bytes}

        try:
            verification = self.verify_backup(record)
            if not verification.valid:
                raise InvalidBackupError(record.filename, verification.reason)

            strategy = self._native if verification.format is BackupFormat.NATIVE else self._fallback
            details["format"] = verification.format.value

            logger.warning("restore_started", filename=record.filename, strategy=strategy.name)
            strategy.restore(record.storage_path)

        except Exception as e:
            logger.error("restore_failed", filename=record.filename, error=str(e))
            self._audit(
                AuditAction.RESTORE_DATABASE_BACKUP,
                operator_id,
                entity_id=record.id,
                details={**details, "error": str(e)},
                success=False,
                error_message=str(e),
            )
            raise

        duration = (self._clock() - start_time).total_seconds()
        logger.info("restore_completed", filename=record.filename, duration_seconds=duration)

        self._audit(
            AuditAction.RESTORE_DATABASE_BACKUP,
            operator_id,
            entity_id=record.id,
            details={**details, "duration_seconds": duration},
        )

    # ------------------------------------------------------------------
    # Purge et suppression
    # ------------------------------------------------------------------

    def cleanup_old_backups(self, operator_id: Optional[str] = None) -> CleanupResult:
        """
        Applique la politique de retention.

        Args:
            operator_id: Identifiant de l'operateur (audit si fourni).

        Returns:
            CleanupResult (removed, kept, failed).

        Raises:
            BackupInProgressError: Une creation ou restauration est en cours.
        """
        if not self._lock.acquire(blocking=False):
            raise BackupInProgressError("cleanup_old_backups")

        try:
            with operation_context("cleanup_old_backups", operator_id=operator_id):
                result = self._cleanup_locked()
        finally:
            self._lock.release()

        if operator_id:
            self._audit(
                AuditAction.CLEANUP_DATABASE_BACKUPS,
                operator_id,
                details={
                    "removed": result.removed,
                    "kept": result.kept,
                    "failed": result.failed,
                    "filenames": result.removed_filenames,
                },
                success=result.failed == 0,
            )
        return result

    def _cleanup_locked(self) -> CleanupResult:
        planner = RetentionPlanner(self._settings.retention_policy)
        plan = planner.plan(self.list_backups(), self._clock())
        result = CleanupResult(kept=len(plan.keep))

        for record in plan.remove:
            try:
                record.storage_path.unlink()
            except OSError as e:
                result.failed += 1
                logger.error("backup_delete_failed", filename=record.filename, error=str(e))
                continue
            result.removed += 1
            result.removed_filenames.append(record.filename)
            logger.info("backup_deleted", filename=record.filename, reason="retention")

        logger.info(
            "cleanup_completed",
            removed=result.removed,
            kept=result.kept,
            failed=result.failed,
            retention_days=planner.policy.retention_days,
            max_count=planner.policy.max_count,
        )
        return result

    def delete_backup(self, backup_id: str, operator_id: Optional[str] = None) -> BackupRecord:
        """
        Supprime un backup.

        Raises:
            BackupNotFoundError: Identifiant inconnu.
            StorageError: Suppression impossible.
        """
        record = self.get_backup(backup_id)

        try:
            record.storage_path.unlink()
        except OSError as e:
            logger.error("backup_delete_failed", filename=record.filename, error=str(e))
            self._audit(
                AuditAction.DELETE_DATABASE_BACKUP,
                operator_id,
                entity_id=record.id,
                details={"filename": record.filename, "error": str(e)},
                success=False,
                error_message=str(e),
            )
            raise StorageError(record.storage_path, str(e)) from e

        logger.info("backup_deleted", filename=record.filename, reason="manual")
        self._audit(
            AuditAction.DELETE_DATABASE_BACKUP,
            operator_id,
            entity_id=record.id,
            details={"filename": record.filename, "size": record.size_bytes},
        )
        return record

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _record_from_path(
        path: Path,
        origin: BackupOrigin = BackupOrigin.AUTOMATIC,
        backup_format: Optional[BackupFormat] = None,
    ) -> BackupRecord:
        stat = path.stat()
        created_at = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)
        return BackupRecord(
            id=backup_id_for(path.name),
            filename=path.name,
            size_bytes=stat.st_size,
            created_at=created_at,
            storage_path=path,
            origin=origin,
            outcome=BackupOutcome.SUCCESS,
            format=backup_format,
        )

    def _audit(
        self,
        action: str,
        operator_id: Optional[str],
        entity_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        success: bool = True,
        error_message: Optional[str] = None,
    ) -> None:
        """Ecrit dans le journal d'audit sans jamais masquer le resultat principal."""
        try:
            self._audit_repo.log(
                action=action,
                entity=AuditEntity.SYSTEM,
                admin_id=operator_id,
                entity_id=entity_id,
                details=details,
                success=success,
                error_message=error_message,
            )
        except Exception as e:
            logger.error("audit_log_failed", action=action, error=str(e))
