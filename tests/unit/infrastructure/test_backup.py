"""
Tests unitaires pour le service de backup.

Teste la configuration et le moteur de sauvegarde.
"""

import shutil
import threading
from pathlib import Path

import pytest

from calendariko.domain.entities.backup import BackupFormat, BackupOrigin, BackupOutcome
from calendariko.domain.exceptions import (
    BackupInProgressError,
    BackupNotFoundError,
    ConfigurationError,
    DumpToolError,
    FallbackExportError,
    InvalidBackupError,
    StorageError,
)
from calendariko.domain.ports.audit_repository import AuditAction
from calendariko.infrastructure.backup.config import BackupSettings
from calendariko.infrastructure.backup.service import BackupService


class TestBackupSettings:
    """Tests pour la configuration backup."""

    def test_default_values(self, monkeypatch):
        """BackupSettings a des valeurs par defaut."""
        for name in ("BACKUP_DIR", "BACKUP_RETENTION_DAYS", "BACKUP_MAX_COUNT",
                     "BACKUP_SCHEDULE", "TZ", "BACKUP_AUTO_ENABLED"):
            monkeypatch.delenv(name, raising=False)

        settings = BackupSettings(_env_file=None)

        assert settings.backup_dir == "./backups"
        assert settings.backup_retention_days == 30
        assert settings.backup_max_count == 50
        assert settings.backup_schedule == "0 2 * * *"
        assert settings.tz == "Europe/Rome"
        assert settings.backup_auto_enabled is False
        assert settings.backup_dump_timeout_seconds == 300
        assert settings.backup_restore_timeout_seconds == 600

    def test_reads_environment(self, monkeypatch):
        """Les variables d'environnement sont prises en compte."""
        monkeypatch.setenv("BACKUP_RETENTION_DAYS", "7")
        monkeypatch.setenv("BACKUP_AUTO_ENABLED", "true")
        monkeypatch.setenv("BACKUP_SCHEDULE", "30 3 * * 1")

        settings = BackupSettings(_env_file=None)

        assert settings.retention_policy.retention_days == 7
        assert settings.scheduler_config.enabled is True
        assert settings.scheduler_config.cron_expression == "30 3 * * 1"

    def test_backup_path_returns_path(self):
        """backup_path retourne un Path."""
        settings = BackupSettings(_env_file=None, backup_dir="/custom/path")

        assert isinstance(settings.backup_path, Path)
        assert str(settings.backup_path) == "/custom/path"

    def test_negative_retention_rejected(self):
        """Une retention negative est refusee."""
        with pytest.raises(Exception):
            BackupSettings(_env_file=None, backup_retention_days=-1)

    def test_notifications_need_email(self):
        """Les notifications exigent une adresse."""
        settings = BackupSettings(_env_file=None, backup_notifications_enabled=True)
        assert settings.notifications_active is False

        settings = BackupSettings(
            _env_file=None,
            backup_notifications_enabled=True,
            backup_notification_email="ops@calendariko.app",
        )
        assert settings.notifications_active is True


class TestCreateBackup:
    """Tests pour create_backup."""

    def test_native_backup(self, backup_service, backup_dir, native_strategy, audit_repo):
        """Cree un artefact natif non vide et audite l'operation manuelle."""
        record = backup_service.create_backup(BackupOrigin.MANUAL, operator_id="admin-1")

        assert record.outcome is BackupOutcome.SUCCESS
        assert record.origin is BackupOrigin.MANUAL
        assert record.format is BackupFormat.NATIVE
        assert record.size_bytes > 0
        assert record.storage_path.parent == backup_dir
        assert record.filename.startswith("calendariko_backup_")
        assert len(native_strategy.dumped) == 1

        entries = audit_repo.find_by_action(AuditAction.CREATE_DATABASE_BACKUP)
        assert len(entries) == 1
        assert entries[0]["success"] is True
        assert entries[0]["admin_id"] == "admin-1"
        assert entries[0]["details"]["filename"] == record.filename

    def test_created_backup_is_listed(self, backup_service):
        """Le backup cree apparait dans la liste avec le meme identifiant."""
        record = backup_service.create_backup(BackupOrigin.MANUAL)

        listed = backup_service.list_backups()

        assert [r.id for r in listed] == [record.id]
        assert backup_service.get_backup(record.id).filename == record.filename

    def test_automatic_backup_not_audited(self, backup_service, audit_repo):
        """Un backup planifie sans operateur n'est pas audite."""
        backup_service.create_backup(BackupOrigin.AUTOMATIC)

        assert audit_repo.all() == []

    def test_fallback_when_pg_dump_missing(self, backup_service, native_strategy, json_strategy):
        """Sans pg_dump, l'export JSON est utilise et verifie comme JSON."""
        native_strategy.available = False

        record = backup_service.create_backup(BackupOrigin.MANUAL)

        assert record.format is BackupFormat.JSON
        assert native_strategy.dumped == []
        assert len(json_strategy.dumped) == 1

        result = backup_service.verify_backup(record)
        assert result.valid
        assert result.format is BackupFormat.JSON

    def test_round_trip_verifies(self, backup_service):
        """Un backup fraichement cree passe la verification."""
        record = backup_service.create_backup()

        assert backup_service.verify_backup(record).valid

    def test_missing_database_url(self, backup_settings, audit_repo, native_strategy, json_strategy):
        """DATABASE_URL absente: ConfigurationError, aucun artefact."""
        settings = backup_settings.model_copy(update={"database_url": ""})
        service = BackupService(settings, audit_repo, native_strategy, json_strategy)

        with pytest.raises(ConfigurationError):
            service.create_backup()

        assert native_strategy.dumped == []
        assert service.list_backups() == []

    def test_database_url_without_name(self, backup_settings, audit_repo, native_strategy, json_strategy):
        """URL sans nom de base: ConfigurationError."""
        settings = backup_settings.model_copy(update={"database_url": "postgresql://u:p@host:5432/"})
        service = BackupService(settings, audit_repo, native_strategy, json_strategy)

        with pytest.raises(ConfigurationError):
            service.create_backup()

    def test_failure_leaves_no_artifact(self, backup_service, backup_dir, native_strategy, audit_repo):
        """Echec de pg_dump: l'artefact partiel est supprime, l'echec audite."""
        native_strategy.error = DumpToolError("pg_dump", "connection refused", returncode=1)

        with pytest.raises(DumpToolError):
            backup_service.create_backup(BackupOrigin.MANUAL, operator_id="admin-1")

        assert list(backup_dir.iterdir()) == []
        assert backup_service.list_backups() == []

        entries = audit_repo.find_by_action(AuditAction.CREATE_DATABASE_BACKUP)
        assert entries[0]["success"] is False
        assert "connection refused" in entries[0]["error_message"]

    def test_fallback_failure_names_entity(self, backup_service, native_strategy, json_strategy, backup_dir):
        """Echec de l'export JSON: FallbackExportError, aucun artefact."""
        native_strategy.available = False
        json_strategy.content = ""
        json_strategy.error = FallbackExportError("db down", entity="events")

        with pytest.raises(FallbackExportError) as exc_info:
            backup_service.create_backup()

        assert exc_info.value.entity == "events"
        assert list(backup_dir.iterdir()) == []

    def test_empty_artifact_is_failure(self, backup_service, native_strategy, backup_dir):
        """Un artefact vide est traite comme un echec."""
        native_strategy.content = ""

        with pytest.raises(DumpToolError):
            backup_service.create_backup()

        assert list(backup_dir.iterdir()) == []

    def test_storage_not_writable(self, backup_settings, audit_repo, native_strategy, json_strategy, tmp_path):
        """Repertoire inutilisable: StorageError."""
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("x")
        settings = backup_settings.model_copy(update={"backup_dir": str(blocker / "backups")})
        service = BackupService(settings, audit_repo, native_strategy, json_strategy)

        with pytest.raises(StorageError):
            service.create_backup()

    def test_same_second_gets_unique_filename(self, backup_service):
        """Deux backups dans la meme seconde ont des noms distincts."""
        first = backup_service.create_backup()
        second = backup_service.create_backup()

        assert first.filename != second.filename
        assert first.storage_path.exists()
        assert second.storage_path.exists()

    def test_audit_failure_does_not_mask_success(self, backup_settings, native_strategy, json_strategy):
        """Une panne du journal d'audit n'empeche pas le backup."""

        class BrokenAudit:
            def log(self, **kwargs):
                raise RuntimeError("audit down")

        service = BackupService(backup_settings, BrokenAudit(), native_strategy, json_strategy)

        record = service.create_backup(BackupOrigin.MANUAL, operator_id="admin-1")

        assert record.size_bytes > 0

    def test_create_runs_cleanup(self, backup_settings, audit_repo, native_strategy, json_strategy, write_artifact):
        """La purge est appliquee apres chaque creation."""
        old = write_artifact(age_days=45)
        service = BackupService(backup_settings, audit_repo, native_strategy, json_strategy)

        service.create_backup()

        assert not old.exists()
        assert len(service.list_backups()) == 1

    def test_concurrent_create_rejected(self, backup_service, native_strategy):
        """Une seconde operation pendant un backup leve BackupInProgressError."""
        started = threading.Event()
        release = threading.Event()
        errors = []

        def slow_dump(target):
            started.set()
            release.wait(timeout=5)

        native_strategy.on_dump = slow_dump

        def run():
            try:
                backup_service.create_backup()
            except Exception as e:
                errors.append(e)

        worker = threading.Thread(target=run)
        worker.start()
        assert started.wait(timeout=5)

        try:
            assert backup_service.is_busy()
            with pytest.raises(BackupInProgressError):
                backup_service.create_backup()
        finally:
            release.set()
            worker.join(timeout=5)

        assert errors == []
        assert len(backup_service.list_backups()) == 1


class TestListBackups:
    """Tests pour list_backups."""

    def test_missing_directory(self, backup_service):
        """Repertoire absent: liste vide."""
        assert backup_service.list_backups() == []

    def test_newest_first_and_filters(self, backup_service, backup_dir, write_artifact):
        """Tri du plus recent au plus ancien, fichiers etrangers et vides ignores."""
        older = write_artifact(age_days=3)
        newer = write_artifact(age_days=1)
        (backup_dir / "notes.txt").write_text("hello")
        (backup_dir / "calendariko_backup_2000-01-01_00-00-00.sql").touch()

        records = backup_service.list_backups()

        assert [r.filename for r in records] == [newer.name, older.name]
        assert all(r.origin is BackupOrigin.AUTOMATIC for r in records)
        assert all(r.format is None for r in records)

    def test_same_mtime_distinct_ids(self, backup_service, write_artifact):
        """Deux artefacts de meme mtime ont des ids distincts, chacun retrouvable."""
        original = write_artifact(age_days=2)
        copy = original.with_name(original.name.replace(".sql", "_1.sql"))
        shutil.copy2(original, copy)

        records = backup_service.list_backups()

        assert len({r.id for r in records}) == 2
        for record in records:
            assert backup_service.get_backup(record.id).filename == record.filename

    def test_get_backup_unknown(self, backup_service):
        """Identifiant inconnu: BackupNotFoundError."""
        with pytest.raises(BackupNotFoundError):
            backup_service.get_backup("backup_0")


class TestVerifyBackup:
    """Tests pour verify_backup."""

    def test_native_without_create_table(self, backup_service, write_artifact):
        """Un dump sans CREATE TABLE est invalide."""
        write_artifact(age_days=1, content="-- empty dump\nSET statement_timeout = 0;\n")
        record = backup_service.list_backups()[0]

        result = backup_service.verify_backup(record)

        assert not result.valid
        assert result.format is BackupFormat.NATIVE

    def test_deleted_file_is_invalid(self, backup_service, write_artifact):
        """Un fichier disparu est invalide (pas d'exception)."""
        write_artifact(age_days=1)
        record = backup_service.list_backups()[0]
        record.storage_path.unlink()

        assert not backup_service.verify_backup(record).valid


class TestRestoreFromBackup:
    """Tests pour restore_from_backup."""

    def test_restore_native(self, backup_service, native_strategy, write_artifact, audit_repo):
        """Un dump natif est restaure via la strategie native et audite."""
        path = write_artifact(age_days=1)
        record = backup_service.list_backups()[0]

        backup_service.restore_from_backup(record, operator_id="admin-1")

        assert native_strategy.restored == [path]
        entries = audit_repo.find_by_action(AuditAction.RESTORE_DATABASE_BACKUP)
        assert entries[0]["success"] is True

    def test_restore_json_uses_fallback(self, backup_service, json_strategy, native_strategy, write_artifact, json_document):
        """Un export JSON est restaure via la strategie JSON."""
        path = write_artifact(age_days=1, content=json_document())
        record = backup_service.list_backups()[0]

        backup_service.restore_from_backup(record, operator_id="admin-1")

        assert json_strategy.restored == [path]
        assert native_strategy.restored == []

    def test_invalid_backup_never_restored(self, backup_service, native_strategy, json_strategy, write_artifact, audit_repo):
        """Verification en echec: InvalidBackupError avant toute action destructive."""
        write_artifact(age_days=1, content='{"metadata": {}}')
        record = backup_service.list_backups()[0]

        with pytest.raises(InvalidBackupError):
            backup_service.restore_from_backup(record, operator_id="admin-1")

        assert native_strategy.restored == []
        assert json_strategy.restored == []
        entries = audit_repo.find_by_action(AuditAction.RESTORE_DATABASE_BACKUP)
        assert entries[0]["success"] is False

    def test_restore_failure_audited(self, backup_service, native_strategy, write_artifact, audit_repo):
        """Echec de psql: erreur propagee et auditee."""
        native_strategy.restore_error = DumpToolError("psql", "syntax error", returncode=3)
        write_artifact(age_days=1)
        record = backup_service.list_backups()[0]

        with pytest.raises(DumpToolError):
            backup_service.restore_from_backup(record, operator_id="admin-1")

        entries = audit_repo.find_by_action(AuditAction.RESTORE_DATABASE_BACKUP)
        assert entries[0]["success"] is False
        assert "syntax error" in entries[0]["error_message"]


class TestCleanupOldBackups:
    """Tests pour cleanup_old_backups."""

    def _service(self, backup_settings, audit_repo, native_strategy, json_strategy, days, count):
        settings = backup_settings.model_copy(
            update={"backup_retention_days": days, "backup_max_count": count}
        )
        return BackupService(settings, audit_repo, native_strategy, json_strategy)

    def test_scenario_keeps_two_most_recent(
        self, backup_settings, audit_repo, native_strategy, json_strategy, write_artifact
    ):
        """[1, 10, 40, 50] jours avec 30j/2 max: conserve 1 et 10."""
        paths = {age: write_artifact(age_days=age) for age in (1, 10, 40, 50)}
        service = self._service(backup_settings, audit_repo, native_strategy, json_strategy, 30, 2)

        result = service.cleanup_old_backups()

        assert result.removed == 2
        assert result.kept == 2
        assert result.failed == 0
        assert paths[1].exists() and paths[10].exists()
        assert not paths[40].exists() and not paths[50].exists()

    @pytest.mark.parametrize("days,count", [(30, 0), (0, 50)])
    def test_zero_bound_removes_everything(
        self, backup_settings, audit_repo, native_strategy, json_strategy, write_artifact, days, count
    ):
        """Une borne a 0 ne conserve aucun backup."""
        paths = [write_artifact(age_days=age) for age in (1, 40, 400)]
        service = self._service(backup_settings, audit_repo, native_strategy, json_strategy, days, count)

        result = service.cleanup_old_backups()

        assert result.removed == 3
        assert result.kept == 0
        assert not any(path.exists() for path in paths)
        assert service.list_backups() == []

    def test_cleanup_is_idempotent(
        self, backup_settings, audit_repo, native_strategy, json_strategy, write_artifact
    ):
        """Une seconde purge ne supprime rien."""
        for age in (1, 2, 3, 4, 45):
            write_artifact(age_days=age)
        service = self._service(backup_settings, audit_repo, native_strategy, json_strategy, 30, 3)

        service.cleanup_old_backups()
        second = service.cleanup_old_backups()

        assert second.removed == 0
        assert second.kept == 3

    def test_deletion_failure_counted(
        self, backup_settings, audit_repo, native_strategy, json_strategy, write_artifact, monkeypatch
    ):
        """Une suppression en echec n'est comptee ni supprimee ni conservee."""
        write_artifact(age_days=1)
        stale = write_artifact(age_days=60)
        service = self._service(backup_settings, audit_repo, native_strategy, json_strategy, 30, 10)

        real_unlink = Path.unlink

        def flaky_unlink(self, *args, **kwargs):
            if self == stale:
                raise PermissionError("read-only")
            return real_unlink(self, *args, **kwargs)

        monkeypatch.setattr(Path, "unlink", flaky_unlink)

        result = service.cleanup_old_backups()

        assert result.removed == 0
        assert result.kept == 1
        assert result.failed == 1

    def test_manual_cleanup_audited(self, backup_service, audit_repo, write_artifact):
        """Une purge demandee par un operateur est auditee."""
        write_artifact(age_days=90)

        result = backup_service.cleanup_old_backups(operator_id="admin-1")

        assert result.removed == 1
        entries = audit_repo.find_by_action(AuditAction.CLEANUP_DATABASE_BACKUPS)
        assert entries[0]["details"]["removed"] == 1


class TestStatsAndDelete:
    """Tests pour get_stats et delete_backup."""

    def test_stats(self, backup_service, write_artifact):
        """Statistiques agregees sur les backups listes."""
        write_artifact(age_days=1, content="CREATE TABLE a();\n")
        write_artifact(age_days=2, content="CREATE TABLE bb();\n")

        stats = backup_service.get_stats()

        assert stats.total_count == 2
        assert stats.total_size_bytes == 18 + 19
        assert stats.avg_size_bytes == round(37 / 2)
        assert stats.newest > stats.oldest

    def test_stats_empty(self, backup_service):
        """Aucun backup: statistiques a zero."""
        stats = backup_service.get_stats()

        assert stats.total_count == 0
        assert stats.oldest is None

    def test_delete(self, backup_service, write_artifact, audit_repo):
        """delete_backup supprime le fichier et audite."""
        path = write_artifact(age_days=1)
        record = backup_service.list_backups()[0]

        deleted = backup_service.delete_backup(record.id, operator_id="admin-1")

        assert deleted.filename == path.name
        assert not path.exists()
        entries = audit_repo.find_by_action(AuditAction.DELETE_DATABASE_BACKUP)
        assert entries[0]["details"] == {"filename": path.name, "size": record.size_bytes}

    def test_delete_unknown_leaves_listing_unchanged(self, backup_service, write_artifact):
        """Identifiant inconnu: BackupNotFoundError, liste inchangee."""
        write_artifact(age_days=1)
        before = backup_service.list_backups()

        with pytest.raises(BackupNotFoundError):
            backup_service.delete_backup("backup_unknown", operator_id="admin-1")

        assert backup_service.list_backups() == before
