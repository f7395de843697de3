"""
Exceptions metier du domaine.

Ces exceptions representent les echecs du sous-systeme de sauvegarde
et sont independantes de l'infrastructure (pg_dump, SQLAlchemy, HTTP).

Hierarchie:
-----------
    DomainException
    └── BackupError
        ├── ConfigurationError      (connexion absente ou invalide)
        ├── DumpToolError           (pg_dump/psql en echec)
        ├── RestoreTimeoutError     (restauration trop longue)
        ├── StorageError            (repertoire de backup inutilisable)
        ├── FallbackExportError     (export applicatif en echec)
        ├── InvalidBackupError      (garde avant restauration)
        ├── RestoreError            (import JSON en echec)
        ├── BackupNotFoundError     (identifiant inconnu)
        └── BackupInProgressError   (une operation est deja en cours)
"""

from typing import Any


class DomainException(Exception):
    """Exception de base pour toutes les erreurs du domaine."""

    def __init__(self, message: str, code: str | None = None) -> None:
        """
        Initialise une exception du domaine.

        Args:
            message: Message d'erreur descriptif.
            code: Code d'erreur optionnel pour identification programmatique.
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class BackupError(DomainException):
    """Base des erreurs du sous-systeme de sauvegarde."""

    suggestion: str | None = None


class ConfigurationError(BackupError):
    """Leve quand la connexion a la base n'est pas configurable."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="BACKUP_CONFIGURATION")


class DumpToolError(BackupError):
    """Leve quand pg_dump ou psql echoue (code retour non nul ou timeout)."""

    suggestion = (
        "Verifier que pg_dump est installe et accessible, "
        "et que DATABASE_URL est configuree correctement."
    )

    def __init__(
        self,
        tool: str,
        message: str,
        returncode: int | None = None,
    ) -> None:
        super().__init__(f"{tool}: {message}", code="DUMP_TOOL_FAILED")
        self.tool = tool
        self.returncode = returncode


class RestoreTimeoutError(BackupError):
    """Leve quand la restauration depasse le plafond de duree."""

    def __init__(self, filename: str, timeout_seconds: float) -> None:
        super().__init__(
            f"Restauration de '{filename}' interrompue apres {timeout_seconds:.0f} secondes.",
            code="RESTORE_TIMEOUT"
        )
        self.filename = filename
        self.timeout_seconds = timeout_seconds


class StorageError(BackupError):
    """Leve quand le repertoire des backups n'est pas accessible en ecriture."""

    def __init__(self, path: Any, reason: str | None = None) -> None:
        message = f"Repertoire de backup inutilisable: '{path}'."
        if reason:
            message += f" Raison: {reason}"
        super().__init__(message, code="BACKUP_STORAGE")
        self.path = path


class FallbackExportError(BackupError):
    """Leve quand l'export applicatif (JSON) echoue."""

    def __init__(self, message: str, entity: str | None = None) -> None:
        full_message = message
        if entity:
            full_message = f"Export de '{entity}': {message}"
        super().__init__(full_message, code="FALLBACK_EXPORT_FAILED")
        self.entity = entity


class InvalidBackupError(BackupError):
    """Leve quand un backup ne passe pas la verification avant restauration."""

    def __init__(self, filename: str, reason: str | None = None) -> None:
        message = f"Backup non valide: '{filename}'."
        if reason:
            message += f" Raison: {reason}"
        super().__init__(message, code="INVALID_BACKUP")
        self.filename = filename
        self.reason = reason


class BackupNotFoundError(BackupError):
    """Leve quand un backup n'est pas trouve."""

    def __init__(self, backup_id: str) -> None:
        super().__init__(
            f"Backup non trouve: '{backup_id}'",
            code="BACKUP_NOT_FOUND"
        )
        self.backup_id = backup_id


class BackupInProgressError(BackupError):
    """Leve quand une sauvegarde ou restauration est deja en cours."""

    def __init__(self, operation: str) -> None:
        super().__init__(
            f"Operation '{operation}' refusee: une sauvegarde ou restauration est deja en cours.",
            code="BACKUP_IN_PROGRESS"
        )
        self.operation = operation


class RestoreError(BackupError):
    """Leve quand l'import d'un export applicatif echoue."""

    def __init__(self, filename: str, reason: str) -> None:
        super().__init__(
            f"Restauration de '{filename}' en echec: {reason}",
            code="RESTORE_FAILED"
        )
        self.filename = filename
        self.reason = reason
