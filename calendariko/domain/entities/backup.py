"""
Backup Entity - Entites du sous-systeme de sauvegarde.

Responsabilite unique:
----------------------
Representer un artefact de sauvegarde et les resultats des operations
du moteur (verification, purge, statistiques).

Cycle de vie d'un BackupRecord:
-------------------------------
1. Cree par BackupService.create_backup() (outcome=SUCCESS)
2. Jamais modifie (artefact immuable une fois finalise)
3. Detruit par suppression explicite ou par la politique de retention
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Optional


BACKUP_FILENAME_PREFIX = "calendariko_backup_"
BACKUP_FILENAME_SUFFIX = ".sql"
BACKUP_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"


class BackupOrigin(Enum):
    """Declencheur d'une sauvegarde."""

    AUTOMATIC = "auto"
    MANUAL = "manual"


class BackupOutcome(Enum):
    """Resultat d'une sauvegarde."""

    SUCCESS = "success"
    FAILED = "failed"


class BackupFormat(Enum):
    """Format du contenu d'un artefact."""

    NATIVE = "sql"
    JSON = "json"


def backup_id_for(filename: str) -> str:
    """
    Identifiant derive du nom de fichier.

    Le nom porte deja l'horodatage de creation et le compteur
    anti-collision: deux artefacts distincts n'ont jamais le meme id.

    Example:
        >>> backup_id_for("calendariko_backup_2024-05-01_02-00-00_1.sql")
        'backup_2024-05-01_02-00-00_1'
    """
    stem = filename[len(BACKUP_FILENAME_PREFIX):-len(BACKUP_FILENAME_SUFFIX)]
    return f"backup_{stem}"


def backup_filename_for(created_at: datetime, counter: int = 0) -> str:
    """
    Genere le nom de fichier d'un backup.

    Le timestamp UTC est triable lexicographiquement.
    Un compteur est ajoute en cas de collision dans la meme seconde.

    Args:
        created_at: Date de creation.
        counter: Compteur anti-collision (0 = aucun suffixe).

    Returns:
        Nom de fichier, ex: calendariko_backup_2024-05-01_02-00-00.sql
    """
    stamp = created_at.astimezone(timezone.utc).strftime(BACKUP_TIMESTAMP_FORMAT)
    suffix = f"_{counter}" if counter else ""
    return f"{BACKUP_FILENAME_PREFIX}{stamp}{suffix}{BACKUP_FILENAME_SUFFIX}"


def format_size_mb(size_bytes: int) -> str:
    """Taille lisible en MB (2 decimales)."""
    return f"{size_bytes / 1024 / 1024:.2f} MB"


def is_backup_filename(name: str) -> bool:
    """Retourne True si le nom suit la convention des artefacts."""
    return name.startswith(BACKUP_FILENAME_PREFIX) and name.endswith(BACKUP_FILENAME_SUFFIX)


@dataclass(frozen=True)
class BackupRecord:
    """
    Entite BackupRecord.

    Decrit un artefact de sauvegarde present sur le stockage.

    Attributes:
        id: Identifiant opaque derive du nom de fichier.
        filename: Nom du fichier (timestamp triable).
        size_bytes: Taille du fichier (> 0 une fois finalise).
        created_at: Date de creation (UTC).
        origin: AUTOMATIC ou MANUAL (AUTOMATIC si non recuperable).
        outcome: SUCCESS pour tout backup listable.
        storage_path: Chemin de l'artefact, possede par le moteur.
        format: NATIVE ou JSON si connu a la creation, None sinon.
    """

    id: str
    filename: str
    size_bytes: int
    created_at: datetime
    storage_path: Path
    origin: BackupOrigin = BackupOrigin.AUTOMATIC
    outcome: BackupOutcome = BackupOutcome.SUCCESS
    format: Optional[BackupFormat] = None

    def age_days(self, now: Optional[datetime] = None) -> float:
        """Age du backup en jours."""
        now = now or datetime.now(timezone.utc)
        return (now - self.created_at).total_seconds() / 86400

    def to_dict(self) -> dict:
        """Serialise le record (sans le chemin de stockage)."""
        return {
            "id": self.id,
            "filename": self.filename,
            "size_bytes": self.size_bytes,
            "created_at": self.created_at,
            "origin": self.origin.value,
            "outcome": self.outcome.value,
            "format": self.format.value if self.format else None,
        }


@dataclass(frozen=True)
class RetentionPolicy:
    """
    Politique de retention des backups.

    Lue une fois par cycle de purge, jamais modifiee a l'execution.
    Les deux bornes s'appliquent telles quelles: 0 ne conserve rien.

    Attributes:
        retention_days: Age maximum en jours.
        max_count: Nombre maximum de backups conserves.
    """

    retention_days: int = 30
    max_count: int = 50

    def __post_init__(self) -> None:
        if self.retention_days < 0:
            raise ValueError("retention_days doit etre >= 0")
        if self.max_count < 0:
            raise ValueError("max_count doit etre >= 0")


@dataclass(frozen=True)
class VerificationResult:
    """
    Resultat d'une verification structurelle.

    Attributes:
        valid: True si le backup est exploitable.
        reason: Raison de l'invalidite.
        format: Format detecte.
    """

    valid: bool
    reason: Optional[str] = None
    format: Optional[BackupFormat] = None

    @classmethod
    def ok(cls, backup_format: BackupFormat) -> "VerificationResult":
        return cls(valid=True, format=backup_format)

    @classmethod
    def invalid(
        cls,
        reason: str,
        backup_format: Optional[BackupFormat] = None,
    ) -> "VerificationResult":
        return cls(valid=False, reason=reason, format=backup_format)


@dataclass
class CleanupResult:
    """
    Resultat d'un cycle de purge.

    Attributes:
        removed: Backups supprimes.
        kept: Backups conserves.
        failed: Suppressions en echec (ni supprimes ni conserves).
        removed_filenames: Noms des fichiers supprimes.
    """

    removed: int = 0
    kept: int = 0
    failed: int = 0
    removed_filenames: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class BackupStats:
    """Statistiques agregees sur les backups listes."""

    total_count: int = 0
    total_size_bytes: int = 0
    avg_size_bytes: int = 0
    oldest: Optional[datetime] = None
    newest: Optional[datetime] = None

    @classmethod
    def from_records(cls, records: list[BackupRecord]) -> "BackupStats":
        """
        Agrege une liste triee du plus recent au plus ancien.

        Args:
            records: Backups listes (plus recent en premier).

        Returns:
            BackupStats, tout a zero si aucun backup.
        """
        if not records:
            return cls()

        total_size = sum(r.size_bytes for r in records)
        return cls(
            total_count=len(records),
            total_size_bytes=total_size,
            avg_size_bytes=round(total_size / len(records)),
            oldest=records[-1].created_at,
            newest=records[0].created_at,
        )
