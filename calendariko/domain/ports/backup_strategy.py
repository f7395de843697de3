"""
Port BackupStrategy - Strategie de production/restauration d'artefact.

Responsabilite unique:
----------------------
Abstraire le choix entre dump natif (pg_dump/psql) et export applicatif
JSON. La strategie est choisie une fois par appel selon la sonde
is_available().
"""

from abc import ABC, abstractmethod
from pathlib import Path

from calendariko.domain.entities.backup import BackupFormat, BackupOrigin


class BackupStrategy(ABC):
    """Interface commune aux strategies de sauvegarde."""

    format: BackupFormat

    @property
    @abstractmethod
    def name(self) -> str:
        """Nom lisible pour les logs."""
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Sonde de disponibilite (ex: pg_dump --version)."""
        pass

    @abstractmethod
    def dump(self, target: Path, origin: BackupOrigin) -> None:
        """
        Ecrit l'artefact complet dans target.

        Raises:
            BackupError: En cas d'echec (l'appelant supprime le fichier partiel).
        """
        pass

    @abstractmethod
    def restore(self, source: Path) -> None:
        """
        Restaure la base depuis source (destructif).

        Raises:
            BackupError: En cas d'echec.
        """
        pass
