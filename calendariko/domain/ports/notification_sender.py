"""
Port NotificationSender - Interface d'envoi des notifications de backup.

Responsabilite unique:
----------------------
Definir le contrat du puits de notifications utilise par le planificateur.
"""

from abc import ABC, abstractmethod
from typing import Optional

from calendariko.domain.entities.backup import BackupRecord


class NotificationSender(ABC):
    """
    Interface pour notifier le resultat d'un backup.

    Les implementations ne doivent jamais lever: un echec d'envoi
    est journalise localement.
    """

    @abstractmethod
    def backup_succeeded(self, record: BackupRecord) -> bool:
        """
        Notifie un backup reussi.

        Args:
            record: Backup cree.

        Returns:
            True si la notification a ete envoyee.
        """
        pass

    @abstractmethod
    def backup_failed(self, error: str, context: Optional[str] = None) -> bool:
        """
        Notifie un backup en echec.

        Args:
            error: Message d'erreur.
            context: Contexte (scheduled, test).

        Returns:
            True si la notification a ete envoyee.
        """
        pass
