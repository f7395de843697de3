"""
Port AuditRepository - Interface pour le journal d'audit.

Definit le contrat pour l'enregistrement des actions d'administration.
Chaque operation sensible sur les sauvegardes est tracee.

Responsabilite unique:
----------------------
Enregistrer et recuperer les logs d'audit.

Actions tracees:
----------------
- Creation manuelle de backup (succes et echec)
- Restauration (toujours, succes et echec)
- Suppression de backup
- Purge manuelle
"""

from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Any


class AuditAction:
    """Constantes pour les types d'actions d'audit."""

    CREATE_DATABASE_BACKUP = "CREATE_DATABASE_BACKUP"
    RESTORE_DATABASE_BACKUP = "RESTORE_DATABASE_BACKUP"
    DELETE_DATABASE_BACKUP = "DELETE_DATABASE_BACKUP"
    CLEANUP_DATABASE_BACKUPS = "CLEANUP_DATABASE_BACKUPS"


class AuditEntity:
    """Constantes pour les types d'entites auditees."""

    SYSTEM = "SYSTEM"


class AuditRepository(ABC):
    """
    Interface Repository pour les logs d'audit.

    Contrat pour la tracabilite des actions.
    Implementee par SqlAlchemyAuditRepository et MemoryAuditRepository.
    """

    @abstractmethod
    def log(
        self,
        action: str,
        entity: str,
        admin_id: Optional[str],
        entity_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        success: bool = True,
        error_message: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> None:
        """
        Enregistre une action dans le journal.

        Args:
            action: Type d'action (CREATE_DATABASE_BACKUP, etc).
            entity: Type d'entite concernee (SYSTEM).
            admin_id: Identifiant de l'operateur (None si systeme).
            entity_id: Identifiant de la ressource.
            details: Details supplementaires (dict).
            success: True si l'operation a reussi.
            error_message: Message d'erreur si echec.
            ip_address: Adresse IP du client.
        """
        ...

    @abstractmethod
    def find_by_admin(
        self,
        admin_id: str,
        days: int = 30,
        limit: int = 100
    ) -> List[Dict[str, Any]]:
        """Recupere les logs d'un operateur."""
        ...

    @abstractmethod
    def find_by_action(
        self,
        action: str,
        days: int = 30,
        limit: int = 100
    ) -> List[Dict[str, Any]]:
        """Recupere les logs d'un type d'action."""
        ...
