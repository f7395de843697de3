"""
Ports du domaine (Hexagonal Architecture).

Les Ports sont des interfaces qui definissent les contrats
entre le domaine et le monde exterieur.

Ports disponibles:
------------------
- AuditRepository: Journal d'audit des actions d'administration
- NotificationSender: Puits de notifications des resultats de backup
- SnapshotRepository: Lecture/ecriture globale des entites (export JSON)
- BackupStrategy: Production et restauration d'un artefact
"""

from calendariko.domain.ports.audit_repository import AuditAction, AuditEntity, AuditRepository
from calendariko.domain.ports.backup_strategy import BackupStrategy
from calendariko.domain.ports.notification_sender import NotificationSender
from calendariko.domain.ports.snapshot_repository import PRIMARY_COLLECTION, SnapshotRepository

__all__ = [
    "AuditAction",
    "AuditEntity",
    "AuditRepository",
    "BackupStrategy",
    "NotificationSender",
    "PRIMARY_COLLECTION",
    "SnapshotRepository",
]
