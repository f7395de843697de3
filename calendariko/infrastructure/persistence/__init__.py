"""
Adapters pour la persistence des donnees.

Ce module expose le DatabaseManager et les repositories
pour l'architecture hexagonale.
"""

from calendariko.infrastructure.persistence.database import DatabaseManager
from calendariko.infrastructure.persistence.audit import SqlAlchemyAuditRepository
from calendariko.infrastructure.persistence.snapshot_repository import SqlAlchemySnapshotRepository

from calendariko.infrastructure.persistence.models import (
    Base,
    UserModel,
    GroupModel,
    UserGroupModel,
    EventModel,
    AvailabilityModel,
    NotificationModel,
    AuditLog,
)

__all__ = [
    "DatabaseManager",
    "SqlAlchemyAuditRepository",
    "SqlAlchemySnapshotRepository",
    "Base",
    "UserModel",
    "GroupModel",
    "UserGroupModel",
    "EventModel",
    "AvailabilityModel",
    "NotificationModel",
    "AuditLog",
]
