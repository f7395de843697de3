"""
Modeles SQLAlchemy - exports centralises.

Organisation par domaine:
- base: Base declarative
- calendar_models: Utilisateurs, groupes, evenements, disponibilites, notifications
- audit_models: Journal d'audit
"""

from calendariko.infrastructure.persistence.models.base import Base

from calendariko.infrastructure.persistence.models.calendar_models import (
    UserModel,
    GroupModel,
    UserGroupModel,
    EventModel,
    AvailabilityModel,
    NotificationModel,
)

from calendariko.infrastructure.persistence.models.audit_models import (
    AuditLog,
)

__all__ = [
    # Base
    "Base",
    # Calendrier
    "UserModel",
    "GroupModel",
    "UserGroupModel",
    "EventModel",
    "AvailabilityModel",
    "NotificationModel",
    # Audit
    "AuditLog",
]
