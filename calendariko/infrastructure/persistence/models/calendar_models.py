"""
Modeles SQLAlchemy du domaine calendrier.

Tables:
-------
- users: Utilisateurs (admin, artistes)
- groups: Groupes / formations
- user_groups: Association utilisateurs <-> groupes
- events: Concerts et dates
- availabilities: Indisponibilites declarees par les membres
- notifications: Notifications in-app

Identifiants:
-------------
Les identifiants sont des chaines (UUID4 textuels) pour rester portables
entre PostgreSQL et SQLite (tests).
"""
import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Index, String, Text

from calendariko.infrastructure.persistence.models.base import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class UserModel(Base):
    """
    Table users - Utilisateurs de l'application.

    Colonnes:
        id: Identifiant unique
        email: Adresse email (unique)
        password_hash: Hash du mot de passe
        first_name / last_name: Identite
        role: ADMIN ou ARTIST
    """
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_id)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone = Column(String(30), nullable=True)
    role = Column(String(20), nullable=False, default="ARTIST")
    email_verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index('idx_users_role', 'role'),
    )


class GroupModel(Base):
    """Table groups - Groupes (band, DJ, formation)."""
    __tablename__ = "groups"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(150), nullable=False)
    type = Column(String(20), nullable=False, default="BAND")
    description = Column(Text, nullable=True)
    genre = Column(String(100), nullable=True)
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(30), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class UserGroupModel(Base):
    """Table user_groups - Association users <-> groups."""
    __tablename__ = "user_groups"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    group_id = Column(String(36), ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True)
    joined_at = Column(DateTime, default=datetime.utcnow)


class EventModel(Base):
    """
    Table events - Concerts, prove, date.

    Statuts: PENDING, CONFIRMED, CANCELLED.
    """
    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=_new_id)
    title = Column(String(200), nullable=False)
    date = Column(DateTime, nullable=False, index=True)
    start_time = Column(String(5), nullable=True)
    end_time = Column(String(5), nullable=True)
    venue_name = Column(String(200), nullable=True)
    venue_address = Column(String(300), nullable=True)
    venue_city = Column(String(100), nullable=True)
    event_type = Column(String(30), nullable=False, default="CONCERT")
    status = Column(String(20), nullable=False, default="PENDING")
    fee = Column(String(50), nullable=True)
    notes = Column(Text, nullable=True)
    group_id = Column(String(36), ForeignKey("groups.id", ondelete="SET NULL"), nullable=True, index=True)
    created_by_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index('idx_events_group_date', 'group_id', 'date'),
    )


class AvailabilityModel(Base):
    """Table availabilities - Indisponibilites d'un membre pour un groupe."""
    __tablename__ = "availabilities"

    id = Column(String(36), primary_key=True, default=_new_id)
    date = Column(Date, nullable=False)
    type = Column(String(20), nullable=False, default="BUSY")
    notes = Column(Text, nullable=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    group_id = Column(String(36), ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index('idx_availability_unique', 'user_id', 'group_id', 'date', unique=True),
    )


class NotificationModel(Base):
    """Table notifications - Notifications in-app."""
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=_new_id)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(20), nullable=False, default="INFO")
    is_read = Column(Boolean, default=False, nullable=False)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    event_id = Column(String(36), ForeignKey("events.id", ondelete="CASCADE"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
