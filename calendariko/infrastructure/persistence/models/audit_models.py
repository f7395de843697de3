"""
Modele SQLAlchemy pour le journal d'audit.

Tables:
-------
- audit_logs: Journal des actions d'administration

Securite:
---------
- Les logs ne sont jamais supprimes (compliance)
- Les echecs sont traces au meme titre que les succes
"""
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, Text, Boolean, Index

from calendariko.infrastructure.persistence.models.base import Base


class AuditLog(Base):
    """
    Table audit_logs - Journal des actions d'administration.

    Colonnes:
        id: Identifiant auto-incremente
        action: Type d'action (CREATE_DATABASE_BACKUP, ...)
        entity: Type d'entite concernee (SYSTEM, USER, ...)
        entity_id: Identifiant de la ressource
        admin_id: Identifiant de l'operateur (nullable si action systeme)
        details: Details JSON de l'action
        success: Succes de l'operation
        error_message: Message d'erreur si echec
        ip_address: Adresse IP du client
        user_agent: User-Agent du client
        created_at: Timestamp de l'action
    """
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    action = Column(String(50), nullable=False, index=True)
    entity = Column(String(50), nullable=False)
    entity_id = Column(String(100), nullable=True)
    admin_id = Column(String(36), nullable=True, index=True)
    details = Column(Text, nullable=True)  # JSON string
    success = Column(Boolean, nullable=False, default=True)
    error_message = Column(Text, nullable=True)
    ip_address = Column(String(45), nullable=True)  # IPv6 compatible
    user_agent = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    __table_args__ = (
        Index('idx_audit_admin_action', 'admin_id', 'action'),
        Index('idx_audit_entity', 'entity', 'entity_id'),
    )
