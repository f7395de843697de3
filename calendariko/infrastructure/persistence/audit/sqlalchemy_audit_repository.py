"""
SqlAlchemyAuditRepository - Journal d'audit persistant.

Implemente le port AuditRepository sur la table audit_logs.
Les entrees ne sont jamais supprimees. Une restauration JSON ne touche
pas la table; une restauration native la reconstitue avec
export_audit_rows / merge_audit_rows.
"""

import json
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import insert, select, text

from calendariko.domain.ports.audit_repository import AuditRepository
from calendariko.infrastructure.persistence.database import DatabaseManager
from calendariko.infrastructure.persistence.models import AuditLog

AUDIT_LOG_TABLE = AuditLog.__tablename__

_RESYNC_ID_SEQUENCE_SQL = text(
    "SELECT setval(pg_get_serial_sequence('audit_logs', 'id'), COALESCE(MAX(id), 1)) FROM audit_logs"
)

# Colonnes exposees telles quelles par les lectures
_PLAIN_COLUMNS = (
    "id", "action", "entity", "entity_id", "admin_id",
    "success", "error_message", "ip_address", "created_at",
)


class SqlAlchemyAuditRepository(AuditRepository):
    """Journal d'audit stocke via SQLAlchemy (details serialises en JSON)."""

    def __init__(self, db: DatabaseManager):
        self._db = db

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
        row = AuditLog(
            action=action,
            entity=entity,
            entity_id=entity_id,
            admin_id=admin_id,
            details=_dump_details(details),
            success=success,
            error_message=error_message,
            ip_address=ip_address,
        )
        with self._db.get_session() as session:
            session.add(row)

    def find_by_admin(self, admin_id: str, days: int = 30, limit: int = 100) -> List[Dict[str, Any]]:
        return self._recent(AuditLog.admin_id == admin_id, days, limit)

    def find_by_action(self, action: str, days: int = 30, limit: int = 100) -> List[Dict[str, Any]]:
        return self._recent(AuditLog.action == action, days, limit)

    def _recent(self, criterion, days: int, limit: int) -> List[Dict[str, Any]]:
        """Entrees correspondant a criterion sur les `days` derniers jours, plus recentes d'abord."""
        statement = (
            select(AuditLog)
            .where(criterion, AuditLog.created_at >= datetime.utcnow() - timedelta(days=days))
            .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
            .limit(limit)
        )
        with self._db.get_session() as session:
            return [_row_to_dict(row) for row in session.scalars(statement)]


def _dump_details(details: Optional[Dict[str, Any]]) -> Optional[str]:
    # default=str: Path et datetime dans les details
    return json.dumps(details, default=str) if details else None


def _row_to_dict(row: AuditLog) -> Dict[str, Any]:
    entry = {column: getattr(row, column) for column in _PLAIN_COLUMNS}
    entry["details"] = json.loads(row.details) if row.details else None
    return entry


def export_audit_rows(db: DatabaseManager) -> List[Dict[str, Any]]:
    """Lignes brutes de audit_logs (toutes colonnes), dans l'ordre des ids."""
    table = AuditLog.__table__
    with db.get_session() as session:
        return [dict(row) for row in session.execute(select(table).order_by(table.c.id)).mappings()]


def merge_audit_rows(db: DatabaseManager, rows: List[Dict[str, Any]]) -> int:
    """
    Reinsere les lignes d'audit absentes de la table.

    Recree audit_logs si besoin et recale la sequence des ids
    (PostgreSQL) pour les insertions suivantes.

    Returns:
        Nombre de lignes reinserees.
    """
    if not rows:
        return 0

    table = AuditLog.__table__
    table.create(db.engine, checkfirst=True)

    with db.get_session() as session:
        present = set(session.scalars(select(table.c.id)))
        missing = [row for row in rows if row["id"] not in present]
        if missing:
            session.execute(insert(table), missing)
        if db.engine.dialect.name == "postgresql":
            session.execute(_RESYNC_ID_SEQUENCE_SQL)
    return len(missing)
