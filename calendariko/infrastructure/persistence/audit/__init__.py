"""Adapters de persistence pour le journal d'audit."""

from calendariko.infrastructure.persistence.audit.sqlalchemy_audit_repository import (
    AUDIT_LOG_TABLE,
    SqlAlchemyAuditRepository,
    export_audit_rows,
    merge_audit_rows,
)

__all__ = ["AUDIT_LOG_TABLE", "SqlAlchemyAuditRepository", "export_audit_rows", "merge_audit_rows"]
