"""
Adapters in-memory pour le developpement et les tests.
"""

from calendariko.infrastructure.adapters.memory_audit_repository import MemoryAuditRepository

__all__ = ["MemoryAuditRepository"]
