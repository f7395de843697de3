"""
MemoryAuditRepository - Implementation in-memory du journal d'audit.

Responsabilite unique:
----------------------
Stocker les logs d'audit en memoire (dev/tests).
En production, utiliser SqlAlchemyAuditRepository.
"""

from datetime import datetime, timedelta
from itertools import count
from threading import Lock
from typing import Any, Dict, List, Optional

from calendariko.domain.ports.audit_repository import AuditRepository


class MemoryAuditRepository(AuditRepository):
    """
    Implementation in-memory de l'AuditRepository.

    Thread-safe avec verrou.
    """

    def __init__(self):
        self._entries: List[Dict[str, Any]] = []
        self._ids = count(1)
        self._lock = Lock()

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
        with self._lock:
            self._entries.append({
                "id": next(self._ids),
                "action": action,
                "entity": entity,
                "entity_id": entity_id,
                "admin_id": admin_id,
                "details": dict(details) if details else None,
                "success": success,
                "error_message": error_message,
                "ip_address": ip_address,
                "created_at": datetime.utcnow(),
            })

    def find_by_admin(
        self,
        admin_id: str,
        days: int = 30,
        limit: int = 100
    ) -> List[Dict[str, Any]]:
        return self._find(lambda e: e["admin_id"] == admin_id, days, limit)

    def find_by_action(
        self,
        action: str,
        days: int = 30,
        limit: int = 100
    ) -> List[Dict[str, Any]]:
        return self._find(lambda e: e["action"] == action, days, limit)

    def all(self) -> List[Dict[str, Any]]:
        """Retourne tous les logs (plus ancien en premier)."""
        with self._lock:
            return list(self._entries)

    def _find(self, predicate, days: int, limit: int) -> List[Dict[str, Any]]:
        since = datetime.utcnow() - timedelta(days=days)
        with self._lock:
            matches = [
                e for e in self._entries
                if predicate(e) and e["created_at"] >= since
            ]
        matches.sort(key=lambda e: e["created_at"], reverse=True)
        return matches[:limit]
