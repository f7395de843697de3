"""
SqlAlchemySnapshotRepository - Lecture/ecriture globale des entites.

Implemente le port SnapshotRepository avec SQLAlchemy Core.
Utilise par l'export applicatif (backup JSON) quand pg_dump est
indisponible, et par la restauration symetrique de ces exports.

Ordre des collections:
----------------------
Les collections sont listees parents d'abord (users, groups) puis
enfants (user_groups, events, ...). L'insertion suit cet ordre,
la suppression l'ordre inverse.

Le journal d'audit n'est pas exporte: une restauration ne doit
jamais effacer la trace des operations d'administration.
"""

from datetime import date, datetime
from typing import Any, Dict, List

from sqlalchemy import Date, DateTime, Table, delete, insert, select

from calendariko.domain.ports.snapshot_repository import SnapshotRepository
from calendariko.infrastructure.persistence.database import DatabaseManager
from calendariko.infrastructure.persistence.models import (
    AvailabilityModel,
    EventModel,
    GroupModel,
    NotificationModel,
    UserGroupModel,
    UserModel,
)

EXPORTED_MODELS = (
    UserModel,
    GroupModel,
    UserGroupModel,
    EventModel,
    AvailabilityModel,
    NotificationModel,
)


class SqlAlchemySnapshotRepository(SnapshotRepository):
    """
    Repository d'export/import complet des tables du calendrier.

    Attributes:
        db: DatabaseManager pour les sessions.
    """

    def __init__(self, db: DatabaseManager):
        self._db = db
        self._tables: Dict[str, Table] = {
            model.__tablename__: model.__table__ for model in EXPORTED_MODELS
        }

    def collections(self) -> List[str]:
        return list(self._tables)

    def export_collection(self, name: str) -> List[Dict[str, Any]]:
        """Exporte toutes les lignes d'une table en dicts JSON-compatibles."""
        table = self._table(name)
        with self._db.get_session() as session:
            rows = session.execute(select(table)).mappings().all()
            return [
                {key: _to_json_value(value) for key, value in row.items()}
                for row in rows
            ]

    def replace_all(self, data: Dict[str, List[Dict[str, Any]]]) -> Dict[str, int]:
        """
        Remplace le contenu de toutes les tables dans une seule transaction.

        Les collections absentes de data sont videes.
        Les colonnes inconnues sont ignorees.
        """
        inserted: Dict[str, int] = {}

        with self._db.get_session() as session:
            for name in reversed(self.collections()):
                session.execute(delete(self._tables[name]))

            for name in self.collections():
                table = self._tables[name]
                rows = [_from_json_row(table, row) for row in data.get(name) or []]
                if rows:
                    session.execute(insert(table), rows)
                inserted[name] = len(rows)

        return inserted

    def _table(self, name: str) -> Table:
        try:
            return self._tables[name]
        except KeyError:
            raise KeyError(f"Collection inconnue: {name}") from None


def _to_json_value(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _from_json_row(table: Table, row: Dict[str, Any]) -> Dict[str, Any]:
    converted: Dict[str, Any] = {}
    for column in table.columns:
        if column.name not in row:
            continue
        value = row[column.name]
        if isinstance(value, str):
            if isinstance(column.type, DateTime):
                value = datetime.fromisoformat(value)
            elif isinstance(column.type, Date):
                value = date.fromisoformat(value)
        converted[column.name] = value
    return converted
