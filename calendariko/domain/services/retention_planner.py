"""
Service de planification de la purge des backups.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional

from calendariko.domain.entities.backup import BackupRecord, RetentionPolicy


@dataclass
class RetentionPlan:
    """
    Partition d'une liste de backups selon la politique de retention.

    Attributes:
        keep: Backups a conserver (plus recent en premier).
        remove: Backups a supprimer (plus recent en premier).
    """

    keep: list[BackupRecord] = field(default_factory=list)
    remove: list[BackupRecord] = field(default_factory=list)


class RetentionPlanner:
    """
    Service pur de selection des backups a purger.

    Regle appliquee sur la liste triee du plus recent au plus ancien:
    tout backup au-dela des max_count plus recents est supprime quel
    que soit son age, et parmi les max_count plus recents, tout backup
    plus vieux que retention_days est aussi supprime.

    Example:
        >>> planner = RetentionPlanner(RetentionPolicy(retention_days=30, max_count=2))
        >>> plan = planner.plan(records)
        >>> [r.filename for r in plan.remove]
    """

    def __init__(self, policy: RetentionPolicy):
        self._policy = policy

    @property
    def policy(self) -> RetentionPolicy:
        return self._policy

    def cutoff(self, now: Optional[datetime] = None) -> datetime:
        """Date limite d'age: tout backup anterieur est purge."""
        now = now or datetime.now(timezone.utc)
        return now - timedelta(days=self._policy.retention_days)

    def plan(
        self,
        records: list[BackupRecord],
        now: Optional[datetime] = None,
    ) -> RetentionPlan:
        """
        Partitionne les backups en conserves / supprimes.

        Args:
            records: Backups tries du plus recent au plus ancien.
            now: Reference temporelle (defaut: maintenant UTC).

        Returns:
            RetentionPlan.
        """
        cutoff = self.cutoff(now)
        ordered = sorted(records, key=lambda r: r.created_at, reverse=True)
        plan = RetentionPlan()

        for index, record in enumerate(ordered):
            over_count = index >= self._policy.max_count
            too_old = record.created_at < cutoff
            if over_count or too_old:
                plan.remove.append(record)
            else:
                plan.keep.append(record)

        return plan
