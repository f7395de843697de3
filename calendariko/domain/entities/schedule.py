"""
Schedule Entity - Configuration et etat du planificateur de backups.

Responsabilite unique:
----------------------
Representer la configuration cron lue au demarrage et l'etat
observable du planificateur (DISABLED / ARMED).
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class SchedulerState(Enum):
    """Etats du planificateur."""

    DISABLED = "disabled"
    ARMED = "armed"


@dataclass(frozen=True)
class SchedulerConfig:
    """
    Configuration du backup automatique.

    Attributes:
        enabled: True si les backups automatiques sont actives.
        cron_expression: Expression cron a 5 champs.
        timezone: Fuseau horaire d'evaluation du cron.
    """

    enabled: bool = False
    cron_expression: str = "0 2 * * *"
    timezone: str = "Europe/Rome"


@dataclass(frozen=True)
class ScheduleStatus:
    """
    Etat courant du planificateur (lecture seule).

    next_run n'est pas garanti: None si inconnu.
    """

    enabled: bool
    timezone: str
    state: SchedulerState
    cron_expression: Optional[str] = None
    next_run: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "enabled": self.enabled,
            "cron_expression": self.cron_expression,
            "timezone": self.timezone,
            "state": self.state.value,
            "next_run": self.next_run,
        }
