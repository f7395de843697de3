"""
Services du domaine.

Les services du domaine contiennent la logique metier
qui n'appartient pas naturellement a une entite specifique.
Ils sont purs et n'ont aucune dependance externe.
"""

from calendariko.domain.services.retention_planner import RetentionPlan, RetentionPlanner

__all__ = [
    "RetentionPlan",
    "RetentionPlanner",
]
