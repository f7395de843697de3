"""
Port SnapshotRepository - Acces aux donnees pour l'export applicatif.

Responsabilite unique:
----------------------
Lire et remplacer l'ensemble des entites du domaine calendrier
(utilisateurs, groupes, evenements, disponibilites, notifications)
quand l'outil de dump natif n'est pas disponible.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List


PRIMARY_COLLECTION = "users"


class SnapshotRepository(ABC):
    """
    Interface de lecture/ecriture globale des entites.

    Implementee par SqlAlchemySnapshotRepository.
    """

    @abstractmethod
    def collections(self) -> List[str]:
        """Noms des collections exportees, dans l'ordre des dependances."""
        pass

    @abstractmethod
    def export_collection(self, name: str) -> List[Dict[str, Any]]:
        """
        Exporte toutes les lignes d'une collection.

        Args:
            name: Nom de la collection (ex: "users").

        Returns:
            Liste de dicts serialisables en JSON.
        """
        pass

    @abstractmethod
    def replace_all(self, data: Dict[str, List[Dict[str, Any]]]) -> Dict[str, int]:
        """
        Remplace le contenu de toutes les collections (destructif).

        Args:
            data: Lignes par collection.

        Returns:
            Nombre de lignes inserees par collection.
        """
        pass
