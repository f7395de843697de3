"""
API REST - FastAPI.

Presentation layer pour les operateurs (console d'administration).
Utilise JWT pour l'authentification.

Routers disponibles:
--------------------
- backup: Sauvegarde, purge et restauration de la base

Usage:
------
    uvicorn calendariko.presentation.api.main:app --reload
"""

from calendariko.presentation.api.main import create_app

__all__ = ["create_app"]
