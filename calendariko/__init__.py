"""
Calendariko - Backend calendrier pour groupes et DJs.

Structure:
    - domain/: Coeur metier (entites backup, politique de retention, ports)
    - infrastructure/: Adapters (PostgreSQL, pg_dump, APScheduler, SendGrid)
    - presentation/: API REST (FastAPI)
"""

__version__ = "1.0.0"
