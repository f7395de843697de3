"""
Infrastructure Layer - Adapters pour les services externes.

Cette couche contient les implementations concretes des ports definis
dans le domaine. Elle gere les interactions avec:
- Base de donnees PostgreSQL (SQLAlchemy, pg_dump, psql)
- Stockage local des artefacts de backup
- SendGrid (notifications)
- APScheduler (backups planifies)
"""
