"""
Main - Factory FastAPI.

Responsabilite unique:
----------------------
Creer et configurer l'application FastAPI.

Le conteneur de backup est construit au demarrage (lifespan): le
planificateur est arme si BACKUP_AUTO_ENABLED=true et arrete a l'arret
de l'application.

Usage:
------
    # Development
    uvicorn calendariko.presentation.api.main:app --reload

    # Production
    uvicorn calendariko.presentation.api.main:app --host 0.0.0.0 --port 8000
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from calendariko.infrastructure.container import BackupContainer
from calendariko.infrastructure.logging import RequestLogger, configure_logging, get_logger
from calendariko.infrastructure.logging.config import REQUEST_ID_HEADER
from calendariko.presentation.api.backup.router import router as backup_router
from calendariko.presentation.api.config import get_settings


def create_app(container: Optional[BackupContainer] = None) -> FastAPI:
    """
    Factory pour creer l'application FastAPI.

    Args:
        container: Conteneur pre-construit (tests). Cree au demarrage sinon.

    Returns:
        Application FastAPI configuree.
    """
    settings = get_settings()

    configure_logging(json_logs=settings.is_production, log_level=settings.log_level, service="api")
    logger = get_logger("api")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.backup_container is None:
            app.state.backup_container = BackupContainer.create()

        backup_container = app.state.backup_container
        state = backup_container.scheduler.start()
        logger.info("app_started", version=settings.api_version, scheduler_state=state.value)
        try:
            yield
        finally:
            backup_container.shutdown()
            logger.info("app_stopped")

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.backup_container = container

    # Logging + identifiant de requete
    app.add_middleware(BaseHTTPMiddleware, dispatch=RequestLogger())

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["Authorization", "Content-Type", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
    )

    # Health check
    @app.get("/health", tags=["Health"])
    def health():
        """Endpoint de sante."""
        return {"status": "healthy"}

    # Routers
    app.include_router(backup_router, prefix=settings.api_prefix)

    return app


# Instance pour uvicorn
app = create_app()
