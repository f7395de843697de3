"""
Dependencies - Injection de dependances FastAPI.

Responsabilite unique:
----------------------
Fournir les dependances (services, garde admin) aux endpoints.

Usage:
------
    @router.get("/list")
    def list_backups(admin: TokenPayload = Depends(get_current_admin)):
        ...
"""

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from calendariko.infrastructure.backup.scheduler import BackupScheduler
from calendariko.infrastructure.backup.service import BackupService
from calendariko.infrastructure.container import BackupContainer
from calendariko.presentation.api.auth.jwt_service import JWTService, TokenPayload
from calendariko.infrastructure.logging import get_logger
from calendariko.presentation.api.config import APISettings, get_settings

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_container(request: Request) -> BackupContainer:
    """Retourne le conteneur construit au demarrage de l'application."""
    container = getattr(request.app.state, "backup_container", None)
    if container is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service de backup non initialise",
        )
    return container


def get_backup_service(container: BackupContainer = Depends(get_container)) -> BackupService:
    """Retourne le BackupService."""
    return container.service


def get_backup_scheduler(container: BackupContainer = Depends(get_container)) -> BackupScheduler:
    """Retourne le BackupScheduler."""
    return container.scheduler


def get_jwt_service(
    settings: APISettings = Depends(get_settings)
) -> JWTService:
    """Retourne le JWTService."""
    return JWTService(settings)


def get_token_payload(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    jwt_service: JWTService = Depends(get_jwt_service),
) -> Optional[TokenPayload]:
    """
    Extrait le payload du token JWT.

    Returns:
        TokenPayload si token valide, None sinon.
    """
    if not credentials:
        return None

    return jwt_service.verify_access_token(credentials.credentials)


def get_current_admin(
    payload: Optional[TokenPayload] = Depends(get_token_payload),
) -> TokenPayload:
    """
    Retourne l'operateur courant si admin.

    Raises:
        HTTPException 401 si non authentifie.
        HTTPException 403 si pas admin.
    """
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token invalide ou expire",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not payload.is_admin:
        logger.warning("backup_access_denied", user_id=payload.user_id, role=payload.role)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Acces reserve aux administrateurs",
        )
    return payload
