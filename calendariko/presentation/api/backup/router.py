"""
Backup Router - Endpoints d'administration des sauvegardes.

Responsabilite unique:
----------------------
Exposer les operations du moteur et du planificateur de backup.
Reserve aux administrateurs.

Endpoints:
----------
- GET /backup/list: Lister les backups
- GET /backup/stats: Statistiques + etat du planificateur
- GET /backup/config: Configuration retention/planification/notifications
- POST /backup/create: Backup manuel
- POST /backup/test: Test complet (backup + notification)
- POST /backup/cleanup: Purge manuelle
- GET /backup/{backup_id}/verify: Verification structurelle
- DELETE /backup/{backup_id}: Suppression
- POST /backup/{backup_id}/restore: Restauration (confirmation requise)
"""

from typing import NoReturn, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, status

from calendariko.domain.entities.backup import BackupOrigin
from calendariko.domain.exceptions import (
    BackupError,
    BackupInProgressError,
    BackupNotFoundError,
    InvalidBackupError,
)
from calendariko.infrastructure.backup.config import BackupSettings
from calendariko.infrastructure.backup.scheduler import BackupScheduler
from calendariko.infrastructure.backup.service import BackupService
from calendariko.infrastructure.container import BackupContainer
from calendariko.infrastructure.logging import get_logger
from calendariko.presentation.api.auth.jwt_service import TokenPayload
from calendariko.presentation.api.backup.schemas import (
    BackupConfigResponse,
    BackupListResponse,
    BackupResponse,
    BackupStatsResponse,
    BackupTestResponse,
    CleanupResponse,
    MessageResponse,
    RestoreRequest,
    RestoreResponse,
    ScheduleStatusResponse,
    VerificationResponse,
)
from calendariko.presentation.api.dependencies import (
    get_backup_scheduler,
    get_backup_service,
    get_container,
    get_current_admin,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/backup", tags=["Backup"])

RESTORE_CONFIRMATION_REQUIRED = (
    "Confirmation requise. La restauration ecrase toutes les donnees actuelles de la base."
)
RESTORE_WARNING = (
    "La base a ete entierement restauree. Toutes les modifications "
    "posterieures au backup sont perdues."
)

_ERROR_STATUS = {
    BackupNotFoundError: status.HTTP_404_NOT_FOUND,
    BackupInProgressError: status.HTTP_409_CONFLICT,
    InvalidBackupError: 422,
}


def _raise_http(error: BackupError, context: str) -> NoReturn:
    """Convertit une erreur du moteur en HTTPException."""
    status_code = _ERROR_STATUS.get(type(error), status.HTTP_500_INTERNAL_SERVER_ERROR)
    detail = {
        "error": context,
        "details": error.message,
        "code": error.code,
    }
    if error.suggestion:
        detail["suggestion"] = error.suggestion

    if status_code >= 500:
        logger.error("backup_api_error", context=context, code=error.code, error=error.message)
    raise HTTPException(status_code=status_code, detail=detail) from error


def _settings(container: BackupContainer = Depends(get_container)) -> BackupSettings:
    return container.settings


@router.get(
    "/list",
    response_model=BackupListResponse,
    summary="Lister les backups",
)
def list_backups(
    admin: TokenPayload = Depends(get_current_admin),
    service: BackupService = Depends(get_backup_service),
):
    """Liste les backups disponibles, du plus recent au plus ancien."""
    records = service.list_backups()
    return BackupListResponse(
        items=[BackupResponse.from_record(r) for r in records],
        total=len(records),
    )


@router.get(
    "/stats",
    response_model=BackupStatsResponse,
    summary="Statistiques des backups",
)
def get_backup_stats(
    admin: TokenPayload = Depends(get_current_admin),
    service: BackupService = Depends(get_backup_service),
    scheduler: BackupScheduler = Depends(get_backup_scheduler),
):
    return BackupStatsResponse.build(service.get_stats(), scheduler.get_status())


@router.get(
    "/config",
    response_model=BackupConfigResponse,
    summary="Configuration des backups",
)
def get_backup_config(
    admin: TokenPayload = Depends(get_current_admin),
    scheduler: BackupScheduler = Depends(get_backup_scheduler),
    settings: BackupSettings = Depends(_settings),
):
    scheduling = ScheduleStatusResponse.from_status(scheduler.get_status())
    return BackupConfigResponse(
        **scheduling.model_dump(),
        retention_days=settings.backup_retention_days,
        max_count=settings.backup_max_count,
        notifications_enabled=settings.backup_notifications_enabled,
        notification_email=settings.backup_notification_email or None,
    )


@router.post(
    "/create",
    response_model=BackupResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Creer un backup manuel",
)
def create_backup(
    admin: TokenPayload = Depends(get_current_admin),
    service: BackupService = Depends(get_backup_service),
):
    logger.info("manual_backup_requested", admin_id=admin.user_id)
    try:
        record = service.create_backup(BackupOrigin.MANUAL, operator_id=admin.user_id)
    except BackupError as e:
        _raise_http(e, "Erreur lors de la creation du backup")
    return BackupResponse.from_record(record)


@router.post(
    "/test",
    response_model=BackupTestResponse,
    summary="Tester le systeme de backup",
    description="Execute un backup complet puis envoie la notification configuree.",
)
def test_backup(
    admin: TokenPayload = Depends(get_current_admin),
    scheduler: BackupScheduler = Depends(get_backup_scheduler),
):
    logger.info("backup_test_requested", admin_id=admin.user_id)
    try:
        record = scheduler.test_backup(operator_id=admin.user_id)
    except BackupError as e:
        _raise_http(e, "Erreur lors du test du systeme de backup")
    return BackupTestResponse(
        message="Test du systeme de backup termine avec succes",
        backup=BackupResponse.from_record(record),
    )


@router.post(
    "/cleanup",
    response_model=CleanupResponse,
    summary="Purger les anciens backups",
)
def cleanup_backups(
    admin: TokenPayload = Depends(get_current_admin),
    service: BackupService = Depends(get_backup_service),
):
    logger.info("manual_cleanup_requested", admin_id=admin.user_id)
    try:
        result = service.cleanup_old_backups(operator_id=admin.user_id)
    except BackupError as e:
        _raise_http(e, "Erreur lors de la purge des backups")
    return CleanupResponse.from_result(result)


@router.get(
    "/{backup_id}/verify",
    response_model=VerificationResponse,
    summary="Verifier un backup",
)
def verify_backup(
    backup_id: str,
    admin: TokenPayload = Depends(get_current_admin),
    service: BackupService = Depends(get_backup_service),
):
    try:
        record = service.get_backup(backup_id)
    except BackupError as e:
        _raise_http(e, "Erreur lors de la verification du backup")
    return VerificationResponse.build(record, service.verify_backup(record))


@router.delete(
    "/{backup_id}",
    response_model=MessageResponse,
    summary="Supprimer un backup",
)
def delete_backup(
    backup_id: str,
    admin: TokenPayload = Depends(get_current_admin),
    service: BackupService = Depends(get_backup_service),
):
    try:
        record = service.delete_backup(backup_id, operator_id=admin.user_id)
    except BackupError as e:
        _raise_http(e, "Erreur lors de la suppression du backup")
    return MessageResponse(message=f"Backup supprime: {record.filename}")


@router.post(
    "/{backup_id}/restore",
    response_model=RestoreResponse,
    summary="Restaurer la base depuis un backup",
    description="Operation destructive: exige confirm_restore=true.",
)
def restore_backup(
    backup_id: str,
    body: Optional[RestoreRequest] = Body(default=None),
    admin: TokenPayload = Depends(get_current_admin),
    service: BackupService = Depends(get_backup_service),
):
    if body is None or not body.confirm_restore:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": RESTORE_CONFIRMATION_REQUIRED},
        )

    try:
        record = service.get_backup(backup_id)
        logger.warning(
            "restore_requested",
            admin_id=admin.user_id,
            backup_id=backup_id,
            filename=record.filename,
        )
        service.restore_from_backup(record, operator_id=admin.user_id)
    except BackupError as e:
        _raise_http(e, "Erreur lors de la restauration du backup")

    return RestoreResponse(
        filename=record.filename,
        message=f"Base restauree depuis le backup: {record.filename}",
        warning=RESTORE_WARNING,
    )
