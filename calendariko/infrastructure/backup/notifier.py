"""
BackupNotifier - Notifications email des resultats de backup.

Responsabilite unique:
----------------------
Implementer le port NotificationSender avec EmailService.

Actif uniquement si BACKUP_NOTIFICATIONS_ENABLED=true et
BACKUP_NOTIFICATION_EMAIL renseigne. Un echec d'envoi est journalise,
jamais propage.
"""

from datetime import datetime, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from calendariko.domain.entities.backup import BackupRecord
from calendariko.domain.ports.notification_sender import NotificationSender
from calendariko.infrastructure.backup.config import BackupSettings
from calendariko.infrastructure.email import EmailContent, EmailService, EmailTemplate
from calendariko.infrastructure.logging import get_logger

logger = get_logger(__name__)


class BackupNotifier(NotificationSender):
    """Envoie les notifications de backup a l'adresse configuree."""

    def __init__(self, settings: BackupSettings, email_service: EmailService):
        self._enabled = settings.notifications_active
        self._recipient = settings.backup_notification_email
        self._email = email_service
        self._tz = _resolve_timezone(settings.tz)

    @property
    def enabled(self) -> bool:
        return self._enabled

    def backup_succeeded(self, record: BackupRecord) -> bool:
        content = EmailTemplate.backup_succeeded(
            filename=record.filename,
            size_bytes=record.size_bytes,
            created_at=record.created_at.astimezone(self._tz),
        )
        return self._send(content, kind="success", filename=record.filename)

    def backup_failed(self, error: str, context: Optional[str] = None) -> bool:
        content = EmailTemplate.backup_failed(
            error=error,
            occurred_at=datetime.now(self._tz),
        )
        return self._send(content, kind="failure", context=context)

    def _send(self, content: EmailContent, kind: str, **log_context) -> bool:
        if not self._enabled:
            logger.debug("backup_notification_skipped", kind=kind)
            return False

        try:
            result = self._email.send(self._recipient, content)
        except Exception as e:
            logger.error("backup_notification_failed", kind=kind, error=str(e), **log_context)
            return False

        if not result.success:
            logger.warning("backup_notification_failed", kind=kind, error=result.error, **log_context)
            return False

        logger.info("backup_notification_sent", kind=kind, recipients=result.recipients, **log_context)
        return True


def _resolve_timezone(name: str) -> tzinfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("unknown_timezone", timezone=name)
        return timezone.utc
