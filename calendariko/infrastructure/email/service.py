"""
EmailService - Envoi des notifications via SendGrid.

Responsabilite unique:
----------------------
Remettre un EmailContent a une ou plusieurs adresses.

Usage:
------
    service = EmailService(api_key="SG.xxx")
    content = EmailTemplate.backup_failed(error="pg_dump: timeout", occurred_at=now)
    result = service.send("ops@calendariko.app, dba@calendariko.app", content)
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

from calendariko.infrastructure.email.templates import EmailContent
from calendariko.infrastructure.logging import get_logger

logger = get_logger(__name__)

DEFAULT_SENDER = "noreply@calendariko.app"
DEFAULT_SENDER_NAME = "Calendariko"

Recipients = Union[str, Sequence[str]]


def parse_recipients(recipients: Recipients) -> List[str]:
    """
    Normalise la liste des destinataires.

    Accepte une chaine separee par des virgules ou des points-virgules,
    ou une sequence d'adresses. Les doublons et blancs sont retires.
    """
    if isinstance(recipients, str):
        recipients = recipients.replace(";", ",").split(",")

    seen: List[str] = []
    for address in recipients:
        address = address.strip()
        if address and address.lower() not in (s.lower() for s in seen):
            seen.append(address)
    return seen


@dataclass
class EmailResult:
    """Issue d'un envoi (jamais d'exception cote appelant)."""

    success: bool
    recipients: List[str] = field(default_factory=list)
    status_code: Optional[int] = None
    message_id: Optional[str] = None
    error: Optional[str] = None


class EmailService:
    """
    Client SendGrid minimal.

    Sans cle API le service est inactif: send() retourne un echec
    explicite au lieu d'appeler SendGrid.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        sender: Optional[str] = None,
        sender_name: Optional[str] = None,
    ):
        self._api_key = api_key if api_key is not None else os.getenv("SENDGRID_API_KEY", "")
        self._sender = sender or os.getenv("EMAIL_FROM", DEFAULT_SENDER)
        self._sender_name = sender_name or os.getenv("EMAIL_FROM_NAME", DEFAULT_SENDER_NAME)

        if not self.is_enabled:
            logger.warning("email_disabled", reason="SENDGRID_API_KEY missing")

    @property
    def is_enabled(self) -> bool:
        return bool(self._api_key)

    @property
    def sender(self) -> str:
        return f"{self._sender_name} <{self._sender}>"

    def send(self, recipients: Recipients, content: EmailContent) -> EmailResult:
        """
        Envoie content aux destinataires.

        Args:
            recipients: Adresse, liste d'adresses ou chaine "a@x, b@y".
            content: Sujet et corps (HTML + texte).

        Returns:
            EmailResult. Les erreurs SendGrid sont capturees ici.
        """
        addresses = parse_recipients(recipients)
        if not addresses:
            return EmailResult(success=False, error="No recipient")

        if not self.is_enabled:
            logger.info("email_skipped", recipients=addresses, subject=content.subject)
            return EmailResult(
                success=False,
                recipients=addresses,
                error="Email service disabled (no API key)",
            )

        try:
            response = self._client().send(self._build_message(addresses, content))
        except Exception as e:
            logger.error("email_failed", recipients=addresses, subject=content.subject, error=str(e))
            return EmailResult(success=False, recipients=addresses, error=str(e))

        status_code = getattr(response, "status_code", None)
        headers = getattr(response, "headers", None) or {}
        logger.info("email_sent", recipients=addresses, subject=content.subject, status_code=status_code)
        return EmailResult(
            success=True,
            recipients=addresses,
            status_code=status_code,
            message_id=headers.get("X-Message-Id"),
        )

    def _client(self):
        from sendgrid import SendGridAPIClient

        return SendGridAPIClient(self._api_key)

    def _build_message(self, addresses: List[str], content: EmailContent):
        from sendgrid.helpers.mail import Content, Email, Mail, To

        message = Mail(
            from_email=Email(self._sender, self._sender_name),
            to_emails=[To(address) for address in addresses],
            subject=content.subject,
        )
        # SendGrid impose text/plain avant text/html
        if content.text:
            message.add_content(Content("text/plain", content.text))
        message.add_content(Content("text/html", content.html))
        return message
