"""
Email Infrastructure - Service d'envoi d'emails.

Responsabilite:
---------------
Envoyer les notifications de sauvegarde via SendGrid.

Templates disponibles:
----------------------
- backup_succeeded: Backup termine
- backup_failed: Backup en echec
"""

from calendariko.infrastructure.email.service import EmailResult, EmailService, parse_recipients
from calendariko.infrastructure.email.templates import EmailContent, EmailTemplate

__all__ = ["EmailService", "EmailResult", "EmailTemplate", "EmailContent", "parse_recipients"]
