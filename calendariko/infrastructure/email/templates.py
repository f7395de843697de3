"""
EmailTemplate - Templates d'emails.

Responsabilite unique:
----------------------
Definir les templates HTML des notifications de sauvegarde.

Usage:
------
    content = EmailTemplate.backup_succeeded(filename, size_bytes, created_at)
    service.send("admin@calendariko.app", content)
"""

from dataclasses import dataclass
from datetime import datetime
from html import escape

from calendariko.domain.entities.backup import format_size_mb


@dataclass
class EmailContent:
    """
    Contenu d'un email.

    Attributes:
        subject: Sujet de l'email.
        html: Corps HTML.
        text: Corps texte (fallback).
    """

    subject: str
    html: str
    text: str


class EmailTemplate:
    """
    Factory pour les templates d'emails.

    Chaque methode retourne un EmailContent pret a envoyer.
    """

    _DATE_FORMAT = "%d/%m/%Y %H:%M:%S"

    _BASE_HTML = """
    <!DOCTYPE html>
    <html>
    <head>
        <meta charset="utf-8">
        <style>
            body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px; }}
            .header {{ background: {color}; color: white; padding: 20px; text-align: center; border-radius: 8px 8px 0 0; }}
            .content {{ background: #f9fafb; padding: 30px; border: 1px solid #e5e7eb; }}
            .footer {{ text-align: center; padding: 20px; color: #6b7280; font-size: 12px; }}
        </style>
    </head>
    <body>
        <div class="header">
            <h1>Calendariko</h1>
        </div>
        <div class="content">
            {content}
        </div>
        <div class="footer">
            <p>Systeme Calendariko - Backup automatique</p>
        </div>
    </body>
    </html>
    """

    @classmethod
    def backup_succeeded(
        cls,
        filename: str,
        size_bytes: int,
        created_at: datetime,
    ) -> EmailContent:
        """
        Notification de backup termine.

        Args:
            filename: Nom de l'artefact.
            size_bytes: Taille de l'artefact.
            created_at: Date de creation.

        Returns:
            EmailContent pret a envoyer.
        """
        size = format_size_mb(size_bytes)
        date = created_at.strftime(cls._DATE_FORMAT)

        html_content = f"""
        <h2>Backup de la base termine</h2>
        <p>Le backup automatique de la base de donnees a ete realise avec succes.</p>
        <ul>
            <li><strong>Fichier:</strong> {escape(filename)}</li>
            <li><strong>Taille:</strong> {size}</li>
            <li><strong>Date:</strong> {date}</li>
        </ul>
        """

        return EmailContent(
            subject="Backup base de donnees termine - Calendariko",
            html=cls._BASE_HTML.format(color="#10B981", content=html_content),
            text=f"Backup termine: {filename} ({size}) le {date}.",
        )

    @classmethod
    def backup_failed(cls, error: str, occurred_at: datetime) -> EmailContent:
        """
        Notification de backup en echec.

        Args:
            error: Message d'erreur.
            occurred_at: Date de l'echec.

        Returns:
            EmailContent pret a envoyer.
        """
        date = occurred_at.strftime(cls._DATE_FORMAT)

        html_content = f"""
        <h2>Erreur lors du backup de la base</h2>
        <p>Une erreur est survenue pendant le backup automatique de la base de donnees.</p>
        <p><strong>Erreur:</strong> {escape(error)}</p>
        <p><strong>Date:</strong> {date}</p>
        <p>Verifiez la configuration du systeme puis relancez un backup manuel.</p>
        """

        return EmailContent(
            subject="Erreur backup base de donnees - Calendariko",
            html=cls._BASE_HTML.format(color="#EF4444", content=html_content),
            text=f"Backup en echec le {date}: {error}",
        )
