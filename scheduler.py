#!/usr/bin/env python3
"""
Worker de backup automatique de la base Calendariko.

Ce worker arme le job cron de sauvegarde et attend un signal d'arret.

Architecture:
-------------
BackupScheduler (APScheduler BackgroundScheduler) avec un seul job:
- database_backup : selon BACKUP_SCHEDULE (defaut "0 2 * * *", TZ Europe/Rome)

Chaque declenchement:
1. Cree un backup (pg_dump, ou export JSON si pg_dump est absent)
2. Purge selon BACKUP_RETENTION_DAYS / BACKUP_MAX_COUNT
3. Notifie le resultat par email si BACKUP_NOTIFICATIONS_ENABLED=true

Deploiement:
------------
Deployer comme service "worker" separe de l'API.
- Command: python scheduler.py
- Variables: DATABASE_URL, BACKUP_AUTO_ENABLED=true, BACKUP_DIR

Arret propre:
-------------
SIGINT/SIGTERM arretent le scheduler (en attendant un backup en cours)
puis terminent le processus.
"""
import os
import sys
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer
from threading import Thread

from calendariko.domain.entities.schedule import SchedulerState
from calendariko.domain.exceptions import BackupError
from calendariko.infrastructure.backup.strategies import parse_database_url
from calendariko.infrastructure.container import BackupContainer
from calendariko.infrastructure.logging import configure_logging, get_logger

logger = get_logger("backup_worker")


# ============================================================================
# HEALTH CHECK SERVER
# ============================================================================

def make_health_handler(container: BackupContainer):
    """Construit un handler HTTP de healthcheck lie au conteneur."""

    class HealthHandler(BaseHTTPRequestHandler):
        """Handler HTTP simple pour les healthchecks."""

        def do_GET(self):
            if self.path == '/health':
                status = container.scheduler.get_status()
                body = (
                    '{"status": "healthy", "service": "backup-worker", '
                    f'"scheduler": "{status.state.value}"}}'
                )
                self.send_response(200)
                self.send_header('Content-type', 'application/json')
                self.end_headers()
                self.wfile.write(body.encode())
            else:
                self.send_response(404)
                self.end_headers()

        def log_message(self, format, *args):
            # Silence les logs HTTP
            pass

    return HealthHandler


def start_health_server(container: BackupContainer, port: int = 8501) -> HTTPServer:
    """Demarre le serveur de healthcheck en background."""
    server = HTTPServer(('0.0.0.0', port), make_health_handler(container))
    thread = Thread(target=server.serve_forever, daemon=True)
    thread.start()
    logger.info("health_server_started", port=port)
    return server


def main():
    """Point d'entree principal du worker"""
    configure_logging(
        json_logs=os.getenv("ENV", "development") == "production",
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        service="backup-worker",
    )

    container = BackupContainer.create()
    settings = container.settings

    # Verifier la configuration
    try:
        parse_database_url(settings.database_url)
    except BackupError as e:
        logger.error("worker_configuration_invalid", error=e.message)
        sys.exit(1)

    logger.info(
        "worker_starting",
        backup_dir=str(settings.backup_path),
        retention_days=settings.backup_retention_days,
        max_count=settings.backup_max_count,
        notifications=settings.notifications_active,
    )

    health_server = start_health_server(container, int(os.getenv("PORT", 8501)))

    stopped = threading.Event()
    container.scheduler.install_signal_handlers(on_stop=stopped.set)

    if container.scheduler.start() is not SchedulerState.ARMED:
        logger.warning("worker_idle", reason="backup automatique desactive ou cron invalide")

    stopped.wait()

    health_server.shutdown()
    container.shutdown()
    logger.info("worker_stopped")


if __name__ == "__main__":
    main()
