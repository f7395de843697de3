"""
BackupScheduler - Planificateur de sauvegardes.

Responsabilite unique:
----------------------
Planifier les sauvegardes automatiques (cron) et notifier leur resultat.

Usage:
------
    scheduler = BackupScheduler(service, notifier, settings.scheduler_config)
    scheduler.start()  # Demarre en arriere-plan (ARMED ou DISABLED)
    scheduler.stop()   # Arrete le scheduler

Etats:
------
- DISABLED: aucun declenchement arme (desactive, cron invalide ou arrete)
- ARMED: job cron enregistre dans un BackgroundScheduler actif
"""

import signal
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from calendariko.domain.entities.backup import BackupOrigin, BackupRecord
from calendariko.domain.entities.schedule import ScheduleStatus, SchedulerConfig, SchedulerState
from calendariko.domain.ports.notification_sender import NotificationSender
from calendariko.infrastructure.backup.service import BackupService
from calendariko.infrastructure.logging import get_logger

logger = get_logger(__name__)

JOB_ID = "database_backup"


def _error_message(error: Exception) -> str:
    return getattr(error, "message", None) or str(error)


class BackupScheduler:
    """
    Planificateur de sauvegardes automatiques.

    Possede sa propre instance de BackgroundScheduler, recreee a
    chaque demarrage.
    """

    def __init__(
        self,
        service: BackupService,
        notifier: NotificationSender,
        config: SchedulerConfig,
        scheduler_factory: Callable[[], BackgroundScheduler] = BackgroundScheduler,
    ):
        """
        Initialise le scheduler.

        Args:
            service: Moteur de sauvegarde.
            notifier: Puits de notifications.
            config: Configuration cron.
            scheduler_factory: Fabrique du scheduler APScheduler.
        """
        self._service = service
        self._notifier = notifier
        self._config = config
        self._factory = scheduler_factory
        self._scheduler: Optional[BackgroundScheduler] = None
        self._state = SchedulerState.DISABLED

    @property
    def config(self) -> SchedulerConfig:
        return self._config

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def is_running(self) -> bool:
        """Retourne True si un declenchement est arme."""
        return self._state is SchedulerState.ARMED

    def start(self) -> SchedulerState:
        """
        Arme le job cron si la configuration le permet.

        Returns:
            Etat resultant (ARMED ou DISABLED).
        """
        if self._state is SchedulerState.ARMED:
            logger.warning("scheduler_already_running")
            return self._state

        if not self._config.enabled:
            logger.info("scheduler_disabled", reason="BACKUP_AUTO_ENABLED=false")
            return self._state

        try:
            trigger = CronTrigger.from_crontab(
                self._config.cron_expression,
                timezone=self._config.timezone,
            )
        except (ValueError, KeyError) as e:
            logger.error(
                "scheduler_invalid_config",
                cron_expression=self._config.cron_expression,
                timezone=self._config.timezone,
                error=str(e),
            )
            return self._state

        scheduler = self._factory()
        scheduler.add_job(
            self._run_scheduled_backup,
            trigger=trigger,
            id=JOB_ID,
            name="Backup base de donnees",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        scheduler.start()

        self._scheduler = scheduler
        self._state = SchedulerState.ARMED

        logger.info(
            "scheduler_started",
            cron_expression=self._config.cron_expression,
            timezone=self._config.timezone,
            next_run=str(self.next_run) if self.next_run else None,
        )
        return self._state

    def stop(self) -> None:
        """Arrete le scheduler (attend la fin d'un backup en cours)."""
        if self._state is SchedulerState.DISABLED or self._scheduler is None:
            return

        self._scheduler.shutdown(wait=True)
        self._scheduler = None
        self._state = SchedulerState.DISABLED

        logger.info("scheduler_stopped")

    def restart(self, config: Optional[SchedulerConfig] = None) -> SchedulerState:
        """Arrete puis redemarre, avec une nouvelle configuration si fournie."""
        self.stop()
        if config is not None:
            self._config = config
        return self.start()

    def test_backup(self, operator_id: Optional[str] = None) -> BackupRecord:
        """
        Execute un backup immediatement et notifie le resultat.

        Returns:
            BackupRecord cree.

        Raises:
            BackupError: Re-levee apres notification de l'echec.
        """
        logger.info("test_backup_started")
        try:
            record = self._service.create_backup(BackupOrigin.AUTOMATIC, operator_id=operator_id)
        except Exception as e:
            logger.error("test_backup_failed", error=str(e))
            self._notifier.backup_failed(_error_message(e), context="test")
            raise

        logger.info("test_backup_completed", filename=record.filename, size_bytes=record.size_bytes)
        self._notifier.backup_succeeded(record)
        return record

    def get_status(self) -> ScheduleStatus:
        """Etat courant (lecture seule)."""
        return ScheduleStatus(
            enabled=self._config.enabled,
            cron_expression=self._config.cron_expression if self._config.enabled else None,
            timezone=self._config.timezone,
            state=self._state,
            next_run=self.next_run,
        )

    @property
    def next_run(self):
        """Retourne la prochaine execution planifiee (None si inconnue)."""
        if self._state is not SchedulerState.ARMED or self._scheduler is None:
            return None

        job = self._scheduler.get_job(JOB_ID)
        if job:
            return job.next_run_time
        return None

    def install_signal_handlers(self, on_stop: Optional[Callable[[], None]] = None) -> None:
        """
        Arrete le scheduler sur SIGINT/SIGTERM.

        Args:
            on_stop: Appele apres l'arret (ex: liberer la boucle principale).
        """
        def _handle(signum, frame):
            logger.info("signal_received", signal=signal.Signals(signum).name)
            self.stop()
            if on_stop is not None:
                on_stop()

        signal.signal(signal.SIGINT, _handle)
        signal.signal(signal.SIGTERM, _handle)

    def _run_scheduled_backup(self) -> None:
        """Execute le backup planifie (n'echappe jamais d'exception)."""
        logger.info("scheduled_backup_started")
        try:
            record = self._service.create_backup(BackupOrigin.AUTOMATIC)
        except Exception as e:
            logger.error("scheduled_backup_failed", error=str(e))
            self._notifier.backup_failed(_error_message(e), context="scheduled")
            return

        logger.info(
            "scheduled_backup_completed",
            filename=record.filename,
            size_bytes=record.size_bytes,
        )
        self._notifier.backup_succeeded(record)
