"""
Logging Config - Configuration structlog.

Responsabilite unique:
----------------------
Configurer structlog pour l'API et le worker de backup, et propager
le contexte (requete HTTP, operation de backup) a tous les evenements.

Modes:
------
- Development: Pretty print, couleurs
- Production: JSON, timestamp ISO UTC

Usage:
------
    from calendariko.infrastructure.logging import configure_logging, get_logger, operation_context

    configure_logging(json_logs=True, service="backup-worker")
    logger = get_logger(__name__)

    with operation_context("create_backup", origin="auto"):
        logger.info("backup_started")  # porte operation_id et backup_operation
"""

import logging
import sys
import time
import uuid
from contextlib import contextmanager
from typing import Iterator, Optional

import structlog

# Bibliotheques trop bavardes au niveau INFO
NOISY_LOGGERS = ("apscheduler", "sqlalchemy.engine", "python_http_client")

REQUEST_ID_HEADER = "x-request-id"


def _resolve_level(log_level: str) -> int:
    level = logging.getLevelName(log_level.upper())
    return level if isinstance(level, int) else logging.INFO


def _build_processors(json_logs: bool) -> list:
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if json_logs:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    return processors


def configure_logging(
    json_logs: bool = False,
    log_level: str = "INFO",
    service: Optional[str] = None,
) -> None:
    """
    Configure le logging global.

    Args:
        json_logs: True pour JSON (production), False pour pretty.
        log_level: Niveau minimum (DEBUG, INFO, WARNING, ERROR).
            Un niveau inconnu retombe sur INFO.
        service: Nom du processus ("api", "backup-worker"), ajoute a
            chaque evenement.
    """
    structlog.configure(
        processors=_build_processors(json_logs),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=_resolve_level(log_level),
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.contextvars.clear_contextvars()
    if service:
        structlog.contextvars.bind_contextvars(service=service)


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """
    Retourne un logger structure.

    Example:
        logger = get_logger(__name__)
        logger.info("backup_deleted", filename="calendariko_backup_...sql")
    """
    return structlog.get_logger(name)


@contextmanager
def operation_context(operation: str, **fields) -> Iterator[str]:
    """
    Lie une operation de backup au contexte de log.

    Tous les evenements emis dans le bloc portent backup_operation,
    operation_id et les champs fournis.

    Args:
        operation: Nom de l'operation (create_backup, restore_from_backup, ...).
        **fields: Contexte supplementaire (origin, operator_id, ...).

    Yields:
        L'identifiant de l'operation.
    """
    operation_id = uuid.uuid4().hex[:12]
    with structlog.contextvars.bound_contextvars(
        backup_operation=operation,
        operation_id=operation_id,
        **fields,
    ):
        yield operation_id


class RequestLogger:
    """
    Middleware de logging pour FastAPI.

    Reprend (ou genere) l'identifiant de requete, le renvoie dans la
    reponse et journalise statut et duree.
    """

    def __init__(self, logger: Optional[structlog.stdlib.BoundLogger] = None):
        self._logger = logger or get_logger("api.requests")

    async def __call__(self, request, call_next):
        start_time = time.perf_counter()
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex

        with structlog.contextvars.bound_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else None,
        ):
            try:
                response = await call_next(request)
            except Exception as e:
                self._logger.error(
                    "request_failed",
                    error=str(e),
                    error_type=type(e).__name__,
                    duration_ms=self._elapsed_ms(start_time),
                )
                raise

            log = self._logger.warning if response.status_code >= 500 else self._logger.info
            log(
                "request_completed",
                status_code=response.status_code,
                duration_ms=self._elapsed_ms(start_time),
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    @staticmethod
    def _elapsed_ms(start_time: float) -> float:
        return round((time.perf_counter() - start_time) * 1000, 2)
