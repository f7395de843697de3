"""
Logging Infrastructure - Logging structure avec structlog.

Responsabilite:
---------------
Fournir un logging JSON structure pour production.

Usage:
------
    from calendariko.infrastructure.logging import get_logger

    logger = get_logger(__name__)
    logger.info("backup_completed", filename="calendariko_backup_...sql", size_bytes=1024)
"""

from calendariko.infrastructure.logging.config import (
    RequestLogger,
    configure_logging,
    get_logger,
    operation_context,
)

__all__ = ["RequestLogger", "configure_logging", "get_logger", "operation_context"]
