"""
Backup API - Administration des sauvegardes.
"""

from calendariko.presentation.api.backup.router import router

__all__ = ["router"]
