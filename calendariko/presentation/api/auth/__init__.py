"""
Auth API - Validation des tokens JWT emis par le fournisseur d'identite.
"""

from calendariko.presentation.api.auth.jwt_service import JWTService, TokenPayload

__all__ = ["JWTService", "TokenPayload"]
