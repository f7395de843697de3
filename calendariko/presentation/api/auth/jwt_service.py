"""
JWTService - Validation des access tokens Calendariko.

Responsabilite unique:
----------------------
Verifier les tokens presentes aux endpoints backup (signature,
expiration, claims obligatoires) et en extraire l'operateur.

Claims attendus:
----------------
- sub: identifiant de l'utilisateur
- role: "ADMIN", "ARTIST", ... (insensible a la casse)
- type: "access"
- exp / iat
- iss: verifie uniquement si JWT_ISSUER est configure

Usage:
------
    service = JWTService(settings)
    payload = service.verify_access_token(token)
    if payload and payload.is_admin:
        ...
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from jwt.exceptions import PyJWTError

from calendariko.infrastructure.logging import get_logger
from calendariko.presentation.api.config import APISettings

logger = get_logger(__name__)

ACCESS_TOKEN_TYPE = "access"
REQUIRED_CLAIMS = ["sub", "exp", "type"]


@dataclass(frozen=True)
class TokenPayload:
    """Operateur authentifie, tel que decrit par le token."""

    user_id: str
    role: str
    token_type: str
    exp: datetime

    @property
    def is_admin(self) -> bool:
        return self.role.lower() == "admin"

    @classmethod
    def from_claims(cls, claims: Dict[str, Any]) -> "TokenPayload":
        return cls(
            user_id=str(claims["sub"]),
            role=str(claims.get("role") or ""),
            token_type=claims["type"],
            exp=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
        )


class JWTService:
    """Emission (tests, outils) et verification des access tokens."""

    def __init__(self, settings: APISettings):
        self._settings = settings

    def create_access_token(
        self,
        user_id: str,
        role: str,
        expires_in: Optional[timedelta] = None,
    ) -> str:
        """
        Signe un access token.

        Le fournisseur d'identite emet normalement les tokens; cette
        methode sert aux outils d'administration et aux tests.
        """
        settings = self._settings
        issued_at = datetime.now(timezone.utc)
        lifetime = expires_in or timedelta(minutes=settings.jwt_access_expire_minutes)

        claims: Dict[str, Any] = {
            "sub": str(user_id),
            "role": role,
            "type": ACCESS_TOKEN_TYPE,
            "iat": issued_at,
            "exp": issued_at + lifetime,
        }
        if settings.jwt_issuer:
            claims["iss"] = settings.jwt_issuer
        return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)

    def verify_access_token(self, token: str) -> Optional[TokenPayload]:
        """
        Verifie un access token.

        Args:
            token: Token JWT brut (sans le prefixe "Bearer").

        Returns:
            TokenPayload si le token est valide, None sinon. Le motif du
            rejet est journalise, jamais renvoye au client.
        """
        settings = self._settings
        options: Dict[str, Any] = {"require": list(REQUIRED_CLAIMS)}
        if settings.jwt_issuer:
            options["require"].append("iss")

        try:
            claims = jwt.decode(
                token,
                settings.jwt_secret_key,
                algorithms=[settings.jwt_algorithm],
                issuer=settings.jwt_issuer or None,
                leeway=settings.jwt_leeway_seconds,
                options=options,
            )
        except PyJWTError as e:
            logger.debug("token_rejected", reason=type(e).__name__)
            return None

        if claims["type"] != ACCESS_TOKEN_TYPE:
            logger.debug("token_rejected", reason="wrong_type", token_type=claims["type"])
            return None

        return TokenPayload.from_claims(claims)
