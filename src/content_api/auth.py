"""
Admin authentication: one shared password in, a signed time-limited JWT out.
"""

import hmac
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from content_api.config.settings import Settings
from content_api.errors import InvalidCredentials, InvalidOrExpiredToken, ValidationError

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer <token>`` header value."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class AuthService:
    """Stateless credential checks; tokens cannot be revoked before they expire."""

    def __init__(self, settings: Settings):
        self._secret = settings.jwt_secret
        self._algorithm = settings.jwt_algorithm
        self._admin_password = settings.admin_password
        self.token_lifetime = timedelta(hours=settings.jwt_expires_hours)

    def login(self, password: Optional[str]) -> str:
        if not password:
            raise ValidationError("Password is required")
        if not hmac.compare_digest(password.encode(), self._admin_password.encode()):
            logger.warning("Rejected admin login with wrong password")
            raise InvalidCredentials("Invalid password")
        return self.issue_token()

    def issue_token(self, now: Optional[datetime] = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "role": ADMIN_ROLE,
            "iat": issued_at,
            "exp": issued_at + self.token_lifetime,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: Optional[str]) -> Dict[str, Any]:
        """Check signature and expiry; return the decoded claims."""
        if not token:
            raise InvalidOrExpiredToken()
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.PyJWTError as e:
            logger.info(f"Token rejected: {e}")
            raise InvalidOrExpiredToken()
        if claims.get("role") != ADMIN_ROLE:
            raise InvalidOrExpiredToken()
        return claims

    def try_authenticate(self, authorization: Optional[str]) -> Optional[str]:
        """Soft auth for read routes: the caller's role, or None when absent or invalid."""
        token = extract_bearer_token(authorization)
        if token is None:
            return None
        try:
            return self.verify(token)["role"]
        except InvalidOrExpiredToken:
            return None
