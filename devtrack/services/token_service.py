# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Signed, time-limited bearer tokens (PyJWT)."""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt

from devtrack.core.errors import AuthenticationError
from devtrack.metrics import AUTH_FAILURES


class TokenService:
    def __init__(self, secret: str, algorithm: str = "HS256", expires_hours: int = 24):
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = timedelta(hours=expires_hours)

    def issue(self, user_id: str, email: str) -> str:
        now = datetime.now(timezone.utc)
        claims = {"id": user_id, "email": email, "iat": now, "exp": now + self._ttl}
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> Dict[str, Any]:
        """Decode ``token``; raises AuthenticationError if missing, bad or expired."""
        if not token:
            AUTH_FAILURES.labels(reason="missing_token").inc()
            raise AuthenticationError("No token, authorization denied")
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError:
            AUTH_FAILURES.labels(reason="expired_token").inc()
            raise AuthenticationError("Token has expired")
        except jwt.PyJWTError:
            AUTH_FAILURES.labels(reason="invalid_token").inc()
            raise AuthenticationError("Token is not valid")
        if not claims.get("id"):
            AUTH_FAILURES.labels(reason="invalid_token").inc()
            raise AuthenticationError("Token is not valid")
        return claims
