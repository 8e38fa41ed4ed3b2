"""
Bearer token middleware for the data endpoints.
"""

from typing import Any, Dict, NoReturn, Optional

from fastapi import HTTPException, Request

from shared.errors import AuthenticationError
from shared.logging import get_logger
from shared.metrics import MetricsCollector
from .jwks import JWKSAuthenticator

UNAUTHORIZED_MESSAGE = "Invalid Authorization header"


class BearerAuthMiddleware:
    """Reject requests that do not carry a bearer token valid for the JWKS.

    Used as a FastAPI dependency on protected routes. Every failure maps to
    the same 401 so clients cannot tell a bad signature from an unreachable
    key set.
    """

    def __init__(self, authenticator: JWKSAuthenticator, metrics: Optional[MetricsCollector] = None):
        self.authenticator = authenticator
        self.metrics = metrics
        self.logger = get_logger("data.auth_middleware")

    async def __call__(self, request: Request) -> Dict[str, Any]:
        return await self.authenticate_request(request)

    async def authenticate_request(self, request: Request) -> Dict[str, Any]:
        """Authenticate the request and return the verified token claims."""
        auth_header = request.headers.get("Authorization")
        if not auth_header:
            self._reject("Authorization header missing")

        fields = auth_header.split()
        if len(fields) != 2 or fields[0] != "Bearer":
            self._reject("Authorization header is not of the form 'Bearer <token>'")

        try:
            claims = await self.authenticator.verify_token(fields[1])
        except AuthenticationError as e:
            self._reject(e.message, **e.details)
        except Exception as e:
            self.logger.error("Unexpected error during token verification", error=str(e), exc_info=e)
            self._reject("Token verification error")

        self._record("valid")
        self.logger.debug("Request authenticated with JWT", subject=claims.get("sub"))
        request.state.claims = claims
        return claims

    def _reject(self, reason: str, **details: Any) -> NoReturn:
        self._record("invalid")
        self.logger.warning("JWT authentication failed", reason=reason, **details)
        raise HTTPException(
            status_code=401,
            detail=UNAUTHORIZED_MESSAGE,
            headers={"WWW-Authenticate": "Bearer"},
        )

    def _record(self, status: str) -> None:
        if self.metrics is not None:
            self.metrics.record_token_validation(status)
