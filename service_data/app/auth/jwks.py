"""
JSON Web Key Set (JWKS) token verification for the data endpoints.

The key set is fetched from the configured URL on every call; nothing is
cached between requests.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence

import httpx
from jose import jwt
from jose.exceptions import JOSEError

from shared.errors import AuthenticationError
from shared.logging import get_logger
from shared.metrics import MetricsCollector

DEFAULT_ALGORITHMS = ("RS256", "RS384", "RS512", "ES256", "ES384", "ES512")


class JWKSAuthenticator:
    """Authenticator that validates JWTs against a remote JWKS endpoint."""

    def __init__(
        self,
        jwks_url: str,
        audience: Optional[str] = None,
        issuer: Optional[str] = None,
        *,
        algorithms: Sequence[str] = DEFAULT_ALGORITHMS,
        http_timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        self.jwks_url = jwks_url
        self.audience = audience
        self.issuer = issuer
        self.algorithms = tuple(algorithms)
        self.http_timeout = http_timeout
        self.metrics = metrics
        self.logger = get_logger("data.auth.jwks")

        self._transport = transport

    async def verify_token(self, token: str) -> Dict[str, Any]:
        """Fetch the key set, then validate the JWT signature and claims."""
        keys = await self.fetch_keys()

        try:
            header = jwt.get_unverified_header(token)
        except JOSEError as exc:
            raise AuthenticationError("Malformed JWT", details={"error": str(exc)}) from exc

        kid = header.get("kid")
        if not isinstance(kid, str):
            raise AuthenticationError("JWT header missing key id (kid)")

        key_data = self._select_key(keys, kid)
        if key_data is None:
            raise AuthenticationError("Signing key not found for token", details={"kid": kid})

        algorithm = key_data.get("alg") or header.get("alg")
        if algorithm not in self.algorithms:
            raise AuthenticationError("JWT algorithm not allowed", details={"alg": algorithm})

        options: Dict[str, Any] = {"verify_aud": self.audience is not None}

        try:
            claims = jwt.decode(
                token,
                key_data,
                algorithms=[algorithm],
                audience=self.audience,
                issuer=self.issuer,
                options=options,
            )
        except (JOSEError, ValueError, TypeError) as exc:
            raise AuthenticationError("JWT validation failed", details={"error": str(exc)}) from exc

        return claims

    async def fetch_keys(self) -> List[Dict[str, Any]]:
        """Download the JWKS document and return its ``keys`` array."""
        if not self.jwks_url:
            raise AuthenticationError("JWKS URL is not configured")

        try:
            async with httpx.AsyncClient(timeout=self.http_timeout, transport=self._transport) as client:
                response = await client.get(self.jwks_url)
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            self._record_fetch("error")
            raise AuthenticationError(
                "JWKS fetch failed",
                details={"url": self.jwks_url, "error": str(exc)},
            ) from exc

        keys = payload.get("keys") if isinstance(payload, dict) else None
        if not isinstance(keys, list):
            self._record_fetch("error")
            raise AuthenticationError("JWKS response missing 'keys' array")

        self._record_fetch("ok")
        return [key for key in keys if isinstance(key, dict)]

    def _select_key(self, keys: Iterable[Dict[str, Any]], kid: str) -> Optional[Dict[str, Any]]:
        for key in keys:
            if key.get("kid") == kid:
                return key
        return None

    def _record_fetch(self, status: str) -> None:
        if self.metrics is not None:
            self.metrics.record_jwks_fetch(status)
