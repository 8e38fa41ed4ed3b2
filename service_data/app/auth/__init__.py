"""
Authentication package for the data service.

- jwks: fetches the remote key set and verifies JWTs against it.
- middleware: FastAPI dependency enforcing ``Authorization: Bearer <token>``.

The key set is fetched per request; there is no cache to warm or refresh.
"""

from .jwks import JWKSAuthenticator
from .middleware import BearerAuthMiddleware, UNAUTHORIZED_MESSAGE

__all__ = ["JWKSAuthenticator", "BearerAuthMiddleware", "UNAUTHORIZED_MESSAGE"]
