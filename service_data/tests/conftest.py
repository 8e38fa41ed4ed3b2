"""
Shared fixtures for data service tests.
"""

import time
from typing import Any, Callable, Dict, List

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi.testclient import TestClient
from jose import jwk, jwt

from service_data.app.main import create_app
from shared.config import get_config

JWKS_URL = "http://jwks.test/realms/demo/protocol/openid-connect/certs"
TEST_KID = "test-key-1"


def _generate_private_pem() -> bytes:
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def public_jwk(private_pem: bytes, kid: str) -> Dict[str, Any]:
    public_key = jwk.construct(private_pem, "RS256").public_key()
    key_data = public_key.to_dict()
    key_data.update({"kid": kid, "use": "sig", "alg": "RS256"})
    return key_data


@pytest.fixture(scope="session")
def private_pem() -> bytes:
    """RSA signing key shared by the test session."""
    return _generate_private_pem()


@pytest.fixture(scope="session")
def other_private_pem() -> bytes:
    """A second signing key, absent from the default key set."""
    return _generate_private_pem()


@pytest.fixture(scope="session")
def jwks_document(private_pem) -> Dict[str, Any]:
    return {"keys": [public_jwk(private_pem, TEST_KID)]}


@pytest.fixture
def make_token(private_pem) -> Callable[..., str]:
    """Build a signed JWT; claims and header fields can be overridden."""

    def _make_token(key: bytes = None, kid: str = TEST_KID, **claims: Any) -> str:
        now = int(time.time())
        payload = {"sub": "user1", "iat": now, "exp": now + 3600}
        payload.update(claims)
        headers = {"kid": kid} if kid is not None else {}
        return jwt.encode(payload, key or private_pem, algorithm="RS256", headers=headers)

    return _make_token


@pytest.fixture
def jwks_requests() -> List[httpx.Request]:
    """Requests observed by the mock JWKS endpoint."""
    return []


@pytest.fixture
def jwks_transport(jwks_document, jwks_requests) -> httpx.MockTransport:
    """Transport serving the test key set at JWKS_URL."""

    def handler(request: httpx.Request) -> httpx.Response:
        jwks_requests.append(request)
        if str(request.url) != JWKS_URL:
            return httpx.Response(404)
        return httpx.Response(200, json=jwks_document)

    return httpx.MockTransport(handler)


@pytest.fixture
def failing_transport() -> httpx.MockTransport:
    """Transport simulating an unreachable key set."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    return httpx.MockTransport(handler)


@pytest.fixture
def service_config():
    """Configuration isolated from the host environment."""
    return get_config("data", jwks_url=JWKS_URL, env="test", log_level="warning")


@pytest.fixture
def client(service_config, jwks_transport) -> TestClient:
    """Test client for the data service."""
    app = create_app(service_config, jwks_transport=jwks_transport)
    return TestClient(app)


@pytest.fixture
def auth_headers(make_token) -> Dict[str, str]:
    return {"Authorization": f"Bearer {make_token()}"}
