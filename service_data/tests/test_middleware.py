"""
Unit tests for BearerAuthMiddleware.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock
from fastapi import HTTPException, Request

from service_data.app.auth.middleware import BearerAuthMiddleware, UNAUTHORIZED_MESSAGE
from shared.errors import AuthenticationError
from shared.metrics import MetricsCollector


class TestBearerAuthMiddleware:
    """Test cases for BearerAuthMiddleware."""

    @pytest.fixture
    def metrics(self):
        return MetricsCollector("data")

    @pytest.fixture
    def auth_middleware(self, metrics):
        """Create BearerAuthMiddleware with a mocked authenticator."""
        mock_authenticator = AsyncMock()
        return BearerAuthMiddleware(mock_authenticator, metrics)

    @pytest.fixture
    def mock_request(self):
        """Create mock request."""
        request = MagicMock(spec=Request)
        request.headers = {}
        request.state = MagicMock()
        return request

    @pytest.mark.asyncio
    async def test_authenticate_request_success(self, auth_middleware, mock_request, metrics):
        """Test successful JWT authentication."""
        mock_request.headers = {"Authorization": "Bearer valid_token"}
        auth_middleware.authenticator.verify_token = AsyncMock(return_value={"sub": "user1"})

        result = await auth_middleware.authenticate_request(mock_request)

        assert result == {"sub": "user1"}
        assert mock_request.state.claims == {"sub": "user1"}
        auth_middleware.authenticator.verify_token.assert_called_once_with("valid_token")
        assert metrics.registry.get_sample_value("token_validations_total", {"status": "valid"}) == 1.0

    @pytest.mark.asyncio
    async def test_extra_whitespace_is_tolerated(self, auth_middleware, mock_request):
        mock_request.headers = {"Authorization": "  Bearer   valid_token  "}
        auth_middleware.authenticator.verify_token = AsyncMock(return_value={"sub": "user1"})

        await auth_middleware.authenticate_request(mock_request)

        auth_middleware.authenticator.verify_token.assert_called_once_with("valid_token")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("header", [
        None,
        "",
        "Bearer",
        "bearer valid_token",
        "Basic dXNlcjpwYXNz",
        "Bearer valid_token extra",
        "Token valid_token",
    ])
    async def test_malformed_header_rejected(self, auth_middleware, mock_request, metrics, header):
        """Missing or malformed headers never reach the authenticator."""
        if header is not None:
            mock_request.headers = {"Authorization": header}

        with pytest.raises(HTTPException) as exc_info:
            await auth_middleware.authenticate_request(mock_request)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == UNAUTHORIZED_MESSAGE
        assert exc_info.value.headers == {"WWW-Authenticate": "Bearer"}
        auth_middleware.authenticator.verify_token.assert_not_called()
        assert metrics.registry.get_sample_value("token_validations_total", {"status": "invalid"}) == 1.0

    @pytest.mark.asyncio
    async def test_authentication_error_rejected(self, auth_middleware, mock_request):
        mock_request.headers = {"Authorization": "Bearer invalid_token"}
        auth_middleware.authenticator.verify_token = AsyncMock(
            side_effect=AuthenticationError("JWKS fetch failed", details={"error": "timeout"})
        )

        with pytest.raises(HTTPException) as exc_info:
            await auth_middleware.authenticate_request(mock_request)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == UNAUTHORIZED_MESSAGE

    @pytest.mark.asyncio
    async def test_unexpected_error_fails_closed(self, auth_middleware, mock_request):
        """Unexpected verifier errors block the request instead of leaking a 500."""
        mock_request.headers = {"Authorization": "Bearer some_token"}
        auth_middleware.authenticator.verify_token = AsyncMock(side_effect=RuntimeError("boom"))

        with pytest.raises(HTTPException) as exc_info:
            await auth_middleware.authenticate_request(mock_request)

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_callable_as_dependency(self, auth_middleware, mock_request):
        mock_request.headers = {"Authorization": "Bearer valid_token"}
        auth_middleware.authenticator.verify_token = AsyncMock(return_value={"sub": "user1"})

        assert await auth_middleware(mock_request) == {"sub": "user1"}
