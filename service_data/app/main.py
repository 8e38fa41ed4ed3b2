"""
Random data service.

Serves pseudo-random records on /data and /data-massive behind bearer token
authentication, plus an unauthenticated /health probe.
"""

import asyncio
from typing import Optional

import httpx
from fastapi import Depends, Query, Request, Response

from shared.base_service import BaseService
from shared.config import ServiceConfig
from .auth import BearerAuthMiddleware, JWKSAuthenticator
from .generator import (
    build_bulk_payload,
    encode_single_record,
    generate_single_record,
    parse_size,
)

JSON_MEDIA_TYPE = "application/json"


class DataService(BaseService):
    """Data service implementation."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        jwks_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__("data", config)

        if not self.config.jwks_url:
            self.logger.warning("JWKS_URL is not set; all protected requests will be rejected")

        self.authenticator = JWKSAuthenticator(
            self.config.jwks_url,
            audience=self.config.jwt_audience,
            issuer=self.config.jwt_issuer,
            algorithms=self.config.jwt_algorithms,
            http_timeout=self.config.write_timeout,
            transport=jwks_transport,
            metrics=self.metrics,
        )
        self.auth_middleware = BearerAuthMiddleware(self.authenticator, self.metrics)

        self._setup_data_routes()

    def _setup_data_routes(self):
        """Set up data-specific routes."""
        protected = [Depends(self.auth_middleware)]

        @self.app.get("/data", dependencies=protected)
        async def get_data(request: Request):
            """Return a single random record."""
            record = generate_single_record()
            body = encode_single_record(record)
            self.metrics.record_records_generated("/data", 1)
            self.logger.info(
                "Served /data request",
                url=str(request.url),
                timestamp=record.timestamp.isoformat(),
                random_value=record.random_value
            )
            return Response(content=body, media_type=JSON_MEDIA_TYPE)

        @self.app.get("/data-massive", dependencies=protected)
        async def get_data_massive(
            request: Request,
            size: Optional[str] = Query(default=None, description="Number of records, default 100"),
        ):
            """Return ``size`` random records as a JSON array."""
            count = parse_size(size)
            loop = asyncio.get_running_loop()
            body = await loop.run_in_executor(None, build_bulk_payload, count)
            self.metrics.record_records_generated("/data-massive", count)
            self.logger.info(
                "Served /data-massive request",
                url=str(request.url),
                size=count,
                bytes=len(body)
            )
            return Response(content=body, media_type=JSON_MEDIA_TYPE)


def create_app(
    config: Optional[ServiceConfig] = None,
    jwks_transport: Optional[httpx.AsyncBaseTransport] = None,
):
    """Create FastAPI application."""
    service = DataService(config, jwks_transport)
    return service.app


def main():
    """Console entry point."""
    service = DataService()
    service.run()


if __name__ == "__main__":
    main()
