"""
Base service class for Random Data Service applications.
"""

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send
from typing import Optional
import asyncio
import time

import uvicorn

from shared.config import ServiceConfig, get_config
from shared.logging import configure_logging, get_logger, set_request_id, clear_context
from shared.metrics import get_metrics_collector
from shared.errors import ServiceException

INTERNAL_ERROR_MESSAGE = "Internal server error"

# /health answers every method
HEALTH_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

METHOD_NOT_ALLOWED_MESSAGE = "Method not allowed"


def _request_id_headers(state) -> dict:
    request_id = state.get("request_id")
    return {"X-Request-ID": request_id} if request_id else {}


class WriteTimeoutMiddleware:
    """ASGI middleware bounding the time a request may take to produce its response.

    If the deadline passes before the response has started, a 500 is sent
    instead; once headers are out the connection is simply abandoned.
    """

    def __init__(self, app: ASGIApp, timeout: float, logger=None):
        self.app = app
        self.timeout = timeout
        self.logger = logger or get_logger("service.write_timeout")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await asyncio.wait_for(self.app(scope, receive, send_wrapper), timeout=self.timeout)
        except asyncio.TimeoutError:
            self.logger.error(
                "Request exceeded write timeout",
                method=scope.get("method"),
                path=scope.get("path"),
                timeout_seconds=self.timeout,
                response_started=response_started
            )
            if not response_started:
                response = PlainTextResponse(
                    INTERNAL_ERROR_MESSAGE,
                    status_code=500,
                    headers=_request_id_headers(scope.get("state") or {}),
                )
                await response(scope, receive, send)


class BaseService:
    """Base service class with common functionality."""

    def __init__(self, service_name: str, config: Optional[ServiceConfig] = None):
        self.service_name = service_name
        self.config = config or get_config(service_name)
        self.logger = get_logger(f"{service_name}.service")
        self.metrics = get_metrics_collector(service_name)

        # Configure logging
        configure_logging(service_name, self.config.log_level)

        # Create FastAPI app
        self.app = self._create_app()

        # Set up middleware
        self._setup_middleware()

        # Set up routes
        self._setup_routes()

    def _create_app(self) -> FastAPI:
        """Create FastAPI application."""
        return FastAPI(
            title=f"{self.service_name.title()} Service",
            description=f"Random Data Service - {self.service_name.title()}",
            version="1.0.0",
            docs_url="/docs" if self.config.env == "local" else None,
            redoc_url="/redoc" if self.config.env == "local" else None,
            openapi_url="/openapi.json" if self.config.env == "local" else None,
        )

    def _setup_middleware(self):
        """Set up middleware."""

        # Request timing and correlation
        @self.app.middleware("http")
        async def add_request_timing(request: Request, call_next):
            request_id = set_request_id(request.headers.get("X-Request-ID"))
            request.state.request_id = request_id
            start_time = time.time()

            try:
                response = await call_next(request)
            except (Exception, asyncio.CancelledError):
                # Error and timeout responses are rendered further out
                self._record_request(request, 500, time.time() - start_time)
                clear_context()
                raise

            response.headers["X-Request-ID"] = request_id
            self._record_request(request, response.status_code, time.time() - start_time)
            clear_context()

            return response

        # Added last so it wraps everything above
        self.app.add_middleware(WriteTimeoutMiddleware, timeout=self.config.write_timeout, logger=self.logger)

    def _record_request(self, request: Request, status_code: int, duration: float):
        """Record metrics and the access log line for one request."""
        self.metrics.record_http_request(
            method=request.method,
            endpoint=request.url.path,
            status_code=status_code,
            duration=duration
        )

        self.logger.info(
            "HTTP request",
            method=request.method,
            path=request.url.path,
            status_code=status_code,
            duration_ms=round(duration * 1000, 2)
        )

    def _setup_routes(self):
        """Set up common routes."""

        @self.app.api_route("/health", methods=HEALTH_METHODS, include_in_schema=False)
        async def health_check():
            """Health check endpoint."""
            return Response(status_code=200)

        if self.config.enable_metrics:
            @self.app.get("/metrics", include_in_schema=False)
            async def metrics_endpoint():
                """Prometheus metrics endpoint."""
                return Response(
                    content=self.metrics.render(),
                    media_type=self.metrics.content_type
                )

        # Error handlers
        @self.app.exception_handler(ServiceException)
        async def service_exception_handler(request: Request, exc: ServiceException):
            """Handle ServiceException."""
            self.logger.warning(
                "Service error",
                code=exc.code,
                message=exc.message,
                details=exc.details,
                path=request.url.path
            )
            return PlainTextResponse(exc.message, status_code=exc.status_code)

        @self.app.exception_handler(StarletteHTTPException)
        async def http_exception_handler(request: Request, exc: StarletteHTTPException):
            """Render routing and auth errors as plain text."""
            detail = METHOD_NOT_ALLOWED_MESSAGE if exc.status_code == 405 else str(exc.detail)
            return PlainTextResponse(detail, status_code=exc.status_code, headers=exc.headers)

        @self.app.exception_handler(RequestValidationError)
        async def request_validation_handler(request: Request, exc: RequestValidationError):
            """Handle malformed request parameters."""
            return PlainTextResponse("Invalid request parameters", status_code=400)

        @self.app.exception_handler(Exception)
        async def general_exception_handler(request: Request, exc: Exception):
            """Handle general exceptions."""
            self.logger.error("Unhandled exception", error=str(exc), path=request.url.path, exc_info=exc)
            return PlainTextResponse(
                INTERNAL_ERROR_MESSAGE,
                status_code=500,
                headers=_request_id_headers(request.scope.get("state") or {}),
            )

    def run(self):
        """Run the service.

        uvicorn has no direct read/write deadlines; the read timeout bounds idle
        keep-alive connections and the write timeout is enforced per request by
        WriteTimeoutMiddleware. A bind failure makes uvicorn exit non-zero; the
        exit is logged and propagated.
        """
        self.logger.info(
            "Starting HTTP server",
            host=self.config.host,
            port=self.config.port,
            read_timeout=self.config.read_timeout,
            write_timeout=self.config.write_timeout,
            max_header_bytes=self.config.max_header_bytes
        )
        try:
            uvicorn.run(
                self.app,
                host=self.config.host,
                port=self.config.port,
                log_level=self.config.log_level.lower(),
                http="h11",
                timeout_keep_alive=int(self.config.read_timeout),
                h11_max_incomplete_event_size=self.config.max_header_bytes,
            )
        except SystemExit as exc:
            if exc.code:
                self.logger.critical("HTTP server exited", exit_code=exc.code)
            raise
