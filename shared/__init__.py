"""
Shared utilities for the Random Data Service.

This package aggregates common building blocks consumed by services:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types rendered as plain-text responses
- base_service: FastAPI application wiring shared by services

Do not import from service_* packages into shared/.
"""
