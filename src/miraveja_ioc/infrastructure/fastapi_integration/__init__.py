"""
FastAPI integration module.

Provides helpers for looking beans up from FastAPI endpoints.
"""

from .integration import (
    ApplicationContextMiddleware,
    application_context_lifespan,
    create_fastapi_dependency,
    create_request_dependency,
)

__all__ = [
    "application_context_lifespan",
    "create_fastapi_dependency",
    "create_request_dependency",
    "ApplicationContextMiddleware",
]
