"""REST API presentation layer for Agora.

This package provides a FastAPI-based REST API in front of the
agora_auth subsystem.

Structure:
    api/
    ├── app.py                # FastAPI application factory
    ├── dependencies.py       # Dependency injection
    ├── exception_handlers.py # Auth error to HTTP mapping
    ├── routers/              # API route handlers
    └── schemas/              # Pydantic request/response schemas
"""

from agora.presentation.api.app import create_app

__all__ = ["create_app"]
