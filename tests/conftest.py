"""Shared test fixtures."""

import pytest
from fastapi import FastAPI

from cineprog.api.routes import conflicts, health, imports, mappings

CALLER_HEADERS = {"X-User-Id": "reviewer-1"}


@pytest.fixture
def test_app() -> FastAPI:
    """Minimal FastAPI app without the APScheduler lifespan, for API tests."""
    app = FastAPI()
    app.include_router(health.router)
    app.include_router(imports.router)
    app.include_router(conflicts.router)
    app.include_router(mappings.router)
    return app


@pytest.fixture
def caller_headers() -> dict[str, str]:
    return dict(CALLER_HEADERS)
