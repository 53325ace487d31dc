"""Admin FastAPI application."""

from fastapi import FastAPI
from sqladmin import Admin

from cineprog.admin.auth import AdminAuth
from cineprog.admin.views import (
    CinemaAdmin,
    CinemaGroupAdmin,
    ConflictMovieAdmin,
    ImportJobAdmin,
    ImportToolsView,
    MovieAdmin,
    ParserAdmin,
    ScreeningAdmin,
    TitleMappingAdmin,
)
from cineprog.config import settings
from cineprog.database import engine

ADMIN_VIEWS = [
    ImportJobAdmin,
    ConflictMovieAdmin,
    TitleMappingAdmin,
    MovieAdmin,
    ScreeningAdmin,
    CinemaAdmin,
    CinemaGroupAdmin,
    ParserAdmin,
    ImportToolsView,
]


def create_admin_app() -> FastAPI:
    app = FastAPI(title="Cineprog Admin")
    auth = AdminAuth(secret_key=settings.admin_secret_key)
    admin = Admin(app, engine, authentication_backend=auth, title="Cineprog Admin")
    for view in ADMIN_VIEWS:
        admin.add_view(view)
    return app


admin_app = create_admin_app()
