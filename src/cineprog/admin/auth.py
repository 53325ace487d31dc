"""SQLAdmin authentication backend."""

import logging
import secrets

from sqladmin.authentication import AuthenticationBackend
from starlette.requests import Request

from cineprog.config import settings

logger = logging.getLogger(__name__)


def check_credentials(username: str, password: str) -> bool:
    return secrets.compare_digest(username, settings.admin_username) and secrets.compare_digest(
        password, settings.admin_password
    )


class AdminAuth(AuthenticationBackend):
    """Session login against the single admin account from settings."""

    async def login(self, request: Request) -> bool:
        form = await request.form()
        username = str(form.get("username") or "")
        if not check_credentials(username, str(form.get("password") or "")):
            logger.warning(f"Rejected admin login for {username!r}")
            return False
        request.session.update({"admin_user": username})
        return True

    async def logout(self, request: Request) -> bool:
        request.session.clear()
        return True

    async def authenticate(self, request: Request) -> bool:
        return bool(request.session.get("admin_user"))
