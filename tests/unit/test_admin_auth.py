"""Unit tests for the admin console login."""

from unittest.mock import AsyncMock, MagicMock, patch

from cineprog.admin.auth import AdminAuth, check_credentials


def make_request(form: dict | None = None, session: dict | None = None) -> MagicMock:
    request = MagicMock()
    request.form = AsyncMock(return_value=form or {})
    request.session = session if session is not None else {}
    return request


class TestCheckCredentials:
    def test_matching_credentials(self) -> None:
        with patch("cineprog.admin.auth.settings") as settings:
            settings.admin_username, settings.admin_password = "editor", "s3cret"
            assert check_credentials("editor", "s3cret")

    def test_wrong_password(self) -> None:
        with patch("cineprog.admin.auth.settings") as settings:
            settings.admin_username, settings.admin_password = "editor", "s3cret"
            assert not check_credentials("editor", "guess")


async def test_login_stores_user_in_session() -> None:
    request = make_request({"username": "admin", "password": "admin"})
    auth = AdminAuth(secret_key="test")

    with patch("cineprog.admin.auth.check_credentials", return_value=True):
        assert await auth.login(request)

    assert request.session == {"admin_user": "admin"}
    assert await auth.authenticate(request)


async def test_failed_login_leaves_session_empty() -> None:
    request = make_request({"username": "admin", "password": "nope"})
    auth = AdminAuth(secret_key="test")

    with patch("cineprog.admin.auth.check_credentials", return_value=False):
        assert not await auth.login(request)

    assert not await auth.authenticate(request)


async def test_logout_clears_session() -> None:
    request = make_request(session={"admin_user": "admin"})
    auth = AdminAuth(secret_key="test")

    assert await auth.logout(request)
    assert not await auth.authenticate(request)
