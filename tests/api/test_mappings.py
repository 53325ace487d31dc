"""Tests for the title mapping endpoints."""

from unittest.mock import AsyncMock, MagicMock, patch

from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from cineprog.database import get_db
from cineprog.models import CinemaGroup, Movie, TitleMapping

CALLER_HEADERS = {"X-User-Id": "reviewer-1"}


def make_mapping(movie_id: str = "dune-part-two-2024") -> TitleMapping:
    return TitleMapping(
        id=8,
        cinema_group_id="kinepolis",
        import_title="Dune: Part Two (VO)",
        normalized_title="dune part two vo",
        movie_id=movie_id,
        is_verified=True,
        created_by="reviewer-1",
    )


def make_store(**methods) -> MagicMock:
    store = MagicMock()
    for name, value in methods.items():
        setattr(store, name, AsyncMock(return_value=value))
    return store


async def request(app: FastAPI, method: str, url: str, headers=CALLER_HEADERS, **kwargs):
    async def _override():
        yield AsyncMock()

    app.dependency_overrides[get_db] = _override
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            return await client.request(method, url, headers=headers, **kwargs)
    finally:
        app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# GET /import/mappings
# ---------------------------------------------------------------------------


async def test_list_requires_group(test_app: FastAPI) -> None:
    response = await request(test_app, "GET", "/import/mappings")
    assert response.status_code == 422


async def test_list_mappings(test_app: FastAPI) -> None:
    store = make_store(list_title_mappings=([make_mapping()], 1))

    with patch("cineprog.api.routes.mappings.ImportStore", return_value=store):
        response = await request(
            test_app,
            "GET",
            "/import/mappings",
            params={"cinema_group_id": "kinepolis", "search": "dune"},
        )

    assert response.status_code == 200
    body = response.json()
    assert body["items"][0]["import_title"] == "Dune: Part Two (VO)"
    assert body["pagination"] == {"total": 1, "limit": 50, "offset": 0}
    store.list_title_mappings.assert_awaited_once_with("kinepolis", "dune", 50, 0)


# ---------------------------------------------------------------------------
# POST /import/mappings
# ---------------------------------------------------------------------------


async def test_create_mapping_records_caller(test_app: FastAPI) -> None:
    store = make_store(
        get_cinema_group=CinemaGroup(id="kinepolis", name="Kinepolis"),
        get_movie=Movie(id="dune-part-two-2024", original_title="Dune: Part Two"),
        upsert_title_mapping=None,
        find_title_mapping=make_mapping(),
    )

    with patch("cineprog.api.routes.mappings.ImportStore", return_value=store):
        response = await request(
            test_app,
            "POST",
            "/import/mappings",
            json={
                "cinema_group_id": "kinepolis",
                "import_title": "Dune: Part Two (VO)",
                "movie_id": "dune-part-two-2024",
            },
        )

    assert response.status_code == 200
    assert response.json()["id"] == 8
    store.upsert_title_mapping.assert_awaited_once_with(
        "kinepolis",
        "Dune: Part Two (VO)",
        "dune-part-two-2024",
        movie_edition_id=None,
        user_id="reviewer-1",
    )


async def test_create_mapping_unknown_group(test_app: FastAPI) -> None:
    store = make_store(get_cinema_group=None)

    with patch("cineprog.api.routes.mappings.ImportStore", return_value=store):
        response = await request(
            test_app,
            "POST",
            "/import/mappings",
            json={"cinema_group_id": "x", "import_title": "Flow", "movie_id": "flow-2024"},
        )

    assert response.status_code == 404
    assert "Cinema group not found" in response.json()["detail"]


async def test_create_mapping_unknown_movie(test_app: FastAPI) -> None:
    store = make_store(
        get_cinema_group=CinemaGroup(id="kinepolis", name="Kinepolis"), get_movie=None
    )

    with patch("cineprog.api.routes.mappings.ImportStore", return_value=store):
        response = await request(
            test_app,
            "POST",
            "/import/mappings",
            json={"cinema_group_id": "kinepolis", "import_title": "Flow", "movie_id": "flow"},
        )

    assert response.status_code == 404
    assert "Movie not found" in response.json()["detail"]


# ---------------------------------------------------------------------------
# DELETE /import/mappings
# ---------------------------------------------------------------------------


async def test_delete_mapping(test_app: FastAPI) -> None:
    store = make_store(delete_title_mapping=True)

    with patch("cineprog.api.routes.mappings.ImportStore", return_value=store):
        response = await request(test_app, "DELETE", "/import/mappings", json={"mapping_id": 8})

    assert response.status_code == 200
    assert response.json() == {"deleted": True}


async def test_delete_unknown_mapping(test_app: FastAPI) -> None:
    store = make_store(delete_title_mapping=False)

    with patch("cineprog.api.routes.mappings.ImportStore", return_value=store):
        response = await request(test_app, "DELETE", "/import/mappings", json={"mapping_id": 99})

    assert response.status_code == 404
