"""Tests for the conflict review and materialization endpoints."""

from datetime import date
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from cineprog.database import get_db
from cineprog.models import ConflictEdition, ConflictMovie, ConflictSession, ConflictState
from cineprog.services.materializer import MaterializationResult
from cineprog.services.review import (
    ConflictNotFoundError,
    InvalidTransitionError,
    ReviewError,
)

CALLER_HEADERS = {"X-User-Id": "reviewer-1"}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def make_conflict(state: str = "to_verify", matched_movie_id: str | None = None) -> ConflictMovie:
    conflict = ConflictMovie(
        id=31,
        import_job_id=4,
        cinema_id="kinepolis-kirchberg",
        cinema_group_id="kinepolis",
        import_title="Dune: Part Two (VO)",
        movie_name="Dune: Part Two",
        matched_movie_id=matched_movie_id,
        candidate_count=1,
        state=state,
        is_created=False,
        sheet_date_start=date(2025, 5, 28),
        sheet_date_end=date(2025, 6, 3),
    )
    conflict.editions = [
        ConflictEdition(id=32, edition_title="Dune: Part Two (VO)", is_original_version=True)
    ]
    conflict.sessions = [
        ConflictSession(
            id=33,
            conflict_edition_id=32,
            weekday="Tue",
            session_date=date(2025, 6, 3),
            time_of_day="14:00",
            time_float=14.0,
            start_week_day=date(2025, 5, 28),
            state="pending",
        )
    ]
    return conflict


def make_db():
    async def _override():
        yield AsyncMock()

    return _override


async def request(app: FastAPI, method: str, url: str, headers=CALLER_HEADERS, **kwargs):
    app.dependency_overrides[get_db] = make_db()
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            return await client.request(method, url, headers=headers, **kwargs)
    finally:
        app.dependency_overrides.clear()


def make_reviewer(**methods) -> MagicMock:
    reviewer = MagicMock()
    for name, mock in methods.items():
        setattr(reviewer, name, mock)
    return reviewer


# ---------------------------------------------------------------------------
# GET /import/conflicts
# ---------------------------------------------------------------------------


async def test_list_conflicts_filters_by_state(test_app: FastAPI) -> None:
    store = MagicMock()
    store.list_conflicts = AsyncMock(return_value=([make_conflict()], 1))

    with patch("cineprog.api.routes.conflicts.ImportStore", return_value=store):
        response = await request(
            test_app,
            "GET",
            "/import/conflicts",
            params={"cinema_id": "kinepolis-kirchberg", "state": "to_verify"},
        )

    assert response.status_code == 200
    body = response.json()
    assert body["pagination"]["total"] == 1
    item = body["items"][0]
    assert item["state"] == "to_verify"
    assert item["editions"][0]["edition_title"] == "Dune: Part Two (VO)"
    assert item["sessions"][0]["date"] == "2025-06-03"
    store.list_conflicts.assert_awaited_once_with(
        "kinepolis-kirchberg", None, "to_verify", 50, 0
    )


async def test_list_conflicts_rejects_unknown_state(test_app: FastAPI) -> None:
    response = await request(test_app, "GET", "/import/conflicts", params={"state": "done"})
    assert response.status_code == 422


async def test_list_conflicts_requires_caller(test_app: FastAPI) -> None:
    response = await request(test_app, "GET", "/import/conflicts", headers={})
    assert response.status_code == 401


# ---------------------------------------------------------------------------
# PATCH /import/conflicts
# ---------------------------------------------------------------------------


async def test_confirm_match(test_app: FastAPI) -> None:
    conflict = make_conflict("verified", "dune-part-two-2024")
    reviewer = make_reviewer(update_conflict=AsyncMock(return_value=conflict))

    with patch("cineprog.api.routes.conflicts.ConflictReviewer", return_value=reviewer):
        response = await request(
            test_app,
            "PATCH",
            "/import/conflicts",
            json={
                "conflict_id": 31,
                "state": "verified",
                "matched_movie_l0_id": "dune-part-two-2024",
            },
        )

    assert response.status_code == 200
    assert response.json()["matched_movie_id"] == "dune-part-two-2024"
    reviewer.update_conflict.assert_awaited_once_with(
        31,
        user_id="reviewer-1",
        state=ConflictState.VERIFIED,
        matched_movie_id="dune-part-two-2024",
    )


@pytest.mark.parametrize(
    "error,status_code",
    [
        (ConflictNotFoundError("Conflict not found: 31"), 404),
        (ReviewError("Movie not found: x"), 400),
        (InvalidTransitionError("Cannot move conflict from rejected to verified"), 409),
    ],
)
async def test_update_conflict_errors(test_app: FastAPI, error, status_code) -> None:
    reviewer = make_reviewer(update_conflict=AsyncMock(side_effect=error))

    with patch("cineprog.api.routes.conflicts.ConflictReviewer", return_value=reviewer):
        response = await request(
            test_app, "PATCH", "/import/conflicts", json={"conflict_id": 31, "state": "verified"}
        )

    assert response.status_code == status_code
    assert response.json()["detail"] == str(error)


# ---------------------------------------------------------------------------
# PATCH /import/conflicts/sessions
# ---------------------------------------------------------------------------


async def test_correct_session(test_app: FastAPI) -> None:
    session = make_conflict().sessions[0]
    session.time_of_day, session.time_float = "15:30", 15.5
    reviewer = make_reviewer(update_session=AsyncMock(return_value=session))

    with patch("cineprog.api.routes.conflicts.ConflictReviewer", return_value=reviewer):
        response = await request(
            test_app,
            "PATCH",
            "/import/conflicts/sessions",
            json={"session_id": 33, "date": "2025-06-03", "time_of_day": "15:30"},
        )

    assert response.status_code == 200
    assert response.json()["time_of_day"] == "15:30"
    reviewer.update_session.assert_awaited_once_with(
        33, session_date=date(2025, 6, 3), time_of_day="15:30", state=None
    )


async def test_session_state_is_validated(test_app: FastAPI) -> None:
    response = await request(
        test_app,
        "PATCH",
        "/import/conflicts/sessions",
        json={"session_id": 33, "state": "processed"},
    )
    assert response.status_code == 422


async def test_session_of_processed_conflict_is_409(test_app: FastAPI) -> None:
    reviewer = make_reviewer(
        update_session=AsyncMock(side_effect=InvalidTransitionError("frozen"))
    )

    with patch("cineprog.api.routes.conflicts.ConflictReviewer", return_value=reviewer):
        response = await request(
            test_app,
            "PATCH",
            "/import/conflicts/sessions",
            json={"session_id": 33, "state": "rejected"},
        )

    assert response.status_code == 409


# ---------------------------------------------------------------------------
# POST /import/conflicts
# ---------------------------------------------------------------------------


async def test_materialize_reports_counts_and_errors(test_app: FastAPI) -> None:
    materializer = MagicMock()
    materializer.materialize = AsyncMock(
        return_value=MaterializationResult(
            processed=1,
            created_screenings=1,
            created_session_times=3,
            errors=["Conflict 40: not found"],
        )
    )

    with patch(
        "cineprog.api.routes.conflicts.ScreeningMaterializer", return_value=materializer
    ):
        response = await request(
            test_app, "POST", "/import/conflicts", json={"conflict_ids": [31, 40]}
        )

    assert response.status_code == 200
    assert response.json() == {
        "processed": 1,
        "created_movies": 0,
        "created_screenings": 1,
        "created_session_times": 3,
        "errors": ["Conflict 40: not found"],
    }
    materializer.materialize.assert_awaited_once_with([31, 40])


async def test_materialize_requires_ids(test_app: FastAPI) -> None:
    response = await request(test_app, "POST", "/import/conflicts", json={"conflict_ids": []})
    assert response.status_code == 422
