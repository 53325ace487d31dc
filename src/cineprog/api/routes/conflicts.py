"""Conflict review endpoints: list, transition, correct sessions and materialize."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from cineprog.api.deps import get_caller
from cineprog.config import settings
from cineprog.database import get_db
from cineprog.models import ConflictState
from cineprog.schemas.conflict import (
    ConflictListResponse,
    ConflictMovieResponse,
    ConflictSessionResponse,
    ConflictUpdateRequest,
    MaterializeRequest,
    MaterializeResponse,
    Pagination,
    SessionUpdateRequest,
)
from cineprog.services.materializer import ScreeningMaterializer
from cineprog.services.review import (
    ConflictNotFoundError,
    ConflictReviewer,
    InvalidTransitionError,
    ReviewError,
)
from cineprog.services.store import ImportStore

router = APIRouter(tags=["conflicts"], dependencies=[Depends(get_caller)])


@router.get("/import/conflicts", response_model=ConflictListResponse)
async def list_conflicts(
    cinema_id: str | None = Query(None),
    cinema_group_id: str | None = Query(None),
    state: ConflictState | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
) -> ConflictListResponse:
    """List staged conflicts with their editions and sessions."""
    conflicts, total = await ImportStore(db).list_conflicts(
        cinema_id, cinema_group_id, state.value if state else None, limit, offset
    )
    return ConflictListResponse(
        items=[ConflictMovieResponse.model_validate(c) for c in conflicts],
        pagination=Pagination(total=total, limit=limit, offset=offset),
    )


@router.patch("/import/conflicts", response_model=ConflictMovieResponse)
async def update_conflict(
    request: ConflictUpdateRequest,
    caller: str = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
) -> ConflictMovieResponse:
    """
    Apply a single review transition and/or link a catalog movie.

    Confirming a match teaches the cinema group's title mappings.
    """
    reviewer = ConflictReviewer(ImportStore(db), settings.default_timezone)
    try:
        conflict = await reviewer.update_conflict(
            request.conflict_id,
            user_id=caller,
            state=request.state,
            matched_movie_id=request.matched_movie_l0_id,
        )
    except ConflictNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ReviewError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return ConflictMovieResponse.model_validate(conflict)


@router.patch("/import/conflicts/sessions", response_model=ConflictSessionResponse)
async def update_session(
    request: SessionUpdateRequest,
    db: AsyncSession = Depends(get_db),
) -> ConflictSessionResponse:
    """Correct a staged session's date or time, or reject that one session."""
    reviewer = ConflictReviewer(ImportStore(db), settings.default_timezone)
    try:
        session = await reviewer.update_session(
            request.session_id,
            session_date=request.date,
            time_of_day=request.time_of_day,
            state=request.state,
        )
    except ConflictNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ReviewError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return ConflictSessionResponse.model_validate(session)


@router.post("/import/conflicts", response_model=MaterializeResponse)
async def materialize(
    request: MaterializeRequest,
    db: AsyncSession = Depends(get_db),
) -> MaterializeResponse:
    """
    Write verified conflicts into screenings, session days and session times.

    Conflicts that fail are reported in ``errors`` and stay verified.
    """
    materializer = ScreeningMaterializer(ImportStore(db), settings.default_timezone)
    result = await materializer.materialize(request.conflict_ids)
    return MaterializeResponse(
        processed=result.processed,
        created_movies=result.created_movies,
        created_screenings=result.created_screenings,
        created_session_times=result.created_session_times,
        errors=result.errors,
    )
