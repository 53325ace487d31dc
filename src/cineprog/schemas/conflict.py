"""Pydantic schemas for conflict review and materialization."""

import datetime as dt
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from cineprog.models import ConflictState


class Pagination(BaseModel):
    total: int
    limit: int
    offset: int


class ConflictSessionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    conflict_edition_id: int | None = None
    weekday: str | None = None
    date: dt.date | None = Field(default=None, validation_alias="session_date")
    time_of_day: str
    time_float: float
    datetime: dt.datetime | None = Field(default=None, validation_alias="session_datetime")
    start_week_day: dt.date | None = None
    state: str


class ConflictEditionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    matched_edition_id: int | None = None
    edition_title: str | None = None
    format_code: str | None = None
    format_id: int | None = None
    technology_code: str | None = None
    technology_id: int | None = None
    language_code: str | None = None
    language_id: int | None = None
    subtitle_language_codes: list[str] | None = None
    duration_text: str | None = None
    duration_minutes: int | None = None
    age_rating: str | None = None
    version_string: str | None = None
    is_original_version: bool = False
    unresolved_codes: list[str] | None = None


class ConflictMovieResponse(BaseModel):
    """A staged film with its edition and session detail."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    import_job_id: int
    cinema_id: str
    cinema_group_id: str | None = None
    import_title: str
    movie_name: str
    director: str | None = None
    production_year: int | None = None
    matched_movie_id: str | None = None
    match_source: str | None = None
    candidate_count: int = 0
    state: ConflictState
    is_created: bool = False
    sheet_date_start: dt.date | None = None
    sheet_date_end: dt.date | None = None
    reviewed_by: str | None = None
    processed_at: dt.datetime | None = None
    created_at: dt.datetime | None = None
    editions: list[ConflictEditionResponse] = []
    sessions: list[ConflictSessionResponse] = []


class ConflictListResponse(BaseModel):
    items: list[ConflictMovieResponse]
    pagination: Pagination


class ConflictUpdateRequest(BaseModel):
    conflict_id: int
    state: ConflictState | None = None
    matched_movie_l0_id: str | None = None


class SessionUpdateRequest(BaseModel):
    session_id: int
    date: dt.date | None = None
    time_of_day: str | None = None
    state: Literal["pending", "rejected"] | None = None


class MaterializeRequest(BaseModel):
    conflict_ids: list[int] = Field(min_length=1)


class MaterializeResponse(BaseModel):
    processed: int
    created_movies: int
    created_screenings: int
    created_session_times: int
    errors: list[str]
