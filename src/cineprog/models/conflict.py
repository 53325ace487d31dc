"""Staged import records awaiting review: conflict movies, editions and sessions."""

from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cineprog.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from cineprog.models.import_job import ImportJob


class ConflictState(str, Enum):
    TO_VERIFY = "to_verify"
    VERIFIED = "verified"
    REJECTED = "rejected"
    PROCESSED = "processed"


SESSION_STATE_PENDING = "pending"
SESSION_STATE_REJECTED = "rejected"


class ConflictMovie(Base, TimestampMixin):
    """
    One film extracted from one sheet of an import job.

    Nothing reaches the canonical schedule until a reviewer (or an exact
    title mapping) verifies it and the materializer processes it.
    """

    __tablename__ = "conflict_movies"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    import_job_id: Mapped[int] = mapped_column(
        ForeignKey("import_jobs.id", ondelete="CASCADE"), nullable=False, index=True
    )
    cinema_id: Mapped[str] = mapped_column(
        String(100), ForeignKey("cinemas.id", ondelete="CASCADE"), nullable=False, index=True
    )
    cinema_group_id: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    parser_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    import_title: Mapped[str] = mapped_column(String(500), nullable=False)
    movie_name: Mapped[str] = mapped_column(String(500), nullable=False)
    director: Mapped[str | None] = mapped_column(String(300), nullable=True)
    production_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    import_text: Mapped[dict | None] = mapped_column(JSONB, nullable=True)

    matched_movie_id: Mapped[str | None] = mapped_column(
        String(150), ForeignKey("movies.id", ondelete="SET NULL"), nullable=True
    )
    match_source: Mapped[str | None] = mapped_column(String(20), nullable=True)
    candidate_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    state: Mapped[str] = mapped_column(
        String(20), default=ConflictState.TO_VERIFY.value, nullable=False, index=True
    )
    is_created: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    sheet_date_start: Mapped[date | None] = mapped_column(Date, nullable=True)
    sheet_date_end: Mapped[date | None] = mapped_column(Date, nullable=True)
    reviewed_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    processed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    import_job: Mapped["ImportJob"] = relationship(back_populates="conflicts")
    editions: Mapped[list["ConflictEdition"]] = relationship(
        back_populates="conflict_movie",
        cascade="all, delete-orphan",
    )
    sessions: Mapped[list["ConflictSession"]] = relationship(
        back_populates="conflict_movie",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<ConflictMovie(id={self.id}, title={self.import_title!r}, state={self.state!r})>"


class ConflictEdition(Base, TimestampMixin):
    __tablename__ = "conflict_editions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    conflict_movie_id: Mapped[int] = mapped_column(
        ForeignKey("conflict_movies.id", ondelete="CASCADE"), nullable=False, index=True
    )
    matched_edition_id: Mapped[int | None] = mapped_column(
        ForeignKey("movie_editions.id", ondelete="SET NULL"), nullable=True
    )
    edition_title: Mapped[str | None] = mapped_column(String(500), nullable=True)
    format_code: Mapped[str | None] = mapped_column(String(30), nullable=True)
    format_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    technology_code: Mapped[str | None] = mapped_column(String(30), nullable=True)
    technology_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    language_code: Mapped[str | None] = mapped_column(String(10), nullable=True)
    language_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    subtitle_language_codes: Mapped[list[str] | None] = mapped_column(JSONB, nullable=True)
    duration_text: Mapped[str | None] = mapped_column(String(50), nullable=True)
    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    age_rating: Mapped[str | None] = mapped_column(String(20), nullable=True)
    version_string: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_original_version: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    unresolved_codes: Mapped[list[str] | None] = mapped_column(JSONB, nullable=True)

    conflict_movie: Mapped["ConflictMovie"] = relationship(back_populates="editions")


class ConflictSession(Base, TimestampMixin):
    """A single staged showtime. The date is null when the weekday fell outside the sheet range."""

    __tablename__ = "conflict_sessions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    conflict_movie_id: Mapped[int] = mapped_column(
        ForeignKey("conflict_movies.id", ondelete="CASCADE"), nullable=False, index=True
    )
    conflict_edition_id: Mapped[int | None] = mapped_column(
        ForeignKey("conflict_editions.id", ondelete="SET NULL"), nullable=True
    )
    weekday: Mapped[str | None] = mapped_column(String(3), nullable=True)
    session_date: Mapped[date | None] = mapped_column("date", Date, nullable=True)
    time_of_day: Mapped[str] = mapped_column(String(5), nullable=False)
    time_float: Mapped[float] = mapped_column(Float, nullable=False)
    session_datetime: Mapped[datetime | None] = mapped_column(
        "datetime", DateTime(timezone=True), nullable=True
    )
    start_week_day: Mapped[date | None] = mapped_column(Date, nullable=True)
    state: Mapped[str] = mapped_column(String(20), default=SESSION_STATE_PENDING, nullable=False)

    conflict_movie: Mapped["ConflictMovie"] = relationship(back_populates="sessions")
    conflict_edition: Mapped[ConflictEdition | None] = relationship()
