"""Catalog movie and movie edition models."""

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cineprog.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from cineprog.models.screening import Screening

MOVIE_STATUS_DRAFT = "draft"
MOVIE_STATUS_PUBLISHED = "published"


class Movie(Base, TimestampMixin):
    """
    Canonical catalog movie.

    Ids are slugs built from the title and production year, so re-imports of
    the same film land on the same row. Movies created by an import start in
    ``draft`` status and are enriched from TMDb later.
    """

    __tablename__ = "movies"

    id: Mapped[str] = mapped_column(String(150), primary_key=True)
    original_title: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    production_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    director: Mapped[str | None] = mapped_column(String(300), nullable=True)
    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), default=MOVIE_STATUS_DRAFT, nullable=False, index=True
    )

    # TMDb metadata
    tmdb_id: Mapped[int | None] = mapped_column(Integer, nullable=True, unique=True, index=True)
    overview: Mapped[str | None] = mapped_column(Text, nullable=True)
    poster_path: Mapped[str | None] = mapped_column(String(200), nullable=True)

    editions: Mapped[list["MovieEdition"]] = relationship(
        back_populates="movie",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Movie(id={self.id!r}, title={self.original_title!r})>"


class MovieEdition(Base, TimestampMixin):
    """A specific presentation of a movie: format, technology and language version."""

    __tablename__ = "movie_editions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    movie_id: Mapped[str] = mapped_column(
        String(150),
        ForeignKey("movies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    edition_title: Mapped[str | None] = mapped_column(String(500), nullable=True)
    format_id: Mapped[int | None] = mapped_column(
        ForeignKey("formats.id", ondelete="SET NULL"), nullable=True
    )
    technology_id: Mapped[int | None] = mapped_column(
        ForeignKey("technologies.id", ondelete="SET NULL"), nullable=True
    )
    audio_language_id: Mapped[int | None] = mapped_column(
        ForeignKey("languages.id", ondelete="SET NULL"), nullable=True
    )
    subtitle_language_codes: Mapped[list[str] | None] = mapped_column(JSONB, nullable=True)
    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    age_rating: Mapped[str | None] = mapped_column(String(20), nullable=True)
    is_original_version: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    movie: Mapped["Movie"] = relationship(back_populates="editions")
    screenings: Mapped[list["Screening"]] = relationship(back_populates="movie_edition")

    def __repr__(self) -> str:
        return f"<MovieEdition(id={self.id}, movie_id={self.movie_id!r})>"
