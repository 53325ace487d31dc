"""Canonical screening schedule: Screening -> SessionDay -> SessionTime."""

from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Date, DateTime, Float, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cineprog.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from cineprog.models.cinema import Cinema
    from cineprog.models.movie import MovieEdition


class Screening(Base, TimestampMixin):
    """One movie edition programmed at one cinema for one program week."""

    __tablename__ = "screenings"
    __table_args__ = (
        UniqueConstraint(
            "cinema_id",
            "movie_edition_id",
            "start_week_day",
            name="uq_screening_cinema_edition_week",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    cinema_id: Mapped[str] = mapped_column(
        String(100),
        ForeignKey("cinemas.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    movie_edition_id: Mapped[int] = mapped_column(
        ForeignKey("movie_editions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    start_week_day: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    state: Mapped[str] = mapped_column(String(20), default="verified", nullable=False)

    cinema: Mapped["Cinema"] = relationship(back_populates="screenings")
    movie_edition: Mapped["MovieEdition"] = relationship(back_populates="screenings")
    days: Mapped[list["SessionDay"]] = relationship(
        back_populates="screening",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return (
            f"<Screening(cinema_id={self.cinema_id!r}, "
            f"movie_edition_id={self.movie_edition_id}, "
            f"start_week_day={self.start_week_day})>"
        )


class SessionDay(Base, TimestampMixin):
    __tablename__ = "session_days"
    __table_args__ = (
        UniqueConstraint("screening_id", "date", name="uq_session_day_screening_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    screening_id: Mapped[int] = mapped_column(
        ForeignKey("screenings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    day: Mapped[date] = mapped_column("date", Date, nullable=False)

    screening: Mapped["Screening"] = relationship(back_populates="days")
    times: Mapped[list["SessionTime"]] = relationship(
        back_populates="session_day",
        cascade="all, delete-orphan",
    )


class SessionTime(Base, TimestampMixin):
    __tablename__ = "session_times"
    __table_args__ = (
        UniqueConstraint("session_day_id", "time_of_day", name="uq_session_time_day_time"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    session_day_id: Mapped[int] = mapped_column(
        ForeignKey("session_days.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    time_of_day: Mapped[str] = mapped_column(String(5), nullable=False)
    time_float: Mapped[float] = mapped_column(Float, nullable=False)
    start_datetime: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_datetime: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    session_day: Mapped["SessionDay"] = relationship(back_populates="times")
