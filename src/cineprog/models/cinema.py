"""Cinema, cinema group and parser models."""

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cineprog.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from cineprog.models.screening import Screening


class Parser(Base, TimestampMixin):
    """
    Spreadsheet parser definition.

    The slug selects a registered parser profile; ``config`` overrides
    individual profile fields (scan rows, weekday languages, keywords ...).
    """

    __tablename__ = "parsers"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    config: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Parser(id={self.id}, slug={self.slug!r})>"


class CinemaGroup(Base, TimestampMixin):
    """A chain or operator owning one or more cinemas and sharing title mappings."""

    __tablename__ = "cinema_groups"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    country: Mapped[str | None] = mapped_column(String(2), nullable=True)
    parser_id: Mapped[int | None] = mapped_column(
        ForeignKey("parsers.id", ondelete="SET NULL"), nullable=True
    )
    # Python weekday numbering, Monday == 0
    week_start_day: Mapped[int | None] = mapped_column(Integer, nullable=True)

    cinemas: Mapped[list["Cinema"]] = relationship(back_populates="cinema_group")
    parser: Mapped[Parser | None] = relationship()

    def __repr__(self) -> str:
        return f"<CinemaGroup(id={self.id!r}, name={self.name!r})>"


class Cinema(Base, TimestampMixin):
    """
    Cinema venue model.

    Stores the venue's own parser override, timezone and program-week start.
    """

    __tablename__ = "cinemas"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    cinema_group_id: Mapped[str | None] = mapped_column(
        String(100),
        ForeignKey("cinema_groups.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    parser_id: Mapped[int | None] = mapped_column(
        ForeignKey("parsers.id", ondelete="SET NULL"), nullable=True
    )
    timezone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    week_start_day_override: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Relationships
    cinema_group: Mapped[CinemaGroup | None] = relationship(back_populates="cinemas")
    parser: Mapped[Parser | None] = relationship()
    screenings: Mapped[list["Screening"]] = relationship(
        back_populates="cinema",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Cinema(id={self.id!r}, name={self.name!r})>"

    def resolve_parser_id(self) -> int | None:
        """Own parser first, then the group's."""
        if self.parser_id is not None:
            return self.parser_id
        if self.cinema_group is not None:
            return self.cinema_group.parser_id
        return None

    def resolve_week_start_day(self, default: int) -> int:
        """
        Pick the weekday the program week starts on.

        Args:
            default: Fallback weekday (Python numbering, Monday == 0)

        Returns:
            Cinema override, else the group's setting, else ``default``
        """
        if self.week_start_day_override is not None:
            return self.week_start_day_override
        if self.cinema_group is not None and self.cinema_group.week_start_day is not None:
            return self.cinema_group.week_start_day
        return default
