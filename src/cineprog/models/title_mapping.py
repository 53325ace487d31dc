"""Title mapping model for remembering reviewer-confirmed matches per cinema group."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from cineprog.models.base import Base, TimestampMixin


class TitleMapping(Base, TimestampMixin):
    """
    Title mapping model.

    Maps the raw spreadsheet title used by a cinema group to a catalog movie
    (and optionally an edition). An exact hit short-circuits catalog search
    on the next import.
    """

    __tablename__ = "title_mappings"
    __table_args__ = (
        UniqueConstraint("cinema_group_id", "import_title", name="uq_title_mapping_group_title"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    cinema_group_id: Mapped[str] = mapped_column(
        String(100),
        ForeignKey("cinema_groups.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    import_title: Mapped[str] = mapped_column(String(500), nullable=False)
    normalized_title: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    movie_id: Mapped[str] = mapped_column(
        String(150),
        ForeignKey("movies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    movie_edition_id: Mapped[int | None] = mapped_column(
        ForeignKey("movie_editions.id", ondelete="SET NULL"), nullable=True
    )
    is_verified: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    last_used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_by: Mapped[str | None] = mapped_column(String(100), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<TitleMapping(group={self.cinema_group_id!r}, "
            f"import_title={self.import_title!r}, movie_id={self.movie_id!r})>"
        )
