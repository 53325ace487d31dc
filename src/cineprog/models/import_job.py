"""Import job model: one record per staged spreadsheet upload."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cineprog.models.base import Base, TimestampMixin
from cineprog.models.cinema import Cinema, Parser

if TYPE_CHECKING:
    from cineprog.models.conflict import ConflictMovie

JOB_STATUS_PENDING = "pending"
JOB_STATUS_PROCESSING = "processing"
JOB_STATUS_COMPLETED = "completed"
JOB_STATUS_FAILED = "failed"


class ImportJob(Base, TimestampMixin):
    """
    Import job.

    Records who staged which workbook for which cinema (or cinema group),
    with per-film success and error counts.
    """

    __tablename__ = "import_jobs"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    cinema_id: Mapped[str | None] = mapped_column(
        String(100), ForeignKey("cinemas.id", ondelete="SET NULL"), nullable=True, index=True
    )
    cinema_group_id: Mapped[str | None] = mapped_column(
        String(100),
        ForeignKey("cinema_groups.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    parser_id: Mapped[int | None] = mapped_column(
        ForeignKey("parsers.id", ondelete="SET NULL"), nullable=True
    )
    user_id: Mapped[str] = mapped_column(String(100), nullable=False)
    file_name: Mapped[str | None] = mapped_column(String(300), nullable=True)
    file_size_bytes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    sheet_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    status: Mapped[str] = mapped_column(String(20), default=JOB_STATUS_PENDING, nullable=False)
    total_records: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    processed_records: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    success_records: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    error_records: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    errors: Mapped[list[str] | None] = mapped_column(JSONB, nullable=True)
    summary: Mapped[dict | None] = mapped_column(JSONB, nullable=True)

    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    cinema: Mapped[Cinema | None] = relationship()
    parser: Mapped[Parser | None] = relationship()
    conflicts: Mapped[list["ConflictMovie"]] = relationship(back_populates="import_job")

    def __repr__(self) -> str:
        return f"<ImportJob(id={self.id}, status={self.status!r})>"
