"""Pydantic schemas for the import history listing."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from cineprog.models import ImportJob
from cineprog.schemas.conflict import Pagination


class ImportJobResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    cinema_id: str | None = None
    cinema_name: str | None = None
    cinema_group_id: str | None = None
    parser_id: int | None = None
    parser_name: str | None = None
    user_id: str
    file_name: str | None = None
    sheet_count: int
    status: str
    total_records: int
    processed_records: int
    success_records: int
    error_records: int
    errors: list[str] | None = None
    summary: dict | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime | None = None

    @classmethod
    def from_job(cls, job: ImportJob) -> "ImportJobResponse":
        response = cls.model_validate(job)
        response.cinema_name = job.cinema.name if job.cinema else None
        response.parser_name = job.parser.name if job.parser else None
        return response


class HistoryResponse(BaseModel):
    items: list[ImportJobResponse]
    pagination: Pagination
