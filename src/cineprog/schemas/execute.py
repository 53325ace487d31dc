"""Pydantic schemas for staging parsed sheets as conflicts."""

import datetime as dt

from pydantic import Field, model_validator

from cineprog.schemas.base import CamelModel
from cineprog.schemas.parse import ParsedSheetResult
from cineprog.services.staging import SheetToStage, StagingOptions, StagingResult


class ExecuteOptions(CamelModel):
    create_movies_automatically: bool = False
    cleanup_old_data: bool = False
    cleanup_date: dt.date | None = None
    preview_only: bool = False

    def to_options(self) -> StagingOptions:
        return StagingOptions(**self.model_dump())


class ExecuteRequest(CamelModel):
    cinema_id: str | None = None
    cinema_group_id: str | None = None
    parser_id: int | None = None
    file_name: str | None = None
    sheets: list[ParsedSheetResult] = Field(min_length=1)
    options: ExecuteOptions = Field(default_factory=ExecuteOptions)

    @model_validator(mode="after")
    def check_target(self) -> "ExecuteRequest":
        if not self.cinema_id and not all(s.cinema_id for s in self.sheets):
            raise ValueError("cinema_id is required unless every sheet names its cinema")
        return self

    def to_sheets(self) -> list[SheetToStage]:
        return [
            SheetToStage(
                sheet_index=s.sheet_index,
                sheet_name=s.sheet_name,
                cinema_id=s.cinema_id,
                date_range=s.date_range.to_range() if s.date_range else None,
                films=[f.to_film() for f in s.films],
            )
            for s in self.sheets
        ]


class ExecuteSummary(CamelModel):
    sheets: int
    films: int
    sessions: int
    staged: int
    verified: int
    to_verify: int
    failed: int
    cleaned_up: int


class ExecuteResponse(CamelModel):
    job_id: int | None = None
    status: str
    preview_only: bool
    summary: ExecuteSummary
    errors: list[str] = []

    @classmethod
    def from_result(cls, result: StagingResult) -> "ExecuteResponse":
        return cls(
            job_id=result.job_id,
            status=result.status,
            preview_only=result.preview_only,
            summary=ExecuteSummary(
                sheets=result.sheets,
                films=result.films,
                sessions=result.sessions,
                staged=result.staged,
                verified=result.verified,
                to_verify=result.to_verify,
                failed=result.failed,
                cleaned_up=result.cleaned_up,
            ),
            errors=result.errors,
        )
