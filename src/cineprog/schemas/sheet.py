"""Pydantic schemas for workbook inspection (sheet summaries and previews)."""

import datetime as dt

from cineprog.schemas.base import CamelModel
from cineprog.sheets.inspect import SheetPreview, SheetSummary
from cineprog.sheets.models import DateRange


class DateRangeSchema(CamelModel):
    start: dt.date
    end: dt.date

    @classmethod
    def from_range(cls, date_range: DateRange | None) -> "DateRangeSchema | None":
        if date_range is None:
            return None
        return cls(start=date_range.start, end=date_range.end)

    def to_range(self) -> DateRange:
        return DateRange(start=self.start, end=self.end)


class SheetSummaryResponse(CamelModel):
    """Cheap per-sheet preflight, computed without structure detection."""

    index: int
    name: str
    row_count: int
    date_range: DateRangeSchema | None = None
    sample_data: list[str]

    @classmethod
    def from_summary(cls, summary: SheetSummary) -> "SheetSummaryResponse":
        return cls(
            index=summary.index,
            name=summary.name,
            row_count=summary.row_count,
            date_range=DateRangeSchema.from_range(summary.date_range),
            sample_data=summary.sample_data,
        )


class SheetsResponse(CamelModel):
    file_name: str | None = None
    sheets: list[SheetSummaryResponse]


class PreviewCellSchema(CamelModel):
    value: str
    type: str


class ExtractedMovieSchema(CamelModel):
    row_index: int
    import_title: str
    showtimes: dict[str, list[str]]
    duration_text: str | None = None
    version_text: str | None = None


class SheetPreviewResponse(CamelModel):
    """Annotated cell grid plus the movies the extractor would emit."""

    sheet_index: int
    sheet_name: str
    sheet_count: int
    header_row_index: int
    film_column_index: int
    day_columns: dict[int, str]
    date_range: DateRangeSchema | None = None
    rows: list[list[PreviewCellSchema]]
    movies: list[ExtractedMovieSchema]
    truncated: bool

    @classmethod
    def from_preview(cls, preview: SheetPreview, sheet_count: int) -> "SheetPreviewResponse":
        layout = preview.layout
        return cls(
            sheet_index=preview.index,
            sheet_name=preview.name,
            sheet_count=sheet_count,
            header_row_index=layout.header_row_index,
            film_column_index=layout.film_column_index,
            day_columns={col: day.value for col, day in layout.day_columns.items()},
            date_range=DateRangeSchema.from_range(layout.date_range),
            rows=[[PreviewCellSchema(value=c.value, type=c.type) for c in row] for row in preview.rows],
            movies=[
                ExtractedMovieSchema(
                    row_index=m.row_index,
                    import_title=m.import_title,
                    showtimes={day.value: times for day, times in m.showtimes.items()},
                    duration_text=m.duration_text,
                    version_text=m.version_text,
                )
                for m in preview.movies
            ],
            truncated=preview.truncated,
        )
