"""Pydantic schemas for parsed sheets and normalized films."""

import datetime as dt

from pydantic import Field

from cineprog.schemas.base import CamelModel
from cineprog.schemas.sheet import DateRangeSchema
from cineprog.services.workbook_parser import SheetParseResult, WorkbookParseResult
from cineprog.sheets.models import NormalizedFilm, Showing, Weekday


class ShowingSchema(CamelModel):
    weekday: Weekday
    date: dt.date | None = None
    time_of_day: str = Field(pattern=r"^\d{2}:\d{2}$")
    time_float: float
    datetime: dt.datetime | None = None

    @classmethod
    def from_showing(cls, showing: Showing) -> "ShowingSchema":
        return cls(
            weekday=showing.weekday,
            date=showing.date,
            time_of_day=showing.time_of_day,
            time_float=showing.time_float,
            datetime=showing.datetime,
        )

    def to_showing(self) -> Showing:
        return Showing(
            weekday=self.weekday,
            date=self.date,
            time_of_day=self.time_of_day,
            time_float=self.time_float,
            datetime=self.datetime,
        )


class NormalizedFilmSchema(CamelModel):
    """A normalized film as returned by /import/parse and sent back to /import/execute."""

    import_title: str = Field(min_length=1)
    movie_name: str = Field(min_length=1)
    director: str | None = None
    production_year: int | None = None
    language_code: str | None = None
    language_id: int | None = None
    subtitle_language_codes: list[str] = []
    duration_text: str | None = None
    duration_minutes: int | None = None
    format_code: str | None = None
    format_id: int | None = None
    technology_code: str | None = None
    technology_id: int | None = None
    age_rating: str | None = None
    version_string: str | None = None
    is_original_version: bool = False
    unresolved_codes: list[str] = []
    start_week_date: dt.date | None = None
    showings: list[ShowingSchema] = []

    @classmethod
    def from_film(cls, film: NormalizedFilm) -> "NormalizedFilmSchema":
        values = {k: v for k, v in vars(film).items() if k != "showings"}
        return cls(**values, showings=[ShowingSchema.from_showing(s) for s in film.showings])

    def to_film(self) -> NormalizedFilm:
        values = self.model_dump(exclude={"showings"})
        return NormalizedFilm(**values, showings=[s.to_showing() for s in self.showings])


class ParsedSheetResult(CamelModel):
    sheet_index: int
    sheet_name: str
    cinema_id: str | None = None
    header_row_index: int = -1
    date_range: DateRangeSchema | None = None
    films: list[NormalizedFilmSchema] = []
    errors: list[str] = []

    @classmethod
    def from_result(cls, result: SheetParseResult) -> "ParsedSheetResult":
        sheet = result.sheet
        return cls(
            sheet_index=sheet.index,
            sheet_name=sheet.name,
            cinema_id=result.cinema_id,
            header_row_index=sheet.layout.header_row_index,
            date_range=DateRangeSchema.from_range(sheet.date_range),
            films=[NormalizedFilmSchema.from_film(f) for f in sheet.films],
            errors=sheet.errors,
        )


class ParseSummary(CamelModel):
    sheets: int
    detected_sheets: int
    films: int
    showings: int


class ParseResponse(CamelModel):
    parser_id: int | None = None
    cinema_id: str | None = None
    cinema_group_id: str | None = None
    sheets: list[ParsedSheetResult]
    summary: ParseSummary

    @classmethod
    def from_result(
        cls,
        result: WorkbookParseResult,
        cinema_id: str | None = None,
        cinema_group_id: str | None = None,
    ) -> "ParseResponse":
        return cls(
            parser_id=result.parser_id,
            cinema_id=cinema_id,
            cinema_group_id=cinema_group_id,
            sheets=[ParsedSheetResult.from_result(s) for s in result.sheets],
            summary=ParseSummary(
                sheets=len(result.sheets),
                detected_sheets=sum(1 for s in result.sheets if s.sheet.layout.detected),
                films=result.film_count,
                showings=result.showing_count,
            ),
        )


class SheetMappingSchema(CamelModel):
    sheet_index: int = Field(ge=0)
    sheet_name: str | None = None
    cinema_id: str
