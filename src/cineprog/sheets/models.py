"""Value types passed between the sheet parsing stages."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


class Weekday(str, Enum):
    """Canonical weekday codes, declared in Python ``date.weekday()`` order."""

    MON = "Mon"
    TUE = "Tue"
    WED = "Wed"
    THU = "Thu"
    FRI = "Fri"
    SAT = "Sat"
    SUN = "Sun"

    @classmethod
    def of(cls, day: date) -> "Weekday":
        return list(cls)[day.weekday()]


@dataclass(frozen=True)
class Cell:
    row: int
    col: int
    raw_text: str


@dataclass(frozen=True)
class SheetGrid:
    """
    Immutable cell grid for one worksheet.

    All cells are already rendered to text; missing cells read as "".
    """

    index: int
    name: str
    rows: tuple[tuple[str, ...], ...]

    def cell(self, row: int, col: int) -> str:
        if row < 0 or row >= len(self.rows):
            return ""
        values = self.rows[row]
        if col < 0 or col >= len(values):
            return ""
        return values[col]

    def row_cells(self, row: int) -> list[Cell]:
        if row < 0 or row >= len(self.rows):
            return []
        return [Cell(row, col, text) for col, text in enumerate(self.rows[row])]

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return max((len(r) for r in self.rows), default=0)


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"date range end {self.end} is before start {self.start}")

    def __contains__(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class SheetLayout:
    """
    Structure detected on a sheet.

    ``header_row_index == -1`` means no day-columns row was found and the
    sheet is skipped.
    """

    header_row_index: int
    day_columns: dict[int, Weekday]
    film_column_index: int
    date_range: DateRange | None = None
    duration_column_index: int | None = None
    version_column_index: int | None = None

    @property
    def detected(self) -> bool:
        return self.header_row_index >= 0


@dataclass
class ExtractedFilmRow:
    """One film row and its raw showtimes per weekday column."""

    row_index: int
    import_title: str
    showtimes: dict[Weekday, list[str]]
    duration_text: str | None = None
    version_text: str | None = None

    @property
    def showing_count(self) -> int:
        return sum(len(times) for times in self.showtimes.values())


@dataclass(frozen=True)
class Showing:
    weekday: Weekday
    date: date | None
    time_of_day: str
    time_float: float
    datetime: datetime | None


@dataclass
class NormalizedFilm:
    """A film row with typed fields, ready to be matched and staged."""

    import_title: str
    movie_name: str
    director: str | None = None
    production_year: int | None = None
    language_code: str | None = None
    language_id: int | None = None
    subtitle_language_codes: list[str] = field(default_factory=list)
    duration_text: str | None = None
    duration_minutes: int | None = None
    format_code: str | None = None
    format_id: int | None = None
    technology_code: str | None = None
    technology_id: int | None = None
    age_rating: str | None = None
    version_string: str | None = None
    is_original_version: bool = False
    unresolved_codes: list[str] = field(default_factory=list)
    start_week_date: date | None = None
    showings: list[Showing] = field(default_factory=list)


@dataclass(frozen=True)
class ReferenceItem:
    id: int
    code: str
    name: str


@dataclass(frozen=True)
class LanguageMappingEntry:
    spoken_language_code: str | None
    subtitle_language_codes: tuple[str, ...] = ()


@dataclass(frozen=True)
class ReferenceData:
    """
    Active reference vocabulary for one parse.

    Loaded once per request and passed explicitly to the normalizer.
    ``language_mapping`` is keyed by lower-cased version string.
    """

    formats: tuple[ReferenceItem, ...] = ()
    technologies: tuple[ReferenceItem, ...] = ()
    languages: tuple[ReferenceItem, ...] = ()
    language_mapping: dict[str, LanguageMappingEntry] = field(default_factory=dict)

    def find_language(self, code: str) -> ReferenceItem | None:
        needle = code.strip().lower()
        for item in self.languages:
            if item.code.lower() == needle:
                return item
        return None
