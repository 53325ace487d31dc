"""Cheap workbook inspection used before a full parse: sheet summaries and annotated previews."""

from dataclasses import dataclass, field
from datetime import date

from cineprog.sheets.dates import find_single_dates, parse_date_range
from cineprog.sheets.detector import detect_layout
from cineprog.sheets.extractor import TIME_RE, extract_rows
from cineprog.sheets.models import DateRange, ExtractedFilmRow, SheetGrid, SheetLayout
from cineprog.sheets.profiles import ParserProfile

SUMMARY_SCAN_ROWS = 50
MAX_SAMPLE_CELLS = 5
MAX_SAMPLE_LENGTH = 100

CELL_EMPTY = "empty"
CELL_HEADER = "header"
CELL_DATE_RANGE = "date-range"
CELL_MOVIE = "movie"
CELL_TIME = "time"
CELL_DATA = "data"


@dataclass
class SheetSummary:
    index: int
    name: str
    row_count: int
    date_range: DateRange | None
    sample_data: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class PreviewCell:
    value: str
    type: str


@dataclass
class SheetPreview:
    index: int
    name: str
    layout: SheetLayout
    rows: list[list[PreviewCell]]
    movies: list[ExtractedFilmRow]
    truncated: bool


def _summary_date_range(grid: SheetGrid, today: date | None) -> DateRange | None:
    limit = min(SUMMARY_SCAN_ROWS, grid.row_count)
    singles: list[date] = []
    for row in range(limit):
        for cell in grid.row_cells(row):
            if not cell.raw_text:
                continue
            found = parse_date_range(cell.raw_text, today=today, require_year=True)
            if found is not None:
                return found
            singles.extend(find_single_dates(cell.raw_text))
    if not singles:
        return None
    return DateRange(start=min(singles), end=max(singles))


def summarize_sheet(grid: SheetGrid, today: date | None = None) -> SheetSummary:
    """
    Summarize one sheet without running structure detection.

    Args:
        grid: Sheet cells
        today: Reference date for year inference

    Returns:
        Row count (excluding the first row), a date range when one is
        visible in the first 50 rows, and up to five sample cells from the
        first non-empty data row
    """
    sample: list[str] = []
    for row in range(1, grid.row_count):
        values = [v for v in grid.rows[row] if v]
        if not values:
            continue
        sample = [v for v in values if len(v) < MAX_SAMPLE_LENGTH][:MAX_SAMPLE_CELLS]
        break

    return SheetSummary(
        index=grid.index,
        name=grid.name,
        row_count=max(grid.row_count - 1, 0),
        date_range=_summary_date_range(grid, today),
        sample_data=sample,
    )


def classify_cell(text: str, row: int, col: int, layout: SheetLayout) -> str:
    if not text.strip():
        return CELL_EMPTY
    if row == layout.header_row_index:
        return CELL_HEADER
    if parse_date_range(text, require_year=True) is not None:
        return CELL_DATE_RANGE
    if layout.detected and row > layout.header_row_index and col == layout.film_column_index:
        if len(text.strip()) > 2:
            return CELL_MOVIE
    if TIME_RE.search(text):
        return CELL_TIME
    return CELL_DATA


def preview_sheet(
    grid: SheetGrid,
    profile: ParserProfile,
    max_rows: int = 100,
    min_columns: int = 10,
    today: date | None = None,
) -> SheetPreview:
    """
    Annotate a sheet for visual inspection.

    Args:
        grid: Sheet cells
        profile: Parser rules used for detection and extraction
        max_rows: Maximum number of rows returned
        min_columns: Minimum width of the returned grid
        today: Reference date for year inference

    Returns:
        SheetPreview with typed cells and the movies the extractor would emit
    """
    layout = detect_layout(grid, profile, today=today)
    width = max(grid.column_count, min_columns)
    rows = [
        [
            PreviewCell(value=grid.cell(r, c), type=classify_cell(grid.cell(r, c), r, c, layout))
            for c in range(width)
        ]
        for r in range(min(grid.row_count, max_rows))
    ]
    return SheetPreview(
        index=grid.index,
        name=grid.name,
        layout=layout,
        rows=rows,
        movies=extract_rows(grid, layout, profile),
        truncated=grid.row_count > max_rows,
    )
