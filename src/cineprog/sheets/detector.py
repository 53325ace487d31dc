"""Sheet structure detection: locate the weekday header row, film column and date range."""

import logging
from datetime import date

from cineprog.sheets.dates import lookup_weekday, parse_date_range
from cineprog.sheets.models import DateRange, SheetGrid, SheetLayout, Weekday
from cineprog.sheets.profiles import ParserProfile

logger = logging.getLogger(__name__)


def find_date_range_in_row(
    grid: SheetGrid, row: int, today: date | None = None
) -> DateRange | None:
    """Return the first cell date range on a row that carries an explicit 4-digit year."""
    for cell in grid.row_cells(row):
        date_range = parse_date_range(cell.raw_text, today=today, require_year=True)
        if date_range is not None:
            return date_range
    return None


def find_day_columns(
    grid: SheetGrid, row: int, languages: tuple[str, ...]
) -> dict[int, Weekday]:
    """Map column index to weekday for every exact weekday label on the row."""
    columns: dict[int, Weekday] = {}
    seen: set[Weekday] = set()
    for cell in grid.row_cells(row):
        weekday = lookup_weekday(cell.raw_text, languages)
        if weekday is None or weekday in seen:
            continue
        columns[cell.col] = weekday
        seen.add(weekday)
    return columns


def _find_labelled_column(grid: SheetGrid, row: int, labels: tuple[str, ...]) -> int | None:
    wanted = {label.lower() for label in labels}
    for cell in grid.row_cells(row):
        if cell.raw_text.strip().lower() in wanted:
            return cell.col
    return None


def detect_layout(
    grid: SheetGrid,
    profile: ParserProfile,
    today: date | None = None,
) -> SheetLayout:
    """
    Detect the programme layout of one sheet.

    Scans the first ``profile.scan_rows`` rows top-down, keeping the first
    date range seen and stopping at the first row with weekday headers.

    Args:
        grid: Sheet cells
        profile: Parser rules (scan window, labels, weekday languages)
        today: Reference date for year inference

    Returns:
        SheetLayout; ``header_row_index`` is -1 when no weekday row exists
    """
    date_range: DateRange | None = None

    for row in range(min(profile.scan_rows, grid.row_count)):
        if date_range is None:
            date_range = find_date_range_in_row(grid, row, today)

        day_columns = find_day_columns(grid, row, profile.weekday_languages)
        if not day_columns:
            continue

        film_column = _find_labelled_column(grid, row, profile.film_header_labels)
        if film_column is None:
            film_column = profile.default_film_column

        layout = SheetLayout(
            header_row_index=row,
            day_columns=day_columns,
            film_column_index=film_column,
            date_range=date_range,
            duration_column_index=_find_labelled_column(
                grid, row, profile.duration_header_labels
            ),
            version_column_index=_find_labelled_column(
                grid, row, profile.version_header_labels
            ),
        )
        logger.debug(
            f"Sheet {grid.name!r}: header row {row}, "
            f"{len(day_columns)} day columns, film column {film_column}, range {date_range}"
        )
        return layout

    logger.info(f"Sheet {grid.name!r}: no weekday header row in first {profile.scan_rows} rows")
    return SheetLayout(
        header_row_index=-1,
        day_columns={},
        film_column_index=profile.default_film_column,
        date_range=date_range,
    )
