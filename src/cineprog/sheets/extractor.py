"""Schedule extraction: film titles and raw showtimes from the rows under the weekday header."""

import logging
import re

from cineprog.sheets.models import ExtractedFilmRow, SheetGrid, SheetLayout, Weekday
from cineprog.sheets.profiles import ParserProfile

logger = logging.getLogger(__name__)

# 24-hour H:MM / HH:MM, not part of a longer number
TIME_RE = re.compile(r"(?<![\d:])([01]?\d|2[0-3]):([0-5]\d)(?![\d])")


def extract_times(text: str) -> list[str]:
    """
    Extract every 24-hour time from a cell, in order.

    "14:00\\n20:00" → ["14:00", "20:00"]; "9:15" → ["09:15"]

    Args:
        text: Cell text (may contain line breaks or other separators)

    Returns:
        Times formatted as HH:MM
    """
    return [f"{int(h):02d}:{m}" for h, m in TIME_RE.findall(text or "")]


def _day_cell_text(
    grid: SheetGrid,
    row: int,
    col: int,
    layout: SheetLayout,
    profile: ParserProfile,
) -> str:
    text = grid.cell(row, col).strip()
    if text or not profile.shifted_time_fallback:
        return text
    left = col - 1
    # Never borrow from a neighbouring weekday or the title column
    if left < 0 or left in layout.day_columns or left == layout.film_column_index:
        return ""
    return grid.cell(row, left).strip()


def extract_rows(
    grid: SheetGrid,
    layout: SheetLayout,
    profile: ParserProfile,
) -> list[ExtractedFilmRow]:
    """
    Extract film rows below the header row.

    Rows with a too-short title or without a single showtime are skipped.

    Args:
        grid: Sheet cells
        layout: Detected layout (must have a header row)
        profile: Parser rules (title length, left-column fallback)

    Returns:
        Extracted rows in sheet order
    """
    if not layout.detected:
        return []

    rows: list[ExtractedFilmRow] = []
    for row in range(layout.header_row_index + 1, grid.row_count):
        title = grid.cell(row, layout.film_column_index).strip()
        if len(title) < profile.min_title_length:
            continue

        showtimes: dict[Weekday, list[str]] = {}
        for col, weekday in layout.day_columns.items():
            times = extract_times(_day_cell_text(grid, row, col, layout, profile))
            if times:
                showtimes[weekday] = times

        if not showtimes:
            continue

        rows.append(
            ExtractedFilmRow(
                row_index=row,
                import_title=title,
                showtimes=showtimes,
                duration_text=_optional_cell(grid, row, layout.duration_column_index),
                version_text=_optional_cell(grid, row, layout.version_column_index),
            )
        )

    logger.debug(f"Sheet {grid.name!r}: extracted {len(rows)} film rows")
    return rows


def _optional_cell(grid: SheetGrid, row: int, col: int | None) -> str | None:
    if col is None:
        return None
    return grid.cell(row, col).strip() or None
