"""Spreadsheet parsing pipeline: detect layout, extract schedule, normalize films."""

import logging
from dataclasses import dataclass, field
from datetime import date
from zoneinfo import ZoneInfo

from cineprog.sheets.detector import detect_layout
from cineprog.sheets.extractor import extract_rows
from cineprog.sheets.models import (
    DateRange,
    NormalizedFilm,
    ReferenceData,
    SheetGrid,
    SheetLayout,
)
from cineprog.sheets.normalizer import FilmRecordNormalizer
from cineprog.sheets.profiles import ParserProfile, get_profile
from cineprog.sheets.workbook import WorkbookError, read_workbook

logger = logging.getLogger(__name__)


@dataclass
class ParsedSheet:
    """Result of running the pure stages over one sheet."""

    index: int
    name: str
    layout: SheetLayout
    films: list[NormalizedFilm] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def date_range(self) -> DateRange | None:
        return self.layout.date_range

    @property
    def showing_count(self) -> int:
        return sum(len(f.showings) for f in self.films)


def parse_sheet(
    grid: SheetGrid,
    profile: ParserProfile,
    reference: ReferenceData,
    timezone: ZoneInfo,
    today: date | None = None,
) -> ParsedSheet:
    """
    Run detection, extraction and normalization over one sheet.

    Pure function of its inputs; safe to run concurrently for different
    sheets. A row that fails to normalize is reported in ``errors`` and the
    remaining rows still come through.

    Args:
        grid: Sheet cells
        profile: Parser rules
        reference: Active reference vocabulary
        timezone: Cinema timezone for showing datetimes
        today: Reference date for year inference

    Returns:
        ParsedSheet (zero films when no layout was detected)
    """
    layout = detect_layout(grid, profile, today=today)
    parsed = ParsedSheet(index=grid.index, name=grid.name, layout=layout)
    if not layout.detected:
        return parsed

    if layout.date_range is None:
        parsed.errors.append(
            f"Sheet {grid.name!r}: no date range found, showings will be staged without dates"
        )

    normalizer = FilmRecordNormalizer(reference, profile, timezone)
    for row in extract_rows(grid, layout, profile):
        try:
            parsed.films.append(normalizer.normalize(row, layout))
        except Exception as e:
            logger.error(
                f"Failed to normalize row {row.row_index} of {grid.name!r}: {e}", exc_info=True
            )
            parsed.errors.append(f"Row {row.row_index + 1} ({row.import_title!r}): {e}")

    logger.info(
        f"Parsed sheet {grid.name!r}: {len(parsed.films)} films, {parsed.showing_count} showings"
    )
    return parsed


__all__ = [
    "ParsedSheet",
    "ParserProfile",
    "ReferenceData",
    "WorkbookError",
    "get_profile",
    "parse_sheet",
    "read_workbook",
]
