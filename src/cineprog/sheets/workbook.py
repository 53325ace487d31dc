"""Workbook reading: turn an uploaded .xlsx file into immutable text grids."""

import logging
from datetime import date, datetime, time
from io import BytesIO
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from cineprog.sheets.models import SheetGrid

logger = logging.getLogger(__name__)

ACCEPTED_EXTENSIONS = (".xlsx", ".xlsm")


class WorkbookError(Exception):
    """The uploaded file could not be read as a workbook."""


def has_accepted_extension(filename: str | None) -> bool:
    return bool(filename) and filename.lower().endswith(ACCEPTED_EXTENSIONS)


def cell_to_text(value: object) -> str:
    """
    Render one cell value as text.

    Dates become ISO "YYYY-MM-DD", times become "HH:MM" and whole floats
    lose their ".0" so "120.0" reads as a duration "120".
    """
    if value is None:
        return ""
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.strftime("%Y-%m-%d %H:%M")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, time):
        return value.strftime("%H:%M")
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def read_workbook(data: bytes) -> list[SheetGrid]:
    """
    Read every worksheet of an .xlsx workbook.

    Trailing empty rows and trailing empty cells on each row are dropped.

    Args:
        data: Raw file bytes

    Returns:
        One SheetGrid per worksheet, in workbook order

    Raises:
        WorkbookError: If the bytes are not a readable workbook
    """
    try:
        workbook = load_workbook(BytesIO(data), data_only=True, read_only=True)
    except (BadZipFile, InvalidFileException, KeyError, OSError, ValueError) as e:
        raise WorkbookError(f"Failed to read workbook: {e}") from e

    grids: list[SheetGrid] = []
    try:
        for index, worksheet in enumerate(workbook.worksheets):
            rows: list[tuple[str, ...]] = []
            for values in worksheet.iter_rows(values_only=True):
                cells = [cell_to_text(v) for v in values]
                while cells and not cells[-1]:
                    cells.pop()
                rows.append(tuple(cells))
            while rows and not rows[-1]:
                rows.pop()
            grids.append(SheetGrid(index=index, name=worksheet.title, rows=tuple(rows)))
    finally:
        workbook.close()

    logger.info(f"Read workbook with {len(grids)} sheets")
    return grids
