"""Unit tests for workbook reading."""

from datetime import date, datetime, time
from io import BytesIO

import pytest
from openpyxl import Workbook

from cineprog.sheets.workbook import (
    WorkbookError,
    cell_to_text,
    has_accepted_extension,
    read_workbook,
)


def make_xlsx(sheets: dict[str, list[list[object]]]) -> bytes:
    """Build an .xlsx file in memory, one worksheet per entry."""
    workbook = Workbook()
    workbook.remove(workbook.active)
    for title, rows in sheets.items():
        worksheet = workbook.create_sheet(title)
        for row in rows:
            worksheet.append(row)
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


class TestCellToText:
    def test_none_is_empty(self) -> None:
        assert cell_to_text(None) == ""

    def test_midnight_datetime_becomes_iso_date(self) -> None:
        assert cell_to_text(datetime(2025, 5, 28)) == "2025-05-28"

    def test_datetime_with_time(self) -> None:
        assert cell_to_text(datetime(2025, 5, 28, 20, 15)) == "2025-05-28 20:15"

    def test_date(self) -> None:
        assert cell_to_text(date(2025, 5, 28)) == "2025-05-28"

    def test_time_becomes_hh_mm(self) -> None:
        assert cell_to_text(time(14, 0)) == "14:00"

    def test_whole_float_loses_decimal(self) -> None:
        assert cell_to_text(120.0) == "120"

    def test_fractional_float_is_kept(self) -> None:
        assert cell_to_text(1.5) == "1.5"

    def test_strings_are_stripped(self) -> None:
        assert cell_to_text("  Dune  ") == "Dune"


class TestHasAcceptedExtension:
    def test_accepts_xlsx_and_xlsm(self) -> None:
        assert has_accepted_extension("programme.xlsx")
        assert has_accepted_extension("PROGRAMME.XLSM")

    def test_rejects_other_files(self) -> None:
        assert not has_accepted_extension("programme.csv")
        assert not has_accepted_extension("programme.xls")
        assert not has_accepted_extension(None)


class TestReadWorkbook:
    def test_reads_every_sheet_in_order(self) -> None:
        data = make_xlsx({"Kirchberg": [["Film"]], "Utopia": [["Film"]]})
        grids = read_workbook(data)
        assert [(g.index, g.name) for g in grids] == [(0, "Kirchberg"), (1, "Utopia")]

    def test_renders_cells_as_text(self) -> None:
        data = make_xlsx(
            {
                "Kirchberg": [
                    [None, "Film", "Mon"],
                    [None, "Nosferatu", time(20, 0)],
                    [None, "Duration", 132],
                ]
            }
        )
        grid = read_workbook(data)[0]
        assert grid.rows[0] == ("", "Film", "Mon")
        assert grid.cell(1, 2) == "20:00"
        assert grid.cell(2, 2) == "132"

    def test_drops_trailing_empty_cells_and_rows(self) -> None:
        data = make_xlsx({"Kirchberg": [["Film", None, None], ["Dune"], [None], [None]]})
        grid = read_workbook(data)[0]
        assert grid.rows == (("Film",), ("Dune",))

    def test_missing_cells_read_as_empty(self) -> None:
        grid = read_workbook(make_xlsx({"Kirchberg": [["Film"]]}))[0]
        assert grid.cell(5, 5) == ""

    def test_rejects_non_workbook_bytes(self) -> None:
        with pytest.raises(WorkbookError):
            read_workbook(b"not a spreadsheet")
