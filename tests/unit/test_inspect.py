"""Unit tests for workbook inspection: sheet summaries and annotated previews."""

from datetime import date

from cineprog.sheets.inspect import (
    CELL_DATA,
    CELL_DATE_RANGE,
    CELL_EMPTY,
    CELL_HEADER,
    CELL_MOVIE,
    CELL_TIME,
    preview_sheet,
    summarize_sheet,
)
from cineprog.sheets.models import DateRange, SheetGrid
from cineprog.sheets.profiles import get_profile

TODAY = date(2025, 5, 20)
WEEK = DateRange(start=date(2025, 5, 28), end=date(2025, 6, 3))

PROGRAMME_ROWS = [
    ["", "Wednesday, 28 May 2025 - Tuesday, 3 June 2025"],
    ["", "Film", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"],
    ["", "Dune: Part Two", "", "14:00\n20:00", "", "", "18:30", "", ""],
    ["", "Notes", "", "", "", "", "", "", ""],
]


def make_grid(rows: list[list[str]]) -> SheetGrid:
    return SheetGrid(index=2, name="Utopia", rows=tuple(tuple(r) for r in rows))


class TestSummarizeSheet:
    def test_counts_rows_below_the_first(self) -> None:
        summary = summarize_sheet(make_grid(PROGRAMME_ROWS), today=TODAY)
        assert summary.index == 2
        assert summary.name == "Utopia"
        assert summary.row_count == 3

    def test_finds_date_range(self) -> None:
        assert summarize_sheet(make_grid(PROGRAMME_ROWS), today=TODAY).date_range == WEEK

    def test_falls_back_to_single_dates(self) -> None:
        grid = make_grid([["Printed 26.05.2025"], ["Film", "Wed 28.05.2025", "Tue 03.06.2025"]])
        summary = summarize_sheet(grid, today=TODAY)
        assert summary.date_range == DateRange(start=date(2025, 5, 26), end=date(2025, 6, 3))

    def test_samples_first_non_empty_data_row(self) -> None:
        summary = summarize_sheet(make_grid(PROGRAMME_ROWS), today=TODAY)
        assert summary.sample_data == ["Film", "Mon", "Tue", "Wed", "Thu"]

    def test_sample_skips_long_values(self) -> None:
        grid = make_grid([["Header"], ["x" * 150, "Dune"]])
        assert summarize_sheet(grid, today=TODAY).sample_data == ["Dune"]

    def test_empty_sheet(self) -> None:
        summary = summarize_sheet(make_grid([]), today=TODAY)
        assert summary.row_count == 0
        assert summary.date_range is None
        assert summary.sample_data == []


class TestPreviewSheet:
    def test_annotates_cells(self) -> None:
        preview = preview_sheet(make_grid(PROGRAMME_ROWS), get_profile(None), today=TODAY)
        types = [[cell.type for cell in row] for row in preview.rows]

        assert types[0][0] == CELL_EMPTY
        assert types[0][1] == CELL_DATE_RANGE
        assert types[1][1] == CELL_HEADER
        assert types[1][0] == CELL_EMPTY
        assert types[2][1] == CELL_MOVIE
        assert types[2][3] == CELL_TIME
        assert types[3][1] == CELL_MOVIE
        assert preview.layout.header_row_index == 1

    def test_pads_rows_to_minimum_width(self) -> None:
        preview = preview_sheet(make_grid(PROGRAMME_ROWS), get_profile(None), today=TODAY)
        assert all(len(row) == 10 for row in preview.rows)

    def test_lists_extracted_movies(self) -> None:
        preview = preview_sheet(make_grid(PROGRAMME_ROWS), get_profile(None), today=TODAY)
        assert [m.import_title for m in preview.movies] == ["Dune: Part Two"]

    def test_truncates_long_sheets(self) -> None:
        preview = preview_sheet(
            make_grid(PROGRAMME_ROWS), get_profile(None), max_rows=2, today=TODAY
        )
        assert len(preview.rows) == 2
        assert preview.truncated

    def test_undetected_sheet_has_only_data_cells(self) -> None:
        preview = preview_sheet(make_grid([["Notes", "Closed"]]), get_profile(None), today=TODAY)
        assert not preview.layout.detected
        assert preview.movies == []
        assert [c.type for c in preview.rows[0][:2]] == [CELL_DATA, CELL_DATA]
