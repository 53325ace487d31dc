"""Unit tests for the workbook parse service."""

from datetime import date
from io import BytesIO

import pytest
from openpyxl import Workbook

from cineprog.services.workbook_parser import (
    ParseTargetError,
    SheetMapping,
    SheetMappingError,
    WorkbookParseService,
)
from cineprog.sheets.models import DateRange

TODAY = date(2025, 5, 20)

PROGRAMME_ROWS = [
    [None, "Wednesday, 28 May 2025 - Tuesday, 3 June 2025"],
    [None, "Film", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"],
    [None, "Dune: Part Two", None, "14:00\n20:00", None, None, "18:30", None, None],
]


def make_xlsx(sheets: dict[str, list[list[object]]]) -> bytes:
    workbook = Workbook()
    workbook.remove(workbook.active)
    for title, rows in sheets.items():
        worksheet = workbook.create_sheet(title)
        for row in rows:
            worksheet.append(row)
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def seed_group(store):
    group = store.add_group("kinepolis")
    store.add_cinema("kinepolis-kirchberg", group=group)
    store.add_cinema("kinepolis-belval", group=group)
    return group


# ---------------------------------------------------------------------------
# Single cinema
# ---------------------------------------------------------------------------


async def test_parse_for_cinema(store) -> None:
    seed_group(store)
    data = make_xlsx({"Kirchberg": PROGRAMME_ROWS})

    result = await WorkbookParseService(store, "UTC").parse_for_cinema(
        data, "kinepolis-kirchberg", today=TODAY
    )

    assert result.parser_id is None
    assert [s.cinema_id for s in result.sheets] == ["kinepolis-kirchberg"]
    sheet = result.sheets[0].sheet
    assert sheet.name == "Kirchberg"
    assert sheet.date_range == DateRange(start=date(2025, 5, 28), end=date(2025, 6, 3))
    assert [f.import_title for f in sheet.films] == ["Dune: Part Two"]
    assert (result.film_count, result.showing_count) == (1, 3)


async def test_every_sheet_is_parsed_and_undetected_ones_are_kept(store) -> None:
    seed_group(store)
    data = make_xlsx({"Kirchberg": PROGRAMME_ROWS, "Notes": [["Closed on Monday"]]})

    result = await WorkbookParseService(store, "UTC").parse_for_cinema(
        data, "kinepolis-kirchberg", today=TODAY
    )

    assert [s.sheet.name for s in result.sheets] == ["Kirchberg", "Notes"]
    assert not result.sheets[1].sheet.layout.detected
    assert result.sheets[1].sheet.films == []


async def test_unknown_cinema(store) -> None:
    with pytest.raises(ParseTargetError):
        await WorkbookParseService(store, "UTC").parse_for_cinema(b"", "nowhere")


# ---------------------------------------------------------------------------
# Parse context
# ---------------------------------------------------------------------------


class TestContextFor:
    async def test_group_parser_applies_to_cinema(self, store) -> None:
        parser = store.add_parser("kinepolis-fr-waves")
        group = store.add_group("kinepolis", parser=parser)
        cinema = store.add_cinema("kinepolis-kirchberg", group=group)

        context = await WorkbookParseService(store, "UTC").context_for(cinema)

        assert context.parser_id == parser.id
        assert context.profile.slug == "kinepolis-fr-waves"
        assert str(context.timezone) == "Europe/Luxembourg"

    async def test_parser_config_overrides_profile(self, store) -> None:
        parser = store.add_parser("kinepolis", config={"scan_rows": 4})
        cinema = store.add_cinema("kinepolis-kirchberg", parser=parser)

        context = await WorkbookParseService(store, "UTC").context_for(cinema)

        assert context.profile.scan_rows == 4

    async def test_cinema_week_start_override_wins(self, store) -> None:
        group = store.add_group("kinepolis", week_start_day=4)
        cinema = store.add_cinema("kinepolis-kirchberg", group=group, week_start_day_override=0)

        context = await WorkbookParseService(store, "UTC").context_for(cinema)

        assert context.profile.week_start_day == 0

    async def test_group_week_start_applies(self, store) -> None:
        group = store.add_group("kinepolis", week_start_day=4)
        cinema = store.add_cinema("kinepolis-kirchberg", group=group)

        context = await WorkbookParseService(store, "UTC").context_for(cinema)

        assert context.profile.week_start_day == 4

    async def test_missing_cinema_timezone_uses_default(self, store) -> None:
        cinema = store.add_cinema("utopia", timezone_name=None)

        context = await WorkbookParseService(store, "Europe/Brussels").context_for(cinema)

        assert str(context.timezone) == "Europe/Brussels"


# ---------------------------------------------------------------------------
# Cinema group
# ---------------------------------------------------------------------------


async def test_parse_for_group_assigns_sheets_to_cinemas(store) -> None:
    seed_group(store)
    data = make_xlsx({"Kirchberg": PROGRAMME_ROWS, "Belval": PROGRAMME_ROWS})

    result = await WorkbookParseService(store, "UTC").parse_for_group(
        data,
        "kinepolis",
        [
            SheetMapping(sheet_index=1, cinema_id="kinepolis-belval"),
            SheetMapping(sheet_index=0, cinema_id="kinepolis-kirchberg"),
        ],
        today=TODAY,
    )

    assert [(s.cinema_id, s.sheet.name) for s in result.sheets] == [
        ("kinepolis-belval", "Belval"),
        ("kinepolis-kirchberg", "Kirchberg"),
    ]
    assert result.film_count == 2


async def test_group_mapping_falls_back_to_sheet_name(store) -> None:
    seed_group(store)
    data = make_xlsx({"Belval": PROGRAMME_ROWS})

    result = await WorkbookParseService(store, "UTC").parse_for_group(
        data,
        "kinepolis",
        [SheetMapping(sheet_index=7, cinema_id="kinepolis-belval", sheet_name="Belval")],
        today=TODAY,
    )

    assert result.sheets[0].sheet.name == "Belval"


async def test_group_requires_mappings(store) -> None:
    seed_group(store)
    with pytest.raises(SheetMappingError):
        await WorkbookParseService(store, "UTC").parse_for_group(b"", "kinepolis", [])


async def test_group_refuses_foreign_cinema(store) -> None:
    seed_group(store)
    store.add_cinema("utopia")
    data = make_xlsx({"Utopia": PROGRAMME_ROWS})

    with pytest.raises(SheetMappingError, match="does not belong"):
        await WorkbookParseService(store, "UTC").parse_for_group(
            data, "kinepolis", [SheetMapping(sheet_index=0, cinema_id="utopia")]
        )


async def test_group_refuses_unknown_sheet(store) -> None:
    seed_group(store)
    data = make_xlsx({"Kirchberg": PROGRAMME_ROWS})

    with pytest.raises(SheetMappingError, match="Sheet not found"):
        await WorkbookParseService(store, "UTC").parse_for_group(
            data, "kinepolis", [SheetMapping(sheet_index=3, cinema_id="kinepolis-belval")]
        )


async def test_unknown_group(store) -> None:
    with pytest.raises(ParseTargetError):
        await WorkbookParseService(store, "UTC").parse_for_group(
            b"", "nowhere", [SheetMapping(sheet_index=0, cinema_id="x")]
        )
