"""Workbook parse service: run detection, extraction and normalization over target sheets."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from zoneinfo import ZoneInfo

from cineprog.models import Cinema
from cineprog.services.store import ImportStore
from cineprog.sheets import ParsedSheet, parse_sheet, read_workbook
from cineprog.sheets.models import ReferenceData, SheetGrid
from cineprog.sheets.profiles import ParserProfile, get_profile

logger = logging.getLogger(__name__)


class ParseTargetError(LookupError):
    """The cinema or cinema group a parse targets does not exist."""


class SheetMappingError(ValueError):
    """Sheet mappings are missing, name an unknown sheet or a cinema outside the group."""


@dataclass(frozen=True)
class SheetMapping:
    sheet_index: int
    cinema_id: str
    sheet_name: str | None = None


@dataclass
class ParseContext:
    """Everything the pure stages need for one cinema."""

    cinema: Cinema
    parser_id: int | None
    profile: ParserProfile
    timezone: ZoneInfo
    reference: ReferenceData


@dataclass
class SheetParseResult:
    cinema_id: str
    sheet: ParsedSheet


@dataclass
class WorkbookParseResult:
    parser_id: int | None
    sheets: list[SheetParseResult] = field(default_factory=list)

    @property
    def film_count(self) -> int:
        return sum(len(s.sheet.films) for s in self.sheets)

    @property
    def showing_count(self) -> int:
        return sum(s.sheet.showing_count for s in self.sheets)


class WorkbookParseService:
    """Resolves per-cinema parse settings and parses the target sheets concurrently."""

    def __init__(self, store: ImportStore, default_timezone: str) -> None:
        self.store = store
        self.default_timezone = default_timezone
        self._reference_cache: dict[str | None, ReferenceData] = {}

    async def context_for(self, cinema: Cinema) -> ParseContext:
        """
        Resolve parser profile, timezone and reference data for a cinema.

        Args:
            cinema: Cinema with its group loaded

        Returns:
            ParseContext; the profile's week start honours cinema and group overrides
        """
        parser_id = cinema.resolve_parser_id()
        parser = await self.store.get_parser(parser_id) if parser_id is not None else None
        profile = get_profile(parser.slug if parser else None, parser.config if parser else None)
        week_start_day = cinema.resolve_week_start_day(profile.week_start_day)
        if week_start_day != profile.week_start_day:
            profile = profile.with_overrides({"week_start_day": week_start_day})

        group_id = cinema.cinema_group_id
        if group_id not in self._reference_cache:
            self._reference_cache[group_id] = await self.store.load_reference_data(group_id)

        return ParseContext(
            cinema=cinema,
            parser_id=parser_id,
            profile=profile,
            timezone=ZoneInfo(cinema.timezone or self.default_timezone),
            reference=self._reference_cache[group_id],
        )

    async def load_grids(self, data: bytes) -> list[SheetGrid]:
        return await asyncio.to_thread(read_workbook, data)

    async def parse_for_cinema(
        self, data: bytes, cinema_id: str, today: date | None = None
    ) -> WorkbookParseResult:
        """Parse every sheet of the workbook for one cinema."""
        cinema = await self.store.get_cinema(cinema_id)
        if cinema is None:
            raise ParseTargetError(f"Cinema not found: {cinema_id}")
        context = await self.context_for(cinema)
        grids = await self.load_grids(data)
        parsed = await self._parse_grids([(grid, context) for grid in grids], today)
        return WorkbookParseResult(
            parser_id=context.parser_id,
            sheets=[SheetParseResult(cinema_id=cinema.id, sheet=p) for p in parsed],
        )

    async def parse_for_group(
        self,
        data: bytes,
        cinema_group_id: str,
        sheet_mappings: list[SheetMapping],
        today: date | None = None,
    ) -> WorkbookParseResult:
        """
        Parse the mapped sheets of a group workbook, each for its own cinema.

        Args:
            data: Workbook bytes
            cinema_group_id: Owning group
            sheet_mappings: Sheet to cinema assignments
            today: Reference date for year inference

        Returns:
            WorkbookParseResult in mapping order

        Raises:
            ParseTargetError: Unknown group
            SheetMappingError: Missing mappings, a cinema outside the group or an unknown sheet
        """
        group = await self.store.get_cinema_group(cinema_group_id)
        if group is None:
            raise ParseTargetError(f"Cinema group not found: {cinema_group_id}")
        if not sheet_mappings:
            raise SheetMappingError("sheet_mappings is required for a cinema group import")

        cinemas = {c.id: c for c in group.cinemas}
        grids = await self.load_grids(data)
        by_index = {g.index: g for g in grids}
        by_name = {g.name: g for g in grids}

        targets: list[tuple[SheetGrid, ParseContext]] = []
        contexts: dict[str, ParseContext] = {}
        for mapping in sheet_mappings:
            cinema = cinemas.get(mapping.cinema_id)
            if cinema is None:
                raise SheetMappingError(
                    f"Cinema {mapping.cinema_id} does not belong to group {cinema_group_id}"
                )
            grid = by_index.get(mapping.sheet_index)
            if grid is None and mapping.sheet_name:
                grid = by_name.get(mapping.sheet_name)
            if grid is None:
                raise SheetMappingError(f"Sheet not found: {mapping.sheet_index}")
            if cinema.id not in contexts:
                contexts[cinema.id] = await self.context_for(cinema)
            targets.append((grid, contexts[cinema.id]))

        parsed = await self._parse_grids(targets, today)
        parser_ids = {ctx.parser_id for ctx in contexts.values()}
        return WorkbookParseResult(
            parser_id=parser_ids.pop() if len(parser_ids) == 1 else group.parser_id,
            sheets=[
                SheetParseResult(cinema_id=ctx.cinema.id, sheet=p)
                for (_, ctx), p in zip(targets, parsed)
            ],
        )

    async def _parse_grids(
        self, targets: list[tuple[SheetGrid, ParseContext]], today: date | None
    ) -> list[ParsedSheet]:
        parsed = await asyncio.gather(
            *(
                asyncio.to_thread(
                    parse_sheet, grid, ctx.profile, ctx.reference, ctx.timezone, today
                )
                for grid, ctx in targets
            )
        )
        for sheet in parsed:
            if not sheet.layout.detected:
                logger.warning(f"No day-columns row found on sheet {sheet.name!r}, skipped")
        return list(parsed)
