"""In-memory stand-in for ImportStore used by the service tests."""

import itertools
from contextlib import asynccontextmanager
from datetime import date, datetime, timezone

import pytest

from cineprog.models import (
    Cinema,
    CinemaGroup,
    ConflictMovie,
    ConflictState,
    ImportJob,
    Movie,
    MovieEdition,
    Parser,
    Screening,
    SessionDay,
    SessionTime,
    TitleMapping,
)
from cineprog.services.store import CatalogEntry
from cineprog.sheets.models import ReferenceData
from cineprog.utils.text import normalize_mapping_title


class FakeStore:
    """
    Keeps every object in plain lists and assigns ids the way a flush would.

    ``savepoint()`` drops the objects added inside a failing block, like a
    rolled back SAVEPOINT.
    """

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self.cinemas: dict[str, Cinema] = {}
        self.groups: dict[str, CinemaGroup] = {}
        self.parsers: dict[int, Parser] = {}
        self.movies: dict[str, Movie] = {}
        self.editions: list[MovieEdition] = []
        self.mappings: list[TitleMapping] = []
        self.jobs: list[ImportJob] = []
        self.conflicts: list[ConflictMovie] = []
        self.screenings: list[Screening] = []
        self.days: list[SessionDay] = []
        self.times: list[SessionTime] = []
        self.reference = ReferenceData()
        self.reference_ids: dict[type, set[int]] = {}
        self.failing_titles: set[str] = set()
        self.catalog_loads = 0
        self.flushes = 0

    def _next_id(self) -> int:
        return next(self._ids)

    # ------------------------------------------------------------------
    # Seeding helpers
    # ------------------------------------------------------------------

    def add_cinema(
        self,
        cinema_id: str = "kinepolis-kirchberg",
        group: CinemaGroup | None = None,
        parser: Parser | None = None,
        timezone_name: str | None = "Europe/Luxembourg",
        week_start_day_override: int | None = None,
    ) -> Cinema:
        cinema = Cinema(
            id=cinema_id,
            name=cinema_id.replace("-", " ").title(),
            cinema_group_id=group.id if group else None,
            parser_id=parser.id if parser else None,
            timezone=timezone_name,
            week_start_day_override=week_start_day_override,
        )
        cinema.cinema_group = group
        self.cinemas[cinema_id] = cinema
        return cinema

    def add_group(
        self,
        group_id: str = "kinepolis",
        parser: Parser | None = None,
        week_start_day: int | None = None,
    ) -> CinemaGroup:
        group = CinemaGroup(
            id=group_id,
            name=group_id.title(),
            parser_id=parser.id if parser else None,
            week_start_day=week_start_day,
        )
        self.groups[group_id] = group
        return group

    def add_parser(self, slug: str = "kinepolis", config: dict | None = None) -> Parser:
        parser = Parser(id=self._next_id(), name=slug.title(), slug=slug, config=config)
        self.parsers[parser.id] = parser
        return parser

    def add_movie(self, movie_id: str, title: str, year: int | None = None) -> Movie:
        movie = Movie(id=movie_id, original_title=title, production_year=year, status="published")
        self.movies[movie_id] = movie
        return movie

    def add_mapping(
        self, group_id: str, import_title: str, movie_id: str, edition_id: int | None = None
    ) -> TitleMapping:
        mapping = TitleMapping(
            id=self._next_id(),
            cinema_group_id=group_id,
            import_title=import_title,
            normalized_title=normalize_mapping_title(import_title),
            movie_id=movie_id,
            movie_edition_id=edition_id,
            is_verified=True,
        )
        self.mappings.append(mapping)
        return mapping

    # ------------------------------------------------------------------
    # ImportStore interface
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def savepoint(self):
        lists = (
            self.editions,
            self.jobs,
            self.conflicts,
            self.screenings,
            self.days,
            self.times,
            self.mappings,
        )
        marks = [len(items) for items in lists]
        movie_ids = set(self.movies)
        try:
            yield
        except Exception:
            for items, mark in zip(lists, marks):
                del items[mark:]
            for movie_id in set(self.movies) - movie_ids:
                del self.movies[movie_id]
            raise

    async def add(self, obj: object) -> None:
        if isinstance(obj, Movie):
            self.movies[obj.id] = obj
            return
        if getattr(obj, "id", None) is None:
            obj.id = self._next_id()
        if isinstance(obj, ImportJob):
            self.jobs.append(obj)
        elif isinstance(obj, MovieEdition):
            self.editions.append(obj)
        elif isinstance(obj, Screening):
            self.screenings.append(obj)
        elif isinstance(obj, SessionDay):
            self.days.append(obj)
        elif isinstance(obj, SessionTime):
            self.times.append(obj)
        else:
            raise TypeError(f"FakeStore cannot add {type(obj).__name__}")

    async def flush(self) -> None:
        self.flushes += 1

    async def get_cinema(self, cinema_id: str) -> Cinema | None:
        return self.cinemas.get(cinema_id)

    async def get_cinema_group(self, group_id: str) -> CinemaGroup | None:
        group = self.groups.get(group_id)
        if group is not None:
            group.cinemas = [c for c in self.cinemas.values() if c.cinema_group_id == group_id]
        return group

    async def get_parser(self, parser_id: int) -> Parser | None:
        return self.parsers.get(parser_id)

    async def load_reference_data(self, cinema_group_id: str | None) -> ReferenceData:
        return self.reference

    async def reference_exists(self, model: type, item_id: int) -> bool:
        return item_id in self.reference_ids.get(model, set())

    async def find_title_mapping(self, group_id: str, import_title: str) -> TitleMapping | None:
        for mapping in self.mappings:
            if mapping.cinema_group_id == group_id and mapping.import_title == import_title:
                return mapping
        return None

    async def touch_title_mapping(self, mapping: TitleMapping) -> None:
        mapping.last_used_at = datetime.now(timezone.utc)

    async def upsert_title_mapping(
        self,
        group_id: str,
        import_title: str,
        movie_id: str,
        movie_edition_id: int | None = None,
        user_id: str | None = None,
    ) -> None:
        mapping = await self.find_title_mapping(group_id, import_title)
        if mapping is None:
            mapping = self.add_mapping(group_id, import_title, movie_id, movie_edition_id)
            mapping.created_by = user_id
        else:
            mapping.movie_id = movie_id
            mapping.movie_edition_id = movie_edition_id
        mapping.last_used_at = datetime.now(timezone.utc)

    async def list_catalog(self) -> list[CatalogEntry]:
        self.catalog_loads += 1
        return [CatalogEntry(id=m.id, title=m.original_title) for m in self.movies.values()]

    async def add_conflict(self, conflict: ConflictMovie) -> ConflictMovie:
        if conflict.import_title in self.failing_titles:
            raise RuntimeError(f"insert failed for {conflict.import_title}")
        conflict.id = self._next_id()
        conflict.created_at = datetime.now(timezone.utc)
        for edition in conflict.editions:
            edition.id = self._next_id()
            edition.conflict_movie_id = conflict.id
        for session in conflict.sessions:
            session.id = self._next_id()
            session.conflict_movie_id = conflict.id
            if session.conflict_edition is not None:
                session.conflict_edition_id = session.conflict_edition.id
        self.conflicts.append(conflict)
        return conflict

    async def delete_stale_conflicts(self, cinema_ids: list[str], before: date) -> int:
        cutoff = datetime.combine(before, datetime.min.time(), timezone.utc)
        stale = [
            c
            for c in self.conflicts
            if c.cinema_id in cinema_ids
            and c.state == ConflictState.TO_VERIFY.value
            and c.created_at < cutoff
        ]
        for conflict in stale:
            self.conflicts.remove(conflict)
        return len(stale)

    async def get_conflict(self, conflict_id: int) -> ConflictMovie | None:
        return next((c for c in self.conflicts if c.id == conflict_id), None)

    async def get_conflict_session(self, session_id: int):
        for conflict in self.conflicts:
            for session in conflict.sessions:
                if session.id == session_id:
                    return session
        return None

    async def get_movie(self, movie_id: str) -> Movie | None:
        return self.movies.get(movie_id)

    async def get_edition(self, edition_id: int) -> MovieEdition | None:
        return next((e for e in self.editions if e.id == edition_id), None)

    async def find_edition(
        self,
        movie_id: str,
        format_id: int | None,
        technology_id: int | None,
        audio_language_id: int | None,
        is_original_version: bool,
    ) -> MovieEdition | None:
        for edition in self.editions:
            if (
                edition.movie_id == movie_id
                and edition.format_id == format_id
                and edition.technology_id == technology_id
                and edition.audio_language_id == audio_language_id
                and bool(edition.is_original_version) == is_original_version
            ):
                return edition
        return None

    async def find_screening(
        self, cinema_id: str, movie_edition_id: int, start_week_day: date
    ) -> Screening | None:
        for screening in self.screenings:
            if (
                screening.cinema_id == cinema_id
                and screening.movie_edition_id == movie_edition_id
                and screening.start_week_day == start_week_day
            ):
                return screening
        return None

    async def find_session_day(self, screening_id: int, day: date) -> SessionDay | None:
        return next(
            (d for d in self.days if d.screening_id == screening_id and d.day == day), None
        )

    async def find_session_time(self, session_day_id: int, time_of_day: str) -> SessionTime | None:
        return next(
            (
                t
                for t in self.times
                if t.session_day_id == session_day_id and t.time_of_day == time_of_day
            ),
            None,
        )


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()
