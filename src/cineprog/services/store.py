"""Storage access for the import pipeline, wrapping an AsyncSession."""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from cineprog.models import (
    Cinema,
    CinemaGroup,
    ConflictMovie,
    ConflictSession,
    ConflictState,
    Format,
    ImportJob,
    Language,
    LanguageMappingLine,
    Movie,
    MovieEdition,
    Parser,
    Screening,
    SessionDay,
    SessionTime,
    Technology,
    TitleMapping,
)
from cineprog.sheets.models import LanguageMappingEntry, ReferenceData, ReferenceItem
from cineprog.utils.text import normalize_mapping_title

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogEntry:
    """Minimal catalog row used for title search."""

    id: str
    title: str


class ImportStore:
    """
    Database access used by matching, staging, review and materialization.

    Services depend on this class rather than on queries, so they can be
    exercised against an in-memory stand-in.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    def savepoint(self):
        """SAVEPOINT context manager for one item of a batch."""
        return self.db.begin_nested()

    async def add(self, obj: object) -> None:
        self.db.add(obj)
        await self.db.flush()

    async def flush(self) -> None:
        await self.db.flush()

    # ------------------------------------------------------------------
    # Cinemas, parsers and reference data
    # ------------------------------------------------------------------

    async def get_cinema(self, cinema_id: str) -> Cinema | None:
        query = (
            select(Cinema)
            .options(selectinload(Cinema.cinema_group))
            .where(Cinema.id == cinema_id)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_cinema_group(self, group_id: str) -> CinemaGroup | None:
        query = (
            select(CinemaGroup)
            .options(selectinload(CinemaGroup.cinemas).selectinload(Cinema.cinema_group))
            .where(CinemaGroup.id == group_id)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_parser(self, parser_id: int) -> Parser | None:
        return await self.db.get(Parser, parser_id)

    async def load_reference_data(self, cinema_group_id: str | None) -> ReferenceData:
        """
        Load active formats, technologies and languages plus the version mapping.

        Args:
            cinema_group_id: Group whose mapping lines to use; default lines
                (no group) are used when the group has none

        Returns:
            ReferenceData snapshot for one parse
        """
        items: dict[type, tuple[ReferenceItem, ...]] = {}
        for model in (Format, Technology, Language):
            result = await self.db.execute(select(model).where(model.is_active.is_(True)))
            items[model] = tuple(
                ReferenceItem(id=row.id, code=row.code, name=row.name)
                for row in result.scalars().all()
            )

        lines: list[LanguageMappingLine] = []
        if cinema_group_id:
            result = await self.db.execute(
                select(LanguageMappingLine).where(
                    LanguageMappingLine.cinema_group_id == cinema_group_id
                )
            )
            lines = list(result.scalars().all())
        if not lines:
            result = await self.db.execute(
                select(LanguageMappingLine).where(LanguageMappingLine.cinema_group_id.is_(None))
            )
            lines = list(result.scalars().all())

        mapping = {
            line.version_string.strip().lower(): LanguageMappingEntry(
                spoken_language_code=line.spoken_language_code,
                subtitle_language_codes=tuple(line.subtitle_language_codes or ()),
            )
            for line in lines
        }
        return ReferenceData(
            formats=items[Format],
            technologies=items[Technology],
            languages=items[Language],
            language_mapping=mapping,
        )

    async def reference_exists(self, model: type, item_id: int) -> bool:
        return await self.db.get(model, item_id) is not None

    # ------------------------------------------------------------------
    # Title mappings and catalog search
    # ------------------------------------------------------------------

    async def find_title_mapping(self, group_id: str, import_title: str) -> TitleMapping | None:
        query = select(TitleMapping).where(
            TitleMapping.cinema_group_id == group_id,
            TitleMapping.import_title == import_title,
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def touch_title_mapping(self, mapping: TitleMapping) -> None:
        mapping.last_used_at = datetime.now(timezone.utc)
        await self.db.flush()

    async def upsert_title_mapping(
        self,
        group_id: str,
        import_title: str,
        movie_id: str,
        movie_edition_id: int | None = None,
        user_id: str | None = None,
    ) -> None:
        """Insert or overwrite the mapping for (group, import title); last write wins."""
        now = datetime.now(timezone.utc)
        values = {
            "cinema_group_id": group_id,
            "import_title": import_title,
            "normalized_title": normalize_mapping_title(import_title),
            "movie_id": movie_id,
            "movie_edition_id": movie_edition_id,
            "is_verified": True,
            "last_used_at": now,
            "created_by": user_id,
        }
        stmt = insert(TitleMapping).values(**values)
        stmt = stmt.on_conflict_do_update(
            constraint="uq_title_mapping_group_title",
            set_={
                "normalized_title": stmt.excluded.normalized_title,
                "movie_id": stmt.excluded.movie_id,
                "movie_edition_id": stmt.excluded.movie_edition_id,
                "is_verified": True,
                "last_used_at": now,
                "updated_at": func.now(),
            },
        )
        await self.db.execute(stmt)

    async def list_title_mappings(
        self,
        group_id: str,
        search: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[TitleMapping], int]:
        filters = [TitleMapping.cinema_group_id == group_id]
        if search:
            filters.append(TitleMapping.import_title.ilike(f"%{search}%"))

        total = await self.db.scalar(select(func.count()).select_from(TitleMapping).where(*filters))
        query = (
            select(TitleMapping)
            .where(*filters)
            .order_by(TitleMapping.last_used_at.desc().nulls_last(), TitleMapping.id)
            .limit(limit)
            .offset(offset)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all()), total or 0

    async def delete_title_mapping(self, mapping_id: int) -> bool:
        result = await self.db.execute(delete(TitleMapping).where(TitleMapping.id == mapping_id))
        return result.rowcount > 0

    async def list_catalog(self) -> list[CatalogEntry]:
        result = await self.db.execute(select(Movie.id, Movie.original_title))
        return [CatalogEntry(id=row[0], title=row[1]) for row in result.all()]

    # ------------------------------------------------------------------
    # Jobs and conflicts
    # ------------------------------------------------------------------

    async def list_jobs(
        self,
        cinema_id: str | None,
        group_id: str | None,
        limit: int,
        offset: int,
    ) -> tuple[list[ImportJob], int]:
        filters = []
        if cinema_id:
            filters.append(ImportJob.cinema_id == cinema_id)
        if group_id:
            filters.append(ImportJob.cinema_group_id == group_id)

        total = await self.db.scalar(select(func.count()).select_from(ImportJob).where(*filters))
        query = (
            select(ImportJob)
            .options(selectinload(ImportJob.cinema), selectinload(ImportJob.parser))
            .where(*filters)
            .order_by(ImportJob.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all()), total or 0

    async def add_conflict(self, conflict: ConflictMovie) -> ConflictMovie:
        """Insert a conflict with its editions and sessions in one flush."""
        self.db.add(conflict)
        await self.db.flush()
        return conflict

    async def delete_stale_conflicts(self, cinema_ids: list[str], before: date) -> int:
        """Delete still-unreviewed conflicts of these cinemas created before a date."""
        stmt = delete(ConflictMovie).where(
            ConflictMovie.cinema_id.in_(cinema_ids),
            ConflictMovie.state == ConflictState.TO_VERIFY.value,
            ConflictMovie.created_at < datetime.combine(before, datetime.min.time(), timezone.utc),
        )
        result = await self.db.execute(stmt)
        return result.rowcount or 0

    async def get_conflict(self, conflict_id: int) -> ConflictMovie | None:
        query = (
            select(ConflictMovie)
            .options(selectinload(ConflictMovie.editions), selectinload(ConflictMovie.sessions))
            .where(ConflictMovie.id == conflict_id)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def list_conflicts(
        self,
        cinema_id: str | None,
        group_id: str | None,
        state: str | None,
        limit: int,
        offset: int,
    ) -> tuple[list[ConflictMovie], int]:
        filters = []
        if cinema_id:
            filters.append(ConflictMovie.cinema_id == cinema_id)
        if group_id:
            filters.append(ConflictMovie.cinema_group_id == group_id)
        if state:
            filters.append(ConflictMovie.state == state)

        total = await self.db.scalar(
            select(func.count()).select_from(ConflictMovie).where(*filters)
        )
        query = (
            select(ConflictMovie)
            .options(selectinload(ConflictMovie.editions), selectinload(ConflictMovie.sessions))
            .where(*filters)
            .order_by(ConflictMovie.created_at.desc(), ConflictMovie.id)
            .limit(limit)
            .offset(offset)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all()), total or 0

    async def get_conflict_session(self, session_id: int) -> ConflictSession | None:
        query = (
            select(ConflictSession)
            .options(selectinload(ConflictSession.conflict_movie))
            .where(ConflictSession.id == session_id)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    # ------------------------------------------------------------------
    # Canonical catalog and schedule
    # ------------------------------------------------------------------

    async def get_movie(self, movie_id: str) -> Movie | None:
        return await self.db.get(Movie, movie_id)

    async def get_edition(self, edition_id: int) -> MovieEdition | None:
        return await self.db.get(MovieEdition, edition_id)

    async def find_edition(
        self,
        movie_id: str,
        format_id: int | None,
        technology_id: int | None,
        audio_language_id: int | None,
        is_original_version: bool,
    ) -> MovieEdition | None:
        query = select(MovieEdition).where(
            MovieEdition.movie_id == movie_id,
            MovieEdition.format_id.is_(None) if format_id is None
            else MovieEdition.format_id == format_id,
            MovieEdition.technology_id.is_(None) if technology_id is None
            else MovieEdition.technology_id == technology_id,
            MovieEdition.audio_language_id.is_(None) if audio_language_id is None
            else MovieEdition.audio_language_id == audio_language_id,
            MovieEdition.is_original_version.is_(is_original_version),
        )
        result = await self.db.execute(query.limit(1))
        return result.scalars().first()

    async def find_screening(
        self, cinema_id: str, movie_edition_id: int, start_week_day: date
    ) -> Screening | None:
        query = select(Screening).where(
            Screening.cinema_id == cinema_id,
            Screening.movie_edition_id == movie_edition_id,
            Screening.start_week_day == start_week_day,
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def find_session_day(self, screening_id: int, day: date) -> SessionDay | None:
        query = select(SessionDay).where(
            SessionDay.screening_id == screening_id, SessionDay.day == day
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def find_session_time(self, session_day_id: int, time_of_day: str) -> SessionTime | None:
        query = select(SessionTime).where(
            SessionTime.session_day_id == session_day_id,
            SessionTime.time_of_day == time_of_day,
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

