"""Screening materialization: write verified conflicts into the canonical schedule."""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from cineprog.models import (
    Cinema,
    ConflictEdition,
    ConflictMovie,
    ConflictSession,
    ConflictState,
    Format,
    Language,
    Movie,
    MovieEdition,
    Screening,
    SessionDay,
    SessionTime,
    Technology,
)
from cineprog.models.conflict import SESSION_STATE_REJECTED
from cineprog.models.movie import MOVIE_STATUS_DRAFT
from cineprog.services.review import InvalidTransitionError, ensure_transition
from cineprog.services.store import ImportStore
from cineprog.sheets.dates import combine_local, week_start_for
from cineprog.sheets.profiles import get_profile
from cineprog.utils.text import generate_movie_id

logger = logging.getLogger(__name__)


class MaterializationError(Exception):
    """A verified conflict cannot be written to the schedule."""


@dataclass
class MaterializationResult:
    processed: int = 0
    created_movies: int = 0
    created_screenings: int = 0
    created_session_times: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass
class _Counts:
    created_movies: int = 0
    created_screenings: int = 0
    created_session_times: int = 0


class ScreeningMaterializer:
    """
    Turns verified conflicts into Screening, SessionDay and SessionTime rows.

    Each conflict is processed in its own savepoint: a failure leaves that
    conflict verified and untouched while the rest of the batch proceeds.
    Existing screenings, days and times are reused, so materializing two
    conflicts for the same edition and week extends one screening.
    """

    def __init__(self, store: ImportStore, default_timezone: str) -> None:
        self.store = store
        self.default_timezone = default_timezone

    async def materialize(self, conflict_ids: list[int]) -> MaterializationResult:
        """
        Materialize the given conflicts.

        Args:
            conflict_ids: Conflicts to process, in order

        Returns:
            MaterializationResult with creation counts and per-conflict errors
        """
        result = MaterializationResult()

        for conflict_id in conflict_ids:
            try:
                async with self.store.savepoint():
                    counts = await self._materialize_one(conflict_id)
            except (MaterializationError, InvalidTransitionError) as e:
                logger.warning(f"Conflict {conflict_id} not materialized: {e}")
                result.errors.append(f"Conflict {conflict_id}: {e}")
                continue
            except Exception as e:
                logger.error(f"Failed to materialize conflict {conflict_id}: {e}", exc_info=True)
                result.errors.append(f"Conflict {conflict_id}: {e}")
                continue

            result.processed += 1
            result.created_movies += counts.created_movies
            result.created_screenings += counts.created_screenings
            result.created_session_times += counts.created_session_times

        logger.info(
            f"Materialized {result.processed}/{len(conflict_ids)} conflicts: "
            f"{result.created_screenings} screenings, "
            f"{result.created_session_times} session times, {len(result.errors)} errors"
        )
        return result

    async def _materialize_one(self, conflict_id: int) -> _Counts:
        conflict = await self.store.get_conflict(conflict_id)
        if conflict is None:
            raise MaterializationError("not found")
        ensure_transition(ConflictState(conflict.state), ConflictState.PROCESSED)

        sessions = [s for s in conflict.sessions if s.state != SESSION_STATE_REJECTED]
        undated = [s for s in sessions if s.session_date is None]
        if undated:
            raise MaterializationError(
                f"{len(undated)} session(s) have no date, correct or reject them first"
            )

        cinema = await self.store.get_cinema(conflict.cinema_id)
        if cinema is None:
            raise MaterializationError(f"cinema {conflict.cinema_id} no longer exists")
        week_start_day = await self._week_start_day(cinema)
        tz = ZoneInfo(cinema.timezone or self.default_timezone)

        counts = _Counts()
        movie = await self._resolve_movie(conflict, counts)

        for edition in conflict.editions:
            movie_edition = await self._resolve_edition(movie, edition)
            edition.matched_edition_id = movie_edition.id
            edition_sessions = [
                s
                for s in sessions
                if s.conflict_edition_id is None or s.conflict_edition_id == edition.id
            ]
            await self._write_sessions(
                cinema, movie_edition, edition_sessions, week_start_day, tz, counts
            )

        conflict.matched_movie_id = movie.id
        conflict.state = ConflictState.PROCESSED.value
        conflict.processed_at = datetime.now(timezone.utc)
        await self.store.flush()
        return counts

    async def _week_start_day(self, cinema: Cinema) -> int:
        parser = None
        parser_id = cinema.resolve_parser_id()
        if parser_id is not None:
            parser = await self.store.get_parser(parser_id)
        profile = get_profile(parser.slug if parser else None, parser.config if parser else None)
        return cinema.resolve_week_start_day(profile.week_start_day)

    async def _resolve_movie(self, conflict: ConflictMovie, counts: _Counts) -> Movie:
        if conflict.matched_movie_id:
            movie = await self.store.get_movie(conflict.matched_movie_id)
            if movie is None:
                raise MaterializationError(f"matched movie {conflict.matched_movie_id} not found")
            return movie

        movie_id = generate_movie_id(conflict.movie_name, conflict.production_year)
        movie = await self.store.get_movie(movie_id)
        if movie is not None:
            logger.info(f"Reusing movie {movie_id} for {conflict.movie_name!r}")
            return movie

        duration = next(
            (e.duration_minutes for e in conflict.editions if e.duration_minutes), None
        )
        movie = Movie(
            id=movie_id,
            original_title=conflict.movie_name,
            production_year=conflict.production_year,
            director=conflict.director,
            duration_minutes=duration,
            status=MOVIE_STATUS_DRAFT,
        )
        await self.store.add(movie)
        conflict.is_created = True
        counts.created_movies += 1
        logger.info(f"Created draft movie {movie_id} for {conflict.movie_name!r}")
        return movie

    async def _resolve_edition(self, movie: Movie, edition: ConflictEdition) -> MovieEdition:
        if edition.matched_edition_id is not None:
            existing = await self.store.get_edition(edition.matched_edition_id)
            if existing is None or existing.movie_id != movie.id:
                raise MaterializationError(
                    f"edition {edition.matched_edition_id} does not belong to movie {movie.id}"
                )
            return existing

        for model, item_id in (
            (Format, edition.format_id),
            (Technology, edition.technology_id),
            (Language, edition.language_id),
        ):
            if item_id is not None and not await self.store.reference_exists(model, item_id):
                raise MaterializationError(f"{model.__name__.lower()} {item_id} no longer exists")

        existing = await self.store.find_edition(
            movie.id,
            edition.format_id,
            edition.technology_id,
            edition.language_id,
            edition.is_original_version,
        )
        if existing is not None:
            return existing

        movie_edition = MovieEdition(
            movie_id=movie.id,
            edition_title=edition.edition_title,
            format_id=edition.format_id,
            technology_id=edition.technology_id,
            audio_language_id=edition.language_id,
            subtitle_language_codes=edition.subtitle_language_codes or [],
            duration_minutes=edition.duration_minutes or movie.duration_minutes,
            age_rating=edition.age_rating,
            is_original_version=edition.is_original_version,
            is_active=True,
        )
        await self.store.add(movie_edition)
        return movie_edition

    async def _write_sessions(
        self,
        cinema: Cinema,
        movie_edition: MovieEdition,
        sessions: list[ConflictSession],
        week_start_day: int,
        tz: ZoneInfo,
        counts: _Counts,
    ) -> None:
        by_week: dict[date, list[ConflictSession]] = {}
        for session in sessions:
            week = session.start_week_day or week_start_for(session.session_date, week_start_day)
            by_week.setdefault(week, []).append(session)

        duration = movie_edition.duration_minutes
        for week, week_sessions in sorted(by_week.items()):
            screening = await self.store.find_screening(cinema.id, movie_edition.id, week)
            if screening is None:
                screening = Screening(
                    cinema_id=cinema.id,
                    movie_edition_id=movie_edition.id,
                    start_week_day=week,
                )
                await self.store.add(screening)
                counts.created_screenings += 1

            for session in sorted(week_sessions, key=lambda s: (s.session_date, s.time_of_day)):
                day = await self.store.find_session_day(screening.id, session.session_date)
                if day is None:
                    day = SessionDay(screening_id=screening.id, day=session.session_date)
                    await self.store.add(day)

                if await self.store.find_session_time(day.id, session.time_of_day) is not None:
                    continue
                start = session.session_datetime or combine_local(
                    session.session_date, session.time_of_day, tz
                )
                await self.store.add(
                    SessionTime(
                        session_day_id=day.id,
                        time_of_day=session.time_of_day,
                        time_float=session.time_float,
                        start_datetime=start,
                        end_datetime=start + timedelta(minutes=duration) if duration else None,
                    )
                )
                counts.created_session_times += 1
