"""Conflict staging: turn parsed films into reviewable conflicts under one import job."""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone

from cineprog.models import (
    Cinema,
    ConflictEdition,
    ConflictMovie,
    ConflictSession,
    ConflictState,
    ImportJob,
)
from cineprog.models.conflict import SESSION_STATE_PENDING
from cineprog.models.import_job import (
    JOB_STATUS_COMPLETED,
    JOB_STATUS_FAILED,
    JOB_STATUS_PROCESSING,
)
from cineprog.services.movie_matcher import MatchResult, MovieMatcher
from cineprog.services.store import ImportStore
from cineprog.sheets.models import DateRange, NormalizedFilm, Showing

logger = logging.getLogger(__name__)


class CinemaNotFoundError(LookupError):
    """A sheet targets a cinema that does not exist."""


@dataclass
class StagingOptions:
    create_movies_automatically: bool = False
    cleanup_old_data: bool = False
    cleanup_date: date | None = None
    preview_only: bool = False


@dataclass
class SheetToStage:
    """Films of one parsed sheet and the cinema they belong to."""

    sheet_index: int
    sheet_name: str
    cinema_id: str | None
    date_range: DateRange | None
    films: list[NormalizedFilm] = field(default_factory=list)


@dataclass
class StagingResult:
    job_id: int | None
    status: str
    preview_only: bool
    sheets: int = 0
    films: int = 0
    sessions: int = 0
    staged: int = 0
    verified: int = 0
    to_verify: int = 0
    failed: int = 0
    cleaned_up: int = 0
    errors: list[str] = field(default_factory=list)


def _edition_title(film: NormalizedFilm) -> str:
    labels = [c for c in (film.format_code, film.technology_code) if c]
    if film.is_original_version:
        labels.append("VO")
    elif film.language_code:
        labels.append(film.language_code.upper())
    if not labels:
        return film.movie_name
    return f"{film.movie_name} ({', '.join(labels)})"


def _session_from_showing(
    showing: Showing, date_range: DateRange | None, start_week_day: date | None
) -> ConflictSession:
    session_date = showing.date
    session_datetime = showing.datetime
    if session_date is not None and date_range is not None and session_date not in date_range:
        logger.warning(
            f"Showing {session_date} {showing.time_of_day} outside sheet range "
            f"{date_range.start}..{date_range.end}, staged without a date"
        )
        session_date = None
        session_datetime = None

    return ConflictSession(
        weekday=showing.weekday.value,
        session_date=session_date,
        time_of_day=showing.time_of_day,
        time_float=showing.time_float,
        session_datetime=session_datetime,
        start_week_day=start_week_day if session_date is not None else None,
        state=SESSION_STATE_PENDING,
    )


def build_conflict(
    film: NormalizedFilm,
    match: MatchResult,
    job: ImportJob,
    cinema: Cinema,
    date_range: DateRange | None,
) -> ConflictMovie:
    """
    Build a conflict with one edition and one session per showing.

    Args:
        film: Normalized film
        match: Matcher outcome (initial state and matched movie)
        job: Owning import job (already flushed, so it has an id)
        cinema: Target cinema
        date_range: Declared sheet range; showings outside it lose their date

    Returns:
        Unsaved ConflictMovie with editions and sessions attached
    """
    conflict = ConflictMovie(
        import_job_id=job.id,
        cinema_id=cinema.id,
        cinema_group_id=cinema.cinema_group_id,
        parser_id=job.parser_id,
        import_title=film.import_title,
        movie_name=film.movie_name,
        director=film.director,
        production_year=film.production_year,
        import_text={
            "import_title": film.import_title,
            "version_string": film.version_string,
            "duration_text": film.duration_text,
            "candidates": match.candidate_ids,
        },
        matched_movie_id=match.movie_id,
        match_source=match.source,
        candidate_count=len(match.candidate_ids),
        state=match.state.value,
        is_created=False,
        sheet_date_start=date_range.start if date_range else None,
        sheet_date_end=date_range.end if date_range else None,
    )
    edition = ConflictEdition(
        matched_edition_id=match.movie_edition_id,
        edition_title=_edition_title(film),
        format_code=film.format_code,
        format_id=film.format_id,
        technology_code=film.technology_code,
        technology_id=film.technology_id,
        language_code=film.language_code,
        language_id=film.language_id,
        subtitle_language_codes=list(film.subtitle_language_codes),
        duration_text=film.duration_text,
        duration_minutes=film.duration_minutes,
        age_rating=film.age_rating,
        version_string=film.version_string,
        is_original_version=film.is_original_version,
        unresolved_codes=list(film.unresolved_codes),
    )
    conflict.editions = [edition]

    sessions = []
    for showing in film.showings:
        session = _session_from_showing(showing, date_range, film.start_week_date)
        session.conflict_edition = edition
        sessions.append(session)
    conflict.sessions = sessions
    return conflict


class ConflictStager:
    """
    Stages parsed sheets as conflicts under a single import job.

    Each film is written in its own savepoint, so one failing film never
    discards the films staged before or after it. Staging never deduplicates:
    running the same sheets twice produces two sets of conflicts.
    """

    def __init__(self, store: ImportStore) -> None:
        self.store = store

    async def _resolve_cinemas(
        self, sheets: list[SheetToStage], default_cinema_id: str | None
    ) -> dict[str, Cinema]:
        cinemas: dict[str, Cinema] = {}
        for sheet in sheets:
            cinema_id = sheet.cinema_id or default_cinema_id
            if not cinema_id:
                raise CinemaNotFoundError(f"Sheet {sheet.sheet_name!r} has no target cinema")
            if cinema_id in cinemas:
                continue
            cinema = await self.store.get_cinema(cinema_id)
            if cinema is None:
                raise CinemaNotFoundError(f"Cinema not found: {cinema_id}")
            cinemas[cinema_id] = cinema
        return cinemas

    async def stage(
        self,
        sheets: list[SheetToStage],
        user_id: str,
        options: StagingOptions,
        cinema_id: str | None = None,
        cinema_group_id: str | None = None,
        parser_id: int | None = None,
        file_name: str | None = None,
    ) -> StagingResult:
        """
        Match and stage every film of the given sheets.

        Args:
            sheets: Parsed sheets, each optionally bound to its own cinema
            user_id: Caller identity recorded on the job
            options: Execute options
            cinema_id: Default cinema for sheets without one
            cinema_group_id: Group the import was run for, if any
            parser_id: Parser the sheets were parsed with
            file_name: Original workbook name, for the history listing

        Returns:
            StagingResult with the job id and per-state counts

        Raises:
            CinemaNotFoundError: A target cinema does not exist (nothing written)
        """
        result = StagingResult(
            job_id=None,
            status=JOB_STATUS_PROCESSING,
            preview_only=options.preview_only,
            sheets=len(sheets),
            films=sum(len(s.films) for s in sheets),
            sessions=sum(len(f.showings) for s in sheets for f in s.films),
        )
        if options.preview_only:
            result.status = "preview"
            return result

        cinemas = await self._resolve_cinemas(sheets, cinema_id)

        job = ImportJob(
            cinema_id=cinema_id,
            cinema_group_id=cinema_group_id,
            parser_id=parser_id,
            user_id=user_id,
            file_name=file_name,
            sheet_count=len(sheets),
            status=JOB_STATUS_PROCESSING,
            total_records=result.films,
            started_at=datetime.now(timezone.utc),
        )
        await self.store.add(job)
        result.job_id = job.id

        if options.cleanup_old_data:
            before = options.cleanup_date or date.today()
            result.cleaned_up = await self.store.delete_stale_conflicts(list(cinemas), before)
            logger.info(f"Removed {result.cleaned_up} unreviewed conflicts created before {before}")

        matcher = MovieMatcher(self.store, options.create_movies_automatically)
        for sheet in sheets:
            cinema = cinemas[sheet.cinema_id or cinema_id]
            for film in sheet.films:
                try:
                    async with self.store.savepoint():
                        match = await matcher.match(film, cinema.cinema_group_id)
                        conflict = build_conflict(film, match, job, cinema, sheet.date_range)
                        await self.store.add_conflict(conflict)
                    result.staged += 1
                    if match.state == ConflictState.VERIFIED:
                        result.verified += 1
                    else:
                        result.to_verify += 1
                except Exception as e:
                    logger.error(
                        f"Failed to stage {film.import_title!r} from sheet {sheet.sheet_name!r}: {e}",
                        exc_info=True,
                    )
                    result.failed += 1
                    result.errors.append(f"{sheet.sheet_name}: {film.import_title}: {e}")

        job.processed_records = result.staged + result.failed
        job.success_records = result.staged
        job.error_records = result.failed
        job.errors = result.errors
        job.summary = {
            "sheets": result.sheets,
            "sessions": result.sessions,
            "verified": result.verified,
            "to_verify": result.to_verify,
            "cleaned_up": result.cleaned_up,
        }
        job.status = (
            JOB_STATUS_FAILED if result.failed and not result.staged else JOB_STATUS_COMPLETED
        )
        job.completed_at = datetime.now(timezone.utc)
        await self.store.flush()

        result.status = job.status
        logger.info(
            f"Import job {job.id} {job.status}: {result.staged} staged "
            f"({result.verified} verified, {result.to_verify} to verify), {result.failed} failed"
        )
        return result
