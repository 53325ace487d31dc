"""Reviewer operations on staged conflicts, guarded by the conflict state machine."""

import logging
from datetime import date
from zoneinfo import ZoneInfo

from cineprog.models import ConflictMovie, ConflictSession, ConflictState
from cineprog.models.conflict import SESSION_STATE_PENDING, SESSION_STATE_REJECTED
from cineprog.services.store import ImportStore
from cineprog.sheets.dates import combine_local, parse_time_of_day, time_to_float
from cineprog.sheets.models import Weekday

logger = logging.getLogger(__name__)

TRANSITIONS: dict[ConflictState, frozenset[ConflictState]] = {
    ConflictState.TO_VERIFY: frozenset({ConflictState.VERIFIED, ConflictState.REJECTED}),
    ConflictState.VERIFIED: frozenset({ConflictState.PROCESSED}),
    ConflictState.REJECTED: frozenset(),
    ConflictState.PROCESSED: frozenset(),
}

TERMINAL_STATES = frozenset({ConflictState.REJECTED, ConflictState.PROCESSED})


class InvalidTransitionError(Exception):
    """The requested change is not allowed from the conflict's current state."""


class ReviewError(ValueError):
    """A review request is malformed or references something that does not exist."""


class ConflictNotFoundError(LookupError):
    pass


def can_transition(current: ConflictState, target: ConflictState) -> bool:
    """Re-asserting a non-terminal state counts as allowed."""
    if current == target:
        return current not in TERMINAL_STATES
    return target in TRANSITIONS[current]


def ensure_transition(current: ConflictState, target: ConflictState) -> None:
    if not can_transition(current, target):
        raise InvalidTransitionError(f"Cannot move conflict from {current.value} to {target.value}")


class ConflictReviewer:
    """Applies reviewer decisions to conflicts and their staged sessions."""

    def __init__(self, store: ImportStore, timezone_name: str) -> None:
        """
        Args:
            store: Storage access
            timezone_name: Fallback zone for recomputed session datetimes
        """
        self.store = store
        self.timezone_name = timezone_name

    async def update_conflict(
        self,
        conflict_id: int,
        user_id: str,
        state: ConflictState | None = None,
        matched_movie_id: str | None = None,
    ) -> ConflictMovie:
        """
        Apply one state transition and/or relink the matched movie.

        A confirmed match (verified with a movie) is written back to the
        cinema group's title mappings so the same import title matches
        directly next time.

        Args:
            conflict_id: Conflict to update
            user_id: Reviewer identity
            state: Target state; ``processed`` is reserved for materialization
            matched_movie_id: Catalog movie to link

        Returns:
            The updated conflict

        Raises:
            ConflictNotFoundError: Unknown conflict
            ReviewError: Nothing to change, processed requested, or unknown movie
            InvalidTransitionError: Transition refused by the state machine
        """
        if state is None and matched_movie_id is None:
            raise ReviewError("Nothing to update: provide state or matched_movie_l0_id")
        if state == ConflictState.PROCESSED:
            raise ReviewError("Conflicts are marked processed by materialization only")

        conflict = await self.store.get_conflict(conflict_id)
        if conflict is None:
            raise ConflictNotFoundError(f"Conflict not found: {conflict_id}")

        current = ConflictState(conflict.state)
        target = state or current
        ensure_transition(current, target)

        if matched_movie_id is not None:
            movie = await self.store.get_movie(matched_movie_id)
            if movie is None:
                raise ReviewError(f"Movie not found: {matched_movie_id}")
            if matched_movie_id != conflict.matched_movie_id:
                conflict.matched_movie_id = matched_movie_id
                conflict.match_source = "manual"
                # A different movie invalidates any edition carried over from a mapping
                for edition in conflict.editions:
                    edition.matched_edition_id = None

        conflict.state = target.value
        conflict.reviewed_by = user_id

        if (
            target == ConflictState.VERIFIED
            and conflict.matched_movie_id
            and conflict.cinema_group_id
        ):
            await self.store.upsert_title_mapping(
                conflict.cinema_group_id,
                conflict.import_title,
                conflict.matched_movie_id,
                user_id=user_id,
            )
            logger.info(
                f"Learned mapping {conflict.import_title!r} -> {conflict.matched_movie_id} "
                f"for group {conflict.cinema_group_id}"
            )

        await self.store.flush()
        logger.info(f"Conflict {conflict.id} is now {conflict.state} (by {user_id})")
        return conflict

    async def update_session(
        self,
        session_id: int,
        session_date: date | None = None,
        time_of_day: str | None = None,
        state: str | None = None,
    ) -> ConflictSession:
        """
        Correct a staged session's date or time, or drop it.

        Raises:
            ConflictNotFoundError: Unknown session
            InvalidTransitionError: The owning conflict is rejected or processed
            ReviewError: Bad time, a date outside the sheet range, or a bad state
        """
        if session_date is None and time_of_day is None and state is None:
            raise ReviewError("Nothing to update: provide date, time_of_day or state")
        if state is not None and state not in (SESSION_STATE_PENDING, SESSION_STATE_REJECTED):
            raise ReviewError(f"Unknown session state: {state}")

        session = await self.store.get_conflict_session(session_id)
        if session is None:
            raise ConflictNotFoundError(f"Conflict session not found: {session_id}")

        conflict = session.conflict_movie
        if ConflictState(conflict.state) in TERMINAL_STATES:
            raise InvalidTransitionError(
                f"Sessions of a {conflict.state} conflict can no longer change"
            )

        if time_of_day is not None:
            parsed = parse_time_of_day(time_of_day)
            if parsed is None:
                raise ReviewError(f"Invalid time of day: {time_of_day!r}")
            session.time_of_day = f"{parsed[0]:02d}:{parsed[1]:02d}"
            session.time_float = time_to_float(session.time_of_day)

        if session_date is not None:
            start, end = conflict.sheet_date_start, conflict.sheet_date_end
            if start is not None and end is not None and not start <= session_date <= end:
                raise ReviewError(f"Date {session_date} is outside the sheet range {start}..{end}")
            session.session_date = session_date
            session.weekday = Weekday.of(session_date).value
            if start is not None:
                session.start_week_day = start

        if session.session_date is not None:
            cinema = await self.store.get_cinema(conflict.cinema_id)
            tz_name = (cinema.timezone if cinema else None) or self.timezone_name
            session.session_datetime = combine_local(
                session.session_date, session.time_of_day, ZoneInfo(tz_name)
            )

        if state is not None:
            session.state = state

        await self.store.flush()
        return session
