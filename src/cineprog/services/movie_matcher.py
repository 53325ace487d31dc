"""Movie matching service: title mappings first, then catalog search."""

import logging
from dataclasses import dataclass, field

from rapidfuzz import fuzz

from cineprog.models import ConflictState
from cineprog.services.store import CatalogEntry, ImportStore
from cineprog.sheets.models import NormalizedFilm
from cineprog.utils.text import fold_title, slugify

logger = logging.getLogger(__name__)

MATCH_SOURCE_MAPPING = "mapping"
MATCH_SOURCE_CATALOG = "catalog"


@dataclass
class MatchResult:
    """Outcome of matching one film; ``state`` is the conflict's initial state."""

    state: ConflictState
    movie_id: str | None = None
    movie_edition_id: int | None = None
    source: str | None = None
    candidate_ids: list[str] = field(default_factory=list)


class MovieMatcher:
    """
    Service for matching imported film titles to catalog movies.

    Uses a two-stage matching process:
    1. Exact title mapping for (cinema group, import title)
    2. Catalog search (equal, contains, word overlap, slug)

    Only a single, directly matching catalog candidate is auto-matched;
    ambiguous, fuzzy-only and unknown titles are left for a reviewer.
    """

    FUZZY_THRESHOLD = 85  # Minimum token_sort_ratio for a word-overlap candidate

    def __init__(self, store: ImportStore, create_movies_automatically: bool = False) -> None:
        """
        Initialize movie matcher.

        Args:
            store: Storage access
            create_movies_automatically: Start films with no candidate at all
                as verified, so materialization creates a new movie
        """
        self.store = store
        self.create_movies_automatically = create_movies_automatically
        self._catalog: list[CatalogEntry] | None = None

    async def match(self, film: NormalizedFilm, cinema_group_id: str | None) -> MatchResult:
        """
        Match a normalized film to the catalog.

        Args:
            film: Normalized film (import title and cleaned movie name)
            cinema_group_id: Owning cinema group; without one no mapping applies

        Returns:
            MatchResult with the initial conflict state
        """
        # Stage 1: exact title mapping
        if cinema_group_id:
            mapping = await self.store.find_title_mapping(cinema_group_id, film.import_title)
            if mapping:
                logger.info(f"Found via mapping: {film.import_title!r} -> {mapping.movie_id}")
                await self.store.touch_title_mapping(mapping)
                return MatchResult(
                    state=ConflictState.VERIFIED,
                    movie_id=mapping.movie_id,
                    movie_edition_id=mapping.movie_edition_id,
                    source=MATCH_SOURCE_MAPPING,
                )

        # Stage 2: catalog search
        scored = await self._scan_catalog(film.movie_name)
        candidate_ids = [entry.id for entry, _ in scored]

        if len(scored) == 1:
            entry, direct = scored[0]
            if direct:
                logger.info(f"Found via catalog: {film.movie_name!r} -> {entry.id}")
                return MatchResult(
                    state=ConflictState.VERIFIED,
                    movie_id=entry.id,
                    source=MATCH_SOURCE_CATALOG,
                    candidate_ids=candidate_ids,
                )
            logger.info(f"Only a fuzzy candidate for {film.movie_name!r}: {entry.id}, needs review")
            return MatchResult(state=ConflictState.TO_VERIFY, candidate_ids=candidate_ids)

        if not scored and self.create_movies_automatically:
            logger.info(f"No candidate for {film.movie_name!r}, new movie will be created")
            return MatchResult(state=ConflictState.VERIFIED)

        logger.info(f"{len(scored)} candidates for {film.movie_name!r}, needs review")
        return MatchResult(state=ConflictState.TO_VERIFY, candidate_ids=candidate_ids)

    async def find_candidates(self, movie_name: str) -> list[CatalogEntry]:
        """Catalog movies whose title equals, contains or word-overlaps the name."""
        return [entry for entry, _ in await self._scan_catalog(movie_name)]

    async def _scan_catalog(self, movie_name: str) -> list[tuple[CatalogEntry, bool]]:
        """
        Candidates paired with whether they matched directly.

        A direct match is an equal or containing title, or an equal slug. Word
        overlap alone is not direct: "Toy Story 4" overlaps "Toy Story 3".
        """
        folded = fold_title(movie_name)
        if not folded:
            return []
        slug = slugify(movie_name)

        if self._catalog is None:
            self._catalog = await self.store.list_catalog()

        scored: list[tuple[CatalogEntry, bool]] = []
        for entry in self._catalog:
            title = fold_title(entry.title)
            if (
                title == folded
                or folded in title
                or entry.id == slug
                or slugify(entry.title) == slug
            ):
                scored.append((entry, True))
            elif fuzz.token_sort_ratio(folded, title) >= self.FUZZY_THRESHOLD:
                scored.append((entry, False))
        return scored
