"""Fill draft movies created by imports with TMDb metadata."""

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cineprog.models import Movie
from cineprog.models.movie import MOVIE_STATUS_DRAFT
from cineprog.services.tmdb_client import TMDbClient

logger = logging.getLogger(__name__)


def _extract_year(release_date: str | None) -> int | None:
    if not release_date:
        return None
    try:
        return int(release_date[:4])
    except (ValueError, IndexError):
        return None


@dataclass
class EnrichmentReport:
    checked: int = 0
    updated: int = 0
    not_found: int = 0


class MovieEnricher:
    """
    Looks up draft movies without a TMDb id and copies metadata onto them.

    Only empty fields are filled, so values a reviewer typed in are kept.
    """

    def __init__(self, db: AsyncSession, tmdb_client: TMDbClient) -> None:
        self.db = db
        self.tmdb = tmdb_client

    async def find_candidates(self, limit: int) -> list[Movie]:
        query = (
            select(Movie)
            .where(Movie.tmdb_id.is_(None), Movie.status == MOVIE_STATUS_DRAFT)
            .order_by(Movie.created_at.desc())
            .limit(limit)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def _tmdb_id_taken(self, tmdb_id: int, movie_id: str) -> bool:
        result = await self.db.execute(
            select(Movie.id).where(Movie.tmdb_id == tmdb_id, Movie.id != movie_id)
        )
        return result.scalar_one_or_none() is not None

    async def enrich_movie(self, movie: Movie) -> bool:
        """
        Enrich one movie in place.

        Args:
            movie: Draft movie

        Returns:
            True if TMDb data was applied
        """
        search = await self.tmdb.search_movie(movie.original_title, movie.production_year)
        if not search:
            return False

        details = await self.tmdb.get_movie_details(search["id"])
        if not details:
            return False

        tmdb_id = details.get("id")
        if tmdb_id is None or await self._tmdb_id_taken(tmdb_id, movie.id):
            logger.warning(f"TMDb id {tmdb_id} already linked elsewhere, skipping {movie.id}")
            return False

        directors = self.tmdb.extract_directors(details.get("credits", {}))
        movie.tmdb_id = tmdb_id
        movie.production_year = movie.production_year or _extract_year(details.get("release_date"))
        movie.director = movie.director or (", ".join(directors) if directors else None)
        movie.duration_minutes = movie.duration_minutes or details.get("runtime") or None
        movie.overview = movie.overview or details.get("overview") or None
        movie.poster_path = movie.poster_path or details.get("poster_path") or None
        await self.db.flush()
        return True

    async def run(self, limit: int) -> EnrichmentReport:
        report = EnrichmentReport()
        for movie in await self.find_candidates(limit):
            report.checked += 1
            if await self.enrich_movie(movie):
                report.updated += 1
                logger.info(f"Enriched {movie.id} from TMDb ({movie.tmdb_id})")
            else:
                report.not_found += 1
        logger.info(
            f"Enrichment checked {report.checked} movies: "
            f"{report.updated} updated, {report.not_found} without TMDb data"
        )
        return report
