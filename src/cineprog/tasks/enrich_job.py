"""Scheduled job that enriches imported draft movies from TMDb."""

import logging

from cineprog.config import Settings
from cineprog.database import AsyncSessionLocal
from cineprog.services.enrichment import MovieEnricher
from cineprog.services.tmdb_client import TMDbClient

logger = logging.getLogger(__name__)


def build_tmdb_client(current: Settings | None = None) -> TMDbClient:
    """Build a client from settings read at call time, so a rotated key applies to the next run."""
    current = current or Settings()
    return TMDbClient(
        api_key=current.tmdb_api_key,
        language=current.tmdb_language,
        timeout=current.http_timeout,
    )


async def run_enrich_drafts() -> None:
    """Enrich draft movies that have no TMDb id yet.

    Settings are re-read from the environment on every run. Creates its own
    DB session so it can be called from the scheduler or the admin console
    without depending on a request context.
    """
    current = Settings()
    if not current.enrich_enabled:
        logger.info("Movie enrichment disabled, skipping")
        return

    client = build_tmdb_client(current)
    if not client.api_key:
        logger.warning("TMDB_API_KEY not set, skipping movie enrichment")
        return

    logger.info("Starting scheduled movie enrichment")
    async with AsyncSessionLocal() as db:
        try:
            enricher = MovieEnricher(db, client)
            await enricher.run(current.enrich_batch_size)
            await db.commit()
        except Exception as e:
            logger.error(f"Movie enrichment failed: {e}", exc_info=True)
            await db.rollback()
