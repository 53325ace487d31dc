"""TMDb API client used to enrich draft movies created by imports."""

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class TMDbClient:
    """Client for The Movie Database (TMDb) API."""

    BASE_URL = "https://api.themoviedb.org/3"

    def __init__(self, api_key: str, language: str = "en-GB", timeout: float = 30) -> None:
        """
        Args:
            api_key: TMDb API key; an empty key disables every call
            language: Response language for titles and overviews
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.language = language
        self.timeout = timeout
        if not self.api_key:
            logger.warning("TMDb API key not configured")

    async def _get(self, path: str, **params: Any) -> dict[str, Any] | None:
        if not self.api_key:
            logger.warning(f"Skipping TMDb request {path} without API key")
            return None

        query = {"api_key": self.api_key, "language": self.language, **params}
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(f"{self.BASE_URL}{path}", params=query)
                response.raise_for_status()
                return response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"TMDb request {path} failed: {e}")
            return None

    async def search_movie(self, title: str, year: int | None = None) -> dict[str, Any] | None:
        """
        Search for a movie by title.

        Args:
            title: Movie name as normalized from the sheet
            year: Production year; narrows the search and breaks ties

        Returns:
            The result released in ``year`` if any, else the first result,
            or None when TMDb has nothing
        """
        params: dict[str, Any] = {"query": title}
        if year:
            params["year"] = year

        data = await self._get("/search/movie", **params)
        results = (data or {}).get("results") or []
        if not results:
            logger.info(f"No TMDb results for: {title}")
            return None

        if year:
            for result in results:
                if (result.get("release_date") or "").startswith(str(year)):
                    return result
        return results[0]

    async def get_movie_details(self, tmdb_id: int) -> dict[str, Any] | None:
        """Movie details with credits appended, or None on any failure."""
        return await self._get(f"/movie/{tmdb_id}", append_to_response="credits")

    def extract_directors(self, credits: dict[str, Any]) -> list[str]:
        crew = credits.get("crew", [])
        return [person["name"] for person in crew if person.get("job") == "Director"]
