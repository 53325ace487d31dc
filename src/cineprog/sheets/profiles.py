"""Parser profile registry mapping parser slugs to layout and token rules."""

import logging
from dataclasses import dataclass, fields, replace
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_FORMAT_KEYWORDS = ("3D", "IMAX", "4DX", "ATMOS", "Dolby", "D-BOX", "ScreenX")
DEFAULT_TECHNOLOGY_KEYWORDS = ("Laser", "Dolby Cinema", "Dolby Atmos")

# Python weekday numbering, Monday == 0
WEDNESDAY = 2


@dataclass(frozen=True)
class ParserProfile:
    """
    Rules one spreadsheet layout family follows.

    A profile only changes how sheets are read, never what the pipeline
    guarantees downstream.
    """

    slug: str = "weekly-grid"
    scan_rows: int = 10
    film_header_labels: tuple[str, ...] = ("film",)
    default_film_column: int = 1
    duration_header_labels: tuple[str, ...] = ("duration", "durée", "duree", "dauer", "length")
    version_header_labels: tuple[str, ...] = ("version", "language", "langue", "sprache", "vo/vf")
    min_title_length: int = 4
    weekday_languages: tuple[str, ...] = ("en",)
    # Showtime occasionally sits one column left of its weekday header
    shifted_time_fallback: bool = True
    format_keywords: tuple[str, ...] = DEFAULT_FORMAT_KEYWORDS
    technology_keywords: tuple[str, ...] = DEFAULT_TECHNOLOGY_KEYWORDS
    week_start_day: int = WEDNESDAY

    def with_overrides(self, config: dict[str, Any] | None) -> "ParserProfile":
        """
        Apply a parser row's JSON config on top of this profile.

        Unknown keys are ignored with a warning; list values become tuples.

        Args:
            config: Parser.config JSON (may be None)

        Returns:
            New profile with overridden fields
        """
        if not config:
            return self
        known = {f.name for f in fields(self)}
        changes: dict[str, Any] = {}
        for key, value in config.items():
            if key not in known or key == "slug":
                logger.warning(f"Ignoring unknown parser config key {key!r} for {self.slug}")
                continue
            changes[key] = tuple(value) if isinstance(value, list) else value
        return replace(self, **changes)


# Kinepolis France sheets: French weekday headers, titles in the first column
_KINEPOLIS_FRANCE = ParserProfile(
    weekday_languages=("fr", "en"),
    film_header_labels=("film", "titre"),
    default_film_column=0,
)

PROFILE_REGISTRY: dict[str, ParserProfile] = {
    "weekly-grid": ParserProfile(),
    "kinepolis": ParserProfile(slug="kinepolis"),
    "kinepolis-fr-longwy-thionville": replace(
        _KINEPOLIS_FRANCE, slug="kinepolis-fr-longwy-thionville"
    ),
    "kinepolis-fr-metz-amphitheatre": replace(
        _KINEPOLIS_FRANCE, slug="kinepolis-fr-metz-amphitheatre"
    ),
    "kinepolis-fr-waves": replace(_KINEPOLIS_FRANCE, slug="kinepolis-fr-waves"),
    "cinextdoor": ParserProfile(
        slug="cinextdoor",
        weekday_languages=("en", "fr", "de"),
        film_header_labels=("film", "titre", "titel"),
    ),
    "scala-cinextdoor": ParserProfile(
        slug="scala-cinextdoor",
        weekday_languages=("en", "fr", "de"),
        film_header_labels=("film", "titre", "titel"),
        shifted_time_fallback=False,
    ),
}


def get_profile(slug: str | None, config: dict[str, Any] | None = None) -> ParserProfile:
    """
    Get a parser profile by slug.

    Args:
        slug: Parser slug (e.g., "kinepolis", "cinextdoor")
        config: Optional per-parser overrides

    Returns:
        The registered profile with overrides applied, or the generic
        weekly-grid profile when the slug is unknown
    """
    profile = PROFILE_REGISTRY.get(slug or "")
    if profile is None:
        logger.info(f"No profile registered for parser {slug!r}, using weekly-grid")
        profile = PROFILE_REGISTRY["weekly-grid"]
    return profile.with_overrides(config)


__all__ = ["PROFILE_REGISTRY", "ParserProfile", "get_profile"]
