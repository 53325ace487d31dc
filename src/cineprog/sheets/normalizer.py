"""Film record normalization: split raw titles into movie name, version, format and schedule."""

import logging
import re
from dataclasses import dataclass, field
from zoneinfo import ZoneInfo

from cineprog.sheets.dates import combine_local, time_to_float, weekday_dates
from cineprog.sheets.models import (
    ExtractedFilmRow,
    NormalizedFilm,
    ReferenceData,
    ReferenceItem,
    SheetLayout,
    Showing,
)
from cineprog.sheets.profiles import ParserProfile

logger = logging.getLogger(__name__)

TRAILING_GROUP_RE = re.compile(r"\s*[\(\[]([^\(\)\[\]]*)[\)\]]\s*$")
TRAILING_DASH_RE = re.compile(r"\s+[-–—]\s+((?:(?!\s[-–—]\s).)+?)\s*$")
FSK_RE = re.compile(r"\bFSK\s*(\d{1,2})\b", re.IGNORECASE)
BARE_VERSION_RE = re.compile(r"\s+(VOST[A-Z]{0,4}|VO|VF|VD|OV|OmU|OmeU|DF)$")

VERSION_RE = re.compile(
    r"^(?:V\.?O\.?(?:\s*ST\w*)?(?:\s+.*)?|V\.?F\.?|V\.?D\.?|DF|OV|OmU|OmeU|OmdU|VOST\w*"
    r"|st\.?\s*[a-z]{2}(?:\s*[&/,+]\s*[a-z]{2})*|sous[- ]titr\w*.*|subtitled|dubbed)$",
    re.IGNORECASE,
)
RATING_RE = re.compile(
    r"^(?:FSK\s*\d{1,2}|-\s*\d{1,2}|\d{1,2}\s*\+|PG(?:-1[23])?|NC-17)$", re.IGNORECASE
)
# Only read as a rating inside brackets: "Rocky - 2" and "Alien - R" are titles
BRACKETED_RATING_RE = re.compile(r"^(?:\d{1,2}[AaPp]?|G|R|U|TP|AL|KT|EA|ENA)$", re.IGNORECASE)
DIRECTOR_YEAR_RE = re.compile(r"^(?P<director>[^,\d][^,]*?),\s*(?P<year>\d{4})$")
YEAR_RE = re.compile(r"^(\d{4})$")
DURATION_TOKEN_RE = re.compile(
    r"^(?:\d{2,3}\s*(?:'|′|’|min\.?|mins|minutes)|\d{1,2}\s*h\s*\d{0,2}\s*(?:m|min)?|\d:\d{2})$",
    re.IGNORECASE,
)
SUBTITLE_RE = re.compile(r"\bst\.?\s*([a-z]{2}(?:\s*[&/,+]\s*[a-z]{2})*)\b", re.IGNORECASE)
VOST_RE = re.compile(r"\bVOST([A-Z]{2})\b", re.IGNORECASE)


def parse_duration_minutes(text: str | None) -> int | None:
    """
    Parse a running time into minutes.

    Accepts "162'", "162 min", "2:42", "2h 42m", "2h42" and plain numbers.

    Args:
        text: Raw duration text

    Returns:
        Minutes, or None when the text is not a recognisable duration
    """
    if not text:
        return None
    value = text.strip().lower()

    match = re.fullmatch(r"(\d{1,3})\s*(?:'|′|’|min\.?|mins|minutes)?", value)
    if match:
        minutes = int(match.group(1))
        return minutes or None

    match = re.fullmatch(r"(\d{1,2})\s*h\s*(\d{1,2})?\s*(?:m|min)?", value)
    if match:
        return int(match.group(1)) * 60 + int(match.group(2) or 0)

    match = re.fullmatch(r"(\d{1,2}):(\d{2})", value)
    if match:
        return int(match.group(1)) * 60 + int(match.group(2))

    return None


def _find_item(items: tuple[ReferenceItem, ...], token: str) -> ReferenceItem | None:
    needle = token.strip().lower()
    for item in items:
        if item.code.lower() == needle or item.name.lower() == needle:
            return item
    return None


@dataclass
class _TitleParts:
    """Working state while peeling tokens off a title."""

    name: str
    director: str | None = None
    year: int | None = None
    age_rating: str | None = None
    duration_text: str | None = None
    version_tokens: list[str] = field(default_factory=list)
    format_tokens: list[str] = field(default_factory=list)
    technology_tokens: list[str] = field(default_factory=list)
    unresolved: list[str] = field(default_factory=list)


class FilmRecordNormalizer:
    """
    Turns extracted rows into NormalizedFilm records.

    Reference data and the profile are fixed per instance; one normalizer is
    built per sheet and never shared across imports.
    """

    def __init__(
        self,
        reference: ReferenceData,
        profile: ParserProfile,
        timezone: ZoneInfo,
    ) -> None:
        self.reference = reference
        self.profile = profile
        self.timezone = timezone

    def normalize(self, row: ExtractedFilmRow, layout: SheetLayout) -> NormalizedFilm:
        """
        Normalize one extracted row.

        Args:
            row: Extracted title and showtimes
            layout: Sheet layout (for the date range)

        Returns:
            NormalizedFilm with unmatched codes kept raw
        """
        parts = self.split_title(row.import_title)

        film = NormalizedFilm(
            import_title=row.import_title,
            movie_name=parts.name,
            director=parts.director,
            production_year=parts.year,
            age_rating=parts.age_rating,
            start_week_date=layout.date_range.start if layout.date_range else None,
        )

        film.duration_text = row.duration_text or parts.duration_text
        film.duration_minutes = parse_duration_minutes(film.duration_text)
        if film.duration_text and film.duration_minutes is None:
            logger.debug(f"Unparseable duration {film.duration_text!r} for {row.import_title!r}")

        self._apply_format(film, parts)
        version_text = row.version_text or " ".join(parts.version_tokens) or None
        self._apply_languages(film, version_text)
        film.version_string = " ".join(
            token for token in [version_text, *parts.unresolved] if token
        ) or None

        film.showings = self._build_showings(row, layout)
        return film

    def normalize_rows(
        self, rows: list[ExtractedFilmRow], layout: SheetLayout
    ) -> list[NormalizedFilm]:
        return [self.normalize(row, layout) for row in rows]

    # ------------------------------------------------------------------
    # Title parsing
    # ------------------------------------------------------------------

    def split_title(self, title: str) -> _TitleParts:
        """
        Peel trailing parentheticals and dash segments off a raw title.

        "Dune: Part Two (Denis Villeneuve, 2024) - 166' - VO st FR/NL"
        → name "Dune: Part Two", director, year, duration and version.
        Unrecognised dash segments stay part of the name.
        """
        parts = _TitleParts(name=re.sub(r"\s+", " ", title).strip())

        while True:
            match = TRAILING_GROUP_RE.search(parts.name)
            if match and match.start() > 0:
                token = match.group(1).strip()
                if token and not self._classify(token, parts, bracketed=True):
                    parts.unresolved.insert(0, token)
                parts.name = parts.name[: match.start()]
                continue

            match = TRAILING_DASH_RE.search(parts.name)
            if match and match.start() > 0 and self._classify(match.group(1).strip(), parts):
                parts.name = parts.name[: match.start()]
                continue
            break

        fsk = FSK_RE.search(parts.name)
        if fsk:
            parts.age_rating = parts.age_rating or f"FSK {fsk.group(1)}"
            parts.name = FSK_RE.sub("", parts.name)

        self._strip_inline_presentation(parts)

        bare = BARE_VERSION_RE.search(parts.name)
        if bare:
            parts.version_tokens.insert(0, bare.group(1))
            parts.name = parts.name[: bare.start()]

        name = re.sub(r"\s+", " ", parts.name).strip(" -–—:,")
        parts.name = name or title.strip()
        return parts

    def _classify(self, token: str, parts: _TitleParts, bracketed: bool = False) -> bool:
        """Record a token on ``parts``; False when it is not recognised."""
        if DURATION_TOKEN_RE.match(token) and parse_duration_minutes(token) is not None:
            parts.duration_text = parts.duration_text or token
            return True
        if self._presentation_kind(token):
            self._record_presentation(token, parts)
            return True
        if VERSION_RE.match(token):
            parts.version_tokens.insert(0, token)
            return True
        if RATING_RE.match(token) or (bracketed and BRACKETED_RATING_RE.match(token)):
            parts.age_rating = parts.age_rating or token.replace(" ", "")
            return True
        match = DIRECTOR_YEAR_RE.match(token)
        if match:
            parts.director = parts.director or match.group("director").strip()
            parts.year = parts.year or int(match.group("year"))
            return True
        match = YEAR_RE.match(token)
        if match and 1880 <= int(match.group(1)) <= 2100:
            parts.year = parts.year or int(match.group(1))
            return True
        return False

    def _presentation_kind(self, token: str) -> str | None:
        """Classify a standalone token as "format", "technology" or None."""
        if _find_item(self.reference.formats, token):
            return "format"
        if _find_item(self.reference.technologies, token):
            return "technology"
        lowered = token.strip().lower()
        if lowered in {k.lower() for k in self.profile.format_keywords}:
            return "format"
        if lowered in {k.lower() for k in self.profile.technology_keywords}:
            return "technology"
        return None

    def _record_presentation(self, token: str, parts: _TitleParts) -> None:
        if self._presentation_kind(token) == "technology":
            parts.technology_tokens.append(token)
        else:
            parts.format_tokens.append(token)

    def _strip_inline_presentation(self, parts: _TitleParts) -> None:
        keywords = {
            *(item.code for item in self.reference.formats),
            *(item.code for item in self.reference.technologies),
            *self.profile.format_keywords,
            *self.profile.technology_keywords,
        }
        # Longest first so "Dolby Atmos" wins over "Dolby"
        for keyword in sorted(keywords, key=len, reverse=True):
            pattern = re.compile(rf"(?<![\w-]){re.escape(keyword)}(?![\w-])", re.IGNORECASE)
            match = pattern.search(parts.name)
            # A title made only of the keyword is left alone
            if not match or parts.name.strip().lower() == keyword.lower():
                continue
            self._record_presentation(match.group(0), parts)
            parts.name = pattern.sub(" ", parts.name, count=1)

    # ------------------------------------------------------------------
    # Reference resolution
    # ------------------------------------------------------------------

    def _apply_format(self, film: NormalizedFilm, parts: _TitleParts) -> None:
        if parts.format_tokens:
            token = parts.format_tokens[0]
            item = _find_item(self.reference.formats, token)
            if item:
                film.format_code, film.format_id = item.code, item.id
            else:
                film.format_code = token
                film.unresolved_codes.append(token)
            parts.unresolved.extend(parts.format_tokens[1:])

        if parts.technology_tokens:
            token = parts.technology_tokens[0]
            item = _find_item(self.reference.technologies, token)
            if item:
                film.technology_code, film.technology_id = item.code, item.id
            else:
                film.technology_code = token
                film.unresolved_codes.append(token)
            parts.unresolved.extend(parts.technology_tokens[1:])

    def _apply_languages(self, film: NormalizedFilm, version_text: str | None) -> None:
        if not version_text:
            return

        spoken, subtitles, original = self.resolve_version(version_text)
        film.is_original_version = original

        if spoken:
            item = self.reference.find_language(spoken)
            if item:
                film.language_code, film.language_id = item.code, item.id
            else:
                film.language_code = spoken
                film.unresolved_codes.append(spoken)

        for code in subtitles:
            item = self.reference.find_language(code)
            if item:
                film.subtitle_language_codes.append(item.code)
            else:
                film.subtitle_language_codes.append(code)
                film.unresolved_codes.append(code)

    def resolve_version(self, version_text: str) -> tuple[str | None, list[str], bool]:
        """
        Resolve a version string to (spoken code, subtitle codes, original version).

        The language mapping is consulted first (exact, case-insensitive);
        otherwise VF/VD/DF/VO/OV/OmU and "st xx&yy" patterns apply.
        """
        entry = self.reference.language_mapping.get(version_text.strip().lower())
        if entry is not None:
            original = entry.spoken_language_code is None
            return entry.spoken_language_code, list(entry.subtitle_language_codes), original

        spoken: str | None = None
        original = False
        if re.search(r"\bV\.?F\b", version_text, re.IGNORECASE):
            spoken = "fr"
        elif re.search(r"\b(?:V\.?D|DF)\b", version_text, re.IGNORECASE):
            spoken = "de"
        elif re.search(r"\b(?:V\.?O|VOST\w*|OV|OmU|OmeU|OmdU)\b", version_text, re.IGNORECASE):
            original = True

        subtitles: list[str] = []
        match = SUBTITLE_RE.search(version_text)
        if match:
            subtitles = [c.lower() for c in re.split(r"\s*[&/,+]\s*", match.group(1)) if c]
        else:
            match = VOST_RE.search(version_text)
            if match:
                subtitles = [match.group(1).lower()]
            elif re.search(r"\bOmU\b", version_text):
                subtitles = ["de"]
            elif re.search(r"\bOmeU\b", version_text):
                subtitles = ["en"]
        return spoken, subtitles, original

    # ------------------------------------------------------------------
    # Schedule
    # ------------------------------------------------------------------

    def _build_showings(self, row: ExtractedFilmRow, layout: SheetLayout) -> list[Showing]:
        dates = weekday_dates(layout.date_range)
        showings: list[Showing] = []
        for weekday, times in row.showtimes.items():
            day = dates.get(weekday)
            if day is None:
                logger.warning(
                    f"No date for {weekday.value} in range {layout.date_range} "
                    f"({row.import_title!r}); staging without a date"
                )
            for time_of_day in times:
                showings.append(
                    Showing(
                        weekday=weekday,
                        date=day,
                        time_of_day=time_of_day,
                        time_float=time_to_float(time_of_day),
                        datetime=combine_local(day, time_of_day, self.timezone) if day else None,
                    )
                )
        return showings
