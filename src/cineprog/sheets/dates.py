"""Date helpers for weekly programme sheets: range parsing, weekday tables, program weeks."""

import re
from datetime import date, datetime, timedelta

from cineprog.sheets.models import DateRange, Weekday
from cineprog.utils.text import strip_accents

# Month names and abbreviations, accent-free and lowercase
MONTHS: dict[str, int] = {
    # English
    "january": 1, "february": 2, "march": 3, "april": 4, "may": 5, "june": 6,
    "july": 7, "august": 8, "september": 9, "october": 10, "november": 11, "december": 12,
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "jun": 6, "jul": 7, "aug": 8,
    "sep": 9, "sept": 9, "oct": 10, "nov": 11, "dec": 12,
    # French
    "janvier": 1, "fevrier": 2, "mars": 3, "avril": 4, "mai": 5, "juin": 6,
    "juillet": 7, "aout": 8, "septembre": 9, "octobre": 10, "novembre": 11, "decembre": 12,
    "janv": 1, "fevr": 2, "fev": 2, "avr": 4, "juil": 7,
    # German
    "januar": 1, "janner": 1, "februar": 2, "marz": 3, "maerz": 3, "juni": 6, "juli": 7,
    "oktober": 10, "dezember": 12, "okt": 10, "dez": 12,
}

# Weekday labels per language, accent-free and lowercase
WEEKDAY_LABELS: dict[str, dict[str, Weekday]] = {
    "en": {
        "mon": Weekday.MON, "monday": Weekday.MON,
        "tue": Weekday.TUE, "tues": Weekday.TUE, "tuesday": Weekday.TUE,
        "wed": Weekday.WED, "wednesday": Weekday.WED,
        "thu": Weekday.THU, "thur": Weekday.THU, "thurs": Weekday.THU, "thursday": Weekday.THU,
        "fri": Weekday.FRI, "friday": Weekday.FRI,
        "sat": Weekday.SAT, "saturday": Weekday.SAT,
        "sun": Weekday.SUN, "sunday": Weekday.SUN,
    },
    "fr": {
        "lun": Weekday.MON, "lundi": Weekday.MON,
        "mar": Weekday.TUE, "mardi": Weekday.TUE,
        "mer": Weekday.WED, "mercredi": Weekday.WED,
        "jeu": Weekday.THU, "jeudi": Weekday.THU,
        "ven": Weekday.FRI, "vendredi": Weekday.FRI,
        "sam": Weekday.SAT, "samedi": Weekday.SAT,
        "dim": Weekday.SUN, "dimanche": Weekday.SUN,
    },
    "de": {
        "mo": Weekday.MON, "montag": Weekday.MON,
        "di": Weekday.TUE, "dienstag": Weekday.TUE,
        "mi": Weekday.WED, "mittwoch": Weekday.WED,
        "do": Weekday.THU, "donnerstag": Weekday.THU,
        "fr": Weekday.FRI, "freitag": Weekday.FRI,
        "sa": Weekday.SAT, "samstag": Weekday.SAT,
        "so": Weekday.SUN, "sonntag": Weekday.SUN,
    },
}

_MONTH_ALT = "|".join(sorted(MONTHS, key=len, reverse=True))
_DAY_NAME_ALT = "|".join(
    sorted({label for labels in WEEKDAY_LABELS.values() for label in labels if len(label) > 2},
           key=len, reverse=True)
)
_RANGE_SEP = r"\s*(?:[-–—]|\bto\b|\bau\b|\bbis\b)\s*"


def _text_date(p: str) -> str:
    return (
        rf"(?:(?:{_DAY_NAME_ALT})\.?,?\s+)?"
        rf"(?:(?P<{p}d1>\d{{1,2}})(?:st|nd|rd|th|er)?\.?\s+(?P<{p}m1>{_MONTH_ALT})\b\.?"
        rf"|(?P<{p}m2>{_MONTH_ALT})\b\.?\s+(?P<{p}d2>\d{{1,2}})(?:st|nd|rd|th)?\b)"
        rf"(?:,?\s+(?P<{p}y>\d{{4}}))?"
    )


TEXT_RANGE_RE = re.compile(_text_date("a") + _RANGE_SEP + _text_date("b"))
NUMERIC_RANGE_RE = re.compile(
    r"(?<!\d)(?P<ad>\d{1,2})[./](?P<am>\d{1,2})(?:[./](?P<ay>\d{4}|\d{2}))?"
    r"\s*[-–—]\s*"
    r"(?P<bd>\d{1,2})[./](?P<bm>\d{1,2})(?:[./](?P<by>\d{4}|\d{2}))?(?!\d)"
)
ISO_RANGE_RE = re.compile(
    r"(?P<ay>\d{4})-(?P<am>\d{2})-(?P<ad>\d{2})"
    r"(?:\s+[-–—]\s+|\s*(?:\bto\b|\bau\b|\bbis\b|/)\s*)"
    r"(?P<by>\d{4})-(?P<bm>\d{2})-(?P<bd>\d{2})"
)
SINGLE_DATE_RE = re.compile(
    r"\b(?:(\d{1,2})[./](\d{1,2})[./](\d{4})|(\d{4})-(\d{2})-(\d{2}))\b"
)


def _to_int(value: str | None) -> int | None:
    if value is None:
        return None
    year = int(value)
    if len(value) == 2:
        year += 2000
    return year


def _build_range(
    start_parts: tuple[int, int, int | None],
    end_parts: tuple[int, int, int | None],
    today: date,
) -> DateRange | None:
    """Combine (day, month, year?) sides, inferring missing years and rolling over New Year."""
    sd, sm, sy = start_parts
    ed, em, ey = end_parts

    start_year = sy if sy is not None else (ey if ey is not None else today.year)
    end_year = ey if ey is not None else (sy if sy is not None else today.year)

    try:
        start = date(start_year, sm, sd)
        end = date(end_year, em, ed)
    except ValueError:
        return None

    if end < start:
        if sy is None:
            try:
                start = date(start_year - 1, sm, sd)
            except ValueError:
                return None
        elif ey is None:
            try:
                end = date(end_year + 1, em, ed)
            except ValueError:
                return None
        else:
            return None

    if end < start:
        return None
    return DateRange(start=start, end=end)


def parse_date_range(
    text: str,
    today: date | None = None,
    require_year: bool = False,
) -> DateRange | None:
    """
    Parse the first date range found in free text.

    Accepts "28 May 2025 - 3 June 2025", "May 28 - June 3, 2025",
    "Wednesday, 28 May - Tuesday, 3 June 2025", "28/05 - 03/06/2025" and
    "2025-05-28 - 2025-06-03", in English, French or German month names.

    Args:
        text: Cell text
        today: Reference date for year inference (defaults to today)
        require_year: Only accept ranges with at least one explicit 4-digit year

    Returns:
        DateRange or None when no valid range is present
    """
    if not text:
        return None
    today = today or date.today()
    folded = strip_accents(text).lower()

    match = ISO_RANGE_RE.search(folded)
    if match:
        return _build_range(
            (int(match["ad"]), int(match["am"]), int(match["ay"])),
            (int(match["bd"]), int(match["bm"]), int(match["by"])),
            today,
        )

    match = TEXT_RANGE_RE.search(folded)
    if match:
        years = (match["ay"], match["by"])
        if require_year and not any(y and len(y) == 4 for y in years):
            return None
        start_month = MONTHS[match["am1"] or match["am2"]]
        end_month = MONTHS[match["bm1"] or match["bm2"]]
        return _build_range(
            (int(match["ad1"] or match["ad2"]), start_month, _to_int(match["ay"])),
            (int(match["bd1"] or match["bd2"]), end_month, _to_int(match["by"])),
            today,
        )

    match = NUMERIC_RANGE_RE.search(folded)
    if match:
        years = (match["ay"], match["by"])
        if require_year and not any(y and len(y) == 4 for y in years):
            return None
        return _build_range(
            (int(match["ad"]), int(match["am"]), _to_int(match["ay"])),
            (int(match["bd"]), int(match["bm"]), _to_int(match["by"])),
            today,
        )

    return None


def find_single_dates(text: str, min_year: int = 2020, max_year: int = 2030) -> list[date]:
    """Find standalone DD.MM.YYYY, DD/MM/YYYY or YYYY-MM-DD dates within a year window."""
    found: list[date] = []
    for match in SINGLE_DATE_RE.finditer(text or ""):
        if match.group(1):
            day, month, year = int(match.group(1)), int(match.group(2)), int(match.group(3))
        else:
            year, month, day = int(match.group(4)), int(match.group(5)), int(match.group(6))
        if not min_year <= year <= max_year:
            continue
        try:
            found.append(date(year, month, day))
        except ValueError:
            continue
    return found


def lookup_weekday(text: str, languages: tuple[str, ...] = ("en",)) -> Weekday | None:
    """Exact (trimmed, case-insensitive) weekday label lookup, e.g. "Thurs" → Weekday.THU."""
    key = strip_accents(text.strip()).lower().rstrip(".")
    if not key:
        return None
    for language in languages:
        weekday = WEEKDAY_LABELS.get(language, {}).get(key)
        if weekday is not None:
            return weekday
    return None


def date_sequence(date_range: DateRange | None) -> list[tuple[Weekday, date]]:
    """Every day of the range, start and end included, tagged with its weekday."""
    if date_range is None:
        return []
    days = (date_range.end - date_range.start).days + 1
    return [
        (Weekday.of(day), day)
        for day in (date_range.start + timedelta(days=offset) for offset in range(days))
    ]


def weekday_dates(date_range: DateRange | None) -> dict[Weekday, date]:
    """
    Map each weekday to its first calendar date inside the range.

    Weekdays that do not occur in the range are absent from the result.
    """
    mapping: dict[Weekday, date] = {}
    for weekday, day in date_sequence(date_range):
        mapping.setdefault(weekday, day)
    return mapping


def week_start_for(day: date, week_start_day: int) -> date:
    """
    Start of the program week containing ``day``.

    Args:
        day: Any date
        week_start_day: Weekday the program week starts on (Monday == 0)

    Returns:
        The most recent ``week_start_day`` on or before ``day``
    """
    offset = (day.weekday() - week_start_day) % 7
    return day - timedelta(days=offset)


def parse_time_of_day(value: str) -> tuple[int, int] | None:
    """Parse "H:MM"/"HH:MM" into (hour, minute); None when out of range."""
    match = re.fullmatch(r"\s*(\d{1,2}):(\d{2})\s*", value or "")
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return hour, minute


def time_to_float(value: str) -> float | None:
    """Convert "14:30" to 14.5 hours."""
    parsed = parse_time_of_day(value)
    if parsed is None:
        return None
    hour, minute = parsed
    return round(hour + minute / 60, 4)


def combine_local(day: date, time_of_day: str, tz) -> datetime | None:
    """Build a timezone-aware datetime from a date and an "HH:MM" string."""
    parsed = parse_time_of_day(time_of_day)
    if parsed is None:
        return None
    hour, minute = parsed
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=tz)
