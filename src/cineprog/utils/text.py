"""Text normalization utilities for film title matching."""

import re
import unicodedata

# Presentation tokens stripped from titles before they are stored as mapping keys
MAPPING_FORMAT_TOKENS = ["3D", "IMAX", "4DX", "ATMOS", "Dolby", "D-BOX", "ScreenX"]


def strip_accents(text: str) -> str:
    """Remove diacritics: "Amélie" → "Amelie"."""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def fold_title(title: str) -> str:
    """
    Fold a title for case- and diacritic-insensitive comparison.

    Punctuation becomes whitespace so "Mission: Impossible" and
    "Mission Impossible" fold to the same value.

    Args:
        title: Raw or normalized film title

    Returns:
        Lowercase, accent-free title with single spaces
    """
    title = strip_accents(title).lower()
    title = re.sub(r"[^\w\s]", " ", title)
    title = re.sub(r"\s+", " ", title)
    return title.strip()


def normalize_mapping_title(title: str) -> str:
    """
    Build the normalized_title stored alongside a title mapping.

    - Lowercase
    - Trailing parenthetical removed: "Dune (VO)" → "dune"
    - Presentation tokens removed: "Dune IMAX 3D" → "dune"
    - Extra whitespace collapsed
    """
    title = title.lower().strip()
    title = re.sub(r"\s*\([^)]+\)\s*$", "", title)
    tokens = "|".join(re.escape(t.lower()) for t in MAPPING_FORMAT_TOKENS)
    title = re.sub(rf"(?<![\w-])({tokens})(?![\w-])", "", title)
    title = re.sub(r"\s+", " ", title)
    return title.strip()


def slugify(text: str) -> str:
    """
    Convert text to a URL-safe slug.

    Args:
        text: Text to slugify

    Returns:
        Lowercase slug with hyphens
    """
    # Fold accents so "Amélie" becomes "amelie" rather than "amlie"
    text = strip_accents(text).lower()

    # Replace spaces and underscores with hyphens
    text = re.sub(r"[\s_]+", "-", text)

    # Remove non-alphanumeric characters (except hyphens)
    text = re.sub(r"[^a-z0-9-]", "", text)

    # Remove multiple consecutive hyphens
    text = re.sub(r"-+", "-", text)

    # Strip leading/trailing hyphens
    text = text.strip("-")

    return text


def generate_movie_id(title: str, year: int | None) -> str:
    """Generate a catalog movie id from title and year: "Nosferatu", 2024 → "nosferatu-2024"."""
    slug = slugify(title) or "untitled"
    if year:
        return f"{slug}-{year}"
    return slug
