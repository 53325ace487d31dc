"""SQLAlchemy ORM models."""

from cineprog.models.base import Base
from cineprog.models.cinema import Cinema, CinemaGroup, Parser
from cineprog.models.conflict import (
    ConflictEdition,
    ConflictMovie,
    ConflictSession,
    ConflictState,
)
from cineprog.models.import_job import ImportJob
from cineprog.models.movie import Movie, MovieEdition
from cineprog.models.reference import Format, Language, LanguageMappingLine, Technology
from cineprog.models.screening import Screening, SessionDay, SessionTime
from cineprog.models.title_mapping import TitleMapping

__all__ = [
    "Base",
    "Cinema",
    "CinemaGroup",
    "ConflictEdition",
    "ConflictMovie",
    "ConflictSession",
    "ConflictState",
    "Format",
    "ImportJob",
    "Language",
    "LanguageMappingLine",
    "Movie",
    "MovieEdition",
    "Parser",
    "Screening",
    "SessionDay",
    "SessionTime",
    "Technology",
    "TitleMapping",
]
