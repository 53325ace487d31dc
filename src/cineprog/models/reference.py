"""Reference vocabularies: projection formats, technologies, languages and version mappings."""

from sqlalchemy import Boolean, ForeignKey, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from cineprog.models.base import Base, TimestampMixin


class Format(Base, TimestampMixin):
    __tablename__ = "formats"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class Technology(Base, TimestampMixin):
    __tablename__ = "technologies"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(30), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class Language(Base, TimestampMixin):
    __tablename__ = "languages"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(10), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class LanguageMappingLine(Base, TimestampMixin):
    """
    Maps a spreadsheet version string (e.g. "VO st FR/NL") to languages.

    Lines without a cinema group are the defaults used when a group has none.
    """

    __tablename__ = "language_mapping_lines"
    __table_args__ = (
        UniqueConstraint(
            "cinema_group_id", "version_string", name="uq_language_mapping_group_version"
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    cinema_group_id: Mapped[str | None] = mapped_column(
        String(100),
        ForeignKey("cinema_groups.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    version_string: Mapped[str] = mapped_column(String(100), nullable=False)
    spoken_language_code: Mapped[str | None] = mapped_column(String(10), nullable=True)
    subtitle_language_codes: Mapped[list[str] | None] = mapped_column(JSONB, nullable=True)
