"""import pipeline schema

Revision ID: 001
Revises:
Create Date: 2025-06-02 09:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade() -> None:
    # Parsers, cinema groups and cinemas
    op.create_table(
        'parsers',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('slug', sa.String(length=100), nullable=False),
        sa.Column('config', JSONB(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('slug')
    )

    op.create_table(
        'cinema_groups',
        sa.Column('id', sa.String(length=100), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('country', sa.String(length=2), nullable=True),
        sa.Column('parser_id', sa.Integer(), nullable=True),
        sa.Column('week_start_day', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['parser_id'], ['parsers.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'cinemas',
        sa.Column('id', sa.String(length=100), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('city', sa.String(length=100), nullable=True),
        sa.Column('cinema_group_id', sa.String(length=100), nullable=True),
        sa.Column('parser_id', sa.Integer(), nullable=True),
        sa.Column('timezone', sa.String(length=64), nullable=True),
        sa.Column('week_start_day_override', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['cinema_group_id'], ['cinema_groups.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['parser_id'], ['parsers.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_cinemas_city'), 'cinemas', ['city'], unique=False)
    op.create_index(op.f('ix_cinemas_cinema_group_id'), 'cinemas', ['cinema_group_id'], unique=False)

    # Reference vocabularies
    for table, code_length in (('formats', 20), ('technologies', 30), ('languages', 10)):
        op.create_table(
            table,
            sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
            sa.Column('code', sa.String(length=code_length), nullable=False),
            sa.Column('name', sa.String(length=100), nullable=False),
            sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
            *_timestamps(),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('code')
        )

    op.create_table(
        'language_mapping_lines',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('cinema_group_id', sa.String(length=100), nullable=True),
        sa.Column('version_string', sa.String(length=100), nullable=False),
        sa.Column('spoken_language_code', sa.String(length=10), nullable=True),
        sa.Column('subtitle_language_codes', JSONB(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['cinema_group_id'], ['cinema_groups.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('cinema_group_id', 'version_string', name='uq_language_mapping_group_version')
    )
    op.create_index(op.f('ix_language_mapping_lines_cinema_group_id'), 'language_mapping_lines', ['cinema_group_id'], unique=False)

    # Catalog
    op.create_table(
        'movies',
        sa.Column('id', sa.String(length=150), nullable=False),
        sa.Column('original_title', sa.String(length=500), nullable=False),
        sa.Column('production_year', sa.Integer(), nullable=True),
        sa.Column('director', sa.String(length=300), nullable=True),
        sa.Column('duration_minutes', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='draft'),
        sa.Column('tmdb_id', sa.Integer(), nullable=True),
        sa.Column('overview', sa.Text(), nullable=True),
        sa.Column('poster_path', sa.String(length=200), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_movies_original_title'), 'movies', ['original_title'], unique=False)
    op.create_index(op.f('ix_movies_status'), 'movies', ['status'], unique=False)
    op.create_index(op.f('ix_movies_tmdb_id'), 'movies', ['tmdb_id'], unique=True)

    op.create_table(
        'movie_editions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('movie_id', sa.String(length=150), nullable=False),
        sa.Column('edition_title', sa.String(length=500), nullable=True),
        sa.Column('format_id', sa.Integer(), nullable=True),
        sa.Column('technology_id', sa.Integer(), nullable=True),
        sa.Column('audio_language_id', sa.Integer(), nullable=True),
        sa.Column('subtitle_language_codes', JSONB(), nullable=True),
        sa.Column('duration_minutes', sa.Integer(), nullable=True),
        sa.Column('age_rating', sa.String(length=20), nullable=True),
        sa.Column('is_original_version', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['movie_id'], ['movies.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['format_id'], ['formats.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['technology_id'], ['technologies.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['audio_language_id'], ['languages.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_movie_editions_movie_id'), 'movie_editions', ['movie_id'], unique=False)

    # Canonical schedule
    op.create_table(
        'screenings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('cinema_id', sa.String(length=100), nullable=False),
        sa.Column('movie_edition_id', sa.Integer(), nullable=False),
        sa.Column('start_week_day', sa.Date(), nullable=False),
        sa.Column('state', sa.String(length=20), nullable=False, server_default='verified'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['cinema_id'], ['cinemas.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['movie_edition_id'], ['movie_editions.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('cinema_id', 'movie_edition_id', 'start_week_day', name='uq_screening_cinema_edition_week')
    )
    op.create_index(op.f('ix_screenings_cinema_id'), 'screenings', ['cinema_id'], unique=False)
    op.create_index(op.f('ix_screenings_movie_edition_id'), 'screenings', ['movie_edition_id'], unique=False)
    op.create_index(op.f('ix_screenings_start_week_day'), 'screenings', ['start_week_day'], unique=False)

    op.create_table(
        'session_days',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('screening_id', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['screening_id'], ['screenings.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('screening_id', 'date', name='uq_session_day_screening_date')
    )
    op.create_index(op.f('ix_session_days_screening_id'), 'session_days', ['screening_id'], unique=False)

    op.create_table(
        'session_times',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('session_day_id', sa.Integer(), nullable=False),
        sa.Column('time_of_day', sa.String(length=5), nullable=False),
        sa.Column('time_float', sa.Float(), nullable=False),
        sa.Column('start_datetime', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_datetime', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['session_day_id'], ['session_days.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('session_day_id', 'time_of_day', name='uq_session_time_day_time')
    )
    op.create_index(op.f('ix_session_times_session_day_id'), 'session_times', ['session_day_id'], unique=False)

    # Import jobs, title mappings and staged conflicts
    op.create_table(
        'import_jobs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('cinema_id', sa.String(length=100), nullable=True),
        sa.Column('cinema_group_id', sa.String(length=100), nullable=True),
        sa.Column('parser_id', sa.Integer(), nullable=True),
        sa.Column('user_id', sa.String(length=100), nullable=False),
        sa.Column('file_name', sa.String(length=300), nullable=True),
        sa.Column('file_size_bytes', sa.Integer(), nullable=True),
        sa.Column('sheet_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('total_records', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('processed_records', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('success_records', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('error_records', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('errors', JSONB(), nullable=True),
        sa.Column('summary', JSONB(), nullable=True),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['cinema_id'], ['cinemas.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['cinema_group_id'], ['cinema_groups.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['parser_id'], ['parsers.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_import_jobs_cinema_id'), 'import_jobs', ['cinema_id'], unique=False)
    op.create_index(op.f('ix_import_jobs_cinema_group_id'), 'import_jobs', ['cinema_group_id'], unique=False)

    op.create_table(
        'title_mappings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('cinema_group_id', sa.String(length=100), nullable=False),
        sa.Column('import_title', sa.String(length=500), nullable=False),
        sa.Column('normalized_title', sa.String(length=500), nullable=False),
        sa.Column('movie_id', sa.String(length=150), nullable=False),
        sa.Column('movie_edition_id', sa.Integer(), nullable=True),
        sa.Column('is_verified', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('last_used_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', sa.String(length=100), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['cinema_group_id'], ['cinema_groups.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['movie_id'], ['movies.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['movie_edition_id'], ['movie_editions.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('cinema_group_id', 'import_title', name='uq_title_mapping_group_title')
    )
    op.create_index(op.f('ix_title_mappings_cinema_group_id'), 'title_mappings', ['cinema_group_id'], unique=False)
    op.create_index(op.f('ix_title_mappings_normalized_title'), 'title_mappings', ['normalized_title'], unique=False)
    op.create_index(op.f('ix_title_mappings_movie_id'), 'title_mappings', ['movie_id'], unique=False)

    op.create_table(
        'conflict_movies',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('import_job_id', sa.Integer(), nullable=False),
        sa.Column('cinema_id', sa.String(length=100), nullable=False),
        sa.Column('cinema_group_id', sa.String(length=100), nullable=True),
        sa.Column('parser_id', sa.Integer(), nullable=True),
        sa.Column('import_title', sa.String(length=500), nullable=False),
        sa.Column('movie_name', sa.String(length=500), nullable=False),
        sa.Column('director', sa.String(length=300), nullable=True),
        sa.Column('production_year', sa.Integer(), nullable=True),
        sa.Column('import_text', JSONB(), nullable=True),
        sa.Column('matched_movie_id', sa.String(length=150), nullable=True),
        sa.Column('match_source', sa.String(length=20), nullable=True),
        sa.Column('candidate_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('state', sa.String(length=20), nullable=False, server_default='to_verify'),
        sa.Column('is_created', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('sheet_date_start', sa.Date(), nullable=True),
        sa.Column('sheet_date_end', sa.Date(), nullable=True),
        sa.Column('reviewed_by', sa.String(length=100), nullable=True),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['import_job_id'], ['import_jobs.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['cinema_id'], ['cinemas.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['matched_movie_id'], ['movies.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_conflict_movies_import_job_id'), 'conflict_movies', ['import_job_id'], unique=False)
    op.create_index(op.f('ix_conflict_movies_cinema_id'), 'conflict_movies', ['cinema_id'], unique=False)
    op.create_index(op.f('ix_conflict_movies_cinema_group_id'), 'conflict_movies', ['cinema_group_id'], unique=False)
    op.create_index(op.f('ix_conflict_movies_state'), 'conflict_movies', ['state'], unique=False)

    op.create_table(
        'conflict_editions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('conflict_movie_id', sa.Integer(), nullable=False),
        sa.Column('matched_edition_id', sa.Integer(), nullable=True),
        sa.Column('edition_title', sa.String(length=500), nullable=True),
        sa.Column('format_code', sa.String(length=30), nullable=True),
        sa.Column('format_id', sa.Integer(), nullable=True),
        sa.Column('technology_code', sa.String(length=30), nullable=True),
        sa.Column('technology_id', sa.Integer(), nullable=True),
        sa.Column('language_code', sa.String(length=10), nullable=True),
        sa.Column('language_id', sa.Integer(), nullable=True),
        sa.Column('subtitle_language_codes', JSONB(), nullable=True),
        sa.Column('duration_text', sa.String(length=50), nullable=True),
        sa.Column('duration_minutes', sa.Integer(), nullable=True),
        sa.Column('age_rating', sa.String(length=20), nullable=True),
        sa.Column('version_string', sa.Text(), nullable=True),
        sa.Column('is_original_version', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('unresolved_codes', JSONB(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['conflict_movie_id'], ['conflict_movies.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['matched_edition_id'], ['movie_editions.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_conflict_editions_conflict_movie_id'), 'conflict_editions', ['conflict_movie_id'], unique=False)

    op.create_table(
        'conflict_sessions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('conflict_movie_id', sa.Integer(), nullable=False),
        sa.Column('conflict_edition_id', sa.Integer(), nullable=True),
        sa.Column('weekday', sa.String(length=3), nullable=True),
        sa.Column('date', sa.Date(), nullable=True),
        sa.Column('time_of_day', sa.String(length=5), nullable=False),
        sa.Column('time_float', sa.Float(), nullable=False),
        sa.Column('datetime', sa.DateTime(timezone=True), nullable=True),
        sa.Column('start_week_day', sa.Date(), nullable=True),
        sa.Column('state', sa.String(length=20), nullable=False, server_default='pending'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['conflict_movie_id'], ['conflict_movies.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['conflict_edition_id'], ['conflict_editions.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_conflict_sessions_conflict_movie_id'), 'conflict_sessions', ['conflict_movie_id'], unique=False)


def downgrade() -> None:
    for table in (
        'conflict_sessions',
        'conflict_editions',
        'conflict_movies',
        'title_mappings',
        'import_jobs',
        'session_times',
        'session_days',
        'screenings',
        'movie_editions',
        'movies',
        'language_mapping_lines',
        'languages',
        'technologies',
        'formats',
        'cinemas',
        'cinema_groups',
        'parsers',
    ):
        op.drop_table(table)
