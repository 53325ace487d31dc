"""SQLAdmin model and tool views."""

import asyncio

from sqladmin import BaseView, ModelView, expose
from starlette.requests import Request
from starlette.responses import HTMLResponse

from cineprog.models import (
    Cinema,
    CinemaGroup,
    ConflictMovie,
    ImportJob,
    Movie,
    Parser,
    Screening,
    TitleMapping,
)
from cineprog.tasks.enrich_job import run_enrich_drafts


class CinemaAdmin(ModelView, model=Cinema):
    column_list = [
        Cinema.id,
        Cinema.name,
        Cinema.city,
        Cinema.cinema_group_id,
        Cinema.parser_id,
        Cinema.timezone,
    ]
    column_searchable_list = [Cinema.name, Cinema.city]
    column_sortable_list = [Cinema.name, Cinema.city]


class CinemaGroupAdmin(ModelView, model=CinemaGroup):
    column_list = [
        CinemaGroup.id,
        CinemaGroup.name,
        CinemaGroup.parser_id,
        CinemaGroup.week_start_day,
    ]
    column_searchable_list = [CinemaGroup.name]


class ParserAdmin(ModelView, model=Parser):
    column_list = [Parser.id, Parser.name, Parser.slug, Parser.is_active]


class ImportJobAdmin(ModelView, model=ImportJob):
    column_list = [
        ImportJob.id,
        ImportJob.cinema_id,
        ImportJob.cinema_group_id,
        ImportJob.user_id,
        ImportJob.file_name,
        ImportJob.status,
        ImportJob.success_records,
        ImportJob.error_records,
        ImportJob.created_at,
    ]
    column_sortable_list = [ImportJob.created_at, ImportJob.status]
    can_create = False
    can_edit = False


class ConflictMovieAdmin(ModelView, model=ConflictMovie):
    column_list = [
        ConflictMovie.id,
        ConflictMovie.import_job_id,
        ConflictMovie.cinema_id,
        ConflictMovie.import_title,
        ConflictMovie.movie_name,
        ConflictMovie.matched_movie_id,
        ConflictMovie.state,
    ]
    column_searchable_list = [ConflictMovie.import_title]
    column_sortable_list = [ConflictMovie.state, ConflictMovie.created_at]
    # State changes go through the review API
    can_create = False
    can_edit = False


class TitleMappingAdmin(ModelView, model=TitleMapping):
    column_list = [
        TitleMapping.id,
        TitleMapping.cinema_group_id,
        TitleMapping.import_title,
        TitleMapping.movie_id,
        TitleMapping.last_used_at,
    ]
    column_searchable_list = [TitleMapping.import_title]


class MovieAdmin(ModelView, model=Movie):
    column_list = [
        Movie.id,
        Movie.original_title,
        Movie.production_year,
        Movie.director,
        Movie.status,
        Movie.tmdb_id,
    ]
    column_searchable_list = [Movie.original_title]
    column_sortable_list = [Movie.original_title, Movie.production_year]


class ScreeningAdmin(ModelView, model=Screening):
    column_list = [
        Screening.id,
        Screening.cinema_id,
        Screening.movie_edition_id,
        Screening.start_week_day,
        Screening.state,
    ]
    column_searchable_list = [Screening.cinema_id]
    can_create = False
    can_edit = False


_TOOLS_TEMPLATE = """\
{% extends "sqladmin/layout.html" %}
{% block content %}
<div class="container-fluid p-4">
  <h2>Import Tools</h2>
  <form method="post" class="mt-3 d-flex align-items-center gap-2 flex-wrap">
    <button name="action" value="enrich" class="btn btn-primary">Enrich Draft Movies</button>
  </form>
  {% if message %}
  <div class="alert alert-success mt-3">{{ message }}</div>
  {% endif %}
</div>
{% endblock %}
"""


class ImportToolsView(BaseView):
    name = "Tools"
    icon = "fa-wrench"

    @expose("/tools", methods=["GET", "POST"])
    async def tools(self, request: Request) -> HTMLResponse:
        message: str | None = None

        if request.method == "POST":
            form = await request.form()
            if form.get("action") == "enrich":
                asyncio.create_task(run_enrich_drafts())
                message = "Enrichment started in background."

        tmpl = self.templates.env.from_string(_TOOLS_TEMPLATE)
        content = await tmpl.render_async(request=request, message=message)
        return HTMLResponse(content)
