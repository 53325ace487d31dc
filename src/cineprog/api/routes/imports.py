"""Workbook import endpoints: inspect, preview, parse, stage and list jobs."""

import asyncio
import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from pydantic import TypeAdapter, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from cineprog.api.deps import get_caller
from cineprog.config import settings
from cineprog.database import get_db
from cineprog.schemas.conflict import Pagination
from cineprog.schemas.execute import ExecuteRequest, ExecuteResponse
from cineprog.schemas.history import HistoryResponse, ImportJobResponse
from cineprog.schemas.parse import ParseResponse, SheetMappingSchema
from cineprog.schemas.sheet import SheetPreviewResponse, SheetsResponse, SheetSummaryResponse
from cineprog.services.staging import CinemaNotFoundError, ConflictStager
from cineprog.services.store import ImportStore
from cineprog.services.workbook_parser import (
    ParseTargetError,
    SheetMapping,
    SheetMappingError,
    WorkbookParseService,
)
from cineprog.sheets import WorkbookError, get_profile, read_workbook
from cineprog.sheets.inspect import preview_sheet, summarize_sheet
from cineprog.sheets.workbook import ACCEPTED_EXTENSIONS, has_accepted_extension

logger = logging.getLogger(__name__)
router = APIRouter(tags=["import"], dependencies=[Depends(get_caller)])

_sheet_mappings_adapter = TypeAdapter(list[SheetMappingSchema])


async def _read_upload(file: UploadFile) -> bytes:
    if not has_accepted_extension(file.filename):
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type, expected one of {', '.join(ACCEPTED_EXTENSIONS)}",
        )
    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")
    if len(data) > settings.max_upload_bytes:
        raise HTTPException(status_code=400, detail="Uploaded file is too large")
    return data


@router.post("/import/sheets", response_model=SheetsResponse)
async def list_sheets(file: UploadFile = File(...)) -> SheetsResponse:
    """
    Summarize every non-empty sheet of a workbook.

    Cheap preflight: no structure detection, only row counts, a visible date
    range and a few sample cells per sheet.
    """
    data = await _read_upload(file)
    try:
        grids = await asyncio.to_thread(read_workbook, data)
    except WorkbookError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return SheetsResponse(
        file_name=file.filename,
        sheets=[
            SheetSummaryResponse.from_summary(summarize_sheet(grid))
            for grid in grids
            if grid.row_count > 0
        ],
    )


@router.post("/import/preview", response_model=SheetPreviewResponse)
async def preview(
    file: UploadFile = File(...),
    sheet_index: int = Form(0),
    cinema_id: str | None = Form(None),
    db: AsyncSession = Depends(get_db),
) -> SheetPreviewResponse:
    """
    Annotate one sheet's cells and list the movies the extractor would find.

    Uses the cinema's parser profile when ``cinema_id`` is given, else the
    generic weekly-grid profile.
    """
    data = await _read_upload(file)

    profile = get_profile(None)
    if cinema_id:
        store = ImportStore(db)
        cinema = await store.get_cinema(cinema_id)
        if cinema is None:
            raise HTTPException(status_code=404, detail=f"Cinema not found: {cinema_id}")
        service = WorkbookParseService(store, settings.default_timezone)
        profile = (await service.context_for(cinema)).profile

    try:
        grids = await asyncio.to_thread(read_workbook, data)
    except WorkbookError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not 0 <= sheet_index < len(grids):
        raise HTTPException(status_code=400, detail=f"Sheet index out of range: {sheet_index}")

    result = preview_sheet(grids[sheet_index], profile)
    return SheetPreviewResponse.from_preview(result, sheet_count=len(grids))


@router.post("/import/parse", response_model=ParseResponse)
async def parse(
    file: UploadFile = File(...),
    cinema_id: str | None = Form(None),
    cinema_group_id: str | None = Form(None),
    sheet_mappings: str | None = Form(None, description="JSON list of sheet mappings"),
    db: AsyncSession = Depends(get_db),
) -> ParseResponse:
    """
    Detect, extract and normalize films for one cinema or a cinema group.

    Performs no writes. For a group, ``sheet_mappings`` assigns each sheet
    to one of the group's cinemas.
    """
    if bool(cinema_id) == bool(cinema_group_id):
        raise HTTPException(
            status_code=400, detail="Provide exactly one of cinema_id or cinema_group_id"
        )

    mappings: list[SheetMappingSchema] = []
    if sheet_mappings:
        try:
            mappings = _sheet_mappings_adapter.validate_json(sheet_mappings)
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=f"Invalid sheet_mappings: {e}")

    data = await _read_upload(file)
    service = WorkbookParseService(ImportStore(db), settings.default_timezone)

    try:
        if cinema_id:
            result = await service.parse_for_cinema(data, cinema_id)
        else:
            result = await service.parse_for_group(
                data,
                cinema_group_id,
                [
                    SheetMapping(
                        sheet_index=m.sheet_index, cinema_id=m.cinema_id, sheet_name=m.sheet_name
                    )
                    for m in mappings
                ],
            )
    except ParseTargetError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (SheetMappingError, WorkbookError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(
        f"Parsed {file.filename!r}: {len(result.sheets)} sheets, "
        f"{result.film_count} films, {result.showing_count} showings"
    )
    return ParseResponse.from_result(result, cinema_id=cinema_id, cinema_group_id=cinema_group_id)


@router.post("/import/execute", response_model=ExecuteResponse)
async def execute(
    request: ExecuteRequest,
    caller: str = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
) -> ExecuteResponse:
    """
    Match parsed films and stage them as conflicts under a new import job.

    With ``previewOnly`` only the counts are returned and nothing is written.
    """
    stager = ConflictStager(ImportStore(db))
    try:
        result = await stager.stage(
            request.to_sheets(),
            user_id=caller,
            options=request.options.to_options(),
            cinema_id=request.cinema_id,
            cinema_group_id=request.cinema_group_id,
            parser_id=request.parser_id,
            file_name=request.file_name,
        )
    except CinemaNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ExecuteResponse.from_result(result)


@router.get("/import/history", response_model=HistoryResponse)
async def history(
    cinema_id: str | None = Query(None),
    cinema_group_id: str | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
) -> HistoryResponse:
    """List import jobs, newest first."""
    jobs, total = await ImportStore(db).list_jobs(cinema_id, cinema_group_id, limit, offset)
    return HistoryResponse(
        items=[ImportJobResponse.from_job(job) for job in jobs],
        pagination=Pagination(total=total, limit=limit, offset=offset),
    )
