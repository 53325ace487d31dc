"""Pydantic schemas for API requests and responses."""

from cineprog.schemas.conflict import (
    ConflictListResponse,
    ConflictMovieResponse,
    ConflictUpdateRequest,
    MaterializeRequest,
    MaterializeResponse,
    Pagination,
    SessionUpdateRequest,
)
from cineprog.schemas.execute import ExecuteRequest, ExecuteResponse
from cineprog.schemas.history import HistoryResponse, ImportJobResponse
from cineprog.schemas.mapping import MappingCreateRequest, MappingDeleteRequest, TitleMappingResponse
from cineprog.schemas.parse import ParseResponse, SheetMappingSchema
from cineprog.schemas.sheet import SheetPreviewResponse, SheetsResponse

__all__ = [
    "ConflictListResponse",
    "ConflictMovieResponse",
    "ConflictUpdateRequest",
    "ExecuteRequest",
    "ExecuteResponse",
    "HistoryResponse",
    "ImportJobResponse",
    "MappingCreateRequest",
    "MappingDeleteRequest",
    "MaterializeRequest",
    "MaterializeResponse",
    "Pagination",
    "ParseResponse",
    "SessionUpdateRequest",
    "SheetMappingSchema",
    "SheetPreviewResponse",
    "SheetsResponse",
    "TitleMappingResponse",
]
