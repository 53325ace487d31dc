"""Pydantic schemas for title mappings."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class TitleMappingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    cinema_group_id: str
    import_title: str
    normalized_title: str
    movie_id: str
    movie_edition_id: int | None = None
    is_verified: bool
    last_used_at: datetime | None = None
    created_by: str | None = None


class MappingCreateRequest(BaseModel):
    cinema_group_id: str
    import_title: str = Field(min_length=1)
    movie_id: str
    movie_edition_id: int | None = None


class MappingDeleteRequest(BaseModel):
    mapping_id: int
