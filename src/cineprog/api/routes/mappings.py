"""Title mapping endpoints backing the matcher's learning loop."""

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from cineprog.api.deps import get_caller
from cineprog.database import get_db
from cineprog.schemas.conflict import Pagination
from cineprog.schemas.mapping import (
    MappingCreateRequest,
    MappingDeleteRequest,
    TitleMappingResponse,
)
from cineprog.services.store import ImportStore

router = APIRouter(tags=["mappings"], dependencies=[Depends(get_caller)])


class MappingListResponse(BaseModel):
    items: list[TitleMappingResponse]
    pagination: Pagination


@router.get("/import/mappings", response_model=MappingListResponse)
async def list_mappings(
    cinema_group_id: str = Query(..., description="Cinema group owning the mappings"),
    search: str | None = Query(None, description="Import title substring"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
) -> MappingListResponse:
    """List a group's mappings, most recently used first."""
    mappings, total = await ImportStore(db).list_title_mappings(
        cinema_group_id, search, limit, offset
    )
    return MappingListResponse(
        items=[TitleMappingResponse.model_validate(m) for m in mappings],
        pagination=Pagination(total=total, limit=limit, offset=offset),
    )


@router.post("/import/mappings", response_model=TitleMappingResponse)
async def create_mapping(
    request: MappingCreateRequest,
    caller: str = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
) -> TitleMappingResponse:
    """Create or overwrite the mapping for (group, import title)."""
    store = ImportStore(db)
    if await store.get_cinema_group(request.cinema_group_id) is None:
        raise HTTPException(
            status_code=404, detail=f"Cinema group not found: {request.cinema_group_id}"
        )
    if await store.get_movie(request.movie_id) is None:
        raise HTTPException(status_code=404, detail=f"Movie not found: {request.movie_id}")

    await store.upsert_title_mapping(
        request.cinema_group_id,
        request.import_title,
        request.movie_id,
        movie_edition_id=request.movie_edition_id,
        user_id=caller,
    )
    mapping = await store.find_title_mapping(request.cinema_group_id, request.import_title)
    return TitleMappingResponse.model_validate(mapping)


@router.delete("/import/mappings")
async def delete_mapping(
    request: MappingDeleteRequest,
    db: AsyncSession = Depends(get_db),
) -> dict[str, bool]:
    if not await ImportStore(db).delete_title_mapping(request.mapping_id):
        raise HTTPException(status_code=404, detail=f"Mapping not found: {request.mapping_id}")
    return {"deleted": True}
