"""Shared FastAPI dependencies for the import API."""

from fastapi import HTTPException, Request

from cineprog.config import settings


async def get_caller(request: Request) -> str:
    """
    Resolve the opaque caller identity sent with each request.

    Raises:
        HTTPException: 401 when the identity header is missing or blank
    """
    user_id = request.headers.get(settings.caller_header, "").strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="Caller identity required")
    return user_id
