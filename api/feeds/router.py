"""
Feed API endpoints.

`/feeds/public` is declared before `/feeds/{user_id}` so it is not captured
as a user id.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request

from auth import dependencies as auth_dependencies
from core.body import json_body_schema, read_json_object
from core.config import Settings, get_settings
from core.errors import ValidationError, render

from . import schemas, service

router = APIRouter()


@router.get("/feeds/public")
async def list_public_feeds(
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    settings: Settings = Depends(get_settings),
):
    """
    Platform feeds (owned by the system user), newest first.
    """
    return render(await service.list_public_feeds(page, limit, system_user_id=settings.system_user_id))


@router.get("/feeds/{user_id}")
async def list_user_feeds(
    user_id: str,
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
):
    return render(await service.list_user_feeds(user_id, page, limit))


# TODO: add require_internal_token; this lists every user's feeds without auth.
@router.get("/feeds")
async def list_all_feeds(
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
):
    """
    Every feed across all users, newest first.
    """
    return render(await service.list_all_feeds(page, limit))


@router.post(
    "/internal/feeds",
    status_code=201,
    dependencies=[Depends(auth_dependencies.require_internal_token)],
    openapi_extra=json_body_schema(schemas.FeedIngest),
)
async def ingest_feed(request: Request, settings: Settings = Depends(get_settings)):
    """
    Content ingestion for internal scripts: title, summary, category, url.
    """
    payload = await read_json_object(request)
    if isinstance(payload, ValidationError):
        return render(payload)
    return render(await service.ingest_feed(payload, system_user_id=settings.system_user_id))
