"""
Feed business logic.

Listing: resolve page/limit -> count -> fetch page -> describe.
An empty or out-of-range page is a normal 200 with an empty list.

Ingestion: validate -> derive source from the URL -> insert as the system user.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any
from urllib.parse import urlsplit

import asyncpg
import pydantic
from fastapi import status

from core import db, pagination
from core.errors import InternalError, Ok, Outcome, ValidationError, from_pydantic

from . import repository, schemas

UNKNOWN_SOURCE = "unknown-source"

logger = logging.getLogger(__name__)


def source_from_url(url: str) -> str:
    """
    Hostname of `url` without a leading "www." (e.g. "tmz.com").
    """
    try:
        hostname = urlsplit(url.strip()).hostname
    except ValueError:
        return UNKNOWN_SOURCE
    if not hostname:
        return UNKNOWN_SOURCE
    return hostname.removeprefix("www.")


def _parse_user_id(raw: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(raw)
    except ValueError:
        return None


def _invalid_payload(exc: pydantic.ValidationError) -> ValidationError:
    error = from_pydantic(exc, "Invalid feed payload")
    # Echo the first over-long field's length, title before summary.
    for err in exc.errors():
        if err["type"] == "string_too_long":
            error.context["length"] = err["ctx"]["length"]
            break
    return error


def _resolve(raw_page: Any, raw_limit: Any) -> pagination.PageRequest | ValidationError:
    try:
        return pagination.resolve(raw_page, raw_limit)
    except ValidationError as exc:
        return exc


async def _fetch_page(
    page: pagination.PageRequest,
    *,
    user_id: uuid.UUID | None,
    columns: str = repository.FEED_COLUMNS,
) -> tuple[list[dict[str, Any]], pagination.PaginationMeta] | InternalError:
    # Count and page share the same scope; see repository._scope.
    try:
        total_count = await repository.count_feeds(user_id=user_id)
    except db.DATABASE_ERRORS:
        logger.exception("feed_count_failed user_id=%s", user_id)
        return InternalError("Unable to retrieve feed count")

    try:
        rows = await repository.list_feeds(
            user_id=user_id,
            limit=page.limit,
            offset=page.offset,
            columns=columns,
        )
    except db.DATABASE_ERRORS:
        logger.exception("feed_fetch_failed user_id=%s", user_id)
        return InternalError("Unable to retrieve feeds")

    return rows, pagination.describe(total_count, page.page, page.limit)


async def list_public_feeds(raw_page: Any, raw_limit: Any, *, system_user_id: str) -> Outcome:
    """
    Feeds owned by the system user.
    """
    page = _resolve(raw_page, raw_limit)
    if isinstance(page, ValidationError):
        return page

    result = await _fetch_page(
        page,
        user_id=uuid.UUID(system_user_id),
        columns=repository.PUBLIC_FEED_COLUMNS,
    )
    if isinstance(result, InternalError):
        return result
    rows, meta = result
    return Ok({"success": True, "data": rows, "pagination": meta.to_dict()})


async def list_user_feeds(user_id: str, raw_page: Any, raw_limit: Any) -> Outcome:
    page = _resolve(raw_page, raw_limit)
    if isinstance(page, ValidationError):
        return page

    parsed = _parse_user_id(user_id)
    if parsed is None:
        message = "userId must be a valid UUID format"
        return ValidationError(message, errors=[{"field": "userId", "message": message}])

    result = await _fetch_page(page, user_id=parsed)
    if isinstance(result, InternalError):
        return result
    rows, meta = result
    return Ok({"success": True, "userId": user_id, "feeds": rows, "pagination": meta.to_dict()})


async def list_all_feeds(raw_page: Any, raw_limit: Any) -> Outcome:
    page = _resolve(raw_page, raw_limit)
    if isinstance(page, ValidationError):
        return page

    result = await _fetch_page(page, user_id=None)
    if isinstance(result, InternalError):
        return result
    rows, meta = result
    return Ok(
        {
            "success": True,
            "feeds": rows,
            "pagination": meta.to_dict(),
            "message": "All feeds retrieved successfully",
        }
    )


async def ingest_feed(payload: dict[str, Any], *, system_user_id: str) -> Outcome:
    """
    Store one article submitted by an internal ingestion script.
    """
    try:
        request = schemas.FeedIngest.model_validate(payload)
    except pydantic.ValidationError as exc:
        return _invalid_payload(exc)

    source = source_from_url(request.url)
    try:
        row = await repository.insert_feed(
            user_id=uuid.UUID(system_user_id),
            source=source,
            title=request.title.strip(),
            url=request.url.strip(),
            content=request.summary.strip(),
            timestamp=datetime.now(timezone.utc),
        )
    except asyncpg.ForeignKeyViolationError:
        logger.exception("feed_insert_invalid_user user_id=%s", system_user_id)
        return ValidationError(
            f"User ID {system_user_id} does not exist in the Users table",
            code="INVALID_USER_REFERENCE",
        )
    except db.DATABASE_ERRORS:
        logger.exception("feed_insert_failed source=%s", source)
        return InternalError("Database error occurred while inserting the feed")

    logger.info("feed_created feed_id=%s source=%s", row["feedId"], source)
    return Ok(
        {
            "success": True,
            "message": "Feed created successfully",
            "data": {
                "feedId": row["feedId"],
                "title": row["title"],
                "source": row["source"],
                "timestamp": row["timestamp"],
            },
        },
        status_code=status.HTTP_201_CREATED,
    )
