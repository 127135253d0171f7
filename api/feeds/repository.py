"""
Feed persistence (raw SQL).

List endpoints issue a count query and a page query. Both build their WHERE
clause from `_scope`, so the total always describes the rows being paged.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from core import db

FEED_COLUMNS = (
    '"feedId", "userId", "source", "title", "url", "content", "imageFirebaseUrl", "timestamp"'
)
PUBLIC_FEED_COLUMNS = '"feedId", "source", "title", "url", "content", "timestamp"'


def _scope(user_id: uuid.UUID | None) -> tuple[str, list[Any]]:
    """
    WHERE clause and its arguments; `None` means every feed.
    """
    if user_id is None:
        return "", []
    return 'WHERE "userId" = $1', [user_id]


async def count_feeds(*, user_id: uuid.UUID | None = None) -> int:
    where, args = _scope(user_id)
    total = await db.fetch_value(f'SELECT count(*) FROM "Feeds" {where}', *args)
    return int(total or 0)


async def list_feeds(
    *,
    user_id: uuid.UUID | None = None,
    limit: int,
    offset: int,
    columns: str = FEED_COLUMNS,
) -> list[dict[str, Any]]:
    """
    One page of feeds, newest first.
    """
    where, args = _scope(user_id)
    n = len(args)
    return await db.fetch_all(
        f"""
        SELECT {columns}
        FROM "Feeds"
        {where}
        ORDER BY "timestamp" DESC
        LIMIT ${n + 1}
        OFFSET ${n + 2}
        """,
        *args,
        limit,
        offset,
    )


async def insert_feed(
    *,
    user_id: uuid.UUID,
    source: str,
    title: str,
    url: str,
    content: str,
    timestamp: datetime,
) -> dict[str, Any]:
    """
    Insert a feed row. An unknown `user_id` surfaces as
    `asyncpg.ForeignKeyViolationError`.
    """
    row = await db.fetch_one(
        """
        INSERT INTO "Feeds"
          ("userId", "source", "title", "url", "content", "imageFirebaseUrl", "timestamp")
        VALUES ($1, $2, $3, $4, $5, NULL, $6)
        RETURNING "feedId", "title", "source", "timestamp"
        """,
        user_id,
        source,
        title,
        url,
        content,
        timestamp,
    )
    if row is None:
        raise RuntimeError("Failed to insert feed.")
    return row
