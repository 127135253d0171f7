"""
Profile persistence (raw SQL).

Lookups return None for "no such row"; driver exceptions propagate so the
service can tell a missing record from a failed query.
"""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Any

from core import db

_PROFILE_COLUMNS = """
    p."userId", p."headline", p."summary", p."skills", p."certifications",
    p."languages", p."score", p."shareUrl"
"""


async def find_user_id(*, user_id: str | None = None, phone_number: str | None = None) -> str | None:
    """
    Resolve a user to its canonical userId, by userId or by phone number.
    """
    if user_id is not None:
        row = await db.fetch_one(
            """
            SELECT "userId"
            FROM "Users"
            WHERE "userId" = $1
            LIMIT 1
            """,
            uuid.UUID(user_id),
        )
    elif phone_number is not None:
        row = await db.fetch_one(
            """
            SELECT "userId"
            FROM "Users"
            WHERE "phoneNumber" = $1
            LIMIT 1
            """,
            phone_number,
        )
    else:
        raise ValueError("user_id or phone_number is required.")
    return str(row["userId"]) if row is not None else None


async def profile_exists(user_id: str) -> bool:
    row = await db.fetch_one(
        """
        SELECT 1 AS ok
        FROM "Profiles"
        WHERE "userId" = $1
        LIMIT 1
        """,
        uuid.UUID(user_id),
    )
    return row is not None


async def insert_profile(
    *,
    user_id: str,
    headline: str | None = None,
    summary: str | None = None,
    skills: list[str] | None = None,
    certifications: list[str] | None = None,
    languages: list[str] | None = None,
    score: Decimal | None = None,
    share_url: str | None = None,
) -> dict[str, Any]:
    """
    Insert a profile. A concurrent insert for the same user surfaces as
    `asyncpg.UniqueViolationError` from the "userId" unique constraint.
    """
    row = await db.fetch_one(
        """
        INSERT INTO "Profiles" AS p
          ("userId", "headline", "summary", "skills", "certifications",
           "languages", "score", "shareUrl")
        VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
        RETURNING
        """
        + _PROFILE_COLUMNS,
        uuid.UUID(user_id),
        headline,
        summary,
        skills,
        certifications,
        languages,
        score,
        share_url,
    )
    if row is None:
        raise RuntimeError("Failed to insert profile.")
    return row


async def get_profile_by_user_id(user_id: str) -> dict[str, Any] | None:
    return await db.fetch_one(
        """
        SELECT
        """
        + _PROFILE_COLUMNS
        + """
        FROM "Profiles" p
        WHERE p."userId" = $1
        LIMIT 1
        """,
        uuid.UUID(user_id),
    )


async def get_profile_by_phone_number(phone_number: str) -> dict[str, Any] | None:
    """
    Profile of the user owning `phone_number`. Only profile columns are
    selected; the joined user row never leaves this query.
    """
    return await db.fetch_one(
        """
        SELECT
        """
        + _PROFILE_COLUMNS
        + """
        FROM "Profiles" p
        JOIN "Users" u ON u."userId" = p."userId"
        WHERE u."phoneNumber" = $1
        LIMIT 1
        """,
        phone_number,
    )
