"""
Profile business logic.

Each operation runs its datastore calls one after another and returns an
`Ok` or an `ApiError` value; nothing here raises for an expected outcome.

Create:  validate -> resolve user -> duplicate check -> insert
Fetch:   validate -> fetch profile -> (if missing) check user exists

The duplicate check before insert only exists to produce a friendly 409
early. Two concurrent creates can both pass it; the unique constraint on
"Profiles"."userId" decides, and its violation maps to the same 409.
"""

from __future__ import annotations

import logging
from typing import Any

import asyncpg
import pydantic
from fastapi import status

from core import db
from core.errors import (
    ConflictError,
    InternalError,
    NotFoundError,
    Ok,
    Outcome,
    from_pydantic,
)

from . import repository, schemas

logger = logging.getLogger(__name__)


def _user_not_found(identifier: str) -> NotFoundError:
    return NotFoundError("User not found", code="USER_NOT_FOUND", identifier=identifier)


def _duplicate_profile(user_id: str) -> ConflictError:
    return ConflictError("Profile already exists for this user", code="DUPLICATE_PROFILE", userId=user_id)


async def create_profile(payload: dict[str, Any]) -> Outcome:
    try:
        request = schemas.ProfileCreate.model_validate(payload)
    except pydantic.ValidationError as exc:
        return from_pydantic(exc, "Validation error")

    identifier = request.user_id or request.phone_number or ""

    try:
        if request.user_id is not None:
            user_id = await repository.find_user_id(user_id=request.user_id)
        else:
            user_id = await repository.find_user_id(phone_number=request.phone_number)
    except db.DATABASE_ERRORS:
        logger.exception("profile_user_lookup_failed identifier=%s", identifier)
        return InternalError("An error occurred while validating user")

    if user_id is None:
        return _user_not_found(identifier)

    try:
        if await repository.profile_exists(user_id):
            return _duplicate_profile(user_id)
    except db.DATABASE_ERRORS:
        logger.exception("profile_exists_check_failed user_id=%s", user_id)
        return InternalError("An error occurred while checking profile existence")

    fields = request.profile_fields()
    try:
        row = await repository.insert_profile(
            user_id=user_id,
            headline=fields["headline"],
            summary=fields["summary"],
            skills=fields["skills"],
            certifications=fields["certifications"],
            languages=fields["languages"],
            score=fields["score"],
            share_url=fields["shareUrl"],
        )
    except asyncpg.UniqueViolationError:
        logger.info("profile_insert_conflict user_id=%s", user_id)
        return _duplicate_profile(user_id)
    except db.DATABASE_ERRORS:
        logger.exception("profile_insert_failed user_id=%s", user_id)
        return InternalError("An error occurred while creating the profile")

    logger.info("profile_created user_id=%s", user_id)
    return Ok(
        {
            "success": True,
            "message": "Profile created successfully",
            "data": schemas.public_profile(row),
        },
        status_code=status.HTTP_201_CREATED,
    )


async def fetch_profile(query: dict[str, Any]) -> Outcome:
    try:
        lookup = schemas.ProfileLookup.model_validate(query)
    except pydantic.ValidationError as exc:
        return from_pydantic(exc, "Invalid parameters")

    identifier = lookup.identifier

    try:
        if lookup.user_id is not None:
            row = await repository.get_profile_by_user_id(lookup.user_id)
        else:
            row = await repository.get_profile_by_phone_number(lookup.phone_number or "")

        if row is None:
            # Tell "no such user" apart from "user without a profile".
            if lookup.user_id is not None:
                user_id = await repository.find_user_id(user_id=lookup.user_id)
            else:
                user_id = await repository.find_user_id(phone_number=lookup.phone_number)

            if user_id is None:
                return _user_not_found(identifier)
            return NotFoundError("Profile not found", code="PROFILE_NOT_FOUND", identifier=identifier)
    except db.DATABASE_ERRORS:
        logger.exception("profile_fetch_failed identifier=%s", identifier)
        return InternalError("An error occurred while fetching the profile")

    data = schemas.public_profile(row)
    logger.info("profile_fetched user_id=%s", data["userId"])
    return Ok({"success": True, "message": "Profile found", "data": data})
