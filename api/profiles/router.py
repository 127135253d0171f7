"""
Profile API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request

from auth import dependencies as auth_dependencies
from core.body import json_body_schema, read_json_object
from core.errors import ValidationError, render

from . import schemas, service

router = APIRouter(dependencies=[Depends(auth_dependencies.require_internal_token)])


@router.post("/profiles", status_code=201, openapi_extra=json_body_schema(schemas.ProfileCreate))
async def create_profile(request: Request):
    """
    Create the profile of an existing user, identified by userId or phoneNumber.
    """
    payload = await read_json_object(request)
    if isinstance(payload, ValidationError):
        return render(payload)
    return render(await service.create_profile(payload))


@router.get("/profiles")
async def get_profile(
    user_id: str | None = Query(default=None, alias="userId"),
    phone_number: str | None = Query(default=None, alias="phoneNumber"),
):
    """
    Fetch a profile by exactly one of userId / phoneNumber.
    """
    query = {"userId": user_id, "phoneNumber": phone_number}
    return render(await service.fetch_profile({k: v for k, v in query.items() if v is not None}))
