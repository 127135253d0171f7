"""
JSON request bodies read inside the handler.

Declaring a `Body` parameter makes FastAPI decode the payload before route
dependencies run, so a malformed body on a protected route would answer 400
ahead of the token check. Protected POST routes read the body with
`read_json_object` instead, after authentication.
"""

from __future__ import annotations

import json
from typing import Any

from fastapi import Request

from core.errors import ValidationError


def _invalid(message: str) -> ValidationError:
    return ValidationError("Validation error", errors=[{"field": "body", "message": message}])


async def read_json_object(request: Request) -> dict[str, Any] | ValidationError:
    """
    Decoded JSON object, `{}` for an empty body, or a `ValidationError`.
    """
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        payload = json.loads(raw)
    except ValueError:
        return _invalid("Request body must be valid JSON")
    if not isinstance(payload, dict):
        return _invalid("Request body must be a JSON object")
    return payload


def json_body_schema(model: type) -> dict[str, Any]:
    """`openapi_extra` documenting a JSON body read by `read_json_object`."""
    return {
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": model.model_json_schema(by_alias=True)}},
        }
    }
