"""
API error taxonomy and the result values services hand back to routers.

Services return `Ok | ApiError` instead of raising for expected outcomes
(validation failures, missing rows, duplicates). Routers turn either into a
JSON response with `render`. Only the auth dependency raises `ApiError`;
`main.py` registers a handler that renders it the same way.

Failure body:

    {"success": false, "message": "...", "error": {"code": "...", ...}}

plus `"errors": [{"field": ..., "message": ...}]` for validation failures.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

import pydantic
from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


class ApiError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        errors: list[dict[str, str]] | None = None,
        status_code: int | None = None,
        **context: Any,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.errors = errors
        self.context = context
        if status_code is not None:
            self.status_code = status_code

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "success": False,
            "message": self.message,
            "error": {"code": self.code, **self.context},
        }
        if self.errors is not None:
            body["errors"] = self.errors
        return body


class ValidationError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "VALIDATION_ERROR"


class AuthError(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_code = "UNAUTHORIZED"


class NotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"


class ConflictError(ApiError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "CONFLICT"


class InternalError(ApiError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = "INTERNAL_ERROR"


@dataclass(frozen=True)
class Ok:
    body: dict[str, Any]
    status_code: int = status.HTTP_200_OK


Outcome = Union[Ok, ApiError]


def _field_name(loc: tuple[Any, ...]) -> str:
    parts = [str(p) for p in loc]
    if parts and parts[0] in {"body", "query", "path", "header"}:
        parts = parts[1:]
    return ".".join(parts)


def violations(errors: list[dict[str, Any]]) -> list[dict[str, str]]:
    """
    Flatten pydantic error dicts into `[{field, message}]`, one per failure.
    """
    return [{"field": _field_name(tuple(err.get("loc") or ())), "message": str(err.get("msg") or "")} for err in errors]


def from_pydantic(exc: pydantic.ValidationError, message: str = "Validation error") -> ValidationError:
    return ValidationError(message, errors=violations(exc.errors()))


def render(outcome: Outcome) -> JSONResponse:
    if isinstance(outcome, ApiError):
        return JSONResponse(status_code=outcome.status_code, content=jsonable_encoder(outcome.to_body()))
    return JSONResponse(status_code=outcome.status_code, content=jsonable_encoder(outcome.body))
