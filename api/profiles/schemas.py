"""
Pydantic schemas for profile endpoints.

Field names are snake_case in Python and camelCase on the wire (aliases).
Validators raise `PydanticCustomError` so every violation carries a stable
message; pydantic collects all of them before failing.
"""

from __future__ import annotations

import re
import uuid
from decimal import Decimal
from typing import Any
from urllib.parse import urlsplit

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_core import PydanticCustomError

PHONE_PATTERN = re.compile(r"^[+]?[1-9]\d{6,14}$")

PUBLIC_FIELDS = (
    "userId",
    "headline",
    "summary",
    "skills",
    "certifications",
    "languages",
    "score",
    "shareUrl",
)


def _check_phone(value: str | None, message: str) -> str | None:
    if value is not None and not PHONE_PATTERN.match(value):
        raise PydanticCustomError("phone_format", message)
    return value


def _check_uuid(value: str | None, message: str) -> str | None:
    if value is None:
        return None
    try:
        return str(uuid.UUID(value))
    except ValueError:
        raise PydanticCustomError("uuid_format", message) from None


def _check_text(value: str | None, *, label: str, max_length: int) -> str | None:
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise PydanticCustomError("string_empty", "{label} cannot be empty", {"label": label})
    if len(value) > max_length:
        raise PydanticCustomError(
            "string_too_long",
            "{label} cannot exceed {max_length} characters (received {length} characters)",
            {"label": label, "max_length": max_length, "length": len(value)},
        )
    return value


def _check_string_list(
    values: list[str] | None,
    *,
    label: str,
    item_label: str,
    max_items: int,
    max_item_length: int,
) -> list[str] | None:
    if values is None:
        return None
    if len(values) > max_items:
        raise PydanticCustomError(
            "too_long",
            "{label} array cannot exceed {max_items} items",
            {"label": label, "max_items": max_items},
        )
    cleaned = [v.strip() for v in values]
    if not all(cleaned):
        raise PydanticCustomError(
            "string_empty",
            "Each {item_label} cannot be empty",
            {"item_label": item_label},
        )
    if any(len(v) > max_item_length for v in cleaned):
        raise PydanticCustomError(
            "string_too_long",
            "Each {item_label} cannot exceed {max_length} characters",
            {"item_label": item_label, "max_length": max_item_length},
        )
    if len(set(cleaned)) != len(cleaned):
        raise PydanticCustomError(
            "unique",
            "Duplicate values not allowed in {field} array",
            {"field": label.lower()},
        )
    return cleaned


def _identifiers_present(data: Any) -> int:
    if not isinstance(data, dict):
        return 0
    pairs = (("userId", "user_id"), ("phoneNumber", "phone_number"))
    return sum(1 for alias, name in pairs if data.get(alias) is not None or data.get(name) is not None)


def _validate_with_rule(model_name: str, data: Any, handler, rule: PydanticCustomError | None):
    """
    Run field validation, then report `rule` alongside any field errors.

    An "after" model validator only runs once every field is valid; the
    identifier rule is reported together with the field errors instead.
    """
    try:
        model = handler(data)
    except pydantic.ValidationError as exc:
        if rule is None:
            raise
        line_errors = [
            {
                "type": PydanticCustomError(err["type"], err["msg"]),
                "loc": err["loc"],
                "input": err.get("input"),
            }
            for err in exc.errors()
        ]
        line_errors.append({"type": rule, "loc": (), "input": data})
        raise pydantic.ValidationError.from_exception_data(model_name, line_errors) from None
    if rule is not None:
        raise rule
    return model


class ProfileCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    # At least one identifier is required; userId wins when both are sent.
    phone_number: str | None = Field(default=None, alias="phoneNumber")
    user_id: str | None = Field(default=None, alias="userId")

    headline: str | None = None
    summary: str | None = None
    skills: list[str] | None = None
    certifications: list[str] | None = None
    languages: list[str] | None = None
    score: Decimal | None = None
    share_url: str | None = Field(default=None, alias="shareUrl")

    @field_validator("phone_number")
    @classmethod
    def _phone_number(cls, value: str | None) -> str | None:
        return _check_phone(value, "Phone number must be in valid international format")

    @field_validator("user_id")
    @classmethod
    def _user_id(cls, value: str | None) -> str | None:
        return _check_uuid(value, "userId must be a valid UUID format")

    @field_validator("headline")
    @classmethod
    def _headline(cls, value: str | None) -> str | None:
        return _check_text(value, label="Headline", max_length=200)

    @field_validator("summary")
    @classmethod
    def _summary(cls, value: str | None) -> str | None:
        return _check_text(value, label="Summary", max_length=3000)

    @field_validator("skills")
    @classmethod
    def _skills(cls, value: list[str] | None) -> list[str] | None:
        return _check_string_list(value, label="Skills", item_label="skill", max_items=50, max_item_length=100)

    @field_validator("certifications")
    @classmethod
    def _certifications(cls, value: list[str] | None) -> list[str] | None:
        return _check_string_list(
            value,
            label="Certifications",
            item_label="certification",
            max_items=30,
            max_item_length=200,
        )

    @field_validator("languages")
    @classmethod
    def _languages(cls, value: list[str] | None) -> list[str] | None:
        return _check_string_list(value, label="Languages", item_label="language", max_items=20, max_item_length=50)

    @field_validator("score", mode="before")
    @classmethod
    def _score_input(cls, value: object) -> object:
        # Go through repr so 90.12 stays 90.12 instead of its binary expansion.
        if isinstance(value, float):
            return Decimal(repr(value))
        return value

    @field_validator("score")
    @classmethod
    def _score(cls, value: Decimal | None) -> Decimal | None:
        if value is None:
            return None
        if value < 0 or value > 100:
            raise PydanticCustomError(
                "score_range",
                "Score must be between 0 and 100 (received {value})",
                {"value": str(value)},
            )
        exponent = value.normalize().as_tuple().exponent
        if isinstance(exponent, int) and exponent < -2:
            raise PydanticCustomError("score_precision", "Score can have at most 2 decimal places")
        return value

    @field_validator("share_url")
    @classmethod
    def _share_url(cls, value: str | None) -> str | None:
        if value is None:
            return None
        try:
            parts = urlsplit(value)
        except ValueError:
            parts = None
        if parts is None or parts.scheme not in {"http", "https"} or not parts.netloc:
            raise PydanticCustomError("url_format", "shareUrl must be a valid URL format")
        if len(value) > 500:
            raise PydanticCustomError("string_too_long", "shareUrl cannot exceed 500 characters")
        return value

    @model_validator(mode="wrap")
    @classmethod
    def _require_identifier(cls, data: Any, handler) -> ProfileCreate:
        rule = None
        if isinstance(data, dict) and _identifiers_present(data) == 0:
            rule = PydanticCustomError("identifier_missing", "Either userId or phoneNumber is required")
        return _validate_with_rule(cls.__name__, data, handler, rule)

    def profile_fields(self) -> dict:
        """Descriptive fields to store, without the user identifiers."""
        return {
            "headline": self.headline,
            "summary": self.summary,
            "skills": self.skills,
            "certifications": self.certifications,
            "languages": self.languages,
            "score": self.score,
            "shareUrl": self.share_url,
        }


class ProfileLookup(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    phone_number: str | None = Field(default=None, alias="phoneNumber")
    user_id: str | None = Field(default=None, alias="userId")

    @field_validator("phone_number")
    @classmethod
    def _phone_number(cls, value: str | None) -> str | None:
        return _check_phone(value, "Invalid phone number format")

    @field_validator("user_id")
    @classmethod
    def _user_id(cls, value: str | None) -> str | None:
        return _check_uuid(value, "Invalid UUID format")

    @model_validator(mode="wrap")
    @classmethod
    def _exactly_one_identifier(cls, data: Any, handler) -> ProfileLookup:
        rule = None
        if isinstance(data, dict) and _identifiers_present(data) != 1:
            rule = PydanticCustomError(
                "identifier_xor",
                "Must provide either phoneNumber or userId (not both)",
            )
        return _validate_with_rule(cls.__name__, data, handler, rule)

    @property
    def identifier(self) -> str:
        return self.user_id or self.phone_number or ""


def public_profile(row: dict) -> dict:
    """
    Keep only the public profile fields, in a fixed order.
    """
    data = {name: row.get(name) for name in PUBLIC_FIELDS}
    if data["userId"] is not None:
        data["userId"] = str(data["userId"])
    return data
