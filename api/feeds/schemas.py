"""
Pydantic schemas for feed ingestion.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

MAX_TITLE_LENGTH = 500
MAX_SUMMARY_LENGTH = 10_000


class FeedIngest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str
    summary: str
    category: str
    url: str

    @field_validator("title", "summary", "category", "url")
    @classmethod
    def _not_blank(cls, value: str, info: ValidationInfo) -> str:
        if not value.strip():
            raise PydanticCustomError("missing", "{field} is required", {"field": info.field_name})
        return value

    @field_validator("title")
    @classmethod
    def _title_length(cls, value: str) -> str:
        if len(value) > MAX_TITLE_LENGTH:
            raise PydanticCustomError(
                "string_too_long",
                "Title too long (max 500 characters, received {length})",
                {"length": len(value)},
            )
        return value

    @field_validator("summary")
    @classmethod
    def _summary_length(cls, value: str) -> str:
        if len(value) > MAX_SUMMARY_LENGTH:
            raise PydanticCustomError(
                "string_too_long",
                "Summary too long (max 10,000 characters, received {length})",
                {"length": len(value)},
            )
        return value
