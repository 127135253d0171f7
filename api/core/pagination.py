"""
Page/limit handling shared by every list endpoint.

`resolve` turns untrusted query values into a bounded `PageRequest`;
`describe` turns a total row count into the metadata returned next to a page.

Coercion is deliberately lenient but validation is not: a value with no
leading integer (`"abc"`, `""`) silently falls back to the default, while an
integer that is out of range (`0`, `-1`, `101`) is rejected.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .errors import ValidationError

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MIN_PAGE = 1
MIN_LIMIT = 1
MAX_LIMIT = 100

PAGINATION_HINT = "Please check your page and limit parameters"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class PageRequest:
    page: int
    limit: int
    offset: int

    @property
    def last_index(self) -> int:
        """Inclusive index of the last row on this page."""
        return self.offset + self.limit - 1


class PaginationMeta(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    page: int
    total_pages: int
    total_count: int
    has_next_page: bool
    has_previous_page: bool
    limit: int

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


def coerce_int(raw: Any) -> int | None:
    """
    Parse the leading integer of `raw`, truncating any fraction.

    Returns None when there is nothing to parse.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        if not math.isfinite(raw):
            return None
        return int(raw)
    match = _LEADING_INT.match(str(raw))
    if match is None:
        return None
    return int(match.group(1))


def resolve(raw_page: Any = None, raw_limit: Any = None) -> PageRequest:
    page = coerce_int(raw_page)
    limit = coerce_int(raw_limit)
    if page is None:
        page = DEFAULT_PAGE
    if limit is None:
        limit = DEFAULT_LIMIT

    if page < MIN_PAGE:
        raise ValidationError(
            f"page must be greater than or equal to {MIN_PAGE}",
            code="INVALID_PAGINATION",
            details=PAGINATION_HINT,
        )
    if limit < MIN_LIMIT or limit > MAX_LIMIT:
        raise ValidationError(
            f"limit must be between {MIN_LIMIT} and {MAX_LIMIT}",
            code="INVALID_PAGINATION",
            details=PAGINATION_HINT,
        )

    return PageRequest(page=page, limit=limit, offset=(page - 1) * limit)


def describe(total_count: int, page: int, limit: int) -> PaginationMeta:
    total_pages = (total_count + limit - 1) // limit
    return PaginationMeta(
        page=page,
        total_pages=total_pages,
        total_count=total_count,
        has_next_page=page < total_pages,
        has_previous_page=page > 1,
        limit=limit,
    )
