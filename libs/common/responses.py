"""Response envelope shared by every endpoint.

Every body looks like ``{success, data?, message?, error?, errors?}``;
collection endpoints add ``pagination``.
"""

import math
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for wire schemas: snake_case in Python, camelCase in JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PaginationMeta(CamelModel):
    current: int
    total: int
    count: int
    total_records: int

    @classmethod
    def build(cls, *, page: int, limit: int, count: int, total_records: int):
        return cls(
            current=page,
            total=math.ceil(total_records / limit) if limit else 0,
            count=count,
            total_records=total_records,
        )


class ApiResponse(CamelModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None
    error: Optional[str] = None
    errors: Optional[list[Any]] = None


class PaginatedResponse(ApiResponse[list[T]], Generic[T]):
    pagination: PaginationMeta


def error_body(
    message: str,
    *,
    error: Optional[str] = None,
    errors: Optional[list[Any]] = None,
) -> dict:
    """Build a failure envelope as a plain dict for JSONResponse."""
    body: dict[str, Any] = {"success": False, "message": message}
    if error is not None:
        body["error"] = error
    if errors is not None:
        body["errors"] = errors
    return body
