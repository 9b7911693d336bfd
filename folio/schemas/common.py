"""Response envelope shared by every endpoint: {success, data, error?, meta?}."""

import math
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ErrorBody(BaseModel):
    """Machine-readable code and human-readable message."""

    code: str
    message: str


class Meta(BaseModel):
    """Pagination metadata."""

    page: int
    per_page: int
    total: int
    total_pages: int

    @classmethod
    def build(cls, page: int, per_page: int, total: int) -> "Meta":
        return cls(
            page=page,
            per_page=per_page,
            total=total,
            total_pages=math.ceil(total / per_page) if per_page else 0,
        )


class ApiResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    success: bool = True
    data: T | None = None
    error: ErrorBody | None = Field(default=None, description="Present only on failure")
    meta: Meta | None = Field(default=None, description="Present only on paginated lists")


class MessageResponse(BaseModel):
    message: str


def ok(data: T, meta: Meta | None = None) -> ApiResponse[T]:
    """Wrap data in a successful envelope."""
    return ApiResponse(success=True, data=data, meta=meta)


def failure(code: str, message: str) -> dict:
    """Serialized error envelope (used by exception handlers)."""
    return {
        "success": False,
        "data": None,
        "error": ErrorBody(code=code, message=message).model_dump(),
    }
