"""
Base response schemas for standardized API responses.

Every endpoint answers with the same envelope so clients can branch on
``success`` without inspecting status codes.
"""

from math import ceil
from typing import Any, Callable, Generic, List, Optional, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """Standard paginated response for all list endpoints."""

    items: List[T] = Field(description="List of items")
    total: int = Field(description="Total number of items")
    page: int = Field(default=1, description="Current page number", ge=1)
    per_page: int = Field(default=20, description="Items per page", ge=1, le=100)
    has_next: bool = Field(description="Whether there's a next page")
    has_prev: bool = Field(description="Whether there's a previous page")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"items": ["..."], "total": 100, "page": 1, "per_page": 20, "has_next": True, "has_prev": False}
        }
    )

    @classmethod
    def build(
        cls,
        items: Sequence[Any],
        total: int,
        page: int,
        per_page: int,
        serializer: Optional[Callable[[Any], Any]] = None,
    ) -> "PaginatedResponse[Any]":
        pages = ceil(total / per_page) if per_page else 0
        return cls(
            items=[serializer(item) for item in items] if serializer else list(items),
            total=total,
            page=page,
            per_page=per_page,
            has_next=page < pages,
            has_prev=page > 1,
        )


class SuccessResponse(BaseModel):
    """Standard success response for operations."""

    success: bool = Field(default=True, description="Operation success status")
    message: Optional[str] = Field(default=None, description="Human-readable success message")
    data: Optional[Any] = Field(default=None, description="Optional payload")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "message": "Booking accepted successfully",
                "data": {"tracking_id": "TRK1718000000000ABC123XYZ", "status": "accepted"},
            }
        }
    )


class ErrorResponse(BaseModel):
    """Body rendered for every failed request."""

    success: bool = Field(default=False)
    message: str = Field(description="Human-readable error message")
    code: Optional[str] = Field(default=None, description="Error code for programmatic handling")
    details: Optional[Any] = Field(default=None)


class HealthCheckResponse(BaseModel):
    status: str = Field(description="Service health status")
    service: str
    version: str
    environment: str
