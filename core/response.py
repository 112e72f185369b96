"""
Standardized API response models for consistent data structure
"""
from typing import Any, Dict, Generic, List, Optional, TypeVar
from pydantic import BaseModel, Field

T = TypeVar('T')


class DataResponse(BaseModel, Generic[T]):
    """Standard success wrapper: every payload travels under ``data``"""
    data: T = Field(description="Response data")


class ErrorBody(BaseModel):
    code: str = Field(description="Error code for programmatic handling")
    message: str = Field(description="Human-readable message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")


class ErrorResponse(BaseModel):
    """Error response model"""
    error: ErrorBody


class PaginationMeta(BaseModel):
    """Pagination metadata"""
    page: int = Field(description="Current page number")
    per_page: int = Field(description="Items per page")
    total_items: int = Field(description="Total number of items")
    total_pages: int = Field(description="Total number of pages")
    has_next: bool = Field(description="Whether there are more pages")
    has_prev: bool = Field(description="Whether there are previous pages")


class PaginatedResponse(BaseModel, Generic[T]):
    """Paginated response wrapper"""
    data: List[T] = Field(description="List of items")
    pagination: PaginationMeta = Field(description="Pagination metadata")


def success_response(data: Any = None) -> Dict[str, Any]:
    """Create a success response"""
    return {"data": data}


def error_response(
    message: str,
    error_code: str = "INTERNAL_ERROR",
    details: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Create an error response"""
    body: Dict[str, Any] = {
        "code": error_code,
        "message": message,
    }
    if details:
        body["details"] = details
    return {"error": body}


def pagination_meta(page: int, per_page: int, total_items: int) -> Dict[str, Any]:
    """Build pagination metadata for a page of results"""
    total_pages = (total_items + per_page - 1) // per_page

    return {
        "page": page,
        "per_page": per_page,
        "total_items": total_items,
        "total_pages": total_pages,
        "has_next": page < total_pages,
        "has_prev": page > 1
    }
