"""Pagination utilities for list endpoints."""

from dataclasses import dataclass

from fastapi import Query


# Pagination limits
DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


@dataclass
class PaginationParams:
    """Pagination parameters from query string."""
    page: int
    page_size: int


def clamp_pagination(page: int, page_size: int) -> PaginationParams:
    """
    Coerce out-of-range values instead of rejecting the request.

    page < 1 becomes the first page; a page_size outside 1..MAX_PAGE_SIZE
    falls back to the default.
    """
    if page < 1:
        page = DEFAULT_PAGE
    if page_size < 1 or page_size > MAX_PAGE_SIZE:
        page_size = DEFAULT_PAGE_SIZE
    return PaginationParams(page=page, page_size=page_size)


def get_pagination(
    page: int = Query(DEFAULT_PAGE, description="Page number (1-indexed)"),
    page_size: int = Query(DEFAULT_PAGE_SIZE, description=f"Items per page (max {MAX_PAGE_SIZE})"),
) -> PaginationParams:
    """
    Pagination dependency.

    Usage:
        @router.get("/items")
        def list_items(pagination: PaginationParams = Depends(get_pagination)):
            ...
    """
    return clamp_pagination(page, page_size)
