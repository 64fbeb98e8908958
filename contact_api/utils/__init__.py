"""Utility modules."""

from contact_api.utils.pagination import (
    PaginationParams,
    clamp_pagination,
    get_pagination,
)

__all__ = [
    "PaginationParams",
    "clamp_pagination",
    "get_pagination",
]
