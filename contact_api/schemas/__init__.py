"""Pydantic schemas for API request/response models."""

from contact_api.schemas.auth import Principal
from contact_api.schemas.contact import (
    ContactFileCreate,
    ContactFileRead,
    ContactMessageCreate,
    ContactMessageRead,
    ContactStatusUpdate,
)
from contact_api.schemas.message import MessageCreate, MessageRead, MessageUpdate, PaginatedList

__all__ = [
    "ContactFileCreate",
    "ContactFileRead",
    "ContactMessageCreate",
    "ContactMessageRead",
    "ContactStatusUpdate",
    "MessageCreate",
    "MessageRead",
    "MessageUpdate",
    "PaginatedList",
    "Principal",
]
