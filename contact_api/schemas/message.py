"""Pydantic schemas for the message service."""

from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, EmailStr, Field, field_validator

T = TypeVar("T")


class MessageCreate(BaseModel):
    """Request to create a message."""
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    company: str | None = Field(None, max_length=50)
    email: EmailStr
    telephone: str | None = Field(None, max_length=50)
    country: str | None = Field(None, max_length=50)
    message_content: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def _email_fits_column(cls, value: str) -> str:
        if len(value) > 50:
            raise ValueError("email must be at most 50 characters")
        return value


class MessageUpdate(MessageCreate):
    """Full replacement of a message's fields."""


class MessageRead(BaseModel):
    id: int
    first_name: str
    last_name: str
    company: str | None
    email: str
    telephone: str | None
    country: str | None
    message_content: str
    created_date: datetime | None
    modified_date: datetime | None

    model_config = {"from_attributes": True}


class PaginatedList(BaseModel, Generic[T]):
    """One page of results plus navigation hints."""
    items: list[T]
    page_index: int
    total_pages: int
    total_records: int
    has_previous_page: bool
    has_next_page: bool

    @classmethod
    def create(cls, items: list[T], total: int, page_index: int, page_size: int) -> "PaginatedList[T]":
        total_pages = (total + page_size - 1) // page_size if page_size > 0 else 0
        return cls(
            items=items,
            page_index=page_index,
            total_pages=total_pages,
            total_records=total,
            has_previous_page=page_index > 1,
            has_next_page=page_index < total_pages,
        )
