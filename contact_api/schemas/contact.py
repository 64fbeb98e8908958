"""Pydantic schemas for contact messages and their files."""

import base64
import binascii
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from contact_api.db.enums import (
    DEFAULT_CONTACT_TYPE,
    DEFAULT_PRIORITY,
    ContactStatus,
    ContactType,
    Priority,
)


class ContactFileCreate(BaseModel):
    """An inline attachment on a contact form submission."""
    file_name: str = Field(..., min_length=1, max_length=255)
    file_content: bytes = Field(..., description="Raw bytes; base64 in JSON bodies")
    content_type: str | None = Field(None, max_length=100)

    @field_validator("file_content", mode="before")
    @classmethod
    def _decode_base64(cls, value):
        if isinstance(value, str):
            try:
                return base64.b64decode(value, validate=True)
            except (binascii.Error, ValueError) as exc:
                raise ValueError("file_content must be base64 encoded") from exc
        return value


class ContactMessageCreate(BaseModel):
    """Public contact form submission."""
    full_name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    phone_number: str | None = Field(None, max_length=20)
    company: str | None = Field(None, max_length=200)
    subject: str = Field(..., min_length=1, max_length=500)
    message: str = Field(..., min_length=1, max_length=10000)
    contact_type: ContactType = DEFAULT_CONTACT_TYPE
    priority: Priority = DEFAULT_PRIORITY
    files: list[ContactFileCreate] = Field(default_factory=list)


class ContactStatusUpdate(BaseModel):
    """Triage update. Priority is left unchanged when omitted."""
    status: ContactStatus
    priority: Priority | None = None


class ContactFileRead(BaseModel):
    id: int
    file_name: str
    object_name: str
    file_size: int | None
    content_type: str | None
    upload_service_file_id: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class ContactMessageRead(BaseModel):
    """Full contact message view, including attachment metadata."""
    id: int
    full_name: str
    email: str
    phone_number: str | None
    company: str | None
    subject: str
    message: str
    contact_type: ContactType
    priority: Priority
    status: ContactStatus
    created_at: datetime
    updated_at: datetime
    resolved_at: datetime | None
    files: list[ContactFileRead] = Field(default_factory=list)

    model_config = {"from_attributes": True}
