"""Contact form ORM models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from contact_api.db.base import Base
from contact_api.db.enums import (
    DEFAULT_CONTACT_STATUS,
    DEFAULT_CONTACT_TYPE,
    DEFAULT_PRIORITY,
    ContactStatus,
    ContactType,
    Priority,
)
from contact_api.db.models._types import enum_type
from contact_api.db.types import utcnow


class ContactMessage(Base):
    """
    A customer contact-form submission.

    Invariants:
    - updated_at >= created_at
    - resolved_at is stamped once, the first time status becomes RESOLVED
    """

    __tablename__ = "contact_messages"
    __table_args__ = (
        Index("idx_contact_messages_email", "email"),
        Index("idx_contact_messages_created_at", "created_at"),
        Index("idx_contact_messages_status", "status"),
        Index("idx_contact_messages_contact_type", "contact_type"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Requester
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    phone_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    company: Mapped[str | None] = mapped_column(String(200), nullable=True)

    subject: Mapped[str] = mapped_column(String(500), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)

    # Classification / triage
    contact_type: Mapped[ContactType] = mapped_column(
        enum_type(ContactType, name="contact_type"),
        default=DEFAULT_CONTACT_TYPE,
        nullable=False,
    )
    priority: Mapped[Priority] = mapped_column(
        enum_type(Priority, name="contact_priority"),
        default=DEFAULT_PRIORITY,
        nullable=False,
    )
    status: Mapped[ContactStatus] = mapped_column(
        enum_type(ContactStatus, name="contact_status"),
        default=DEFAULT_CONTACT_STATUS,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )
    resolved_at: Mapped[datetime | None] = mapped_column(nullable=True)

    files: Mapped[list["ContactFile"]] = relationship(
        back_populates="contact_message",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ContactFile.id",
    )


class ContactFile(Base):
    """
    Metadata for an attachment stored in the external Upload Service.

    Rows are only created when a contact message is created and its upload
    succeeded. object_name is derived server-side, never user-supplied.
    """

    __tablename__ = "contact_files"
    __table_args__ = (
        Index("idx_contact_files_contact_message_id", "contact_message_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    contact_message_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("contact_messages.id", ondelete="CASCADE"), nullable=False
    )

    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    object_name: Mapped[str] = mapped_column(String(500), nullable=False)
    file_size: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    content_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    upload_service_file_id: Mapped[str | None] = mapped_column(String(100), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )

    contact_message: Mapped["ContactMessage"] = relationship(back_populates="files")
