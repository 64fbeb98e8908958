"""Contact message orchestration: store writes, remote attachments and cache.

Policies:
- Attachments are uploaded one at a time. A failed upload is logged and the
  file is skipped; the message is still created and earlier uploads are kept.
- The session transaction covers the message row and file rows only. Remote
  uploads cannot be rolled back, so they are never the reason for a rollback.
- Reads go through the cache; any mutation of a message or its files evicts
  the whole cached view. Cache failures are logged and never fail a call.
"""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session, selectinload

from contact_api.core.config import settings
from contact_api.core.structured_logging import mask_email
from contact_api.db.enums import ContactStatus, ContactType
from contact_api.db.models import ContactFile, ContactMessage
from contact_api.db.types import utcnow
from contact_api.schemas.contact import (
    ContactFileCreate,
    ContactFileRead,
    ContactMessageCreate,
    ContactMessageRead,
    ContactStatusUpdate,
)
from contact_api.services.contact_cache import ContactCache, contact_cache_key
from contact_api.services.upload_client import DEFAULT_CONTENT_TYPE, FileDownload, UploadClient

logger = logging.getLogger(__name__)


class ContactServiceError(Exception):
    """Base exception for contact service errors."""

    pass


class ContactNotFoundError(ContactServiceError):
    """Contact message not found."""

    def __init__(self, contact_id: int):
        super().__init__(f"Contact message with id {contact_id} not found")
        self.contact_id = contact_id


class ContactFileNotFoundError(ContactServiceError):
    """File not found, or not attached to the given contact message."""

    def __init__(self, contact_id: int, file_id: int):
        super().__init__(f"Contact file with id {file_id} for contact {contact_id} not found")
        self.contact_id = contact_id
        self.file_id = file_id


def build_object_name(contact_id: int, file_name: str, timestamp: int | None = None) -> str:
    """Storage key for an attachment: contacts/{contactId}/{unixTimestamp}_{fileName}."""
    if timestamp is None:
        timestamp = int(utcnow().timestamp())
    return f"contacts/{contact_id}/{timestamp}_{file_name}"


class ContactService:
    """
    Orchestrates one logical contact operation.

    Collaborators are injected per request: a SQLAlchemy session, a
    ContactCache and an UploadClient.
    """

    def __init__(
        self,
        db: Session,
        cache: ContactCache,
        upload_client: UploadClient,
        cache_ttl_seconds: int | None = None,
    ):
        self.db = db
        self.cache = cache
        self.upload_client = upload_client
        self.cache_ttl_seconds = cache_ttl_seconds or settings.cache_ttl_seconds

    # =========================================================================
    # Cache (best effort: failures fall back to the store)
    # =========================================================================

    def _cache_get(self, key: str) -> ContactMessageRead | None:
        try:
            return self.cache.get(key)
        except Exception:
            logger.warning("Contact cache read failed for %s", key, exc_info=True)
            return None

    def _cache_set(self, key: str, view: ContactMessageRead) -> None:
        try:
            self.cache.set(key, view, self.cache_ttl_seconds)
        except Exception:
            logger.warning("Contact cache write failed for %s", key, exc_info=True)

    def _evict(self, contact_id: int) -> None:
        key = contact_cache_key(contact_id)
        try:
            self.cache.remove(key)
        except Exception:
            # The mutation is already committed; a stale entry expires with its TTL
            logger.warning("Contact cache eviction failed for %s", key, exc_info=True)

    # =========================================================================
    # Create
    # =========================================================================

    async def create_contact_message(self, request: ContactMessageCreate | None) -> ContactMessageRead:
        """
        Create a message and upload its attachments (best effort per file).

        Raises:
            ValueError: request is None
            Exception: any store failure, after rolling back
        """
        if request is None:
            raise ValueError("request is required")

        try:
            now = utcnow()
            contact = ContactMessage(
                full_name=request.full_name,
                email=request.email,
                phone_number=request.phone_number,
                company=request.company,
                subject=request.subject,
                message=request.message,
                contact_type=request.contact_type,
                priority=request.priority,
                status=ContactStatus.NEW,
                created_at=now,
                updated_at=now,
            )
            self.db.add(contact)
            self.db.flush()
            contact_id = contact.id

            for file_request in request.files:
                await self._attach_file(contact_id, file_request)

            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception("Failed to create contact message")
            raise

        logger.info("Created contact message %s from %s", contact_id, mask_email(request.email))

        created = self.get_contact_message_by_id(contact_id)
        if created is None:
            raise RuntimeError("Failed to retrieve created contact message")
        return created

    async def _attach_file(self, contact_id: int, file_request: ContactFileCreate) -> None:
        object_name = build_object_name(contact_id, file_request.file_name)
        content_type = file_request.content_type or DEFAULT_CONTENT_TYPE

        try:
            result = await self.upload_client.upload_file(
                object_name, file_request.file_content, content_type, file_request.file_name
            )
        except Exception:
            # Attachment failures never block message intake
            logger.exception(
                "Failed to upload file %s for contact %s", file_request.file_name, contact_id
            )
            return

        now = utcnow()
        self.db.add(
            ContactFile(
                contact_message_id=contact_id,
                file_name=file_request.file_name,
                object_name=object_name,
                file_size=result.file_size,
                content_type=content_type,
                upload_service_file_id=result.file_id,
                created_at=now,
                updated_at=now,
            )
        )
        logger.info(
            "File uploaded for contact %s: %s -> %s", contact_id, file_request.file_name, result.file_id
        )

    # =========================================================================
    # Read
    # =========================================================================

    def get_contact_message_by_id(self, contact_id: int) -> ContactMessageRead | None:
        """Read-through lookup. Returns None when the message does not exist."""
        key = contact_cache_key(contact_id)
        cached = self._cache_get(key)
        if cached is not None:
            return cached

        contact = (
            self.db.query(ContactMessage)
            .options(selectinload(ContactMessage.files))
            .filter(ContactMessage.id == contact_id)
            .first()
        )
        if contact is None:
            return None

        view = ContactMessageRead.model_validate(contact)
        self._cache_set(key, view)
        return view

    def get_contact_messages(
        self,
        page: int = 1,
        page_size: int = 20,
        status: ContactStatus | None = None,
        contact_type: ContactType | None = None,
    ) -> list[ContactMessageRead]:
        """
        List messages newest first, straight from the store.

        page is 1-indexed; callers clamp page/page_size. Pages past the end
        are empty.
        """
        query = self.db.query(ContactMessage).options(selectinload(ContactMessage.files))

        if status is not None:
            query = query.filter(ContactMessage.status == status)
        if contact_type is not None:
            query = query.filter(ContactMessage.contact_type == contact_type)

        contacts = (
            query.order_by(ContactMessage.created_at.desc(), ContactMessage.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )
        return [ContactMessageRead.model_validate(c) for c in contacts]

    def get_contact_files(self, contact_id: int) -> list[ContactFileRead]:
        """
        Raises:
            ContactNotFoundError: contact message does not exist
        """
        if self.db.get(ContactMessage, contact_id) is None:
            raise ContactNotFoundError(contact_id)

        files = (
            self.db.query(ContactFile)
            .filter(ContactFile.contact_message_id == contact_id)
            .order_by(ContactFile.id)
            .all()
        )
        return [ContactFileRead.model_validate(f) for f in files]

    def _get_file(self, contact_id: int, file_id: int) -> ContactFile | None:
        return (
            self.db.query(ContactFile)
            .filter(ContactFile.id == file_id, ContactFile.contact_message_id == contact_id)
            .first()
        )

    def get_contact_file(self, contact_id: int, file_id: int) -> ContactFileRead | None:
        file = self._get_file(contact_id, file_id)
        return ContactFileRead.model_validate(file) if file else None

    # =========================================================================
    # Update / Delete
    # =========================================================================

    def update_contact_status(self, contact_id: int, request: ContactStatusUpdate) -> ContactMessageRead:
        """
        Apply a triage update. resolved_at is stamped only on the first
        transition to RESOLVED.

        Raises:
            ContactNotFoundError: contact message does not exist
        """
        contact = self.db.get(ContactMessage, contact_id)
        if contact is None:
            raise ContactNotFoundError(contact_id)

        now = utcnow()
        contact.status = request.status
        if request.priority is not None:
            contact.priority = request.priority
        contact.updated_at = now

        if request.status == ContactStatus.RESOLVED and contact.resolved_at is None:
            contact.resolved_at = now

        self.db.commit()
        self._evict(contact_id)

        logger.info("Updated contact message %s status to %s", contact_id, request.status.value)

        updated = self.get_contact_message_by_id(contact_id)
        if updated is None:
            raise RuntimeError("Failed to retrieve updated contact message")
        return updated

    def delete_contact_message(self, contact_id: int) -> None:
        """
        Delete a message; its file rows go with it (remote objects are kept).

        Raises:
            ContactNotFoundError: contact message does not exist
        """
        contact = self.db.get(ContactMessage, contact_id)
        if contact is None:
            raise ContactNotFoundError(contact_id)

        self.db.delete(contact)
        self.db.commit()
        self._evict(contact_id)

        logger.info("Deleted contact message %s", contact_id)

    async def delete_contact_file(self, contact_id: int, file_id: int) -> None:
        """
        Delete one attachment. The remote object is deleted first, best
        effort; a remote failure does not block the local delete.

        Raises:
            ContactFileNotFoundError: file missing or attached to another message
        """
        file = self._get_file(contact_id, file_id)
        if file is None:
            raise ContactFileNotFoundError(contact_id, file_id)

        remote_id = file.upload_service_file_id
        if remote_id:
            try:
                deleted = await self.upload_client.delete_file(remote_id)
            except Exception:
                logger.warning("Failed to delete file from upload service: %s", remote_id, exc_info=True)
            else:
                if deleted:
                    logger.info("Deleted file from upload service: %s", remote_id)
                else:
                    logger.warning("Upload service did not delete file: %s", remote_id)

        self.db.delete(file)
        self.db.commit()
        # The cached view still lists the file; evict the whole aggregate
        self._evict(contact_id)

        logger.info("Deleted contact file %s from contact %s", file_id, contact_id)

    async def download_contact_file(self, contact_id: int, file_id: int) -> FileDownload:
        """
        Raises:
            ContactFileNotFoundError: file missing or never reached the upload service
            UploadServiceError: upload service failed to return the file
        """
        file = self._get_file(contact_id, file_id)
        if file is None or not file.upload_service_file_id:
            raise ContactFileNotFoundError(contact_id, file_id)

        return await self.upload_client.download_file(file.upload_service_file_id)
