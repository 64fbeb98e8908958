"""Tests for the contact message orchestrator."""

import base64

import pytest
from sqlalchemy.orm import Session

from contact_api.db.enums import ContactStatus, ContactType, Priority
from contact_api.db.models import ContactFile, ContactMessage
from contact_api.db.types import utcnow
from contact_api.schemas.contact import ContactFileCreate, ContactMessageCreate, ContactStatusUpdate
from contact_api.services.contact_cache import contact_cache_key
from contact_api.services.contact_service import (
    ContactFileNotFoundError,
    ContactNotFoundError,
    ContactService,
    build_object_name,
)
from contact_api.services.upload_client import UploadServiceError


def _request(**overrides) -> ContactMessageCreate:
    data = {
        "full_name": "Jane Doe",
        "email": "jane@example.com",
        "subject": "Quote for 200 brackets",
        "message": "Please send pricing for 200 aluminium brackets.",
    }
    data.update(overrides)
    return ContactMessageCreate(**data)


def _file(name: str, content: bytes = b"hello world", content_type: str | None = "text/plain"):
    return ContactFileCreate(file_name=name, file_content=content, content_type=content_type)


# =============================================================================
# Create
# =============================================================================

@pytest.mark.asyncio
async def test_create_without_files(contact_service, upload_client, db: Session):
    created = await contact_service.create_contact_message(
        _request(full_name="John Doe", email="john@x.com", subject="S", message="M", contact_type=ContactType.GENERAL)
    )

    assert created.id > 0
    assert created.status == ContactStatus.NEW
    assert created.contact_type == ContactType.GENERAL
    assert created.priority == Priority.MEDIUM
    assert created.files == []
    assert created.resolved_at is None
    assert created.updated_at == created.created_at
    assert upload_client.uploads == []
    assert db.query(ContactMessage).count() == 1


@pytest.mark.asyncio
async def test_create_with_file_records_remote_metadata(contact_service, upload_client):
    created = await contact_service.create_contact_message(
        _request(contact_type=ContactType.QUOTATION, files=[_file("drawing.txt")])
    )

    assert len(created.files) == 1
    attached = created.files[0]
    assert attached.file_name == "drawing.txt"
    assert attached.upload_service_file_id == "file-1"
    assert attached.file_size == len(b"hello world")
    assert attached.content_type == "text/plain"
    assert attached.object_name.startswith(f"contacts/{created.id}/")
    assert attached.object_name.endswith("_drawing.txt")
    assert upload_client.uploads[0]["object_name"] == attached.object_name


@pytest.mark.asyncio
async def test_create_defaults_missing_content_type(contact_service, upload_client):
    created = await contact_service.create_contact_message(
        _request(files=[_file("blob.bin", content_type=None)])
    )

    assert upload_client.uploads[0]["content_type"] == "application/octet-stream"
    assert created.files[0].content_type == "application/octet-stream"


@pytest.mark.asyncio
async def test_create_skips_failed_upload_and_keeps_the_rest(contact_service, upload_client, db: Session):
    upload_client.fail_files = {"broken.pdf"}

    created = await contact_service.create_contact_message(
        _request(files=[_file("first.txt"), _file("broken.pdf"), _file("third.txt")])
    )

    assert [f.file_name for f in created.files] == ["first.txt", "third.txt"]
    assert len(upload_client.uploads) == 3
    assert db.query(ContactMessage).count() == 1
    assert db.query(ContactFile).count() == 2


@pytest.mark.asyncio
async def test_create_with_single_failed_upload_still_creates_message(contact_service, upload_client, db: Session):
    upload_client.fail_files = {"only.pdf"}

    created = await contact_service.create_contact_message(_request(files=[_file("only.pdf")]))

    assert created.id > 0
    assert created.files == []
    assert len(upload_client.uploads) == 1
    assert db.query(ContactMessage).count() == 1
    assert db.query(ContactFile).count() == 0


@pytest.mark.asyncio
async def test_create_accepts_base64_file_content(contact_service, upload_client):
    payload = base64.b64encode(b"%PDF-1.4").decode()
    file_request = ContactFileCreate(file_name="drawing.pdf", file_content=payload, content_type="application/pdf")

    await contact_service.create_contact_message(_request(files=[file_request]))

    assert upload_client.uploads[0]["content"] == b"%PDF-1.4"


@pytest.mark.asyncio
async def test_create_rejects_missing_request(contact_service, db: Session):
    with pytest.raises(ValueError):
        await contact_service.create_contact_message(None)

    assert db.query(ContactMessage).count() == 0


@pytest.mark.asyncio
async def test_create_rolls_back_on_store_failure(contact_service, upload_client, db: Session, monkeypatch):
    def _boom():
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(db, "commit", _boom)

    with pytest.raises(RuntimeError):
        await contact_service.create_contact_message(_request(files=[_file("orphan.txt")]))

    monkeypatch.undo()
    assert db.query(ContactMessage).count() == 0
    assert db.query(ContactFile).count() == 0
    # Remote objects are not compensated
    assert len(upload_client.uploads) == 1


def test_build_object_name():
    assert build_object_name(7, "a b.pdf", timestamp=1700000000) == "contacts/7/1700000000_a b.pdf"


# =============================================================================
# Read
# =============================================================================

@pytest.mark.asyncio
async def test_get_by_id_populates_cache(contact_service, cache):
    created = await contact_service.create_contact_message(_request())

    assert cache.get(contact_cache_key(created.id)) is not None
    assert contact_service.get_contact_message_by_id(created.id) == created


def test_get_by_id_missing_returns_none(contact_service, cache):
    assert contact_service.get_contact_message_by_id(999) is None
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_get_by_id_serves_cached_view(contact_service, cache, db: Session):
    created = await contact_service.create_contact_message(_request())

    # Change the row behind the cache's back
    row = db.get(ContactMessage, created.id)
    row.subject = "changed"
    db.commit()

    assert contact_service.get_contact_message_by_id(created.id).subject == created.subject

    cache.remove(contact_cache_key(created.id))
    assert contact_service.get_contact_message_by_id(created.id).subject == "changed"


def test_list_pages_newest_first(contact_service, seed_contact_messages):
    ids = seed_contact_messages(25)
    newest_first = list(reversed(ids))

    first = contact_service.get_contact_messages(page=1, page_size=10)
    assert [c.id for c in first] == newest_first[:10]

    third = contact_service.get_contact_messages(page=3, page_size=10)
    assert [c.id for c in third] == newest_first[20:]

    assert contact_service.get_contact_messages(page=10, page_size=10) == []


def test_list_filters_by_status_and_type(contact_service, seed_contact_messages):
    ids = seed_contact_messages(6)
    contact_service.update_contact_status(ids[1], ContactStatusUpdate(status=ContactStatus.RESOLVED))

    supplier = contact_service.get_contact_messages(contact_type=ContactType.SUPPLIER)
    assert {c.id for c in supplier} == {ids[1], ids[3], ids[5]}

    resolved = contact_service.get_contact_messages(status=ContactStatus.RESOLVED)
    assert [c.id for c in resolved] == [ids[1]]

    assert contact_service.get_contact_messages(
        status=ContactStatus.RESOLVED, contact_type=ContactType.GENERAL
    ) == []


@pytest.mark.asyncio
async def test_get_contact_files(contact_service):
    created = await contact_service.create_contact_message(
        _request(files=[_file("a.txt"), _file("b.txt")])
    )

    files = contact_service.get_contact_files(created.id)
    assert [f.file_name for f in files] == ["a.txt", "b.txt"]

    assert contact_service.get_contact_file(created.id, files[0].id).file_name == "a.txt"
    assert contact_service.get_contact_file(created.id + 1, files[0].id) is None


def test_get_contact_files_missing_message(contact_service):
    with pytest.raises(ContactNotFoundError):
        contact_service.get_contact_files(123)


# =============================================================================
# Update / Delete
# =============================================================================

@pytest.mark.asyncio
async def test_update_status_stamps_resolved_once(contact_service):
    created = await contact_service.create_contact_message(_request())

    in_progress = contact_service.update_contact_status(
        created.id, ContactStatusUpdate(status=ContactStatus.IN_PROGRESS, priority=Priority.HIGH)
    )
    assert in_progress.status == ContactStatus.IN_PROGRESS
    assert in_progress.priority == Priority.HIGH
    assert in_progress.resolved_at is None

    resolved = contact_service.update_contact_status(
        created.id, ContactStatusUpdate(status=ContactStatus.RESOLVED)
    )
    assert resolved.resolved_at is not None
    assert resolved.priority == Priority.HIGH

    closed = contact_service.update_contact_status(
        created.id, ContactStatusUpdate(status=ContactStatus.CLOSED)
    )
    assert closed.resolved_at == resolved.resolved_at

    resolved_again = contact_service.update_contact_status(
        created.id, ContactStatusUpdate(status=ContactStatus.RESOLVED)
    )
    assert resolved_again.resolved_at == resolved.resolved_at
    assert resolved_again.updated_at >= resolved_again.created_at


@pytest.mark.asyncio
async def test_update_status_evicts_cache(contact_service, cache):
    created = await contact_service.create_contact_message(_request())

    contact_service.update_contact_status(created.id, ContactStatusUpdate(status=ContactStatus.CLOSED))

    assert contact_cache_key(created.id) in cache.removed
    assert contact_service.get_contact_message_by_id(created.id).status == ContactStatus.CLOSED


def test_update_status_missing(contact_service):
    with pytest.raises(ContactNotFoundError):
        contact_service.update_contact_status(42, ContactStatusUpdate(status=ContactStatus.CLOSED))


@pytest.mark.asyncio
async def test_delete_message_removes_files_and_cache(contact_service, cache, upload_client, db: Session):
    created = await contact_service.create_contact_message(_request(files=[_file("a.txt")]))

    contact_service.delete_contact_message(created.id)

    assert contact_service.get_contact_message_by_id(created.id) is None
    assert db.query(ContactFile).count() == 0
    assert contact_cache_key(created.id) in cache.removed
    # Remote objects are left alone
    assert upload_client.deleted == []


def test_delete_message_missing(contact_service):
    with pytest.raises(ContactNotFoundError):
        contact_service.delete_contact_message(42)


@pytest.mark.asyncio
async def test_delete_file_removes_remote_and_local(contact_service, cache, upload_client):
    created = await contact_service.create_contact_message(_request(files=[_file("a.txt"), _file("b.txt")]))
    target = created.files[0]

    await contact_service.delete_contact_file(created.id, target.id)

    assert upload_client.deleted == [target.upload_service_file_id]
    assert contact_cache_key(created.id) in cache.removed
    remaining = contact_service.get_contact_message_by_id(created.id)
    assert [f.file_name for f in remaining.files] == ["b.txt"]


@pytest.mark.asyncio
async def test_delete_file_tolerates_remote_failure(contact_service, upload_client):
    created = await contact_service.create_contact_message(_request(files=[_file("a.txt")]))
    upload_client.delete_error = UploadServiceError("unreachable")

    await contact_service.delete_contact_file(created.id, created.files[0].id)

    assert contact_service.get_contact_files(created.id) == []


@pytest.mark.asyncio
async def test_delete_file_tolerates_remote_refusal(contact_service, upload_client):
    created = await contact_service.create_contact_message(_request(files=[_file("a.txt")]))
    upload_client.delete_result = False

    await contact_service.delete_contact_file(created.id, created.files[0].id)

    assert contact_service.get_contact_files(created.id) == []


@pytest.mark.asyncio
async def test_delete_file_wrong_parent(contact_service):
    first = await contact_service.create_contact_message(_request(files=[_file("a.txt")]))
    second = await contact_service.create_contact_message(_request())

    with pytest.raises(ContactFileNotFoundError):
        await contact_service.delete_contact_file(second.id, first.files[0].id)

    assert len(contact_service.get_contact_files(first.id)) == 1


# =============================================================================
# Download
# =============================================================================

@pytest.mark.asyncio
async def test_download_file(contact_service):
    created = await contact_service.create_contact_message(
        _request(files=[_file("notes.txt", content=b"abc")])
    )

    download = await contact_service.download_contact_file(created.id, created.files[0].id)

    assert download.content == b"abc"
    assert download.content_type == "text/plain"
    assert download.file_name == "notes.txt"
    assert download.file_size == 3


@pytest.mark.asyncio
async def test_download_missing_file(contact_service):
    created = await contact_service.create_contact_message(_request())

    with pytest.raises(ContactFileNotFoundError):
        await contact_service.download_contact_file(created.id, 999)


@pytest.mark.asyncio
async def test_download_file_without_remote_id(contact_service, db: Session):
    created = await contact_service.create_contact_message(_request())
    now = utcnow()
    orphan = ContactFile(
        contact_message_id=created.id,
        file_name="legacy.txt",
        object_name=build_object_name(created.id, "legacy.txt"),
        created_at=now,
        updated_at=now,
    )
    db.add(orphan)
    db.commit()

    with pytest.raises(ContactFileNotFoundError):
        await contact_service.download_contact_file(created.id, orphan.id)


@pytest.mark.asyncio
async def test_download_propagates_upload_service_error(contact_service, upload_client):
    created = await contact_service.create_contact_message(_request(files=[_file("a.txt")]))
    upload_client.download_error = UploadServiceError("Download failed with status 503", status_code=503)

    with pytest.raises(UploadServiceError):
        await contact_service.download_contact_file(created.id, created.files[0].id)


# =============================================================================
# Cache outages
# =============================================================================

class UnavailableCache:
    """Cache whose backend is down for every call."""

    def get(self, key):
        raise ConnectionError("redis down")

    def set(self, key, value, ttl_seconds):
        raise ConnectionError("redis down")

    def remove(self, key):
        raise ConnectionError("redis down")


@pytest.fixture
def service_without_cache(db: Session, upload_client) -> ContactService:
    return ContactService(db=db, cache=UnavailableCache(), upload_client=upload_client, cache_ttl_seconds=300)


@pytest.mark.asyncio
async def test_cache_outage_does_not_fail_create_or_read(service_without_cache):
    created = await service_without_cache.create_contact_message(_request())

    assert created.id > 0
    assert service_without_cache.get_contact_message_by_id(created.id).subject == created.subject


@pytest.mark.asyncio
async def test_cache_outage_does_not_fail_committed_mutations(service_without_cache, db: Session):
    created = await service_without_cache.create_contact_message(_request(files=[_file("a.txt")]))

    updated = service_without_cache.update_contact_status(
        created.id, ContactStatusUpdate(status=ContactStatus.CLOSED)
    )
    assert updated.status == ContactStatus.CLOSED
    assert db.get(ContactMessage, created.id).status == ContactStatus.CLOSED

    await service_without_cache.delete_contact_file(created.id, created.files[0].id)
    assert db.query(ContactFile).count() == 0

    service_without_cache.delete_contact_message(created.id)
    assert service_without_cache.get_contact_message_by_id(created.id) is None
