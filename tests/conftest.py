"""
Test configuration and fixtures.

Provides:
- In-memory SQLite database, rebuilt for each test
- Fake Upload Service client and a recording cache
- Bearer token minting for operator endpoints
- HTTPX AsyncClient wired to the app with dependency overrides
"""
import os
from datetime import timedelta
from typing import AsyncGenerator, Callable, Generator

# Must be set before the app (and its engine and limiter) are imported
os.environ["TESTING"] = "1"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("REDIS_URL", None)

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.orm import Session

from contact_api.core.deps import get_contact_cache, get_db, get_upload_client
from contact_api.core.rate_limit import limiter
from contact_api.core.security import create_access_token
from contact_api.db.base import Base
from contact_api.db.enums import ContactType
from contact_api.db.models import ContactMessage
from contact_api.db.session import SessionLocal, engine
from contact_api.db.types import utcnow
from contact_api.main import app
from contact_api.services.contact_cache import MemoryContactCache
from contact_api.services.contact_service import ContactService
from contact_api.services.upload_client import FileDownload, UploadResult, UploadServiceError


# =============================================================================
# Fakes
# =============================================================================

class FakeUploadClient:
    """In-memory stand-in for the Upload Service."""

    def __init__(self):
        self.stored: dict[str, tuple[bytes, str, str]] = {}
        self.uploads: list[dict] = []
        self.deleted: list[str] = []
        self.fail_files: set[str] = set()
        self.delete_result = True
        self.delete_error: Exception | None = None
        self.download_error: Exception | None = None

    async def upload_file(self, object_name, content, content_type, file_name):
        self.uploads.append(
            {
                "object_name": object_name,
                "content": content,
                "content_type": content_type,
                "file_name": file_name,
            }
        )
        if file_name in self.fail_files:
            raise UploadServiceError("Upload failed with status 500", status_code=500)
        file_id = f"file-{len(self.uploads)}"
        self.stored[file_id] = (content, content_type, file_name)
        return UploadResult(file_id=file_id, file_size=len(content))

    async def delete_file(self, file_id):
        self.deleted.append(file_id)
        if self.delete_error is not None:
            raise self.delete_error
        if self.delete_result:
            self.stored.pop(file_id, None)
        return self.delete_result

    async def download_file(self, file_id):
        if self.download_error is not None:
            raise self.download_error
        content, content_type, file_name = self.stored[file_id]
        return FileDownload(
            content=content,
            content_type=content_type,
            file_name=file_name,
            file_size=len(content),
        )


class RecordingCache(MemoryContactCache):
    """MemoryContactCache that remembers which keys were evicted."""

    def __init__(self):
        super().__init__(max_size=100)
        self.removed: list[str] = []

    def remove(self, key):
        self.removed.append(key)
        super().remove(key)


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Fresh schema per test.

    The in-memory engine shares one connection, so app code can commit
    freely; dropping the tables afterwards isolates tests.
    """
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def seed_contact_messages(db: Session) -> Callable[[int], list[int]]:
    """
    Insert contact messages one minute apart (oldest first) and return their ids.

    Odd-numbered messages are SUPPLIER, the rest GENERAL.
    """
    def _seed(count: int) -> list[int]:
        base = utcnow() - timedelta(hours=1)
        ids = []
        for i in range(count):
            created_at = base + timedelta(minutes=i)
            message = ContactMessage(
                full_name=f"Requester {i}",
                email=f"user{i}@example.com",
                subject=f"Subject {i}",
                message="Body",
                contact_type=ContactType.SUPPLIER if i % 2 else ContactType.GENERAL,
                created_at=created_at,
                updated_at=created_at,
            )
            db.add(message)
            db.flush()
            ids.append(message.id)
        db.commit()
        return ids

    return _seed


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield
    limiter.reset()


# =============================================================================
# Service Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def upload_client() -> FakeUploadClient:
    return FakeUploadClient()


@pytest.fixture(scope="function")
def cache() -> RecordingCache:
    return RecordingCache()


@pytest.fixture(scope="function")
def contact_service(db: Session, cache: RecordingCache, upload_client: FakeUploadClient) -> ContactService:
    return ContactService(db=db, cache=cache, upload_client=upload_client, cache_ttl_seconds=300)


# =============================================================================
# Auth Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def token() -> str:
    return create_access_token("ops@test.com")


# =============================================================================
# Client Fixtures
# =============================================================================

def _override_dependencies(db: Session, cache, upload_client) -> None:
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_contact_cache] = lambda: cache
    app.dependency_overrides[get_upload_client] = lambda: upload_client


@pytest.fixture(scope="function")
async def client(
    db: Session, cache: RecordingCache, upload_client: FakeUploadClient
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create unauthenticated AsyncClient for testing public endpoints.
    """
    _override_dependencies(db, cache, upload_client)

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def authed_client(
    db: Session, cache: RecordingCache, upload_client: FakeUploadClient, token: str
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create AsyncClient carrying an operator bearer token.
    """
    _override_dependencies(db, cache, upload_client)

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"Authorization": f"Bearer {token}"},
    ) as c:
        yield c

    app.dependency_overrides.clear()
