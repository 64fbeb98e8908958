"""Service layer modules."""

from contact_api.services.contact_cache import (
    ContactCache,
    MemoryContactCache,
    RedisContactCache,
    build_contact_cache,
    contact_cache_key,
)
from contact_api.services.contact_service import (
    ContactFileNotFoundError,
    ContactNotFoundError,
    ContactService,
    ContactServiceError,
)
from contact_api.services.message_service import MessageNotFoundError, MessageServiceError
from contact_api.services.upload_client import (
    FileDownload,
    UploadClient,
    UploadResult,
    UploadServiceClient,
    UploadServiceError,
)
