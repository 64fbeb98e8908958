"""Rate limiting configuration for the contact API."""

import os

from slowapi import Limiter
from slowapi.util import get_remote_address

from contact_api.core.config import settings
from contact_api.core.redis_client import get_redis_url, redis_available

# Per-route policies, partitioned by client address
API_LIMIT = f"{settings.RATE_LIMIT_API}/minute"
CONTACT_LIMIT = f"{settings.RATE_LIMIT_CONTACT}/minute"

# Use Redis for multi-worker support.
# Falls back to in-memory if Redis is not available (dev/test mode)
IS_TESTING = os.getenv("TESTING", "").lower() in ("1", "true", "yes")

if not IS_TESTING and redis_available():
    limiter = Limiter(key_func=get_remote_address, storage_uri=get_redis_url())
else:
    limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")
