"""API routers."""

from contact_api.routers.contacts import router as contacts_router
from contact_api.routers.messages import router as messages_router

__all__ = [
    "contacts_router",
    "messages_router",
]
