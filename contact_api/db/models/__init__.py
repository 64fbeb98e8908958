"""SQLAlchemy ORM models."""

from contact_api.db.models.contacts import ContactFile, ContactMessage
from contact_api.db.models.messages import Message

__all__ = ["ContactFile", "ContactMessage", "Message"]
