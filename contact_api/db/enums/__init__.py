"""Enum definitions for application constants."""

from contact_api.db.enums.contacts import ContactStatus, ContactType, Priority
from contact_api.db.enums.defaults import (
    DEFAULT_CONTACT_STATUS,
    DEFAULT_CONTACT_TYPE,
    DEFAULT_MESSAGE_SORT,
    DEFAULT_PRIORITY,
)
from contact_api.db.enums.messages import MessageSortType

__all__ = [
    "ContactStatus",
    "ContactType",
    "DEFAULT_CONTACT_STATUS",
    "DEFAULT_CONTACT_TYPE",
    "DEFAULT_MESSAGE_SORT",
    "DEFAULT_PRIORITY",
    "MessageSortType",
    "Priority",
]
