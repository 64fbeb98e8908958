"""Contact message enums."""

from enum import Enum


class ContactType(str, Enum):
    """What the requester is contacting us about."""

    GENERAL = "general"
    SUPPLIER = "supplier"
    QUOTATION = "quotation"
    BUSINESS = "business"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class ContactStatus(str, Enum):
    """
    Triage status of a contact message.

    Messages start as NEW. RESOLVED stamps resolved_at the first time it is set.
    """

    NEW = "new"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"
