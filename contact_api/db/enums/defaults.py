"""Default values shared by models and request schemas."""

from contact_api.db.enums.contacts import ContactStatus, ContactType, Priority
from contact_api.db.enums.messages import MessageSortType

DEFAULT_CONTACT_TYPE = ContactType.GENERAL
DEFAULT_PRIORITY = Priority.MEDIUM
DEFAULT_CONTACT_STATUS = ContactStatus.NEW
DEFAULT_MESSAGE_SORT = MessageSortType.MESSAGE_ID_ASCENDING
