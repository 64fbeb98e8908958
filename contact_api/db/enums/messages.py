"""Message service enums."""

from enum import Enum


class MessageSortType(str, Enum):
    """Sort orders for the paginated message list."""

    MESSAGE_ID_ASCENDING = "message_id_ascending"
    MESSAGE_ID_DESCENDING = "message_id_descending"
    MESSAGE_CREATED_DATE_ASCENDING = "message_created_date_ascending"
    MESSAGE_CREATED_DATE_DESCENDING = "message_created_date_descending"
