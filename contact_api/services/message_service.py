"""Message service - CRUD and paginated search over plain contact messages."""

import logging

from sqlalchemy import String, cast, or_
from sqlalchemy.orm import Session

from contact_api.db.enums import DEFAULT_MESSAGE_SORT, MessageSortType
from contact_api.db.models import Message
from contact_api.db.types import utcnow
from contact_api.schemas.message import MessageCreate, MessageUpdate

logger = logging.getLogger(__name__)

DEFAULT_PAGE_NUMBER = 1
DEFAULT_PAGE_SIZE = 10

_SORT_ORDERS = {
    MessageSortType.MESSAGE_ID_ASCENDING: Message.id.asc(),
    MessageSortType.MESSAGE_ID_DESCENDING: Message.id.desc(),
    MessageSortType.MESSAGE_CREATED_DATE_ASCENDING: Message.created_date.asc(),
    MessageSortType.MESSAGE_CREATED_DATE_DESCENDING: Message.created_date.desc(),
}

_SEARCH_COLUMNS = (
    Message.first_name,
    Message.last_name,
    Message.company,
    Message.email,
    Message.telephone,
    Message.country,
    Message.message_content,
)


class MessageServiceError(Exception):
    """Base exception for message service errors."""

    pass


class MessageNotFoundError(MessageServiceError):
    """Message not found."""

    def __init__(self, message_id: int):
        super().__init__(f"Message with id {message_id} not found")
        self.message_id = message_id


def create_message(db: Session, data: MessageCreate) -> Message:
    now = utcnow()
    message = Message(**data.model_dump(), created_date=now, modified_date=now)
    db.add(message)
    db.commit()
    db.refresh(message)
    logger.info("Created message %s", message.id)
    return message


def get_message(db: Session, message_id: int) -> Message | None:
    return db.get(Message, message_id)


def update_message(db: Session, message_id: int, data: MessageUpdate) -> Message:
    """Replace every field of a message.

    Raises:
        MessageNotFoundError: message does not exist
    """
    message = db.get(Message, message_id)
    if message is None:
        raise MessageNotFoundError(message_id)

    for field, value in data.model_dump().items():
        setattr(message, field, value)
    message.modified_date = utcnow()

    db.commit()
    db.refresh(message)
    logger.info("Updated message %s", message_id)
    return message


def delete_message(db: Session, message_id: int) -> None:
    """
    Raises:
        MessageNotFoundError: message does not exist
    """
    message = db.get(Message, message_id)
    if message is None:
        raise MessageNotFoundError(message_id)

    db.delete(message)
    db.commit()
    logger.info("Deleted message %s", message_id)


def list_messages(
    db: Session,
    sort_type: MessageSortType | None = None,
    query: str | None = None,
    page_number: int | None = None,
    page_size: int | None = None,
) -> tuple[list[Message], int]:
    """
    Search and page through messages.

    query matches (case-insensitive substring) any text column or the id.

    Returns:
        (items, total_count)
    """
    page_number = page_number or DEFAULT_PAGE_NUMBER
    page_size = page_size or DEFAULT_PAGE_SIZE

    q = db.query(Message)

    if query and query.strip():
        # Literal substring match; % and _ in the query are not wildcards
        term = query.strip()
        q = q.filter(
            or_(
                *(column.icontains(term, autoescape=True) for column in _SEARCH_COLUMNS),
                cast(Message.id, String).contains(term, autoescape=True),
            )
        )

    total = q.count()
    items = (
        q.order_by(_SORT_ORDERS[sort_type or DEFAULT_MESSAGE_SORT], Message.id.asc())
        .offset((page_number - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return items, total
