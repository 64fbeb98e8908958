"""Messages router - CRUD and search for plain contact messages."""

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.orm import Session

from contact_api.core.deps import get_current_principal, get_db
from contact_api.core.rate_limit import API_LIMIT, limiter
from contact_api.db.enums import MessageSortType
from contact_api.schemas.message import MessageCreate, MessageRead, MessageUpdate, PaginatedList
from contact_api.services import message_service
from contact_api.services.message_service import DEFAULT_PAGE_NUMBER, DEFAULT_PAGE_SIZE, MessageNotFoundError

router = APIRouter(
    prefix="/messages",
    tags=["messages"],
    dependencies=[Depends(get_current_principal)],
)


@router.post("", response_model=MessageRead, status_code=201)
@limiter.limit(API_LIMIT)
def create_message(
    request: Request,
    response: Response,
    data: MessageCreate,
    db: Session = Depends(get_db),
):
    message = message_service.create_message(db, data)
    response.headers["Location"] = str(request.url_for("get_message", message_id=message.id))
    return message


@router.get("", response_model=PaginatedList[MessageRead])
@limiter.limit(API_LIMIT)
def list_messages(
    request: Request,
    sort_type: MessageSortType | None = None,
    query: str | None = Query(None, max_length=200, description="Search across all text fields and id"),
    page_number: int = Query(DEFAULT_PAGE_NUMBER, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """
    Search messages.

    Returns 404 when the requested page has no messages.
    """
    items, total = message_service.list_messages(
        db,
        sort_type=sort_type,
        query=query,
        page_number=page_number,
        page_size=page_size,
    )
    if not items:
        raise HTTPException(status_code=404, detail="No messages found")

    return PaginatedList[MessageRead].create(
        items=[MessageRead.model_validate(m) for m in items],
        total=total,
        page_index=page_number,
        page_size=page_size,
    )


@router.get("/{message_id}", response_model=MessageRead)
@limiter.limit(API_LIMIT)
def get_message(
    request: Request,
    message_id: int,
    db: Session = Depends(get_db),
):
    message = message_service.get_message(db, message_id)
    if message is None:
        raise HTTPException(status_code=404, detail="Message not found")
    return message


@router.put("/{message_id}", status_code=204)
@limiter.limit(API_LIMIT)
def update_message(
    request: Request,
    message_id: int,
    data: MessageUpdate,
    db: Session = Depends(get_db),
):
    try:
        message_service.update_message(db, message_id, data)
    except MessageNotFoundError:
        raise HTTPException(status_code=404, detail="Message not found")
    return Response(status_code=204)


@router.delete("/{message_id}", status_code=204)
@limiter.limit(API_LIMIT)
def delete_message(
    request: Request,
    message_id: int,
    db: Session = Depends(get_db),
):
    try:
        message_service.delete_message(db, message_id)
    except MessageNotFoundError:
        raise HTTPException(status_code=404, detail="Message not found")
    return Response(status_code=204)
