"""Contact form endpoints: public submission plus operator triage and attachments."""

import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from contact_api.core.deps import get_contact_service, get_current_principal
from contact_api.core.rate_limit import API_LIMIT, CONTACT_LIMIT, limiter
from contact_api.db.enums import ContactStatus, ContactType
from contact_api.schemas.auth import Principal
from contact_api.schemas.contact import (
    ContactFileRead,
    ContactMessageCreate,
    ContactMessageRead,
    ContactStatusUpdate,
)
from contact_api.services.contact_service import (
    ContactFileNotFoundError,
    ContactNotFoundError,
    ContactService,
)
from contact_api.services.upload_client import UploadServiceError
from contact_api.utils.pagination import PaginationParams, get_pagination

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/contacts", tags=["contacts"])


def _content_disposition(file_name: str) -> str:
    """Attachment header with an ASCII fallback and an RFC 5987 UTF-8 name."""
    fallback = file_name.encode("ascii", "ignore").decode().replace('"', "") or "download"
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(file_name)}"


# =============================================================================
# Public
# =============================================================================

@router.post("", response_model=ContactMessageRead, status_code=201)
@limiter.limit(CONTACT_LIMIT)
async def create_contact_message(
    request: Request,
    response: Response,
    data: ContactMessageCreate,
    service: ContactService = Depends(get_contact_service),
):
    """
    Submit a contact form message.

    Attachments are uploaded best effort: a file that fails to upload is
    left out of the response, the message is still created.
    """
    contact = await service.create_contact_message(data)
    response.headers["Location"] = str(request.url_for("get_contact_message", contact_id=contact.id))
    return contact


# =============================================================================
# Operator endpoints (bearer token)
# =============================================================================

@router.get("", response_model=list[ContactMessageRead])
@limiter.limit(API_LIMIT)
def list_contact_messages(
    request: Request,
    pagination: PaginationParams = Depends(get_pagination),
    status: ContactStatus | None = None,
    contact_type: ContactType | None = None,
    service: ContactService = Depends(get_contact_service),
    _: Principal = Depends(get_current_principal),
):
    """List contact messages, newest first."""
    return service.get_contact_messages(
        page=pagination.page,
        page_size=pagination.page_size,
        status=status,
        contact_type=contact_type,
    )


@router.get("/{contact_id}", response_model=ContactMessageRead)
@limiter.limit(API_LIMIT)
def get_contact_message(
    request: Request,
    contact_id: int,
    service: ContactService = Depends(get_contact_service),
    _: Principal = Depends(get_current_principal),
):
    contact = service.get_contact_message_by_id(contact_id)
    if contact is None:
        raise HTTPException(status_code=404, detail="Contact message not found")
    return contact


@router.put("/{contact_id}/status", response_model=ContactMessageRead)
@limiter.limit(API_LIMIT)
def update_contact_status(
    request: Request,
    contact_id: int,
    data: ContactStatusUpdate,
    service: ContactService = Depends(get_contact_service),
    _: Principal = Depends(get_current_principal),
):
    """Update status (and optionally priority) of a contact message."""
    try:
        return service.update_contact_status(contact_id, data)
    except ContactNotFoundError:
        raise HTTPException(status_code=404, detail="Contact message not found")


@router.delete("/{contact_id}", status_code=204)
@limiter.limit(API_LIMIT)
def delete_contact_message(
    request: Request,
    contact_id: int,
    service: ContactService = Depends(get_contact_service),
    _: Principal = Depends(get_current_principal),
):
    try:
        service.delete_contact_message(contact_id)
    except ContactNotFoundError:
        raise HTTPException(status_code=404, detail="Contact message not found")
    return Response(status_code=204)


# =============================================================================
# Attachments
# =============================================================================

@router.get("/{contact_id}/files", response_model=list[ContactFileRead])
@limiter.limit(API_LIMIT)
def list_contact_files(
    request: Request,
    contact_id: int,
    service: ContactService = Depends(get_contact_service),
    _: Principal = Depends(get_current_principal),
):
    try:
        return service.get_contact_files(contact_id)
    except ContactNotFoundError:
        raise HTTPException(status_code=404, detail="Contact message not found")


@router.delete("/{contact_id}/files/{file_id}", status_code=204)
@limiter.limit(API_LIMIT)
async def delete_contact_file(
    request: Request,
    contact_id: int,
    file_id: int,
    service: ContactService = Depends(get_contact_service),
    _: Principal = Depends(get_current_principal),
):
    """Delete an attachment (remote object first, best effort)."""
    try:
        await service.delete_contact_file(contact_id, file_id)
    except ContactFileNotFoundError:
        raise HTTPException(status_code=404, detail="Contact file not found")
    return Response(status_code=204)


@router.get("/{contact_id}/files/{file_id}/download")
@limiter.limit(API_LIMIT)
async def download_contact_file(
    request: Request,
    contact_id: int,
    file_id: int,
    service: ContactService = Depends(get_contact_service),
    _: Principal = Depends(get_current_principal),
):
    """Stream an attachment back from the Upload Service."""
    try:
        download = await service.download_contact_file(contact_id, file_id)
    except ContactFileNotFoundError:
        raise HTTPException(status_code=404, detail="Contact file not found")
    except UploadServiceError as e:
        logger.error("Download failed for contact %s file %s: %s", contact_id, file_id, e)
        raise HTTPException(status_code=500, detail="Failed to download file")

    return Response(
        content=download.content,
        media_type=download.content_type,
        headers={"Content-Disposition": _content_disposition(download.file_name)},
    )
