"""FastAPI dependencies for authentication, database access and services."""

from typing import Generator

import jwt
from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from contact_api.core.security import decode_access_token
from contact_api.db.session import SessionLocal
from contact_api.schemas.auth import Principal
from contact_api.services.contact_cache import ContactCache
from contact_api.services.contact_service import ContactService
from contact_api.services.upload_client import UploadClient


AUTH_HEADER = "Authorization"
BEARER_PREFIX = "bearer "


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields a database session and ensures it's closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_principal(request: Request) -> Principal:
    """
    Authenticate the caller from an `Authorization: Bearer <jwt>` header.

    Raises:
        HTTPException 401: missing, malformed, expired or mis-signed token
    """
    header = request.headers.get(AUTH_HEADER, "")
    if not header.lower().startswith(BEARER_PREFIX):
        raise HTTPException(
            status_code=401,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = header[len(BEARER_PREFIX):].strip()
    try:
        payload = decode_access_token(token)
    except jwt.InvalidTokenError:
        raise HTTPException(
            status_code=401,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    subject = payload.get("sub")
    if not subject:
        raise HTTPException(status_code=401, detail="Invalid token")

    principal = Principal(subject=str(subject), claims=payload)
    request.state.principal = principal
    return principal


def get_contact_cache(request: Request) -> ContactCache:
    """The cache instance created at startup."""
    return request.app.state.contact_cache


def get_upload_client(request: Request) -> UploadClient:
    """The Upload Service client created at startup."""
    return request.app.state.upload_client


def get_contact_service(
    db: Session = Depends(get_db),
    cache: ContactCache = Depends(get_contact_cache),
    upload_client: UploadClient = Depends(get_upload_client),
) -> ContactService:
    return ContactService(db=db, cache=cache, upload_client=upload_client)
