"""Security utilities for JWT bearer tokens."""

from datetime import datetime, timedelta, timezone

import jwt

from contact_api.core.config import settings


# =============================================================================
# Bearer Token (JWT in Authorization header)
# =============================================================================

def create_access_token(subject: str, expires_hours: int | None = None) -> str:
    """
    Create signed access JWT.

    Always signs with current secret (JWT_SECRET) and stamps the configured
    issuer and audience so the token passes decode_access_token().
    """
    now = datetime.now(timezone.utc)
    hours = expires_hours if expires_hours is not None else settings.JWT_EXPIRES_HOURS
    payload = {
        "sub": subject,
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
        "iat": now,
        "exp": now + timedelta(hours=hours),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Decode and verify access JWT.

    Validates signature, lifetime, issuer and audience. Tries current secret
    first, then previous (for rotation support).

    Raises:
        jwt.InvalidTokenError: If token invalid with all secrets
    """
    last_error = None
    for secret in settings.jwt_secrets:
        try:
            return jwt.decode(
                token,
                secret,
                algorithms=[settings.JWT_ALGORITHM],
                audience=settings.JWT_AUDIENCE,
                issuer=settings.JWT_ISSUER,
            )
        except jwt.InvalidTokenError as e:
            last_error = e
            continue
    raise last_error  # type: ignore
