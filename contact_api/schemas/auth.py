"""Authentication context schemas."""

from pydantic import BaseModel, Field


class Principal(BaseModel):
    """Caller identity decoded from a verified bearer token."""
    subject: str
    claims: dict = Field(default_factory=dict)
