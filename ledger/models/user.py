"""
User and credential models.

The password hash lives on `User` but is excluded from every
serialization, so it can never reach a caller or a log line.
"""

from datetime import datetime, timezone
from uuid import UUID, uuid4

from pydantic import BaseModel, EmailStr, Field, field_validator


# bcrypt only looks at the first 72 bytes of its input.
MAX_PASSWORD_BYTES = 72
MIN_PASSWORD_LENGTH = 6


class User(BaseModel):
    """Stored identity record."""

    id: UUID = Field(default_factory=uuid4)
    username: str
    email: str
    password_hash: str = Field(exclude=True, repr=False)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


class RegisterRequest(BaseModel):
    """Registration payload. Passwords are taken verbatim, never stripped."""

    username: str = Field(..., max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 3:
            raise ValueError("Username must be at least 3 characters")
        return v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes")
        return v


class LoginRequest(BaseModel):
    """Login payload."""

    email: str = Field(..., min_length=1, max_length=320)
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    token: str


class MessageResponse(BaseModel):
    message: str
