"""
Sparkz Backend: Auth Schemas
=============================

Signup and login payloads.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SignupRequest(BaseModel):
    """POST /auth/signup body."""
    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1, max_length=72, description="bcrypt uses at most 72 bytes")
    dj_name: str = Field(alias="djName", min_length=1, max_length=255)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip()
        if "@" not in v or v.startswith("@") or v.endswith("@"):
            raise ValueError("must be an email address")
        return v

    @field_validator("password")
    @classmethod
    def validate_password_bytes(cls, v: str) -> str:
        if len(v.encode("utf-8")) > 72:
            raise ValueError("must be at most 72 bytes when UTF-8 encoded")
        return v


class LoginRequest(BaseModel):
    """POST /auth/login body."""
    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=1024)

    @field_validator("email")
    @classmethod
    def strip_email(cls, v: str) -> str:
        # Signup stores the stripped address
        return v.strip()


class AuthUser(BaseModel):
    """The user summary returned next to a fresh token."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    dj_name: str | None = None


class AuthResponse(BaseModel):
    """Bearer token plus the authenticated user."""
    token: str = Field(description="Signed bearer token, valid for TOKEN_TTL_DAYS")
    user: AuthUser
