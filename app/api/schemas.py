"""API request and response schemas.

This module contains Pydantic models for API request validation
and response serialization.
"""

import re
from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, EmailStr, Field, HttpUrl, TypeAdapter, ValidationError, field_validator
from pydantic_core import PydanticCustomError

from app.models.base import as_utc

EMAIL_MAX_LENGTH = 150

# "2030-11-20 10:00:00.000 -0300", accepted alongside ISO-8601
EXPIRY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\.\d{3} [+-]\d{4}$")
EXPIRY_FORMAT = "%Y-%m-%d %H:%M:%S.%f %z"

_http_url = TypeAdapter(HttpUrl)


def validate_http_url(value: str) -> str:
    """Check that ``value`` is an absolute http(s) URL, returning it unchanged."""
    try:
        _http_url.validate_python(value)
    except ValidationError:
        raise PydanticCustomError("url_parsing", "Input should be a valid http or https URL") from None
    return value


# Stored exactly as supplied; HttpUrl would normalise host case and trailing slashes
RawHttpUrl = Annotated[str, Field(min_length=1), AfterValidator(validate_http_url)]


class LinkCreateRequest(BaseModel):
    """Request schema for creating a short link."""
    original_url: RawHttpUrl
    expires_at: Optional[datetime] = None

    @field_validator("expires_at", mode="before")
    @classmethod
    def parse_offset_timestamp(cls, v):
        if isinstance(v, str) and EXPIRY_PATTERN.match(v):
            return datetime.strptime(v, EXPIRY_FORMAT)
        return v

    @field_validator("expires_at")
    @classmethod
    def expiry_in_utc(cls, v):
        return as_utc(v)


class LinkUpdateRequest(BaseModel):
    """Request schema for pointing a link at a new destination."""
    current_url: RawHttpUrl


class UserCreateRequest(BaseModel):
    """Request schema for registering an account."""
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=50)
    name: Optional[str] = Field(None, max_length=100)

    @field_validator("email", mode="before")
    @classmethod
    def email_length(cls, v):
        if isinstance(v, str) and len(v) > EMAIL_MAX_LENGTH:
            raise PydanticCustomError(
                "string_too_long",
                "String should have at most {max_length} characters",
                {"max_length": EMAIL_MAX_LENGTH},
            )
        return v


class LoginRequest(BaseModel):
    """Request schema for logging in."""
    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    """Response schema for a successful login."""
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime


class ErrorResponse(BaseModel):
    """Response schema for errors."""
    detail: str


class ValidationErrorResponse(BaseModel):
    """Response schema for request validation failures."""
    detail: str
    errors: List[dict]
