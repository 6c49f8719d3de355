"""User and session schemas for request/response validation."""

from typing import Optional

from pydantic import Field

from .base import BaseModelSchema, BaseSchema


class UserCreateRequest(BaseSchema):
    """Schema for a registration request.

    Both fields are optional here so that a missing one is reported with the
    service's own validation message.
    """

    email: Optional[str] = Field(None, max_length=255, description="User's email address")
    password: Optional[str] = Field(None, description="Plain text password")


class UserResponse(BaseModelSchema):
    """Schema for user response data."""

    email: str


class TokenResponse(BaseSchema):
    """Schema for a successful sign-in."""

    token: str
