"""User-related Pydantic schemas."""

from pydantic import Field

from mediafeed.schemas.post import CamelModel


class RegisterRequest(CamelModel):
    """Schema for account registration."""

    username: str = Field(..., min_length=1, max_length=64, description="Desired username")
    profile_pic_url: str | None = Field(None, description="Optional profile picture URL")


class LoginRequest(CamelModel):
    """Schema for looking up an account by username."""

    username: str = Field(..., min_length=1, max_length=64)


class ProfilePictureUpdate(CamelModel):
    """New profile picture for an existing user."""

    profile_pic_url: str | None = None


class UserOut(CamelModel):
    """Public view of a user."""

    user_id: str
    username: str
    profile_pic_url: str | None = None
