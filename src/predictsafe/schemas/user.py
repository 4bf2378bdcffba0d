from typing import Optional
from pydantic import EmailStr

from .base import BaseSchema, BaseResponseSchema


# request
# in
class UserBase(BaseSchema):
    """Base user schema."""
    email: str
    full_name: Optional[str] = None
    country: Optional[str] = None
    avatar_url: Optional[str] = None


class UserCreate(UserBase):
    """Schema for creating a user."""
    email: EmailStr
    is_admin: bool = False


# Properties to receive on User update
# in
class UserUpdate(BaseSchema):
    """Schema for updating a user profile."""
    full_name: Optional[str] = None
    country: Optional[str] = None
    avatar_url: Optional[str] = None


# out
class UserResponse(UserBase, BaseResponseSchema):
    """Schema for user response."""
    is_admin: bool = False


class UserPublic(BaseSchema):
    """Public user schema without admin fields."""
    full_name: Optional[str] = None
    country: Optional[str] = None
    avatar_url: Optional[str] = None


class AvatarResponse(BaseSchema):
    avatar_url: str
