from typing import Optional
from pydantic import BaseModel, EmailStr

from .user import UserResponse


class Token(BaseModel):
    """Token schema for authentication."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class SupabaseSession(BaseModel):
    """Supabase session information."""
    access_token: str
    refresh_token: str
    expires_in: int
    expires_at: Optional[int] = None
    token_type: str = "bearer"


class UserInfo(BaseModel):
    """User information returned during authentication."""
    id: str
    email: str
    created_at: Optional[str] = None
    last_sign_in_at: Optional[str] = None


class AuthResponse(BaseModel):
    """Complete authentication response including tokens and user info."""
    session: SupabaseSession
    user: UserInfo


class RegisterRequest(BaseModel):
    """Request schema for user registration."""
    email: EmailStr
    password: str
    confirm_password: str
    full_name: Optional[str] = None
    country: Optional[str] = None

    def validate_passwords(self) -> None:
        """Validate that passwords match."""
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        if len(self.password) < 6:
            raise ValueError("Password must be at least 6 characters")


class RegisterResponse(BaseModel):
    """Result of a sign-up. Supabase may hold the session until the email is confirmed."""
    user: UserResponse
    session: Optional[SupabaseSession] = None
    requires_email_confirmation: bool = False
