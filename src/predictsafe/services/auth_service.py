import logging
from typing import Optional
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from supabase import create_client, Client

from predictsafe.core.config import settings
from predictsafe.crud.crud_user import user as crud_user
from predictsafe.models.core import User
from predictsafe.schemas.auth import AuthResponse, RegisterRequest, RegisterResponse, SupabaseSession, UserInfo
from predictsafe.schemas.user import UserResponse
from predictsafe.services import notification_service
from predictsafe.services.avatars import random_avatar


def _iso(value) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat() if hasattr(value, "isoformat") else str(value)


def _session(session) -> SupabaseSession:
    return SupabaseSession(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_in=session.expires_in,
        expires_at=session.expires_at,
        token_type="bearer"
    )


class AuthService:
    """Authentication delegated to Supabase; profiles live in the local users table."""

    def __init__(self):
        self._supabase: Optional[Client] = None
        self.logger = logging.getLogger(__name__)

    @property
    def supabase(self) -> Client:
        if self._supabase is None:
            self._supabase = create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
        return self._supabase

    async def verify_token(self, token: str) -> dict:
        """Verify a JWT token and return user information.

        Args:
            token: JWT token to verify

        Returns:
            dict: id and email of the Supabase user

        Raises:
            HTTPException: If token is invalid or expired
        """
        try:
            self.logger.debug("Attempting to verify token")
            response = self.supabase.auth.get_user(token)

            if not response or not response.user:
                self.logger.warning("Token verification failed: No valid user found")
                raise HTTPException(status_code=401, detail="Invalid token")

            self.logger.info(f"Token verified successfully for user: {response.user.email}")
            return {
                "id": response.user.id,
                "email": response.user.email,
                "created_at": _iso(response.user.created_at),
                "last_sign_in_at": _iso(response.user.last_sign_in_at),
            }
        except HTTPException:
            raise
        except Exception as e:
            error_str = str(e)
            self.logger.error(f"Token verification failed: {error_str}")
            if "expired" in error_str.lower():
                raise HTTPException(status_code=401, detail="Token has expired")
            raise HTTPException(status_code=401, detail="Invalid token")

    async def resolve_user(self, db: AsyncSession, token: str) -> User:
        """Local profile of the token's owner."""
        user_info = await self.verify_token(token)
        user = None
        try:
            user = await crud_user.get(db, id=UUID(str(user_info["id"])))
        except ValueError:
            self.logger.warning(f"Supabase id {user_info['id']} is not a UUID, falling back to email")
        if user is None and user_info.get("email"):
            user = await crud_user.get_by_email(db, email=user_info["email"])
        if not user:
            self.logger.error(f"User authenticated in Supabase but not found in application database: {user_info['email']}")
            raise HTTPException(
                status_code=403,
                detail="User not registered in application. Please complete registration first."
            )
        return user

    def authenticate_user(self, email: str, password: str) -> AuthResponse | bool:
        try:
            self.logger.debug(f"Attempting to authenticate user: {email}")
            response = self.supabase.auth.sign_in_with_password({
                "email": email,
                "password": password
            })
        except Exception as e:
            self.logger.warning(f"Authentication failed for user: {email}, Error: {e}")
            return False

        if not response or not response.user or not response.session:
            self.logger.warning(f"Authentication failed for user: {email}")
            return False

        self.logger.info(f"User authenticated successfully: {email}")
        return AuthResponse(
            session=_session(response.session),
            user=UserInfo(
                id=str(response.user.id),
                email=response.user.email,
                created_at=_iso(response.user.created_at),
                last_sign_in_at=_iso(response.user.last_sign_in_at),
            )
        )

    def refresh_access_token(self, refresh_token: str) -> Optional[SupabaseSession]:
        """
        Refresh an access token using a refresh token.

        Returns:
            SupabaseSession, or None when Supabase returned no session
        """
        self.logger.debug("Attempting to refresh token")
        response = self.supabase.auth.refresh_session(refresh_token)
        if not response or not response.session:
            self.logger.warning("Token refresh failed: No valid session returned")
            return None
        self.logger.info("Token refreshed successfully")
        return _session(response.session)

    async def register_user(self, db: AsyncSession, request: RegisterRequest) -> RegisterResponse:
        """
        Sign a user up with Supabase and create their local profile.

        The local row reuses the Supabase user id so tokens map straight onto it.
        A random avatar is assigned and a welcome notification sent.

        Raises:
            HTTPException: 400 if the email is taken or Supabase refuses the sign-up
        """
        existing = await crud_user.get_by_email(db, email=request.email)
        if existing:
            raise HTTPException(
                status_code=400,
                detail="Email address is already in use by another user"
            )

        self.logger.debug(f"Attempting to register user: {request.email}")
        try:
            response = self.supabase.auth.sign_up({
                "email": request.email,
                "password": request.password,
                "options": {
                    "data": {"full_name": request.full_name, "country": request.country}
                }
            })
        except Exception as e:
            self.logger.error(f"Failed to register user: {str(e)}")
            raise HTTPException(status_code=400, detail=f"Registration failed: {str(e)}")

        if not response or not response.user:
            raise HTTPException(status_code=400, detail="Failed to register user")

        user = await crud_user.create(
            db,
            obj_in={
                "id": UUID(str(response.user.id)),
                "email": request.email,
                "full_name": request.full_name,
                "country": request.country,
                "avatar_url": random_avatar(),
                "is_admin": False,
            },
        )
        self.logger.info(f"Registered user {user.id} ({user.email})")
        await notification_service.notify_welcome(db, user)

        return RegisterResponse(
            user=UserResponse.model_validate(user),
            session=_session(response.session) if response.session else None,
            requires_email_confirmation=response.session is None,
        )


auth_service = AuthService()
