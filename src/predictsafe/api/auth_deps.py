"""Authentication dependencies for FastAPI endpoints."""
from dataclasses import dataclass
from typing import Annotated, Optional
import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from predictsafe.core.config import settings
from predictsafe.db.session import SessionDep
from predictsafe.models.core import User
from predictsafe.services.auth_service import auth_service

logger = logging.getLogger(__name__)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login", auto_error=False)


@dataclass
class SessionContext:
    """Who is calling. Passed explicitly to every operation that needs it."""
    user: User
    access_token: Optional[str] = None

    @property
    def user_id(self):
        return self.user.id

    @property
    def is_admin(self) -> bool:
        return bool(self.user.is_admin)

    @property
    def roles(self) -> list[str]:
        return ["admin", "user"] if self.is_admin else ["user"]


async def session_from_token(db: AsyncSession, token: str) -> SessionContext:
    try:
        user = await auth_service.resolve_user(db, token)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting current user: {str(e)}")
        raise HTTPException(status_code=401, detail="Could not validate credentials")
    return SessionContext(user=user, access_token=token)


async def get_session_context(
    db: SessionDep,
    token: str = Depends(oauth2_scheme),
) -> SessionContext:
    """Session of the authenticated caller."""
    return await session_from_token(db, token)


async def get_optional_session_context(
    db: SessionDep,
    token: Optional[str] = Depends(optional_oauth2_scheme),
) -> Optional[SessionContext]:
    """Session of the caller if a valid token was sent, otherwise None."""
    if not token:
        return None
    try:
        return await session_from_token(db, token)
    except HTTPException as e:
        logger.info(f"Ignoring unusable token on public endpoint: {e.detail}")
        return None


async def get_admin_session(
    session: Annotated[SessionContext, Depends(get_session_context)],
) -> SessionContext:
    if not session.is_admin:
        logger.warning(f"User {session.user_id} attempted an admin operation")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return session


async def get_current_user(
    session: Annotated[SessionContext, Depends(get_session_context)],
) -> User:
    """Get the current authenticated user."""
    return session.user


# Type aliases for dependencies
CurrentSession = Annotated[SessionContext, Depends(get_session_context)]
OptionalSession = Annotated[Optional[SessionContext], Depends(get_optional_session_context)]
AdminSession = Annotated[SessionContext, Depends(get_admin_session)]
CurrentUser = Annotated[User, Depends(get_current_user)]
