from datetime import datetime
from typing import List, Optional

from sqlalchemy import or_, select, func
from sqlalchemy.ext.asyncio import AsyncSession

from predictsafe.crud.base import CRUDBase
from predictsafe.models.core import User
from predictsafe.schemas.user import UserCreate, UserUpdate


class CRUDUser(CRUDBase[User, UserCreate, UserUpdate]):
    """CRUD operations for user management."""

    async def get_by_email(self, db: AsyncSession, *, email: str) -> Optional[User]:
        """Get a user by email."""
        stmt = select(User).where(func.lower(User.email) == email.lower())
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_first_admin(self, db: AsyncSession) -> Optional[User]:
        """The admin that receives operational notifications."""
        stmt = select(User).where(User.is_admin.is_(True)).order_by(User.created_at).limit(1)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def search(
        self, db: AsyncSession, *, term: Optional[str] = None, skip: int = 0, limit: int = 100
    ) -> List[User]:
        """Search users by name, email or country."""
        stmt = select(User)
        if term:
            pattern = f"%{term.lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(User.email).like(pattern),
                    func.lower(User.full_name).like(pattern),
                    func.lower(User.country).like(pattern),
                )
            )
        stmt = stmt.order_by(User.created_at.desc()).offset(skip).limit(limit)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def count_signups_since(self, db: AsyncSession, *, since: datetime) -> int:
        return await self.count(db, User.created_at >= since)


user = CRUDUser(User)
