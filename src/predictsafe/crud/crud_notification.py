from typing import List
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from pydantic import BaseModel

from predictsafe.crud.base import CRUDBase
from predictsafe.models.core import Notification


class CRUDNotification(CRUDBase[Notification, BaseModel, BaseModel]):
    """CRUD operations for in-app notifications."""

    async def list_for_user(
        self, db: AsyncSession, *, user_id: UUID, unread_only: bool = False, limit: int = 50
    ) -> List[Notification]:
        stmt = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            stmt = stmt.where(Notification.read.is_(False))
        stmt = stmt.order_by(Notification.created_at.desc()).limit(limit)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def count_unread(self, db: AsyncSession, *, user_id: UUID) -> int:
        return await self.count(db, Notification.user_id == user_id, Notification.read.is_(False))

    async def mark_all_read(self, db: AsyncSession, *, user_id: UUID) -> int:
        stmt = (
            update(Notification)
            .where(Notification.user_id == user_id, Notification.read.is_(False))
            .values(read=True)
        )
        result = await db.execute(stmt)
        await db.commit()
        return result.rowcount or 0


notification = CRUDNotification(Notification)
