from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_, case, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from pydantic import BaseModel

from predictsafe.crud.base import CRUDBase
from predictsafe.models.core import Message


class CRUDMessage(CRUDBase[Message, BaseModel, BaseModel]):
    """CRUD operations for chat messages."""

    async def conversation(self, db: AsyncSession, *, user_id: UUID) -> List[Message]:
        """Full history of one conversation, oldest first."""
        stmt = select(Message).where(Message.user_id == user_id).order_by(Message.created_at, Message.id)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def mark_read(self, db: AsyncSession, *, user_id: UUID, viewer_id: UUID) -> int:
        """Mark every unread message the viewer did not send as read."""
        stmt = (
            update(Message)
            .where(
                Message.user_id == user_id,
                Message.read.is_(False),
                Message.sender_id != viewer_id,
            )
            .values(read=True)
        )
        result = await db.execute(stmt)
        await db.commit()
        return result.rowcount or 0

    async def unread_summary(self, db: AsyncSession, *, viewer_id: UUID) -> dict[UUID, int]:
        """Unread counts per conversation, from the viewer's side."""
        unread = case((and_(Message.read.is_(False), Message.sender_id != viewer_id), 1), else_=0)
        stmt = select(Message.user_id, func.sum(unread)).group_by(Message.user_id)
        result = await db.execute(stmt)
        return {row[0]: int(row[1] or 0) for row in result.all()}

    async def latest_per_conversation(self, db: AsyncSession) -> List[Message]:
        """Newest message of every conversation, newest conversation first."""
        latest = (
            select(Message.user_id, func.max(Message.created_at).label("latest_at"))
            .group_by(Message.user_id)
            .subquery()
        )
        stmt = (
            select(Message)
            .join(latest, and_(Message.user_id == latest.c.user_id, Message.created_at == latest.c.latest_at))
            .order_by(Message.created_at.desc())
        )
        result = await db.execute(stmt)
        seen: set[UUID] = set()
        messages: List[Message] = []
        for row in result.scalars().all():
            # identical timestamps can yield two rows for one conversation
            if row.user_id in seen:
                continue
            seen.add(row.user_id)
            messages.append(row)
        return messages

    async def count_unread_for_viewer(self, db: AsyncSession, *, viewer_id: UUID, user_id: Optional[UUID] = None) -> int:
        filters = [Message.read.is_(False), Message.sender_id != viewer_id]
        if user_id is not None:
            filters.append(Message.user_id == user_id)
        return await self.count(db, *filters)


message = CRUDMessage(Message)
