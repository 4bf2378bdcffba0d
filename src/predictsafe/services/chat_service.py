import logging
from typing import List, Optional
from uuid import UUID

from fastapi.encoders import jsonable_encoder
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from predictsafe.crud.crud_message import message as crud_message
from predictsafe.models.core import Message, User
from predictsafe.schemas.chat import ConversationSummary, MessageResponse
from predictsafe.services.realtime import ChatHub, hub

logger = logging.getLogger(__name__)


def message_event(message: Message) -> dict:
    return {"type": "message", "message": jsonable_encoder(MessageResponse.model_validate(message))}


def sync_event(messages: List[Message]) -> dict:
    return {
        "type": "sync",
        "messages": [jsonable_encoder(MessageResponse.model_validate(m)) for m in messages],
    }


class ChatService:
    """Two-party conversations between one user and the support admins."""

    def __init__(self, realtime: ChatHub = hub):
        self.realtime = realtime
        self.logger = logging.getLogger(__name__)

    async def send(self, db: AsyncSession, *, conversation_id: UUID, sender: User, content: str) -> Message:
        row = await crud_message.create(
            db,
            obj_in={"user_id": conversation_id, "sender_id": sender.id, "content": content.strip(), "read": False},
        )
        delivered = await self.realtime.publish(conversation_id, message_event(row))
        self.logger.info(f"Message {row.id} in {conversation_id} delivered to {delivered} subscribers")
        return row

    async def open_conversation(self, db: AsyncSession, *, conversation_id: UUID, viewer_id: UUID) -> List[Message]:
        """Mark the other party's messages read, then return the history oldest first."""
        marked = await crud_message.mark_read(db, user_id=conversation_id, viewer_id=viewer_id)
        if marked:
            self.logger.info(f"Marked {marked} messages read in {conversation_id}")
        return await crud_message.conversation(db, user_id=conversation_id)

    async def conversations(self, db: AsyncSession, *, viewer_id: UUID) -> List[ConversationSummary]:
        """Admin inbox: one row per user with the last message and unread count."""
        latest = await crud_message.latest_per_conversation(db)
        if not latest:
            return []
        unread = await crud_message.unread_summary(db, viewer_id=viewer_id)
        user_ids = [m.user_id for m in latest]
        result = await db.execute(select(User).where(User.id.in_(user_ids)))
        users = {u.id: u for u in result.scalars().all()}

        summaries = []
        for m in latest:
            owner: Optional[User] = users.get(m.user_id)
            summaries.append(
                ConversationSummary(
                    user_id=m.user_id,
                    email=owner.email if owner else None,
                    full_name=owner.full_name if owner else None,
                    avatar_url=owner.avatar_url if owner else None,
                    last_message=m.content,
                    last_message_at=m.created_at,
                    unread_count=unread.get(m.user_id, 0),
                )
            )
        return summaries


chat_service = ChatService()
