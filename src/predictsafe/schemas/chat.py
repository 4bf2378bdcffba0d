from typing import Optional
from uuid import UUID
from datetime import datetime

from pydantic import Field

from .base import BaseSchema, BaseResponseSchema


class MessageCreate(BaseSchema):
    content: str = Field(min_length=1, max_length=4000)


class MessageResponse(BaseResponseSchema):
    user_id: UUID
    sender_id: UUID
    content: str
    read: bool


class ConversationSummary(BaseSchema):
    """One row of the admin inbox."""
    user_id: UUID
    email: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    last_message: Optional[str] = None
    last_message_at: Optional[datetime] = None
    unread_count: int = 0
