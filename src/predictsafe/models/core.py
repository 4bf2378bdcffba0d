from sqlalchemy import Boolean, Column, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import relationship

from .base import Base


class User(Base):
    """Application profile for a Supabase-authenticated user."""
    __tablename__ = "users"

    email = Column(String, nullable=False, unique=True)
    full_name = Column(String, nullable=True)
    country = Column(String, nullable=True)
    avatar_url = Column(String, nullable=True)
    is_admin = Column(Boolean, default=False, nullable=False)

    # Relationships
    subscriptions = relationship("UserSubscription", back_populates="user", lazy="noload")
    notifications = relationship("Notification", back_populates="user", lazy="noload")

    @property
    def display_name(self) -> str:
        return self.full_name or self.email


class Notification(Base):
    """In-app notification row."""
    __tablename__ = "notifications"

    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String, nullable=False)
    title = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    read = Column(Boolean, default=False, nullable=False)

    # Relationships
    user = relationship("User", back_populates="notifications")


class Message(Base):
    """Chat message. `user_id` owns the conversation, `sender_id` wrote the row."""
    __tablename__ = "messages"

    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    sender_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False)
    read = Column(Boolean, default=False, nullable=False)
