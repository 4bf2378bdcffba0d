from typing import Optional
from uuid import UUID
from datetime import datetime

from .base import BaseSchema
from .payment import TransactionResponse
from .plan import SubscriptionDetail
from .user import UserResponse


class BadgeCounts(BaseSchema):
    """Counters polled by the admin sidebar."""
    notifications: int = 0
    transactions: int = 0
    activations: int = 0
    messages: int = 0


class ActiveSubscriptionCountdown(BaseSchema):
    subscription_id: UUID
    user_email: Optional[str] = None
    plan_name: str
    expiry_date: Optional[datetime] = None


class DashboardStats(BaseSchema):
    active_subscribers: int
    pending_activations: int
    new_signups: int
    daily_revenue: float
    recent_transactions: list[TransactionResponse]
    expiring_subscriptions: list[ActiveSubscriptionCountdown] = []


class UserWithSubscriptions(UserResponse):
    subscriptions: list[SubscriptionDetail] = []
