from typing import Optional
from uuid import UUID
from datetime import datetime

from pydantic import Field

from .base import BaseSchema, BaseResponseSchema
from .enums import PlanStatus


# in
class PlanPriceBase(BaseSchema):
    country: str
    duration_days: int = Field(gt=0)
    price: float = Field(ge=0)
    activation_fee: Optional[float] = Field(default=None, ge=0)
    currency: str = "USD"


class PlanPriceCreate(PlanPriceBase):
    pass


class PlanPriceUpdate(BaseSchema):
    country: Optional[str] = None
    duration_days: Optional[int] = Field(default=None, gt=0)
    price: Optional[float] = Field(default=None, ge=0)
    activation_fee: Optional[float] = Field(default=None, ge=0)
    currency: Optional[str] = None


# out
class PlanPriceResponse(PlanPriceBase, BaseResponseSchema):
    plan_id: UUID


class PlanBase(BaseSchema):
    name: str
    slug: str
    description: Optional[str] = None
    benefits: list[str] = []
    requires_activation: bool = False
    is_active: bool = True
    max_predictions_per_day: Optional[int] = None


class PlanCreate(PlanBase):
    prices: list[PlanPriceCreate] = []


class PlanUpdate(BaseSchema):
    name: Optional[str] = None
    description: Optional[str] = None
    benefits: Optional[list[str]] = None
    requires_activation: Optional[bool] = None
    is_active: Optional[bool] = None
    max_predictions_per_day: Optional[int] = None


class PlanResponse(PlanBase, BaseResponseSchema):
    prices: list[PlanPriceResponse] = []


class ResolvedPriceResponse(BaseSchema):
    """Price selected for a plan, duration and country, with its display symbol."""
    plan_id: UUID
    plan_slug: str
    duration_days: int
    country: str
    price: float
    activation_fee: Optional[float] = None
    currency: str
    currency_symbol: str


# Subscriptions
class SubscriptionResponse(BaseResponseSchema):
    user_id: UUID
    plan_id: UUID
    plan_status: PlanStatus
    subscription_fee_paid: bool
    activation_fee_paid: bool
    start_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None


class SubscriptionDetail(SubscriptionResponse):
    """Subscription with its plan and read-time expiry view."""
    plan_name: str
    plan_slug: str
    effective_status: PlanStatus
    seconds_remaining: Optional[int] = None


class GrantSubscriptionRequest(BaseSchema):
    """Admin grant of a plan to a user."""
    user_id: UUID
    plan_id: UUID
    duration_days: int = Field(default=30, gt=0)


class ExpireOverdueResponse(BaseSchema):
    expired: int
