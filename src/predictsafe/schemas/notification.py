from typing import Annotated, Literal, Optional, Union
from uuid import UUID

from pydantic import EmailStr, Field

from .base import BaseSchema, BaseResponseSchema, CamelSchema
from .enums import NotificationType, SubscriptionEvent


class NotificationResponse(BaseResponseSchema):
    user_id: UUID
    type: NotificationType
    title: str
    message: str
    read: bool


# Typed payloads for POST /notifications/create, keyed by `type`
class SubscriptionEventPayload(CamelSchema):
    type: Literal["subscription_event"]
    user_id: UUID = Field(alias="userId")
    plan_name: str = Field(alias="planName")
    event: SubscriptionEvent


class AdminNewSubscriptionPayload(CamelSchema):
    type: Literal["admin_new_subscription"]
    plan_name: str = Field(alias="planName")
    user_email: str = Field(alias="userEmail")
    user_name: Optional[str] = Field(default=None, alias="userName")


CreateNotificationPayload = Annotated[
    Union[SubscriptionEventPayload, AdminNewSubscriptionPayload],
    Field(discriminator="type"),
]


class SendEmailPayload(CamelSchema):
    type: str
    user_id: Optional[UUID] = Field(default=None, alias="userId")
    email: Optional[EmailStr] = None
    plan_name: Optional[str] = Field(default=None, alias="planName")
    reason: Optional[str] = None


class NotifyPredictionUpdatePayload(CamelSchema):
    plan_type: str = Field(alias="planType")


class NotifyResponse(BaseSchema):
    success: bool
    notified: int = 0
    message: Optional[str] = None
