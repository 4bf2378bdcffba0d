from typing import Any, Optional
from uuid import UUID

from pydantic import Field

from .base import BaseSchema, BaseResponseSchema
from .enums import PaymentMethodType, PaymentType, TransactionStatus


class PaymentMethodBase(BaseSchema):
    name: str
    type: PaymentMethodType
    currency: str
    details: dict[str, Any] = {}
    is_active: bool = True
    display_order: int = 0


class PaymentMethodCreate(PaymentMethodBase):
    pass


class PaymentMethodUpdate(BaseSchema):
    name: Optional[str] = None
    type: Optional[PaymentMethodType] = None
    currency: Optional[str] = None
    details: Optional[dict[str, Any]] = None
    is_active: Optional[bool] = None
    display_order: Optional[int] = None


class PaymentMethodResponse(PaymentMethodBase, BaseResponseSchema):
    pass


class TransactionResponse(BaseResponseSchema):
    user_id: UUID
    subscription_id: Optional[UUID] = None
    plan_id: Optional[UUID] = None
    amount: float
    currency: str
    payment_gateway: str
    payment_type: PaymentType
    status: TransactionStatus
    gateway_transaction_id: Optional[str] = None
    metadata: dict[str, Any] = Field(default={}, validation_alias="payment_metadata")


class CheckoutRequest(BaseSchema):
    """Manual payment submission: the user paid offline and uploaded proof."""
    plan_id: UUID
    duration_days: int = Field(gt=0)
    country: Optional[str] = None
    payment_method_id: UUID
    payment_proof_url: str


class ActivationPaymentRequest(BaseSchema):
    subscription_id: UUID
    payment_method_id: UUID
    payment_proof_url: str
    country: Optional[str] = None


class RejectTransactionRequest(BaseSchema):
    reason: Optional[str] = None


class CheckoutResponse(BaseSchema):
    transaction: TransactionResponse
    subscription_id: UUID
    message: str
