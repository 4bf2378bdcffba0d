"""
Subscription status transitions.

inactive -> pending -> {active, pending_activation} -> {expired, inactive}
pending_activation -> active once the activation fee is paid.

Expiry is a read-time comparison: nothing flips a stored row to `expired`
except the admin-triggered sweep in the subscriptions endpoints.
"""
import logging
from datetime import datetime
from typing import Optional

from fastapi import HTTPException

from predictsafe.core.config import settings
from predictsafe.models.payment import Transaction
from predictsafe.models.plan import Plan, UserSubscription
from predictsafe.schemas.enums import PaymentType, PlanStatus, TransactionStatus
from predictsafe.utils.dates import add_days, utcnow

logger = logging.getLogger(__name__)


def duration_from_metadata(transaction: Transaction, default: Optional[int] = None) -> int:
    """Duration a subscription payment bought, as recorded at checkout."""
    fallback = default or settings.DEFAULT_SUBSCRIPTION_DURATION_DAYS
    raw = (transaction.payment_metadata or {}).get("duration_days")
    try:
        days = int(raw)
    except (TypeError, ValueError):
        return fallback
    return days if days > 0 else fallback


def _activate(subscription: UserSubscription, now: datetime, days: int) -> None:
    subscription.plan_status = PlanStatus.ACTIVE.value
    subscription.start_date = now
    subscription.expiry_date = add_days(now, days)


def apply_completed_transaction(
    subscription: UserSubscription,
    plan: Plan,
    transaction: Transaction,
    now: Optional[datetime] = None,
) -> UserSubscription:
    """Move a subscription forward after its payment completed."""
    now = now or utcnow()

    if transaction.payment_type == PaymentType.ACTIVATION.value:
        if subscription.plan_status != PlanStatus.PENDING_ACTIVATION.value:
            raise HTTPException(
                status_code=409,
                detail="Subscription is not awaiting activation"
            )
        subscription.activation_fee_paid = True
        _activate(subscription, now, settings.DEFAULT_ACTIVATION_DURATION_DAYS)
        logger.info(f"Subscription {subscription.id} activated after activation fee")
        return subscription

    subscription.subscription_fee_paid = True
    if plan.requires_activation:
        subscription.plan_status = PlanStatus.PENDING_ACTIVATION.value
        subscription.start_date = None
        subscription.expiry_date = None
        logger.info(f"Subscription {subscription.id} awaiting activation fee for plan {plan.slug}")
    else:
        _activate(subscription, now, duration_from_metadata(transaction))
        logger.info(f"Subscription {subscription.id} active until {subscription.expiry_date}")
    return subscription


def apply_rejected_transaction(subscription: Optional[UserSubscription], transaction: Transaction) -> None:
    """Mark a payment failed and withdraw what it would have paid for."""
    transaction.status = TransactionStatus.FAILED.value
    if subscription is None:
        return
    if transaction.payment_type == PaymentType.ACTIVATION.value:
        subscription.activation_fee_paid = False
    else:
        subscription.plan_status = PlanStatus.INACTIVE.value
        subscription.subscription_fee_paid = False


def deactivate(subscription: UserSubscription) -> UserSubscription:
    """Admin switch-off. Dates and transactions are left alone."""
    subscription.plan_status = PlanStatus.INACTIVE.value
    return subscription


def reactivate(subscription: UserSubscription, plan: Plan) -> UserSubscription:
    """Admin switch-on. Re-stamps the paid flags; dates are not touched."""
    subscription.plan_status = PlanStatus.ACTIVE.value
    subscription.subscription_fee_paid = True
    if plan.requires_activation:
        subscription.activation_fee_paid = True
    return subscription


def grant(subscription: UserSubscription, days: int, now: Optional[datetime] = None) -> UserSubscription:
    """Admin-granted subscription, paid in full."""
    subscription.subscription_fee_paid = True
    subscription.activation_fee_paid = True
    _activate(subscription, now or utcnow(), days)
    return subscription


def activate_correct_score(subscription: UserSubscription, now: Optional[datetime] = None) -> UserSubscription:
    subscription.activation_fee_paid = True
    _activate(subscription, now or utcnow(), settings.CORRECT_SCORE_ACTIVATION_DAYS)
    return subscription


def is_expired(subscription: UserSubscription, now: Optional[datetime] = None) -> bool:
    if subscription.expiry_date is None:
        return False
    return subscription.expiry_date <= (now or utcnow())


def effective_status(subscription: UserSubscription, now: Optional[datetime] = None) -> PlanStatus:
    """Stored status, reporting active rows past their expiry as expired."""
    status = PlanStatus(subscription.plan_status)
    if status == PlanStatus.ACTIVE and is_expired(subscription, now):
        return PlanStatus.EXPIRED
    return status


def has_access(subscription: Optional[UserSubscription], now: Optional[datetime] = None) -> bool:
    if subscription is None:
        return False
    return effective_status(subscription, now) == PlanStatus.ACTIVE


def seconds_remaining(subscription: UserSubscription, now: Optional[datetime] = None) -> Optional[int]:
    if subscription.expiry_date is None:
        return None
    remaining = (subscription.expiry_date - (now or utcnow())).total_seconds()
    return max(0, int(remaining))
