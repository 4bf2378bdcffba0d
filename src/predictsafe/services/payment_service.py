"""
Manual payment flow.

Checkout records a pending transaction and a pending subscription. An admin
(or the simulated gateway) later completes or rejects the transaction. The
transaction write and the subscription update are separate commits; if the
second one fails the transaction stays completed and the error is logged and
surfaced to the caller.
"""
import logging
import time
from datetime import datetime
from typing import Optional, Tuple

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from predictsafe.crud.crud_plan import plan as crud_plan
from predictsafe.crud.crud_subscription import subscription as crud_subscription
from predictsafe.crud.crud_transaction import payment_method as crud_payment_method
from predictsafe.crud.crud_transaction import transaction as crud_transaction
from predictsafe.models.core import User
from predictsafe.models.payment import PaymentMethod, Transaction
from predictsafe.models.plan import Plan, PlanPrice, UserSubscription
from predictsafe.schemas.enums import PaymentType, PlanStatus, TransactionStatus
from predictsafe.schemas.payment import ActivationPaymentRequest, CheckoutRequest
from predictsafe.services import entitlement, notification_service
from predictsafe.services.pricing import normalize_country, resolve_price
from predictsafe.utils.dates import utcnow

logger = logging.getLogger(__name__)


async def _active_plan(db: AsyncSession, plan_id) -> Plan:
    plan = await crud_plan.get(db, id=plan_id)
    if not plan:
        raise HTTPException(status_code=404, detail="Plan not found")
    if not plan.is_active:
        raise HTTPException(status_code=400, detail="Plan is not available")
    return plan


async def _active_method(db: AsyncSession, method_id) -> PaymentMethod:
    method = await crud_payment_method.get(db, id=method_id)
    if not method or not method.is_active:
        raise HTTPException(status_code=404, detail="Payment method not found")
    return method


def _metadata(method: PaymentMethod, proof_url: str, **extra) -> dict:
    data = {
        "payment_proof_url": proof_url,
        "payment_method_id": str(method.id),
        "payment_method_name": method.name,
        "payment_method_type": method.type,
    }
    data.update(extra)
    return data


def activation_price(plan: Plan, country: str) -> Optional[PlanPrice]:
    """Price row carrying the activation fee for a user's market."""
    candidates = [p for p in plan.prices if p.activation_fee]
    if not candidates:
        return None
    shortest = min(p.duration_days for p in candidates)
    return resolve_price(candidates, shortest, country)


async def checkout(db: AsyncSession, user: User, request: CheckoutRequest) -> Tuple[Transaction, UserSubscription]:
    """Record a manual subscription payment awaiting admin review."""
    plan = await _active_plan(db, request.plan_id)
    method = await _active_method(db, request.payment_method_id)

    country = normalize_country(request.country or user.country)
    price = resolve_price(plan.prices, request.duration_days, country)
    if price is None:
        raise HTTPException(status_code=404, detail="No price available for this duration")

    subscription = await crud_subscription.get_for(db, user_id=user.id, plan_id=plan.id)
    if subscription is not None and entitlement.has_access(subscription):
        raise HTTPException(status_code=400, detail="You already have an active subscription to this plan")

    transaction = await crud_transaction.create(
        db,
        obj_in={
            "user_id": user.id,
            "plan_id": plan.id,
            "amount": price.price,
            "currency": price.currency,
            "payment_gateway": method.name,
            "payment_type": PaymentType.SUBSCRIPTION.value,
            "status": TransactionStatus.PENDING.value,
            "payment_metadata": _metadata(method, request.payment_proof_url, duration_days=request.duration_days),
        },
        commit=False,
    )

    if subscription is None:
        subscription = await crud_subscription.create(
            db, obj_in={"user_id": user.id, "plan_id": plan.id}, commit=False
        )
    subscription.plan_status = PlanStatus.PENDING.value
    subscription.subscription_fee_paid = False
    await db.flush()

    transaction.subscription_id = subscription.id
    await db.commit()
    await db.refresh(transaction)
    await db.refresh(subscription)
    logger.info(f"Checkout {transaction.id}: {user.email} -> {plan.slug} {price.currency} {price.price}")

    await notification_service.notify_subscription_created(db, user, plan)
    await notification_service.notify_admin_new_payment(db, user, plan, price.price, price.currency)
    return transaction, subscription


async def submit_activation(
    db: AsyncSession, user: User, request: ActivationPaymentRequest
) -> Transaction:
    """Record the activation-fee payment of a subscription awaiting activation."""
    subscription = await crud_subscription.get(db, id=request.subscription_id)
    if not subscription or subscription.user_id != user.id:
        raise HTTPException(status_code=404, detail="Subscription not found")
    if subscription.plan_status != PlanStatus.PENDING_ACTIVATION.value:
        raise HTTPException(status_code=400, detail="Subscription is not awaiting activation")

    plan = subscription.plan
    method = await _active_method(db, request.payment_method_id)
    price = activation_price(plan, normalize_country(request.country or user.country))
    if price is None:
        raise HTTPException(status_code=400, detail="Plan has no activation fee")

    transaction = await crud_transaction.create(
        db,
        obj_in={
            "user_id": user.id,
            "plan_id": plan.id,
            "subscription_id": subscription.id,
            "amount": price.activation_fee,
            "currency": price.currency,
            "payment_gateway": method.name,
            "payment_type": PaymentType.ACTIVATION.value,
            "status": TransactionStatus.PENDING.value,
            "payment_metadata": _metadata(method, request.payment_proof_url),
        },
    )
    logger.info(f"Activation payment {transaction.id} submitted for subscription {subscription.id}")
    await notification_service.notify_admin_new_payment(db, user, plan, price.activation_fee, price.currency)
    return transaction


async def find_subscription(db: AsyncSession, transaction: Transaction) -> Optional[UserSubscription]:
    """Subscription a transaction pays for.

    Linked row first, then the newest (user, plan) row still waiting on a
    payment, then the newest (user, plan) row of any status.
    """
    if transaction.subscription_id:
        linked = await crud_subscription.get(db, id=transaction.subscription_id)
        if linked:
            return linked
    if not transaction.plan_id:
        return None
    waiting = await crud_subscription.latest_for(
        db,
        user_id=transaction.user_id,
        plan_id=transaction.plan_id,
        statuses=[PlanStatus.PENDING, PlanStatus.PENDING_ACTIVATION],
    )
    if waiting:
        return waiting
    return await crud_subscription.latest_for(db, user_id=transaction.user_id, plan_id=transaction.plan_id)


def _ensure_pending(transaction: Transaction) -> None:
    if transaction.status != TransactionStatus.PENDING.value:
        raise HTTPException(status_code=400, detail=f"Transaction is already {transaction.status}")


async def complete_transaction(
    db: AsyncSession,
    transaction: Transaction,
    *,
    now: Optional[datetime] = None,
    gateway_transaction_id: Optional[str] = None,
) -> UserSubscription:
    """Mark a payment completed, then move its subscription forward."""
    _ensure_pending(transaction)
    plan = transaction.plan or await crud_plan.get(db, id=transaction.plan_id)
    if plan is None:
        raise HTTPException(status_code=400, detail="Transaction has no plan")

    subscription = await find_subscription(db, transaction)
    is_activation = transaction.payment_type == PaymentType.ACTIVATION.value
    if is_activation and (
        subscription is None or subscription.plan_status != PlanStatus.PENDING_ACTIVATION.value
    ):
        raise HTTPException(status_code=409, detail="Subscription is not awaiting activation")

    transaction_id = transaction.id
    transaction.status = TransactionStatus.COMPLETED.value
    if gateway_transaction_id:
        transaction.gateway_transaction_id = gateway_transaction_id
    await db.commit()
    logger.info(f"Transaction {transaction_id} completed")

    try:
        if subscription is None:
            subscription = await crud_subscription.create(
                db, obj_in={"user_id": transaction.user_id, "plan_id": plan.id}, commit=False
            )
        entitlement.apply_completed_transaction(subscription, plan, transaction, now)
        if transaction.subscription_id is None:
            await db.flush()
            transaction.subscription_id = subscription.id
        await db.commit()
        await db.refresh(subscription)
    except Exception as e:
        await db.rollback()
        logger.error(f"Transaction {transaction_id} completed but subscription update failed: {e}")
        raise HTTPException(status_code=500, detail="Payment recorded but subscription update failed")

    user = transaction.user
    if user is not None:
        payment_type = PaymentType.ACTIVATION if is_activation else PaymentType.SUBSCRIPTION
        await notification_service.notify_payment_approved(db, user, plan, payment_type)
    return subscription


async def reject_transaction(db: AsyncSession, transaction: Transaction, reason: Optional[str] = None) -> Transaction:
    """Fail a payment and withdraw what it would have paid for."""
    _ensure_pending(transaction)
    subscription = await find_subscription(db, transaction)
    entitlement.apply_rejected_transaction(subscription, transaction)
    if reason:
        transaction.payment_metadata = {**(transaction.payment_metadata or {}), "rejection_reason": reason}
    await db.commit()
    await db.refresh(transaction)
    logger.info(f"Transaction {transaction.id} rejected")

    plan = transaction.plan
    if transaction.user is not None and plan is not None:
        await notification_service.notify_payment_rejected(db, transaction.user, plan, reason)
    return transaction


async def simulate_gateway_completion(db: AsyncSession, transaction: Transaction) -> UserSubscription:
    """Stand-in for a gateway callback, enabled only outside production."""
    reference = f"simulated_{int(time.time() * 1000)}"
    return await complete_transaction(db, transaction, gateway_transaction_id=reference)
