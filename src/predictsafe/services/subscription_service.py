"""
Admin management of subscriptions and the access checks built on them.
"""
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from predictsafe.crud.crud_plan import plan as crud_plan
from predictsafe.crud.crud_subscription import subscription as crud_subscription
from predictsafe.crud.crud_user import user as crud_user
from predictsafe.models.core import User
from predictsafe.models.plan import UserSubscription
from predictsafe.schemas.enums import PlanStatus, PlanType, SubscriptionEvent
from predictsafe.schemas.plan import GrantSubscriptionRequest, SubscriptionDetail
from predictsafe.services import entitlement, notification_service
from predictsafe.utils.dates import utcnow

logger = logging.getLogger(__name__)

CORRECT_SCORE_SLUG = PlanType.CORRECT_SCORE.slug


def describe(subscription: UserSubscription, now: Optional[datetime] = None) -> SubscriptionDetail:
    now = now or utcnow()
    plan = subscription.plan
    return SubscriptionDetail(
        id=subscription.id,
        created_at=subscription.created_at,
        updated_at=subscription.updated_at,
        user_id=subscription.user_id,
        plan_id=subscription.plan_id,
        plan_status=PlanStatus(subscription.plan_status),
        subscription_fee_paid=subscription.subscription_fee_paid,
        activation_fee_paid=subscription.activation_fee_paid,
        start_date=subscription.start_date,
        expiry_date=subscription.expiry_date,
        plan_name=plan.name if plan else "",
        plan_slug=plan.slug if plan else "",
        effective_status=entitlement.effective_status(subscription, now),
        seconds_remaining=entitlement.seconds_remaining(subscription, now),
    )


async def can_view(db: AsyncSession, user: Optional[User], plan_type: PlanType) -> bool:
    """Free content is public; everything else needs a live subscription or admin."""
    if plan_type == PlanType.FREE:
        return True
    if user is None:
        return False
    if user.is_admin:
        return True
    plan = await crud_plan.get_by_slug(db, slug=plan_type.slug)
    if plan is None:
        return False
    subscription = await crud_subscription.get_for(db, user_id=user.id, plan_id=plan.id)
    return entitlement.has_access(subscription)


async def get_or_404(db: AsyncSession, subscription_id) -> UserSubscription:
    subscription = await crud_subscription.get(db, id=subscription_id)
    if not subscription:
        raise HTTPException(status_code=404, detail="Subscription not found")
    return subscription


async def grant(db: AsyncSession, request: GrantSubscriptionRequest) -> UserSubscription:
    user = await crud_user.get(db, id=request.user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    plan = await crud_plan.get(db, id=request.plan_id)
    if not plan:
        raise HTTPException(status_code=404, detail="Plan not found")
    if await crud_subscription.get_for(db, user_id=user.id, plan_id=plan.id):
        raise HTTPException(status_code=400, detail="User already has a subscription to this plan")

    subscription = await crud_subscription.create(
        db, obj_in={"user_id": user.id, "plan_id": plan.id}, commit=False
    )
    entitlement.grant(subscription, request.duration_days)
    await db.commit()
    await db.refresh(subscription)
    logger.info(f"Granted {plan.slug} to {user.email} for {request.duration_days} days")

    await notification_service.notify_subscription_event(db, user, plan.name, SubscriptionEvent.CONFIRMED)
    return subscription


async def deactivate(db: AsyncSession, subscription: UserSubscription) -> UserSubscription:
    if subscription.plan_status != PlanStatus.ACTIVE.value:
        raise HTTPException(status_code=400, detail="Only active subscriptions can be deactivated")
    entitlement.deactivate(subscription)
    await db.commit()
    await db.refresh(subscription)
    logger.info(f"Subscription {subscription.id} deactivated")

    if subscription.user is not None:
        await notification_service.notify_subscription_event(
            db, subscription.user, subscription.plan.name, SubscriptionEvent.REMOVED
        )
    return subscription


async def reactivate(db: AsyncSession, subscription: UserSubscription) -> UserSubscription:
    if subscription.plan_status != PlanStatus.INACTIVE.value:
        raise HTTPException(status_code=400, detail="Only inactive subscriptions can be reactivated")
    entitlement.reactivate(subscription, subscription.plan)
    await db.commit()
    await db.refresh(subscription)
    logger.info(f"Subscription {subscription.id} reactivated")

    if subscription.user is not None:
        await notification_service.notify_subscription_event(
            db, subscription.user, subscription.plan.name, SubscriptionEvent.CONFIRMED
        )
    return subscription


async def activate_correct_score(db: AsyncSession, subscription: UserSubscription) -> UserSubscription:
    if subscription.plan is None or subscription.plan.slug != CORRECT_SCORE_SLUG:
        raise HTTPException(status_code=400, detail="Subscription is not for the correct score plan")
    entitlement.activate_correct_score(subscription)
    await db.commit()
    await db.refresh(subscription)
    logger.info(f"Correct score access opened on {subscription.id} until {subscription.expiry_date}")

    if subscription.user is not None:
        await notification_service.notify_subscription_event(
            db, subscription.user, subscription.plan.name, SubscriptionEvent.CONFIRMED
        )
    return subscription


async def expire_overdue(db: AsyncSession, now: Optional[datetime] = None) -> List[UserSubscription]:
    """Persist `expired` on active rows past their expiry and tell their owners."""
    now = now or utcnow()
    overdue = await crud_subscription.list_overdue(db, now=now)
    if not overdue:
        return []
    for subscription in overdue:
        subscription.plan_status = PlanStatus.EXPIRED.value
    await db.commit()
    logger.info(f"Expired {len(overdue)} overdue subscriptions")

    for subscription in overdue:
        if subscription.user is not None and subscription.plan is not None:
            await notification_service.notify_subscription_event(
                db, subscription.user, subscription.plan.name, SubscriptionEvent.EXPIRED
            )
    return overdue
