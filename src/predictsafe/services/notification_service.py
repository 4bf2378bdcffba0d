"""
In-app notifications with a matching email.

Notifications are a secondary step of the flows that raise them: failures are
logged and reported as a falsy return, never raised to the caller.
"""
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from predictsafe.crud.crud_notification import notification as crud_notification
from predictsafe.crud.crud_subscription import subscription as crud_subscription
from predictsafe.crud.crud_user import user as crud_user
from predictsafe.models.core import Notification, User
from predictsafe.models.plan import Plan
from predictsafe.schemas.enums import NotificationType, PaymentType, SubscriptionEvent
from predictsafe.services import email_templates
from predictsafe.services.email_service import email_service
from predictsafe.services.email_templates import RenderedEmail
from predictsafe.services.entitlement import has_access

logger = logging.getLogger(__name__)

EVENT_TYPES = {
    SubscriptionEvent.CONFIRMED: NotificationType.SUBSCRIPTION_CONFIRMED,
    SubscriptionEvent.EXPIRED: NotificationType.SUBSCRIPTION_EXPIRED,
    SubscriptionEvent.REMOVED: NotificationType.SUBSCRIPTION_REMOVED,
}

EVENT_TITLES = {
    SubscriptionEvent.CONFIRMED: "Subscription Confirmed",
    SubscriptionEvent.EXPIRED: "Subscription Expired",
    SubscriptionEvent.REMOVED: "Subscription Removed",
}


def event_message(event: SubscriptionEvent, plan_name: str) -> str:
    if event == SubscriptionEvent.CONFIRMED:
        return f"Your subscription for {plan_name} has been confirmed!"
    if event == SubscriptionEvent.EXPIRED:
        return f"Your subscription for {plan_name} has expired."
    return f"Your subscription for {plan_name} has been removed. Please renew your subscription to get back on track."


def render_email(
    type: NotificationType,
    plan_name: Optional[str] = None,
    *,
    user_name: Optional[str] = None,
    user_email: Optional[str] = None,
    reason: Optional[str] = None,
    amount: Optional[float] = None,
    currency: Optional[str] = None,
) -> Optional[RenderedEmail]:
    """Email matching a notification type, or None when the type has no template."""
    if type == NotificationType.USER_WELCOME:
        return email_templates.welcome(user_name)
    if not plan_name:
        return None
    if type == NotificationType.PREDICTION_DROPPED:
        return email_templates.prediction_dropped(plan_name)
    if type == NotificationType.SUBSCRIPTION_CONFIRMED:
        return email_templates.subscription_confirmed(plan_name)
    if type == NotificationType.SUBSCRIPTION_EXPIRED:
        return email_templates.subscription_expired(plan_name)
    if type == NotificationType.SUBSCRIPTION_REMOVED:
        return email_templates.subscription_removed(plan_name)
    if type == NotificationType.SUBSCRIPTION_CREATED:
        return email_templates.subscription_created(plan_name)
    if type == NotificationType.PAYMENT_APPROVED:
        return email_templates.payment_approved(plan_name)
    if type == NotificationType.PAYMENT_REJECTED:
        return email_templates.payment_rejected(plan_name, reason)
    if type == NotificationType.ADMIN_NEW_SUBSCRIPTION and user_email:
        return email_templates.admin_new_subscription(plan_name, user_email, user_name)
    if type == NotificationType.ADMIN_NEW_PAYMENT and user_email:
        return email_templates.admin_new_payment(plan_name, user_email, amount or 0, currency or "", user_name)
    return None


async def send_notification_email(to_email: str, email: Optional[RenderedEmail]) -> bool:
    if email is None:
        return False
    try:
        return await email_service.send(to_email, email)
    except Exception as e:
        logger.error(f"Error sending notification email to {to_email}: {e}")
        return False


async def create_notification(
    db: AsyncSession,
    user: User,
    type: NotificationType,
    title: str,
    message: str,
    *,
    send_email: bool = True,
    plan_name: Optional[str] = None,
    **email_context,
) -> Optional[Notification]:
    """Store a notification for a user, then email them."""
    try:
        row = await crud_notification.create(
            db,
            obj_in={"user_id": user.id, "type": type.value, "title": title, "message": message, "read": False},
        )
    except Exception as e:
        await db.rollback()
        logger.error(f"Error creating {type.value} notification for {user.id}: {e}")
        return None

    if send_email:
        await send_notification_email(user.email, render_email(type, plan_name, **email_context))
    return row


async def notify_prediction_dropped(db: AsyncSession, plan: Plan) -> int:
    """Tell every active subscriber of a plan that new predictions are up."""
    notified = 0
    for sub in await crud_subscription.active_for_plan(db, plan_id=plan.id):
        if not has_access(sub) or sub.user is None:
            continue
        row = await create_notification(
            db,
            sub.user,
            NotificationType.PREDICTION_DROPPED,
            "New Predictions Available!",
            f"Predictions for {plan.name} have dropped!",
            plan_name=plan.name,
        )
        if row is not None:
            notified += 1
    logger.info(f"Notified {notified} subscribers of {plan.slug}")
    return notified


async def notify_subscription_event(
    db: AsyncSession, user: User, plan_name: str, event: SubscriptionEvent
) -> Optional[Notification]:
    return await create_notification(
        db,
        user,
        EVENT_TYPES[event],
        EVENT_TITLES[event],
        event_message(event, plan_name),
        plan_name=plan_name,
    )


async def notify_admin_new_subscription(
    db: AsyncSession, plan_name: str, user_email: str, user_name: Optional[str] = None
) -> Optional[Notification]:
    admin = await crud_user.get_first_admin(db)
    if not admin:
        logger.warning("No admin user found for notification")
        return None
    return await create_notification(
        db,
        admin,
        NotificationType.ADMIN_NEW_SUBSCRIPTION,
        "New Subscription",
        f"{user_name or user_email} has subscribed to {plan_name}",
        plan_name=plan_name,
        user_email=user_email,
        user_name=user_name,
    )


async def notify_admin_new_payment(
    db: AsyncSession, user: User, plan: Plan, amount: float, currency: str
) -> Optional[Notification]:
    admin = await crud_user.get_first_admin(db)
    if not admin:
        logger.warning("No admin user found for notification")
        return None
    return await create_notification(
        db,
        admin,
        NotificationType.ADMIN_NEW_PAYMENT,
        "New Payment Submitted",
        f"{user.full_name or 'A user'} ({user.email}) has submitted a payment proof for {plan.name}. "
        f"Amount: {currency} {amount}",
        plan_name=plan.name,
        user_email=user.email,
        user_name=user.full_name,
        amount=amount,
        currency=currency,
    )


async def notify_subscription_created(db: AsyncSession, user: User, plan: Plan) -> Optional[Notification]:
    return await create_notification(
        db,
        user,
        NotificationType.SUBSCRIPTION_CREATED,
        "Subscription Created",
        f"Your payment for {plan.name} has been submitted and is pending admin approval.",
        plan_name=plan.name,
    )


async def notify_payment_approved(
    db: AsyncSession, user: User, plan: Plan, payment_type: PaymentType
) -> Optional[Notification]:
    if payment_type == PaymentType.ACTIVATION:
        title = "Activation Fee Approved"
        message = f"Your activation fee for {plan.name} has been approved. Your subscription is now active!"
    elif plan.requires_activation:
        title = "Payment Approved"
        message = f"Your payment for {plan.name} has been approved. Please pay the activation fee to start your subscription."
    else:
        title = "Payment Approved"
        message = f"Your payment for {plan.name} has been approved. Your subscription is now active!"
    return await create_notification(
        db, user, NotificationType.PAYMENT_APPROVED, title, message, plan_name=plan.name
    )


async def notify_payment_rejected(
    db: AsyncSession, user: User, plan: Plan, reason: Optional[str] = None
) -> Optional[Notification]:
    if reason:
        message = (
            f"Your payment for {plan.name} has been rejected. Reason: {reason}. "
            "Please resubmit your payment with a valid proof."
        )
    else:
        message = f"Your payment for {plan.name} has been rejected. Please resubmit your payment with a valid proof."
    return await create_notification(
        db, user, NotificationType.PAYMENT_REJECTED, "Payment Rejected", message,
        plan_name=plan.name, reason=reason,
    )


async def notify_welcome(db: AsyncSession, user: User) -> Optional[Notification]:
    return await create_notification(
        db,
        user,
        NotificationType.USER_WELCOME,
        "Welcome to PredictSafe!",
        "Thank you for signing up. Explore our plans to start receiving premium predictions.",
        user_name=user.full_name,
    )
