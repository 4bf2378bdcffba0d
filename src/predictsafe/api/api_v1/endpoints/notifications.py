import logging
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import TypeAdapter, ValidationError

from predictsafe.api.auth_deps import CurrentSession, SessionContext
from predictsafe.core.pbac import require_permission
from predictsafe.crud.crud_notification import notification as crud_notification
from predictsafe.crud.crud_plan import plan as crud_plan
from predictsafe.crud.crud_user import user as crud_user
from predictsafe.db.session import SessionDep
from predictsafe.schemas import (
    CountResponse, CreateNotificationPayload, MessageResponse, NotificationResponse, NotificationType,
    NotifyPredictionUpdatePayload, NotifyResponse, SendEmailPayload, SubscriptionEventPayload,
)
from predictsafe.services import notification_service

logger = logging.getLogger(__name__)
router = APIRouter()

create_payload_adapter = TypeAdapter(CreateNotificationPayload)

CREATE_TYPES = {"subscription_event", "admin_new_subscription"}

EMAIL_TYPES = {
    NotificationType.PREDICTION_DROPPED,
    NotificationType.SUBSCRIPTION_CONFIRMED,
    NotificationType.SUBSCRIPTION_EXPIRED,
    NotificationType.SUBSCRIPTION_REMOVED,
    NotificationType.PAYMENT_REJECTED,
    NotificationType.PAYMENT_APPROVED,
}


@router.get("", response_model=list[NotificationResponse])
async def read_notifications(db: SessionDep, session: CurrentSession, unread_only: bool = False, limit: int = 50):
    return await crud_notification.list_for_user(db, user_id=session.user_id, unread_only=unread_only, limit=limit)


@router.get("/unread-count", response_model=CountResponse)
async def count_unread(db: SessionDep, session: CurrentSession):
    return CountResponse(count=await crud_notification.count_unread(db, user_id=session.user_id))


@router.post("/read-all", response_model=CountResponse)
async def mark_all_read(db: SessionDep, session: CurrentSession):
    return CountResponse(count=await crud_notification.mark_all_read(db, user_id=session.user_id))


@router.post("/create", response_model=NotifyResponse)
async def create_notification(
    db: SessionDep,
    session: CurrentSession,
    payload: dict[str, Any] = Body(...),
):
    """
    Raise a notification from a client flow.

    `subscription_event` notifies a user of a confirmed, expired or removed
    subscription. `admin_new_subscription` tells the admin about a new
    subscriber.
    """
    if payload.get("type") not in CREATE_TYPES:
        raise HTTPException(status_code=400, detail="Invalid notification type")
    try:
        data = create_payload_adapter.validate_python(payload)
    except ValidationError as e:
        logger.warning(f"Rejected notification payload: {e.errors()}")
        raise HTTPException(status_code=400, detail="Missing required fields")

    if isinstance(data, SubscriptionEventPayload):
        if data.user_id != session.user_id and not session.is_admin:
            raise HTTPException(status_code=403, detail="Permission denied")
        user = await crud_user.get(db, id=data.user_id)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        row = await notification_service.notify_subscription_event(db, user, data.plan_name, data.event)
    else:
        row = await notification_service.notify_admin_new_subscription(
            db, data.plan_name, data.user_email, data.user_name
        )

    if row is None:
        return NotifyResponse(success=False, message="Notification could not be created")
    return NotifyResponse(success=True, notified=1)


@router.post("/send-email", response_model=NotifyResponse)
async def send_email(
    payload: SendEmailPayload,
    db: SessionDep,
    session: Annotated[SessionContext, Depends(require_permission("notify", "notifications"))],
):
    """Send one templated email without storing a notification."""
    try:
        email_type = NotificationType(payload.type)
    except ValueError:
        email_type = None
    if email_type not in EMAIL_TYPES:
        raise HTTPException(status_code=400, detail="Invalid email type")
    if not payload.plan_name:
        raise HTTPException(status_code=400, detail="planName is required")

    user = None
    if payload.user_id:
        user = await crud_user.get(db, id=payload.user_id)
    if user is None and payload.email:
        user = await crud_user.get_by_email(db, email=payload.email)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")

    email = notification_service.render_email(email_type, payload.plan_name, reason=payload.reason)
    sent = await notification_service.send_notification_email(user.email, email)
    return NotifyResponse(success=sent, notified=1 if sent else 0)


@router.post("/notify-prediction-update", response_model=NotifyResponse)
async def notify_prediction_update(
    payload: NotifyPredictionUpdatePayload,
    db: SessionDep,
    session: Annotated[SessionContext, Depends(require_permission("notify", "notifications"))],
):
    """Tell the active subscribers of a plan that its predictions were updated."""
    slug = payload.plan_type.replace("_", "-")
    plan = await crud_plan.get_by_slug(db, slug=slug)
    if not plan:
        raise HTTPException(status_code=404, detail="Plan not found")
    notified = await notification_service.notify_prediction_dropped(db, plan)
    return NotifyResponse(success=True, notified=notified)


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(notification_id: UUID, db: SessionDep, session: CurrentSession):
    row = await crud_notification.get(db, id=notification_id)
    if not row or row.user_id != session.user_id:
        raise HTTPException(status_code=404, detail="Notification not found")
    return await crud_notification.update(db, db_obj=row, obj_in={"read": True})
