from datetime import timedelta

from fastapi import APIRouter

from predictsafe.api.auth_deps import AdminSession
from predictsafe.crud.crud_message import message as crud_message
from predictsafe.crud.crud_notification import notification as crud_notification
from predictsafe.crud.crud_subscription import subscription as crud_subscription
from predictsafe.crud.crud_transaction import transaction as crud_transaction
from predictsafe.crud.crud_user import user as crud_user
from predictsafe.db.session import SessionDep
from predictsafe.schemas import ActiveSubscriptionCountdown, BadgeCounts, DashboardStats, PlanStatus
from predictsafe.utils.dates import start_of_day, utcnow

router = APIRouter()


@router.get("/badge-counts", response_model=BadgeCounts)
async def badge_counts(db: SessionDep, session: AdminSession):
    """Counters for the admin sidebar, polled by the dashboard."""
    return BadgeCounts(
        notifications=await crud_notification.count_unread(db, user_id=session.user_id),
        transactions=await crud_transaction.count_pending(db),
        activations=await crud_subscription.count_by_status(db, status=PlanStatus.PENDING_ACTIVATION),
        messages=await crud_message.count_unread_for_viewer(db, viewer_id=session.user_id),
    )


@router.get("/stats", response_model=DashboardStats)
async def dashboard_stats(db: SessionDep, session: AdminSession):
    now = utcnow()
    expiring = await crud_subscription.list_expiring(db, now=now, limit=10)

    return DashboardStats(
        active_subscribers=await crud_subscription.count_live_subscribers(db, now=now),
        pending_activations=await crud_subscription.count_by_status(db, status=PlanStatus.PENDING_ACTIVATION),
        new_signups=await crud_user.count_signups_since(db, since=now - timedelta(hours=24)),
        daily_revenue=await crud_transaction.revenue_since(db, since=start_of_day(now)),
        recent_transactions=await crud_transaction.list_filtered(db, limit=10),
        expiring_subscriptions=[
            ActiveSubscriptionCountdown(
                subscription_id=sub.id,
                user_email=sub.user.email if sub.user else None,
                plan_name=sub.plan.name if sub.plan else "",
                expiry_date=sub.expiry_date,
            )
            for sub in expiring
        ],
    )
