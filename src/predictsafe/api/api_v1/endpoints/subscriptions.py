from uuid import UUID

from fastapi import APIRouter

from predictsafe.api.auth_deps import AdminSession, CurrentSession
from predictsafe.crud.crud_subscription import subscription as crud_subscription
from predictsafe.db.session import SessionDep
from predictsafe.schemas import ExpireOverdueResponse, GrantSubscriptionRequest, PlanStatus, SubscriptionDetail
from predictsafe.services import subscription_service
from predictsafe.utils.dates import utcnow

router = APIRouter()


@router.get("/me", response_model=list[SubscriptionDetail])
async def read_my_subscriptions(db: SessionDep, session: CurrentSession):
    """The caller's subscriptions with their read-time expiry view."""
    now = utcnow()
    rows = await crud_subscription.list_for_user(db, user_id=session.user_id)
    return [subscription_service.describe(sub, now) for sub in rows]


@router.get("", response_model=list[SubscriptionDetail])
async def read_subscriptions(
    db: SessionDep,
    session: AdminSession,
    status: PlanStatus = PlanStatus.ACTIVE,
    limit: int = 100,
):
    now = utcnow()
    rows = await crud_subscription.list_by_status(db, status=status, limit=limit)
    return [subscription_service.describe(sub, now) for sub in rows]


@router.post("/grant", response_model=SubscriptionDetail)
async def grant_subscription(request: GrantSubscriptionRequest, db: SessionDep, session: AdminSession):
    """Give a user a paid-up subscription without a payment."""
    sub = await subscription_service.grant(db, request)
    return subscription_service.describe(sub)


@router.post("/expire-overdue", response_model=ExpireOverdueResponse)
async def expire_overdue(db: SessionDep, session: AdminSession):
    """Persist `expired` on every active subscription past its expiry date."""
    expired = await subscription_service.expire_overdue(db)
    return ExpireOverdueResponse(expired=len(expired))


@router.post("/{subscription_id}/deactivate", response_model=SubscriptionDetail)
async def deactivate_subscription(subscription_id: UUID, db: SessionDep, session: AdminSession):
    sub = await subscription_service.get_or_404(db, subscription_id)
    sub = await subscription_service.deactivate(db, sub)
    return subscription_service.describe(sub)


@router.post("/{subscription_id}/reactivate", response_model=SubscriptionDetail)
async def reactivate_subscription(subscription_id: UUID, db: SessionDep, session: AdminSession):
    sub = await subscription_service.get_or_404(db, subscription_id)
    sub = await subscription_service.reactivate(db, sub)
    return subscription_service.describe(sub)


@router.post("/{subscription_id}/activate-correct-score", response_model=SubscriptionDetail)
async def activate_correct_score(subscription_id: UUID, db: SessionDep, session: AdminSession):
    sub = await subscription_service.get_or_404(db, subscription_id)
    sub = await subscription_service.activate_correct_score(db, sub)
    return subscription_service.describe(sub)
