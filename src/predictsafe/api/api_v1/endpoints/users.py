from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from predictsafe.api.auth_deps import CurrentSession, SessionContext
from predictsafe.core.pbac import require_permission
from predictsafe.crud.crud_subscription import subscription as crud_subscription
from predictsafe.crud.crud_user import user as crud_user
from predictsafe.db.session import SessionDep
from predictsafe.schemas import AvatarResponse, SubscriptionDetail, UserResponse, UserUpdate, UserWithSubscriptions
from predictsafe.services import subscription_service
from predictsafe.services.avatars import random_avatar
from predictsafe.utils.dates import utcnow

router = APIRouter()


@router.get("", response_model=list[UserWithSubscriptions])
async def read_users(
    session: Annotated[SessionContext, Depends(require_permission("read", "users"))],
    db: SessionDep,
    search: str | None = None,
    skip: int = 0,
    limit: int = 100,
) -> list[UserWithSubscriptions]:
    """Users manager: users with their subscriptions, searchable by name, email or country."""
    users = await crud_user.search(db, term=search, skip=skip, limit=limit)
    subscriptions = await crud_subscription.list_for_users(db, user_ids=[u.id for u in users])
    now = utcnow()

    by_user = {}
    for sub in subscriptions:
        by_user.setdefault(sub.user_id, []).append(subscription_service.describe(sub, now))

    return [
        UserWithSubscriptions(
            **UserResponse.model_validate(u).model_dump(),
            subscriptions=by_user.get(u.id, []),
        )
        for u in users
    ]


@router.get("/me", response_model=UserResponse)
async def read_user_me(session: CurrentSession) -> UserResponse:
    """Get current user."""
    return session.user


@router.put("/me", response_model=UserResponse)
async def update_user_me(
    user_in: UserUpdate,
    db: SessionDep,
    session: Annotated[SessionContext, Depends(require_permission("update", "profile"))],
) -> UserResponse:
    """Update the caller's profile."""
    return await crud_user.update(db, db_obj=session.user, obj_in=user_in)


@router.post("/me/avatar", response_model=AvatarResponse)
async def assign_avatar(db: SessionDep, session: CurrentSession) -> AvatarResponse:
    """Give the caller a new random avatar."""
    avatar_url = random_avatar()
    await crud_user.update(db, db_obj=session.user, obj_in={"avatar_url": avatar_url})
    return AvatarResponse(avatar_url=avatar_url)


@router.get("/me/subscriptions", response_model=list[SubscriptionDetail])
async def read_my_subscriptions(db: SessionDep, session: CurrentSession) -> list[SubscriptionDetail]:
    now = utcnow()
    rows = await crud_subscription.list_for_user(db, user_id=session.user_id)
    return [subscription_service.describe(sub, now) for sub in rows]


@router.get("/{user_id}", response_model=UserWithSubscriptions)
async def read_user(
    user_id: str,
    db: SessionDep,
    session: Annotated[SessionContext, Depends(require_permission("read", "users"))],
) -> UserWithSubscriptions:
    """Get a specific user."""
    user = await crud_user.get(db, id=user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    now = utcnow()
    rows = await crud_subscription.list_for_user(db, user_id=user.id)
    return UserWithSubscriptions(
        **UserResponse.model_validate(user).model_dump(),
        subscriptions=[subscription_service.describe(sub, now) for sub in rows],
    )
