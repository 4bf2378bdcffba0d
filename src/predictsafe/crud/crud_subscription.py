from datetime import datetime
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import and_, distinct, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from pydantic import BaseModel

from predictsafe.crud.base import CRUDBase
from predictsafe.models.plan import UserSubscription
from predictsafe.schemas.enums import PlanStatus


class CRUDSubscription(CRUDBase[UserSubscription, BaseModel, BaseModel]):
    """CRUD operations for user subscriptions."""

    async def get_for(self, db: AsyncSession, *, user_id: UUID, plan_id: UUID) -> Optional[UserSubscription]:
        """The (user, plan) row, unique by constraint."""
        stmt = select(UserSubscription).where(
            UserSubscription.user_id == user_id,
            UserSubscription.plan_id == plan_id,
        )
        result = await db.execute(stmt)
        return result.scalars().first()

    async def latest_for(
        self,
        db: AsyncSession,
        *,
        user_id: UUID,
        plan_id: UUID,
        statuses: Optional[Iterable[PlanStatus]] = None,
    ) -> Optional[UserSubscription]:
        """Newest (user, plan) row, optionally restricted to some statuses."""
        stmt = select(UserSubscription).where(
            UserSubscription.user_id == user_id,
            UserSubscription.plan_id == plan_id,
        )
        if statuses:
            stmt = stmt.where(UserSubscription.plan_status.in_([s.value for s in statuses]))
        stmt = stmt.order_by(UserSubscription.created_at.desc()).limit(1)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_user(self, db: AsyncSession, *, user_id: UUID) -> List[UserSubscription]:
        stmt = (
            select(UserSubscription)
            .where(UserSubscription.user_id == user_id)
            .order_by(UserSubscription.created_at.desc())
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def list_for_users(self, db: AsyncSession, *, user_ids: List[UUID]) -> List[UserSubscription]:
        if not user_ids:
            return []
        stmt = select(UserSubscription).where(UserSubscription.user_id.in_(user_ids))
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def active_for_plan(self, db: AsyncSession, *, plan_id: UUID) -> List[UserSubscription]:
        """Subscribers whose stored status is active."""
        stmt = select(UserSubscription).where(
            UserSubscription.plan_id == plan_id,
            UserSubscription.plan_status == PlanStatus.ACTIVE.value,
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def list_by_status(
        self, db: AsyncSession, *, status: PlanStatus, limit: int = 100
    ) -> List[UserSubscription]:
        stmt = (
            select(UserSubscription)
            .where(UserSubscription.plan_status == status.value)
            .order_by(UserSubscription.expiry_date)
            .limit(limit)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def list_overdue(self, db: AsyncSession, *, now: datetime) -> List[UserSubscription]:
        """Active rows whose expiry has passed."""
        stmt = select(UserSubscription).where(
            UserSubscription.plan_status == PlanStatus.ACTIVE.value,
            UserSubscription.expiry_date.is_not(None),
            UserSubscription.expiry_date <= now,
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    def _live(self, now: datetime):
        """Active rows not yet past their expiry, as read by `entitlement.has_access`."""
        return and_(
            UserSubscription.plan_status == PlanStatus.ACTIVE.value,
            or_(UserSubscription.expiry_date.is_(None), UserSubscription.expiry_date > now),
        )

    async def count_live_subscribers(self, db: AsyncSession, *, now: datetime) -> int:
        """Distinct users holding at least one live subscription."""
        stmt = select(func.count(distinct(UserSubscription.user_id))).where(self._live(now))
        result = await db.execute(stmt)
        return result.scalar_one()

    async def list_expiring(self, db: AsyncSession, *, now: datetime, limit: int = 10) -> List[UserSubscription]:
        """Live subscriptions with an expiry, soonest first."""
        stmt = (
            select(UserSubscription)
            .where(self._live(now), UserSubscription.expiry_date.is_not(None))
            .order_by(UserSubscription.expiry_date)
            .limit(limit)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def count_by_status(self, db: AsyncSession, *, status: PlanStatus) -> int:
        return await self.count(db, UserSubscription.plan_status == status.value)


subscription = CRUDSubscription(UserSubscription)
