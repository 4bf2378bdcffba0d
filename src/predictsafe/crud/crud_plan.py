from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from predictsafe.crud.base import CRUDBase
from predictsafe.models.plan import Plan, PlanPrice
from predictsafe.schemas.plan import PlanCreate, PlanUpdate, PlanPriceCreate, PlanPriceUpdate


class CRUDPlan(CRUDBase[Plan, PlanCreate, PlanUpdate]):
    """CRUD operations for subscription plans."""

    async def get_by_slug(self, db: AsyncSession, *, slug: str) -> Optional[Plan]:
        return await self.get_by_key(db, key_field="slug", key_value=slug)

    async def get_active(self, db: AsyncSession) -> List[Plan]:
        stmt = select(Plan).where(Plan.is_active.is_(True)).order_by(Plan.created_at)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def create(self, db: AsyncSession, *, obj_in: PlanCreate, commit: bool = True) -> Plan:
        """Create a plan together with its price rows."""
        data = obj_in.model_dump(exclude={"prices"})
        plan = Plan(**data)
        plan.prices = [PlanPrice(**price.model_dump()) for price in obj_in.prices]
        db.add(plan)
        await db.commit()
        await db.refresh(plan)
        return plan


class CRUDPlanPrice(CRUDBase[PlanPrice, PlanPriceCreate, PlanPriceUpdate]):
    """CRUD operations for plan prices."""

    async def for_plan(self, db: AsyncSession, *, plan_id: UUID) -> List[PlanPrice]:
        stmt = select(PlanPrice).where(PlanPrice.plan_id == plan_id).order_by(PlanPrice.duration_days)
        result = await db.execute(stmt)
        return list(result.scalars().all())


plan = CRUDPlan(Plan)
plan_price = CRUDPlanPrice(PlanPrice)
