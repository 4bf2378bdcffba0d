from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from pydantic import BaseModel

from predictsafe.crud.base import CRUDBase
from predictsafe.models.payment import PaymentMethod, Transaction
from predictsafe.schemas.enums import TransactionStatus
from predictsafe.schemas.payment import PaymentMethodCreate, PaymentMethodUpdate


class CRUDTransaction(CRUDBase[Transaction, BaseModel, BaseModel]):
    """CRUD operations for payment transactions."""

    async def list_filtered(
        self,
        db: AsyncSession,
        *,
        status: Optional[TransactionStatus] = None,
        user_id: Optional[UUID] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Transaction]:
        stmt = select(Transaction)
        if status is not None:
            stmt = stmt.where(Transaction.status == status.value)
        if user_id is not None:
            stmt = stmt.where(Transaction.user_id == user_id)
        stmt = stmt.order_by(Transaction.created_at.desc()).offset(skip).limit(limit)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def count_pending(self, db: AsyncSession) -> int:
        return await self.count(db, Transaction.status == TransactionStatus.PENDING.value)

    async def revenue_since(self, db: AsyncSession, *, since: datetime) -> float:
        """Sum of completed amounts created since a moment."""
        stmt = select(func.coalesce(func.sum(Transaction.amount), 0)).where(
            Transaction.status == TransactionStatus.COMPLETED.value,
            Transaction.created_at >= since,
        )
        result = await db.execute(stmt)
        return float(result.scalar_one())


class CRUDPaymentMethod(CRUDBase[PaymentMethod, PaymentMethodCreate, PaymentMethodUpdate]):
    """CRUD operations for manual payment methods."""

    async def list_active(self, db: AsyncSession, *, currency: Optional[str] = None) -> List[PaymentMethod]:
        stmt = select(PaymentMethod).where(PaymentMethod.is_active.is_(True))
        if currency:
            stmt = stmt.where(PaymentMethod.currency == currency.upper())
        stmt = stmt.order_by(PaymentMethod.display_order, PaymentMethod.created_at)
        result = await db.execute(stmt)
        return list(result.scalars().all())


transaction = CRUDTransaction(Transaction)
payment_method = CRUDPaymentMethod(PaymentMethod)
