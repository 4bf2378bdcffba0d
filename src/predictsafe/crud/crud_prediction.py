from datetime import date, datetime, time, timedelta
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from predictsafe.crud.base import CRUDBase
from predictsafe.models.prediction import CorrectScorePrediction, Prediction, VIPWinning
from predictsafe.schemas.enums import PlanType
from predictsafe.schemas.prediction import (
    CorrectScoreCreate, CorrectScoreUpdate, PredictionCreate, PredictionUpdate, VIPWinningCreate,
)
from pydantic import BaseModel


def _day_bounds(day: date) -> tuple[datetime, datetime]:
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


class CRUDPrediction(CRUDBase[Prediction, PredictionCreate, PredictionUpdate]):
    """CRUD operations for predictions."""

    async def list_for(
        self,
        db: AsyncSession,
        *,
        plan_type: Optional[PlanType] = None,
        day: Optional[date] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Prediction]:
        stmt = select(Prediction)
        if plan_type is not None:
            stmt = stmt.where(Prediction.plan_type == plan_type.value)
        if day is not None:
            start, end = _day_bounds(day)
            stmt = stmt.where(Prediction.kickoff_time >= start, Prediction.kickoff_time < end)
        stmt = stmt.order_by(Prediction.kickoff_time.desc()).offset(skip).limit(limit)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def bulk_create(self, db: AsyncSession, *, rows: Sequence[Dict[str, Any]]) -> List[Prediction]:
        """Insert many prediction rows in one commit."""
        objects = [Prediction(**self._serialize_enums(dict(row))) for row in rows]
        db.add_all(objects)
        await db.commit()
        return objects


class CRUDCorrectScore(CRUDBase[CorrectScorePrediction, CorrectScoreCreate, CorrectScoreUpdate]):
    """CRUD operations for correct-score predictions."""

    async def list_for(
        self, db: AsyncSession, *, day: Optional[date] = None, skip: int = 0, limit: int = 100
    ) -> List[CorrectScorePrediction]:
        stmt = select(CorrectScorePrediction)
        if day is not None:
            start, end = _day_bounds(day)
            stmt = stmt.where(
                CorrectScorePrediction.kickoff_time >= start,
                CorrectScorePrediction.kickoff_time < end,
            )
        stmt = stmt.order_by(CorrectScorePrediction.kickoff_time.desc()).offset(skip).limit(limit)
        result = await db.execute(stmt)
        return list(result.scalars().all())


class CRUDVIPWinning(CRUDBase[VIPWinning, VIPWinningCreate, BaseModel]):
    """CRUD operations for VIP winnings."""

    async def recent(self, db: AsyncSession, *, limit: int = 20) -> List[VIPWinning]:
        stmt = select(VIPWinning).order_by(VIPWinning.date.desc(), VIPWinning.created_at.desc()).limit(limit)
        result = await db.execute(stmt)
        return list(result.scalars().all())


prediction = CRUDPrediction(Prediction)
correct_score = CRUDCorrectScore(CorrectScorePrediction)
vip_winning = CRUDVIPWinning(VIPWinning)
