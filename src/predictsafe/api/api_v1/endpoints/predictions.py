from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException

from predictsafe.api.auth_deps import AdminSession, OptionalSession
from predictsafe.crud.crud_prediction import correct_score as crud_correct_score
from predictsafe.crud.crud_prediction import prediction as crud_prediction
from predictsafe.crud.crud_prediction import vip_winning as crud_vip_winning
from predictsafe.db.session import SessionDep
from predictsafe.schemas import (
    CorrectScoreCreate, CorrectScoreResponse, CorrectScoreUpdate, MatchStatus, MessageResponse, PlanType,
    PredictionCreate, PredictionResponse, PredictionUpdate, RecordResultRequest, VIPWinningCreate,
    VIPWinningResponse,
)
from predictsafe.services.subscription_service import can_view

router = APIRouter()

SUBSCRIPTION_REQUIRED = "An active subscription to this plan is required"


async def _ensure_access(db, session, plan_type: PlanType) -> None:
    user = session.user if session else None
    if not await can_view(db, user, plan_type):
        status_code = 401 if user is None else 403
        raise HTTPException(status_code=status_code, detail=SUBSCRIPTION_REQUIRED)


@router.get("", response_model=list[PredictionResponse])
async def read_predictions(
    db: SessionDep,
    session: OptionalSession,
    plan_type: PlanType = PlanType.FREE,
    date: Optional[date] = None,
    skip: int = 0,
    limit: int = 100,
):
    """
    Predictions of one plan, optionally for one kickoff day.

    Free predictions are public. Other plans need an active, unexpired
    subscription to the matching plan.
    """
    await _ensure_access(db, session, plan_type)
    return await crud_prediction.list_for(db, plan_type=plan_type, day=date, skip=skip, limit=limit)


@router.post("", response_model=PredictionResponse)
async def create_prediction(prediction_in: PredictionCreate, db: SessionDep, session: AdminSession):
    return await crud_prediction.create(db, obj_in=prediction_in)


# Correct score
@router.get("/correct-score", response_model=list[CorrectScoreResponse])
async def read_correct_scores(
    db: SessionDep,
    session: OptionalSession,
    date: Optional[date] = None,
    skip: int = 0,
    limit: int = 100,
):
    await _ensure_access(db, session, PlanType.CORRECT_SCORE)
    return await crud_correct_score.list_for(db, day=date, skip=skip, limit=limit)


@router.post("/correct-score", response_model=CorrectScoreResponse)
async def create_correct_score(prediction_in: CorrectScoreCreate, db: SessionDep, session: AdminSession):
    return await crud_correct_score.create(db, obj_in=prediction_in)


@router.put("/correct-score/{prediction_id}", response_model=CorrectScoreResponse)
async def update_correct_score(
    prediction_id: UUID, prediction_in: CorrectScoreUpdate, db: SessionDep, session: AdminSession
):
    row = await crud_correct_score.get(db, id=prediction_id)
    if not row:
        raise HTTPException(status_code=404, detail="Prediction not found")
    return await crud_correct_score.update(db, db_obj=row, obj_in=prediction_in)


@router.delete("/correct-score/{prediction_id}", response_model=MessageResponse)
async def delete_correct_score(prediction_id: UUID, db: SessionDep, session: AdminSession):
    if not await crud_correct_score.remove(db, id=prediction_id):
        raise HTTPException(status_code=404, detail="Prediction not found")
    return MessageResponse(message="Prediction deleted")


@router.post("/correct-score/{prediction_id}/result", response_model=CorrectScoreResponse)
async def record_correct_score_result(
    prediction_id: UUID, request: RecordResultRequest, db: SessionDep, session: AdminSession
):
    row = await crud_correct_score.get(db, id=prediction_id)
    if not row:
        raise HTTPException(status_code=404, detail="Prediction not found")
    update = {"status": MatchStatus.FINISHED, "result": request.result}
    if request.admin_notes is not None:
        update["admin_notes"] = request.admin_notes
    return await crud_correct_score.update(db, db_obj=row, obj_in=update)


# VIP winnings
@router.get("/vip-winnings", response_model=list[VIPWinningResponse])
async def read_vip_winnings(db: SessionDep, limit: int = 20):
    """Recent settled VIP results, newest first."""
    return await crud_vip_winning.recent(db, limit=limit)


@router.post("/vip-winnings", response_model=VIPWinningResponse)
async def create_vip_winning(winning_in: VIPWinningCreate, db: SessionDep, session: AdminSession):
    return await crud_vip_winning.create(db, obj_in=winning_in)


@router.delete("/vip-winnings/{winning_id}", response_model=MessageResponse)
async def delete_vip_winning(winning_id: UUID, db: SessionDep, session: AdminSession):
    if not await crud_vip_winning.remove(db, id=winning_id):
        raise HTTPException(status_code=404, detail="VIP winning not found")
    return MessageResponse(message="VIP winning deleted")


@router.put("/{prediction_id}", response_model=PredictionResponse)
async def update_prediction(
    prediction_id: UUID, prediction_in: PredictionUpdate, db: SessionDep, session: AdminSession
):
    row = await crud_prediction.get(db, id=prediction_id)
    if not row:
        raise HTTPException(status_code=404, detail="Prediction not found")
    return await crud_prediction.update(db, db_obj=row, obj_in=prediction_in)


@router.delete("/{prediction_id}", response_model=MessageResponse)
async def delete_prediction(prediction_id: UUID, db: SessionDep, session: AdminSession):
    if not await crud_prediction.remove(db, id=prediction_id):
        raise HTTPException(status_code=404, detail="Prediction not found")
    return MessageResponse(message="Prediction deleted")


@router.post("/{prediction_id}/result", response_model=PredictionResponse)
async def record_result(
    prediction_id: UUID, request: RecordResultRequest, db: SessionDep, session: AdminSession
):
    """Settle a prediction: the match is finished and the result recorded."""
    row = await crud_prediction.get(db, id=prediction_id)
    if not row:
        raise HTTPException(status_code=404, detail="Prediction not found")
    update = {"status": MatchStatus.FINISHED, "result": request.result}
    if request.admin_notes is not None:
        update["admin_notes"] = request.admin_notes
    return await crud_prediction.update(db, db_obj=row, obj_in=update)
