from typing import Any, Optional
from uuid import UUID
from datetime import date, datetime

from pydantic import Field, field_validator

from .base import BaseSchema, BaseResponseSchema, CamelSchema
from .enums import MatchStatus, PlanType, PredictionResult


class PredictionBase(BaseSchema):
    plan_type: PlanType
    home_team: str
    away_team: str
    league: str
    prediction_type: str
    odds: float = Field(gt=0)
    confidence: int = Field(ge=0, le=100)
    kickoff_time: datetime
    status: MatchStatus = MatchStatus.NOT_STARTED
    result: Optional[PredictionResult] = None
    admin_notes: Optional[str] = None
    match_id: Optional[str] = None
    league_id: Optional[str] = None
    home_team_id: Optional[str] = None
    away_team_id: Optional[str] = None


class PredictionCreate(PredictionBase):
    pass


class PredictionUpdate(BaseSchema):
    home_team: Optional[str] = None
    away_team: Optional[str] = None
    league: Optional[str] = None
    prediction_type: Optional[str] = None
    odds: Optional[float] = Field(default=None, gt=0)
    confidence: Optional[int] = Field(default=None, ge=0, le=100)
    kickoff_time: Optional[datetime] = None
    status: Optional[MatchStatus] = None
    result: Optional[PredictionResult] = None
    admin_notes: Optional[str] = None


class PredictionResponse(PredictionBase, BaseResponseSchema):
    pass


class RecordResultRequest(BaseSchema):
    result: PredictionResult
    admin_notes: Optional[str] = None


class CorrectScoreBase(BaseSchema):
    home_team: str
    away_team: str
    league: str
    score_prediction: str
    odds: Optional[float] = Field(default=None, gt=0)
    kickoff_time: datetime
    status: MatchStatus = MatchStatus.NOT_STARTED
    result: Optional[PredictionResult] = None
    admin_notes: Optional[str] = None


class CorrectScoreCreate(CorrectScoreBase):
    pass


class CorrectScoreUpdate(BaseSchema):
    score_prediction: Optional[str] = None
    odds: Optional[float] = Field(default=None, gt=0)
    kickoff_time: Optional[datetime] = None
    status: Optional[MatchStatus] = None
    result: Optional[PredictionResult] = None
    admin_notes: Optional[str] = None


class CorrectScoreResponse(CorrectScoreBase, BaseResponseSchema):
    pass


class VIPWinningBase(BaseSchema):
    plan_id: Optional[UUID] = None
    plan_name: str
    league: Optional[str] = None
    home_team: str
    away_team: str
    prediction_type: str
    result: PredictionResult
    date: date

    @field_validator("result")
    @classmethod
    def settled_only(cls, v: PredictionResult) -> PredictionResult:
        if v == PredictionResult.PENDING:
            raise ValueError("VIP winnings record settled results only")
        return v


class VIPWinningCreate(VIPWinningBase):
    pass


class VIPWinningResponse(VIPWinningBase, BaseResponseSchema):
    pass


# Importer
class SyncPredictionsRequest(CamelSchema):
    """Body of the fixture import. Keys arrive camelCased from the admin UI."""
    date: Optional[str] = None
    plan_type: PlanType = Field(default=PlanType.FREE, alias="planType")
    min_confidence: int = Field(default=50, alias="minConfidence")
    min_odds: Optional[float] = Field(default=None, alias="minOdds")
    max_odds: Optional[float] = Field(default=None, alias="maxOdds")
    preview: bool = False

    @field_validator("min_confidence", mode="before")
    @classmethod
    def clamp_confidence(cls, v: Any) -> int:
        try:
            parsed = int(float(v))
        except (TypeError, ValueError, OverflowError):
            parsed = 0
        # 0 and junk fall back to the default floor
        parsed = parsed or 50
        return max(50, min(100, parsed))


class CandidatePrediction(BaseSchema):
    """Prediction row produced by the importer, before it is persisted."""
    plan_type: PlanType
    home_team: str
    away_team: str
    league: str
    prediction_type: str
    odds: float
    confidence: int
    kickoff_time: datetime
    status: MatchStatus
    match_id: Optional[str] = None
    league_id: Optional[str] = None
    home_team_id: Optional[str] = None
    away_team_id: Optional[str] = None


class SyncPredictionsResponse(CamelSchema):
    message: str
    predictions: Optional[list[CandidatePrediction]] = None
    preview: Optional[bool] = None
    synced: Optional[int] = None
    filtered: Optional[int] = None
    min_confidence: Optional[int] = Field(default=None, alias="minConfidence")
    min_odds: Optional[float] = Field(default=None, alias="minOdds")
    max_odds: Optional[float] = Field(default=None, alias="maxOdds")


class InsertPredictionsRequest(BaseSchema):
    predictions: list[PredictionCreate]


class InsertPredictionsResponse(BaseSchema):
    message: str
    inserted: int
