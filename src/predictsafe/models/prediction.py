from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Integer, String, Text, Uuid

from predictsafe.models.base import Base


class Prediction(Base):
    """Match-level pick published to one plan type."""
    __tablename__ = "predictions"

    plan_type = Column(String, nullable=False, index=True)
    home_team = Column(String, nullable=False)
    away_team = Column(String, nullable=False)
    league = Column(String, nullable=False)
    prediction_type = Column(String, nullable=False)
    odds = Column(Float, nullable=False)
    confidence = Column(Integer, nullable=False)
    kickoff_time = Column(DateTime, nullable=False, index=True)
    status = Column(String, nullable=False, default="not_started")
    result = Column(String, nullable=True)
    admin_notes = Column(Text, nullable=True)

    # Provider ids, set by the importer
    match_id = Column(String, nullable=True)
    league_id = Column(String, nullable=True)
    home_team_id = Column(String, nullable=True)
    away_team_id = Column(String, nullable=True)


class CorrectScorePrediction(Base):
    """Exact score pick for the correct-score plan."""
    __tablename__ = "correct_score_predictions"

    home_team = Column(String, nullable=False)
    away_team = Column(String, nullable=False)
    league = Column(String, nullable=False)
    score_prediction = Column(String, nullable=False)
    odds = Column(Float, nullable=True)
    kickoff_time = Column(DateTime, nullable=False, index=True)
    status = Column(String, nullable=False, default="not_started")
    result = Column(String, nullable=True)
    admin_notes = Column(Text, nullable=True)


class VIPWinning(Base):
    """Historical VIP result shown as social proof."""
    __tablename__ = "vip_winnings"

    plan_id = Column(Uuid, ForeignKey("plans.id", ondelete="SET NULL"), nullable=True)
    plan_name = Column(String, nullable=False)
    league = Column(String, nullable=True)
    home_team = Column(String, nullable=False)
    away_team = Column(String, nullable=False)
    prediction_type = Column(String, nullable=False)
    result = Column(String, nullable=False)
    date = Column(Date, nullable=False)
