"""
Fixture-to-prediction importer.

Pulls one day of fixtures from the sports-data provider, reads the first
bookmaker row of odds per fixture, and turns every known market into a
candidate prediction. Candidates are dropped by the confidence threshold and
the optional odds bounds; the daily-2-odds plan only takes markets priced
between 1.8 and 2.2.

Confidence is a placeholder: it is drawn at random from 70..99 per candidate
and carries no statistical meaning until a scoring model is chosen.
"""
import logging
import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from predictsafe.core.config import settings
from predictsafe.crud.crud_plan import plan as crud_plan
from predictsafe.crud.crud_prediction import prediction as crud_prediction
from predictsafe.schemas.enums import MatchStatus, PlanType
from predictsafe.schemas.prediction import CandidatePrediction, SyncPredictionsRequest, SyncPredictionsResponse
from predictsafe.services.football_api import FootballAPIClient, FootballAPIError
from predictsafe.services import notification_service
from predictsafe.utils.dates import parse_iso_date, parse_kickoff

logger = logging.getLogger(__name__)

# provider field -> market label, in the order markets are offered
ODDS_MARKETS: Tuple[Tuple[str, str], ...] = (
    ("odd_1", "Home Win"),
    ("odd_2", "Away Win"),
    ("odd_x", "Draw"),
    ("o+2.5", "Over 2.5"),
    ("o+1.5", "Over 1.5"),
    ("u+2.5", "Under 2.5"),
    ("bts_yes", "BTTS"),
)

DEFAULT_MARKET = ("Over 2.5", 1.85)
DAILY_ODDS_RANGE = (1.8, 2.2)
CONFIDENCE_RANGE = (70, 99)


@dataclass
class ImportResult:
    candidates: List[CandidatePrediction] = field(default_factory=list)
    filtered: int = 0


def validate_request(request: SyncPredictionsRequest) -> None:
    """Reject a run before anything is fetched."""
    if not request.date:
        raise HTTPException(status_code=400, detail="Date is required")
    try:
        parse_iso_date(request.date)
    except ValueError:
        raise HTTPException(status_code=400, detail="Date must be formatted YYYY-MM-DD")
    if (
        request.min_odds is not None
        and request.max_odds is not None
        and request.min_odds >= request.max_odds
    ):
        raise HTTPException(status_code=400, detail="minOdds must be less than maxOdds")


def extract_markets(odds_rows: List[Dict[str, Any]]) -> List[Tuple[str, float]]:
    """Known markets present on the first bookmaker row."""
    if not odds_rows:
        return []
    row = odds_rows[0]
    markets = []
    for key, label in ODDS_MARKETS:
        raw = row.get(key)
        if not raw:
            continue
        try:
            value = float(raw)
        except (TypeError, ValueError):
            continue
        if value > 0:
            markets.append((label, value))
    return markets


def match_status(fixture: Dict[str, Any]) -> MatchStatus:
    if fixture.get("match_status") == "Finished":
        return MatchStatus.FINISHED
    if fixture.get("match_live") == "1":
        return MatchStatus.LIVE
    return MatchStatus.NOT_STARTED


class PredictionImporter:
    def __init__(self, client: FootballAPIClient, rng: Optional[random.Random] = None):
        self.client = client
        self.rng = rng or random.Random()
        self.logger = logging.getLogger(__name__)

    def _confidence(self) -> int:
        return self.rng.randint(*CONFIDENCE_RANGE)

    def _markets_for(self, plan_type: PlanType, found: List[Tuple[str, float]]) -> Optional[List[Tuple[str, float]]]:
        """Markets to score for one fixture, or None when the fixture is skipped."""
        if plan_type == PlanType.DAILY_2_ODDS:
            low, high = DAILY_ODDS_RANGE
            in_range = [m for m in found if low <= m[1] <= high]
            return in_range or None
        return found or [DEFAULT_MARKET]

    def _accepts(self, request: SyncPredictionsRequest, confidence: int, odds: float) -> bool:
        if confidence < request.min_confidence:
            return False
        if request.min_odds is not None and odds < request.min_odds:
            return False
        if request.max_odds is not None and odds > request.max_odds:
            return False
        return True

    def _candidate(
        self, request: SyncPredictionsRequest, fixture: Dict[str, Any], market: str, odds: float, confidence: int
    ) -> CandidatePrediction:
        return CandidatePrediction(
            plan_type=request.plan_type,
            home_team=fixture.get("match_hometeam_name") or "Home Team",
            away_team=fixture.get("match_awayteam_name") or "Away Team",
            league=fixture.get("league_name") or "Unknown League",
            prediction_type=market,
            odds=odds,
            confidence=confidence,
            kickoff_time=parse_kickoff(fixture["match_date"], fixture.get("match_time")),
            status=match_status(fixture),
            match_id=fixture.get("match_id"),
            league_id=fixture.get("league_id"),
            home_team_id=fixture.get("match_hometeam_id"),
            away_team_id=fixture.get("match_awayteam_id"),
        )

    async def _fetch_markets(self, fixture: Dict[str, Any], day: str) -> List[Tuple[str, float]]:
        try:
            return extract_markets(await self.client.get_odds(fixture.get("match_id"), day))
        except FootballAPIError as e:
            self.logger.error(f"Error fetching odds for match {fixture.get('match_id')}: {e}")
            return []

    async def collect(self, request: SyncPredictionsRequest, fixtures: List[Dict[str, Any]]) -> ImportResult:
        """Score and filter the fixtures of one run."""
        result = ImportResult()
        for fixture in fixtures[: settings.SYNC_FIXTURE_LIMIT]:
            try:
                found = await self._fetch_markets(fixture, request.date)
                markets = self._markets_for(request.plan_type, found)
                if markets is None:
                    result.filtered += 1
                    continue
                for market, odds in markets:
                    confidence = self._confidence()
                    if not self._accepts(request, confidence, odds):
                        result.filtered += 1
                        continue
                    result.candidates.append(self._candidate(request, fixture, market, odds, confidence))
            except Exception as e:
                self.logger.error(f"Error processing fixture {fixture.get('match_id')}: {e}")
        return result

    async def run(self, db: AsyncSession, request: SyncPredictionsRequest) -> SyncPredictionsResponse:
        """Validate, fetch, filter, then preview or persist and notify."""
        validate_request(request)

        try:
            fixtures = await self.client.get_fixtures(request.date)
        except FootballAPIError as e:
            self.logger.error(f"Failed to fetch fixtures for {request.date}: {e}")
            raise HTTPException(status_code=502, detail="Failed to fetch fixtures")

        if not fixtures:
            return SyncPredictionsResponse(message="No fixtures found", synced=0)

        result = await self.collect(request, fixtures)
        self.logger.info(
            f"Import {request.date} {request.plan_type.value}: "
            f"{len(result.candidates)} kept, {result.filtered} filtered"
        )

        if request.preview:
            return SyncPredictionsResponse(
                message="Predictions fetched successfully",
                predictions=result.candidates,
                preview=True,
                filtered=result.filtered,
                min_confidence=request.min_confidence,
                min_odds=request.min_odds,
                max_odds=request.max_odds,
            )

        rows = await crud_prediction.bulk_create(db, rows=[c.model_dump() for c in result.candidates])
        if rows:
            await self._notify_subscribers(db, request.plan_type)

        return SyncPredictionsResponse(
            message="Predictions synced successfully",
            synced=len(rows),
            filtered=result.filtered,
            min_confidence=request.min_confidence,
            min_odds=request.min_odds,
            max_odds=request.max_odds,
        )

    async def _notify_subscribers(self, db: AsyncSession, plan_type: PlanType) -> None:
        try:
            plan = await crud_plan.get_by_slug(db, slug=plan_type.slug)
            if plan:
                await notification_service.notify_prediction_dropped(db, plan)
        except Exception as e:
            self.logger.error(f"Error notifying users: {e}")
