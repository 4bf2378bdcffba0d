from typing import Annotated, Any, Optional

from fastapi import APIRouter, Depends, HTTPException

from predictsafe.api.auth_deps import AdminSession, SessionContext
from predictsafe.core.pbac import require_permission
from predictsafe.crud.crud_prediction import prediction as crud_prediction
from predictsafe.db.session import SessionDep
from predictsafe.schemas import (
    InsertPredictionsRequest, InsertPredictionsResponse, SyncPredictionsRequest, SyncPredictionsResponse,
)
from predictsafe.services.football_api import FootballAPIClient, get_football_client
from predictsafe.services.importer import PredictionImporter
from predictsafe.utils.dates import parse_iso_date

router = APIRouter()

FootballClient = Annotated[FootballAPIClient, Depends(get_football_client)]


def get_importer(client: FootballClient) -> PredictionImporter:
    return PredictionImporter(client)


@router.post("/sync-predictions", response_model=SyncPredictionsResponse, response_model_exclude_none=True)
async def sync_predictions(
    request: SyncPredictionsRequest,
    db: SessionDep,
    importer: Annotated[PredictionImporter, Depends(get_importer)],
    session: Annotated[SessionContext, Depends(require_permission("sync", "predictions"))],
):
    """
    Import one day of fixtures as predictions.

    With `preview` the filtered candidates are returned and nothing is stored.
    Otherwise they are inserted and subscribers of the plan are notified.
    """
    return await importer.run(db, request)


@router.post("/insert-predictions", response_model=InsertPredictionsResponse)
async def insert_predictions(request: InsertPredictionsRequest, db: SessionDep, session: AdminSession):
    """Store an explicit list of predictions, typically an edited preview."""
    if not request.predictions:
        raise HTTPException(status_code=400, detail="No predictions to insert")
    rows = await crud_prediction.bulk_create(db, rows=[p.model_dump() for p in request.predictions])
    return InsertPredictionsResponse(message="Predictions inserted successfully", inserted=len(rows))


@router.get("/fixtures")
async def read_fixtures(
    date: str,
    client: FootballClient,
    session: AdminSession,
    league_id: Optional[str] = None,
) -> list[dict[str, Any]]:
    try:
        parse_iso_date(date)
    except ValueError:
        raise HTTPException(status_code=400, detail="Date must be formatted YYYY-MM-DD")
    return await client.get_fixtures(date, league_id=league_id)


@router.get("/odds/{match_id}")
async def read_odds(match_id: str, client: FootballClient, session: AdminSession) -> list[dict[str, Any]]:
    return await client.get_odds(match_id)


@router.get("/h2h")
async def read_h2h(
    first_team_id: str, second_team_id: str, client: FootballClient, session: AdminSession
) -> dict[str, Any]:
    return await client.get_h2h(first_team_id, second_team_id)


@router.get("/standings/{league_id}")
async def read_standings(league_id: str, client: FootballClient, session: AdminSession) -> list[dict[str, Any]]:
    return await client.get_standings(league_id)


@router.get("/livescores")
async def read_livescores(
    client: FootballClient, session: AdminSession, league_id: Optional[str] = None
) -> list[dict[str, Any]]:
    return await client.get_livescores(league_id)
