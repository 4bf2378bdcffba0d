"""
Client for the apifootball.com v3 API.

Every call is a GET on the base URL with an `action` parameter. The provider
answers an empty lookup with an error object instead of an empty list; both
are returned as `[]` here.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from predictsafe.core.config import settings
from predictsafe.utils.dates import utcnow

logger = logging.getLogger(__name__)

TOP_LEAGUES = {
    "PREMIER_LEAGUE": "152",
    "LA_LIGA": "302",
    "SERIE_A": "207",
    "BUNDESLIGA": "175",
    "LIGUE_1": "168",
}


class FootballAPIError(Exception):
    """The sports-data provider could not be reached or refused the call."""


class FootballAPIClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.API_FOOTBALL_KEY
        self.base_url = (base_url or settings.API_FOOTBALL_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.API_FOOTBALL_TIMEOUT
        self.transport = transport
        self.logger = logging.getLogger(__name__)

    async def _get(self, action: str, **params: Any) -> List[Dict[str, Any]]:
        if not self.api_key:
            raise FootballAPIError("API_FOOTBALL_KEY is not configured")

        query = {"action": action, "APIkey": self.api_key}
        query.update({k: v for k, v in params.items() if v is not None})
        self.logger.debug(f"apifootball {action} {params}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(f"{self.base_url}/", params=query)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as exc:
            self.logger.error(f"apifootball {action} returned {exc.response.status_code}")
            raise FootballAPIError(f"{action} failed with status {exc.response.status_code}") from exc
        except httpx.RequestError as exc:
            self.logger.error(f"apifootball {action} request error: {exc}")
            raise FootballAPIError(f"{action} request failed: {exc}") from exc
        except ValueError as exc:
            raise FootballAPIError(f"{action} returned invalid JSON") from exc

        if isinstance(payload, dict):
            if "error" in payload:
                self.logger.info(f"apifootball {action}: {payload.get('message', payload['error'])}")
                return []
            # standings and h2h come back keyed
            return [payload]
        return payload or []

    async def get_fixtures(
        self, date_from: str, league_id: Optional[str] = None, date_to: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """Events between two dates (inclusive), optionally for one league."""
        return await self._get("get_events", **{"from": date_from, "to": date_to or date_from, "league_id": league_id})

    async def get_odds(self, match_id: str, date: Optional[str] = None) -> List[Dict[str, Any]]:
        """Bookmaker odds rows for one match."""
        return await self._get("get_odds", match_id=match_id, **{"from": date, "to": date})

    async def get_h2h(self, first_team_id: str, second_team_id: str) -> Dict[str, Any]:
        rows = await self._get("get_H2H", firstTeamId=first_team_id, secondTeamId=second_team_id)
        return rows[0] if rows else {"firstTeam_VS_secondTeam": [], "firstTeam_lastResults": [], "secondTeam_lastResults": []}

    async def get_standings(self, league_id: str) -> List[Dict[str, Any]]:
        return await self._get("get_standings", league_id=league_id)

    async def get_livescores(self, league_id: Optional[str] = None) -> List[Dict[str, Any]]:
        today = utcnow().date().isoformat()
        return await self._get("get_events", **{"from": today, "to": today, "match_live": "1", "league_id": league_id})


def get_football_client() -> FootballAPIClient:
    """Dependency hook so handlers can be exercised with a stub client."""
    return FootballAPIClient()
