import asyncio

import pytest
from fastapi import HTTPException

from conftest import FakeFootballClient, FixedRandom, fixture_row
from predictsafe.crud.crud_prediction import prediction as crud_prediction
from predictsafe.schemas.enums import MatchStatus, PlanType
from predictsafe.schemas.prediction import SyncPredictionsRequest
from predictsafe.services.importer import PredictionImporter, extract_markets, match_status


def preview_request(**kwargs):
    kwargs.setdefault("date", "2025-01-10")
    kwargs.setdefault("preview", True)
    return SyncPredictionsRequest(**kwargs)


def test_inverted_odds_bounds_rejected_before_fetching():
    client = FakeFootballClient(fixtures=[fixture_row()])
    importer = PredictionImporter(client, rng=FixedRandom(90))

    with pytest.raises(HTTPException) as exc:
        asyncio.run(importer.run(None, preview_request(min_odds=2.0, max_odds=2.0)))

    assert exc.value.status_code == 400
    assert client.calls == []


def test_missing_or_malformed_date_rejected():
    importer = PredictionImporter(FakeFootballClient(), rng=FixedRandom(90))

    for date in (None, "10/01/2025"):
        with pytest.raises(HTTPException) as exc:
            asyncio.run(importer.run(None, preview_request(date=date)))
        assert exc.value.status_code == 400


def test_daily_two_odds_skips_fixtures_without_market_in_range():
    client = FakeFootballClient(
        fixtures=[fixture_row("1001")],
        odds={"1001": [{"odd_1": "1.30", "odd_2": "3.00"}]},
    )
    importer = PredictionImporter(client, rng=FixedRandom(95))

    response = asyncio.run(importer.run(None, preview_request(plan_type=PlanType.DAILY_2_ODDS)))

    assert response.predictions == []
    assert response.filtered == 1


def test_daily_two_odds_keeps_markets_in_range():
    client = FakeFootballClient(
        fixtures=[fixture_row("1001")],
        odds={"1001": [{"odd_1": "1.95", "odd_2": "3.00", "o+2.5": "2.10"}]},
    )
    importer = PredictionImporter(client, rng=FixedRandom(95))

    response = asyncio.run(importer.run(None, preview_request(plan_type=PlanType.DAILY_2_ODDS)))

    assert [(p.prediction_type, p.odds) for p in response.predictions] == [("Home Win", 1.95), ("Over 2.5", 2.10)]


def test_fixture_without_odds_gets_default_market():
    client = FakeFootballClient(fixtures=[fixture_row("1001")])
    importer = PredictionImporter(client, rng=FixedRandom(80))

    response = asyncio.run(importer.run(None, preview_request()))

    assert len(response.predictions) == 1
    candidate = response.predictions[0]
    assert candidate.prediction_type == "Over 2.5"
    assert candidate.odds == 1.85
    assert candidate.confidence == 80
    assert candidate.home_team == "Arsenal"
    assert candidate.kickoff_time.hour == 15
    assert response.preview is True


def test_low_confidence_candidates_filtered():
    client = FakeFootballClient(
        fixtures=[fixture_row("1001")],
        odds={"1001": [{"odd_1": "1.50", "odd_x": "3.40"}]},
    )
    importer = PredictionImporter(client, rng=FixedRandom(60))

    response = asyncio.run(importer.run(None, preview_request(min_confidence=75)))

    assert response.predictions == []
    assert response.filtered == 2
    assert response.min_confidence == 75


def test_odds_bounds_filter_candidates():
    client = FakeFootballClient(
        fixtures=[fixture_row("1001")],
        odds={"1001": [{"odd_1": "1.50", "odd_2": "4.50", "odd_x": "3.40"}]},
    )
    importer = PredictionImporter(client, rng=FixedRandom(90))

    response = asyncio.run(importer.run(None, preview_request(min_odds=2.0, max_odds=4.0)))

    assert [p.prediction_type for p in response.predictions] == ["Draw"]
    assert response.filtered == 2


def test_min_confidence_is_clamped():
    assert SyncPredictionsRequest(minConfidence=10).min_confidence == 50
    assert SyncPredictionsRequest(minConfidence=150).min_confidence == 100
    assert SyncPredictionsRequest(minConfidence=0).min_confidence == 50
    assert SyncPredictionsRequest(minConfidence="junk").min_confidence == 50
    assert SyncPredictionsRequest(minConfidence=72).min_confidence == 72
    assert SyncPredictionsRequest(minConfidence="75.5").min_confidence == 75
    assert SyncPredictionsRequest(minConfidence=80.9).min_confidence == 80
    assert SyncPredictionsRequest(minConfidence="inf").min_confidence == 50
    assert SyncPredictionsRequest(minConfidence="nan").min_confidence == 50


def test_no_fixtures():
    importer = PredictionImporter(FakeFootballClient(), rng=FixedRandom(90))

    response = asyncio.run(importer.run(None, preview_request()))

    assert response.message == "No fixtures found"
    assert response.synced == 0


def test_provider_failure_is_bad_gateway():
    importer = PredictionImporter(FakeFootballClient(fail_fixtures=True), rng=FixedRandom(90))

    with pytest.raises(HTTPException) as exc:
        asyncio.run(importer.run(None, preview_request()))

    assert exc.value.status_code == 502


def test_extract_markets_reads_first_bookmaker_only():
    rows = [{"odd_1": "2.00", "bts_yes": "1.70", "u+2.5": ""}, {"odd_2": "3.00"}]
    assert extract_markets(rows) == [("Home Win", 2.0), ("BTTS", 1.7)]
    assert extract_markets([]) == []


def test_match_status():
    assert match_status({"match_status": "Finished"}) == MatchStatus.FINISHED
    assert match_status({"match_status": "45", "match_live": "1"}) == MatchStatus.LIVE
    assert match_status({"match_status": ""}) == MatchStatus.NOT_STARTED


def test_sync_persists_candidates(run_db):
    client = FakeFootballClient(
        fixtures=[fixture_row("1001"), fixture_row("1002", home="Everton", away="Fulham")],
        odds={"1001": [{"odd_1": "1.70"}]},
    )
    importer = PredictionImporter(client, rng=FixedRandom(88))

    async def scenario(db):
        response = await importer.run(db, preview_request(plan_type=PlanType.STANDARD, preview=False))
        rows = await crud_prediction.list_for(db, plan_type=PlanType.STANDARD)
        return response, rows

    response, rows = run_db(scenario)

    assert response.synced == 2
    assert response.predictions is None
    assert {r.home_team for r in rows} == {"Arsenal", "Everton"}
    assert all(r.plan_type == "standard" for r in rows)
