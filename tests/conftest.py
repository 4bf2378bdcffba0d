import asyncio
import os

# settings are read at import time
os.environ["ENV"] = "test"
os.environ["ENV_FILE"] = "./tests/.env.missing"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["SMTP_USER"] = ""
os.environ["SMTP_PASSWORD"] = ""
os.environ["API_FOOTBALL_KEY"] = "test-key"

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from predictsafe.crud.crud_plan import plan as crud_plan
from predictsafe.crud.crud_transaction import payment_method as crud_payment_method
from predictsafe.crud.crud_user import user as crud_user
from predictsafe.models import Base
from predictsafe.schemas import PaymentMethodCreate, PlanCreate, PlanPriceCreate


def memory_engine():
    return create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest.fixture
def run_db():
    """Run `scenario(db)` on a fresh in-memory database inside one event loop."""
    def runner(scenario):
        async def main():
            engine = memory_engine()
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            session_factory = async_sessionmaker(engine, expire_on_commit=False, autoflush=False)
            try:
                async with session_factory() as db:
                    return await scenario(db)
            finally:
                await engine.dispose()

        return asyncio.run(main())

    return runner


class FixedRandom:
    """Stands in for random.Random where a scenario needs a known confidence."""

    def __init__(self, value: int):
        self.value = value

    def randint(self, a: int, b: int) -> int:
        return self.value

    def choice(self, seq):
        return seq[0]


class FakeFootballClient:
    def __init__(self, fixtures=None, odds=None, fail_fixtures=False):
        self.fixtures = fixtures or []
        self.odds = odds or {}
        self.fail_fixtures = fail_fixtures
        self.calls = []

    async def get_fixtures(self, date_from, league_id=None, date_to=None):
        from predictsafe.services.football_api import FootballAPIError

        self.calls.append(("fixtures", date_from))
        if self.fail_fixtures:
            raise FootballAPIError("upstream down")
        return self.fixtures

    async def get_odds(self, match_id, date=None):
        self.calls.append(("odds", match_id))
        return self.odds.get(match_id, [])


def fixture_row(match_id="1001", home="Arsenal", away="Chelsea", **extra):
    row = {
        "match_id": match_id,
        "league_id": "152",
        "league_name": "Premier League",
        "match_date": "2025-01-10",
        "match_time": "15:00",
        "match_status": "",
        "match_live": "0",
        "match_hometeam_id": "141",
        "match_awayteam_id": "88",
        "match_hometeam_name": home,
        "match_awayteam_name": away,
    }
    row.update(extra)
    return row


async def make_user(db, email, *, is_admin=False, country="Nigeria", full_name=None):
    return await crud_user.create(
        db,
        obj_in={
            "email": email,
            "full_name": full_name or email.split("@")[0].title(),
            "country": country,
            "is_admin": is_admin,
        },
    )


async def make_plan(db, slug="standard", *, name=None, requires_activation=False, prices=None):
    if prices is None:
        prices = [
            PlanPriceCreate(country="Nigeria", duration_days=30, price=10000, currency="NGN"),
            PlanPriceCreate(country="Other", duration_days=30, price=15, currency="USD"),
        ]
    return await crud_plan.create(
        db,
        obj_in=PlanCreate(
            name=name or slug.replace("-", " ").title(),
            slug=slug,
            requires_activation=requires_activation,
            prices=prices,
        ),
    )


async def make_method(db, *, name="Bank Transfer (NGN)", currency="NGN"):
    return await crud_payment_method.create(
        db, obj_in=PaymentMethodCreate(name=name, type="bank_transfer", currency=currency)
    )
