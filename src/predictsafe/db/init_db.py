import asyncio
import json
import logging
import sys
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncSession

from predictsafe.crud.crud_content import site_config as crud_site_config
from predictsafe.crud.crud_plan import plan as crud_plan
from predictsafe.crud.crud_transaction import payment_method as crud_payment_method
from predictsafe.crud.crud_user import user as crud_user
from predictsafe.db.session import AsyncSessionLocal, engine
from predictsafe.models import Base
from predictsafe.schemas import PaymentMethodCreate, PlanCreate, UserCreate

logger = logging.getLogger(__name__)

SEED_DIR = Path(__file__).parent / "seed"


def _load(name: str):
    with open(SEED_DIR / name, "r") as f:
        return json.load(f)


async def create_tables() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Tables created")


async def _create_plans(db: AsyncSession) -> None:
    """Create the default plans with their price tables, skipping existing slugs."""
    for plan_data in _load("plans.json"):
        if await crud_plan.get_by_slug(db, slug=plan_data["slug"]):
            logger.info(f"Plan already exists: {plan_data['slug']} - skipping")
            continue
        await crud_plan.create(db, obj_in=PlanCreate(**plan_data))
        logger.info(f"Created plan: {plan_data['slug']}")


async def _create_payment_methods(db: AsyncSession) -> None:
    existing = {m.name for m in await crud_payment_method.list_active(db)}
    for method_data in _load("payment_methods.json"):
        if method_data["name"] in existing:
            logger.info(f"Payment method already exists: {method_data['name']} - skipping")
            continue
        await crud_payment_method.create(db, obj_in=PaymentMethodCreate(**method_data))
        logger.info(f"Created payment method: {method_data['name']}")


async def _create_site_config(db: AsyncSession) -> None:
    for key, value in _load("site_config.json").items():
        if await crud_site_config.get_value(db, key=key):
            continue
        await crud_site_config.upsert(db, key=key, value=value)
        logger.info(f"Created site config key: {key}")


async def _create_users(db: AsyncSession) -> None:
    """Create users from JSON seed files if they don't exist.

    Seed users get a local profile only; they sign in once a Supabase account
    with the same email exists.
    """
    users_dir = SEED_DIR / "users"
    if not users_dir.exists():
        logger.info("No users seed directory found - skipping user creation")
        return

    for user_file in users_dir.glob("*.json"):
        try:
            with open(user_file, "r") as f:
                user_data = json.load(f)
            if await crud_user.get_by_email(db, email=user_data["email"]):
                logger.info(f"User already exists: {user_data['email']} - skipping")
                continue
            await crud_user.create(db, obj_in=UserCreate(**user_data))
            logger.info(f"Created user: {user_data['email']}")
        except Exception as e:
            logger.error(f"Error processing user file {user_file}: {str(e)}")
            await db.rollback()
            continue


async def init_db() -> None:
    """Create tables and seed plans, payment methods, site config and users."""
    await create_tables()
    async with AsyncSessionLocal() as db:
        try:
            await _create_plans(db)
            await _create_payment_methods(db)
            await _create_site_config(db)
            await _create_users(db)
            logger.info("Database initialization completed successfully")
        except Exception as e:
            logger.error(f"Database initialization failed: {str(e)}")
            await db.rollback()
            raise


def main() -> None:
    """Main function to run database initialization."""
    try:
        asyncio.run(init_db())
        print("✅ Database initialization completed successfully!")
    except Exception as e:
        print(f"❌ Database initialization failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
