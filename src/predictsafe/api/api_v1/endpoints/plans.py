from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from predictsafe.api.auth_deps import AdminSession, OptionalSession, SessionContext
from predictsafe.core.pbac import require_permission
from predictsafe.crud.crud_plan import plan as crud_plan
from predictsafe.crud.crud_plan import plan_price as crud_plan_price
from predictsafe.db.session import SessionDep
from predictsafe.schemas import (
    MessageResponse, PlanCreate, PlanPriceCreate, PlanPriceResponse, PlanPriceUpdate, PlanResponse,
    PlanUpdate, ResolvedPriceResponse,
)
from predictsafe.services.pricing import currency_symbol, normalize_country, resolve_price

router = APIRouter()


@router.get("", response_model=list[PlanResponse])
async def read_plans(db: SessionDep):
    """Active plans with their price tables."""
    return await crud_plan.get_active(db)


@router.get("/{slug}", response_model=PlanResponse)
async def read_plan(slug: str, db: SessionDep):
    plan = await crud_plan.get_by_slug(db, slug=slug)
    if not plan:
        raise HTTPException(status_code=404, detail="Plan not found")
    return plan


@router.get("/{slug}/price", response_model=ResolvedPriceResponse)
async def resolve_plan_price(
    slug: str,
    db: SessionDep,
    session: OptionalSession,
    duration_days: int = Query(gt=0),
    country: str | None = None,
):
    """
    Price shown to a user for one plan and duration.

    The country defaults to the caller's profile country. The result carries
    the display symbol of the selected row.
    """
    plan = await crud_plan.get_by_slug(db, slug=slug)
    if not plan:
        raise HTTPException(status_code=404, detail="Plan not found")

    user_country = country or (session.user.country if session else None)
    market = normalize_country(user_country)
    price = resolve_price(plan.prices, duration_days, market)
    if price is None:
        raise HTTPException(status_code=404, detail="No price available for this duration")

    return ResolvedPriceResponse(
        plan_id=plan.id,
        plan_slug=plan.slug,
        duration_days=price.duration_days,
        country=price.country,
        price=price.price,
        activation_fee=price.activation_fee,
        currency=price.currency,
        currency_symbol=currency_symbol(price.currency, price.country, market),
    )


@router.post("", response_model=PlanResponse)
async def create_plan(
    plan_in: PlanCreate,
    db: SessionDep,
    session: Annotated[SessionContext, Depends(require_permission("create", "plans"))],
):
    if await crud_plan.get_by_slug(db, slug=plan_in.slug):
        raise HTTPException(status_code=400, detail="A plan with this slug already exists")
    return await crud_plan.create(db, obj_in=plan_in)


@router.put("/{plan_id}", response_model=PlanResponse)
async def update_plan(
    plan_id: UUID,
    plan_in: PlanUpdate,
    db: SessionDep,
    session: AdminSession,
):
    plan = await crud_plan.get(db, id=plan_id)
    if not plan:
        raise HTTPException(status_code=404, detail="Plan not found")
    return await crud_plan.update(db, db_obj=plan, obj_in=plan_in)


@router.delete("/{plan_id}", response_model=MessageResponse)
async def delete_plan(plan_id: UUID, db: SessionDep, session: AdminSession):
    if not await crud_plan.remove(db, id=plan_id):
        raise HTTPException(status_code=404, detail="Plan not found")
    return MessageResponse(message="Plan deleted")


@router.post("/{plan_id}/prices", response_model=PlanPriceResponse)
async def add_plan_price(
    plan_id: UUID,
    price_in: PlanPriceCreate,
    db: SessionDep,
    session: AdminSession,
):
    plan = await crud_plan.get(db, id=plan_id)
    if not plan:
        raise HTTPException(status_code=404, detail="Plan not found")
    row = await crud_plan_price.create(db, obj_in={**price_in.model_dump(), "plan_id": plan.id})
    await db.refresh(plan)
    return row


@router.put("/prices/{price_id}", response_model=PlanPriceResponse)
async def update_plan_price(
    price_id: UUID,
    price_in: PlanPriceUpdate,
    db: SessionDep,
    session: AdminSession,
):
    row = await crud_plan_price.get(db, id=price_id)
    if not row:
        raise HTTPException(status_code=404, detail="Price not found")
    return await crud_plan_price.update(db, db_obj=row, obj_in=price_in)


@router.delete("/prices/{price_id}", response_model=MessageResponse)
async def delete_plan_price(price_id: UUID, db: SessionDep, session: AdminSession):
    if not await crud_plan_price.remove(db, id=price_id):
        raise HTTPException(status_code=404, detail="Price not found")
    return MessageResponse(message="Price deleted")
