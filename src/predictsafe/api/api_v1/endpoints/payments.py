from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from predictsafe.api.auth_deps import CurrentSession, SessionContext
from predictsafe.core.config import settings
from predictsafe.core.pbac import require_permission
from predictsafe.crud.crud_transaction import transaction as crud_transaction
from predictsafe.db.session import SessionDep
from predictsafe.schemas import (
    ActivationPaymentRequest, CheckoutRequest, CheckoutResponse, SubscriptionDetail, TransactionResponse,
)
from predictsafe.services import payment_service, subscription_service

router = APIRouter()


@router.post("/checkout", response_model=CheckoutResponse)
async def checkout(
    request: CheckoutRequest,
    db: SessionDep,
    session: Annotated[SessionContext, Depends(require_permission("create", "payments"))],
):
    """
    Submit proof of a manual payment for a plan.

    The transaction stays pending until an admin approves or rejects it.
    """
    transaction, subscription = await payment_service.checkout(db, session.user, request)
    return CheckoutResponse(
        transaction=TransactionResponse.model_validate(transaction),
        subscription_id=subscription.id,
        message="Payment submitted and awaiting approval",
    )


@router.post("/activation", response_model=TransactionResponse)
async def pay_activation_fee(
    request: ActivationPaymentRequest,
    db: SessionDep,
    session: Annotated[SessionContext, Depends(require_permission("create", "payments"))],
):
    """Submit proof of the activation-fee payment of a subscription."""
    return await payment_service.submit_activation(db, session.user, request)


@router.post("/{transaction_id}/simulate-complete", response_model=SubscriptionDetail)
async def simulate_complete(transaction_id: UUID, db: SessionDep, session: CurrentSession):
    """Complete the caller's own pending payment as if a gateway had confirmed it."""
    if not settings.ENABLE_SIMULATED_GATEWAY:
        raise HTTPException(status_code=404, detail="Not found")
    transaction = await crud_transaction.get(db, id=transaction_id)
    if not transaction or (transaction.user_id != session.user_id and not session.is_admin):
        raise HTTPException(status_code=404, detail="Transaction not found")
    sub = await payment_service.simulate_gateway_completion(db, transaction)
    return subscription_service.describe(sub)
