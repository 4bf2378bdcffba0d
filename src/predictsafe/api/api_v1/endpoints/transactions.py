from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from predictsafe.api.auth_deps import AdminSession, CurrentSession, SessionContext
from predictsafe.core.pbac import require_permission
from predictsafe.crud.crud_transaction import transaction as crud_transaction
from predictsafe.db.session import SessionDep
from predictsafe.schemas import RejectTransactionRequest, SubscriptionDetail, TransactionResponse, TransactionStatus
from predictsafe.services import payment_service, subscription_service

router = APIRouter()


async def _get_transaction(db, transaction_id: UUID):
    transaction = await crud_transaction.get(db, id=transaction_id)
    if not transaction:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return transaction


@router.get("", response_model=list[TransactionResponse])
async def read_transactions(
    db: SessionDep,
    session: AdminSession,
    status: Optional[TransactionStatus] = None,
    skip: int = 0,
    limit: int = 100,
):
    return await crud_transaction.list_filtered(db, status=status, skip=skip, limit=limit)


@router.get("/me", response_model=list[TransactionResponse])
async def read_my_transactions(db: SessionDep, session: CurrentSession, skip: int = 0, limit: int = 100):
    return await crud_transaction.list_filtered(db, user_id=session.user_id, skip=skip, limit=limit)


@router.post("/{transaction_id}/approve", response_model=SubscriptionDetail)
async def approve_transaction(
    transaction_id: UUID,
    db: SessionDep,
    session: Annotated[SessionContext, Depends(require_permission("approve", "transactions"))],
):
    """
    Approve a pending payment.

    The transaction is completed first; the subscription update follows as a
    separate write. A failure of the second step returns 500 and leaves the
    transaction completed.
    """
    transaction = await _get_transaction(db, transaction_id)
    sub = await payment_service.complete_transaction(db, transaction)
    return subscription_service.describe(sub)


@router.post("/{transaction_id}/reject", response_model=TransactionResponse)
async def reject_transaction(
    transaction_id: UUID,
    db: SessionDep,
    session: Annotated[SessionContext, Depends(require_permission("reject", "transactions"))],
    request: RejectTransactionRequest | None = None,
):
    transaction = await _get_transaction(db, transaction_id)
    reason = request.reason if request else None
    return await payment_service.reject_transaction(db, transaction, reason)
