from fastapi import APIRouter

from predictsafe.api.api_v1.endpoints import (
    admin, auth, chat, content, football, notifications, payments, plans, predictions, subscriptions,
    transactions, users,
)

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(plans.router, prefix="/plans", tags=["plans"])
api_router.include_router(subscriptions.router, prefix="/subscriptions", tags=["subscriptions"])
api_router.include_router(payments.router, prefix="/payments", tags=["payments"])
api_router.include_router(transactions.router, prefix="/transactions", tags=["transactions"])
api_router.include_router(football.router, prefix="/football", tags=["football"])
api_router.include_router(predictions.router, prefix="/predictions", tags=["predictions"])
api_router.include_router(content.router, tags=["content"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
api_router.include_router(chat.router, prefix="/chat", tags=["chat"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
