from datetime import datetime, timedelta

import pytest
from fastapi import HTTPException

from conftest import make_method, make_plan, make_user
from predictsafe.crud.crud_notification import notification as crud_notification
from predictsafe.crud.crud_transaction import transaction as crud_transaction
from predictsafe.schemas import ActivationPaymentRequest, CheckoutRequest, PlanPriceCreate
from predictsafe.schemas.enums import NotificationType, PaymentType, PlanStatus, TransactionStatus
from predictsafe.services import payment_service

NOW = datetime(2025, 1, 10, 12, 0, 0)

ACTIVATION_PRICES = [
    PlanPriceCreate(country="Nigeria", duration_days=30, price=30000, activation_fee=10000, currency="NGN"),
    PlanPriceCreate(country="Other", duration_days=30, price=50, activation_fee=20, currency="USD"),
]


async def setup(db, slug="standard", **plan_kwargs):
    admin = await make_user(db, "admin@predictsafe.com", is_admin=True)
    user = await make_user(db, "ada@example.com")
    plan = await make_plan(db, slug, **plan_kwargs)
    method = await make_method(db)
    return admin, user, plan, method


def checkout_request(plan, method, duration_days=30, country=None):
    return CheckoutRequest(
        plan_id=plan.id,
        duration_days=duration_days,
        country=country,
        payment_method_id=method.id,
        payment_proof_url="https://files.example.com/proof.png",
    )


async def notification_types(db, user):
    rows = await crud_notification.list_for_user(db, user_id=user.id)
    return {row.type for row in rows}


def test_checkout_then_approval_activates_subscription(run_db):
    async def scenario(db):
        admin, user, plan, method = await setup(db)
        transaction, subscription = await payment_service.checkout(db, user, checkout_request(plan, method))
        pending = (transaction.status, subscription.plan_status, transaction.amount, transaction.currency)

        completed = await payment_service.complete_transaction(db, transaction, now=NOW)
        return pending, transaction, completed, await notification_types(db, admin), await notification_types(db, user)

    pending, transaction, subscription, admin_types, user_types = run_db(scenario)

    assert pending == ("pending", "pending", 10000, "NGN")
    assert transaction.status == TransactionStatus.COMPLETED.value
    assert transaction.subscription_id == subscription.id
    assert transaction.payment_metadata["duration_days"] == 30
    assert subscription.plan_status == PlanStatus.ACTIVE.value
    assert subscription.subscription_fee_paid is True
    assert subscription.expiry_date == NOW + timedelta(days=30)
    assert admin_types == {NotificationType.ADMIN_NEW_PAYMENT.value}
    assert user_types == {NotificationType.SUBSCRIPTION_CREATED.value, NotificationType.PAYMENT_APPROVED.value}


def test_checkout_prices_by_requested_country(run_db):
    async def scenario(db):
        admin, user, plan, method = await setup(db)
        transaction, _ = await payment_service.checkout(db, user, checkout_request(plan, method, country="Brazil"))
        return transaction

    transaction = run_db(scenario)

    assert (transaction.amount, transaction.currency) == (15, "USD")


def test_checkout_from_unpriced_market_is_billed_in_usd(run_db):
    async def scenario(db):
        admin, _, plan, method = await setup(db)
        user = await make_user(db, "kofi@example.com", country="Ghana")
        transaction, _ = await payment_service.checkout(db, user, checkout_request(plan, method))
        return transaction

    transaction = run_db(scenario)

    assert (transaction.amount, transaction.currency) == (15, "USD")


def test_checkout_without_price_for_duration(run_db):
    async def scenario(db):
        admin, user, plan, method = await setup(db)
        with pytest.raises(HTTPException) as exc:
            await payment_service.checkout(db, user, checkout_request(plan, method, duration_days=90))
        return exc.value.status_code

    assert run_db(scenario) == 404


def test_activation_plan_goes_through_two_payments(run_db):
    async def scenario(db):
        admin, user, plan, method = await setup(
            db, "profit-multiplier", requires_activation=True, prices=ACTIVATION_PRICES
        )
        transaction, subscription = await payment_service.checkout(db, user, checkout_request(plan, method))
        await payment_service.complete_transaction(db, transaction, now=NOW)
        waiting = subscription.plan_status

        activation = await payment_service.submit_activation(
            db,
            user,
            ActivationPaymentRequest(
                subscription_id=subscription.id,
                payment_method_id=method.id,
                payment_proof_url="https://files.example.com/activation.png",
            ),
        )
        fee = (activation.amount, activation.payment_type)
        activated = await payment_service.complete_transaction(db, activation, now=NOW)
        return waiting, fee, activated

    waiting, fee, subscription = run_db(scenario)

    assert waiting == PlanStatus.PENDING_ACTIVATION.value
    assert fee == (10000, PaymentType.ACTIVATION.value)
    assert subscription.plan_status == PlanStatus.ACTIVE.value
    assert subscription.subscription_fee_paid and subscription.activation_fee_paid
    assert subscription.expiry_date == NOW + timedelta(days=30)


def test_activation_payment_for_subscription_not_awaiting_activation(run_db):
    async def scenario(db):
        admin, user, plan, method = await setup(
            db, "profit-multiplier", requires_activation=True, prices=ACTIVATION_PRICES
        )
        transaction, subscription = await payment_service.checkout(db, user, checkout_request(plan, method))
        activation = await crud_transaction.create(
            db,
            obj_in={
                "user_id": user.id,
                "plan_id": plan.id,
                "subscription_id": subscription.id,
                "amount": 10000,
                "currency": "NGN",
                "payment_gateway": method.name,
                "payment_type": PaymentType.ACTIVATION.value,
                "status": TransactionStatus.PENDING.value,
                "payment_metadata": {},
            },
        )
        with pytest.raises(HTTPException) as exc:
            await payment_service.complete_transaction(db, activation, now=NOW)
        return exc.value.status_code, activation.status, subscription.plan_status

    status_code, transaction_status, subscription_status = run_db(scenario)

    assert status_code == 409
    assert transaction_status == TransactionStatus.PENDING.value
    assert subscription_status == PlanStatus.PENDING.value


def test_submit_activation_requires_pending_activation(run_db):
    async def scenario(db):
        admin, user, plan, method = await setup(db)
        _, subscription = await payment_service.checkout(db, user, checkout_request(plan, method))
        with pytest.raises(HTTPException) as exc:
            await payment_service.submit_activation(
                db,
                user,
                ActivationPaymentRequest(
                    subscription_id=subscription.id,
                    payment_method_id=method.id,
                    payment_proof_url="https://files.example.com/activation.png",
                ),
            )
        return exc.value.status_code

    assert run_db(scenario) == 400


def test_rejection_fails_transaction_and_withdraws_subscription(run_db):
    async def scenario(db):
        admin, user, plan, method = await setup(db)
        transaction, subscription = await payment_service.checkout(db, user, checkout_request(plan, method))
        await payment_service.reject_transaction(db, transaction, "Proof is unreadable")
        return transaction, subscription, await notification_types(db, user)

    transaction, subscription, user_types = run_db(scenario)

    assert transaction.status == TransactionStatus.FAILED.value
    assert transaction.payment_metadata["rejection_reason"] == "Proof is unreadable"
    assert subscription.plan_status == PlanStatus.INACTIVE.value
    assert NotificationType.PAYMENT_REJECTED.value in user_types


def test_settled_transaction_cannot_be_approved_again(run_db):
    async def scenario(db):
        admin, user, plan, method = await setup(db)
        transaction, _ = await payment_service.checkout(db, user, checkout_request(plan, method))
        await payment_service.complete_transaction(db, transaction, now=NOW)
        with pytest.raises(HTTPException) as exc:
            await payment_service.complete_transaction(db, transaction, now=NOW)
        return exc.value.status_code

    assert run_db(scenario) == 400


def test_checkout_refused_while_subscription_is_live(run_db):
    async def scenario(db):
        admin, user, plan, method = await setup(db)
        transaction, _ = await payment_service.checkout(db, user, checkout_request(plan, method))
        await payment_service.complete_transaction(db, transaction)
        with pytest.raises(HTTPException) as exc:
            await payment_service.checkout(db, user, checkout_request(plan, method))
        return exc.value.status_code

    assert run_db(scenario) == 400


def test_simulated_gateway_records_reference(run_db):
    async def scenario(db):
        admin, user, plan, method = await setup(db)
        transaction, _ = await payment_service.checkout(db, user, checkout_request(plan, method))
        subscription = await payment_service.simulate_gateway_completion(db, transaction)
        return transaction, subscription

    transaction, subscription = run_db(scenario)

    assert transaction.gateway_transaction_id.startswith("simulated_")
    assert subscription.plan_status == PlanStatus.ACTIVE.value
