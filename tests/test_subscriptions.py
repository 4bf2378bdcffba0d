from datetime import timedelta

import pytest
from fastapi import HTTPException

from conftest import make_plan, make_user
from predictsafe.crud.crud_notification import notification as crud_notification
from predictsafe.schemas import GrantSubscriptionRequest
from predictsafe.schemas.enums import NotificationType, PlanStatus, PlanType
from predictsafe.services import entitlement, subscription_service
from predictsafe.utils.dates import utcnow


async def granted(db, slug="standard", days=30):
    user = await make_user(db, "ada@example.com")
    plan = await make_plan(db, slug)
    subscription = await subscription_service.grant(
        db, GrantSubscriptionRequest(user_id=user.id, plan_id=plan.id, duration_days=days)
    )
    return user, plan, subscription


def test_grant_opens_access_and_notifies(run_db):
    async def scenario(db):
        user, plan, subscription = await granted(db)
        detail = subscription_service.describe(subscription)
        rows = await crud_notification.list_for_user(db, user_id=user.id)
        can_view = await subscription_service.can_view(db, user, PlanType.STANDARD)
        return detail, [r.type for r in rows], can_view

    detail, types, can_view = run_db(scenario)

    assert detail.effective_status == PlanStatus.ACTIVE
    assert detail.plan_slug == "standard"
    assert detail.seconds_remaining > 29 * 24 * 3600
    assert types == [NotificationType.SUBSCRIPTION_CONFIRMED.value]
    assert can_view is True


def test_grant_twice_is_refused(run_db):
    async def scenario(db):
        user, plan, _ = await granted(db)
        with pytest.raises(HTTPException) as exc:
            await subscription_service.grant(db, GrantSubscriptionRequest(user_id=user.id, plan_id=plan.id))
        return exc.value.status_code

    assert run_db(scenario) == 400


def test_can_view(run_db):
    async def scenario(db):
        user = await make_user(db, "ada@example.com")
        admin = await make_user(db, "admin@predictsafe.com", is_admin=True)
        await make_plan(db, "standard")
        return (
            await subscription_service.can_view(db, None, PlanType.FREE),
            await subscription_service.can_view(db, None, PlanType.STANDARD),
            await subscription_service.can_view(db, user, PlanType.STANDARD),
            await subscription_service.can_view(db, admin, PlanType.STANDARD),
        )

    assert run_db(scenario) == (True, False, False, True)


def test_deactivate_then_reactivate(run_db):
    async def scenario(db):
        user, plan, subscription = await granted(db)
        expiry = subscription.expiry_date
        await subscription_service.deactivate(db, subscription)
        off = subscription.plan_status
        with pytest.raises(HTTPException) as exc:
            await subscription_service.deactivate(db, subscription)
        await subscription_service.reactivate(db, subscription)
        return off, exc.value.status_code, subscription.plan_status, subscription.expiry_date == expiry

    off, second_deactivate, status, same_expiry = run_db(scenario)

    assert off == PlanStatus.INACTIVE.value
    assert second_deactivate == 400
    assert status == PlanStatus.ACTIVE.value
    assert same_expiry


def test_correct_score_activation_only_for_correct_score_plan(run_db):
    async def scenario(db):
        _, _, standard = await granted(db)
        with pytest.raises(HTTPException) as exc:
            await subscription_service.activate_correct_score(db, standard)

        other = await make_user(db, "bola@example.com")
        plan = await make_plan(db, "correct-score")
        correct_score = await subscription_service.grant(
            db, GrantSubscriptionRequest(user_id=other.id, plan_id=plan.id, duration_days=1)
        )
        await subscription_service.activate_correct_score(db, correct_score)
        return exc.value.status_code, correct_score

    status_code, subscription = run_db(scenario)

    assert status_code == 400
    assert subscription.expiry_date - subscription.start_date == timedelta(days=7)


def test_expire_overdue_persists_expired_status(run_db):
    async def scenario(db):
        user, plan, subscription = await granted(db, days=1)
        expired = await subscription_service.expire_overdue(db, now=utcnow() + timedelta(days=2))
        again = await subscription_service.expire_overdue(db, now=utcnow() + timedelta(days=2))
        rows = await crud_notification.list_for_user(db, user_id=user.id)
        return expired, again, subscription, {r.type for r in rows}

    expired, again, subscription, types = run_db(scenario)

    assert [s.id for s in expired] == [subscription.id]
    assert again == []
    assert subscription.plan_status == PlanStatus.EXPIRED.value
    assert NotificationType.SUBSCRIPTION_EXPIRED.value in types


def test_sweep_agrees_with_read_time_expiry_at_the_boundary(run_db):
    async def scenario(db):
        _, _, subscription = await granted(db, days=1)
        expiry = subscription.expiry_date
        before = await subscription_service.expire_overdue(db, now=expiry - timedelta(microseconds=1))
        access_at_expiry = entitlement.has_access(subscription, expiry)
        at = await subscription_service.expire_overdue(db, now=expiry)
        return before, access_at_expiry, at, subscription

    before, access_at_expiry, at, subscription = run_db(scenario)

    assert before == []
    assert access_at_expiry is False
    assert [s.id for s in at] == [subscription.id]
