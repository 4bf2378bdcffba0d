import json
import uuid
from datetime import timedelta

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect
from sqlalchemy.ext.asyncio import async_sessionmaker

from conftest import FakeFootballClient, fixture_row, make_method, make_plan, make_user, memory_engine
from predictsafe.api.auth_deps import SessionContext, get_session_context
from predictsafe.crud.crud_message import message as crud_message
from predictsafe.crud.crud_subscription import subscription as crud_subscription
from predictsafe.db.session import get_db
from predictsafe.main import app
from predictsafe.models import Base, User
from predictsafe.schemas import CheckoutRequest, PlanStatus
from predictsafe.services import payment_service
from predictsafe.services.auth_service import auth_service
from predictsafe.services.football_api import get_football_client
from predictsafe.utils.dates import utcnow


@pytest.fixture
def client():
    engine = memory_engine()
    session_factory = async_sessionmaker(engine, expire_on_commit=False, autoflush=False)
    state = {"ready": False}

    async def ensure_tables():
        if not state["ready"]:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            state["ready"] = True

    async def override_get_db():
        await ensure_tables()
        async with session_factory() as session:
            yield session

    async def seed(scenario):
        await ensure_tables()
        async with session_factory() as session:
            return await scenario(session)

    football = FakeFootballClient(fixtures=[fixture_row("1001")], odds={"1001": [{"odd_1": "1.90"}]})
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_football_client] = lambda: football
    with TestClient(app) as test_client:
        # runs `scenario(db)` on the app's event loop against the same database
        test_client.seed = lambda scenario: test_client.portal.call(seed, scenario)
        yield test_client
        test_client.portal.call(engine.dispose)
    app.dependency_overrides.clear()


def sign_in(is_admin=False, user=None):
    user = user or User(id=uuid.uuid4(), email="caller@example.com", country="Ghana", is_admin=is_admin)
    app.dependency_overrides[get_session_context] = lambda: SessionContext(user=user, access_token="token")
    return user


def test_healthz(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_free_predictions_are_public(client):
    response = client.get("/api/predictions")
    assert response.status_code == 200
    assert response.json() == []


def test_paid_predictions_need_sign_in(client):
    response = client.get("/api/predictions", params={"plan_type": "standard"})
    assert response.status_code == 401


def test_sync_preview_returns_camel_case_without_empty_fields(client):
    sign_in(is_admin=True)

    response = client.post(
        "/api/football/sync-predictions",
        json={"date": "2025-01-10", "planType": "free", "preview": True, "minConfidence": 60},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["preview"] is True
    assert body["minConfidence"] == 60
    assert "synced" not in body
    assert "minOdds" not in body
    assert [p["prediction_type"] for p in body["predictions"]] == ["Home Win"]


def test_sync_rejects_inverted_odds_bounds(client):
    sign_in(is_admin=True)

    response = client.post(
        "/api/football/sync-predictions",
        json={"date": "2025-01-10", "minOdds": 3.0, "maxOdds": 1.5, "preview": True},
    )

    assert response.status_code == 400


def test_sync_forbidden_for_regular_users(client):
    sign_in(is_admin=False)

    response = client.post("/api/football/sync-predictions", json={"date": "2025-01-10", "preview": True})

    assert response.status_code == 403


def test_unknown_notification_type_is_rejected(client):
    sign_in()

    response = client.post("/api/notifications/create", json={"type": "lottery_win", "planName": "VIP"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid notification type"


def test_incomplete_notification_payload_is_rejected(client):
    sign_in()

    response = client.post("/api/notifications/create", json={"type": "subscription_event"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Missing required fields"


def test_plan_price_resolution(client):
    sign_in(is_admin=True)
    created = client.post(
        "/api/plans",
        json={
            "name": "Standard",
            "slug": "standard",
            "prices": [
                {"country": "Nigeria", "duration_days": 30, "price": 10000, "currency": "NGN"},
                {"country": "Ghana", "duration_days": 30, "price": 150, "currency": "GHS"},
                {"country": "Other", "duration_days": 30, "price": 15, "currency": "USD"},
            ],
        },
    )
    assert created.status_code == 200

    ghana = client.get("/api/plans/standard/price", params={"duration_days": 30, "country": "ghana"})
    fallback = client.get("/api/plans/standard/price", params={"duration_days": 30, "country": "Peru"})
    missing = client.get("/api/plans/standard/price", params={"duration_days": 7})

    assert (ghana.json()["price"], ghana.json()["currency_symbol"]) == (150, "₵")
    assert (fallback.json()["country"], fallback.json()["currency_symbol"]) == ("Other", "$")
    assert missing.status_code == 404


def test_plan_creation_needs_admin(client):
    sign_in(is_admin=False)

    response = client.post("/api/plans", json={"name": "Standard", "slug": "standard"})

    assert response.status_code == 403


def stub_tokens(monkeypatch, user):
    async def resolve_user(db, token):
        if token != "good-token":
            raise HTTPException(status_code=401, detail="Invalid token")
        return user

    monkeypatch.setattr(auth_service, "resolve_user", resolve_user)


def test_chat_socket_syncs_history_then_streams_messages(client, monkeypatch):
    user = User(id=uuid.uuid4(), email="ada@example.com", is_admin=False)
    stub_tokens(monkeypatch, user)

    with client.websocket_connect("/api/chat/ws?token=good-token") as websocket:
        assert websocket.receive_json() == {"type": "sync", "messages": []}
        websocket.send_text("not json")
        websocket.send_text(json.dumps({"content": "  Is the VIP slip out?  "}))
        event = websocket.receive_json()

    assert event["type"] == "message"
    assert event["message"]["content"] == "Is the VIP slip out?"
    assert event["message"]["user_id"] == str(user.id)


def test_chat_socket_rejects_bad_token(client, monkeypatch):
    stub_tokens(monkeypatch, User(id=uuid.uuid4(), email="ada@example.com", is_admin=False))

    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/api/chat/ws?token=stale") as websocket:
            websocket.receive_json()


def test_chat_socket_rejects_foreign_conversation(client, monkeypatch):
    stub_tokens(monkeypatch, User(id=uuid.uuid4(), email="ada@example.com", is_admin=False))

    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect(f"/api/chat/ws?token=good-token&user_id={uuid.uuid4()}") as websocket:
            websocket.receive_json()


async def live_subscription(db, user, plan, *, status=PlanStatus.ACTIVE, days=5):
    return await crud_subscription.create(
        db,
        obj_in={
            "user_id": user.id,
            "plan_id": plan.id,
            "plan_status": status.value,
            "subscription_fee_paid": True,
            "start_date": utcnow() - timedelta(days=30),
            "expiry_date": utcnow() + timedelta(days=days),
        },
    )


def test_admin_dashboard_counts(client):
    async def scenario(db):
        admin = await make_user(db, "admin@predictsafe.com", is_admin=True)
        ada, bola, carl, dan, eve = [
            await make_user(db, f"{name}@example.com") for name in ("ada", "bola", "carl", "dan", "eve")
        ]
        plan = await make_plan(db, "standard")
        method = await make_method(db)
        request = CheckoutRequest(
            plan_id=plan.id, duration_days=30, payment_method_id=method.id,
            payment_proof_url="https://files.example.com/proof.png",
        )
        await payment_service.checkout(db, ada, request)
        paid, _ = await payment_service.checkout(db, dan, request)
        await payment_service.complete_transaction(db, paid)
        await live_subscription(db, bola, plan, days=5)
        await live_subscription(db, carl, plan, status=PlanStatus.PENDING_ACTIVATION)
        await live_subscription(db, eve, plan, days=-1)
        await crud_message.create(db, obj_in={"user_id": ada.id, "sender_id": ada.id, "content": "Hello?"})
        return admin

    admin = client.seed(scenario)
    sign_in(user=admin)

    badges = client.get("/api/admin/badge-counts").json()
    stats = client.get("/api/admin/stats").json()

    assert badges == {"notifications": 2, "transactions": 1, "activations": 1, "messages": 1}
    # eve's row is still stored as active but its expiry has passed
    assert stats["active_subscribers"] == 2
    assert stats["pending_activations"] == 1
    assert stats["new_signups"] == 6
    assert stats["daily_revenue"] == 10000
    assert len(stats["recent_transactions"]) == 2
    expiring = stats["expiring_subscriptions"]
    assert [row["user_email"] for row in expiring] == ["bola@example.com", "dan@example.com"]
    assert expiring[0]["plan_name"] == "Standard"


def test_admin_dashboard_needs_admin(client):
    sign_in(is_admin=False)

    assert client.get("/api/admin/stats").status_code == 403
    assert client.get("/api/admin/badge-counts").status_code == 403


def test_blog_published_at_is_stamped_on_first_publish_only(client):
    sign_in(is_admin=True)
    draft = client.post("/api/blog", json={"title": "Weekend Tips", "content": "Four picks."}).json()
    assert (draft["slug"], draft["published_at"]) == ("weekend-tips", None)
    assert client.get("/api/blog/weekend-tips").status_code == 404

    published = client.put(f"/api/blog/{draft['id']}", json={"published": True}).json()
    client.put(f"/api/blog/{draft['id']}", json={"published": False})
    republished = client.put(f"/api/blog/{draft['id']}", json={"published": True}).json()

    assert published["published_at"] is not None
    assert republished["published_at"] == published["published_at"]
    assert client.get("/api/blog/weekend-tips").json()["title"] == "Weekend Tips"


def test_whatsapp_number_is_stored_as_a_list(client):
    sign_in(is_admin=True)

    single = client.put("/api/site-config/whatsapp_number", json={"value": " +2348000000000 "})
    several = client.put("/api/site-config/whatsapp_number", json={"value": ["+2348000000000", "", " +233200000000"]})
    other = client.put("/api/site-config/site_name", json={"value": " PredictSafe "})

    assert single.json()["value"] == ["+2348000000000"]
    assert several.json()["value"] == ["+2348000000000", "+233200000000"]
    assert client.get("/api/site-config/whatsapp_number").json()["value"] == ["+2348000000000", "+233200000000"]
    assert other.json()["value"] == " PredictSafe "


def test_send_email_rejects_unknown_or_unsupported_types(client):
    sign_in(is_admin=True)

    bogus = client.post("/api/notifications/send-email", json={"type": "bogus", "email": "ada@example.com", "planName": "VIP"})
    welcome = client.post(
        "/api/notifications/send-email", json={"type": "user_welcome", "email": "ada@example.com", "planName": "VIP"}
    )
    no_plan = client.post("/api/notifications/send-email", json={"type": "payment_approved", "email": "ada@example.com"})

    assert (bogus.status_code, bogus.json()["detail"]) == (400, "Invalid email type")
    assert (welcome.status_code, welcome.json()["detail"]) == (400, "Invalid email type")
    assert no_plan.status_code == 400


def test_send_email_to_unknown_user(client):
    sign_in(is_admin=True)

    by_email = client.post(
        "/api/notifications/send-email",
        json={"type": "payment_approved", "email": "nobody@example.com", "planName": "VIP"},
    )
    by_id = client.post(
        "/api/notifications/send-email",
        json={"type": "payment_approved", "userId": str(uuid.uuid4()), "planName": "VIP"},
    )

    assert (by_email.status_code, by_email.json()["detail"]) == (404, "User not found")
    assert by_id.status_code == 404


def test_send_email_needs_notify_permission(client):
    sign_in(is_admin=False)

    response = client.post(
        "/api/notifications/send-email",
        json={"type": "payment_approved", "email": "ada@example.com", "planName": "VIP"},
    )

    assert response.status_code == 403


def test_notify_prediction_update(client):
    async def scenario(db):
        plan = await make_plan(db, "correct-score", name="Correct Score")
        await live_subscription(db, await make_user(db, "ada@example.com"), plan)
        await live_subscription(db, await make_user(db, "bola@example.com"), plan, days=-1)

    client.seed(scenario)
    sign_in(is_admin=True)

    missing = client.post("/api/notifications/notify-prediction-update", json={"planType": "platinum"})
    found = client.post("/api/notifications/notify-prediction-update", json={"planType": "correct_score"})

    assert (missing.status_code, missing.json()["detail"]) == (404, "Plan not found")
    assert found.json() == {"success": True, "notified": 1, "message": None}
