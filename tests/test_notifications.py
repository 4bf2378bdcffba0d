import asyncio

from conftest import make_plan, make_user
from predictsafe.crud.crud_notification import notification as crud_notification
from predictsafe.crud.crud_subscription import subscription as crud_subscription
from predictsafe.schemas.enums import NotificationType, SubscriptionEvent
from predictsafe.services import email_templates, entitlement, notification_service
from predictsafe.services.email_service import EmailService, html_to_text
from predictsafe.services.email_templates import RenderedEmail


def test_templates_escape_plan_names():
    email = email_templates.subscription_confirmed("<VIP>")

    assert email.subject == "Subscription Confirmed - <VIP>"
    assert "&lt;VIP&gt;" in email.html
    assert "<VIP>" not in email.html


def test_rejection_reason_is_optional():
    with_reason = email_templates.payment_rejected("Standard", "Wrong amount")
    without_reason = email_templates.payment_rejected("Standard")

    assert "Wrong amount" in with_reason.html
    assert "alert-box\"" not in without_reason.html


def test_render_email_by_type():
    assert notification_service.render_email(NotificationType.PREDICTION_DROPPED, "Standard").subject == (
        "New Predictions Available for Standard!"
    )
    assert notification_service.render_email(NotificationType.USER_WELCOME, user_name="Ada").subject == (
        "Welcome to PredictSafe!"
    )
    assert notification_service.render_email(NotificationType.SUBSCRIPTION_EXPIRED) is None
    assert notification_service.render_email(NotificationType.ADMIN_NEW_SUBSCRIPTION, "Standard") is None
    assert "ada@example.com" in notification_service.render_email(
        NotificationType.ADMIN_NEW_SUBSCRIPTION, "Standard", user_email="ada@example.com"
    ).html


def test_event_messages():
    assert notification_service.event_message(SubscriptionEvent.CONFIRMED, "Standard") == (
        "Your subscription for Standard has been confirmed!"
    )
    assert notification_service.event_message(SubscriptionEvent.EXPIRED, "Standard") == (
        "Your subscription for Standard has expired."
    )


def test_html_to_text_strips_tags():
    assert html_to_text("<p>Hello</p>\n  <p><strong>Ada</strong></p>\n\n") == "Hello\nAda"


def test_email_is_skipped_without_credentials():
    service = EmailService()
    service.user = ""
    service.password = ""

    sent = asyncio.run(service.send("ada@example.com", RenderedEmail(subject="Hi", html="<p>Hi</p>")))

    assert sent is False


def test_email_message_has_text_and_html_parts():
    service = EmailService()
    service.user = "noreply@predictsafe.com"

    msg = service.build_message("ada@example.com", email_templates.payment_approved("Standard"))

    assert msg["To"] == "ada@example.com"
    assert msg["Subject"] == "Payment Approved - Standard"
    assert [part.get_content_type() for part in msg.iter_parts()] == ["text/plain", "text/html"]


def test_create_notification_stores_unread_row(run_db):
    async def scenario(db):
        user = await make_user(db, "ada@example.com")
        row = await notification_service.notify_subscription_event(
            db, user, "Standard", SubscriptionEvent.REMOVED
        )
        stored_read = row.read
        unread = await crud_notification.count_unread(db, user_id=user.id)
        marked = await crud_notification.mark_all_read(db, user_id=user.id)
        return row, stored_read, unread, marked, await crud_notification.count_unread(db, user_id=user.id)

    row, stored_read, unread, marked, unread_after = run_db(scenario)

    assert row.type == NotificationType.SUBSCRIPTION_REMOVED.value
    assert row.title == "Subscription Removed"
    assert stored_read is False
    assert (unread, marked, unread_after) == (1, 1, 0)
    # the bulk update is synchronized onto rows already loaded in the session
    assert row.read is True


def test_prediction_drop_reaches_active_subscribers_only(run_db):
    async def scenario(db):
        plan = await make_plan(db, "standard")
        active = await make_user(db, "ada@example.com")
        lapsed = await make_user(db, "bola@example.com")
        subscriptions = []
        for user, days in ((active, 30), (lapsed, -1)):
            sub = await crud_subscription.create(db, obj_in={"user_id": user.id, "plan_id": plan.id}, commit=False)
            entitlement.grant(sub, days)
            subscriptions.append(sub)
        await db.commit()
        for sub in subscriptions:
            await db.refresh(sub)

        notified = await notification_service.notify_prediction_dropped(db, plan)
        return (
            notified,
            await crud_notification.count_unread(db, user_id=active.id),
            await crud_notification.count_unread(db, user_id=lapsed.id),
        )

    assert run_db(scenario) == (1, 1, 0)


def test_admin_notice_without_admin_is_skipped(run_db):
    async def scenario(db):
        return await notification_service.notify_admin_new_subscription(db, "Standard", "ada@example.com")

    assert run_db(scenario) is None
