import asyncio

from conftest import make_user
from predictsafe.crud.crud_message import message as crud_message
from predictsafe.services.chat_service import ChatService
from predictsafe.services.realtime import ChatHub


class RecordingSocket:
    def __init__(self):
        self.events = []

    async def send_json(self, data):
        self.events.append(data)


class BrokenSocket:
    async def send_json(self, data):
        raise RuntimeError("connection closed")


def test_opening_conversation_clears_unread_for_viewer(run_db):
    chat = ChatService(ChatHub())

    async def scenario(db):
        user = await make_user(db, "ada@example.com")
        admin = await make_user(db, "admin@predictsafe.com", is_admin=True)
        await chat.send(db, conversation_id=user.id, sender=user, content="Hello, is VIP live today?")
        await chat.send(db, conversation_id=user.id, sender=user, content="  Any update?  ")

        before = await chat.conversations(db, viewer_id=admin.id)
        history = await chat.open_conversation(db, conversation_id=user.id, viewer_id=admin.id)
        after = await chat.conversations(db, viewer_id=admin.id)
        user_side = await crud_message.count_unread_for_viewer(db, viewer_id=user.id, user_id=user.id)
        return user, before, history, after, user_side

    user, before, history, after, user_side = run_db(scenario)

    assert len(before) == 1
    assert before[0].user_id == user.id
    assert before[0].unread_count == 2
    assert before[0].email == "ada@example.com"
    assert sorted(m.content for m in history) == ["Any update?", "Hello, is VIP live today?"]
    assert after[0].unread_count == 0
    assert user_side == 0


def test_reply_is_unread_for_the_user_only(run_db):
    chat = ChatService(ChatHub())

    async def scenario(db):
        user = await make_user(db, "ada@example.com")
        admin = await make_user(db, "admin@predictsafe.com", is_admin=True)
        await chat.send(db, conversation_id=user.id, sender=admin, content="Yes, check the dashboard")
        return (
            await crud_message.count_unread_for_viewer(db, viewer_id=user.id, user_id=user.id),
            await crud_message.count_unread_for_viewer(db, viewer_id=admin.id, user_id=user.id),
        )

    assert run_db(scenario) == (1, 0)


def test_send_publishes_to_conversation_subscribers(run_db):
    hub = ChatHub()
    chat = ChatService(hub)
    socket = RecordingSocket()

    async def scenario(db):
        user = await make_user(db, "ada@example.com")
        hub.subscribe(user.id, socket)
        await chat.send(db, conversation_id=user.id, sender=user, content="ping")
        return user

    user = run_db(scenario)

    assert len(socket.events) == 1
    event = socket.events[0]
    assert event["type"] == "message"
    assert event["message"]["content"] == "ping"
    assert event["message"]["user_id"] == str(user.id)


def test_failing_subscriber_is_dropped():
    hub = ChatHub()
    good, bad = RecordingSocket(), BrokenSocket()
    conversation = "conversation-1"
    hub.subscribe(conversation, good)
    hub.subscribe(conversation, bad)

    delivered = asyncio.run(hub.publish(conversation, {"type": "message"}))

    assert delivered == 1
    assert hub.subscriber_count(conversation) == 1
    assert good.events == [{"type": "message"}]


def test_unsubscribing_last_socket_removes_channel():
    hub = ChatHub()
    socket = RecordingSocket()
    hub.subscribe("c", socket)
    hub.unsubscribe("c", socket)
    hub.unsubscribe("c", socket)

    assert hub.channels == {}
    assert asyncio.run(hub.publish("c", {"type": "message"})) == 0
