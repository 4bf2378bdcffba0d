import json
import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, WebSocket, WebSocketDisconnect, status

from predictsafe.api.auth_deps import AdminSession, CurrentSession, session_from_token
from predictsafe.crud.crud_message import message as crud_message
from predictsafe.crud.crud_user import user as crud_user
from predictsafe.db.session import SessionDep
from predictsafe.schemas import ChatMessageResponse, ConversationSummary, CountResponse, MessageCreate
from predictsafe.services.chat_service import chat_service, sync_event
from predictsafe.utils.validation import is_valid_uuid

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/messages", response_model=list[ChatMessageResponse])
async def read_my_messages(db: SessionDep, session: CurrentSession):
    """The caller's conversation with support. Admin replies are marked read."""
    return await chat_service.open_conversation(db, conversation_id=session.user_id, viewer_id=session.user_id)


@router.post("/messages", response_model=ChatMessageResponse)
async def send_my_message(message_in: MessageCreate, db: SessionDep, session: CurrentSession):
    return await chat_service.send(db, conversation_id=session.user_id, sender=session.user, content=message_in.content)


@router.get("/unread-count", response_model=CountResponse)
async def count_my_unread(db: SessionDep, session: CurrentSession):
    """Unread messages for the caller; admins get the count across all conversations."""
    conversation_id = None if session.is_admin else session.user_id
    count = await crud_message.count_unread_for_viewer(db, viewer_id=session.user_id, user_id=conversation_id)
    return CountResponse(count=count)


@router.get("/conversations", response_model=list[ConversationSummary])
async def read_conversations(db: SessionDep, session: AdminSession):
    return await chat_service.conversations(db, viewer_id=session.user_id)


@router.get("/conversations/{user_id}", response_model=list[ChatMessageResponse])
async def read_conversation(user_id: UUID, db: SessionDep, session: AdminSession):
    """A user's conversation, oldest first. The user's unread messages are marked read."""
    if not await crud_user.exists(db, id=user_id):
        raise HTTPException(status_code=404, detail="User not found")
    return await chat_service.open_conversation(db, conversation_id=user_id, viewer_id=session.user_id)


@router.post("/conversations/{user_id}/messages", response_model=ChatMessageResponse)
async def reply(user_id: UUID, message_in: MessageCreate, db: SessionDep, session: AdminSession):
    if not await crud_user.exists(db, id=user_id):
        raise HTTPException(status_code=404, detail="User not found")
    return await chat_service.send(db, conversation_id=user_id, sender=session.user, content=message_in.content)


@router.websocket("/ws")
async def chat_socket(
    websocket: WebSocket,
    db: SessionDep,
    token: str,
    user_id: Optional[str] = None,
):
    """
    Live chat channel for one conversation.

    Every connection starts with a `sync` event carrying the full history, so
    a reconnecting client never depends on missed events. `message` events
    follow for each new row. Clients may post `{"content": "..."}`.
    """
    try:
        session = await session_from_token(db, token)
    except HTTPException as e:
        logger.info(f"Chat socket rejected: {e.detail}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    if user_id is None:
        conversation_id = session.user_id
    elif is_valid_uuid(user_id) and (UUID(user_id) == session.user_id or session.is_admin):
        conversation_id = UUID(user_id)
    else:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    chat_service.realtime.subscribe(conversation_id, websocket)
    try:
        history = await chat_service.open_conversation(db, conversation_id=conversation_id, viewer_id=session.user_id)
        await websocket.send_json(sync_event(history))

        while True:
            try:
                data = json.loads(await websocket.receive_text())
            except ValueError:
                continue
            content = str(data.get("content", "")).strip() if isinstance(data, dict) else ""
            if not content:
                continue
            await chat_service.send(db, conversation_id=conversation_id, sender=session.user, content=content[:4000])
    except WebSocketDisconnect:
        logger.info(f"Chat socket for {conversation_id} disconnected")
    finally:
        chat_service.realtime.unsubscribe(conversation_id, websocket)
