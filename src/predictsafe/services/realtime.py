"""
In-process fan-out of chat events to connected websockets.

Subscribers are keyed by conversation (the user id that owns the messages).
Delivery is best effort: a subscriber that fails to receive is dropped, and a
client that reconnects re-fetches the full history instead of relying on
missed events being replayed.
"""
import logging
from collections import defaultdict
from typing import Any, Dict, Protocol, Set
from uuid import UUID

logger = logging.getLogger(__name__)


class Subscriber(Protocol):
    async def send_json(self, data: Any) -> None: ...


class ChatHub:
    def __init__(self):
        self.channels: Dict[UUID, Set[Subscriber]] = defaultdict(set)

    def subscribe(self, conversation_id: UUID, subscriber: Subscriber) -> None:
        self.channels[conversation_id].add(subscriber)
        logger.info("Chat subscriber joined %s. total=%d", conversation_id, len(self.channels[conversation_id]))

    def unsubscribe(self, conversation_id: UUID, subscriber: Subscriber) -> None:
        channel = self.channels.get(conversation_id)
        if not channel:
            return
        channel.discard(subscriber)
        if not channel:
            del self.channels[conversation_id]
        logger.info("Chat subscriber left %s", conversation_id)

    def subscriber_count(self, conversation_id: UUID) -> int:
        return len(self.channels.get(conversation_id, ()))

    async def publish(self, conversation_id: UUID, event: Dict[str, Any]) -> int:
        """Send an event to every subscriber of a conversation. Returns deliveries."""
        delivered = 0
        for subscriber in list(self.channels.get(conversation_id, ())):
            try:
                await subscriber.send_json(event)
                delivered += 1
            except Exception as e:
                logger.warning(f"Dropping chat subscriber of {conversation_id}: {e}")
                self.unsubscribe(conversation_id, subscriber)
        return delivered


hub = ChatHub()
