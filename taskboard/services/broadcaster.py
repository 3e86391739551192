"""
Event Broadcaster for Real-Time Updates.

Fans task and category lifecycle events out to every live subscriber of the
owning user's private channel. Delivery is at-most-once: nothing is replayed
to a subscriber that connects later, and a subscriber whose queue is full
misses the event.
"""

import asyncio
import logging
import threading
from datetime import datetime
from typing import Any, Dict, Set

from taskboard.config import BROADCAST_QUEUE_SIZE

logger = logging.getLogger(__name__)

TASK_CREATED = "taskCreated"
TASK_UPDATED = "taskUpdated"
TASK_DELETED = "taskDeleted"
CATEGORY_CREATED = "categoryCreated"
CATEGORY_UPDATED = "categoryUpdated"
CATEGORY_DELETED = "categoryDeleted"


class Subscription:
    """One live connection on a user's channel, bound to its event loop."""

    def __init__(self, owner_id: str, loop: asyncio.AbstractEventLoop, maxsize: int):
        self.owner_id = owner_id
        self.loop = loop
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)

    def offer(self, message: Dict[str, Any]):
        """Enqueue without waiting. Must run on ``self.loop``."""
        try:
            self.queue.put_nowait(message)
        except asyncio.QueueFull:
            logger.warning(f"Dropping {message.get('event')} for user {self.owner_id}: subscriber queue full")

    async def get(self) -> Dict[str, Any]:
        return await self.queue.get()


class EventBroadcaster:
    """Per-user publish/subscribe hub."""

    def __init__(self, queue_size: int = BROADCAST_QUEUE_SIZE):
        self.queue_size = queue_size
        self.user_channels: Dict[str, Set[Subscription]] = {}
        self._lock = threading.Lock()

    def subscribe(self, owner_id: str) -> Subscription:
        """Join ``owner_id``'s channel. Must be called from a running event loop."""
        subscription = Subscription(owner_id, asyncio.get_running_loop(), self.queue_size)
        with self._lock:
            self.user_channels.setdefault(owner_id, set()).add(subscription)
            count = len(self.user_channels[owner_id])
        logger.info(f"User {owner_id} subscribed. Connections for user: {count}")
        return subscription

    def unsubscribe(self, subscription: Subscription):
        with self._lock:
            channel = self.user_channels.get(subscription.owner_id)
            if channel is None:
                return
            channel.discard(subscription)
            if not channel:  # If no connections left for user
                del self.user_channels[subscription.owner_id]
        logger.info(f"User {subscription.owner_id} unsubscribed")

    def subscriber_count(self, owner_id: str) -> int:
        with self._lock:
            return len(self.user_channels.get(owner_id, ()))

    def publish(self, owner_id: str, event_name: str, payload: Dict[str, Any]) -> int:
        """
        Deliver an event to every subscriber of ``owner_id``'s channel.

        Safe to call from worker threads. Returns the number of subscribers
        the event was handed to.
        """
        message = {
            "event": event_name,
            "data": payload,
            "timestamp": datetime.utcnow().isoformat()
        }

        with self._lock:
            subscriptions = list(self.user_channels.get(owner_id, ()))

        delivered = 0
        for subscription in subscriptions:
            try:
                subscription.loop.call_soon_threadsafe(subscription.offer, message)
                delivered += 1
            except RuntimeError:
                # Event loop already closed; the connection is gone
                self.unsubscribe(subscription)

        logger.debug(f"Published {event_name} to {delivered} subscriber(s) of user {owner_id}")
        return delivered


# Global broadcaster instance, injected into the services through dependencies
broadcaster = EventBroadcaster()
