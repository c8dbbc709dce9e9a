"""Notification service: tells room subscribers that committed state changed.

Subscribers (the WebSocket relay, tests) receive a RoomChange naming the
tables that changed and re-fetch what they need.  The engine publishes
exactly once per committed mutation and only after the commit; a failing
operation publishes nothing.
"""

import asyncio
import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

logger = logging.getLogger(__name__)


class ChangedTable(str, enum.Enum):
    room = "room"
    players = "players"
    rack = "rack"
    board = "board"
    bag = "bag"


@dataclass(frozen=True)
class RoomChange:
    room_id: str
    tables: tuple[ChangedTable, ...]
    event: str
    actor_id: int | None = None
    payload: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "room_id": self.room_id,
            "tables": [t.value for t in self.tables],
            "event": self.event,
            "actor_id": self.actor_id,
            "payload": self.payload,
        }


class RoomNotifier:
    """In-process fan-out of RoomChange messages, one queue per subscriber."""

    def __init__(self, max_queue_size: int = 100):
        self.max_queue_size = max_queue_size
        self._subscribers: dict[str, set[asyncio.Queue]] = {}

    def subscribe(self, room_id: str) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.max_queue_size)
        self._subscribers.setdefault(room_id, set()).add(queue)
        return queue

    def unsubscribe(self, room_id: str, queue: asyncio.Queue) -> None:
        queues = self._subscribers.get(room_id)
        if not queues:
            return
        queues.discard(queue)
        if not queues:
            del self._subscribers[room_id]

    def subscriber_count(self, room_id: str) -> int:
        return len(self._subscribers.get(room_id, ()))

    def publish(self, change: RoomChange) -> None:
        for queue in list(self._subscribers.get(change.room_id, ())):
            try:
                queue.put_nowait(change)
            except asyncio.QueueFull:
                logger.warning(
                    "Dropping %s notification for room %s: subscriber queue is full",
                    change.event,
                    change.room_id,
                )


notifier = RoomNotifier()


def notify_room_changed(
    room_id: str,
    tables: Iterable[ChangedTable],
    event: str,
    actor_id: int | None = None,
    payload: dict[str, Any] | None = None,
) -> RoomChange:
    change = RoomChange(
        room_id=room_id,
        tables=tuple(tables),
        event=event,
        actor_id=actor_id,
        payload=payload or {},
    )
    notifier.publish(change)
    logger.debug("Published %s for room %s (%s)", event, room_id, ", ".join(t.value for t in change.tables))
    return change
