"""Per-room serialization of engine mutations.

Both players of a room issue requests independently.  Every compound
mutation (deal, placement, recall, mixmo, ...) runs inside
``room_transaction`` so that validation and writes happen under the same
lock: an in-process ``asyncio.Lock`` per room, plus a ``SELECT ... FOR
UPDATE`` on the room row so several worker processes sharing a PostgreSQL
database serialize as well (SQLite ignores the row lock and relies on its
database-level write lock).
"""

import asyncio
import logging
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mixmo.errors import RoomNotFound
from mixmo.models.room import Room

logger = logging.getLogger(__name__)

# An entry lives as long as some transaction holds or awaits its lock
_room_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()


def get_room_lock(room_id: str) -> asyncio.Lock:
    lock = _room_locks.get(room_id)
    if lock is None:
        lock = asyncio.Lock()
        _room_locks[room_id] = lock
    return lock


async def load_room_for_update(db: AsyncSession, room_id: str) -> Room:
    result = await db.execute(
        select(Room)
        .where(Room.id == room_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    room = result.scalar_one_or_none()
    if room is None:
        raise RoomNotFound()
    return room


@asynccontextmanager
async def room_transaction(db: AsyncSession, room_id: str) -> AsyncIterator[Room]:
    """Lock the room, yield its fresh row, commit on success, roll back on error."""
    lock = get_room_lock(room_id)
    async with lock:
        try:
            room = await load_room_for_update(db, room_id)
            yield room
            await db.commit()
        except Exception:
            await db.rollback()
            raise
