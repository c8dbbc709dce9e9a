"""Player-facing board operations, each one an atomic room transaction.

Every function here takes the room lock, validates against freshly read
state, applies the change, records the audit event, commits, and only then
publishes a single room notification.  Any GameError raised along the way
rolls the whole operation back.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from mixmo.models.board_tile import BoardTile
from mixmo.models.event import EventType, RoomEvent
from mixmo.services import board_service
from mixmo.services.board_service import ExpandDirection, GridBounds
from mixmo.services.notification_service import ChangedTable, notify_room_changed
from mixmo.services.room_lock import room_transaction
from mixmo.services.room_service import finish_if_over, require_active, require_seated


async def place_tile(
    db: AsyncSession,
    room_id: str,
    player_id: int,
    seq: int,
    x: int,
    y: int,
    as_letter: str | None = None,
) -> BoardTile:
    async with room_transaction(db, room_id) as room:
        require_active(room)
        await require_seated(db, room.id, player_id)

        entry = await board_service.place(db, room, player_id, seq, x, y, as_letter)
        db.add(
            RoomEvent(
                room_id=room.id,
                user_id=player_id,
                type=EventType.place,
                payload={"tile": seq, "x": x, "y": y, "as_letter": entry.as_letter},
            )
        )
        await db.flush()
        finished = await finish_if_over(db, room, player_id)

    tables = [ChangedTable.rack, ChangedTable.board]
    if finished:
        tables.append(ChangedTable.room)
    notify_room_changed(room_id, tables, EventType.place.value, actor_id=player_id, payload={"tile": seq})
    return entry


async def move_tile(
    db: AsyncSession, room_id: str, player_id: int, seq: int, x: int, y: int
) -> BoardTile:
    async with room_transaction(db, room_id) as room:
        require_active(room)
        await require_seated(db, room.id, player_id)

        current = await board_service.get_entry(db, room.id, player_id, seq)
        origin = (current.x, current.y) if current is not None else None
        entry = await board_service.move(db, room, player_id, seq, x, y)
        if origin != (x, y):
            db.add(
                RoomEvent(
                    room_id=room.id,
                    user_id=player_id,
                    type=EventType.move,
                    payload={"tile": seq, "x": x, "y": y, "from": list(origin)},
                )
            )
            await db.flush()

    notify_room_changed(
        room_id, [ChangedTable.board], EventType.move.value, actor_id=player_id, payload={"tile": seq}
    )
    return entry


async def unplace_tile(db: AsyncSession, room_id: str, player_id: int, seq: int) -> int:
    async with room_transaction(db, room_id) as room:
        require_active(room)
        await require_seated(db, room.id, player_id)

        await board_service.unplace(db, room, player_id, seq)
        db.add(
            RoomEvent(
                room_id=room.id,
                user_id=player_id,
                type=EventType.unplace,
                payload={"tiles": [seq]},
            )
        )
        await db.flush()

    notify_room_changed(
        room_id, [ChangedTable.rack, ChangedTable.board], EventType.unplace.value, actor_id=player_id
    )
    return seq


async def recall_tiles(db: AsyncSession, room_id: str, player_id: int) -> list[int]:
    async with room_transaction(db, room_id) as room:
        require_active(room)
        await require_seated(db, room.id, player_id)

        seqs = await board_service.recall(db, room, player_id)
        if seqs:
            db.add(
                RoomEvent(
                    room_id=room.id,
                    user_id=player_id,
                    type=EventType.unplace,
                    payload={"tiles": seqs},
                )
            )
            await db.flush()

    if seqs:
        notify_room_changed(
            room_id, [ChangedTable.rack, ChangedTable.board], "recall", actor_id=player_id
        )
    return seqs


async def lock_tile(db: AsyncSession, room_id: str, player_id: int, seq: int) -> BoardTile:
    async with room_transaction(db, room_id) as room:
        require_active(room)
        await require_seated(db, room.id, player_id)
        entry = await board_service.lock(db, room, player_id, seq)

    notify_room_changed(room_id, [ChangedTable.board], "lock", actor_id=player_id, payload={"tile": seq})
    return entry


async def expand_grid(
    db: AsyncSession, room_id: str, player_id: int, direction: ExpandDirection
) -> GridBounds:
    async with room_transaction(db, room_id) as room:
        require_active(room)
        await require_seated(db, room.id, player_id)
        bounds = await board_service.expand(db, room, direction)

    notify_room_changed(
        room_id, [ChangedTable.room], "expand", actor_id=player_id, payload={"direction": direction.value}
    )
    return bounds
