"""MIXMO: the two-player tile exchange.

A player whose rack is empty may call MIXMO.  Four tiles leave the bag at
once: the two lowest seqs go to the caller, the next two to the opponent,
each appended to the right end of the receiving rack.  All four are recorded
as drawn by the caller.

The whole exchange runs in one room transaction.  When both players call
MIXMO at the same moment the second caller sees the first one's result: a
non-empty rack (RackNotEmpty) or a bag with fewer than four tiles
(InsufficientTiles), never a double deal.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from mixmo.config import settings
from mixmo.errors import NotInRoom, RackNotEmpty, WrongPlayerCount
from mixmo.models.event import EventType, RoomEvent
from mixmo.services import bag_service, rack_service
from mixmo.services.notification_service import ChangedTable, notify_room_changed
from mixmo.services.room_lock import room_transaction
from mixmo.services.room_service import finish_if_over, get_players_for_room, require_active

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MixmoResult:
    distributed_tiles: list[int]
    caller_tiles: list[int]
    other_player_tiles: list[int]
    other_player_id: int


async def request_mixmo(db: AsyncSession, room_id: str, player_id: int) -> MixmoResult:
    draw_count = settings.mixmo_draw_count
    half = draw_count // 2

    async with room_transaction(db, room_id) as room:
        require_active(room)

        players = await get_players_for_room(db, room.id)
        if len(players) != 2:
            raise WrongPlayerCount()
        if not any(p.user_id == player_id for p in players):
            raise NotInRoom()
        other_id = next(p.user_id for p in players if p.user_id != player_id)

        if await rack_service.rack_count(db, room.id, player_id) > 0:
            raise RackNotEmpty()

        tiles = await bag_service.withdraw(db, room.id, draw_count)
        seqs = [t.seq for t in tiles]
        caller_seqs, other_seqs = seqs[:half], seqs[half:]

        await rack_service.draw(db, room.id, player_id, caller_seqs)
        await rack_service.draw(db, room.id, other_id, other_seqs)
        await bag_service.mark_drawn(
            db, room.id, seqs, by_player=player_id, at=datetime.now(timezone.utc)
        )

        db.add(
            RoomEvent(
                room_id=room.id,
                user_id=player_id,
                type=EventType.mixmo,
                payload={
                    "distributed_tiles": seqs,
                    "caller_tiles": caller_seqs,
                    "other_player_tiles": other_seqs,
                },
            )
        )
        await db.flush()
        finished = await finish_if_over(db, room, player_id)

    logger.info("MIXMO by user %s in room %s: %s", player_id, room_id, seqs)
    tables = [ChangedTable.bag, ChangedTable.rack]
    if finished:
        tables.append(ChangedTable.room)
    notify_room_changed(
        room_id,
        tables,
        EventType.mixmo.value,
        actor_id=player_id,
        payload={"distributed_tiles": seqs},
    )
    return MixmoResult(
        distributed_tiles=seqs,
        caller_tiles=caller_seqs,
        other_player_tiles=other_seqs,
        other_player_id=other_id,
    )
