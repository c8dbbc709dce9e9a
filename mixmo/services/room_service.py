import logging
from dataclasses import dataclass

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from mixmo.config import settings
from mixmo.errors import (
    AlreadySeated,
    GameNotActive,
    InvalidStartPrecondition,
    NotInRoom,
    RoomFull,
    RoomNotFound,
)
from mixmo.models.event import EventType, RoomEvent
from mixmo.models.room import BoundsPolicy, Room, RoomState
from mixmo.models.room_player import RoomPlayer
from mixmo.models.user import User
from mixmo.services import bag_service, board_service, rack_service
from mixmo.services.notification_service import ChangedTable, notify_room_changed
from mixmo.services.room_lock import room_transaction

logger = logging.getLogger(__name__)

SEATS = (1, 2)


async def create_room(
    db: AsyncSession,
    owner: User,
    opponent: User | None = None,
    bounds_policy: BoundsPolicy | None = None,
) -> Room:
    if opponent is not None and opponent.id == owner.id:
        raise ValueError("You cannot play against yourself")

    policy = bounds_policy or BoundsPolicy(settings.default_bounds_policy)
    room = Room(owner_id=owner.id, state=RoomState.waiting, bounds_policy=policy)
    board_service.initial_bounds().apply_to(room)
    db.add(room)
    await db.flush()  # get room.id before seating players

    # Owner always takes the first seat
    db.add(RoomPlayer(room_id=room.id, user_id=owner.id, seat=1))
    if opponent is not None:
        db.add(RoomPlayer(room_id=room.id, user_id=opponent.id, seat=2))
    await db.commit()
    await db.refresh(room)
    return room


async def get_room(db: AsyncSession, room_id: str) -> Room | None:
    result = await db.execute(select(Room).where(Room.id == room_id))
    return result.scalar_one_or_none()


async def get_room_or_raise(db: AsyncSession, room_id: str) -> Room:
    room = await get_room(db, room_id)
    if room is None:
        raise RoomNotFound()
    return room


async def list_rooms_for_user(db: AsyncSession, user_id: int) -> list[Room]:
    result = await db.execute(
        select(Room)
        .outerjoin(RoomPlayer, RoomPlayer.room_id == Room.id)
        .where(or_(Room.owner_id == user_id, RoomPlayer.user_id == user_id))
        .order_by(Room.created_at.desc())
    )
    return list(result.scalars().unique().all())


async def get_players_for_room(db: AsyncSession, room_id: str) -> list[RoomPlayer]:
    result = await db.execute(
        select(RoomPlayer).where(RoomPlayer.room_id == room_id).order_by(RoomPlayer.seat)
    )
    return list(result.scalars().all())


async def get_player_in_room(db: AsyncSession, room_id: str, user_id: int) -> RoomPlayer | None:
    result = await db.execute(
        select(RoomPlayer).where(RoomPlayer.room_id == room_id, RoomPlayer.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def require_seated(db: AsyncSession, room_id: str, user_id: int) -> RoomPlayer:
    player = await get_player_in_room(db, room_id, user_id)
    if player is None:
        raise NotInRoom()
    return player


def require_active(room: Room) -> None:
    if room.state != RoomState.active:
        raise GameNotActive(f"Game is {room.state.value}, not active")


async def join_room(db: AsyncSession, room_id: str, user: User) -> RoomPlayer:
    async with room_transaction(db, room_id) as room:
        if room.state != RoomState.waiting:
            raise GameNotActive("Room is no longer accepting players")
        if await get_player_in_room(db, room.id, user.id) is not None:
            raise AlreadySeated()

        taken = {p.seat for p in await get_players_for_room(db, room.id)}
        free = [seat for seat in SEATS if seat not in taken]
        if not free:
            raise RoomFull()

        player = RoomPlayer(room_id=room.id, user_id=user.id, seat=free[0])
        db.add(player)
        await db.flush()

    notify_room_changed(room_id, [ChangedTable.players], "join", actor_id=user.id)
    return player


async def start_game(db: AsyncSession, room_id: str, requester_id: int) -> Room:
    """Build the bag, deal the opening racks and open the room for play."""
    async with room_transaction(db, room_id) as room:
        if room.state != RoomState.waiting:
            raise InvalidStartPrecondition(f"Game is already {room.state.value}")
        if room.owner_id != requester_id:
            raise InvalidStartPrecondition("Only the room owner can start the game")

        players = await get_players_for_room(db, room.id)
        if len(players) != 2:
            raise InvalidStartPrecondition("Need exactly 2 players to start")

        await bag_service.create_bag(db, room.id)

        # Seat order: seat 1 receives seqs 1-6, seat 2 receives 7-12
        for player in players:
            for _ in range(settings.initial_rack_size):
                await bag_service.draw_tiles(db, room.id, player.user_id, 1)

        room.state = RoomState.active
        db.add(
            RoomEvent(
                room_id=room.id,
                user_id=requester_id,
                type=EventType.start,
                payload={"players": [p.user_id for p in players]},
            )
        )
        await db.flush()

    logger.info("Room %s started by user %s", room_id, requester_id)
    notify_room_changed(
        room_id,
        [ChangedTable.room, ChangedTable.bag, ChangedTable.rack],
        EventType.start.value,
        actor_id=requester_id,
    )
    return room


async def finish_if_over(db: AsyncSession, room: Room, actor_id: int) -> bool:
    """Close the room once no MIXMO is possible and a player has emptied their rack.

    Runs inside the caller's room transaction.  The acting player wins when
    both racks are empty.
    """
    if room.state != RoomState.active:
        return False
    if await bag_service.remaining_count(db, room.id) >= settings.mixmo_draw_count:
        return False

    players = await get_players_for_room(db, room.id)
    empty = [p.user_id for p in players if await rack_service.rack_count(db, room.id, p.user_id) == 0]
    if not empty:
        return False

    winner_id = actor_id if actor_id in empty else empty[0]
    room.state = RoomState.finished
    room.winner_id = winner_id
    db.add(
        RoomEvent(
            room_id=room.id,
            user_id=actor_id,
            type=EventType.finish,
            payload={"winner": winner_id},
        )
    )
    await db.flush()
    logger.info("Room %s finished, winner user %s", room.id, winner_id)
    return True


async def list_events(db: AsyncSession, room_id: str) -> list[RoomEvent]:
    result = await db.execute(
        select(RoomEvent).where(RoomEvent.room_id == room_id).order_by(RoomEvent.id)
    )
    return list(result.scalars().all())


@dataclass
class RoomSnapshot:
    room: Room
    players: list[RoomPlayer]
    bag_count: int
    rack: list[rack_service.RackEntry]
    board: list[board_service.BoardEntry]
    opponent_id: int | None
    opponent_board: list[board_service.BoardEntry]
    opponent_rack_count: int
    mixmo_available: bool


async def get_room_state(db: AsyncSession, room_id: str, viewer_id: int) -> RoomSnapshot:
    """Everything a seated player sees: own rack and board, opponent's board."""
    room = await get_room_or_raise(db, room_id)
    await require_seated(db, room.id, viewer_id)
    players = await get_players_for_room(db, room.id)
    opponent = next((p for p in players if p.user_id != viewer_id), None)

    bag_count = await bag_service.remaining_count(db, room.id)
    rack = await rack_service.snapshot(db, room.id, viewer_id)
    board = await board_service.snapshot(db, room.id, viewer_id)

    opponent_board: list[board_service.BoardEntry] = []
    opponent_rack_count = 0
    if opponent is not None:
        opponent_board = await board_service.snapshot(db, room.id, opponent.user_id)
        opponent_rack_count = await rack_service.rack_count(db, room.id, opponent.user_id)

    mixmo_available = (
        room.state == RoomState.active
        and len(players) == 2
        and not rack
        and bag_count >= settings.mixmo_draw_count
    )
    return RoomSnapshot(
        room=room,
        players=players,
        bag_count=bag_count,
        rack=rack,
        board=board,
        opponent_id=opponent.user_id if opponent else None,
        opponent_board=opponent_board,
        opponent_rack_count=opponent_rack_count,
        mixmo_available=mixmo_available,
    )
