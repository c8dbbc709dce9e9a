"""Tests for the end-of-game rule."""

import pytest
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from mixmo.errors import GameNotActive
from mixmo.models.bag_tile import BagTile
from mixmo.models.event import EventType
from mixmo.models.room import RoomState
from mixmo.models.user import User
from mixmo.services import rack_service
from mixmo.services.play_service import place_tile
from mixmo.services.room_service import create_room, get_room, list_events, start_game


async def _make_user(db: AsyncSession, tag: str) -> User:
    user = User(
        email=f"fin_{tag}@test.com",
        username=f"fin_{tag}",
        hashed_password="hashed",
    )
    db.add(user)
    await db.flush()
    return user


async def _start_room(db: AsyncSession, tag: str) -> tuple[str, int, int]:
    owner = await _make_user(db, f"{tag}_o")
    friend = await _make_user(db, f"{tag}_f")
    owner_id, friend_id = owner.id, friend.id
    room = await create_room(db, owner=owner, opponent=friend)
    await start_game(db, room.id, owner_id)
    return room.id, owner_id, friend_id


async def _empty_bag(db: AsyncSession, room_id: str, by_player: int) -> None:
    await db.execute(
        update(BagTile)
        .where(BagTile.room_id == room_id, BagTile.drawn_by.is_(None))
        .values(drawn_by=by_player)
    )
    await db.commit()


class TestFinish:
    async def test_game_continues_while_bag_has_tiles(self, db_session: AsyncSession):
        room_id, owner_id, _ = await _start_room(db_session, "f1")
        for i, seq in enumerate([1, 2, 3, 4, 5, 6]):
            await place_tile(db_session, room_id, owner_id, seq, i, 0)

        room = await get_room(db_session, room_id)
        assert room.state == RoomState.active
        assert room.winner_id is None

    async def test_last_tile_with_empty_bag_finishes(self, db_session: AsyncSession):
        room_id, owner_id, friend_id = await _start_room(db_session, "f2")
        await _empty_bag(db_session, room_id, friend_id)

        for i, seq in enumerate([1, 2, 3, 4, 5]):
            await place_tile(db_session, room_id, owner_id, seq, i, 0)
        room = await get_room(db_session, room_id)
        assert room.state == RoomState.active

        await place_tile(db_session, room_id, owner_id, 6, 5, 0)
        room = await get_room(db_session, room_id)
        assert room.state == RoomState.finished
        assert room.winner_id == owner_id

        events = await list_events(db_session, room_id)
        assert events[-1].type == EventType.finish
        assert events[-1].payload == {"winner": owner_id}

    async def test_finished_room_rejects_moves(self, db_session: AsyncSession):
        room_id, owner_id, friend_id = await _start_room(db_session, "f3")
        await _empty_bag(db_session, room_id, friend_id)
        for i, seq in enumerate([1, 2, 3, 4, 5, 6]):
            await place_tile(db_session, room_id, owner_id, seq, i, 0)

        with pytest.raises(GameNotActive):
            await place_tile(db_session, room_id, friend_id, 7, 0, 0)
        assert await rack_service.rack_count(db_session, room_id, friend_id) == 6
