"""Tests for board operations: place, move, unplace, recall, lock, expand."""

import asyncio

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mixmo.errors import (
    CellOccupied,
    GameNotActive,
    GridNotExpandable,
    InvalidLetter,
    NotInRack,
    NotInRoom,
    NotOnBoard,
    OutOfBounds,
    TileLocked,
)
from mixmo.models.bag_tile import BagTile
from mixmo.models.event import EventType
from mixmo.models.room import BoundsPolicy
from mixmo.models.user import User
from mixmo.services import bag_service, board_service, rack_service
from mixmo.services.board_service import ExpandDirection, GridBounds
from mixmo.services.play_service import (
    expand_grid,
    lock_tile,
    move_tile,
    place_tile,
    recall_tiles,
    unplace_tile,
)
from mixmo.services.room_service import create_room, get_room, list_events, start_game
from mixmo.services.word_extractor import extract_words_for_player


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _make_user(db: AsyncSession, tag: str) -> User:
    user = User(
        email=f"pl_{tag}@test.com",
        username=f"pl_{tag}",
        hashed_password="hashed",
    )
    db.add(user)
    await db.flush()
    return user


async def _start_room(
    db: AsyncSession, tag: str, policy: BoundsPolicy = BoundsPolicy.fixed
) -> tuple[str, int, int]:
    """Create and start a two-player room; return (room_id, owner_id, friend_id)."""
    owner = await _make_user(db, f"{tag}_o")
    friend = await _make_user(db, f"{tag}_f")
    owner_id, friend_id = owner.id, friend.id
    room = await create_room(db, owner=owner, opponent=friend, bounds_policy=policy)
    await start_game(db, room.id, owner_id)
    return room.id, owner_id, friend_id


async def _rack_seqs(db: AsyncSession, room_id: str, player_id: int) -> list[int]:
    return [t.bag_seq for t in await rack_service.snapshot(db, room_id, player_id)]


async def _give_joker(db: AsyncSession, room_id: str, owner_id: int, friend_id: int) -> tuple[int, int]:
    """Put a joker in someone's rack; return (holder_id, seq)."""
    result = await db.execute(
        select(BagTile).where(BagTile.room_id == room_id, BagTile.is_joker == True)  # noqa: E712
        .order_by(BagTile.seq)
    )
    joker = result.scalars().first()
    if joker.drawn_by is None:
        await bag_service.mark_drawn(db, room_id, [joker.seq], by_player=owner_id)
        await rack_service.draw(db, room_id, owner_id, [joker.seq])
        await db.commit()
        return owner_id, joker.seq
    holder = owner_id if joker.drawn_by == owner_id else friend_id
    return holder, joker.seq


# ---------------------------------------------------------------------------
# place
# ---------------------------------------------------------------------------


class TestPlaceTile:
    async def test_place_moves_tile_from_rack_to_board(self, db_session: AsyncSession):
        room_id, owner_id, _ = await _start_room(db_session, "p1")

        entry = await place_tile(db_session, room_id, owner_id, 3, 2, 4)
        assert (entry.bag_seq, entry.x, entry.y, entry.locked) == (3, 2, 4, False)

        assert await _rack_seqs(db_session, room_id, owner_id) == [1, 2, 4, 5, 6]
        board = await board_service.snapshot(db_session, room_id, owner_id)
        assert [(b.bag_seq, b.x, b.y) for b in board] == [(3, 2, 4)]
        assert board[0].as_letter == board[0].letter

    async def test_place_records_event(self, db_session: AsyncSession):
        room_id, owner_id, _ = await _start_room(db_session, "p2")
        entry = await place_tile(db_session, room_id, owner_id, 1, 0, 0)

        events = await list_events(db_session, room_id)
        assert events[-1].type == EventType.place
        assert events[-1].payload == {"tile": 1, "x": 0, "y": 0, "as_letter": entry.as_letter}

    async def test_place_tile_not_in_rack(self, db_session: AsyncSession):
        room_id, owner_id, _ = await _start_room(db_session, "p3")
        # seq 7 belongs to the opponent
        with pytest.raises(NotInRack):
            await place_tile(db_session, room_id, owner_id, 7, 0, 0)
        assert await board_service.snapshot(db_session, room_id, owner_id) == []

    async def test_place_out_of_bounds(self, db_session: AsyncSession):
        room_id, owner_id, _ = await _start_room(db_session, "p4")
        for x, y in [(8, 0), (0, 8), (-1, 0), (0, -1)]:
            with pytest.raises(OutOfBounds):
                await place_tile(db_session, room_id, owner_id, 1, x, y)
        assert await _rack_seqs(db_session, room_id, owner_id) == [1, 2, 3, 4, 5, 6]

    async def test_place_on_occupied_cell(self, db_session: AsyncSession):
        room_id, owner_id, _ = await _start_room(db_session, "p5")
        await place_tile(db_session, room_id, owner_id, 1, 0, 0)

        with pytest.raises(CellOccupied):
            await place_tile(db_session, room_id, owner_id, 2, 0, 0)
        assert 2 in await _rack_seqs(db_session, room_id, owner_id)

    async def test_boards_are_private(self, db_session: AsyncSession):
        room_id, owner_id, friend_id = await _start_room(db_session, "p6")
        await place_tile(db_session, room_id, owner_id, 1, 0, 0)
        # Same cell on the opponent's own board is free
        await place_tile(db_session, room_id, friend_id, 7, 0, 0)

    async def test_replacing_on_same_cell_is_noop(self, db_session: AsyncSession):
        room_id, owner_id, _ = await _start_room(db_session, "p7")
        await place_tile(db_session, room_id, owner_id, 1, 5, 5)
        again = await place_tile(db_session, room_id, owner_id, 1, 5, 5)

        assert (again.x, again.y) == (5, 5)
        board = await board_service.snapshot(db_session, room_id, owner_id)
        assert len(board) == 1

    async def test_regular_tile_rejects_other_letter(self, db_session: AsyncSession):
        room_id, owner_id, _ = await _start_room(db_session, "p8")
        rack = await rack_service.snapshot(db_session, room_id, owner_id)
        tile = next(t for t in rack if not t.is_joker)
        other = "q" if tile.letter != "q" else "z"

        with pytest.raises(InvalidLetter):
            await place_tile(db_session, room_id, owner_id, tile.bag_seq, 0, 0, other)

    async def test_regular_tile_accepts_own_letter_in_any_case(self, db_session: AsyncSession):
        room_id, owner_id, _ = await _start_room(db_session, "p9")
        rack = await rack_service.snapshot(db_session, room_id, owner_id)
        tile = next(t for t in rack if not t.is_joker)

        entry = await place_tile(db_session, room_id, owner_id, tile.bag_seq, 0, 0, tile.letter.upper())
        assert entry.as_letter == tile.letter

    async def test_joker_stands_for_chosen_letter(self, db_session: AsyncSession):
        room_id, owner_id, friend_id = await _start_room(db_session, "p10")
        holder, seq = await _give_joker(db_session, room_id, owner_id, friend_id)

        entry = await place_tile(db_session, room_id, holder, seq, 1, 1, "É")
        assert entry.as_letter == "e"

    async def test_joker_rejects_non_letter(self, db_session: AsyncSession):
        room_id, owner_id, friend_id = await _start_room(db_session, "p11")
        holder, seq = await _give_joker(db_session, room_id, owner_id, friend_id)

        with pytest.raises(InvalidLetter):
            await place_tile(db_session, room_id, holder, seq, 1, 1, "7")

    async def test_outsider_cannot_place(self, db_session: AsyncSession):
        room_id, _, _ = await _start_room(db_session, "p12")
        outsider = await _make_user(db_session, "p12_x")
        outsider_id = outsider.id
        await db_session.commit()

        with pytest.raises(NotInRoom):
            await place_tile(db_session, room_id, outsider_id, 1, 0, 0)

    async def test_place_before_start_rejected(self, db_session: AsyncSession):
        owner = await _make_user(db_session, "p13")
        owner_id = owner.id
        room = await create_room(db_session, owner=owner)

        with pytest.raises(GameNotActive):
            await place_tile(db_session, room.id, owner_id, 1, 0, 0)


# ---------------------------------------------------------------------------
# move / unplace / recall / lock
# ---------------------------------------------------------------------------


class TestMoveTile:
    async def test_move_to_free_cell(self, db_session: AsyncSession):
        room_id, owner_id, _ = await _start_room(db_session, "m1")
        await place_tile(db_session, room_id, owner_id, 1, 0, 0)

        entry = await move_tile(db_session, room_id, owner_id, 1, 3, 3)
        assert (entry.x, entry.y) == (3, 3)
        events = await list_events(db_session, room_id)
        assert events[-1].type == EventType.move
        assert events[-1].payload["from"] == [0, 0]

    async def test_move_onto_own_cell_is_noop(self, db_session: AsyncSession):
        room_id, owner_id, _ = await _start_room(db_session, "m2")
        await place_tile(db_session, room_id, owner_id, 1, 2, 2)
        count_before = len(await list_events(db_session, room_id))

        entry = await move_tile(db_session, room_id, owner_id, 1, 2, 2)
        assert (entry.x, entry.y) == (2, 2)
        assert len(await list_events(db_session, room_id)) == count_before

    async def test_move_onto_occupied_cell(self, db_session: AsyncSession):
        room_id, owner_id, _ = await _start_room(db_session, "m3")
        await place_tile(db_session, room_id, owner_id, 1, 0, 0)
        await place_tile(db_session, room_id, owner_id, 2, 1, 0)

        with pytest.raises(CellOccupied):
            await move_tile(db_session, room_id, owner_id, 1, 1, 0)

    async def test_move_out_of_bounds(self, db_session: AsyncSession):
        room_id, owner_id, _ = await _start_room(db_session, "m4")
        await place_tile(db_session, room_id, owner_id, 1, 0, 0)

        with pytest.raises(OutOfBounds):
            await move_tile(db_session, room_id, owner_id, 1, 0, 8)

    async def test_move_tile_not_on_board(self, db_session: AsyncSession):
        room_id, owner_id, _ = await _start_room(db_session, "m5")
        with pytest.raises(NotOnBoard):
            await move_tile(db_session, room_id, owner_id, 1, 0, 0)

    async def test_locked_tile_cannot_move(self, db_session: AsyncSession):
        room_id, owner_id, _ = await _start_room(db_session, "m6")
        await place_tile(db_session, room_id, owner_id, 1, 0, 0)
        await lock_tile(db_session, room_id, owner_id, 1)

        with pytest.raises(TileLocked):
            await move_tile(db_session, room_id, owner_id, 1, 4, 4)


class TestUnplaceAndRecall:
    async def test_unplace_appends_to_rack(self, db_session: AsyncSession):
        room_id, owner_id, _ = await _start_room(db_session, "u1")
        await place_tile(db_session, room_id, owner_id, 2, 0, 0)

        assert await unplace_tile(db_session, room_id, owner_id, 2) == 2
        rack = await rack_service.snapshot(db_session, room_id, owner_id)
        assert [t.bag_seq for t in rack] == [1, 3, 4, 5, 6, 2]
        # idx is append-only: the returned tile lands after the old maximum
        assert rack[-1].idx == 6

    async def test_unplace_locked_tile(self, db_session: AsyncSession):
        room_id, owner_id, _ = await _start_room(db_session, "u2")
        await place_tile(db_session, room_id, owner_id, 1, 0, 0)
        await lock_tile(db_session, room_id, owner_id, 1)

        with pytest.raises(TileLocked):
            await unplace_tile(db_session, room_id, owner_id, 1)

    async def test_recall_returns_unlocked_tiles_in_reading_order(self, db_session: AsyncSession):
        room_id, owner_id, _ = await _start_room(db_session, "u3")
        await place_tile(db_session, room_id, owner_id, 1, 2, 1)
        await place_tile(db_session, room_id, owner_id, 2, 0, 1)
        await place_tile(db_session, room_id, owner_id, 3, 1, 0)
        await place_tile(db_session, room_id, owner_id, 4, 5, 5)
        await lock_tile(db_session, room_id, owner_id, 4)

        recalled = await recall_tiles(db_session, room_id, owner_id)
        assert recalled == [3, 2, 1]
        assert await _rack_seqs(db_session, room_id, owner_id) == [5, 6, 3, 2, 1]
        board = await board_service.snapshot(db_session, room_id, owner_id)
        assert [(b.bag_seq, b.locked) for b in board] == [(4, True)]

    async def test_recall_empty_board(self, db_session: AsyncSession):
        room_id, owner_id, _ = await _start_room(db_session, "u4")
        count_before = len(await list_events(db_session, room_id))

        assert await recall_tiles(db_session, room_id, owner_id) == []
        assert len(await list_events(db_session, room_id)) == count_before

    async def test_lock_tile_not_on_board(self, db_session: AsyncSession):
        room_id, owner_id, _ = await _start_room(db_session, "u5")
        with pytest.raises(NotOnBoard):
            await lock_tile(db_session, room_id, owner_id, 1)


# ---------------------------------------------------------------------------
# grid bounds
# ---------------------------------------------------------------------------


class TestGridBounds:
    def test_fixed_bounds(self):
        bounds = GridBounds.fixed(8, 8)
        assert bounds.contains(0, 0)
        assert bounds.contains(7, 7)
        assert not bounds.contains(8, 0)
        assert not bounds.contains(0, -1)

    def test_expanded_moves_one_edge(self):
        bounds = GridBounds.fixed(8, 8)
        assert bounds.expanded(ExpandDirection.left) == GridBounds(-1, 7, 0, 7)
        assert bounds.expanded(ExpandDirection.right) == GridBounds(0, 8, 0, 7)
        assert bounds.expanded(ExpandDirection.up) == GridBounds(0, 7, -1, 7)
        assert bounds.expanded(ExpandDirection.down) == GridBounds(0, 7, 0, 8)

    async def test_fixed_room_cannot_expand(self, db_session: AsyncSession):
        room_id, owner_id, _ = await _start_room(db_session, "g1")
        with pytest.raises(GridNotExpandable):
            await expand_grid(db_session, room_id, owner_id, ExpandDirection.left)

    async def test_dynamic_room_expands_and_accepts_new_cells(self, db_session: AsyncSession):
        room_id, owner_id, _ = await _start_room(db_session, "g2", BoundsPolicy.dynamic)

        bounds = await expand_grid(db_session, room_id, owner_id, ExpandDirection.left)
        assert bounds == GridBounds(-1, 7, 0, 7)
        room = await get_room(db_session, room_id)
        assert room.grid_min_x == -1

        entry = await place_tile(db_session, room_id, owner_id, 1, -1, 0)
        assert (entry.x, entry.y) == (-1, 0)


class TestBoardWords:
    async def test_words_use_displayed_letters(self, db_session: AsyncSession):
        room_id, owner_id, _ = await _start_room(db_session, "w1")
        rack = await rack_service.snapshot(db_session, room_id, owner_id)
        await place_tile(db_session, room_id, owner_id, rack[0].bag_seq, 0, 0)
        await place_tile(db_session, room_id, owner_id, rack[1].bag_seq, 1, 0)

        board = {(b.x, b.y): b.as_letter for b in await board_service.snapshot(db_session, room_id, owner_id)}
        words = await extract_words_for_player(db_session, room_id, owner_id)
        assert [w.text for w in words] == [board[(0, 0)] + board[(1, 0)]]


class TestConcurrentPlacement:
    async def test_both_players_place_at_once(
        self,
        db_session: AsyncSession,
        session_factory: async_sessionmaker[AsyncSession],
    ):
        room_id, owner_id, friend_id = await _start_room(db_session, "c1")
        await db_session.commit()

        async def call(player_id: int, seq: int):
            async with session_factory() as session:
                return await place_tile(session, room_id, player_id, seq, 0, 0)

        owner_entry, friend_entry = await asyncio.gather(call(owner_id, 1), call(friend_id, 7))
        assert (owner_entry.user_id, owner_entry.bag_seq) == (owner_id, 1)
        assert (friend_entry.user_id, friend_entry.bag_seq) == (friend_id, 7)

        async with session_factory() as check:
            owner_board = await board_service.snapshot(check, room_id, owner_id)
            friend_board = await board_service.snapshot(check, room_id, friend_id)
            assert [(b.bag_seq, b.x, b.y) for b in owner_board] == [(1, 0, 0)]
            assert [(b.bag_seq, b.x, b.y) for b in friend_board] == [(7, 0, 0)]

    async def test_resent_placement_applies_once(
        self,
        db_session: AsyncSession,
        session_factory: async_sessionmaker[AsyncSession],
    ):
        room_id, owner_id, _ = await _start_room(db_session, "c2")
        await db_session.commit()

        async def call():
            async with session_factory() as session:
                return await place_tile(session, room_id, owner_id, 2, 3, 3)

        first, second = await asyncio.gather(call(), call())
        assert (first.bag_seq, first.x, first.y) == (2, 3, 3)
        assert (second.bag_seq, second.x, second.y) == (2, 3, 3)

        async with session_factory() as check:
            board = await board_service.snapshot(check, room_id, owner_id)
            assert [(b.bag_seq, b.x, b.y) for b in board] == [(2, 3, 3)]
            assert 2 not in await _rack_seqs(check, room_id, owner_id)

    async def test_same_tile_to_two_cells(
        self,
        db_session: AsyncSession,
        session_factory: async_sessionmaker[AsyncSession],
    ):
        room_id, owner_id, _ = await _start_room(db_session, "c3")
        await db_session.commit()

        async def call(x: int):
            async with session_factory() as session:
                return await place_tile(session, room_id, owner_id, 4, x, 0)

        results = await asyncio.gather(call(0), call(5), return_exceptions=True)
        placed = [r for r in results if not isinstance(r, Exception)]
        failures = [r for r in results if isinstance(r, Exception)]
        assert len(placed) == 1
        assert len(failures) == 1
        assert isinstance(failures[0], NotInRack)

        async with session_factory() as check:
            board = await board_service.snapshot(check, room_id, owner_id)
            assert [(b.bag_seq, b.x, b.y) for b in board] == [(4, placed[0].x, 0)]
