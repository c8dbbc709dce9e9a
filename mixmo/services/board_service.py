"""Board service: placing, moving and recalling tiles on a player's grid.

Each player owns a private board.  A drawn tile is always in exactly one of
its holder's rack or board, so every operation here that moves a tile
between the two does both halves in the same transaction.  Callers run these
functions inside room_lock.room_transaction, which also re-reads the room so
the bounds checked here are the committed ones.

Grid bounds are a per-room policy chosen when the room is created:

- fixed:   a static 8x8 grid (0..7 on both axes) that never changes.
- dynamic: starts at the same 8x8 area; every expansion request moves one
           edge outward by one cell, without upper limit.
"""

import enum
from dataclasses import dataclass, replace

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mixmo.config import settings
from mixmo.data.letters import PLAYABLE_LETTERS, fold
from mixmo.errors import (
    CellOccupied,
    GridNotExpandable,
    InvalidLetter,
    NotInRack,
    NotOnBoard,
    OutOfBounds,
    TileLocked,
)
from mixmo.models.bag_tile import BagTile
from mixmo.models.board_tile import BoardTile
from mixmo.models.room import BoundsPolicy, Room
from mixmo.services import rack_service
from mixmo.services.bag_service import get_tiles


class ExpandDirection(str, enum.Enum):
    left = "left"
    right = "right"
    up = "up"
    down = "down"


@dataclass(frozen=True)
class GridBounds:
    min_x: int
    max_x: int
    min_y: int
    max_y: int

    @classmethod
    def fixed(cls, width: int, height: int) -> "GridBounds":
        return cls(min_x=0, max_x=width - 1, min_y=0, max_y=height - 1)

    @classmethod
    def of_room(cls, room: Room) -> "GridBounds":
        return cls(
            min_x=room.grid_min_x,
            max_x=room.grid_max_x,
            min_y=room.grid_min_y,
            max_y=room.grid_max_y,
        )

    def contains(self, x: int, y: int) -> bool:
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y

    def expanded(self, direction: ExpandDirection) -> "GridBounds":
        if direction == ExpandDirection.left:
            return replace(self, min_x=self.min_x - 1)
        if direction == ExpandDirection.right:
            return replace(self, max_x=self.max_x + 1)
        if direction == ExpandDirection.up:
            return replace(self, min_y=self.min_y - 1)
        return replace(self, max_y=self.max_y + 1)

    def apply_to(self, room: Room) -> None:
        room.grid_min_x = self.min_x
        room.grid_max_x = self.max_x
        room.grid_min_y = self.min_y
        room.grid_max_y = self.max_y


def initial_bounds() -> GridBounds:
    return GridBounds.fixed(settings.fixed_grid_width, settings.fixed_grid_height)


@dataclass(frozen=True)
class BoardEntry:
    bag_seq: int
    x: int
    y: int
    letter: str
    as_letter: str
    is_joker: bool
    locked: bool


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

async def get_entry(
    db: AsyncSession, room_id: str, player_id: int, seq: int
) -> BoardTile | None:
    result = await db.execute(
        select(BoardTile).where(
            BoardTile.room_id == room_id,
            BoardTile.user_id == player_id,
            BoardTile.bag_seq == seq,
        )
    )
    return result.scalar_one_or_none()


async def get_entry_at(
    db: AsyncSession, room_id: str, player_id: int, x: int, y: int
) -> BoardTile | None:
    result = await db.execute(
        select(BoardTile).where(
            BoardTile.room_id == room_id,
            BoardTile.user_id == player_id,
            BoardTile.x == x,
            BoardTile.y == y,
        )
    )
    return result.scalar_one_or_none()


async def snapshot(db: AsyncSession, room_id: str, player_id: int) -> list[BoardEntry]:
    result = await db.execute(
        select(BoardTile, BagTile)
        .join(
            BagTile,
            (BagTile.room_id == BoardTile.room_id) & (BagTile.seq == BoardTile.bag_seq),
        )
        .where(BoardTile.room_id == room_id, BoardTile.user_id == player_id)
        .order_by(BoardTile.y, BoardTile.x)
    )
    return [
        BoardEntry(
            bag_seq=board.bag_seq,
            x=board.x,
            y=board.y,
            letter=tile.letter,
            as_letter=board.as_letter,
            is_joker=tile.is_joker,
            locked=board.locked,
        )
        for board, tile in result.all()
    ]


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def _check_bounds(room: Room, x: int, y: int) -> None:
    if not GridBounds.of_room(room).contains(x, y):
        raise OutOfBounds(f"Cell ({x}, {y}) is outside the grid")


async def _check_free(
    db: AsyncSession, room_id: str, player_id: int, x: int, y: int, seq: int
) -> None:
    occupant = await get_entry_at(db, room_id, player_id, x, y)
    if occupant is not None and occupant.bag_seq != seq:
        raise CellOccupied(f"Cell ({x}, {y}) is already occupied")


def resolve_letter(tile: BagTile, as_letter: str | None) -> str:
    """Pick the letter a tile stands for on the board.

    Regular tiles always show their own letter.  A joker stands for the
    letter the player chose; without a choice it keeps the wildcard.
    """
    if as_letter is None or as_letter == "":
        return tile.letter

    chosen = fold(as_letter)
    if tile.is_joker:
        if chosen not in PLAYABLE_LETTERS:
            raise InvalidLetter(f"A joker must stand for a single letter a-z, got '{as_letter}'")
        return chosen
    if chosen != tile.letter:
        raise InvalidLetter(f"Tile {tile.seq} is a '{tile.letter}', not '{as_letter}'")
    return tile.letter


# ---------------------------------------------------------------------------
# Mutations (run inside room_transaction)
# ---------------------------------------------------------------------------

async def place(
    db: AsyncSession,
    room: Room,
    player_id: int,
    seq: int,
    x: int,
    y: int,
    as_letter: str | None = None,
) -> BoardTile:
    """Move a tile from the player's rack onto their board at (x, y)."""
    rack_entry = await rack_service.get_entry(db, room.id, player_id, seq)
    if rack_entry is None:
        on_board = await get_entry(db, room.id, player_id, seq)
        if on_board is not None and (on_board.x, on_board.y) == (x, y):
            # Re-sent placement of a tile already sitting on that cell
            return on_board
        raise NotInRack(f"Tile {seq} is not in your rack")

    _check_bounds(room, x, y)
    await _check_free(db, room.id, player_id, x, y, seq)

    tiles = await get_tiles(db, room.id, [seq])
    letter = resolve_letter(tiles[seq], as_letter)

    await rack_service.remove(db, room.id, player_id, seq)
    entry = BoardTile(
        room_id=room.id,
        user_id=player_id,
        bag_seq=seq,
        x=x,
        y=y,
        as_letter=letter,
        locked=False,
    )
    db.add(entry)
    await db.flush()
    return entry


async def move(
    db: AsyncSession, room: Room, player_id: int, seq: int, x: int, y: int
) -> BoardTile:
    entry = await get_entry(db, room.id, player_id, seq)
    if entry is None:
        raise NotOnBoard(f"Tile {seq} is not on your board")
    if (entry.x, entry.y) == (x, y):
        return entry
    if entry.locked:
        raise TileLocked(f"Tile {seq} is locked")

    _check_bounds(room, x, y)
    await _check_free(db, room.id, player_id, x, y, seq)

    entry.x = x
    entry.y = y
    await db.flush()
    return entry


async def unplace(db: AsyncSession, room: Room, player_id: int, seq: int) -> int:
    """Send a single unlocked tile back to the right end of the rack."""
    entry = await get_entry(db, room.id, player_id, seq)
    if entry is None:
        raise NotOnBoard(f"Tile {seq} is not on your board")
    if entry.locked:
        raise TileLocked(f"Tile {seq} is locked")

    await db.delete(entry)
    await db.flush()
    await rack_service.draw(db, room.id, player_id, [seq])
    return seq


async def recall(db: AsyncSession, room: Room, player_id: int) -> list[int]:
    """Return every unlocked tile to the rack, in reading order (rows then columns)."""
    result = await db.execute(
        select(BoardTile)
        .where(
            BoardTile.room_id == room.id,
            BoardTile.user_id == player_id,
            BoardTile.locked == False,  # noqa: E712
        )
        .order_by(BoardTile.y, BoardTile.x)
    )
    entries = list(result.scalars().all())
    seqs = [e.bag_seq for e in entries]
    for entry in entries:
        await db.delete(entry)
    await db.flush()

    if seqs:
        await rack_service.draw(db, room.id, player_id, seqs)
    return seqs


async def lock(db: AsyncSession, room: Room, player_id: int, seq: int) -> BoardTile:
    entry = await get_entry(db, room.id, player_id, seq)
    if entry is None:
        raise NotOnBoard(f"Tile {seq} is not on your board")
    entry.locked = True
    await db.flush()
    return entry


async def expand(db: AsyncSession, room: Room, direction: ExpandDirection) -> GridBounds:
    if room.bounds_policy != BoundsPolicy.dynamic:
        raise GridNotExpandable()
    bounds = GridBounds.of_room(room).expanded(direction)
    bounds.apply_to(room)
    await db.flush()
    return bounds
