"""Bag service: building, shuffling and drawing a room's letter tiles.

The bag is created once per room when the game starts.  Its order is fully
determined by the room id: the seed is the sum of the id's character codes
and the shuffle is a Fisher-Yates pass driven by a sine-based generator, so
replaying a room (or re-running a failed start) always yields the same bag.

Drawing never deletes rows: a drawn tile keeps its row with ``drawn_by`` and
``drawn_at`` filled in.  ``withdraw`` only reads; ``mark_drawn`` is the single
write and refuses tiles that were already drawn, which is what stops a
retried or concurrent request from dealing the same tile twice.
"""

import math
from datetime import datetime, timezone
from typing import Sequence, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from mixmo.data.letters import TileSpec, is_joker, iter_letters
from mixmo.errors import AlreadyDrawn, InsufficientTiles
from mixmo.models.bag_tile import BagTile

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Deterministic shuffle
# ---------------------------------------------------------------------------

def room_seed(room_id: str) -> int:
    return sum(ord(ch) for ch in room_id)


class SeededRandom:
    """Reproducible pseudo-random floats in [0, 1).

    Only used for bag ordering; the sequence is fully predictable from the
    seed.
    """

    def __init__(self, seed: int):
        self.seed = seed

    def random(self) -> float:
        x = math.sin(self.seed) * 10000
        self.seed += 1
        return x - math.floor(x)


def shuffle_tiles(items: list[T], room_id: str) -> list[T]:
    """Shuffle ``items`` in place (and return them) using the room's seed."""
    rng = SeededRandom(room_seed(room_id))
    for i in range(len(items) - 1, 0, -1):
        j = math.floor(rng.random() * (i + 1))
        items[i], items[j] = items[j], items[i]
    return items


def build_bag(room_id: str) -> list[TileSpec]:
    letters = shuffle_tiles(list(iter_letters()), room_id)
    return [TileSpec(seq=index + 1, letter=letter) for index, letter in enumerate(letters)]


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

async def create_bag(db: AsyncSession, room_id: str) -> list[BagTile]:
    """Persist the shuffled bag for a room (called from room_service.start_game)."""
    tiles: list[BagTile] = []
    for spec in build_bag(room_id):
        tile = BagTile(
            room_id=room_id,
            seq=spec.seq,
            letter=spec.letter,
            is_joker=is_joker(spec.letter),
        )
        db.add(tile)
        tiles.append(tile)

    await db.flush()
    return tiles


async def get_tiles(db: AsyncSession, room_id: str, seqs: Sequence[int]) -> dict[int, BagTile]:
    if not seqs:
        return {}
    result = await db.execute(
        select(BagTile).where(BagTile.room_id == room_id, BagTile.seq.in_(list(seqs)))
    )
    return {tile.seq: tile for tile in result.scalars().all()}


async def remaining_count(db: AsyncSession, room_id: str) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(BagTile)
        .where(BagTile.room_id == room_id, BagTile.drawn_by.is_(None))
    )
    return result.scalar_one()


async def withdraw(db: AsyncSession, room_id: str, n: int) -> list[BagTile]:
    """Return the ``n`` lowest-seq undrawn tiles without marking them.

    Raises InsufficientTiles when fewer than ``n`` remain.
    """
    result = await db.execute(
        select(BagTile)
        .where(BagTile.room_id == room_id, BagTile.drawn_by.is_(None))
        .order_by(BagTile.seq)
        .limit(n)
    )
    tiles = list(result.scalars().all())
    if len(tiles) < n:
        raise InsufficientTiles(
            f"Need {n} tiles in the bag but only {len(tiles)} remain"
        )
    return tiles


async def mark_drawn(
    db: AsyncSession,
    room_id: str,
    seqs: Sequence[int],
    by_player: int,
    at: datetime | None = None,
) -> list[BagTile]:
    """Flag tiles as drawn; all-or-nothing.

    Raises AlreadyDrawn if any seq is unknown or already drawn, before
    touching a single row.
    """
    at = at or datetime.now(timezone.utc)
    tiles = await get_tiles(db, room_id, seqs)

    for seq in seqs:
        tile = tiles.get(seq)
        if tile is None:
            raise AlreadyDrawn(f"Tile {seq} is not in the bag")
        if tile.drawn_by is not None:
            raise AlreadyDrawn(f"Tile {seq} has already been drawn")

    for seq in seqs:
        tiles[seq].drawn_by = by_player
        tiles[seq].drawn_at = at

    await db.flush()
    return [tiles[seq] for seq in seqs]


async def draw_tiles(
    db: AsyncSession,
    room_id: str,
    player_id: int,
    n: int = 1,
) -> list[BagTile]:
    """Withdraw ``n`` tiles, mark them drawn by ``player_id`` and rack them.

    Must run inside room_lock.room_transaction.
    """
    from mixmo.services.rack_service import draw as rack_draw

    tiles = await withdraw(db, room_id, n)
    seqs = [t.seq for t in tiles]
    await mark_drawn(db, room_id, seqs, by_player=player_id)
    await rack_draw(db, room_id, player_id, seqs)
    return tiles
