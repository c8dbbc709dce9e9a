from dataclasses import dataclass
from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from mixmo.errors import NotInRack
from mixmo.models.bag_tile import BagTile
from mixmo.models.rack_tile import RackTile


@dataclass(frozen=True)
class RackEntry:
    bag_seq: int
    idx: int
    letter: str
    is_joker: bool


async def next_idx(db: AsyncSession, room_id: str, player_id: int) -> int:
    result = await db.execute(
        select(func.max(RackTile.idx)).where(
            RackTile.room_id == room_id, RackTile.user_id == player_id
        )
    )
    current = result.scalar_one_or_none()
    return 0 if current is None else current + 1


async def draw(
    db: AsyncSession, room_id: str, player_id: int, seqs: Sequence[int]
) -> list[RackTile]:
    """Append tiles to the right end of the player's rack, keeping their order."""
    start = await next_idx(db, room_id, player_id)
    entries: list[RackTile] = []
    for offset, seq in enumerate(seqs):
        entry = RackTile(room_id=room_id, user_id=player_id, bag_seq=seq, idx=start + offset)
        db.add(entry)
        entries.append(entry)
    await db.flush()
    return entries


async def get_entry(
    db: AsyncSession, room_id: str, player_id: int, seq: int
) -> RackTile | None:
    result = await db.execute(
        select(RackTile).where(
            RackTile.room_id == room_id,
            RackTile.user_id == player_id,
            RackTile.bag_seq == seq,
        )
    )
    return result.scalar_one_or_none()


async def remove(db: AsyncSession, room_id: str, player_id: int, seq: int) -> None:
    entry = await get_entry(db, room_id, player_id, seq)
    if entry is None:
        raise NotInRack(f"Tile {seq} is not in your rack")
    await db.delete(entry)
    await db.flush()


async def rack_count(db: AsyncSession, room_id: str, player_id: int) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(RackTile)
        .where(RackTile.room_id == room_id, RackTile.user_id == player_id)
    )
    return result.scalar_one()


async def snapshot(db: AsyncSession, room_id: str, player_id: int) -> list[RackEntry]:
    result = await db.execute(
        select(RackTile, BagTile)
        .join(
            BagTile,
            (BagTile.room_id == RackTile.room_id) & (BagTile.seq == RackTile.bag_seq),
        )
        .where(RackTile.room_id == room_id, RackTile.user_id == player_id)
        .order_by(RackTile.idx)
    )
    return [
        RackEntry(bag_seq=rack.bag_seq, idx=rack.idx, letter=tile.letter, is_joker=tile.is_joker)
        for rack, tile in result.all()
    ]
