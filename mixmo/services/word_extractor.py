"""Derive the words formed on a board.

A word is a maximal horizontal or vertical run of adjacent tiles with at
least two letters.  Words are recomputed from a board snapshot whenever they
are needed and are never stored.  No dictionary check happens here.
"""

import enum
from dataclasses import dataclass
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession


class Direction(str, enum.Enum):
    horizontal = "H"
    vertical = "V"


@dataclass(frozen=True)
class PlacedLetter:
    x: int
    y: int
    letter: str


@dataclass(frozen=True)
class Word:
    direction: Direction
    start: tuple[int, int]
    text: str


# (dx, dy) step per direction
_STEPS = {
    Direction.horizontal: (1, 0),
    Direction.vertical: (0, 1),
}


def _collect_runs(
    tiles: list[PlacedLetter], grid: dict[tuple[int, int], str], direction: Direction
) -> list[Word]:
    dx, dy = _STEPS[direction]
    visited: set[tuple[int, int]] = set()
    words: list[Word] = []

    for tile in tiles:
        if (tile.x, tile.y) in visited:
            continue

        start_x, start_y = tile.x, tile.y
        while (start_x - dx, start_y - dy) in grid:
            start_x -= dx
            start_y -= dy

        letters: list[str] = []
        x, y = start_x, start_y
        while (x, y) in grid:
            letters.append(grid[(x, y)])
            visited.add((x, y))
            x += dx
            y += dy

        if len(letters) > 1:
            words.append(Word(direction=direction, start=(start_x, start_y), text="".join(letters)))

    return words


def extract_words(tiles: Iterable[PlacedLetter]) -> list[Word]:
    """Return every horizontal word, then every vertical word.

    Within a direction, words come in the order their first tile appears in
    ``tiles``.  A tile may belong to one horizontal and one vertical word.
    """
    tiles = list(tiles)
    if not tiles:
        return []

    grid = {(tile.x, tile.y): tile.letter for tile in tiles}
    return _collect_runs(tiles, grid, Direction.horizontal) + _collect_runs(
        tiles, grid, Direction.vertical
    )


async def extract_words_for_player(
    db: AsyncSession, room_id: str, player_id: int
) -> list[Word]:
    from mixmo.services.board_service import snapshot

    entries = await snapshot(db, room_id, player_id)
    return extract_words(PlacedLetter(x=e.x, y=e.y, letter=e.as_letter) for e in entries)
