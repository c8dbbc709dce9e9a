"""Static letter distribution for a Mixmo bag.

Every room gets one copy of the multiset defined here, shuffled with a seed
derived from the room id.  The table and its iteration order (a..z, then the
wildcard) are a compatibility contract: changing either changes every bag.
"""

import unicodedata
from dataclasses import dataclass

WILDCARD = "*"

LETTER_FREQ: dict[str, int] = {
    "a": 9, "b": 2, "c": 2, "d": 3, "e": 15, "f": 2, "g": 2, "h": 2, "i": 8,
    "j": 1, "k": 1, "l": 5, "m": 3, "n": 6, "o": 6, "p": 2, "q": 1, "r": 6,
    "s": 6, "t": 6, "u": 6, "v": 2, "w": 1, "x": 1, "y": 1, "z": 1,
    WILDCARD: 2,
}

PLAYABLE_LETTERS = frozenset(letter for letter in LETTER_FREQ if letter != WILDCARD)


@dataclass(frozen=True)
class TileSpec:
    seq: int
    letter: str

    @property
    def is_joker(self) -> bool:
        return is_joker(self.letter)


def is_joker(letter: str) -> bool:
    return letter == WILDCARD


def fold(text: str) -> str:
    """Canonical lowercase form with accents stripped ("É" -> "e")."""
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.lower()


def total_tiles() -> int:
    return sum(LETTER_FREQ.values())


def iter_letters():
    for letter, count in LETTER_FREQ.items():
        for _ in range(count):
            yield letter
