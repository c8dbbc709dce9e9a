"""Tests for word extraction from a board snapshot."""

from httpx import AsyncClient

from mixmo.services.word_extractor import Direction, PlacedLetter, Word, extract_words


def _tiles(*specs: tuple[int, int, str]) -> list[PlacedLetter]:
    return [PlacedLetter(x=x, y=y, letter=letter) for x, y, letter in specs]


class TestExtractWords:
    def test_empty_board(self):
        assert extract_words([]) == []

    def test_single_tile_forms_no_word(self):
        assert extract_words(_tiles((3, 3, "a"))) == []

    def test_horizontal_word(self):
        words = extract_words(_tiles((0, 0, "c"), (1, 0, "a"), (2, 0, "t")))
        assert words == [Word(direction=Direction.horizontal, start=(0, 0), text="cat")]

    def test_vertical_word(self):
        words = extract_words(_tiles((4, 2, "d"), (4, 3, "o"), (4, 4, "g")))
        assert words == [Word(direction=Direction.vertical, start=(4, 2), text="dog")]

    def test_start_is_leftmost_even_when_input_starts_in_the_middle(self):
        words = extract_words(_tiles((1, 0, "a"), (2, 0, "t"), (0, 0, "c")))
        assert words == [Word(direction=Direction.horizontal, start=(0, 0), text="cat")]

    def test_crossing_words_horizontal_first(self):
        tiles = _tiles((0, 1, "c"), (1, 1, "a"), (2, 1, "t"), (1, 0, "h"), (1, 2, "s"))
        words = extract_words(tiles)
        assert words == [
            Word(direction=Direction.horizontal, start=(0, 1), text="cat"),
            Word(direction=Direction.vertical, start=(1, 0), text="has"),
        ]

    def test_gap_splits_words(self):
        tiles = _tiles((0, 0, "n"), (1, 0, "o"), (3, 0, "o"), (4, 0, "n"))
        texts = [w.text for w in extract_words(tiles)]
        assert texts == ["no", "on"]

    def test_order_follows_input_tiles(self):
        tiles = _tiles((5, 5, "o"), (6, 5, "x"), (0, 0, "a"), (1, 0, "t"))
        words = extract_words(tiles)
        assert [w.start for w in words] == [(5, 5), (0, 0)]

    def test_extraction_is_idempotent(self):
        tiles = _tiles((0, 0, "a"), (1, 0, "b"), (0, 1, "c"))
        assert extract_words(tiles) == extract_words(tiles)

    def test_diagonal_neighbours_do_not_form_words(self):
        assert extract_words(_tiles((0, 0, "a"), (1, 1, "b"))) == []


class TestExtractEndpoint:
    async def test_extract_words_endpoint(self, client: AsyncClient):
        resp = await client.post(
            "/words/extract",
            json={"tiles": [{"x": 0, "y": 0, "letter": "C"}, {"x": 1, "y": 0, "letter": "a"}]},
        )
        assert resp.status_code == 200
        assert resp.json() == [{"direction": "H", "start": [0, 0], "text": "ca"}]

    async def test_extract_folds_accents(self, client: AsyncClient):
        resp = await client.post(
            "/words/extract",
            json={"tiles": [{"x": 0, "y": 0, "letter": "É"}, {"x": 1, "y": 0, "letter": "t"}]},
        )
        assert resp.status_code == 200
        assert resp.json()[0]["text"] == "et"

    async def test_extract_rejects_multi_letter_tiles(self, client: AsyncClient):
        resp = await client.post(
            "/words/extract",
            json={"tiles": [{"x": 0, "y": 0, "letter": "ab"}]},
        )
        assert resp.status_code == 422
