from pydantic import BaseModel, Field

from mixmo.services.word_extractor import Direction


class PlacedLetterIn(BaseModel):
    x: int
    y: int
    letter: str = Field(min_length=1, max_length=1)


class ExtractWordsRequest(BaseModel):
    tiles: list[PlacedLetterIn]


class WordResponse(BaseModel):
    direction: Direction
    start: tuple[int, int]
    text: str

    model_config = {"from_attributes": True}
