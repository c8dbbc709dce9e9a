from fastapi import APIRouter

from mixmo.data.letters import fold
from mixmo.schemas.word import ExtractWordsRequest, WordResponse
from mixmo.services.word_extractor import PlacedLetter, extract_words

router = APIRouter(prefix="/words", tags=["words"])


@router.post("/extract", response_model=list[WordResponse])
async def extract_words_endpoint(body: ExtractWordsRequest):
    """Extract words from an arbitrary board snapshot; no state is read or written."""
    return extract_words(PlacedLetter(x=t.x, y=t.y, letter=fold(t.letter)) for t in body.tiles)
