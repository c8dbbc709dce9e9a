from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from mixmo.database import get_db
from mixmo.dependencies import get_current_user, http_error
from mixmo.models.user import User
from mixmo.schemas.room import (
    ExpandGrid,
    GridBoundsResponse,
    MixmoResponse,
    MoveTile,
    PlaceTile,
    PlacementResponse,
    RecallResponse,
    TileRef,
)
from mixmo.schemas.word import WordResponse
from mixmo.services.mixmo_service import request_mixmo
from mixmo.services.play_service import (
    expand_grid,
    lock_tile,
    move_tile,
    place_tile,
    recall_tiles,
    unplace_tile,
)
from mixmo.services.room_service import get_room_or_raise, require_seated
from mixmo.services.word_extractor import extract_words_for_player

router = APIRouter(prefix="/rooms", tags=["play"])


@router.post(
    "/{room_id}/board/place",
    response_model=PlacementResponse,
    status_code=status.HTTP_201_CREATED,
)
async def place_tile_endpoint(
    room_id: str,
    body: PlaceTile,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return await place_tile(
            db, room_id, current_user.id, body.bag_seq, body.x, body.y, body.as_letter
        )
    except ValueError as e:
        raise http_error(e)


@router.post("/{room_id}/board/move", response_model=PlacementResponse)
async def move_tile_endpoint(
    room_id: str,
    body: MoveTile,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return await move_tile(db, room_id, current_user.id, body.bag_seq, body.x, body.y)
    except ValueError as e:
        raise http_error(e)


@router.post("/{room_id}/board/unplace", response_model=RecallResponse)
async def unplace_tile_endpoint(
    room_id: str,
    body: TileRef,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Send one tile from the board back to the rack."""
    try:
        seq = await unplace_tile(db, room_id, current_user.id, body.bag_seq)
    except ValueError as e:
        raise http_error(e)
    return RecallResponse(recalled=[seq])


@router.post("/{room_id}/board/recall", response_model=RecallResponse)
async def recall_tiles_endpoint(
    room_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Send every unlocked tile on the caller's board back to their rack."""
    try:
        seqs = await recall_tiles(db, room_id, current_user.id)
    except ValueError as e:
        raise http_error(e)
    return RecallResponse(recalled=seqs)


@router.post("/{room_id}/board/lock", response_model=PlacementResponse)
async def lock_tile_endpoint(
    room_id: str,
    body: TileRef,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return await lock_tile(db, room_id, current_user.id, body.bag_seq)
    except ValueError as e:
        raise http_error(e)


@router.post("/{room_id}/grid/expand", response_model=GridBoundsResponse)
async def expand_grid_endpoint(
    room_id: str,
    body: ExpandGrid,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return await expand_grid(db, room_id, current_user.id, body.direction)
    except ValueError as e:
        raise http_error(e)


@router.post("/{room_id}/mixmo", response_model=MixmoResponse)
async def mixmo_endpoint(
    room_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return await request_mixmo(db, room_id, current_user.id)
    except ValueError as e:
        raise http_error(e)


@router.get("/{room_id}/words", response_model=list[WordResponse])
async def get_board_words(
    room_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Words currently formed on the caller's own board."""
    try:
        room = await get_room_or_raise(db, room_id)
        await require_seated(db, room.id, current_user.id)
    except ValueError as e:
        raise http_error(e)
    return await extract_words_for_player(db, room.id, current_user.id)
