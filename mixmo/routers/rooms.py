from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from mixmo.database import get_db
from mixmo.dependencies import get_current_user, http_error
from mixmo.errors import GameError
from mixmo.models.room import Room
from mixmo.models.user import User
from mixmo.schemas.room import (
    BoardTileResponse,
    EventResponse,
    GridBoundsResponse,
    RackTileResponse,
    RoomCreate,
    RoomPlayerResponse,
    RoomResponse,
    RoomStateResponse,
)
from mixmo.services.auth_service import find_user, get_user_by_id
from mixmo.services.board_service import GridBounds
from mixmo.services.room_service import (
    create_room,
    get_players_for_room,
    get_room_or_raise,
    get_room_state,
    join_room,
    list_events,
    list_rooms_for_user,
    require_seated,
    start_game,
)

router = APIRouter(prefix="/rooms", tags=["rooms"])


def _room_response(room: Room, players) -> RoomResponse:
    bounds = GridBounds.of_room(room)
    return RoomResponse(
        id=room.id,
        owner_id=room.owner_id,
        state=room.state,
        bounds_policy=room.bounds_policy,
        bounds=GridBoundsResponse.model_validate(bounds),
        winner_id=room.winner_id,
        created_at=room.created_at,
        players=[RoomPlayerResponse.model_validate(p) for p in players],
    )


async def _room_response_for(db: AsyncSession, room: Room) -> RoomResponse:
    players = await get_players_for_room(db, room.id)
    return _room_response(room, players)


async def _get_room_or_404(db: AsyncSession, room_id: str) -> Room:
    try:
        return await get_room_or_raise(db, room_id)
    except GameError as e:
        raise http_error(e)


@router.get("", response_model=list[RoomResponse])
async def list_rooms(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    rooms = await list_rooms_for_user(db, current_user.id)
    return [await _room_response_for(db, room) for room in rooms]


@router.post("", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
async def create_new_room(
    body: RoomCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    opponent = None
    if body.opponent_id is not None:
        opponent = await get_user_by_id(db, body.opponent_id)
    elif body.opponent is not None:
        opponent = await find_user(db, body.opponent)
    if (body.opponent_id is not None or body.opponent is not None) and opponent is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Opponent not found")

    try:
        room = await create_room(
            db, owner=current_user, opponent=opponent, bounds_policy=body.bounds_policy
        )
    except ValueError as e:
        raise http_error(e)
    return await _room_response_for(db, room)


@router.get("/{room_id}", response_model=RoomResponse)
async def get_room_info(
    room_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    room = await _get_room_or_404(db, room_id)
    return await _room_response_for(db, room)


@router.post("/{room_id}/join", response_model=RoomPlayerResponse, status_code=status.HTTP_201_CREATED)
async def join_room_endpoint(
    room_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return await join_room(db, room_id, current_user)
    except ValueError as e:
        raise http_error(e)


@router.post("/{room_id}/start", response_model=RoomResponse)
async def start_game_endpoint(
    room_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        room = await start_game(db, room_id, requester_id=current_user.id)
    except ValueError as e:
        raise http_error(e)
    return await _room_response_for(db, room)


@router.get("/{room_id}/state", response_model=RoomStateResponse)
async def get_room_state_endpoint(
    room_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Return the caller's view of the room: own rack and board, opponent's board."""
    try:
        snap = await get_room_state(db, room_id, current_user.id)
    except ValueError as e:
        raise http_error(e)
    return RoomStateResponse(
        room=_room_response(snap.room, snap.players),
        bag_count=snap.bag_count,
        rack=[RackTileResponse.model_validate(t) for t in snap.rack],
        board=[BoardTileResponse.model_validate(t) for t in snap.board],
        opponent_id=snap.opponent_id,
        opponent_board=[BoardTileResponse.model_validate(t) for t in snap.opponent_board],
        opponent_rack_count=snap.opponent_rack_count,
        mixmo_available=snap.mixmo_available,
    )


@router.get("/{room_id}/events", response_model=list[EventResponse])
async def get_event_log(
    room_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    room = await _get_room_or_404(db, room_id)
    try:
        await require_seated(db, room.id, current_user.id)
    except ValueError as e:
        raise http_error(e)
    return await list_events(db, room.id)
