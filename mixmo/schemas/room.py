from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator

from mixmo.models.event import EventType
from mixmo.models.room import BoundsPolicy, RoomState
from mixmo.services.board_service import ExpandDirection


class RoomCreate(BaseModel):
    """Create a room, optionally seating a friend in seat 2.

    The friend is identified by user id or by username/email.
    """

    opponent_id: Optional[int] = None
    opponent: Optional[str] = None
    bounds_policy: Optional[BoundsPolicy] = None

    @model_validator(mode="after")
    def validate_opponent(self) -> "RoomCreate":
        if self.opponent_id is not None and self.opponent is not None:
            raise ValueError("Give either opponent_id or opponent, not both")
        return self


class RoomPlayerResponse(BaseModel):
    user_id: int
    seat: int

    model_config = {"from_attributes": True}


class GridBoundsResponse(BaseModel):
    min_x: int
    max_x: int
    min_y: int
    max_y: int

    model_config = {"from_attributes": True}


class RoomResponse(BaseModel):
    id: str
    owner_id: int
    state: RoomState
    bounds_policy: BoundsPolicy
    bounds: GridBoundsResponse
    winner_id: Optional[int]
    created_at: datetime
    players: list[RoomPlayerResponse] = []


class RackTileResponse(BaseModel):
    bag_seq: int
    idx: int
    letter: str
    is_joker: bool

    model_config = {"from_attributes": True}


class BoardTileResponse(BaseModel):
    bag_seq: int
    x: int
    y: int
    letter: str
    as_letter: str
    is_joker: bool
    locked: bool

    model_config = {"from_attributes": True}


class RoomStateResponse(BaseModel):
    """Snapshot of a room as seen by one seated player."""

    room: RoomResponse
    bag_count: int
    rack: list[RackTileResponse]
    board: list[BoardTileResponse]
    opponent_id: Optional[int]
    opponent_board: list[BoardTileResponse]
    opponent_rack_count: int
    mixmo_available: bool


class PlaceTile(BaseModel):
    bag_seq: int
    x: int
    y: int
    as_letter: Optional[str] = Field(default=None, max_length=1)


class MoveTile(BaseModel):
    bag_seq: int
    x: int
    y: int


class TileRef(BaseModel):
    bag_seq: int


class ExpandGrid(BaseModel):
    direction: ExpandDirection


class PlacementResponse(BaseModel):
    bag_seq: int
    x: int
    y: int
    as_letter: str
    locked: bool

    model_config = {"from_attributes": True}


class RecallResponse(BaseModel):
    recalled: list[int]


class MixmoResponse(BaseModel):
    distributed_tiles: list[int]
    caller_tiles: list[int]
    other_player_tiles: list[int]

    model_config = {"from_attributes": True}


class EventResponse(BaseModel):
    id: int
    room_id: str
    user_id: Optional[int]
    type: EventType
    payload: dict[str, Any]
    created_at: datetime

    model_config = {"from_attributes": True}
