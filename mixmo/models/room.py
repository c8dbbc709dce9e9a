import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from mixmo.models.base import Base


class RoomState(str, enum.Enum):
    waiting = "waiting"
    active = "active"
    finished = "finished"


class BoundsPolicy(str, enum.Enum):
    fixed = "fixed"
    dynamic = "dynamic"


def _new_room_id() -> str:
    return str(uuid.uuid4())


class Room(Base):
    """A two-seat game room.

    The grid bounds live on the room so that both players share the same
    playable area. Under the fixed policy they never change; under the
    dynamic policy each expansion request pushes one edge out by one cell.
    """

    __tablename__ = "rooms"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_room_id)
    owner_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    state: Mapped[RoomState] = mapped_column(
        Enum(RoomState), nullable=False, default=RoomState.waiting
    )
    bounds_policy: Mapped[BoundsPolicy] = mapped_column(
        Enum(BoundsPolicy), nullable=False, default=BoundsPolicy.fixed
    )
    grid_min_x: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    grid_max_x: Mapped[int] = mapped_column(Integer, nullable=False, default=7)
    grid_min_y: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    grid_max_y: Mapped[int] = mapped_column(Integer, nullable=False, default=7)
    winner_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id"), nullable=True, default=None
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
