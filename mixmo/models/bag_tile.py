"""BagTile model: one lettered tile of a room's bag."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from mixmo.models.base import Base


class BagTile(Base):
    """A tile and its bag entry.

    A row is created for every tile when the room starts, in shuffled order
    captured by ``seq`` (1 = first to be drawn).  The tile is in the bag while
    ``drawn_by`` is null; once drawn it is never put back.
    """

    __tablename__ = "bag_tiles"
    __table_args__ = (UniqueConstraint("room_id", "seq", name="uq_bag_tiles_room_seq"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, index=True)
    room_id: Mapped[str] = mapped_column(ForeignKey("rooms.id"), nullable=False, index=True)
    seq: Mapped[int] = mapped_column(Integer, nullable=False)
    letter: Mapped[str] = mapped_column(String(1), nullable=False)
    is_joker: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    drawn_by: Mapped[int | None] = mapped_column(
        ForeignKey("users.id"), nullable=True, default=None
    )
    drawn_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
