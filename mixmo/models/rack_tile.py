from sqlalchemy import ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from mixmo.models.base import Base


class RackTile(Base):
    __tablename__ = "rack_tiles"
    __table_args__ = (
        UniqueConstraint("room_id", "bag_seq", name="uq_rack_tiles_room_seq"),
        UniqueConstraint("room_id", "user_id", "idx", name="uq_rack_tiles_room_user_idx"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, index=True)
    room_id: Mapped[str] = mapped_column(ForeignKey("rooms.id"), nullable=False, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    bag_seq: Mapped[int] = mapped_column(Integer, nullable=False)
    # Left-to-right position; append-only, never compacted
    idx: Mapped[int] = mapped_column(Integer, nullable=False)
