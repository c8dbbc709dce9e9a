from sqlalchemy import Boolean, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from mixmo.models.base import Base


class BoardTile(Base):
    __tablename__ = "board_tiles"
    __table_args__ = (
        UniqueConstraint("room_id", "bag_seq", name="uq_board_tiles_room_seq"),
        UniqueConstraint("room_id", "user_id", "x", "y", name="uq_board_tiles_room_user_cell"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, index=True)
    room_id: Mapped[str] = mapped_column(ForeignKey("rooms.id"), nullable=False, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    bag_seq: Mapped[int] = mapped_column(Integer, nullable=False)
    x: Mapped[int] = mapped_column(Integer, nullable=False)
    y: Mapped[int] = mapped_column(Integer, nullable=False)
    # Letter the tile stands for; differs from the bag letter only for jokers
    as_letter: Mapped[str] = mapped_column(String(1), nullable=False)
    locked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
