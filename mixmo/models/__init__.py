from mixmo.models.bag_tile import BagTile  # noqa: F401
from mixmo.models.base import Base  # noqa: F401
from mixmo.models.board_tile import BoardTile  # noqa: F401
from mixmo.models.event import EventType, RoomEvent  # noqa: F401
from mixmo.models.rack_tile import RackTile  # noqa: F401
from mixmo.models.room import BoundsPolicy, Room, RoomState  # noqa: F401
from mixmo.models.room_player import RoomPlayer  # noqa: F401
from mixmo.models.user import User  # noqa: F401
