"""Engine error kinds.

Every engine operation is all-or-nothing: a precondition failure raises one of
these before anything is written, and the room transaction rolls back any
work already flushed.  They subclass ValueError so callers that only care
about "the request was rejected" can keep catching ValueError.
"""


class GameError(ValueError):
    code = "game_error"
    default_message = "Game operation failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class RoomNotFound(GameError):
    code = "room_not_found"
    default_message = "Room not found"


class InsufficientTiles(GameError):
    code = "insufficient_tiles"
    default_message = "Not enough tiles left in the bag"


class AlreadyDrawn(GameError):
    code = "already_drawn"
    default_message = "Tile has already been drawn"


class NotInRack(GameError):
    code = "not_in_rack"
    default_message = "Tile is not in your rack"


class CellOccupied(GameError):
    code = "cell_occupied"
    default_message = "Cell is already occupied"


class OutOfBounds(GameError):
    code = "out_of_bounds"
    default_message = "Cell is outside the grid"


class NotOnBoard(GameError):
    code = "not_on_board"
    default_message = "Tile is not on your board"


class TileLocked(GameError):
    code = "tile_locked"
    default_message = "Tile is locked"


class InvalidLetter(GameError):
    code = "invalid_letter"
    default_message = "Invalid letter for this tile"


class GridNotExpandable(GameError):
    code = "grid_not_expandable"
    default_message = "This room uses a fixed grid"


class GameNotActive(GameError):
    code = "game_not_active"
    default_message = "Game is not active"


class WrongPlayerCount(GameError):
    code = "wrong_player_count"
    default_message = "The room needs exactly 2 players"


class NotInRoom(GameError):
    code = "not_in_room"
    default_message = "You are not in this room"


class RackNotEmpty(GameError):
    code = "rack_not_empty"
    default_message = "Your rack must be empty to call MIXMO"


class InvalidStartPrecondition(GameError):
    code = "invalid_start_precondition"
    default_message = "Game cannot be started"


class RoomFull(GameError):
    code = "room_full"
    default_message = "Room is full"


class AlreadySeated(GameError):
    code = "already_seated"
    default_message = "Already seated in this room"
