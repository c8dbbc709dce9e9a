from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from mixmo.database import get_db
from mixmo.errors import (
    AlreadyDrawn,
    AlreadySeated,
    CellOccupied,
    GameError,
    InsufficientTiles,
    NotInRoom,
    RackNotEmpty,
    RoomFull,
    RoomNotFound,
)
from mixmo.models.user import User
from mixmo.services.auth_service import decode_access_token, get_user_by_id

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise unauthorized

    user_id = decode_access_token(credentials.credentials)
    if user_id is None:
        raise unauthorized

    user = await get_user_by_id(db, user_id)
    if user is None:
        raise unauthorized
    return user


_STATUS_BY_CODE = {
    RoomNotFound.code: status.HTTP_404_NOT_FOUND,
    NotInRoom.code: status.HTTP_403_FORBIDDEN,
    AlreadyDrawn.code: status.HTTP_409_CONFLICT,
    AlreadySeated.code: status.HTTP_409_CONFLICT,
    CellOccupied.code: status.HTTP_409_CONFLICT,
    InsufficientTiles.code: status.HTTP_409_CONFLICT,
    RackNotEmpty.code: status.HTTP_409_CONFLICT,
    RoomFull.code: status.HTTP_409_CONFLICT,
}


def http_error(exc: ValueError) -> HTTPException:
    """Translate an engine rejection into an HTTP error response."""
    if isinstance(exc, GameError):
        return HTTPException(
            status_code=_STATUS_BY_CODE.get(exc.code, status.HTTP_400_BAD_REQUEST),
            detail={"code": exc.code, "message": exc.message},
        )
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"code": "invalid_request", "message": str(exc)},
    )
