"""WebSocket relay for room change notifications.

Clients connect with their bearer token as a query parameter, receive one
JSON message per committed change in the room, and re-fetch the state they
display.  Nothing is accepted from the client besides keep-alive pings.
The seat check uses its own short session; an open socket holds no
database connection.
"""

import asyncio
import contextlib
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mixmo.database import get_session_factory
from mixmo.services.auth_service import decode_access_token
from mixmo.services.notification_service import notifier
from mixmo.services.room_service import get_player_in_room

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rooms", tags=["realtime"])


async def _is_seated(
    session_factory: async_sessionmaker[AsyncSession], room_id: str, user_id: int
) -> bool:
    async with session_factory() as db:
        return await get_player_in_room(db, room_id, user_id) is not None


@router.websocket("/{room_id}/ws")
async def room_updates(
    websocket: WebSocket,
    room_id: str,
    token: str,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    user_id = decode_access_token(token)
    if user_id is None or not await _is_seated(session_factory, room_id, user_id):
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    queue = notifier.subscribe(room_id)
    await websocket.send_json({"type": "subscribed", "room_id": room_id})

    async def forward() -> None:
        while True:
            change = await queue.get()
            await websocket.send_json({"type": "change", **change.to_dict()})

    forward_task = asyncio.create_task(forward())
    try:
        while True:
            message = await websocket.receive_text()
            if message == "ping":
                await websocket.send_json({"type": "pong"})
    except WebSocketDisconnect:
        logger.debug("User %s left the updates of room %s", user_id, room_id)
    finally:
        forward_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await forward_task
        notifier.unsubscribe(room_id, queue)
