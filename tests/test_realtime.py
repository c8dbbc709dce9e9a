import os
import tempfile

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from starlette.websockets import WebSocketDisconnect

from mixmo.database import get_db, get_session_factory
from mixmo.main import app
from mixmo.models.base import Base


@pytest.fixture
def live_client():
    """TestClient backed by a throwaway SQLite file, set up on the client's own loop."""
    db_fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(db_fd)
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    factory = async_sessionmaker(engine, expire_on_commit=False)

    async def override_get_db():
        async with factory() as session:
            yield session

    async def create_tables():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: factory
    with TestClient(app) as client:
        client.portal.call(create_tables)
        yield client
        client.portal.call(engine.dispose)
    app.dependency_overrides.clear()
    if os.path.exists(db_path):
        os.unlink(db_path)


def _register_and_login(client: TestClient, name: str) -> str:
    client.post(
        "/auth/register",
        json={"email": f"{name}@example.com", "username": name, "password": "pass1234"},
    )
    resp = client.post("/auth/login", json={"email": f"{name}@example.com", "password": "pass1234"})
    return resp.json()["access_token"]


def _started_room(client: TestClient) -> tuple[str, str]:
    owner = _register_and_login(client, "ws_owner")
    _register_and_login(client, "ws_friend")
    headers = {"Authorization": f"Bearer {owner}"}
    resp = client.post("/rooms", json={"opponent": "ws_friend"}, headers=headers)
    assert resp.status_code == 201, resp.text
    room_id = resp.json()["id"]
    resp = client.post(f"/rooms/{room_id}/start", headers=headers)
    assert resp.status_code == 200, resp.text
    return room_id, owner


class TestRoomWebSocket:
    def test_invalid_token_is_rejected(self):
        with TestClient(app) as client:
            with pytest.raises(WebSocketDisconnect) as exc_info:
                with client.websocket_connect("/rooms/some-room/ws?token=garbage"):
                    pass
        assert exc_info.value.code == 1008

    def test_missing_token_is_rejected(self):
        with TestClient(app) as client:
            with pytest.raises(WebSocketDisconnect):
                with client.websocket_connect("/rooms/some-room/ws"):
                    pass

    def test_outsider_is_rejected(self, live_client: TestClient):
        room_id, _ = _started_room(live_client)
        outsider = _register_and_login(live_client, "ws_outsider")

        with pytest.raises(WebSocketDisconnect) as exc_info:
            with live_client.websocket_connect(f"/rooms/{room_id}/ws?token={outsider}"):
                pass
        assert exc_info.value.code == 1008

    def test_seated_player_receives_changes(self, live_client: TestClient):
        room_id, owner = _started_room(live_client)

        with live_client.websocket_connect(f"/rooms/{room_id}/ws?token={owner}") as ws:
            assert ws.receive_json() == {"type": "subscribed", "room_id": room_id}

            ws.send_text("ping")
            assert ws.receive_json() == {"type": "pong"}

            resp = live_client.post(
                f"/rooms/{room_id}/board/place",
                json={"bag_seq": 1, "x": 0, "y": 0},
                headers={"Authorization": f"Bearer {owner}"},
            )
            assert resp.status_code == 201, resp.text

            change = ws.receive_json()
            assert change["type"] == "change"
            assert change["room_id"] == room_id
            assert change["event"] == "place"
            assert "board" in change["tables"]
            assert change["payload"] == {"tile": 1}
