"""
Shared test fixtures for the tokyobot test suite.

Provides:
- FakeWebSocket: scripted server socket
- BlockingWebSocket: scripted socket that stays open until closed
- patched websockets.connect that hands out FakeWebSockets
- RecordingClient: stand-in client that records sent commands
"""

import asyncio
import json
import os
import sys

import pytest
import websockets

# Make the package importable without installing it
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from tokyobot.models import Bullet, Player


class FakeWebSocket:
    """Replays queued server messages, then reports a closed connection."""

    def __init__(self, messages=()):
        self.incoming = [m if isinstance(m, str) else json.dumps(m) for m in messages]
        self.sent: list[dict] = []
        self.closed = False

    async def recv(self):
        if self.closed or not self.incoming:
            self.closed = True
            raise websockets.exceptions.ConnectionClosedOK(None, None)
        return self.incoming.pop(0)

    async def send(self, message):
        if self.closed:
            raise websockets.exceptions.ConnectionClosedOK(None, None)
        self.sent.append(json.loads(message))

    async def close(self):
        self.closed = True


class BlockingWebSocket(FakeWebSocket):
    """Like FakeWebSocket, but once drained it waits in recv() until closed."""

    def __init__(self, messages=()):
        super().__init__(messages)
        self._closed_event = asyncio.Event()

    async def recv(self):
        if not self.incoming and not self.closed:
            await self._closed_event.wait()
        return await super().recv()

    async def close(self):
        await super().close()
        self._closed_event.set()


class RecordingClient:
    """Minimal client double: remembers commands in the order they were sent."""

    def __init__(self, conn_ready=True):
        self.conn_ready = conn_ready
        self.calls = []
        self.closed = False

    async def fire(self):
        self.calls.append(("fire",))

    async def rotate(self, angle):
        self.calls.append(("rotate", angle))

    async def throttle(self, speed):
        self.calls.append(("throttle", speed))

    async def close(self):
        self.closed = True
        self.conn_ready = False


@pytest.fixture
def fake_server(monkeypatch):
    """Patch websockets.connect; each connect returns the next scripted socket."""

    class Server:
        def __init__(self):
            self.sockets = []
            self.urls = []

        def script(self, *messages):
            ws = FakeWebSocket(messages)
            self.sockets.append(ws)
            return ws

    server = Server()

    async def fake_connect(url, **kwargs):
        server.urls.append(url)
        index = len(server.urls) - 1
        if index >= len(server.sockets):
            raise OSError("connection refused")
        return server.sockets[index]

    monkeypatch.setattr(websockets, "connect", fake_connect)
    return server


@pytest.fixture
def recording_client():
    return RecordingClient()


# ── Test Data Helpers ────────────────────────────────────────────

def make_player(id=1, x=100.0, y=100.0, angle=0.0, **kwargs) -> Player:
    return Player(id=id, x=x, y=y, angle=angle, **kwargs)


def make_bullet(player_id=2, x=0.0, y=0.0, angle=0.0, id=1) -> Bullet:
    return Bullet(id=id, player_id=player_id, x=x, y=y, angle=angle)
