"""
Tokyo WebSocket client - connects a player to a Tokyo arena server.

Handles the connection lifecycle:
  1. connect with the player's key and name in the query string
  2. receive JSON events and dispatch them to async callbacks
  3. send rotate / throttle / fire commands
  4. optionally reconnect with exponential backoff when the socket drops
"""

import asyncio
import logging

import websockets
import websockets.exceptions

from . import protocol
from .errors import NotConnectedError, ProtocolError
from .models import CurrentUserIDEvent, StateEvent, TeamNamesEvent

logger = logging.getLogger('tokyobot.client')

CLOSED_BY_CLIENT = "closed by client"


class TokyoClient:
    """
    Async client for the Tokyo socket protocol.

    Usage:
        client = TokyoClient("ws://server/socket", key="abc", name="MyBot")
        client.on_state = my_state_handler
        client.on_user_id = my_id_handler
        await client.connect()
        await client.listen()
    """

    def __init__(self, server_url, key, name, max_reconnects=0, backoff_base=0.5):
        self.server_url = server_url
        self.name = name
        self.url = protocol.build_url(server_url, key, name)
        self.max_reconnects = max(0, max_reconnects)
        self.backoff_base = max(0.0, backoff_base)

        self.conn_ready = False
        self._ws = None
        self._running = False
        # set by close(); a closed client stays closed
        self._stopping = False

        # Callbacks
        self.on_user_id = None       # async fn(client, CurrentUserIDEvent)
        self.on_state = None         # async fn(client, StateEvent)
        self.on_team_names = None    # async fn(client, TeamNamesEvent)
        self.on_connected = None     # async fn(client)
        self.on_disconnected = None  # async fn(client, reason)

    # --- Public API ---

    async def connect(self):
        """Open the socket to the server."""
        logger.info(f"Connecting to {self.server_url} as {self.name}")
        ws = await websockets.connect(
            self.url,
            max_size=None,
            ping_interval=None,
        )
        if self._stopping:
            await ws.close()
            logger.info("Close requested while connecting, dropped new connection")
            return
        self._ws = ws
        self.conn_ready = True
        logger.info("Connected!")
        if self.on_connected:
            await self.on_connected(self)

    async def close(self):
        """Stop listening and close the socket."""
        self._stopping = True
        self._running = False
        self.conn_ready = False
        ws, self._ws = self._ws, None
        if ws is not None:
            await ws.close()
            logger.info("Connection closed by client")

    async def listen(self):
        """
        Receive and dispatch events until the connection ends.

        Reconnects up to ``max_reconnects`` times when the server drops the
        socket. Returns the last close reason.
        """
        if self._stopping:
            return CLOSED_BY_CLIENT
        if self._ws is None:
            raise NotConnectedError("connect() must be called before listen()")

        self._running = True
        attempt = 0
        reason = await self._receive()

        while self._running and attempt < self.max_reconnects:
            attempt += 1
            delay = self._retry_delay(attempt)
            logger.warning(f"Reconnecting in {delay:.2f}s "
                           f"(attempt {attempt}/{self.max_reconnects})")
            await asyncio.sleep(delay)
            if not self._running:
                break
            try:
                await self.connect()
            except (OSError, websockets.exceptions.WebSocketException) as e:
                logger.warning(f"Reconnect failed: {e}")
                reason = str(e)
                continue
            if self._stopping:
                reason = CLOSED_BY_CLIENT
                break
            reason = await self._receive()

        self._running = False
        return reason

    async def rotate(self, angle):
        await self._send(protocol.rotate(angle))

    async def throttle(self, speed):
        await self._send(protocol.throttle(speed))

    async def fire(self):
        await self._send(protocol.fire())

    @property
    def is_running(self):
        return self._running

    # --- Receiving ---

    async def _receive(self):
        """Dispatch messages until the socket closes. Returns the close reason."""
        ws = self._ws
        try:
            while self._running:
                raw = await ws.recv()
                await self._handle_message(raw)
            reason = CLOSED_BY_CLIENT
        except websockets.exceptions.ConnectionClosed as e:
            reason = str(e)
            if self._running:
                logger.warning(f"Connection closed: {e}")

        self.conn_ready = False
        if self._ws is ws:
            self._ws = None
        if self.on_disconnected:
            await self.on_disconnected(self, reason)
        return reason

    async def _handle_message(self, raw):
        try:
            event = protocol.decode_event(raw)
        except ProtocolError as e:
            logger.warning(f"Skipping server message: {e}")
            return

        if event is None:
            return

        callback = self._callback_for(event)
        if callback is None:
            return

        try:
            await callback(self, event)
        except Exception as e:
            logger.error(f"Event handler error: {e}", exc_info=True)

    def _callback_for(self, event):
        if isinstance(event, StateEvent):
            return self.on_state
        if isinstance(event, CurrentUserIDEvent):
            return self.on_user_id
        if isinstance(event, TeamNamesEvent):
            return self.on_team_names
        return None

    def _retry_delay(self, attempt):
        return self.backoff_base * (2 ** (attempt - 1))

    # --- Sending ---

    async def _send(self, message):
        if not self.conn_ready or self._ws is None:
            raise NotConnectedError("Not connected to the server")
        logger.debug(f"-> {message}")
        await self._ws.send(message)
