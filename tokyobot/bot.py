"""
Tokyo Bot - wires the targeting heuristic to a TokyoClient.

Two flows share one value:
  - every state snapshot runs decide() and replaces ``bot.decision``
  - a fixed-rate ticker reads ``bot.decision`` and sends fire / rotate /
    throttle commands

``bot.decision`` is an immutable Decision replaced in a single assignment,
so the ticker never sees an angle from one snapshot with fire flags from
another.
"""

import asyncio
import logging
import random

import websockets
import websockets.exceptions

from .errors import NotConnectedError, PlayerNotFoundError
from .targeting import Decision, decide

logger = logging.getLogger('tokyobot.bot')

NO_ID = -1


def find_my_player(players, bullets, my_id):
    """
    Split a snapshot into (me, other players, enemy bullets).

    Raises PlayerNotFoundError if no player carries ``my_id``.
    """
    me = None
    others = []
    for player in players:
        if me is None and player.id == my_id:
            me = player
        else:
            others.append(player)

    if me is None:
        raise PlayerNotFoundError(f"Player {my_id} missing from snapshot",
                                  player_id=my_id)

    enemy_bullets = [b for b in bullets if b.player_id != my_id]
    return me, others, enemy_bullets


class TokyoBot:
    """
    Autonomous arena bot.

    Example:
        client = TokyoClient("ws://server/socket", key="abc", name="Bot")
        bot = TokyoBot(client)
        await bot.run()
    """

    def __init__(self, client, tick_rate=10, throttle=1.0, jitter=0.001, rng=None):
        self.client = client
        self.tick_rate = tick_rate
        self.throttle = throttle
        self.jitter = jitter
        self._rng = rng or random.Random()

        self.id = NO_ID
        self.decision = Decision(0.0)
        self.team_names = None
        self.fatal_error = None
        self.ticks = 0

        self.client.on_user_id = self._on_user_id
        self.client.on_state = self._on_state
        self.client.on_team_names = self._on_team_names
        self.client.on_connected = self._on_connected
        self.client.on_disconnected = self._on_disconnected

    async def run(self):
        """Connect, then listen and tick until the connection ends.

        Re-raises the fatal error that stopped the bot, if any.
        """
        await self.client.connect()
        ticker = asyncio.create_task(self.run_ticker())
        try:
            reason = await self.client.listen()
        finally:
            ticker.cancel()
            try:
                await ticker
            except asyncio.CancelledError:
                pass

        if self.fatal_error is not None:
            raise self.fatal_error
        return reason

    async def stop(self):
        await self.client.close()

    async def run_ticker(self):
        """Tick at a fixed rate; ticks that fall too far behind are dropped."""
        loop = asyncio.get_running_loop()
        interval = 1.0 / self.tick_rate
        deadline = loop.time()
        while True:
            deadline += interval
            await asyncio.sleep(max(0.0, deadline - loop.time()))
            if loop.time() - deadline > interval:
                deadline = loop.time()
            try:
                await self.tick()
            except (NotConnectedError, websockets.exceptions.ConnectionClosed) as e:
                logger.debug(f"Skipped tick: {e}")

    async def tick(self):
        """Send one round of commands for the latest decision."""
        if not self.client.conn_ready:
            return

        decision = self.decision
        if decision.fire_before:
            await self.client.fire()
        await self.client.rotate(decision.angle + self._rng.random() * self.jitter)
        if decision.fire_after:
            await self.client.fire()
        await self.client.throttle(self.throttle)
        self.ticks += 1

    def update(self, state):
        """Run the heuristic on one snapshot and publish the result."""
        if self.id == NO_ID or not state.players:
            return None

        me, others, bullets = find_my_player(state.players, state.bullets, self.id)
        decision = decide(me, others, bullets)
        self.decision = decision
        return decision

    # --- Client callbacks ---

    async def _on_connected(self, client):
        # each connection is a new session with its own player ID
        self.id = NO_ID
        self.decision = Decision(0.0)

    async def _on_user_id(self, client, event):
        if self.id == NO_ID:
            self.id = event.data
            logger.info(f"User ID assigned: {self.id}")
        elif event.data != self.id:
            logger.warning(f"Ignoring new user ID {event.data}, keeping {self.id}")

    async def _on_state(self, client, event):
        try:
            self.update(event.data)
        except PlayerNotFoundError as e:
            logger.critical(f"Cannot find myself in the game: {e}")
            self.fatal_error = e
            await self.stop()

    async def _on_team_names(self, client, event):
        self.team_names = event.data
        logger.debug(f"Team names: {event.data}")

    async def _on_disconnected(self, client, reason):
        logger.info(f"Bot disconnected: {reason}")
