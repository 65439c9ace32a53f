#!/usr/bin/env python3
"""
Tokyo Bot Runner - connects the example bot to a Tokyo arena server.

Usage:
    python -m tokyobot.run --server ws://host/socket --key my-key --name "TokyoBot"

Flags fall back to TOKYO_SERVER, TOKYO_KEY, TOKYO_NAME, ... environment
variables. Ctrl+C (or SIGTERM) closes the connection and exits cleanly.
"""

import asyncio
import logging
import signal
import sys

import websockets
import websockets.exceptions

from .bot import TokyoBot
from .client import TokyoClient
from .config import load_config
from .errors import ConfigError, TokyoBotError

LOG_FORMAT = '%(asctime)s [%(name)s] %(levelname)s: %(message)s'

logger = logging.getLogger('tokyobot.runner')

# Shutdown tasks started from signal handlers, kept until they finish
_shutdown_tasks = set()


def mask(secret):
    if len(secret) <= 4:
        return "*" * len(secret)
    return secret[:2] + "*" * (len(secret) - 4) + secret[-2:]


def install_signal_handlers(bot):
    """Close the bot on SIGINT / SIGTERM."""
    loop = asyncio.get_running_loop()

    def _shutdown(signame):
        logger.info(f"{signame} received, shutting down...")
        task = loop.create_task(bot.stop())
        _shutdown_tasks.add(task)
        task.add_done_callback(_shutdown_tasks.discard)

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _shutdown, sig.name)
        except NotImplementedError:
            # No loop signal support on this platform; KeyboardInterrupt still works
            pass


async def main(config):
    client = TokyoClient(
        config.server, config.key, config.name,
        max_reconnects=config.reconnects,
    )
    bot = TokyoBot(client, tick_rate=config.tick_rate, throttle=config.throttle)
    install_signal_handlers(bot)

    reason = await bot.run()
    logger.info(f"Game ended: {reason}")
    return bot


def cli(argv=None):
    try:
        config = load_config(argv)
    except ConfigError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(level=config.log_level, format=LOG_FORMAT)
    logger.info(f"Start server: {config.server}, key: {mask(config.key)}, "
                f"name: {config.name}")

    try:
        asyncio.run(main(config))
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    except TokyoBotError as e:
        logger.error(f"Bot stopped: {e}")
        return 1
    except (OSError, websockets.exceptions.WebSocketException) as e:
        logger.error(f"Connection failed: {e}")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(cli())
