"""
Runtime configuration for the bot runner.

Values come from command-line flags, falling back to TOKYO_* environment
variables, then to defaults.
"""

from __future__ import annotations

import argparse
import logging
import os
from dataclasses import dataclass

from .errors import ConfigError

ENV_PREFIX = "TOKYO_"


@dataclass
class BotConfig:
    server: str
    key: str
    name: str
    tick_rate: float = 10.0
    throttle: float = 1.0
    reconnects: int = 0
    log_level: str = "INFO"

    def validate(self) -> "BotConfig":
        if not self.server:
            raise ConfigError("miss server flag")
        if not self.key:
            raise ConfigError("miss key flag")
        if not self.name:
            raise ConfigError("miss name flag")
        if self.tick_rate <= 0:
            raise ConfigError(f"tick rate must be positive, got {self.tick_rate}")
        if not 0.0 <= self.throttle <= 1.0:
            raise ConfigError(f"throttle must be within [0, 1], got {self.throttle}")
        if self.reconnects < 0:
            raise ConfigError(f"reconnects must not be negative, got {self.reconnects}")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ConfigError(f"unknown log level {self.log_level!r}")
        return self


def _env(name: str, default=None):
    return os.environ.get(ENV_PREFIX + name, default)


def _env_number(name: str, cast, default):
    raw = _env(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError as exc:
        raise ConfigError(f"{ENV_PREFIX}{name} is not a valid number: {raw!r}") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Tokyo arena bot",
        epilog="example: tokyo-bot --server ws://host/socket --key my-key --name MyBot",
    )
    parser.add_argument('--server', default=None,
                        help='server socket URL (env: TOKYO_SERVER)')
    parser.add_argument('--key', default=None,
                        help="user's unique key (env: TOKYO_KEY)")
    parser.add_argument('--name', default=None,
                        help="user's display name (env: TOKYO_NAME)")
    parser.add_argument('--tick-rate', type=float, default=None,
                        help='command ticks per second (default: 10)')
    parser.add_argument('--throttle', type=float, default=None,
                        help='throttle sent every tick, 0..1 (default: 1)')
    parser.add_argument('--reconnects', type=int, default=None,
                        help='reconnect attempts after the server drops us (default: 0)')
    parser.add_argument('--log-level', default=None,
                        help='logging level (default: INFO)')
    return parser


def load_config(argv=None) -> BotConfig:
    """Parse flags and environment into a validated BotConfig."""
    args = build_parser().parse_args(argv)

    def pick(flag_value, env_name, cast, default):
        if flag_value is not None:
            return flag_value
        return _env_number(env_name, cast, default)

    config = BotConfig(
        server=args.server or _env("SERVER", ""),
        key=args.key or _env("KEY", ""),
        name=args.name or _env("NAME", ""),
        tick_rate=pick(args.tick_rate, "TICK_RATE", float, 10.0),
        throttle=pick(args.throttle, "THROTTLE", float, 1.0),
        reconnects=pick(args.reconnects, "RECONNECTS", int, 0),
        log_level=(args.log_level or _env("LOG_LEVEL", "INFO")).upper(),
    )
    return config.validate()
