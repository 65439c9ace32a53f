"""Exception types raised by the bot client."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class TokyoBotError(Exception):
    message: str

    def __str__(self) -> str:
        return self.message


class ConfigError(TokyoBotError):
    pass


class ProtocolError(TokyoBotError):
    pass


class NotConnectedError(TokyoBotError):
    pass


@dataclass
class PlayerNotFoundError(TokyoBotError):
    player_id: int | None = None
