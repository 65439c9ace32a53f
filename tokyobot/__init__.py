"""Tokyo arena-shooter example bot."""

from .bot import TokyoBot
from .client import TokyoClient
from .errors import (
    ConfigError,
    NotConnectedError,
    PlayerNotFoundError,
    ProtocolError,
    TokyoBotError,
)
from .models import Bullet, Player, StateData
from .targeting import Decision, decide

__all__ = [
    "TokyoBot",
    "TokyoClient",
    "Decision",
    "decide",
    "Player",
    "Bullet",
    "StateData",
    "TokyoBotError",
    "ConfigError",
    "ProtocolError",
    "NotConnectedError",
    "PlayerNotFoundError",
]
