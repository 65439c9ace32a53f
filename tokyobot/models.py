"""
Wire models for Tokyo server snapshots.

The server pushes JSON state updates; these models validate the parts the
bot reads and ignore everything else. All models are frozen: a snapshot is
read-only for the duration of one tick.
"""

from typing import Any, Dict, List, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Point(NamedTuple):
    """Plain (x, y) pair used for geometry between located entities."""

    x: float
    y: float


class _Snapshot(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class Player(_Snapshot):
    id: int
    x: float = 0.0
    y: float = 0.0
    angle: float = 0.0
    throttle: float = 0.0
    hp: int = 0
    username: str = ""
    score: int = 0
    # None means "unknown": fall back to the (0, 0) sentinel check
    placed: Optional[bool] = None

    @property
    def position(self):
        return Point(self.x, self.y)


class Bullet(_Snapshot):
    id: int = 0
    player_id: int = 0
    x: float = 0.0
    y: float = 0.0
    angle: float = 0.0

    @property
    def position(self):
        return Point(self.x, self.y)


class StateData(_Snapshot):
    """One atomic view of every player and bullet on the map."""

    players: List[Player] = Field(default_factory=list)
    bullets: List[Bullet] = Field(default_factory=list)
    scoreboard: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("players", "bullets", mode="before")
    @classmethod
    def _null_as_empty_list(cls, value):
        # empty collections arrive as null
        return [] if value is None else value

    @field_validator("scoreboard", mode="before")
    @classmethod
    def _null_as_empty_dict(cls, value):
        return {} if value is None else value


# Events

class CurrentUserIDEvent(_Snapshot):
    data: int


class StateEvent(_Snapshot):
    data: StateData


class TeamNamesEvent(_Snapshot):
    data: Any = None
