"""
Tests for the JSON event protocol and wire models.
"""

import json

import pytest
from pydantic import ValidationError

from tokyobot import protocol
from tokyobot.errors import ProtocolError
from tokyobot.models import CurrentUserIDEvent, Player, StateEvent, TeamNamesEvent


def test_decode_user_id():
    event = protocol.decode_event('{"e": "id", "data": 42}')
    assert isinstance(event, CurrentUserIDEvent)
    assert event.data == 42


def test_decode_state():
    raw = json.dumps({
        "e": "state",
        "data": {
            "players": [
                {"id": 1, "x": 10.5, "y": 20, "angle": 1.25, "hp": 100,
                 "username": "bot", "score": 3, "throttle": 1},
                {"id": 2, "x": 300, "y": 400, "angle": 0},
            ],
            "bullets": [{"id": 9, "player_id": 2, "x": 5, "y": 6, "angle": 3.0}],
            "scoreboard": {"1": 3, "2": 0},
        },
    })
    event = protocol.decode_event(raw)
    assert isinstance(event, StateEvent)
    state = event.data
    assert [p.id for p in state.players] == [1, 2]
    assert state.players[0].x == 10.5
    assert state.players[0].username == "bot"
    assert state.players[0].placed is None
    assert state.bullets[0].player_id == 2
    assert state.bullets[0].angle == 3.0
    assert state.scoreboard == {"1": 3, "2": 0}


def test_decode_state_with_null_collections():
    event = protocol.decode_event(b'{"e": "state", "data": {"players": null, "bullets": null}}')
    assert event.data.players == []
    assert event.data.bullets == []
    assert event.data.scoreboard == {}


def test_decode_team_names():
    event = protocol.decode_event('{"e": "teamnames", "data": {"1": "Red"}}')
    assert isinstance(event, TeamNamesEvent)
    assert event.data == {"1": "Red"}


def test_unknown_event_ignored():
    assert protocol.decode_event('{"e": "leaderboard", "data": []}') is None


def test_invalid_json_raises():
    with pytest.raises(ProtocolError):
        protocol.decode_event("not json")


def test_non_object_raises():
    with pytest.raises(ProtocolError):
        protocol.decode_event("[1, 2, 3]")


def test_invalid_payload_raises():
    with pytest.raises(ProtocolError):
        protocol.decode_event('{"e": "id", "data": "me"}')
    with pytest.raises(ProtocolError):
        protocol.decode_event('{"e": "state"}')


def test_encode_commands():
    assert json.loads(protocol.rotate(1.5)) == {"e": "rotate", "data": 1.5}
    assert json.loads(protocol.throttle(1)) == {"e": "throttle", "data": 1.0}
    assert json.loads(protocol.fire()) == {"e": "fire"}


def test_build_url():
    url = protocol.build_url("ws://localhost:8080/socket", "k 1", "Bot")
    assert url == "ws://localhost:8080/socket?key=k+1&name=Bot"
    url = protocol.build_url("wss://host/socket?room=2", "k", "Bot")
    assert url == "wss://host/socket?room=2&key=k&name=Bot"


def test_build_url_rejects_http():
    with pytest.raises(ProtocolError):
        protocol.build_url("http://host/socket", "k", "Bot")


def test_snapshot_models_are_frozen():
    player = Player(id=1, x=1, y=2, angle=0)
    with pytest.raises(ValidationError):
        player.x = 5
