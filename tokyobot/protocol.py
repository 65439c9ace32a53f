"""
Tokyo socket protocol - JSON events in, JSON commands out.

Every message is a JSON object with an event name under "e" and an optional
payload under "data":

    server -> bot:  {"e": "id", "data": 7}
                    {"e": "state", "data": {"players": [...], "bullets": [...]}}
                    {"e": "teamnames", "data": {...}}
    bot -> server:  {"e": "rotate", "data": 1.57}
                    {"e": "throttle", "data": 1}
                    {"e": "fire"}
"""

import json
import logging
from urllib.parse import urlencode, urlparse

from pydantic import ValidationError

from .errors import ProtocolError
from .models import CurrentUserIDEvent, StateEvent, TeamNamesEvent

logger = logging.getLogger('tokyobot.protocol')

EVENT_USER_ID = "id"
EVENT_STATE = "state"
EVENT_TEAM_NAMES = "teamnames"

COMMAND_ROTATE = "rotate"
COMMAND_THROTTLE = "throttle"
COMMAND_FIRE = "fire"

EVENT_TYPES = {
    EVENT_USER_ID: CurrentUserIDEvent,
    EVENT_STATE: StateEvent,
    EVENT_TEAM_NAMES: TeamNamesEvent,
}


def build_url(server, key, name):
    """Append the player's key and display name to the socket URL."""
    parsed = urlparse(server)
    if parsed.scheme not in ("ws", "wss"):
        raise ProtocolError(f"Unsupported server scheme: {server!r}")
    separator = "&" if parsed.query else "?"
    return f"{server}{separator}{urlencode({'key': key, 'name': name})}"


def encode_command(command, data=None):
    payload = {"e": command}
    if data is not None:
        payload["data"] = data
    return json.dumps(payload)


def rotate(angle):
    return encode_command(COMMAND_ROTATE, float(angle))


def throttle(speed):
    return encode_command(COMMAND_THROTTLE, float(speed))


def fire():
    return encode_command(COMMAND_FIRE)


def decode_event(raw):
    """
    Decode one server message into its event model.

    Returns None for events this bot does not handle. Raises ProtocolError
    when the message is not valid JSON or its payload fails validation.
    """
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")

    try:
        message = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ProtocolError(f"Invalid JSON from server: {exc}") from exc

    if not isinstance(message, dict):
        raise ProtocolError(f"Expected a JSON object, got {type(message).__name__}")

    event_name = message.get("e")
    event_type = EVENT_TYPES.get(event_name)
    if event_type is None:
        logger.debug(f"Ignoring event {event_name!r}")
        return None

    try:
        return event_type.model_validate({"data": message.get("data")})
    except ValidationError as exc:
        raise ProtocolError(f"Invalid {event_name!r} payload: {exc}") from exc
