"""
Targeting heuristic - picks an aim angle and fire flags from one snapshot.

Rules are checked in order and the first one that applies wins:
  1. Not spawned yet: turn away, hold fire.
  2. A bullet is close and lined up with us: dodge.
  3. Nearest enemy within MAX_SAFE: evade if it sits behind us, otherwise
     aim and shoot (or shoot and juke).
  4. Otherwise aim at the nearest enemy and shoot when it is in range.

Angle comparisons are exact float equality on purpose; the bot's behaviour
depends on them matching the server's raw values.
"""

import math
import logging
from typing import NamedTuple

from .models import Point

logger = logging.getLogger('tokyobot.targeting')

MAX_SAFE = 120
MAX_SIZE = 8000.0

BULLET_DANGER_RADIUS = float(MAX_SAFE + 100)
FIRE_RANGE = float(MAX_SAFE) + 200


class Decision(NamedTuple):
    """What to do on the next command tick."""

    angle: float
    fire_before: bool = False
    fire_after: bool = False


# --- Geometry ---

def angle_between(a, b):
    """Angle of the vector from a to b, in radians."""
    return math.atan2(b.y - a.y, b.x - a.x)


def distance_between(a, b):
    return math.sqrt(math.pow(b.y - a.y, 2) + math.pow(b.x - a.x, 2))


def is_enemy_behind(a, b):
    """True if b faces the same way as a and sits behind it."""
    behind_i = (0 <= a.angle <= math.pi / 2
                and (a.x > b.x or a.y > b.y))
    behind_ii = (math.pi / 2 < a.angle <= math.pi
                 and (a.x < b.x or a.y > b.y))
    behind_iii = (math.pi < a.angle <= math.pi * 3 / 2
                  and (a.x < b.x or a.y < b.y))
    behind_iv = (math.pi * 3 / 2 < a.angle < 2 * math.pi
                 and (a.x > b.x or a.y < b.y))

    return a.angle == b.angle and (
        behind_i or behind_ii or behind_iii or behind_iv)


def is_enemy_front(a, b, angle):
    """True if b is lined up with a (same or mirrored heading) and ahead of it.

    ``angle`` is the bearing from a to b; it is accepted for callers that
    already computed it but does not take part in the check.
    """
    front_i = (0 <= a.angle <= math.pi / 2
               and (a.x < b.x or a.y < b.y))
    front_ii = (math.pi / 2 < a.angle <= math.pi
                and (a.x > b.x or a.y < b.y))
    front_iii = (math.pi < a.angle <= math.pi * 3 / 2
                 and (a.x > b.x or a.y > b.y))
    front_iv = (math.pi * 3 / 2 < a.angle < 2 * math.pi
                and (a.x < b.x or a.y > b.y))

    return (a.angle == b.angle or a.angle + b.angle == math.pi) and (
        front_i or front_ii or front_iii or front_iv)


def is_unplaced(player):
    """Whether the player has not been put on the map yet."""
    if player.placed is not None:
        return not player.placed
    # (0, 0) doubles as "not spawned"; a real zero coordinate looks the same
    return player.x == 0 or player.y == 0


# --- Decision ---

def nearest_player(me, others):
    """Return (nearest, distance). Exact ties go to the last one seen."""
    min_distance = MAX_SIZE
    nearest = None
    here = me.position

    for other in others:
        distance = distance_between(here, other.position)
        if min_distance >= distance:
            min_distance = distance
            nearest = other

    return nearest, min_distance


def dodge_bullets(me, bullets):
    """Return a dodge Decision for the first dangerous bullet, else None."""
    here = me.position

    for bullet in bullets:
        there = bullet.position
        distance = distance_between(here, there)
        angle = angle_between(there, here)

        if distance <= BULLET_DANGER_RADIUS:
            if me.angle + angle == math.pi:
                return Decision(math.pi / 2)
            if me.angle == bullet.angle or angle == bullet.angle:
                logger.info(f"Dodging bullet {bullet.id} from player "
                            f"{bullet.player_id} at distance {distance:.1f}")
                return Decision(math.pi / 4)

    return None


def decide(me, others, bullets):
    """
    Compute the next Decision for ``me``.

    Args:
        me: the bot's own Player from the latest snapshot.
        others: every other Player in the snapshot.
        bullets: bullets in flight, normally without the bot's own.

    Pure: identical inputs always give identical output.
    """
    if is_unplaced(me):
        return Decision(math.pi - me.angle)

    nearest, min_distance = nearest_player(me, others)

    dodge = dodge_bullets(me, bullets)
    if dodge is not None:
        return dodge

    # No enemies: aim at the origin, out of firing range
    target = nearest.position if nearest is not None else Point(0.0, 0.0)
    angle_to_nearest = angle_between(me.position, target)

    if min_distance <= MAX_SAFE:
        if is_enemy_behind(me, nearest):
            return Decision(math.pi / 2)

        if is_enemy_front(me, nearest, angle_to_nearest):
            return Decision(angle_to_nearest, fire_after=True)

        return Decision(me.angle - math.pi / 4, fire_before=True)

    return Decision(angle_to_nearest,
                    fire_after=min_distance <= FIRE_RANGE)
