# game/world/connectivity.py
"""Guarantee every room is reachable from the entry room."""

from typing import Sequence, Tuple

import numpy as np
import structlog

from game.errors import GenerationInvariantViolation
from game.world.corridors import carve_l_corridor
from game.world.flood import flood_fill
from game.world.game_map import GameMap
from game.world.rooms import Room

log = structlog.get_logger(__name__)


def nearest_reached_tile(reached: np.ndarray, x: int, y: int) -> Tuple[int, int]:
    """Closest reached cell to ``(x, y)`` by Manhattan distance.

    Ties go to the first cell in row-major order.
    """
    ys, xs = np.nonzero(reached)
    if ys.size == 0:
        raise ValueError("No reached cells to connect to")
    distances = np.abs(xs - x) + np.abs(ys - y)
    best = int(np.argmin(distances))
    return int(xs[best]), int(ys[best])


def enforce_connectivity(game_map: GameMap, rooms: Sequence[Room]) -> int:
    """Stitch any room its center cannot reach from room 0.

    Each unreached room gets a horizontal-first L corridor from its center
    to the nearest cell already reachable from room 0, after which the fill
    is refreshed. Returns the number of corridors added.
    """
    if not rooms:
        return 0

    ex, ey = rooms[0].center
    reached = flood_fill(game_map.walkable, ex, ey)
    reconnections = 0

    for index, room in enumerate(rooms):
        cx, cy = room.center
        if reached[cy, cx]:
            continue
        target = nearest_reached_tile(reached, cx, cy)
        carve_l_corridor(game_map, (cx, cy), target, horizontal_first=True)
        reconnections += 1
        log.debug("Reconnected room", room=index, center=(cx, cy), target=target)

        reached = flood_fill(game_map.walkable, ex, ey)
        if not reached[cy, cx]:
            log.critical("Reconnection failed", room=index, center=(cx, cy), target=target)
            raise GenerationInvariantViolation(
                f"Room {index} is still unreachable after reconnection",
                violations=[f"room {index} center {(cx, cy)} unreachable"],
            )

    log.info("Connectivity enforced", rooms=len(rooms), reconnections=reconnections)
    return reconnections
