# game/world/corridors.py
"""Corridor carving between consecutive rooms, plus dead-end branches."""

import math
from typing import List, Sequence, Tuple

import structlog

from game.constants import CorridorStyle
from game.world.game_map import GameMap
from game.world.rooms import Room
from game_rng import GameRNG

log = structlog.get_logger(__name__)

Point = Tuple[int, int]

# --- Configuration ---
CORRIDOR_STYLE_WEIGHTS: Tuple[Tuple[CorridorStyle, float], ...] = (
    (CorridorStyle.L_BEND, 0.4),
    (CorridorStyle.WINDING, 0.35),
    (CorridorStyle.WIDE, 0.25),
)
WAYPOINT_JITTER = 4
MIN_DEAD_ENDS = 1
MAX_DEAD_ENDS = 3
DEAD_END_MIN_LENGTH = 4
DEAD_END_MAX_LENGTH = 8


def clamp_to_interior(game_map: GameMap, x: int, y: int) -> Point:
    """Pull a point inside ``[1, width-2] x [1, height-2]``."""
    return (
        max(1, min(game_map.width - 2, x)),
        max(1, min(game_map.height - 2, y)),
    )


def _carve_horizontal(game_map: GameMap, x1: int, x2: int, y: int) -> int:
    carved = 0
    for x in range(min(x1, x2), max(x1, x2) + 1):
        carved += game_map.carve(x, y)
    return carved


def _carve_vertical(game_map: GameMap, y1: int, y2: int, x: int) -> int:
    carved = 0
    for y in range(min(y1, y2), max(y1, y2) + 1):
        carved += game_map.carve(x, y)
    return carved


def carve_l_corridor(
    game_map: GameMap, start: Point, end: Point, horizontal_first: bool = True
) -> int:
    """Carve a single-bend corridor from ``start`` to ``end``.

    Both endpoints are clamped to the map interior first. Returns the number
    of cells written.
    """
    x1, y1 = clamp_to_interior(game_map, *start)
    x2, y2 = clamp_to_interior(game_map, *end)
    if horizontal_first:
        carved = _carve_horizontal(game_map, x1, x2, y1)
        carved += _carve_vertical(game_map, y1, y2, x2)
    else:
        carved = _carve_vertical(game_map, y1, y2, x1)
        carved += _carve_horizontal(game_map, x1, x2, y2)
    return carved


def carve_winding_corridor(
    game_map: GameMap, start: Point, end: Point, rng: GameRNG
) -> List[Point]:
    """L-bend hops through 1-2 jittered waypoints. Returns the waypoints used."""
    waypoint_count = rng.get_int(1, 2)
    waypoints: List[Point] = []
    for i in range(1, waypoint_count + 1):
        t = i / (waypoint_count + 1)
        base_x = start[0] + (end[0] - start[0]) * t
        base_y = start[1] + (end[1] - start[1]) * t
        jx = rng.get_int(-WAYPOINT_JITTER, WAYPOINT_JITTER)
        jy = rng.get_int(-WAYPOINT_JITTER, WAYPOINT_JITTER)
        waypoints.append(clamp_to_interior(game_map, int(round(base_x)) + jx, int(round(base_y)) + jy))

    path = [start, *waypoints, end]
    for a, b in zip(path, path[1:]):
        carve_l_corridor(game_map, a, b, horizontal_first=rng.chance(0.5))
    return waypoints


def carve_wide_corridor(
    game_map: GameMap, start: Point, end: Point, rng: GameRNG
) -> int:
    """An L-bend carved 2-3 tiles thick. Returns the thickness used."""
    thickness = rng.get_int(2, 3)
    horizontal_first = rng.chance(0.5)
    for offset in range(thickness):
        carve_l_corridor(
            game_map,
            (start[0] + offset, start[1] + offset),
            (end[0] + offset, end[1] + offset),
            horizontal_first=horizontal_first,
        )
    return thickness


def _roll_style(rng: GameRNG) -> CorridorStyle:
    roll = rng.get_float()
    cumulative = 0.0
    for style, weight in CORRIDOR_STYLE_WEIGHTS:
        cumulative += weight
        if roll < cumulative:
            return style
    return CORRIDOR_STYLE_WEIGHTS[-1][0]


def carve_corridors(
    game_map: GameMap, rooms: Sequence[Room], rng: GameRNG
) -> List[CorridorStyle]:
    """Join each room to the next in placement order.

    Returns the style chosen for each link, in order.
    """
    styles: List[CorridorStyle] = []
    for i in range(len(rooms) - 1):
        start = rooms[i].center
        end = rooms[i + 1].center
        style = _roll_style(rng)
        if style is CorridorStyle.L_BEND:
            carve_l_corridor(game_map, start, end, horizontal_first=rng.chance(0.5))
        elif style is CorridorStyle.WINDING:
            carve_winding_corridor(game_map, start, end, rng)
        else:
            carve_wide_corridor(game_map, start, end, rng)
        styles.append(style)
        log.debug("Corridor carved", link=(i, i + 1), style=style.value, start=start, end=end)

    log.info("Corridors carved", links=len(styles))
    return styles


def _carve_square(game_map: GameMap, cx: int, cy: int, size: int) -> None:
    # Top-left chosen so the whole square stays inside the interior
    x0 = max(1, min(game_map.width - 1 - size, cx - size // 2))
    y0 = max(1, min(game_map.height - 1 - size, cy - size // 2))
    for y in range(y0, y0 + size):
        for x in range(x0, x0 + size):
            game_map.carve(x, y)


def add_dead_ends(
    game_map: GameMap, rooms: Sequence[Room], rng: GameRNG
) -> List[Point]:
    """Carve 1-3 short branches ending in small square chambers.

    The chambers are plain floor and are not registered as rooms. Returns
    the end point of each branch.
    """
    if not rooms:
        return []
    ends: List[Point] = []
    branch_count = rng.get_int(MIN_DEAD_ENDS, MAX_DEAD_ENDS)
    for _ in range(branch_count):
        origin = rng.choice(rooms).center
        angle = rng.get_float(0.0, 2 * math.pi)
        length = rng.get_int(DEAD_END_MIN_LENGTH, DEAD_END_MAX_LENGTH)
        end = clamp_to_interior(
            game_map,
            origin[0] + int(round(math.cos(angle) * length)),
            origin[1] + int(round(math.sin(angle) * length)),
        )
        carve_l_corridor(game_map, origin, end, horizontal_first=rng.chance(0.5))
        _carve_square(game_map, end[0], end[1], rng.get_int(3, 4))
        ends.append(end)
        log.debug("Dead end carved", origin=origin, end=end, length=length)

    log.info("Dead ends added", count=len(ends))
    return ends
