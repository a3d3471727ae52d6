# game/world/themes.py
"""Visual zone theming: swap floor and wall tiles for themed variants.

Only tile ids of matching walkability are ever swapped in (see
``GameMap.repaint``), so theming never changes how the map plays.
"""

from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import structlog

from game.constants import CARDINAL_DIRECTIONS, ZoneType
from game.world.game_map import (
    TILE_ID_BONE_PILE,
    TILE_ID_COBWEB,
    TILE_ID_COFFIN,
    TILE_ID_CORRUPTED_BLOOM,
    TILE_ID_CORRUPTED_TREE,
    TILE_ID_CORRUPTION_VEIN,
    TILE_ID_CRACKED_FLOOR,
    TILE_ID_DARK_WALL,
    TILE_ID_FLOOR,
    TILE_ID_FLOWER,
    TILE_ID_GRASS,
    TILE_ID_GRAVE_MARKER,
    TILE_ID_LEAF,
    TILE_ID_MUSHROOM,
    TILE_ID_PILLAR,
    TILE_ID_PINE_TREE,
    TILE_ID_RUBBLE,
    TILE_ID_SHALLOW_WATER,
    TILE_ID_SKULL,
    TILE_ID_SPROUT,
    TILE_ID_TREE,
    TILE_ID_WALL,
    GameMap,
)
from game.world.room_graph import build_room_id_grid
from game.world.rooms import Room
from game.world.zones import Zone
from game_rng import GameRNG

log = structlog.get_logger(__name__)

# tile id -> relative weight
FOREST_FLOOR: Dict[int, float] = {
    TILE_ID_GRASS: 50,
    TILE_ID_LEAF: 15,
    TILE_ID_FLOWER: 10,
    TILE_ID_MUSHROOM: 10,
    TILE_ID_SPROUT: 10,
    TILE_ID_SHALLOW_WATER: 5,
}
CORRUPTED_FOREST_FLOOR: Dict[int, float] = {
    TILE_ID_GRASS: 35,
    TILE_ID_LEAF: 15,
    TILE_ID_CORRUPTED_BLOOM: 20,
    TILE_ID_MUSHROOM: 15,
    TILE_ID_SPROUT: 10,
    TILE_ID_SHALLOW_WATER: 5,
}
FOREST_WALL: Dict[int, float] = {TILE_ID_TREE: 60, TILE_ID_PINE_TREE: 40}
DUNGEON_FLOOR: Dict[int, float] = {
    TILE_ID_FLOOR: 60,
    TILE_ID_CRACKED_FLOOR: 20,
    TILE_ID_RUBBLE: 12,
    TILE_ID_COBWEB: 8,
}
DUNGEON_WALL: Dict[int, float] = {TILE_ID_WALL: 85, TILE_ID_PILLAR: 15}
BOSS_FLOOR: Dict[int, float] = {
    TILE_ID_FLOOR: 50,
    TILE_ID_CORRUPTION_VEIN: 20,
    TILE_ID_BONE_PILE: 15,
    TILE_ID_SKULL: 15,
}
BOSS_WALL: Dict[int, float] = {
    TILE_ID_DARK_WALL: 60,
    TILE_ID_WALL: 20,
    TILE_ID_GRAVE_MARKER: 10,
    TILE_ID_COFFIN: 10,
}
CORRUPTED_FLOOR_MIN_INTENSITY = 0.5
CORRUPTED_TREE_SCALE = 0.5

_EIGHT_NEIGHBORS = (
    (0, 1), (0, -1), (1, 0), (-1, 0),
    (1, 1), (1, -1), (-1, 1), (-1, -1),
)


def _pick(rng: GameRNG, palette: Dict[int, float], key: str) -> int:
    return rng.weighted_choice(list(palette), list(palette.values()), cache_key=key)


def make_forest_floor(rng: GameRNG) -> int:
    return _pick(rng, FOREST_FLOOR, "forest_floor")


def make_corrupted_forest_floor(rng: GameRNG) -> int:
    return _pick(rng, CORRUPTED_FOREST_FLOOR, "corrupted_forest_floor")


def make_forest_wall(rng: GameRNG, intensity: float) -> int:
    """Trees, with corrupted trees more common as intensity rises."""
    if rng.chance(min(1.0, max(0.0, intensity * CORRUPTED_TREE_SCALE))):
        return TILE_ID_CORRUPTED_TREE
    return _pick(rng, FOREST_WALL, "forest_wall")


def make_dungeon_floor(rng: GameRNG) -> int:
    return _pick(rng, DUNGEON_FLOOR, "dungeon_floor")


def make_dungeon_wall(rng: GameRNG) -> int:
    return _pick(rng, DUNGEON_WALL, "dungeon_wall")


def make_boss_floor(rng: GameRNG) -> int:
    return _pick(rng, BOSS_FLOOR, "boss_floor")


def make_boss_wall(rng: GameRNG) -> int:
    return _pick(rng, BOSS_WALL, "boss_wall")


def themed_floor(zone: Zone, rng: GameRNG) -> int:
    if zone.has_boss:
        return make_boss_floor(rng)
    if zone.type is ZoneType.OVERWORLD:
        if zone.intensity > CORRUPTED_FLOOR_MIN_INTENSITY:
            return make_corrupted_forest_floor(rng)
        return make_forest_floor(rng)
    return make_dungeon_floor(rng)


def themed_wall(zone: Zone, rng: GameRNG) -> int:
    if zone.has_boss:
        return make_boss_wall(rng)
    if zone.type is ZoneType.OVERWORLD:
        return make_forest_wall(rng, zone.intensity)
    return make_dungeon_wall(rng)


class _ThemePainter:
    """Tracks which cells were already themed and by which zone."""

    def __init__(self, game_map: GameMap, zones: Sequence[Zone], rng: GameRNG):
        self.game_map = game_map
        self.zones = zones
        self.rng = rng
        self.zone_of = np.full((game_map.height, game_map.width), -1, dtype=np.int32)
        self.painted = 0

    def floor(self, x: int, y: int, zone_index: int) -> None:
        if self.zone_of[y, x] >= 0:
            return
        tile_id = themed_floor(self.zones[zone_index], self.rng)
        self.game_map.repaint(x, y, tile_id)
        self.zone_of[y, x] = zone_index
        self.painted += 1

    def wall(self, x: int, y: int, zone_index: int) -> None:
        if self.zone_of[y, x] >= 0:
            return
        tile_id = themed_wall(self.zones[zone_index], self.rng)
        self.game_map.repaint(x, y, tile_id)
        self.zone_of[y, x] = zone_index
        self.painted += 1


def _room_anchor_points(rooms: Sequence[Room]) -> np.ndarray:
    return np.array(
        [(room.x + room.width / 2, room.y + room.height / 2) for room in rooms],
        dtype=np.float64,
    )


def _nearest_room(anchors: np.ndarray, x: int, y: int) -> int:
    d2 = (anchors[:, 0] - x) ** 2 + (anchors[:, 1] - y) ** 2
    return int(np.argmin(d2))


def apply_zone_themes(
    game_map: GameMap, rooms: Sequence[Room], zones: Sequence[Zone], rng: GameRNG
) -> int:
    """Repaint floors and walls with zone palettes. Returns cells repainted.

    Order: room floors, walls touching room floors (8-neighbourhood),
    corridor floors by nearest room, then remaining walls from an adjacent
    themed floor.
    """
    if not rooms or not zones:
        return 0
    painter = _ThemePainter(game_map, zones, rng)

    for room in rooms:
        if room.zone_index < 0:
            continue
        for fx, fy in room.floors:
            painter.floor(fx, fy, room.zone_index)
        for fx, fy in room.floors:
            for dx, dy in _EIGHT_NEIGHBORS:
                wx, wy = fx + dx, fy + dy
                if game_map.in_bounds(wx, wy) and not game_map.walkable[wy, wx]:
                    painter.wall(wx, wy, room.zone_index)

    room_ids = build_room_id_grid(rooms, game_map.width, game_map.height)
    anchors = _room_anchor_points(rooms)
    corridor_cells: List[Tuple[int, int]] = [
        (int(x), int(y))
        for y, x in zip(*np.nonzero(game_map.walkable & (room_ids < 0)))
    ]
    for x, y in corridor_cells:
        zone_index = rooms[_nearest_room(anchors, x, y)].zone_index
        if zone_index >= 0:
            painter.floor(x, y, zone_index)

    for y, x in zip(*np.nonzero(~game_map.walkable & (painter.zone_of < 0))):
        zone_index = _adjacent_floor_zone(game_map, painter.zone_of, int(x), int(y))
        if zone_index is not None:
            painter.wall(int(x), int(y), zone_index)

    log.info("Zone themes applied", painted=painter.painted, zones=len(zones))
    return painter.painted


def _adjacent_floor_zone(
    game_map: GameMap, zone_of: np.ndarray, x: int, y: int
) -> Optional[int]:
    for dx, dy in CARDINAL_DIRECTIONS:
        nx, ny = x + dx, y + dy
        if game_map.in_bounds(nx, ny) and game_map.walkable[ny, nx] and zone_of[ny, nx] >= 0:
            return int(zone_of[ny, nx])
    return None
