# game/world/spawns.py
"""Typed spawn markers per room, spread apart with a farthest-point heuristic."""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

import structlog

from game.constants import RoomTag, SpawnType
from game.world.game_map import GameMap
from game.world.rooms import Room
from game_rng import GameRNG

log = structlog.get_logger(__name__)

Point = Tuple[int, int]

SPREAD_CANDIDATES = 8
MIN_INTERIOR_TILES = 3
LOW_INTENSITY = 0.3
MID_INTENSITY = 0.6
# (min enemies, max enemies, item chance) per intensity tier
COMBAT_TIERS = {
    "low": (1, 2, 0.6),
    "mid": (1, 3, 0.4),
    "high": (2, 3, 0.2),
}
LOOT_GUARD_CHANCE = 0.3
QUIET_ITEM_CHANCE = 0.3


@dataclass(frozen=True)
class SpawnPoint:
    """A typed marker for the population step."""

    x: int
    y: int
    type: SpawnType


def intensity_tier(intensity: float) -> str:
    if intensity < LOW_INTENSITY:
        return "low"
    if intensity < MID_INTENSITY:
        return "mid"
    return "high"


def loot_item_count(intensity: float) -> int:
    """2-4 items, fewer as the room gets more dangerous."""
    return max(2, min(4, 4 - int(intensity * 3)))


def interior_floors(room: Room, game_map: GameMap) -> List[Point]:
    """Room floors whose four neighbours are all walkable.

    Falls back to every floor tile when fewer than three qualify.
    """
    interior = [
        (x, y)
        for x, y in room.floors
        if game_map.is_walkable(x + 1, y)
        and game_map.is_walkable(x - 1, y)
        and game_map.is_walkable(x, y + 1)
        and game_map.is_walkable(x, y - 1)
    ]
    if len(interior) < MIN_INTERIOR_TILES:
        return list(room.floors)
    return interior


def _manhattan(a: Point, b: Point) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def pick_spread_point(pool: Sequence[Point], chosen: Sequence[Point], rng: GameRNG) -> Point:
    """Sample up to eight candidates and keep the one farthest from ``chosen``."""
    taken = set(chosen)
    available = [p for p in pool if p not in taken] or list(pool)
    best = available[0]
    best_score = -1
    for _ in range(min(SPREAD_CANDIDATES, len(available))):
        candidate = rng.choice(available)
        score = min((_manhattan(candidate, p) for p in chosen), default=0)
        if score > best_score:
            best_score = score
            best = candidate
    return best


class _RoomSpawner:
    def __init__(self, room: Room, game_map: GameMap, rng: GameRNG):
        self.room = room
        self.rng = rng
        self.pool = interior_floors(room, game_map)
        self.points: List[SpawnPoint] = []

    def at_center(self, spawn_type: SpawnType) -> None:
        cx, cy = self.room.center
        self.points.append(SpawnPoint(cx, cy, spawn_type))

    def spread(self, spawn_type: SpawnType, count: int = 1) -> None:
        for _ in range(count):
            chosen = [(p.x, p.y) for p in self.points]
            x, y = pick_spread_point(self.pool, chosen, self.rng)
            self.points.append(SpawnPoint(x, y, spawn_type))


def _spawn_room(room: Room, game_map: GameMap, rng: GameRNG) -> List[SpawnPoint]:
    spawner = _RoomSpawner(room, game_map, rng)
    tag = room.tag

    if tag is RoomTag.ENTRY:
        spawner.at_center(SpawnType.PLAYER)
        spawner.spread(SpawnType.ITEM, rng.get_int(1, 2))
    elif tag is RoomTag.BOSS:
        spawner.at_center(SpawnType.ENEMY)
        spawner.spread(SpawnType.ITEM, rng.get_int(1, 2))
    elif tag is RoomTag.COMBAT:
        low, high, item_chance = COMBAT_TIERS[intensity_tier(room.intensity)]
        spawner.spread(SpawnType.ENEMY, rng.get_int(low, high))
        if rng.chance(item_chance):
            spawner.spread(SpawnType.ITEM)
    elif tag is RoomTag.LOOT:
        spawner.spread(SpawnType.ITEM, loot_item_count(room.intensity))
        if rng.chance(LOOT_GUARD_CHANCE):
            spawner.spread(SpawnType.ENEMY)
    elif tag in (RoomTag.TRANSITION, RoomTag.EMPTY):
        if rng.chance(QUIET_ITEM_CHANCE):
            spawner.spread(SpawnType.ITEM)

    return spawner.points


def generate_spawn_points(rooms: Sequence[Room], game_map: GameMap, rng: GameRNG) -> int:
    """Fill ``spawn_points`` on every room; returns the total placed."""
    total = 0
    by_type = {spawn_type.value: 0 for spawn_type in SpawnType}
    for index, room in enumerate(rooms):
        room.spawn_points = _spawn_room(room, game_map, rng)
        total += len(room.spawn_points)
        for point in room.spawn_points:
            by_type[point.type.value] += 1
        log.debug(
            "Spawn points placed",
            room=index,
            tag=room.tag.value if room.tag else None,
            count=len(room.spawn_points),
        )
    log.info("Spawn points generated", total=total, **by_type)
    return total
