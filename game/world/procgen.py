# game/world/procgen.py
"""Dungeon generation entry point.

Runs the pipeline in order, threading one random source through every
stage: room placement, corridors, connectivity, room graph, tagging,
zones, spawn points and theming.
"""

import numbers
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import structlog

from game.constants import RoomTag, SpawnType
from game.errors import GenerationInvariantViolation
from game.world.connectivity import enforce_connectivity
from game.world.corridors import add_dead_ends, carve_corridors
from game.world.flood import flood_fill
from game.world.game_map import TILE_ID_WALL, GameMap
from game.world.room_graph import RoomGraph, build_room_graph
from game.world.room_tags import assign_room_tags
from game.world.rooms import Room, place_rooms
from game.world.spawns import generate_spawn_points
from game.world.themes import apply_zone_themes
from game.world.zones import Zone, assign_zones
from game_rng import GameRNG, RandomSource, as_game_rng
from utils.helpers import CONFIG_DIR, load_yaml_config

log = structlog.get_logger(__name__)

MIN_ROOM_SIZE = 3
DEFAULT_SETTINGS_PATH = CONFIG_DIR / "dungeon.yaml"

_CAMEL_CASE_KEYS = {
    "roomCount": "room_count",
    "roomMinSize": "room_min_size",
    "roomMaxSize": "room_max_size",
}


@dataclass
class DungeonSettings:
    width: int = 150
    height: int = 100
    room_count: int = 16
    room_min_size: int = 5
    room_max_size: int = 14
    rng: RandomSource = field(default=None, compare=False, repr=False)
    seed: Optional[int] = None

    def validate(self) -> None:
        """Raise ``ValueError`` when the settings cannot produce a map."""
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Map dimensions must be positive, got {self.width}x{self.height}")
        if self.room_count <= 0:
            raise ValueError(f"room_count must be positive, got {self.room_count}")
        if self.room_min_size < MIN_ROOM_SIZE:
            raise ValueError(f"room_min_size must be at least {MIN_ROOM_SIZE}, got {self.room_min_size}")
        if self.room_min_size > self.room_max_size:
            raise ValueError(
                f"room_min_size ({self.room_min_size}) exceeds room_max_size ({self.room_max_size})"
            )
        # One full-size room plus the wall border on each side
        if self.width < self.room_max_size + 2 or self.height < self.room_max_size + 2:
            raise ValueError(
                f"A {self.width}x{self.height} map cannot hold a room of size {self.room_max_size}"
            )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "DungeonSettings":
        """Build settings from a partial dict; unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, value in data.items():
            name = _CAMEL_CASE_KEYS.get(key, key)
            if name not in known:
                log.warning("Ignoring unknown dungeon setting", key=key)
                continue
            values[name] = value
        return cls(**values)

    def make_rng(self) -> GameRNG:
        """The explicit ``rng`` wins over ``seed``; neither means unseeded."""
        if self.rng is not None:
            return as_game_rng(self.rng)
        return as_game_rng(self.seed)


def load_settings(path: Union[Path, str, None] = None) -> DungeonSettings:
    """Read ``DungeonSettings`` from YAML (the ``dungeon`` section if present)."""
    data = load_yaml_config(Path(path) if path else DEFAULT_SETTINGS_PATH, "Dungeon")
    section = data.get("dungeon", data)
    if not isinstance(section, Mapping):
        raise ValueError("Dungeon configuration must be a mapping")
    return DungeonSettings.from_mapping(section)


@dataclass
class DungeonResult:
    map: GameMap
    rooms: List[Room]
    zones: List[Zone]
    graph: RoomGraph
    seed: Optional[int] = None

    @property
    def boss_index(self) -> Optional[int]:
        return next((i for i, r in enumerate(self.rooms) if r.tag is RoomTag.BOSS), None)


ConfigOrRng = Union[DungeonSettings, Mapping[str, Any], RandomSource]


def _resolve_settings(config_or_rng: ConfigOrRng) -> DungeonSettings:
    if config_or_rng is None:
        return DungeonSettings()
    if isinstance(config_or_rng, DungeonSettings):
        return config_or_rng
    if isinstance(config_or_rng, Mapping):
        return DungeonSettings.from_mapping(config_or_rng)
    if isinstance(config_or_rng, bool):
        raise TypeError("generate_dungeon does not accept a bool")
    if isinstance(config_or_rng, (GameRNG, numbers.Integral)) or callable(config_or_rng):
        return DungeonSettings(rng=config_or_rng)
    raise TypeError(f"Unsupported generate_dungeon argument: {type(config_or_rng).__name__}")


def generate_dungeon(config_or_rng: ConfigOrRng = None, strict: bool = False) -> DungeonResult:
    """Generate one dungeon level.

    ``config_or_rng`` may be ``None`` (defaults, unseeded), a
    :class:`DungeonSettings`, a mapping of partial settings, a
    :class:`GameRNG`, an integer seed or a bare ``() -> float`` source.
    With ``strict`` the finished result is checked by
    :func:`validate_dungeon` and any violation raises
    :class:`GenerationInvariantViolation`.
    """
    settings = _resolve_settings(config_or_rng)
    settings.validate()
    rng = settings.make_rng()

    log.info(
        "Starting dungeon generation",
        width=settings.width,
        height=settings.height,
        room_count=settings.room_count,
        room_size=(settings.room_min_size, settings.room_max_size),
        seed=rng.initial_seed,
    )

    game_map = GameMap(settings.width, settings.height, fill_tile=TILE_ID_WALL)
    rooms = place_rooms(
        game_map, rng, settings.room_count, settings.room_min_size, settings.room_max_size
    )
    carve_corridors(game_map, rooms, rng)
    add_dead_ends(game_map, rooms, rng)
    enforce_connectivity(game_map, rooms)

    graph = build_room_graph(rooms, game_map)
    assign_room_tags(rooms, graph, rng)
    zones = assign_zones(rooms, graph)
    generate_spawn_points(rooms, game_map, rng)
    apply_zone_themes(game_map, rooms, zones, rng)

    result = DungeonResult(game_map, rooms, zones, graph, seed=rng.initial_seed)
    log.info(
        "Dungeon generation complete",
        rooms=len(rooms),
        zones=len(zones),
        boss=result.boss_index,
        critical_path=graph.critical_path,
    )

    if strict:
        violations = validate_dungeon(result)
        if violations:
            log.error("Generated dungeon failed validation", violations=violations)
            raise GenerationInvariantViolation(
                f"{len(violations)} dungeon invariant(s) violated", violations=violations
            )
    return result


def validate_dungeon(result: DungeonResult) -> List[str]:
    """Check a finished dungeon against its structural guarantees.

    Returns human-readable violations; an empty list means the level is
    sound.
    """
    problems: List[str] = []
    game_map, rooms, zones, graph = result.map, result.rooms, result.zones, result.graph

    walkable = game_map.walkable
    if walkable[0, :].any() or walkable[-1, :].any() or walkable[:, 0].any() or walkable[:, -1].any():
        problems.append("map border contains walkable tiles")

    for i, a in enumerate(rooms):
        for j in range(i + 1, len(rooms)):
            if a.overlaps(rooms[j]):
                problems.append(f"rooms {i} and {j} overlap")

    if not rooms:
        problems.append("no rooms were placed")
        return problems

    if rooms[0].tag is not RoomTag.ENTRY:
        problems.append("room 0 is not tagged entry")
    bosses = [i for i, room in enumerate(rooms) if room.tag is RoomTag.BOSS]
    if len(rooms) >= 2:
        if len(bosses) != 1:
            problems.append(f"expected exactly one boss room, found {len(bosses)}")
        elif bosses[0] == 0:
            problems.append("boss room is room 0")

    ex, ey = rooms[0].center
    reached = flood_fill(walkable, ex, ey)
    for i, room in enumerate(rooms):
        cx, cy = room.center
        if not reached[cy, cx]:
            problems.append(f"room {i} center {(cx, cy)} is unreachable from room 0")

    path = graph.critical_path
    if bosses and len(bosses) == 1:
        if not path or path[0] != 0:
            problems.append("critical path does not start at room 0")
        elif path[-1] != bosses[0]:
            problems.append("critical path does not end at the boss room")
        for a, b in zip(path, path[1:]):
            if b not in graph.adjacency.get(a, ()):
                problems.append(f"critical path step {a}->{b} is not a graph edge")

    seen: Dict[int, int] = {}
    for zi, zone in enumerate(zones):
        for ri in zone.rooms:
            if ri in seen:
                problems.append(f"room {ri} appears in zones {seen[ri]} and {zi}")
            seen[ri] = zi
    missing = sorted(set(range(len(rooms))) - set(seen))
    if missing:
        problems.append(f"rooms {missing} are not in any zone")
    for a, b in zip(zones, zones[1:]):
        if not b.intensity > a.intensity:
            problems.append("zone intensities do not strictly increase")
            break
    if bosses:
        boss_zones = [zone for zone in zones if zone.has_boss]
        if not any(bosses[0] in zone.rooms for zone in boss_zones):
            problems.append("boss room is not in the boss zone")

    players = sum(
        1 for room in rooms for p in room.spawn_points if p.type is SpawnType.PLAYER
    )
    if players != 1:
        problems.append(f"expected exactly one player spawn, found {players}")

    return problems
