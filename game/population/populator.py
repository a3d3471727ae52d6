# game/population/populator.py
"""Turn a generated level's spawn points into registry entities.

Spawn points are visited room by room in index order. The player must be
created before any enemy, since enemies target it; enemy markers seen
earlier are skipped.
"""

import math
from typing import Dict, List, Optional, Sequence

import structlog

from game.constants import RoomTag, SpawnType
from game.entities.components import CombatStats, ItemEntry, Position, Renderable
from game.entities.registry import EntityRegistry
from game.entities.template_registry import (
    EntityTemplateRegistry,
    base_stats,
    item_weights,
    load_item_pool,
    renderable_from,
)
from game.errors import GenerationInvariantViolation
from game.world.rooms import Room
from game.world.zones import Zone
from game_rng import GameRNG

log = structlog.get_logger(__name__)

INTENSITY_STAT_SCALE = 0.5
ZONE_DIFFICULTY_BASE = 0.8
ZONE_DIFFICULTY_SCALE = 0.4
LOW_INTENSITY = 0.3
MID_INTENSITY = 0.6


def scale_stats(
    base: CombatStats, scaling: Dict[str, float], difficulty: float, intensity: float
) -> CombatStats:
    """``floor((base + difficulty * k) * (1 + intensity * 0.5))`` per stat."""
    factor = 1 + intensity * INTENSITY_STAT_SCALE
    hp = math.floor((base.hp + difficulty * scaling["hp"]) * factor)
    return CombatStats(
        hp=hp,
        max_hp=hp,
        strength=math.floor((base.strength + difficulty * scaling["strength"]) * factor),
        defense=math.floor((base.defense + difficulty * scaling["defense"]) * factor),
        speed=base.speed,
    )


def zone_difficulty(difficulty: float, zone: Optional[Zone]) -> float:
    if zone is None:
        return difficulty
    return difficulty * (ZONE_DIFFICULTY_BASE + zone.intensity * ZONE_DIFFICULTY_SCALE)


def choose_enemy_kind(room: Room, enemy_index: int, rng: GameRNG) -> str:
    """Enemy template for the ``enemy_index``-th enemy of a non-boss room."""
    if room.tag is RoomTag.LOOT:
        return "guardian"
    if room.tag is RoomTag.TRANSITION:
        return "patrol"
    if room.tag is not RoomTag.COMBAT or room.intensity < LOW_INTENSITY:
        return "goblin"
    if room.intensity < MID_INTENSITY:
        if enemy_index == 0:
            return "goblin"
        return "archer" if rng.chance(0.5) else "skulker"
    return ("guardian", "archer")[enemy_index] if enemy_index < 2 else "skulker"


class _Populator:
    def __init__(
        self,
        registry: EntityRegistry,
        templates: EntityTemplateRegistry,
        item_pool: List[ItemEntry],
        difficulty: float,
        rng: GameRNG,
    ):
        self.registry = registry
        self.templates = templates
        self.items, self.item_weights = item_weights(item_pool)
        # One CDF cache entry per distinct pool
        self.item_cache_key = ("item_pool", tuple(self.items))
        self.difficulty = difficulty
        self.rng = rng
        self.player_id: Optional[int] = None
        self.skipped = 0

    def player(self, x: int, y: int, room_index: int) -> None:
        template = self.templates.player
        self.player_id = self.registry.create_entity(
            "player",
            Position(x, y),
            renderable_from(template),
            base_stats(template),
            ai_type=None,
            room_index=room_index,
        )
        log.debug("Spawned player", entity_id=self.player_id, pos=(x, y))

    def enemy(self, x: int, y: int, room_index: int, room: Room, zone: Optional[Zone], enemy_index: int) -> None:
        if room.tag is RoomTag.BOSS:
            kind = "boss"
            difficulty = self.difficulty
        else:
            kind = choose_enemy_kind(room, enemy_index, self.rng)
            difficulty = zone_difficulty(self.difficulty, zone)
        template = self.templates.require(kind)
        stats = scale_stats(
            base_stats(template), self.templates.scaling_for(kind), difficulty, room.intensity
        )
        entity_id = self.registry.create_entity(
            "enemy",
            Position(x, y),
            renderable_from(template),
            stats,
            ai_type=template.get("ai_type"),
            room_index=room_index,
        )
        log.debug(
            "Spawned enemy",
            entity_id=entity_id,
            template=kind,
            pos=(x, y),
            hp=stats.hp,
            intensity=round(room.intensity, 2),
            zone=zone.name if zone else None,
        )

    def item(self, x: int, y: int, room_index: int) -> None:
        entry: ItemEntry = self.rng.weighted_choice(
            self.items, self.item_weights, cache_key=self.item_cache_key
        )
        entity_id = self.registry.create_entity(
            "item",
            Position(x, y),
            Renderable(entry.glyph, (210, 190, 40), entry.name, blocks_movement=False),
            room_index=room_index,
            item_category=entry.category,
        )
        log.debug("Spawned item", entity_id=entity_id, item=entry.name, pos=(x, y))


def populate_rooms(
    registry: EntityRegistry,
    rooms: Sequence[Room],
    zones: Sequence[Zone],
    *,
    difficulty: float,
    rng: GameRNG,
    templates: Optional[EntityTemplateRegistry] = None,
    item_pool: Optional[List[ItemEntry]] = None,
) -> int:
    """Create the entities for every spawn point; returns the player id.

    Raises :class:`GenerationInvariantViolation` when no room carries a
    player spawn point.
    """
    populator = _Populator(
        registry,
        templates or EntityTemplateRegistry.from_config(),
        item_pool or load_item_pool(),
        difficulty,
        rng,
    )
    zone_by_room = {ri: zone for zone in zones for ri in zone.rooms}

    for room_index, room in enumerate(rooms):
        enemy_index = 0
        for point in room.spawn_points:
            if point.type is SpawnType.PLAYER:
                populator.player(point.x, point.y, room_index)
            elif point.type is SpawnType.ENEMY:
                if populator.player_id is None:
                    populator.skipped += 1
                    log.warning("Enemy spawn before player, skipped", room=room_index, pos=(point.x, point.y))
                    continue
                populator.enemy(point.x, point.y, room_index, room, zone_by_room.get(room_index), enemy_index)
                enemy_index += 1
            elif point.type is SpawnType.ITEM:
                populator.item(point.x, point.y, room_index)

    if populator.player_id is None:
        log.critical("No player spawn point found", rooms=len(rooms))
        raise GenerationInvariantViolation("No player spawn point found in any room")

    log.info(
        "Rooms populated",
        player_id=populator.player_id,
        entities=len(registry),
        skipped=populator.skipped,
        **registry.count_by_kind(),
    )
    return populator.player_id
