# game/world/room_tags.py
"""Assign one gameplay role to every room."""

from typing import Optional, Sequence

import structlog

from game.constants import RoomTag
from game.world.room_graph import RoomGraph
from game.world.rooms import Room
from game_rng import GameRNG

log = structlog.get_logger(__name__)

SMALL_ROOM_RATIO = 0.6
MAX_LOOT_ROOMS = 2
LOOT_DEAD_END_MAX_INTENSITY = 0.6
LOOT_BONUS_MAX_INTENSITY = 0.3
LOOT_BONUS_CHANCE = 0.4
EMPTY_MAX_INTENSITY = 0.2
EMPTY_CHANCE = 0.3


def loot_quota(room_count: int) -> int:
    return min(MAX_LOOT_ROOMS, (room_count - 2) // 3 + 1)


def assign_room_tags(rooms: Sequence[Room], graph: RoomGraph, rng: GameRNG) -> Optional[int]:
    """Tag every room in index order and commit the boss room.

    Room 0 is the entry. The graph's boss candidate becomes the boss and the
    critical path is rebuilt against it. Returns the boss index, or ``None``
    when there are fewer than two rooms.
    """
    if not rooms:
        return None
    rooms[0].tag = RoomTag.ENTRY
    boss = graph.boss_candidate
    if boss is None:
        log.warning("Too few rooms for a boss", rooms=len(rooms))
        return None
    rooms[boss].tag = RoomTag.BOSS

    on_path = set(graph.critical_path)
    mean_area = sum(room.area for room in rooms) / len(rooms)
    quota = loot_quota(len(rooms))
    loot_used = 0

    for index, room in enumerate(rooms):
        if index == 0 or index == boss:
            continue
        neighbors = len(graph.get_neighbors(index))
        small = room.area < mean_area * SMALL_ROOM_RATIO
        critical = index in on_path

        if critical and small and neighbors >= 2:
            tag = RoomTag.TRANSITION
        elif critical:
            tag = RoomTag.COMBAT
        elif neighbors <= 1 and loot_used < quota and room.intensity < LOOT_DEAD_END_MAX_INTENSITY:
            tag = RoomTag.LOOT
        elif (
            room.intensity < LOOT_BONUS_MAX_INTENSITY
            and loot_used < quota
            and rng.chance(LOOT_BONUS_CHANCE)
        ):
            tag = RoomTag.LOOT
        elif small and neighbors >= 2:
            tag = RoomTag.TRANSITION
        elif room.intensity < EMPTY_MAX_INTENSITY and rng.chance(EMPTY_CHANCE):
            tag = RoomTag.EMPTY
        else:
            tag = RoomTag.COMBAT

        if tag is RoomTag.LOOT:
            loot_used += 1
        room.tag = tag

    graph.rebuild_critical_path(boss)
    counts = {}
    for room in rooms:
        counts[room.tag.value] = counts.get(room.tag.value, 0) + 1
    log.info("Rooms tagged", boss=boss, loot=loot_used, quota=quota, tags=counts)
    return boss
