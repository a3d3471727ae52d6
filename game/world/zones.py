# game/world/zones.py
"""Partition rooms into ordered, depth-banded thematic zones."""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import structlog

from game.constants import RoomTag, ZoneType
from game.world.room_graph import RoomGraph
from game.world.rooms import Room

log = structlog.get_logger(__name__)

OVERWORLD_NAMES = ("Corrupted Forest", "Deeper Forest", "The Threshold's Edge")
DUNGEON_NAMES = ("The Hollow Warren", "The Sunken Shrine")
BOSS_ZONE_NAME = "The Warden's Gate"

BAND_TYPES = (
    ZoneType.OVERWORLD,
    ZoneType.DUNGEON,
    ZoneType.OVERWORLD,
    ZoneType.DUNGEON,
    ZoneType.DUNGEON,
)
BOSS_BAND = len(BAND_TYPES) - 1
SINGLE_ZONE_INTENSITY = 0.5


@dataclass
class Zone:
    type: ZoneType
    name: str
    intensity: float
    has_boss: bool = False
    rooms: List[int] = field(default_factory=list)
    depth_min: float = 0.0
    depth_max: float = 0.0


def zone_name(zone_type: ZoneType, has_boss: bool, band: int) -> str:
    if has_boss:
        return BOSS_ZONE_NAME
    if zone_type is ZoneType.OVERWORLD:
        return OVERWORLD_NAMES[min(band // 2, len(OVERWORLD_NAMES) - 1)]
    return DUNGEON_NAMES[min((band - 1) // 2, len(DUNGEON_NAMES) - 1)]


def _single_zone(rooms: Sequence[Room]) -> Zone:
    return Zone(
        type=ZoneType.OVERWORLD,
        name=OVERWORLD_NAMES[0],
        intensity=SINGLE_ZONE_INTENSITY,
        has_boss=any(room.tag is RoomTag.BOSS for room in rooms),
        rooms=list(range(len(rooms))),
        depth_min=0.0,
        depth_max=float(max((room.depth for room in rooms), default=0) + 1),
    )


def _band_for_depth(zones: Sequence[Zone], depth: int) -> int:
    for band, zone in enumerate(zones):
        if zone.depth_min <= depth < zone.depth_max:
            return band
    # Unreachable rooms (depth -1) belong with the entry band
    return 0 if depth < 0 else len(zones) - 1


def _stamp(rooms: Sequence[Room], zones: Sequence[Zone]) -> None:
    for zone_index, zone in enumerate(zones):
        for room_index in zone.rooms:
            rooms[room_index].zone_index = zone_index


def assign_zones(rooms: Sequence[Room], graph: RoomGraph) -> List[Zone]:
    """Split ``[0, max_depth]`` into five bands and drop the empty ones.

    The boss room always lands in the final (boss) band. Surviving zones get
    intensities ``(i + 1) / count`` so they strictly increase in order.
    Sets ``zone_index`` on every room.
    """
    if not rooms:
        return []

    max_depth = max(room.depth for room in rooms)
    if not graph.critical_path or max_depth <= 0:
        zones = [_single_zone(rooms)]
        _stamp(rooms, zones)
        log.info("Zones assigned", zones=1, degenerate=True)
        return zones

    depth_slice = max_depth / len(BAND_TYPES)
    bands: List[Zone] = []
    for band, zone_type in enumerate(BAND_TYPES):
        has_boss = band == BOSS_BAND
        bands.append(
            Zone(
                type=zone_type,
                name=zone_name(zone_type, has_boss, band),
                intensity=(band + 1) / len(BAND_TYPES),
                has_boss=has_boss,
                depth_min=depth_slice * band,
                depth_max=max_depth + 1 if has_boss else depth_slice * (band + 1),
            )
        )

    boss = next((i for i, room in enumerate(rooms) if room.tag is RoomTag.BOSS), None)
    for index, room in enumerate(rooms):
        band = BOSS_BAND if index == boss else _band_for_depth(bands, room.depth)
        bands[band].rooms.append(index)

    zones = [zone for zone in bands if zone.rooms]
    for order, zone in enumerate(zones):
        zone.rooms.sort()
        zone.intensity = (order + 1) / len(zones)
    _stamp(rooms, zones)

    log.info(
        "Zones assigned",
        zones=len(zones),
        names=[zone.name for zone in zones],
        sizes=[len(zone.rooms) for zone in zones],
    )
    return zones


def get_zone_for_room(room_index: int, zones: Sequence[Zone]) -> Optional[Zone]:
    for zone in zones:
        if room_index in zone.rooms:
            return zone
    return None
