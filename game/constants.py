from enum import Enum


class RoomTag(str, Enum):
    """Gameplay role assigned to every generated room."""

    ENTRY = "entry"
    BOSS = "boss"
    COMBAT = "combat"
    LOOT = "loot"
    TRANSITION = "transition"
    EMPTY = "empty"


class RoomShape(str, Enum):
    """Closed set of floor-plan variants a room can take."""

    RECTANGULAR = "rectangular"
    L_SHAPED = "l_shaped"
    CIRCULAR = "circular"
    CROSS = "cross"


class SizeCategory(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class SpawnType(str, Enum):
    """Marker types consumed by the population step."""

    PLAYER = "player"
    ENEMY = "enemy"
    ITEM = "item"


class ZoneType(str, Enum):
    OVERWORLD = "overworld"
    DUNGEON = "dungeon"


class CorridorStyle(str, Enum):
    L_BEND = "l"
    WINDING = "winding"
    WIDE = "wide"


# 4-directional neighbourhood used by every flood fill, (dx, dy) order.
CARDINAL_DIRECTIONS: tuple[tuple[int, int], ...] = ((0, 1), (0, -1), (1, 0), (-1, 0))

__all__ = [
    "RoomTag",
    "RoomShape",
    "SizeCategory",
    "SpawnType",
    "ZoneType",
    "CorridorStyle",
    "CARDINAL_DIRECTIONS",
]
