# game/world/game_map.py
from typing import Final, NamedTuple

import numpy as np
import structlog

log = structlog.get_logger(__name__)

Color = tuple[int, int, int]

# --- Palette (RGB) ---
BLACK: Final[Color] = (0, 0, 0)
WHITE: Final[Color] = (230, 230, 230)
GRAY: Final[Color] = (150, 150, 150)
DARK_GRAY: Final[Color] = (90, 90, 90)
BROWN: Final[Color] = (140, 90, 40)
GREEN: Final[Color] = (60, 170, 60)
DARK_GREEN: Final[Color] = (30, 100, 30)
BRIGHT_GREEN: Final[Color] = (120, 230, 120)
YELLOW: Final[Color] = (210, 190, 40)
BLUE: Final[Color] = (60, 110, 220)
MAGENTA: Final[Color] = (200, 60, 200)
DARK_MAGENTA: Final[Color] = (120, 30, 120)
RED: Final[Color] = (200, 40, 40)

# --- Tile ids ---
TILE_ID_FLOOR: Final[int] = 0
TILE_ID_WALL: Final[int] = 1
# Verdant (overworld) variants
TILE_ID_GRASS: Final[int] = 2
TILE_ID_LEAF: Final[int] = 3
TILE_ID_FLOWER: Final[int] = 4
TILE_ID_MUSHROOM: Final[int] = 5
TILE_ID_SPROUT: Final[int] = 6
TILE_ID_SHALLOW_WATER: Final[int] = 7
TILE_ID_CORRUPTED_BLOOM: Final[int] = 8
TILE_ID_TREE: Final[int] = 9
TILE_ID_PINE_TREE: Final[int] = 10
TILE_ID_CORRUPTED_TREE: Final[int] = 11
# Dungeon variants
TILE_ID_CRACKED_FLOOR: Final[int] = 12
TILE_ID_RUBBLE: Final[int] = 13
TILE_ID_COBWEB: Final[int] = 14
TILE_ID_PILLAR: Final[int] = 15
# Boss variants
TILE_ID_CORRUPTION_VEIN: Final[int] = 16
TILE_ID_BONE_PILE: Final[int] = 17
TILE_ID_SKULL: Final[int] = 18
TILE_ID_GRAVE_MARKER: Final[int] = 19
TILE_ID_COFFIN: Final[int] = 20
TILE_ID_DARK_WALL: Final[int] = 21


class TileType(NamedTuple):
    name: str
    walkable: bool
    transparent: bool
    glyph: str
    color_fg: Color
    color_bg: Color
    movement_cost: int = 1


class Tile(NamedTuple):
    """Read-only snapshot of a single map cell."""

    type_id: int
    name: str
    glyph: str
    color_fg: Color
    color_bg: Color
    walkable: bool
    transparent: bool
    movement_cost: int
    explored: bool


def _floor(name: str, glyph: str, fg: Color, cost: int = 1) -> TileType:
    return TileType(name, True, True, glyph, fg, BLACK, cost)


def _wall(name: str, glyph: str, fg: Color) -> TileType:
    return TileType(name, False, False, glyph, fg, BLACK)


# Themed variants keep the walkability and transparency of the base tile they
# replace, so theming never changes how the map plays.
TILE_TYPES: Final[dict[int, TileType]] = {
    TILE_ID_FLOOR: _floor("floor", "·", GRAY),
    TILE_ID_WALL: _wall("wall", "▓", WHITE),
    TILE_ID_GRASS: _floor("grass", '"', GREEN),
    TILE_ID_LEAF: _floor("leaf", ",", DARK_GREEN),
    TILE_ID_FLOWER: _floor("flower", "*", YELLOW),
    TILE_ID_MUSHROOM: _floor("mushroom", "♠", BRIGHT_GREEN),
    TILE_ID_SPROUT: _floor("sprout", "'", GREEN),
    TILE_ID_SHALLOW_WATER: _floor("shallow_water", "~", BLUE, cost=2),
    TILE_ID_CORRUPTED_BLOOM: _floor("corrupted_bloom", "*", MAGENTA),
    TILE_ID_TREE: _wall("tree", "♣", GREEN),
    TILE_ID_PINE_TREE: _wall("pine_tree", "▲", DARK_GREEN),
    TILE_ID_CORRUPTED_TREE: _wall("corrupted_tree", "♣", DARK_MAGENTA),
    TILE_ID_CRACKED_FLOOR: _floor("cracked_floor", "◇", DARK_GRAY),
    TILE_ID_RUBBLE: _floor("rubble", "•", DARK_GRAY),
    TILE_ID_COBWEB: _floor("cobweb", "%", WHITE),
    TILE_ID_PILLAR: _wall("pillar", "O", WHITE),
    TILE_ID_CORRUPTION_VEIN: _floor("corruption_vein", "~", MAGENTA),
    TILE_ID_BONE_PILE: _floor("bone_pile", "&", WHITE),
    TILE_ID_SKULL: _floor("skull", "☠", WHITE),
    TILE_ID_GRAVE_MARKER: _wall("grave_marker", "†", GRAY),
    TILE_ID_COFFIN: _wall("coffin", "⚰", DARK_GRAY),
    TILE_ID_DARK_WALL: _wall("dark_wall", "█", DARK_MAGENTA),
}


def _build_lookup(attr: str, dtype) -> np.ndarray:
    """Dense ``tile_id -> attribute`` table indexed by the uint8 tile array."""
    table = np.zeros(256, dtype=dtype)
    for tile_id, tile_type in TILE_TYPES.items():
        table[tile_id] = getattr(tile_type, attr)
    return table


WALKABLE_LUT: Final[np.ndarray] = _build_lookup("walkable", bool)
TRANSPARENT_LUT: Final[np.ndarray] = _build_lookup("transparent", bool)
MOVEMENT_COST_LUT: Final[np.ndarray] = _build_lookup("movement_cost", np.uint8)


class GameMap:
    def __init__(self, width: int, height: int, fill_tile: int = TILE_ID_WALL):
        """
        Initializes the map as a solid block of ``fill_tile``.
        """
        if width <= 0 or height <= 0:
            log.error("Invalid map dimensions", width=width, height=height)
            raise ValueError("Map width and height must be positive integers.")
        if fill_tile not in TILE_TYPES:
            raise ValueError(f"Unknown tile id: {fill_tile}")
        self._width = width
        self._height = height

        # Core map data arrays - (row, column) indexing, i.e. tiles[y, x]
        self.tiles: np.ndarray = np.full(
            (height, width), fill_value=fill_tile, dtype=np.uint8, order="C"
        )
        # Exploration state is owned by the visibility system after generation
        self.explored: np.ndarray = np.zeros((height, width), dtype=bool, order="C")
        self.walkable: np.ndarray = WALKABLE_LUT[self.tiles]
        self.transparent: np.ndarray = TRANSPARENT_LUT[self.tiles]
        self.movement_cost: np.ndarray = MOVEMENT_COST_LUT[self.tiles]
        log.debug("GameMap arrays initialized", shape=(height, width), fill=fill_tile)

    def update_tile_properties(self) -> None:
        """Recalculates the cached property arrays from ``self.tiles``."""
        # Call after writing self.tiles directly (bulk slices)
        self.walkable = WALKABLE_LUT[self.tiles]
        self.transparent = TRANSPARENT_LUT[self.tiles]
        self.movement_cost = MOVEMENT_COST_LUT[self.tiles]

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def in_bounds(self, x: int, y: int) -> bool:
        """Checks if the given coordinates are within the map boundaries."""
        return 0 <= x < self._width and 0 <= y < self._height

    def is_border(self, x: int, y: int) -> bool:
        return x in (0, self._width - 1) or y in (0, self._height - 1)

    def is_walkable(self, x: int, y: int) -> bool:
        if not self.in_bounds(x, y):
            return False
        return bool(self.walkable[y, x])

    def get_tile(self, x: int, y: int) -> Tile | None:
        if not self.in_bounds(x, y):
            return None
        tile_id = int(self.tiles[y, x])
        tile_type = TILE_TYPES[tile_id]
        return Tile(
            type_id=tile_id,
            name=tile_type.name,
            glyph=tile_type.glyph,
            color_fg=tile_type.color_fg,
            color_bg=tile_type.color_bg,
            walkable=tile_type.walkable,
            transparent=tile_type.transparent,
            movement_cost=tile_type.movement_cost,
            explored=bool(self.explored[y, x]),
        )

    def set_tile(self, x: int, y: int, tile_id: int) -> None:
        if not self.in_bounds(x, y):
            return
        tile_type = TILE_TYPES[tile_id]
        self.tiles[y, x] = tile_id
        self.walkable[y, x] = tile_type.walkable
        self.transparent[y, x] = tile_type.transparent
        self.movement_cost[y, x] = tile_type.movement_cost

    def carve(self, x: int, y: int) -> bool:
        """Turns an interior cell into plain floor. Border cells are refused."""
        if not self.in_bounds(x, y) or self.is_border(x, y):
            return False
        self.set_tile(x, y, TILE_ID_FLOOR)
        return True

    def repaint(self, x: int, y: int, tile_id: int) -> bool:
        """Swaps the visual variant of a cell, keeping its walkability."""
        if not self.in_bounds(x, y):
            return False
        if TILE_TYPES[tile_id].walkable != bool(self.walkable[y, x]):
            log.debug(
                "Repaint refused: walkability mismatch",
                pos=(x, y),
                current=int(self.tiles[y, x]),
                requested=tile_id,
            )
            return False
        self.set_tile(x, y, tile_id)
        return True

    def mark_explored(self, x: int, y: int) -> None:
        if self.in_bounds(x, y):
            self.explored[y, x] = True

    def is_explored(self, x: int, y: int) -> bool:
        if not self.in_bounds(x, y):
            return False
        return bool(self.explored[y, x])

    def to_ascii(self, overlay: dict[tuple[int, int], str] | None = None) -> str:
        """Plain ``#``/``.`` rendering, optionally with per-cell overrides."""
        overlay = overlay or {}
        rows = []
        for y in range(self._height):
            row = []
            for x in range(self._width):
                char = overlay.get((x, y))
                if char is None:
                    char = "." if self.walkable[y, x] else "#"
                row.append(char)
            rows.append("".join(row))
        return "\n".join(rows)
