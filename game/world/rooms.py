# game/world/rooms.py
"""Room placement: random, non-overlapping rooms of varied size and shape.

Each room records its floor tiles explicitly.  Only rectangular rooms fill
their bounding box, so membership is always checked against ``floors``.
"""

from dataclasses import dataclass, field
from functools import cached_property
from typing import TYPE_CHECKING, Callable, Dict, List, Tuple

import structlog

from game.constants import RoomShape, RoomTag, SizeCategory
from game.world.game_map import GameMap
from game_rng import GameRNG

if TYPE_CHECKING:
    from game.world.spawns import SpawnPoint

log = structlog.get_logger(__name__)

Point = Tuple[int, int]

# --- Configuration ---
ATTEMPTS_PER_ROOM = 50
ROOM_GAP = 1
SIZE_CATEGORY_WEIGHTS: Tuple[Tuple[SizeCategory, float], ...] = (
    (SizeCategory.SMALL, 0.4),
    (SizeCategory.MEDIUM, 0.4),
    (SizeCategory.LARGE, 0.2),
)
SHAPE_WEIGHTS: Tuple[Tuple[RoomShape, float], ...] = (
    (RoomShape.RECTANGULAR, 0.5),
    (RoomShape.L_SHAPED, 0.2),
    (RoomShape.CIRCULAR, 0.2),
    (RoomShape.CROSS, 0.1),
)
L_STRIP_MIN_RATIO = 0.4
L_STRIP_MAX_RATIO = 0.6


@dataclass
class Room:
    x: int
    y: int
    width: int
    height: int
    shape: RoomShape
    floors: List[Point]
    center: Point
    size_category: SizeCategory = SizeCategory.MEDIUM
    tag: RoomTag | None = None
    spawn_points: List["SpawnPoint"] = field(default_factory=list)
    depth: int = 0
    intensity: float = 0.0
    zone_index: int = -1

    @property
    def area(self) -> int:
        return len(self.floors)

    @cached_property
    def floor_set(self) -> frozenset:
        return frozenset(self.floors)

    @property
    def x2(self) -> int:
        return self.x + self.width - 1

    @property
    def y2(self) -> int:
        return self.y + self.height - 1

    @property
    def centroid(self) -> Tuple[float, float]:
        """Geometric centre of the bounding box (may fall between tiles)."""
        return self.x + (self.width - 1) / 2, self.y + (self.height - 1) / 2

    def contains(self, x: int, y: int) -> bool:
        return (x, y) in self.floor_set

    def overlaps(self, other: "Room", gap: int = ROOM_GAP) -> bool:
        """True if the bounding boxes, expanded by ``gap``, intersect."""
        return not (
            self.x + self.width + gap <= other.x
            or other.x + other.width + gap <= self.x
            or self.y + self.height + gap <= other.y
            or other.y + other.height + gap <= self.y
        )


# --- Shape generators ---
# Each returns the floor tiles of a shape inside the box, row-major ordered.

def _row_major(points) -> List[Point]:
    return sorted(set(points), key=lambda p: (p[1], p[0]))


def rectangular_floors(x: int, y: int, w: int, h: int, rng: GameRNG) -> List[Point]:
    return [(fx, fy) for fy in range(y, y + h) for fx in range(x, x + w)]


def l_shaped_floors(x: int, y: int, w: int, h: int, rng: GameRNG) -> List[Point]:
    strip_h = max(1, int(round(h * rng.get_float(L_STRIP_MIN_RATIO, L_STRIP_MAX_RATIO))))
    strip_w = max(1, int(round(w * rng.get_float(L_STRIP_MIN_RATIO, L_STRIP_MAX_RATIO))))
    corner = rng.get_int(0, 3)
    # Bit 0 picks top/bottom for the horizontal strip, bit 1 left/right for the vertical
    row0 = y if corner & 1 == 0 else y + h - strip_h
    col0 = x if corner & 2 == 0 else x + w - strip_w
    horizontal = [(fx, fy) for fy in range(row0, row0 + strip_h) for fx in range(x, x + w)]
    vertical = [(fx, fy) for fy in range(y, y + h) for fx in range(col0, col0 + strip_w)]
    return _row_major(horizontal + vertical)


def circular_floors(x: int, y: int, w: int, h: int, rng: GameRNG) -> List[Point]:
    rx = max((w - 1) / 2, 0.5)
    ry = max((h - 1) / 2, 0.5)
    cx = x + (w - 1) / 2
    cy = y + (h - 1) / 2
    floors = []
    for fy in range(y, y + h):
        for fx in range(x, x + w):
            dx = (fx - cx) / rx
            dy = (fy - cy) / ry
            if dx * dx + dy * dy <= 1.0:
                floors.append((fx, fy))
    return floors


def cross_floors(x: int, y: int, w: int, h: int, rng: GameRNG) -> List[Point]:
    arm_w = max(1, w // 3)
    arm_h = max(1, h // 3)
    arm_x = x + (w - arm_w) // 2
    arm_y = y + (h - arm_h) // 2
    vertical = [(fx, fy) for fy in range(y, y + h) for fx in range(arm_x, arm_x + arm_w)]
    horizontal = [(fx, fy) for fy in range(arm_y, arm_y + arm_h) for fx in range(x, x + w)]
    return _row_major(vertical + horizontal)


ShapeGenerator = Callable[[int, int, int, int, GameRNG], List[Point]]

SHAPE_GENERATORS: Dict[RoomShape, ShapeGenerator] = {
    RoomShape.RECTANGULAR: rectangular_floors,
    RoomShape.L_SHAPED: l_shaped_floors,
    RoomShape.CIRCULAR: circular_floors,
    RoomShape.CROSS: cross_floors,
}


def nearest_floor(floors: List[Point], target: Tuple[float, float]) -> Point:
    """Floor tile closest to ``target``; the first in order wins ties."""
    tx, ty = target
    best = floors[0]
    best_dist = float("inf")
    for fx, fy in floors:
        dist = (fx - tx) ** 2 + (fy - ty) ** 2
        if dist < best_dist:
            best_dist = dist
            best = (fx, fy)
    return best


def room_center(shape: RoomShape, x: int, y: int, w: int, h: int, floors: List[Point]) -> Point:
    if shape is RoomShape.RECTANGULAR:
        return x + w // 2, y + h // 2
    return nearest_floor(floors, (x + (w - 1) / 2, y + (h - 1) / 2))


def build_room(
    shape: RoomShape,
    x: int,
    y: int,
    w: int,
    h: int,
    rng: GameRNG,
    size_category: SizeCategory = SizeCategory.MEDIUM,
) -> Room:
    """Create a room of ``shape`` whose bounding box is ``(x, y, w, h)``."""
    floors = SHAPE_GENERATORS[shape](x, y, w, h, rng)
    return Room(
        x=x,
        y=y,
        width=w,
        height=h,
        shape=shape,
        floors=floors,
        center=room_center(shape, x, y, w, h, floors),
        size_category=size_category,
    )


def size_category_bounds(min_size: int, max_size: int) -> Dict[SizeCategory, Tuple[int, int]]:
    """Split ``[min_size, max_size]`` into small/medium/large thirds."""
    span = max_size - min_size
    low_cut = min_size + span // 3
    high_cut = min_size + (2 * span) // 3
    return {
        SizeCategory.SMALL: (min_size, low_cut),
        SizeCategory.MEDIUM: (low_cut, high_cut),
        SizeCategory.LARGE: (high_cut, max_size),
    }


def _roll_weighted(rng: GameRNG, table):
    roll = rng.get_float()
    cumulative = 0.0
    for value, weight in table:
        cumulative += weight
        if roll < cumulative:
            return value
    return table[-1][0]


def carve_room(game_map: GameMap, room: Room) -> None:
    for fx, fy in room.floors:
        game_map.carve(fx, fy)


def place_rooms(
    game_map: GameMap,
    rng: GameRNG,
    room_count: int,
    min_size: int,
    max_size: int,
) -> List[Room]:
    """Randomly place up to ``room_count`` rooms, carving each as accepted.

    Gives up after ``ATTEMPTS_PER_ROOM * room_count`` attempts and returns
    however many rooms fit; callers must tolerate a shortfall.
    """
    bounds = size_category_bounds(min_size, max_size)
    max_w = game_map.width - 2
    max_h = game_map.height - 2
    rooms: List[Room] = []
    attempts = 0
    max_attempts = ATTEMPTS_PER_ROOM * room_count
    rejected = 0

    while len(rooms) < room_count and attempts < max_attempts:
        attempts += 1
        category = _roll_weighted(rng, SIZE_CATEGORY_WEIGHTS)
        lo, hi = bounds[category]
        w = min(rng.get_int(lo, hi), max_w)
        h = min(rng.get_int(lo, hi), max_h)
        # Keep a one tile border: 1 <= x and x + w <= width - 1
        x = rng.get_int(1, game_map.width - w - 1)
        y = rng.get_int(1, game_map.height - h - 1)
        shape = _roll_weighted(rng, SHAPE_WEIGHTS)
        candidate = build_room(shape, x, y, w, h, rng, size_category=category)

        if any(existing.overlaps(candidate) for existing in rooms):
            rejected += 1
            continue

        carve_room(game_map, candidate)
        rooms.append(candidate)
        log.debug(
            "Placed room",
            index=len(rooms) - 1,
            shape=shape.value,
            size=category.value,
            rect=(x, y, w, h),
            floors=candidate.area,
            center=candidate.center,
        )

    if len(rooms) < room_count:
        log.warning(
            "Room placement fell short",
            requested=room_count,
            placed=len(rooms),
            attempts=attempts,
        )
    log.info("Rooms placed", placed=len(rooms), attempts=attempts, rejected=rejected)
    return rooms
