import numpy as np
import pytest

from game.constants import RoomShape, SizeCategory
from game.world.flood import flood_fill
from game.world.game_map import GameMap
from game.world.rooms import (
    build_room,
    cross_floors,
    place_rooms,
    rectangular_floors,
    size_category_bounds,
)
from game_rng import GameRNG


def _is_connected(floors):
    xs = [x for x, _ in floors]
    ys = [y for _, y in floors]
    grid = np.zeros((max(ys) + 2, max(xs) + 2), dtype=bool)
    for x, y in floors:
        grid[y, x] = True
    reached = flood_fill(grid, floors[0][0], floors[0][1])
    return int(reached.sum()) == len(floors)


def test_rectangular_fills_box():
    floors = rectangular_floors(2, 3, 4, 5, GameRNG(seed=0))
    assert len(floors) == 20
    assert floors[0] == (2, 3) and floors[-1] == (5, 7)


def test_cross_arm_sizes():
    floors = cross_floors(0, 0, 9, 9, GameRNG(seed=0))
    # two 3-wide arms through a 9x9 box overlapping in a 3x3 block
    assert len(floors) == 9 * 3 * 2 - 9
    assert (4, 0) in floors and (0, 4) in floors
    assert (0, 0) not in floors


@pytest.mark.parametrize("shape", list(RoomShape))
@pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
def test_shapes_stay_in_box_and_contain_center(shape, seed):
    rng = GameRNG(seed=seed)
    w, h = rng.get_int(5, 12), rng.get_int(5, 12)
    room = build_room(shape, 3, 4, w, h, rng)
    assert room.floors
    assert len(set(room.floors)) == len(room.floors)
    for x, y in room.floors:
        assert 3 <= x < 3 + w and 4 <= y < 4 + h
    assert room.center in room.floor_set
    assert _is_connected(room.floors)


@pytest.mark.parametrize("seed", range(8))
def test_l_shape_is_not_the_full_box(seed):
    room = build_room(RoomShape.L_SHAPED, 1, 1, 8, 8, GameRNG(seed=seed))
    assert 0 < room.area < 64


def test_non_rectangular_center_is_nearest_floor():
    room = build_room(RoomShape.CROSS, 0, 0, 10, 10, GameRNG(seed=0))
    cx, cy = room.centroid
    best = min((x - cx) ** 2 + (y - cy) ** 2 for x, y in room.floors)
    assert (room.center[0] - cx) ** 2 + (room.center[1] - cy) ** 2 == best


def test_size_category_bounds_split_range_in_thirds():
    bounds = size_category_bounds(5, 14)
    assert bounds[SizeCategory.SMALL] == (5, 8)
    assert bounds[SizeCategory.MEDIUM] == (8, 11)
    assert bounds[SizeCategory.LARGE] == (11, 14)


def test_overlap_uses_one_tile_gap():
    rng = GameRNG(seed=0)
    a = build_room(RoomShape.RECTANGULAR, 1, 1, 3, 3, rng)
    touching = build_room(RoomShape.RECTANGULAR, 4, 1, 3, 3, rng)
    spaced = build_room(RoomShape.RECTANGULAR, 5, 1, 3, 3, rng)
    assert a.overlaps(touching)
    assert not a.overlaps(spaced)


@pytest.mark.parametrize("seed", [0, 7, 42])
def test_place_rooms_invariants(seed):
    gm = GameMap(80, 50)
    rooms = place_rooms(gm, GameRNG(seed=seed), 10, 5, 12)
    assert 1 <= len(rooms) <= 10
    for i, a in enumerate(rooms):
        for b in rooms[i + 1:]:
            assert not a.overlaps(b)
        for x, y in a.floors:
            assert 1 <= x <= gm.width - 2 and 1 <= y <= gm.height - 2
            assert gm.is_walkable(x, y)
    assert not gm.walkable[0, :].any() and not gm.walkable[:, 0].any()


def test_place_rooms_degrades_when_map_is_crowded():
    gm = GameMap(14, 14)
    rooms = place_rooms(gm, GameRNG(seed=1), 10, 5, 8)
    assert 1 <= len(rooms) < 10
