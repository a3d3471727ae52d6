import pytest

from game.constants import RoomShape
from game.world.corridors import carve_l_corridor
from game.world.game_map import GameMap
from game.world.rooms import build_room, carve_room
from game_rng import GameRNG


def make_lcg(seed: int):
    """Tiny linear congruential float source in [0, 1)."""
    state = seed & 0xFFFFFFFF

    def draw() -> float:
        nonlocal state
        state = (state * 1664525 + 1013904223) & 0xFFFFFFFF
        return state / 2**32

    return draw


@pytest.fixture
def lcg():
    return make_lcg


@pytest.fixture
def chain_level():
    """Three 4x4 rooms in a row joined by straight corridors: 0 - 1 - 2."""
    gm = GameMap(30, 9)
    rng = GameRNG(seed=0)
    rooms = [
        build_room(RoomShape.RECTANGULAR, 1, 2, 4, 4, rng),
        build_room(RoomShape.RECTANGULAR, 11, 2, 4, 4, rng),
        build_room(RoomShape.RECTANGULAR, 21, 2, 4, 5, rng),
    ]
    for room in rooms:
        carve_room(gm, room)
    carve_l_corridor(gm, rooms[0].center, rooms[1].center)
    carve_l_corridor(gm, rooms[1].center, rooms[2].center)
    return gm, rooms
