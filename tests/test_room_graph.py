import pytest

from game.constants import RoomShape
from game.world.game_map import GameMap
from game.world.procgen import generate_dungeon
from game.world.room_graph import RoomGraph, build_room_graph, build_room_id_grid, room_intensity
from game.world.rooms import build_room, carve_room
from game_rng import GameRNG


def test_room_intensity_endpoints_and_monotonic():
    assert room_intensity(0, 5) == 0
    assert room_intensity(5, 5) == 1
    assert room_intensity(0, 0) == 0
    assert room_intensity(9, 5) == 1
    values = [room_intensity(d, 7) for d in range(8)]
    assert values == sorted(values)


def test_room_id_grid_marks_owners(chain_level):
    gm, rooms = chain_level
    grid = build_room_id_grid(rooms, gm.width, gm.height)
    assert grid[4, 3] == 0 and grid[4, 13] == 1 and grid[4, 23] == 2
    assert grid[4, 7] == -1


def test_chain_adjacency_and_depths(chain_level):
    gm, rooms = chain_level
    graph = build_room_graph(rooms, gm)
    assert graph.adjacency == {0: {1}, 1: {0, 2}, 2: {1}}
    assert graph.edges == [(0, 1), (1, 2)]
    assert graph.depths == [0, 1, 2]
    assert graph.max_depth == 2
    assert [room.depth for room in rooms] == [0, 1, 2]
    assert [room.intensity for room in rooms] == [0.0, 0.5, 1.0]
    assert graph.get_neighbors(1) == [0, 2]


def test_chain_distances_and_paths(chain_level):
    gm, rooms = chain_level
    graph = build_room_graph(rooms, gm)
    assert graph.get_distance(2, 0) == 2
    assert graph.get_distance(0, 7) == -1
    assert graph.shortest_path(0, 2) == [0, 1, 2]
    assert graph.shortest_path(2, 1) == [2, 1]


def test_provisional_critical_path_targets_best_candidate(chain_level):
    gm, rooms = chain_level
    graph = build_room_graph(rooms, gm)
    # room 2 is both larger and deeper than room 1
    assert graph.boss_candidate == 2
    assert graph.critical_path == [0, 1, 2]
    assert graph.rebuild_critical_path(1) == [0, 1]


def test_unreachable_room_gets_negative_depth():
    gm = GameMap(20, 10)
    rng = GameRNG(seed=0)
    rooms = [
        build_room(RoomShape.RECTANGULAR, 1, 1, 4, 4, rng),
        build_room(RoomShape.RECTANGULAR, 10, 1, 4, 4, rng),
    ]
    for room in rooms:
        carve_room(gm, room)
    graph = build_room_graph(rooms, gm)
    assert graph.depths == [0, -1]
    assert rooms[1].intensity == 0.0
    assert graph.critical_path == []


def test_single_room_graph():
    gm = GameMap(10, 10)
    room = build_room(RoomShape.RECTANGULAR, 2, 2, 4, 4, GameRNG(seed=0))
    carve_room(gm, room)
    graph = RoomGraph([room], {0: set()})
    assert graph.boss_candidate is None
    assert graph.critical_path == [0]
    assert graph.edges == []


@pytest.mark.parametrize("seed", [3, 9])
def test_adjacency_is_symmetric_on_generated_rooms(seed):
    result = generate_dungeon({"width": 70, "height": 45, "room_count": 8, "seed": seed})
    graph = result.graph
    for a, neighbors in graph.adjacency.items():
        for b in neighbors:
            assert a in graph.adjacency[b]
            assert (min(a, b), max(a, b)) in graph.edges
