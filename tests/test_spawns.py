import pytest

from game.constants import RoomShape, RoomTag, SpawnType
from game.world.game_map import GameMap
from game.world.procgen import generate_dungeon
from game.world.room_graph import build_room_graph
from game.world.room_tags import assign_room_tags
from game.world.rooms import build_room, carve_room
from game.world.spawns import (
    generate_spawn_points,
    intensity_tier,
    interior_floors,
    loot_item_count,
    pick_spread_point,
)
from game_rng import CallableRNG, GameRNG


def _sequence(values):
    it = iter(values)
    return lambda: next(it)


def test_intensity_tiers():
    assert intensity_tier(0.0) == "low"
    assert intensity_tier(0.29) == "low"
    assert intensity_tier(0.3) == "mid"
    assert intensity_tier(0.59) == "mid"
    assert intensity_tier(0.6) == "high"
    assert intensity_tier(1.0) == "high"


def test_loot_item_count_shrinks_with_intensity():
    assert loot_item_count(0.0) == 4
    assert loot_item_count(0.4) == 3
    assert loot_item_count(0.7) == 2
    assert loot_item_count(1.0) == 2


def test_interior_floors_excludes_edges():
    gm = GameMap(12, 12)
    room = build_room(RoomShape.RECTANGULAR, 2, 2, 5, 5, GameRNG(seed=0))
    carve_room(gm, room)
    interior = interior_floors(room, gm)
    assert sorted(interior) == [(x, y) for y in range(3, 6) for x in range(3, 6)]


def test_interior_floors_falls_back_for_thin_rooms():
    gm = GameMap(12, 8)
    room = build_room(RoomShape.RECTANGULAR, 2, 2, 6, 3, GameRNG(seed=0))
    carve_room(gm, room)
    # only the middle row qualifies: (3..6, 3) is four tiles
    assert len(interior_floors(room, gm)) == 4
    thin = build_room(RoomShape.RECTANGULAR, 2, 2, 3, 3, GameRNG(seed=0))
    gm2 = GameMap(8, 8)
    carve_room(gm2, thin)
    assert sorted(interior_floors(thin, gm2)) == sorted(thin.floors)


def test_pick_spread_point_prefers_the_farthest_candidate():
    rng = CallableRNG(_sequence([0.1, 0.9]))
    assert pick_spread_point([(1, 0), (5, 5)], [(0, 0)], rng) == (5, 5)


def test_pick_spread_point_with_nothing_chosen_takes_first_sample():
    rng = CallableRNG(_sequence([0.6]))
    assert pick_spread_point([(1, 1)], [], rng) == (1, 1)


def test_chain_spawn_rules(chain_level):
    gm, rooms = chain_level
    graph = build_room_graph(rooms, gm)
    assign_room_tags(rooms, graph, GameRNG(seed=1))
    total = generate_spawn_points(rooms, gm, GameRNG(seed=3))
    assert total == sum(len(room.spawn_points) for room in rooms)

    entry, combat, boss = rooms
    players = [p for p in entry.spawn_points if p.type is SpawnType.PLAYER]
    assert len(players) == 1
    assert (players[0].x, players[0].y) == entry.center
    assert 1 <= sum(p.type is SpawnType.ITEM for p in entry.spawn_points) <= 2

    assert (boss.spawn_points[0].x, boss.spawn_points[0].y) == boss.center
    assert boss.spawn_points[0].type is SpawnType.ENEMY
    assert 1 <= sum(p.type is SpawnType.ITEM for p in boss.spawn_points) <= 2

    enemies = [p for p in combat.spawn_points if p.type is SpawnType.ENEMY]
    assert 1 <= len(enemies) <= 3
    for room in rooms:
        for point in room.spawn_points:
            assert (point.x, point.y) in room.floor_set


@pytest.mark.parametrize("seed", [11, 12, 13])
def test_exactly_one_player_spawn_per_level(seed):
    result = generate_dungeon({"width": 90, "height": 60, "room_count": 12, "seed": seed})
    points = [p for room in result.rooms for p in room.spawn_points]
    assert sum(p.type is SpawnType.PLAYER for p in points) == 1
    for room in result.rooms:
        enemies = sum(p.type is SpawnType.ENEMY for p in room.spawn_points)
        if room.tag is RoomTag.ENTRY:
            assert enemies == 0
        elif room.tag in (RoomTag.COMBAT, RoomTag.BOSS):
            assert enemies >= 1
        if room.tag is RoomTag.LOOT:
            items = sum(p.type is SpawnType.ITEM for p in room.spawn_points)
            assert 2 <= items <= 4
        for point in room.spawn_points:
            assert result.map.is_walkable(point.x, point.y)
