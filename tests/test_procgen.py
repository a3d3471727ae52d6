import pytest

from game.constants import RoomTag
from game.errors import GenerationInvariantViolation
from game.world.procgen import (
    DungeonResult,
    DungeonSettings,
    generate_dungeon,
    validate_dungeon,
)
from game_rng import GameRNG


def _snapshot(result: DungeonResult):
    rooms = [
        (r.x, r.y, r.width, r.height, r.shape, r.tag, r.depth, r.zone_index, tuple(r.spawn_points))
        for r in result.rooms
    ]
    return rooms, result.map.tiles.tobytes(), result.graph.critical_path


def test_default_level_is_sound():
    result = generate_dungeon(GameRNG(seed=42), strict=True)
    assert validate_dungeon(result) == []
    assert len(result.rooms) == 16
    assert result.map.width == 150 and result.map.height == 100
    assert result.seed == 42


def test_default_level_replays_from_a_reseeded_rng():
    first = generate_dungeon(GameRNG(seed=42))
    second = generate_dungeon(GameRNG(seed=42))
    assert len(first.rooms) == len(second.rooms) == 16
    for a, b in zip(first.rooms, second.rooms):
        assert (a.floors, a.tag, a.depth, a.spawn_points) == (b.floors, b.tag, b.depth, b.spawn_points)


def test_same_seed_same_level():
    first = generate_dungeon({"seed": 7, "width": 80, "height": 50, "room_count": 10})
    second = generate_dungeon({"seed": 7, "width": 80, "height": 50, "room_count": 10})
    assert _snapshot(first) == _snapshot(second)


def test_integer_seed_matches_seeded_rng():
    settings = {"width": 70, "height": 45, "room_count": 8}
    by_int = generate_dungeon({**settings, "seed": 99})
    by_rng = generate_dungeon(DungeonSettings(**settings, rng=GameRNG(seed=99)))
    assert _snapshot(by_int) == _snapshot(by_rng)


def test_bare_float_source_is_deterministic(lcg):
    first = generate_dungeon(DungeonSettings(width=70, height=45, room_count=8, rng=lcg(1234)))
    second = generate_dungeon(DungeonSettings(width=70, height=45, room_count=8, rng=lcg(1234)))
    assert _snapshot(first) == _snapshot(second)
    assert validate_dungeon(first) == []


def test_callable_accepted_directly(lcg):
    result = generate_dungeon(lcg(5))
    assert result.rooms[0].tag is RoomTag.ENTRY


@pytest.mark.parametrize("seed", range(10))
def test_strict_generation_across_seeds(seed):
    result = generate_dungeon({"seed": seed, "width": 100, "height": 70, "room_count": 14}, strict=True)
    assert result.boss_index not in (None, 0)
    assert result.graph.critical_path[0] == 0
    assert result.graph.critical_path[-1] == result.boss_index


def test_crowded_map_still_validates():
    result = generate_dungeon(
        {"seed": 3, "width": 30, "height": 20, "room_count": 40, "room_min_size": 3, "room_max_size": 6}
    )
    assert 1 <= len(result.rooms) < 40
    assert validate_dungeon(result) == []


@pytest.mark.parametrize("bad", [True, "seed", 1.5])
def test_rejects_unsupported_arguments(bad):
    with pytest.raises(TypeError):
        generate_dungeon(bad)


@pytest.mark.parametrize(
    "overrides",
    [
        {"room_min_size": 2},
        {"room_min_size": 9, "room_max_size": 6},
        {"width": 0},
        {"room_count": 0},
        {"width": 10, "height": 10, "room_max_size": 14},
    ],
)
def test_invalid_settings_raise_value_error(overrides):
    with pytest.raises(ValueError):
        generate_dungeon(overrides)


def test_from_mapping_accepts_camel_case():
    settings = DungeonSettings.from_mapping({"roomCount": 5, "roomMinSize": 4, "roomMaxSize": 8, "bogus": 1})
    assert (settings.room_count, settings.room_min_size, settings.room_max_size) == (5, 4, 8)
    assert settings.width == 150


def test_validate_dungeon_reports_broken_levels():
    result = generate_dungeon({"seed": 17, "width": 80, "height": 50, "room_count": 10})
    result.rooms[0].tag = RoomTag.COMBAT
    result.map.walkable[0, 5] = True
    problems = validate_dungeon(result)
    assert "room 0 is not tagged entry" in problems
    assert "map border contains walkable tiles" in problems


def test_strict_raises_with_violations(monkeypatch):
    import game.world.procgen as procgen

    monkeypatch.setattr(procgen, "validate_dungeon", lambda result: ["broken"])
    with pytest.raises(GenerationInvariantViolation) as excinfo:
        procgen.generate_dungeon({"seed": 1, "width": 60, "height": 40, "room_count": 6}, strict=True)
    assert excinfo.value.violations == ["broken"]
