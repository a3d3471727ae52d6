import numpy as np
import pytest

from game.world.game_map import (
    TILE_ID_FLOOR,
    TILE_ID_GRASS,
    TILE_ID_TREE,
    TILE_ID_WALL,
    TILE_TYPES,
    GameMap,
)


def test_new_map_is_solid_wall():
    gm = GameMap(10, 6)
    assert gm.tiles.shape == (6, 10)
    assert (gm.tiles == TILE_ID_WALL).all()
    assert not gm.walkable.any()
    assert not gm.explored.any()


def test_invalid_dimensions_raise():
    with pytest.raises(ValueError):
        GameMap(0, 5)


def test_carve_refuses_border_cells():
    gm = GameMap(8, 8)
    assert gm.carve(3, 3)
    assert gm.is_walkable(3, 3)
    assert not gm.carve(0, 3)
    assert not gm.carve(7, 7)
    assert not gm.is_walkable(0, 3)


def test_repaint_keeps_walkability():
    gm = GameMap(8, 8)
    gm.carve(2, 2)
    assert gm.repaint(2, 2, TILE_ID_GRASS)
    assert gm.tiles[2, 2] == TILE_ID_GRASS and gm.is_walkable(2, 2)
    assert not gm.repaint(2, 2, TILE_ID_TREE)
    assert gm.tiles[2, 2] == TILE_ID_GRASS
    assert gm.repaint(5, 5, TILE_ID_TREE)
    assert not gm.is_walkable(5, 5)


def test_get_tile_snapshot_and_exploration():
    gm = GameMap(5, 5)
    assert gm.get_tile(-1, 0) is None
    tile = gm.get_tile(1, 1)
    assert tile.type_id == TILE_ID_WALL and not tile.walkable and not tile.explored
    gm.mark_explored(1, 1)
    assert gm.get_tile(1, 1).explored
    assert gm.is_explored(1, 1) and not gm.is_explored(9, 9)


def test_variants_walkable_iff_transparent():
    for tile_type in TILE_TYPES.values():
        assert tile_type.walkable == tile_type.transparent, tile_type.name


def test_update_tile_properties_after_bulk_write():
    gm = GameMap(6, 6)
    gm.tiles[1:5, 1:5] = TILE_ID_FLOOR
    gm.update_tile_properties()
    assert gm.walkable.sum() == 16
    assert np.array_equal(gm.walkable, gm.transparent)


def test_to_ascii_with_overlay():
    gm = GameMap(4, 3)
    gm.carve(1, 1)
    gm.carve(2, 1)
    assert gm.to_ascii({(2, 1): "@"}) == "####\n#.@#\n####"
