import numpy as np
import pytest

from game.world.flood import flood_fill, flood_room_contacts


def _corridor_strip():
    walkable = np.zeros((3, 9), dtype=bool)
    walkable[1, 1:8] = True
    room_ids = np.full((3, 9), -1, dtype=np.int32)
    room_ids[1, 1:3] = 0
    room_ids[1, 4] = 1
    room_ids[1, 6:8] = 2
    return walkable, room_ids


def test_flood_fill_stays_in_region():
    walkable = np.zeros((5, 7), dtype=bool)
    walkable[1:4, 1:3] = True
    walkable[1:4, 4:6] = True
    reached = flood_fill(walkable, 1, 1)
    assert reached[1:4, 1:3].all()
    assert not reached[1:4, 4:6].any()
    assert reached.sum() == 6


def test_flood_fill_is_four_directional():
    walkable = np.zeros((4, 4), dtype=bool)
    walkable[1, 1] = True
    walkable[2, 2] = True
    reached = flood_fill(walkable, 1, 1)
    assert reached.sum() == 1


def test_flood_fill_rejects_out_of_bounds_origin():
    with pytest.raises(ValueError):
        flood_fill(np.ones((3, 3), dtype=bool), 5, 0)


def test_room_contacts_stop_at_other_rooms():
    walkable, room_ids = _corridor_strip()
    assert flood_room_contacts(walkable, room_ids, 0, 1, 1) == [1]
    assert flood_room_contacts(walkable, room_ids, 1, 4, 1) == [0, 2]
    assert flood_room_contacts(walkable, room_ids, 2, 7, 1) == [1]


def test_room_contacts_without_rooms():
    walkable = np.ones((3, 3), dtype=bool)
    room_ids = np.full((3, 3), -1, dtype=np.int32)
    assert flood_room_contacts(walkable, room_ids, 0, 1, 1) == []
