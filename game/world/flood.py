"""game/world/flood.py

Numba-accelerated 4-directional flood fills over the walkable grid.
Both kernels use a preallocated flat queue: every cell is enqueued at
most once, so an ``height * width`` buffer always suffices.
"""

from __future__ import annotations

import numba
import numpy as np

# (dy, dx) in the same order as CARDINAL_DIRECTIONS' (dx, dy) pairs
_DY = np.array([1, -1, 0, 0], dtype=np.int64)
_DX = np.array([0, 0, 1, -1], dtype=np.int64)


@numba.njit(cache=True)
def _flood_fill_kernel(
    walkable: np.ndarray, start_x: int, start_y: int, dy: np.ndarray, dx: np.ndarray
) -> np.ndarray:
    height, width = walkable.shape
    visited = np.zeros((height, width), dtype=np.bool_)
    queue_y = np.empty(height * width, dtype=np.int64)
    queue_x = np.empty(height * width, dtype=np.int64)
    head = 0
    tail = 0
    visited[start_y, start_x] = True
    queue_y[tail] = start_y
    queue_x[tail] = start_x
    tail += 1
    while head < tail:
        cy = queue_y[head]
        cx = queue_x[head]
        head += 1
        for d in range(4):
            ny = cy + dy[d]
            nx = cx + dx[d]
            if ny < 0 or ny >= height or nx < 0 or nx >= width:
                continue
            if visited[ny, nx] or not walkable[ny, nx]:
                continue
            visited[ny, nx] = True
            queue_y[tail] = ny
            queue_x[tail] = nx
            tail += 1
    return visited


@numba.njit(cache=True)
def _room_contacts_kernel(
    walkable: np.ndarray,
    room_ids: np.ndarray,
    room_index: int,
    start_x: int,
    start_y: int,
    room_count: int,
    dy: np.ndarray,
    dx: np.ndarray,
) -> np.ndarray:
    height, width = walkable.shape
    contacts = np.zeros(room_count, dtype=np.bool_)
    visited = np.zeros((height, width), dtype=np.bool_)
    queue_y = np.empty(height * width, dtype=np.int64)
    queue_x = np.empty(height * width, dtype=np.int64)
    head = 0
    tail = 0
    visited[start_y, start_x] = True
    queue_y[tail] = start_y
    queue_x[tail] = start_x
    tail += 1
    while head < tail:
        cy = queue_y[head]
        cx = queue_x[head]
        head += 1
        for d in range(4):
            ny = cy + dy[d]
            nx = cx + dx[d]
            if ny < 0 or ny >= height or nx < 0 or nx >= width:
                continue
            if visited[ny, nx] or not walkable[ny, nx]:
                continue
            visited[ny, nx] = True
            owner = room_ids[ny, nx]
            if owner >= 0 and owner != room_index:
                # Another room's floor: record the contact, do not pass through
                contacts[owner] = True
                continue
            queue_y[tail] = ny
            queue_x[tail] = nx
            tail += 1
    return contacts


def flood_fill(walkable: np.ndarray, start_x: int, start_y: int) -> np.ndarray:
    """Return a ``(height, width)`` mask of cells reachable from the start.

    The start cell is always part of the result; movement is 4-directional
    through ``walkable`` cells only.
    """
    height, width = walkable.shape
    if not (0 <= start_x < width and 0 <= start_y < height):
        raise ValueError(f"Flood fill origin {(start_x, start_y)} is out of bounds")
    return _flood_fill_kernel(
        np.ascontiguousarray(walkable, dtype=np.bool_), start_x, start_y, _DY, _DX
    )


def flood_room_contacts(
    walkable: np.ndarray,
    room_ids: np.ndarray,
    room_index: int,
    start_x: int,
    start_y: int,
) -> list[int]:
    """Return the sorted indices of rooms touched by a fill from ``room_index``.

    ``room_ids`` holds the owning room of every floor cell and ``-1`` for
    cells owned by no room (corridors). The fill traverses its own room and
    corridors but stops at the first cell of any other room.
    """
    height, width = walkable.shape
    if not (0 <= start_x < width and 0 <= start_y < height):
        raise ValueError(f"Flood fill origin {(start_x, start_y)} is out of bounds")
    room_count = int(room_ids.max()) + 1 if room_ids.size else 0
    if room_count <= 0:
        return []
    contacts = _room_contacts_kernel(
        np.ascontiguousarray(walkable, dtype=np.bool_),
        np.ascontiguousarray(room_ids, dtype=np.int32),
        room_index,
        start_x,
        start_y,
        room_count,
        _DY,
        _DX,
    )
    return [int(i) for i in np.flatnonzero(contacts)]
