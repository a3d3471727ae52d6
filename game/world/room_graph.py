# game/world/room_graph.py
"""Room adjacency graph with BFS depth, intensity and the critical path.

Rooms are identified by their index in the placement list. Adjacency is
discovered by flood-filling from each room's center through corridors,
stopping at the first floor cell of any other room.
"""

from collections import deque
from typing import Dict, List, Optional, Sequence, Set, Tuple

import numpy as np
import structlog

from game.world.flood import flood_room_contacts
from game.world.game_map import GameMap
from game.world.rooms import Room

log = structlog.get_logger(__name__)

BOSS_AREA_WEIGHT = 2
BOSS_DEPTH_WEIGHT = 10


def room_intensity(depth: int, max_depth: int) -> float:
    """Normalised danger in ``[0, 1]``; zero when there is no depth range."""
    if max_depth <= 0:
        return 0.0
    return min(1.0, max(depth, 0) / max_depth)


def build_room_id_grid(rooms: Sequence[Room], width: int, height: int) -> np.ndarray:
    """``(height, width)`` grid of owning room index, ``-1`` where unowned."""
    grid = np.full((height, width), -1, dtype=np.int32)
    for index, room in enumerate(rooms):
        for fx, fy in room.floors:
            grid[fy, fx] = index
    return grid


def find_adjacency(rooms: Sequence[Room], game_map: GameMap) -> Dict[int, Set[int]]:
    adjacency: Dict[int, Set[int]] = {i: set() for i in range(len(rooms))}
    if not rooms:
        return adjacency
    room_ids = build_room_id_grid(rooms, game_map.width, game_map.height)
    for index, room in enumerate(rooms):
        cx, cy = room.center
        for other in flood_room_contacts(game_map.walkable, room_ids, index, cx, cy):
            adjacency[index].add(other)
            adjacency[other].add(index)
    return adjacency


class RoomGraph:
    """Index-keyed adjacency over the rooms of one generated level.

    Constructing the graph writes ``depth`` and ``intensity`` onto each room
    and computes a provisional critical path towards the best boss candidate.
    Call :meth:`rebuild_critical_path` once the boss room is committed.
    """

    def __init__(self, rooms: Sequence[Room], adjacency: Dict[int, Set[int]]):
        self.rooms: List[Room] = list(rooms)
        self.adjacency: Dict[int, Set[int]] = adjacency
        self.edges: List[Tuple[int, int]] = sorted(
            {(min(i, j), max(i, j)) for i, nbrs in adjacency.items() for j in nbrs}
        )
        self._distance_cache: Dict[int, List[int]] = {}

        self.depths: List[int] = self._bfs_distances(0) if self.rooms else []
        reachable = [d for d in self.depths if d >= 0]
        self.max_depth: int = max(reachable) if reachable else 0
        for room, depth in zip(self.rooms, self.depths):
            room.depth = depth
            room.intensity = room_intensity(depth, self.max_depth)

        unreachable = [i for i, d in enumerate(self.depths) if d < 0]
        if unreachable:
            log.warning("Rooms unreachable in room graph", rooms=unreachable)

        self.boss_candidate: Optional[int] = self._pick_boss_candidate()
        self.critical_path: List[int] = []
        if self.boss_candidate is not None:
            self.rebuild_critical_path(self.boss_candidate)
        elif self.rooms:
            self.critical_path = [0]

    def __len__(self) -> int:
        return len(self.rooms)

    def get_neighbors(self, index: int) -> List[int]:
        return sorted(self.adjacency.get(index, ()))

    def _bfs_distances(self, source: int) -> List[int]:
        cached = self._distance_cache.get(source)
        if cached is not None:
            return cached
        dist = [-1] * len(self.rooms)
        dist[source] = 0
        queue = deque([source])
        while queue:
            current = queue.popleft()
            for neighbor in self.get_neighbors(current):
                if dist[neighbor] == -1:
                    dist[neighbor] = dist[current] + 1
                    queue.append(neighbor)
        self._distance_cache[source] = dist
        return dist

    def get_distance(self, source: int, target: int) -> int:
        """Hop count between two rooms, ``-1`` if unreachable."""
        if not (0 <= source < len(self.rooms) and 0 <= target < len(self.rooms)):
            return -1
        return self._bfs_distances(source)[target]

    def shortest_path(self, source: int, target: int) -> List[int]:
        """BFS path of room indices from ``source`` to ``target`` inclusive.

        Neighbors are expanded in ascending index order, so the result is
        deterministic. Returns ``[]`` when no path exists.
        """
        if not (0 <= source < len(self.rooms) and 0 <= target < len(self.rooms)):
            return []
        previous: Dict[int, int] = {}
        visited = {source}
        queue = deque([source])
        while queue:
            current = queue.popleft()
            if current == target:
                break
            for neighbor in self.get_neighbors(current):
                if neighbor not in visited:
                    visited.add(neighbor)
                    previous[neighbor] = current
                    queue.append(neighbor)
        if target not in visited:
            return []
        path = [target]
        while path[-1] != source:
            path.append(previous[path[-1]])
        path.reverse()
        return path

    def rebuild_critical_path(self, boss_index: int) -> List[int]:
        self.critical_path = self.shortest_path(0, boss_index)
        if not self.critical_path:
            log.warning("Boss room unreachable from entry", boss=boss_index)
        return self.critical_path

    def _pick_boss_candidate(self) -> Optional[int]:
        best: Optional[int] = None
        best_score = -1
        for index in range(1, len(self.rooms)):
            room = self.rooms[index]
            score = room.area * BOSS_AREA_WEIGHT + max(room.depth, 0) * BOSS_DEPTH_WEIGHT
            if score > best_score:
                best_score = score
                best = index
        return best


def build_room_graph(rooms: Sequence[Room], game_map: GameMap) -> RoomGraph:
    adjacency = find_adjacency(rooms, game_map)
    graph = RoomGraph(rooms, adjacency)
    log.info(
        "Room graph built",
        rooms=len(graph),
        edges=len(graph.edges),
        max_depth=graph.max_depth,
        boss_candidate=graph.boss_candidate,
        critical_path=graph.critical_path,
    )
    return graph
