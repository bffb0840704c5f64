"""
A* pathfinding on the 4-connected grid, plus a short-lived path cache.

The heuristic is Manhattan distance, which is admissible and consistent for
unit-cost axis-aligned moves. Open nodes with equal f are ordered by smaller h
(closer to the goal), then by insertion order, so results are deterministic.
"""

import heapq
import logging
import time
import typing

from snake_agent.constants import ASTAR_MAX_EXPANSIONS, PATH_CACHE_VALID_MS
from snake_agent.occupancy import OccupancyGrid, manhattan_distance, to_cell, to_position

logger = logging.getLogger(__name__)

Cell = typing.Tuple[int, int]
CacheKey = typing.Tuple[int, int, int, int]


def astar(start: Cell, goal: Cell, grid: OccupancyGrid,
          max_expansions: int = ASTAR_MAX_EXPANSIONS) -> typing.List[Cell]:
    """
    Shortest path from start to goal through free cells.

    Args:
        start: Starting cell (usually our head, which is itself occupied)
        goal: Target cell
        grid: Occupancy for the current snapshot
        max_expansions: Hard cap on nodes expanded

    Returns:
        Cells from start to goal inclusive, or an empty list if no path was found
    """
    if start == goal:
        return [start]

    counter = 0
    h_start = manhattan_distance(start, goal)
    open_heap = [(h_start, h_start, counter, start)]
    came_from: typing.Dict[Cell, Cell] = {}
    g_score = {start: 0}
    closed = set()
    expansions = 0

    while open_heap:
        _, _, _, current = heapq.heappop(open_heap)
        if current in closed:
            continue

        if current == goal:
            path = [current]
            while current in came_from:
                current = came_from[current]
                path.append(current)
            path.reverse()
            return path

        if expansions >= max_expansions:
            logger.debug("A* gave up after %d expansions (%s -> %s)", expansions, start, goal)
            break
        closed.add(current)
        expansions += 1

        tentative_g = g_score[current] + 1
        for neighbor in grid.neighbors(current):
            if neighbor in closed:
                continue
            if tentative_g < g_score.get(neighbor, float('inf')):
                came_from[neighbor] = current
                g_score[neighbor] = tentative_g
                h = manhattan_distance(neighbor, goal)
                counter += 1
                heapq.heappush(open_heap, (tentative_g + h, h, counter, neighbor))

    return []


def find_path(start: typing.Dict, goal: typing.Dict, self_snake: typing.Optional[typing.Dict],
              game_state: typing.Dict) -> typing.List[typing.Dict]:
    """
    A* path between two positions for the given snake.

    Returns:
        Positions from start to goal inclusive; empty when the goal is unreachable
    """
    grid = OccupancyGrid(self_snake, game_state)
    return [to_position(cell) for cell in astar(to_cell(start), to_cell(goal), grid)]


class PathCache:
    """
    Paths keyed by (head_x, head_y, food_x, food_y), valid for a fixed time window.

    Entries are not invalidated when the board changes; only age expires them.
    """

    def __init__(self, valid_ms: float = PATH_CACHE_VALID_MS,
                 clock: typing.Optional[typing.Callable[[], float]] = None):
        """
        Args:
            valid_ms: How long a stored path may be reused, in milliseconds
            clock: Callable returning seconds; defaults to time.monotonic
        """
        self.valid_time = valid_ms / 1000.0
        self.clock = clock or time.monotonic
        self._entries: typing.Dict[CacheKey, typing.Tuple[typing.List[Cell], float]] = {}

    @staticmethod
    def make_key(head: Cell, food: Cell) -> CacheKey:
        return head[0], head[1], food[0], food[1]

    def _is_fresh(self, stored_at: float, now: float) -> bool:
        return now - stored_at < self.valid_time

    def get(self, key: CacheKey) -> typing.Optional[typing.List[Cell]]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        path, stored_at = entry
        if not self._is_fresh(stored_at, self.clock()):
            return None
        return path

    def put(self, key: CacheKey, path: typing.List[Cell]):
        now = self.clock()
        # Drop anything that has already expired
        self._entries = {k: v for k, v in self._entries.items() if self._is_fresh(v[1], now)}
        self._entries[key] = (path, now)

    def discard(self, key: CacheKey):
        self._entries.pop(key, None)

    def clear(self):
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
