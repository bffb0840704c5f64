"""Tests for snake_agent.reachability module."""

from __future__ import annotations

from snake_agent.constants import FLOOD_FILL_LIMIT
from snake_agent.occupancy import OccupancyGrid
from snake_agent.reachability import (
    count_reachable,
    flood_fill,
    get_survival_move,
    should_enter_survival_mode,
)


def _room_walls(x0, y0, x1, y1):
    """Obstacle ring around the interior rectangle [x0, x1] x [y0, y1]."""
    walls = []
    for x in range(x0 - 1, x1 + 2):
        for y in range(y0 - 1, y1 + 2):
            if not (x0 <= x <= x1 and y0 <= y <= y1):
                walls.append((x, y))
    return walls


class TestCountReachable:
    def test_open_grid_hits_the_cap(self, make_state) -> None:
        state = make_state(width=20, height=20)
        assert count_reachable({"x": 10, "y": 10}, None, state) == FLOOD_FILL_LIMIT

    def test_enclosed_room_counts_exactly(self, make_state) -> None:
        state = make_state(obstacles=_room_walls(1, 1, 3, 2))
        assert count_reachable({"x": 2, "y": 1}, None, state) == 6

    def test_single_cell_pocket(self, make_state) -> None:
        state = make_state(obstacles=_room_walls(4, 4, 4, 4))
        assert count_reachable({"x": 4, "y": 4}, None, state) == 1

    def test_small_grid_counts_every_free_cell(self, make_state) -> None:
        state = make_state(width=4, height=4, obstacles=[(0, 0), (3, 3)])
        assert count_reachable({"x": 1, "y": 1}, None, state) == 14

    def test_own_tail_counts_as_space(self, make_snake, make_state) -> None:
        # 1x4 corridor: head, neck, tail, then one empty cell
        snake = make_snake([(0, 0), (0, 1), (0, 2)])
        state = make_state([snake], width=1, height=4)
        # Tail cell is free but the neck walls it off from the head
        assert count_reachable({"x": 0, "y": 2}, snake, state) == 2

    def test_custom_limit(self, make_state) -> None:
        grid = OccupancyGrid(None, make_state())
        assert flood_fill((5, 5), grid, max_depth=7) == 7


class TestSurvivalMove:
    def test_prefers_larger_region(self, make_snake, make_state) -> None:
        # Row 3 is walled off except where our body sits; up leads to a
        # 30-cell region, down to a 60-cell region.
        snake = make_snake([(4, 3), (5, 3), (5, 2)])
        walls = [(x, 3) for x in range(10) if x not in (4, 5)]
        state = make_state([snake], obstacles=walls)
        grid = OccupancyGrid(snake, state)
        assert get_survival_move(grid, (4, 3)) == (0, 1)

    def test_tie_keeps_first_direction(self, make_snake, make_state) -> None:
        snake = make_snake([(0, 5), (0, 6), (0, 7)])
        state = make_state([snake], width=25, height=25)
        grid = OccupancyGrid(snake, state)
        assert get_survival_move(grid, (0, 5)) == (1, 0)

    def test_no_safe_direction_returns_right(self, make_snake, make_state) -> None:
        snake = make_snake([(1, 1)])
        state = make_state([snake], width=3, height=3, obstacles=[(0, 1), (2, 1), (1, 0), (1, 2)])
        grid = OccupancyGrid(snake, state)
        assert get_survival_move(grid, (1, 1)) == (1, 0)


class TestSurvivalModeTrigger:
    def test_open_board_is_not_survival(self, make_snake, make_state) -> None:
        snake = make_snake([(5, 5), (4, 5), (3, 5)])
        assert not should_enter_survival_mode(snake, make_state([snake]))

    def test_long_snake_triggers_survival(self, make_snake, make_state) -> None:
        cells = [(x, 0) for x in range(4)] + [(x, 1) for x in range(3, -1, -1)] + [(0, 2)]
        snake = make_snake(cells)
        state = make_state([snake], width=4, height=4)
        assert snake["length"] == 9
        assert should_enter_survival_mode(snake, state)

    def test_cramped_space_triggers_survival(self, make_snake, make_state) -> None:
        snake = make_snake([(2, 1), (1, 1), (1, 2)])
        state = make_state([snake], obstacles=_room_walls(1, 1, 3, 2))
        assert should_enter_survival_mode(snake, state)
