"""
Grid occupancy checks shared by every strategy.

A cell is occupied when it is off the grid, holds an obstacle, or holds a body
segment of any snake. Our own tail is the one exception: it moves away on the
same tick our head would arrive, so it is treated as free.
"""

import typing

import numpy as np

from snake_agent.constants import X, Y, DIRECTIONS


def to_cell(position: typing.Dict) -> typing.Tuple[int, int]:
    """Convert a {'x', 'y'} position into an (x, y) tuple."""
    return position[X], position[Y]


def to_position(cell: typing.Tuple[int, int]) -> typing.Dict:
    """Convert an (x, y) tuple into a {'x', 'y'} position."""
    return {X: cell[0], Y: cell[1]}


def get_next_position(head: typing.Dict, direction: typing.Tuple[int, int]) -> typing.Dict:
    """Calculate the next position given a head position and a direction vector."""
    return {X: head[X] + direction[0], Y: head[Y] + direction[1]}


def manhattan_distance(pos1: typing.Tuple[int, int], pos2: typing.Tuple[int, int]) -> int:
    """Calculate Manhattan distance between two cells."""
    return abs(pos1[0] - pos2[0]) + abs(pos1[1] - pos2[1])


def direction_between(start: typing.Tuple[int, int], end: typing.Tuple[int, int]) -> typing.Tuple[int, int]:
    return end[0] - start[0], end[1] - start[1]


def is_unit_step(direction: typing.Tuple[int, int]) -> bool:
    return abs(direction[0]) + abs(direction[1]) == 1


def _is_self(snake: typing.Dict, self_snake: typing.Optional[typing.Dict]) -> bool:
    return self_snake is not None and (snake is self_snake or snake == self_snake)


class OccupancyGrid:
    """
    Boolean occupancy mask for one snapshot, seen from one snake.

    Built once per decision so flood fill and A* can test cells without
    rescanning every snake body.
    """

    def __init__(self, self_snake: typing.Optional[typing.Dict], game_state: typing.Dict):
        """
        Args:
            self_snake: The deciding snake (its tail is left unmarked), or None
            game_state: Snapshot with 'width', 'height', 'obstacles' and 'snakes'
        """
        self.width = game_state['width']
        self.height = game_state['height']
        self.blocked = np.zeros((self.height, self.width), dtype=bool)

        for obstacle in game_state.get('obstacles', []):
            self._mark(obstacle)

        for snake in game_state.get('snakes', []):
            if not snake or _is_self(snake, self_snake):
                continue
            for segment in snake['body']:
                self._mark(segment)

        if self_snake:
            # Exclude our tail, it moves away this tick
            for segment in self_snake['body'][:-1]:
                self._mark(segment)

    def _mark(self, position: typing.Dict):
        x, y = position[X], position[Y]
        # Segments outside the grid cannot block anything inside it
        if 0 <= x < self.width and 0 <= y < self.height:
            self.blocked[y, x] = True

    def in_bounds(self, cell: typing.Tuple[int, int]) -> bool:
        return 0 <= cell[0] < self.width and 0 <= cell[1] < self.height

    def is_occupied(self, cell: typing.Tuple[int, int]) -> bool:
        """Check an (x, y) cell: off-grid cells count as occupied."""
        if not self.in_bounds(cell):
            return True
        return bool(self.blocked[cell[1], cell[0]])

    def neighbors(self, cell: typing.Tuple[int, int]) -> typing.List[typing.Tuple[int, int]]:
        """Free 4-connected neighbors of a cell, in the fixed direction order."""
        x, y = cell
        result = []
        for dx, dy in DIRECTIONS:
            neighbor = (x + dx, y + dy)
            if not self.is_occupied(neighbor):
                result.append(neighbor)
        return result

    def safe_directions(self, head: typing.Tuple[int, int]) -> typing.List[typing.Tuple[int, int]]:
        """Direction vectors from head that do not immediately collide."""
        return [direction for direction in DIRECTIONS
                if not self.is_occupied((head[0] + direction[0], head[1] + direction[1]))]


def is_occupied(position: typing.Dict, self_snake: typing.Optional[typing.Dict], game_state: typing.Dict) -> bool:
    """
    Check whether a position is blocked for movement.

    Args:
        position: Position to test
        self_snake: The snake asking (its tail segment is not an obstacle)
        game_state: Current snapshot

    Returns:
        True if off-grid, an obstacle, or any snake body segment other than our tail
    """
    return OccupancyGrid(self_snake, game_state).is_occupied(to_cell(position))


def is_safe_move(snake: typing.Dict, direction: typing.Tuple[int, int], game_state: typing.Dict) -> bool:
    """Check if moving the snake's head in direction avoids an immediate collision."""
    new_head = get_next_position(snake['head'], direction)
    return not is_occupied(new_head, snake, game_state)


def get_safe_move(grid: OccupancyGrid, head: typing.Tuple[int, int]) -> typing.Tuple[int, int]:
    """
    First occupancy-safe direction in the fixed order (right, left, down, up).

    When every neighbor is blocked the first direction is returned anyway and the
    collision is left to the host.
    """
    safe = grid.safe_directions(head)
    return safe[0] if safe else DIRECTIONS[0]
