import typing
from collections import deque

from snake_agent.constants import (
    DIRECTIONS,
    FLOOD_FILL_LIMIT,
    SURVIVAL_LENGTH_RATIO,
    SURVIVAL_SPACE_RATIO,
)
from snake_agent.occupancy import OccupancyGrid, to_cell


def flood_fill(start: typing.Tuple[int, int], grid: OccupancyGrid, max_depth: int = FLOOD_FILL_LIMIT) -> int:
    """
    Count cells reachable from start, stopping once max_depth cells are counted.

    The start cell is always counted, even when it is occupied (e.g. our own head).
    """
    visited = {start}
    queue = deque([start])
    count = 0

    while queue and count < max_depth:
        cell = queue.popleft()
        count += 1

        for neighbor in grid.neighbors(cell):
            if neighbor in visited:
                continue
            visited.add(neighbor)
            queue.append(neighbor)

    return count


def count_reachable(start: typing.Dict, self_snake: typing.Optional[typing.Dict], game_state: typing.Dict) -> int:
    """
    Bounded flood fill from start over 4-connected free cells.

    Args:
        start: Position to fill from
        self_snake: Snake whose tail counts as free
        game_state: Current snapshot

    Returns:
        Number of reachable cells, capped at FLOOD_FILL_LIMIT
    """
    return flood_fill(to_cell(start), OccupancyGrid(self_snake, game_state))


def should_enter_survival_mode(snake: typing.Dict, game_state: typing.Dict,
                               grid: typing.Optional[OccupancyGrid] = None) -> bool:
    """Survival mode when open space is scarce or the snake fills half the board."""
    if grid is None:
        grid = OccupancyGrid(snake, game_state)
    total_cells = game_state['width'] * game_state['height']
    space_ratio = flood_fill(to_cell(snake['head']), grid) / total_cells
    length = snake.get('length', len(snake['body']))
    return space_ratio < SURVIVAL_SPACE_RATIO or length > total_cells * SURVIVAL_LENGTH_RATIO


def get_survival_move(grid: OccupancyGrid, head: typing.Tuple[int, int]) -> typing.Tuple[int, int]:
    """
    Pick the safe direction leading into the most open space.

    Ties keep the earlier direction in the fixed order. With no safe direction
    at all, the first direction (right) is returned.
    """
    best_move = DIRECTIONS[0]
    max_space = -1

    for direction in grid.safe_directions(head):
        new_head = (head[0] + direction[0], head[1] + direction[1])
        space = flood_fill(new_head, grid)
        if space > max_space:
            max_space = space
            best_move = direction

    return best_move
