"""
Hamiltonian cycle generation for perfect-play mode.

Pattern for a 6x4 grid (even row count):
- Row 0: go right from (0,0) to (5,0)
- Row 1: go left from (5,1) to (1,1), stopping before column 0
- Row 2: go right from (1,2) to (5,2)
- Row 3: go left from (5,3) to (1,3)
- Column 0: walk up from (0,3) to (0,1), next to the start

Column 0 is reserved for the return path, which is what closes the loop. With
an odd row count the same tour is built on the transposed grid. When both
dimensions are odd no Hamiltonian cycle exists, so the plain zigzag path is
returned and flagged as open.
"""

import logging
import typing

from snake_agent.constants import HAMILTONIAN_MAX_DIMENSION
from snake_agent.occupancy import manhattan_distance

logger = logging.getLogger(__name__)

Cell = typing.Tuple[int, int]


def _return_column_tour(width: int, height: int) -> typing.List[Cell]:
    cycle = [(x, 0) for x in range(width)]

    # Snake through the interior, skipping column 0
    for y in range(1, height):
        if y % 2 == 1:
            cycle.extend((x, y) for x in range(width - 1, 0, -1))
        else:
            cycle.extend((x, y) for x in range(1, width))

    cycle.extend((0, y) for y in range(height - 1, 0, -1))
    return cycle


def _zigzag_path(width: int, height: int) -> typing.List[Cell]:
    path = []
    for y in range(height):
        xs = range(width) if y % 2 == 0 else range(width - 1, -1, -1)
        path.extend((x, y) for x in xs)
    return path


def generate_hamiltonian_cycle(width: int, height: int,
                               max_dimension: int = HAMILTONIAN_MAX_DIMENSION) -> typing.List[Cell]:
    """
    Build a tour visiting every cell of a width x height grid exactly once.

    Args:
        width: Grid width
        height: Grid height
        max_dimension: Larger grids are skipped for performance

    Returns:
        List of (x, y) cells in visiting order, or an empty list for oversized grids
    """
    if width > max_dimension or height > max_dimension or width < 1 or height < 1:
        return []

    if height % 2 == 0 and width >= 2:
        cycle = _return_column_tour(width, height)
    elif width % 2 == 0 and height >= 2:
        cycle = [(x, y) for y, x in _return_column_tour(height, width)]
    else:
        cycle = _zigzag_path(width, height)

    if not is_closed_cycle(cycle, width, height):
        logger.warning("Hamiltonian tour for %dx%d grid does not close; wrap-around is not a legal move",
                       width, height)
    return cycle


def is_closed_cycle(cycle: typing.List[Cell], width: int, height: int) -> bool:
    """
    Validate a tour: every cell exactly once, consecutive cells adjacent,
    and the last cell adjacent to the first.
    """
    if len(cycle) != width * height or len(set(cycle)) != len(cycle):
        return False
    if any(not (0 <= x < width and 0 <= y < height) for x, y in cycle):
        return False
    if len(cycle) < 2:
        return False
    for i, cell in enumerate(cycle):
        if manhattan_distance(cell, cycle[(i + 1) % len(cycle)]) != 1:
            return False
    return True


def next_cycle_cell(cycle: typing.List[Cell], cycle_index: typing.Dict[Cell, int],
                    head: Cell) -> typing.Tuple[int, typing.Optional[Cell]]:
    """
    Locate head on the cycle and return (index, next cell).

    Returns (-1, None) when the head is not on the cycle.
    """
    index = cycle_index.get(head, -1)
    if index == -1:
        return -1, None
    return index, cycle[(index + 1) % len(cycle)]
