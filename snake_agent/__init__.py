"""Autonomous snake-playing agent: A*, flood-fill survival and Hamiltonian play."""

from snake_agent.agent import (
    Difficulty,
    SnakeAgent,
    Strategy,
    create_agent,
    get_metrics,
    get_next_move,
    reset,
    set_difficulty,
)
from snake_agent.hamiltonian import generate_hamiltonian_cycle, is_closed_cycle
from snake_agent.occupancy import OccupancyGrid, is_occupied, is_safe_move
from snake_agent.pathfinding import PathCache, find_path
from snake_agent.reachability import count_reachable

__all__ = [
    "Difficulty",
    "OccupancyGrid",
    "PathCache",
    "SnakeAgent",
    "Strategy",
    "count_reachable",
    "create_agent",
    "find_path",
    "generate_hamiltonian_cycle",
    "get_metrics",
    "get_next_move",
    "is_closed_cycle",
    "is_occupied",
    "is_safe_move",
    "reset",
    "set_difficulty",
]
