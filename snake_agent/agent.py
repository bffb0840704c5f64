"""
Snake-playing agent for AI opponents.

This module combines the strategies into one decision per tick:
- Greedy move toward food (simple)
- A* pathfinding with a short-lived path cache
- Flood-fill survival scoring
- Hamiltonian cycle following for perfect play

The difficulty tier picks the base strategy and the chance of preferring the
Hamiltonian cycle. Every call returns one unit direction vector; there is no
"no move" outcome.
"""

import logging
import random
import time
import typing
from enum import Enum

from snake_agent.constants import X, Y, DEFAULT_DIRECTION, PATH_CACHE_VALID_MS
from snake_agent.hamiltonian import generate_hamiltonian_cycle, is_closed_cycle, next_cycle_cell
from snake_agent.occupancy import (
    OccupancyGrid,
    direction_between,
    get_safe_move,
    is_unit_step,
    to_cell,
)
from snake_agent.pathfinding import PathCache, astar
from snake_agent.reachability import get_survival_move, should_enter_survival_mode

logger = logging.getLogger(__name__)


class Difficulty(Enum):
    EASY = 'Easy'
    MEDIUM = 'Medium'
    HARD = 'Hard'
    EXPERT = 'Expert'
    IMPOSSIBLE = 'Impossible'

    @classmethod
    def parse(cls, tier: typing.Union['Difficulty', str]) -> 'Difficulty':
        """Accept a member, its name or its value, case-insensitively."""
        if isinstance(tier, cls):
            return tier
        for member in cls:
            if str(tier).lower() in (member.name.lower(), member.value.lower()):
                return member
        raise ValueError(f"Unknown difficulty tier: {tier!r}")


class Strategy(Enum):
    SIMPLE = 'simple'
    ASTAR = 'astar'
    SURVIVAL = 'survival'
    HAMILTONIAN = 'hamiltonian'


# Base strategy per tier
TIER_STRATEGY = {
    Difficulty.EASY: Strategy.SIMPLE,
    Difficulty.MEDIUM: Strategy.ASTAR,
    Difficulty.HARD: Strategy.ASTAR,
    Difficulty.EXPERT: Strategy.SURVIVAL,
    Difficulty.IMPOSSIBLE: Strategy.HAMILTONIAN,
}

# Chance of preferring the Hamiltonian cycle, drawn once per set_difficulty
TIER_HAMILTONIAN_PROBABILITY = {
    Difficulty.EASY: 0.0,
    Difficulty.MEDIUM: 0.0,
    Difficulty.HARD: 0.3,
    Difficulty.EXPERT: 0.7,
    Difficulty.IMPOSSIBLE: 1.0,
}


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def _as_position(direction: typing.Tuple[int, int]) -> typing.Dict:
    return {X: direction[0], Y: direction[1]}


class SnakeAgent:
    """
    One AI-controlled competitor.

    The Hamiltonian cycle is computed once at construction. The path cache is
    the only state carried between ticks besides the cycle index.
    """

    def __init__(self, player_id: int, grid_width: int, grid_height: int,
                 difficulty: typing.Union[Difficulty, str] = Difficulty.MEDIUM,
                 rng: typing.Optional[random.Random] = None,
                 clock: typing.Optional[typing.Callable[[], float]] = None):
        """
        Initialize the agent.

        Args:
            player_id: Index of our snake in the snapshot's snakes list
            grid_width: Grid width, fixed for the match
            grid_height: Grid height, fixed for the match
            difficulty: Initial difficulty tier
            rng: Random source for the Hamiltonian draw (seed it for reproducibility)
            clock: Callable returning seconds, used for path cache expiry
        """
        if grid_width < 1 or grid_height < 1:
            raise ValueError("grid dimensions must be >= 1")

        self.player_id = player_id
        self.grid_width = grid_width
        self.grid_height = grid_height
        self.rng = rng or random.Random()
        self.path_cache = PathCache(PATH_CACHE_VALID_MS, clock)

        self.hamiltonian_cycle = generate_hamiltonian_cycle(grid_width, grid_height)
        self.cycle_positions = {cell: i for i, cell in enumerate(self.hamiltonian_cycle)}
        self.cycle_closed = is_closed_cycle(self.hamiltonian_cycle, grid_width, grid_height)
        self.cycle_index = 0

        self.difficulty = Difficulty.MEDIUM
        self.strategy = Strategy.ASTAR
        self.use_hamiltonian = False
        self.survival_mode = False

        # Performance tracking
        self.decision_time_ms = 0.0
        self.path_length = 0
        self.path_searches = 0
        self.cache_hits = 0

        self.set_difficulty(difficulty)

    def set_difficulty(self, difficulty: typing.Union[Difficulty, str]):
        """Set the tier, derive its strategy and draw the Hamiltonian flag once."""
        self.difficulty = Difficulty.parse(difficulty)
        self.strategy = TIER_STRATEGY[self.difficulty]
        self.use_hamiltonian = self.rng.random() < TIER_HAMILTONIAN_PROBABILITY[self.difficulty]
        logger.debug("Player %d difficulty=%s strategy=%s use_hamiltonian=%s",
                     self.player_id, self.difficulty.value, self.strategy.value, self.use_hamiltonian)

    def _own_snake(self, game_state: typing.Dict) -> typing.Optional[typing.Dict]:
        snakes = game_state.get('snakes', [])
        if not 0 <= self.player_id < len(snakes):
            return None
        snake = snakes[self.player_id]
        if not snake or not snake.get('body'):
            return None
        return snake

    def get_next_move(self, game_state: typing.Dict) -> typing.Dict:
        """
        Decide the direction for this tick.

        Args:
            game_state: Read-only snapshot for the current tick

        Returns:
            One of {'x': 1, 'y': 0}, {'x': -1, 'y': 0}, {'x': 0, 'y': 1}, {'x': 0, 'y': -1}
        """
        start_time = time.perf_counter()
        snake = self._own_snake(game_state)

        if snake is None:
            return _as_position(DEFAULT_DIRECTION)

        grid = OccupancyGrid(snake, game_state)
        self.survival_mode = should_enter_survival_mode(snake, game_state, grid)

        if self.use_hamiltonian and not self.survival_mode:
            direction = self._hamiltonian_move(snake, game_state, grid)
        else:
            direction = self._dispatch(self.strategy, snake, game_state, grid)

        self.decision_time_ms = (time.perf_counter() - start_time) * 1000.0
        logger.debug("Player %d move %s | Strategy: %s | Survival: %s | %.2fms",
                     self.player_id, direction, self.strategy.value, self.survival_mode,
                     self.decision_time_ms)
        return _as_position(direction)

    def _dispatch(self, strategy: Strategy, snake: typing.Dict, game_state: typing.Dict,
                  grid: OccupancyGrid) -> typing.Tuple[int, int]:
        if strategy == Strategy.SIMPLE:
            return self._simple_move(snake, game_state, grid)
        elif strategy == Strategy.ASTAR:
            return self._astar_move(snake, game_state, grid)
        elif strategy == Strategy.SURVIVAL:
            return get_survival_move(grid, to_cell(snake['head']))
        elif strategy == Strategy.HAMILTONIAN:
            return self._hamiltonian_move(snake, game_state, grid)
        return self._simple_move(snake, game_state, grid)

    def _simple_move(self, snake: typing.Dict, game_state: typing.Dict,
                     grid: OccupancyGrid) -> typing.Tuple[int, int]:
        """Greedy step along the axis with the longer distance to food."""
        head = to_cell(snake['head'])
        food = to_cell(game_state['food'])
        dx = food[0] - head[0]
        dy = food[1] - head[1]

        if abs(dx) > abs(dy):
            direction = (_sign(dx), 0)
        else:
            direction = (0, _sign(dy))

        if is_unit_step(direction) and not grid.is_occupied((head[0] + direction[0], head[1] + direction[1])):
            return direction

        # Direct step is blocked, try the alternatives in order
        return get_safe_move(grid, head)

    def _astar_move(self, snake: typing.Dict, game_state: typing.Dict,
                    grid: OccupancyGrid) -> typing.Tuple[int, int]:
        head = to_cell(snake['head'])
        food = to_cell(game_state['food'])
        key = PathCache.make_key(head, food)

        cached_path = self.path_cache.get(key)
        if cached_path is not None and len(cached_path) > 1:
            if not grid.is_occupied(cached_path[1]):
                self.cache_hits += 1
                return direction_between(head, cached_path[1])
            # The board moved under the cached path
            self.path_cache.discard(key)

        path = astar(head, food, grid)
        self.path_searches += 1

        if len(path) > 1:
            self.path_cache.put(key, path)
            self.path_length = len(path)
            return direction_between(head, path[1])

        logger.debug("Player %d: no path to food, taking any safe move", self.player_id)
        return get_safe_move(grid, head)

    def _hamiltonian_move(self, snake: typing.Dict, game_state: typing.Dict,
                          grid: OccupancyGrid) -> typing.Tuple[int, int]:
        head = to_cell(snake['head'])

        if not self.hamiltonian_cycle:
            return get_survival_move(grid, head)

        index, next_cell = next_cycle_cell(self.hamiltonian_cycle, self.cycle_positions, head)
        if next_cell is None:
            logger.debug("Player %d off the cycle at %s, rejoining with A*", self.player_id, head)
            return self._astar_move(snake, game_state, grid)

        self.cycle_index = index
        direction = direction_between(head, next_cell)
        if not is_unit_step(direction) or grid.is_occupied(next_cell):
            # Open tour wrap-around, or the next cycle cell is blocked
            return get_survival_move(grid, head)
        return direction

    def get_metrics(self) -> typing.Dict:
        """Diagnostics for the last decision; not used for play."""
        return {
            'difficulty': self.difficulty.value,
            'strategy': self.strategy.value,
            'last_decision_time_ms': self.decision_time_ms,
            'last_path_length': self.path_length,
            'use_hamiltonian': self.use_hamiltonian,
            'survival_mode': self.survival_mode,
            'path_searches': self.path_searches,
            'cache_hits': self.cache_hits,
        }

    def reset(self):
        """Clear per-match state and metrics; the cycle and difficulty are kept."""
        self.path_cache.clear()
        self.cycle_index = 0
        self.survival_mode = False
        self.decision_time_ms = 0.0
        self.path_length = 0
        self.path_searches = 0
        self.cache_hits = 0


def create_agent(player_id: int, grid_width: int, grid_height: int,
                 difficulty: typing.Union[Difficulty, str] = Difficulty.MEDIUM,
                 seed: typing.Optional[int] = None) -> SnakeAgent:
    """Create an agent; pass seed for a reproducible Hamiltonian draw."""
    return SnakeAgent(player_id, grid_width, grid_height, difficulty=difficulty, rng=random.Random(seed))


def set_difficulty(agent: SnakeAgent, tier: typing.Union[Difficulty, str]):
    agent.set_difficulty(tier)


def get_next_move(agent: SnakeAgent, game_state: typing.Dict) -> typing.Dict:
    return agent.get_next_move(game_state)


def get_metrics(agent: SnakeAgent) -> typing.Dict:
    return agent.get_metrics()


def reset(agent: SnakeAgent):
    agent.reset()
