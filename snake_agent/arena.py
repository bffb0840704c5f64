"""
Headless match runner for AI-vs-AI exhibition games.

Rules:
- All living snakes move at the same time, one cell per tick
- Eating the food grows the snake by one and respawns the food on a free cell
- The tail moves away on the same tick, so following it is legal
- Death on leaving the grid, hitting an obstacle, hitting any body, or a
  head-to-head with an equal or longer snake
- Last snake alive wins; on timeout the longest snake wins
"""

import copy
import logging
import random
import typing
from dataclasses import dataclass, field

from snake_agent.agent import SnakeAgent
from snake_agent.constants import X, Y

logger = logging.getLogger(__name__)

MAX_PLAYERS = 4


@dataclass
class ArenaConfig:
    """Board and match settings."""
    width: int = 10
    height: int = 10
    obstacles: typing.List[typing.Tuple[int, int]] = field(default_factory=list)
    max_turns: int = 500
    start_length: int = 3
    seed: typing.Optional[int] = None

    def __post_init__(self):
        if self.width < 3 or self.height < 3:
            raise ValueError("arena must be at least 3x3")
        if self.max_turns < 1:
            raise ValueError("max_turns must be >= 1")
        if self.start_length < 1:
            raise ValueError("start_length must be >= 1")
        for x, y in self.obstacles:
            if not (0 <= x < self.width and 0 <= y < self.height):
                raise ValueError(f"obstacle {(x, y)} is outside the arena")

    def spawn_points(self) -> typing.List[typing.Tuple[int, int]]:
        w, h = self.width, self.height
        return [(1, 1), (w - 2, h - 2), (1, h - 2), (w - 2, 1)]


@dataclass
class MatchResult:
    """Outcome of one match."""
    winner: typing.Optional[int]
    turns: int = 0
    lengths: typing.Dict[int, int] = field(default_factory=dict)
    food_eaten: typing.Dict[int, int] = field(default_factory=dict)
    death_reasons: typing.Dict[int, str] = field(default_factory=dict)
    decision_times_ms: typing.Dict[int, typing.List[float]] = field(default_factory=dict)

    def mean_decision_time_ms(self, player_id: int) -> float:
        times = self.decision_times_ms.get(player_id, [])
        return sum(times) / len(times) if times else 0.0


def create_snake(start_x: int, start_y: int, length: int) -> typing.Dict:
    """Create a snake with every segment stacked on the spawn cell."""
    head = {X: start_x, Y: start_y}
    return {
        'head': dict(head),
        'body': [dict(head) for _ in range(length)],
        'direction': {X: 0, Y: 0},
        'length': length,
    }


def spawn_food(snakes: typing.List[typing.Optional[typing.Dict]], config: ArenaConfig,
               rng: random.Random) -> typing.Optional[typing.Dict]:
    """Place food on a random free cell, or return None when the board is full."""
    occupied = set(config.obstacles)
    for snake in snakes:
        if snake is None:
            continue
        for seg in snake['body']:
            occupied.add((seg[X], seg[Y]))

    free = [(x, y) for y in range(config.height) for x in range(config.width) if (x, y) not in occupied]
    if not free:
        return None
    x, y = rng.choice(free)
    return {X: x, Y: y}


def make_game_state(snakes: typing.List[typing.Optional[typing.Dict]], food: typing.Dict,
                    config: ArenaConfig) -> typing.Dict:
    """Build the snapshot handed to every agent for this tick."""
    return {
        'food': dict(food),
        'width': config.width,
        'height': config.height,
        'obstacles': [{X: x, Y: y} for x, y in config.obstacles],
        'snakes': copy.deepcopy(snakes),
    }


def _death_cause(player_id: int, snakes: typing.List[typing.Optional[typing.Dict]],
                 obstacles: typing.Set[typing.Tuple[int, int]], config: ArenaConfig) -> typing.Optional[str]:
    snake = snakes[player_id]
    x, y = snake['head'][X], snake['head'][Y]

    if x < 0 or x >= config.width or y < 0 or y >= config.height:
        return "out-of-bounds"
    if (x, y) in obstacles:
        return "obstacle"

    for seg in snake['body'][1:]:
        if seg[X] == x and seg[Y] == y:
            return "self-collision"

    for other_id, other in enumerate(snakes):
        if other is None or other_id == player_id:
            continue
        for seg in other['body'][1:]:
            if seg[X] == x and seg[Y] == y:
                return "snake-collision"

    return None


def run_match(agents: typing.List[SnakeAgent], config: typing.Optional[ArenaConfig] = None) -> MatchResult:
    """
    Play one match between agents; agent i controls snake i.

    Args:
        agents: One agent per player, their player_id matching their index
        config: Board settings

    Returns:
        MatchResult with winner, turns and per-player stats
    """
    config = config or ArenaConfig()
    if not 1 <= len(agents) <= MAX_PLAYERS:
        raise ValueError(f"a match needs between 1 and {MAX_PLAYERS} agents")
    for index, agent in enumerate(agents):
        if agent.player_id != index:
            raise ValueError(f"agent at index {index} has player_id {agent.player_id}")

    rng = random.Random(config.seed)
    obstacles = set(config.obstacles)
    spawns = config.spawn_points()
    for spawn in spawns[:len(agents)]:
        if spawn in obstacles:
            raise ValueError(f"spawn point {spawn} is blocked by an obstacle")

    snakes: typing.List[typing.Optional[typing.Dict]] = [
        create_snake(spawns[i][0], spawns[i][1], config.start_length) for i in range(len(agents))
    ]
    result = MatchResult(winner=None)
    for player_id in range(len(agents)):
        result.food_eaten[player_id] = 0
        result.decision_times_ms[player_id] = []

    for agent in agents:
        agent.reset()

    food = spawn_food(snakes, config, rng)
    multiplayer = len(agents) > 1

    for turn in range(config.max_turns):
        alive = [pid for pid, snake in enumerate(snakes) if snake is not None]
        if not alive or (multiplayer and len(alive) <= 1) or food is None:
            break

        game_state = make_game_state(snakes, food, config)
        moves = {}
        for pid in alive:
            moves[pid] = agents[pid].get_next_move(game_state)
            result.decision_times_ms[pid].append(agents[pid].get_metrics()['last_decision_time_ms'])

        # Apply moves
        ate_food = False
        for pid in alive:
            snake = snakes[pid]
            move = moves[pid]
            new_head = {X: snake['head'][X] + move[X], Y: snake['head'][Y] + move[Y]}
            snake['body'].insert(0, new_head)
            snake['head'] = dict(new_head)
            snake['direction'] = dict(move)
            if new_head[X] == food[X] and new_head[Y] == food[Y]:
                snake['length'] += 1
                result.food_eaten[pid] += 1
                ate_food = True
            else:
                snake['body'].pop()

        # Check deaths against the post-move bodies
        deaths = {}
        for pid in alive:
            cause = _death_cause(pid, snakes, obstacles, config)
            if cause:
                deaths[pid] = cause

        # Head-to-head collisions
        heads: typing.Dict[typing.Tuple[int, int], typing.List[int]] = {}
        for pid in alive:
            if pid not in deaths:
                head = snakes[pid]['head']
                heads.setdefault((head[X], head[Y]), []).append(pid)
        for pids in heads.values():
            if len(pids) < 2:
                continue
            max_len = max(snakes[pid]['length'] for pid in pids)
            longest = [pid for pid in pids if snakes[pid]['length'] == max_len]
            for pid in pids:
                if pid not in longest or len(longest) > 1:
                    deaths[pid] = "head-collision"

        for pid, cause in deaths.items():
            logger.debug("Player %d eliminated on turn %d: %s", pid, turn, cause)
            result.lengths[pid] = snakes[pid]['length']
            result.death_reasons[pid] = cause
            snakes[pid] = None

        result.turns += 1
        if ate_food:
            food = spawn_food(snakes, config, rng)

    alive = [pid for pid, snake in enumerate(snakes) if snake is not None]
    for pid in alive:
        result.lengths[pid] = snakes[pid]['length']

    if len(alive) == 1:
        result.winner = alive[0]
    elif len(alive) > 1:
        max_len = max(result.lengths[pid] for pid in alive)
        longest = [pid for pid in alive if result.lengths[pid] == max_len]
        result.winner = longest[0] if len(longest) == 1 else None

    return result
