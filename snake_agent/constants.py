"""
Tuning constants for the snake agent.

The search caps are hard ceilings: a single decision has to finish inside one
simulation tick, so the flood fill and A* never explore past them.
"""

# Coordinate keys
X = 'x'
Y = 'y'

# Direction vectors in the fixed fallback enumeration order
RIGHT = (1, 0)
LEFT = (-1, 0)
DOWN = (0, 1)
UP = (0, -1)

DIRECTIONS = [RIGHT, LEFT, DOWN, UP]

DEFAULT_DIRECTION = (0, 1)  # Returned when our own snake is missing from the snapshot

# Search caps
FLOOD_FILL_LIMIT = 100
ASTAR_MAX_EXPANSIONS = 4000

# Path cache
PATH_CACHE_VALID_MS = 500

# Hamiltonian cycle is only generated up to this size per dimension
HAMILTONIAN_MAX_DIMENSION = 20

# Survival mode thresholds (fractions of total grid cells)
SURVIVAL_SPACE_RATIO = 0.3
SURVIVAL_LENGTH_RATIO = 0.5
