"""Configuration constants for the scoring and question engine."""

MIN_DIFFICULTY = 0
MAX_DIFFICULTY = 10

# Generator tiers
MIN_TIER = 1
MAX_TIER = 10

# Questions served per round
QUESTIONS_PER_ROUND = 3

# Used when no per-user rating is available
DEFAULT_DIFFICULTY_RATING = 1

# Brain Performance Index
BPI_ACCURACY_WEIGHT = 0.85
BPI_SPEED_WEIGHT = 0.15
BPI_GUESS_MARGIN = 0.1        # Speed only counts this far above chance
BPI_GATE_FLOOR = 0.35         # Share of the ceiling reachable at difficulty 0
BPI_GATE_EXPONENT = 1.7
BPI_LADDER_SCALE = 2000
BPI_LADDER_EXPONENT = 1.9
BPI_LADDER_OFFSET = 100

# Per-question target times (ms). None = scored without a speed term.
TARGET_TIME_PER_QUESTION_MS = {
    'mental_arithmetic': 6000,
    'mental_language_discrimination': 9000,
    'memory_matrix': None,
    'wordle': None,
}

# Ball sort
BALL_SORT_MAX_SHUFFLE_ATTEMPTS = 10
BALL_SORT_EXTRA_TUBES = 2     # Empty tubes left for maneuvering
BALL_SORT_MIN_CAPACITY = 2
BALL_SORT_MAX_CAPACITY = 12

# Word games
WORDLE_MAX_GUESSES = 6
UNSCRAMBLE_FAILURE_PENALTY = 0.1
UNSCRAMBLE_MIN_ACCURACY = 0.1

# Math rocket physics (per frame, screen units)
ROCKET_PLAYABLE_HEIGHT = 600.0
ROCKET_START_RATIO = 0.15     # Starting height as a share of the playable area
ROCKET_GRAVITY_SCALE = 0.04
ROCKET_THRUST_SCALE = 0.2
ROCKET_GRAVITY_RAMP = 0.05    # Gravity grows by this share per correct answer
ROCKET_WRONG_ANSWER_PENALTY = 1.0

# Memory matrix: tier -> (grid size, target count, display time ms)
MEMORY_MATRIX_LEVELS = {
    1: (3, 3, 2000),
    2: (3, 4, 2000),
    3: (4, 4, 2500),
    4: (4, 5, 3000),
    5: (5, 6, 4000),
    6: (5, 7, 4500),
    7: (6, 8, 5000),
    8: (6, 9, 5500),
    9: (7, 10, 6000),
    10: (7, 12, 7000),
}

# Ball sort: tier -> (color count, capacity per tube)
BALL_SORT_LEVELS = {
    1: (2, 3),
    2: (3, 3),
    3: (3, 4),
    4: (4, 4),
    5: (5, 4),
    6: (6, 4),
    7: (7, 4),
    8: (8, 4),
    9: (9, 4),
    10: (10, 5),
}

# Mental arithmetic: tier -> (operand range, operators, option count, target time ms)
ARITHMETIC_LEVELS = {
    1: ((1, 10), ['+'], 2, 6000),
    2: ((1, 10), ['+', '-'], 2, 6000),
    3: ((1, 20), ['+', '-'], 2, 6000),
    4: ((2, 12), ['+', '-', 'x'], 2, 6000),
    5: ((2, 20), ['+', '-', 'x'], 3, 6000),
    6: ((2, 20), ['+', '-', 'x', '/'], 3, 6000),
    7: ((5, 30), ['+', '-', 'x', '/'], 3, 6000),
    8: ((5, 50), ['+', '-', 'x', '/'], 4, 6000),
    9: ((10, 75), ['+', '-', 'x', '/'], 4, 6000),
    10: ((10, 99), ['+', '-', 'x', '/'], 4, 6000),
}
ARITHMETIC_MAX_DISTRACTOR_OFFSET = 5

# Stroop palette: colour name -> ink hex
STROOP_PALETTE = {
    'Red': '#FF0000',
    'Blue': '#0000FF',
    'Green': '#008000',
    'Yellow': '#FFFF00',
    'Purple': '#800080',
    'Orange': '#FFA500',
}

# Stroop: tier -> palette size, option count, incongruent rate, tasks,
# switch rate, lure rate, target time ms
STROOP_LEVELS = {
    1: {'palette': 2, 'options': 2, 'incongruent': 0.0, 'tasks': ['INK'], 'switch': 0.0, 'lure': 0.0, 'time_ms': 4500},
    2: {'palette': 3, 'options': 3, 'incongruent': 0.0, 'tasks': ['INK'], 'switch': 0.0, 'lure': 0.0, 'time_ms': 4200},
    3: {'palette': 3, 'options': 3, 'incongruent': 0.2, 'tasks': ['INK'], 'switch': 0.0, 'lure': 0.0, 'time_ms': 3800},
    4: {'palette': 4, 'options': 4, 'incongruent': 0.5, 'tasks': ['INK'], 'switch': 0.0, 'lure': 0.0, 'time_ms': 3300},
    5: {'palette': 5, 'options': 5, 'incongruent': 0.8, 'tasks': ['INK'], 'switch': 0.0, 'lure': 0.0, 'time_ms': 2800},
    6: {'palette': 6, 'options': 6, 'incongruent': 0.85, 'tasks': ['INK'], 'switch': 0.0, 'lure': 0.1, 'time_ms': 2400},
    7: {'palette': 4, 'options': 4, 'incongruent': 0.55, 'tasks': ['INK', 'WORD'], 'switch': 0.2, 'lure': 0.0, 'time_ms': 2200},
    8: {'palette': 6, 'options': 6, 'incongruent': 0.75, 'tasks': ['INK', 'WORD'], 'switch': 0.45, 'lure': 0.15, 'time_ms': 1900},
    9: {'palette': 6, 'options': 6, 'incongruent': 0.85, 'tasks': ['INK', 'WORD'], 'switch': 0.6, 'lure': 0.35, 'time_ms': 1600},
    10: {'palette': 6, 'options': 6, 'incongruent': 0.9, 'tasks': ['INK', 'WORD'], 'switch': 0.7, 'lure': 0.6, 'time_ms': 1400},
}

# Math rocket: tier -> (gravity, thrust, winning score)
MATH_ROCKET_LEVELS = {
    1: (0.3, 12, 5),
    2: (0.35, 12, 6),
    3: (0.4, 11, 7),
    4: (0.45, 11, 8),
    5: (0.5, 10, 10),
    6: (0.55, 10, 11),
    7: (0.6, 9, 12),
    8: (0.65, 9, 13),
    9: (0.7, 8, 14),
    10: (0.8, 8, 15),
}

# Odd one out: tier -> (rows, cols)
ODD_ONE_OUT_LEVELS = {
    1: (3, 3),
    2: (3, 4),
    3: (4, 4),
    4: (4, 5),
    5: (5, 5),
    6: (5, 6),
    7: (6, 6),
    8: (6, 7),
    9: (7, 7),
    10: (8, 8),
}
