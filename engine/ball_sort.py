"""Ball sort puzzle rules.

Tubes are lists of colour indexes, bottom first. A layout is solved when
every tube is either empty or full of a single colour.
"""

import random

from .config import BALL_SORT_MAX_SHUFFLE_ATTEMPTS
from .errors import GenerationExhausted
from .utils import fisher_yates


def is_solved(tubes: list[list[int]], capacity: int) -> bool:
    """Check whether every non-empty tube is full and monochrome."""
    for tube in tubes:
        if not tube:
            continue
        if len(tube) != capacity:
            return False
        if any(ball != tube[0] for ball in tube):
            return False
    return True


def solved_layout(tube_count: int, color_count: int, capacity: int) -> list[list[int]]:
    """Build the trivially solved layout: one full tube per colour, the rest empty."""
    tubes = [[color] * capacity for color in range(color_count)]
    tubes.extend([] for _ in range(tube_count - color_count))
    return tubes


def shuffle_tubes(tube_count: int, color_count: int, capacity: int,
                  rng: random.Random,
                  max_attempts: int = BALL_SORT_MAX_SHUFFLE_ATTEMPTS) -> list[list[int]]:
    """Shuffle all balls into the first ``color_count`` tubes.

    Reshuffles while the result is already solved, up to ``max_attempts``.
    A single colour can only ever be solved and is returned as is. Raises
    GenerationExhausted, carrying the last layout, when the cap is reached.

    No solvability search is done: with two spare tubes a random layout is
    solvable with overwhelming probability.
    """
    pool = [ball for tube in solved_layout(tube_count, color_count, capacity) for ball in tube]
    tubes = []
    for _ in range(max(1, max_attempts)):
        fisher_yates(pool, rng)
        tubes = [pool[i * capacity:(i + 1) * capacity] for i in range(color_count)]
        tubes.extend([] for _ in range(tube_count - color_count))
        if color_count <= 1 or not is_solved(tubes, capacity):
            return tubes
    raise GenerationExhausted(max_attempts, tubes)


def can_move(tubes: list[list[int]], source: int, target: int, capacity: int) -> bool:
    """A ball can move onto an empty tube or onto a ball of its own colour."""
    if source == target:
        return False
    if not 0 <= source < len(tubes) or not 0 <= target < len(tubes):
        return False
    from_tube, to_tube = tubes[source], tubes[target]
    if not from_tube or len(to_tube) >= capacity:
        return False
    return not to_tube or to_tube[-1] == from_tube[-1]


def apply_move(tubes: list[list[int]], source: int, target: int, capacity: int) -> list[list[int]] | None:
    """Move the top ball. Returns the new layout, or None for an illegal move."""
    if not can_move(tubes, source, target, capacity):
        return None
    moved = [list(tube) for tube in tubes]
    moved[target].append(moved[source].pop())
    return moved
