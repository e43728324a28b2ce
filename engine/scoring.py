"""Brain Performance Index (BPI).

One scoring function shared by every game. Only the inputs differ between
games: the difficulty of the questions played and, for games with a time
target, the average response time.

    A     = clamp01(accuracy)
    S     = clamp01((target - actual) / target)   speed, only when A > guess_rate + 0.1
    base  = 0.85 * A + 0.15 * S                   with speed, else A
    gate  = 0.35 + 0.65 * (difficulty / 10) ** 1.7
    p     = clamp01(base * gate)
    BPI   = round(2000 * p ** 1.9) + 100

The gate caps easy rounds well below the ceiling, so a perfect easy round
cannot outscore a good hard one. The ladder exponent stretches the top end.
Scores always fall in [100, 2100].
"""

from .config import (
    MAX_DIFFICULTY, TARGET_TIME_PER_QUESTION_MS,
    BPI_ACCURACY_WEIGHT, BPI_SPEED_WEIGHT, BPI_GUESS_MARGIN,
    BPI_GATE_FLOOR, BPI_GATE_EXPONENT,
    BPI_LADDER_SCALE, BPI_LADDER_EXPONENT, BPI_LADDER_OFFSET
)
from .utils import clamp01, round_half_up


def speed_ratio(target_time_ms: float, actual_time_ms: float) -> float:
    """Share of the target time saved, bounded to [0, 1]."""
    if target_time_ms <= 0:
        return 0.0
    return clamp01((target_time_ms - actual_time_ms) / target_time_ms)


def difficulty_gate(difficulty: float) -> float:
    """Share of the score ceiling unlocked at this difficulty."""
    d_norm = clamp01(difficulty / MAX_DIFFICULTY)
    return BPI_GATE_FLOOR + (1 - BPI_GATE_FLOOR) * d_norm ** BPI_GATE_EXPONENT


def calculate_bpi(accuracy: float, difficulty: float,
                  target_time_ms: float | None = None,
                  actual_time_ms: float | None = None,
                  guess_rate: float = 0.0,
                  use_speed: bool = False) -> int:
    """Score a round. Returns an integer in [100, 2100]."""
    a = clamp01(accuracy)

    s = 0.0
    if (use_speed and target_time_ms is not None and actual_time_ms is not None
            and a > guess_rate + BPI_GUESS_MARGIN):
        s = speed_ratio(target_time_ms, actual_time_ms)

    base = BPI_ACCURACY_WEIGHT * a + BPI_SPEED_WEIGHT * s if use_speed else a
    p = clamp01(base * difficulty_gate(difficulty))
    return round_half_up(BPI_LADDER_SCALE * p ** BPI_LADDER_EXPONENT) + BPI_LADDER_OFFSET


def target_time_for_game(game_id: str) -> int | None:
    """Per-question target time for a game, or None if it has no speed term."""
    return TARGET_TIME_PER_QUESTION_MS.get(game_id)
