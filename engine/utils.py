"""Utility functions for the engine."""

import math
import random

from .config import MIN_TIER, MAX_TIER


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value into [low, high]."""
    return max(low, min(high, value))


def clamp01(value: float) -> float:
    return clamp(value, 0.0, 1.0)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up."""
    return int(math.floor(value + 0.5))


def difficulty_to_tier(difficulty: float) -> int:
    """Map a continuous difficulty onto a discrete generator tier.

    Rounds to the nearest integer and clamps to [MIN_TIER, MAX_TIER].
    """
    if difficulty is None or math.isnan(difficulty):
        return MIN_TIER
    return round_half_up(clamp(difficulty, MIN_TIER, MAX_TIER))


def make_rng(seed: str | None = None) -> random.Random:
    """Seeded generators replay the same content."""
    return random.Random(seed) if seed is not None else random.Random()


def fisher_yates(items: list, rng: random.Random) -> list:
    """Shuffle items in place and return them."""
    for i in range(len(items) - 1, 0, -1):
        j = rng.randint(0, i)
        items[i], items[j] = items[j], items[i]
    return items
