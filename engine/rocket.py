"""Math rocket flight simulation.

The rocket falls under gravity toward the floor of the playable area. A
correct answer fires the thruster and counts toward the winning streak; a
wrong answer pushes the rocket down. The flight ends crashed when the
rocket crosses the floor, or won when the streak reaches the target.
Only the terminal outcome reaches scoring, through ``accuracy``.
"""

import random

from .config import (
    ROCKET_PLAYABLE_HEIGHT, ROCKET_START_RATIO, ROCKET_GRAVITY_SCALE,
    ROCKET_THRUST_SCALE, ROCKET_GRAVITY_RAMP, ROCKET_WRONG_ANSWER_PENALTY
)
from .content import MathRocketContent, MentalArithmeticContent
from .errors import InvalidStateError
from .generators import GeneratorConfig, generate_arithmetic

PLAYING = 'playing'
WON = 'won'
CRASHED = 'crashed'


class RocketFlight:
    """One flight. Heights grow downward; 0 is the ceiling."""

    def __init__(self, content: MathRocketContent, height: float = ROCKET_PLAYABLE_HEIGHT):
        self.content = content
        self.floor = height
        self.base_gravity = content.gravity * ROCKET_GRAVITY_SCALE
        self.thrust = content.thrust * ROCKET_THRUST_SCALE
        self.winning_score = content.winning_score
        self.y = height * ROCKET_START_RATIO
        self.velocity = 0.0
        self.streak = 0
        self.attempts = 0
        self.outcome = PLAYING

    @property
    def gravity(self) -> float:
        """Gravity ramps up with every correct answer."""
        return self.base_gravity * (1 + self.streak * ROCKET_GRAVITY_RAMP)

    @property
    def is_over(self) -> bool:
        return self.outcome != PLAYING

    @property
    def accuracy(self) -> float | None:
        """1.0 when won, 0.0 when crashed, None while in flight."""
        if self.outcome == WON:
            return 1.0
        if self.outcome == CRASHED:
            return 0.0
        return None

    def step(self, frames: int = 1) -> str:
        """Advance the simulation. Returns the outcome."""
        for _ in range(frames):
            if self.is_over:
                break
            self.velocity += self.gravity
            y = self.y + self.velocity
            if y > self.floor:
                self.y = self.floor
                self.outcome = CRASHED
                break
            if y < 0:
                y = 0.0
                self.velocity = 0.0
            self.y = y
        return self.outcome

    def answer(self, correct: bool) -> str:
        """Apply a player's answer. Returns the outcome."""
        if self.is_over:
            raise InvalidStateError(f"Flight already {self.outcome}")
        self.attempts += 1
        if correct:
            self.velocity = -self.thrust
            self.streak += 1
            if self.streak >= self.winning_score:
                self.outcome = WON
        else:
            self.velocity += ROCKET_WRONG_ANSWER_PENALTY
        return self.outcome

    def next_question(self, rng: random.Random = None) -> MentalArithmeticContent:
        """Generate the next question from the flight's operand range and operators."""
        config = GeneratorConfig(difficulty=self.content.difficulty or 1)
        return generate_arithmetic(config, rng,
                                   operand_range=self.content.operand_range,
                                   operators=self.content.operators)

    def to_response(self) -> dict:
        """Response payload for the math rocket evaluator."""
        return {
            'outcome': self.outcome,
            'streak': self.streak,
            'attempts': self.attempts,
        }
