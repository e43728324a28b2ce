"""Domain models for rounds and their persisted records."""

import math
from dataclasses import dataclass, field, asdict
from enum import Enum

from .config import MIN_DIFFICULTY, MAX_DIFFICULTY


def _in_range(name: str, value, low: float, high: float) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number, got {value!r}")
    if math.isnan(value) or not low <= value <= high:
        raise ValueError(f"{name} must be in [{low}, {high}], got {value}")


@dataclass(frozen=True)
class AnswerRecord:
    """One answered question. Immutable once recorded."""
    accuracy: float
    response_time_ms: float
    question_id: str | None = None
    user_response: dict | None = None
    generated_content: dict | None = None

    def __post_init__(self):
        _in_range('accuracy', self.accuracy, 0.0, 1.0)
        _in_range('response_time_ms', self.response_time_ms, 0, math.inf)

    @property
    def is_correct(self) -> bool:
        return self.accuracy == 1.0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class RoundSessionConfig:
    game_id: str
    user_id: str
    total_questions: int
    avg_question_difficulty: float = 1
    difficulty_rating_used: float = 1
    metadata: dict | None = None
    game_name: str | None = None
    category_name: str | None = None

    def __post_init__(self):
        if not self.game_id:
            raise ValueError("game_id is required")
        if not self.user_id:
            raise ValueError("user_id is required")
        if isinstance(self.total_questions, bool) or not isinstance(self.total_questions, int) \
                or self.total_questions <= 0:
            raise ValueError(f"total_questions must be a positive integer, got {self.total_questions!r}")
        _in_range('avg_question_difficulty', self.avg_question_difficulty, MIN_DIFFICULTY, MAX_DIFFICULTY)
        _in_range('difficulty_rating_used', self.difficulty_rating_used, MIN_DIFFICULTY, MAX_DIFFICULTY)


class RoundPhase(str, Enum):
    IDLE = 'idle'
    PLAYING = 'playing'
    FINISHED = 'finished'


@dataclass(frozen=True)
class RoundSessionState:
    """Read-only view of a round session."""
    phase: RoundPhase = RoundPhase.IDLE
    score: int | None = None
    start_time: float | None = None
    duration_ms: int = 0
    correct_count: int = 0
    total_questions: int = 0

    @property
    def is_playing(self) -> bool:
        return self.phase == RoundPhase.PLAYING

    @property
    def is_finished(self) -> bool:
        return self.phase == RoundPhase.FINISHED

    def to_dict(self) -> dict:
        return {
            'phase': self.phase.value,
            'is_playing': self.is_playing,
            'is_finished': self.is_finished,
            'score': self.score,
            'start_time': self.start_time,
            'duration_ms': self.duration_ms,
            'correct_count': self.correct_count,
            'total_questions': self.total_questions,
        }


@dataclass(frozen=True)
class SessionSummary:
    """Snapshot of a finished round, handed to storage."""
    user_id: str
    game_id: str
    difficulty_rating_used: float
    avg_question_difficulty: float
    avg_response_time_ms: float | None
    score: int
    duration_seconds: float
    correct_count: int
    total_questions: int
    metadata: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return asdict(self)
