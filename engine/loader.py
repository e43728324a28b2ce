"""Loading validated content for a round.

Fetched items are validated one by one and invalid ones are dropped. When
nothing survives, the round falls back to procedural generation if the game
has a generator, otherwise the round cannot start.
"""

import logging
import math
import random
from dataclasses import dataclass

from .config import DEFAULT_DIFFICULTY_RATING, MIN_DIFFICULTY, MAX_DIFFICULTY
from .content import ContentBase, validate_content
from .errors import ContentUnavailableError, ValidationError
from .generators import GeneratorConfig, generate_many, has_generator
from .interfaces import ContentSource, DifficultySource
from .models import RoundSessionConfig
from .utils import clamp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoundQuestion:
    content: ContentBase
    difficulty: float
    id: str | None = None

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'difficulty': self.difficulty,
            'content': self.content.to_dict(),
        }


class CompositeContentSource(ContentSource):
    """Tries each source in order and returns the first non-empty batch."""

    def __init__(self, sources: list[ContentSource]):
        self.sources = list(sources)

    def fetch_questions(self, game_id: str, count: int, difficulty: float | None = None) -> list[dict]:
        for source in self.sources:
            try:
                items = source.fetch_questions(game_id, count, difficulty=difficulty)
            except Exception as e:
                logger.warning(f"{type(source).__name__} failed for {game_id}: {e}")
                continue
            if items:
                return items
        return []


def _question_difficulty(item: dict, content: ContentBase) -> float:
    value = item.get('difficulty')
    if value is None:
        value = content.difficulty
    if value is None:
        return DEFAULT_DIFFICULTY_RATING
    return clamp(float(value), MIN_DIFFICULTY, MAX_DIFFICULTY)


def validate_items(game_id: str, items: list[dict]) -> list[RoundQuestion]:
    """Keep only the items whose content validates for this game."""
    questions = []
    for item in items or []:
        if not isinstance(item, dict):
            logger.warning(f"Dropping non-object item for {game_id}")
            continue
        try:
            content = validate_content(item.get('content'))
        except ValidationError as e:
            logger.warning(f"Dropping invalid {game_id} question {item.get('id')}: {e}")
            continue
        if content.type != game_id:
            logger.warning(f"Dropping {content.type} question {item.get('id')} served for {game_id}")
            continue
        question_id = item.get('id')
        questions.append(RoundQuestion(
            content=content,
            difficulty=_question_difficulty(item, content),
            id=str(question_id) if question_id is not None else None,
        ))
    return questions


def load_round_content(game_id: str, count: int,
                       source: ContentSource | None = None,
                       difficulty: float = DEFAULT_DIFFICULTY_RATING,
                       seed: str | None = None,
                       rng: random.Random = None) -> list[RoundQuestion]:
    """Fetch and validate up to count questions, generating when none are usable.

    Raises ContentUnavailableError when nothing valid can be sourced and the
    game has no generator.
    """
    if count <= 0:
        raise ValueError(f"count must be positive, got {count}")

    questions = []
    if source is not None:
        try:
            items = source.fetch_questions(game_id, count, difficulty=difficulty)
        except Exception as e:
            logger.warning(f"Content source failed for {game_id}: {e}")
            items = []
        questions = validate_items(game_id, items)[:count]

    if questions:
        return questions

    if not has_generator(game_id):
        raise ContentUnavailableError(game_id)

    logger.info(f"No stored content for {game_id}; generating {count} at difficulty {difficulty}")
    generated = generate_many(game_id, GeneratorConfig(difficulty=difficulty, seed=seed), count, rng)
    return [RoundQuestion(content=c, difficulty=float(c.difficulty)) for c in generated]


def resolve_difficulty_rating(source: DifficultySource | None, user_id: str, game_id: str) -> float:
    """The user's rating for a game, or the default when there is none."""
    if source is None:
        return DEFAULT_DIFFICULTY_RATING
    try:
        rating = source.get_difficulty_rating(user_id, game_id)
    except Exception as e:
        logger.warning(f"Difficulty lookup failed for {user_id}/{game_id}: {e}")
        return DEFAULT_DIFFICULTY_RATING
    if rating is None or math.isnan(rating):
        return DEFAULT_DIFFICULTY_RATING
    return clamp(float(rating), MIN_DIFFICULTY, MAX_DIFFICULTY)


def average_difficulty(questions: list[RoundQuestion]) -> float:
    if not questions:
        return DEFAULT_DIFFICULTY_RATING
    return clamp(sum(q.difficulty for q in questions) / len(questions), MIN_DIFFICULTY, MAX_DIFFICULTY)


def prepare_round(game_id: str, user_id: str, count: int,
                  content_source: ContentSource | None = None,
                  difficulty_source: DifficultySource | None = None,
                  seed: str | None = None,
                  metadata: dict | None = None,
                  game_name: str | None = None,
                  category_name: str | None = None) -> tuple[RoundSessionConfig, list[RoundQuestion]]:
    """Resolve the user's rating, load the questions and build the round config."""
    rating = resolve_difficulty_rating(difficulty_source, user_id, game_id)
    questions = load_round_content(game_id, count, content_source, difficulty=rating, seed=seed)
    config = RoundSessionConfig(
        game_id=game_id,
        user_id=user_id,
        total_questions=len(questions),
        avg_question_difficulty=average_difficulty(questions),
        difficulty_rating_used=rating,
        metadata=metadata,
        game_name=game_name,
        category_name=category_name,
    )
    return config, questions
