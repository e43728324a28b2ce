from .content import GameType, ContentBase, validate_content, is_valid_content
from .generators import GeneratorConfig, generate, generate_many, has_generator
from .evaluators import Evaluation, evaluate, score_guess
from .scoring import calculate_bpi, target_time_for_game
from .models import AnswerRecord, RoundSessionConfig, RoundSessionState, RoundPhase, SessionSummary
from .session import RoundSession
from .interfaces import ContentSource, SessionStore, DifficultySource
from .loader import RoundQuestion, CompositeContentSource, load_round_content, prepare_round
from .rocket import RocketFlight
from .errors import (
    ValidationError, InvalidStateError, InvalidResponseError,
    RoundUnavailableError, ContentUnavailableError, GenerationExhausted, PersistenceError
)
from .config import MIN_DIFFICULTY, MAX_DIFFICULTY, MIN_TIER, MAX_TIER, DEFAULT_DIFFICULTY_RATING

__all__ = [
    'GameType', 'ContentBase', 'validate_content', 'is_valid_content',
    'GeneratorConfig', 'generate', 'generate_many', 'has_generator',
    'Evaluation', 'evaluate', 'score_guess',
    'calculate_bpi', 'target_time_for_game',
    'AnswerRecord', 'RoundSessionConfig', 'RoundSessionState', 'RoundPhase', 'SessionSummary',
    'RoundSession',
    'ContentSource', 'SessionStore', 'DifficultySource',
    'RoundQuestion', 'CompositeContentSource', 'load_round_content', 'prepare_round',
    'RocketFlight',
    'ValidationError', 'InvalidStateError', 'InvalidResponseError',
    'RoundUnavailableError', 'ContentUnavailableError', 'GenerationExhausted', 'PersistenceError',
    'MIN_DIFFICULTY', 'MAX_DIFFICULTY', 'MIN_TIER', 'MAX_TIER', 'DEFAULT_DIFFICULTY_RATING'
]
