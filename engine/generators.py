"""Procedural content generators.

Each generator maps a difficulty onto a tier and builds a content instance
that satisfies its schema. Generators never raise for a numeric difficulty:
out-of-range and fractional values are rounded and clamped to a tier.
Passing a seed in the config replays the same content.
"""

import logging
import random
from dataclasses import dataclass

from .ball_sort import shuffle_tubes
from .config import (
    MEMORY_MATRIX_LEVELS, BALL_SORT_LEVELS, BALL_SORT_EXTRA_TUBES,
    ARITHMETIC_LEVELS, ARITHMETIC_MAX_DISTRACTOR_OFFSET,
    STROOP_PALETTE, STROOP_LEVELS, MATH_ROCKET_LEVELS, ODD_ONE_OUT_LEVELS,
    WORDLE_MAX_GUESSES
)
from .content import (
    GameType, apply_operator, Cell, GridSize,
    MentalArithmeticContent, MemoryMatrixContent, MentalLanguageDiscriminationContent,
    WordleContent, BallSortContent, StroopClashContent, WordUnscrambleContent,
    MathRocketContent, OddOneOutContent
)
from .errors import GenerationExhausted
from .utils import difficulty_to_tier, fisher_yates, make_rng
from .wordbank import (
    LANGUAGE_QUESTIONS, UNSCRAMBLE_WORDS, UNSCRAMBLE_LENGTH_BY_TIER,
    WORDLE_WORDS, WORDLE_BAND_BY_TIER, ODD_ONE_OUT_PAIRS
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratorConfig:
    """Input shared by every generator."""
    difficulty: float = 1
    seed: str | None = None

    @property
    def tier(self) -> int:
        return difficulty_to_tier(self.difficulty)


def _rng(config: GeneratorConfig, rng: random.Random | None) -> random.Random:
    return rng if rng is not None else make_rng(config.seed)


def generate_memory_matrix(config: GeneratorConfig, rng: random.Random = None) -> MemoryMatrixContent:
    """Pick distinct target cells on a square grid sized by tier."""
    rng = _rng(config, rng)
    tier = config.tier
    grid, count, time_ms = MEMORY_MATRIX_LEVELS[tier]
    count = min(count, grid * grid)
    cells = rng.sample(range(grid * grid), count)
    return MemoryMatrixContent(
        type='memory_matrix',
        grid_size=GridSize(rows=grid, cols=grid),
        target_count=count,
        display_time_ms=time_ms,
        targets=[Cell(row=i // grid, col=i % grid) for i in cells],
        difficulty=tier,
        target_time_ms=time_ms,
    )


def generate_ball_sort(config: GeneratorConfig, rng: random.Random = None) -> BallSortContent:
    """Shuffle a solved layout into an unsolved one, leaving spare tubes empty."""
    rng = _rng(config, rng)
    tier = config.tier
    color_count, capacity = BALL_SORT_LEVELS[tier]
    tube_count = color_count + BALL_SORT_EXTRA_TUBES
    try:
        tubes = shuffle_tubes(tube_count, color_count, capacity, rng)
    except GenerationExhausted as e:
        logger.warning(f"Ball sort tier {tier}: {e}; using last attempt")
        tubes = e.best_attempt
    return BallSortContent(
        type='ball_sort',
        tube_count=tube_count,
        capacity_per_tube=capacity,
        color_count=color_count,
        tubes=tubes,
        difficulty=tier,
    )


def _distractors(answer: int, count: int, rng: random.Random) -> list[int]:
    values = set()
    while len(values) < count:
        offset = rng.randint(1, ARITHMETIC_MAX_DISTRACTOR_OFFSET)
        values.add(answer + offset if rng.random() > 0.5 else answer - offset)
    return list(values)


def generate_arithmetic(config: GeneratorConfig, rng: random.Random = None,
                        operand_range: list[int] | None = None,
                        operators: list[str] | None = None) -> MentalArithmeticContent:
    """Build a two-operand question with shuffled multiple-choice options.

    For division the dividend is derived as ``answer * divisor`` so the
    result is always an integer.
    """
    rng = _rng(config, rng)
    tier = config.tier
    (low, high), tier_operators, option_count, time_ms = ARITHMETIC_LEVELS[tier]
    if operand_range is not None:
        low, high = sorted(operand_range)
    operators = list(operators or tier_operators)

    operator = rng.choice(operators)
    if operator == '/' and low == high == 0:
        operator = '+'
    a = rng.randint(low, high)
    b = rng.randint(low, high)

    if operator == '/':
        while b == 0:
            b = rng.randint(low, high)
        left, right, answer = a * b, b, a
    else:
        left, right = a, b
        answer = int(apply_operator(a, operator, b))

    options = [answer] + _distractors(answer, option_count - 1, rng)
    rng.shuffle(options)
    return MentalArithmeticContent(
        type='mental_arithmetic',
        left=left,
        right=right,
        operator=operator,
        answer=answer,
        options=options,
        operand_range=[low, high],
        operators=operators,
        difficulty=tier,
        target_time_ms=time_ms,
    )


def scramble_word(word: str, rng: random.Random) -> str:
    """Shuffle letters until the arrangement differs from the word.

    Words with a single distinct letter have no other arrangement and are
    returned unchanged.
    """
    word = word.upper()
    letters = list(word)
    if len(set(letters)) < 2:
        return word
    while True:
        fisher_yates(letters, rng)
        scrambled = ''.join(letters)
        if scrambled != word:
            return scrambled


def generate_word_unscramble(config: GeneratorConfig, rng: random.Random = None,
                             word: str | None = None, hint: str | None = None) -> WordUnscrambleContent:
    rng = _rng(config, rng)
    tier = config.tier
    if word is None:
        word, hint = rng.choice(UNSCRAMBLE_WORDS[UNSCRAMBLE_LENGTH_BY_TIER[tier]])
    return WordUnscrambleContent(
        type='word_unscramble',
        word=word.upper(),
        hint=hint,
        scrambled=scramble_word(word, rng),
        difficulty=tier,
    )


def generate_wordle(config: GeneratorConfig, rng: random.Random = None,
                    word: str | None = None) -> WordleContent:
    rng = _rng(config, rng)
    tier = config.tier
    if word is None:
        word = rng.choice(WORDLE_WORDS[WORDLE_BAND_BY_TIER[tier]])
    return WordleContent(
        type='wordle',
        word=word.upper(),
        max_guesses=WORDLE_MAX_GUESSES,
        difficulty=tier,
    )


def generate_language_discrimination(config: GeneratorConfig,
                                     rng: random.Random = None) -> MentalLanguageDiscriminationContent:
    """Draw a sentence from the bank band closest to the tier."""
    rng = _rng(config, rng)
    tier = config.tier
    nearest = min(abs(band - tier) for band, *_ in LANGUAGE_QUESTIONS)
    candidates = [q for q in LANGUAGE_QUESTIONS if abs(q[0] - tier) == nearest]
    _, parts, options, answer = rng.choice(candidates)
    options = list(options)
    rng.shuffle(options)
    return MentalLanguageDiscriminationContent(
        type='mental_language_discrimination',
        sentence_parts=list(parts),
        options=options,
        answer=answer,
        difficulty=tier,
    )


def generate_stroop_trial(config: GeneratorConfig, rng: random.Random = None,
                          previous_task: str | None = None) -> StroopClashContent:
    """Build one colour/word trial.

    The task may switch from ``previous_task``; incongruent trials force the
    ink to differ from the word; a lure adds the other attribute's value to
    the options. Options always hold the correct value once, no duplicates.
    """
    rng = _rng(config, rng)
    tier = config.tier
    level = STROOP_LEVELS[tier]
    palette = rng.sample(list(STROOP_PALETTE.items()), level['palette'])

    tasks = level['tasks']
    if len(tasks) > 1 and previous_task in tasks:
        if rng.random() < level['switch']:
            task = 'WORD' if previous_task == 'INK' else 'INK'
        else:
            task = previous_task
    elif len(tasks) > 1:
        task = rng.choice(tasks)
    else:
        task = tasks[0]

    word_name, word_hex = rng.choice(palette)
    ink_name, ink_hex = word_name, word_hex
    if rng.random() < level['incongruent']:
        ink_name, ink_hex = rng.choice([p for p in palette if p[0] != word_name])

    correct = ink_name if task == 'INK' else word_name
    options = [correct]
    if rng.random() < level['lure']:
        lure = word_name if task == 'INK' else ink_name
        if lure not in options:
            options.append(lure)

    remaining = [name for name, _ in palette if name not in options]
    rng.shuffle(remaining)
    while len(options) < level['options'] and remaining:
        options.append(remaining.pop())
    rng.shuffle(options)

    return StroopClashContent(
        type='stroop_clash',
        word=word_name.upper(),
        ink=ink_hex,
        task=task,
        cue='COLOR' if task == 'INK' else 'TEXT',
        options=options,
        difficulty=tier,
        target_time_ms=level['time_ms'],
    )


def generate_stroop_block(config: GeneratorConfig, count: int,
                          rng: random.Random = None) -> list[StroopClashContent]:
    """Generate consecutive trials, each switching relative to the one before."""
    rng = _rng(config, rng)
    trials = []
    previous_task = None
    for _ in range(count):
        trial = generate_stroop_trial(config, rng, previous_task=previous_task)
        trials.append(trial)
        previous_task = trial.task
    return trials


def generate_math_rocket(config: GeneratorConfig, rng: random.Random = None) -> MathRocketContent:
    tier = config.tier
    gravity, thrust, winning_score = MATH_ROCKET_LEVELS[tier]
    (low, high), operators, _, _ = ARITHMETIC_LEVELS[tier]
    return MathRocketContent(
        type='math_rocket',
        operand_range=[low, high],
        operators=list(operators),
        gravity=gravity,
        thrust=thrust,
        winning_score=winning_score,
        difficulty=tier,
    )


def generate_odd_one_out(config: GeneratorConfig, rng: random.Random = None) -> OddOneOutContent:
    rng = _rng(config, rng)
    tier = config.tier
    rows, cols = ODD_ONE_OUT_LEVELS[tier]
    target, distractor = ODD_ONE_OUT_PAIRS[min(tier, len(ODD_ONE_OUT_PAIRS)) - 1]
    return OddOneOutContent(
        type='odd_one_out',
        rows=rows,
        cols=cols,
        target=target,
        distractor=distractor,
        target_index=rng.randrange(rows * cols),
        difficulty=tier,
    )


GENERATORS = {
    GameType.MENTAL_ARITHMETIC: generate_arithmetic,
    GameType.MEMORY_MATRIX: generate_memory_matrix,
    GameType.MENTAL_LANGUAGE_DISCRIMINATION: generate_language_discrimination,
    GameType.WORDLE: generate_wordle,
    GameType.BALL_SORT: generate_ball_sort,
    GameType.STROOP_CLASH: generate_stroop_trial,
    GameType.WORD_UNSCRAMBLE: generate_word_unscramble,
    GameType.MATH_ROCKET: generate_math_rocket,
    GameType.ODD_ONE_OUT: generate_odd_one_out,
}


def has_generator(game_id: str) -> bool:
    return game_id in GENERATORS


def generate(game_id: str, config: GeneratorConfig, rng: random.Random = None):
    """Generate one content instance for a game. Raises KeyError for unknown games."""
    if not has_generator(game_id):
        raise KeyError(f"No generator registered for '{game_id}'")
    return GENERATORS[GameType(game_id)](config, rng)


def generate_many(game_id: str, config: GeneratorConfig, count: int,
                  rng: random.Random = None) -> list:
    """Generate a batch for one round."""
    rng = _rng(config, rng)
    if game_id == GameType.STROOP_CLASH:
        return generate_stroop_block(config, count, rng)
    return [generate(game_id, config, rng) for _ in range(count)]
