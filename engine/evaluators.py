"""Per-game answer evaluators.

Every evaluator takes a validated content instance and the player's raw
response and returns an Evaluation: the accuracy in [0, 1] that feeds the
round score, and a normalized copy of the response for storage. Evaluators
are pure. A response that cannot be read raises InvalidResponseError.
"""

from dataclasses import dataclass, field

from .ball_sort import apply_move, is_solved
from .config import UNSCRAMBLE_FAILURE_PENALTY, UNSCRAMBLE_MIN_ACCURACY
from .content import (
    GameType, ContentBase, validate_content,
    MentalArithmeticContent, MemoryMatrixContent, MentalLanguageDiscriminationContent,
    WordleContent, BallSortContent, StroopClashContent, WordUnscrambleContent,
    MathRocketContent, OddOneOutContent
)
from .errors import InvalidResponseError

CORRECT = 'correct'
PRESENT = 'present'
ABSENT = 'absent'

LETTER_SCORES = {CORRECT: 1.0, PRESENT: 0.5, ABSENT: 0.0}


@dataclass(frozen=True)
class Evaluation:
    accuracy: float
    response: dict = field(default_factory=dict)

    @property
    def is_correct(self) -> bool:
        """Only full marks count as a correct answer."""
        return self.accuracy == 1.0


def _field(response, key: str):
    if not isinstance(response, dict) or key not in response:
        raise InvalidResponseError(f"Response must be an object with '{key}'")
    return response[key]


def _int(value, what: str) -> int:
    # bool is an int subclass; a checkbox value is not a choice index
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidResponseError(f"{what} must be an integer, got {value!r}")
    return value


def _str(value, what: str) -> str:
    if not isinstance(value, str):
        raise InvalidResponseError(f"{what} must be a string, got {value!r}")
    return value


def evaluate_arithmetic(content: MentalArithmeticContent, response) -> Evaluation:
    choice = _int(_field(response, 'choice'), 'choice')
    return Evaluation(1.0 if choice == content.answer else 0.0, {'choice': choice})


def evaluate_language(content: MentalLanguageDiscriminationContent, response) -> Evaluation:
    choice = _str(_field(response, 'choice'), 'choice')
    return Evaluation(1.0 if choice == content.answer else 0.0, {'choice': choice})


def evaluate_stroop(content: StroopClashContent, response) -> Evaluation:
    choice = _str(_field(response, 'choice'), 'choice')
    correct = choice.lower() == content.correct_value.lower()
    return Evaluation(1.0 if correct else 0.0, {'choice': choice, 'task': content.task})


def evaluate_odd_one_out(content: OddOneOutContent, response) -> Evaluation:
    index = _int(_field(response, 'index'), 'index')
    return Evaluation(1.0 if index == content.target_index else 0.0, {'index': index})


def unscramble_accuracy(failures: int) -> float:
    """1.0 minus a penalty per failed submission, floored."""
    return max(UNSCRAMBLE_MIN_ACCURACY, 1.0 - UNSCRAMBLE_FAILURE_PENALTY * failures)


def evaluate_word_unscramble(content: WordUnscrambleContent, response) -> Evaluation:
    """Accuracy is awarded on the first full match; later attempts are ignored."""
    attempts = _field(response, 'attempts')
    if not isinstance(attempts, list):
        raise InvalidResponseError("attempts must be a list")
    attempts = [_str(a, 'attempt').upper() for a in attempts]
    word = content.word.upper()
    if word in attempts:
        failures = attempts.index(word)
        return Evaluation(unscramble_accuracy(failures),
                          {'attempts': attempts[:failures + 1], 'failures': failures, 'solved': True})
    return Evaluation(0.0, {'attempts': attempts, 'failures': len(attempts), 'solved': False})


def _cell(value) -> tuple[int, int]:
    if isinstance(value, dict):
        value = [value.get('row'), value.get('col')]
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise InvalidResponseError(f"Cell must be [row, col] or {{row, col}}, got {value!r}")
    return _int(value[0], 'row'), _int(value[1], 'col')


def evaluate_memory_matrix(content: MemoryMatrixContent, response) -> Evaluation:
    """Fraction of the selected cells that were targets.

    Only a complete selection is evaluated: exactly ``target_count`` distinct
    cells.
    """
    selected = _field(response, 'selected')
    if not isinstance(selected, list):
        raise InvalidResponseError("selected must be a list")
    cells = [_cell(c) for c in selected]
    if len(set(cells)) != len(cells):
        raise InvalidResponseError("selected cells must be distinct")
    if len(cells) != content.target_count:
        raise InvalidResponseError(
            f"Expected {content.target_count} selected cells, got {len(cells)}")
    targets = {(c.row, c.col) for c in content.targets}
    hits = sum(1 for c in cells if c in targets)
    return Evaluation(hits / content.target_count,
                      {'selected': [list(c) for c in cells], 'hits': hits})


def score_guess(target: str, guess: str) -> list[str]:
    """Mark each letter of a guess as correct, present or absent.

    Exact matches are consumed from the target first, so a repeated letter
    is never credited more times than it remains in the target.
    """
    target = target.upper()
    guess = guess.upper()
    marks = [ABSENT] * len(guess)
    remaining = list(target)

    for i, letter in enumerate(guess):
        if letter == target[i]:
            marks[i] = CORRECT
            remaining[i] = None

    for i, letter in enumerate(guess):
        if marks[i] == CORRECT:
            continue
        if letter in remaining:
            marks[i] = PRESENT
            remaining[remaining.index(letter)] = None

    return marks


def letter_score(marks: list[str]) -> float:
    """Correct = 1, present = 0.5, normalized by word length."""
    if not marks:
        return 0.0
    return sum(LETTER_SCORES[m] for m in marks) / len(marks)


def evaluate_wordle(content: WordleContent, response) -> Evaluation:
    """Win: 0.5 plus an efficiency bonus. Loss: half the best letter score."""
    guesses = _field(response, 'guesses')
    if not isinstance(guesses, list):
        raise InvalidResponseError("guesses must be a list")
    word = content.word.upper()
    guesses = [_str(g, 'guess').upper() for g in guesses]
    if len(guesses) > content.max_guesses:
        raise InvalidResponseError(f"At most {content.max_guesses} guesses allowed")
    for guess in guesses:
        if len(guess) != len(word):
            raise InvalidResponseError(f"Guess '{guess}' must have {len(word)} letters")

    if word in guesses:
        used = guesses.index(word) + 1
        accuracy = min(1.0, 0.5 + 0.5 * (1 - (used - 1) / content.max_guesses))
        guesses = guesses[:used]
        return Evaluation(accuracy, {
            'guesses': guesses,
            'marks': [score_guess(word, g) for g in guesses],
            'won': True,
        })

    marks = [score_guess(word, g) for g in guesses]
    best = max((letter_score(m) for m in marks), default=0.0)
    return Evaluation(0.5 * best, {'guesses': guesses, 'marks': marks, 'won': False})


def evaluate_math_rocket(content: MathRocketContent, response) -> Evaluation:
    outcome = _field(response, 'outcome')
    if outcome not in ('won', 'crashed'):
        raise InvalidResponseError(f"outcome must be 'won' or 'crashed', got {outcome!r}")
    normalized = {'outcome': outcome}
    if isinstance(response.get('streak'), int):
        normalized['streak'] = response['streak']
    return Evaluation(1.0 if outcome == 'won' else 0.0, normalized)


def evaluate_ball_sort(content: BallSortContent, response) -> Evaluation:
    """Replay the moves on the starting layout. Illegal moves are skipped."""
    moves = _field(response, 'moves')
    if not isinstance(moves, list):
        raise InvalidResponseError("moves must be a list")
    tubes = [list(tube) for tube in content.tubes]
    applied = []
    for move in moves:
        if not isinstance(move, (list, tuple)) or len(move) != 2:
            raise InvalidResponseError(f"Move must be [from, to], got {move!r}")
        source, target = _int(move[0], 'from'), _int(move[1], 'to')
        moved = apply_move(tubes, source, target, content.capacity_per_tube)
        if moved is not None:
            tubes = moved
            applied.append([source, target])
    solved = is_solved(tubes, content.capacity_per_tube)
    return Evaluation(1.0 if solved else 0.0,
                      {'moves': applied, 'skipped': len(moves) - len(applied), 'solved': solved})


EVALUATORS = {
    GameType.MENTAL_ARITHMETIC: evaluate_arithmetic,
    GameType.MEMORY_MATRIX: evaluate_memory_matrix,
    GameType.MENTAL_LANGUAGE_DISCRIMINATION: evaluate_language,
    GameType.WORDLE: evaluate_wordle,
    GameType.BALL_SORT: evaluate_ball_sort,
    GameType.STROOP_CLASH: evaluate_stroop,
    GameType.WORD_UNSCRAMBLE: evaluate_word_unscramble,
    GameType.MATH_ROCKET: evaluate_math_rocket,
    GameType.ODD_ONE_OUT: evaluate_odd_one_out,
}


def evaluate(content, response) -> Evaluation:
    """Score one response. Raw content payloads are validated first."""
    if not isinstance(content, ContentBase):
        content = validate_content(content)
    return EVALUATORS[GameType(content.type)](content, response)
