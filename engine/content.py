"""Game content schemas and validation.

Content is a tagged union discriminated by ``type``. Payloads coming from a
content source are validated here before they reach gameplay. Invalid
content is rejected, never repaired.
"""

from enum import Enum
from typing import Annotated, Literal, Union

import pydantic
from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr, model_validator

from .config import (
    STROOP_PALETTE,
    BALL_SORT_EXTRA_TUBES, BALL_SORT_MIN_CAPACITY, BALL_SORT_MAX_CAPACITY
)
from .errors import ValidationError


class GameType(str, Enum):
    MENTAL_ARITHMETIC = 'mental_arithmetic'
    MEMORY_MATRIX = 'memory_matrix'
    MENTAL_LANGUAGE_DISCRIMINATION = 'mental_language_discrimination'
    WORDLE = 'wordle'
    BALL_SORT = 'ball_sort'
    STROOP_CLASH = 'stroop_clash'
    WORD_UNSCRAMBLE = 'word_unscramble'
    MATH_ROCKET = 'math_rocket'
    ODD_ONE_OUT = 'odd_one_out'


Number = Union[StrictInt, StrictFloat]
NonNegativeInt = Annotated[StrictInt, Field(ge=0)]
OperandRange = Annotated[list[StrictInt], Field(min_length=2, max_length=2)]
Operator = Literal['+', '-', 'x', '*', '/']

INK_NAMES = {hex_code.upper(): name for name, hex_code in STROOP_PALETTE.items()}


def apply_operator(left: int, operator: str, right: int) -> float:
    """Evaluate a two-operand expression."""
    if operator == '+':
        return left + right
    if operator == '-':
        return left - right
    if operator in ('x', '*'):
        return left * right
    if operator == '/':
        return left / right
    raise ValueError(f"Unknown operator: {operator}")


def _check_options(options: list, answer, normalize=lambda o: o) -> None:
    keys = [normalize(o) for o in options]
    if len(set(keys)) != len(keys):
        raise ValueError('options must not contain duplicates')
    if keys.count(normalize(answer)) != 1:
        raise ValueError('options must contain the correct answer exactly once')


class ContentBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    difficulty: StrictInt | None = None
    target_time_ms: NonNegativeInt | None = Field(default=None, alias='targetTimeMs')

    def to_dict(self) -> dict:
        """JSON-ready form, using wire field names."""
        return self.model_dump(mode='json', by_alias=True, exclude_none=True)


class MentalArithmeticContent(ContentBase):
    type: Literal['mental_arithmetic']
    left: StrictInt
    right: StrictInt
    operator: Operator
    answer: StrictInt
    options: list[StrictInt] = Field(min_length=2)
    operand_range: OperandRange | None = Field(default=None, alias='operandRange')
    operators: list[Operator] | None = None

    @model_validator(mode='after')
    def _check_expression(self):
        if self.operator == '/':
            if self.right == 0 or self.left % self.right != 0:
                raise ValueError('division must produce an integer')
        if apply_operator(self.left, self.operator, self.right) != self.answer:
            raise ValueError('answer does not match the expression')
        _check_options(self.options, self.answer)
        if self.operand_range is not None and self.operand_range[0] > self.operand_range[1]:
            raise ValueError('operandRange must be [min, max]')
        return self


class GridSize(BaseModel):
    model_config = ConfigDict(frozen=True)

    rows: StrictInt = Field(ge=1)
    cols: StrictInt = Field(ge=1)


class Cell(BaseModel):
    model_config = ConfigDict(frozen=True)

    row: StrictInt = Field(ge=0)
    col: StrictInt = Field(ge=0)


class MemoryMatrixContent(ContentBase):
    type: Literal['memory_matrix']
    grid_size: GridSize
    target_count: StrictInt = Field(ge=1)
    display_time_ms: StrictInt = Field(ge=0)
    targets: list[Cell]

    @model_validator(mode='after')
    def _check_targets(self):
        rows, cols = self.grid_size.rows, self.grid_size.cols
        if self.target_count > rows * cols:
            raise ValueError('target_count exceeds the number of cells')
        if len(self.targets) != self.target_count:
            raise ValueError('targets must match target_count')
        if len({(c.row, c.col) for c in self.targets}) != len(self.targets):
            raise ValueError('targets must be distinct')
        if any(c.row >= rows or c.col >= cols for c in self.targets):
            raise ValueError('target outside the grid')
        return self


class MentalLanguageDiscriminationContent(ContentBase):
    type: Literal['mental_language_discrimination']
    sentence_parts: list[StrictStr] = Field(alias='sentenceParts', min_length=2, max_length=2)
    options: list[StrictStr] = Field(min_length=2)
    answer: StrictStr

    @model_validator(mode='after')
    def _check_answer(self):
        _check_options(self.options, self.answer)
        return self


class WordleContent(ContentBase):
    type: Literal['wordle']
    word: StrictStr = Field(min_length=2, pattern=r'^[A-Za-z]+$')
    max_guesses: StrictInt = Field(ge=1)


class BallSortContent(ContentBase):
    type: Literal['ball_sort']
    tube_count: StrictInt = Field(alias='tubeCount', ge=2)
    capacity_per_tube: StrictInt = Field(alias='capacityPerTube',
                                         ge=BALL_SORT_MIN_CAPACITY, le=BALL_SORT_MAX_CAPACITY)
    color_count: StrictInt = Field(alias='colorCount', ge=1)
    tubes: list[list[StrictInt]]

    @model_validator(mode='after')
    def _check_layout(self):
        if self.tube_count < self.color_count + BALL_SORT_EXTRA_TUBES:
            raise ValueError(f'need at least {self.color_count + BALL_SORT_EXTRA_TUBES} tubes '
                             f'for {self.color_count} colors')
        if len(self.tubes) != self.tube_count:
            raise ValueError('tubes must match tubeCount')
        if any(len(tube) > self.capacity_per_tube for tube in self.tubes):
            raise ValueError('tube over capacity')
        counts = {}
        for tube in self.tubes:
            for ball in tube:
                if not 0 <= ball < self.color_count:
                    raise ValueError(f'unknown color index {ball}')
                counts[ball] = counts.get(ball, 0) + 1
        if any(counts.get(c, 0) != self.capacity_per_tube for c in range(self.color_count)):
            raise ValueError('each color must fill exactly one tube')
        return self


class StroopClashContent(ContentBase):
    type: Literal['stroop_clash']
    word: StrictStr = Field(min_length=1)
    ink: StrictStr
    task: Literal['INK', 'WORD']
    cue: StrictStr | None = None
    options: list[StrictStr] = Field(min_length=2)

    @property
    def correct_value(self) -> str:
        if self.task == 'INK':
            return INK_NAMES[self.ink.upper()]
        return self.word

    @model_validator(mode='after')
    def _check_trial(self):
        if self.ink.upper() not in INK_NAMES:
            raise ValueError(f'unknown ink colour {self.ink}')
        _check_options(self.options, self.correct_value, normalize=str.lower)
        return self


class WordUnscrambleContent(ContentBase):
    type: Literal['word_unscramble']
    word: StrictStr = Field(min_length=1)
    hint: StrictStr | None = None
    scrambled: StrictStr | None = None

    @model_validator(mode='after')
    def _check_scramble(self):
        if self.scrambled is None:
            return self
        if sorted(self.scrambled.upper()) != sorted(self.word.upper()):
            raise ValueError('scrambled must be an anagram of word')
        if len(set(self.word.upper())) > 1 and self.scrambled.upper() == self.word.upper():
            raise ValueError('scrambled must differ from word')
        return self


class MathRocketContent(ContentBase):
    type: Literal['math_rocket']
    operand_range: OperandRange = Field(alias='operandRange')
    operators: list[Operator] = Field(min_length=1)
    gravity: Number = 0.5
    thrust: Number = 10
    winning_score: StrictInt = Field(default=10, alias='winningScore', ge=1)

    @model_validator(mode='after')
    def _check_flight(self):
        low, high = self.operand_range
        if low > high:
            raise ValueError('operandRange must be [min, max]')
        if '/' in self.operators and low == high == 0:
            raise ValueError('division needs a non-zero divisor')
        if self.gravity <= 0 or self.thrust <= 0:
            raise ValueError('gravity and thrust must be positive')
        return self


class OddOneOutContent(ContentBase):
    type: Literal['odd_one_out']
    rows: StrictInt = Field(ge=1)
    cols: StrictInt = Field(ge=1)
    target: StrictStr = Field(min_length=1)
    distractor: StrictStr = Field(min_length=1)
    target_index: StrictInt = Field(ge=0)

    @model_validator(mode='after')
    def _check_grid(self):
        if self.target == self.distractor:
            raise ValueError('target and distractor must differ')
        if self.target_index >= self.rows * self.cols:
            raise ValueError('target_index outside the grid')
        return self


GameContent = Annotated[
    Union[
        MentalArithmeticContent,
        MemoryMatrixContent,
        MentalLanguageDiscriminationContent,
        WordleContent,
        BallSortContent,
        StroopClashContent,
        WordUnscrambleContent,
        MathRocketContent,
        OddOneOutContent,
    ],
    Field(discriminator='type'),
]

CONTENT_MODELS = {
    GameType.MENTAL_ARITHMETIC: MentalArithmeticContent,
    GameType.MEMORY_MATRIX: MemoryMatrixContent,
    GameType.MENTAL_LANGUAGE_DISCRIMINATION: MentalLanguageDiscriminationContent,
    GameType.WORDLE: WordleContent,
    GameType.BALL_SORT: BallSortContent,
    GameType.STROOP_CLASH: StroopClashContent,
    GameType.WORD_UNSCRAMBLE: WordUnscrambleContent,
    GameType.MATH_ROCKET: MathRocketContent,
    GameType.ODD_ONE_OUT: OddOneOutContent,
}

_adapter = pydantic.TypeAdapter(GameContent)


def validate_content(raw) -> ContentBase:
    """Validate a raw payload into a content model.

    Raises ValidationError for anything that does not match a known variant.
    """
    if isinstance(raw, ContentBase):
        raw = raw.to_dict()
    if not isinstance(raw, dict):
        raise ValidationError(f"Content must be an object, got {type(raw).__name__}")
    try:
        return _adapter.validate_python(raw)
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid {raw.get('type', 'untyped')} content: {e}",
                              errors=e.errors(include_url=False, include_context=False)) from e


def is_valid_content(raw) -> bool:
    try:
        validate_content(raw)
    except ValidationError:
        return False
    return True
