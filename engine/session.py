"""Round session state machine.

idle -> playing -> finished, with reset back to idle from anywhere.
start_round is valid from any state and restarts cleanly. Answers are only
accepted while playing. end_round scores the round, moves to finished and
then hands a snapshot of the round to storage. A storage failure is logged
and kept on the session; the score stands.
"""

import asyncio
import logging
import time

from .errors import InvalidStateError, PersistenceError
from .interfaces import SessionStore
from .models import AnswerRecord, RoundSessionConfig, RoundSessionState, RoundPhase, SessionSummary
from .scoring import calculate_bpi, target_time_for_game
from .utils import round_half_up

logger = logging.getLogger(__name__)


class RoundSession:
    """One player's round. Not thread-safe; callers serialize access."""

    def __init__(self, store: SessionStore | None = None, clock=time.time):
        self.store = store
        self.clock = clock
        self._round = 0
        self.last_session_id = None
        self.last_persistence_error = None
        self._clear()

    def _clear(self):
        # Bumping the round token detaches any persistence still in flight
        self._round += 1
        self.config = None
        self._answers = []
        self._phase = RoundPhase.IDLE
        self._score = None
        self._start_time = None
        self._duration_ms = 0
        self._correct_count = 0
        self.last_session_id = None
        self.last_persistence_error = None

    @property
    def phase(self) -> RoundPhase:
        return self._phase

    @property
    def answers(self) -> tuple[AnswerRecord, ...]:
        return tuple(self._answers)

    @property
    def state(self) -> RoundSessionState:
        return RoundSessionState(
            phase=self._phase,
            score=self._score,
            start_time=self._start_time,
            duration_ms=self._duration_ms,
            correct_count=self._correct_count,
            total_questions=self.config.total_questions if self.config else 0,
        )

    def start_round(self, config: RoundSessionConfig) -> None:
        """Start a fresh round, discarding whatever came before."""
        if not isinstance(config, RoundSessionConfig):
            raise TypeError("config must be a RoundSessionConfig")
        self._clear()
        self.config = config
        self._start_time = self.clock()
        self._phase = RoundPhase.PLAYING
        logger.debug(f"Round started: {config.user_id}/{config.game_id}")

    def record_answer(self, record: AnswerRecord) -> None:
        if self._phase != RoundPhase.PLAYING:
            raise InvalidStateError(f"Cannot record an answer while {self._phase.value}")
        if not isinstance(record, AnswerRecord):
            raise TypeError("record must be an AnswerRecord")
        self._answers.append(record)
        if record.is_correct:
            self._correct_count += 1

    def reset_session(self) -> None:
        """Return to idle. Safe at any time, including mid-persistence."""
        self._clear()

    def _summarize(self) -> SessionSummary:
        config = self.config
        answers = self._answers
        count = len(answers)
        accuracy = sum(a.accuracy for a in answers) / count if count else 0.0
        avg_response_ms = round_half_up(sum(a.response_time_ms for a in answers) / count) if count else None

        target_ms = target_time_for_game(config.game_id)
        use_speed = target_ms is not None and avg_response_ms is not None
        score = calculate_bpi(
            accuracy,
            config.avg_question_difficulty,
            target_time_ms=target_ms,
            actual_time_ms=avg_response_ms,
            use_speed=use_speed,
        )

        return SessionSummary(
            user_id=config.user_id,
            game_id=config.game_id,
            difficulty_rating_used=config.difficulty_rating_used,
            avg_question_difficulty=config.avg_question_difficulty,
            avg_response_time_ms=avg_response_ms,
            score=score,
            duration_seconds=round_half_up(self._duration_ms / 1000),
            correct_count=self._correct_count,
            total_questions=config.total_questions,
            metadata=dict(config.metadata or {}),
        )

    async def end_round(self) -> int:
        """Score the round and persist it. Returns the score."""
        if self._phase != RoundPhase.PLAYING:
            raise InvalidStateError(f"Cannot end a round while {self._phase.value}")

        self._duration_ms = max(0, round_half_up((self.clock() - self._start_time) * 1000))
        summary = self._summarize()
        answers = tuple(self._answers)
        self._score = summary.score
        self._phase = RoundPhase.FINISHED
        logger.info(f"Round finished: {summary.user_id}/{summary.game_id} "
                    f"score={summary.score} answers={len(answers)}")

        if self.store is not None:
            token = self._round
            session_id, error = await self._persist(summary, answers)
            if token == self._round:
                self.last_session_id = session_id
                self.last_persistence_error = error
        return summary.score

    async def _persist(self, summary: SessionSummary,
                       answers: tuple[AnswerRecord, ...]) -> tuple[str | None, PersistenceError | None]:
        session_id = None
        try:
            session_id = await asyncio.to_thread(self.store.save_session, summary)
            if answers:
                await asyncio.to_thread(self.store.save_answers, session_id, answers)
        except Exception as e:
            logger.error(f"Failed to save round for {summary.user_id}/{summary.game_id}: {e}")
            if isinstance(e, PersistenceError):
                if e.session_id is None:
                    e.session_id = session_id
                return session_id, e
            error = PersistenceError(str(e), session_id=session_id)
            error.__cause__ = e
            return session_id, error
        logger.info(f"Saved session {session_id} with {len(answers)} answers")
        return session_id, None
