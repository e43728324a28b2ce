"""Unit tests for round sessions, models and content loading."""

import asyncio
import threading
import unittest

from engine.config import DEFAULT_DIFFICULTY_RATING
from engine.errors import (
    InvalidStateError, PersistenceError, ContentUnavailableError, RoundUnavailableError
)
from engine.generators import GeneratorConfig, generate
from engine.interfaces import ContentSource, SessionStore, DifficultySource
from engine.loader import (
    CompositeContentSource, load_round_content, prepare_round,
    resolve_difficulty_rating, average_difficulty
)
from engine.models import AnswerRecord, RoundSessionConfig, RoundPhase
from engine.scoring import calculate_bpi
from engine.session import RoundSession


# ============================================================================
# Mock Implementations
# ============================================================================

class MockSessionStore(SessionStore):
    """Keeps saved sessions in memory."""

    def __init__(self):
        self.sessions = []
        self.answers = {}

    def save_session(self, summary):
        self.sessions.append(summary)
        return f"session-{len(self.sessions)}"

    def save_answers(self, session_id, answers):
        self.answers[session_id] = list(answers)


class FailingSessionStore(MockSessionStore):
    """Fails on the configured write."""

    def __init__(self, fail_on='save_session'):
        super().__init__()
        self.fail_on = fail_on

    def save_session(self, summary):
        if self.fail_on == 'save_session':
            raise RuntimeError("database is down")
        return super().save_session(summary)

    def save_answers(self, session_id, answers):
        if self.fail_on == 'save_answers':
            raise RuntimeError("answers table is locked")
        super().save_answers(session_id, answers)


class BlockingSessionStore(MockSessionStore):
    """save_session waits until the test releases it."""

    def __init__(self):
        super().__init__()
        self.entered = threading.Event()
        self.release = threading.Event()

    def save_session(self, summary):
        self.entered.set()
        self.release.wait(5)
        return super().save_session(summary)


class MockContentSource(ContentSource):
    """Serves a fixed list of items."""

    def __init__(self, items=None, error=None):
        self.items = items or []
        self.error = error
        self.calls = []

    def fetch_questions(self, game_id, count, difficulty=None):
        self.calls.append((game_id, count, difficulty))
        if self.error:
            raise self.error
        return self.items[:count]


class MockDifficultySource(DifficultySource):

    def __init__(self, rating=None, error=None):
        self.rating = rating
        self.error = error

    def get_difficulty_rating(self, user_id, game_id):
        if self.error:
            raise self.error
        return self.rating


class FakeClock:

    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def make_config(**overrides) -> RoundSessionConfig:
    values = {
        'game_id': 'memory_matrix',
        'user_id': 'user-1',
        'total_questions': 3,
        'avg_question_difficulty': 5,
        'difficulty_rating_used': 5,
    }
    values.update(overrides)
    return RoundSessionConfig(**values)


def answer(accuracy, response_time_ms=1500, **kwargs) -> AnswerRecord:
    return AnswerRecord(accuracy=accuracy, response_time_ms=response_time_ms, **kwargs)


def arithmetic_item(item_id, left=2, right=3, difficulty=4) -> dict:
    return {
        'id': item_id,
        'difficulty': difficulty,
        'content': {
            'type': 'mental_arithmetic', 'left': left, 'right': right, 'operator': '+',
            'answer': left + right, 'options': [left + right, left + right + 1],
        },
    }


# ============================================================================
# Test Cases
# ============================================================================

class TestModels(unittest.TestCase):
    """Tests for round models."""

    def test_answer_record_bounds(self):
        with self.assertRaises(ValueError):
            answer(1.5)
        with self.assertRaises(ValueError):
            answer(-0.1)
        with self.assertRaises(ValueError):
            answer(float('nan'))
        with self.assertRaises(ValueError):
            answer(1.0, response_time_ms=-1)

    def test_answer_record_is_correct(self):
        self.assertTrue(answer(1.0).is_correct)
        self.assertFalse(answer(0.99).is_correct)

    def test_config_validation(self):
        with self.assertRaises(ValueError):
            make_config(total_questions=0)
        with self.assertRaises(ValueError):
            make_config(total_questions=True)
        with self.assertRaises(ValueError):
            make_config(avg_question_difficulty=11)
        with self.assertRaises(ValueError):
            make_config(difficulty_rating_used=-1)
        with self.assertRaises(ValueError):
            make_config(user_id='')


class TestRoundSession(unittest.IsolatedAsyncioTestCase):
    """Tests for the round state machine."""

    async def test_full_round(self):
        store = MockSessionStore()
        session = RoundSession(store=store)
        self.assertEqual(session.phase, RoundPhase.IDLE)

        session.start_round(make_config())
        for accuracy in (1, 1, 0):
            session.record_answer(answer(accuracy))
        score = await session.end_round()

        self.assertEqual(score, calculate_bpi(2 / 3, 5))
        state = session.state
        self.assertTrue(state.is_finished)
        self.assertEqual(state.score, score)
        self.assertEqual(state.total_questions, 3)
        self.assertEqual(state.correct_count, 2)

        self.assertEqual(session.last_session_id, 'session-1')
        self.assertIsNone(session.last_persistence_error)
        summary = store.sessions[0]
        self.assertEqual(summary.score, score)
        self.assertEqual(summary.avg_response_time_ms, 1500)
        self.assertEqual(len(store.answers['session-1']), 3)

    async def test_idle_state_is_zeroed(self):
        state = RoundSession().state
        self.assertEqual(state.duration_ms, 0)
        self.assertEqual(state.correct_count, 0)
        self.assertEqual(state.total_questions, 0)
        self.assertEqual(state.to_dict()['duration_ms'], 0)

    async def test_score_is_between_neighbours(self):
        session = RoundSession()
        session.start_round(make_config())
        for accuracy in (1, 1, 0):
            session.record_answer(answer(accuracy))
        score = await session.end_round()
        self.assertGreater(score, calculate_bpi(0.6, 5))
        self.assertLess(score, calculate_bpi(1.0, 5))

    async def test_empty_round_scores_floor(self):
        store = MockSessionStore()
        session = RoundSession(store=store)
        session.start_round(make_config())
        self.assertEqual(await session.end_round(), 100)
        self.assertIsNone(store.sessions[0].avg_response_time_ms)
        self.assertEqual(store.answers, {})

    async def test_speed_term_for_timed_games(self):
        session = RoundSession()
        session.start_round(make_config(game_id='mental_arithmetic', avg_question_difficulty=10))
        session.record_answer(answer(1.0, response_time_ms=2000))
        session.record_answer(answer(1.0, response_time_ms=4000))
        score = await session.end_round()
        self.assertEqual(score, calculate_bpi(1.0, 10, target_time_ms=6000,
                                              actual_time_ms=3000, use_speed=True))

    async def test_duration(self):
        clock = FakeClock(100.0)
        store = MockSessionStore()
        session = RoundSession(store=store, clock=clock)
        session.start_round(make_config())
        clock.now = 102.5
        await session.end_round()
        self.assertEqual(session.state.duration_ms, 2500)
        self.assertEqual(store.sessions[0].duration_seconds, 3)

    async def test_out_of_order_calls(self):
        session = RoundSession()
        with self.assertRaises(InvalidStateError):
            session.record_answer(answer(1.0))
        with self.assertRaises(InvalidStateError):
            await session.end_round()

        session.start_round(make_config())
        await session.end_round()
        with self.assertRaises(InvalidStateError):
            session.record_answer(answer(1.0))
        with self.assertRaises(InvalidStateError):
            await session.end_round()

    async def test_restart_discards_previous_round(self):
        session = RoundSession()
        session.start_round(make_config())
        session.record_answer(answer(1.0))
        session.start_round(make_config(game_id='wordle'))
        self.assertEqual(session.answers, ())
        self.assertEqual(session.state.correct_count, 0)
        self.assertEqual(session.config.game_id, 'wordle')

    async def test_reset(self):
        session = RoundSession(store=MockSessionStore())
        session.start_round(make_config())
        session.record_answer(answer(1.0))
        await session.end_round()
        session.reset_session()
        state = session.state
        self.assertEqual(state.phase, RoundPhase.IDLE)
        self.assertIsNone(state.score)
        self.assertEqual(state.duration_ms, 0)
        self.assertIsNone(session.last_session_id)
        self.assertEqual(session.answers, ())

    async def test_answers_are_a_snapshot(self):
        session = RoundSession()
        session.start_round(make_config())
        session.record_answer(answer(1.0))
        snapshot = session.answers
        session.record_answer(answer(0.0))
        self.assertEqual(len(snapshot), 1)

    async def test_rejects_wrong_types(self):
        session = RoundSession()
        with self.assertRaises(TypeError):
            session.start_round({'game_id': 'wordle'})
        session.start_round(make_config())
        with self.assertRaises(TypeError):
            session.record_answer({'accuracy': 1.0})

    async def test_persistence_failure_keeps_score(self):
        session = RoundSession(store=FailingSessionStore())
        session.start_round(make_config())
        session.record_answer(answer(1.0))
        with self.assertLogs('engine.session', level='ERROR'):
            score = await session.end_round()
        self.assertEqual(score, calculate_bpi(1.0, 5))
        self.assertTrue(session.state.is_finished)
        self.assertIsInstance(session.last_persistence_error, PersistenceError)
        self.assertIsNone(session.last_persistence_error.session_id)
        self.assertIsNone(session.last_session_id)

    async def test_partial_write_reports_session_id(self):
        store = FailingSessionStore(fail_on='save_answers')
        session = RoundSession(store=store)
        session.start_round(make_config())
        session.record_answer(answer(1.0))
        with self.assertLogs('engine.session', level='ERROR'):
            await session.end_round()
        self.assertEqual(session.last_persistence_error.session_id, 'session-1')
        self.assertEqual(session.last_session_id, 'session-1')

    async def test_reset_during_persistence(self):
        store = BlockingSessionStore()
        session = RoundSession(store=store)
        session.start_round(make_config())
        session.record_answer(answer(1.0))

        task = asyncio.create_task(session.end_round())
        await asyncio.to_thread(store.entered.wait, 5)
        self.assertTrue(session.state.is_finished)

        session.reset_session()
        session.start_round(make_config(game_id='wordle'))
        store.release.set()
        score = await task

        self.assertEqual(score, calculate_bpi(1.0, 5))
        self.assertTrue(session.state.is_playing)
        self.assertEqual(session.config.game_id, 'wordle')
        self.assertIsNone(session.last_session_id)
        self.assertIsNone(session.last_persistence_error)
        # The old round still reached storage
        self.assertEqual(len(store.sessions), 1)


class TestContentLoading(unittest.TestCase):
    """Tests for round content loading."""

    def test_invalid_items_dropped(self):
        bad = arithmetic_item('q2')
        bad['content']['answer'] = 99
        source = MockContentSource([arithmetic_item('q1'), bad, 'junk', arithmetic_item('q3', 4, 4)])
        with self.assertLogs('engine.loader', level='WARNING'):
            questions = load_round_content('mental_arithmetic', 4, source)
        self.assertEqual([q.id for q in questions], ['q1', 'q3'])
        self.assertEqual(questions[0].difficulty, 4)

    def test_wrong_game_dropped(self):
        item = {'id': 'w1', 'content': {'type': 'wordle', 'word': 'CRANE', 'max_guesses': 6}}
        source = MockContentSource([item, arithmetic_item('q1')])
        with self.assertLogs('engine.loader', level='WARNING'):
            questions = load_round_content('mental_arithmetic', 3, source)
        self.assertEqual([q.id for q in questions], ['q1'])

    def test_falls_back_to_generation(self):
        bad = arithmetic_item('q1')
        bad['content']['left'] = 'two'
        source = MockContentSource([bad])
        with self.assertLogs('engine.loader', level='WARNING'):
            questions = load_round_content('memory_matrix', 3, source, difficulty=4, seed='g')
        self.assertEqual(len(questions), 3)
        for q in questions:
            self.assertIsNone(q.id)
            self.assertEqual(q.content.type, 'memory_matrix')
            self.assertEqual(q.difficulty, 4)

    def test_source_failure_falls_back(self):
        source = MockContentSource(error=ConnectionError("offline"))
        with self.assertLogs('engine.loader', level='WARNING'):
            questions = load_round_content('wordle', 2, source)
        self.assertEqual(len(questions), 2)

    def test_no_source_generates(self):
        questions = load_round_content('odd_one_out', 2, difficulty=7, seed='x')
        self.assertEqual([q.content.difficulty for q in questions], [7, 7])

    def test_unknown_game_unavailable(self):
        with self.assertRaises(ContentUnavailableError) as ctx:
            load_round_content('chess', 3, MockContentSource())
        self.assertEqual(ctx.exception.game_id, 'chess')
        self.assertIsInstance(ctx.exception, RoundUnavailableError)

    def test_count_must_be_positive(self):
        with self.assertRaises(ValueError):
            load_round_content('wordle', 0)

    def test_stored_content_object_accepted(self):
        content = generate('wordle', GeneratorConfig(difficulty=3, seed='s'))
        source = MockContentSource([{'id': 7, 'content': content.to_dict()}])
        questions = load_round_content('wordle', 3, source)
        self.assertEqual(questions[0].id, '7')
        self.assertEqual(questions[0].content, content)
        self.assertEqual(questions[0].difficulty, 3)

    def test_composite_source(self):
        empty = MockContentSource()
        broken = MockContentSource(error=RuntimeError("quota"))
        full = MockContentSource([arithmetic_item('q1')])
        composite = CompositeContentSource([empty, broken, full])
        with self.assertLogs('engine.loader', level='WARNING'):
            items = composite.fetch_questions('mental_arithmetic', 3)
        self.assertEqual(len(items), 1)
        self.assertEqual(full.calls, [('mental_arithmetic', 3, None)])
        self.assertEqual(CompositeContentSource([empty]).fetch_questions('wordle', 1), [])


class TestDifficultyRating(unittest.TestCase):
    """Tests for rating lookup and round preparation."""

    def test_rating_defaults(self):
        self.assertEqual(resolve_difficulty_rating(None, 'u', 'wordle'), DEFAULT_DIFFICULTY_RATING)
        self.assertEqual(resolve_difficulty_rating(MockDifficultySource(), 'u', 'wordle'),
                         DEFAULT_DIFFICULTY_RATING)
        self.assertEqual(resolve_difficulty_rating(MockDifficultySource(float('nan')), 'u', 'wordle'),
                         DEFAULT_DIFFICULTY_RATING)
        with self.assertLogs('engine.loader', level='WARNING'):
            rating = resolve_difficulty_rating(MockDifficultySource(error=RuntimeError("down")), 'u', 'wordle')
        self.assertEqual(rating, DEFAULT_DIFFICULTY_RATING)

    def test_rating_clamped(self):
        self.assertEqual(resolve_difficulty_rating(MockDifficultySource(4.2), 'u', 'wordle'), 4.2)
        self.assertEqual(resolve_difficulty_rating(MockDifficultySource(12), 'u', 'wordle'), 10)

    def test_average_difficulty(self):
        questions = load_round_content('mental_arithmetic', 2, MockContentSource(
            [arithmetic_item('a', difficulty=2), arithmetic_item('b', difficulty=6)]))
        self.assertEqual(average_difficulty(questions), 4)
        self.assertEqual(average_difficulty([]), DEFAULT_DIFFICULTY_RATING)

    def test_prepare_round(self):
        config, questions = prepare_round(
            'memory_matrix', 'user-1', 3,
            difficulty_source=MockDifficultySource(6.4),
            seed='p',
            metadata={'source': 'test'},
        )
        self.assertEqual(len(questions), 3)
        self.assertEqual(config.total_questions, 3)
        self.assertEqual(config.difficulty_rating_used, 6.4)
        self.assertEqual(config.avg_question_difficulty, 6)
        self.assertEqual(config.metadata, {'source': 'test'})

    def test_rating_reaches_content_source(self):
        source = MockContentSource([arithmetic_item('q1', difficulty=2)])
        composite = CompositeContentSource([MockContentSource(), source])
        prepare_round('mental_arithmetic', 'user-1', 3,
                      content_source=composite,
                      difficulty_source=MockDifficultySource(2.4))
        self.assertEqual(source.calls, [('mental_arithmetic', 3, 2.4)])


if __name__ == '__main__':
    unittest.main()
