"""PostgreSQL storage implementation."""

import json
import logging
import os
import threading
from contextlib import contextmanager

from psycopg2.extras import RealDictCursor, execute_values
from psycopg2.pool import ThreadedConnectionPool

from engine.config import DEFAULT_DIFFICULTY_RATING
from engine.errors import PersistenceError
from engine.interfaces import ContentSource, SessionStore, DifficultySource
from engine.models import AnswerRecord, SessionSummary

logger = logging.getLogger(__name__)


def _json(value):
    return json.dumps(value) if value is not None else None


class PostgresStorage(ContentSource, SessionStore, DifficultySource):
    """PostgreSQL-based storage implementation.

    Sessions are saved from worker threads, so every call checks out its own
    connection from a thread-safe pool. A transaction never spans two calls.
    """

    def __init__(self, config_file: str = None, db_url: str = None, max_connections: int = 10):
        self.config_file = config_file or os.path.expanduser('~/.config/mindgym/config.json')
        self.db_url = db_url or os.environ.get(
            'DATABASE_URL',
            'postgresql://localhost:5432/mindgym'
        )
        self.max_connections = max_connections
        self._pool = None
        self._pool_lock = threading.Lock()

    @property
    def pool(self) -> ThreadedConnectionPool:
        """Lazy pool initialization."""
        if self._pool is None:
            with self._pool_lock:
                if self._pool is None:
                    pool = ThreadedConnectionPool(1, self.max_connections, self.db_url)
                    try:
                        self._init_db(pool)
                    except Exception:
                        pool.closeall()
                        raise
                    self._pool = pool
        return self._pool

    @contextmanager
    def connection(self):
        """Check out a connection. Anything left uncommitted is rolled back on return."""
        conn = self.pool.getconn()
        try:
            yield conn
        finally:
            if not conn.closed:
                conn.rollback()
            self.pool.putconn(conn, close=bool(conn.closed))

    def _init_db(self, pool: ThreadedConnectionPool):
        """Create tables if they don't exist."""
        conn = pool.getconn()
        try:
            with conn.cursor() as cur:
                cur.execute("""
                    CREATE TABLE IF NOT EXISTS questions (
                        id SERIAL PRIMARY KEY,
                        game_id VARCHAR(64) NOT NULL,
                        content JSONB NOT NULL,
                        difficulty REAL,
                        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    )
                """)
                cur.execute("""
                    CREATE INDEX IF NOT EXISTS idx_questions_game ON questions(game_id)
                """)
                cur.execute("""
                    CREATE TABLE IF NOT EXISTS game_sessions (
                        id SERIAL PRIMARY KEY,
                        user_id VARCHAR(255) NOT NULL,
                        game_id VARCHAR(64) NOT NULL,
                        difficulty_rating_used REAL NOT NULL,
                        avg_question_difficulty REAL NOT NULL,
                        avg_response_time_ms INTEGER,
                        score INTEGER NOT NULL,
                        duration_seconds INTEGER NOT NULL,
                        correct_count INTEGER NOT NULL,
                        total_questions INTEGER NOT NULL,
                        metadata JSONB,
                        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    )
                """)
                cur.execute("""
                    CREATE INDEX IF NOT EXISTS idx_game_sessions_user ON game_sessions(user_id, game_id)
                """)
                # Answers reference the session id assigned on insert
                cur.execute("""
                    CREATE TABLE IF NOT EXISTS game_answers (
                        id SERIAL PRIMARY KEY,
                        session_id INTEGER NOT NULL REFERENCES game_sessions(id) ON DELETE CASCADE,
                        question_id VARCHAR(64),
                        accuracy REAL NOT NULL,
                        response_time_ms INTEGER NOT NULL,
                        user_response JSONB,
                        generated_content JSONB
                    )
                """)
                cur.execute("""
                    CREATE INDEX IF NOT EXISTS idx_game_answers_session ON game_answers(session_id)
                """)
                cur.execute("""
                    CREATE TABLE IF NOT EXISTS difficulty_ratings (
                        user_id VARCHAR(255) NOT NULL,
                        game_id VARCHAR(64) NOT NULL,
                        rating REAL NOT NULL,
                        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                        PRIMARY KEY (user_id, game_id)
                    )
                """)
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            pool.putconn(conn)

    def close(self):
        """Close every pooled connection."""
        if self._pool is not None and not self._pool.closed:
            self._pool.closeall()

    def load_config(self) -> dict:
        if not os.path.exists(self.config_file):
            raise FileNotFoundError(
                f"Config file not found at {self.config_file}\n"
                f'Please create it with: {{"gemini_api_key": "YOUR_API_KEY_HERE"}}'
            )
        with open(self.config_file, 'r') as f:
            return json.load(f)

    # Questions

    def fetch_questions(self, game_id: str, count: int, difficulty: float | None = None) -> list[dict]:
        """Random questions, closest to the requested difficulty first."""
        try:
            with self.connection() as conn, conn.cursor(cursor_factory=RealDictCursor) as cur:
                if difficulty is None:
                    cur.execute("""
                        SELECT id, content, difficulty FROM questions
                        WHERE game_id = %s
                        ORDER BY random() LIMIT %s
                    """, (game_id, count))
                else:
                    cur.execute("""
                        SELECT id, content, difficulty FROM questions
                        WHERE game_id = %s
                        ORDER BY abs(coalesce(difficulty, %s) - %s), random() LIMIT %s
                    """, (game_id, DEFAULT_DIFFICULTY_RATING, difficulty, count))
                return [
                    {'id': str(row['id']), 'content': row['content'], 'difficulty': row['difficulty']}
                    for row in cur.fetchall()
                ]
        except Exception as e:
            logger.error(f"Error fetching questions for {game_id}: {e}")
            return []

    def seed_questions(self, game_id: str, items: list[dict]) -> int:
        """Insert questions for a game. items are {content, difficulty}.
        Returns the number stored."""
        try:
            with self.connection() as conn:
                with conn.cursor() as cur:
                    execute_values(cur, """
                        INSERT INTO questions (game_id, content, difficulty) VALUES %s
                    """, [(game_id, json.dumps(item['content']), item.get('difficulty')) for item in items])
                conn.commit()
            return len(items)
        except Exception as e:
            logger.error(f"Error seeding questions for {game_id}: {e}")
            raise

    def count_questions(self, game_id: str) -> int:
        try:
            with self.connection() as conn, conn.cursor() as cur:
                cur.execute("SELECT COUNT(*) FROM questions WHERE game_id = %s", (game_id,))
                return cur.fetchone()[0]
        except Exception as e:
            logger.error(f"Error counting questions: {e}")
            return 0

    # Sessions

    def save_session(self, summary: SessionSummary) -> str:
        try:
            with self.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute("""
                        INSERT INTO game_sessions (
                            user_id, game_id, difficulty_rating_used, avg_question_difficulty,
                            avg_response_time_ms, score, duration_seconds, correct_count,
                            total_questions, metadata
                        )
                        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                        RETURNING id
                    """, (
                        summary.user_id, summary.game_id, summary.difficulty_rating_used,
                        summary.avg_question_difficulty, summary.avg_response_time_ms,
                        summary.score, summary.duration_seconds, summary.correct_count,
                        summary.total_questions, _json(summary.metadata or None)
                    ))
                    session_id = cur.fetchone()[0]
                conn.commit()
            return str(session_id)
        except Exception as e:
            logger.error(f"Error saving session: {e}")
            raise PersistenceError(f"Could not save session: {e}") from e

    def save_answers(self, session_id: str, answers: tuple[AnswerRecord, ...]) -> None:
        try:
            with self.connection() as conn:
                with conn.cursor() as cur:
                    execute_values(cur, """
                        INSERT INTO game_answers (
                            session_id, question_id, accuracy, response_time_ms,
                            user_response, generated_content
                        ) VALUES %s
                    """, [
                        (int(session_id), a.question_id, a.accuracy, round(a.response_time_ms),
                         _json(a.user_response), _json(a.generated_content))
                        for a in answers
                    ])
                conn.commit()
        except Exception as e:
            logger.error(f"Error saving answers for session {session_id}: {e}")
            raise PersistenceError(f"Could not save answers: {e}", session_id=session_id) from e

    def get_sessions(self, user_id: str, game_id: str = None, limit: int = 20) -> list[dict]:
        """Most recent sessions for a user, newest first."""
        try:
            with self.connection() as conn, conn.cursor(cursor_factory=RealDictCursor) as cur:
                if game_id:
                    cur.execute("""
                        SELECT * FROM game_sessions
                        WHERE user_id = %s AND game_id = %s
                        ORDER BY created_at DESC LIMIT %s
                    """, (user_id, game_id, limit))
                else:
                    cur.execute("""
                        SELECT * FROM game_sessions
                        WHERE user_id = %s
                        ORDER BY created_at DESC LIMIT %s
                    """, (user_id, limit))
                return [dict(row) for row in cur.fetchall()]
        except Exception as e:
            logger.error(f"Error getting sessions: {e}")
            return []

    def get_answers(self, session_id: str) -> list[dict]:
        try:
            with self.connection() as conn, conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute(
                    "SELECT * FROM game_answers WHERE session_id = %s ORDER BY id",
                    (int(session_id),)
                )
                return [dict(row) for row in cur.fetchall()]
        except Exception as e:
            logger.error(f"Error getting answers: {e}")
            return []

    # Difficulty ratings

    def get_difficulty_rating(self, user_id: str, game_id: str) -> float | None:
        try:
            with self.connection() as conn, conn.cursor() as cur:
                cur.execute(
                    "SELECT rating FROM difficulty_ratings WHERE user_id = %s AND game_id = %s",
                    (user_id, game_id)
                )
                row = cur.fetchone()
                return row[0] if row else None
        except Exception as e:
            logger.error(f"Error getting difficulty rating: {e}")
            return None

    def save_difficulty_rating(self, user_id: str, game_id: str, rating: float) -> None:
        try:
            with self.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute("""
                        INSERT INTO difficulty_ratings (user_id, game_id, rating, updated_at)
                        VALUES (%s, %s, %s, CURRENT_TIMESTAMP)
                        ON CONFLICT (user_id, game_id)
                        DO UPDATE SET rating = EXCLUDED.rating, updated_at = CURRENT_TIMESTAMP
                    """, (user_id, game_id, rating))
                conn.commit()
        except Exception as e:
            logger.error(f"Error saving difficulty rating: {e}")
            raise
