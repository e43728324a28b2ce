"""File-based storage implementation."""

import json
import logging
import os
import random
import tempfile
import threading
import uuid
from datetime import datetime, timezone

from engine.config import DEFAULT_DIFFICULTY_RATING
from engine.interfaces import ContentSource, SessionStore, DifficultySource
from engine.models import AnswerRecord, SessionSummary

logger = logging.getLogger(__name__)


def _difficulty_of(question: dict) -> float:
    value = question.get('difficulty')
    return DEFAULT_DIFFICULTY_RATING if value is None else value


class FileStorage(ContentSource, SessionStore, DifficultySource):
    """JSON files in a state directory. Good for local play and tests."""

    def __init__(self, config_file: str = None, state_dir: str = None):
        self.config_file = config_file or os.path.expanduser('~/.config/mindgym/config.json')
        # Project root is one level up from server/
        project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
        self.state_dir = state_dir or project_root
        # Sessions are saved from worker threads; every read-modify-write holds this
        self._lock = threading.RLock()

    def _path(self, name: str) -> str:
        return os.path.join(self.state_dir, f'mindgym_{name}.json')

    def _load(self, name: str, default, strict: bool = False):
        """Read a data file. With strict, an unreadable file raises instead
        of reading as empty, so a write never replaces data it could not read."""
        path = self._path(name)
        if os.path.exists(path):
            try:
                with open(path, 'r') as f:
                    return json.load(f)
            except Exception as e:
                logger.error(f"Error reading {path}: {e}")
                if strict:
                    raise
                return default
        return default

    def _save(self, name: str, data) -> None:
        os.makedirs(self.state_dir, exist_ok=True)
        path = self._path(name)
        fd, tmp_path = tempfile.mkstemp(dir=self.state_dir, prefix=f'.mindgym_{name}.', suffix='.tmp')
        try:
            with os.fdopen(fd, 'w') as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, path)
        except BaseException:
            os.unlink(tmp_path)
            raise

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
        questions = list(self._load('questions', {}).get(game_id, []))
        random.shuffle(questions)
        if difficulty is not None:
            # Closest to the player's rating first; the shuffle keeps ties random
            questions.sort(key=lambda q: abs(_difficulty_of(q) - difficulty))
        return questions[:count]

    def seed_questions(self, game_id: str, items: list[dict]) -> int:
        """Append questions for a game. items are {content, difficulty, id?}.
        Returns the number stored."""
        with self._lock:
            questions = self._load('questions', {}, strict=True)
            bank = questions.setdefault(game_id, [])
            for item in items:
                bank.append({
                    'id': item.get('id') or uuid.uuid4().hex,
                    'content': item['content'],
                    'difficulty': item.get('difficulty'),
                })
            self._save('questions', questions)
        return len(items)

    def count_questions(self, game_id: str) -> int:
        return len(self._load('questions', {}).get(game_id, []))

    # Sessions

    def save_session(self, summary: SessionSummary) -> str:
        session_id = uuid.uuid4().hex
        with self._lock:
            sessions = self._load('sessions', [], strict=True)
            sessions.append({
                'id': session_id,
                'created_at': datetime.now(timezone.utc).isoformat(),
                **summary.to_dict()
            })
            self._save('sessions', sessions)
        return session_id

    def save_answers(self, session_id: str, answers: tuple[AnswerRecord, ...]) -> None:
        with self._lock:
            rows = self._load('answers', [], strict=True)
            for answer in answers:
                rows.append({'session_id': session_id, **answer.to_dict()})
            self._save('answers', rows)

    def get_sessions(self, user_id: str, game_id: str = None, limit: int = 20) -> list[dict]:
        """Most recent sessions for a user, newest first."""
        sessions = [s for s in self._load('sessions', [])
                    if s['user_id'] == user_id and (game_id is None or s['game_id'] == game_id)]
        return list(reversed(sessions))[:limit]

    def get_answers(self, session_id: str) -> list[dict]:
        return [a for a in self._load('answers', []) if a['session_id'] == session_id]

    # Difficulty ratings

    def get_difficulty_rating(self, user_id: str, game_id: str) -> float | None:
        return self._load('ratings', {}).get(user_id, {}).get(game_id)

    def save_difficulty_rating(self, user_id: str, game_id: str, rating: float) -> None:
        with self._lock:
            ratings = self._load('ratings', {}, strict=True)
            ratings.setdefault(user_id, {})[game_id] = rating
            self._save('ratings', ratings)
