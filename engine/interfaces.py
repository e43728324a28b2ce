"""Abstract base classes for the collaborators the engine talks to."""

from abc import ABC, abstractmethod

from .models import AnswerRecord, SessionSummary


class ContentSource(ABC):
    """Abstract base class for question content providers."""

    @abstractmethod
    def fetch_questions(self, game_id: str, count: int, difficulty: float | None = None) -> list[dict]:
        """Fetch up to count questions for a game, in play order, preferring
        questions near difficulty when one is given.
        Returns list of {id, content, difficulty} dicts. content is raw
        and is validated by the caller."""
        pass


class SessionStore(ABC):
    """Abstract base class for finished-round persistence.

    Writing is two steps: the session row first, then its answers keyed
    by the id storage assigned to the session.
    """

    @abstractmethod
    def save_session(self, summary: SessionSummary) -> str:
        """Save a finished session. Returns the storage-assigned session id."""
        pass

    @abstractmethod
    def save_answers(self, session_id: str, answers: tuple[AnswerRecord, ...]) -> None:
        """Save the answers of a session saved with save_session."""
        pass


class DifficultySource(ABC):
    """Abstract base class for per-user difficulty ratings."""

    @abstractmethod
    def get_difficulty_rating(self, user_id: str, game_id: str) -> float | None:
        """Get the user's rating for a game. Returns None if there is none."""
        pass
