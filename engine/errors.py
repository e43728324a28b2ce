"""Error types raised by the engine."""


class ValidationError(Exception):
    """Raised when game content does not match its schema."""

    def __init__(self, message: str, errors: list | None = None):
        super().__init__(message)
        self.errors = errors or []


class InvalidStateError(Exception):
    """Raised when the round session is driven out of order."""


class InvalidResponseError(ValueError):
    """Raised when a player response cannot be evaluated against its content."""


class RoundUnavailableError(Exception):
    """A round cannot be started. Distinct from a finished round scoring zero."""


class ContentUnavailableError(RoundUnavailableError):
    """No valid content could be sourced or generated for a game."""

    def __init__(self, game_id: str, message: str | None = None):
        super().__init__(message or f"No valid content available for '{game_id}'")
        self.game_id = game_id


class GenerationExhausted(RoundUnavailableError):
    """The retry cap was hit before a fair layout was produced."""

    def __init__(self, attempts: int, best_attempt):
        super().__init__(f"Still solved after {attempts} shuffles")
        self.attempts = attempts
        self.best_attempt = best_attempt


class PersistenceError(Exception):
    """Storage failed to write a finished session.

    ``session_id`` is set when the session row was written but its answers
    were not, so storage can reconcile the partial write.
    """

    def __init__(self, message: str, session_id: str | None = None):
        super().__init__(message)
        self.session_id = session_id
