"""FastAPI server for the mindgym engine."""

import logging
import os

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field
from typing import Any, Optional

from engine.config import QUESTIONS_PER_ROUND, MIN_DIFFICULTY, MAX_DIFFICULTY
from engine.content import CONTENT_MODELS, GameType, validate_content
from engine.errors import (
    ValidationError, InvalidStateError, InvalidResponseError, RoundUnavailableError
)
from engine.evaluators import evaluate
from engine.generators import GeneratorConfig, generate_many, has_generator
from engine.loader import CompositeContentSource, RoundQuestion, prepare_round
from engine.models import AnswerRecord
from engine.scoring import calculate_bpi, target_time_for_game
from engine.session import RoundSession

from server.gemini_provider import GeminiContentSource
from server.file_storage import FileStorage
from server.postgres_storage import PostgresStorage

logger = logging.getLogger(__name__)


# Pydantic models for API
class GenerateRequest(BaseModel):
    difficulty: float = 1
    seed: Optional[str] = None
    count: int = Field(default=1, ge=1, le=50)


class ValidateRequest(BaseModel):
    content: Any


class ScoreRequest(BaseModel):
    accuracy: float
    difficulty: float
    target_time_ms: Optional[float] = None
    actual_time_ms: Optional[float] = None
    guess_rate: float = 0.0
    use_speed: bool = False


class EvaluateRequest(BaseModel):
    content: Any
    response: Any


class StartRoundRequest(BaseModel):
    user_id: str = "default"
    game_id: str
    count: int = Field(default=QUESTIONS_PER_ROUND, ge=1, le=50)
    seed: Optional[str] = None
    metadata: Optional[dict] = None
    game_name: Optional[str] = None
    category_name: Optional[str] = None


class AnswerRequest(BaseModel):
    user_id: str = "default"
    response: Any
    response_time_ms: float = Field(ge=0)


class UserRequest(BaseModel):
    user_id: str = "default"


class ScoreResponse(BaseModel):
    score: int


class EvaluationResponse(BaseModel):
    accuracy: float
    is_correct: bool
    response: dict


# Global state (in production, use proper DI)
storage = None
content_source = None
user_rounds: dict[str, RoundSession] = {}
round_questions: dict[str, list[RoundQuestion]] = {}

app = FastAPI(title="Mindgym API", description="Adaptive scoring and question engine API")


def http_error(e: Exception) -> HTTPException:
    """Map engine errors onto HTTP status codes."""
    if isinstance(e, RoundUnavailableError):
        return HTTPException(status_code=503, detail=str(e))
    if isinstance(e, InvalidStateError):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, ValidationError):
        return HTTPException(status_code=422, detail={'message': str(e), 'errors': e.errors})
    if isinstance(e, (InvalidResponseError, ValueError)):
        return HTTPException(status_code=422, detail=str(e))
    return HTTPException(status_code=500, detail=f"Internal error: {type(e).__name__}: {str(e)}")


def check_game(game_id: str) -> None:
    if game_id not in CONTENT_MODELS:
        raise HTTPException(status_code=404, detail=f"Unknown game: {game_id}")


def get_round(user_id: str) -> RoundSession:
    """Get or create the round session for a user."""
    if user_id not in user_rounds:
        user_rounds[user_id] = RoundSession(store=storage)
    return user_rounds[user_id]


@app.on_event("startup")
async def startup():
    """Initialize storage and content sources on startup."""
    global storage, content_source

    # Use PostgreSQL by default, set MINDGYM_STORAGE=file to use file storage
    storage_type = os.environ.get('MINDGYM_STORAGE', 'postgres')
    if storage_type == 'file':
        storage = FileStorage(state_dir=os.environ.get('MINDGYM_STATE_DIR'))
        print("Using file storage")
    else:
        storage = PostgresStorage()
        print("Using PostgreSQL storage")
    user_rounds.clear()
    round_questions.clear()

    # Get API key from environment variable first, then fall back to config file
    api_key = os.environ.get('GEMINI_API_KEY')
    if not api_key:
        try:
            config = storage.load_config()
            api_key = config.get('gemini_api_key')
        except FileNotFoundError:
            pass

    if api_key:
        gemini = GeminiContentSource(api_key, model_name='gemini-2.0-flash')
        content_source = CompositeContentSource([storage, gemini])
        print("Content sources: storage, gemini-2.0-flash")
    else:
        content_source = storage
        print("Content sources: storage (GEMINI_API_KEY not set)")


@app.get("/api/health")
async def health():
    return {"status": "ok", "storage": type(storage).__name__ if storage else None}


@app.get("/api/games")
async def list_games():
    """List the known games."""
    return {"games": [
        {
            "id": game.value,
            "has_generator": has_generator(game.value),
            "target_time_ms": target_time_for_game(game.value),
        }
        for game in GameType
    ]}


@app.post("/api/games/{game_id}/generate")
async def generate_content(game_id: str, request: GenerateRequest):
    """Generate procedural content for a game."""
    check_game(game_id)
    config = GeneratorConfig(difficulty=request.difficulty, seed=request.seed)
    contents = generate_many(game_id, config, request.count)
    return {"game_id": game_id, "items": [c.to_dict() for c in contents]}


@app.post("/api/content/validate")
async def validate(request: ValidateRequest):
    """Validate a content payload. Invalid content is reported, not repaired."""
    try:
        content = validate_content(request.content)
    except ValidationError as e:
        return {"valid": False, "message": str(e), "errors": e.errors}
    return {"valid": True, "content": content.to_dict()}


@app.post("/api/score", response_model=ScoreResponse)
async def score(request: ScoreRequest):
    """Compute a Brain Performance Index."""
    return ScoreResponse(score=calculate_bpi(
        request.accuracy,
        request.difficulty,
        target_time_ms=request.target_time_ms,
        actual_time_ms=request.actual_time_ms,
        guess_rate=request.guess_rate,
        use_speed=request.use_speed,
    ))


@app.post("/api/evaluate", response_model=EvaluationResponse)
async def evaluate_response(request: EvaluateRequest):
    """Evaluate a player's response against a content payload."""
    try:
        evaluation = evaluate(request.content, request.response)
    except (ValidationError, InvalidResponseError) as e:
        raise http_error(e)
    return EvaluationResponse(accuracy=evaluation.accuracy,
                              is_correct=evaluation.is_correct,
                              response=evaluation.response)


# Round endpoints
@app.post("/api/rounds/start")
async def start_round(request: StartRoundRequest):
    """Load content and start a round for a user."""
    check_game(request.game_id)
    try:
        config, questions = prepare_round(
            request.game_id, request.user_id, request.count,
            content_source=content_source,
            difficulty_source=storage,
            seed=request.seed,
            metadata=request.metadata,
            game_name=request.game_name,
            category_name=request.category_name,
        )
    except (RoundUnavailableError, ValueError) as e:
        logger.warning(f"Cannot start {request.game_id} for {request.user_id}: {e}")
        raise http_error(e)

    session = get_round(request.user_id)
    session.start_round(config)
    round_questions[request.user_id] = questions
    logger.info(f"Round started for {request.user_id}: {request.game_id}, "
                f"{len(questions)} questions at difficulty {config.avg_question_difficulty:.1f}")
    return {
        "state": session.state.to_dict(),
        "difficulty_rating_used": config.difficulty_rating_used,
        "questions": [q.to_dict() for q in questions],
    }


@app.post("/api/rounds/answer")
async def submit_answer(request: AnswerRequest):
    """Evaluate the answer to the next question of the user's round."""
    session = get_round(request.user_id)
    questions = round_questions.get(request.user_id, [])
    index = len(session.answers)
    if not session.state.is_playing:
        raise http_error(InvalidStateError(f"No round in progress for {request.user_id}"))
    if index >= len(questions):
        raise http_error(InvalidStateError("All questions have been answered"))

    question = questions[index]
    try:
        evaluation = evaluate(question.content, request.response)
        session.record_answer(AnswerRecord(
            accuracy=evaluation.accuracy,
            response_time_ms=request.response_time_ms,
            question_id=question.id,
            user_response=evaluation.response,
            # Generated questions have no stored row to reference
            generated_content=question.content.to_dict() if question.id is None else None,
        ))
    except (InvalidResponseError, InvalidStateError, ValueError) as e:
        raise http_error(e)

    return {
        "question_index": index,
        "accuracy": evaluation.accuracy,
        "is_correct": evaluation.is_correct,
        "response": evaluation.response,
        "remaining": len(questions) - index - 1,
        "state": session.state.to_dict(),
    }


@app.post("/api/rounds/end")
async def end_round(request: UserRequest):
    """Score the user's round and persist it."""
    session = get_round(request.user_id)
    try:
        score = await session.end_round()
    except InvalidStateError as e:
        raise http_error(e)

    error = session.last_persistence_error
    return {
        "score": score,
        "state": session.state.to_dict(),
        "session_id": session.last_session_id,
        "persistence_error": str(error) if error else None,
    }


@app.post("/api/rounds/reset")
async def reset_round(request: UserRequest):
    session = get_round(request.user_id)
    session.reset_session()
    round_questions.pop(request.user_id, None)
    return {"state": session.state.to_dict()}


@app.get("/api/rounds/state")
async def round_state(user_id: str = "default"):
    session = get_round(user_id)
    return {
        "state": session.state.to_dict(),
        "game_id": session.config.game_id if session.config else None,
        "answered": len(session.answers),
    }


@app.get("/api/sessions")
async def list_sessions(user_id: str = "default", game_id: str = None, limit: int = 20):
    """Recent finished sessions for a user."""
    return {"sessions": storage.get_sessions(user_id, game_id, limit)}


@app.put("/api/ratings/{user_id}/{game_id}")
async def set_rating(user_id: str, game_id: str, rating: float):
    """Set a user's difficulty rating for a game."""
    check_game(game_id)
    if not MIN_DIFFICULTY <= rating <= MAX_DIFFICULTY:
        raise HTTPException(status_code=422,
                            detail=f"rating must be in [{MIN_DIFFICULTY}, {MAX_DIFFICULTY}]")
    storage.save_difficulty_rating(user_id, game_id, rating)
    return {"user_id": user_id, "game_id": game_id, "rating": rating}


def create_app():
    """Factory function for creating the app (useful for testing)."""
    return app
