"""FastAPI server for spellplay application."""

import logging
import os
from datetime import datetime

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from typing import Optional, Union

logger = logging.getLogger(__name__)

from spellplay.models import SpellingTest
from spellplay.config import DEFAULT_HELP_COINS
from spellplay.errors import ValidationError, InvariantViolation, PersistenceError
from spellplay.achievements import achievement_statuses, get_achievement
from spellplay.leveling import experience_for_level, progress_to_next_level
from spellplay.practice import PracticeService
from spellplay.results import format_summary
from spellplay.streaks import get_current_streak
from spellplay.utils import split_into_words

from server.file_storage import FileStorage
from server.postgres_storage import PostgresStorage


# Pydantic models for API
class CreateTestRequest(BaseModel):
    name: str
    words: Union[list[str], str] = []  # list of words or whitespace-separated text
    help_coins: int = DEFAULT_HELP_COINS


class AddWordsRequest(BaseModel):
    words: Union[list[str], str]
    help_coins: Optional[int] = None


class StartPracticeRequest(BaseModel):
    test_id: str
    user_id: str = "default"


class AnswerRequest(BaseModel):
    word_id: str
    answer: str
    user_id: str = "default"


class HelpRequest(BaseModel):
    typed: str = ""
    user_id: str = "default"


class UserRequest(BaseModel):
    user_id: str = "default"


class PracticeStateResponse(BaseModel):
    test_id: str
    test_name: str
    phase: str
    current_word: Optional[dict]  # {id, text, length}
    round_number: int
    progress: float
    progress_text: str
    points: int
    total_stars: int
    combo_count: int
    combo_multiplier: int
    help_coins: int
    help_coins_used: int
    words_remaining: int
    all_words_mastered: bool
    is_complete: bool


class HelpResponse(BaseModel):
    revealed: str
    help_coins: int
    help_coins_used: int


class ProgressResponse(BaseModel):
    user_id: str
    level: int
    experience_points: int
    experience_to_next_level: int
    level_progress: float
    total_points: int
    total_stars: int
    total_words_mastered: int
    total_sessions_completed: int
    unlocked_achievements: list[str]
    current_streak: int


# Global state (in production, use proper DI)
storage = None
practice_sessions: dict[str, PracticeService] = {}  # user_id -> active practice


app = FastAPI(title="SpellPlay API", description="Spelling practice with rounds, points and achievements")


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(InvariantViolation)
async def invariant_violation_handler(request: Request, exc: InvariantViolation):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    logger.error(f"Storage failure on {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.on_event("startup")
async def startup():
    """Initialize storage on startup."""
    global storage

    # Use PostgreSQL by default, set SPELLPLAY_STORAGE=file to use file storage
    storage_type = os.environ.get('SPELLPLAY_STORAGE', 'postgres')
    if storage_type == 'file':
        storage = FileStorage()
        logger.info(f"Using file storage in {storage.state_dir}")
    else:
        storage = PostgresStorage()
        logger.info("Using PostgreSQL storage")


def get_test_or_404(test_id: str) -> SpellingTest:
    test = storage.get_test(test_id)
    if test is None:
        raise HTTPException(status_code=404, detail="Spelling test not found")
    return test


def get_practice(user_id: str = "default") -> PracticeService:
    """Get the active practice for a user, or 404."""
    service = practice_sessions.get(user_id)
    if service is None or service.engine is None:
        raise HTTPException(status_code=404, detail="No active practice session")
    return service


def practice_state(service: PracticeService) -> dict:
    engine = service.engine
    word = engine.current_word
    return {
        'test_id': service.test.id,
        'test_name': service.test.name,
        'phase': engine.phase.value,
        'current_word': {'id': word.id, 'text': word.text, 'length': len(word.text)} if word else None,
        'round_number': engine.round_number,
        'progress': engine.progress,
        'progress_text': engine.progress_text,
        'points': engine.points,
        'total_stars': engine.total_stars,
        'combo_count': engine.combo_count,
        'combo_multiplier': engine.combo_multiplier,
        'help_coins': engine.help_budget,
        'help_coins_used': engine.help_coins_used,
        'words_remaining': len(engine.misspelled_words),
        'all_words_mastered': engine.all_words_mastered,
        'is_complete': engine.is_complete
    }


def words_from(value) -> list[str]:
    if isinstance(value, str):
        return split_into_words(value)
    return [w for w in value if w and w.strip()]


@app.get("/")
async def root():
    """Health check."""
    return {"service": "spellplay", "status": "ok"}


@app.get("/api/users")
async def list_users():
    """List all users with saved progress."""
    users = storage.list_users()
    # Filter out 'default' as it's a system user
    users = [u for u in users if u != 'default']
    return {"users": users}


# Spelling test endpoints
@app.get("/api/tests")
async def list_tests():
    """List all spelling tests, newest first."""
    return {"tests": [t.to_dict() for t in storage.list_tests()]}


@app.post("/api/tests")
async def create_test(request: CreateTestRequest):
    """Create a spelling test."""
    name = request.name.strip()
    if not name:
        raise ValidationError("Test name cannot be empty")
    test = SpellingTest(name, help_coins=request.help_coins)
    test.add_words(words_from(request.words))
    storage.save_test(test)
    logger.info(f"Created test '{name}' with {len(test.words)} words")
    return test.to_dict()


@app.get("/api/tests/{test_id}")
async def get_test(test_id: str):
    return get_test_or_404(test_id).to_dict()


@app.delete("/api/tests/{test_id}")
async def delete_test(test_id: str):
    if not storage.delete_test(test_id):
        raise HTTPException(status_code=404, detail="Spelling test not found")
    return {"success": True, "test_id": test_id}


@app.post("/api/tests/{test_id}/words")
async def add_words(test_id: str, request: AddWordsRequest):
    """Append words to a test and optionally change its help coins."""
    test = get_test_or_404(test_id)
    added = test.add_words(words_from(request.words))
    if request.help_coins is not None:
        test.set_help_coins(request.help_coins)
    storage.save_test(test)
    return {"added": [w.to_dict() for w in added], "test": test.to_dict()}


# Practice endpoints
@app.post("/api/practice/start", response_model=PracticeStateResponse)
async def start_practice(request: StartPracticeRequest):
    """Start a practice session, replacing any unfinished one for this user."""
    if storage.get_test(request.test_id) is None:
        raise HTTPException(status_code=404, detail="Spelling test not found")
    service = PracticeService(storage, user_id=request.user_id)
    service.start(request.test_id)
    practice_sessions[request.user_id] = service
    return PracticeStateResponse(**practice_state(service))


@app.get("/api/practice/state", response_model=PracticeStateResponse)
async def get_practice_state(user_id: str = "default"):
    return PracticeStateResponse(**practice_state(get_practice(user_id)))


@app.post("/api/practice/answer")
async def submit_answer(request: AnswerRequest):
    """Submit an answer for the current word."""
    service = get_practice(request.user_id)
    result = service.engine.submit_answer(request.word_id, request.answer)
    data = result.to_dict()
    data['state'] = practice_state(service)
    return data


@app.post("/api/practice/help", response_model=HelpResponse)
async def use_help(request: HelpRequest):
    """Spend a help coin to reveal the next letter."""
    engine = get_practice(request.user_id).engine
    revealed = engine.use_help_coin(request.typed)
    return HelpResponse(
        revealed=revealed,
        help_coins=engine.help_budget,
        help_coins_used=engine.help_coins_used
    )


@app.post("/api/practice/complete")
async def complete_practice(request: UserRequest):
    """Finish the session: apply points, levels and achievements, then save."""
    service = get_practice(request.user_id)
    outcome = service.complete()
    if outcome.saved:
        practice_sessions.pop(request.user_id, None)
    data = outcome.to_dict()
    data['achievements'] = [get_achievement(a).to_dict() for a in outcome.result.newly_unlocked]
    data['summary_text'] = format_summary(outcome.result.game_result)
    return data


@app.post("/api/practice/retry-save")
async def retry_save(request: UserRequest):
    """Retry saving a completed session whose save failed."""
    service = get_practice(request.user_id)
    saved = service.retry_save()
    if saved:
        practice_sessions.pop(request.user_id, None)
    return {
        "saved": saved,
        "save_error": service.outcome.save_error if service.outcome else None
    }


# Progress endpoints
def load_user_progress(user_id: str):
    service = practice_sessions.get(user_id)
    if service is not None:
        return service.load_progress()
    return storage.load_progress(user_id)


@app.get("/api/progress", response_model=ProgressResponse)
async def get_progress(user_id: str = "default"):
    """Get level, totals and streak for a user."""
    progress = load_user_progress(user_id)
    streak = get_current_streak(storage.list_sessions(user_id), datetime.now())
    return ProgressResponse(
        user_id=user_id,
        level=progress.level,
        experience_points=progress.experience_points,
        experience_to_next_level=experience_for_level(progress.level + 1) - progress.experience_points,
        level_progress=progress_to_next_level(progress.level, progress.experience_points),
        total_points=progress.total_points,
        total_stars=progress.total_stars,
        total_words_mastered=progress.total_words_mastered,
        total_sessions_completed=progress.total_sessions_completed,
        unlocked_achievements=list(progress.unlocked_achievements),
        current_streak=streak
    )


@app.get("/api/achievements")
async def get_achievements(user_id: str = "default"):
    """Achievement catalog with unlocked flags for a user."""
    progress = load_user_progress(user_id)
    return {"achievements": achievement_statuses(progress)}


def create_app():
    """Factory function for creating the app (useful for testing)."""
    return app
