"""Practice flow: load a test, run a RoundEngine, persist the outcome."""

import logging

from .config import PARTIAL_SAVE_MESSAGE
from .errors import InvariantViolation, PersistenceError, ValidationError
from .interfaces import Clock, Storage
from .models import PracticeSessionRecord, UserProgress
from .results import ResultCalculator
from .rounds import CompleteResult, RoundEngine
from .streaks import calculate_new_streak, get_current_streak
from .utils import SystemClock

logger = logging.getLogger(__name__)


class PracticeOutcome:
    """Completed session plus the state of its persistence."""

    def __init__(self, result: CompleteResult, record: PracticeSessionRecord,
                 streak: int, save_error: str | None = None):
        self.result = result
        self.record = record
        self.streak = streak
        self.save_error = save_error

    @property
    def saved(self) -> bool:
        return self.save_error is None

    def to_dict(self) -> dict:
        data = self.result.to_dict()
        data['streak'] = self.streak
        data['saved'] = self.saved
        data['save_error'] = self.save_error
        return data


class PracticeService:
    """Runs one learner's practice sessions against a storage backend."""

    def __init__(self, storage: Storage, clock: Clock = None, user_id: str = "default",
                 result_service: ResultCalculator = None):
        self.storage = storage
        self.clock = clock or SystemClock()
        self.user_id = user_id
        self.result_service = result_service
        self.engine = None
        self.test = None
        self.progress = None
        self.current_streak = 0
        self.records = []
        self.outcome = None
        self._pending = []

    def start(self, test_id: str) -> RoundEngine:
        test = self.storage.get_test(test_id)
        if test is None:
            raise ValidationError(f"Unknown spelling test: {test_id}")
        words = self.storage.load_words(test_id)
        if not words:
            raise ValidationError(f"Spelling test '{test.name}' has no words")

        # Read errors propagate: a fresh record would overwrite the saved one on completion
        self.progress = self.storage.load_progress(self.user_id)
        self.records = self.storage.list_sessions(self.user_id)
        self.current_streak = get_current_streak(self.records, self.clock.now())

        self.engine = RoundEngine(self.clock, self.result_service).setup(words, test.help_coins)
        self.test = test
        self.outcome = None
        self._pending = []
        logger.info(f"User {self.user_id} started practicing '{test.name}'")
        return self.engine

    @property
    def active(self) -> bool:
        return self.engine is not None and not self.engine.is_complete

    def complete(self) -> PracticeOutcome:
        """Complete the session and persist it.

        Save failures do not undo anything: the outcome carries a save_error
        and the pending writes stay queued for retry_save().
        """
        if self.engine is None:
            raise InvariantViolation("No practice session to complete")

        now = self.clock.now()
        streak = calculate_new_streak(self.records, now)
        result = self.engine.complete_session(self.progress, streak, now)

        record = PracticeSessionRecord(
            self.test.id,
            result.summary.words_attempted,
            result.summary.words_mastered,
            streak,
            date=now
        )
        self.test.last_practiced = now
        self.current_streak = streak

        self._pending = [
            ('test', self.test),
            ('session', record),
            ('progress', self.progress),
        ]
        save_error = None if self._flush() else PARTIAL_SAVE_MESSAGE
        self.outcome = PracticeOutcome(result, record, streak, save_error)
        return self.outcome

    def retry_save(self) -> bool:
        """Re-attempt any writes that failed. Returns True once everything is saved."""
        if not self._pending:
            return True
        saved = self._flush()
        if saved and self.outcome is not None:
            self.outcome.save_error = None
        return saved

    def _flush(self) -> bool:
        failed = []
        for kind, item in self._pending:
            try:
                self._save(kind, item)
            except PersistenceError as e:
                logger.error(f"Failed to save {kind} for user {self.user_id}: {e}")
                failed.append((kind, item))
        self._pending = failed
        return not failed

    def _save(self, kind: str, item):
        if kind == 'test':
            self.storage.save_test(item)
        elif kind == 'session':
            self.storage.append_session(item, self.user_id)
        else:
            self.storage.save_progress(item, self.user_id)

    def load_progress(self) -> UserProgress:
        """Progress for display: the in-memory copy while a save is pending."""
        if self._pending and self.progress is not None:
            return self.progress
        return self.storage.load_progress(self.user_id)

