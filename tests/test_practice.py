"""Tests for the practice service and its persistence handling."""

import unittest
from datetime import datetime, timedelta

from spellplay.models import SpellingTest, UserProgress, PracticeSessionRecord
from spellplay.interfaces import Clock, Storage
from spellplay.errors import ValidationError, InvariantViolation, PersistenceError
from spellplay.achievements import AchievementID
from spellplay.practice import PracticeService
from spellplay.config import PARTIAL_SAVE_MESSAGE


START = datetime(2026, 3, 10, 16, 0, 0)


# ============================================================================
# Mock Implementations
# ============================================================================

class MockClock(Clock):
    def __init__(self, start: datetime = START):
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> datetime:
        self.current += timedelta(seconds=seconds)
        return self.current


class MockStorage(Storage):
    """In-memory storage whose writes can be made to fail."""

    def __init__(self):
        self.tests = {}
        self.progress = {}
        self.sessions = {}
        self.fail_saves = set()  # any of 'test', 'progress', 'session'
        self.fail_loads = set()  # any of 'progress', 'session'
        self.save_progress_calls = 0

    def _maybe_fail(self, kind: str):
        if kind in self.fail_saves:
            raise PersistenceError(f"{kind} store unavailable")

    def list_tests(self) -> list[SpellingTest]:
        return list(self.tests.values())

    def get_test(self, test_id: str) -> SpellingTest | None:
        return self.tests.get(test_id)

    def save_test(self, test: SpellingTest) -> None:
        self._maybe_fail('test')
        self.tests[test.id] = test

    def delete_test(self, test_id: str) -> bool:
        return self.tests.pop(test_id, None) is not None

    def load_words(self, test_id: str) -> list:
        test = self.tests.get(test_id)
        return test.sorted_words() if test else []

    def load_progress(self, user_id: str = "default") -> UserProgress:
        if 'progress' in self.fail_loads:
            raise PersistenceError("progress store unreadable")
        data = self.progress.get(user_id)
        return UserProgress.from_dict(data) if data else UserProgress()

    def save_progress(self, progress: UserProgress, user_id: str = "default") -> None:
        self.save_progress_calls += 1
        self._maybe_fail('progress')
        self.progress[user_id] = progress.to_dict()

    def append_session(self, record: PracticeSessionRecord, user_id: str = "default") -> None:
        self._maybe_fail('session')
        self.sessions.setdefault(user_id, []).append(record)

    def list_sessions(self, user_id: str = "default") -> list[PracticeSessionRecord]:
        if 'session' in self.fail_loads:
            raise PersistenceError("session log unreadable")
        return list(self.sessions.get(user_id, []))

    def list_users(self) -> list[str]:
        return sorted(self.progress)


# ============================================================================
# Tests
# ============================================================================

class PracticeTestCase(unittest.TestCase):

    def setUp(self):
        self.clock = MockClock()
        self.storage = MockStorage()
        self.test = SpellingTest('Animals', help_coins=2)
        self.test.add_words(['cat', 'dog'])
        self.storage.save_test(self.test)
        self.service = PracticeService(self.storage, clock=self.clock, user_id='maya')

    def play_through(self):
        """Answer cat correctly, miss dog, then get dog in round 2."""
        engine = self.service.start(self.test.id)
        cat, dog = self.test.sorted_words()
        engine.submit_answer(cat.id, 'cat', self.clock.advance(10))
        engine.submit_answer(dog.id, 'dgo', self.clock.advance(10))
        engine.submit_answer(dog.id, 'dog', self.clock.advance(3))
        self.clock.advance(5)
        return engine


class TestPracticeStart(PracticeTestCase):
    """Tests for PracticeService.start."""

    def test_start_uses_test_words_and_help_coins(self):
        engine = self.service.start(self.test.id)
        self.assertEqual([w.text for w in engine.all_words], ['cat', 'dog'])
        self.assertEqual(engine.help_budget, 2)
        self.assertTrue(self.service.active)

    def test_unknown_test_rejected(self):
        with self.assertRaises(ValidationError):
            self.service.start('missing')

    def test_test_without_words_rejected(self):
        empty = SpellingTest('Empty')
        self.storage.save_test(empty)
        with self.assertRaises(ValidationError):
            self.service.start(empty.id)

    def test_unreadable_progress_fails_start(self):
        self.storage.fail_loads = {'progress'}
        with self.assertRaises(PersistenceError):
            self.service.start(self.test.id)
        self.assertFalse(self.service.active)

    def test_unreadable_session_log_keeps_streak(self):
        for days_ago in range(1, 4):
            self.storage.append_session(
                PracticeSessionRecord(self.test.id, 2, 2, 4 - days_ago,
                                      date=START - timedelta(days=days_ago)), 'maya')
        self.storage.fail_loads = {'session'}
        with self.assertRaises(PersistenceError):
            self.service.start(self.test.id)

        self.storage.fail_loads = set()
        self.play_through()
        self.assertEqual(self.service.complete().streak, 4)

    def test_complete_without_start_rejected(self):
        with self.assertRaises(InvariantViolation):
            self.service.complete()


class TestPracticeComplete(PracticeTestCase):
    """Tests for PracticeService.complete."""

    def test_complete_saves_everything(self):
        self.play_through()
        outcome = self.service.complete()

        self.assertTrue(outcome.saved)
        self.assertIsNone(outcome.save_error)
        self.assertEqual(outcome.streak, 1)

        saved = self.storage.load_progress('maya')
        self.assertEqual(saved.total_points, 75)
        self.assertEqual(saved.total_sessions_completed, 1)
        self.assertEqual(saved.total_words_mastered, 2)

        records = self.storage.list_sessions('maya')
        self.assertEqual(len(records), 1)
        self.assertEqual(records[0].words_attempted, 3)
        self.assertEqual(records[0].words_correct, 2)
        self.assertEqual(records[0].streak, 1)
        self.assertEqual(records[0].date, self.clock.now())
        self.assertEqual(self.storage.get_test(self.test.id).last_practiced, self.clock.now())

    def test_streak_continues_from_yesterday(self):
        for days_ago in range(1, 7):
            self.storage.append_session(
                PracticeSessionRecord(self.test.id, 2, 2, 7 - days_ago,
                                      date=START - timedelta(days=days_ago)), 'maya')
        self.play_through()
        outcome = self.service.complete()
        self.assertEqual(outcome.streak, 7)
        self.assertIn(AchievementID.STREAK_MASTER, outcome.result.newly_unlocked)

    def test_progress_accumulates_across_sessions(self):
        self.play_through()
        self.service.complete()
        self.play_through()
        outcome = self.service.complete()
        self.assertEqual(outcome.result.progress.total_points, 150)
        self.assertEqual(outcome.result.progress.total_sessions_completed, 2)
        self.assertNotIn(AchievementID.FIRST_STEPS, outcome.result.newly_unlocked)
        self.assertEqual(self.storage.load_progress('maya').level, 2)

    def test_outcome_to_dict(self):
        self.play_through()
        data = self.service.complete().to_dict()
        self.assertEqual(data['summary']['words_attempted'], 3)
        self.assertEqual(data['newly_unlocked'][0], 'first_steps')
        self.assertTrue(data['saved'])
        self.assertEqual(data['streak'], 1)


class TestPracticePersistenceFailure(PracticeTestCase):
    """Save failures keep in-memory progress and allow a retry."""

    def test_failed_progress_save_reports_partial_save(self):
        self.storage.fail_saves = {'progress'}
        self.play_through()
        outcome = self.service.complete()

        self.assertFalse(outcome.saved)
        self.assertEqual(outcome.save_error, PARTIAL_SAVE_MESSAGE)
        self.assertTrue(outcome.save_error.startswith("Progress saved partially."))
        # in-memory progress is kept
        self.assertEqual(outcome.result.progress.total_points, 75)
        self.assertEqual(self.service.load_progress().total_points, 75)
        # the other writes still went through
        self.assertEqual(len(self.storage.list_sessions('maya')), 1)
        self.assertNotIn('maya', self.storage.progress)

    def test_retry_save_after_recovery(self):
        self.storage.fail_saves = {'progress', 'session'}
        self.play_through()
        outcome = self.service.complete()
        self.assertFalse(outcome.saved)

        self.assertFalse(self.service.retry_save())
        self.assertEqual(outcome.save_error, PARTIAL_SAVE_MESSAGE)

        self.storage.fail_saves = set()
        self.assertTrue(self.service.retry_save())
        self.assertTrue(outcome.saved)
        self.assertEqual(self.storage.load_progress('maya').total_points, 75)
        self.assertEqual(len(self.storage.list_sessions('maya')), 1)

    def test_retry_save_with_nothing_pending(self):
        self.play_through()
        self.service.complete()
        calls = self.storage.save_progress_calls
        self.assertTrue(self.service.retry_save())
        self.assertEqual(self.storage.save_progress_calls, calls)


if __name__ == '__main__':
    unittest.main()
