"""Tests for JSON file storage."""

import json
import os
import shutil
import tempfile
import unittest
from datetime import datetime
from unittest.mock import patch

from spellplay.models import SpellingTest, UserProgress, PracticeSessionRecord
from spellplay.achievements import AchievementID
from spellplay.errors import PersistenceError
from spellplay.practice import PracticeService
from server.file_storage import FileStorage


class TestFileStorage(unittest.TestCase):

    def setUp(self):
        self.state_dir = tempfile.mkdtemp()
        self.storage = FileStorage(state_dir=self.state_dir)

    def tearDown(self):
        shutil.rmtree(self.state_dir, ignore_errors=True)

    def test_state_dir_from_environment(self):
        with patch.dict(os.environ, {'SPELLPLAY_STATE_DIR': self.state_dir}):
            self.assertEqual(FileStorage().state_dir, self.state_dir)

    def test_tests_roundtrip(self):
        older = SpellingTest('Colors', created_at=datetime(2026, 1, 1))
        newer = SpellingTest('Animals', help_coins=5, created_at=datetime(2026, 2, 1))
        newer.add_words(['cat', 'dog', 'bird'])
        self.storage.save_test(older)
        self.storage.save_test(newer)

        self.assertEqual([t.name for t in self.storage.list_tests()], ['Animals', 'Colors'])
        loaded = self.storage.get_test(newer.id)
        self.assertEqual(loaded.help_coins, 5)
        self.assertEqual([w.text for w in self.storage.load_words(newer.id)], ['cat', 'dog', 'bird'])
        self.assertEqual([w.id for w in loaded.words], [w.id for w in newer.words])

    def test_delete_test(self):
        test = SpellingTest('Colors')
        self.storage.save_test(test)
        self.assertTrue(self.storage.delete_test(test.id))
        self.assertFalse(self.storage.delete_test(test.id))
        self.assertIsNone(self.storage.get_test(test.id))
        self.assertEqual(self.storage.load_words(test.id), [])

    def test_progress_per_user(self):
        self.assertEqual(self.storage.load_progress('maya').total_points, 0)

        progress = UserProgress()
        progress.add_points(150)
        progress.unlock_achievement(AchievementID.FIRST_STEPS)
        self.storage.save_progress(progress, 'maya')

        loaded = self.storage.load_progress('maya')
        self.assertEqual(loaded.total_points, 150)
        self.assertEqual(loaded.level, 2)
        self.assertTrue(loaded.has_achievement(AchievementID.FIRST_STEPS))
        self.assertEqual(self.storage.load_progress().total_points, 0)
        self.assertTrue(os.path.exists(os.path.join(self.state_dir, 'spellplay_progress_maya.json')))
        self.assertEqual(self.storage.list_users(), ['maya'])

    def test_corrupt_progress_raises(self):
        with open(os.path.join(self.state_dir, 'spellplay_progress.json'), 'w') as f:
            f.write('{not json')
        with self.assertRaises(PersistenceError):
            self.storage.load_progress()

    def test_corrupt_session_log_raises(self):
        with open(os.path.join(self.state_dir, 'spellplay_sessions_maya.json'), 'w') as f:
            f.write('[{"test_id": "t1"')
        with self.assertRaises(PersistenceError):
            self.storage.list_sessions('maya')
        with self.assertRaises(PersistenceError):
            self.storage.append_session(PracticeSessionRecord('t1', 1, 1, 1), 'maya')

    def test_unreadable_progress_does_not_overwrite_saved_record(self):
        test = SpellingTest('Animals')
        test.add_words(['cat'])
        self.storage.save_test(test)
        progress = UserProgress()
        progress.add_points(5000)
        progress.unlock_achievement(AchievementID.WORD_WIZARD)
        self.storage.save_progress(progress, 'maya')

        progress_path = os.path.join(self.state_dir, 'spellplay_progress_maya.json')
        real_open = open

        def flaky_open(path, *args, **kwargs):
            if path == progress_path and args[:1] == ('r',):
                raise PermissionError('locked')
            return real_open(path, *args, **kwargs)

        service = PracticeService(self.storage, user_id='maya')
        with patch('builtins.open', side_effect=flaky_open):
            with self.assertRaises(PersistenceError):
                service.start(test.id)
        self.assertFalse(service.active)

        loaded = self.storage.load_progress('maya')
        self.assertEqual(loaded.experience_points, 5000)
        self.assertTrue(loaded.has_achievement(AchievementID.WORD_WIZARD))

    def test_sessions_append_in_date_order(self):
        later = PracticeSessionRecord('t1', 3, 2, 2, date=datetime(2026, 3, 2))
        earlier = PracticeSessionRecord('t1', 2, 2, 1, date=datetime(2026, 3, 1))
        self.storage.append_session(later, 'maya')
        self.storage.append_session(earlier, 'maya')

        records = self.storage.list_sessions('maya')
        self.assertEqual([r.streak for r in records], [1, 2])
        self.assertEqual(records[1].words_attempted, 3)
        self.assertEqual(self.storage.list_sessions('other'), [])

        with open(os.path.join(self.state_dir, 'spellplay_sessions_maya.json')) as f:
            self.assertEqual(len(json.load(f)), 2)

    def test_write_failure_raises_persistence_error(self):
        with patch('builtins.open', side_effect=PermissionError('read-only')):
            with self.assertRaises(PersistenceError):
                self.storage.save_progress(UserProgress(), 'maya')


if __name__ == '__main__':
    unittest.main()
