"""File-based storage implementation."""

import json
import logging
import os

from spellplay.errors import PersistenceError
from spellplay.interfaces import Storage
from spellplay.models import Word, SpellingTest, UserProgress, PracticeSessionRecord

logger = logging.getLogger(__name__)


class FileStorage(Storage):
    """JSON-file storage: one tests file, per-user progress and session files."""

    def __init__(self, state_dir: str = None):
        # Project root is one level up from server/
        project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
        self.state_dir = state_dir or os.environ.get('SPELLPLAY_STATE_DIR') or project_root

    def _user_file(self, prefix: str, user_id: str) -> str:
        if user_id == "default":
            return os.path.join(self.state_dir, f'{prefix}.json')
        return os.path.join(self.state_dir, f'{prefix}_{user_id}.json')

    def _tests_file(self) -> str:
        return os.path.join(self.state_dir, 'spellplay_tests.json')

    def _read_json(self, path: str, default):
        if not os.path.exists(path):
            return default
        try:
            with open(path, 'r') as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Error reading {path}: {e}")
            raise PersistenceError(f"Could not read {os.path.basename(path)}") from e

    def _write_json(self, path: str, data) -> None:
        tmp_path = f'{path}.tmp'
        try:
            os.makedirs(self.state_dir, exist_ok=True)
            with open(tmp_path, 'w') as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error(f"Error writing {path}: {e}")
            raise PersistenceError(f"Could not write {os.path.basename(path)}") from e

    # Spelling tests

    def _load_tests(self) -> dict:
        data = self._read_json(self._tests_file(), {})
        tests = {}
        for test_id, raw in data.items():
            try:
                tests[test_id] = SpellingTest.from_dict(raw)
            except (KeyError, TypeError, ValueError) as e:
                logger.error(f"Malformed spelling test {test_id}: {e}")
                raise PersistenceError(f"Spelling test {test_id} is malformed") from e
        return tests

    def _save_tests(self, tests: dict) -> None:
        self._write_json(self._tests_file(), {tid: t.to_dict() for tid, t in tests.items()})

    def list_tests(self) -> list[SpellingTest]:
        return sorted(self._load_tests().values(), key=lambda t: t.created_at, reverse=True)

    def get_test(self, test_id: str) -> SpellingTest | None:
        return self._load_tests().get(test_id)

    def save_test(self, test: SpellingTest) -> None:
        tests = self._load_tests()
        tests[test.id] = test
        self._save_tests(tests)

    def delete_test(self, test_id: str) -> bool:
        tests = self._load_tests()
        if test_id not in tests:
            return False
        del tests[test_id]
        self._save_tests(tests)
        return True

    def load_words(self, test_id: str) -> list[Word]:
        test = self.get_test(test_id)
        return test.sorted_words() if test else []

    # Progress

    def load_progress(self, user_id: str = "default") -> UserProgress:
        data = self._read_json(self._user_file('spellplay_progress', user_id), None)
        if data is None:
            return UserProgress()
        try:
            return UserProgress.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Malformed progress for {user_id}: {e}")
            raise PersistenceError(f"Progress for {user_id} is malformed") from e

    def save_progress(self, progress: UserProgress, user_id: str = "default") -> None:
        self._write_json(self._user_file('spellplay_progress', user_id), progress.to_dict())

    # Session log

    def list_sessions(self, user_id: str = "default") -> list[PracticeSessionRecord]:
        data = self._read_json(self._user_file('spellplay_sessions', user_id), [])
        records = []
        for raw in data:
            try:
                records.append(PracticeSessionRecord.from_dict(raw))
            except (KeyError, TypeError, ValueError) as e:
                logger.error(f"Malformed session record for {user_id}: {e}")
                raise PersistenceError(f"Session log for {user_id} is malformed") from e
        return sorted(records, key=lambda r: r.date)

    def append_session(self, record: PracticeSessionRecord, user_id: str = "default") -> None:
        path = self._user_file('spellplay_sessions', user_id)
        data = self._read_json(path, [])
        data.append(record.to_dict())
        self._write_json(path, data)

    def list_users(self) -> list[str]:
        """List user ids that have saved progress."""
        users = []
        if os.path.exists(self.state_dir):
            for filename in os.listdir(self.state_dir):
                if filename == 'spellplay_progress.json':
                    users.append('default')
                elif filename.startswith('spellplay_progress_') and filename.endswith('.json'):
                    users.append(filename[len('spellplay_progress_'):-5])
        return sorted(users)
