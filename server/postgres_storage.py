"""PostgreSQL storage implementation."""

import json
import logging
import os
import psycopg2
from psycopg2.extras import RealDictCursor

from spellplay.errors import PersistenceError
from spellplay.interfaces import Storage
from spellplay.models import Word, SpellingTest, UserProgress, PracticeSessionRecord, sorted_as_created

logger = logging.getLogger(__name__)


class PostgresStorage(Storage):
    """PostgreSQL-based storage implementation."""

    def __init__(self, db_url: str = None):
        self.db_url = db_url or os.environ.get(
            'DATABASE_URL',
            'postgresql://localhost:5432/spellplay'
        )
        self._conn = None
        self._initialized = False

    @property
    def conn(self):
        """Lazy connection initialization."""
        if self._conn is None or self._conn.closed:
            try:
                self._conn = psycopg2.connect(self.db_url)
            except psycopg2.Error as e:
                logger.error(f"Could not connect to database: {e}")
                raise PersistenceError("Database unavailable") from e
            if not self._initialized:
                self._init_db()
                self._initialized = True
        return self._conn

    def _init_db(self):
        """Create tables if they don't exist."""
        with self._conn.cursor() as cur:
            cur.execute("""
                CREATE TABLE IF NOT EXISTS spelling_tests (
                    id VARCHAR(64) PRIMARY KEY,
                    name VARCHAR(255) NOT NULL,
                    help_coins INTEGER NOT NULL DEFAULT 3,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    last_practiced TIMESTAMP
                )
            """)
            cur.execute("""
                CREATE TABLE IF NOT EXISTS words (
                    id VARCHAR(64) PRIMARY KEY,
                    test_id VARCHAR(64) NOT NULL REFERENCES spelling_tests(id) ON DELETE CASCADE,
                    text VARCHAR(255) NOT NULL,
                    display_order INTEGER,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            cur.execute("""
                CREATE INDEX IF NOT EXISTS idx_words_test_id ON words(test_id)
            """)
            cur.execute("""
                CREATE TABLE IF NOT EXISTS user_progress (
                    user_id VARCHAR(255) PRIMARY KEY,
                    progress JSONB NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            cur.execute("""
                CREATE TABLE IF NOT EXISTS practice_sessions (
                    id VARCHAR(64) PRIMARY KEY,
                    user_id VARCHAR(255) NOT NULL,
                    test_id VARCHAR(64) NOT NULL,
                    date TIMESTAMP NOT NULL,
                    words_attempted INTEGER NOT NULL,
                    words_correct INTEGER NOT NULL,
                    streak INTEGER NOT NULL
                )
            """)
            cur.execute("""
                CREATE INDEX IF NOT EXISTS idx_practice_sessions_user ON practice_sessions(user_id, date)
            """)
        self._conn.commit()

    def close(self):
        """Close the database connection."""
        if self._conn and not self._conn.closed:
            self._conn.close()

    def _rollback(self):
        if self._conn and not self._conn.closed:
            self._conn.rollback()

    # Spelling tests

    def _words_for(self, cur, test_id: str) -> list[Word]:
        cur.execute("""
            SELECT id, text, display_order, created_at FROM words WHERE test_id = %s
        """, (test_id,))
        words = [Word(row['text'], display_order=row['display_order'],
                      word_id=row['id'], created_at=row['created_at'])
                 for row in cur.fetchall()]
        return sorted_as_created(words)

    def _test_from_row(self, cur, row) -> SpellingTest:
        test = SpellingTest(row['name'], help_coins=row['help_coins'],
                            test_id=row['id'], created_at=row['created_at'])
        test.last_practiced = row['last_practiced']
        test.words = self._words_for(cur, row['id'])
        return test

    def list_tests(self) -> list[SpellingTest]:
        try:
            with self.conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute("SELECT * FROM spelling_tests ORDER BY created_at DESC")
                rows = cur.fetchall()
                return [self._test_from_row(cur, row) for row in rows]
        except psycopg2.Error as e:
            logger.error(f"Error listing tests: {e}")
            self._rollback()
            raise PersistenceError("Could not list spelling tests") from e

    def get_test(self, test_id: str) -> SpellingTest | None:
        try:
            with self.conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute("SELECT * FROM spelling_tests WHERE id = %s", (test_id,))
                row = cur.fetchone()
                if row:
                    return self._test_from_row(cur, row)
                return None
        except psycopg2.Error as e:
            logger.error(f"Error loading test {test_id}: {e}")
            self._rollback()
            raise PersistenceError("Could not load spelling test") from e

    def save_test(self, test: SpellingTest) -> None:
        try:
            with self.conn.cursor() as cur:
                cur.execute("""
                    INSERT INTO spelling_tests (id, name, help_coins, created_at, last_practiced)
                    VALUES (%s, %s, %s, %s, %s)
                    ON CONFLICT (id) DO UPDATE SET
                        name = EXCLUDED.name,
                        help_coins = EXCLUDED.help_coins,
                        last_practiced = EXCLUDED.last_practiced
                """, (test.id, test.name, test.help_coins, test.created_at, test.last_practiced))
                cur.execute("DELETE FROM words WHERE test_id = %s", (test.id,))
                for word in test.words:
                    cur.execute("""
                        INSERT INTO words (id, test_id, text, display_order, created_at)
                        VALUES (%s, %s, %s, %s, %s)
                    """, (word.id, test.id, word.text, word.display_order, word.created_at))
            self.conn.commit()
        except psycopg2.Error as e:
            logger.error(f"Error saving test {test.id}: {e}")
            self._rollback()
            raise PersistenceError("Could not save spelling test") from e

    def delete_test(self, test_id: str) -> bool:
        try:
            with self.conn.cursor() as cur:
                cur.execute("DELETE FROM spelling_tests WHERE id = %s", (test_id,))
                deleted = cur.rowcount > 0
            self.conn.commit()
            return deleted
        except psycopg2.Error as e:
            logger.error(f"Error deleting test {test_id}: {e}")
            self._rollback()
            raise PersistenceError("Could not delete spelling test") from e

    def load_words(self, test_id: str) -> list[Word]:
        try:
            with self.conn.cursor(cursor_factory=RealDictCursor) as cur:
                return self._words_for(cur, test_id)
        except psycopg2.Error as e:
            logger.error(f"Error loading words for {test_id}: {e}")
            self._rollback()
            raise PersistenceError("Could not load words") from e

    # Progress

    def load_progress(self, user_id: str = "default") -> UserProgress:
        try:
            with self.conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute(
                    "SELECT progress FROM user_progress WHERE user_id = %s",
                    (user_id,)
                )
                row = cur.fetchone()
        except psycopg2.Error as e:
            logger.error(f"Error loading progress for {user_id}: {e}")
            self._rollback()
            raise PersistenceError("Could not load progress") from e
        if row is None:
            return UserProgress()
        try:
            return UserProgress.from_dict(row['progress'])
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Malformed progress for {user_id}: {e}")
            raise PersistenceError(f"Progress for {user_id} is malformed") from e

    def save_progress(self, progress: UserProgress, user_id: str = "default") -> None:
        try:
            with self.conn.cursor() as cur:
                cur.execute("""
                    INSERT INTO user_progress (user_id, progress, updated_at)
                    VALUES (%s, %s, CURRENT_TIMESTAMP)
                    ON CONFLICT (user_id)
                    DO UPDATE SET progress = EXCLUDED.progress, updated_at = CURRENT_TIMESTAMP
                """, (user_id, json.dumps(progress.to_dict())))
            self.conn.commit()
        except psycopg2.Error as e:
            logger.error(f"Error saving progress for {user_id}: {e}")
            self._rollback()
            raise PersistenceError("Could not save progress") from e

    # Session log

    def list_sessions(self, user_id: str = "default") -> list[PracticeSessionRecord]:
        try:
            with self.conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute("""
                    SELECT * FROM practice_sessions WHERE user_id = %s ORDER BY date
                """, (user_id,))
                return [PracticeSessionRecord(
                    row['test_id'], row['words_attempted'], row['words_correct'],
                    row['streak'], date=row['date'], record_id=row['id'])
                    for row in cur.fetchall()]
        except psycopg2.Error as e:
            logger.error(f"Error loading sessions for {user_id}: {e}")
            self._rollback()
            raise PersistenceError("Could not load practice sessions") from e

    def append_session(self, record: PracticeSessionRecord, user_id: str = "default") -> None:
        try:
            with self.conn.cursor() as cur:
                cur.execute("""
                    INSERT INTO practice_sessions
                        (id, user_id, test_id, date, words_attempted, words_correct, streak)
                    VALUES (%s, %s, %s, %s, %s, %s, %s)
                """, (record.id, user_id, record.test_id, record.date,
                      record.words_attempted, record.words_correct, record.streak))
            self.conn.commit()
        except psycopg2.Error as e:
            logger.error(f"Error logging session for {user_id}: {e}")
            self._rollback()
            raise PersistenceError("Could not save practice session") from e

    def list_users(self) -> list[str]:
        """List user ids that have saved progress."""
        try:
            with self.conn.cursor() as cur:
                cur.execute("SELECT user_id FROM user_progress ORDER BY user_id")
                return [row[0] for row in cur.fetchall()]
        except psycopg2.Error as e:
            logger.error(f"Error listing users: {e}")
            self._rollback()
            return []
