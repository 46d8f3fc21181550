"""Abstract base classes for dependency injection."""

from abc import ABC, abstractmethod
from datetime import datetime

from .models import Word, SpellingTest, UserProgress, PracticeSessionRecord


class Clock(ABC):
    """Source of the current time. Tests supply fixed times."""

    @abstractmethod
    def now(self) -> datetime:
        pass


class WordSource(ABC):
    """Read-only access to the words of a spelling test."""

    @abstractmethod
    def load_words(self, test_id: str) -> list[Word]:
        """Load the words of a test, already sorted by display order / creation order."""
        pass


class ProgressStore(ABC):
    """Load/save contract for lifetime learner progress."""

    @abstractmethod
    def load_progress(self, user_id: str = "default") -> UserProgress:
        """Load progress for a user. Returns a zeroed record on first use."""
        pass

    @abstractmethod
    def save_progress(self, progress: UserProgress, user_id: str = "default") -> None:
        """Save progress for a user. Raises PersistenceError on failure."""
        pass


class SessionLog(ABC):
    """Append-only log of completed practice sessions."""

    @abstractmethod
    def append_session(self, record: PracticeSessionRecord, user_id: str = "default") -> None:
        """Append a session record. Raises PersistenceError on failure."""
        pass

    @abstractmethod
    def list_sessions(self, user_id: str = "default") -> list[PracticeSessionRecord]:
        """All logged sessions for a user, oldest first."""
        pass


class Storage(WordSource, ProgressStore, SessionLog):
    """Full storage backend: the three collaborators plus spelling-test management."""

    @abstractmethod
    def list_tests(self) -> list[SpellingTest]:
        """All spelling tests, newest first."""
        pass

    @abstractmethod
    def get_test(self, test_id: str) -> SpellingTest | None:
        """Get a spelling test by id. Returns None if not found."""
        pass

    @abstractmethod
    def save_test(self, test: SpellingTest) -> None:
        """Create or replace a spelling test. Raises PersistenceError on failure."""
        pass

    @abstractmethod
    def delete_test(self, test_id: str) -> bool:
        """Delete a spelling test. Returns True if it existed."""
        pass

    @abstractmethod
    def list_users(self) -> list[str]:
        """User ids that have saved progress."""
        pass
