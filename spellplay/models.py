"""Domain models for spellplay application."""

import uuid
from datetime import datetime

from .config import DEFAULT_HELP_COINS, MIN_HELP_COINS, MAX_HELP_COINS
from .leveling import level_from_experience
from .scoring import get_combo_multiplier


def new_id() -> str:
    return str(uuid.uuid4())


def _parse_datetime(value) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def _format_datetime(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


class Word:
    """A word to spell. Immutable once created."""

    __slots__ = ('id', 'text', 'display_order', 'created_at')

    def __init__(self, text: str, display_order: int | None = None,
                 word_id: str = None, created_at: datetime = None):
        object.__setattr__(self, 'id', word_id or new_id())
        object.__setattr__(self, 'text', (text or '').strip())
        object.__setattr__(self, 'display_order', display_order)
        object.__setattr__(self, 'created_at', created_at or datetime.now())

    def __setattr__(self, name, value):
        raise AttributeError(f"Word is immutable (tried to set {name!r})")

    def __eq__(self, other):
        if not isinstance(other, Word):
            return NotImplemented
        return self.id == other.id and self.text == other.text

    def __hash__(self):
        return hash(self.id)

    def __repr__(self):
        return f"Word({self.text!r}, display_order={self.display_order})"

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'text': self.text,
            'display_order': self.display_order,
            'created_at': _format_datetime(self.created_at)
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Word':
        return cls(
            data['text'],
            display_order=data.get('display_order'),
            word_id=data.get('id'),
            created_at=_parse_datetime(data.get('created_at'))
        )


def sorted_as_created(words: list[Word]) -> list[Word]:
    """Order words by display_order, falling back to creation time for words without one."""
    indexed = list(enumerate(words))
    indexed.sort(key=lambda item: (
        item[1].display_order is None,
        item[1].display_order if item[1].display_order is not None else 0,
        item[1].created_at,
        item[0]
    ))
    return [word for _, word in indexed]


class SpellingTest:
    """A parent-created list of words with a help-coin allowance."""

    def __init__(self, name: str, help_coins: int = DEFAULT_HELP_COINS,
                 test_id: str = None, created_at: datetime = None):
        self.id = test_id or new_id()
        self.name = name
        self.set_help_coins(help_coins)
        self.words = []
        self.created_at = created_at or datetime.now()
        self.last_practiced = None

    def set_help_coins(self, help_coins: int) -> None:
        """Set the help-coin allowance, clamped to the allowed range."""
        self.help_coins = max(MIN_HELP_COINS, min(MAX_HELP_COINS, int(help_coins)))

    def sorted_words(self) -> list[Word]:
        return sorted_as_created(self.words)

    def add_words(self, texts: list[str]) -> list[Word]:
        """Append words after the current highest display order. Blank entries are skipped."""
        orders = [w.display_order for w in self.words if w.display_order is not None]
        next_order = (max(orders) if orders else len(self.words) - 1) + 1
        added = []
        for text in texts:
            if not text or not text.strip():
                continue
            word = Word(text, display_order=next_order + len(added))
            self.words.append(word)
            added.append(word)
        return added

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'help_coins': self.help_coins,
            'words': [w.to_dict() for w in self.sorted_words()],
            'created_at': _format_datetime(self.created_at),
            'last_practiced': _format_datetime(self.last_practiced)
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'SpellingTest':
        test = cls(
            data['name'],
            help_coins=data.get('help_coins', DEFAULT_HELP_COINS),
            test_id=data.get('id'),
            created_at=_parse_datetime(data.get('created_at'))
        )
        test.words = [Word.from_dict(w) for w in data.get('words', [])]
        test.last_practiced = _parse_datetime(data.get('last_practiced'))
        return test


class RoundState:
    """Round-by-round progress through the word list."""

    def __init__(self, words: list[Word]):
        self.round_number = 1
        self.words_in_round = list(words)
        self.current_index = 0
        self.round_results = {}   # word id -> bool, cleared every round
        self.mastered = set()     # word ids answered correctly at least once

    @property
    def current_word(self) -> Word | None:
        if self.current_index < len(self.words_in_round):
            return self.words_in_round[self.current_index]
        return None

    @property
    def is_last_word(self) -> bool:
        return self.current_index >= len(self.words_in_round) - 1

    def is_perfect(self) -> bool:
        """True when the round had at least one word and every result is correct."""
        return bool(self.round_results) and all(self.round_results.values())

    def remaining(self, all_words: list[Word]) -> list[Word]:
        return [w for w in all_words if w.id not in self.mastered]

    def start_next_round(self, all_words: list[Word]) -> None:
        self.words_in_round = self.remaining(all_words)
        self.round_results = {}
        self.current_index = 0
        self.round_number += 1


class ScoreState:
    """Points, combo and stars for one session."""

    def __init__(self):
        self.points = 0
        self.combo_count = 0
        self.stars_per_word = []
        self.total_stars = 0
        self.mistakes = 0

    @property
    def combo_multiplier(self) -> int:
        return get_combo_multiplier(self.combo_count)

    def record_correct(self, points: int, stars: int) -> None:
        self.points += points
        self.stars_per_word.append(stars)
        self.total_stars += stars

    def record_miss(self) -> None:
        self.combo_count = 0
        self.mistakes += 1
        self.stars_per_word.append(0)

    def add_bonus(self, points: int) -> None:
        self.points += points


class UserProgress:
    """Lifetime progress for one learner. The level is always derived from experience."""

    def __init__(self):
        self.id = new_id()
        self.total_points = 0
        self.total_stars = 0
        self.experience_points = 0
        self.unlocked_achievements = []  # achievement id strings, unlock order
        self.total_words_mastered = 0
        self.total_sessions_completed = 0
        self.created_at = datetime.now()
        self.last_updated = self.created_at

    @property
    def level(self) -> int:
        return level_from_experience(self.experience_points)

    @staticmethod
    def _achievement_key(achievement_id) -> str:
        return getattr(achievement_id, 'value', achievement_id)

    def has_achievement(self, achievement_id) -> bool:
        return self._achievement_key(achievement_id) in self.unlocked_achievements

    def unlock_achievement(self, achievement_id) -> bool:
        """Unlock an achievement. Returns False if it was already unlocked."""
        if self.has_achievement(achievement_id):
            return False
        self.unlocked_achievements.append(self._achievement_key(achievement_id))
        return True

    def add_points(self, points: int) -> None:
        self.total_points += points
        self.experience_points += points

    def add_stars(self, stars: int) -> None:
        self.total_stars += stars

    def add_words_mastered(self, count: int) -> None:
        self.total_words_mastered += max(count, 0)

    def increment_sessions_completed(self) -> None:
        self.total_sessions_completed += 1

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'total_points': self.total_points,
            'total_stars': self.total_stars,
            'level': self.level,
            'experience_points': self.experience_points,
            'unlocked_achievements': list(self.unlocked_achievements),
            'total_words_mastered': self.total_words_mastered,
            'total_sessions_completed': self.total_sessions_completed,
            'created_at': _format_datetime(self.created_at),
            'last_updated': _format_datetime(self.last_updated)
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'UserProgress':
        progress = cls()
        progress.id = data.get('id', progress.id)
        progress.total_points = data.get('total_points', 0)
        progress.total_stars = data.get('total_stars', 0)
        # Stored 'level' is ignored; it is re-derived from experience
        progress.experience_points = data.get('experience_points', 0)
        seen = set()
        for achievement_id in data.get('unlocked_achievements', []):
            if achievement_id not in seen:
                seen.add(achievement_id)
                progress.unlocked_achievements.append(achievement_id)
        progress.total_words_mastered = data.get('total_words_mastered', 0)
        progress.total_sessions_completed = data.get('total_sessions_completed', 0)
        progress.created_at = _parse_datetime(data.get('created_at')) or progress.created_at
        progress.last_updated = _parse_datetime(data.get('last_updated')) or progress.created_at
        return progress


class SessionSummary:
    """Aggregated counts for one finished practice session."""

    def __init__(self, words_attempted: int, words_mastered: int, is_perfect_round: bool,
                 round_time_seconds: float, help_coins_used: int, had_initial_mistakes: bool,
                 all_words_mastered: bool, session_time_seconds: float = 0.0,
                 is_first_session: bool = False, current_streak: int = 0,
                 total_points: int = 0, total_stars: int = 0, rounds: int = 1):
        self.words_attempted = words_attempted
        self.words_mastered = words_mastered
        self.is_perfect_round = is_perfect_round
        self.round_time_seconds = round_time_seconds
        self.help_coins_used = help_coins_used
        self.had_initial_mistakes = had_initial_mistakes
        self.all_words_mastered = all_words_mastered
        self.session_time_seconds = session_time_seconds
        self.is_first_session = is_first_session
        self.current_streak = current_streak
        self.total_points = total_points
        self.total_stars = total_stars
        self.rounds = rounds

    def to_dict(self) -> dict:
        return {
            'words_attempted': self.words_attempted,
            'words_mastered': self.words_mastered,
            'is_perfect_round': self.is_perfect_round,
            'round_time_seconds': self.round_time_seconds,
            'help_coins_used': self.help_coins_used,
            'had_initial_mistakes': self.had_initial_mistakes,
            'all_words_mastered': self.all_words_mastered,
            'session_time_seconds': self.session_time_seconds,
            'is_first_session': self.is_first_session,
            'current_streak': self.current_streak,
            'total_points': self.total_points,
            'total_stars': self.total_stars,
            'rounds': self.rounds
        }


class PracticeSessionRecord:
    """One entry in the session log; streaks are derived from these."""

    def __init__(self, test_id: str, words_attempted: int, words_correct: int,
                 streak: int, date: datetime = None, record_id: str = None):
        self.id = record_id or new_id()
        self.test_id = test_id
        self.date = date or datetime.now()
        self.words_attempted = words_attempted
        self.words_correct = words_correct
        self.streak = streak

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'test_id': self.test_id,
            'date': _format_datetime(self.date),
            'words_attempted': self.words_attempted,
            'words_correct': self.words_correct,
            'streak': self.streak
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'PracticeSessionRecord':
        return cls(
            data['test_id'],
            data.get('words_attempted', 0),
            data.get('words_correct', 0),
            data.get('streak', 0),
            date=_parse_datetime(data.get('date')),
            record_id=data.get('id')
        )
