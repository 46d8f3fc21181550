"""Session result calculation and formatting."""

from abc import ABC, abstractmethod
from enum import Enum

from .config import GRADE_EXCELLENT_ACCURACY, GRADE_GREAT_ACCURACY, GRADE_GOOD_ACCURACY
from .scoring import is_speedy


class GameResult:
    """Totals shown on a result screen."""

    def __init__(self, total_points: int, total_stars: int, words_completed: int, total_mistakes: int):
        self.total_points = total_points
        self.total_stars = total_stars
        self.words_completed = words_completed
        self.total_mistakes = total_mistakes

    def __eq__(self, other):
        if not isinstance(other, GameResult):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def to_dict(self) -> dict:
        return {
            'total_points': self.total_points,
            'total_stars': self.total_stars,
            'words_completed': self.words_completed,
            'total_mistakes': self.total_mistakes
        }


class ResultCalculator(ABC):
    """Builds a GameResult from session aggregates."""

    @abstractmethod
    def calculate_result(self, total_points: int, total_stars: int,
                         words_completed: int, total_mistakes: int) -> GameResult:
        """Return the result for the given totals. Same inputs, same output."""
        pass


class GameResultService(ResultCalculator):
    """Production result calculator."""

    def calculate_result(self, total_points: int, total_stars: int,
                         words_completed: int, total_mistakes: int) -> GameResult:
        return GameResult(total_points, total_stars, words_completed, total_mistakes)


def stars_for_word(time_taken: float | None, mistakes_this_word: int) -> int:
    """Stars (1-3) for a word in a game: 3 if fast and clean, 2 if clean, 1 otherwise."""
    if mistakes_this_word == 0 and is_speedy(time_taken):
        return 3
    if mistakes_this_word == 0:
        return 2
    return 1


def format_summary(result: GameResult) -> str:
    return (f"{result.total_points} points • {result.total_stars} stars • "
            f"{result.words_completed} words • {result.total_mistakes} mistakes")


class PerformanceGrade(Enum):
    PERFECT = "Perfect!"
    EXCELLENT = "Excellent!"
    GREAT = "Great Job!"
    GOOD = "Good Work!"
    KEEP_PRACTICING = "Keep Practicing!"

    @classmethod
    def calculate(cls, accuracy: float, all_first_try: bool) -> 'PerformanceGrade':
        if accuracy == 1.0 and all_first_try:
            return cls.PERFECT
        if accuracy >= GRADE_EXCELLENT_ACCURACY:
            return cls.EXCELLENT
        if accuracy >= GRADE_GREAT_ACCURACY:
            return cls.GREAT
        if accuracy >= GRADE_GOOD_ACCURACY:
            return cls.GOOD
        return cls.KEEP_PRACTICING
