"""Shared state for single-pass spelling games.

Unlike a practice session, a game walks the word list once; a missed
word stays current until it is answered (or the caller advances past it).
"""

import logging
from datetime import datetime
from enum import Enum

from .errors import InvariantViolation, ValidationError
from .interfaces import Clock
from .models import Word
from .results import GameResult, GameResultService, ResultCalculator, stars_for_word
from .scoring import calculate_points, get_combo_multiplier
from .utils import SystemClock, matches

logger = logging.getLogger(__name__)


class GamePhase(Enum):
    READY = 'ready'
    PLAYING = 'playing'
    WORD_COMPLETE = 'word_complete'
    GAME_COMPLETE = 'game_complete'


class GameSession:
    def __init__(self, clock: Clock = None, result_service: ResultCalculator = None):
        self.clock = clock or SystemClock()
        self.result_service = result_service or GameResultService()
        self.words = []
        self.reset()

    def setup(self, words: list[Word]) -> 'GameSession':
        if not words:
            raise ValidationError("No words provided to game")
        self.words = list(words)
        self.reset()
        return self

    def reset(self):
        self.current_index = 0
        self.phase = GamePhase.READY
        self.score = 0
        self.combo_count = 0
        self.total_stars = 0
        self.total_mistakes = 0
        self.mistakes_this_word = 0
        self.word_started_at = None
        self.result = None

    @property
    def current_word(self) -> Word | None:
        if self.current_index >= len(self.words):
            return None
        return self.words[self.current_index]

    @property
    def target_text(self) -> str:
        word = self.current_word
        return word.text if word else ""

    @property
    def combo_multiplier(self) -> int:
        return get_combo_multiplier(self.combo_count)

    @property
    def is_complete(self) -> bool:
        return self.current_index >= len(self.words)

    @property
    def progress(self) -> float:
        if not self.words:
            return 0.0
        return self.current_index / len(self.words)

    def start_word_timer(self, now: datetime = None):
        if self.current_word is None:
            raise InvariantViolation("No word to start")
        self.word_started_at = now or self.clock.now()
        self.mistakes_this_word = 0
        self.phase = GamePhase.PLAYING

    def handle_correct_answer(self, now: datetime = None) -> tuple[int, int]:
        """Score the current word. Returns (points, stars)."""
        if self.current_word is None:
            raise InvariantViolation("Game is already complete")
        now = now or self.clock.now()
        time_taken = None
        if self.word_started_at is not None:
            time_taken = max((now - self.word_started_at).total_seconds(), 0.0)

        self.combo_count += 1
        result = calculate_points(True, self.combo_count, time_taken,
                                  is_first_try=self.mistakes_this_word == 0)
        stars = stars_for_word(time_taken, self.mistakes_this_word)
        self.score += result.total_points
        self.total_stars += stars
        self.phase = GamePhase.WORD_COMPLETE
        return result.total_points, stars

    def handle_incorrect_answer(self):
        if self.current_word is None:
            raise InvariantViolation("Game is already complete")
        self.combo_count = 0
        self.mistakes_this_word += 1
        self.total_mistakes += 1

    def submit(self, answer: str, now: datetime = None) -> bool:
        """Grade typed text against the current word, scoring it either way."""
        if matches(self.target_text, answer):
            self.handle_correct_answer(now)
            return True
        self.handle_incorrect_answer()
        return False

    def advance_to_next_word(self):
        self.current_index += 1
        self.mistakes_this_word = 0
        self.word_started_at = None
        if self.is_complete:
            self.phase = GamePhase.GAME_COMPLETE
            logger.info(f"Game complete: {self.score} points, {self.total_stars} stars")
        else:
            self.phase = GamePhase.READY

    def finish(self) -> GameResult:
        self.result = self.result_service.calculate_result(
            self.score, self.total_stars, self.current_index, self.total_mistakes)
        return self.result
