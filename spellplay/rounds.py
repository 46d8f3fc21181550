"""Round-by-round practice session engine.

A session walks the word list in rounds. Every word answered correctly is
mastered; words missed in a round come back in the next round, in their
original order, until every word is mastered:

    READY -> PLAYING -> (round complete -> PLAYING)* -> COMPLETE

Round completion is not a resting state: the next round starts as soon as
the last answer of a round is submitted, and the SubmitResult tells the
caller a round boundary was crossed.
"""

import logging
from datetime import datetime
from enum import Enum

from .achievements import AchievementID, check_achievements
from .config import DEFAULT_HELP_COINS
from .errors import InvariantViolation, ValidationError
from .interfaces import Clock
from .leveling import check_level_up
from .models import Word, RoundState, ScoreState, SessionSummary, UserProgress
from .results import GameResult, GameResultService, PerformanceGrade, ResultCalculator
from .scoring import PointsResult, calculate_points, stars_for_answer, perfect_round_bonus
from .utils import SystemClock, common_prefix_length, matches

logger = logging.getLogger(__name__)


class SessionPhase(Enum):
    READY = 'ready'
    PLAYING = 'playing'
    COMPLETE = 'complete'


class SubmitResult:
    """Outcome of one submitted answer."""

    def __init__(self, is_correct: bool, is_first_try: bool, points_result: PointsResult,
                 stars: int, perfect_round_bonus: int | None, next_word_index: int,
                 is_round_complete: bool, round_number: int, all_words_mastered: bool,
                 combo_count: int, combo_multiplier: int):
        self.is_correct = is_correct
        self.is_first_try = is_first_try
        self.points_result = points_result
        self.stars = stars
        self.perfect_round_bonus = perfect_round_bonus
        self.next_word_index = next_word_index
        self.is_round_complete = is_round_complete
        self.round_number = round_number
        self.all_words_mastered = all_words_mastered
        self.combo_count = combo_count
        self.combo_multiplier = combo_multiplier

    @property
    def points_awarded(self) -> int:
        """Points for the answer plus any perfect-round bonus."""
        return self.points_result.total_points + (self.perfect_round_bonus or 0)

    def to_dict(self) -> dict:
        return {
            'is_correct': self.is_correct,
            'is_first_try': self.is_first_try,
            'points': self.points_result.to_dict(),
            'points_awarded': self.points_awarded,
            'stars': self.stars,
            'perfect_round_bonus': self.perfect_round_bonus,
            'next_word_index': self.next_word_index,
            'is_round_complete': self.is_round_complete,
            'round_number': self.round_number,
            'all_words_mastered': self.all_words_mastered,
            'combo_count': self.combo_count,
            'combo_multiplier': self.combo_multiplier
        }


class CompleteResult:
    """Everything computed when a session completes, ready to be persisted."""

    def __init__(self, summary: SessionSummary, progress: UserProgress,
                 newly_unlocked: list[AchievementID], previous_level: int, new_level: int | None,
                 game_result: GameResult, performance_grade: PerformanceGrade):
        self.summary = summary
        self.progress = progress
        self.newly_unlocked = newly_unlocked
        self.previous_level = previous_level
        self.new_level = new_level
        self.game_result = game_result
        self.performance_grade = performance_grade

    @property
    def level_up_occurred(self) -> bool:
        return self.new_level is not None

    def to_dict(self) -> dict:
        return {
            'summary': self.summary.to_dict(),
            'progress': self.progress.to_dict(),
            'newly_unlocked': [a.value for a in self.newly_unlocked],
            'level_up_occurred': self.level_up_occurred,
            'previous_level': self.previous_level,
            'new_level': self.new_level,
            'game_result': self.game_result.to_dict(),
            'performance_grade': self.performance_grade.value
        }


class RoundEngine:
    """Session handle owning round, score and help-coin state for one practice session."""

    def __init__(self, clock: Clock = None, result_service: ResultCalculator = None):
        self.clock = clock or SystemClock()
        self.result_service = result_service or GameResultService()
        self.phase = SessionPhase.READY
        self.all_words = []
        self.round_state = None
        self.score_state = None
        self.initial_help_budget = 0
        self.help_budget = 0
        self.had_initial_mistakes = False
        self.first_round_perfect = False
        self.words_attempted = 0
        self.session_started_at = None
        self.round_started_at = None
        self.word_started_at = None
        self._completed = False

    def setup(self, words: list[Word], initial_help_budget: int = DEFAULT_HELP_COINS) -> 'RoundEngine':
        """Start a fresh session with all words in round 1. Resets any previous state."""
        if not words:
            raise ValidationError("No words provided to setup")
        if initial_help_budget < 0:
            raise ValidationError(f"Help budget cannot be negative: {initial_help_budget}")
        if len({w.id for w in words}) != len(words):
            raise ValidationError("Word list contains duplicate ids")

        now = self.clock.now()
        self.all_words = list(words)
        self.round_state = RoundState(self.all_words)
        self.score_state = ScoreState()
        self.initial_help_budget = initial_help_budget
        self.help_budget = initial_help_budget
        self.had_initial_mistakes = False
        self.first_round_perfect = False
        self.words_attempted = 0
        self.session_started_at = now
        self.round_started_at = now
        self.word_started_at = now
        self._completed = False
        self.phase = SessionPhase.PLAYING
        logger.info(f"Session started with {len(self.all_words)} words, {initial_help_budget} help coins")
        return self

    # Read-only accessors

    @property
    def current_word(self) -> Word | None:
        if self.phase != SessionPhase.PLAYING:
            return None
        return self.round_state.current_word

    @property
    def all_words_mastered(self) -> bool:
        return self.phase == SessionPhase.COMPLETE

    @property
    def is_complete(self) -> bool:
        return self._completed

    @property
    def round_number(self) -> int:
        return self.round_state.round_number if self.round_state else 0

    @property
    def progress(self) -> float:
        """Fraction of the current round already answered."""
        if not self.round_state or not self.round_state.words_in_round:
            return 0.0
        if self.phase == SessionPhase.COMPLETE:
            return 1.0
        return self.round_state.current_index / len(self.round_state.words_in_round)

    @property
    def progress_text(self) -> str:
        if not self.round_state:
            return ""
        total = len(self.round_state.words_in_round)
        position = min(self.round_state.current_index + 1, total)
        return f"Round {self.round_state.round_number}: Word {position} of {total}"

    @property
    def misspelled_words(self) -> list[Word]:
        """Words not yet mastered, in original order."""
        if not self.round_state:
            return []
        return self.round_state.remaining(self.all_words)

    @property
    def points(self) -> int:
        return self.score_state.points if self.score_state else 0

    @property
    def total_stars(self) -> int:
        return self.score_state.total_stars if self.score_state else 0

    @property
    def combo_count(self) -> int:
        return self.score_state.combo_count if self.score_state else 0

    @property
    def combo_multiplier(self) -> int:
        return self.score_state.combo_multiplier if self.score_state else 1

    @property
    def help_coins_used(self) -> int:
        return self.initial_help_budget - self.help_budget

    # Operations

    def _seconds_since(self, start: datetime | None, now: datetime) -> float | None:
        if start is None:
            return None
        return max((now - start).total_seconds(), 0.0)

    def submit_answer(self, word_id: str, raw_answer: str, now: datetime = None) -> SubmitResult:
        """Grade an answer for the current word and advance the session."""
        word = self.current_word
        if word is None:
            raise InvariantViolation("No active word to answer")
        if word_id != word.id:
            raise InvariantViolation(f"Answer submitted for word {word_id}, current word is {word.id}")

        now = now or self.clock.now()
        rounds = self.round_state
        score = self.score_state

        is_correct = matches(word.text, raw_answer)
        is_first_try = word.id not in rounds.round_results
        if not is_correct and not self.had_initial_mistakes:
            self.had_initial_mistakes = True
        rounds.round_results[word.id] = is_correct
        self.words_attempted += 1

        time_taken = self._seconds_since(self.word_started_at, now)
        if is_correct:
            score.combo_count += 1
            points_result = calculate_points(True, score.combo_count, time_taken, is_first_try)
            stars = stars_for_answer(time_taken, is_first_try)
            score.record_correct(points_result.total_points, stars)
            rounds.mastered.add(word.id)
        else:
            points_result = calculate_points(False, score.combo_count)
            stars = 0
            score.record_miss()
        logger.debug(f"Answer for {word.text!r}: correct={is_correct}, "
                     f"points={points_result.total_points}, combo={score.combo_count}")

        bonus = None
        round_complete = False
        if not rounds.is_last_word:
            rounds.current_index += 1
        else:
            round_complete = True
            if rounds.is_perfect():
                bonus = perfect_round_bonus()
                score.add_bonus(bonus)
                if rounds.round_number == 1:
                    self.first_round_perfect = True
            if len(rounds.mastered) == len(self.all_words):
                self.phase = SessionPhase.COMPLETE
                logger.info(f"All {len(self.all_words)} words mastered after "
                            f"{rounds.round_number} round(s), {score.points} points")
            else:
                rounds.start_next_round(self.all_words)
                self.round_started_at = now
                logger.info(f"Round {rounds.round_number} started with "
                            f"{len(rounds.words_in_round)} word(s) to retry")
        self.word_started_at = now

        return SubmitResult(
            is_correct=is_correct,
            is_first_try=is_first_try,
            points_result=points_result,
            stars=stars,
            perfect_round_bonus=bonus,
            next_word_index=rounds.current_index,
            is_round_complete=round_complete,
            round_number=rounds.round_number,
            all_words_mastered=self.all_words_mastered,
            combo_count=score.combo_count,
            combo_multiplier=score.combo_multiplier
        )

    def use_help_coin(self, current_typed_prefix: str) -> str:
        """Reveal the next correct letter after the correctly typed prefix.

        Returns the typed text unchanged when no coins are left or the typed
        text already matches the whole word.
        """
        word = self.current_word
        if word is None:
            raise InvariantViolation("No active word to help with")
        typed = current_typed_prefix or ''
        if self.help_budget <= 0:
            return typed

        matched = common_prefix_length(typed, word.text)
        if matched >= len(word.text):
            return typed
        self.help_budget -= 1
        logger.debug(f"Help coin used, {self.help_budget} left")
        return word.text[:matched + 1]

    def build_summary(self, now: datetime, is_first_session: bool = False,
                      current_streak: int = 0) -> SessionSummary:
        return SessionSummary(
            words_attempted=self.words_attempted,
            words_mastered=len(self.round_state.mastered),
            is_perfect_round=self.first_round_perfect,
            round_time_seconds=self._seconds_since(self.round_started_at, now),
            help_coins_used=self.help_coins_used,
            had_initial_mistakes=self.had_initial_mistakes,
            all_words_mastered=self.all_words_mastered,
            session_time_seconds=self._seconds_since(self.session_started_at, now),
            is_first_session=is_first_session,
            current_streak=current_streak,
            total_points=self.score_state.points,
            total_stars=self.score_state.total_stars,
            rounds=self.round_state.round_number
        )

    def complete_session(self, progress: UserProgress, current_streak: int = 0,
                         now: datetime = None) -> CompleteResult:
        """Finish a mastered session: fold it into progress, level up, unlock achievements.

        Everything happens in memory; the caller persists the returned progress.
        """
        if not self.all_words_mastered:
            raise InvariantViolation("Session cannot complete before all words are mastered")
        if self._completed:
            raise InvariantViolation("Session already completed")

        now = now or self.clock.now()
        score = self.score_state
        summary = self.build_summary(now, progress.total_sessions_completed == 0, current_streak)

        previous_level = progress.level
        progress.add_points(score.points)
        progress.add_stars(score.total_stars)
        progress.add_words_mastered(summary.words_mastered)
        progress.increment_sessions_completed()
        progress.last_updated = now
        new_level = check_level_up(previous_level, progress.experience_points)
        if new_level:
            logger.info(f"Level up: {previous_level} -> {new_level}")

        newly_unlocked = check_achievements(summary, progress)

        game_result = self.result_service.calculate_result(
            score.points, score.total_stars, summary.words_mastered, score.mistakes)
        total_words = len(self.all_words)
        accuracy = summary.words_mastered / total_words if total_words else 0.0
        all_first_try = (self.round_state.is_perfect()
                         and self.words_attempted == total_words)
        grade = PerformanceGrade.calculate(accuracy, all_first_try)

        self._completed = True
        logger.info(f"Session complete: {summary.words_attempted} attempts, "
                    f"{score.points} points, {score.total_stars} stars")
        return CompleteResult(summary, progress, newly_unlocked, previous_level, new_level,
                              game_result, grade)
