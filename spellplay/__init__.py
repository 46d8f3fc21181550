from .models import (
    Word, SpellingTest, RoundState, ScoreState, UserProgress,
    SessionSummary, PracticeSessionRecord
)
from .interfaces import Clock, WordSource, ProgressStore, SessionLog, Storage
from .errors import SpellPlayError, ValidationError, InvariantViolation, PersistenceError
from .utils import split_into_words, SystemClock
from .scoring import PointsResult, calculate_points, get_combo_multiplier
from .leveling import experience_for_level, level_from_experience, progress_to_next_level
from .achievements import AchievementID, ACHIEVEMENTS, check_achievements
from .streaks import get_current_streak, calculate_new_streak
from .results import GameResult, GameResultService, ResultCalculator, PerformanceGrade
from .rounds import RoundEngine, SessionPhase, SubmitResult, CompleteResult
from .games import GameSession, GamePhase
from .practice import PracticeService, PracticeOutcome

__all__ = [
    'Word', 'SpellingTest', 'RoundState', 'ScoreState', 'UserProgress',
    'SessionSummary', 'PracticeSessionRecord',
    'Clock', 'WordSource', 'ProgressStore', 'SessionLog', 'Storage',
    'SpellPlayError', 'ValidationError', 'InvariantViolation', 'PersistenceError',
    'split_into_words', 'SystemClock',
    'PointsResult', 'calculate_points', 'get_combo_multiplier',
    'experience_for_level', 'level_from_experience', 'progress_to_next_level',
    'AchievementID', 'ACHIEVEMENTS', 'check_achievements',
    'get_current_streak', 'calculate_new_streak',
    'GameResult', 'GameResultService', 'ResultCalculator', 'PerformanceGrade',
    'RoundEngine', 'SessionPhase', 'SubmitResult', 'CompleteResult',
    'GameSession', 'GamePhase',
    'PracticeService', 'PracticeOutcome'
]
