"""Achievement catalog and unlock rules.

Rules are evaluated in catalog order, so the list of newly unlocked
achievements comes back in the same order on every run.
"""

import logging
from enum import Enum

from .config import SPEED_DEMON_SECONDS, STREAK_MASTER_DAYS, WORD_WIZARD_WORDS
from .models import SessionSummary, UserProgress

logger = logging.getLogger(__name__)


class AchievementID(str, Enum):
    FIRST_STEPS = 'first_steps'
    PERFECT_ROUND = 'perfect_round'
    SPEED_DEMON = 'speed_demon'
    STREAK_MASTER = 'streak_master'
    WORD_WIZARD = 'word_wizard'
    NO_HELP_NEEDED = 'no_help_needed'
    COMEBACK_KID = 'comeback_kid'


class Achievement:
    """Display metadata for an achievement."""

    def __init__(self, achievement_id: AchievementID, name: str, description: str, icon: str):
        self.id = achievement_id
        self.name = name
        self.description = description
        self.icon = icon

    def to_dict(self) -> dict:
        return {
            'id': self.id.value,
            'name': self.name,
            'description': self.description,
            'icon': self.icon
        }


class AchievementRule:
    """An achievement id paired with its unlock predicate."""

    def __init__(self, achievement_id: AchievementID, predicate):
        self.id = achievement_id
        self.predicate = predicate

    def is_met(self, summary: SessionSummary, progress: UserProgress) -> bool:
        return bool(self.predicate(summary, progress))


ACHIEVEMENTS = [
    Achievement(AchievementID.FIRST_STEPS, "First Steps",
                "Complete your first practice session", "🎯"),
    Achievement(AchievementID.PERFECT_ROUND, "Perfect Round",
                "Get all words correct in one round", "⭐"),
    Achievement(AchievementID.SPEED_DEMON, "Speed Demon",
                "Complete a round in under 2 minutes", "⚡"),
    Achievement(AchievementID.STREAK_MASTER, "Streak Master",
                f"Maintain a {STREAK_MASTER_DAYS}-day streak", "🔥"),
    Achievement(AchievementID.WORD_WIZARD, "Word Wizard",
                f"Master {WORD_WIZARD_WORDS} words total", "🧙"),
    Achievement(AchievementID.NO_HELP_NEEDED, "No Help Needed",
                "Complete a session without using help coins", "💪"),
    Achievement(AchievementID.COMEBACK_KID, "Comeback Kid",
                "Master all words after initial mistakes", "🎪"),
]

RULES = (
    AchievementRule(AchievementID.FIRST_STEPS,
                    lambda s, p: s.is_first_session),
    AchievementRule(AchievementID.PERFECT_ROUND,
                    lambda s, p: s.is_perfect_round),
    AchievementRule(AchievementID.SPEED_DEMON,
                    lambda s, p: s.round_time_seconds < SPEED_DEMON_SECONDS),
    AchievementRule(AchievementID.STREAK_MASTER,
                    lambda s, p: s.current_streak >= STREAK_MASTER_DAYS),
    AchievementRule(AchievementID.WORD_WIZARD,
                    lambda s, p: p.total_words_mastered >= WORD_WIZARD_WORDS),
    AchievementRule(AchievementID.NO_HELP_NEEDED,
                    lambda s, p: s.help_coins_used == 0 and s.words_attempted > 0),
    AchievementRule(AchievementID.COMEBACK_KID,
                    lambda s, p: s.had_initial_mistakes and s.all_words_mastered),
)


def get_achievement(achievement_id) -> Achievement | None:
    for achievement in ACHIEVEMENTS:
        if achievement.id == achievement_id:
            return achievement
    return None


def check_achievements(summary: SessionSummary, progress: UserProgress,
                       rules=RULES) -> list[AchievementID]:
    """Unlock every satisfied rule not yet unlocked. Returns new ids in catalog order."""
    newly_unlocked = []
    for rule in rules:
        if progress.has_achievement(rule.id):
            continue
        if rule.is_met(summary, progress):
            progress.unlock_achievement(rule.id)
            newly_unlocked.append(rule.id)
            logger.info(f"Achievement unlocked: {rule.id.value}")
    return newly_unlocked


def achievement_statuses(progress: UserProgress) -> list[dict]:
    """Catalog entries with an 'unlocked' flag, for display."""
    statuses = []
    for achievement in ACHIEVEMENTS:
        entry = achievement.to_dict()
        entry['unlocked'] = progress.has_achievement(achievement.id)
        statuses.append(entry)
    return statuses
