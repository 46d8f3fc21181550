"""Level calculations from experience points. Pure functions, no state.

Level 1 starts at 0 XP, level 2 at 100 XP, level 3 at 282 XP and so on
(100 * (level - 1) ** 1.5, rounded down).
"""

import math

from .config import MIN_LEVEL, LEVEL_XP_BASE, LEVEL_XP_EXPONENT


def experience_for_level(level: int) -> int:
    """Total experience needed to reach a level."""
    if level <= MIN_LEVEL:
        return 0
    return math.floor(LEVEL_XP_BASE * (level - 1) ** LEVEL_XP_EXPONENT)


def level_from_experience(experience: int) -> int:
    """Highest level whose experience requirement is met."""
    level = MIN_LEVEL
    while experience >= experience_for_level(level + 1):
        level += 1
    return level


def experience_needed_for_next_level(current_level: int) -> int:
    return experience_for_level(current_level + 1) - experience_for_level(current_level)


def progress_to_next_level(current_level: int, current_experience: int) -> float:
    """Fraction (0.0 to 1.0) of the way from the current level to the next."""
    current_level_xp = experience_for_level(current_level)
    needed = experience_for_level(current_level + 1) - current_level_xp
    if needed <= 0:
        return 1.0
    fraction = (current_experience - current_level_xp) / needed
    return min(1.0, max(0.0, fraction))


def check_level_up(current_level: int, current_experience: int) -> int | None:
    """Return the new level if experience has moved past current_level, else None."""
    new_level = level_from_experience(current_experience)
    if new_level > current_level:
        return new_level
    return None
