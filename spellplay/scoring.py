"""Points, combo and star calculations. Pure functions, no state."""

from .config import (
    BASE_POINTS_PER_CORRECT, PERFECT_ROUND_BONUS,
    SPEED_BONUS_THRESHOLD, SPEED_BONUS_POINTS,
    COMBO_THRESHOLDS, MAX_COMBO_MULTIPLIER
)


class PointsResult:
    """Breakdown of the points awarded for one answer."""

    __slots__ = ('base_points', 'combo_multiplier', 'speed_bonus', 'total_points')

    def __init__(self, base_points: int, combo_multiplier: int, speed_bonus: int, total_points: int):
        self.base_points = base_points
        self.combo_multiplier = combo_multiplier
        self.speed_bonus = speed_bonus
        self.total_points = total_points

    def __eq__(self, other):
        if not isinstance(other, PointsResult):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return (f"PointsResult(base={self.base_points}, x{self.combo_multiplier}, "
                f"speed={self.speed_bonus}, total={self.total_points})")

    def to_dict(self) -> dict:
        return {
            'base_points': self.base_points,
            'combo_multiplier': self.combo_multiplier,
            'speed_bonus': self.speed_bonus,
            'total_points': self.total_points
        }


def get_combo_multiplier(combo_count: int) -> int:
    """Multiplier for a combo count: 1x below 2, 2x from 2, 3x from 5, 4x from 10."""
    if combo_count >= COMBO_THRESHOLDS[2]:
        return MAX_COMBO_MULTIPLIER
    if combo_count >= COMBO_THRESHOLDS[1]:
        return 3
    if combo_count >= COMBO_THRESHOLDS[0]:
        return 2
    return 1


def is_speedy(time_taken: float | None) -> bool:
    return time_taken is not None and time_taken <= SPEED_BONUS_THRESHOLD


def calculate_points(is_correct: bool, combo_count: int, time_taken: float | None = None,
                     is_first_try: bool = False) -> PointsResult:
    """Calculate points for one answer.

    Args:
        is_correct: Whether the answer matched the word
        combo_count: Combo count including this answer
        time_taken: Seconds spent on the word, or None if unknown
        is_first_try: First attempt at the word this round (does not affect points)
    """
    if not is_correct:
        return PointsResult(0, 1, 0, 0)

    multiplier = get_combo_multiplier(combo_count)
    speed_bonus = SPEED_BONUS_POINTS if is_speedy(time_taken) else 0
    total = (BASE_POINTS_PER_CORRECT + speed_bonus) * multiplier
    return PointsResult(BASE_POINTS_PER_CORRECT, multiplier, speed_bonus, total)


def stars_for_answer(time_taken: float | None = None, is_first_try: bool = False,
                     is_correct: bool = True) -> int:
    """Stars (0-3) for one answer: 3 fast first try, 2 first try, 1 later try, 0 wrong."""
    if not is_correct:
        return 0
    if is_first_try and is_speedy(time_taken):
        return 3
    if is_first_try:
        return 2
    return 1


def perfect_round_bonus() -> int:
    return PERFECT_ROUND_BONUS
