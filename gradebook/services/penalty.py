"""
Points earned for a graded submission.

The percentage grade a student sees is never reduced for lateness; only the
points derived from it are.
"""

from decimal import Decimal
from gradebook.core.numbers import Number, round_half_up, to_decimal

def base_points(grade: Number, max_points: int) -> Decimal:
    return round_half_up(to_decimal(grade) / 100 * max_points)

def calculate_points_earned(grade: Number, max_points: int, is_late: bool, late_penalty_percent: int) -> int:
    """
    Convert a percentage grade into integral points.

    Args:
        grade: percentage grade in [0, 100]
        max_points: the assignment's maximum points
        is_late: whether the submission was late when submitted
        late_penalty_percent: share of the points taken off late work

    Returns:
        Points earned, never below zero

    Examples:
        >>> calculate_points_earned(70, 100, True, 10)
        63
        >>> calculate_points_earned(85, 100, False, 10)
        85
    """
    points = base_points(grade, max_points)
    if is_late and late_penalty_percent > 0:
        penalty = Decimal(late_penalty_percent) / 100 * points
        points = max(Decimal(0), points - penalty)
    return int(round_half_up(points))
