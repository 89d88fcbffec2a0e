import pytest
from decimal import Decimal
from gradebook.services.penalty import base_points, calculate_points_earned

def test_late_penalty_applies_to_points():
    assert calculate_points_earned(70, 100, True, 10) == 63

def test_on_time_submission_keeps_full_points():
    assert calculate_points_earned(85, 100, False, 10) == 85

def test_late_without_penalty_keeps_full_points():
    assert calculate_points_earned(85, 100, True, 0) == 85

def test_eighty_percent_late_with_ten_percent_penalty():
    assert calculate_points_earned(80, 100, True, 10) == 72

def test_points_never_go_below_zero():
    assert calculate_points_earned(50, 100, True, 150) == 0

def test_full_penalty_gives_zero():
    assert calculate_points_earned(100, 40, True, 100) == 0

def test_base_points_round_half_away_from_zero():
    assert base_points(25, 10) == Decimal(3)
    assert base_points(35, 10) == Decimal(4)
    assert base_points(45, 5) == Decimal(2)

def test_penalized_points_round_half_up():
    # 85 - 8.5 = 76.5
    assert calculate_points_earned(85, 100, True, 10) == 77

def test_decimal_grade_scales_to_max_points():
    assert calculate_points_earned(87.5, 40, False, 0) == 35

@pytest.mark.parametrize("grade,max_points,is_late,penalty", [
    (0, 100, True, 25),
    (59.99, 20, True, 5),
    (72.25, 250, False, 50),
    (91.5, 1000, True, 33),
    (100, 1, True, 50),
])
def test_points_match_formula(grade, max_points, is_late, penalty):
    base = base_points(grade, max_points)
    expected = base
    if is_late and penalty > 0:
        expected = max(Decimal(0), base - Decimal(penalty) / 100 * base)
    points = calculate_points_earned(grade, max_points, is_late, penalty)
    assert abs(points - expected) <= Decimal("0.5")
    assert points >= 0
