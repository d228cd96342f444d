"""Unit tests for dashboard metric formulas."""

from fractions import Fraction

from learnhub.stats.calculator import completion_rate, js_round, monthly_growth


class TestJsRound:
    def test_half_rounds_up(self):
        assert js_round(Fraction(5, 2)) == 3

    def test_negative_half_rounds_toward_positive(self):
        assert js_round(Fraction(-5, 2)) == -2

    def test_below_half(self):
        assert js_round(Fraction(249, 100)) == 2

    def test_integer_passthrough(self):
        assert js_round(7) == 7


class TestCompletionRate:
    def test_no_enrollments(self):
        assert completion_rate(0, 0) == 0

    def test_typical(self):
        assert completion_rate(200, 136) == 68

    def test_rounds_half_up(self):
        # 1/8 = 12.5%
        assert completion_rate(8, 1) == 13

    def test_all_complete(self):
        assert completion_rate(3, 3) == 100

    def test_one_third(self):
        assert completion_rate(3, 1) == 33


class TestMonthlyGrowth:
    def test_growth(self):
        assert monthly_growth(60, 40) == 50

    def test_decline(self):
        assert monthly_growth(30, 40) == -25

    def test_negative_half_rounds_toward_positive(self):
        # (3 - 8) / 8 = -62.5%
        assert monthly_growth(3, 8) == -62

    def test_no_previous_users_with_new_users(self):
        assert monthly_growth(50, 0) == 100

    def test_no_users_at_all(self):
        assert monthly_growth(0, 0) == 0

    def test_flat(self):
        assert monthly_growth(40, 40) == 0
