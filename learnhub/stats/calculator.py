"""Dashboard metric formulas. Pure functions, no DB access.

Percentages are rounded half toward +infinity (the ``Math.round`` rule the
dashboards have always displayed), not Python's round-half-to-even.
"""

import math
from fractions import Fraction


def js_round(value: Fraction | int) -> int:
    """Round half toward +infinity: ``floor(value + 1/2)``."""
    return math.floor(Fraction(value) + Fraction(1, 2))


def completion_rate(total_enrollments: int, completed_enrollments: int) -> int:
    """Share of enrollments completed, as a whole percentage.

    >>> completion_rate(200, 136)
    68
    >>> completion_rate(0, 0)
    0
    """
    if total_enrollments <= 0:
        return 0
    return js_round(Fraction(100 * completed_enrollments, total_enrollments))


def monthly_growth(users_last_month: int, users_previous_month: int) -> int:
    """Month-over-month growth in new users, as a whole percentage.

    With no users in the previous window, any new users count as 100%
    growth and none as 0%.

    >>> monthly_growth(60, 40)
    50
    >>> monthly_growth(50, 0)
    100
    """
    if users_previous_month > 0:
        return js_round(
            Fraction(100 * (users_last_month - users_previous_month), users_previous_month)
        )
    if users_last_month > 0:
        return 100
    return 0
