from __future__ import annotations

from dataclasses import dataclass

"""Summary metrics derived from a Table."""

__all__ = [
    "Metrics",
    "REVENUE_COLUMN",
    "USERS_COLUMN",
    "CONVERSIONS_COLUMN",
    "GROWTH_COLUMN",
]

# Exact, case-sensitive header names
REVENUE_COLUMN = "Revenue"
USERS_COLUMN = "Users"
CONVERSIONS_COLUMN = "Conversions"
GROWTH_COLUMN = "Growth"


@dataclass(frozen=True)
class Metrics:
    """Aggregate dashboard figures.

    users/conversions are integer sums; revenue is a float sum and growth
    the mean of the Growth column.
    """
    revenue: float = 0.0
    users: int = 0
    conversions: int = 0
    growth: float = 0.0

    @staticmethod
    def zero() -> Metrics:
        return Metrics()
