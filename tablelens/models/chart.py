from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

"""Chart selection and chart-ready series models."""

__all__ = [
    "ChartType",
    "ChartSelection",
    "Dataset",
    "Series",
]


class ChartType(str, Enum):
    BAR = "bar"
    LINE = "line"
    PIE = "pie"
    DONUT = "donut"

    @classmethod
    def values(cls) -> list[str]:
        return [m.value for m in cls]


@dataclass(frozen=True)
class ChartSelection:
    """Resolved (type, x column, y column) driving the chart view.

    Empty column names mean "nothing chosen yet" and project to an empty
    series.
    """
    chart_type: ChartType = ChartType.BAR
    x_column: str = ""
    y_column: str = ""

    def to_payload(self) -> dict[str, str]:
        """Wire form used by the instruction service contract."""
        return {
            "chartType": self.chart_type.value,
            "xColumn": self.x_column,
            "yColumn": self.y_column,
        }


@dataclass(frozen=True)
class Dataset:
    label: str
    data: list[float] = field(default_factory=list)  # NaN marks a gap


@dataclass(frozen=True)
class Series:
    chart_type: ChartType
    labels: list[Any] = field(default_factory=list)
    datasets: list[Dataset] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.labels and all(not d.data for d in self.datasets)
