from __future__ import annotations

import logging
import math
import random
import threading
from collections.abc import Callable

from ..models.metrics import (
    CONVERSIONS_COLUMN,
    GROWTH_COLUMN,
    REVENUE_COLUMN,
    USERS_COLUMN,
    Metrics,
)
from ..models.table import Table, cell_at, parse_float, parse_int

"""Metric aggregation and the cosmetic live-update ticker.

compute_metrics() is a pure function of the Table. It never raises: missing
columns and unparsable cells count as 0, and any unexpected failure yields
zero Metrics.

MetricsTicker only nudges the *displayed* metrics at a fixed interval to give
the dashboard a live feel; it never feeds back into compute_metrics().
"""

logger = logging.getLogger(__name__)

__all__ = [
    "compute_metrics",
    "perturb_metrics",
    "MetricsTicker",
]


def _or_zero(value: float) -> float:
    return 0.0 if math.isnan(value) else value


def compute_metrics(table: Table) -> Metrics:
    try:
        rows = table.rows
        if not rows:
            return Metrics.zero()

        revenue_idx = table.index_of(REVENUE_COLUMN)
        users_idx = table.index_of(USERS_COLUMN)
        conversions_idx = table.index_of(CONVERSIONS_COLUMN)
        growth_idx = table.index_of(GROWTH_COLUMN)

        revenue = sum(_or_zero(parse_float(cell_at(r, revenue_idx))) for r in rows)
        users = sum(_or_zero(parse_int(cell_at(r, users_idx))) for r in rows)
        conversions = sum(_or_zero(parse_int(cell_at(r, conversions_idx))) for r in rows)
        growth_total = sum(_or_zero(parse_float(cell_at(r, growth_idx))) for r in rows)
        growth = growth_total / len(rows)
        if not math.isfinite(growth):
            growth = 0.0

        return Metrics(
            revenue=revenue,
            users=int(users),
            conversions=int(conversions),
            growth=growth,
        )
    except Exception as e:
        logger.warning(f"metrics: calculation failed, using zero metrics: {e}")
        return Metrics.zero()


def perturb_metrics(metrics: Metrics, rng: random.Random | None = None) -> Metrics:
    """One live-update step: small random increments on every figure."""
    r = rng or random.Random()
    return Metrics(
        revenue=metrics.revenue + r.random() * 100,
        users=metrics.users + r.randrange(10),
        conversions=metrics.conversions + r.randrange(5),
        growth=metrics.growth + (r.random() - 0.5) * 2,
    )


class MetricsTicker:
    """Periodic perturbation of displayed metrics on a daemon timer thread.

    ``read`` returns the currently displayed Metrics, or None when no data is
    loaded (the tick is then skipped); ``write`` receives the perturbed value.
    """

    def __init__(
        self,
        interval: float,
        read: Callable[[], Metrics | None],
        write: Callable[[Metrics], None],
        *,
        rng: random.Random | None = None,
    ) -> None:
        self.interval = interval
        self._read = read
        self._write = write
        self._rng = rng or random.Random()
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def tick(self) -> bool:
        """Apply one update now. Returns False when there was no data."""
        current = self._read()
        if current is None:
            return False
        self._write(perturb_metrics(current, self._rng))
        return True

    def _schedule(self) -> None:
        timer = threading.Timer(self.interval, self._run)
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _run(self) -> None:
        with self._lock:
            if not self._running:
                return
        try:
            self.tick()
        except Exception as e:  # pragma: no cover
            logger.warning(f"metrics ticker: update failed: {e}")
        with self._lock:
            if self._running:
                self._schedule()

    def start(self) -> None:
        with self._lock:
            if self._running:
                return
            self._running = True
            self._schedule()

    def stop(self) -> None:
        with self._lock:
            self._running = False
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def __enter__(self) -> MetricsTicker:
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
