from __future__ import annotations

import logging
import random
import threading
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor

from ..errors import ResolutionError
from ..models.chart import ChartSelection, ChartType, Series
from ..models.metrics import Metrics
from ..models.table import Table
from ..models.view_result import ViewResult
from ..models.view_state import DateBound, PageState, ViewState
from .chart import project_chart
from .instruction import InstructionResolver
from .metrics import MetricsTicker, compute_metrics
from .pagination import DEFAULT_WINDOW
from .pipeline import compute_view

"""Dashboard session: one Table plus the directive state applied to it.

Directive methods replace the immutable ViewState and never touch the Table.
Views are recomputed on demand from the current snapshot.

Instruction resolution is the only asynchronous operation. Each request is
stamped with an increasing token and only the newest token may update the
ChartSelection, so a slow response cannot overwrite a newer instruction.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "DashboardSession",
]


class DashboardSession:
    def __init__(
        self,
        resolver: InstructionResolver | None = None,
        *,
        rows_per_page: int = 10,
        page_window: int = DEFAULT_WINDOW,
        ticker_interval: float = 5.0,
    ) -> None:
        self.resolver = resolver
        self.ticker_interval = ticker_interval
        self.page_window = page_window
        self._table = Table.empty()
        self._state = ViewState(page=PageState(rows_per_page=rows_per_page))
        self._selection = ChartSelection()
        self._metrics = Metrics.zero()
        self._displayed_metrics: Metrics | None = None
        self._lock = threading.Lock()
        self._issued_token = 0
        self._executor: ThreadPoolExecutor | None = None

    # ----- data -----
    @property
    def table(self) -> Table:
        return self._table

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def metrics(self) -> Metrics:
        """Metrics computed from the current Table."""
        return self._metrics

    @property
    def chart_selection(self) -> ChartSelection:
        return self._selection

    def load(self, table: Table) -> None:
        """Replace the Table; the column selection resets to the new header."""
        self._table = table
        self._state = self._state.with_selected_columns(table.header)
        self._metrics = compute_metrics(table)
        with self._lock:
            self._displayed_metrics = self._metrics if table.has_data else None
        logger.info(f"loaded table columns={len(table.header)} rows={table.row_count}")

    # ----- directives -----
    def set_filter_text(self, text: str) -> None:
        self._state = self._state.with_text(text)

    def set_date_range(self, start: DateBound = None, end: DateBound = None) -> None:
        self._state = self._state.with_date_range(start, end)

    def set_selected_columns(self, columns: Sequence[str]) -> None:
        self._state = self._state.with_selected_columns(tuple(columns))

    def toggle_sort(self, column_index: int) -> None:
        self._state = self._state.with_sort_toggled(column_index)

    def set_page(self, page: int) -> None:
        self._state = self._state.with_page(page)

    def select_chart(
        self,
        chart_type: ChartType | str | None = None,
        x_column: str | None = None,
        y_column: str | None = None,
    ) -> ChartSelection:
        """Manual chart choice; omitted parts keep their current value.

        Also supersedes any instruction still in flight.
        """
        cur = self._selection
        selection = ChartSelection(
            chart_type=ChartType(chart_type) if chart_type is not None else cur.chart_type,
            x_column=x_column if x_column is not None else cur.x_column,
            y_column=y_column if y_column is not None else cur.y_column,
        )
        with self._lock:
            self._issued_token += 1
            self._selection = selection
        return selection

    # ----- derived views -----
    def view(self) -> ViewResult:
        return compute_view(self._table, self._state, window=self.page_window)

    def series(self) -> Series:
        return project_chart(self._table, self._selection)

    # ----- live metrics (display only) -----
    def displayed_metrics(self) -> Metrics | None:
        """Metrics as shown to the user; None while no data is loaded."""
        with self._lock:
            return self._displayed_metrics

    def show_metrics(self, metrics: Metrics) -> None:
        with self._lock:
            if self._displayed_metrics is not None:
                self._displayed_metrics = metrics

    def live_ticker(self, interval: float | None = None, *, rng: random.Random | None = None) -> MetricsTicker:
        """Ticker that perturbs displayed metrics; call start() to run it."""
        return MetricsTicker(interval or self.ticker_interval, self.displayed_metrics, self.show_metrics, rng=rng)

    # ----- instruction resolution -----
    def begin_instruction(self) -> int:
        with self._lock:
            self._issued_token += 1
            return self._issued_token

    def complete_instruction(self, token: int, selection: ChartSelection) -> bool:
        """Apply ``selection`` if ``token`` is the newest issued request.

        Returns:
            True when applied, False when a newer request superseded it
        """
        with self._lock:
            if token != self._issued_token:
                logger.info(f"instruction: discarding stale response token={token} latest={self._issued_token}")
                return False
            self._selection = selection
            return True

    def _resolve_issued(self, token: int, instruction: str, columns: list[str]) -> ChartSelection:
        if self.resolver is None:
            raise ResolutionError("instruction service is not configured")
        selection = self.resolver.resolve(instruction, columns)
        self.complete_instruction(token, selection)
        with self._lock:
            return self._selection

    def resolve_instruction(self, instruction: str) -> ChartSelection:
        """Resolve and apply an instruction synchronously.

        Returns the ChartSelection in effect afterwards, which differs from
        the resolved one when a newer request superseded it. On failure the
        current ChartSelection stays as it was and the ResolutionError
        propagates for reporting.
        """
        token = self.begin_instruction()
        return self._resolve_issued(token, instruction, list(self._table.header))

    def submit_instruction(self, instruction: str) -> Future[ChartSelection]:
        """Resolve on a worker thread; directives stay usable meanwhile.

        The token is taken here, before the request is queued, so a later
        directive supersedes it even if no worker has picked it up yet.
        """
        token = self.begin_instruction()
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="tablelens-instruction")
        return self._executor.submit(self._resolve_issued, token, instruction, list(self._table.header))

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
