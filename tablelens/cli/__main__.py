from __future__ import annotations

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

from tablelens.config.loader import (
    DEFAULT_CONFIG_PATH,
    ConfigError,
    DashboardConfig,
    apply_env_overrides,
    default_config,
    load_config,
)
from tablelens.errors import ExportError, ParseFailure, ResolutionError
from tablelens.ingest.reader import read_table
from tablelens.logging.error_log import ErrorLogBuffer
from tablelens.logging.init import log_summary, set_debug, setup_logging
from tablelens.models.table import stringify
from tablelens.services.export import export_csv, export_pdf
from tablelens.services.instruction import InstructionResolver, build_client
from tablelens.services.session import DashboardSession
from tablelens.services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- Load .env, then config (explicit --config, config/dashboard.yml, or defaults)
- Read the uploaded file into a Table
- Apply the directives given as flags and print the current page
- Optionally resolve a natural-language chart instruction
- Optionally export the filtered view as CSV and/or PDF
- Print a SUMMARY line
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv; failures only warn."""
    try:
        if path.exists():
            load_dotenv(dotenv_path=path, override=override)
    except Exception as e:  # pragma: no cover
        print(f"WARNING: failed to load .env via python-dotenv: {e}")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="tablelens", description="Explore a CSV/XLSX dataset from the command line")
    p.add_argument("file", help="CSV or XLSX file (first row is the header)")
    p.add_argument("--config", type=Path, default=None, help="YAML config file")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--filter", dest="filter_text", default="", help="Keep rows containing this text")
    p.add_argument("--start", default="", help="Date range start (inclusive)")
    p.add_argument("--end", default="", help="Date range end (inclusive)")
    p.add_argument("--columns", default="", help="Comma separated columns to show, in display order")
    p.add_argument("--sort", default=None, help="Column name to sort by")
    p.add_argument("--desc", action="store_true", help="Sort descending")
    p.add_argument("--page", type=int, default=1, help="Page number (1-based)")
    p.add_argument("--chart-type", default=None, choices=["bar", "line", "pie", "donut"])
    p.add_argument("--x", dest="x_column", default=None, help="Chart x column")
    p.add_argument("--y", dest="y_column", default=None, help="Chart y column")
    p.add_argument("--instruction", default=None, help="Natural-language chart instruction")
    p.add_argument("--export-csv", type=Path, default=None, help="Write the filtered view as CSV")
    p.add_argument("--export-pdf", type=Path, default=None, help="Write a PDF report")
    return p.parse_args(argv)


def _resolve_config(path: Path | None) -> DashboardConfig:
    if path is not None:
        cfg = load_config(path)
    elif DEFAULT_CONFIG_PATH.exists():
        cfg = load_config(DEFAULT_CONFIG_PATH)
    else:
        cfg = default_config()
    return apply_env_overrides(cfg)


def _print_page(session: DashboardSession) -> None:
    view = session.view()
    print(" | ".join(view.header))
    for row in view.page.page_rows:
        print(" | ".join(stringify(c) for c in row))
    pages = " ".join(str(p) for p in view.page.visible_pages)
    print(f"page {view.page.current_page}/{view.page.total_pages} [{pages}]")


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    try:
        cfg = _resolve_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    errors = ErrorLogBuffer(Path(cfg.logs_directory))
    source = Path(args.file)
    try:
        table = read_table(source)
    except ParseFailure as e:
        logger.error(f"upload: {e}")
        errors.record_failure(source.name, "upload", e)
        errors.flush()
        return EXIT_FATAL

    resolver = None
    if args.instruction:
        try:
            resolver = InstructionResolver(build_client(cfg.instruction))
        except ResolutionError as e:
            logger.error(f"instruction: {e}")
            errors.record_failure(args.instruction, "instruction", e)

    session = DashboardSession(
        resolver,
        rows_per_page=cfg.rows_per_page,
        page_window=cfg.page_window,
        ticker_interval=cfg.ticker_interval_seconds,
    )
    session.load(table)

    session.set_filter_text(args.filter_text)
    session.set_date_range(args.start, args.end)
    if args.columns:
        session.set_selected_columns([c.strip() for c in args.columns.split(",") if c.strip()])
    if args.sort:
        header = session.view().header
        if args.sort in header:
            idx = header.index(args.sort)
            session.toggle_sort(idx)
            if args.desc:
                session.toggle_sort(idx)
        else:
            logger.warning(f"sort column not shown: {args.sort}")
    session.set_page(args.page)

    if args.chart_type or args.x_column or args.y_column:
        session.select_chart(args.chart_type, args.x_column, args.y_column)

    partial = False
    if args.instruction and resolver is not None:
        try:
            selection = session.resolve_instruction(args.instruction)
            logger.info(
                f"instruction: chart={selection.chart_type.value} "
                f"x={selection.x_column} y={selection.y_column}"
            )
        except ResolutionError as e:
            detail = f" ({e.details})" if e.details else ""
            logger.error(f"instruction: {e}{detail}")
            errors.record_failure(args.instruction, "instruction", e)
            partial = True
    elif args.instruction:
        partial = True

    _print_page(session)

    metrics = session.metrics
    logger.info(
        f"metrics revenue={metrics.revenue:.2f} users={metrics.users} "
        f"conversions={metrics.conversions} growth={metrics.growth:.2f}"
    )
    selection = session.chart_selection
    if selection.x_column or selection.y_column:
        series = session.series()
        points = len(series.datasets[0].data) if series.datasets else 0
        logger.info(
            f"chart type={selection.chart_type.value} x={selection.x_column} "
            f"y={selection.y_column} labels={len(series.labels)} points={points}"
        )

    view = session.view()
    for target, kind in ((args.export_csv, "csv"), (args.export_pdf, "pdf")):
        if target is None:
            continue
        try:
            if kind == "csv":
                export_csv(target, view.header, view.rows)
            else:
                export_pdf(target, metrics, view.header, view.rows)
        except ExportError as e:
            logger.error(f"export: {e}")
            errors.record_failure(str(target), "export", e)
            partial = True

    failed_stages = ",".join(errors.stages())
    log_path = errors.flush()
    if log_path is not None:
        logger.info(f"error log written: {log_path} stages={failed_stages}")

    summary_line = render_summary_line(view, metrics)
    # log_summary adds the "SUMMARY " label itself
    log_summary(summary_line[len("SUMMARY "):])
    return EXIT_PARTIAL_FAILURE if partial else EXIT_SUCCESS


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
