#!/usr/bin/env python3
"""Sample dataset generator for the dashboard.

Writes a synthetic daily-metrics table as CSV or XLSX (chosen by suffix):
- Row 1: Header row (Date, Region, Revenue, Users, Conversions, Growth)
- Row 2+: One row per day

Useful for trying the CLI and for pipeline timing runs.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

import numpy as np
import pandas as pd

REGIONS = ["North", "South", "East", "West"]


def generate_dashboard_data(rows: int, seed: int = 42, start: str = "2024-01-01") -> pd.DataFrame:
    """Generate ``rows`` days of dashboard metrics.

    Revenue/Users/Conversions are loosely correlated; Growth is a day-over-day
    revenue percentage (first day 0).
    """
    rng = np.random.default_rng(seed)
    dates = pd.date_range(start, periods=rows, freq="D")
    users = rng.integers(50, 500, rows)
    conversions = np.minimum(users, rng.binomial(users, 0.08))
    revenue = np.round(conversions * rng.uniform(20, 80, rows), 2)
    prev = np.roll(revenue, 1)
    growth = np.where(prev > 0, (revenue - prev) / np.where(prev > 0, prev, 1) * 100, 0.0)
    growth[0] = 0.0

    return pd.DataFrame({
        "Date": dates.strftime("%Y-%m-%d"),
        "Region": rng.choice(REGIONS, rows),
        "Revenue": revenue,
        "Users": users,
        "Conversions": conversions,
        "Growth": np.round(growth, 2),
    })


def write_dataset(output_path: Path, df: pd.DataFrame) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    suffix = output_path.suffix.lower()
    if suffix == ".csv":
        df.to_csv(output_path, index=False)
    elif suffix == ".xlsx":
        with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name="Dashboard", index=False)
    else:
        raise ValueError(f"unsupported output type: {output_path.suffix} (use .csv or .xlsx)")

    print(f"Created dataset: {output_path}")
    print(f"  Rows: {len(df):,} (+ 1 header row)")
    print(f"  Columns: {', '.join(df.columns)}")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate a synthetic dashboard dataset",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s data/sample.csv
  %(prog)s data/sample.xlsx --rows 365 --seed 7
        """,
    )
    parser.add_argument("output", type=Path, help="Output .csv or .xlsx path")
    parser.add_argument("--rows", type=int, default=90, help="Number of days (default: 90)")
    parser.add_argument("--start", default="2024-01-01", help="First date (default: 2024-01-01)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args()

    if args.rows <= 0:
        print("Error: --rows must be positive", file=sys.stderr)
        return 1

    try:
        write_dataset(args.output, generate_dashboard_data(args.rows, args.seed, args.start))
    except Exception as e:
        print(f"Error generating dataset: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
