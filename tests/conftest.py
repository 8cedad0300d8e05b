# Shared pytest fixtures
from __future__ import annotations
import tempfile
from pathlib import Path
import pytest

from tablelens.logging.init import reset_logging
from tablelens.models.table import Table


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    # keep developer secrets out of tests
    monkeypatch.delenv("MISTRAL_API_KEY", raising=False)
    monkeypatch.delenv("TABLELENS_INSTRUCTION_ENDPOINT", raising=False)
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def sample_records() -> list[list[object]]:
    return [
        ["Date", "Revenue", "Users"],
        ["2024-01-01", "100", "5"],
        ["2024-01-02", "200", "10"],
    ]


@pytest.fixture()
def sample_table(sample_records) -> Table:
    return Table.from_records(sample_records)


@pytest.fixture()
def dashboard_table() -> Table:
    """Twelve days of full dashboard columns (two pages at 10 rows/page)."""
    records: list[list[object]] = [["Date", "Region", "Revenue", "Users", "Conversions", "Growth"]]
    regions = ["North", "South", "East"]
    for day in range(1, 13):
        records.append([
            f"2024-03-{day:02d}",
            regions[day % 3],
            str(day * 10),
            str(day),
            str(day % 4),
            "1.5",
        ])
    return Table.from_records(records)


@pytest.fixture()
def sample_config_yaml() -> str:
    return """rows_per_page: 5
page_window: 3
ticker_interval_seconds: 2
logs_directory: ./logs
instruction:
  provider: mistral
  model: mistral-small
  timeout_seconds: 10
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "dashboard.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def sample_csv(temp_workdir: Path, sample_records) -> Path:
    p = temp_workdir / "data" / "sample.csv"
    p.write_text("\n".join(",".join(str(c) for c in r) for r in sample_records) + "\n", encoding="utf-8")
    return p
