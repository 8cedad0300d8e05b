from __future__ import annotations

import importlib.util
from pathlib import Path

import pytest

from tablelens.ingest.reader import read_table
from tablelens.services.metrics import compute_metrics

"""The sample dataset generator produces uploads the dashboard can read."""

SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "gen_sample_dataset.py"


@pytest.fixture(scope="module")
def gen():
    spec = importlib.util.spec_from_file_location("gen_sample_dataset", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.mark.parametrize("suffix", [".csv", ".xlsx"])
def test_generated_dataset_loads(gen, temp_workdir: Path, suffix: str):
    df = gen.generate_dashboard_data(30, seed=7)
    target = temp_workdir / "data" / f"sample{suffix}"
    gen.write_dataset(target, df)

    table = read_table(target)
    assert table.header == ("Date", "Region", "Revenue", "Users", "Conversions", "Growth")
    assert table.row_count == 30
    assert table.rows[0][0] == "2024-01-01"
    assert compute_metrics(table).users == int(df["Users"].sum())


def test_unsupported_output_suffix(gen, temp_workdir: Path):
    with pytest.raises(ValueError):
        gen.write_dataset(temp_workdir / "data" / "sample.json", gen.generate_dashboard_data(3))
