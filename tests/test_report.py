"""
Tests for the markdown report and JSON profile helpers.
"""

import json
from pathlib import Path

import pandas as pd

from nypd_shooting_eda.aggregate import hourly_by_borough
from nypd_shooting_eda.charts import REPORT_ITEMS
from nypd_shooting_eda.model import fit_quadratic
from nypd_shooting_eda.report import (
    COMMENTARY,
    build_summary_markdown,
    compute_quality_metrics,
    frequency_table,
    markdown_table,
    missing_counts,
    summary_statistics,
    save_json,
)


def test_markdown_table_formats_cells():
    frame = pd.DataFrame({"name": ["a", "b"], "count": [1200, 3], "rate": [0.5, 0.25]})

    lines = markdown_table(frame).splitlines()

    assert len(lines) == 4
    assert [cell.strip() for cell in lines[0].strip("|").split("|")] == ["name", "count", "rate"]
    assert [cell.strip() for cell in lines[2].strip("|").split("|")] == ["a", "1200", "0.500"]
    assert [cell.strip() for cell in lines[3].strip("|").split("|")] == ["b", "3", "0.250"]


def test_summary_statistics_years_have_no_thousands_separator(clean_df):
    table = markdown_table(summary_statistics(clean_df))
    year_row = next(line for line in table.splitlines() if line.strip("| ").startswith("Year"))

    assert "2,0" not in year_row
    assert "2019.000" in year_row


def test_frequency_table_shares_sum_to_one(clean_df):
    table = frequency_table(clean_df, "Jurisdiction")

    assert table["Incidents"].sum() == len(clean_df)
    assert abs(table["Share"].sum() - 1) < 1e-9


def test_missing_counts_cover_every_column(clean_df):
    counts = missing_counts(clean_df)

    assert list(counts) == list(clean_df.columns)
    assert counts["Jurisdiction"] == 0
    assert counts["Latitude"] == int(clean_df["Latitude"].isna().sum())


def test_quality_metrics(clean_df):
    metrics = compute_quality_metrics(clean_df)

    assert metrics["records"] == len(clean_df)
    assert metrics["date_min"] <= metrics["date_max"]
    assert sum(metrics["borough_counts"].values()) == len(clean_df)
    assert 0 <= metrics["murder_rate"] <= 1


def test_summary_lists_sections_in_order(clean_df, tmp_path):
    """The report opens with the tables, then every item in fixed order with its figure."""
    figures = {name: tmp_path / "figures" / f"{name}.png" for name in REPORT_ITEMS}
    fit = fit_quadratic(hourly_by_borough(clean_df))
    metrics = compute_quality_metrics(clean_df)

    markdown = build_summary_markdown(clean_df, metrics, figures, fit, tmp_path / "report.md")

    headings = [line for line in markdown.splitlines() if line.startswith("## ")]
    assert headings[:5] == [
        "## Dataset Snapshot",
        "## Summary Statistics",
        "## Missing Values per Column",
        "## Incidents by Borough",
        "## Incidents by Jurisdiction",
    ]
    expected = [f"## {i}. {COMMENTARY[name][0]}" for i, name in enumerate(REPORT_ITEMS, start=1)]
    assert headings[5:] == expected
    assert "(figures/incident_map.png)" in markdown
    assert any(line.startswith("|") and "R²" in line for line in markdown.splitlines())
    assert f"Observations: {fit.n_obs:,}" in markdown


def test_save_json_round_trips(tmp_path):
    path = tmp_path / "out" / "profile.json"
    save_json({"records": 3, "when": pd.Timestamp("2020-01-05")}, path)

    payload = json.loads(Path(path).read_text())
    assert payload["records"] == 3
    assert payload["when"].startswith("2020-01-05")
