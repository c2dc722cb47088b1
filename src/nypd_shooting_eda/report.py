from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Tuple

import numpy as np
import pandas as pd

from .aggregate import count_incidents
from .charts import REPORT_ITEMS
from .model import QuadraticFit

log = logging.getLogger(__name__)

SUMMARY_STAT_COLUMNS = ["Precinct", "Latitude", "Longitude", "Year", "Hour"]

# Static commentary; it is not derived from the data.
COMMENTARY: Dict[str, Tuple[str, str]] = {
    "incidents_by_year": (
        "Incidents per Year",
        "Shootings fell steadily from the mid-2000s to a low in 2018-2019, "
        "then jumped sharply in 2020 and stayed elevated through 2021 before "
        "easing again.",
    ),
    "murders_by_year": (
        "Incidents and Murders per Year",
        "Murders track total incidents closely; the gap between the two lines "
        "is roughly constant in relative terms, so the 2020 spike was a spike "
        "in shootings rather than in their lethality.",
    ),
    "month_year_heatmap": (
        "Seasonality by Month and Year",
        "Summer months are consistently the darkest tiles. The seasonal "
        "pattern survives the long-run decline and the 2020 surge alike.",
    ),
    "weekday_hour_heatmap": (
        "Day of Week and Hour",
        "Incidents concentrate late at night and in the early hours of the "
        "weekend, from Friday night through early Monday morning.",
    ),
    "borough_share": (
        "Share of Incidents by Borough",
        "Brooklyn and the Bronx together account for the large majority of "
        "incidents; Staten Island contributes the smallest slice.",
    ),
    "borough_by_year": (
        "Incidents per Year by Borough",
        "The boroughs share the same overall shape over time, which points to "
        "city-wide drivers rather than local ones.",
    ),
    "murder_rate_by_borough": (
        "Murder Rate by Borough",
        "Roughly one shooting in five is classified as a murder. The rate "
        "varies more from year to year in the smaller boroughs, where counts "
        "are low.",
    ),
    "time_of_day_ridges": (
        "Time-of-Day Density by Borough",
        "Every borough shows the same trough in the morning and a peak "
        "around midnight.",
    ),
    "time_of_day_points": (
        "Incidents by Time of Day",
        "Aggregating to 10-minute buckets shows the daily cycle clearly; "
        "the larger boroughs sit higher on the chart but follow the same curve.",
    ),
    "quadratic_fit": (
        "Quadratic Model of Incidents on Time of Day",
        "A second-degree polynomial captures the morning trough and the "
        "evening rise. Pooling all boroughs leaves much of the variance "
        "unexplained, since borough size shifts the level of each curve.",
    ),
    "description_rate_by_year": (
        "Perpetrator Description Rate",
        "The share of incidents with a recorded perpetrator race and sex "
        "varies by borough and has not improved over time.",
    ),
    "perp_victim_race_heatmap": (
        "Perpetrator vs Victim Race",
        "Where a perpetrator is described, perpetrator and victim most often "
        "share the same recorded race. The unknown row is large, which limits "
        "what the described cases can say.",
    ),
    "incident_map": (
        "Incident Locations",
        "Incidents cluster in the Bronx, central Brooklyn and northern "
        "Manhattan. Murders are spread across the same hotspots rather than "
        "forming separate clusters.",
    ),
}


def _as_builtin(value):
    if isinstance(value, (np.integer,)):
        return int(value)
    if isinstance(value, (np.floating,)):
        return None if np.isnan(value) else float(value)
    return value


def frequency_table(df: pd.DataFrame, column: str) -> pd.DataFrame:
    table = count_incidents(df, column).sort_values(column).reset_index(drop=True)
    table[column] = table[column].astype(str)
    table["Share"] = table["Incidents"] / table["Incidents"].sum()
    return table


def summary_statistics(df: pd.DataFrame) -> pd.DataFrame:
    stats = df[SUMMARY_STAT_COLUMNS].astype("float64").describe().T
    return stats.reset_index().rename(columns={"index": "column"})


def missing_counts(df: pd.DataFrame) -> Dict[str, int]:
    return {col: int(count) for col, count in df.isna().sum().items()}


def summarize_schema(df: pd.DataFrame, sample_columns: List[str] | None = None) -> Dict[str, object]:
    preview_cols = [col for col in (sample_columns or []) if col in df.columns]
    if not preview_cols:
        preview_cols = df.columns[:6].tolist()
    sample_df = df[preview_cols].head(5).astype(str)
    return {
        "rows": int(len(df)),
        "columns": int(df.shape[1]),
        "column_types": {col: str(dtype) for col, dtype in df.dtypes.items()},
        "sample_columns": preview_cols,
        "sample_rows": sample_df.to_dict(orient="records"),
    }


def compute_quality_metrics(df: pd.DataFrame) -> Dict[str, object]:
    murder_rate = df["Murdered"].to_numpy(dtype="float64", na_value=np.nan)
    return {
        "records": int(len(df)),
        "date_min": str(df["Date"].min().date()),
        "date_max": str(df["Date"].max().date()),
        "murder_rate": _as_builtin(np.float64(np.nanmean(murder_rate))),
        "description_rate": float(df["Perp_Described"].mean()),
        "missing_counts": missing_counts(df),
        "borough_counts": {
            str(k): int(v) for k, v in frequency_table(df, "Borough")[["Borough", "Incidents"]].values
        },
        "jurisdiction_counts": {
            str(k): int(v)
            for k, v in frequency_table(df, "Jurisdiction")[["Jurisdiction", "Incidents"]].values
        },
    }


def markdown_table(frame: pd.DataFrame) -> str:
    return frame.to_markdown(index=False, floatfmt=".3f")


def describe_missing(counts: Dict[str, int]) -> str:
    frame = pd.DataFrame(
        {"column": list(counts.keys()), "missing": list(counts.values())}
    )
    return markdown_table(frame)


def _fit_table(fit: QuadraticFit) -> str:
    summary = fit.summary()
    rows = [{"term": term, "estimate": value} for term, value in summary["coefficients"].items()]
    rows.append({"term": "R²", "estimate": summary["r_squared"]})
    table = markdown_table(pd.DataFrame(rows))
    return f"{table}\n\nObservations: {summary['n_obs']:,}"


def _relative(path: Path, start: Path) -> str:
    return Path(os.path.relpath(path, start)).as_posix()


def build_summary_markdown(
    df: pd.DataFrame,
    metrics: Dict[str, object],
    figures: Dict[str, Path],
    fit: QuadraticFit,
    summary_path: Path,
) -> str:
    base = summary_path.parent
    md_lines = [
        "# NYPD Shooting Incidents: Exploratory Data Analysis",
        "",
        "## Dataset Snapshot",
        f"- **Records analysed:** {metrics['records']:,}",
        f"- **Temporal coverage:** {metrics['date_min']} to {metrics['date_max']}",
        "",
        "## Summary Statistics",
        markdown_table(summary_statistics(df)),
        "",
        "## Missing Values per Column",
        describe_missing(metrics["missing_counts"]),
        "",
        "## Incidents by Borough",
        markdown_table(frequency_table(df, "Borough")),
        "",
        "## Incidents by Jurisdiction",
        markdown_table(frequency_table(df, "Jurisdiction")),
        "",
    ]
    for index, name in enumerate(REPORT_ITEMS, start=1):
        title, text = COMMENTARY[name]
        md_lines.append(f"## {index}. {title}")
        md_lines.append(f"![{title}]({_relative(figures[name], base)})")
        md_lines.append("")
        if name == "quadratic_fit":
            md_lines.append(_fit_table(fit))
            md_lines.append("")
        md_lines.append(text)
        md_lines.append("")
    return "\n".join(md_lines)


def save_json(payload: Dict[str, object], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, default=str))
    log.info("Profile written to %s", path)


def write_summary(markdown: str, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(markdown, encoding="utf-8")
    log.info("Report written to %s", path)
