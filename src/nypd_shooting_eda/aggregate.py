from __future__ import annotations

from typing import List, Sequence

import numpy as np
import pandas as pd

from .errors import EmptyGroupError

MINUTES_PER_DAY = 24 * 60


def _as_list(by: str | Sequence[str]) -> List[str]:
    return [by] if isinstance(by, str) else list(by)


def _require_rows(df: pd.DataFrame, by: List[str]) -> None:
    if df.empty:
        raise EmptyGroupError(f"No rows to aggregate by {', '.join(by)}")


def time_decimal(times: pd.Series) -> pd.Series:
    """Round times of day to the nearest 10 minutes, as hour + minute/60 in [0, 24)."""
    minutes = pd.to_timedelta(times).dt.total_seconds() / 60
    rounded = (np.floor(minutes / 10 + 0.5) * 10) % MINUTES_PER_DAY
    return (rounded / 60).rename("Time_Decimal")


def with_time_decimal(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    df["Time_Decimal"] = time_decimal(df["Time"])
    return df


def count_incidents(df: pd.DataFrame, by: str | Sequence[str]) -> pd.DataFrame:
    by = _as_list(by)
    _require_rows(df, by)
    return (
        df.groupby(by, observed=True, dropna=False)
        .size()
        .reset_index(name="Incidents")
    )


def summarize_groups(df: pd.DataFrame, by: str | Sequence[str]) -> pd.DataFrame:
    """Incidents, Murdered, Murder_Rate and Description_Rate per group.

    Murder_Rate ignores absent murder flags and is NaN when a group has none.
    """
    by = _as_list(by)
    _require_rows(df, by)
    work = df.assign(
        _murdered=df["Murdered"].fillna(False).astype(bool),
        _murder_flag=df["Murdered"].to_numpy(dtype="float64", na_value=np.nan),
        _described=df["Perp_Described"].astype(float),
    )
    summary = (
        work.groupby(by, observed=True, dropna=False)
        .agg(
            Incidents=("_murdered", "size"),
            Murdered=("_murdered", "sum"),
            Murder_Rate=("_murder_flag", "mean"),
            Description_Rate=("_described", "mean"),
        )
        .reset_index()
    )
    summary["Incidents"] = summary["Incidents"].astype("int64")
    summary["Murdered"] = summary["Murdered"].astype("int64")
    return summary


def share_of_incidents(df: pd.DataFrame, by: str | Sequence[str]) -> pd.DataFrame:
    by = _as_list(by)
    counts = count_incidents(df, by)
    counts = counts.sort_values(
        ["Incidents"] + by, ascending=[False] + [True] * len(by)
    ).reset_index(drop=True)
    counts["Share"] = counts["Incidents"] / counts["Incidents"].sum()
    # Angular midpoint of each slice, for label placement.
    counts["Cum_Position"] = counts["Share"].cumsum() - counts["Share"] / 2
    return counts


def hourly_by_borough(df: pd.DataFrame) -> pd.DataFrame:
    _require_rows(df, ["Borough", "Time_Decimal"])
    return count_incidents(with_time_decimal(df), ["Borough", "Time_Decimal"])


def crosstab_counts(df: pd.DataFrame, row: str, col: str) -> pd.DataFrame:
    counts = count_incidents(df, [row, col])
    return (
        counts.pivot(index=row, columns=col, values="Incidents")
        .fillna(0)
        .astype(int)
    )
