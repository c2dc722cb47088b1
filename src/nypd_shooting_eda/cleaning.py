from __future__ import annotations

import logging
from typing import Iterable, List

import numpy as np
import pandas as pd

from .config import (
    BOROUGHS,
    CLEAN_COLUMNS,
    JURISDICTIONS,
    MONTHS,
    NULL_TOKENS,
    RACE_UNKNOWN,
    SEX_UNKNOWN,
    WEEKDAYS,
)
from .errors import ParseError

log = logging.getLogger(__name__)


def _raise_on(bad: pd.Series, values: pd.Series, what: str) -> None:
    if bad.any():
        sample = values[bad].head(3).tolist()
        raise ParseError(f"{int(bad.sum()):,} invalid {what} value(s), e.g. {sample}")


def normalize_strings(series: pd.Series, unknown: Iterable[str] = ()) -> pd.Series:
    """Upper-case and strip; null placeholders and ``unknown`` codes become NaN."""
    values = series.astype(str).str.strip().str.upper()
    absent = series.isna() | values.isin(NULL_TOKENS | set(unknown))
    return values.mask(absent)


def drop_missing_jurisdiction(df: pd.DataFrame) -> pd.DataFrame:
    kept = df[df["JURISDICTION_CODE"].notna()]
    dropped = len(df) - len(kept)
    if dropped:
        log.info("Dropped %s rows without a jurisdiction code", f"{dropped:,}")
    return kept


def parse_occur_date(series: pd.Series) -> pd.Series:
    parsed = pd.to_datetime(series, format="%m/%d/%Y", errors="coerce")
    _raise_on(parsed.isna(), series, "OCCUR_DATE")
    return parsed


def parse_occur_time(series: pd.Series) -> pd.Series:
    text = series.astype(str).str.strip()
    text = text.where(~text.str.fullmatch(r"\d{1,2}:\d{2}"), text + ":00")
    parsed = pd.to_timedelta(text, errors="coerce")
    out_of_day = (parsed < pd.Timedelta(0)) | (parsed >= pd.Timedelta(days=1))
    _raise_on(parsed.isna() | out_of_day, series, "OCCUR_TIME")
    return parsed


def recode_jurisdiction(series: pd.Series) -> pd.Categorical:
    codes = pd.to_numeric(series, errors="coerce")
    bad = codes.isna() | ~codes.isin(list(JURISDICTIONS))
    _raise_on(bad, series, "JURISDICTION_CODE")
    labels = codes.astype(int).map(JURISDICTIONS)
    return pd.Categorical(labels, categories=list(JURISDICTIONS.values()))


def recode_borough(series: pd.Series) -> pd.Categorical:
    labels = series.astype(str).str.strip().str.upper().map(BOROUGHS)
    _raise_on(labels.isna(), series, "BORO")
    return pd.Categorical(labels, categories=list(BOROUGHS.values()))


def parse_murder_flag(series: pd.Series) -> pd.Series:
    if pd.api.types.is_bool_dtype(series):
        return series.astype("boolean")
    text = series.astype(str).str.strip().str.lower()
    return text.map({"true": True, "false": False}).astype("boolean")


def parse_precinct(series: pd.Series) -> pd.Series:
    numbers = pd.to_numeric(series, errors="coerce")
    bad = (numbers.isna() & series.notna()) | (numbers.notna() & (numbers % 1 != 0))
    _raise_on(bad, series, "PRECINCT")
    return numbers.astype("Int64")


def augment_temporal_features(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    dt = df["Date"].dt
    df["Year"] = dt.year.astype("int64")
    df["Month"] = pd.Categorical.from_codes(
        (dt.month - 1).to_numpy(), categories=MONTHS, ordered=True
    )
    # dayofweek is Monday=0; weeks here start on Sunday.
    df["Day_of_Week"] = pd.Categorical.from_codes(
        ((dt.dayofweek + 1) % 7).to_numpy(), categories=WEEKDAYS, ordered=True
    )
    df["Hour"] = (df["Time"] // pd.Timedelta(hours=1)).astype("int64")
    return df


def is_clean_frame(df: pd.DataFrame) -> bool:
    return all(col in df.columns for col in CLEAN_COLUMNS)


def apply_clean_dtypes(df: pd.DataFrame) -> pd.DataFrame:
    """Project to the clean schema and (re)apply its dtypes; never drops or recodes."""
    out = df[CLEAN_COLUMNS].copy()
    out["Date"] = pd.to_datetime(out["Date"])
    out["Time"] = pd.to_timedelta(out["Time"])
    out["Borough"] = pd.Categorical(out["Borough"], categories=list(BOROUGHS.values()))
    out["Murdered"] = out["Murdered"].astype("boolean")
    out["Perp_Race"] = out["Perp_Race"].astype("category")
    out["Vic_Race"] = out["Vic_Race"].astype("category")
    out["Precinct"] = out["Precinct"].astype("Int64")
    out["Jurisdiction"] = pd.Categorical(
        out["Jurisdiction"], categories=list(JURISDICTIONS.values())
    )
    out["Latitude"] = out["Latitude"].astype("float64")
    out["Longitude"] = out["Longitude"].astype("float64")
    out["Year"] = out["Year"].astype("int64")
    out["Month"] = pd.Categorical(out["Month"], categories=MONTHS, ordered=True)
    out["Day_of_Week"] = pd.Categorical(out["Day_of_Week"], categories=WEEKDAYS, ordered=True)
    out["Hour"] = out["Hour"].astype("int64")
    out["Perp_Described"] = out["Perp_Described"].astype(bool)
    return out.reset_index(drop=True)


def clean_dataframe(df: pd.DataFrame) -> pd.DataFrame:
    """
    Turn raw feed rows into the 15-column clean schema.

    Steps:
        1. Drop rows without a jurisdiction code
        2. Parse OCCUR_DATE / OCCUR_TIME (malformed values raise ParseError)
        3. Derive Year, Month, Day_of_Week, Hour
        4. Recode jurisdiction, borough and murder flag
        5. Normalize race/sex placeholders to NaN and derive Perp_Described
        6. Project and rename

    A frame that already carries the clean schema only has its dtypes
    re-applied, so cleaning twice is a no-op.
    """
    if is_clean_frame(df):
        return apply_clean_dtypes(df)

    df = drop_missing_jurisdiction(df)
    perp_race = normalize_strings(df["PERP_RACE"], RACE_UNKNOWN)
    perp_sex = normalize_strings(df["PERP_SEX"], SEX_UNKNOWN)

    clean = pd.DataFrame(
        {
            "Date": parse_occur_date(df["OCCUR_DATE"]),
            "Time": parse_occur_time(df["OCCUR_TIME"]),
            "Borough": recode_borough(df["BORO"]),
            "Murdered": parse_murder_flag(df["STATISTICAL_MURDER_FLAG"]),
            "Perp_Race": perp_race,
            "Vic_Race": normalize_strings(df["VIC_RACE"], RACE_UNKNOWN),
            "Precinct": parse_precinct(df["PRECINCT"]),
            "Jurisdiction": recode_jurisdiction(df["JURISDICTION_CODE"]),
            "Latitude": pd.to_numeric(df["Latitude"], errors="coerce"),
            "Longitude": pd.to_numeric(df["Longitude"], errors="coerce"),
            "Perp_Described": perp_race.notna() & perp_sex.notna(),
        },
        index=df.index,
    )
    clean = augment_temporal_features(clean)
    clean = apply_clean_dtypes(clean)
    log.info("Cleaned frame: %s rows x %s columns", f"{len(clean):,}", clean.shape[1])
    return clean


def validate_clean_frame(df: pd.DataFrame) -> None:
    problems: List[str] = []
    if df["Jurisdiction"].isna().any():
        problems.append("absent Jurisdiction")
    if (df["Perp_Described"] & df["Perp_Race"].isna()).any():
        problems.append("Perp_Described without Perp_Race")
    dt = df["Date"].dt
    if not np.array_equal(df["Year"].to_numpy(), dt.year.to_numpy()):
        problems.append("Year diverges from Date")
    if not np.array_equal(df["Month"].cat.codes.to_numpy(), (dt.month - 1).to_numpy()):
        problems.append("Month diverges from Date")
    if not np.array_equal(
        df["Day_of_Week"].cat.codes.to_numpy(), ((dt.dayofweek + 1) % 7).to_numpy()
    ):
        problems.append("Day_of_Week diverges from Date")
    hours = (df["Time"] // pd.Timedelta(hours=1)).to_numpy()
    if not np.array_equal(df["Hour"].to_numpy(), hours):
        problems.append("Hour diverges from Time")
    if problems:
        raise ParseError(f"Clean frame invariants violated: {', '.join(problems)}")
