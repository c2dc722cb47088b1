"""
Tests for the grouping helpers behind the report charts.
"""

import numpy as np
import pandas as pd
import pytest

from nypd_shooting_eda.aggregate import (
    count_incidents,
    crosstab_counts,
    hourly_by_borough,
    share_of_incidents,
    summarize_groups,
    time_decimal,
)
from nypd_shooting_eda.errors import EmptyGroupError


def _flags_frame(flags, described=None):
    flags = pd.array(flags, dtype="boolean")
    return pd.DataFrame(
        {
            "Borough": ["Bronx"] * len(flags),
            "Murdered": flags,
            "Perp_Described": described if described is not None else [True] * len(flags),
        }
    )


def test_murder_rate_for_forty_of_one_hundred():
    """100 rows with 40 murders give a murder rate of 0.40."""
    summary = summarize_groups(_flags_frame([True] * 40 + [False] * 60), "Borough")

    assert summary.loc[0, "Incidents"] == 100
    assert summary.loc[0, "Murdered"] == 40
    assert summary.loc[0, "Murder_Rate"] == pytest.approx(0.40)


def test_murder_rate_ignores_absent_flags():
    summary = summarize_groups(_flags_frame([True, False, None]), "Borough")

    assert summary.loc[0, "Incidents"] == 3
    assert summary.loc[0, "Murdered"] == 1
    assert summary.loc[0, "Murder_Rate"] == pytest.approx(0.5)


def test_murder_rate_is_nan_without_flags():
    summary = summarize_groups(_flags_frame([None, None]), "Borough")

    assert np.isnan(summary.loc[0, "Murder_Rate"])


def test_description_rate():
    summary = summarize_groups(
        _flags_frame([False] * 4, described=[True, False, False, False]), "Borough"
    )

    assert summary.loc[0, "Description_Rate"] == pytest.approx(0.25)


def test_rates_are_bounded(clean_df):
    summary = summarize_groups(clean_df, ["Year", "Borough"])

    for column in ["Murder_Rate", "Description_Rate"]:
        values = summary[column].dropna()
        assert ((values >= 0) & (values <= 1)).all()


@pytest.mark.parametrize("by", ["Borough", "Jurisdiction", ["Year", "Month"], ["Day_of_Week", "Hour"]])
def test_group_counts_reconcile_with_row_count(clean_df, by):
    counts = count_incidents(clean_df, by)

    assert counts["Incidents"].sum() == len(clean_df)
    assert (counts["Incidents"] > 0).all()


def test_counts_do_not_zero_fill(clean_df):
    subset = clean_df[clean_df["Borough"] == "Queens"]
    counts = count_incidents(subset, "Borough")

    assert counts["Borough"].tolist() == ["Queens"]


def test_time_bucket_rounds_to_nearest_ten_minutes():
    """13:47 rounds to 13:50, i.e. 13 + 50/60."""
    times = pd.Series(pd.to_timedelta(["13:47:00", "13:44:59", "13:45:00", "00:00:00"]))
    buckets = time_decimal(times)

    assert buckets.iloc[0] == pytest.approx(13 + 50 / 60)
    assert buckets.iloc[1] == pytest.approx(13 + 40 / 60)
    assert buckets.iloc[2] == pytest.approx(13 + 50 / 60)
    assert buckets.iloc[3] == 0


def test_time_bucket_wraps_midnight():
    buckets = time_decimal(pd.Series(pd.to_timedelta(["23:57:00"])))

    assert buckets.iloc[0] == 0
    assert ((buckets >= 0) & (buckets < 24)).all()


def test_share_order_and_label_positions():
    boroughs = pd.Categorical(
        ["Brooklyn"] * 3 + ["Bronx"] * 3 + ["Queens"],
        categories=["Bronx", "Brooklyn", "Manhattan", "Queens", "Staten Island"],
    )
    shares = share_of_incidents(pd.DataFrame({"Borough": boroughs}), "Borough")

    assert shares["Borough"].astype(str).tolist() == ["Bronx", "Brooklyn", "Queens"]
    assert shares["Share"].sum() == pytest.approx(1.0)
    assert shares["Cum_Position"].tolist() == pytest.approx([1.5 / 7, 4.5 / 7, 6.5 / 7])


def test_hourly_by_borough_reconciles(clean_df):
    hourly = hourly_by_borough(clean_df)

    assert hourly["Incidents"].sum() == len(clean_df)
    assert hourly["Time_Decimal"].between(0, 24, inclusive="left").all()


def test_crosstab_counts_totals(clean_df):
    pivot = crosstab_counts(clean_df, "Day_of_Week", "Hour")

    assert int(pivot.to_numpy().sum()) == len(clean_df)


def test_empty_input_raises():
    empty = pd.DataFrame({"Borough": [], "Murdered": [], "Perp_Described": []})

    with pytest.raises(EmptyGroupError):
        count_incidents(empty, "Borough")
    with pytest.raises(EmptyGroupError):
        summarize_groups(empty, "Borough")
    with pytest.raises(EmptyGroupError):
        share_of_incidents(empty, "Borough")
