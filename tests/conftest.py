"""
Shared fixtures for the shooting EDA tests.
"""

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from nypd_shooting_eda.cleaning import clean_dataframe

BOROS = ["BRONX", "BROOKLYN", "MANHATTAN", "QUEENS", "STATEN ISLAND"]
RACES = ["BLACK", "WHITE HISPANIC", "(null)", "UNKNOWN", "WHITE"]
SEXES = ["M", "F", "U", "(null)"]


def raw_row(**overrides):
    """One raw feed row with sensible defaults."""
    row = {
        "INCIDENT_KEY": 1,
        "OCCUR_DATE": "01/05/2020",
        "OCCUR_TIME": "13:47:00",
        "BORO": "BROOKLYN",
        "STATISTICAL_MURDER_FLAG": "false",
        "PERP_RACE": "BLACK",
        "PERP_SEX": "M",
        "VIC_RACE": "BLACK",
        "VIC_SEX": "M",
        "PRECINCT": 75,
        "JURISDICTION_CODE": 0.0,
        "Latitude": 40.67,
        "Longitude": -73.88,
    }
    row.update(overrides)
    return row


def build_raw_frame(n=60):
    rows = []
    for i in range(n):
        rows.append(
            raw_row(
                INCIDENT_KEY=1000 + i,
                OCCUR_DATE=f"{(i % 12) + 1:02d}/{(i % 27) + 1:02d}/{2019 + i % 3}",
                OCCUR_TIME=f"{(i * 7) % 24:02d}:{(i * 13) % 60:02d}:00",
                BORO=BOROS[i % 5],
                STATISTICAL_MURDER_FLAG="true" if i % 4 == 0 else "false",
                PERP_RACE=RACES[i % 5],
                PERP_SEX=SEXES[i % 4],
                VIC_RACE=RACES[(i + 1) % 5],
                PRECINCT=40 + i % 30,
                JURISDICTION_CODE=np.nan if i % 10 == 9 else float(i % 3),
                Latitude=np.nan if i % 11 == 0 else 40.6 + (i % 10) * 0.02,
                Longitude=np.nan if i % 11 == 0 else -73.9 - (i % 10) * 0.01,
            )
        )
    return pd.DataFrame(rows)


@pytest.fixture
def raw_df():
    return build_raw_frame()


@pytest.fixture
def clean_df(raw_df):
    return clean_dataframe(raw_df)
