"""NYPD shooting incidents exploratory data analysis.

Loads the public shooting incident CSV, cleans it into a fixed schema,
aggregates it and renders the report charts, markdown and JSON profile.
"""

from .cleaning import clean_dataframe
from .errors import EmptyGroupError, FetchError, ParseError, ReportError
from .loader import load_raw_data
from .pipeline import run_pipeline

__all__ = [
    "clean_dataframe",
    "load_raw_data",
    "run_pipeline",
    "ReportError",
    "FetchError",
    "ParseError",
    "EmptyGroupError",
]
