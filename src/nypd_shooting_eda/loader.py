from __future__ import annotations

import io
import logging
from pathlib import Path

import pandas as pd
import requests

from .config import DATA_URL, RAW_COLUMNS
from .errors import FetchError

log = logging.getLogger(__name__)


def _is_url(source: str) -> bool:
    return str(source).lower().startswith(("http://", "https://"))


def fetch_csv_text(url: str) -> str:
    # Single attempt: no retry, no cache.
    try:
        response = requests.get(url)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise FetchError(f"Could not fetch {url}: {exc}") from exc
    text = response.text
    if not text.strip():
        raise FetchError(f"Empty response body from {url}")
    return text


def check_raw_columns(df: pd.DataFrame) -> None:
    missing = [col for col in RAW_COLUMNS if col not in df.columns]
    if missing:
        raise FetchError(f"Missing raw columns: {', '.join(missing)}")


def load_raw_data(source: str | Path = DATA_URL, limit: int | None = None) -> pd.DataFrame:
    if _is_url(str(source)):
        log.info("Fetching shooting incidents from %s", source)
        buffer = io.StringIO(fetch_csv_text(str(source)))
    else:
        path = Path(source).expanduser()
        if not path.exists():
            raise FetchError(f"Data file not found: {path}")
        log.info("Reading shooting incidents from %s", path)
        buffer = path

    try:
        df = pd.read_csv(buffer, nrows=limit, dtype={"OCCUR_TIME": str, "OCCUR_DATE": str})
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
        raise FetchError(f"Malformed CSV from {source}: {exc}") from exc

    check_raw_columns(df)
    log.info("Loaded %s raw rows", f"{len(df):,}")
    return df
