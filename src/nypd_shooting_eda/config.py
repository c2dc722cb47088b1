from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List

BASE_DIR = Path(__file__).resolve().parent.parent.parent
DATA_URL = "https://data.cityofnewyork.us/api/views/833y-fsy8/rows.csv?accessType=DOWNLOAD"
REPORTS_DIR = BASE_DIR / "reports"
SUMMARY_PATH = REPORTS_DIR / "shooting_eda_report.md"
PROFILE_JSON = REPORTS_DIR / "inspection_metrics.json"

RAW_COLUMNS = [
    "OCCUR_DATE",
    "OCCUR_TIME",
    "BORO",
    "STATISTICAL_MURDER_FLAG",
    "PERP_RACE",
    "PERP_SEX",
    "VIC_RACE",
    "VIC_SEX",
    "PRECINCT",
    "JURISDICTION_CODE",
    "Latitude",
    "Longitude",
]

CLEAN_COLUMNS = [
    "Date",
    "Time",
    "Borough",
    "Murdered",
    "Perp_Race",
    "Vic_Race",
    "Precinct",
    "Jurisdiction",
    "Latitude",
    "Longitude",
    "Year",
    "Month",
    "Day_of_Week",
    "Hour",
    "Perp_Described",
]

BOROUGHS: Dict[str, str] = {
    "BRONX": "Bronx",
    "BROOKLYN": "Brooklyn",
    "MANHATTAN": "Manhattan",
    "QUEENS": "Queens",
    "STATEN ISLAND": "Staten Island",
}
JURISDICTIONS: Dict[int, str] = {0: "Patrol", 1: "Transit", 2: "Housing"}
MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
WEEKDAYS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

NULL_TOKENS = {"", "(NULL)", "NULL", "NAN"}
RACE_UNKNOWN = {"UNKNOWN"}
SEX_UNKNOWN = {"U"}

PALETTE = {
    "navy": "#0B1F3A",
    "teal": "#1AAAE6",
    "crimson": "#C43F3A",
    "slate": "#233348",
}
BOROUGH_COLORS = {
    "Bronx": "#C43F3A",
    "Brooklyn": "#F1B434",
    "Manhattan": "#1AAAE6",
    "Queens": "#2ECC71",
    "Staten Island": "#9B59B6",
}


@dataclass
class ReportConfig:
    source: str = DATA_URL
    output_dir: Path = REPORTS_DIR
    limit: int | None = None
    dpi: int = 150
    sample_columns: List[str] = field(
        default_factory=lambda: ["Date", "Borough", "Jurisdiction", "Murdered", "Perp_Race", "Vic_Race"]
    )

    def __post_init__(self) -> None:
        self.output_dir = Path(self.output_dir)

    @property
    def figures_dir(self) -> Path:
        return self.output_dir / "figures"

    @property
    def summary_path(self) -> Path:
        return self.output_dir / SUMMARY_PATH.name

    @property
    def profile_path(self) -> Path:
        return self.output_dir / PROFILE_JSON.name
