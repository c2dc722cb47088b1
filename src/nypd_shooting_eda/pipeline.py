from __future__ import annotations

import argparse
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterator, List

from .charts import render_all
from .cleaning import clean_dataframe, validate_clean_frame
from .config import DATA_URL, REPORTS_DIR, ReportConfig
from .errors import ReportError
from .loader import load_raw_data
from .report import (
    build_summary_markdown,
    compute_quality_metrics,
    save_json,
    summarize_schema,
    write_summary,
)

log = logging.getLogger(__name__)


@contextmanager
def pipeline_stage(name: str) -> Iterator[None]:
    log.info("Stage %s started", name)
    try:
        yield
    except Exception:
        log.exception("%s stage failed", name)
        raise
    log.info("Stage %s finished", name)


def run_pipeline(config: ReportConfig | None = None) -> Dict[str, object]:
    config = config or ReportConfig()
    with pipeline_stage("load"):
        raw_df = load_raw_data(config.source, config.limit)
    with pipeline_stage("clean"):
        clean_df = clean_dataframe(raw_df)
        validate_clean_frame(clean_df)
    with pipeline_stage("render"):
        figures, fit = render_all(clean_df, config.figures_dir, config.dpi)
    with pipeline_stage("report"):
        metrics = compute_quality_metrics(clean_df)
        payload = metrics | {
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "source": str(config.source),
            "figures": {name: str(path) for name, path in figures.items()},
            "quadratic_fit": fit.summary(),
            "schema": summarize_schema(clean_df, config.sample_columns),
        }
        save_json(payload, config.profile_path)
        summary = build_summary_markdown(clean_df, metrics, figures, fit, config.summary_path)
        write_summary(summary, config.summary_path)
    return payload


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the NYPD shooting incidents EDA report.")
    parser.add_argument(
        "--source",
        type=str,
        default=DATA_URL,
        help="CSV URL or local path of the shooting incident feed.",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=REPORTS_DIR,
        help="Directory for the report, profile JSON and figures.",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Optional row limit for debugging.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser


def main(argv: List[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = ReportConfig(source=args.source, output_dir=args.output_dir, limit=args.limit)
    try:
        run_pipeline(config)
    except ReportError as exc:
        log.error("Report failed in %s stage: %s", exc.stage, exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
