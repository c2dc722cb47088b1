"""Error taxonomy for the shooting EDA run.

Every error aborts the run; ``stage`` names the pipeline stage that failed
so the CLI can report it.
"""

from __future__ import annotations


class ReportError(Exception):
    stage = "report"

    def __init__(self, message: str, stage: str | None = None) -> None:
        super().__init__(message)
        if stage is not None:
            self.stage = stage


class FetchError(ReportError):
    """The CSV feed could not be fetched or read."""

    stage = "load"


class ParseError(ReportError, ValueError):
    """A raw value could not be parsed or recoded."""

    stage = "clean"


class EmptyGroupError(ReportError, ValueError):
    """An aggregation or fit was attempted on zero rows."""

    stage = "aggregate"
