from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict

import numpy as np
import pandas as pd
from sklearn.linear_model import LinearRegression
from sklearn.metrics import r2_score
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import PolynomialFeatures

from .errors import EmptyGroupError

log = logging.getLogger(__name__)


@dataclass
class QuadraticFit:
    intercept: float
    linear: float
    quadratic: float
    r_squared: float
    n_obs: int
    x: str
    y: str
    pipeline: Pipeline

    def predict(self, values) -> np.ndarray:
        frame = pd.DataFrame({self.x: np.asarray(values, dtype=float)})
        return self.pipeline.predict(frame)

    def summary(self) -> Dict[str, Any]:
        return {
            "formula": f"{self.y} ~ {self.x} + {self.x}^2",
            "coefficients": {
                "intercept": round(self.intercept, 4),
                self.x: round(self.linear, 4),
                f"{self.x}^2": round(self.quadratic, 4),
            },
            "r_squared": round(self.r_squared, 4),
            "n_obs": self.n_obs,
        }


def _build_pipeline() -> Pipeline:
    return Pipeline(
        steps=[
            ("poly", PolynomialFeatures(degree=2, include_bias=False)),
            ("model", LinearRegression()),
        ]
    )


def fit_quadratic(
    agg: pd.DataFrame, x: str = "Time_Decimal", y: str = "Incidents"
) -> QuadraticFit:
    """OLS fit of ``y`` on ``x`` and ``x**2`` over all rows of ``agg`` pooled together."""
    working = agg[[x, y]].dropna()
    if working.empty:
        raise EmptyGroupError(f"No rows to fit {y} on {x}", stage="model")
    if working[x].nunique() < 3:
        raise EmptyGroupError(
            f"Need at least 3 distinct {x} values for a quadratic fit, got {working[x].nunique()}",
            stage="model",
        )

    pipeline = _build_pipeline()
    X = working[[x]].astype(float)
    target = working[y].astype(float)
    pipeline.fit(X, target)

    model = pipeline.named_steps["model"]
    r_squared = float(r2_score(target, pipeline.predict(X)))
    fit = QuadraticFit(
        intercept=float(model.intercept_),
        linear=float(model.coef_[0]),
        quadratic=float(model.coef_[1]),
        r_squared=r_squared,
        n_obs=int(len(working)),
        x=x,
        y=y,
        pipeline=pipeline,
    )
    log.info("Quadratic fit on %s rows: R^2=%.3f", fit.n_obs, fit.r_squared)
    return fit
