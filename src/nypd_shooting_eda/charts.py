from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Tuple

import numpy as np
import pandas as pd
import seaborn as sns
from matplotlib import pyplot as plt

from .aggregate import (
    count_incidents,
    crosstab_counts,
    hourly_by_borough,
    share_of_incidents,
    summarize_groups,
    with_time_decimal,
)
from .config import BOROUGH_COLORS, PALETTE
from .model import QuadraticFit, fit_quadratic

log = logging.getLogger(__name__)

DEFAULT_DPI = 150
REPORT_ITEMS = [
    "incidents_by_year",
    "murders_by_year",
    "month_year_heatmap",
    "weekday_hour_heatmap",
    "borough_share",
    "borough_by_year",
    "murder_rate_by_borough",
    "time_of_day_ridges",
    "time_of_day_points",
    "quadratic_fit",
    "description_rate_by_year",
    "perp_victim_race_heatmap",
    "incident_map",
]


def configure_matplotlib() -> None:
    sns.set_theme(style="whitegrid", context="talk")
    plt.rcParams.update({"axes.spines.right": False, "axes.spines.top": False})


def _borough_palette(values) -> Dict[str, str]:
    return {name: BOROUGH_COLORS.get(name, PALETTE["slate"]) for name in values}


def _save(fig, figures_dir: Path, name: str, dpi: int) -> Path:
    path = figures_dir / f"{name}.png"
    fig.tight_layout()
    fig.savefig(path, dpi=dpi)
    plt.close(fig)
    log.debug("Saved %s", path)
    return path


def plot_incidents_by_year(df: pd.DataFrame, figures_dir: Path, dpi: int = DEFAULT_DPI) -> Path:
    yearly = count_incidents(df, "Year")
    fig, ax = plt.subplots(figsize=(12, 6))
    ax.plot(yearly["Year"], yearly["Incidents"], color=PALETTE["navy"], marker="o")
    ax.set_title("Shooting Incidents per Year")
    ax.set_xlabel("Year")
    ax.set_ylabel("Incidents")
    return _save(fig, figures_dir, "incidents_by_year", dpi)


def plot_murders_by_year(df: pd.DataFrame, figures_dir: Path, dpi: int = DEFAULT_DPI) -> Path:
    yearly = summarize_groups(df, "Year")
    fig, ax = plt.subplots(figsize=(12, 6))
    ax.plot(yearly["Year"], yearly["Incidents"], color=PALETTE["navy"], marker="o", label="Incidents")
    ax.plot(yearly["Year"], yearly["Murdered"], color=PALETTE["crimson"], marker="o", label="Murdered")
    ax.set_title("Incidents and Murders per Year")
    ax.set_xlabel("Year")
    ax.set_ylabel("Count")
    ax.legend()
    return _save(fig, figures_dir, "murders_by_year", dpi)


def plot_month_year_heatmap(df: pd.DataFrame, figures_dir: Path, dpi: int = DEFAULT_DPI) -> Path:
    pivot = crosstab_counts(df, "Month", "Year")
    fig, ax = plt.subplots(figsize=(14, 7))
    sns.heatmap(pivot, cmap="mako", ax=ax, cbar_kws={"label": "Incidents"})
    ax.set_title("Incidents by Month and Year")
    ax.set_xlabel("Year")
    ax.set_ylabel("")
    return _save(fig, figures_dir, "month_year_heatmap", dpi)


def plot_weekday_hour_heatmap(df: pd.DataFrame, figures_dir: Path, dpi: int = DEFAULT_DPI) -> Path:
    pivot = crosstab_counts(df, "Day_of_Week", "Hour")
    fig, ax = plt.subplots(figsize=(14, 6))
    sns.heatmap(pivot, cmap="mako", ax=ax, cbar_kws={"label": "Incidents"})
    ax.set_title("Incidents by Day of Week and Hour")
    ax.set_xlabel("Hour")
    ax.set_ylabel("")
    return _save(fig, figures_dir, "weekday_hour_heatmap", dpi)


def plot_borough_share(df: pd.DataFrame, figures_dir: Path, dpi: int = DEFAULT_DPI) -> Path:
    shares = share_of_incidents(df, "Borough")
    names = shares["Borough"].astype(str)
    palette = _borough_palette(names)
    widths = 2 * np.pi * shares["Share"].to_numpy()
    starts = 2 * np.pi * (shares["Cum_Position"] - shares["Share"] / 2).to_numpy()

    fig = plt.figure(figsize=(9, 9))
    ax = fig.add_subplot(projection="polar")
    ax.bar(
        starts,
        np.ones(len(shares)),
        width=widths,
        align="edge",
        color=[palette[name] for name in names],
        edgecolor="white",
    )
    for name, share, position in zip(names, shares["Share"], shares["Cum_Position"], strict=False):
        ax.text(2 * np.pi * position, 0.65, f"{name}\n{share:.1%}", ha="center", va="center", fontsize=12)
    ax.set_theta_zero_location("N")
    ax.set_theta_direction(-1)
    ax.set_axis_off()
    ax.set_title("Share of Incidents by Borough")
    return _save(fig, figures_dir, "borough_share", dpi)


def plot_borough_by_year(df: pd.DataFrame, figures_dir: Path, dpi: int = DEFAULT_DPI) -> Path:
    counts = count_incidents(df, ["Year", "Borough"])
    counts["Borough"] = counts["Borough"].astype(str)
    fig, ax = plt.subplots(figsize=(12, 6))
    sns.lineplot(
        data=counts,
        x="Year",
        y="Incidents",
        hue="Borough",
        palette=_borough_palette(counts["Borough"].unique()),
        marker="o",
        ax=ax,
    )
    ax.set_title("Incidents per Year by Borough")
    return _save(fig, figures_dir, "borough_by_year", dpi)


def plot_murder_rate_by_borough(df: pd.DataFrame, figures_dir: Path, dpi: int = DEFAULT_DPI) -> Path:
    summary = summarize_groups(df, ["Year", "Borough"])
    summary["Borough"] = summary["Borough"].astype(str)
    fig, ax = plt.subplots(figsize=(12, 6))
    sns.scatterplot(
        data=summary,
        x="Year",
        y="Murder_Rate",
        hue="Borough",
        palette=_borough_palette(summary["Borough"].unique()),
        s=90,
        ax=ax,
    )
    ax.set_ylim(0, 1)
    ax.set_ylabel("Murder rate")
    ax.set_title("Share of Incidents Classified as Murder")
    return _save(fig, figures_dir, "murder_rate_by_borough", dpi)


def plot_time_of_day_ridges(df: pd.DataFrame, figures_dir: Path, dpi: int = DEFAULT_DPI) -> Path:
    timed = with_time_decimal(df)[["Borough", "Time_Decimal"]]
    timed["Borough"] = timed["Borough"].astype(str)
    order = sorted(timed["Borough"].unique())
    grid = sns.FacetGrid(
        timed,
        row="Borough",
        hue="Borough",
        row_order=order,
        hue_order=order,
        palette=_borough_palette(order),
        aspect=8,
        height=1.3,
    )
    grid.map(sns.kdeplot, "Time_Decimal", fill=True, alpha=0.8, clip=(0, 24), warn_singular=False)
    grid.map(plt.axhline, y=0, lw=1, clip_on=False)
    for ax, name in zip(grid.axes.flat, order, strict=False):
        ax.text(0, 0.2, name, fontweight="bold", ha="left", va="center", transform=ax.transAxes)
    grid.set_titles("")
    grid.set(yticks=[], ylabel="", xlim=(0, 24))
    grid.set_xlabels("Time of day (hours)")
    grid.despine(bottom=True, left=True)
    grid.figure.suptitle("Time-of-Day Density by Borough")
    return _save(grid.figure, figures_dir, "time_of_day_ridges", dpi)


def plot_time_of_day_points(df: pd.DataFrame, figures_dir: Path, dpi: int = DEFAULT_DPI) -> Path:
    hourly = hourly_by_borough(df)
    hourly["Borough"] = hourly["Borough"].astype(str)
    fig, ax = plt.subplots(figsize=(12, 6))
    sns.scatterplot(
        data=hourly,
        x="Time_Decimal",
        y="Incidents",
        hue="Borough",
        palette=_borough_palette(hourly["Borough"].unique()),
        alpha=0.8,
        ax=ax,
    )
    ax.set_xlim(0, 24)
    ax.set_xlabel("Time of day (10-minute buckets)")
    ax.set_title("Incidents by Time of Day")
    return _save(fig, figures_dir, "time_of_day_points", dpi)


def plot_quadratic_fit(
    hourly: pd.DataFrame, fit: QuadraticFit, figures_dir: Path, dpi: int = DEFAULT_DPI
) -> Path:
    grid_x = np.linspace(0, 24, 241)
    fig, ax = plt.subplots(figsize=(12, 6))
    ax.scatter(hourly[fit.x], hourly[fit.y], color=PALETTE["teal"], alpha=0.5, label="Borough buckets")
    ax.plot(grid_x, fit.predict(grid_x), color=PALETTE["crimson"], lw=3, label="Quadratic fit")
    ax.set_xlim(0, 24)
    ax.set_xlabel("Time of day (10-minute buckets)")
    ax.set_ylabel("Incidents")
    ax.set_title(f"Quadratic Fit of Incidents on Time of Day (R² = {fit.r_squared:.2f})")
    ax.legend()
    return _save(fig, figures_dir, "quadratic_fit", dpi)


def plot_description_rate_by_year(df: pd.DataFrame, figures_dir: Path, dpi: int = DEFAULT_DPI) -> Path:
    summary = summarize_groups(df, ["Year", "Borough"])
    summary["Borough"] = summary["Borough"].astype(str)
    fig, ax = plt.subplots(figsize=(12, 6))
    sns.lineplot(
        data=summary,
        x="Year",
        y="Description_Rate",
        hue="Borough",
        palette=_borough_palette(summary["Borough"].unique()),
        marker="o",
        ax=ax,
    )
    ax.set_ylim(0, 1)
    ax.set_ylabel("Share with perpetrator description")
    ax.set_title("Perpetrator Description Rate per Year")
    return _save(fig, figures_dir, "description_rate_by_year", dpi)


def plot_perp_victim_race_heatmap(df: pd.DataFrame, figures_dir: Path, dpi: int = DEFAULT_DPI) -> Path:
    races = df.assign(
        Perp_Race=df["Perp_Race"].astype(object).fillna("UNKNOWN"),
        Vic_Race=df["Vic_Race"].astype(object).fillna("UNKNOWN"),
    )
    pivot = crosstab_counts(races, "Perp_Race", "Vic_Race")
    fig, ax = plt.subplots(figsize=(14, 9))
    sns.heatmap(pivot, cmap="rocket_r", annot=True, fmt="d", ax=ax, cbar_kws={"label": "Incidents"})
    ax.set_title("Perpetrator vs Victim Race")
    ax.set_xlabel("Victim race")
    ax.set_ylabel("Perpetrator race")
    return _save(fig, figures_dir, "perp_victim_race_heatmap", dpi)


def plot_incident_map(df: pd.DataFrame, figures_dir: Path, dpi: int = DEFAULT_DPI) -> Path:
    located = df.dropna(subset=["Latitude", "Longitude"])
    murdered = located["Murdered"].fillna(False).astype(bool)
    fig, ax = plt.subplots(figsize=(10, 10))
    ax.scatter(
        located.loc[~murdered, "Longitude"],
        located.loc[~murdered, "Latitude"],
        s=4,
        alpha=0.4,
        color=PALETTE["teal"],
        label="Not murdered",
    )
    ax.scatter(
        located.loc[murdered, "Longitude"],
        located.loc[murdered, "Latitude"],
        s=4,
        alpha=0.6,
        color=PALETTE["crimson"],
        label="Murdered",
    )
    ax.set_aspect(1.3)
    ax.set_xlabel("Longitude")
    ax.set_ylabel("Latitude")
    ax.set_title("Shooting Incident Locations")
    ax.legend(markerscale=4)
    return _save(fig, figures_dir, "incident_map", dpi)


def render_all(
    df: pd.DataFrame, figures_dir: Path, dpi: int = DEFAULT_DPI
) -> Tuple[Dict[str, Path], QuadraticFit]:
    figures_dir.mkdir(parents=True, exist_ok=True)
    configure_matplotlib()
    hourly = hourly_by_borough(df)
    fit = fit_quadratic(hourly)
    figures = {
        "incidents_by_year": plot_incidents_by_year(df, figures_dir, dpi),
        "murders_by_year": plot_murders_by_year(df, figures_dir, dpi),
        "month_year_heatmap": plot_month_year_heatmap(df, figures_dir, dpi),
        "weekday_hour_heatmap": plot_weekday_hour_heatmap(df, figures_dir, dpi),
        "borough_share": plot_borough_share(df, figures_dir, dpi),
        "borough_by_year": plot_borough_by_year(df, figures_dir, dpi),
        "murder_rate_by_borough": plot_murder_rate_by_borough(df, figures_dir, dpi),
        "time_of_day_ridges": plot_time_of_day_ridges(df, figures_dir, dpi),
        "time_of_day_points": plot_time_of_day_points(df, figures_dir, dpi),
        "quadratic_fit": plot_quadratic_fit(hourly, fit, figures_dir, dpi),
        "description_rate_by_year": plot_description_rate_by_year(df, figures_dir, dpi),
        "perp_victim_race_heatmap": plot_perp_victim_race_heatmap(df, figures_dir, dpi),
        "incident_map": plot_incident_map(df, figures_dir, dpi),
    }
    log.info("Rendered %s figures into %s", len(figures), figures_dir)
    return figures, fit
