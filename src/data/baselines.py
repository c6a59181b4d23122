"""Per-season league baselines (mean / standard deviation per metric)."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional

import numpy as np
import pandas as pd

from ..models.team import LeagueSeason, SCORING_METRICS
from ..simulation.errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MetricBaseline:
    """League mean and population standard deviation for one metric."""

    mean: float
    std_dev: float
    metric: str = ""


@dataclass(frozen=True)
class LeagueBaseline:
    """All metric baselines for one season."""

    season: int
    num_teams: int
    metrics: Dict[str, MetricBaseline] = field(default_factory=dict)

    def get(self, metric: str) -> MetricBaseline:
        try:
            return self.metrics[metric]
        except KeyError:
            raise ConfigurationError(
                f"No league baseline for '{metric}' in season {self.season}"
            ) from None

    def validate(self, metrics: Iterable[str] = SCORING_METRICS) -> None:
        """Fail fast if any metric used for normalization is degenerate."""
        if self.num_teams < 2:
            raise ConfigurationError(
                f"Season {self.season} has {self.num_teams} team(s); "
                "at least two are required to normalize stats"
            )
        degenerate = [m for m in metrics if self.get(m).std_dev == 0]
        if degenerate:
            raise ConfigurationError(
                f"Zero standard deviation in season {self.season} for: {', '.join(degenerate)}"
            )

    def to_dict(self) -> dict:
        return {
            "season": self.season,
            "num_teams": self.num_teams,
            "metrics": {k: {"mean": v.mean, "std_dev": v.std_dev} for k, v in self.metrics.items()},
        }


def compute_league_baselines(season: LeagueSeason) -> LeagueBaseline:
    """
    Compute per-metric mean and population standard deviation for a season.

    Optional metrics are included when every team in the season reports
    them; partially reported metrics are left out rather than biased by the
    teams that happen to have them.

    Args:
        season: Season whose teams define the league reference

    Returns:
        LeagueBaseline
    """
    if not season.teams:
        return LeagueBaseline(season=season.season, num_teams=0)

    df = pd.DataFrame([team.stats_dict() for team in season.teams])
    df = df.dropna(axis=1, how="any")

    means = df.mean()
    stds = df.std(ddof=0).fillna(0.0)

    metrics = {}
    for col in df.columns:
        std = float(stds[col])
        # Floating point noise on constant columns must still read as zero.
        if np.isclose(std, 0.0, atol=1e-12):
            std = 0.0
        metrics[col] = MetricBaseline(mean=float(means[col]), std_dev=std, metric=col)

    return LeagueBaseline(season=season.season, num_teams=len(season.teams), metrics=metrics)


class BaselineCache:
    """
    Holds the baselines for the currently selected season.

    Baselines are computed on first use and reused until a different season
    is requested, which invalidates the cached entry.
    """

    def __init__(self):
        self._season: Optional[int] = None
        self._baseline: Optional[LeagueBaseline] = None

    @property
    def season(self) -> Optional[int]:
        return self._season

    def get(self, season: LeagueSeason) -> LeagueBaseline:
        if self._baseline is None or self._season != season.season:
            logger.info("Computing league baselines for season %s", season.season)
            self._baseline = compute_league_baselines(season)
            self._season = season.season
        return self._baseline

    def invalidate(self) -> None:
        self._season = None
        self._baseline = None
