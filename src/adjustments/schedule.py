"""Strength-of-schedule scaling of raw team stats."""

from dataclasses import dataclass

import numpy as np

from ..models.team import TeamStatProfile

# Volume a team produced; inflated when it came against hard opponents.
OFFENSE_VOLUME_METRICS = (
    "off_pass_yards_per_game",
    "off_rush_yards_per_game",
    "off_wr_yards_per_game",
    "off_te_yards_per_game",
    "off_points_scored_per_game",
)

# Volume a team allowed; deflated when it came against hard opponents.
DEFENSE_ALLOWED_METRICS = (
    "def_pass_yards_allowed_per_game",
    "def_rush_yards_allowed_per_game",
    "def_wr_yards_allowed_per_game",
    "def_te_yards_allowed_per_game",
    "def_points_allowed_per_game",
)


@dataclass(frozen=True)
class ScheduleConfig:
    factor_per_point: float = 0.01
    max_adjustment: float = 0.15


def schedule_factor(rating: float, config: ScheduleConfig = ScheduleConfig()) -> float:
    """Linear adjustment for a schedule difficulty rating, clamped."""
    return float(np.clip(rating * config.factor_per_point, -config.max_adjustment, config.max_adjustment))


def apply_strength_of_schedule(
    profile: TeamStatProfile,
    config: ScheduleConfig = ScheduleConfig(),
) -> TeamStatProfile:
    """
    Scale offensive volume up and defensive-allowed volume down for a
    positive (harder) schedule rating, and the inverse for a negative one.

    Profiles without a rating are returned unchanged.
    """
    rating = profile.strength_of_schedule
    if not rating:
        return profile

    f = schedule_factor(rating, config)
    updates = {}
    for name in OFFENSE_VOLUME_METRICS:
        value = profile.stat(name)
        if value is not None:
            updates[name] = value * (1.0 + f)
    for name in DEFENSE_ALLOWED_METRICS:
        value = profile.stat(name)
        if value is not None:
            updates[name] = value * (1.0 - f)
    return profile.with_stats(updates)
