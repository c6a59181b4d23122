"""
Adjustment engine: turns a raw TeamStatProfile into the profile a matchup
is actually scored with.

Pass order:
1. Strength of schedule (optional) on the raw baseline stats
2. Per-position injury multipliers
3. Structural-collapse cliffs
4. Weather

Passes 2-4 accumulate into one multiplier set that is applied once, so the
source profile is never mutated and no pass reads another pass's output.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List

from ..models.situation import SituationalInputs, TeamInjuries
from ..models.team import TeamStatProfile
from .injuries import CliffConfig, apply_cliffs, apply_injury_multipliers
from .multipliers import MultiplierSet
from .schedule import ScheduleConfig, apply_strength_of_schedule
from .weather import apply_weather

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdjustedStatProfile:
    """A profile after schedule, injury and weather adjustments.

    Ephemeral: rebuilt for every run and never persisted.
    """

    source: TeamStatProfile
    stats: TeamStatProfile
    multipliers: Dict[str, float] = field(default_factory=dict)
    cliffs: List[str] = field(default_factory=list)
    schedule_adjusted: bool = False

    @property
    def team_id(self) -> str:
        return self.source.team_id

    @property
    def team_name(self) -> str:
        return self.source.team_name

    @classmethod
    def unadjusted(cls, profile: TeamStatProfile) -> "AdjustedStatProfile":
        return cls(source=profile, stats=profile)

    def to_dict(self) -> dict:
        return {
            "team_id": self.team_id,
            "stats": self.stats.stats_dict(),
            "multipliers": dict(self.multipliers),
            "cliffs": list(self.cliffs),
            "schedule_adjusted": self.schedule_adjusted,
        }


@dataclass(frozen=True)
class AdjustmentConfig:
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    cliffs: CliffConfig = field(default_factory=CliffConfig)


class AdjustmentEngine:
    """Applies situational and injury adjustments to team stats."""

    def __init__(self, config: AdjustmentConfig = None):
        self.config = config or AdjustmentConfig()

    def adjust(
        self,
        profile: TeamStatProfile,
        injuries: TeamInjuries,
        context: SituationalInputs,
    ) -> AdjustedStatProfile:
        """
        Adjust one team's profile for a matchup.

        Args:
            profile: Source-of-truth profile (left untouched)
            injuries: The team's injury report
            context: Situation snapshot (weather, schedule toggle)

        Returns:
            AdjustedStatProfile
        """
        base = profile
        schedule_adjusted = False
        if context.use_strength_of_schedule and profile.strength_of_schedule:
            base = apply_strength_of_schedule(profile, self.config.schedule)
            schedule_adjusted = True

        mults = MultiplierSet()
        apply_injury_multipliers(injuries, mults)
        cliffs = apply_cliffs(injuries, mults, self.config.cliffs)
        apply_weather(context.wind, context.precipitation, mults)

        adjusted = mults.apply(base)
        logger.debug(
            "Adjusted %s: cliffs=%s multipliers=%s",
            profile.team_id, cliffs,
            {k: round(v, 4) for k, v in mults.as_dict().items() if v != 1.0},
        )

        return AdjustedStatProfile(
            source=profile,
            stats=adjusted,
            multipliers=mults.as_dict(),
            cliffs=cliffs,
            schedule_adjusted=schedule_adjusted,
        )

    def adjust_matchup(self, team_a: TeamStatProfile, team_b: TeamStatProfile, context: SituationalInputs):
        """Adjust both sides of a matchup; returns ``(adjusted_a, adjusted_b)``."""
        return (
            self.adjust(team_a, context.injuries_a, context),
            self.adjust(team_b, context.injuries_b, context),
        )
