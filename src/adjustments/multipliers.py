"""Composable stat multipliers shared by the injury and weather passes."""

from enum import Enum
from typing import Dict, Tuple

from ..models.team import TeamStatProfile


class Effect(Enum):
    """A team capability that injuries or weather can scale."""
    PASS_VOLUME = "passVol"
    RUSH_VOLUME = "rushVol"
    RED_ZONE = "redZone"
    EXPLOSIVE = "explosive"
    PRESSURE_ALLOWED = "pressureAllowed"
    TURNOVERS = "turnovers"
    PRESSURE_GENERATED = "pressureGenerated"
    RUSH_DEFENSE = "rushDef"
    PASS_DEFENSE = "passDef"
    EXPLOSIVE_DEFENSE = "explosiveDef"


# Stat fields each effect scales.
EFFECT_TARGETS: Dict[Effect, Tuple[str, ...]] = {
    Effect.PASS_VOLUME: ("off_pass_yards_per_game",),
    Effect.RUSH_VOLUME: ("off_rush_yards_per_game",),
    Effect.RED_ZONE: ("off_rz_efficiency_pct",),
    Effect.EXPLOSIVE: ("off_explosive_play_rate_pct",),
    Effect.PRESSURE_ALLOWED: ("off_pressure_allowed_pct",),
    Effect.TURNOVERS: ("off_turnovers_per_game",),
    Effect.PRESSURE_GENERATED: ("def_pressure_generated_pct",),
    Effect.RUSH_DEFENSE: ("def_rush_yards_allowed_per_game",),
    Effect.PASS_DEFENSE: ("def_pass_yards_allowed_per_game",),
    Effect.EXPLOSIVE_DEFENSE: ("def_explosive_play_rate_allowed_pct",),
}


class MultiplierSet:
    """
    Running product of multipliers per effect.

    Passes accumulate into the set and the profile is scaled once at the end,
    so later passes (cliffs, weather) never re-derive from already-adjusted
    stats.
    """

    def __init__(self):
        self._values: Dict[Effect, float] = {e: 1.0 for e in Effect}

    def scale(self, effect: Effect, factor: float) -> None:
        self._values[effect] *= factor

    def as_dict(self) -> Dict[str, float]:
        return {e.value: v for e, v in self._values.items()}

    def apply(self, profile: TeamStatProfile) -> TeamStatProfile:
        """Return a scaled copy of ``profile``; absent stats are skipped."""
        updates = {}
        for effect, factor in self._values.items():
            if factor == 1.0:
                continue
            for name in EFFECT_TARGETS[effect]:
                value = profile.stat(name)
                if value is None:
                    continue
                updates[name] = updates.get(name, value) * factor
        return profile.with_stats(updates) if updates else profile
