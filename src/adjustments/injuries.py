"""
Positional injury multipliers and structural-collapse cliffs.

Multiplier ladders are indexed by severity: ``[healthy, questionable, out]``.
They come from historical EPA and success-rate splits (2015-2025) for games
where a starter at the position was limited or missing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Tuple

from ..models.situation import InjurySeverity, Position, TeamInjuries
from .multipliers import Effect, MultiplierSet

logger = logging.getLogger(__name__)


INJURY_MULTIPLIERS: Dict[Position, Dict[Effect, Tuple[float, float, float]]] = {
    # --- Offense ---
    Position.QB: {
        Effect.PASS_VOLUME: (1.0, 0.90, 0.75),  # backups throw shorter
        Effect.RED_ZONE: (1.0, 0.88, 0.82),
        Effect.EXPLOSIVE: (1.0, 0.82, 0.65),  # deep-ball gap
        Effect.PRESSURE_ALLOWED: (1.0, 1.10, 1.25),  # holds the ball longer
    },
    Position.RB: {
        Effect.RUSH_VOLUME: (1.0, 0.97, 0.92),
        Effect.PASS_VOLUME: (1.0, 0.98, 0.90),  # check-down outlet
        Effect.EXPLOSIVE: (1.0, 0.90, 0.80),
        Effect.RED_ZONE: (1.0, 0.95, 0.88),
        Effect.PRESSURE_ALLOWED: (1.0, 1.05, 1.12),  # blitz pickup
    },
    Position.WR: {
        Effect.PASS_VOLUME: (1.0, 0.95, 0.90),
        Effect.RED_ZONE: (1.0, 0.98, 0.95),
        Effect.EXPLOSIVE: (1.0, 0.88, 0.78),
    },
    Position.TE: {
        Effect.PASS_VOLUME: (1.0, 0.98, 0.95),
        Effect.RED_ZONE: (1.0, 0.90, 0.80),
        Effect.EXPLOSIVE: (1.0, 0.97, 0.95),
        Effect.PRESSURE_ALLOWED: (1.0, 1.03, 1.08),  # chip blocks on the edge
    },
    Position.OFFENSIVE_LINE: {
        Effect.RUSH_VOLUME: (1.0, 0.95, 0.88),
        Effect.PASS_VOLUME: (1.0, 0.97, 0.92),
        Effect.EXPLOSIVE: (1.0, 0.92, 0.80),
        Effect.RED_ZONE: (1.0, 0.95, 0.90),
        Effect.PRESSURE_ALLOWED: (1.0, 1.08, 1.22),
    },
    # --- Defense (resistance: values > 1 mean more yards allowed) ---
    Position.DEFENSIVE_LINE: {
        Effect.PRESSURE_GENERATED: (1.0, 0.95, 0.85),
        Effect.RUSH_DEFENSE: (1.0, 1.05, 1.12),
    },
    Position.SECONDARY: {
        Effect.PASS_DEFENSE: (1.0, 1.04, 1.10),
        Effect.EXPLOSIVE_DEFENSE: (1.0, 1.08, 1.18),
    },
}


@dataclass(frozen=True)
class CliffConfig:
    """Aggregate-condition penalties layered on top of the per-position pass."""

    ol_starters_out_threshold: int = 3
    ol_pass_volume: float = 0.85
    ol_pressure_allowed: float = 1.25
    ol_explosive: float = 0.80
    secondary_explosive_defense: float = 1.15
    secondary_pass_defense: float = 1.08


def apply_injury_multipliers(injuries: TeamInjuries, mults: MultiplierSet) -> None:
    """Compose the per-position multipliers for every reported injury."""
    for entry in injuries.entries:
        if entry.severity == InjurySeverity.HEALTHY:
            continue
        table = INJURY_MULTIPLIERS.get(entry.position, {})
        for effect, ladder in table.items():
            mults.scale(effect, ladder[int(entry.severity)])


def secondary_collapsed(injuries: TeamInjuries) -> bool:
    """Both top corners out, or the top corner plus the top safety."""
    out = injuries.roles_out()
    return "CB1" in out and ("CB2" in out or "S1" in out)


def apply_cliffs(
    injuries: TeamInjuries,
    mults: MultiplierSet,
    config: CliffConfig = CliffConfig(),
) -> List[str]:
    """
    Apply unit-collapse penalties.

    Must run after ``apply_injury_multipliers``; the cliff factors are
    independent values multiplied into the running set.

    Returns:
        Names of the cliffs that fired
    """
    fired = []

    ol_out = injuries.count_out(Position.OFFENSIVE_LINE)
    if ol_out >= config.ol_starters_out_threshold:
        mults.scale(Effect.PASS_VOLUME, config.ol_pass_volume)
        mults.scale(Effect.PRESSURE_ALLOWED, config.ol_pressure_allowed)
        mults.scale(Effect.EXPLOSIVE, config.ol_explosive)
        fired.append("offensive_line_collapse")
        logger.debug("Offensive line cliff: %d starters out", ol_out)

    if secondary_collapsed(injuries):
        mults.scale(Effect.EXPLOSIVE_DEFENSE, config.secondary_explosive_defense)
        mults.scale(Effect.PASS_DEFENSE, config.secondary_pass_defense)
        fired.append("secondary_collapse")
        logger.debug("Secondary cliff: %s out", sorted(injuries.roles_out()))

    return fired
