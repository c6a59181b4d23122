"""
Trial-invariant context terms.

Home field, travel, rest, momentum, division familiarity and game stakes do
not change between Monte Carlo trials, so they are resolved once per
matchup and folded into every trial's delta:

    final_delta = (raw_delta + additive) * compression
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from ..models.situation import GameStakes, RestGap, Side, SituationalInputs
from ..models.team import TeamStatProfile
from .errors import ConfigurationError


@dataclass(frozen=True)
class ContextConfig:
    """Sizes of the situational terms, in normalized delta units."""

    home_field: float = 0.05
    travel_penalty: float = 0.03
    momentum: float = 0.03
    rest_values: Dict[RestGap, float] = field(default_factory=lambda: {
        RestGap.SHORT: -0.03,
        RestGap.STANDARD: 0.0,
        RestGap.BYE: 0.03,
    })
    # Division rivals know each other; margins tighten.
    division_compression: float = 0.95
    stakes_compression: Dict[GameStakes, float] = field(default_factory=lambda: {
        GameStakes.REGULAR: 1.0,
        GameStakes.WILD_CARD: 0.92,
        GameStakes.DIVISIONAL: 0.90,
        GameStakes.CONFERENCE_CHAMPIONSHIP: 0.88,
        GameStakes.CHAMPIONSHIP: 0.85,
    })

    def __post_init__(self):
        factors = [self.division_compression, *self.stakes_compression.values()]
        if any(f <= 0 for f in factors):
            raise ConfigurationError("Compression factors must be positive")


@dataclass(frozen=True)
class ContextTerms:
    """Resolved situational adjustment for one matchup (team A perspective)."""

    additive: float = 0.0
    compression: float = 1.0
    components: Dict[str, float] = field(default_factory=dict)
    division_game: bool = False

    def apply(self, delta):
        """Fold the terms into a delta (scalar or numpy array)."""
        return (delta + self.additive) * self.compression

    def to_dict(self) -> dict:
        return {
            "additive": self.additive,
            "compression": self.compression,
            "components": dict(self.components),
            "division_game": self.division_game,
        }


def _side_sign(side: Side) -> float:
    if side == Side.TEAM_A:
        return 1.0
    if side == Side.TEAM_B:
        return -1.0
    return 0.0


def is_division_game(
    situation: SituationalInputs,
    team_a: Optional[TeamStatProfile] = None,
    team_b: Optional[TeamStatProfile] = None,
) -> bool:
    """Explicit flag wins; otherwise two teams sharing a division."""
    if situation.division_game is not None:
        return situation.division_game
    if team_a is None or team_b is None:
        return False
    return bool(team_a.division) and team_a.division == team_b.division


def compute_context_terms(
    situation: SituationalInputs,
    config: ContextConfig = None,
    team_a: Optional[TeamStatProfile] = None,
    team_b: Optional[TeamStatProfile] = None,
) -> ContextTerms:
    """
    Resolve the situation snapshot into additive and compressive terms.

    Args:
        situation: Matchup context
        config: Term sizes
        team_a: Team A profile (division inference only)
        team_b: Team B profile (division inference only)

    Returns:
        ContextTerms
    """
    config = config or ContextConfig()

    components = {
        "home_field": _side_sign(situation.home_field) * config.home_field,
        # The travelling side is penalized.
        "travel": -_side_sign(situation.travel) * config.travel_penalty,
        "rest": config.rest_values[situation.rest_a] - config.rest_values[situation.rest_b],
        "momentum": _side_sign(situation.momentum) * config.momentum,
    }
    additive = float(sum(components.values()))

    division = is_division_game(situation, team_a, team_b)
    compression = config.stakes_compression[situation.stakes]
    if division:
        compression *= config.division_compression

    return ContextTerms(
        additive=additive,
        compression=float(compression),
        components=components,
        division_game=division,
    )
