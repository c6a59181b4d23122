"""
Matchup scorer: weighted, normalized advantage of one offense over the
opposing defense for a single simulated trial.

For every category the advantage is

    (z(offense stat) + noise) - (z(defense stat) + noise)

where both z-scores read "positive = good for that unit", so an elite
offense against an equally elite defense nets out near zero.  The weighted
sum is divided by ``||w|| * sqrt(2)`` which keeps the delta's spread near
one per unit of noise, the scale the sigmoid steepness is tuned for.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

import numpy as np
from scipy.special import expit

from ..adjustments.engine import AdjustedStatProfile
from ..data.baselines import LeagueBaseline
from ..data.normalize import z_score
from ..models.team import TeamStatProfile
from .categories import CATEGORY_DEFINITIONS, CATEGORY_ORDER, DEFAULT_WEIGHTS, Category
from .errors import ConfigurationError

DEFAULT_SIGMOID_K = 0.65

# Keeps mapped probabilities strictly inside (0, 1) for extreme deltas.
PROB_EPS = 1e-12

Profile = Union[AdjustedStatProfile, TeamStatProfile]


def sigmoid(delta, k: float = DEFAULT_SIGMOID_K):
    """
    Logistic mapping of a delta to a win probability.

    ``k`` encodes irreducible game-day randomness (in-game injuries,
    officiating, weather swings): lower k pulls every game toward a coin flip.

    Args:
        delta: Scalar or numpy array of deltas
        k: Steepness, must be positive

    Returns:
        Probability (float for scalar input, ndarray otherwise)
    """
    if k <= 0:
        raise ConfigurationError(f"Sigmoid steepness must be positive, got {k}")
    p = np.clip(expit(k * np.asarray(delta, dtype=float)), PROB_EPS, 1.0 - PROB_EPS)
    return float(p) if np.ndim(p) == 0 else p


def normalization_factor(weights: Dict[Category, float]) -> float:
    """Euclidean norm of the weight vector, scaled for two independent noisy sides."""
    norm = math.sqrt(sum(w * w for w in weights.values()))
    return norm * math.sqrt(2.0)


@dataclass(frozen=True)
class ScoringConfig:
    """Category weights and the red-zone leverage rule."""

    weights: Dict[Category, float] = field(default_factory=lambda: dict(DEFAULT_WEIGHTS))
    red_zone_leverage: bool = True
    red_zone_threshold: float = 1.0  # |advantage| in z units
    red_zone_factor: float = 1.10

    def __post_init__(self):
        missing = [c.value for c in CATEGORY_ORDER if c not in self.weights]
        if missing:
            raise ConfigurationError(f"Missing weights for: {', '.join(missing)}")
        if any(w < 0 for w in self.weights.values()):
            raise ConfigurationError("Category weights must be non-negative")
        if not any(w > 0 for w in self.weights.values()):
            raise ConfigurationError("At least one category weight must be positive")
        if self.red_zone_threshold < 0 or self.red_zone_factor <= 0:
            raise ConfigurationError("Invalid red-zone leverage parameters")


@dataclass(frozen=True)
class CategoryAdvantage:
    """Zero-noise comparison of one offense vs one defense in a category."""

    category: Category
    offense_z: float
    defense_z: float
    weight: float

    @property
    def advantage(self) -> float:
        return self.offense_z - self.defense_z

    @property
    def contribution(self) -> float:
        return self.advantage * self.weight

    @property
    def label(self) -> str:
        return CATEGORY_DEFINITIONS[self.category].label

    def to_dict(self) -> dict:
        return {
            "category": self.category.value,
            "label": self.label,
            "offense_z": self.offense_z,
            "defense_z": self.defense_z,
            "advantage": self.advantage,
            "weight": self.weight,
            "contribution": self.contribution,
        }


@dataclass(frozen=True)
class MatchupBreakdown:
    """Per-category advantages for both offenses ("matchup DNA")."""

    a_offense: List[CategoryAdvantage]
    b_offense: List[CategoryAdvantage]

    def net_by_category(self) -> Dict[Category, float]:
        """Team A's weighted edge per category (its offense minus B's offense)."""
        b = {adv.category: adv.contribution for adv in self.b_offense}
        return {adv.category: adv.contribution - b[adv.category] for adv in self.a_offense}

    def to_dict(self) -> dict:
        return {
            "a_offense": [a.to_dict() for a in self.a_offense],
            "b_offense": [b.to_dict() for b in self.b_offense],
            "net": {c.value: v for c, v in self.net_by_category().items()},
        }


def _stats(profile: Profile) -> TeamStatProfile:
    return profile.stats if isinstance(profile, AdjustedStatProfile) else profile


class MatchupScorer:
    """Computes per-trial deltas for one offense against one defense."""

    def __init__(self, config: ScoringConfig = None):
        self.config = config or ScoringConfig()
        self.weights = np.array([self.config.weights[c] for c in CATEGORY_ORDER], dtype=float)
        self.normalization_factor = normalization_factor(self.config.weights)
        self._red_zone_idx = CATEGORY_ORDER.index(Category.RED_ZONE)

    def z_scores(
        self,
        offense: Profile,
        defense: Profile,
        baselines: LeagueBaseline,
    ) -> Tuple[np.ndarray, np.ndarray]:
        """Offense and defense z-scores per category, in ``CATEGORY_ORDER``."""
        off_stats, def_stats = _stats(offense), _stats(defense)
        off_z, def_z = [], []
        for category in CATEGORY_ORDER:
            definition = CATEGORY_DEFINITIONS[category]
            off_z.append(z_score(definition.offense(off_stats), baselines.get(definition.offense_metric), definition.offense_invert))
            def_z.append(z_score(definition.defense(def_stats), baselines.get(definition.defense_metric), definition.defense_invert))
        return np.array(off_z), np.array(def_z)

    def breakdown(
        self,
        offense: Profile,
        defense: Profile,
        baselines: LeagueBaseline,
    ) -> List[CategoryAdvantage]:
        off_z, def_z = self.z_scores(offense, defense, baselines)
        return [
            CategoryAdvantage(
                category=category,
                offense_z=float(off_z[i]),
                defense_z=float(def_z[i]),
                weight=float(self.weights[i]),
            )
            for i, category in enumerate(CATEGORY_ORDER)
        ]

    def matchup_breakdown(self, team_a: Profile, team_b: Profile, baselines: LeagueBaseline) -> MatchupBreakdown:
        return MatchupBreakdown(
            a_offense=self.breakdown(team_a, team_b, baselines),
            b_offense=self.breakdown(team_b, team_a, baselines),
        )

    def _combine(self, advantages: np.ndarray) -> np.ndarray:
        """Weighted, normalized delta per row, with red-zone leverage."""
        delta = (advantages * self.weights).sum(axis=-1) / self.normalization_factor
        if not self.config.red_zone_leverage:
            return delta
        red_zone = advantages[..., self._red_zone_idx]
        leveraged = (
            (np.abs(red_zone) > self.config.red_zone_threshold)
            & (np.sign(red_zone) == np.sign(delta))
            & (delta != 0)
        )
        return np.where(leveraged, delta * self.config.red_zone_factor, delta)

    def score_trials(
        self,
        offense: Profile,
        defense: Profile,
        baselines: LeagueBaseline,
        noise_level: float,
        rng: Optional[np.random.Generator] = None,
        size: int = 1,
    ) -> np.ndarray:
        """
        Score ``size`` independent trials of one offense vs one defense.

        Noise is drawn independently for the offense and defense side of every
        category.  With ``noise_level == 0`` no random draws are made and every
        trial equals the deterministic baseline.

        Returns:
            Array of deltas, shape ``(size,)``
        """
        if noise_level < 0:
            raise ConfigurationError(f"Noise level must be non-negative, got {noise_level}")

        off_z, def_z = self.z_scores(offense, defense, baselines)
        advantages = off_z - def_z

        if noise_level == 0:
            return np.full(size, float(self._combine(advantages)))

        rng = rng if rng is not None else np.random.default_rng()
        noise = rng.standard_normal((size, 2, len(CATEGORY_ORDER))) * noise_level
        noisy = advantages + noise[:, 0, :] - noise[:, 1, :]
        return self._combine(noisy)

    def score_trial(
        self,
        offense: Profile,
        defense: Profile,
        baselines: LeagueBaseline,
        noise_level: float = 0.0,
        rng: Optional[np.random.Generator] = None,
    ) -> float:
        """Delta for a single trial; positive favors ``offense``."""
        return float(self.score_trials(offense, defense, baselines, noise_level, rng, size=1)[0])
