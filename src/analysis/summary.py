"""
Summary analysis of a Monte Carlo trial population.

Reduces the raw per-trial deltas and probabilities to the final report:
aggregate win probabilities, a percentile ladder, interquartile range and
the qualitative labels (stability tier, confidence tier, upset outlook and
the matchup's x-factor).  Everything here is a pure function of the
population; no random draws are made.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

import numpy as np

from ..simulation.categories import Category, CATEGORY_DEFINITIONS
from ..simulation.errors import ConfigurationError, InvalidInputError
from ..simulation.monte_carlo import ResultPopulation
from ..simulation.scorer import MatchupBreakdown

logger = logging.getLogger(__name__)

PERCENTILE_LEVELS = (2.5, 10.0, 25.0, 50.0, 75.0, 90.0, 97.5)


class StabilityTier(Enum):
    FRAGILE = "Fragile (Chaotic)"
    TRAP = "Trap Game"
    MODERATE = "Moderate"
    STABLE = "Stable (Lock)"


class ConfidenceTier(Enum):
    VOLATILE = "Volatile"
    COIN_FLIP = "Coin Flip"
    SLIGHT_EDGE = "Slight Edge"
    CLEAR_FAVORITE = "Clear Favorite"
    STRONG_FAVORITE = "Strong Favorite"


@dataclass(frozen=True)
class SummaryThresholds:
    """
    Tunable cut-offs for the qualitative labels.

    Margins are ``|P(A) - 0.5|``; IQR values are in delta units.
    """

    # Stability
    fragile_margin: float = 0.07
    chaotic_iqr: float = 0.90
    stable_margin: float = 0.15
    stable_iqr: float = 0.45
    trap_iqr: float = 0.70
    # Confidence
    volatile_iqr: float = 1.00
    coin_flip_margin: float = 0.03
    slight_edge_margin: float = 0.10
    clear_favorite_margin: float = 0.20
    # Upset outlook, by underdog win probability
    upset_unlikely: float = 0.15
    upset_plausible: float = 0.30
    upset_live: float = 0.40

    def __post_init__(self):
        if not self.fragile_margin <= self.stable_margin:
            raise ConfigurationError("fragile_margin must not exceed stable_margin")
        if not (self.stable_iqr <= self.trap_iqr <= self.chaotic_iqr):
            raise ConfigurationError("Stability IQR thresholds must be non-decreasing")
        if not (self.coin_flip_margin <= self.slight_edge_margin <= self.clear_favorite_margin):
            raise ConfigurationError("Confidence margins must be non-decreasing")
        if not (self.upset_unlikely <= self.upset_plausible <= self.upset_live):
            raise ConfigurationError("Upset thresholds must be non-decreasing")


@dataclass(frozen=True)
class PercentileLadder:
    p2_5: float
    p10: float
    p25: float
    median: float
    p75: float
    p90: float
    p97_5: float

    @property
    def iqr(self) -> float:
        return self.p75 - self.p25

    def as_tuple(self) -> tuple:
        return (self.p2_5, self.p10, self.p25, self.median, self.p75, self.p90, self.p97_5)

    def to_dict(self) -> dict:
        return {
            "p2.5": self.p2_5,
            "p10": self.p10,
            "p25": self.p25,
            "median": self.median,
            "p75": self.p75,
            "p90": self.p90,
            "p97.5": self.p97_5,
        }


@dataclass(frozen=True)
class UpsetAssessment:
    underdog: Optional[str]  # "A", "B" or None for an exact coin flip
    rate: float
    label: str

    def to_dict(self) -> dict:
        return {"underdog": self.underdog, "rate": self.rate, "label": self.label}


@dataclass(frozen=True)
class XFactor:
    """Category where one offense holds the biggest zero-noise edge (or deficit)."""

    category: Category
    offense: str  # "A" or "B"
    advantage: float
    contribution: float

    @property
    def label(self) -> str:
        return CATEGORY_DEFINITIONS[self.category].label

    @property
    def favors(self) -> str:
        """Team helped by this category."""
        if self.advantage >= 0:
            return self.offense
        return "B" if self.offense == "A" else "A"

    def to_dict(self) -> dict:
        return {
            "category": self.category.value,
            "label": self.label,
            "offense": self.offense,
            "advantage": self.advantage,
            "contribution": self.contribution,
            "favors": self.favors,
        }


@dataclass
class SimulationSummary:
    """Final report for one run."""

    num_trials: int
    win_prob_a: float
    win_prob_b: float
    mean_delta: float
    std_delta: float
    percentiles: PercentileLadder
    stability: StabilityTier
    confidence: ConfidenceTier
    upset: UpsetAssessment
    x_factor: Optional[XFactor] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def median_delta(self) -> float:
        return self.percentiles.median

    @property
    def iqr(self) -> float:
        return self.percentiles.iqr

    @property
    def win_margin(self) -> float:
        return abs(self.win_prob_a - 0.5)

    @property
    def favorite(self) -> Optional[str]:
        if self.win_prob_a > 0.5:
            return "A"
        if self.win_prob_a < 0.5:
            return "B"
        return None

    def to_dict(self) -> dict:
        return {
            "num_trials": self.num_trials,
            "win_prob_a": self.win_prob_a,
            "win_prob_b": self.win_prob_b,
            "mean_delta": self.mean_delta,
            "median_delta": self.median_delta,
            "std_delta": self.std_delta,
            "percentiles": self.percentiles.to_dict(),
            "iqr": self.iqr,
            "win_margin": self.win_margin,
            "stability": self.stability.value,
            "confidence": self.confidence.value,
            "upset": self.upset.to_dict(),
            "x_factor": self.x_factor.to_dict() if self.x_factor else None,
            "warnings": list(self.warnings),
        }


def percentile_ladder(deltas: np.ndarray) -> PercentileLadder:
    """
    Percentiles by linear interpolation between order statistics.

    ``index = p/100 * (n - 1)``, interpolated between the floor and ceiling
    order statistics; numpy's default "linear" method is exactly this.
    """
    values = np.asarray(deltas, dtype=float)
    if values.size == 0:
        raise InvalidInputError("Cannot compute percentiles of an empty population")
    return PercentileLadder(*(float(v) for v in np.percentile(values, PERCENTILE_LEVELS)))


def classify_stability(win_prob_a: float, iqr: float, thresholds: SummaryThresholds) -> StabilityTier:
    margin = abs(win_prob_a - 0.5)
    if margin < thresholds.fragile_margin and iqr > thresholds.chaotic_iqr:
        return StabilityTier.FRAGILE
    if margin > thresholds.stable_margin and iqr < thresholds.stable_iqr:
        return StabilityTier.STABLE
    # A real favorite whose outcomes still swing widely.
    if margin >= thresholds.fragile_margin and iqr > thresholds.trap_iqr:
        return StabilityTier.TRAP
    return StabilityTier.MODERATE


def classify_confidence(win_prob_a: float, iqr: float, thresholds: SummaryThresholds) -> ConfidenceTier:
    if iqr > thresholds.volatile_iqr:
        return ConfidenceTier.VOLATILE
    margin = abs(win_prob_a - 0.5)
    if margin < thresholds.coin_flip_margin:
        return ConfidenceTier.COIN_FLIP
    if margin < thresholds.slight_edge_margin:
        return ConfidenceTier.SLIGHT_EDGE
    if margin < thresholds.clear_favorite_margin:
        return ConfidenceTier.CLEAR_FAVORITE
    return ConfidenceTier.STRONG_FAVORITE


def assess_upset(win_prob_a: float, thresholds: SummaryThresholds) -> UpsetAssessment:
    """The underdog is whichever side sits below 0.5; its own probability is the upset rate."""
    win_prob_b = 1.0 - win_prob_a
    if win_prob_a < 0.5:
        underdog, rate = "A", win_prob_a
    elif win_prob_b < 0.5:
        underdog, rate = "B", win_prob_b
    else:
        underdog, rate = None, 0.5

    if rate < thresholds.upset_unlikely:
        label = "Unlikely"
    elif rate < thresholds.upset_plausible:
        label = "Plausible"
    elif rate < thresholds.upset_live:
        label = "Live underdog"
    else:
        label = "Toss-up"
    return UpsetAssessment(underdog=underdog, rate=rate, label=label)


def dominant_x_factor(breakdown: MatchupBreakdown) -> Optional[XFactor]:
    """Largest absolute zero-noise advantage across both offenses."""
    candidates = [("A", adv) for adv in breakdown.a_offense] + [("B", adv) for adv in breakdown.b_offense]
    candidates = [(side, adv) for side, adv in candidates if adv.weight > 0]
    if not candidates:
        return None
    side, best = max(candidates, key=lambda c: abs(c[1].advantage))
    return XFactor(
        category=best.category,
        offense=side,
        advantage=best.advantage,
        contribution=best.contribution,
    )


class SummaryAnalyzer:
    """Turns a ResultPopulation into a SimulationSummary."""

    def __init__(self, thresholds: SummaryThresholds = None):
        self.thresholds = thresholds or SummaryThresholds()

    def summarize(
        self,
        population: ResultPopulation,
        breakdown: Optional[MatchupBreakdown] = None,
    ) -> SimulationSummary:
        """
        Summarize a completed run.

        Args:
            population: Every trial of the run
            breakdown: Zero-noise category breakdown, for the x-factor

        Returns:
            SimulationSummary
        """
        if len(population) == 0:
            raise InvalidInputError("Cannot summarize an empty population")

        deltas = population.deltas
        warnings = []
        if np.ptp(deltas) == 0:
            msg = (
                f"All {len(population)} trials produced the same delta ({deltas[0]:.4f}); "
                "percentiles collapse to a single value"
            )
            logger.warning(msg)
            warnings.append(msg)

        ladder = percentile_ladder(deltas)
        win_prob_a = population.win_probability_a
        iqr = ladder.iqr

        return SimulationSummary(
            num_trials=len(population),
            win_prob_a=win_prob_a,
            win_prob_b=1.0 - win_prob_a,
            mean_delta=float(np.mean(deltas)),
            std_delta=float(np.std(deltas)),
            percentiles=ladder,
            stability=classify_stability(win_prob_a, iqr, self.thresholds),
            confidence=classify_confidence(win_prob_a, iqr, self.thresholds),
            upset=assess_upset(win_prob_a, self.thresholds),
            x_factor=dominant_x_factor(breakdown) if breakdown is not None else None,
            warnings=warnings,
        )
