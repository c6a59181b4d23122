"""
Matchup simulator: league dataset + two teams + situation in, report out.

State lives on the MatchupSimulator instance (baseline cache, runner) and
in the request/outcome values passed through it; nothing is kept at module
level.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Tuple

from ..adjustments.engine import AdjustedStatProfile, AdjustmentConfig, AdjustmentEngine
from ..analysis.summary import SimulationSummary, SummaryAnalyzer, SummaryThresholds
from ..data.baselines import BaselineCache, LeagueBaseline
from ..models.situation import SituationalInputs
from ..models.team import LeagueDataset
from .context import ContextConfig, ContextTerms, compute_context_terms
from .errors import ConfigurationError, InvalidInputError
from .monte_carlo import (
    VOLATILITY_PRESETS,
    MonteCarloRunner,
    ResultPopulation,
    SimulationConfig,
    TrialResult,
)
from .scorer import DEFAULT_SIGMOID_K, MatchupBreakdown, MatchupScorer, ScoringConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationRequest:
    """One run request.  ``noise_level`` overrides the volatility preset."""

    team_a_id: Optional[str]
    team_b_id: Optional[str]
    season: Optional[int]
    situation: SituationalInputs = field(default_factory=SituationalInputs)
    iterations: int = 10000
    volatility: str = "realistic"
    noise_level: Optional[float] = None
    sigmoid_k: float = DEFAULT_SIGMOID_K
    random_seed: Optional[int] = None

    def resolve_noise(self) -> float:
        if self.noise_level is not None:
            return self.noise_level
        try:
            return VOLATILITY_PRESETS[self.volatility.lower()]
        except KeyError:
            raise ConfigurationError(
                f"Unknown volatility '{self.volatility}'; expected one of {sorted(VOLATILITY_PRESETS)}"
            ) from None

    def validate(self) -> None:
        """Reject incomplete requests before any trial runs."""
        if not self.team_a_id or not self.team_b_id:
            raise InvalidInputError("Both teams must be selected")
        if self.season is None:
            raise InvalidInputError("No season selected")
        if isinstance(self.iterations, bool) or not isinstance(self.iterations, int) or self.iterations <= 0:
            raise InvalidInputError(f"Iteration count must be a positive integer, got {self.iterations}")


@dataclass(frozen=True)
class PreparedMatchup:
    """Trial-invariant inputs shared by every trial of a run."""

    team_a: AdjustedStatProfile
    team_b: AdjustedStatProfile
    baselines: LeagueBaseline
    context: ContextTerms
    breakdown: MatchupBreakdown


@dataclass
class SimulationOutcome:
    """Everything one run produced, including the raw population."""

    request: SimulationRequest
    matchup: PreparedMatchup
    baseline: TrialResult
    population: ResultPopulation
    summary: SimulationSummary

    def to_dict(self, include_trials: bool = False) -> dict:
        result = {
            "season": self.request.season,
            "team_a": self.matchup.team_a.to_dict(),
            "team_b": self.matchup.team_b.to_dict(),
            "situation": self.request.situation.to_dict(),
            "context": self.matchup.context.to_dict(),
            "noise_level": self.request.resolve_noise(),
            "sigmoid_k": self.request.sigmoid_k,
            "random_seed": self.request.random_seed,
            "baseline": self.baseline.to_dict(),
            "breakdown": self.matchup.breakdown.to_dict(),
            "summary": self.summary.to_dict(),
        }
        if include_trials:
            result["deltas"] = self.population.deltas.tolist()
        return result


class MatchupSimulator:
    """
    Runs the full pipeline for head-to-head matchups.

    Example:
        >>> simulator = MatchupSimulator(dataset)
        >>> request = SimulationRequest("KC", "BUF", season=2024, random_seed=7)
        >>> outcome = simulator.simulate(request)
        >>> outcome.summary.win_prob_a
    """

    def __init__(
        self,
        dataset: LeagueDataset,
        scoring: ScoringConfig = None,
        context_config: ContextConfig = None,
        adjustment_config: AdjustmentConfig = None,
        thresholds: SummaryThresholds = None,
        parallel_workers: Optional[int] = 1,
        batch_size: int = 2500,
    ):
        self.dataset = dataset
        self.scorer = MatchupScorer(scoring)
        self.context_config = context_config or ContextConfig()
        self.adjustments = AdjustmentEngine(adjustment_config)
        self.analyzer = SummaryAnalyzer(thresholds)
        self.baseline_cache = BaselineCache()
        self.runner = MonteCarloRunner(
            self.scorer,
            SimulationConfig(parallel_workers=parallel_workers, batch_size=batch_size),
        )

    def prepare(self, request: SimulationRequest) -> PreparedMatchup:
        """Validate the request and resolve every trial-invariant input."""
        request.validate()
        season = self.dataset.get_season(request.season)
        profile_a = season.get_team(request.team_a_id)
        profile_b = season.get_team(request.team_b_id)

        baselines = self.baseline_cache.get(season)
        baselines.validate()

        team_a, team_b = self.adjustments.adjust_matchup(profile_a, profile_b, request.situation)
        context = compute_context_terms(request.situation, self.context_config, profile_a, profile_b)
        breakdown = self.scorer.matchup_breakdown(team_a, team_b, baselines)
        return PreparedMatchup(team_a, team_b, baselines, context, breakdown)

    def baseline(self, request: SimulationRequest) -> Tuple[TrialResult, PreparedMatchup]:
        """Deterministic, zero-noise single trial for display."""
        matchup = self.prepare(request)
        trial = self.runner.run_baseline(
            matchup.team_a, matchup.team_b, matchup.baselines, matchup.context, request.sigmoid_k,
        )
        return trial, matchup

    def simulate(self, request: SimulationRequest) -> SimulationOutcome:
        """
        Run a full Monte Carlo simulation.

        Args:
            request: Teams, season, situation and run parameters

        Returns:
            SimulationOutcome with summary and raw population
        """
        matchup = self.prepare(request)
        baseline = self.runner.run_baseline(
            matchup.team_a, matchup.team_b, matchup.baselines, matchup.context, request.sigmoid_k,
        )

        config = SimulationConfig(
            num_simulations=request.iterations,
            noise_std=request.resolve_noise(),
            sigmoid_k=request.sigmoid_k,
            random_seed=request.random_seed,
            parallel_workers=self.runner.config.parallel_workers,
            batch_size=self.runner.config.batch_size,
        )
        population = self.runner.run(
            matchup.team_a, matchup.team_b, matchup.baselines, matchup.context, config=config,
        )
        summary = self.analyzer.summarize(population, matchup.breakdown)

        logger.info(
            "%s vs %s (%s): P(A)=%.3f, median delta=%.3f, %s",
            request.team_a_id, request.team_b_id, request.season,
            summary.win_prob_a, summary.median_delta, summary.stability.value,
        )
        return SimulationOutcome(
            request=request,
            matchup=matchup,
            baseline=baseline,
            population=population,
            summary=summary,
        )
