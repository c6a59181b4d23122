"""
Monte Carlo simulation engine for a single matchup.

Runs thousands of noisy trials of team A vs team B, each scored in both
orientations, and collects the per-trial deltas and win probabilities
into a ResultPopulation for the summary layer.
"""

import logging
import math
import multiprocessing
import threading
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ..adjustments.engine import AdjustedStatProfile
from ..data.baselines import LeagueBaseline
from .context import ContextTerms
from .errors import ConcurrentRunError, ConfigurationError, InvalidInputError
from .scorer import DEFAULT_SIGMOID_K, MatchupScorer, sigmoid

logger = logging.getLogger(__name__)

# Per-category noise std, in z units.
VOLATILITY_PRESETS: Dict[str, float] = {
    "stable": 0.15,
    "realistic": 0.35,
    "chaos": 0.50,
}


@dataclass
class SimulationConfig:
    """Configuration for Monte Carlo simulation."""

    num_simulations: int = 10000
    noise_std: float = VOLATILITY_PRESETS["realistic"]
    sigmoid_k: float = DEFAULT_SIGMOID_K
    random_seed: Optional[int] = None
    parallel_workers: Optional[int] = 1  # None = use all CPUs but one
    batch_size: int = 2500  # Trials per batch

    def __post_init__(self):
        if self.parallel_workers is None:
            self.parallel_workers = max(1, multiprocessing.cpu_count() - 1)
        if self.noise_std < 0:
            raise ConfigurationError(f"noise_std must be non-negative, got {self.noise_std}")
        if self.sigmoid_k <= 0:
            raise ConfigurationError(f"sigmoid_k must be positive, got {self.sigmoid_k}")
        if self.batch_size <= 0:
            raise ConfigurationError(f"batch_size must be positive, got {self.batch_size}")

    @classmethod
    def from_volatility(cls, volatility: str, **kwargs) -> "SimulationConfig":
        """Build a config from a named volatility preset."""
        try:
            noise_std = VOLATILITY_PRESETS[volatility.lower()]
        except KeyError:
            raise ConfigurationError(
                f"Unknown volatility '{volatility}'; expected one of {sorted(VOLATILITY_PRESETS)}"
            ) from None
        return cls(noise_std=noise_std, **kwargs)


@dataclass(frozen=True)
class TrialResult:
    """One simulated trial, from team A's perspective."""

    strength_a: float
    strength_b: float
    delta: float
    team_a_prob: float

    @property
    def team_b_prob(self) -> float:
        return 1.0 - self.team_a_prob

    @property
    def winner(self) -> Optional[str]:
        if self.delta > 0:
            return "A"
        if self.delta < 0:
            return "B"
        return None

    def to_dict(self) -> dict:
        return {
            "strength_a": self.strength_a,
            "strength_b": self.strength_b,
            "delta": self.delta,
            "team_a_prob": self.team_a_prob,
            "team_b_prob": self.team_b_prob,
        }


class ResultPopulation:
    """
    Append-only collection of trial results for one run.

    Backed by read-only numpy arrays; index order is trial order.
    """

    def __init__(
        self,
        strength_a: np.ndarray,
        strength_b: np.ndarray,
        deltas: np.ndarray,
        team_a_probs: np.ndarray,
    ):
        arrays = [np.asarray(a, dtype=float) for a in (strength_a, strength_b, deltas, team_a_probs)]
        if len({len(a) for a in arrays}) != 1:
            raise ValueError("Population arrays must have equal length")
        for a in arrays:
            a.setflags(write=False)
        self.strength_a, self.strength_b, self.deltas, self.team_a_probs = arrays

    @classmethod
    def empty(cls) -> "ResultPopulation":
        return cls(np.empty(0), np.empty(0), np.empty(0), np.empty(0))

    @classmethod
    def merge(cls, parts: Sequence["ResultPopulation"]) -> "ResultPopulation":
        """Concatenate populations in the given order."""
        if not parts:
            return cls.empty()
        return cls(
            np.concatenate([p.strength_a for p in parts]),
            np.concatenate([p.strength_b for p in parts]),
            np.concatenate([p.deltas for p in parts]),
            np.concatenate([p.team_a_probs for p in parts]),
        )

    def __len__(self) -> int:
        return len(self.deltas)

    def __getitem__(self, idx: int) -> TrialResult:
        return TrialResult(
            strength_a=float(self.strength_a[idx]),
            strength_b=float(self.strength_b[idx]),
            delta=float(self.deltas[idx]),
            team_a_prob=float(self.team_a_probs[idx]),
        )

    def __iter__(self) -> Iterator[TrialResult]:
        for i in range(len(self)):
            yield self[i]

    @property
    def team_b_probs(self) -> np.ndarray:
        return 1.0 - self.team_a_probs

    @property
    def win_probability_a(self) -> float:
        if len(self) == 0:
            raise InvalidInputError("Population is empty")
        return float(np.mean(self.team_a_probs))

    @property
    def win_probability_b(self) -> float:
        return 1.0 - self.win_probability_a

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({
            "strength_a": self.strength_a,
            "strength_b": self.strength_b,
            "delta": self.deltas,
            "team_a_prob": self.team_a_probs,
            "team_b_prob": self.team_b_probs,
        })


class RunState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETE = "complete"
    FAILED = "failed"


def _run_batch(
    batch_size: int,
    seed: np.random.SeedSequence,
    scorer: MatchupScorer,
    team_a: AdjustedStatProfile,
    team_b: AdjustedStatProfile,
    baselines: LeagueBaseline,
    context: ContextTerms,
    noise_std: float,
    sigmoid_k: float,
) -> ResultPopulation:
    """
    Run a batch of trials in a subprocess (or inline).

    Each trial scores A's offense vs B's defense and B's offense vs A's
    defense with fresh noise, folds in the context terms and maps the
    delta to team A's win probability.

    Args:
        batch_size: Number of trials to run
        seed: Seed sequence for this batch
        scorer: Matchup scorer
        team_a: Adjusted team A profile
        team_b: Adjusted team B profile
        baselines: League baselines for normalization
        context: Resolved situational terms
        noise_std: Per-category noise std
        sigmoid_k: Sigmoid steepness

    Returns:
        ResultPopulation for the batch
    """
    rng = np.random.default_rng(seed)
    strength_a = scorer.score_trials(team_a, team_b, baselines, noise_std, rng, batch_size)
    strength_b = scorer.score_trials(team_b, team_a, baselines, noise_std, rng, batch_size)
    deltas = context.apply(strength_a - strength_b)
    probs = sigmoid(deltas, sigmoid_k)
    return ResultPopulation(strength_a, strength_b, deltas, np.atleast_1d(probs))


class MonteCarloRunner:
    """
    Monte Carlo runner for one matchup.

    Features:
    - Parallel batches via ProcessPoolExecutor, sequential fallback
    - Reproducible runs from a single seed, regardless of worker count
    - Rejects overlapping runs on the same runner instance
    """

    def __init__(self, scorer: MatchupScorer = None, config: SimulationConfig = None):
        """
        Initialize the runner.

        Args:
            scorer: Matchup scorer (default weights when omitted)
            config: Default simulation configuration
        """
        self.scorer = scorer or MatchupScorer()
        self.config = config or SimulationConfig()
        self.state = RunState.IDLE
        self.last_error: Optional[BaseException] = None
        self._state_lock = threading.Lock()

    def _begin(self) -> None:
        with self._state_lock:
            if self.state == RunState.RUNNING:
                raise ConcurrentRunError("A simulation is already running on this runner")
            self.state = RunState.RUNNING
            self.last_error = None

    def _finish(self, state: RunState, error: Optional[BaseException] = None) -> None:
        with self._state_lock:
            self.state = state
            self.last_error = error

    def run(
        self,
        team_a: AdjustedStatProfile,
        team_b: AdjustedStatProfile,
        baselines: LeagueBaseline,
        context: Optional[ContextTerms] = None,
        iterations: Optional[int] = None,
        config: Optional[SimulationConfig] = None,
    ) -> ResultPopulation:
        """
        Run the simulation.

        Args:
            team_a: Adjusted team A profile
            team_b: Adjusted team B profile
            baselines: League baselines
            context: Situational terms (neutral when omitted)
            iterations: Trial count, overrides ``config.num_simulations``
            config: Per-run configuration, defaults to the runner's

        Returns:
            ResultPopulation with exactly ``iterations`` trials
        """
        config = config or self.config
        if iterations is not None:
            config = replace(config, num_simulations=iterations)
        n = config.num_simulations
        if isinstance(n, bool) or not isinstance(n, (int, np.integer)) or n <= 0:
            raise InvalidInputError(f"Iteration count must be a positive integer, got {n}")
        context = context or ContextTerms()

        self._begin()
        try:
            population = self._execute(team_a, team_b, baselines, context, config)
        except BaseException as exc:
            self._finish(RunState.FAILED, exc)
            raise
        self._finish(RunState.COMPLETE)
        return population

    def _batches(self, config: SimulationConfig) -> List[Tuple[int, np.random.SeedSequence]]:
        """Split the run into batches, each with its own spawned seed."""
        n_batches = math.ceil(config.num_simulations / config.batch_size)
        seeds = np.random.SeedSequence(config.random_seed).spawn(n_batches)
        batches = []
        remaining = config.num_simulations
        for seed in seeds:
            bs = min(config.batch_size, remaining)
            batches.append((bs, seed))
            remaining -= bs
        return batches

    def _execute(
        self,
        team_a: AdjustedStatProfile,
        team_b: AdjustedStatProfile,
        baselines: LeagueBaseline,
        context: ContextTerms,
        config: SimulationConfig,
    ) -> ResultPopulation:
        batches = self._batches(config)
        args = (self.scorer, team_a, team_b, baselines, context, config.noise_std, config.sigmoid_k)
        n_workers = config.parallel_workers

        logger.info(
            "Simulating %s vs %s: %d trials in %d batches (noise=%.2f, k=%.2f, workers=%d)",
            team_a.team_id, team_b.team_id, config.num_simulations, len(batches),
            config.noise_std, config.sigmoid_k, n_workers,
        )
        start = time.perf_counter()

        parts: List[Optional[ResultPopulation]] = [None] * len(batches)
        if n_workers > 1 and len(batches) > 1:
            try:
                with ProcessPoolExecutor(max_workers=n_workers) as executor:
                    futures = {
                        executor.submit(_run_batch, bs, seed, *args): idx
                        for idx, (bs, seed) in enumerate(batches)
                    }
                    for future in as_completed(futures):
                        parts[futures[future]] = future.result()
            except (RuntimeError, OSError) as exc:
                # Fallback to sequential if multiprocessing fails
                logger.warning("Parallel simulation failed (%s); running sequentially", exc)
                parts = [_run_batch(bs, seed, *args) for bs, seed in batches]
        else:
            parts = [_run_batch(bs, seed, *args) for bs, seed in batches]

        population = ResultPopulation.merge(parts)
        logger.info(
            "Simulation finished in %.3fs: P(%s)=%.4f",
            time.perf_counter() - start, team_a.team_id, population.win_probability_a,
        )
        return population

    def run_baseline(
        self,
        team_a: AdjustedStatProfile,
        team_b: AdjustedStatProfile,
        baselines: LeagueBaseline,
        context: Optional[ContextTerms] = None,
        sigmoid_k: Optional[float] = None,
    ) -> TrialResult:
        """Single deterministic trial with no noise."""
        context = context or ContextTerms()
        k = sigmoid_k if sigmoid_k is not None else self.config.sigmoid_k
        strength_a = self.scorer.score_trial(team_a, team_b, baselines, noise_level=0.0)
        strength_b = self.scorer.score_trial(team_b, team_a, baselines, noise_level=0.0)
        delta = float(context.apply(strength_a - strength_b))
        return TrialResult(
            strength_a=strength_a,
            strength_b=strength_b,
            delta=delta,
            team_a_prob=sigmoid(delta, k),
        )
