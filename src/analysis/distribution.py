"""Histogram and kernel density export of a trial population's deltas."""

import logging
from dataclasses import dataclass, field
from typing import List, Tuple

import numpy as np
from scipy.stats import gaussian_kde

from ..simulation.monte_carlo import ResultPopulation

logger = logging.getLogger(__name__)

DEFAULT_BIN_COUNT = 30


@dataclass(frozen=True)
class HistogramBin:
    x0: float
    x1: float
    count: int

    @property
    def midpoint(self) -> float:
        return (self.x0 + self.x1) / 2.0

    def to_dict(self) -> dict:
        return {"x0": self.x0, "x1": self.x1, "count": self.count}


@dataclass
class DistributionExport:
    """Everything an external renderer needs to draw the delta distribution."""

    bins: List[HistogramBin]
    zero_bin_index: int
    grid: np.ndarray
    density: np.ndarray
    density_a: np.ndarray  # trials won by team A (delta > 0)
    density_b: np.ndarray  # trials won by team B (delta < 0)
    warnings: List[str] = field(default_factory=list)

    def scaled(self, density: np.ndarray) -> np.ndarray:
        """Rescale a density curve so its peak matches the tallest bin."""
        peak = float(np.max(density)) if density.size else 0.0
        if peak == 0.0:
            return np.zeros_like(density)
        tallest = max(b.count for b in self.bins)
        return density / peak * tallest

    def to_dict(self) -> dict:
        return {
            "bins": [b.to_dict() for b in self.bins],
            "zero_bin_index": self.zero_bin_index,
            "grid": self.grid.tolist(),
            "density": self.density.tolist(),
            "density_a": self.density_a.tolist(),
            "density_b": self.density_b.tolist(),
            "warnings": list(self.warnings),
        }


def histogram(deltas: np.ndarray, bin_count: int = DEFAULT_BIN_COUNT) -> List[HistogramBin]:
    """
    Equal-width histogram over ``[min, max]``.

    A zero-variance sample yields a single bin holding every trial.
    """
    values = np.asarray(deltas, dtype=float)
    if values.size == 0:
        return []
    lo, hi = float(values.min()), float(values.max())
    if lo == hi:
        return [HistogramBin(lo, hi, int(values.size))]

    counts, edges = np.histogram(values, bins=bin_count, range=(lo, hi))
    return [
        HistogramBin(float(edges[i]), float(edges[i + 1]), int(counts[i]))
        for i in range(len(counts))
    ]


def zero_bin_index(bins: List[HistogramBin]) -> int:
    """Index of the first bin spanning zero, or -1."""
    for i, b in enumerate(bins):
        if b.x0 <= 0 <= b.x1:
            return i
    return -1


def kernel_density(samples: np.ndarray, grid: np.ndarray) -> Tuple[np.ndarray, List[str]]:
    """
    Gaussian KDE with Silverman's bandwidth, evaluated on ``grid``.

    Returns zeros plus a warning when the sample is too small or has no
    spread to estimate a density from.
    """
    samples = np.asarray(samples, dtype=float)
    if samples.size < 2 or np.ptp(samples) == 0:
        msg = f"Density skipped: {samples.size} sample(s) with no spread"
        return np.zeros_like(grid, dtype=float), [msg]
    kde = gaussian_kde(samples, bw_method="silverman")
    return kde(grid), []


def export_distribution(population: ResultPopulation, bin_count: int = DEFAULT_BIN_COUNT) -> DistributionExport:
    """
    Build histogram and density curves for a population.

    Args:
        population: Completed run
        bin_count: Histogram bins

    Returns:
        DistributionExport
    """
    deltas = population.deltas
    bins = histogram(deltas, bin_count)
    grid = np.array([b.midpoint for b in bins], dtype=float)

    warnings = []
    density, w = kernel_density(deltas, grid)
    warnings.extend(w)
    density_a, w = kernel_density(deltas[deltas > 0], grid)
    warnings.extend(f"Team A: {m}" for m in w)
    density_b, w = kernel_density(deltas[deltas < 0], grid)
    warnings.extend(f"Team B: {m}" for m in w)

    for msg in warnings:
        logger.warning(msg)

    return DistributionExport(
        bins=bins,
        zero_bin_index=zero_bin_index(bins),
        grid=grid,
        density=density,
        density_a=density_a,
        density_b=density_b,
        warnings=warnings,
    )
