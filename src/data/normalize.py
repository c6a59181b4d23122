"""League-relative normalization of raw team metrics."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..simulation.errors import ConfigurationError

if TYPE_CHECKING:
    from .baselines import MetricBaseline


def z_score(value: float, baseline: "MetricBaseline", invert: bool = False) -> float:
    """Convert a raw metric into standard deviations from the league mean.

    ``invert`` flips the sign for metrics where a lower raw value is better
    (yards allowed, turnovers committed, pressure allowed), so that a positive
    result always reads as favorable.

    Examples::

        >>> z_score(250.0, MetricBaseline(mean=220.0, std_dev=30.0))
        1.0
        >>> z_score(250.0, MetricBaseline(mean=220.0, std_dev=30.0), invert=True)
        -1.0

    Raises:
        ConfigurationError: if the baseline standard deviation is zero.
    """
    if baseline.std_dev == 0:
        raise ConfigurationError(
            f"Cannot normalize '{baseline.metric}': league standard deviation is zero"
        )
    z = (value - baseline.mean) / baseline.std_dev
    return -z if invert else z
