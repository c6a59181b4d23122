"""Tests for summary statistics, qualitative labels and narrative text."""

import logging

import numpy as np
import pytest

from src.analysis.narrative import confidence_range_text, summary_lines, x_factor_text
from src.analysis.summary import (
    ConfidenceTier,
    StabilityTier,
    SummaryAnalyzer,
    SummaryThresholds,
    assess_upset,
    classify_confidence,
    classify_stability,
    dominant_x_factor,
    percentile_ladder,
)
from src.simulation.categories import Category
from src.simulation.errors import ConfigurationError, InvalidInputError
from src.simulation.monte_carlo import ResultPopulation
from src.simulation.scorer import MatchupScorer, sigmoid

from tests.helpers import flat_baseline, make_profile

THRESHOLDS = SummaryThresholds()


def _make_population(deltas, k=0.65):
    deltas = np.asarray(deltas, dtype=float)
    zeros = np.zeros_like(deltas)
    return ResultPopulation(deltas, zeros, deltas, np.atleast_1d(sigmoid(deltas, k)))


def test_percentiles_interpolate_between_order_statistics():
    ladder = percentile_ladder(np.array([4.0, 1.0, 3.0, 2.0]))

    assert ladder.p25 == pytest.approx(1.75)
    assert ladder.median == pytest.approx(2.5)
    assert ladder.p75 == pytest.approx(3.25)
    assert ladder.p2_5 == pytest.approx(1.075)
    assert ladder.iqr == pytest.approx(1.5)


def test_percentile_ladder_is_ordered():
    rng = np.random.default_rng(12)
    for _ in range(20):
        ladder = percentile_ladder(rng.standard_t(3, size=rng.integers(1, 400)))
        values = ladder.as_tuple()
        assert all(lo <= hi for lo, hi in zip(values, values[1:]))


def test_empty_population_rejected():
    with pytest.raises(InvalidInputError):
        SummaryAnalyzer().summarize(ResultPopulation.empty())


def test_zero_variance_population_degrades_gracefully(caplog):
    population = _make_population([0.25] * 50)

    with caplog.at_level(logging.WARNING):
        summary = SummaryAnalyzer().summarize(population)

    assert set(summary.percentiles.as_tuple()) == {0.25}
    assert summary.iqr == 0.0
    assert summary.std_delta == 0.0
    assert len(summary.warnings) == 1
    assert "same delta" in caplog.text


def test_summary_probabilities_are_complementary():
    rng = np.random.default_rng(1)
    summary = SummaryAnalyzer().summarize(_make_population(rng.normal(0.8, 0.5, size=2000)))

    assert summary.win_prob_b == 1.0 - summary.win_prob_a
    assert summary.favorite == "A"
    assert summary.num_trials == 2000
    assert summary.to_dict()["percentiles"]["p97.5"] == summary.percentiles.p97_5


@pytest.mark.parametrize("win_prob, iqr, expected", [
    (0.52, 1.2, StabilityTier.FRAGILE),
    (0.80, 0.30, StabilityTier.STABLE),
    (0.30, 0.40, StabilityTier.STABLE),
    (0.62, 0.85, StabilityTier.TRAP),
    (0.52, 0.50, StabilityTier.MODERATE),
    (0.60, 0.60, StabilityTier.MODERATE),
])
def test_stability_tiers(win_prob, iqr, expected):
    assert classify_stability(win_prob, iqr, THRESHOLDS) == expected


@pytest.mark.parametrize("win_prob, iqr, expected", [
    (0.90, 1.50, ConfidenceTier.VOLATILE),
    (0.51, 0.50, ConfidenceTier.COIN_FLIP),
    (0.56, 0.50, ConfidenceTier.SLIGHT_EDGE),
    (0.35, 0.50, ConfidenceTier.CLEAR_FAVORITE),
    (0.85, 0.50, ConfidenceTier.STRONG_FAVORITE),
])
def test_confidence_tiers(win_prob, iqr, expected):
    assert classify_confidence(win_prob, iqr, THRESHOLDS) == expected


def test_thresholds_are_configurable():
    strict = SummaryThresholds(volatile_iqr=0.2)

    assert classify_confidence(0.85, 0.5, strict) == ConfidenceTier.VOLATILE
    with pytest.raises(ConfigurationError):
        SummaryThresholds(coin_flip_margin=0.3)


@pytest.mark.parametrize("kwargs", [
    {"fragile_margin": 0.2},
    {"stable_iqr": 0.8},
    {"trap_iqr": 0.95},
    {"chaotic_iqr": 0.6},
])
def test_stability_thresholds_must_be_ordered(kwargs):
    with pytest.raises(ConfigurationError):
        SummaryThresholds(**kwargs)


def test_upset_rate_is_underdogs_own_probability():
    upset = assess_upset(0.8, THRESHOLDS)
    assert upset.underdog == "B"
    assert upset.rate == pytest.approx(0.2)
    assert upset.label == "Plausible"

    upset = assess_upset(0.1, THRESHOLDS)
    assert upset.underdog == "A"
    assert upset.rate == pytest.approx(0.1)
    assert upset.label == "Unlikely"

    even = assess_upset(0.5, THRESHOLDS)
    assert even.underdog is None
    assert even.label == "Toss-up"


def test_x_factor_is_largest_zero_noise_advantage():
    team_a = make_profile("A", off_pressure_allowed_pct=70.0)  # 3 sigma better protection
    team_b = make_profile("B", off_rush_yards_per_game=120.0)
    breakdown = MatchupScorer().matchup_breakdown(team_a, team_b, flat_baseline())

    x_factor = dominant_x_factor(breakdown)

    assert x_factor.category == Category.PRESSURE
    assert x_factor.offense == "A"
    assert x_factor.advantage == pytest.approx(3.0)
    assert x_factor.favors == "A"


def test_x_factor_can_be_a_defensive_edge():
    team_a = make_profile("A", def_rush_yards_allowed_per_game=75.0)  # 2.5 sigma run defense
    breakdown = MatchupScorer().matchup_breakdown(team_a, make_profile("B"), flat_baseline())

    x_factor = dominant_x_factor(breakdown)

    assert x_factor.category == Category.RUSH_VOLUME
    assert x_factor.offense == "B"
    assert x_factor.advantage == pytest.approx(-2.5)
    assert x_factor.favors == "A"
    assert "defense" in x_factor_text(x_factor, "Chiefs", "Bills")
    assert x_factor_text(x_factor, "Chiefs", "Bills").startswith("Rushing volume: Chiefs")


def test_confidence_range_text():
    lopsided = SummaryAnalyzer().summarize(_make_population(np.linspace(0.5, 1.5, 101)))
    close = SummaryAnalyzer().summarize(_make_population(np.linspace(-1.0, 1.0, 101)))
    reversed_ = SummaryAnalyzer().summarize(_make_population(np.linspace(-1.5, -0.5, 101)))

    assert confidence_range_text(lopsided, "KC", "BUF").startswith("KC wins by")
    assert confidence_range_text(close, "KC", "BUF").startswith("Anything from BUF")
    assert confidence_range_text(reversed_, "KC", "BUF").startswith("BUF wins by")


def test_summary_lines_cover_report_rows():
    summary = SummaryAnalyzer().summarize(_make_population(np.linspace(-0.2, 1.2, 400)))
    labels = [label for label, _ in summary_lines(summary, "KC", "BUF")]

    assert labels[0] == "Win Probability"
    assert "Key X-Factor" in labels
