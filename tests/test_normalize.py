"""Tests for league-relative z-scores and baseline computation."""

import pytest

from src.data.baselines import BaselineCache, LeagueBaseline, MetricBaseline, compute_league_baselines
from src.data.normalize import z_score
from src.models.team import LeagueSeason
from src.simulation.errors import ConfigurationError

from tests.helpers import make_profile, make_season


def test_z_score_of_mean_is_zero_and_one_std_is_one():
    baseline = MetricBaseline(mean=220.0, std_dev=30.0)

    assert z_score(220.0, baseline) == 0.0
    assert z_score(250.0, baseline) == pytest.approx(1.0)


@pytest.mark.parametrize("value", [-5.0, 0.0, 117.3, 250.0, 1e6])
def test_invert_is_exact_negation(value):
    baseline = MetricBaseline(mean=117.0, std_dev=13.0)

    assert z_score(value, baseline, invert=True) == -z_score(value, baseline, invert=False)


def test_zero_std_raises_configuration_error():
    baseline = MetricBaseline(mean=10.0, std_dev=0.0, metric="off_passer_rating")

    with pytest.raises(ConfigurationError, match="off_passer_rating"):
        z_score(10.0, baseline)


def test_baselines_use_population_std():
    season = make_season(zs=(-1.0, 1.0))
    baselines = compute_league_baselines(season)

    # Two teams at 90 and 110: population std is exactly 10.
    rating = baselines.get("off_passer_rating")
    assert rating.mean == pytest.approx(100.0)
    assert rating.std_dev == pytest.approx(10.0)
    assert baselines.num_teams == 2


def test_optional_metric_only_kept_when_every_team_reports_it():
    teams = [
        make_profile("A", off_points_scored_per_game=20.0, def_points_allowed_per_game=18.0),
        make_profile("B", off_points_scored_per_game=24.0),
    ]
    baselines = compute_league_baselines(LeagueSeason(season=2024, teams=teams))

    assert "off_points_scored_per_game" in baselines.metrics
    assert "def_points_allowed_per_game" not in baselines.metrics


def test_single_team_season_fails_validation():
    baselines = compute_league_baselines(make_season(zs=(0.5,)))

    with pytest.raises(ConfigurationError):
        baselines.validate()


def test_constant_metric_fails_validation():
    # Identical teams: every metric has zero spread.
    baselines = compute_league_baselines(make_season(zs=(0.0, 0.0, 0.0)))

    with pytest.raises(ConfigurationError, match="Zero standard deviation"):
        baselines.validate()


def test_missing_metric_lookup_raises():
    baselines = LeagueBaseline(season=2024, num_teams=2)

    with pytest.raises(ConfigurationError):
        baselines.get("off_pass_yards_per_game")


def test_cache_recomputes_on_season_change():
    cache = BaselineCache()
    first = make_season(season=2023, zs=(-1.0, 1.0))
    second = make_season(season=2024, zs=(-2.0, 2.0))

    b1 = cache.get(first)
    assert cache.get(first) is b1
    assert cache.season == 2023

    b2 = cache.get(second)
    assert b2 is not b1
    assert b2.get("off_passer_rating").std_dev == pytest.approx(20.0)

    cache.invalidate()
    assert cache.season is None
