"""Tests for schedule, injury, cliff and weather adjustments."""

import pytest

from src.adjustments.engine import AdjustmentEngine
from src.adjustments.schedule import schedule_factor
from src.models.situation import (
    InjurySeverity,
    Position,
    SituationalInputs,
    TeamInjuries,
    WeatherLevel,
)

from tests.helpers import make_profile

# Higher is better for the unit that owns the stat.
POSITIVE_STATS = (
    "off_pass_yards_per_game",
    "off_rush_yards_per_game",
    "off_rz_efficiency_pct",
    "off_explosive_play_rate_pct",
    "def_pressure_generated_pct",
)

# Higher is worse for the unit that owns the stat.
NEGATIVE_STATS = (
    "off_pressure_allowed_pct",
    "off_turnovers_per_game",
    "def_pass_yards_allowed_per_game",
    "def_rush_yards_allowed_per_game",
    "def_explosive_play_rate_allowed_pct",
)


def _adjust(injuries=None, **situation):
    engine = AdjustmentEngine()
    profile = make_profile(strength_of_schedule=situation.pop("sos", None))
    context = SituationalInputs(**situation)
    return profile, engine.adjust(profile, injuries or TeamInjuries.healthy(), context)


@pytest.mark.parametrize("position", list(Position))
def test_injury_severity_is_monotonic(position):
    stats = []
    for level in InjurySeverity:
        _, adjusted = _adjust(TeamInjuries.from_levels({position: int(level)}))
        stats.append(adjusted.stats)

    for name in POSITIVE_STATS:
        values = [s.stat(name) for s in stats]
        assert values[0] >= values[1] >= values[2], name
    for name in NEGATIVE_STATS:
        values = [s.stat(name) for s in stats]
        assert values[0] <= values[1] <= values[2], name


def test_healthy_team_is_unchanged():
    profile, adjusted = _adjust()

    assert adjusted.stats == profile
    assert adjusted.cliffs == []
    assert not adjusted.schedule_adjusted


def test_qb_out_scales_passing_game():
    _, adjusted = _adjust(TeamInjuries.from_levels({"qb": 2}))

    assert adjusted.stats.off_pass_yards_per_game == pytest.approx(75.0)
    assert adjusted.stats.off_pressure_allowed_pct > 100.0
    # Rushing untouched by a QB injury.
    assert adjusted.stats.off_rush_yards_per_game == pytest.approx(100.0)


def test_offensive_line_collapse_is_strictly_worse_than_one_starter_out():
    _, one_out = _adjust(TeamInjuries.from_levels({"ol": 2}))
    _, three_out = _adjust(TeamInjuries.from_levels({"ol": [2, 2, 2]}))

    assert "offensive_line_collapse" in three_out.cliffs
    assert "offensive_line_collapse" not in one_out.cliffs
    assert three_out.stats.off_pass_yards_per_game < one_out.stats.off_pass_yards_per_game
    assert three_out.stats.off_pressure_allowed_pct > one_out.stats.off_pressure_allowed_pct


def test_two_linemen_out_does_not_trigger_cliff():
    _, adjusted = _adjust(TeamInjuries.from_levels({"ol": [2, 2, 1]}))

    assert adjusted.cliffs == []


def test_secondary_collapse_requires_top_corner_plus_partner():
    corners = TeamInjuries.from_entries([
        {"pos": "secondary", "level": 2, "role": "CB1"},
        {"pos": "secondary", "level": 2, "role": "CB2"},
    ])
    corner_and_safety = TeamInjuries.from_entries([
        {"pos": "secondary", "level": 2, "role": "CB1"},
        {"pos": "secondary", "level": 2, "role": "S1"},
    ])
    secondary_only = TeamInjuries.from_entries([
        {"pos": "secondary", "level": 2, "role": "CB2"},
        {"pos": "secondary", "level": 2, "role": "S1"},
    ])

    assert _adjust(corners)[1].cliffs == ["secondary_collapse"]
    assert _adjust(corner_and_safety)[1].cliffs == ["secondary_collapse"]
    assert _adjust(secondary_only)[1].cliffs == []


def test_questionable_corners_do_not_collapse():
    injuries = TeamInjuries.from_entries([
        {"pos": "secondary", "level": 1, "role": "CB1"},
        {"pos": "secondary", "level": 2, "role": "CB2"},
    ])

    assert _adjust(injuries)[1].cliffs == []


def test_high_wind_cuts_passing_and_explosives():
    _, adjusted = _adjust(wind=WeatherLevel.HIGH)

    assert adjusted.stats.off_pass_yards_per_game == pytest.approx(85.0)
    assert adjusted.stats.off_explosive_play_rate_pct == pytest.approx(75.0)
    assert adjusted.stats.off_rush_yards_per_game == pytest.approx(100.0)


def test_wind_and_rain_compound():
    _, adjusted = _adjust(wind=WeatherLevel.MEDIUM, precipitation=WeatherLevel.HIGH)

    assert adjusted.stats.off_pass_yards_per_game == pytest.approx(100.0 * 0.95 * 0.90)
    assert adjusted.stats.off_turnovers_per_game > 100.0


def test_schedule_factor_is_clamped():
    assert schedule_factor(5.0) == pytest.approx(0.05)
    assert schedule_factor(40.0) == pytest.approx(0.15)
    assert schedule_factor(-40.0) == pytest.approx(-0.15)


def test_strength_of_schedule_only_applies_when_enabled():
    _, off = _adjust(sos=5.0)
    _, on = _adjust(sos=5.0, use_strength_of_schedule=True)

    assert off.stats.off_pass_yards_per_game == pytest.approx(100.0)
    assert on.schedule_adjusted
    assert on.stats.off_pass_yards_per_game == pytest.approx(105.0)
    assert on.stats.def_pass_yards_allowed_per_game == pytest.approx(
        off.stats.def_pass_yards_allowed_per_game * 0.95
    )


def test_schedule_runs_before_injuries():
    _, adjusted = _adjust(TeamInjuries.from_levels({"qb": 2}), sos=5.0, use_strength_of_schedule=True)

    assert adjusted.stats.off_pass_yards_per_game == pytest.approx(100.0 * 1.05 * 0.75)


def test_source_profile_is_not_mutated():
    profile, adjusted = _adjust(TeamInjuries.from_levels({"qb": 2, "ol": [2, 2, 2]}), wind=WeatherLevel.HIGH)

    assert adjusted.source is profile
    assert profile.off_pass_yards_per_game == pytest.approx(100.0)
    assert adjusted.stats.off_pass_yards_per_game < profile.off_pass_yards_per_game


def test_adjust_matchup_uses_each_teams_injuries():
    engine = AdjustmentEngine()
    context = SituationalInputs(injuries_a=TeamInjuries.from_levels({"qb": 2}))

    adj_a, adj_b = engine.adjust_matchup(make_profile("A"), make_profile("B"), context)

    assert adj_a.stats.off_pass_yards_per_game < 100.0
    assert adj_b.stats.off_pass_yards_per_game == pytest.approx(100.0)
