"""Shared builders for synthetic profiles and baselines."""

from src.data.baselines import LeagueBaseline, MetricBaseline
from src.models.team import SCORING_METRICS, LeagueSeason, TeamStatProfile
from src.simulation.categories import CATEGORY_DEFINITIONS

MEAN = 100.0
STD = 10.0


def make_profile(team_id="AAA", offense_z=0.0, defense_z=0.0, season=2024, **overrides) -> TeamStatProfile:
    """
    Profile whose every offensive / defensive category sits ``offense_z`` /
    ``defense_z`` standard deviations on the favorable side of a flat league.
    """
    values = {}
    for definition in CATEGORY_DEFINITIONS.values():
        off_sign = -1.0 if definition.offense_invert else 1.0
        def_sign = -1.0 if definition.defense_invert else 1.0
        values[definition.offense_metric] = MEAN + off_sign * offense_z * STD
        values[definition.defense_metric] = MEAN + def_sign * defense_z * STD
    extras = {k: overrides.pop(k) for k in ("division", "primary_color", "strength_of_schedule") if k in overrides}
    values.update(overrides)
    return TeamStatProfile(team_id=team_id, team_name=f"Team {team_id}", season=season, **values, **extras)


def flat_baseline(season=2024) -> LeagueBaseline:
    """Every scoring metric with mean 100 and standard deviation 10."""
    return LeagueBaseline(
        season=season,
        num_teams=32,
        metrics={m: MetricBaseline(MEAN, STD, m) for m in SCORING_METRICS},
    )


def make_season(season=2024, zs=(-1.0, 0.0, 1.0)) -> LeagueSeason:
    """Season with one team per z offset; offense and defense move together."""
    teams = [
        make_profile(team_id=f"T{i}", offense_z=z, defense_z=z, season=season)
        for i, z in enumerate(zs)
    ]
    return LeagueSeason(season=season, teams=teams)
