"""End-to-end tests: dataset loading, the simulator facade and the CLI."""

import json

import pytest

from src.data.loader import DataLoader
from src.main import main
from src.models.situation import Side, SituationalInputs, TeamInjuries
from src.simulation.engine import MatchupSimulator, SimulationRequest
from src.simulation.errors import ConfigurationError, InvalidInputError
from src.simulation.monte_carlo import TrialResult


@pytest.fixture
def league():
    return DataLoader.create_sample_league()


@pytest.fixture
def simulator(league):
    return MatchupSimulator(league)


def _request(**kwargs):
    params = dict(team_a_id="KC", team_b_id="BUF", season=2024, iterations=2000, random_seed=7)
    params.update(kwargs)
    return SimulationRequest(**params)


def test_sample_league_shape(league):
    assert sorted(league.seasons) == [2023, 2024]
    assert league.latest_season == 2024
    assert len(league.get_season(2024).teams) == 8
    assert league.get_season(2024).get_team("KC").division == "AFC West"


def test_sample_league_is_deterministic():
    first = DataLoader.create_sample_league()
    second = DataLoader.create_sample_league()

    assert first.to_dict() == second.to_dict()


def test_simulate_produces_full_outcome(simulator):
    outcome = simulator.simulate(_request())

    assert len(outcome.population) == 2000
    assert outcome.summary.num_trials == 2000
    assert outcome.summary.win_prob_a + outcome.summary.win_prob_b == pytest.approx(1.0)
    assert outcome.summary.x_factor is not None
    assert isinstance(outcome.baseline, TrialResult)
    assert simulator.baseline_cache.season == 2024
    json.dumps(outcome.to_dict(include_trials=True))


def test_seeded_simulation_is_reproducible(league):
    first = MatchupSimulator(league).simulate(_request())
    second = MatchupSimulator(league).simulate(_request())

    assert first.summary.win_prob_a == second.summary.win_prob_a
    assert first.summary.percentiles == second.summary.percentiles


def test_team_against_itself_without_noise_is_even(simulator):
    outcome = simulator.simulate(_request(team_b_id="KC", noise_level=0.0, iterations=1000))

    assert outcome.summary.win_prob_a == 0.5
    assert outcome.summary.median_delta == 0.0
    assert outcome.summary.warnings


def test_home_field_helps_team_a(simulator):
    neutral = simulator.simulate(_request())
    home = simulator.simulate(_request(situation=SituationalInputs(home_field=Side.TEAM_A)))

    assert home.summary.win_prob_a > neutral.summary.win_prob_a


def test_injuries_hurt_the_injured_team(simulator):
    healthy = simulator.simulate(_request())
    hurt = simulator.simulate(_request(
        situation=SituationalInputs(injuries_a=TeamInjuries.from_levels({"qb": 2, "ol": [2, 2, 2]})),
    ))

    assert hurt.summary.win_prob_a < healthy.summary.win_prob_a
    assert "offensive_line_collapse" in hurt.matchup.team_a.cliffs


def test_division_game_inferred_from_sample_divisions(simulator):
    trial, matchup = simulator.baseline(_request(team_b_id="LV"))

    assert matchup.context.division_game
    assert trial == simulator.baseline(_request(team_b_id="LV"))[0]


@pytest.mark.parametrize("kwargs", [
    {"team_a_id": None},
    {"team_b_id": ""},
    {"season": None},
    {"season": 1999},
    {"team_b_id": "XXX"},
    {"iterations": 0},
])
def test_invalid_requests_rejected(simulator, kwargs):
    with pytest.raises(InvalidInputError):
        simulator.simulate(_request(**kwargs))


def test_unknown_volatility_rejected(simulator):
    with pytest.raises(ConfigurationError):
        simulator.simulate(_request(volatility="extreme"))


def test_volatility_widens_distribution(simulator):
    stable = simulator.simulate(_request(volatility="stable"))
    chaos = simulator.simulate(_request(volatility="chaos"))

    assert chaos.summary.iqr > stable.summary.iqr


def test_loader_round_trip(tmp_path):
    league_path = tmp_path / "league.json"
    situation_path = tmp_path / "situation.json"

    DataLoader.create_sample_data(str(league_path), str(situation_path))
    dataset = DataLoader.load_league_from_json(str(league_path))
    situation = DataLoader.load_situation_from_json(str(situation_path))

    assert dataset.to_dict() == DataLoader.create_sample_league().to_dict()
    assert situation.home_field == Side.TEAM_A
    assert situation.injuries_b.roles_out() == {"CB1"}


def test_loader_rejects_rows_missing_scoring_stats(tmp_path):
    league = DataLoader.create_sample_league().to_dict()
    del league["seasons"][0]["teams"][0]["off_passer_rating"]
    path = tmp_path / "bad.json"
    path.write_text(json.dumps(league))

    with pytest.raises(InvalidInputError, match="off_passer_rating"):
        DataLoader.load_league_from_json(str(path))


def test_loader_rejects_non_league_payload(tmp_path):
    path = tmp_path / "teams.json"
    path.write_text(json.dumps([{"teamId": "KC"}]))

    with pytest.raises(InvalidInputError):
        DataLoader.load_league_from_json(str(path))


def test_cli_sample_simulate_and_baseline(tmp_path, capsys):
    league_path = str(tmp_path / "league.json")
    situation_path = str(tmp_path / "situation.json")
    output_path = tmp_path / "result.json"

    assert main(["sample", "--output", league_path, "--situation-output", situation_path]) == 0
    assert main([
        "simulate", "KC", "BUF",
        "--input", league_path,
        "--situation", situation_path,
        "-n", "500",
        "--seed", "1",
        "--breakdown",
        "--output", str(output_path),
        "--include-trials",
    ]) == 0

    result = json.loads(output_path.read_text())
    assert result["summary"]["num_trials"] == 500
    assert len(result["deltas"]) == 500
    assert sum(b["count"] for b in result["distribution"]["bins"]) == 500
    assert len(result["distribution"]["density"]) == len(result["distribution"]["grid"])
    assert result["season"] == 2024

    assert main(["baseline", "KC", "BUF", "--input", league_path]) == 0
    out = capsys.readouterr().out
    assert "Win probability" in out
    assert "Delta:" in out


def test_cli_reports_errors(tmp_path, capsys):
    league_path = str(tmp_path / "league.json")
    DataLoader.create_sample_data(league_path)

    assert main(["simulate", "KC", "NOPE", "--input", league_path, "-n", "10"]) == 1
    assert "Error" in capsys.readouterr().out
