"""Data loader for league datasets and matchup situations."""

import json
from typing import Dict, Optional, Tuple

import numpy as np

from ..models.situation import SituationalInputs
from ..models.team import LeagueDataset, SCORING_METRICS
from ..simulation.errors import InvalidInputError

# League-wide (mean, spread) used to generate the sample dataset.
_SAMPLE_METRICS: Dict[str, Tuple[float, float]] = {
    "off_pass_yards_per_game": (220.0, 30.0),
    "off_rush_yards_per_game": (115.0, 20.0),
    "off_passer_rating": (90.0, 8.0),
    "off_wr_yards_per_game": (145.0, 25.0),
    "off_te_yards_per_game": (50.0, 12.0),
    "off_turnovers_per_game": (1.3, 0.35),
    "off_rz_efficiency_pct": (55.0, 7.0),
    "off_explosive_play_rate_pct": (9.0, 1.8),
    "off_pressure_allowed_pct": (34.0, 4.0),
    "def_pass_yards_allowed_per_game": (220.0, 25.0),
    "def_rush_yards_allowed_per_game": (115.0, 18.0),
    "def_passer_rating_allowed": (90.0, 7.0),
    "def_wr_yards_allowed_per_game": (145.0, 22.0),
    "def_te_yards_allowed_per_game": (50.0, 10.0),
    "def_turnovers_forced_per_game": (1.3, 0.35),
    "def_rz_efficiency_allowed_pct": (55.0, 7.0),
    "def_explosive_play_rate_allowed_pct": (9.0, 1.6),
    "def_pressure_generated_pct": (34.0, 4.0),
    "off_points_scored_per_game": (21.5, 4.0),
    "def_points_allowed_per_game": (21.5, 3.5),
    "off_3rd_down_pct": (39.0, 4.0),
    "def_3rd_down_allowed_pct": (39.0, 4.0),
    "strength_of_schedule": (0.0, 3.0),
}

_SAMPLE_TEAMS = [
    ("KC", "Kansas City Chiefs", "AFC West", "#E31837"),
    ("LV", "Las Vegas Raiders", "AFC West", "#A5ACAF"),
    ("DEN", "Denver Broncos", "AFC West", "#FB4F14"),
    ("LAC", "Los Angeles Chargers", "AFC West", "#0080C6"),
    ("BUF", "Buffalo Bills", "AFC East", "#00338D"),
    ("MIA", "Miami Dolphins", "AFC East", "#008E97"),
    ("NYJ", "New York Jets", "AFC East", "#125740"),
    ("NE", "New England Patriots", "AFC East", "#002244"),
]


class DataLoader:
    """Loads league and situation data from JSON files."""

    @staticmethod
    def load_league_from_json(file_path: str) -> LeagueDataset:
        """
        Load a league dataset from a JSON file.

        Args:
            file_path: Path to JSON file (``{"seasons": [...]}``)

        Returns:
            LeagueDataset
        """
        with open(file_path, 'r') as f:
            data = json.load(f)

        if not isinstance(data, dict) or "seasons" not in data:
            raise InvalidInputError(f"{file_path}: expected an object with a 'seasons' list")
        return LeagueDataset.from_dict(data)

    @staticmethod
    def load_situation_from_json(file_path: str) -> SituationalInputs:
        """
        Load a matchup situation snapshot from a JSON file.

        Args:
            file_path: Path to JSON file

        Returns:
            SituationalInputs
        """
        with open(file_path, 'r') as f:
            data = json.load(f)

        return SituationalInputs.from_dict(data)

    @staticmethod
    def save_league_to_json(dataset: LeagueDataset, file_path: str) -> None:
        with open(file_path, 'w') as f:
            json.dump(dataset.to_dict(), f, indent=2)

    @staticmethod
    def save_outcome_to_json(outcome, file_path: str, include_trials: bool = False, distribution=None) -> None:
        """
        Save a simulation outcome to a JSON file.

        Args:
            outcome: SimulationOutcome to save
            file_path: Output file path
            include_trials: Also write every trial delta
            distribution: Optional DistributionExport written under "distribution"
        """
        payload = outcome.to_dict(include_trials=include_trials)
        if distribution is not None:
            payload["distribution"] = distribution.to_dict()
        with open(file_path, 'w') as f:
            json.dump(payload, f, indent=2)

    @staticmethod
    def create_sample_league(
        seasons: Tuple[int, ...] = (2023, 2024),
        seed: int = 7,
    ) -> LeagueDataset:
        """
        Generate a small deterministic league for demos and tests.

        Args:
            seasons: Season years to generate
            seed: Random seed

        Returns:
            LeagueDataset with eight teams per season
        """
        rng = np.random.default_rng(seed)
        blocks = []
        for season in seasons:
            teams = []
            for team_id, name, division, color in _SAMPLE_TEAMS:
                row = {
                    "teamId": team_id,
                    "teamName": name,
                    "division": division,
                    "primaryColor": color,
                }
                for metric, (mean, spread) in _SAMPLE_METRICS.items():
                    value = rng.normal(mean, spread)
                    row[metric] = round(float(max(value, 0.0)) if metric in SCORING_METRICS else float(value), 2)
                teams.append(row)
            blocks.append({"season": season, "teams": teams})
        return LeagueDataset.from_dict({"seasons": blocks})

    @staticmethod
    def create_sample_data(output_path: str, situation_path: Optional[str] = None) -> None:
        """
        Create sample league data (and optionally a sample situation) on disk.

        Args:
            output_path: Path to save the league dataset
            situation_path: Path to save a sample situation snapshot
        """
        DataLoader.save_league_to_json(DataLoader.create_sample_league(), output_path)

        if situation_path:
            situation = {
                "home_field": "teamA",
                "travel": "teamB",
                "rest_a": "standard",
                "rest_b": "short",
                "stakes": "regular",
                "wind": 1,
                "precipitation": 0,
                "injuries_a": {"wr": 1},
                "injuries_b": [
                    {"pos": "ol", "level": 2},
                    {"pos": "secondary", "level": 2, "role": "CB1"},
                ],
            }
            with open(situation_path, 'w') as f:
                json.dump(situation, f, indent=2)
