"""Team stat profile and league dataset models."""

from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

from ..simulation.errors import InvalidInputError


# Metrics read by the matchup scorer.  A team row without any of these is
# rejected when the profile is built.
SCORING_METRICS = (
    "off_pass_yards_per_game",
    "off_rush_yards_per_game",
    "off_passer_rating",
    "off_wr_yards_per_game",
    "off_te_yards_per_game",
    "off_turnovers_per_game",
    "off_rz_efficiency_pct",
    "off_explosive_play_rate_pct",
    "off_pressure_allowed_pct",
    "def_pass_yards_allowed_per_game",
    "def_rush_yards_allowed_per_game",
    "def_passer_rating_allowed",
    "def_wr_yards_allowed_per_game",
    "def_te_yards_allowed_per_game",
    "def_turnovers_forced_per_game",
    "def_rz_efficiency_allowed_pct",
    "def_explosive_play_rate_allowed_pct",
    "def_pressure_generated_pct",
)

# Display-only metrics; may be missing from a dataset row.
OPTIONAL_METRICS = (
    "off_points_scored_per_game",
    "off_3rd_down_pct",
    "off_4th_down_pct",
    "off_fg_accuracy_pct",
    "off_avg_starting_field_pos",
    "off_penalties_per_game",
    "off_penalty_yards_per_penalty",
    "def_points_allowed_per_game",
    "def_3rd_down_allowed_pct",
    "def_4th_down_allowed_pct",
    "def_avg_starting_field_pos_allowed",
    "def_penalties_per_game",
    "def_penalty_yards_per_penalty",
    "strength_of_schedule",
)


@dataclass(frozen=True)
class TeamStatProfile:
    """
    A team's per-game statistical profile for one season.

    Profiles are immutable; adjustments always produce a new instance via
    ``with_stats``.  Identity is ``(team_id, season)``.
    """

    team_id: str
    team_name: str
    season: int

    # Offense
    off_pass_yards_per_game: float
    off_rush_yards_per_game: float
    off_passer_rating: float
    off_wr_yards_per_game: float
    off_te_yards_per_game: float
    off_turnovers_per_game: float
    off_rz_efficiency_pct: float
    off_explosive_play_rate_pct: float
    off_pressure_allowed_pct: float

    # Defense
    def_pass_yards_allowed_per_game: float
    def_rush_yards_allowed_per_game: float
    def_passer_rating_allowed: float
    def_wr_yards_allowed_per_game: float
    def_te_yards_allowed_per_game: float
    def_turnovers_forced_per_game: float
    def_rz_efficiency_allowed_pct: float
    def_explosive_play_rate_allowed_pct: float
    def_pressure_generated_pct: float

    # Display / situational extras
    off_points_scored_per_game: Optional[float] = None
    off_3rd_down_pct: Optional[float] = None
    off_4th_down_pct: Optional[float] = None
    off_fg_accuracy_pct: Optional[float] = None
    off_avg_starting_field_pos: Optional[float] = None
    off_penalties_per_game: Optional[float] = None
    off_penalty_yards_per_penalty: Optional[float] = None
    def_points_allowed_per_game: Optional[float] = None
    def_3rd_down_allowed_pct: Optional[float] = None
    def_4th_down_allowed_pct: Optional[float] = None
    def_avg_starting_field_pos_allowed: Optional[float] = None
    def_penalties_per_game: Optional[float] = None
    def_penalty_yards_per_penalty: Optional[float] = None
    strength_of_schedule: Optional[float] = None  # positive = harder schedule

    division: Optional[str] = None
    primary_color: Optional[str] = None

    @property
    def key(self) -> tuple:
        return (self.team_id, self.season)

    def stat(self, name: str) -> Optional[float]:
        """Return a metric by name, ``None`` when the profile lacks it."""
        if name not in SCORING_METRICS and name not in OPTIONAL_METRICS:
            raise KeyError(f"Unknown metric: {name}")
        return getattr(self, name)

    def with_stats(self, updates: Dict[str, float]) -> "TeamStatProfile":
        """Return a copy with the given metrics replaced."""
        return replace(self, **updates)

    def stats_dict(self) -> Dict[str, float]:
        """All metrics present on the profile."""
        out = {}
        for name in SCORING_METRICS + OPTIONAL_METRICS:
            value = getattr(self, name)
            if value is not None:
                out[name] = value
        return out

    def to_dict(self) -> dict:
        """Convert profile to the dataset row shape."""
        row = {
            "teamId": self.team_id,
            "teamName": self.team_name,
            "division": self.division,
            "primaryColor": self.primary_color,
        }
        row.update(self.stats_dict())
        return row

    @classmethod
    def from_dict(cls, data: dict, season: int) -> "TeamStatProfile":
        """
        Build a profile from a dataset row.

        Args:
            data: Flat team row (``teamId``, ``teamName`` plus numeric metrics)
            season: Season the row belongs to

        Returns:
            TeamStatProfile

        Raises:
            InvalidInputError: if the row lacks an id or a scoring metric
        """
        team_id = data.get("teamId", data.get("team_id"))
        if not team_id:
            raise InvalidInputError(f"Team row in season {season} has no teamId")

        missing = [m for m in SCORING_METRICS if data.get(m) is None]
        if missing:
            raise InvalidInputError(
                f"Team '{team_id}' ({season}) is missing required stats: {', '.join(missing)}"
            )

        kwargs = {m: float(data[m]) for m in SCORING_METRICS}
        for m in OPTIONAL_METRICS:
            if data.get(m) is not None:
                kwargs[m] = float(data[m])

        return cls(
            team_id=str(team_id),
            team_name=str(data.get("teamName", data.get("team_name", team_id))),
            season=int(season),
            division=data.get("division"),
            primary_color=data.get("primaryColor"),
            **kwargs,
        )


@dataclass
class LeagueSeason:
    """All team profiles for one season."""

    season: int
    teams: List[TeamStatProfile] = field(default_factory=list)

    def get_team(self, team_id: str) -> TeamStatProfile:
        for team in self.teams:
            if team.team_id == team_id:
                return team
        raise InvalidInputError(f"Team '{team_id}' not found in season {self.season}")

    def to_dict(self) -> dict:
        return {"season": self.season, "teams": [t.to_dict() for t in self.teams]}

    @classmethod
    def from_dict(cls, data: dict) -> "LeagueSeason":
        if "season" not in data:
            raise InvalidInputError("Season block has no 'season' key")
        season = int(data["season"])
        teams = [TeamStatProfile.from_dict(row, season) for row in data.get("teams", [])]
        return cls(season=season, teams=teams)


@dataclass
class LeagueDataset:
    """A collection of seasons keyed by year."""

    seasons: Dict[int, LeagueSeason] = field(default_factory=dict)

    def get_season(self, season: Optional[int]) -> LeagueSeason:
        if season is None:
            raise InvalidInputError("No season selected")
        if season not in self.seasons:
            raise InvalidInputError(f"Season {season} not in dataset")
        return self.seasons[season]

    @property
    def latest_season(self) -> Optional[int]:
        return max(self.seasons) if self.seasons else None

    def to_dict(self) -> dict:
        return {"seasons": [self.seasons[s].to_dict() for s in sorted(self.seasons)]}

    @classmethod
    def from_dict(cls, data: dict) -> "LeagueDataset":
        seasons = {}
        for block in data.get("seasons", []):
            season = LeagueSeason.from_dict(block)
            seasons[season.season] = season
        return cls(seasons=seasons)

