"""Situational inputs for a single matchup: venue, rest, stakes, weather, injuries."""

import numbers
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Dict, Iterable, List, Optional, Set, Tuple, Union

from ..simulation.errors import InvalidInputError


class Side(Enum):
    """Which team a contextual factor favors (or burdens)."""
    TEAM_A = "teamA"
    NEUTRAL = "neutral"
    TEAM_B = "teamB"


class RestGap(Enum):
    """Rest classification going into the game."""
    SHORT = "short"
    STANDARD = "standard"
    BYE = "bye"


class GameStakes(Enum):
    """Stakes tier; playoff games compress the margin between teams."""
    REGULAR = "regular"
    WILD_CARD = "wild_card"
    DIVISIONAL = "divisional"
    CONFERENCE_CHAMPIONSHIP = "conference_championship"
    CHAMPIONSHIP = "championship"


class WeatherLevel(IntEnum):
    NONE = 0
    MEDIUM = 1
    HIGH = 2


class InjurySeverity(IntEnum):
    HEALTHY = 0
    QUESTIONABLE = 1
    OUT = 2


class Position(Enum):
    QB = "qb"
    RB = "rb"
    WR = "wr"
    TE = "te"
    OFFENSIVE_LINE = "ol"
    DEFENSIVE_LINE = "dl"
    SECONDARY = "secondary"


# Secondary starters tracked for the coverage-collapse cliff.
SECONDARY_ROLES = ("CB1", "CB2", "S1")

_POSITION_ALIASES = {
    "olline": Position.OFFENSIVE_LINE,
    "oline": Position.OFFENSIVE_LINE,
    "dline": Position.DEFENSIVE_LINE,
    "sec": Position.SECONDARY,
    "dsecondary": Position.SECONDARY,
}


def parse_position(value: Union[str, Position]) -> Position:
    if isinstance(value, Position):
        return value
    raw = str(value).strip().lower()
    if raw in _POSITION_ALIASES:
        return _POSITION_ALIASES[raw]
    try:
        return Position(raw)
    except ValueError:
        raise InvalidInputError(f"Unknown position: {value}") from None


def _parse_level(enum_cls, value, field_name: str):
    """Parse an integer level given as a member, an integer, a digit string or a name."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        key = value.strip().lower()
        if not key.isdigit():
            names = {m.name.lower(): m for m in enum_cls}
            if key in names:
                return names[key]
            raise InvalidInputError(f"Invalid {field_name}: {value!r}")
        value = int(key)
    if isinstance(value, bool) or not isinstance(value, numbers.Real) or not float(value).is_integer():
        raise InvalidInputError(f"Invalid {field_name}: {value!r}")
    try:
        return enum_cls(int(value))
    except ValueError:
        allowed = ", ".join(str(int(m)) for m in enum_cls)
        raise InvalidInputError(f"{field_name} must be one of {allowed}, got {value!r}") from None


def _parse_flag(value, field_name: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        key = value.strip().lower()
        if key in ("true", "1"):
            return True
        if key in ("false", "0"):
            return False
    raise InvalidInputError(f"Invalid {field_name}: {value!r}")


def parse_severity(value: Union[int, str, InjurySeverity]) -> InjurySeverity:
    return _parse_level(InjurySeverity, value, "injury severity")


@dataclass(frozen=True)
class InjuryEntry:
    """One injured starter.  ``role`` is only meaningful for the secondary."""

    position: Position
    severity: InjurySeverity
    role: Optional[str] = None

    def __post_init__(self):
        if self.role is not None and self.role not in SECONDARY_ROLES:
            raise InvalidInputError(f"Unknown secondary role: {self.role}")


@dataclass(frozen=True)
class TeamInjuries:
    """
    Injury report for one team.

    Entries for the same position compound: three offensive-line entries
    model three separate linemen.
    """

    entries: Tuple[InjuryEntry, ...] = ()

    @classmethod
    def healthy(cls) -> "TeamInjuries":
        return cls()

    @classmethod
    def from_levels(cls, levels: Dict[Union[str, Position], Union[int, str]]) -> "TeamInjuries":
        """
        Build from a per-position mapping.

        A scalar level describes one starter (``{"qb": 2}``); a list describes
        several starters at the same position (``{"ol": [2, 2, 1]}``).
        """
        entries = []
        for pos, level in levels.items():
            position = parse_position(pos)
            for item in (level if isinstance(level, (list, tuple)) else [level]):
                severity = parse_severity(item)
                if severity == InjurySeverity.HEALTHY:
                    continue
                entries.append(InjuryEntry(position, severity))
        return cls(tuple(entries))

    @classmethod
    def from_entries(cls, rows: Iterable[dict]) -> "TeamInjuries":
        """Build from ``[{"pos": "ol", "level": 2}, {"pos": "secondary", "level": 2, "role": "CB1"}]``."""
        entries = []
        for row in rows:
            pos = row.get("pos", row.get("position"))
            level = row.get("level", row.get("severity", 0))
            entries.append(InjuryEntry(parse_position(pos), parse_severity(level), row.get("role")))
        return cls(tuple(entries))

    def for_position(self, position: Position) -> List[InjuryEntry]:
        return [e for e in self.entries if e.position == position]

    def severity(self, position: Position) -> InjurySeverity:
        """Worst severity reported at a position."""
        levels = [e.severity for e in self.for_position(position)]
        return max(levels) if levels else InjurySeverity.HEALTHY

    def count_out(self, position: Position) -> int:
        return sum(1 for e in self.for_position(position) if e.severity == InjurySeverity.OUT)

    def roles_out(self) -> Set[str]:
        return {
            e.role for e in self.for_position(Position.SECONDARY)
            if e.severity == InjurySeverity.OUT and e.role
        }

    def to_list(self) -> List[dict]:
        return [
            {"pos": e.position.value, "level": int(e.severity), **({"role": e.role} if e.role else {})}
            for e in self.entries
        ]


def _parse_enum(enum_cls, value, field_name: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except (ValueError, TypeError):
        raise InvalidInputError(f"Invalid {field_name}: {value!r}") from None


def _parse_injuries(value) -> TeamInjuries:
    if value is None:
        return TeamInjuries.healthy()
    if isinstance(value, TeamInjuries):
        return value
    if isinstance(value, dict):
        return TeamInjuries.from_levels(value)
    if isinstance(value, list):
        return TeamInjuries.from_entries(value)
    raise InvalidInputError(f"Unsupported injury payload: {type(value).__name__}")


@dataclass(frozen=True)
class SituationalInputs:
    """
    One matchup's contextual knobs.

    Supplied whole per simulation request and never mutated during a run.
    ``division_game=None`` means "infer from the teams' divisions".
    """

    home_field: Side = Side.NEUTRAL
    travel: Side = Side.NEUTRAL  # side carrying the long-travel burden
    rest_a: RestGap = RestGap.STANDARD
    rest_b: RestGap = RestGap.STANDARD
    momentum: Side = Side.NEUTRAL
    division_game: Optional[bool] = None
    stakes: GameStakes = GameStakes.REGULAR
    wind: WeatherLevel = WeatherLevel.NONE
    precipitation: WeatherLevel = WeatherLevel.NONE
    use_strength_of_schedule: bool = False
    injuries_a: TeamInjuries = field(default_factory=TeamInjuries)
    injuries_b: TeamInjuries = field(default_factory=TeamInjuries)

    def to_dict(self) -> dict:
        return {
            "home_field": self.home_field.value,
            "travel": self.travel.value,
            "rest_a": self.rest_a.value,
            "rest_b": self.rest_b.value,
            "momentum": self.momentum.value,
            "division_game": self.division_game,
            "stakes": self.stakes.value,
            "wind": int(self.wind),
            "precipitation": int(self.precipitation),
            "use_strength_of_schedule": self.use_strength_of_schedule,
            "injuries_a": self.injuries_a.to_list(),
            "injuries_b": self.injuries_b.to_list(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SituationalInputs":
        """Parse a situation snapshot; absent keys take their defaults."""
        division = data.get("division_game")
        return cls(
            home_field=_parse_enum(Side, data.get("home_field", Side.NEUTRAL), "home_field"),
            travel=_parse_enum(Side, data.get("travel", Side.NEUTRAL), "travel"),
            rest_a=_parse_enum(RestGap, data.get("rest_a", RestGap.STANDARD), "rest_a"),
            rest_b=_parse_enum(RestGap, data.get("rest_b", RestGap.STANDARD), "rest_b"),
            momentum=_parse_enum(Side, data.get("momentum", Side.NEUTRAL), "momentum"),
            division_game=None if division is None else _parse_flag(division, "division_game"),
            stakes=_parse_enum(GameStakes, data.get("stakes", GameStakes.REGULAR), "stakes"),
            wind=_parse_level(WeatherLevel, data.get("wind", 0), "wind"),
            precipitation=_parse_level(WeatherLevel, data.get("precipitation", 0), "precipitation"),
            use_strength_of_schedule=_parse_flag(data.get("use_strength_of_schedule", False), "use_strength_of_schedule"),
            injuries_a=_parse_injuries(data.get("injuries_a")),
            injuries_b=_parse_injuries(data.get("injuries_b")),
        )
