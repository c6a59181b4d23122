"""Scored matchup categories and their typed stat accessors."""

from dataclasses import dataclass
from enum import Enum
from operator import attrgetter
from typing import Callable, Dict

from ..models.team import TeamStatProfile


class Category(Enum):
    PASS_VOLUME = "passVolume"
    RUSH_VOLUME = "rush"
    QB_EFFICIENCY = "qb"
    WR_PRODUCTION = "wr"
    TE_PRODUCTION = "te"
    TURNOVERS = "turnover"
    RED_ZONE = "redZone"
    EXPLOSIVE = "explosive"
    PRESSURE = "pressure"


@dataclass(frozen=True)
class CategoryDefinition:
    """
    How one category compares an offense against the opposing defense.

    ``offense_invert`` / ``defense_invert`` flip metrics where a lower raw
    value is better for that unit, so both z-scores read "positive = good".
    """

    category: Category
    label: str
    offense_metric: str
    defense_metric: str
    offense_invert: bool
    defense_invert: bool

    @property
    def offense(self) -> Callable[[TeamStatProfile], float]:
        return attrgetter(self.offense_metric)

    @property
    def defense(self) -> Callable[[TeamStatProfile], float]:
        return attrgetter(self.defense_metric)


CATEGORY_DEFINITIONS: Dict[Category, CategoryDefinition] = {
    Category.PASS_VOLUME: CategoryDefinition(
        Category.PASS_VOLUME, "Passing volume",
        "off_pass_yards_per_game", "def_pass_yards_allowed_per_game", False, True,
    ),
    Category.RUSH_VOLUME: CategoryDefinition(
        Category.RUSH_VOLUME, "Rushing volume",
        "off_rush_yards_per_game", "def_rush_yards_allowed_per_game", False, True,
    ),
    Category.QB_EFFICIENCY: CategoryDefinition(
        Category.QB_EFFICIENCY, "QB efficiency",
        "off_passer_rating", "def_passer_rating_allowed", False, True,
    ),
    Category.WR_PRODUCTION: CategoryDefinition(
        Category.WR_PRODUCTION, "WR production",
        "off_wr_yards_per_game", "def_wr_yards_allowed_per_game", False, True,
    ),
    Category.TE_PRODUCTION: CategoryDefinition(
        Category.TE_PRODUCTION, "TE production",
        "off_te_yards_per_game", "def_te_yards_allowed_per_game", False, True,
    ),
    # Offense wants few giveaways; defense wants many takeaways.
    Category.TURNOVERS: CategoryDefinition(
        Category.TURNOVERS, "Turnovers",
        "off_turnovers_per_game", "def_turnovers_forced_per_game", True, False,
    ),
    Category.RED_ZONE: CategoryDefinition(
        Category.RED_ZONE, "Red zone efficiency",
        "off_rz_efficiency_pct", "def_rz_efficiency_allowed_pct", False, True,
    ),
    Category.EXPLOSIVE: CategoryDefinition(
        Category.EXPLOSIVE, "Explosive plays",
        "off_explosive_play_rate_pct", "def_explosive_play_rate_allowed_pct", False, True,
    ),
    # Offense wants little pressure allowed; defense wants lots generated.
    Category.PRESSURE: CategoryDefinition(
        Category.PRESSURE, "Pressure",
        "off_pressure_allowed_pct", "def_pressure_generated_pct", True, False,
    ),
}

# Fixed evaluation order; noise arrays are laid out in this order.
CATEGORY_ORDER = tuple(Category)

DEFAULT_WEIGHTS: Dict[Category, float] = {
    Category.PASS_VOLUME: 0.30,
    Category.RUSH_VOLUME: 0.85,
    Category.QB_EFFICIENCY: 0.55,
    Category.WR_PRODUCTION: 0.20,
    Category.TE_PRODUCTION: 0.20,
    Category.TURNOVERS: 1.50,
    Category.RED_ZONE: 0.70,
    Category.EXPLOSIVE: 0.40,
    Category.PRESSURE: 0.50,
}
