"""Wind and precipitation multipliers."""

from typing import Dict

from ..models.situation import WeatherLevel
from .multipliers import Effect, MultiplierSet


# Wind mostly suppresses the pass game and deep shots; rushing is left alone
# so it naturally becomes a larger share of the delta.
WIND_MULTIPLIERS: Dict[WeatherLevel, Dict[Effect, float]] = {
    WeatherLevel.NONE: {},
    WeatherLevel.MEDIUM: {
        Effect.PASS_VOLUME: 0.95,
        Effect.EXPLOSIVE: 0.90,
    },
    WeatherLevel.HIGH: {
        Effect.PASS_VOLUME: 0.85,
        Effect.EXPLOSIVE: 0.75,
        Effect.TURNOVERS: 1.10,
    },
}

# Wet ball: fewer clean completions, more fumbles.
PRECIPITATION_MULTIPLIERS: Dict[WeatherLevel, Dict[Effect, float]] = {
    WeatherLevel.NONE: {},
    WeatherLevel.MEDIUM: {
        Effect.PASS_VOLUME: 0.97,
        Effect.EXPLOSIVE: 0.95,
        Effect.TURNOVERS: 1.05,
    },
    WeatherLevel.HIGH: {
        Effect.PASS_VOLUME: 0.90,
        Effect.EXPLOSIVE: 0.88,
        Effect.TURNOVERS: 1.15,
    },
}


def apply_weather(wind: WeatherLevel, precipitation: WeatherLevel, mults: MultiplierSet) -> None:
    for effect, factor in WIND_MULTIPLIERS[wind].items():
        mults.scale(effect, factor)
    for effect, factor in PRECIPITATION_MULTIPLIERS[precipitation].items():
        mults.scale(effect, factor)
