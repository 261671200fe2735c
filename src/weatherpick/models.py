# models and the weather code table, keeping data shapes explicit and reusable across the app

from dataclasses import dataclass, field
from typing import List, Optional

LOCATION_NOT_FOUND = "Location not found"
UNKNOWN_CONDITION = "Unknown"

# Open-Meteo (WMO) codes we know how to name
WEATHER_CODES = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Foggy",
    51: "Light drizzle",
    61: "Slight rain",
    63: "Moderate rain",
    65: "Heavy rain",
    71: "Slight snow",
    95: "Thunderstorm",
}


def describe_weather_code(code: int) -> str:
    return WEATHER_CODES.get(code, UNKNOWN_CONDITION)


@dataclass(frozen=True)
class CityWeather:
    # current conditions for one city; city is the canonical geocoded name
    city: str
    temperature: float
    condition: str
    humidity: float

    @classmethod
    def not_found(cls, city: str) -> "CityWeather":
        # sentinel for a geocoding miss, keeps the name the caller typed
        return cls(city=city, temperature=0, condition=LOCATION_NOT_FOUND, humidity=0)

    @property
    def summary(self) -> str:
        return f"{format_number(self.temperature)}°C, {self.condition}, {format_number(self.humidity)}% humidity"


@dataclass(frozen=True)
class ActivityRecommendation:
    city: str
    activities: List[str]
    weather_summary: str
    # raw value, so scoring never has to parse it back out of the summary
    temperature: Optional[float] = None


@dataclass(frozen=True)
class ScoredCity:
    city: str
    score: int
    weather_summary: str
    top_activity: str


@dataclass(frozen=True)
class CityFailure:
    # a city whose pipeline raised; reported next to the ranking
    city: str
    error: str


@dataclass(frozen=True)
class BestDestinationReport:
    best_city: str
    reason: str
    all_cities: List[ScoredCity]
    failures: List[CityFailure] = field(default_factory=list)


def format_number(value: float) -> str:
    # 20.0 -> "20", 20.5 -> "20.5": same text the provider's JSON number would read as
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
