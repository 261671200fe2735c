# orchestration and business rules.
# ThreadPoolExecutor runs up to 3 per-city pipelines (geocode -> forecast -> activities) at once,
# then pure scoring picks the best destination from the collected records

from __future__ import annotations
import logging
import re
from dataclasses import asdict, replace
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence, Union
from .client import OpenMeteoClient, WeatherAPIError
from .models import (
    ActivityRecommendation,
    BestDestinationReport,
    CityFailure,
    CityWeather,
    ScoredCity,
    describe_weather_code,
)
from .schemas import BestDestinationOutput, CompareCitiesInput

logger = logging.getLogger(__name__)

MAX_WORKERS = 3
BASE_SCORE = 50
DEFAULT_TEMPERATURE = 20.0
FALLBACK_ACTIVITY = "Explore the city"

HOT_ACTIVITIES = ["🏖️ Beach or pool visit", "🍦 Get ice cream"]
MILD_ACTIVITIES = ["🚴 Cycling", "🥾 Hiking", "📸 Outdoor photography"]
COOL_ACTIVITIES = ["☕ Cozy café visit", "🎨 Museum tour"]
COLD_ACTIVITIES = ["⛷️ Winter sports", "🏠 Indoor activities"]
RAINY_ACTIVITIES = ["🎬 Movie theater", "📚 Library visit", "🎳 Bowling"]
CLEAR_SKY_EXTRAS = ["🌳 Park picnic", "🌅 Sunset watching"]

_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")


class EmptyInputError(ValueError):
    # raised when there is nothing to compare
    pass


# single city path: geocode -> current weather, or the sentinel on a geocoding miss
def fetch_city_weather(client: OpenMeteoClient, city: str) -> CityWeather:
    place = client.search_city(city)
    if place is None:
        logger.info("No geocoding match for %r", city)
        return CityWeather.not_found(city)

    current = client.get_current_weather(place["latitude"], place["longitude"])
    return CityWeather(
        city=place["name"],
        temperature=current["temperature_2m"],
        condition=describe_weather_code(current["weathercode"]),
        humidity=current["relative_humidity_2m"],
    )


# temperature picks a base set (hot to cold); rain replaces it with indoor options,
# a clear or sunny sky appends outdoor extras
def recommend_activities(weather: CityWeather) -> ActivityRecommendation:
    t = weather.temperature
    if t > 25:
        activities = list(HOT_ACTIVITIES)
    elif t > 15:
        activities = list(MILD_ACTIVITIES)
    elif t > 5:
        activities = list(COOL_ACTIVITIES)
    else:
        activities = list(COLD_ACTIVITIES)

    condition = weather.condition.lower()
    if "rain" in condition:
        activities = list(RAINY_ACTIVITIES)
    elif "clear" in condition or "sunny" in condition:
        activities.extend(CLEAR_SKY_EXTRAS)

    return ActivityRecommendation(
        city=weather.city,
        activities=activities,
        weather_summary=weather.summary,
        temperature=weather.temperature,
    )


# the unit of work submitted to the pool
def process_city(client: OpenMeteoClient, city: str) -> ActivityRecommendation:
    return recommend_activities(fetch_city_weather(client, city))


def process_all(
    cities: Sequence[str],
    client: Optional[OpenMeteoClient] = None,
    max_workers: int = MAX_WORKERS,
    fail_fast: bool = False,
) -> List[Union[ActivityRecommendation, CityFailure]]:
    # results line up with cities; a raising pipeline becomes a CityFailure in its slot,
    # or with fail_fast the first failure in input order is re-raised and pending cities cancelled
    if max_workers < 1:
        raise ValueError(f"max_workers must be at least 1 (got {max_workers})")
    if not cities:
        return []

    client = client or OpenMeteoClient()
    outcomes: List[Union[ActivityRecommendation, CityFailure]] = []
    logger.info("Fetching weather for %d cities (%d workers)", len(cities), max_workers)

    # reuse a single client, each worker has its own thread local http session
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = [pool.submit(process_city, client, city) for city in cities]
        for city, fut in zip(cities, futures):
            try:
                outcomes.append(fut.result())
            except Exception as exc:
                if fail_fast:
                    pool.shutdown(wait=False, cancel_futures=True)
                    raise
                logger.warning("Skipping %r: %s", city, exc)
                outcomes.append(CityFailure(city=city, error=str(exc)))

    return outcomes


def extract_temperature(summary: str) -> float:
    # first signed decimal in a "{temp}°C, ..." summary
    match = _NUMBER.search(summary)
    return float(match.group(0)) if match else DEFAULT_TEMPERATURE


def score_city(rec: ActivityRecommendation) -> ScoredCity:
    score = BASE_SCORE
    temp = rec.temperature if rec.temperature is not None else extract_temperature(rec.weather_summary)

    # prefer 18-25°C
    if 18 <= temp <= 25:
        score += 30
    elif 15 <= temp <= 28:
        score += 20
    elif temp < 5 or temp > 35:
        score -= 20

    summary = rec.weather_summary.lower()
    if "clear" in summary:
        score += 20
    elif "rain" in summary:
        score -= 15
    elif "cloud" in summary:
        score += 5

    return ScoredCity(
        city=rec.city,
        score=score,
        weather_summary=rec.weather_summary,
        top_activity=rec.activities[0] if rec.activities else FALLBACK_ACTIVITY,
    )


def find_best_destination(recommendations: Sequence[ActivityRecommendation]) -> BestDestinationReport:
    if not recommendations:
        raise EmptyInputError("No city recommendations to compare")

    # sorted() is stable, so equal scores keep input order
    ranked = sorted((score_city(r) for r in recommendations), key=lambda s: s.score, reverse=True)
    best = ranked[0]
    return BestDestinationReport(
        best_city=best.city,
        reason=(
            f"{best.city} has the best weather conditions with {best.weather_summary}. "
            f"Top recommended activity: {best.top_activity}"
        ),
        all_cities=ranked,
    )


def compare_cities(
    cities: Sequence[str],
    client: Optional[OpenMeteoClient] = None,
    max_workers: int = MAX_WORKERS,
    fail_fast: bool = False,
) -> BestDestinationReport:
    payload = CompareCitiesInput(cities=cities)
    if not payload.cities:
        raise EmptyInputError("At least one city is required")

    outcomes = process_all(payload.cities, client=client, max_workers=max_workers, fail_fast=fail_fast)
    recommendations = [o for o in outcomes if isinstance(o, ActivityRecommendation)]
    failures = [o for o in outcomes if isinstance(o, CityFailure)]
    if not recommendations:
        raise WeatherAPIError(f"Weather lookup failed for every city: {', '.join(f.city for f in failures)}")

    report = find_best_destination(recommendations)
    logger.info("Best destination: %s", report.best_city)
    return replace(report, failures=failures)


def report_to_dict(report: BestDestinationReport) -> dict:
    # camelCase JSON shape: bestCity, reason, allCities, failures
    return BestDestinationOutput.model_validate(asdict(report)).model_dump(by_alias=True)
