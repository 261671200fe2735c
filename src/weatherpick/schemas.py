# boundary schemas: the input payload and the JSON report, camelCase on the wire

from __future__ import annotations
from typing import List
from pydantic import BaseModel, ConfigDict, Field, StrictStr
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CompareCitiesInput(_CamelModel):
    cities: List[StrictStr] = Field(description="List of cities to check weather for")


class ScoredCityOutput(_CamelModel):
    city: str
    score: int
    weather_summary: str
    top_activity: str


class CityFailureOutput(_CamelModel):
    city: str
    error: str


class BestDestinationOutput(_CamelModel):
    best_city: str
    reason: str
    all_cities: List[ScoredCityOutput]
    failures: List[CityFailureOutput] = Field(default_factory=list)
