# dags/best_destination_dag.py
from __future__ import annotations
from dataclasses import asdict
from datetime import datetime, timedelta
from typing import List
from airflow.decorators import dag, task
from airflow.exceptions import AirflowFailException
from weatherpick.client import OpenMeteoClient, WeatherAPIError
from weatherpick.models import ActivityRecommendation
from weatherpick.service import find_best_destination, process_city, report_to_dict

CITIES: List[str] = ["Paris", "Tokyo", "New York", "Sydney", "Cape Town"]


@dag(
    dag_id="best_destination",
    start_date=datetime(2025, 1, 1),
    schedule="0 6 * * *",
    catchup=False,
    default_args={"owner": "weatherpick", "retries": 0},
    tags=["weather", "best-destination"],
)
def best_destination():
    # the open_meteo pool caps concurrent mapped tasks, same ceiling as the thread pool (3 slots)
    @task(pool="open_meteo", execution_timeout=timedelta(seconds=30))
    def fetch_city(city: str) -> dict:
        try:
            rec = process_city(OpenMeteoClient(), city)
        except WeatherAPIError as e:
            raise AirflowFailException(f"fetch_city({city}) client error: {e}")
        return asdict(rec)

    @task
    def pick_best(rows: List[dict]) -> dict:
        report = find_best_destination([ActivityRecommendation(**r) for r in rows])
        for rank, c in enumerate(report.all_cities, start=1):
            print(f"{rank}. {c.city}: {c.score} ({c.weather_summary}) - {c.top_activity}")
        print(report.reason)
        return report_to_dict(report)

    pick_best(fetch_city.expand(city=CITIES))


dag = best_destination()
