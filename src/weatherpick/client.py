# OOP boundary for external i/o against Open-Meteo (geocoding + current forecast)
# all http/urls/timeouts live here, so the rest of the code is pure and testable
# one thread-local session per ThreadPoolExecutor worker

from __future__ import annotations
import logging
import os
import threading
from typing import Dict, Any, Optional
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from dotenv import load_dotenv

load_dotenv()  # endpoint overrides and timeout may come from a local .env

logger = logging.getLogger(__name__)

CURRENT_FIELDS = ("temperature_2m", "relative_humidity_2m", "weathercode")


class WeatherAPIError(RuntimeError):
    # single error type used to propagate clear messages from this layer
    pass


class OpenMeteoClient:
    # provider details: base URLs, params, timeout, optional retries
    GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"
    FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
    DEFAULT_TIMEOUT = 10.0

    def __init__(
        self,
        geocoding_url: str | None = None,
        forecast_url: str | None = None,
        timeout: float | None = None,
        max_retries: int = 0,
        backoff_factor: float = 0.5,
        user_agent: str = "weather-best-destination/0.1",
    ):
        self.geocoding_url = geocoding_url or os.getenv("OPEN_METEO_GEOCODING_URL") or self.GEOCODING_URL
        self.forecast_url = forecast_url or os.getenv("OPEN_METEO_FORECAST_URL") or self.FORECAST_URL

        if timeout is None:
            raw = os.getenv("WEATHERPICK_TIMEOUT")
            try:
                timeout = float(raw) if raw else self.DEFAULT_TIMEOUT
            except ValueError as exc:
                raise WeatherAPIError(f"WEATHERPICK_TIMEOUT must be a number (got {raw!r})") from exc
        self.timeout = timeout
        self.user_agent = user_agent

        # each worker thread lazily obtains its own session through _session()
        self._local = threading.local()

        # no retries unless asked for; faults surface to the caller as WeatherAPIError
        self._retry = Retry(
            total=max_retries,
            backoff_factor=backoff_factor,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=("GET",),
            raise_on_status=False,
        )

    def _build_session(self) -> requests.Session:
        s = requests.Session()
        s.headers.update({"User-Agent": self.user_agent})
        adapter = HTTPAdapter(max_retries=self._retry)
        s.mount("http://", adapter)
        s.mount("https://", adapter)
        return s

    def _session(self) -> requests.Session:
        sess = getattr(self._local, "session", None)
        if sess is None:
            sess = self._build_session()
            self._local.session = sess
        return sess

    def _get_json(self, url: str, params: Dict[str, Any], what: str) -> Dict[str, Any]:
        logger.debug("GET %s %s", url, params)
        try:
            resp = self._session().get(url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise WeatherAPIError(f"Request error for {what}: {exc}") from exc

        if resp.status_code >= 400:
            # include a short response snippet to speed up triage
            snippet = (resp.text or "")[:300]
            raise WeatherAPIError(f"HTTP {resp.status_code} for {what}. Body: {snippet}")

        try:
            data = resp.json()
        except ValueError as exc:
            raise WeatherAPIError(f"Invalid JSON for {what}: {exc}") from exc

        if not isinstance(data, dict):
            raise WeatherAPIError(f"Unexpected API shape for {what}: expected an object")
        return data

    def search_city(self, name: str) -> Optional[Dict[str, Any]]:
        # first geocoding match (name, latitude, longitude), or None when the provider knows no such place
        data = self._get_json(self.geocoding_url, {"name": name, "count": 1}, f"geocoding {name!r}")
        results = data.get("results") or []
        if not isinstance(results, list):
            raise WeatherAPIError(f"Unexpected API shape: geocoding results for {name!r} is not a list")
        if not results:
            return None

        first = results[0]
        try:
            _ = first["name"], first["latitude"], first["longitude"]
        except (KeyError, TypeError) as exc:
            raise WeatherAPIError(f"Unexpected API shape: geocoding result for {name!r} lacks {exc}") from exc
        return first

    def get_current_weather(self, latitude: float, longitude: float) -> Dict[str, Any]:
        # returns the "current" object: temperature_2m, relative_humidity_2m, weathercode
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "current": ",".join(CURRENT_FIELDS),
        }
        what = f"forecast ({latitude}, {longitude})"
        data = self._get_json(self.forecast_url, params, what)

        current = data.get("current")
        if not isinstance(current, dict):
            raise WeatherAPIError(f"Unexpected API shape for {what}: missing current")
        missing = [f for f in CURRENT_FIELDS if current.get(f) is None]
        if missing:
            raise WeatherAPIError(f"Unexpected API shape for {what}: missing current.{', current.'.join(missing)}")
        # bool is an int subclass, but never a reading
        bad = [f for f in CURRENT_FIELDS if isinstance(current[f], bool) or not isinstance(current[f], (int, float))]
        if bad:
            raise WeatherAPIError(f"Unexpected API shape for {what}: non-numeric current.{', current.'.join(bad)}")
        return current
