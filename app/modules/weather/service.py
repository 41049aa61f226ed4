from app.config import settings
from app.core.errors import AppError, ErrorTypes, to_app_error
from app.modules.weather.schemas import CurrentWeather, DailyForecast
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging

import httpx

logger = logging.getLogger(__name__)

# Fort Myers, FL
DEFAULT_LAT = 26.6406
DEFAULT_LON = -81.8723


class WeatherService:
    def __init__(self, client: Optional[httpx.Client] = None, api_key: Optional[str] = None):
        self.api_key = api_key or settings.openweather_api_key
        self.base_url = settings.openweather_base_url.rstrip("/")
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=10.0)

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def _get(self, path: str, lat: float, lon: float, **params) -> Dict[str, Any]:
        if not self.api_key:
            raise AppError("Weather API key is not configured", ErrorTypes.API_KEY_MISSING, 503)
        try:
            response = self.client.get(
                f"{self.base_url}/{path}",
                params={"lat": lat, "lon": lon, "appid": self.api_key, "units": "imperial", **params},
            )
        except httpx.HTTPError as e:
            raise to_app_error(e, ErrorTypes.API_REQUEST_FAILED)
        if response.status_code == 401:
            raise AppError(code=ErrorTypes.API_UNAUTHORIZED)
        if response.status_code == 429:
            raise AppError(code=ErrorTypes.API_RATE_LIMIT)
        if response.is_error:
            raise AppError(
                f"Weather request failed ({response.status_code})",
                ErrorTypes.API_REQUEST_FAILED,
                details=response.text,
            )
        return response.json()

    def get_current(self, lat: float = DEFAULT_LAT, lon: float = DEFAULT_LON) -> CurrentWeather:
        data = self._get("weather", lat, lon)
        try:
            main = data["main"]
            return CurrentWeather(
                temp=round(main["temp"]),
                feels_like=round(main["feels_like"]),
                condition=data["weather"][0]["main"],
                humidity=main["humidity"],
                wind_speed=(data.get("wind") or {}).get("speed"),
            )
        except (KeyError, IndexError, TypeError) as e:
            logger.error(f"Unexpected OpenWeather payload: {e}")
            raise AppError("Unexpected weather response", ErrorTypes.API_REQUEST_FAILED)

    def get_forecast(self, lat: float = DEFAULT_LAT, lon: float = DEFAULT_LON, days: int = 3) -> List[DailyForecast]:
        """Daily highs and lows from the 3-hourly forecast"""
        data = self._get("forecast", lat, lon, cnt=24)
        daily: Dict[str, Dict[str, Any]] = {}
        try:
            for item in data.get("list") or []:
                day = datetime.fromtimestamp(item["dt"], tz=timezone.utc).strftime("%a")
                main = item["main"]
                if day not in daily:
                    daily[day] = {"high": main["temp_max"], "low": main["temp_min"], "condition": item["weather"][0]["main"]}
                else:
                    daily[day]["high"] = max(daily[day]["high"], main["temp_max"])
                    daily[day]["low"] = min(daily[day]["low"], main["temp_min"])

            labels = ["Today", "Tomorrow"]
            return [
                DailyForecast(
                    day=labels[i] if i < len(labels) else day,
                    high=round(values["high"]),
                    low=round(values["low"]),
                    condition=values["condition"].lower(),
                )
                for i, (day, values) in enumerate(list(daily.items())[:days])
            ]
        except (KeyError, IndexError, TypeError, ValueError, AttributeError, OverflowError) as e:
            logger.error(f"Unexpected OpenWeather forecast payload: {e}")
            raise AppError("Unexpected weather response", ErrorTypes.API_REQUEST_FAILED)
