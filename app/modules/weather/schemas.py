from pydantic import BaseModel
from typing import List, Optional


class DailyForecast(BaseModel):
    day: str
    high: int
    low: int
    condition: str


class CurrentWeather(BaseModel):
    temp: int
    feels_like: int
    condition: str
    humidity: int
    wind_speed: Optional[float] = None

    def summary(self) -> str:
        return f"{self.condition}, {self.temp}°F"


class WeatherResponse(BaseModel):
    current: CurrentWeather
    summary: str
    forecast: List[DailyForecast] = []
