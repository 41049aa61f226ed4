from fastapi import APIRouter, Depends
from app.modules.weather.schemas import WeatherResponse
from app.modules.weather.service import WeatherService, DEFAULT_LAT, DEFAULT_LON
from app.core.dependencies import get_current_user_id
from typing import Dict, Iterator

router = APIRouter(prefix="/weather", tags=["weather"])


def get_weather_service() -> Iterator[WeatherService]:
    service = WeatherService()
    try:
        yield service
    finally:
        service.close()


@router.get("", response_model=WeatherResponse)
async def get_weather(
    lat: float = DEFAULT_LAT,
    lon: float = DEFAULT_LON,
    include_forecast: bool = True,
    user_data: Dict = Depends(get_current_user_id),
    service: WeatherService = Depends(get_weather_service)
):
    """Current conditions (imperial) and a 3 day forecast"""
    current = service.get_current(lat, lon)
    forecast = service.get_forecast(lat, lon) if include_forecast else []
    return WeatherResponse(current=current, summary=current.summary(), forecast=forecast)
