"""The weather tool exposed by the tool host."""

from .gateway import OPEN_METEO_FORECAST_URL, OpenMeteoGateway, OpenMeteoResponse, WeatherInfo
from .service import WeatherService, format_final_response

__all__ = [
    "OPEN_METEO_FORECAST_URL",
    "OpenMeteoGateway",
    "OpenMeteoResponse",
    "WeatherInfo",
    "WeatherService",
    "format_final_response",
]
