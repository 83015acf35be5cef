"""Gateway for fetching current weather data from the Open-Meteo API."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import httpx
from pydantic import BaseModel, ValidationError

from mcp_bridge.errors import UpstreamUnavailableError

OPEN_METEO_FORECAST_URL = "https://api.open-meteo.com/v1/forecast"


class OpenMeteoResponse(BaseModel):
    class Current(BaseModel):
        time: Optional[datetime] = None
        interval: Optional[int] = None
        temperature_2m: float

    current: Current


@dataclass(frozen=True, slots=True)
class WeatherInfo:
    latitude: float
    longitude: float
    temperature: float


class OpenMeteoGateway:
    def __init__(
        self,
        base_url: str = OPEN_METEO_FORECAST_URL,
        *,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self._client = client
        self.logger = logger or logging.getLogger(__name__)

    async def get_weather(self, latitude: float, longitude: float) -> WeatherInfo:
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "current": "temperature_2m",
        }
        self.logger.info("Requesting Open-Meteo forecast for (%s, %s)", latitude, longitude)

        try:
            if self._client is not None:
                response = await self._client.get(self.base_url, params=params, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(self.base_url, params=params)
            response.raise_for_status()
            payload = OpenMeteoResponse.model_validate(response.json())
        except httpx.HTTPError as exc:
            raise UpstreamUnavailableError(f"Open-Meteo request failed: {exc}", exc) from exc
        except (ValidationError, ValueError) as exc:
            raise UpstreamUnavailableError(f"Open-Meteo returned an unexpected payload: {exc}", exc) from exc

        self.logger.info("Response from Open-Meteo: %s", payload)
        return WeatherInfo(latitude, longitude, payload.current.temperature_2m)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
