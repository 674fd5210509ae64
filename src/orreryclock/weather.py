"""Weather lookup — geolocation contract, Open-Meteo forecast client, and WMO icon mapping."""

import logging
from typing import Any, Protocol

import httpx

from orreryclock.models import Coordinates, WeatherReport

logger = logging.getLogger(__name__)

DEFAULT_WEATHER_URL = "https://api.open-meteo.com"

# WMO weather interpretation codes (WW), inclusive ranges.
_WMO_ICONS: tuple[tuple[int, int, str], ...] = (
    (0, 0, "☀️"),  # Clear sky
    (1, 3, "⛅"),  # Mainly clear, partly cloudy, overcast
    (45, 48, "🌫️"),  # Fog and depositing rime fog
    (51, 67, "🌧️"),  # Drizzle, freezing drizzle, rain
    (71, 77, "❄️"),  # Snow
    (80, 82, "🌦️"),  # Rain showers
    (95, 99, "⛈️"),  # Thunderstorm
)
FALLBACK_ICON = "🌡️"


class WeatherError(Exception):
    """Forecast request or response parsing failure."""


class GeolocationError(Exception):
    """Position could not be determined."""


class GeolocationUnsupported(GeolocationError):
    """The host offers no geolocation service."""


class GeolocationDenied(GeolocationError):
    """The user or host refused the position request."""


class Geolocator(Protocol):
    async def locate(self) -> Coordinates: ...


def weather_icon(code: int) -> str:
    """Map a WMO weather code to an icon. Unmapped codes get the thermometer."""
    for low, high, icon in _WMO_ICONS:
        if low <= code <= high:
            return icon
    return FALLBACK_ICON


def coordinates_from_browser(payload: dict[str, Any] | None) -> Coordinates:
    """Parse a navigator.geolocation.getCurrentPosition() result.

    Args:
        payload: Object returned by the browser: {"coords": {...}} on success,
            {"error": {...}} on denial. None means no geolocation API.

    Returns:
        Coordinates of the browser.

    Raises:
        GeolocationUnsupported: payload is None.
        GeolocationDenied: payload carries an error or no coordinates.
    """
    if payload is None:
        raise GeolocationUnsupported("navigator.geolocation unavailable")
    if "error" in payload:
        raise GeolocationDenied(str(payload["error"]))
    try:
        coords = payload["coords"]
        return Coordinates(
            latitude=float(coords["latitude"]), longitude=float(coords["longitude"])
        )
    except (KeyError, TypeError, ValueError) as e:
        raise GeolocationDenied(f"malformed position: {payload!r}") from e


class StaticGeolocator:
    """Geolocator over a position the host already obtained."""

    def __init__(self, payload: dict[str, Any] | None):
        self.payload = payload

    async def locate(self) -> Coordinates:
        return coordinates_from_browser(self.payload)


class WeatherClient:
    """Async client for the Open-Meteo current-weather endpoint.

    No retry and no request timeout.

    Args:
        base_url: API root, e.g. "https://api.open-meteo.com".
        transport: Optional httpx transport (tests pass httpx.MockTransport).
    """

    def __init__(
        self,
        base_url: str = DEFAULT_WEATHER_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.transport = transport

    async def fetch_current(self, coords: Coordinates) -> WeatherReport:
        """Fetch the current weather at `coords`.

        Raises:
            WeatherError: On network failure, non-2xx status, or malformed body.
        """
        params = {
            "latitude": coords.latitude,
            "longitude": coords.longitude,
            "current_weather": "true",
        }
        try:
            async with httpx.AsyncClient(
                transport=self.transport, timeout=None
            ) as client:
                resp = await client.get(f"{self.base_url}/v1/forecast", params=params)
                resp.raise_for_status()
                current = resp.json()["current_weather"]
                return WeatherReport(
                    coordinates=coords,
                    temperature=float(current["temperature"]),
                    weather_code=int(current["weathercode"]),
                )
        except httpx.HTTPError as e:
            raise WeatherError(f"forecast request failed: {e}") from e
        except (KeyError, TypeError, ValueError) as e:
            raise WeatherError(f"unexpected forecast body: {e!r}") from e
