"""UI control bridge. Explicit UI events dispatched into shared state."""

import inspect
import logging
import math
from collections.abc import Coroutine, Mapping
from dataclasses import dataclass
from typing import Any

from orreryclock.i18n import t
from orreryclock.models import SimulationState
from orreryclock.renderers.composer import EffectComposer, Renderer
from orreryclock.weather import (
    GeolocationError,
    GeolocationUnsupported,
    Geolocator,
    WeatherClient,
    WeatherError,
    weather_icon,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToggleWeather:
    pass


@dataclass(frozen=True)
class OpenSettings:
    pass


@dataclass(frozen=True)
class CloseSettings:
    pass


@dataclass(frozen=True)
class SetTimeFormat:
    value: str  # "12" or "24"


@dataclass(frozen=True)
class SetSpeed:
    value: float


@dataclass(frozen=True)
class SetBloom:
    value: float


@dataclass(frozen=True)
class SetView:
    value: str  # Key into ControlBridge.renderers, e.g. "live" or "explore"


ControlEvent = (
    ToggleWeather
    | OpenSettings
    | CloseSettings
    | SetTimeFormat
    | SetSpeed
    | SetBloom
    | SetView
)


@dataclass
class WeatherPanel:
    """Text sink for the weather widget."""

    visible: bool = False
    icon: str = ""
    temperature: str = ""
    location: str = ""


@dataclass
class SettingsPanel:
    open: bool = False


def format_temperature(celsius: float) -> str:
    """Whole degrees, halves rounded up."""
    return f"{math.floor(celsius + 0.5)}°C"


class ControlBridge:
    """Apply UI events to the shared SimulationState and panel state.

    Args:
        state: Shared state read by the frame loop.
        composer: Post-processing chain that receives the bloom strength.
        geolocator: Position source for the weather panel.
        weather: Forecast client.
        lang: Language code for status texts ('ko' or 'en').
        renderers: Selectable renderers by view name.
        view: Initially selected view.
    """

    def __init__(
        self,
        state: SimulationState,
        composer: EffectComposer | None = None,
        geolocator: Geolocator | None = None,
        weather: WeatherClient | None = None,
        lang: str = "en",
        renderers: Mapping[str, Renderer] | None = None,
        view: str = "live",
    ):
        self.state = state
        self.renderers = dict(renderers or {})
        self.view = view
        if composer is None and self.renderer is not None:
            composer = self.renderer.composer
        self.composer = composer
        self.geolocator = geolocator
        self.weather = weather or WeatherClient()
        self.lang = lang
        self.weather_panel = WeatherPanel()
        self.settings_panel = SettingsPanel()
        self._pending_refresh: Coroutine[Any, Any, None] | None = None

    @property
    def renderer(self) -> Renderer | None:
        """Renderer for the selected view."""
        return self.renderers.get(self.view)

    def dispatch(self, event: ControlEvent) -> Coroutine[Any, Any, None] | None:
        """Apply one event.

        Returns:
            The weather refresh coroutine when the weather panel just became
            visible, for the host to schedule. None otherwise.
        """
        if isinstance(event, ToggleWeather):
            self.weather_panel.visible = not self.weather_panel.visible
            if self.weather_panel.visible:
                return self._next_refresh()
        elif isinstance(event, OpenSettings):
            self.settings_panel.open = True
        elif isinstance(event, CloseSettings):
            self.settings_panel.open = False
        elif isinstance(event, SetTimeFormat):
            self.state.is_24_hour = event.value == "24"
        elif isinstance(event, SetSpeed):
            self.state.speed = float(event.value)
        elif isinstance(event, SetBloom):
            self.state.bloom_strength = float(event.value)
            if self.composer is not None:
                self.composer.bloom.strength = self.state.bloom_strength
        elif isinstance(event, SetView):
            self._use_view(event.value)
        else:
            raise TypeError(f"Unknown control event: {event!r}")
        return None

    def _next_refresh(self) -> Coroutine[Any, Any, None]:
        # A refresh the host never started is superseded, not left un-awaited.
        pending = self._pending_refresh
        if pending is not None and inspect.getcoroutinestate(pending) == inspect.CORO_CREATED:
            pending.close()
        self._pending_refresh = self.refresh_weather()
        return self._pending_refresh

    def _use_view(self, view: str) -> None:
        if view not in self.renderers:
            raise ValueError(f"Unknown view: {view!r}")
        if view == self.view:
            return
        current, target = self.renderer, self.renderers[view]
        if current is not None:
            target.resize(current.width, current.height)
        self.view = view
        self.composer = target.composer
        self.composer.bloom.strength = self.state.bloom_strength

    async def refresh_weather(self) -> None:
        """Locate, fetch, and fill the weather panel. Failures become status text."""
        panel = self.weather_panel
        panel.location = t("weather_locating", self.lang)

        if self.geolocator is None:
            panel.location = t("weather_geo_unsupported", self.lang)
            return
        try:
            coords = await self.geolocator.locate()
        except GeolocationUnsupported:
            panel.location = t("weather_geo_unsupported", self.lang)
            return
        except GeolocationError as e:
            # Denied, timed out, or malformed position.
            logger.error("Geolocation error: %s", e)
            panel.location = t("weather_geo_denied", self.lang)
            return

        try:
            report = await self.weather.fetch_current(coords)
        except WeatherError as e:
            logger.error("Weather error: %s", e)
            panel.location = t("weather_fetch_error", self.lang)
            return

        panel.temperature = format_temperature(report.temperature)
        panel.location = t("weather_location", self.lang).format(
            lat=coords.latitude, lon=coords.longitude
        )
        panel.icon = weather_icon(report.weather_code)
