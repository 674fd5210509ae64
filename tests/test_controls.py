from __future__ import annotations

import asyncio
import inspect
import logging

import httpx
import pytest

from orreryclock.controls import (
    CloseSettings,
    ControlBridge,
    OpenSettings,
    SetBloom,
    SetSpeed,
    SetTimeFormat,
    SetView,
    ToggleWeather,
    format_temperature,
)
from orreryclock.models import Coordinates, SimulationState
from orreryclock.renderers.composer import EffectComposer
from orreryclock.renderers.plotly_3d import PlotlyRenderer
from orreryclock.renderers.svg_2d import SvgRenderer
from orreryclock.weather import (
    GeolocationDenied,
    GeolocationError,
    GeolocationUnsupported,
    WeatherClient,
)


class _FixedGeolocator:
    def __init__(self, coords: Coordinates | None = None, error: Exception | None = None):
        self.coords = coords
        self.error = error
        self.calls = 0

    async def locate(self) -> Coordinates:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.coords


def _weather(status: int = 200, body: dict | None = None) -> WeatherClient:
    body = body or {"current_weather": {"temperature": 21.5, "weathercode": 0}}
    return WeatherClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(status, json=body))
    )


def test_format_and_speed_events() -> None:
    state = SimulationState()
    bridge = ControlBridge(state)
    bridge.dispatch(SetTimeFormat("12"))
    assert state.is_24_hour is False
    bridge.dispatch(SetTimeFormat("24"))
    assert state.is_24_hour is True
    bridge.dispatch(SetSpeed(3.5))
    bridge.dispatch(SetSpeed(3.5))
    assert state.speed == 3.5


def test_bloom_reaches_composer() -> None:
    state = SimulationState()
    composer = EffectComposer()
    ControlBridge(state, composer=composer).dispatch(SetBloom(0.4))
    assert state.bloom_strength == 0.4
    assert composer.bloom.strength == 0.4


def test_settings_panel_open_close() -> None:
    bridge = ControlBridge(SimulationState())
    bridge.dispatch(OpenSettings())
    bridge.dispatch(OpenSettings())
    assert bridge.settings_panel.open
    bridge.dispatch(CloseSettings())
    assert not bridge.settings_panel.open


def test_unknown_event_rejected() -> None:
    with pytest.raises(TypeError):
        ControlBridge(SimulationState()).dispatch("bloom")  # type: ignore[arg-type]


def test_weather_toggle_fetches_once_when_shown() -> None:
    geo = _FixedGeolocator(Coordinates(37.57, 126.98))
    bridge = ControlBridge(SimulationState(), geolocator=geo, weather=_weather())

    job = bridge.dispatch(ToggleWeather())
    assert bridge.weather_panel.visible
    assert job is not None
    asyncio.run(job)

    panel = bridge.weather_panel
    assert panel.icon == "☀️"
    assert panel.temperature == "22°C"
    assert panel.location == "Lat: 37.6 Lon: 127.0"
    assert geo.calls == 1

    assert bridge.dispatch(ToggleWeather()) is None
    assert not bridge.weather_panel.visible


def test_late_response_after_hide_is_harmless() -> None:
    bridge = ControlBridge(
        SimulationState(), geolocator=_FixedGeolocator(Coordinates(0, 0)), weather=_weather()
    )
    job = bridge.dispatch(ToggleWeather())
    bridge.dispatch(ToggleWeather())
    asyncio.run(job)
    assert not bridge.weather_panel.visible
    assert bridge.weather_panel.temperature == "22°C"


def test_geolocation_unsupported_status() -> None:
    bridge = ControlBridge(
        SimulationState(), geolocator=_FixedGeolocator(error=GeolocationUnsupported())
    )
    asyncio.run(bridge.dispatch(ToggleWeather()))
    assert bridge.weather_panel.location == "Geo Not Supported"


def test_missing_geolocator_is_unsupported() -> None:
    bridge = ControlBridge(SimulationState())
    asyncio.run(bridge.dispatch(ToggleWeather()))
    assert bridge.weather_panel.location == "Geo Not Supported"


def test_geolocation_denied_status() -> None:
    bridge = ControlBridge(
        SimulationState(), geolocator=_FixedGeolocator(error=GeolocationDenied("denied"))
    )
    asyncio.run(bridge.dispatch(ToggleWeather()))
    assert bridge.weather_panel.location == "Loc Access Denied"


def test_geolocation_timeout_becomes_status(caplog: pytest.LogCaptureFixture) -> None:
    bridge = ControlBridge(
        SimulationState(), geolocator=_FixedGeolocator(error=GeolocationError("timeout"))
    )
    with caplog.at_level(logging.ERROR, logger="orreryclock.controls"):
        asyncio.run(bridge.dispatch(ToggleWeather()))
    assert bridge.weather_panel.location == "Loc Access Denied"
    assert bridge.weather_panel.temperature == ""
    assert "timeout" in caplog.text


def test_fetch_failure_status_and_log(caplog: pytest.LogCaptureFixture) -> None:
    bridge = ControlBridge(
        SimulationState(),
        geolocator=_FixedGeolocator(Coordinates(1, 2)),
        weather=_weather(status=500),
    )
    with caplog.at_level(logging.ERROR, logger="orreryclock.controls"):
        asyncio.run(bridge.dispatch(ToggleWeather()))
    assert bridge.weather_panel.location == "Error Fetching"
    assert bridge.weather_panel.icon == ""
    assert "Weather error" in caplog.text


def test_korean_status_text() -> None:
    bridge = ControlBridge(
        SimulationState(),
        geolocator=_FixedGeolocator(error=GeolocationDenied("denied")),
        lang="ko",
    )
    asyncio.run(bridge.dispatch(ToggleWeather()))
    assert bridge.weather_panel.location == "위치 접근 거부됨"


@pytest.mark.parametrize(
    ("celsius", "text"), [(21.5, "22°C"), (-0.5, "0°C"), (-2.6, "-3°C"), (0.0, "0°C")]
)
def test_temperature_rounds_half_up(celsius: float, text: str) -> None:
    assert format_temperature(celsius) == text


def test_reshow_before_start_closes_stale_refresh() -> None:
    bridge = ControlBridge(
        SimulationState(), geolocator=_FixedGeolocator(Coordinates(0, 0)), weather=_weather()
    )
    stale = bridge.dispatch(ToggleWeather())
    bridge.dispatch(ToggleWeather())
    fresh = bridge.dispatch(ToggleWeather())

    assert inspect.getcoroutinestate(stale) == inspect.CORO_CLOSED
    asyncio.run(fresh)
    assert bridge.weather_panel.temperature == "22°C"


def test_view_choice_survives_settings_panel() -> None:
    state = SimulationState()
    live, explore = SvgRenderer(width=900, height=500), PlotlyRenderer()
    bridge = ControlBridge(state, renderers={"live": live, "explore": explore})
    assert bridge.composer is live.composer

    bridge.dispatch(SetBloom(0.7))
    bridge.dispatch(SetView("explore"))
    bridge.dispatch(CloseSettings())
    bridge.dispatch(OpenSettings())

    assert bridge.view == "explore"
    assert bridge.renderer is explore
    assert bridge.composer is explore.composer
    assert explore.composer.bloom.strength == 0.7
    assert (explore.width, explore.height) == (900, 500)


def test_unknown_view_rejected() -> None:
    bridge = ControlBridge(SimulationState(), renderers={"live": SvgRenderer()})
    with pytest.raises(ValueError):
        bridge.dispatch(SetView("vr"))
    assert bridge.view == "live"
