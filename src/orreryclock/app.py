"""OrreryClock — Streamlit app for the solar-system clock."""

import asyncio
import threading

import numpy as np
import streamlit as st
from dotenv import load_dotenv
from streamlit_js_eval import get_geolocation, streamlit_js_eval

load_dotenv()

from orreryclock.assets import TextureLoader  # noqa: E402
from orreryclock.clock import viewer_clock  # noqa: E402
from orreryclock.config import Settings, configure_logging  # noqa: E402
from orreryclock.controls import (  # noqa: E402
    CloseSettings,
    ControlBridge,
    OpenSettings,
    SetBloom,
    SetSpeed,
    SetTimeFormat,
    SetView,
    ToggleWeather,
)
from orreryclock.i18n import t  # noqa: E402
from orreryclock.loop import FrameLoop  # noqa: E402
from orreryclock.models import ClockConfig, DigitalReadout, SimulationState  # noqa: E402
from orreryclock.renderers.plotly_3d import PlotlyRenderer  # noqa: E402
from orreryclock.renderers.svg_2d import SvgRenderer  # noqa: E402
from orreryclock.scene import build_scene  # noqa: E402
from orreryclock.weather import StaticGeolocator, WeatherClient  # noqa: E402

_settings = Settings.from_env()
configure_logging(_settings.log_level)

# --- Language detection (browser-first via streamlit-js-eval) ---
if "lang" not in st.session_state:
    _browser_lang: str | None = streamlit_js_eval(
        js_expressions="navigator.language", key="_lang_detect", height=0
    )
    if _browser_lang is not None:
        st.session_state.lang = "ko" if _browser_lang.lower().startswith("ko") else "en"

_lang: str = st.session_state.get("lang", "en")

st.set_page_config(
    page_title=t("page_title", _lang),
    page_icon="☀",
    layout="wide",
    initial_sidebar_state="collapsed",
)

st.markdown(
    """
    <style>
    iframe[src*="streamlit_js_eval"] { display: none !important; }
    html, body, [data-testid="stAppViewContainer"], [data-testid="stMain"] {
        background-color: #000000 !important;
    }
    [data-testid="stHeader"], [data-testid="stToolbar"] {
        display: none !important;
    }
    [data-testid="stMainBlockContainer"] {
        padding-top: 0.5rem !important;
        padding-bottom: 0 !important;
    }
    .digital-clock {
        font-family: 'Courier New', monospace;
        font-size: 2.6rem;
        letter-spacing: 0.15em;
        color: #ffddaa;
        text-align: center;
        text-shadow: 0 0 12px rgba(255, 200, 120, 0.8);
    }
    .weather-box {
        color: #e8e8e8;
        text-align: right;
        line-height: 1.4;
    }
    .weather-box .icon { font-size: 2rem; }
    .weather-box .temp { font-size: 1.4rem; }
    .weather-box .loc  { font-size: 0.8rem; color: #aaaaaa; }
    </style>
    """,
    unsafe_allow_html=True,
)


# --- Session state initialization ---
# One clock per browser session; the frame loop and control bridge share `state`.
if "frame_loop" not in st.session_state:
    _config = ClockConfig()
    _state = SimulationState()
    _rng = np.random.default_rng(_settings.seed)
    _scene = build_scene(_config, TextureLoader(_settings.texture_dir), _rng)
    st.session_state.bridge = ControlBridge(
        _state,
        weather=WeatherClient(_settings.weather_url),
        lang=_lang,
        renderers={"live": SvgRenderer(), "explore": PlotlyRenderer()},
    )
    st.session_state.frame_loop = FrameLoop(
        _scene, _config, _state, renderer=st.session_state.bridge.renderer
    )
    st.session_state.weather_job = None
    st.session_state.viewport = None

loop: FrameLoop = st.session_state.frame_loop
bridge: ControlBridge = st.session_state.bridge

# --- Time zone detection (the clock shows the viewer's time, not the host's) ---
if "tz" not in st.session_state:
    _browser_tz: str | None = streamlit_js_eval(
        js_expressions="Intl.DateTimeFormat().resolvedOptions().timeZone",
        key="_tz_detect",
        height=0,
    )
    if _browser_tz is not None:
        st.session_state.tz = _browser_tz
        loop.clock = viewer_clock(_browser_tz)

# --- Viewport (resize) ---
_viewport = streamlit_js_eval(
    js_expressions="[window.parent.innerWidth, window.parent.innerHeight]",
    key="_viewport",
    height=0,
)
if _viewport and _viewport != st.session_state.viewport:
    st.session_state.viewport = _viewport
    _w, _h = int(_viewport[0]), int(_viewport[1])
    loop.resize(max(_w - 64, 320), max(int(_h * 0.8), 240))

# --- Top bar: weather + settings buttons ---
col_weather, _, col_settings = st.columns([2, 6, 2])
with col_weather:
    if st.button(t("btn_weather", _lang), key="weather_btn"):
        job = bridge.dispatch(ToggleWeather())
        if job is not None:
            st.session_state.weather_job = job
with col_settings:
    if st.button(t("btn_settings", _lang), key="settings_btn"):
        bridge.dispatch(OpenSettings())

# --- Weather fetch ---
# Geolocation resolves in the browser over a few reruns; once it does, the
# refresh runs on a worker thread so the frame fragment keeps ticking.
if st.session_state.weather_job is not None:
    _supported = streamlit_js_eval(
        js_expressions="'geolocation' in navigator", key="_geo_supported", height=0
    )
    _payload = get_geolocation() if _supported else None
    if _supported is False or _payload is not None:
        bridge.geolocator = StaticGeolocator(_payload)
        threading.Thread(
            target=asyncio.run, args=(st.session_state.weather_job,), daemon=True
        ).start()
        st.session_state.weather_job = None

# --- Settings panel ---
if bridge.settings_panel.open:
    with st.container(border=True, key="settings_panel"):
        fmt = st.radio(
            t("label_time_format", _lang),
            options=["24", "12"],
            format_func=lambda v: t(f"label_format_{v}", _lang),
            index=0 if loop.state.is_24_hour else 1,
            horizontal=True,
        )
        bridge.dispatch(SetTimeFormat(fmt))
        speed = st.slider(
            t("label_speed", _lang), 0.0, 5.0, float(loop.state.speed), step=0.1
        )
        bridge.dispatch(SetSpeed(speed))
        bloom = st.slider(
            t("label_bloom", _lang), 0.0, 3.0, float(loop.state.bloom_strength), step=0.1
        )
        bridge.dispatch(SetBloom(bloom))
        view = st.radio(
            t("label_view", _lang),
            options=["live", "explore"],
            format_func=lambda v: t(f"view_{v}", _lang),
            index=1 if bridge.view == "explore" else 0,
            horizontal=True,
        )
        bridge.dispatch(SetView(view))
        loop.renderer = bridge.renderer
        if st.button(t("btn_close", _lang), key="close_settings"):
            bridge.dispatch(CloseSettings())
            st.rerun()


def _weather_html() -> str:
    panel = bridge.weather_panel
    if st.session_state.weather_job is not None:
        return f"<div class='weather-box'><div class='loc'>{t('weather_locating', _lang)}</div></div>"
    return (
        f"<div class='weather-box'><div class='icon'>{panel.icon}</div>"
        f"<div class='temp'>{panel.temperature}</div>"
        f"<div class='loc'>{panel.location}</div></div>"
    )


# --- Frame loop (display-synced callback) ---
@st.fragment(run_every=_settings.frame_interval)
def _clock_frame() -> None:
    readout_slot = st.empty()

    def _show(readout: DigitalReadout) -> None:
        readout_slot.markdown(
            f"<div class='digital-clock'>{readout.hours}:{readout.minutes}:{readout.seconds}</div>",
            unsafe_allow_html=True,
        )

    loop.display = _show
    loop.tick()

    if bridge.weather_panel.visible:
        st.markdown(_weather_html(), unsafe_allow_html=True)

    frame = loop.renderer.last_frame
    if isinstance(loop.renderer, PlotlyRenderer):
        if frame is not None:
            st.plotly_chart(
                frame,
                use_container_width=False,
                config={"scrollZoom": True, "displayModeBar": False},
            )
    else:
        st.markdown(frame, unsafe_allow_html=True)


_clock_frame()
