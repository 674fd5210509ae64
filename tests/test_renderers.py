from __future__ import annotations

from datetime import datetime

import matplotlib.pyplot as plt
from matplotlib.figure import Figure

from orreryclock.loop import FrameLoop
from orreryclock.models import ClockConfig, SimulationState
from orreryclock.renderers.composer import BloomPass
from orreryclock.renderers.plotly_3d import PlotlyRenderer, render_plotly_scene
from orreryclock.renderers.static import render_static_clock, save_static_clock
from orreryclock.renderers.svg_2d import SvgRenderer
from orreryclock.scene import ClockScene, Light, PerspectiveCamera

NOW = datetime(2024, 9, 18, 14, 5, 9)


def _advance(scene: ClockScene, config: ClockConfig, renderer=None) -> FrameLoop:
    loop = FrameLoop(scene, config, SimulationState(), renderer=renderer, clock=lambda: NOW)
    loop.tick()
    return loop


def test_svg_frame_contains_scene(scene: ClockScene, config: ClockConfig) -> None:
    renderer = SvgRenderer(width=640, height=360)
    _advance(scene, config, renderer)
    svg = renderer.last_frame
    assert svg.startswith("<svg")
    assert 'viewBox="0 0 640 360"' in svg
    assert svg.count("<polyline") == 3
    assert 'fill="url(#body-sun)"' in svg
    assert 'fill="url(#glow-saturn)"' in svg
    assert svg.count("<polygon") == config.ring_segments


def test_svg_without_bloom_drops_halos(scene: ClockScene, config: ClockConfig) -> None:
    renderer = SvgRenderer()
    renderer.composer.bloom.strength = 0.0
    _advance(scene, config, renderer)
    assert "url(#glow-" not in renderer.last_frame


def test_svg_frame_changes_with_resize(scene: ClockScene, config: ClockConfig) -> None:
    renderer = SvgRenderer()
    loop = _advance(scene, config, renderer)
    loop.resize(400, 400)
    loop.tick()
    assert 'width="400" height="400"' in renderer.last_frame


def test_plotly_figure_traces(scene: ClockScene, config: ClockConfig) -> None:
    renderer = PlotlyRenderer(width=800, height=500)
    _advance(scene, config, renderer)
    fig = renderer.last_frame
    names = {trace.name for trace in fig.data}
    assert {"stars", "orbits", "ring", "sun", "earth", "mars", "saturn"} <= names
    stars = next(trace for trace in fig.data if trace.name == "stars")
    assert len(stars.x) == config.star_count
    assert fig.layout.width == 800
    assert fig.layout.height == 500


def test_plotly_halos_follow_bloom(scene: ClockScene, config: ClockConfig) -> None:
    renderer = PlotlyRenderer()
    _advance(scene, config, renderer)
    with_bloom = len(renderer.last_frame.data)
    renderer.composer.bloom.strength = 0.0
    renderer.render(scene, PerspectiveCamera())
    assert len(renderer.last_frame.data) == with_bloom - len(scene.bodies)


def test_static_render(scene: ClockScene, config: ClockConfig) -> None:
    loop = _advance(scene, config)
    fig = render_static_clock(scene, loop.camera, readout=loop.readout)
    assert isinstance(fig, Figure)
    assert any(text.get_text() == "14:05:09" for text in fig.axes[0].texts)
    plt.close(fig)


def test_static_save(scene: ClockScene, config: ClockConfig, tmp_path) -> None:
    loop = _advance(scene, config)
    out = save_static_clock(
        scene, loop.camera, NOW, readout=loop.readout, output_path=tmp_path / "clock.png"
    )
    assert out.exists()
    assert out.stat().st_size > 0


def _halo_radius(svg: str, name: str) -> float:
    tag = svg.split(f'fill="url(#glow-{name})"')[0].rsplit("<circle", 1)[1]
    return float(tag.split('r="')[1].split('"')[0])


def test_bloom_radius_widens_halos(scene: ClockScene, config: ClockConfig) -> None:
    renderer = SvgRenderer()
    loop = _advance(scene, config, renderer)
    tight = _halo_radius(renderer.last_frame, "saturn")
    renderer.composer.bloom.radius = 1.0
    loop.renderer.render(scene, loop.camera)
    assert _halo_radius(renderer.last_frame, "saturn") > tight


def test_bloom_threshold_limits_halos_to_bright_bodies(
    scene: ClockScene, config: ClockConfig
) -> None:
    renderer = SvgRenderer()
    renderer.composer.bloom.threshold = 0.5
    _advance(scene, config, renderer)
    svg = renderer.last_frame
    assert 'fill="url(#glow-sun)"' in svg
    assert 'fill="url(#glow-saturn)"' not in svg
    assert 'fill="url(#glow-earth)"' not in svg


def test_svg_shading_comes_from_scene_lights(scene: ClockScene, config: ClockConfig) -> None:
    renderer = SvgRenderer()
    loop = _advance(scene, config, renderer)
    lit_frame = renderer.last_frame
    scene.lights = [Light(kind="ambient", color=0x333333)]
    loop.renderer.render(scene, loop.camera)
    assert renderer.last_frame != lit_frame
    assert 'id="shine-saturn"' in renderer.last_frame


def test_plotly_threshold_drops_dim_halos(scene: ClockScene, config: ClockConfig) -> None:
    _advance(scene, config)
    bright_only = render_plotly_scene(
        scene, PerspectiveCamera(), bloom=BloomPass(threshold=10.0)
    )
    everything = render_plotly_scene(scene, PerspectiveCamera(), bloom=BloomPass())
    assert len(everything.data) - len(bright_only.data) == len(scene.bodies)
