"""SVG renderer with a glow (bloom) pass.

Produces a self-contained <svg> string for embedding via st.markdown().
World points go through the camera's perspective projection; pixel space
has its origin at the top-left corner, y pointing down.

Bloom is approximated with shared radialGradient halos drawn under each
body. Halo size and opacity scale with the composer's bloom strength.
"""

from __future__ import annotations

import numpy as np

from orreryclock.renderers.composer import BloomPass, EffectComposer
from orreryclock.scene import (
    CelestialBody,
    ClockScene,
    Light,
    PerspectiveCamera,
    Ring,
    hex_to_rgb,
)

_BG = "#000000"
_MIN_STAR_OPACITY = 0.03


def _hex(rgb: tuple[float, float, float]) -> str:
    r, g, b = (max(0, min(255, round(c * 255))) for c in rgb)
    return f"#{r:02x}{g:02x}{b:02x}"


class SvgRenderer:
    """Render a ClockScene as an SVG frame.

    Args:
        width: Viewport width in pixels.
        height: Viewport height in pixels.
    """

    def __init__(self, width: int = 1280, height: int = 720):
        self.width = width
        self.height = height
        self.composer = EffectComposer(width=width, height=height)
        self.last_frame: str = ""

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.composer.set_size(width, height)

    def _to_pixels(self, ndc: np.ndarray) -> np.ndarray:
        px = (ndc[:, 0] + 1) / 2 * self.width
        py = (1 - ndc[:, 1]) / 2 * self.height
        return np.column_stack([px, py])

    def _pixel_scale(self, camera: PerspectiveCamera, depth: np.ndarray) -> np.ndarray:
        """Pixels per world unit at a given view depth."""
        f = camera.projection_matrix[1, 1]
        return f / np.maximum(depth, camera.near) * self.height / 2

    def _fog(self, scene: ClockScene, depth: np.ndarray) -> np.ndarray:
        if scene.fog is None:
            return np.ones_like(depth)
        return scene.fog.factor(depth)

    def _stars_svg(self, scene: ClockScene, camera: PerspectiveCamera) -> list[str]:
        field = scene.starfield
        if field is None or len(field.points) == 0:
            return []
        ndc, depth = camera.project(field.to_world(field.points))
        on_screen = (depth > camera.near) & (np.abs(ndc) <= 1.0).all(axis=1)
        xy = self._to_pixels(ndc[on_screen])
        radius = np.maximum(
            field.point_size * self._pixel_scale(camera, depth[on_screen]) / 2, 0.4
        )
        opacity = self._fog(scene, depth[on_screen])
        color = _hex(hex_to_rgb(field.color))
        parts = []
        for (x, y), r, op in zip(xy, radius, opacity):
            if op < _MIN_STAR_OPACITY:
                continue
            parts.append(
                f'<circle cx="{x:.1f}" cy="{y:.1f}" r="{r:.2f}" fill="{color}"'
                f' opacity="{op:.2f}"/>'
            )
        return parts

    def _orbits_svg(self, scene: ClockScene, camera: PerspectiveCamera) -> list[str]:
        parts = []
        for guide in scene.orbit_guides:
            ndc, depth = camera.project(guide.to_world(guide.points))
            if (depth <= camera.near).any():
                continue
            xy = self._to_pixels(ndc)
            points = " ".join(f"{x:.1f},{y:.1f}" for x, y in xy)
            opacity = guide.opacity * float(self._fog(scene, depth).mean())
            parts.append(
                f'<polyline points="{points}" fill="none"'
                f' stroke="{_hex(hex_to_rgb(guide.color))}" stroke-width="1"'
                f' stroke-opacity="{opacity:.3f}"/>'
            )
        return parts

    def _ring_quads(
        self, ring: Ring, camera: PerspectiveCamera
    ) -> list[tuple[float, str]]:
        inner, outer = ring.outline()
        ndc_in, d_in = camera.project(ring.to_world(inner))
        ndc_out, d_out = camera.project(ring.to_world(outer))
        xy_in, xy_out = self._to_pixels(ndc_in), self._to_pixels(ndc_out)
        color = _hex(ring.material.rgb())
        quads = []
        for i in range(ring.segments):
            pts = (xy_in[i], xy_out[i], xy_out[i + 1], xy_in[i + 1])
            depth = float((d_in[i] + d_in[i + 1] + d_out[i] + d_out[i + 1]) / 4)
            path = " ".join(f"{x:.1f},{y:.1f}" for x, y in pts)
            quads.append(
                (
                    depth,
                    f'<polygon points="{path}" fill="{color}"'
                    f' fill-opacity="{ring.material.opacity * 0.6:.2f}"/>',
                )
            )
        return quads

    def _body_svg(
        self,
        body: CelestialBody,
        center: np.ndarray,
        radius: float,
        sun_xy: np.ndarray | None,
        lights: list[Light],
        bloom: BloomPass,
    ) -> tuple[str, str]:
        """Return (gradient defs, shapes) for one body."""
        mat = body.material
        lit, dark = mat.shaded(lights, body.world_position())
        glow_rgb = lit if mat.unlit else hex_to_rgb(mat.emissive)
        brightness = 1.0 if mat.unlit else min(1.0, 0.35 + mat.emissive_intensity)
        halo_r = radius * bloom.halo_scale()
        halo_op = min(1.0, 0.3 * bloom.strength) * brightness
        # Smooth surfaces get a tight, strong highlight.
        shine = 0.5 * (1.0 - mat.roughness)

        # Lit side faces the sun; unlit bodies are flat.
        fx, fy = 50.0, 50.0
        if not mat.unlit and sun_xy is not None:
            d = sun_xy - center
            n = float(np.hypot(*d)) or 1.0
            fx, fy = 50 + 30 * d[0] / n, 50 + 30 * d[1] / n

        gid = body.name
        defs = (
            f'<radialGradient id="glow-{gid}" cx="50%" cy="50%" r="50%">'
            f'<stop offset="0%" stop-color="{_hex(glow_rgb)}" stop-opacity="{halo_op:.2f}"/>'
            f'<stop offset="45%" stop-color="{_hex(glow_rgb)}" stop-opacity="{halo_op * 0.3:.2f}"/>'
            f'<stop offset="100%" stop-color="{_hex(glow_rgb)}" stop-opacity="0"/>'
            f"</radialGradient>"
            f'<radialGradient id="body-{gid}" cx="{fx:.0f}%" cy="{fy:.0f}%" r="75%">'
            f'<stop offset="0%" stop-color="{_hex(lit)}"/>'
            f'<stop offset="100%" stop-color="{_hex(dark)}"/>'
            f"</radialGradient>"
            f'<radialGradient id="shine-{gid}" cx="{fx:.0f}%" cy="{fy:.0f}%" r="{20 + 40 * mat.roughness:.0f}%">'
            f'<stop offset="0%" stop-color="#ffffff" stop-opacity="{shine:.2f}"/>'
            f'<stop offset="100%" stop-color="#ffffff" stop-opacity="0"/>'
            f"</radialGradient>"
        )
        x, y = center
        shapes = ""
        if bloom.glows(glow_rgb):
            shapes += (
                f'<circle cx="{x:.1f}" cy="{y:.1f}" r="{halo_r:.1f}"'
                f' fill="url(#glow-{gid})"/>'
            )
        shapes += (
            f'<circle cx="{x:.1f}" cy="{y:.1f}" r="{radius:.1f}"'
            f' fill="url(#body-{gid})"/>'
        )
        if shine > 0 and not mat.unlit:
            shapes += (
                f'<circle cx="{x:.1f}" cy="{y:.1f}" r="{radius:.1f}"'
                f' fill="url(#shine-{gid})"/>'
            )
        return defs, shapes

    def render(self, scene: ClockScene, camera: PerspectiveCamera) -> str:
        """Draw the current scene state and return the SVG markup.

        Args:
            scene: Scene graph to draw.
            camera: Camera whose aspect should match width / height.

        Returns:
            SVG string. Also kept in `last_frame`.
        """
        defs: list[str] = []
        layered: list[tuple[float, str]] = []

        sun = scene.bodies.get("sun")
        sun_xy = None
        if sun is not None:
            ndc, _ = camera.project(sun.world_position()[None, :])
            sun_xy = self._to_pixels(ndc)[0]

        for body in scene.bodies.values():
            ndc, depth = camera.project(body.world_position()[None, :])
            if depth[0] <= camera.near:
                continue
            center = self._to_pixels(ndc)[0]
            radius = float(body.size * self._pixel_scale(camera, depth)[0])
            body_defs, shapes = self._body_svg(
                body, center, radius, sun_xy, scene.lights, self.composer.bloom
            )
            defs.append(body_defs)
            layered.append((float(depth[0]), shapes))

        if scene.ring is not None:
            layered.extend(self._ring_quads(scene.ring, camera))

        # Painter's order: farthest first.
        layered.sort(key=lambda item: item[0], reverse=True)

        stars_svg = "\n  ".join(self._stars_svg(scene, camera))
        orbits_svg = "\n  ".join(self._orbits_svg(scene, camera))
        bodies_svg = "\n  ".join(shape for _, shape in layered)
        defs_svg = "\n    ".join(defs)

        self.last_frame = f"""<svg xmlns="http://www.w3.org/2000/svg" width="{self.width}" height="{self.height}" viewBox="0 0 {self.width} {self.height}">
  <defs>
    {defs_svg}
  </defs>
  <rect x="0" y="0" width="{self.width}" height="{self.height}" fill="{_BG}"/>
  <g id="stars">
  {stars_svg}
  </g>
  <g id="orbits">
  {orbits_svg}
  </g>
  <g id="bodies">
  {bodies_svg}
  </g>
</svg>"""
        return self.last_frame
