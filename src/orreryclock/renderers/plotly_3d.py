"""Plotly 3D interactive clock renderer.

The scene is drawn in world coordinates, so Plotly's own camera controls
(drag to orbit, wheel to zoom) take the place of orbit controls.
"""

import plotly.graph_objects as go

from orreryclock.renderers.composer import BloomPass, EffectComposer
from orreryclock.scene import ClockScene, PerspectiveCamera, hex_to_rgb

_BG = "#000000"


def _rgba(rgb: tuple[float, float, float], alpha: float) -> str:
    r, g, b = (round(c * 255) for c in rgb)
    return f"rgba({r},{g},{b},{alpha:.2f})"


def render_plotly_scene(
    scene: ClockScene,
    camera: PerspectiveCamera,
    bloom: BloomPass | None = None,
    width: int = 1280,
    height: int = 720,
) -> go.Figure:
    """Render a ClockScene as a Plotly 3D figure.

    Bodies are scatter markers sized by body size and coloured by the scene
    lights; bloom adds a translucent halo marker behind each bright body.
    Orbit guides and the ring are line traces.

    Args:
        scene: Scene graph to draw.
        camera: Initial viewpoint.
        bloom: Halo settings. Defaults to BloomPass().
        width: Figure width in pixels.
        height: Figure height in pixels.

    Returns:
        Plotly Figure object.
    """
    bloom = bloom or BloomPass()
    traces: list[go.Scatter3d] = []

    if scene.starfield is not None:
        stars = scene.starfield.to_world(scene.starfield.points)
        traces.append(
            go.Scatter3d(
                x=stars[:, 0],
                y=stars[:, 2],
                z=stars[:, 1],
                mode="markers",
                marker=dict(size=1, color=_rgba(hex_to_rgb(scene.starfield.color), 0.6)),
                hoverinfo="skip",
                name="stars",
            )
        )

    # Orbit guides: single trace using None separators
    gx: list[float | None] = []
    gy: list[float | None] = []
    gz: list[float | None] = []
    for guide in scene.orbit_guides:
        pts = guide.to_world(guide.points)
        gx += list(pts[:, 0]) + [None]
        gy += list(pts[:, 2]) + [None]
        gz += list(pts[:, 1]) + [None]
    if gx:
        traces.append(
            go.Scatter3d(
                x=gx,
                y=gy,
                z=gz,
                mode="lines",
                line=dict(color=_rgba((1.0, 1.0, 1.0), 0.15), width=2),
                hoverinfo="skip",
                name="orbits",
            )
        )

    if scene.ring is not None:
        rx: list[float | None] = []
        ry: list[float | None] = []
        rz: list[float | None] = []
        for loop in scene.ring.outline():
            pts = scene.ring.to_world(loop)
            rx += list(pts[:, 0]) + [None]
            ry += list(pts[:, 2]) + [None]
            rz += list(pts[:, 1]) + [None]
        traces.append(
            go.Scatter3d(
                x=rx,
                y=ry,
                z=rz,
                mode="lines",
                line=dict(
                    color=_rgba(scene.ring.material.rgb(), scene.ring.material.opacity),
                    width=3,
                ),
                hoverinfo="skip",
                name="ring",
            )
        )

    for body in scene.bodies.values():
        x, y, z = body.world_position()
        rgb, _ = body.material.shaded(scene.lights, body.world_position())
        size = 6 + body.size * 6
        if bloom.glows(rgb):
            traces.append(
                go.Scatter3d(
                    x=[x],
                    y=[z],
                    z=[y],
                    mode="markers",
                    marker=dict(
                        size=size * bloom.halo_scale(),
                        color=_rgba(rgb, min(1.0, 0.15 * bloom.strength)),
                        line=dict(width=0),
                    ),
                    hoverinfo="skip",
                    showlegend=False,
                )
            )
        traces.append(
            go.Scatter3d(
                x=[x],
                y=[z],
                z=[y],
                mode="markers",
                marker=dict(size=size, color=_rgba(rgb, 1.0), line=dict(width=0)),
                name=body.name,
                hovertemplate=f"{body.name} ({body.role})<extra></extra>",
            )
        )

    fig = go.Figure(data=traces)

    # Plotly's z axis is up; world y is up, so y and z are swapped throughout.
    eye = camera.position / 40.0
    axis = dict(visible=False, showbackground=False)
    fig.update_layout(
        paper_bgcolor=_BG,
        plot_bgcolor=_BG,
        showlegend=False,
        margin=dict(l=0, r=0, t=0, b=0),
        width=width,
        height=height,
        # Keeps the user's orbit/zoom across per-frame figure updates.
        uirevision="orrery",
        scene=dict(
            xaxis=axis,
            yaxis=axis,
            zaxis=axis,
            aspectmode="data",
            camera=dict(
                eye=dict(x=float(eye[0]), y=float(eye[2]), z=float(eye[1])),
                projection=dict(type="perspective"),
            ),
        ),
    )
    return fig


class PlotlyRenderer:
    """Renderer adapter that keeps the latest Plotly figure."""

    def __init__(self, width: int = 1280, height: int = 720):
        self.width = width
        self.height = height
        self.composer = EffectComposer(width=width, height=height)
        self.last_frame: go.Figure | None = None

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.composer.set_size(width, height)

    def render(self, scene: ClockScene, camera: PerspectiveCamera) -> go.Figure:
        self.last_frame = render_plotly_scene(
            scene,
            camera,
            bloom=self.composer.bloom,
            width=self.width,
            height=self.height,
        )
        return self.last_frame

