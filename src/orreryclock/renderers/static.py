"""Matplotlib static PNG renderer."""

from datetime import datetime
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.figure import Figure

from orreryclock.models import DigitalReadout
from orreryclock.renderers.composer import BloomPass
from orreryclock.scene import ClockScene, PerspectiveCamera, hex_to_rgb

_ROOT = Path(__file__).parent.parent.parent.parent


def render_static_clock(
    scene: ClockScene,
    camera: PerspectiveCamera,
    readout: DigitalReadout | None = None,
    bloom: BloomPass | None = None,
    chart_size: int = 10,
) -> Figure:
    """Render the current scene state as a static matplotlib image.

    Args:
        scene: Scene graph to draw.
        camera: Viewpoint; aspect is taken from the figure shape.
        readout: Optional digital time drawn along the bottom edge.
        bloom: Halo settings around bodies. Defaults to BloomPass().
        chart_size: Output image width in inches.

    Returns:
        matplotlib Figure object.
    """
    bloom = bloom or BloomPass()
    fig, ax = plt.subplots(figsize=(chart_size, chart_size / camera.aspect))
    fig.patch.set_facecolor("black")
    ax.set_facecolor("black")
    f = camera.projection_matrix[1, 1]

    if scene.starfield is not None:
        ndc, depth = camera.project(scene.starfield.to_world(scene.starfield.points))
        front = depth > camera.near
        alpha = scene.fog.factor(depth[front]) if scene.fog is not None else 1.0
        colors = np.zeros((int(front.sum()), 4))
        colors[:, :3] = hex_to_rgb(scene.starfield.color)
        colors[:, 3] = alpha
        ax.scatter(ndc[front, 0], ndc[front, 1], s=0.5, c=colors, linewidths=0, zorder=1)

    for guide in scene.orbit_guides:
        ndc, _ = camera.project(guide.to_world(guide.points))
        ax.plot(ndc[:, 0], ndc[:, 1], color="white", alpha=guide.opacity, lw=0.8, zorder=2)

    if scene.ring is not None:
        for loop in scene.ring.outline():
            ndc, _ = camera.project(scene.ring.to_world(loop))
            ax.plot(
                ndc[:, 0], ndc[:, 1], color=scene.ring.material.rgb(), alpha=0.7, lw=1, zorder=4
            )

    # Points per NDC unit, for sizing bodies by their projected radius.
    pts_per_ndc = fig.get_figwidth() * 72 / 2
    for body in sorted(
        scene.bodies.values(), key=lambda b: -camera.project(b.world_position()[None, :])[1][0]
    ):
        ndc, depth = camera.project(body.world_position()[None, :])
        r = body.size * f / depth[0] / camera.aspect * pts_per_ndc
        rgb, _ = body.material.shaded(scene.lights, body.world_position())
        if bloom.glows(rgb):
            ax.scatter(
                ndc[:, 0],
                ndc[:, 1],
                s=(r * bloom.halo_scale()) ** 2,
                color=rgb,
                alpha=min(1.0, 0.25 * bloom.strength),
                linewidths=0,
                zorder=3,
            )
        ax.scatter(ndc[:, 0], ndc[:, 1], s=r**2, color=rgb, linewidths=0, zorder=3)

    if readout is not None:
        ax.text(0, -0.9, str(readout), color="white", ha="center", fontsize=24, zorder=5)

    ax.set_xlim(-1, 1)
    ax.set_ylim(-1, 1)
    ax.axis("off")
    fig.subplots_adjust(0, 0, 1, 1)

    return fig


def save_static_clock(
    scene: ClockScene,
    camera: PerspectiveCamera,
    when: datetime,
    readout: DigitalReadout | None = None,
    output_path: Path | None = None,
) -> Path:
    """Save the current scene state as a PNG file.

    Args:
        scene: Scene graph to draw.
        camera: Viewpoint.
        when: Time the frame shows, used for the default file name.
        readout: Optional digital time overlay.
        output_path: Destination path. Auto-generated under results/ if None.

    Returns:
        Path to the saved file.
    """
    if output_path is None:
        filename = f"orrery__{when.strftime('%Y_%m_%d_%H_%M_%S')}.png"
        output_path = _ROOT / "results" / filename

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig = render_static_clock(scene, camera, readout=readout)
    fig.savefig(output_path, facecolor="black")
    plt.close(fig)
    return output_path
