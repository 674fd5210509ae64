"""Frame update loop: one synchronous tick per display refresh."""

import logging
from collections.abc import Callable
from datetime import datetime

from orreryclock.clock import angles_at, format_readout, orbit_position
from orreryclock.models import (
    ORBITING_ROLES,
    ClockConfig,
    DigitalReadout,
    SimulationState,
)
from orreryclock.renderers.composer import Renderer
from orreryclock.scene import ClockScene, PerspectiveCamera

logger = logging.getLogger(__name__)


class FrameLoop:
    """Advance the scene to the current wall-clock time and hand it to the renderer.

    Orbital position is a pure function of the time sample. Spin accumulates
    per tick and is the only thing the speed multiplier touches.

    Args:
        scene: Scene graph built by build_scene(). Bodies may be missing.
        config: Radii, spin speeds, tilt, and starfield drift.
        state: Shared state written by the control bridge.
        renderer: Rendering collaborator; None skips drawing.
        camera: Viewpoint passed to the renderer.
        display: Receives the digital readout each tick.
        clock: Wall-clock source, sampled once per tick.
    """

    def __init__(
        self,
        scene: ClockScene,
        config: ClockConfig,
        state: SimulationState,
        renderer: Renderer | None = None,
        camera: PerspectiveCamera | None = None,
        display: Callable[[DigitalReadout], None] | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.scene = scene
        self.config = config
        self.state = state
        self.renderer = renderer
        self.camera = camera or PerspectiveCamera()
        self.display = display
        self.clock = clock
        self.frame_count = 0
        self.readout: DigitalReadout | None = None

    def tick(self) -> DigitalReadout:
        """Run one frame. Never raises on renderer or display failures."""
        now = self.clock()
        angles = angles_at(now)
        speed = self.state.speed
        bodies = self.scene.bodies

        for role in ORBITING_ROLES:
            body = bodies.get(role)
            if body is None:
                continue
            x, z = orbit_position(angles.for_role(role), self.config.orbit_radius[role])
            body.position[0] = x
            body.position[2] = z
            body.rotation[1] += self.config.spin_speed[role] * speed

        hour = bodies.get("hour")
        if hour is not None:
            hour.rotation[2] = self.config.axial_tilt

        sun = bodies.get("sun")
        if sun is not None:
            sun.rotation[1] += self.config.spin_speed["sun"]

        if self.scene.starfield is not None:
            self.scene.starfield.rotation[1] -= self.config.starfield_drift

        self.readout = format_readout(now, self.state.is_24_hour)
        if self.display is not None:
            try:
                self.display(self.readout)
            except Exception:
                logger.exception("Digital display update failed")

        if self.renderer is not None:
            try:
                self.renderer.render(self.scene, self.camera)
            except Exception:
                logger.exception("Render failed on frame %d", self.frame_count)

        self.frame_count += 1
        return self.readout

    def resize(self, width: int, height: int) -> None:
        """Reconfigure the viewport. Orbital and spin state are left untouched."""
        if width <= 0 or height <= 0:
            logger.debug("Ignoring degenerate viewport %dx%d", width, height)
            return
        self.camera.aspect = width / height
        self.camera.update_projection_matrix()
        if self.renderer is not None:
            self.renderer.resize(width, height)
