"""Script entry point for a single clock frame saved as PNG.

Edit the `when` variable at the top, then run:
    uv run python src/orreryclock/snapshot.py
"""

from datetime import datetime

from dotenv import load_dotenv

load_dotenv()

import numpy as np  # noqa: E402

from orreryclock.assets import TextureLoader  # noqa: E402
from orreryclock.config import Settings, configure_logging  # noqa: E402
from orreryclock.loop import FrameLoop  # noqa: E402
from orreryclock.models import ClockConfig, SimulationState  # noqa: E402
from orreryclock.renderers.static import save_static_clock  # noqa: E402
from orreryclock.scene import build_scene  # noqa: E402

when = datetime(2024, 9, 18, 14, 5, 9)

settings = Settings.from_env()
configure_logging(settings.log_level)

config = ClockConfig()
scene = build_scene(
    config, TextureLoader(settings.texture_dir), np.random.default_rng(settings.seed)
)
loop = FrameLoop(scene, config, SimulationState(), clock=lambda: when)
readout = loop.tick()
path = save_static_clock(scene, loop.camera, when, readout=readout)
print(f"Saved: {path}")
