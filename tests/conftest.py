from __future__ import annotations

import matplotlib
import numpy as np
import pytest

matplotlib.use("Agg")

from orreryclock.assets import TextureLoader  # noqa: E402
from orreryclock.models import ClockConfig  # noqa: E402
from orreryclock.scene import ClockScene, build_scene  # noqa: E402


@pytest.fixture
def config() -> ClockConfig:
    return ClockConfig(star_count=200)


@pytest.fixture
def scene(config: ClockConfig, tmp_path) -> ClockScene:
    # Empty texture dir: every texture load degrades to an untextured material.
    return build_scene(config, TextureLoader(tmp_path), np.random.default_rng(7))
