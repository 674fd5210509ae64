"""Texture loading. A missing or unreadable image degrades visuals, never layout."""

import logging
from dataclasses import dataclass
from pathlib import Path

import matplotlib.image as mpimg
import numpy as np

logger = logging.getLogger(__name__)

_ROOT = Path(__file__).parent.parent.parent


@dataclass(frozen=True, eq=False)
class Texture:
    """Opaque texture handle. `pixels` is None when loading failed."""

    path: Path
    pixels: np.ndarray | None = None
    rotation: float = 0.0  # Cosmetic UV rotation (radians)

    @property
    def loaded(self) -> bool:
        return self.pixels is not None

    def mean_color(self) -> tuple[float, float, float] | None:
        """Average RGB in [0, 1], used by renderers that cannot map images."""
        if self.pixels is None:
            return None
        rgb = np.asarray(self.pixels, dtype=float)[..., :3]
        if rgb.max(initial=0.0) > 1.0:
            rgb = rgb / 255.0
        r, g, b = rgb.reshape(-1, 3).mean(axis=0)
        return float(r), float(g), float(b)


class TextureLoader:
    """Load images relative to a texture directory.

    Args:
        base_dir: Directory containing the texture files. Relative paths are
            resolved against the project root.
    """

    def __init__(self, base_dir: str | Path = "resources/textures"):
        base = Path(base_dir)
        self.base_dir = base if base.is_absolute() else _ROOT / base

    def load(self, name: str, rotation: float = 0.0) -> Texture:
        path = self.base_dir / name
        try:
            pixels = mpimg.imread(path)
        except (OSError, ValueError) as e:
            logger.warning("Texture unavailable: %s (%s)", path, e)
            return Texture(path=path, rotation=rotation)
        return Texture(path=path, pixels=pixels, rotation=rotation)
