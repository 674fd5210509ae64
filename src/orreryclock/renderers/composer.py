"""Rendering collaborator contract and the bloom post-processing chain."""

from dataclasses import dataclass, field
from typing import Protocol

from orreryclock.scene import ClockScene, PerspectiveCamera


def luminance(rgb: tuple[float, float, float]) -> float:
    r, g, b = rgb
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


@dataclass
class BloomPass:
    """Glow halo added around emissive and bright objects.

    `radius` spreads the halo beyond the object; `threshold` is the luminance
    a colour must exceed to bloom at all.
    """

    strength: float = 1.5
    radius: float = 0.0
    threshold: float = 0.0
    width: int = 0
    height: int = 0

    def set_size(self, width: int, height: int) -> None:
        self.width = width
        self.height = height

    def glows(self, rgb: tuple[float, float, float]) -> bool:
        return self.strength > 0 and luminance(rgb) > self.threshold

    def halo_scale(self) -> float:
        """Halo radius as a multiple of the object radius."""
        return 1.4 + 0.6 * self.strength * (1.0 + self.radius)


@dataclass
class EffectComposer:
    """Post-processing chain that sits between the scene render and the screen."""

    width: int = 1280
    height: int = 720
    bloom: BloomPass = field(default_factory=BloomPass)

    def __post_init__(self) -> None:
        self.bloom.set_size(self.width, self.height)

    def set_size(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.bloom.set_size(width, height)


class Renderer(Protocol):
    """What the frame loop needs from a renderer."""

    composer: EffectComposer
    width: int
    height: int

    def render(self, scene: ClockScene, camera: PerspectiveCamera) -> object: ...

    def resize(self, width: int, height: int) -> None: ...
