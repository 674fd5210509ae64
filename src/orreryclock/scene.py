"""Scene graph: nodes with parent-relative transforms, the camera, and the one-time clock scene builder."""

import math
from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np

from orreryclock.assets import Texture, TextureLoader
from orreryclock.models import ORBITING_ROLES, BodyRole, ClockConfig


def _rotation_matrix(rx: float, ry: float, rz: float) -> np.ndarray:
    """Euler XYZ rotation (intrinsic), as a 3x3 matrix."""
    cx, sx = math.cos(rx), math.sin(rx)
    cy, sy = math.cos(ry), math.sin(ry)
    cz, sz = math.cos(rz), math.sin(rz)
    mx = np.array([[1, 0, 0], [0, cx, -sx], [0, sx, cx]])
    my = np.array([[cy, 0, sy], [0, 1, 0], [-sy, 0, cy]])
    mz = np.array([[cz, -sz, 0], [sz, cz, 0], [0, 0, 1]])
    return mx @ my @ mz


@dataclass(frozen=True)
class Material:
    """Surface appearance. Colours are 0xRRGGBB integers."""

    color: int = 0xFFFFFF  # Multiplies the texture
    placeholder: int | None = None  # Stands in for a texture that did not load
    emissive: int = 0x000000
    emissive_intensity: float = 0.0
    roughness: float = 1.0
    metalness: float = 0.0
    opacity: float = 1.0
    texture: Texture | None = None
    unlit: bool = False  # Ignores lights (sun)

    def rgb(self) -> tuple[float, float, float]:
        """Base colour in [0, 1]: the texture tinted by `color`, else the placeholder."""
        base = hex_to_rgb(self.color)
        tex = self.texture.mean_color() if self.texture is not None else None
        if tex is None:
            return hex_to_rgb(self.placeholder) if self.placeholder is not None else base
        return (base[0] * tex[0], base[1] * tex[1], base[2] * tex[2])

    def shaded(
        self, lights: Sequence["Light"], position: np.ndarray
    ) -> tuple[tuple[float, float, float], tuple[float, float, float]]:
        """Colours of the side facing the point lights and the side facing away.

        Ambient light reaches both sides; point light only the lit side, cut
        by metalness. Emissive colour is added to both. Unlit materials return
        their base colour twice.

        Args:
            lights: Scene lights.
            position: World position of the surface.

        Returns:
            (lit, dark) RGB tuples in [0, 1].
        """
        base = np.array(self.rgb())
        if self.unlit:
            flat = tuple(float(c) for c in base)
            return flat, flat
        ambient = np.zeros(3)
        direct = np.zeros(3)
        for light in lights:
            rgb = np.array(hex_to_rgb(light.color)) * light.intensity
            if light.kind == "ambient":
                ambient += rgb
            elif light.kind == "point":
                direct += rgb * light.attenuation(position)
        glow = np.array(hex_to_rgb(self.emissive)) * self.emissive_intensity
        dark = np.clip(base * ambient + glow, 0.0, 1.0)
        lit = np.clip(base * (ambient + direct * (1.0 - self.metalness)) + glow, 0.0, 1.0)
        return tuple(float(c) for c in lit), tuple(float(c) for c in dark)


def hex_to_rgb(value: int) -> tuple[float, float, float]:
    return (
        ((value >> 16) & 0xFF) / 255,
        ((value >> 8) & 0xFF) / 255,
        (value & 0xFF) / 255,
    )


@dataclass(eq=False)
class SceneNode:
    """A transform in the scene tree. Child transforms are relative to the parent."""

    name: str
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    rotation: np.ndarray = field(default_factory=lambda: np.zeros(3))
    children: list["SceneNode"] = field(default_factory=list)
    parent: "SceneNode | None" = field(default=None, repr=False)

    def add(self, child: "SceneNode") -> "SceneNode":
        if child.parent is not None:
            child.parent.children.remove(child)
        child.parent = self
        self.children.append(child)
        return child

    def local_matrix(self) -> np.ndarray:
        m = np.eye(4)
        m[:3, :3] = _rotation_matrix(*self.rotation)
        m[:3, 3] = self.position
        return m

    def world_matrix(self) -> np.ndarray:
        if self.parent is None:
            return self.local_matrix()
        return self.parent.world_matrix() @ self.local_matrix()

    def world_position(self) -> np.ndarray:
        return self.world_matrix()[:3, 3]

    def to_world(self, points: np.ndarray) -> np.ndarray:
        """Transform an (N, 3) array of local points into world space."""
        m = self.world_matrix()
        return points @ m[:3, :3].T + m[:3, 3]


@dataclass(eq=False)
class CelestialBody(SceneNode):
    role: BodyRole = "sun"
    size: float = 1.0
    material: Material = field(default_factory=Material)


@dataclass(eq=False)
class Ring(SceneNode):
    """Flat annulus in the node's local xy plane."""

    inner_radius: float = 1.0
    outer_radius: float = 2.0
    segments: int = 64
    material: Material = field(default_factory=Material)

    def outline(self) -> tuple[np.ndarray, np.ndarray]:
        """Inner and outer edge loops as (segments + 1, 3) local points."""
        theta = np.linspace(0.0, 2 * math.pi, self.segments + 1)
        unit = np.column_stack([np.cos(theta), np.sin(theta), np.zeros_like(theta)])
        return unit * self.inner_radius, unit * self.outer_radius


@dataclass(eq=False)
class OrbitGuide(SceneNode):
    radius: float = 1.0
    points: np.ndarray = field(default_factory=lambda: np.zeros((0, 3)))
    color: int = 0xFFFFFF
    opacity: float = 0.15


@dataclass(eq=False)
class Starfield(SceneNode):
    points: np.ndarray = field(default_factory=lambda: np.zeros((0, 3)))
    color: int = 0xFFFFFF
    point_size: float = 0.15


@dataclass(frozen=True)
class Fog:
    """Exponential-squared fog: visibility = exp(-(density * distance)^2)."""

    color: int = 0x000000
    density: float = 0.02

    def factor(self, distance: np.ndarray | float) -> np.ndarray:
        return np.exp(-((self.density * np.asarray(distance)) ** 2))


@dataclass(frozen=True)
class Light:
    kind: str  # "ambient" | "point"
    color: int
    intensity: float = 1.0
    distance: float = 0.0  # Range of a point light; 0 means unlimited
    position: tuple[float, float, float] = (0.0, 0.0, 0.0)

    def attenuation(self, point: np.ndarray) -> float:
        """Fraction of the intensity that reaches `point`. Linear falloff to `distance`."""
        if self.kind != "point" or self.distance <= 0:
            return 1.0
        d = float(np.linalg.norm(np.asarray(point) - np.asarray(self.position)))
        return max(0.0, 1.0 - d / self.distance)


@dataclass
class PerspectiveCamera:
    fov: float = 60.0  # Vertical field of view (degrees)
    aspect: float = 16 / 9
    near: float = 0.1
    far: float = 1000.0
    position: np.ndarray = field(default_factory=lambda: np.array([0.0, 30.0, 40.0]))
    target: np.ndarray = field(default_factory=lambda: np.zeros(3))
    projection_matrix: np.ndarray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.update_projection_matrix()

    def update_projection_matrix(self) -> None:
        f = 1.0 / math.tan(math.radians(self.fov) / 2)
        n, fa = self.near, self.far
        self.projection_matrix = np.array(
            [
                [f / self.aspect, 0, 0, 0],
                [0, f, 0, 0],
                [0, 0, (fa + n) / (n - fa), 2 * fa * n / (n - fa)],
                [0, 0, -1, 0],
            ]
        )

    def view_matrix(self) -> np.ndarray:
        forward = self.target - self.position
        forward = forward / np.linalg.norm(forward)
        right = np.cross(forward, np.array([0.0, 1.0, 0.0]))
        right = right / np.linalg.norm(right)
        up = np.cross(right, forward)
        m = np.eye(4)
        m[0, :3], m[1, :3], m[2, :3] = right, up, -forward
        m[:3, 3] = -m[:3, :3] @ self.position
        return m

    def project(self, points: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """Project (N, 3) world points to normalised device coordinates.

        Returns:
            (ndc, depth): ndc is (N, 2) in [-1, 1] when on screen; depth is the
            view-space distance along the viewing direction (positive in front).
        """
        homo = np.column_stack([points, np.ones(len(points))])
        view = homo @ self.view_matrix().T
        clip = view @ self.projection_matrix.T
        w = clip[:, 3:4]
        w = np.where(np.abs(w) < 1e-9, 1e-9, w)
        return clip[:, :2] / w, -view[:, 2]


@dataclass(eq=False)
class ClockScene:
    """Root of the clock scene plus direct handles to the nodes the loop animates."""

    root: SceneNode = field(default_factory=lambda: SceneNode(name="scene"))
    bodies: dict[BodyRole, CelestialBody] = field(default_factory=dict)
    ring: Ring | None = None
    orbit_guides: list[OrbitGuide] = field(default_factory=list)
    starfield: Starfield | None = None
    lights: list[Light] = field(default_factory=list)
    fog: Fog | None = None

    def add(self, node: SceneNode) -> SceneNode:
        return self.root.add(node)


def orbit_guide_points(radius: float, segments: int) -> np.ndarray:
    """Closed circle of `segments` segments in the y=0 plane."""
    theta = np.arange(segments + 1) / segments * math.pi * 2
    return np.column_stack(
        [np.cos(theta) * radius, np.zeros_like(theta), np.sin(theta) * radius]
    )


def starfield_points(
    count: int, spread: float, rng: np.random.Generator
) -> np.ndarray:
    """`count` points uniform in a cube of side `spread` centred at the origin."""
    return rng.uniform(-spread / 2, spread / 2, size=(count, 3))


_BODY_LOOKS: dict[BodyRole, tuple[str, str, Material]] = {
    "second": (
        "earth",
        "earth_diffuse.jpg",
        Material(
            placeholder=0x6B93D6,
            roughness=0.5,
            metalness=0.1,
            emissive=0x112244,
            emissive_intensity=0.2,
        ),
    ),
    "minute": (
        "mars",
        "mars.jpg",
        Material(
            placeholder=0xC1440E,
            roughness=0.7,
            metalness=0.1,
            emissive=0x441100,
            emissive_intensity=0.2,
        ),
    ),
    "hour": (
        "saturn",
        "saturn.jpg",
        Material(
            placeholder=0xE3C07B,
            roughness=0.4,
            metalness=0.2,
            emissive=0x332200,
            emissive_intensity=0.15,
        ),
    ),
}


def build_scene(
    config: ClockConfig,
    textures: TextureLoader | None = None,
    rng: np.random.Generator | None = None,
) -> ClockScene:
    """Construct the static clock scene once.

    Args:
        config: Radii, sizes, and counts.
        textures: Texture source. A failed load leaves the material untextured.
        rng: Random source for the starfield. A fresh default generator if None.

    Returns:
        ClockScene with sun, three orbiting bodies, the hour ring, orbit guides,
        starfield, lights, and fog.
    """
    textures = textures or TextureLoader()
    rng = rng or np.random.default_rng()
    scene = ClockScene(fog=Fog())

    scene.lights = [
        Light(kind="ambient", color=0x333333),
        Light(kind="point", color=0xFFFFFF, intensity=2.0, distance=100.0),
    ]

    sun = CelestialBody(
        name="sun",
        role="sun",
        size=config.body_size["sun"],
        material=Material(
            color=0xFFDDAA, texture=textures.load("sun.jpg"), unlit=True
        ),
    )
    scene.add(sun)
    scene.bodies["sun"] = sun

    for role in ORBITING_ROLES:
        name, texture_file, look = _BODY_LOOKS[role]
        material = Material(
            placeholder=look.placeholder,
            emissive=look.emissive,
            emissive_intensity=look.emissive_intensity,
            roughness=look.roughness,
            metalness=look.metalness,
            texture=textures.load(texture_file),
        )
        body = CelestialBody(
            name=name, role=role, size=config.body_size[role], material=material
        )
        scene.add(body)
        scene.bodies[role] = body

    # Quarter turn about x lays the ring in the hour body's orbital plane.
    ring = Ring(
        name="saturn_ring",
        rotation=np.array([math.pi / 2, 0.0, 0.0]),
        inner_radius=config.ring_inner,
        outer_radius=config.ring_outer,
        segments=config.ring_segments,
        material=Material(
            placeholder=0xD8C9A3,
            opacity=0.9,
            texture=textures.load("saturn_ring.png", rotation=math.pi / 2),
        ),
    )
    scene.bodies["hour"].add(ring)
    scene.ring = ring

    for role in ("second", "minute", "hour"):
        radius = config.orbit_radius[role]
        guide = OrbitGuide(
            name=f"orbit_{role}",
            radius=radius,
            points=orbit_guide_points(radius, config.orbit_segments),
        )
        scene.add(guide)
        scene.orbit_guides.append(guide)

    starfield = Starfield(
        name="starfield",
        points=starfield_points(config.star_count, config.star_spread, rng),
    )
    scene.add(starfield)
    scene.starfield = starfield

    return scene
