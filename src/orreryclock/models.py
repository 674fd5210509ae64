"""Data model definitions — explicit boundaries between clock, scene, control, and render layers."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Literal

BodyRole = Literal["sun", "hour", "minute", "second"]
ORBITING_ROLES: tuple[BodyRole, ...] = ("hour", "minute", "second")


@dataclass(frozen=True)
class ClockConfig:
    """Orbit radii, body sizes, and spin speeds. Set once at startup."""

    orbit_radius: Mapping[BodyRole, float] = field(
        default_factory=lambda: {"hour": 18.0, "minute": 12.0, "second": 7.0}
    )
    body_size: Mapping[BodyRole, float] = field(
        default_factory=lambda: {"sun": 4.0, "hour": 1.2, "minute": 0.8, "second": 0.6}
    )
    spin_speed: Mapping[BodyRole, float] = field(
        default_factory=lambda: {
            "sun": 0.001,
            "hour": 0.005,
            "minute": 0.008,
            "second": 0.01,
        }
    )
    axial_tilt: float = 0.4  # Hour body tilt around z (radians)
    starfield_drift: float = 0.0002  # Starfield y-rotation decrement per frame
    star_count: int = 5000
    star_spread: float = 200.0  # Side of the cube the stars are spread in
    orbit_segments: int = 128
    ring_inner: float = 1.6
    ring_outer: float = 2.5
    ring_segments: int = 64

    def __post_init__(self) -> None:
        # Per-role tables are read-only views, shared by body placement and orbit guides.
        for name in ("orbit_radius", "body_size", "spin_speed"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))


@dataclass
class SimulationState:
    """Shared mutable state. Written by the control bridge, read by the frame loop."""

    speed: float = 1.0  # Spin multiplier; never applied to orbital position
    is_24_hour: bool = True
    bloom_strength: float = 1.5


@dataclass(frozen=True)
class ClockTime:
    """Fractional time-of-day components from a single wall-clock sample."""

    hours: float  # [0, 24), includes minutes / 60
    minutes: float  # [0, 60), includes seconds / 60
    seconds: float  # [0, 60), includes milliseconds / 1000


@dataclass(frozen=True)
class OrbitalAngles:
    """Orbital angle (radians) per orbiting body. π is the 12 o'clock position."""

    hour: float
    minute: float
    second: float

    def for_role(self, role: BodyRole) -> float:
        return getattr(self, role)


@dataclass(frozen=True)
class DigitalReadout:
    """Zero-padded text for the three digital clock fields."""

    hours: str
    minutes: str
    seconds: str

    def __str__(self) -> str:
        return f"{self.hours}:{self.minutes}:{self.seconds}"


@dataclass(frozen=True)
class Coordinates:
    """Observer position reported by a geolocator."""

    latitude: float  # Decimal degrees
    longitude: float  # Decimal degrees


@dataclass(frozen=True)
class WeatherReport:
    """Current weather at a location, as returned by the forecast API."""

    coordinates: Coordinates
    temperature: float  # °C
    weather_code: int  # WMO code
