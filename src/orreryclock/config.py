"""Runtime settings read from the environment (.env is loaded by the entry points)."""

import logging
import os
from dataclasses import dataclass

from orreryclock.weather import DEFAULT_WEATHER_URL


@dataclass(frozen=True)
class Settings:
    """Environment variables:

    ORRERY_WEATHER_URL — forecast API root
    ORRERY_FRAME_INTERVAL — seconds between frame ticks in the app
    ORRERY_TEXTURE_DIR — texture directory, relative to the project root
    ORRERY_LOG_LEVEL — logging level name
    ORRERY_SEED — starfield seed; random when unset
    """

    weather_url: str = DEFAULT_WEATHER_URL
    frame_interval: float = 0.1
    texture_dir: str = "resources/textures"
    log_level: str = "INFO"
    seed: int | None = None

    @classmethod
    def from_env(cls) -> "Settings":
        seed = os.environ.get("ORRERY_SEED")
        return cls(
            weather_url=os.environ.get("ORRERY_WEATHER_URL", DEFAULT_WEATHER_URL),
            frame_interval=float(os.environ.get("ORRERY_FRAME_INTERVAL", "0.1")),
            texture_dir=os.environ.get("ORRERY_TEXTURE_DIR", "resources/textures"),
            log_level=os.environ.get("ORRERY_LOG_LEVEL", "INFO").upper(),
            seed=int(seed) if seed else None,
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
