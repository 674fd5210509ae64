from __future__ import annotations

import math
from datetime import datetime, timedelta

import pytest

from orreryclock.clock import (
    angles_at,
    compute_angles,
    format_readout,
    orbit_position,
    sample_time,
    viewer_clock,
)


def test_second_angle_landmarks() -> None:
    assert compute_angles(0, 0, 0).second == pytest.approx(math.pi)
    assert compute_angles(0, 0, 30).second == pytest.approx(0.0)
    assert compute_angles(0, 0, 45).second == pytest.approx(-math.pi / 2)


@pytest.mark.parametrize("s", [0.0, 7.25, 15.0, 29.999, 59.5])
def test_second_angle_formula(s: float) -> None:
    assert compute_angles(0, 0, s).second == pytest.approx(math.pi - (s / 60) * 2 * math.pi)


def test_hour_angle_uses_twelve_hour_wheel() -> None:
    morning = compute_angles(3.5, 30, 0).hour
    afternoon = compute_angles(15.5, 30, 0).hour
    assert morning == pytest.approx(afternoon)
    assert compute_angles(6, 0, 0).hour == pytest.approx(0.0)


def test_angles_are_idempotent() -> None:
    now = datetime(2024, 9, 18, 14, 5, 9, 250000)
    assert angles_at(now) == angles_at(now)


def test_sample_time_carries_fractions_to_millisecond() -> None:
    t = sample_time(datetime(2024, 1, 1, 10, 30, 15, 123999))
    assert t.seconds == pytest.approx(15.123)
    assert t.minutes == pytest.approx(30 + 15.123 / 60)
    assert t.hours == pytest.approx(10 + t.minutes / 60)


def test_orbit_position_top_of_dial() -> None:
    x, z = orbit_position(compute_angles(0, 0, 0).second, 7.0)
    assert x == pytest.approx(0.0, abs=1e-12)
    assert z == pytest.approx(-7.0)


def test_readout_24_hour() -> None:
    r = format_readout(datetime(2024, 1, 1, 14, 5, 9), is_24_hour=True)
    assert (r.hours, r.minutes, r.seconds) == ("14", "05", "09")


def test_readout_12_hour() -> None:
    r = format_readout(datetime(2024, 1, 1, 14, 5, 9), is_24_hour=False)
    assert (r.hours, r.minutes, r.seconds) == ("02", "05", "09")


def test_readout_midnight_in_12_hour_is_twelve() -> None:
    r = format_readout(datetime(2024, 1, 1, 0, 0, 0), is_24_hour=False)
    assert r.hours == "12"
    assert str(r) == "12:00:00"


def test_readout_noon_stays_twelve() -> None:
    assert format_readout(datetime(2024, 1, 1, 12, 0, 0), is_24_hour=False).hours == "12"


def test_viewer_clock_uses_browser_zone() -> None:
    now = viewer_clock("Asia/Seoul")()
    assert now.utcoffset() == timedelta(hours=9)
    assert now.tzinfo.zone == "Asia/Seoul"


def test_viewer_clock_falls_back_to_host_time() -> None:
    assert viewer_clock(None) == datetime.now
    assert viewer_clock("Mars/Olympus_Mons") == datetime.now
