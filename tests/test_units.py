import pytest

from xwmission.errors import FieldOutOfRange
from xwmission.platform import Platform
from xwmission.units import (
    TIE_POINTS, XVT_POINTS, XWA_POINTS, angle_from_byte, angle_to_byte, km_to_raw,
    pitch_from_byte, pitch_to_byte, raw_to_km, seconds_to_ticks, seconds_to_xwa_delay,
    ticks_to_seconds, time_to_xwing_delay, xwa_delay_to_seconds, xwing_delay_to_time,
)


# =============================================================================
# Angles
# =============================================================================

def test_angle_bytes():
    assert angle_from_byte(64) == 90
    assert angle_from_byte(0x80) == -180
    assert angle_to_byte(-90) == 192
    assert angle_to_byte(90) == 64


def test_pitch_phase_offset():
    assert pitch_from_byte(64) == 0
    assert pitch_from_byte(0) == -90
    assert pitch_to_byte(0) == 64
    assert pitch_from_byte(pitch_to_byte(45)) == 45


@pytest.mark.parametrize("platform, threshold", [
    (Platform.TIE, 64), (Platform.XVT, 90), (Platform.BOP, 90), (Platform.XWA, 64),
])
def test_pitch_threshold_per_platform(platform, threshold):
    assert platform.profile.pitch_threshold == threshold


def test_pitch_thresholds_agree_on_bytes():
    # The two branches differ by a full turn, so either rule yields the same byte
    for degrees in range(-90, 180):
        assert pitch_to_byte(degrees, 64) == pitch_to_byte(degrees, 90)


# =============================================================================
# Delays
# =============================================================================

def test_message_ticks():
    assert seconds_to_ticks(23) == 5
    assert ticks_to_seconds(5) == 25
    assert seconds_to_ticks(10_000) == 255


@pytest.mark.parametrize("raw, seconds", [(0, 0), (20, 20), (21, 25), (196, 900), (197, 910)])
def test_xwa_delay(raw, seconds):
    assert xwa_delay_to_seconds(raw) == seconds
    assert seconds_to_xwa_delay(seconds) == raw


def test_xwing_delay():
    assert xwing_delay_to_time(5) == (5, 0)
    assert xwing_delay_to_time(21) == (0, 6)
    assert time_to_xwing_delay(0, 6) == 21
    assert time_to_xwing_delay(5, 0) == 5


# =============================================================================
# Points / coordinates
# =============================================================================

def test_point_scales():
    assert TIE_POINTS.quantum == 50
    assert XVT_POINTS.quantum == 250
    assert XWA_POINTS.quantum == 25
    assert XVT_POINTS.minimum == -32000
    assert XVT_POINTS.maximum == 31750


def test_points_raw_is_signed():
    assert TIE_POINTS.to_raw(-50) == -1
    assert TIE_POINTS.from_raw(0xFF) == -50
    assert XWA_POINTS.from_raw(4) == 100


def test_points_align_to_quantum():
    assert XVT_POINTS.align(300) == 250
    assert TIE_POINTS.align(120) == 100
    assert TIE_POINTS.align(99999) == 6350


def test_points_out_of_range():
    with pytest.raises(FieldOutOfRange):
        TIE_POINTS.check("Goal", "points", 6400)
    with pytest.raises(FieldOutOfRange):
        XWA_POINTS.to_raw(-3225)


def test_coordinates():
    assert raw_to_km(160) == 1.0
    assert km_to_raw(-2.5) == -400
    assert km_to_raw(1000) == 32767
    assert km_to_raw(-204.8) == -32767
