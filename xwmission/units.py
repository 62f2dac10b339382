#!/usr/bin/env python3
"""
Unit Transforms
===============

Scaled and packed values converted during decode and encode.

Angles (TIE / XvT / XWA):
------------------------
One signed byte per axis, 256 steps per full turn. Pitch is stored with a
90 degree phase offset; the encode threshold differs per platform.

| Axis   | Decode                                     | Encode                                   |
|--------|--------------------------------------------|------------------------------------------|
| yaw    | round(b * 360 / 256)                       | round(d * 256 / 360) & 0xFF              |
| roll   | round(b * 360 / 256)                       | round(d * 256 / 360) & 0xFF              |
| pitch  | p = round(b*360/256); p+270 if p<-90 else p-90 | (p-270 if p>=threshold else p+90) as yaw |

Delays:
------
| Field                  | Encoding                                               |
|------------------------|--------------------------------------------------------|
| TIE/XvT message delay  | 5 second ticks                                          |
| XWA message delay      | raw<=20 seconds; then 5 s steps to 196 (15:00); then 10 s |
| X-wing arrival delay   | raw<=20 minutes; else 20 + minutes*10 + seconds/6       |

Points:
------
| Platform | Quantum | Range            |
|----------|---------|------------------|
| TIE      | 50      | -6400 .. 6350    |
| XvT/BoP  | 250     | -32000 .. 31750  |
| XWA      | 25      | -3200 .. 3175    |
"""

from typing import Tuple

from .errors import FieldOutOfRange

# Map units per kilometre for waypoint coordinates
COORDINATE_SCALE = 160
# Symmetric so a negated Y still fits an int16
COORDINATE_LIMIT = 32767

PITCH_THRESHOLD = 64            # TIE and XWA
PITCH_THRESHOLD_XVT = 90

MESSAGE_TICK_SECONDS = 5


# =============================================================================
# Angles
# =============================================================================

def angle_from_byte(raw: int) -> int:
    """Signed byte (either sign convention) to degrees in -180..179."""
    if raw > 127:
        raw -= 256
    return round(raw * 360 / 256)


def angle_to_byte(degrees: int) -> int:
    return round(degrees * 256 / 360) & 0xFF


def pitch_from_byte(raw: int) -> int:
    pitch = angle_from_byte(raw)
    if pitch < -90:
        pitch += 270
    else:
        pitch -= 90
    return pitch


def pitch_to_byte(degrees: int, threshold: int = PITCH_THRESHOLD) -> int:
    if degrees >= threshold:
        degrees -= 270
    else:
        degrees += 90
    return angle_to_byte(degrees)


def raw_angle_to_degrees(raw: int) -> int:
    """X-wing raw orientation (64 = 90 degrees) to degrees in -180..179."""
    degrees = round(raw * 360 / 256) % 360
    return degrees - 360 if degrees >= 180 else degrees


def degrees_to_raw_angle(degrees: int) -> int:
    return round(degrees * 256 / 360)


# =============================================================================
# Delays
# =============================================================================

def ticks_to_seconds(raw: int) -> int:
    return raw * MESSAGE_TICK_SECONDS


def seconds_to_ticks(seconds: int) -> int:
    return min(255, max(0, round(seconds / MESSAGE_TICK_SECONDS)))


def xwa_delay_to_seconds(raw: int) -> int:
    seconds = raw
    if raw > 20:
        seconds += (raw - 20) * 4
    if raw > 196:
        seconds += (raw - 196) * 5
    return seconds


def seconds_to_xwa_delay(seconds: int) -> int:
    if seconds <= 20:
        raw = seconds
    elif seconds <= 900:
        raw = 20 + round((seconds - 20) / 5)
    else:
        raw = 196 + round((seconds - 900) / 10)
    return min(255, max(0, raw))


def xwing_delay_to_time(raw: int) -> Tuple[int, int]:
    """X-wing arrival delay to (minutes, seconds)."""
    if raw > 20:
        return (raw - 20) // 10, (raw % 10) * 6
    return max(0, raw), 0


def time_to_xwing_delay(minutes: int, seconds: int) -> int:
    minutes = max(0, minutes)
    seconds = max(0, seconds)
    if seconds == 0 and minutes <= 20:
        return minutes
    return 20 + minutes * 10 + seconds // 6


# =============================================================================
# Points
# =============================================================================

class PointScale:
    """Signed byte points stored as a multiple of a fixed quantum."""

    def __init__(self, quantum: int):
        self.quantum = quantum
        self.minimum = -128 * quantum
        self.maximum = 127 * quantum

    def __repr__(self):
        return f"PointScale({self.quantum})"

    def clamp(self, points: int) -> int:
        return min(self.maximum, max(self.minimum, points))

    def check(self, entity: str, field: str, points: int):
        if points < self.minimum or points > self.maximum:
            raise FieldOutOfRange(entity, field, points, f"{self.minimum}..{self.maximum}")

    def to_raw(self, points: int, entity: str = "Goal", field: str = "points") -> int:
        """Nearest quantum multiple as the signed raw byte."""
        self.check(entity, field, points)
        return max(-128, min(127, round(points / self.quantum)))

    def from_raw(self, raw: int) -> int:
        if raw > 127:
            raw -= 256
        return raw * self.quantum

    def align(self, points: int) -> int:
        """Value a clamped points figure takes after one encode/decode cycle."""
        return self.from_raw(self.to_raw(self.clamp(points)))


TIE_POINTS = PointScale(50)
XVT_POINTS = PointScale(250)
XWA_POINTS = PointScale(25)


# =============================================================================
# Coordinates
# =============================================================================

def raw_to_km(raw: int) -> float:
    return raw / COORDINATE_SCALE


def km_to_raw(km: float) -> int:
    return max(-COORDINATE_LIMIT, min(COORDINATE_LIMIT, round(km * COORDINATE_SCALE)))
