#!/usr/bin/env python3
"""
Platform Profiles
=================

The four mission format variants, identified by the int16 at offset 0.

| Platform | Signature | FGs | Msgs | Craft types | Name width | Briefings | Ticks/s |
|----------|-----------|-----|------|-------------|------------|-----------|---------|
| XWING    | 2         | 255 | 0    | 18          | 16         | 1 (.brf)  | 8       |
| TIE      | -1        | 48  | 16   | 92          | 12         | 1         | 12      |
| XVT      | 0x0C      | 48  | 64   | 92          | 20         | 8         | 20      |
| BOP      | 0x0E      | 48  | 64   | 92          | 20         | 8         | 20      |
| XWA      | 0x12      | 192 | 64   | 233         | 20         | 2         | 25      |
"""

import struct
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .errors import FormatMismatch, TruncatedInput
from .units import (
    PITCH_THRESHOLD, PITCH_THRESHOLD_XVT, TIE_POINTS, XVT_POINTS, XWA_POINTS, PointScale,
)


class Platform(Enum):
    XWING = "xwing"
    TIE = "tie"
    XVT = "xvt"
    BOP = "bop"
    XWA = "xwa"

    @property
    def profile(self) -> 'FormatProfile':
        return PROFILES[self]

    @property
    def is_xvt_family(self) -> bool:
        return self in (Platform.XVT, Platform.BOP)


@dataclass(frozen=True)
class FormatProfile:
    platform: Platform
    signature: int
    extension: str
    flight_group_limit: int
    message_limit: int
    craft_type_count: int          # Valid craft types are 0..count-1
    name_width: int
    briefing_count: int
    ticks_per_second: int
    global_count: int              # Per-team global goal sets
    team_count: int
    order_count: int
    trigger_size: int              # Bytes per trigger record
    points: Optional[PointScale]   # Goal / global points quantum
    pitch_threshold: int = PITCH_THRESHOLD


PROFILES = {
    Platform.XWING: FormatProfile(
        Platform.XWING, 2, '.xwi', 255, 0, 18, 16, 1, 8, 0, 0, 1, 0, None),
    Platform.TIE: FormatProfile(
        Platform.TIE, -1, '.tie', 48, 16, 92, 12, 1, 12, 1, 0, 3, 4, TIE_POINTS),
    Platform.XVT: FormatProfile(
        Platform.XVT, 0x0C, '.tie', 48, 64, 92, 20, 8, 20, 10, 10, 4, 4, XVT_POINTS,
        PITCH_THRESHOLD_XVT),
    Platform.BOP: FormatProfile(
        Platform.BOP, 0x0E, '.tie', 48, 64, 92, 20, 8, 20, 10, 10, 4, 4, XVT_POINTS,
        PITCH_THRESHOLD_XVT),
    Platform.XWA: FormatProfile(
        Platform.XWA, 0x12, '.tie', 192, 64, 233, 20, 2, 25, 10, 10, 16, 6, XWA_POINTS),
}

_SIGNATURES = {profile.signature: platform for platform, profile in PROFILES.items()}

# Historical order; conversions only step between neighbours
LINEAGE = [Platform.XWING, Platform.TIE, Platform.XVT, Platform.XWA]


def detect_platform(data: bytes) -> Platform:
    """Identify the format variant from the int16 signature at offset 0."""
    if len(data) < 2:
        raise TruncatedInput(0, 2, len(data))
    signature = struct.unpack('<h', data[:2])[0]
    if signature not in _SIGNATURES:
        raise FormatMismatch("one of " + ", ".join(str(s) for s in _SIGNATURES), signature)
    return _SIGNATURES[signature]


def lineage_index(platform: Platform) -> int:
    if platform is Platform.BOP:
        platform = Platform.XVT
    return LINEAGE.index(platform)
