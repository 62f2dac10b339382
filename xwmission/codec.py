#!/usr/bin/env python3
"""
Codec Dispatch
==============

Single entry point over the four mission codecs. The platform comes from
the int16 signature at offset 0:

| Signature | Platform | Codec            |
|-----------|----------|------------------|
| 2         | XWING    | xwing_codec.py   |
| -1        | TIE      | tie_codec.py     |
| 0x0C      | XVT      | xvt_codec.py     |
| 0x0E      | BOP      | xvt_codec.py     |
| 0x12      | XWA      | xwa_codec.py     |
"""

import logging
from typing import Optional

from .mission import Mission
from .platform import Platform, detect_platform
from .tie_codec import decode_tie, encode_tie
from .xvt_codec import decode_xvt, encode_xvt
from .xwa_codec import decode_xwa, encode_xwa
from .xwing_codec import decode_xwing, encode_xwing

logger = logging.getLogger(__name__)

DECODERS = {
    Platform.TIE: decode_tie,
    Platform.XVT: decode_xvt,
    Platform.BOP: decode_xvt,
    Platform.XWA: decode_xwa,
}

ENCODERS = {
    Platform.XWING: encode_xwing,
    Platform.TIE: encode_tie,
    Platform.XVT: encode_xvt,
    Platform.BOP: encode_xvt,
    Platform.XWA: encode_xwa,
}


def decode(data: bytes, briefing: Optional[bytes] = None) -> Mission:
    """Decode any supported mission; briefing is the X-wing .brf companion."""
    platform = detect_platform(data)
    logger.debug(f"Detected {platform.name} ({len(data)} bytes)")
    if platform is Platform.XWING:
        return decode_xwing(data, briefing)
    return DECODERS[platform](data)


def encode(mission: Mission) -> bytes:
    """Encode the primary file of a mission (the .xwi for X-wing)."""
    return ENCODERS[mission.platform](mission)
