#!/usr/bin/env python3
"""
Briefings
=========

Timed event streams shown on the briefing map.

Event Stream (int16 words):
--------------------------
| Word | Field      |
|------|------------|
| 0    | Time (ticks, see FormatProfile.ticks_per_second) |
| 1    | Event type |
| 2..  | Parameters (count depends on the type)           |

The stream ends at the first EndBriefing or None event.

| Platform | Event area   | FG tag types | End type | Tags / strings |
|----------|--------------|--------------|----------|----------------|
| XWING    | per page     | 22..25       | 41       | 32 / 32 + highlight |
| TIE      | 0x320 bytes  | 9..16        | 0x22     | 32 / 32        |
| XVT/BOP  | 0x328 bytes  | 9..16        | 0x22     | 32 / 32        |
| XWA      | 0x4400 bytes | 9..16        | 0x22     | 128 / 128      |
"""

import logging
import struct
from dataclasses import dataclass, field
from typing import List

from .errors import FieldOutOfRange
from .platform import Platform

logger = logging.getLogger(__name__)


class EventType:
    NONE = 0
    PAGE_BREAK = 3
    TITLE_TEXT = 4
    CAPTION_TEXT = 5
    MOVE_MAP = 6
    ZOOM_MAP = 7
    CLEAR_FG_TAGS = 8
    FG_TAG_1 = 9
    FG_TAG_8 = 16
    CLEAR_TEXT_TAGS = 17
    TEXT_TAG_1 = 18
    TEXT_TAG_8 = 25
    END_BRIEFING = 0x22


class XwingEventType:
    NONE = 0
    WAIT_FOR_CLICK = 1
    CLEAR_TEXT = 10
    TITLE_TEXT = 11
    CAPTION_TEXT = 12
    CAPTION_TEXT_2 = 14
    MOVE_MAP = 15
    ZOOM_MAP = 16
    CLEAR_FG_TAGS = 21
    FG_TAG_1 = 22
    FG_TAG_4 = 25
    CLEAR_TAGS = 26
    TEXT_TAG_1 = 27
    TEXT_TAG_4 = 30
    END_BRIEFING = 41


#                    0  1  2  3  4  5  6  7  8  9 10 11 12 13 14 15 16 17 18 19 20 21 22 23 24 25 26 27 28 29 30 31 32 33 34
EVENT_PARAMETERS = [0, 0, 0, 0, 1, 1, 2, 2, 0, 1, 1, 1, 1, 1, 1, 1, 1, 0, 4, 4, 4, 4, 4, 4, 4, 4, 3, 2, 3, 2, 1, 0, 0, 0, 0]
XWING_EVENT_PARAMETERS = [0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 1, 1, 0, 1, 2, 2, 0, 0, 0, 0,
                          0, 1, 1, 1, 1, 0, 3, 3, 3, 3, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0]

# X-wing event -> (TIE event, X-wing parameter count)
XWING_TO_TIE_EVENTS = {
    1: (None, 0),     # Wait for click, no TIE equivalent
    10: (0x11, 0),
    11: (0x04, 1),
    12: (0x05, 1),
    14: (0x05, 1),
    15: (0x06, 2),
    16: (0x07, 2),
    21: (0x08, 0),
    22: (0x09, 1),
    23: (0x0A, 1),
    24: (0x0B, 1),
    25: (0x0C, 1),
    26: (0x11, 0),
    27: (0x12, 3),
    28: (0x13, 3),
    29: (0x14, 3),
    30: (0x15, 3),
}

END_TIME = 9999

EVENT_AREA_BYTES = {
    Platform.TIE: 0x320,
    Platform.XVT: 0x328,
    Platform.BOP: 0x328,
    Platform.XWA: 0x4400,
}
TAG_COUNTS = {
    Platform.XWING: 32,
    Platform.TIE: 32,
    Platform.XVT: 32,
    Platform.BOP: 32,
    Platform.XWA: 128,
}


@dataclass
class BriefingEvent:
    time: int
    event_type: int
    parameters: List[int] = field(default_factory=list)

    def to_words(self) -> List[int]:
        return [self.time, self.event_type] + list(self.parameters)


def parameter_count(event_type: int, xwing: bool = False) -> int:
    table = XWING_EVENT_PARAMETERS if xwing else EVENT_PARAMETERS
    if 0 <= event_type < len(table):
        return table[event_type]
    return 0


def is_end_event(event_type: int, xwing: bool = False) -> bool:
    end = XwingEventType.END_BRIEFING if xwing else EventType.END_BRIEFING
    return event_type in (EventType.NONE, end)


def is_fg_tag(event_type: int, xwing: bool = False) -> bool:
    if xwing:
        return XwingEventType.FG_TAG_1 <= event_type <= XwingEventType.FG_TAG_4
    return EventType.FG_TAG_1 <= event_type <= EventType.FG_TAG_8


def parse_events(words: List[int], xwing: bool = False) -> List[BriefingEvent]:
    """Split an int16 event stream up to its end marker."""
    events = []
    pos = 0
    while pos + 1 < len(words):
        time, event_type = words[pos], words[pos + 1]
        if is_end_event(event_type, xwing):
            break
        count = parameter_count(event_type, xwing)
        params = words[pos + 2:pos + 2 + count]
        if len(params) < count:
            logger.warning(f"Briefing event 0x{event_type:02X} at word {pos} truncated")
            break
        events.append(BriefingEvent(time, event_type, list(params)))
        pos += 2 + count
    return events


def events_to_words(events: List[BriefingEvent], xwing: bool = False) -> List[int]:
    words = []
    for event in events:
        words.extend(event.to_words())
    end = XwingEventType.END_BRIEFING if xwing else EventType.END_BRIEFING
    words.extend([END_TIME, end])
    return words


def pack_events(events: List[BriefingEvent], area_bytes: int, label: str = "Briefing") -> bytes:
    """Event stream zero-padded to the fixed event area."""
    words = events_to_words(events)
    if len(words) * 2 > area_bytes:
        raise FieldOutOfRange(label, "events", len(words), f"max {area_bytes // 2} words")
    raw = struct.pack(f'<{len(words)}h', *words)
    return raw + b'\x00' * (area_bytes - len(raw))


def unpack_events(raw: bytes, xwing: bool = False) -> List[BriefingEvent]:
    words = list(struct.unpack(f'<{len(raw) // 2}h', raw[:len(raw) // 2 * 2]))
    return parse_events(words, xwing)


# =============================================================================
# TIE / XvT / XWA briefing
# =============================================================================

@dataclass
class Briefing:
    length: int = 0x21C                 # Ticks
    unknown1: int = 0                   # TIE unknown1, XvT tile, XWA unknown
    events: List[BriefingEvent] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    strings: List[str] = field(default_factory=list)
    teams: List[bool] = field(default_factory=list)     # XvT / XWA visibility
    string_notes: List[str] = field(default_factory=list)  # XWA

    def length_seconds(self, platform: Platform) -> float:
        return self.length / platform.profile.ticks_per_second

    @property
    def events_length(self) -> int:
        """Words used by the event stream including the end marker."""
        return len(events_to_words(self.events))


def new_briefing(platform: Platform) -> Briefing:
    count = TAG_COUNTS[platform]
    briefing = Briefing(length=45 * platform.profile.ticks_per_second,
                        tags=[""] * count, strings=[""] * count)
    if platform is not Platform.TIE:
        briefing.teams = [False] * 10
        briefing.teams[0] = True
    if platform is Platform.XWA:
        briefing.string_notes = [""] * count
    return briefing


# =============================================================================
# X-wing companion briefing (.brf)
# =============================================================================

@dataclass
class WindowItem:
    top: int = 0
    left: int = 0
    bottom: int = 0
    right: int = 0
    visible: bool = False


@dataclass
class BriefingShip:
    """Ship entry of the .brf file, independent of the .xwi flight groups."""
    craft_type: int = 0
    object_type: int = 0
    iff: int = 0
    number_of_craft: int = 1
    number_of_waves: int = 0
    name: str = ""
    cargo: str = ""
    special_cargo: str = ""
    special_cargo_craft: int = 0
    yaw: int = 0
    pitch: int = 0
    roll: int = 0
    player_craft: int = 0
    coordinates: List[List[int]] = field(default_factory=list)   # [x, y, z] per coordinate set


@dataclass
class BriefingPage:
    length: int = 0x21C
    coord_set: int = 0
    page_type: int = 0
    events: List[BriefingEvent] = field(default_factory=list)


@dataclass
class XwingBriefing:
    coordinate_sets: int = 2
    ships: List[BriefingShip] = field(default_factory=list)
    window_settings: List[List[WindowItem]] = field(default_factory=list)
    pages: List[BriefingPage] = field(default_factory=list)
    mission_location: int = 0
    tags: List[str] = field(default_factory=lambda: [""] * 32)
    strings: List[str] = field(default_factory=lambda: [""] * 32)
    highlights: List[bytes] = field(default_factory=lambda: [b""] * 32)


def new_xwing_briefing() -> XwingBriefing:
    briefing = XwingBriefing()
    briefing.window_settings = [[WindowItem() for _ in range(5)] for _ in range(2)]
    briefing.pages = [BriefingPage()]
    return briefing
