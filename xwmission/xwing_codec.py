#!/usr/bin/env python3
"""
X-wing Mission Codec
====================

Reads and writes X-wing (1995) .xwi missions and their companion .brf
briefing files. Both start with the int16 signature 2. Text is in the DOS
code page (cp437); every numeric field is an int16.

XWI Structure:
-------------
| Offset | Size       | Content                                    |
|--------|------------|--------------------------------------------|
| 0x00   | 2          | Signature (2)                              |
| 0x02   | 4 x 2      | Time limit, end event, seed, location      |
| 0x0A   | 3 x 0x40   | End of mission messages                    |
| 0xCA   | 2 + 2      | Craft group count, object group count      |
| 0xCE   | n x 0x94   | Craft groups                               |
|        | m x 0x46   | Object groups                              |

Craft Group (0x94 bytes):
------------------------
| Offset | Field                  | Offset | Field                       |
|--------|------------------------|--------|-----------------------------|
| 0x00   | Name (16)              | 0x3C   | Arrival event, delay        |
| 0x10   | Cargo (16)             | 0x40   | Arrival FG, mothership      |
| 0x20   | Special cargo (16)     | 0x44   | Arrive / depart hyperspace  |
| 0x30   | Special craft, craft   | 0x48   | Waypoints (7 x 4 int16)     |
| 0x34   | IFF, status            | 0x80   | Formation, player, AI       |
| 0x38   | Craft count, waves - 1 | 0x86   | Order, dock time, markings x2 |
|        |                        | 0x8E   | Objective, targets          |

Object Group (0x46 bytes): name, cargo, special cargo, special craft,
object type, IFF, formation, count, X, Y, Z, raw yaw, pitch, roll.

BRF Structure:
-------------
| Content                                                         |
|-----------------------------------------------------------------|
| Signature, ship count, coordinate set count                     |
| Coordinate sets: per set, per ship, X Y Z                       |
| Ships: type, IFF, count, waves, name, cargo, special, orientation |
| Window settings: count x 5 items of (top, left, bottom, right, visible) |
| Pages: length, events length, coordinate set, type, events      |
| Header copy: time limit, end event, seed, location, 3 x 0x40    |
| Per ship 90 bytes with the player craft at +68                  |
| Tags: count, prefixed strings                                   |
| Strings: count, prefixed strings each followed by highlight bytes |
"""

import logging
from typing import List, Optional

from .briefing import (
    BriefingPage, BriefingShip, WindowItem, XwingBriefing, events_to_words, unpack_events,
)
from .cursor import MissionReader, MissionWriter
from .errors import FormatMismatch
from .flightgroup import FlightGroup, Waypoint, new_flight_group, read_waypoints, waypoints_to_bytes
from .mission import Mission
from .platform import Platform, detect_platform
from .units import time_to_xwing_delay, xwing_delay_to_time

logger = logging.getLogger(__name__)

# =============================================================================
# CONSTANTS
# =============================================================================

ENCODING = 'cp437'
SIGNATURE = 2
NAME_WIDTH = 16
EOM_WIDTH = 0x40
CRAFT_SIZE = 0x94
OBJECT_SIZE = 0x46
DISK_WAYPOINTS = 7
SHIP_TRAILER = 90
PLAYER_CRAFT_OFFSET = 68
WINDOW_ITEMS = 5
# .brf ship types below this are craft, the rest objects
CRAFT_TYPE_COUNT = 18


def _special_from_disk(raw: int, fg: FlightGroup) -> int:
    """-1 (none) or a zero-based craft number, limited to the group size."""
    special = 0 if raw < 0 else raw + 1
    if special > fg.number_of_craft:
        logger.warning(f"{fg.name}: special cargo craft {special} of {fg.number_of_craft} "
                       f"reset to {fg.number_of_craft}")
        special = fg.number_of_craft
    return special


def _special_to_disk(fg: FlightGroup) -> int:
    return fg.special_cargo_craft - 1


# =============================================================================
# XWI
# =============================================================================

def _read_craft_group(r: MissionReader) -> FlightGroup:
    fg = new_flight_group(Platform.XWING)
    ext = fg.extension
    fg.name = r.read_cstring(NAME_WIDTH)
    fg.cargo = r.read_cstring(NAME_WIDTH)
    fg.special_cargo = r.read_cstring(NAME_WIDTH)
    special = r.read_i16()
    fg.craft_type = r.read_i16()
    fg.iff = r.read_i16()
    fg.status1 = r.read_i16()
    fg.number_of_craft = r.read_i16()
    fg.special_cargo_craft = _special_from_disk(special, fg)
    fg.number_of_waves = r.read_i16() + 1
    ext.arrival_event = r.read_i16()
    fg.arrival_delay_minutes, fg.arrival_delay_seconds = xwing_delay_to_time(r.read_i16())
    ext.arrival_fg = r.read_i16()
    ext.mothership = r.read_i16()
    ext.arrive_via_hyperspace = r.read_i16()
    ext.depart_via_hyperspace = r.read_i16()
    disk = read_waypoints(r.read_fixed(DISK_WAYPOINTS * 8), 0, DISK_WAYPOINTS, negate_y=False)
    fg.waypoints[:DISK_WAYPOINTS] = disk
    fg.formation = r.read_i16()
    fg.player_craft = r.read_i16()
    fg.ai = r.read_i16()
    ext.order = r.read_i16()
    ext.dock_time_throttle = r.read_i16()
    fg.markings = r.read_i16()
    r.skip(2)
    ext.objective = r.read_i16()
    ext.target_primary = r.read_i16()
    ext.target_secondary = r.read_i16()
    return fg


def _write_craft_group(w: MissionWriter, fg: FlightGroup):
    ext = fg.extension
    w.write_cstring(fg.name, NAME_WIDTH)
    w.write_cstring(fg.cargo, NAME_WIDTH)
    w.write_cstring(fg.special_cargo, NAME_WIDTH)
    w.write_i16(_special_to_disk(fg))
    w.write_i16(fg.craft_type)
    w.write_i16(fg.iff)
    w.write_i16(fg.status1)
    w.write_i16(fg.number_of_craft)
    w.write_i16(fg.number_of_waves - 1)
    w.write_i16(ext.arrival_event)
    w.write_i16(time_to_xwing_delay(fg.arrival_delay_minutes, fg.arrival_delay_seconds))
    w.write_i16(ext.arrival_fg)
    w.write_i16(ext.mothership)
    w.write_i16(ext.arrive_via_hyperspace)
    w.write_i16(ext.depart_via_hyperspace)
    w.write_bytes(waypoints_to_bytes(fg.waypoints[:DISK_WAYPOINTS], negate_y=False))
    w.write_i16(fg.formation)
    w.write_i16(fg.player_craft)
    w.write_i16(fg.ai)
    w.write_i16(ext.order)
    w.write_i16(ext.dock_time_throttle)
    # Second marking slot always mirrors the first in shipped missions
    w.write_i16(fg.markings)
    w.write_i16(fg.markings)
    w.write_i16(ext.objective)
    w.write_i16(ext.target_primary)
    w.write_i16(ext.target_secondary)


def _read_object_group(r: MissionReader) -> FlightGroup:
    fg = new_flight_group(Platform.XWING)
    ext = fg.extension
    fg.name = r.read_cstring(NAME_WIDTH)
    fg.cargo = r.read_cstring(NAME_WIDTH)
    fg.special_cargo = r.read_cstring(NAME_WIDTH)
    special = r.read_i16()
    fg.craft_type = 0
    ext.object_type = r.read_i16()
    fg.iff = r.read_i16()
    fg.formation = r.read_i16()
    fg.number_of_craft = r.read_i16()
    fg.special_cargo_craft = _special_from_disk(special, fg)
    fg.number_of_waves = 1
    start = fg.waypoints[0]
    start.x, start.y, start.z = r.read_i16(), r.read_i16(), r.read_i16()
    ext.raw_yaw = r.read_i16()
    ext.raw_pitch = r.read_i16()
    ext.raw_roll = r.read_i16()
    return fg


def _write_object_group(w: MissionWriter, fg: FlightGroup):
    ext = fg.extension
    start = fg.waypoints[0]
    w.write_cstring(fg.name, NAME_WIDTH)
    w.write_cstring(fg.cargo, NAME_WIDTH)
    w.write_cstring(fg.special_cargo, NAME_WIDTH)
    w.write_i16(_special_to_disk(fg))
    w.write_i16(ext.object_type)
    w.write_i16(fg.iff)
    w.write_i16(fg.formation)
    w.write_i16(fg.number_of_craft)
    w.write_i16_array([start.x, start.y, start.z, ext.raw_yaw, ext.raw_pitch, ext.raw_roll])


def decode_xwing(data: bytes, briefing: Optional[bytes] = None) -> Mission:
    """Decode an .xwi mission, plus its .brf companion when given."""
    platform = detect_platform(data)
    if platform is not Platform.XWING:
        raise FormatMismatch(SIGNATURE, platform.profile.signature)
    r = MissionReader(data, ENCODING)
    mission = Mission(Platform.XWING)
    header = mission.header
    r.seek_absolute(2)
    header.time_limit = r.read_i16()
    header.end_event = r.read_i16()
    header.rnd_seed = r.read_i16()
    header.mission_location = r.read_i16()
    header.eom_messages = [r.read_cstring(EOM_WIDTH) for _ in range(3)]
    craft_count = r.read_i16()
    object_count = r.read_i16()
    logger.debug(f"XWING header: {craft_count} craft groups, {object_count} object groups")

    groups = [_read_craft_group(r) for _ in range(craft_count)]
    groups += [_read_object_group(r) for _ in range(object_count)]
    mission.flight_groups.load(groups)
    if briefing is not None:
        mission.xwing_briefing = decode_xwing_briefing(briefing)
    return mission


def encode_xwing(mission: Mission) -> bytes:
    """Encode the .xwi part; craft groups are written before object groups."""
    mission.check()
    header = mission.header
    crafts = [fg for fg in mission.flight_groups if not fg.extension.is_object]
    objects = [fg for fg in mission.flight_groups if fg.extension.is_object]
    kinds = [fg.extension.is_object for fg in mission.flight_groups]
    if kinds != sorted(kinds):
        logger.warning("XWING: object groups interleaved with craft groups; "
                       "indexes change once the file is reloaded")

    w = MissionWriter(encoding=ENCODING)
    w.write_i16(SIGNATURE)
    w.write_i16(header.time_limit)
    w.write_i16(header.end_event)
    w.write_i16(header.rnd_seed)
    w.write_i16(header.mission_location)
    for text in header.eom_messages[:3]:
        w.write_cstring(text, EOM_WIDTH)
    w.write_i16(len(crafts))
    w.write_i16(len(objects))
    for fg in crafts:
        _write_craft_group(w, fg)
    for fg in objects:
        _write_object_group(w, fg)
    logger.debug(f"XWING encode: {len(w.buffer)} bytes")
    return w.getvalue()


# =============================================================================
# BRF
# =============================================================================

def _read_ship(r: MissionReader, ship: BriefingShip):
    kind = r.read_i16()
    if kind < CRAFT_TYPE_COUNT:
        ship.craft_type, ship.object_type = kind, 0
    else:
        ship.craft_type, ship.object_type = 0, kind
    ship.iff = r.read_i16()
    ship.number_of_craft = r.read_i16()
    ship.number_of_waves = r.read_i16()
    ship.name = r.read_cstring(NAME_WIDTH)
    ship.cargo = r.read_cstring(NAME_WIDTH)
    ship.special_cargo = r.read_cstring(NAME_WIDTH)
    ship.special_cargo_craft = r.read_i16()
    ship.yaw = r.read_i16()
    ship.pitch = r.read_i16()
    ship.roll = r.read_i16()


def _write_ship(w: MissionWriter, ship: BriefingShip):
    w.write_i16(ship.object_type if ship.object_type else ship.craft_type)
    w.write_i16(ship.iff)
    w.write_i16(ship.number_of_craft)
    w.write_i16(ship.number_of_waves)
    w.write_cstring(ship.name, NAME_WIDTH)
    w.write_cstring(ship.cargo, NAME_WIDTH)
    w.write_cstring(ship.special_cargo, NAME_WIDTH)
    w.write_i16(ship.special_cargo_craft)
    w.write_i16(ship.yaw)
    w.write_i16(ship.pitch)
    w.write_i16(ship.roll)


def decode_xwing_briefing(data: bytes) -> XwingBriefing:
    r = MissionReader(data, ENCODING)
    signature = r.read_i16()
    if signature != SIGNATURE:
        raise FormatMismatch(SIGNATURE, signature)
    briefing = XwingBriefing()
    ship_count = r.read_i16()
    coordinate_sets = r.read_i16()
    briefing.ships = [BriefingShip() for _ in range(ship_count)]
    for _ in range(coordinate_sets):
        for ship in briefing.ships:
            ship.coordinates.append(r.read_i16_array(3))
    briefing.coordinate_sets = coordinate_sets
    for ship in briefing.ships:
        _read_ship(r, ship)

    window_count = r.read_i16()
    briefing.window_settings = []
    for _ in range(window_count):
        items = []
        for _ in range(WINDOW_ITEMS):
            top, left, bottom, right, visible = r.read_i16_array(5)
            items.append(WindowItem(top, left, bottom, right, visible != 0))
        briefing.window_settings.append(items)

    page_count = r.read_i16()
    briefing.pages = []
    for _ in range(page_count):
        page = BriefingPage()
        page.length = r.read_i16()
        words = r.read_i16()
        page.coord_set = r.read_i16()
        page.page_type = r.read_i16()
        page.events = unpack_events(r.read_fixed(words * 2), xwing=True)
        briefing.pages.append(page)

    # Header copy; the .xwi values win
    r.skip(6)
    briefing.mission_location = r.read_i16()
    r.skip(3 * EOM_WIDTH)
    trailer = r.read_fixed(SHIP_TRAILER * ship_count)
    for i, ship in enumerate(briefing.ships):
        offset = i * SHIP_TRAILER + PLAYER_CRAFT_OFFSET
        ship.player_craft = int.from_bytes(trailer[offset:offset + 2], 'little', signed=True)

    briefing.tags = [r.read_prefixed_string() for _ in range(r.read_i16())]
    briefing.strings = []
    briefing.highlights = []
    for _ in range(r.read_i16()):
        length = r.read_i16()
        briefing.strings.append(r.read_fixed(length).decode(ENCODING) if length > 0 else "")
        briefing.highlights.append(r.read_fixed(length) if length > 0 else b"")
    logger.debug(f"BRF: {ship_count} ships, {page_count} pages, {coordinate_sets} coordinate sets")
    return briefing


def encode_xwing_briefing(mission: Mission) -> bytes:
    briefing = mission.xwing_briefing
    header = mission.header
    w = MissionWriter(encoding=ENCODING)
    w.write_i16(SIGNATURE)
    w.write_i16(len(briefing.ships))
    w.write_i16(briefing.coordinate_sets)
    for k in range(briefing.coordinate_sets):
        for ship in briefing.ships:
            coordinates = ship.coordinates[k] if k < len(ship.coordinates) else [0, 0, 0]
            w.write_i16_array(coordinates)
    for ship in briefing.ships:
        _write_ship(w, ship)

    w.write_i16(len(briefing.window_settings))
    for items in briefing.window_settings:
        for item in items:
            w.write_i16_array([item.top, item.left, item.bottom, item.right, int(item.visible)])

    w.write_i16(len(briefing.pages))
    for page in briefing.pages:
        words = events_to_words(page.events, xwing=True)
        w.write_i16(page.length)
        w.write_i16(len(words))
        w.write_i16(page.coord_set)
        w.write_i16(page.page_type)
        w.write_i16_array(words)

    w.write_i16(header.time_limit)
    w.write_i16(header.end_event)
    w.write_i16(header.rnd_seed)
    w.write_i16(briefing.mission_location)
    for text in header.eom_messages[:3]:
        w.write_cstring(text, EOM_WIDTH)
    for ship in briefing.ships:
        base = w.position
        w.seek_absolute(base + PLAYER_CRAFT_OFFSET)
        w.write_i16(ship.player_craft)
        w.seek_absolute(base + SHIP_TRAILER)

    w.write_i16(len(briefing.tags))
    for tag in briefing.tags:
        w.write_prefixed_string(tag)
    w.write_i16(len(briefing.strings))
    for text, highlight in zip(briefing.strings, _highlights(briefing)):
        raw = w.encode_text(text)
        w.write_i16(len(raw))
        w.write_bytes(raw)
        w.write_bytes(highlight[:len(raw)].ljust(len(raw), b'\x00'))
    return w.getvalue()


def _highlights(briefing: XwingBriefing) -> List[bytes]:
    return briefing.highlights + [b""] * (len(briefing.strings) - len(briefing.highlights))


def briefing_waypoints(ship: BriefingShip) -> List[Waypoint]:
    """Coordinate sets of a .brf ship as waypoints (set 0 is the start point)."""
    return [Waypoint(x, y, z, enabled=(k == 0)) for k, (x, y, z) in enumerate(ship.coordinates)]
