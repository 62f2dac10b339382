#!/usr/bin/env python3
"""
XWA Mission Codec
=================

Reads and writes X-wing Alliance .tie files (signature 0x12).

File Structure:
--------------
| Offset | Size         | Content                                          |
|--------|--------------|--------------------------------------------------|
| 0x0000 | 2            | Signature (0x12)                                 |
| 0x0002 | 2 + 2        | Flight group count, message count                |
| 0x0014 | 4 x 0x14     | IFF names 3..6                                   |
| 0x0064 | 4 x 0x84     | Region names                                     |
| 0x0274 | 16 x 0x8C    | Global cargo                                     |
| 0x0B34 | 16 x 0x57    | Global group names                               |
| 0x23AC | 8            | Hangar, time limit, end flag, officer, logo      |
| 0x23F0 | n x 0xE3E    | Flight groups                                    |
|        | n x 0xA2     | Messages                                         |
|        | 10 x 0x170   | Global goals (short + 3 x 0x7A)                  |
|        | 10 x 0x1E7   | Teams                                            |
|        | 2 x variable | Briefings                                        |
|        | 0x187C + ... | Notes block                                      |
|        | variable     | Goal, global and order strings (presence-coded)  |
|        | 3 x 0x1000   | Success, failure, description                    |

Presence-coded strings are a single zero byte when empty, otherwise a
0x40-byte buffer. Waypoints here are point-major (x, y, z, enabled per
point) rather than the coordinate-major tables of TIE and XvT.

Flight Group (0xE3E bytes):
--------------------------
| Offset | Field                      | Offset | Field                   |
|--------|----------------------------|--------|-------------------------|
| 0x000  | Name (20)                  | 0x0CA  | Orders (16 x 0x94)      |
| 0x014  | Designations, global cargo | 0x0A0A | Skip triggers (16 x 16) |
| 0x028  | Cargo, special cargo, role | 0x0B0A | Goals (8 x 0x50)        |
| 0x069  | Craft block (0x1D)         | 0x0D8A | Waypoints + regions     |
| 0x086  | Arr/dep block (0x3C)       | 0x0DAE | Options block (0x1E)    |
| 0x0C2  | Motherships (8)            | 0x0DCC | Loadout, optional craft |
|        |                            | 0x0DFD | Pilot, backdrop         |
"""

import logging
import struct
from typing import List

from .briefing import Briefing, EVENT_AREA_BYTES, pack_events, unpack_events
from .cursor import MissionReader, MissionWriter
from .errors import FormatMismatch
from .flightgroup import (
    FlightGroup, Goal, Order, OptionalCraft, ORDER_SIZE, Waypoint, XwaFields,
    new_flight_group, special_craft_from_disk, special_craft_to_disk,
)
from .loadout import OptLoadout
from .mission import GlobalCargo, GlobalGoal, Message, Mission, Team, new_message
from .platform import Platform, detect_platform
from .trigger import Trigger, check_target, read_trigger
from .units import (
    XWA_POINTS, angle_from_byte, angle_to_byte, pitch_from_byte, pitch_to_byte,
    seconds_to_xwa_delay, xwa_delay_to_seconds,
)

logger = logging.getLogger(__name__)

# =============================================================================
# CONSTANTS
# =============================================================================

SIGNATURE_OFFSET_FG = 0x23F0
FG_SIZE = 0xE3E
MESSAGE_SIZE = 0xA2
GLOBAL_GOAL_SIZE = 0x7A
TEAM_SIZE = 0x1E7
ORDER_STRIDE = 0x94
SKIP_STRIDE = 0x10
GOAL_STRIDE = 0x50
NOTE_WIDTH = 0x64
MISSION_NOTE_WIDTH = 0x187C
NOTES_RESERVED = 0xFA0
STRINGS_RESERVED = 0x1E0
STRING_WIDTH = 0x40
TEXT_WIDTH = 0x1000
ORDER_STRING_SLOTS = 192
TRIGGER_SIZE = 6

_CRAFT = 0x69
_ARRDEP = 0x86
_MOTHERSHIPS = 0xC2
_ORDERS = 0xCA
_SKIP = 0xA0A
_GOALS = 0xB0A
_WAYPOINTS = 0xD8A
_OPTIONS = 0xDAE
_LOADOUT = 0xDCC
_OPT_CRAFT = 0xDDE
_PILOT = 0xDFD
_BACKDROP = 0xE12

_ARRDEP_TRIGGERS = [0x02, 0x08, 0x12, 0x18, 0x26, 0x2C]
_ARRDEP_AND_OR = [0x10, 0x20, 0x22, 0x34]

# Backdrop craft placed at the origin is invisible in game
_BACKDROP_CRAFT = 0xB7

_ORDER_WAYPOINTS = 8


def _skip_global_string(j: int, k: int) -> bool:
    return (j >= 8 and k == 0) or (j >= 4 and k == 2)


def _read_point_major(data: bytes, offset: int, count: int) -> List[Waypoint]:
    values = struct.unpack_from(f'<{count * 4}h', data, offset)
    return [Waypoint(values[k * 4], -values[k * 4 + 1], values[k * 4 + 2], values[k * 4 + 3] != 0)
            for k in range(count)]


def _point_major_bytes(waypoints: List[Waypoint]) -> bytes:
    values = []
    for wp in waypoints:
        values += [wp.x, -wp.y, wp.z, int(wp.enabled)]
    return struct.pack(f'<{len(values)}h', *values)


def _read_optional_string(r: MissionReader) -> str:
    if r.peek_fixed(1)[0] == 0:
        r.skip(1)
        return ""
    return r.read_cstring(STRING_WIDTH)


def _write_optional_string(w: MissionWriter, text: str):
    if text:
        w.write_cstring(text, STRING_WIDTH)
    else:
        w.skip(1)


# =============================================================================
# Flight groups
# =============================================================================

def _read_flight_group(data: bytes, index: int) -> FlightGroup:
    platform = Platform.XWA
    label = f"FlightGroup {index}"
    rec = MissionReader(data)
    fg = new_flight_group(platform)
    ext = XwaFields()
    fg.extension = ext
    fg.name = rec.read_cstring(0x14)
    ext.enable_designation1 = data[0x14]
    ext.enable_designation2 = data[0x15]
    ext.designation1 = data[0x16]
    ext.designation2 = data[0x17]
    # Stored as index - 1 with 0xFF for none
    ext.global_cargo = (data[0x19] + 1) & 0xFF
    ext.global_special_cargo = (data[0x1A] + 1) & 0xFF
    rec.seek_absolute(0x28)
    fg.cargo = rec.read_cstring(0x14)
    fg.special_cargo = rec.read_cstring(0x14)
    ext.role = rec.read_cstring(0x14)

    b = data[_CRAFT:_CRAFT + 0x1D]
    fg.rand_spec_cargo = b[1] != 0
    fg.craft_type = b[2]
    fg.number_of_craft = b[3]
    fg.special_cargo_craft = special_craft_from_disk(b[0], b[3], fg.rand_spec_cargo)
    fg.status1 = b[4]
    fg.missile = b[5]
    fg.beam = b[6]
    fg.iff = b[7]
    fg.team = b[8]
    fg.ai = b[9]
    fg.markings = b[0xA]
    fg.radio = b[0xB]
    fg.formation = b[0xD]
    fg.form_distance = b[0xE]
    fg.global_group = b[0xF]
    fg.form_leader_dist = b[0x10]
    fg.number_of_waves = b[0x11] + 1
    fg.player_number = b[0x14]
    fg.arrive_only_if_human = b[0x15] != 0
    fg.player_craft = b[0x16]
    fg.yaw = angle_from_byte(b[0x17])
    fg.pitch = pitch_from_byte(b[0x18])
    fg.roll = angle_from_byte(b[0x19])

    a = data[_ARRDEP:_ARRDEP + 0x3C]
    fg.difficulty = a[1]
    fg.arr_dep_triggers = [
        read_trigger(a, offset, platform, f"{label} arr/dep trigger {i + 1}")
        for i, offset in enumerate(_ARRDEP_TRIGGERS)
    ]
    fg.arr_dep_and_or = [a[offset] != 0 for offset in _ARRDEP_AND_OR]
    fg.arrival_delay_minutes = a[0x24]
    fg.arrival_delay_seconds = a[0x25]
    fg.departure_timer_minutes = a[0x36]
    fg.departure_timer_seconds = a[0x37]
    fg.abort_trigger = a[0x38]

    m = data[_MOTHERSHIPS:_MOTHERSHIPS + 8]
    fg.arrival_craft1 = m[0]
    fg.arrival_method1 = m[1] != 0
    fg.departure_craft1 = m[2]
    fg.departure_method1 = m[3] != 0
    fg.arrival_craft2 = m[4]
    fg.arrival_method2 = m[5] != 0
    fg.departure_craft2 = m[6]
    fg.departure_method2 = m[7] != 0

    orders = []
    for j in range(16):
        offset = _ORDERS + j * ORDER_STRIDE
        order = Order.parse(data, offset, ORDER_SIZE)
        for k in range(4):
            check_target(platform, order.target_types[k], order.targets[k],
                         f"{label} order {j // 4 + 1}.{j % 4 + 1} target {k + 1}")
        order.waypoints = _read_point_major(data, offset + 0x14, _ORDER_WAYPOINTS)
        skip = _SKIP + j * SKIP_STRIDE
        order.skip_triggers = [
            read_trigger(data, skip, platform, f"{label} order {j} skip trigger 1"),
            read_trigger(data, skip + TRIGGER_SIZE, platform, f"{label} order {j} skip trigger 2"),
        ]
        order.skip_t1_or_t2 = data[skip + 0xE] != 0
        orders.append(order)
    fg.orders = orders

    for j in range(8):
        g = data[_GOALS + j * GOAL_STRIDE:_GOALS + j * GOAL_STRIDE + 16]
        fg.goals[j] = Goal(argument=g[0], condition=g[1], amount=g[2],
                           points=XWA_POINTS.from_raw(g[3]), enabled=g[4] != 0, team=g[5],
                           parameter=g[14], active_sequence=g[15])

    fg.waypoints = _read_point_major(data, _WAYPOINTS, 4)
    for k, wp in enumerate(fg.waypoints):
        wp.region = data[_WAYPOINTS + 0x20 + k] & 3

    o = data[_OPTIONS:_OPTIONS + 0x1E]
    ext.global_numbering = o[0x16] != 0
    ext.countermeasures = o[0x19]
    ext.explosion_time = o[0x1A]
    ext.status2 = o[0x1B]
    ext.global_unit = o[0x1C]
    ext.opt_loadout = OptLoadout.parse(data, _LOADOUT)
    ext.opt_craft_category = data[_OPT_CRAFT]
    c = data[_OPT_CRAFT + 1:_OPT_CRAFT + 31]
    ext.opt_craft = [OptionalCraft(c[k], c[k + 10], c[k + 20]) for k in range(10)]
    rec.seek_absolute(_PILOT)
    ext.pilot_id = rec.read_cstring(0x10)
    ext.backdrop = data[_BACKDROP]
    return fg


def _write_flight_group(w: MissionWriter, fg: FlightGroup, index: int):
    base = w.position
    ext = fg.extension if isinstance(fg.extension, XwaFields) else XwaFields()
    w.write_cstring(fg.name, 0x14)
    w.write_bytes(bytes([ext.enable_designation1, ext.enable_designation2,
                         ext.designation1, ext.designation2, 0,
                         (ext.global_cargo - 1) & 0xFF, (ext.global_special_cargo - 1) & 0xFF]))
    w.seek_absolute(base + 0x28)
    w.write_cstring(fg.cargo, 0x14)
    w.write_cstring(fg.special_cargo, 0x14)
    w.write_cstring(ext.role, 0x14)

    b = bytearray(0x1D)
    b[0] = special_craft_to_disk(fg)
    b[1] = int(fg.rand_spec_cargo)
    b[2] = fg.craft_type
    b[3] = fg.number_of_craft
    b[4] = fg.status1
    b[5] = fg.missile
    b[6] = fg.beam
    b[7] = fg.iff
    b[8] = fg.team
    b[9] = fg.ai
    b[0xA] = fg.markings
    b[0xB] = fg.radio
    b[0xD] = fg.formation
    b[0xE] = fg.form_distance
    b[0xF] = fg.global_group
    b[0x10] = fg.form_leader_dist
    b[0x11] = fg.number_of_waves - 1
    b[0x14] = fg.player_number
    b[0x15] = int(fg.arrive_only_if_human)
    b[0x16] = fg.player_craft
    b[0x17] = angle_to_byte(fg.yaw)
    b[0x18] = pitch_to_byte(fg.pitch, Platform.XWA.profile.pitch_threshold)
    b[0x19] = angle_to_byte(fg.roll)
    w.seek_absolute(base + _CRAFT)
    w.write_bytes(bytes(b))

    a = bytearray(0x3C)
    a[1] = fg.difficulty
    for offset, trigger in zip(_ARRDEP_TRIGGERS, fg.arr_dep_triggers):
        a[offset:offset + TRIGGER_SIZE] = trigger.to_bytes(TRIGGER_SIZE)
    for offset, flag in zip(_ARRDEP_AND_OR, fg.arr_dep_and_or):
        a[offset] = int(flag)
    a[0x24] = fg.arrival_delay_minutes
    a[0x25] = fg.arrival_delay_seconds
    a[0x36] = fg.departure_timer_minutes
    a[0x37] = fg.departure_timer_seconds
    a[0x38] = fg.abort_trigger
    w.write_bytes(bytes(a))
    w.write_bytes(bytes([fg.arrival_craft1, int(fg.arrival_method1),
                         fg.departure_craft1, int(fg.departure_method1),
                         fg.arrival_craft2, int(fg.arrival_method2),
                         fg.departure_craft2, int(fg.departure_method2)]))

    for j, order in enumerate(fg.orders[:16]):
        w.seek_absolute(base + _ORDERS + j * ORDER_STRIDE)
        w.write_bytes(order.to_bytes(ORDER_SIZE))
        w.skip(1)
        waypoints = (order.waypoints + [Waypoint() for _ in range(_ORDER_WAYPOINTS)])[:_ORDER_WAYPOINTS]
        w.write_bytes(_point_major_bytes(waypoints))
    for j, order in enumerate(fg.orders[:16]):
        w.seek_absolute(base + _SKIP + j * SKIP_STRIDE)
        skip = (order.skip_triggers + [Trigger(), Trigger()])[:2]
        w.write_bytes(skip[0].to_bytes(TRIGGER_SIZE) + skip[1].to_bytes(TRIGGER_SIZE))
        w.skip(2)
        w.write_bool(order.skip_t1_or_t2)

    for j, goal in enumerate(fg.goals[:8]):
        g = bytearray(16)
        g[0] = goal.argument
        g[1] = goal.condition
        g[2] = goal.amount
        g[3] = XWA_POINTS.to_raw(goal.points, f"FlightGroup {index} goal {j}") & 0xFF
        g[4] = int(goal.enabled)
        g[5] = goal.team
        g[14] = goal.parameter
        g[15] = goal.active_sequence
        w.seek_absolute(base + _GOALS + j * GOAL_STRIDE)
        w.write_bytes(bytes(g))

    waypoints = [wp.copy() for wp in fg.waypoints[:4]]
    start = waypoints[0]
    if fg.craft_type == _BACKDROP_CRAFT and start.x == 0 and start.y == 0 and start.z == 0:
        start.y = 10
    w.seek_absolute(base + _WAYPOINTS)
    w.write_bytes(_point_major_bytes(waypoints))
    w.write_bytes(bytes(wp.region for wp in waypoints))

    o = bytearray(0x1E)
    o[0x16] = int(ext.global_numbering)
    o[0x19] = ext.countermeasures
    o[0x1A] = ext.explosion_time
    o[0x1B] = ext.status2
    o[0x1C] = ext.global_unit
    w.write_bytes(bytes(o))
    w.write_bytes(ext.opt_loadout.to_bytes())
    w.write_u8(ext.opt_craft_category)
    w.write_bytes(bytes([c.craft_type for c in ext.opt_craft]
                        + [c.number_of_craft for c in ext.opt_craft]
                        + [c.number_of_waves for c in ext.opt_craft]))
    w.write_cstring(ext.pilot_id, 0x10)
    w.seek_absolute(base + _BACKDROP)
    w.write_u8(ext.backdrop)
    w.seek_absolute(base + FG_SIZE)


# =============================================================================
# Messages, globals, teams
# =============================================================================

def _read_message(data: bytes, index: int) -> Message:
    platform = Platform.XWA
    label = f"Message {index}"
    rec = MissionReader(data)
    message = new_message(platform)
    rec.seek_absolute(2)
    message.text = rec.read_cstring(0x40)
    message.sent_to_team = [data[0x52 + j] != 0 for j in range(10)]
    t = 0x5C
    triggers = [read_trigger(data, t + offset, platform, f"{label} trigger {i + 1}")
                for i, offset in enumerate((0x00, 0x06, 0x10, 0x16))]
    rec.seek_absolute(0x7C)
    message.voice_id = rec.read_cstring(8)
    message.originating_fg = data[0x84]
    c = 0x8C
    message.delay_seconds = xwa_delay_to_seconds(data[c])
    message.color = data[c + 2]
    triggers += [read_trigger(data, c + offset, platform, f"{label} cancel trigger {i + 1}")
                 for i, offset in enumerate((0x04, 0x0A))]
    message.triggers = triggers
    message.and_or = [data[t + 0x0E] != 0, data[t + 0x1E] != 0, data[c + 1] != 0, data[c + 0x12] != 0]
    return message


def _write_message(w: MissionWriter, message: Message, index: int):
    base = w.position
    triggers = (message.triggers + [Trigger() for _ in range(6)])[:6]
    and_or = (message.and_or + [False] * 4)[:4]
    w.write_i16(index)
    w.write_cstring(message.text, 0x40)
    w.seek_absolute(base + 0x52)
    w.write_bytes(bytes(int(sent) for sent in message.sent_to_team[:10]))
    w.write_bytes(triggers[0].to_bytes(TRIGGER_SIZE) + triggers[1].to_bytes(TRIGGER_SIZE))
    w.skip(2)
    w.write_bool(and_or[0])
    w.skip(1)
    w.write_bytes(triggers[2].to_bytes(TRIGGER_SIZE) + triggers[3].to_bytes(TRIGGER_SIZE))
    w.skip(2)
    w.write_bool(and_or[1])
    w.skip(1)
    w.write_cstring(message.voice_id, 8)
    w.write_u8(message.originating_fg)
    w.skip(7)
    w.write_u8(seconds_to_xwa_delay(message.delay_seconds))
    w.write_bool(and_or[2])
    w.write_u8(message.color)
    w.skip(1)
    w.write_bytes(triggers[4].to_bytes(TRIGGER_SIZE) + triggers[5].to_bytes(TRIGGER_SIZE))
    w.skip(2)
    w.write_bool(and_or[3])
    w.seek_absolute(base + MESSAGE_SIZE)


def _read_global_goal(data: bytes, label: str, goal: GlobalGoal):
    platform = Platform.XWA
    goal.triggers = [read_trigger(data, offset, platform, f"{label} trigger {i + 1}")
                     for i, offset in enumerate((0x00, 0x06, 0x10, 0x16))]
    goal.and_or = [data[0x0E] != 0, data[0x1E] != 0, data[0x31] != 0]
    goal.points = XWA_POINTS.from_raw(data[0x33])
    goal.active_sequence = data[0x38]


def _global_goal_to_bytes(goal: GlobalGoal, label: str) -> bytes:
    raw = bytearray(GLOBAL_GOAL_SIZE)
    for offset, trigger in zip((0x00, 0x06, 0x10, 0x16), goal.triggers):
        raw[offset:offset + TRIGGER_SIZE] = trigger.to_bytes(TRIGGER_SIZE)
    for offset, flag in zip((0x0E, 0x1E, 0x31), goal.and_or):
        raw[offset] = int(flag)
    raw[0x33] = XWA_POINTS.to_raw(goal.points, label) & 0xFF
    raw[0x38] = goal.active_sequence
    return bytes(raw)


def _read_team(data: bytes, team: Team):
    rec = MissionReader(data)
    rec.seek_absolute(2)
    team.name = rec.read_cstring(0x12)
    team.allies = list(data[0x1A:0x24])
    rec.seek_absolute(0x24)
    team.eom_messages = [rec.read_cstring(0x40) for _ in range(6)]
    rec.skip(6)
    team.voice_ids = [rec.read_cstring(0x14) for _ in range(3)]


def _team_to_bytes(team: Team) -> bytes:
    w = MissionWriter(TEAM_SIZE)
    w.write_i16(1)
    w.write_cstring(team.name, 0x12)
    w.seek_absolute(0x1A)
    w.write_bytes(bytes(team.allies[:10]))
    for text in team.eom_messages[:6]:
        w.write_cstring(text, 0x40)
    w.skip(6)
    for voice in (team.voice_ids + ["", "", ""])[:3]:
        w.write_cstring(voice, 0x14)
    return w.getvalue()


# =============================================================================
# Briefings
# =============================================================================

def _read_briefing(r: MissionReader, briefing: Briefing):
    briefing.length = r.read_i16()
    briefing.unknown1 = r.read_i16()
    r.skip(6)
    briefing.events = unpack_events(r.read_fixed(EVENT_AREA_BYTES[Platform.XWA]))
    briefing.teams = [b != 0 for b in r.read_fixed(10)]
    briefing.tags = [r.read_prefixed_string() for _ in range(128)]
    briefing.strings = [r.read_prefixed_string() for _ in range(128)]


def _write_briefing(w: MissionWriter, briefing: Briefing, label: str):
    w.write_i16(briefing.length)
    w.write_i16(briefing.unknown1)
    w.write_i16(0)
    w.write_i16(briefing.events_length)
    w.write_i16(0)
    w.write_bytes(pack_events(briefing.events, EVENT_AREA_BYTES[Platform.XWA], label))
    w.write_bytes(bytes(int(t) for t in briefing.teams[:10]))
    for tag in briefing.tags:
        w.write_prefixed_string(tag)
    for string in briefing.strings:
        w.write_prefixed_string(string)


# =============================================================================
# Mission
# =============================================================================

def decode_xwa(data: bytes) -> Mission:
    """Decode an XWA mission from raw bytes."""
    platform = detect_platform(data)
    if platform is not Platform.XWA:
        raise FormatMismatch(0x12, platform.profile.signature)
    r = MissionReader(data)
    mission = Mission(platform)
    header = mission.header

    r.seek_absolute(2)
    fg_count = r.read_i16()
    message_count = r.read_i16()
    r.seek_absolute(0x14)
    header.iff_names = [r.read_cstring(0x14) for _ in range(4)]
    header.regions = [r.read_cstring(0x84) for _ in range(4)]
    cargo = []
    for _ in range(16):
        cargo.append(GlobalCargo(r.read_cstring(0x40)))
        r.skip(0x8C - 0x40)
    header.global_cargo = cargo
    header.global_groups = [r.read_cstring(0x57) for _ in range(16)]
    r.seek_absolute(0x23AC)
    header.mission_type = r.read_u8()
    r.skip(1)
    header.time_limit_minutes = r.read_u8()
    header.end_when_complete = r.read_bool()
    header.officer = r.read_u8()
    header.logo = r.read_u8()
    r.seek_absolute(SIGNATURE_OFFSET_FG)
    logger.debug(f"XWA header: {fg_count} flight groups, {message_count} messages")

    mission.flight_groups.load(
        [_read_flight_group(r.read_fixed(FG_SIZE), i) for i in range(fg_count)])
    mission.messages.load(
        [_read_message(r.read_fixed(MESSAGE_SIZE), i) for i in range(message_count)])

    for t, globals_ in enumerate(mission.globals):
        r.skip(2)
        for g, goal in enumerate(globals_.goals):
            _read_global_goal(r.read_fixed(GLOBAL_GOAL_SIZE), f"Team {t + 1} global goal {g}", goal)
    for team in mission.teams:
        _read_team(r.read_fixed(TEAM_SIZE), team)
    for briefing in mission.briefings:
        _read_briefing(r, briefing)

    header.note = r.read_cstring(MISSION_NOTE_WIDTH)
    mission.briefings[0].string_notes = [r.read_cstring(NOTE_WIDTH) for _ in range(128)]
    for i in range(platform.profile.message_limit):
        note = r.read_cstring(NOTE_WIDTH)
        if i < mission.messages.count:
            mission.messages[i].note = note
    for team in mission.teams:
        team.eom_notes = [r.read_cstring(NOTE_WIDTH) for _ in range(3)]
    r.skip(NOTES_RESERVED)
    header.description_note = r.read_cstring(NOTE_WIDTH)
    header.success_note = r.read_cstring(NOTE_WIDTH)
    header.fail_note = r.read_cstring(NOTE_WIDTH)

    for fg in mission.flight_groups:
        for goal in fg.goals:
            goal.incomplete_text = _read_optional_string(r)
            goal.complete_text = _read_optional_string(r)
            goal.failed_text = _read_optional_string(r)
    for globals_ in mission.globals:
        for j in range(12):
            for k in range(3):
                text = _read_optional_string(r)
                if not _skip_global_string(j, k):
                    globals_.goals[j // 4].strings[j % 4][k] = text
    r.skip(STRINGS_RESERVED)
    for i in range(ORDER_STRING_SLOTS):
        for j in range(16):
            text = _read_optional_string(r)
            if i < mission.flight_groups.count:
                mission.flight_groups[i].orders[j].designation = text

    header.success_text = r.read_cstring(TEXT_WIDTH)
    header.fail_text = r.read_cstring(TEXT_WIDTH)
    header.description = r.read_cstring(min(TEXT_WIDTH, r.remaining))
    return mission


def encode_xwa(mission: Mission) -> bytes:
    """Encode an XWA mission; raises before producing any output on bad values."""
    mission.check()
    header = mission.header
    w = MissionWriter(SIGNATURE_OFFSET_FG)
    w.write_i16(Platform.XWA.profile.signature)
    w.write_i16(mission.flight_groups.count)
    w.write_i16(mission.messages.count)
    w.seek_absolute(0x14)
    for name in header.iff_names:
        w.write_cstring(name, 0x14)
    for region in header.regions:
        w.write_cstring(region, 0x84)
    for cargo in header.global_cargo:
        w.write_cstring(cargo.cargo, 0x40)
        w.skip(0x8C - 0x40)
    for group in header.global_groups:
        w.write_cstring(group, 0x57)
    w.seek_absolute(0x23AC)
    w.write_u8(header.mission_type)
    w.skip(1)
    w.write_u8(header.time_limit_minutes)
    w.write_bool(header.end_when_complete)
    w.write_u8(header.officer)
    w.write_u8(header.logo)
    w.seek_absolute(SIGNATURE_OFFSET_FG)

    for i, fg in enumerate(mission.flight_groups):
        _write_flight_group(w, fg, i)
    for i, message in enumerate(mission.messages):
        _write_message(w, message, i)
    for t, globals_ in enumerate(mission.globals):
        w.write_i16(3)
        for g, goal in enumerate(globals_.goals):
            w.write_bytes(_global_goal_to_bytes(goal, f"Team {t + 1} global goal {g}"))
    for team in mission.teams:
        w.write_bytes(_team_to_bytes(team))
    for i, briefing in enumerate(mission.briefings):
        _write_briefing(w, briefing, f"Briefing {i + 1}")

    w.write_cstring(header.note, MISSION_NOTE_WIDTH)
    notes = (mission.briefings[0].string_notes + [""] * 128)[:128]
    for note in notes:
        w.write_cstring(note, NOTE_WIDTH)
    for i in range(Platform.XWA.profile.message_limit):
        w.write_cstring(mission.messages[i].note if i < mission.messages.count else "", NOTE_WIDTH)
    for team in mission.teams:
        for note in (team.eom_notes + ["", "", ""])[:3]:
            w.write_cstring(note, NOTE_WIDTH)
    w.skip(NOTES_RESERVED)
    w.write_cstring(header.description_note, NOTE_WIDTH)
    w.write_cstring(header.success_note, NOTE_WIDTH)
    w.write_cstring(header.fail_note, NOTE_WIDTH)

    for fg in mission.flight_groups:
        for goal in fg.goals[:8]:
            _write_optional_string(w, goal.incomplete_text)
            _write_optional_string(w, goal.complete_text)
            _write_optional_string(w, goal.failed_text)
    for globals_ in mission.globals:
        for j in range(12):
            for k in range(3):
                text = "" if _skip_global_string(j, k) else globals_.goals[j // 4].strings[j % 4][k]
                _write_optional_string(w, text)
    w.skip(STRINGS_RESERVED)
    for i in range(ORDER_STRING_SLOTS):
        for j in range(16):
            text = ""
            if i < mission.flight_groups.count:
                text = mission.flight_groups[i].orders[j].designation
            _write_optional_string(w, text)

    w.write_cstring(header.success_text, TEXT_WIDTH)
    w.write_cstring(header.fail_text, TEXT_WIDTH)
    w.write_cstring(header.description, TEXT_WIDTH)
    logger.debug(f"XWA encode: {len(w.buffer)} bytes")
    return w.getvalue()
