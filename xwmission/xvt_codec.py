#!/usr/bin/env python3
"""
XvT / Balance of Power Mission Codec
====================================

Reads and writes X-wing vs TIE Fighter (signature 0x0C) and Balance of
Power (signature 0x0E) .tie files. The two share one layout; BoP carries
success / failure text ahead of a longer description.

File Structure:
--------------
| Offset | Size         | Content                                          |
|--------|--------------|--------------------------------------------------|
| 0x00   | 2            | Signature (0x0C / 0x0E)                          |
| 0x02   | 2 + 2        | Flight group count, message count                |
| 0x06   | 6            | Legacy time limit, win type, seed, rescue, shown |
| 0x14   | 4 x 0x14     | IFF names 3..6                                   |
| 0x64   | 4            | Mission type, goals unimportant, time limit      |
| 0xA4   | n x 0x562    | Flight groups                                    |
|        | n x 0x74     | Messages                                         |
|        | 10 x 0x80    | Global goals (per team)                          |
|        | 10 x 0x1E7   | Teams                                            |
|        | 8 x variable | Briefings                                        |
|        | n x 0x600    | Flight group goal strings                        |
|        | 10 x 0x1500  | Global goal strings                              |
|        | 0x400        | Description (XvT)                                |
|        | 3 x 0x1000   | Success, failure, description (BoP)              |

Flight Group (0x562 bytes):
--------------------------
| Offset | Field                  | Offset | Field                        |
|--------|------------------------|--------|------------------------------|
| 0x000  | Name (20)              | 0x0A2  | Orders (4 x 0x52)            |
| 0x014  | Roles (4 x 4)          | 0x1EA  | Skip to order 4 triggers     |
| 0x028  | Cargo (20)             | 0x1F5  | Goals (8 x 0x4E)             |
| 0x03C  | Special cargo (20)     | 0x466  | Waypoints (22 x 4 int16)     |
| 0x050  | Craft block (0x1D)     | 0x520  | Options block (0x10)         |
| 0x06D  | Arr/dep block (0x35)   | 0x530  | Optional loadout (18)        |
|        |                        | 0x542  | Optional craft (1 + 30)      |
"""

import logging

from .briefing import Briefing, EVENT_AREA_BYTES, pack_events, unpack_events
from .cursor import MissionReader, MissionWriter
from .errors import FormatMismatch
from .flightgroup import (
    FlightGroup, Goal, Order, OptionalCraft, ORDER_SIZE, XvtFields, new_flight_group,
    read_waypoints, special_craft_from_disk, special_craft_to_disk, waypoints_to_bytes,
)
from .loadout import OptLoadout
from .mission import (
    GlobalGoal, Message, Mission, Team, join_color, new_message, split_color,
)
from .platform import Platform, detect_platform
from .trigger import Trigger, check_target, read_trigger
from .units import (
    XVT_POINTS, angle_from_byte, angle_to_byte, pitch_from_byte, pitch_to_byte,
    seconds_to_ticks, ticks_to_seconds,
)

logger = logging.getLogger(__name__)

# =============================================================================
# CONSTANTS
# =============================================================================

STRING_WIDTH = 0x14
FG_START = 0xA4
FG_SIZE = 0x562
MESSAGE_SIZE = 0x74
GLOBAL_GOAL_SIZE = 0x2A
TEAM_SIZE = 0x1E7
ORDER_STRIDE = 0x52
GOAL_STRIDE = 0x4E
GOAL_STRING = 0x40
WAYPOINT_COUNT = 22
DESCRIPTION_XVT = 0x400
DESCRIPTION_BOP = 0x1000
GLOBAL_STRINGS_PAD = 0xC00

_CRAFT = 0x50
_ARRDEP = 0x6D
_ORDERS = 0xA2
_SKIP = 0x1EA
_GOALS = 0x1F5
_WAYPOINTS = 0x466
_OPTIONS = 0x520
_LOADOUT = 0x530
_OPT_CRAFT = 0x542

# Arr/dep block offsets of triggers 1..6
_ARRDEP_TRIGGERS = [0x01, 0x05, 0x0C, 0x10, 0x1B, 0x1F]
# And/or flags: AT1/AT2, AT3/AT4, AT12/AT34, DT1/DT2
_ARRDEP_AND_OR = [0x0B, 0x16, 0x17, 0x25]

_MESSAGE_TRIGGERS = [0x4C, 0x50, 0x57, 0x5B]
_MESSAGE_AND_OR = [0x56, 0x61, 0x73]


def _skip_global_string(j: int, k: int) -> bool:
    """Secondary goals have no incomplete text; prevent and secondary have no failed text."""
    return (j >= 8 and k == 0) or (j >= 4 and k == 2)


# =============================================================================
# Flight groups
# =============================================================================

def _read_flight_group(data: bytes, index: int, platform: Platform) -> FlightGroup:
    label = f"FlightGroup {index}"
    rec = MissionReader(data)
    fg = new_flight_group(platform)
    ext = XvtFields()
    fg.extension = ext
    fg.name = rec.read_cstring(STRING_WIDTH)
    ext.roles = [rec.read_cstring(4) for _ in range(4)]
    rec.skip(4)
    fg.cargo = rec.read_cstring(STRING_WIDTH)
    fg.special_cargo = rec.read_cstring(STRING_WIDTH)

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
    fg.number_of_waves = b[0x11] + 1
    ext.wave_delay = b[0x12]
    ext.stop_arriving_when = b[0x13]
    fg.player_number = b[0x14]
    fg.arrive_only_if_human = b[0x15] != 0
    fg.player_craft = b[0x16]
    fg.yaw = angle_from_byte(b[0x17])
    fg.pitch = pitch_from_byte(b[0x18])
    fg.roll = angle_from_byte(b[0x19])
    ext.permadeath_enabled = b[0x1A] != 0
    ext.permadeath_id = b[0x1B]

    a = data[_ARRDEP:_ARRDEP + 0x35]
    difficulty = a[0]
    # Editors have written 7+ here; fold back into the 0..6 range
    if difficulty == 7:
        difficulty = 6
    elif difficulty > 6:
        difficulty -= 7
    fg.difficulty = difficulty
    fg.arr_dep_triggers = [
        read_trigger(a, offset, platform, f"{label} arr/dep trigger {i + 1}")
        for i, offset in enumerate(_ARRDEP_TRIGGERS)
    ]
    fg.arr_dep_and_or = [a[offset] != 0 for offset in _ARRDEP_AND_OR]
    ext.random_arrival_delay_minutes = a[0x18]
    fg.arrival_delay_minutes = a[0x19]
    fg.arrival_delay_seconds = a[0x1A]
    fg.departure_timer_minutes = a[0x26]
    fg.departure_timer_seconds = a[0x27]
    fg.abort_trigger = a[0x28]
    ext.random_arrival_delay_seconds = a[0x29]
    fg.arrival_craft1 = a[0x2D]
    fg.arrival_method1 = a[0x2E] != 0
    fg.departure_craft1 = a[0x2F]
    fg.departure_method1 = a[0x30] != 0
    ext.alternate_mothership = a[0x31]
    ext.alternate_mothership_used = a[0x32] != 0
    ext.captured_depart_mothership = a[0x33]
    ext.captured_depart_via_mothership = a[0x34] != 0

    for j, order in enumerate(fg.orders):
        offset = _ORDERS + j * ORDER_STRIDE
        parsed = Order.parse(data, offset, ORDER_SIZE)
        for k in range(4):
            check_target(platform, parsed.target_types[k], parsed.targets[k],
                         f"{label} order {j + 1} target {k + 1}")
        rec.seek_absolute(offset + ORDER_SIZE)
        parsed.designation = rec.read_cstring(16)
        parsed.skip_triggers = order.skip_triggers
        fg.orders[j] = parsed
    fg.orders[3].skip_triggers = [
        read_trigger(data, _SKIP, platform, f"{label} skip trigger 1"),
        read_trigger(data, _SKIP + 4, platform, f"{label} skip trigger 2"),
    ]
    fg.orders[3].skip_t1_or_t2 = data[_SKIP + 0xA] != 0

    for j in range(8):
        g = data[_GOALS + j * GOAL_STRIDE:_GOALS + j * GOAL_STRIDE + 15]
        fg.goals[j] = Goal(argument=g[0], condition=g[1], amount=g[2],
                           points=XVT_POINTS.from_raw(g[3]), enabled=g[4] != 0, team=g[5])

    fg.waypoints = read_waypoints(data, _WAYPOINTS, WAYPOINT_COUNT, negate_y=True)

    o = data[_OPTIONS:_OPTIONS + 0x10]
    ext.prevent_craft_numbering = o[0] != 0
    ext.departure_clock_minutes = o[1]
    ext.departure_clock_seconds = o[2]
    ext.countermeasures = o[3]
    ext.explosion_time = o[4]
    ext.status2 = o[5]
    ext.global_unit = o[6]
    ext.handicap = o[0xF]
    ext.opt_loadout = OptLoadout.parse(data, _LOADOUT)
    ext.opt_craft_category = data[_OPT_CRAFT]
    c = data[_OPT_CRAFT + 1:_OPT_CRAFT + 31]
    ext.opt_craft = [OptionalCraft(c[k], c[k + 10], c[k + 20]) for k in range(10)]
    return fg


def _write_flight_group(w: MissionWriter, fg: FlightGroup, index: int, platform: Platform):
    base = w.position
    ext = fg.extension if isinstance(fg.extension, XvtFields) else XvtFields()
    w.write_cstring(fg.name, STRING_WIDTH)
    for role in ext.roles:
        w.write_bytes(w.encode_text(role)[:4].ljust(4, b'\x00'))
    w.seek_absolute(base + 0x28)
    w.write_cstring(fg.cargo, STRING_WIDTH)
    w.write_cstring(fg.special_cargo, STRING_WIDTH)

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
    b[0x11] = fg.number_of_waves - 1
    b[0x12] = ext.wave_delay
    b[0x13] = ext.stop_arriving_when
    b[0x14] = fg.player_number
    b[0x15] = int(fg.arrive_only_if_human)
    b[0x16] = fg.player_craft
    b[0x17] = angle_to_byte(fg.yaw)
    b[0x18] = pitch_to_byte(fg.pitch, platform.profile.pitch_threshold)
    b[0x19] = angle_to_byte(fg.roll)
    b[0x1A] = int(ext.permadeath_enabled)
    b[0x1B] = ext.permadeath_id
    w.write_bytes(bytes(b))

    a = bytearray(0x35)
    a[0] = fg.difficulty
    for offset, trigger in zip(_ARRDEP_TRIGGERS, fg.arr_dep_triggers):
        a[offset:offset + 4] = trigger.to_bytes()
    for offset, flag in zip(_ARRDEP_AND_OR, fg.arr_dep_and_or):
        a[offset] = int(flag)
    a[0x18] = ext.random_arrival_delay_minutes
    a[0x19] = fg.arrival_delay_minutes
    a[0x1A] = fg.arrival_delay_seconds
    a[0x26] = fg.departure_timer_minutes
    a[0x27] = fg.departure_timer_seconds
    a[0x28] = fg.abort_trigger
    a[0x29] = ext.random_arrival_delay_seconds
    a[0x2D] = fg.arrival_craft1
    a[0x2E] = int(fg.arrival_method1)
    a[0x2F] = fg.departure_craft1
    a[0x30] = int(fg.departure_method1)
    a[0x31] = ext.alternate_mothership
    a[0x32] = int(ext.alternate_mothership_used)
    a[0x33] = ext.captured_depart_mothership
    a[0x34] = int(ext.captured_depart_via_mothership)
    w.write_bytes(bytes(a))

    for j, order in enumerate(fg.orders[:4]):
        w.seek_absolute(base + _ORDERS + j * ORDER_STRIDE)
        w.write_bytes(order.to_bytes(ORDER_SIZE))
        w.write_cstring(order.designation, 16)
    w.seek_absolute(base + _SKIP)
    skip = fg.orders[3].skip_triggers if len(fg.orders) > 3 else []
    skip = (skip + [Trigger(), Trigger()])[:2]
    w.write_bytes(skip[0].to_bytes() + skip[1].to_bytes())
    w.skip(2)
    w.write_bool(fg.orders[3].skip_t1_or_t2 if len(fg.orders) > 3 else False)

    for j, goal in enumerate(fg.goals[:8]):
        g = bytearray(15)
        g[0] = goal.argument
        g[1] = goal.condition
        g[2] = goal.amount
        g[3] = XVT_POINTS.to_raw(goal.points, f"FlightGroup {index} goal {j}") & 0xFF
        g[4] = int(goal.enabled)
        g[5] = goal.team
        w.seek_absolute(base + _GOALS + j * GOAL_STRIDE)
        w.write_bytes(bytes(g))

    w.seek_absolute(base + _WAYPOINTS)
    w.write_bytes(waypoints_to_bytes(fg.waypoints[:WAYPOINT_COUNT], negate_y=True))

    o = bytearray(0x10)
    o[0] = int(ext.prevent_craft_numbering)
    o[1] = ext.departure_clock_minutes
    o[2] = ext.departure_clock_seconds
    o[3] = ext.countermeasures
    o[4] = ext.explosion_time
    o[5] = ext.status2
    o[6] = ext.global_unit
    o[0xF] = ext.handicap
    w.seek_absolute(base + _OPTIONS)
    w.write_bytes(bytes(o))
    w.write_bytes(ext.opt_loadout.to_bytes())
    w.write_u8(ext.opt_craft_category)
    w.write_bytes(bytes([c.craft_type for c in ext.opt_craft]
                        + [c.number_of_craft for c in ext.opt_craft]
                        + [c.number_of_waves for c in ext.opt_craft]))
    w.seek_absolute(base + FG_SIZE)


# =============================================================================
# Messages, globals, teams
# =============================================================================

def _read_message(data: bytes, index: int, platform: Platform) -> Message:
    label = f"Message {index}"
    rec = MissionReader(data)
    message = new_message(platform)
    rec.seek_absolute(2)
    message.color, message.text = split_color(rec.read_cstring(64))
    message.sent_to_team = [data[0x42 + j] != 0 for j in range(10)]
    message.triggers = [read_trigger(data, offset, platform, f"{label} trigger {i + 1}")
                        for i, offset in enumerate(_MESSAGE_TRIGGERS)]
    message.and_or = [data[offset] != 0 for offset in _MESSAGE_AND_OR]
    rec.seek_absolute(0x62)
    message.note = rec.read_cstring(16)
    message.delay_seconds = ticks_to_seconds(data[0x72])
    return message


def _write_message(w: MissionWriter, message: Message, index: int):
    base = w.position
    w.write_i16(index)
    w.write_cstring(join_color(message.color, message.text), 64)
    w.write_bytes(bytes(int(sent) for sent in message.sent_to_team[:10]))
    for offset, trigger in zip(_MESSAGE_TRIGGERS, message.triggers):
        w.seek_absolute(base + offset)
        w.write_bytes(trigger.to_bytes())
    for offset, flag in zip(_MESSAGE_AND_OR, message.and_or):
        w.seek_absolute(base + offset)
        w.write_bool(flag)
    w.seek_absolute(base + 0x62)
    w.write_cstring(message.note, 16)
    w.write_u8(seconds_to_ticks(message.delay_seconds))
    w.seek_absolute(base + MESSAGE_SIZE)


def _read_global_goal(data: bytes, platform: Platform, label: str, goal: GlobalGoal):
    rec = MissionReader(data)
    goal.triggers = [read_trigger(data, offset, platform, f"{label} trigger {i + 1}")
                     for i, offset in enumerate((0x00, 0x04, 0x0B, 0x0F))]
    goal.and_or = [data[0x0A] != 0, data[0x15] != 0, data[0x27] != 0]
    rec.seek_absolute(0x16)
    goal.name = rec.read_cstring(16)
    goal.version = data[0x26]
    goal.delay = data[0x28]
    goal.points = XVT_POINTS.from_raw(data[0x29])


def _global_goal_to_bytes(goal: GlobalGoal, label: str) -> bytes:
    w = MissionWriter(GLOBAL_GOAL_SIZE)
    for offset, trigger in zip((0x00, 0x04, 0x0B, 0x0F), goal.triggers):
        w.seek_absolute(offset)
        w.write_bytes(trigger.to_bytes())
    for offset, flag in zip((0x0A, 0x15, 0x27), goal.and_or):
        w.seek_absolute(offset)
        w.write_bool(flag)
    w.seek_absolute(0x16)
    w.write_cstring(goal.name, 16)
    w.write_u8(goal.version)
    w.seek_absolute(0x28)
    w.write_u8(goal.delay)
    w.write_u8(XVT_POINTS.to_raw(goal.points, label))
    return w.getvalue()


def _read_team(data: bytes, team: Team):
    rec = MissionReader(data)
    rec.seek_absolute(2)
    team.name = rec.read_cstring(0x10)
    team.allies = list(data[0x1A:0x24])
    rec.seek_absolute(0x24)
    for j in range(6):
        team.eom_colors[j], team.eom_messages[j] = split_color(rec.read_cstring(0x40))


def _team_to_bytes(team: Team) -> bytes:
    w = MissionWriter(TEAM_SIZE)
    w.write_i16(1)
    w.write_cstring(team.name, 0x10)
    w.seek_absolute(0x1A)
    w.write_bytes(bytes(team.allies[:10]))
    for color, text in zip(team.eom_colors, team.eom_messages):
        w.write_cstring(join_color(color, text), 0x40)
    return w.getvalue()


# =============================================================================
# Briefings
# =============================================================================

def _read_briefing(r: MissionReader, briefing: Briefing, area: int):
    briefing.length = r.read_i16()
    r.skip(6)
    briefing.unknown1 = r.read_i16()
    briefing.events = unpack_events(r.read_fixed(area))
    briefing.teams = [b != 0 for b in r.read_fixed(10)]
    briefing.tags = [r.read_prefixed_string() for _ in range(32)]
    briefing.strings = [r.read_prefixed_string() for _ in range(32)]


def _write_briefing(w: MissionWriter, briefing: Briefing, area: int, label: str):
    w.write_i16(briefing.length)
    w.write_i16(0)
    w.write_i16(0)
    w.write_i16(briefing.events_length)
    w.write_i16(briefing.unknown1)
    w.write_bytes(pack_events(briefing.events, area, label))
    w.write_bytes(bytes(int(t) for t in briefing.teams[:10]))
    for tag in briefing.tags:
        w.write_prefixed_string(tag)
    for string in briefing.strings:
        w.write_prefixed_string(string)


# =============================================================================
# Mission
# =============================================================================

def decode_xvt(data: bytes) -> Mission:
    """Decode an XvT or BoP mission from raw bytes."""
    platform = detect_platform(data)
    if not platform.is_xvt_family:
        raise FormatMismatch("0x0C or 0x0E", platform.profile.signature)
    r = MissionReader(data)
    mission = Mission(platform)
    header = mission.header

    r.seek_absolute(2)
    fg_count = r.read_i16()
    message_count = r.read_i16()
    header.legacy_time_limit_minutes = r.read_u8()
    header.legacy_time_limit_seconds = r.read_u8()
    header.win_type = r.read_u8()
    header.rnd_seed = r.read_u8()
    header.legacy_rescue = r.read_u8()
    header.legacy_all_way_shown = r.read_bool()
    r.seek_absolute(0x14)
    header.iff_names = [r.read_cstring(STRING_WIDTH) for _ in range(4)]
    r.seek_absolute(0x64)
    header.mission_type = r.read_u8()
    header.goals_unimportant = r.read_bool()
    header.time_limit_minutes = r.read_u8()
    header.time_limit_seconds = r.read_u8()
    r.seek_absolute(FG_START)
    logger.debug(f"{platform.name} header: {fg_count} flight groups, {message_count} messages")

    mission.flight_groups.load(
        [_read_flight_group(r.read_fixed(FG_SIZE), i, platform) for i in range(fg_count)])
    mission.messages.load(
        [_read_message(r.read_fixed(MESSAGE_SIZE), i, platform) for i in range(message_count)])

    for t, globals_ in enumerate(mission.globals):
        count = r.read_i16()
        for g in range(count):
            rec = r.read_fixed(GLOBAL_GOAL_SIZE)
            if g < len(globals_.goals):
                _read_global_goal(rec, platform, f"Team {t + 1} global goal {g}", globals_.goals[g])
    for team in mission.teams:
        _read_team(r.read_fixed(TEAM_SIZE), team)
    area = EVENT_AREA_BYTES[platform]
    for briefing in mission.briefings:
        _read_briefing(r, briefing, area)
    logger.debug(f"{platform.name} briefings end at 0x{r.position:X}")

    for fg in mission.flight_groups:
        for goal in fg.goals:
            goal.incomplete_text = r.read_cstring(GOAL_STRING)
            goal.complete_text = r.read_cstring(GOAL_STRING)
            goal.failed_text = r.read_cstring(GOAL_STRING)
    for globals_ in mission.globals:
        for j in range(12):
            for k in range(3):
                text = r.read_cstring(GOAL_STRING)
                if not _skip_global_string(j, k):
                    globals_.goals[j // 4].strings[j % 4][k] = text
        r.skip(GLOBAL_STRINGS_PAD)

    if platform is Platform.BOP:
        header.success_text = r.read_cstring(DESCRIPTION_BOP)
        header.fail_text = r.read_cstring(DESCRIPTION_BOP)
        header.description = r.read_cstring(DESCRIPTION_BOP)
    else:
        header.description = r.read_cstring(min(DESCRIPTION_XVT, r.remaining))
    return mission


def encode_xvt(mission: Mission) -> bytes:
    """Encode an XvT or BoP mission; raises before producing any output on bad values."""
    platform = mission.platform
    mission.check()
    header = mission.header
    w = MissionWriter(FG_START)
    w.write_i16(platform.profile.signature)
    w.write_i16(mission.flight_groups.count)
    w.write_i16(mission.messages.count)
    w.write_u8(header.legacy_time_limit_minutes)
    w.write_u8(header.legacy_time_limit_seconds)
    w.write_u8(header.win_type)
    w.write_u8(header.rnd_seed)
    w.write_u8(header.legacy_rescue)
    w.write_bool(header.legacy_all_way_shown)
    w.seek_absolute(0x14)
    for name in header.iff_names:
        w.write_cstring(name, STRING_WIDTH)
    w.seek_absolute(0x64)
    w.write_u8(header.mission_type)
    w.write_bool(header.goals_unimportant)
    w.write_u8(header.time_limit_minutes)
    w.write_u8(header.time_limit_seconds)
    w.seek_absolute(FG_START)

    for i, fg in enumerate(mission.flight_groups):
        _write_flight_group(w, fg, i, platform)
    for i, message in enumerate(mission.messages):
        _write_message(w, message, i)
    for t, globals_ in enumerate(mission.globals):
        w.write_i16(len(globals_.goals))
        for g, goal in enumerate(globals_.goals):
            w.write_bytes(_global_goal_to_bytes(goal, f"Team {t + 1} global goal {g}"))
    for team in mission.teams:
        w.write_bytes(_team_to_bytes(team))
    area = EVENT_AREA_BYTES[platform]
    for i, briefing in enumerate(mission.briefings):
        _write_briefing(w, briefing, area, f"Briefing {i + 1}")

    for fg in mission.flight_groups:
        for goal in fg.goals[:8]:
            w.write_cstring(goal.incomplete_text, GOAL_STRING)
            w.write_cstring(goal.complete_text, GOAL_STRING)
            w.write_cstring(goal.failed_text, GOAL_STRING)
    for globals_ in mission.globals:
        for j in range(12):
            for k in range(3):
                text = "" if _skip_global_string(j, k) else globals_.goals[j // 4].strings[j % 4][k]
                w.write_cstring(text, GOAL_STRING)
        w.skip(GLOBAL_STRINGS_PAD)

    if platform is Platform.BOP:
        w.write_cstring(header.success_text, DESCRIPTION_BOP)
        w.write_cstring(header.fail_text, DESCRIPTION_BOP)
        w.write_cstring(header.description, DESCRIPTION_BOP)
    else:
        w.write_cstring(header.description, DESCRIPTION_XVT)
    logger.debug(f"{platform.name} encode: {len(w.buffer)} bytes")
    return w.getvalue()
