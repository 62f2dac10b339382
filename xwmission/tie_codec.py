#!/usr/bin/env python3
"""
TIE Fighter Mission Codec
=========================

Reads and writes TIE95 .tie files.

File Structure:
--------------
| Offset  | Size          | Content                                   |
|---------|---------------|-------------------------------------------|
| 0x000   | 2             | Signature (-1)                            |
| 0x002   | 2             | Flight group count                        |
| 0x004   | 2             | Message count                             |
| 0x006   | 2             | 3 (constant)                              |
| 0x00A   | 1             | Briefing officers present                 |
| 0x00D   | 1             | Captured on ejection                      |
| 0x018   | 6 x 64        | End of mission messages                   |
| 0x19A   | 4 x 12        | IFF names 3..6 ('1' prefix = hostile)     |
| 0x1CA   | n x 0x124     | Flight groups                             |
|         | n x 0x5A      | Messages                                  |
|         | 3 x 0x1C      | Global goals                              |
|         | variable      | Briefing                                  |
|         | variable      | Officer questions, then 0x2106 0xFF       |

Flight Group (0x124 bytes):
--------------------------
| Offset | Field                     | Offset | Field                    |
|--------|---------------------------|--------|--------------------------|
| 0x00   | Name (12)                 | 0x49   | Arrival difficulty       |
| 0x0C   | Pilot (12)                | 0x4A   | Arrival trigger 1 (4)    |
| 0x18   | Cargo (12)                | 0x4E   | Arrival trigger 2 (4)    |
| 0x24   | Special cargo (12)        | 0x52   | AT1 and/or AT2           |
| 0x30   | Special cargo craft       | 0x54   | Arrival delay min / sec  |
| 0x31   | Random special cargo      | 0x56   | Departure trigger (4)    |
| 0x32   | Craft type                | 0x5A   | Departure timer min / sec|
| 0x33   | Number of craft           | 0x5C   | Abort trigger            |
| 0x34   | Status, missile, beam     | 0x60   | Motherships (8)          |
| 0x37   | IFF, AI, markings, radio  | 0x68   | Orders (3 x 18)          |
| 0x3C   | Formation, distance       | 0x9E   | Goals (10)               |
| 0x3E   | Global group, leader dist | 0xA8   | Waypoints (15 x 4 int16) |
| 0x40   | Waves - 1                 |        |                          |
| 0x42   | Player craft              |        |                          |
| 0x43   | Yaw, pitch, roll          |        |                          |
"""

import logging

from .briefing import Briefing, EVENT_AREA_BYTES, pack_events, unpack_events
from .cursor import MissionReader, MissionWriter
from .errors import FormatMismatch
from .flightgroup import (
    FlightGroup, Order, ORDER_SIZE_TIE, TieFields, new_flight_group,
    read_waypoints, special_craft_from_disk, special_craft_to_disk, waypoints_to_bytes,
)
from .mission import (
    Message, Mission, PostQuestion, PreQuestion, join_color, new_message, split_color,
)
from .platform import Platform, detect_platform
from .trigger import check_target, read_trigger
from .units import (
    TIE_POINTS, angle_from_byte, angle_to_byte, pitch_from_byte, pitch_to_byte,
    seconds_to_ticks, ticks_to_seconds,
)

logger = logging.getLogger(__name__)

# =============================================================================
# CONSTANTS
# =============================================================================

STRING_WIDTH = 12
FG_START = 0x1CA
FG_SIZE = 0x124
MESSAGE_SIZE = 0x5A
GLOBAL_GOAL_SIZE = 0x1C
WAYPOINT_COUNT = 15
END_MARKER = b'\x06\x21\xFF'

_CRAFT = 0x30
_ORDERS = 0x68
_GOALS = 0x9E
_WAYPOINTS = 0xA8

# Question answers use control bytes for highlighting
_ANSWER_DECODE = {1: "]", 2: "[", 10: "\n"}
_ANSWER_ENCODE = {v: k for k, v in _ANSWER_DECODE.items()}


# =============================================================================
# Flight groups
# =============================================================================

def _read_flight_group(data: bytes, index: int) -> FlightGroup:
    label = f"FlightGroup {index}"
    rec = MissionReader(data)
    fg = new_flight_group(Platform.TIE)
    fg.name = rec.read_cstring(STRING_WIDTH)
    fg.extension = TieFields(pilot=rec.read_cstring(STRING_WIDTH))
    fg.cargo = rec.read_cstring(STRING_WIDTH)
    fg.special_cargo = rec.read_cstring(STRING_WIDTH)

    b = data[_CRAFT:_CRAFT + 0x38]
    fg.rand_spec_cargo = b[1] != 0
    fg.craft_type = b[2]
    fg.number_of_craft = b[3]
    fg.special_cargo_craft = special_craft_from_disk(b[0], b[3])
    fg.status1 = b[4]
    fg.missile = b[5]
    fg.beam = b[6]
    fg.iff = b[7]
    fg.ai = b[8]
    fg.markings = b[9]
    fg.radio = b[0xA]
    fg.formation = b[0xC]
    fg.form_distance = b[0xD]
    fg.global_group = b[0xE]
    fg.form_leader_dist = b[0xF]
    fg.number_of_waves = b[0x10] + 1
    fg.player_craft = b[0x12]
    fg.yaw = angle_from_byte(b[0x13])
    fg.pitch = pitch_from_byte(b[0x14])
    fg.roll = angle_from_byte(b[0x15])

    fg.difficulty = b[0x19]
    fg.arr_dep_triggers = [
        read_trigger(data, _CRAFT + 0x1A, Platform.TIE, f"{label} arrival trigger 1"),
        read_trigger(data, _CRAFT + 0x1E, Platform.TIE, f"{label} arrival trigger 2"),
        read_trigger(data, _CRAFT + 0x26, Platform.TIE, f"{label} departure trigger"),
    ]
    fg.arr_dep_and_or = [b[0x22] != 0]
    fg.arrival_delay_minutes = b[0x24]
    fg.arrival_delay_seconds = b[0x25]
    fg.departure_timer_minutes = b[0x2A]
    fg.departure_timer_seconds = b[0x2B]
    fg.abort_trigger = b[0x2C]
    fg.arrival_craft1 = b[0x30]
    fg.arrival_method1 = b[0x31] != 0
    fg.departure_craft1 = b[0x32]
    fg.departure_method1 = b[0x33] != 0
    fg.arrival_craft2 = b[0x34]
    fg.arrival_method2 = b[0x35] != 0
    fg.departure_craft2 = b[0x36]
    fg.departure_method2 = b[0x37] != 0

    fg.orders = []
    for j in range(3):
        order = Order.parse(data, _ORDERS + j * ORDER_SIZE_TIE, ORDER_SIZE_TIE)
        for k in range(4):
            check_target(Platform.TIE, order.target_types[k], order.targets[k],
                         f"{label} order {j + 1} target {k + 1}")
        fg.orders.append(order)

    goals = data[_GOALS:_GOALS + 10]
    for j, goal in enumerate(fg.goals):
        goal.condition = goals[j * 2]
        goal.amount = goals[j * 2 + 1]
    fg.goals[3].points = TIE_POINTS.from_raw(goals[8])

    fg.waypoints = read_waypoints(data, _WAYPOINTS, WAYPOINT_COUNT, negate_y=False)
    return fg


def _write_flight_group(w: MissionWriter, fg: FlightGroup, index: int):
    base = w.position
    ext = fg.extension if isinstance(fg.extension, TieFields) else TieFields()
    w.write_cstring(fg.name, STRING_WIDTH)
    w.write_cstring(ext.pilot, STRING_WIDTH)
    w.write_cstring(fg.cargo, STRING_WIDTH)
    w.write_cstring(fg.special_cargo, STRING_WIDTH)

    b = bytearray(0x38)
    b[0] = special_craft_to_disk(fg)
    b[1] = int(fg.rand_spec_cargo)
    b[2] = fg.craft_type
    b[3] = fg.number_of_craft
    b[4] = fg.status1
    b[5] = fg.missile
    b[6] = fg.beam
    b[7] = fg.iff
    b[8] = fg.ai
    b[9] = fg.markings
    b[0xA] = fg.radio
    b[0xC] = fg.formation
    b[0xD] = fg.form_distance
    b[0xE] = fg.global_group
    b[0xF] = fg.form_leader_dist
    b[0x10] = fg.number_of_waves - 1
    b[0x12] = fg.player_craft
    b[0x13] = angle_to_byte(fg.yaw)
    b[0x14] = pitch_to_byte(fg.pitch, Platform.TIE.profile.pitch_threshold)
    b[0x15] = angle_to_byte(fg.roll)
    b[0x19] = fg.difficulty
    b[0x1A:0x1E] = fg.arr_dep_triggers[0].to_bytes()
    b[0x1E:0x22] = fg.arr_dep_triggers[1].to_bytes()
    b[0x22] = int(fg.arr_dep_and_or[0])
    b[0x24] = fg.arrival_delay_minutes
    b[0x25] = fg.arrival_delay_seconds
    b[0x26:0x2A] = fg.arr_dep_triggers[2].to_bytes()
    b[0x2A] = fg.departure_timer_minutes
    b[0x2B] = fg.departure_timer_seconds
    b[0x2C] = fg.abort_trigger
    b[0x30] = fg.arrival_craft1
    b[0x31] = int(fg.arrival_method1)
    b[0x32] = fg.departure_craft1
    b[0x33] = int(fg.departure_method1)
    b[0x34] = fg.arrival_craft2
    b[0x35] = int(fg.arrival_method2)
    b[0x36] = fg.departure_craft2
    b[0x37] = int(fg.departure_method2)
    w.write_bytes(bytes(b))

    for order in fg.orders[:3]:
        w.write_bytes(order.to_bytes(ORDER_SIZE_TIE))

    goals = bytearray(10)
    for j, goal in enumerate(fg.goals[:4]):
        goals[j * 2] = goal.condition
        goals[j * 2 + 1] = goal.amount
    goals[8] = TIE_POINTS.to_raw(fg.goals[3].points, f"FlightGroup {index} bonus goal") & 0xFF
    w.seek_absolute(base + _GOALS)
    w.write_bytes(bytes(goals))
    w.write_bytes(waypoints_to_bytes(fg.waypoints[:WAYPOINT_COUNT], negate_y=False))
    w.seek_absolute(base + FG_SIZE)


# =============================================================================
# Messages / globals
# =============================================================================

def _read_message(data: bytes, index: int) -> Message:
    label = f"Message {index}"
    rec = MissionReader(data)
    message = new_message(Platform.TIE)
    message.color, message.text = split_color(rec.read_cstring(64))
    message.triggers = [read_trigger(data, 0x40, Platform.TIE, f"{label} trigger 1"),
                        read_trigger(data, 0x44, Platform.TIE, f"{label} trigger 2")]
    rec.seek_absolute(0x48)
    message.note = rec.read_cstring(STRING_WIDTH)
    message.delay_seconds = ticks_to_seconds(data[0x58])
    message.and_or = [data[0x59] != 0]
    return message


def _write_message(w: MissionWriter, message: Message):
    base = w.position
    w.write_cstring(join_color(message.color, message.text), 64)
    w.write_bytes(message.triggers[0].to_bytes() + message.triggers[1].to_bytes())
    w.write_cstring(message.note, STRING_WIDTH)
    w.seek_absolute(base + 0x58)
    w.write_u8(seconds_to_ticks(message.delay_seconds))
    w.write_bool(message.and_or[0])


# =============================================================================
# Briefing and questions
# =============================================================================

def _read_briefing(r: MissionReader, briefing: Briefing):
    briefing.length = r.read_i16()
    briefing.unknown1 = r.read_i16()
    r.skip(6)
    briefing.events = unpack_events(r.read_fixed(EVENT_AREA_BYTES[Platform.TIE]))
    briefing.tags = [r.read_prefixed_string() for _ in range(32)]
    briefing.strings = [r.read_prefixed_string() for _ in range(32)]


def _write_briefing(w: MissionWriter, briefing: Briefing):
    w.write_i16(briefing.length)
    w.write_i16(briefing.unknown1)
    w.write_i16(0)
    w.write_i16(briefing.events_length)
    w.write_i16(0)
    w.write_bytes(pack_events(briefing.events, EVENT_AREA_BYTES[Platform.TIE]))
    for tag in briefing.tags:
        w.write_prefixed_string(tag)
    for string in briefing.strings:
        w.write_prefixed_string(string)


def _decode_answer(raw: bytes, encoding: str) -> str:
    out = []
    for b in raw:
        if b in (0, 0xFF):
            break
        out.append(_ANSWER_DECODE.get(b) or bytes([b]).decode(encoding, errors='replace'))
    return "".join(out)


def _encode_answer(text: str, encoding: str) -> bytes:
    out = bytearray()
    for ch in text.replace("\r", ""):
        if ch in _ANSWER_ENCODE:
            out.append(_ANSWER_ENCODE[ch])
        else:
            out += ch.encode(encoding, errors='replace')
    return bytes(out)


def _split_question(block: bytes, encoding: str):
    question, _, answer = block.partition(b'\n')
    return question.decode(encoding, errors='replace'), _decode_answer(answer, encoding)


def _read_questions(r: MissionReader, mission: Mission):
    questions = mission.questions
    for i in range(10):
        length = r.read_i16()
        if length <= 0:
            continue
        q, a = _split_question(r.read_fixed(length), r.encoding)
        questions.pre[i] = PreQuestion(q, a)
    for i in range(10):
        length = r.read_i16()
        if length <= 0:
            continue
        block = r.read_fixed(length)
        q, a = _split_question(block[2:], r.encoding)
        if q or a:
            questions.post[i] = PostQuestion(q, a, block[0], block[1])


def _write_questions(w: MissionWriter, mission: Mission):
    for pre in mission.questions.pre:
        if not pre.question and not pre.answer:
            w.write_i16(0)
            continue
        block = (w.encode_text(pre.question) + b'\n'
                 + _encode_answer(pre.answer, w.encoding))
        w.write_i16(len(block))
        w.write_bytes(block)
    for post in mission.questions.post:
        if not post.question and not post.answer:
            w.write_i16(0)
            continue
        block = (bytes([post.trigger, post.trigger_type]) + w.encode_text(post.question)
                 + b'\n' + _encode_answer(post.answer, w.encoding))
        w.write_i16(len(block))
        w.write_bytes(block)
    w.write_bytes(END_MARKER)


# =============================================================================
# Mission
# =============================================================================

def decode_tie(data: bytes) -> Mission:
    """Decode a TIE Fighter mission from raw bytes."""
    platform = detect_platform(data)
    if platform is not Platform.TIE:
        raise FormatMismatch(Platform.TIE.profile.signature, platform.profile.signature)
    r = MissionReader(data)
    mission = Mission(Platform.TIE)
    header = mission.header

    r.seek_absolute(2)
    fg_count = r.read_i16()
    message_count = r.read_i16()
    r.seek_absolute(0xA)
    header.officers_present = r.read_u8()
    r.seek_absolute(0xD)
    header.captured_on_ejection = r.read_bool()
    r.seek_absolute(0x18)
    header.eom_messages = [r.read_cstring(64) for _ in range(6)]
    r.skip(2)
    for i in range(4):
        name = r.read_cstring(STRING_WIDTH)
        header.iff_hostile[i] = name.startswith("1")
        header.iff_names[i] = name[1:] if header.iff_hostile[i] else name
    logger.debug(f"TIE header: {fg_count} flight groups, {message_count} messages")

    fgs = [_read_flight_group(r.read_fixed(FG_SIZE), i) for i in range(fg_count)]
    mission.flight_groups.load(fgs)
    messages = [_read_message(r.read_fixed(MESSAGE_SIZE), i) for i in range(message_count)]
    mission.messages.load(messages)

    for i, goal in enumerate(mission.globals[0].goals):
        rec = r.read_fixed(GLOBAL_GOAL_SIZE)
        label = f"Global goal {i}"
        goal.triggers = [read_trigger(rec, 0, Platform.TIE, f"{label} trigger 1"),
                         read_trigger(rec, 4, Platform.TIE, f"{label} trigger 2")]
        for trigger in goal.triggers:
            if trigger.variable_type == 0:
                trigger.variable = 0
        goal.and_or = [rec[0x19] != 0]

    _read_briefing(r, mission.briefings[0])
    logger.debug(f"TIE briefing ends at 0x{r.position:X}")
    _read_questions(r, mission)
    return mission


def encode_tie(mission: Mission) -> bytes:
    """Encode a TIE Fighter mission; raises before producing any output on bad values."""
    mission.check()
    header = mission.header
    w = MissionWriter(FG_START)
    w.write_i16(Platform.TIE.profile.signature)
    w.write_i16(mission.flight_groups.count)
    w.write_i16(mission.messages.count)
    w.write_i16(3)
    w.seek_absolute(0xA)
    w.write_u8(header.officers_present)
    w.seek_absolute(0xD)
    w.write_bool(header.captured_on_ejection)
    w.seek_absolute(0x18)
    for text in header.eom_messages:
        w.write_cstring(text, 64)
    w.skip(2)
    for name, hostile in zip(header.iff_names, header.iff_hostile):
        w.write_cstring(("1" if hostile else "") + name, STRING_WIDTH)

    for i, fg in enumerate(mission.flight_groups):
        _write_flight_group(w, fg, i)
    for message in mission.messages:
        _write_message(w, message)
    for goal in mission.globals[0].goals:
        base = w.position
        w.write_bytes(goal.triggers[0].to_bytes() + goal.triggers[1].to_bytes())
        w.seek_absolute(base + 0x19)
        w.write_bool(goal.and_or[0])
        w.seek_absolute(base + GLOBAL_GOAL_SIZE)
    _write_briefing(w, mission.briefings[0])
    _write_questions(w, mission)
    logger.debug(f"TIE encode: {len(w.buffer)} bytes")
    return w.getvalue()
