import pytest

from xwmission.briefing import BriefingEvent, EventType
from xwmission.codec import decode, encode
from xwmission.errors import FieldOutOfRange, FormatMismatch, TruncatedInput
from xwmission.mission import PostQuestion, PreQuestion, new_mission
from xwmission.platform import Platform
from xwmission.tie_codec import END_MARKER, FG_START, decode_tie, encode_tie
from xwmission.trigger import Condition, Trigger, VariableType


def test_default_mission_round_trip(tie_mission):
    data = encode_tie(tie_mission)
    assert data[:2] == b'\xff\xff'
    assert data.endswith(END_MARKER)
    assert decode(data) == tie_mission


def test_flight_group_fields(tie_mission):
    fg = tie_mission.flight_groups[1]
    fg.name = "Alpha"
    fg.extension.pilot = "Maarek"
    fg.craft_type = 5
    fg.number_of_craft = 3
    fg.number_of_waves = 2
    fg.set_special_cargo_craft(2)
    fg.yaw, fg.pitch, fg.roll = 90, -45, -90
    fg.arr_dep_triggers[0] = Trigger(Condition.DESTROYED, VariableType.FLIGHT_GROUP, 0)
    fg.orders[0].command = 3
    fg.orders[0].target_types[0] = VariableType.FLIGHT_GROUP
    fg.waypoints[4].x, fg.waypoints[4].enabled = -800, True

    decoded = decode_tie(encode_tie(tie_mission)).flight_groups[1]
    assert decoded.name == "Alpha"
    assert decoded.extension.pilot == "Maarek"
    assert (decoded.craft_type, decoded.number_of_craft, decoded.number_of_waves) == (5, 3, 2)
    assert decoded.special_cargo_craft == 2
    assert (decoded.yaw, decoded.pitch, decoded.roll) == (90, -45, -90)
    assert decoded.arr_dep_triggers[0] == Trigger(Condition.DESTROYED, VariableType.FLIGHT_GROUP, 0)
    assert decoded.orders[0].command == 3
    assert decoded.waypoints[4].x == -800 and decoded.waypoints[4].enabled


def test_names_truncated_to_width(tie_mission):
    tie_mission.flight_groups[0].name = "A very long flight group name"
    decoded = decode_tie(encode_tie(tie_mission))
    assert decoded.flight_groups[0].name == "A very long"


def test_message_color_and_delay(tie_mission):
    message = tie_mission.messages[1]
    message.color = 2
    message.text = "Reinforcements arriving"
    message.delay_seconds = 25
    message.note = "cue"

    decoded = decode_tie(encode_tie(tie_mission)).messages[1]
    assert (decoded.color, decoded.text) == (2, "Reinforcements arriving")
    assert decoded.delay_seconds == 25
    assert decoded.note == "cue"


def test_iff_names_carry_hostile_prefix(tie_mission):
    tie_mission.header.iff_names[0] = "Pirates"
    tie_mission.header.iff_hostile[0] = True
    tie_mission.header.iff_names[1] = "Traders"
    data = encode_tie(tie_mission)
    assert data[0x19A:0x1A2] == b"1Pirates"

    header = decode_tie(data).header
    assert header.iff_names[:2] == ["Pirates", "Traders"]
    assert header.iff_hostile[:2] == [True, False]


def test_questions_round_trip(tie_mission):
    questions = tie_mission.questions
    questions.pre[0] = PreQuestion("What is the mission?", "Destroy the [convoy].\nReturn home.")
    questions.post[1] = PostQuestion("Well done?", "You [captured] it.", 4, 1)

    data = encode_tie(tie_mission)
    assert b"\x02convoy\x01.\nReturn" in data
    decoded = decode_tie(data).questions
    assert decoded.pre[0] == questions.pre[0]
    assert decoded.post[1] == questions.post[1]
    assert decoded.post[0] == PostQuestion()


def test_briefing_events(tie_mission):
    briefing = tie_mission.briefings[0]
    briefing.events = [BriefingEvent(0, EventType.TITLE_TEXT, [0]),
                       BriefingEvent(12, EventType.MOVE_MAP, [100, -200])]
    briefing.strings[0] = "Operation"
    decoded = decode_tie(encode_tie(tie_mission)).briefings[0]
    assert decoded.events == briefing.events
    assert decoded.strings[0] == "Operation"


# =============================================================================
# Points
# =============================================================================

def test_bonus_points_quantized(tie_mission):
    tie_mission.flight_groups[0].goals[3].points = 120
    decoded = decode_tie(encode_tie(tie_mission))
    assert decoded.flight_groups[0].goals[3].points == 100


def test_points_out_of_range_rejected(tie_mission):
    tie_mission.flight_groups[0].goals[3].points = 6400
    with pytest.raises(FieldOutOfRange):
        encode(tie_mission)


# =============================================================================
# Errors
# =============================================================================

def test_truncated_input(tie_mission):
    data = encode_tie(tie_mission)
    with pytest.raises(TruncatedInput):
        decode_tie(data[:FG_START + 0x40])


def test_wrong_signature():
    with pytest.raises(FormatMismatch):
        decode_tie(b'\x0c\x00' + b'\x00' * 0x200)
    with pytest.raises(FormatMismatch):
        decode(b'\x07\x00' + b'\x00' * 0x200)


def test_bad_trigger_rejected(tie_mission):
    data = bytearray(encode_tie(tie_mission))
    # Arrival trigger 1 condition of the first flight group
    data[FG_START + 0x4A] = 30
    with pytest.raises(FieldOutOfRange):
        decode_tie(bytes(data))


def test_platform_detected():
    data = encode(new_mission(Platform.TIE))
    assert decode(data).platform is Platform.TIE
