import pytest

from xwmission.codec import decode, encode
from xwmission.errors import FormatMismatch, TruncatedInput
from xwmission.flightgroup import Goal, GoalArgument
from xwmission.platform import Platform
from xwmission.trigger import Condition, Trigger, VariableType
from xwmission.xwa_codec import FG_SIZE, SIGNATURE_OFFSET_FG, decode_xwa, encode_xwa


def test_default_mission_round_trip(xwa_mission):
    data = encode_xwa(xwa_mission)
    assert data[:2] == b'\x12\x00'
    assert decode(data) == xwa_mission


def test_proximity_goal_and_trigger(xwa_mission):
    fg = xwa_mission.flight_groups[0]
    fg.goals[0] = Goal(GoalArgument.MUST, Condition.NEARBY, 0, points=75, enabled=True,
                       parameter=2, active_sequence=1)
    fg.arr_dep_triggers[0] = Trigger(Condition.NEARBY, VariableType.IFF, 1, 0, parameter1=3, parameter2=5)

    decoded = decode_xwa(encode_xwa(xwa_mission)).flight_groups[0]
    assert decoded.goals[0] == fg.goals[0]
    assert decoded.arr_dep_triggers[0] == fg.arr_dep_triggers[0]
    assert decoded.arr_dep_triggers[0].parameter1 == 3


def test_orders_carry_waypoints_and_designation(xwa_mission):
    fg = xwa_mission.flight_groups[1]
    order = fg.orders[5]
    order.command = 2
    order.designation = "Patrol the nebula edge"
    order.waypoints[3].x, order.waypoints[3].y, order.waypoints[3].enabled = 320, -160, True
    order.skip_triggers[1] = Trigger(Condition.DESTROYED, VariableType.FLIGHT_GROUP, 2)
    order.skip_t1_or_t2 = True

    decoded = decode_xwa(encode_xwa(xwa_mission)).flight_groups[1].orders[5]
    assert decoded.command == 2
    assert decoded.designation == "Patrol the nebula edge"
    assert (decoded.waypoints[3].x, decoded.waypoints[3].y) == (320, -160)
    assert decoded.waypoints[3].enabled
    assert decoded.skip_triggers[1] == order.skip_triggers[1]
    assert decoded.skip_t1_or_t2
    assert decode_xwa(encode_xwa(xwa_mission)).flight_groups[1].orders[4].designation == ""


def test_empty_designations_take_one_byte(xwa_mission):
    empty = len(encode_xwa(xwa_mission))
    xwa_mission.flight_groups[0].orders[0].designation = "X"
    assert len(encode_xwa(xwa_mission)) == empty + 0x40 - 1


def test_messages(xwa_mission):
    message = xwa_mission.messages[2]
    message.text = "Incoming transmission"
    message.color = 1
    message.voice_id = "VOICE01"
    message.originating_fg = 2
    message.delay_seconds = 25
    message.triggers[4] = Trigger(Condition.DESTROYED, VariableType.FLIGHT_GROUP, 1)
    message.and_or[3] = True
    message.note = "Cue after the ambush"

    decoded = decode_xwa(encode_xwa(xwa_mission)).messages[2]
    assert (decoded.text, decoded.color) == ("Incoming transmission", 1)
    assert decoded.voice_id == "VOICE01"
    assert decoded.originating_fg == 2
    assert decoded.delay_seconds == 25
    assert decoded.cancel_triggers[0] == message.triggers[4]
    assert decoded.and_or == [False, False, False, True]
    assert decoded.note == "Cue after the ambush"


def test_long_delay_quantized(xwa_mission):
    xwa_mission.messages[0].delay_seconds = 903
    decoded = decode_xwa(encode_xwa(xwa_mission))
    assert decoded.messages[0].delay_seconds == 900


def test_header_and_teams(xwa_mission):
    header = xwa_mission.header
    header.regions[2] = "Kessel"
    header.global_cargo[4].cargo = "Spice"
    header.global_groups[1] = "Escorts"
    header.officer = 2
    header.success_text = "Mission complete"
    header.description = "Escort the freighters."
    team = xwa_mission.teams[0]
    team.name = "Rebels"
    team.eom_messages[1] = "Good work"
    team.voice_ids[0] = "EOM01"
    team.eom_notes[2] = "Debrief"

    decoded = decode_xwa(encode_xwa(xwa_mission))
    assert decoded.header.regions[2] == "Kessel"
    assert decoded.header.global_cargo[4].cargo == "Spice"
    assert decoded.header.global_groups[1] == "Escorts"
    assert decoded.header.officer == 2
    assert decoded.header.success_text == "Mission complete"
    assert decoded.header.description == "Escort the freighters."
    dteam = decoded.teams[0]
    assert (dteam.name, dteam.eom_messages[1]) == ("Rebels", "Good work")
    assert dteam.voice_ids[0] == "EOM01"
    assert dteam.eom_notes[2] == "Debrief"


def test_global_goal_sequence(xwa_mission):
    goal = xwa_mission.globals[0].goals[1]
    goal.active_sequence = 3
    goal.points = -75
    goal.strings[1] = ["", "Prevented", "Escaped"]
    decoded = decode_xwa(encode_xwa(xwa_mission)).globals[0].goals[1]
    assert decoded.active_sequence == 3
    assert decoded.points == -75
    assert decoded.strings[1] == ["", "Prevented", ""]


def test_backdrop_at_origin_is_nudged(xwa_mission):
    fg = xwa_mission.flight_groups[0]
    fg.craft_type = 0xB7
    decoded = decode_xwa(encode_xwa(xwa_mission)).flight_groups[0]
    assert decoded.waypoints[0].y == 10
    assert fg.waypoints[0].y == 0


def test_truncated_flight_group(xwa_mission):
    data = encode(xwa_mission)
    with pytest.raises(TruncatedInput):
        decode_xwa(data[:SIGNATURE_OFFSET_FG + FG_SIZE // 2])


def test_rejects_xvt_signature():
    with pytest.raises(FormatMismatch):
        decode_xwa(b'\x0c\x00' + b'\x00' * 0x100)
