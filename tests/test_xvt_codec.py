import pytest

from xwmission.codec import decode, encode
from xwmission.errors import FieldOutOfRange, FormatMismatch
from xwmission.flightgroup import Goal, GoalArgument
from xwmission.loadout import Loadout
from xwmission.platform import Platform
from xwmission.trigger import Condition, Trigger, VariableType
from xwmission.xvt_codec import decode_xvt, encode_xvt

from conftest import build_mission


def test_signatures(xvt_mission):
    assert encode_xvt(xvt_mission)[:2] == b'\x0c\x00'
    bop = build_mission(Platform.BOP)
    data = encode(bop)
    assert data[:2] == b'\x0e\x00'
    assert decode(data).platform is Platform.BOP


def test_flight_group_round_trip(xvt_mission):
    fg = xvt_mission.flight_groups[0]
    fg.name = "Red"
    fg.team = 1
    fg.player_number = 2
    fg.extension.roles[0] = "1CMD"
    fg.extension.opt_loadout.set(Loadout.TORPEDO, True)
    fg.extension.alternate_mothership = 2
    fg.extension.alternate_mothership_used = True
    fg.arr_dep_triggers[4] = Trigger(Condition.DESTROYED, VariableType.FLIGHT_GROUP, 1)
    fg.arr_dep_and_or[3] = True
    fg.orders[1].designation = "Escort"
    fg.orders[3].skip_triggers[0] = Trigger(Condition.ARRIVED, VariableType.FLIGHT_GROUP, 2)
    fg.waypoints[2].y, fg.waypoints[2].enabled = 480, True

    decoded = decode_xvt(encode_xvt(xvt_mission)).flight_groups[0]
    assert decoded.name == "Red"
    assert (decoded.team, decoded.player_number) == (1, 2)
    assert decoded.extension.roles[0] == "1CMD"
    assert decoded.extension.opt_loadout == fg.extension.opt_loadout
    assert decoded.extension.alternate_mothership == 2
    assert decoded.extension.alternate_mothership_used
    assert decoded.arr_dep_triggers[4] == fg.arr_dep_triggers[4]
    assert decoded.arr_dep_and_or == [False, False, False, True]
    assert decoded.orders[1].designation == "Escort"
    assert decoded.orders[3].skip_triggers[0] == fg.orders[3].skip_triggers[0]
    assert decoded.waypoints[2].y == 480 and decoded.waypoints[2].enabled


def test_flight_group_goals(xvt_mission):
    fg = xvt_mission.flight_groups[2]
    fg.goals[0] = Goal(GoalArgument.MUST, Condition.DESTROYED, 0, points=500, enabled=True,
                       incomplete_text="Destroy the frigate", complete_text="Frigate destroyed")
    fg.goals[1] = Goal(GoalArgument.BONUS_MUST, Condition.INSPECTED, 2, points=-250, enabled=True, team=3)

    goals = decode_xvt(encode_xvt(xvt_mission)).flight_groups[2].goals
    assert goals[0] == fg.goals[0]
    assert goals[1] == fg.goals[1]


def test_messages(xvt_mission):
    message = xvt_mission.messages[1]
    message.color = 3
    message.text = "Hold position"
    message.sent_to_team = [False, True, False, True] + [False] * 6
    message.triggers[2] = Trigger(Condition.ARRIVED, VariableType.TEAM, 1)
    message.and_or[1] = True
    message.delay_seconds = 40

    decoded = decode_xvt(encode_xvt(xvt_mission)).messages[1]
    assert (decoded.color, decoded.text) == (3, "Hold position")
    assert decoded.sent_to_team == message.sent_to_team
    assert decoded.triggers[2] == message.triggers[2]
    assert decoded.and_or == [False, True, False]
    assert decoded.delay_seconds == 40


def test_globals_and_teams(xvt_mission):
    goal = xvt_mission.globals[1].goals[0]
    goal.triggers[0] = Trigger(Condition.DESTROYED, VariableType.IFF, 2)
    goal.points = 1000
    goal.strings[0] = ["Incomplete", "Complete", "Failed"]
    team = xvt_mission.teams[1]
    team.name = "Imperial"
    team.allies[0] = 1
    team.eom_colors[0], team.eom_messages[0] = 1, "Victory"

    decoded = decode_xvt(encode_xvt(xvt_mission))
    dgoal = decoded.globals[1].goals[0]
    assert dgoal.triggers[0] == goal.triggers[0]
    assert dgoal.points == 1000
    assert dgoal.strings[0] == ["Incomplete", "Complete", "Failed"]
    dteam = decoded.teams[1]
    assert dteam.name == "Imperial"
    assert dteam.allies[:2] == [1, 1]
    assert (dteam.eom_colors[0], dteam.eom_messages[0]) == (1, "Victory")


def test_secondary_global_goal_has_no_incomplete_text(xvt_mission):
    secondary = xvt_mission.globals[0].goals[2]
    secondary.strings[0] = ["dropped", "kept", "dropped too"]
    decoded = decode_xvt(encode_xvt(xvt_mission))
    assert decoded.globals[0].goals[2].strings[0] == ["", "kept", ""]


def test_xvt_description(xvt_mission):
    xvt_mission.header.description = "Defend the station."
    xvt_mission.header.mission_type = 1
    header = decode_xvt(encode_xvt(xvt_mission)).header
    assert header.description == "Defend the station."
    assert header.mission_type == 1


def test_bop_texts():
    mission = build_mission(Platform.BOP)
    mission.header.description = "Briefing text"
    mission.header.success_text = "Well done"
    mission.header.fail_text = "Try again"
    data = encode_xvt(mission)

    header = decode_xvt(data).header
    assert (header.success_text, header.fail_text, header.description) == (
        "Well done", "Try again", "Briefing text")
    # Success, failure, then description
    assert data.index(b"Well done") < data.index(b"Try again") < data.index(b"Briefing text")


def test_decode_matches_encode(xvt_mission):
    data = encode_xvt(xvt_mission)
    assert encode_xvt(decode_xvt(data)) == data


def test_points_checked_before_encode(xvt_mission):
    xvt_mission.globals[0].goals[0].points = 40000
    with pytest.raises(FieldOutOfRange):
        encode_xvt(xvt_mission)


def test_rejects_other_platforms():
    with pytest.raises(FormatMismatch):
        decode_xvt(b'\x12\x00' + b'\x00' * 0x100)
