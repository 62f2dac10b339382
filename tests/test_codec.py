import pytest

from xwmission.codec import decode, encode
from xwmission.errors import FieldOutOfRange
from xwmission.platform import Platform

from conftest import build_mission


# =============================================================================
# Coordinates
# =============================================================================

@pytest.mark.parametrize("platform", [Platform.TIE, Platform.XVT, Platform.BOP, Platform.XWA])
def test_far_south_waypoint_round_trips(platform):
    mission = build_mission(platform, flight_groups=2)
    mission.flight_groups[1].waypoints[0].y_km = -204.8
    assert mission.flight_groups[1].waypoints[0].y == -32767
    assert decode(encode(mission)).flight_groups[1].waypoints[0].y == -32767


@pytest.mark.parametrize("platform", [Platform.XVT, Platform.BOP, Platform.XWA])
def test_negated_y_limit(platform):
    mission = build_mission(platform)
    mission.flight_groups[0].waypoints[1].y = -32768
    with pytest.raises(FieldOutOfRange) as excinfo:
        encode(mission)
    assert excinfo.value.field == "y"
    assert "waypoint 1" in excinfo.value.entity


def test_tie_keeps_full_int16_y():
    mission = build_mission(Platform.TIE)
    mission.flight_groups[0].waypoints[0].y = -32768
    assert decode(encode(mission)).flight_groups[0].waypoints[0].y == -32768


def test_xwa_order_waypoint_limit():
    mission = build_mission(Platform.XWA)
    mission.flight_groups[0].orders[2].waypoints[0].y = -32768
    with pytest.raises(FieldOutOfRange) as excinfo:
        encode(mission)
    assert "order 2 waypoint 0" in excinfo.value.entity


# =============================================================================
# Byte fields
# =============================================================================

@pytest.mark.parametrize("platform", [Platform.TIE, Platform.XVT, Platform.XWA])
@pytest.mark.parametrize("field, value", [("iff", 300), ("markings", -1), ("ai", 256),
                                          ("formation", 1000), ("arrival_craft1", 300)])
def test_flight_group_byte_fields(platform, field, value):
    mission = build_mission(platform, flight_groups=2)
    setattr(mission.flight_groups[1], field, value)
    with pytest.raises(FieldOutOfRange) as excinfo:
        encode(mission)
    assert excinfo.value.entity.startswith("FlightGroup 1")
    assert (excinfo.value.field, excinfo.value.value) == (field, value)


@pytest.mark.parametrize("platform", [Platform.TIE, Platform.XVT, Platform.XWA])
def test_number_of_waves_limit(platform):
    mission = build_mission(platform)
    mission.flight_groups[0].number_of_waves = 256
    decode(encode(mission))
    mission.flight_groups[0].number_of_waves = 257
    with pytest.raises(FieldOutOfRange):
        encode(mission)


@pytest.mark.parametrize("platform", [Platform.TIE, Platform.XVT, Platform.XWA])
def test_goal_and_order_bytes(platform):
    mission = build_mission(platform)
    fg = mission.flight_groups[0]
    fg.goals[0].amount = 400
    with pytest.raises(FieldOutOfRange) as excinfo:
        encode(mission)
    assert (excinfo.value.entity, excinfo.value.field) == ("FlightGroup 0 (FG 0) goal 0", "amount")

    fg.goals[0].amount = 0
    fg.orders[0].throttle = 300
    with pytest.raises(FieldOutOfRange) as excinfo:
        encode(mission)
    assert excinfo.value.field == "throttle"


def test_xwing_uses_int16_fields():
    mission = build_mission(Platform.XWING)
    mission.flight_groups[0].formation = 300
    assert decode(encode(mission)).flight_groups[0].formation == 300
    mission.flight_groups[0].formation = 40000
    with pytest.raises(FieldOutOfRange):
        encode(mission)


# =============================================================================
# Messages and global goals
# =============================================================================

@pytest.mark.parametrize("platform", [Platform.TIE, Platform.XVT])
def test_message_color_prefix_range(platform):
    mission = build_mission(platform, messages=1)
    mission.messages[0].color = 4
    with pytest.raises(FieldOutOfRange) as excinfo:
        encode(mission)
    assert (excinfo.value.entity, excinfo.value.field) == ("Message 0", "color")


def test_xwa_message_bytes():
    mission = build_mission(Platform.XWA, messages=1)
    mission.messages[0].originating_fg = 256
    with pytest.raises(FieldOutOfRange) as excinfo:
        encode(mission)
    assert excinfo.value.field == "originating_fg"


def test_global_goal_bytes():
    mission = build_mission(Platform.XWA)
    mission.globals[1].goals[2].active_sequence = 300
    with pytest.raises(FieldOutOfRange) as excinfo:
        encode(mission)
    assert excinfo.value.entity == "Globals 1 goal 2"
