import logging
import struct

import pytest

from xwmission.briefing import BriefingEvent, BriefingShip, XwingEventType
from xwmission.errors import FormatMismatch
from xwmission.platform import Platform
from xwmission.xwing_codec import (
    CRAFT_SIZE, briefing_waypoints, decode_xwing, decode_xwing_briefing, encode_xwing,
    encode_xwing_briefing,
)


def test_default_mission_round_trip(xwing_mission):
    data = encode_xwing(xwing_mission)
    assert data[:2] == b'\x02\x00'
    assert len(data) == 0xCE + 2 * CRAFT_SIZE
    assert decode_xwing(data) == xwing_mission


def test_craft_group_fields(xwing_mission):
    fg = xwing_mission.flight_groups[1]
    fg.name = "Red"
    fg.craft_type = 3
    fg.number_of_craft = 3
    fg.special_cargo_craft = 2
    fg.waypoints[0].x, fg.waypoints[0].y = 100, -200
    fg.arrival_delay_minutes, fg.arrival_delay_seconds = 2, 30
    ext = fg.extension
    ext.arrival_fg, ext.arrival_event = 0, 1
    ext.objective, ext.target_primary = 9, 0

    decoded = decode_xwing(encode_xwing(xwing_mission)).flight_groups[1]
    assert decoded.name == "Red"
    assert (decoded.craft_type, decoded.number_of_craft, decoded.special_cargo_craft) == (3, 3, 2)
    assert (decoded.waypoints[0].x, decoded.waypoints[0].y) == (100, -200)
    assert (decoded.arrival_delay_minutes, decoded.arrival_delay_seconds) == (2, 30)
    assert (decoded.extension.arrival_fg, decoded.extension.arrival_event) == (0, 1)
    assert (decoded.extension.objective, decoded.extension.target_primary) == (9, 0)


@pytest.mark.parametrize("minutes, seconds", [(0, 0), (0, 6), (15, 0)])
def test_arrival_delay(xwing_mission, minutes, seconds):
    fg = xwing_mission.flight_groups[0]
    fg.arrival_delay_minutes, fg.arrival_delay_seconds = minutes, seconds
    decoded = decode_xwing(encode_xwing(xwing_mission)).flight_groups[0]
    assert (decoded.arrival_delay_minutes, decoded.arrival_delay_seconds) == (minutes, seconds)


def test_object_groups_follow_craft(xwing_mission):
    mine = xwing_mission.flight_groups[0]
    mine.name = "Mines"
    mine.extension.object_type = 18
    mine.number_of_craft = 4
    mine.waypoints[0].x, mine.waypoints[0].z = 50, -25
    mine.extension.raw_yaw = 64

    decoded = decode_xwing(encode_xwing(xwing_mission))
    assert [fg.name for fg in decoded.flight_groups] == ["FG 1", "Mines"]
    obj = decoded.flight_groups[1]
    assert obj.extension.is_object
    assert obj.extension.object_type == 18
    assert obj.number_of_craft == 4
    assert (obj.waypoints[0].x, obj.waypoints[0].z) == (50, -25)
    assert obj.extension.raw_yaw == 64


def test_interleaved_objects_warn(xwing_mission, caplog):
    xwing_mission.flight_groups[0].extension.object_type = 18
    with caplog.at_level(logging.WARNING):
        encode_xwing(xwing_mission)
    assert "interleaved" in caplog.text


def test_cp437_text(xwing_mission):
    xwing_mission.header.eom_messages[0] = "Café ½"
    data = encode_xwing(xwing_mission)
    assert b"Caf\x82 \xab" in data
    assert decode_xwing(data).header.eom_messages[0] == "Café ½"


def test_wrong_signature():
    with pytest.raises(FormatMismatch):
        decode_xwing(b'\xff\xff' + b'\x00' * 0x200)


# =============================================================================
# BRF
# =============================================================================

@pytest.fixture
def briefed_mission(xwing_mission):
    briefing = xwing_mission.xwing_briefing
    briefing.ships = [
        BriefingShip(craft_type=1, name="Red", number_of_craft=2, player_craft=1,
                     coordinates=[[0, 0, 0], [100, 200, 0]]),
        BriefingShip(object_type=20, name="Mine field", coordinates=[[-50, 10, 5], [-50, 10, 5]]),
    ]
    page = briefing.pages[0]
    page.events = [
        BriefingEvent(0, XwingEventType.CAPTION_TEXT, [0]),
        BriefingEvent(30, XwingEventType.FG_TAG_1, [1]),
        BriefingEvent(60, XwingEventType.MOVE_MAP, [10, -10]),
    ]
    briefing.strings[0] = "Approach the convoy."
    briefing.highlights[0] = b'\x01' * 8 + b'\x00' * 12
    briefing.tags[2] = "Target"
    xwing_mission.header.time_limit = 12
    return xwing_mission


def test_briefing_round_trip(briefed_mission):
    raw = encode_xwing_briefing(briefed_mission)
    assert raw[:2] == b'\x02\x00'
    briefing = decode_xwing_briefing(raw)
    assert briefing == briefed_mission.xwing_briefing


def test_briefing_ship_kinds(briefed_mission):
    ships = decode_xwing_briefing(encode_xwing_briefing(briefed_mission)).ships
    assert (ships[0].craft_type, ships[0].object_type) == (1, 0)
    assert (ships[1].craft_type, ships[1].object_type) == (0, 20)
    assert ships[0].player_craft == 1


def test_briefing_waypoints(briefed_mission):
    waypoints = briefing_waypoints(briefed_mission.xwing_briefing.ships[0])
    assert [(wp.x, wp.y, wp.enabled) for wp in waypoints] == [(0, 0, True), (100, 200, False)]


def test_decode_with_companion(briefed_mission):
    data = encode_xwing(briefed_mission)
    brf = encode_xwing_briefing(briefed_mission)
    mission = decode_xwing(data, brf)
    assert mission.platform is Platform.XWING
    assert mission.xwing_briefing.pages[0].events == briefed_mission.xwing_briefing.pages[0].events
    assert mission.xwing_briefing.strings[0] == "Approach the convoy."

    plain = decode_xwing(data)
    assert plain.xwing_briefing.ships == []


def test_special_craft_beyond_group_warns(xwing_mission, caplog):
    xwing_mission.flight_groups[0].number_of_craft = 2
    data = bytearray(encode_xwing(xwing_mission))
    # Zero-based craft 5, the group only has two
    struct.pack_into('<h', data, 0xCE + 0x30, 5)
    with caplog.at_level(logging.WARNING):
        decoded = decode_xwing(bytes(data))
    assert decoded.flight_groups[0].special_cargo_craft == 2
    assert "special cargo craft 6" in caplog.text
