import copy

import pytest

from xwmission.briefing import BriefingEvent, EventType, XwingEventType
from xwmission.errors import CollectionFull
from xwmission.flightgroup import Goal, GoalArgument
from xwmission.integrity import transform_references
from xwmission.platform import Platform
from xwmission.trigger import Condition, ReferenceKind, Trigger, VariableType

from conftest import build_mission


def _fg_trigger(index: int) -> Trigger:
    return Trigger(Condition.ARRIVED, VariableType.FLIGHT_GROUP, index)


def _message_trigger(index: int) -> Trigger:
    return Trigger(Condition.TRUE, VariableType.MESSAGE, index)


# =============================================================================
# Flight group delete
# =============================================================================

def test_delete_rewrites_triggers(tie_mission):
    fgs = tie_mission.flight_groups
    fgs[0].arr_dep_triggers[0] = _fg_trigger(2)
    fgs[2].arr_dep_triggers[0] = _fg_trigger(1)
    tie_mission.messages[0].triggers[0] = _fg_trigger(2)

    assert tie_mission.delete_flight_group(1) == 1
    assert [fg.name for fg in fgs] == ["FG 0", "FG 2"]
    assert fgs[0].arr_dep_triggers[0].variable == 1
    assert fgs[1].arr_dep_triggers[0].is_default
    assert tie_mission.messages[0].triggers[0].variable == 1


def test_delete_rewrites_order_targets(tie_mission):
    order = tie_mission.flight_groups[0].orders[0]
    order.target_types[0], order.targets[0] = VariableType.FLIGHT_GROUP, 1
    order.target_types[1], order.targets[1] = VariableType.FLIGHT_GROUP, 2
    order.target_types[2], order.targets[2] = VariableType.SHIP_TYPE, 2

    tie_mission.delete_flight_group(1)
    assert order.target_types[:3] == [0, VariableType.FLIGHT_GROUP, VariableType.SHIP_TYPE]
    assert order.targets[:3] == [0, 1, 2]


def test_delete_global_goal_triggers(tie_mission):
    goal = tie_mission.globals[0].goals[0]
    goal.triggers[0] = Trigger(Condition.DESTROYED, VariableType.FLIGHT_GROUP, 2)
    tie_mission.delete_flight_group(0)
    assert goal.triggers[0].variable == 1


def test_delete_motherships(xvt_mission):
    fg = xvt_mission.flight_groups[2]
    fg.arrival_craft1, fg.arrival_method1 = 1, True
    fg.departure_craft1, fg.departure_method1 = 0, True
    fg.extension.alternate_mothership = 1
    fg.extension.alternate_mothership_used = True

    xvt_mission.delete_flight_group(1)
    fg = xvt_mission.flight_groups[1]
    assert (fg.arrival_craft1, fg.arrival_method1) == (0, False)
    assert (fg.departure_craft1, fg.departure_method1) == (0, True)
    assert (fg.extension.alternate_mothership, fg.extension.alternate_mothership_used) == (0, False)


def test_delete_last_flight_group_keeps_one():
    mission = build_mission(Platform.TIE)
    mission.delete_flight_group(0)
    assert mission.flight_groups.count == 1
    assert mission.flight_groups[0].name == "New Ship"


def test_delete_out_of_range(tie_mission):
    with pytest.raises(IndexError):
        tie_mission.delete_flight_group(3)


# =============================================================================
# Platform specific references
# =============================================================================

def test_xwa_proximity_references(xwa_mission):
    fgs = xwa_mission.flight_groups
    fgs[0].goals[0].condition = Condition.NEARBY
    fgs[0].goals[0].parameter = 1
    fgs[0].goals[1].condition = Condition.NOT_NEARBY
    fgs[0].goals[1].parameter = 2
    fgs[0].arr_dep_triggers[0] = Trigger(Condition.NEARBY, VariableType.IFF, 1, 0, parameter1=3)
    xwa_mission.messages[0].originating_fg = 2
    xwa_mission.messages[1].originating_fg = 1

    xwa_mission.delete_flight_group(1)
    assert (fgs[0].goals[0].condition, fgs[0].goals[0].parameter) == (10, 0)
    assert (fgs[0].goals[1].condition, fgs[0].goals[1].parameter) == (Condition.NOT_NEARBY, 1)
    assert fgs[0].arr_dep_triggers[0].parameter1 == 2
    assert xwa_mission.messages[0].originating_fg == 1
    assert xwa_mission.messages[1].originating_fg == 0


def test_xwing_references(xwing_mission):
    xwing_mission.flight_groups.set_count(4)
    ext = xwing_mission.flight_groups[3].extension
    ext.arrival_fg, ext.arrival_event = 1, 2
    ext.mothership, ext.arrive_via_hyperspace, ext.depart_via_hyperspace = 1, 0, 0
    ext.target_primary, ext.target_secondary = 2, -1

    xwing_mission.delete_flight_group(1)
    ext = xwing_mission.flight_groups[2].extension
    assert (ext.arrival_fg, ext.arrival_event) == (-1, 0)
    assert (ext.mothership, ext.arrive_via_hyperspace, ext.depart_via_hyperspace) == (-1, 1, 1)
    assert (ext.target_primary, ext.target_secondary) == (1, -1)


def test_briefing_fg_tags_removed(tie_mission):
    events = tie_mission.briefings[0].events
    events.extend([
        BriefingEvent(0, EventType.FG_TAG_1, [1]),
        BriefingEvent(10, EventType.FG_TAG_1 + 1, [2]),
        BriefingEvent(20, EventType.CAPTION_TEXT, [1]),
    ])
    tie_mission.delete_flight_group(1)
    assert events == [
        BriefingEvent(10, EventType.FG_TAG_1 + 1, [1]),
        BriefingEvent(20, EventType.CAPTION_TEXT, [1]),
    ]


def test_xwing_briefing_fg_tags(xwing_mission):
    page = xwing_mission.xwing_briefing.pages[0]
    page.events = [BriefingEvent(0, XwingEventType.FG_TAG_1, [0]),
                   BriefingEvent(5, XwingEventType.FG_TAG_1, [1])]
    xwing_mission.delete_flight_group(0)
    assert page.events == [BriefingEvent(5, XwingEventType.FG_TAG_1, [0])]


# =============================================================================
# Swap / insert
# =============================================================================

def test_swap_flight_groups(tie_mission):
    fgs = tie_mission.flight_groups
    fgs[0].arr_dep_triggers[0] = _fg_trigger(1)
    fgs[0].arr_dep_triggers[1] = _fg_trigger(2)

    assert tie_mission.swap_flight_groups(1, 2)
    assert [fg.name for fg in fgs] == ["FG 0", "FG 2", "FG 1"]
    assert fgs[0].arr_dep_triggers[0].variable == 2
    assert fgs[0].arr_dep_triggers[1].variable == 1
    assert not tie_mission.swap_flight_groups(1, 1)
    assert not tie_mission.swap_flight_groups(0, 5)


def test_insert_flight_group(tie_mission):
    fgs = tie_mission.flight_groups
    fgs[0].arr_dep_triggers[0] = _fg_trigger(0)
    fgs[0].arr_dep_triggers[1] = _fg_trigger(1)
    fgs[0].arr_dep_triggers[2] = _fg_trigger(2)

    assert tie_mission.insert_flight_group(1) == 1
    assert fgs.count == 4
    assert fgs[1].name == "New Ship"
    assert [t.variable for t in fgs[0].arr_dep_triggers] == [0, 2, 3]


def test_insert_when_full_leaves_references(tie_mission):
    fgs = tie_mission.flight_groups
    fgs.set_count(fgs.limit)
    fgs[0].arr_dep_triggers[0] = _fg_trigger(5)
    with pytest.raises(CollectionFull):
        tie_mission.insert_flight_group(2)
    assert fgs[0].arr_dep_triggers[0].variable == 5
    assert fgs.count == fgs.limit


# =============================================================================
# Messages
# =============================================================================

def test_delete_message(xwa_mission):
    fg = xwa_mission.flight_groups[0]
    fg.arr_dep_triggers[0] = _message_trigger(2)
    fg.arr_dep_triggers[1] = _message_trigger(1)
    fg.orders[0].target_types[0], fg.orders[0].targets[0] = VariableType.MESSAGE, 2

    assert xwa_mission.delete_message(1) == 1
    assert [m.text for m in xwa_mission.messages] == ["Message 0", "Message 2"]
    assert fg.arr_dep_triggers[0].variable == 1
    assert fg.arr_dep_triggers[1].is_default
    assert fg.orders[0].targets[0] == 1


def test_message_edits_leave_flight_group_references(xwa_mission):
    fg = xwa_mission.flight_groups[0]
    fg.arr_dep_triggers[0] = _fg_trigger(1)
    xwa_mission.delete_message(0)
    assert fg.arr_dep_triggers[0].variable == 1


def test_swap_and_insert_messages(xwa_mission):
    trigger = xwa_mission.flight_groups[0].arr_dep_triggers[0] = _message_trigger(0)
    assert xwa_mission.swap_messages(0, 2)
    assert trigger.variable == 2
    assert xwa_mission.insert_message(0) == 0
    assert trigger.variable == 3
    assert xwa_mission.messages[0].text == ""


def test_transform_references_counts_changes(xwa_mission):
    fg = xwa_mission.flight_groups[0]
    fg.arr_dep_triggers[0] = _message_trigger(1)
    fg.arr_dep_triggers[1] = _message_trigger(1)
    fg.arr_dep_triggers[2] = _message_trigger(0)
    assert transform_references(xwa_mission, ReferenceKind.MESSAGE, 1, 0) == 2
    assert [t.variable for t in fg.arr_dep_triggers[:3]] == [0, 0, 0]


# =============================================================================
# Transform laws
# =============================================================================

def _linked_mission(platform: Platform):
    """Five flight groups and three messages that all point at one another."""
    mission = build_mission(platform, flight_groups=5, messages=3)
    for k, fg in enumerate(mission.flight_groups):
        fg.arr_dep_triggers[0] = _fg_trigger((k + 1) % 5)
        fg.arr_dep_triggers[1] = _message_trigger(k % 3)
        fg.arrival_craft1, fg.arrival_method1 = (k + 2) % 5, True
        fg.departure_craft1, fg.departure_method1 = (k + 4) % 5, True
        order = fg.orders[0]
        order.target_types[0], order.targets[0] = VariableType.FLIGHT_GROUP, (k + 3) % 5
        order.target_types[1], order.targets[1] = VariableType.MESSAGE, (k + 1) % 3
        if platform is Platform.XWA:
            fg.arr_dep_triggers[2] = Trigger(Condition.NEARBY, VariableType.IFF, 1,
                                             parameter1=(k + 4) % 5 + 1)
            fg.goals[0] = Goal(GoalArgument.MUST, Condition.NEARBY, 0, enabled=True,
                               parameter=(k + 2) % 5)
    for m, message in enumerate(mission.messages):
        message.triggers[0] = _fg_trigger(m + 1)
        message.triggers[1] = _message_trigger((m + 1) % 3)
        if platform is Platform.XWA:
            message.originating_fg = m + 2
    return mission


LAW_PLATFORMS = [Platform.TIE, Platform.XVT, Platform.XWA]


@pytest.mark.parametrize("platform", LAW_PLATFORMS)
@pytest.mark.parametrize("a, b", [(1, 3), (0, 4), (2, 1)])
def test_swap_twice_restores_flight_groups(platform, a, b):
    mission = _linked_mission(platform)
    before = copy.deepcopy(mission)
    assert mission.swap_flight_groups(a, b)
    assert mission != before
    assert mission.swap_flight_groups(a, b)
    assert mission == before


@pytest.mark.parametrize("platform", LAW_PLATFORMS)
def test_swap_twice_restores_messages(platform):
    mission = _linked_mission(platform)
    before = copy.deepcopy(mission)
    mission.swap_messages(0, 2)
    mission.swap_messages(0, 2)
    assert mission == before


@pytest.mark.parametrize("platform", LAW_PLATFORMS)
@pytest.mark.parametrize("index", [0, 2, 5])
def test_insert_then_delete_restores_flight_groups(platform, index):
    mission = _linked_mission(platform)
    before = copy.deepcopy(mission)
    mission.insert_flight_group(index)
    assert mission.flight_groups.count == 6
    mission.delete_flight_group(index)
    assert mission == before


@pytest.mark.parametrize("platform", LAW_PLATFORMS)
@pytest.mark.parametrize("index", [0, 1, 3])
def test_insert_then_delete_restores_messages(platform, index):
    mission = _linked_mission(platform)
    before = copy.deepcopy(mission)
    mission.insert_message(index)
    mission.delete_message(index)
    assert mission == before


@pytest.mark.parametrize("platform", LAW_PLATFORMS)
def test_delete_then_reinsert_keeps_references_nulled(platform):
    mission = _linked_mission(platform)
    before = copy.deepcopy(mission)
    removed = copy.deepcopy(mission.flight_groups[1])
    mission.delete_flight_group(1)
    mission.insert_flight_group(1, removed)

    assert mission != before
    fgs = mission.flight_groups
    # FG 0 pointed at the deleted slot; FG 2 pointed further on and is restored
    assert fgs[0].arr_dep_triggers[0].is_default
    assert fgs[2].arr_dep_triggers[0] == _fg_trigger(3)
    assert (fgs[3].orders[0].target_types[0], fgs[3].orders[0].targets[0]) == (0, 0)
    assert (fgs[4].arrival_craft1, fgs[4].arrival_method1) == (0, False)
    assert mission.messages[0].triggers[0].is_default
    assert mission.messages[1].triggers[0] == _fg_trigger(2)
    if platform is Platform.XWA:
        assert fgs[2].arr_dep_triggers[2].parameter1 == 0
        assert fgs[4].goals[0].condition == 10
        assert [m.originating_fg for m in mission.messages] == [2, 3, 4]


@pytest.mark.parametrize("platform", LAW_PLATFORMS)
def test_delete_then_reinsert_message_keeps_references_nulled(platform):
    mission = _linked_mission(platform)
    mission.delete_message(1)
    mission.insert_message(1)
    fgs = mission.flight_groups
    assert fgs[1].arr_dep_triggers[1].is_default
    assert fgs[2].arr_dep_triggers[1] == _message_trigger(2)
    assert (fgs[0].orders[0].target_types[1], fgs[0].orders[0].targets[1]) == (0, 0)
    assert mission.messages[0].triggers[1].is_default
