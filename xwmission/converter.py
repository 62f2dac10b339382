#!/usr/bin/env python3
"""
Cross-Format Converter
======================

Named, fallible conversions between neighbouring platforms. Every function
returns a ConversionResult carrying the converted value and the set of
field tags that had no representation on the target platform. Values that
cannot be represented at all raise UnmappableValue instead of being clamped.

Supported steps (anything else is chained along LINEAGE):
--------------------------------------------------------
| From      | To        | Notes                                          |
|-----------|-----------|------------------------------------------------|
| XWING     | TIE       | craft/object table, IFF shift, .brf pages      |
| TIE       | XWING     | inverse tables, one order, objective from goal |
| TIE       | XVT / BOP | craft upgrade, goals widened                   |
| XVT / BOP | TIE       | craft check, goal amounts slid, team 0 only    |
| XVT / BOP | XWA       | orders into region 1, waypoints 0..2 + hyper   |
| XWA       | XVT / BOP | craft check, parameters and order paths lost   |

Craft type substitutions:
------------------------
| Craft          | Downgrade from XWA | Downgrade to TIE | Upgrade from TIE |
|----------------|--------------------|------------------|------------------|
| 10, 11, 31     | error              | error            | 89, 90, 77       |
| 39             | 38                 | -                | 91               |
| 71             | 69                 | -                | -                |
| 77             | -                  | 31               | -                |
| 84, 87         | 82                 | -                | -                |
| 88             | 59                 | -                | -                |
| 89, 90, 91     | -                  | 10, 11, 39       | -                |
| 227, 228, 229  | 48, 51, 52         | 48, 51, 52       | -                |
| > 91           | error              | error            | -                |

Ship-type trigger variables and order targets are zero-based, so the
table applies to value + 1.
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Set

from .briefing import (
    EVENT_PARAMETERS, XWING_TO_TIE_EVENTS, Briefing, BriefingEvent, EventType,
    EVENT_AREA_BYTES, TAG_COUNTS, events_to_words, parameter_count,
)
from .errors import UnmappableValue
from .flightgroup import (
    GOAL_COUNT, WAYPOINT_NAMES, FlightGroup, Goal, GoalArgument, Order, OptionalCraft,
    TieFields, Waypoint, XvtFields, XwaFields, XwingFields, new_flight_group, new_order,
)
from .mission import (
    Message, Mission, PostQuestion, PreQuestion, Team, join_color, new_message, split_color,
)
from .platform import LINEAGE, Platform, lineage_index
from .trigger import SHIP_TYPE_TYPES, Condition, Trigger, VariableType
from .units import (
    PITCH_THRESHOLD, angle_from_byte, angle_to_byte, pitch_from_byte, pitch_to_byte,
    seconds_to_ticks, seconds_to_xwa_delay, ticks_to_seconds, xwa_delay_to_seconds,
)
from .xwing_codec import briefing_waypoints

logger = logging.getLogger(__name__)

# =============================================================================
# CONSTANTS
# =============================================================================

INVALID_CRAFT = (10, 11, 31)
XWA_CRAFT_DOWNGRADE = {39: 38, 71: 69, 84: 82, 87: 82, 88: 59}
TIE_CRAFT_DOWNGRADE = {77: 31, 89: 10, 90: 11, 91: 39}
XWA_CRAFT_REPLACEMENTS = {227: 48, 228: 51, 229: 52}
TIE_CRAFT_UPGRADE = {10: 89, 11: 90, 31: 77, 39: 91}
MAX_SHARED_CRAFT = 91

# Legacy trigger amounts going to TIE: 66% -> 75%, 33% -> 50%, "each" -> 100%
TIE_TRIGGER_AMOUNTS = {16: 1, 17: 2, 18: 0}
EACH_SPECIAL_AMOUNT = 19
SPECIAL_AMOUNT = 6

# TIE goal slots filled from XvT / XWA goals 0..2 (slot 2 is the secret goal)
TIE_GOAL_SLOTS = {0: 0, 1: 1, 2: 3}
TIE_SECRET_GOAL = 2
TIE_BONUS_GOAL = 3

MAX_TIE_STATUS = 19
MAX_XVT_STATUS = 21
MAX_TIE_FORMATION = 12
MAX_TIE_ABORT = 5
MAX_TIE_COMMAND = 38
MAX_XVT_COMMAND = 39

XVT_DESIGNATION_WIDTH = 16
XWA_ORDER_TEXT_WIDTH = 63
XVT_ROLE_WIDTH = 4
XVT_ORDERS = 4
XVT_SKIP_ORDER = 3

FALSE_CONDITION = 10

# X-wing craft -> TIE craft; craft 2 (Y-wing) becomes a B-wing with status >= 10
XWING_TO_TIE_CRAFT = {
    0: 0x01, 1: 0x01, 2: 0x02, 3: 0x03, 4: 0x05, 5: 0x06, 6: 0x07, 7: 0x10, 8: 0x15,
    9: 0x11, 10: 0x18, 11: 0x1A, 12: 0x20, 13: 0x31, 14: 0x2A, 15: 0x28, 16: 0x35, 17: 0x08,
}
XWING_BWING_STATUS = 10
TIE_BWING = 0x04
TIE_TO_XWING_CRAFT = {v: k for k, v in XWING_TO_TIE_CRAFT.items() if k}
TIE_TO_XWING_OBJECT = {0x4B: 18, 0x46: 22, 0x53: 23, 0x50: 24, 0x56: 26, 0x57: 34}

# X-wing arrival event -> trigger condition on the arrival FG
XWING_ARRIVAL_EVENTS = {
    1: Condition.ARRIVED, 2: Condition.DESTROYED, 3: Condition.ATTACKED,
    4: Condition.CAPTURED, 5: Condition.INSPECTED, 6: Condition.DISABLED,
}
# X-wing craft objective -> TIE primary goal (condition, amount)
# TIE goal amounts: 0 = 100%, 1 = 50%, 4 = special craft
XWING_OBJECTIVES = {
    1: (Condition.DESTROYED, 0), 2: (Condition.COMPLETE_MISSION, 0),
    3: (Condition.CAPTURED, 0), 4: (Condition.BOARDED, 0),
    5: (Condition.DESTROYED, 4), 6: (Condition.COMPLETE_MISSION, 4),
    7: (Condition.CAPTURED, 4), 8: (Condition.BOARDED, 4),
    9: (Condition.DESTROYED, 1), 10: (Condition.COMPLETE_MISSION, 1),
    11: (Condition.CAPTURED, 1), 12: (Condition.BOARDED, 1),
    13: (Condition.INSPECTED, 0), 14: (Condition.INSPECTED, 4),
    15: (Condition.INSPECTED, 1), 16: (Condition.ARRIVED, 0),
}

# Waypoint slot maps, source index -> target index
_XWING_TO_TIE_WAYPOINTS = {0: 0, 1: 4, 2: 5, 3: 6, 4: 1, 5: 2, 6: 13, 7: 14}
_XWA_TO_XVT_WAYPOINTS = {0: 0, 1: 1, 2: 2, 3: 13}
TIE_BRIEFING_WAYPOINT = 14

# TIE post-mission questions generated from XvT / XWA end texts
_DESCRIPTION_QUESTION = "What are the mission objectives?"
_SUCCESS_QUESTION = "What have I accomplished?"
_FAIL_QUESTION = "Any suggestions?"
_SUCCESS_TRIGGER = 4
_FAIL_TRIGGER = 5
_POST_TRIGGER_TYPE = 1


# =============================================================================
# Result
# =============================================================================

@dataclass
class ConversionResult:
    """Converted value plus the tags of fields the target cannot hold."""
    value: Any
    dropped_fields: Set[str] = field(default_factory=set)

    def drop(self, tag: str):
        self.dropped_fields.add(tag)

    def merge(self, other: 'ConversionResult', prefix: str = "") -> Any:
        """Fold another result's drops in under a prefix; returns its value."""
        for tag in other.dropped_fields:
            self.dropped_fields.add(prefix + tag)
        return other.value


def _is_downgrade(source: Platform, target: Platform) -> bool:
    return lineage_index(target) < lineage_index(source)


def _trimmed(result: ConversionResult, tag: str, text: str, width: int) -> str:
    if len(text) > width:
        result.drop(tag)
        return text[:width]
    return text


def _drop_changed(result: ConversionResult, record, names, prefix: str = ""):
    """Report every named attribute that differs from the record's defaults."""
    default = type(record)()
    for name in names:
        if getattr(record, name) != getattr(default, name):
            result.drop(prefix + name)


def _is_unused(trigger: Trigger) -> bool:
    return trigger.is_default or trigger == Trigger(condition=FALSE_CONDITION)


# =============================================================================
# Craft types
# =============================================================================

def craft_check(craft: int, to_tie: bool, from_xwa: bool,
                label: str = "FlightGroup", field_name: str = "craft_type") -> int:
    """Downgrade a craft type, substituting where a close equivalent exists."""
    target = "TIE" if to_tie else "XVT"
    if craft in INVALID_CRAFT:
        raise UnmappableValue(label, field_name, craft, target)
    if from_xwa and craft in XWA_CRAFT_DOWNGRADE:
        return XWA_CRAFT_DOWNGRADE[craft]
    if to_tie and craft in TIE_CRAFT_DOWNGRADE:
        return TIE_CRAFT_DOWNGRADE[craft]
    if craft in XWA_CRAFT_REPLACEMENTS:
        return XWA_CRAFT_REPLACEMENTS[craft]
    if craft > MAX_SHARED_CRAFT:
        raise UnmappableValue(label, field_name, craft, target)
    return craft


def convert_craft_type(craft: int, source: Platform, target: Platform,
                       label: str = "FlightGroup", field_name: str = "craft_type") -> int:
    """Flight group craft type (0 = none) between TIE, XvT/BoP and XWA."""
    if lineage_index(source) == lineage_index(target):
        return craft
    if source is Platform.TIE:
        return TIE_CRAFT_UPGRADE.get(craft, craft)
    if target is Platform.TIE:
        return craft_check(craft, True, source is Platform.XWA, label, field_name)
    if source is Platform.XWA:
        return craft_check(craft, False, True, label, field_name)
    return craft


def convert_ship_type(variable: int, source: Platform, target: Platform,
                      label: str = "Trigger", field_name: str = "variable") -> int:
    """Zero-based ship type value of a trigger or order target."""
    return convert_craft_type(variable + 1, source, target, label, field_name) - 1


# =============================================================================
# Triggers
# =============================================================================

def convert_trigger(trigger: Trigger, source: Platform, target: Platform,
                    label: str = "Trigger") -> ConversionResult:
    result = ConversionResult(trigger.copy())
    new = result.value
    if source is Platform.XWA and target is not Platform.XWA:
        if new.parameter1:
            result.drop("parameter1")
        if new.parameter2:
            result.drop("parameter2")
        new.parameter1 = 0
        new.parameter2 = 0

    if _is_downgrade(source, target):
        to_tie = target is Platform.TIE
        max_condition, max_type = (24, 9) if to_tie else (46, 23)
        if new.condition > max_condition:
            raise UnmappableValue(label, "condition", new.condition, target.name)
        if new.variable_type > max_type:
            raise UnmappableValue(label, "variable_type", new.variable_type, target.name)
        if new.variable_type in SHIP_TYPE_TYPES:
            new.variable = convert_ship_type(new.variable, source, target, label)
        if to_tie:
            new.amount = TIE_TRIGGER_AMOUNTS.get(new.amount, new.amount)
        if new.amount == EACH_SPECIAL_AMOUNT:
            new.amount = SPECIAL_AMOUNT
    elif new.variable_type in SHIP_TYPE_TYPES:
        new.variable = convert_ship_type(new.variable, source, target, label)
    return result


def _convert_triggers(result: ConversionResult, triggers: List[Trigger], slots: Dict[int, int],
                      new_triggers: List[Trigger], source: Platform, target: Platform,
                      label: str, prefix: str):
    """Convert triggers[k] into new_triggers[slots[k]]; unmapped ones are reported."""
    for k, trigger in enumerate(triggers):
        if k not in slots:
            if not _is_unused(trigger):
                result.drop(f"{prefix}[{k}]")
            continue
        converted = convert_trigger(trigger, source, target, f"{label} trigger {k + 1}")
        new_triggers[slots[k]] = result.merge(converted, f"{prefix}[{k}].")


def _slot_map(source_count: int, target_count: int) -> Dict[int, int]:
    """Slots of a TIE 3-trigger arr/dep block against the 6-trigger block."""
    if source_count == target_count:
        return {k: k for k in range(source_count)}
    if source_count == 6:
        return {0: 0, 1: 1, 4: 2}
    return {0: 0, 1: 1, 2: 4}


# =============================================================================
# Orders
# =============================================================================

def convert_order(order: Order, source: Platform, target: Platform,
                  label: str = "Order") -> ConversionResult:
    result = ConversionResult(new_order(target))
    new = result.value
    if target is Platform.TIE and order.command > MAX_TIE_COMMAND:
        raise UnmappableValue(label, "command", order.command, target.name)
    if target.is_xvt_family and order.command > MAX_XVT_COMMAND:
        raise UnmappableValue(label, "command", order.command, target.name)

    new.command = order.command
    new.throttle = order.throttle
    new.variable1 = order.variable1
    new.variable2 = order.variable2
    new.variable3 = order.variable3
    new.t1_or_t2 = order.t1_or_t2
    new.t3_or_t4 = order.t3_or_t4
    for i in range(4):
        new.target_types[i] = order.target_types[i]
        value = order.targets[i]
        if order.target_types[i] in SHIP_TYPE_TYPES:
            value = convert_ship_type(value, source, target, label, f"target{i + 1}")
        new.targets[i] = value

    if target is Platform.TIE:
        if order.speed:
            result.drop("speed")
        if order.designation:
            result.drop("designation")
    else:
        new.speed = order.speed
        width = XWA_ORDER_TEXT_WIDTH if target is Platform.XWA else XVT_DESIGNATION_WIDTH
        new.designation = _trimmed(result, "designation", order.designation, width)

    if source is Platform.XWA and target is not Platform.XWA:
        if any(wp.enabled for wp in order.waypoints):
            result.drop("waypoints")

    if not new.skip_triggers:
        if any(not t.is_default for t in order.skip_triggers):
            result.drop("skip_triggers")
    elif order.skip_triggers:
        for k, trigger in enumerate(order.skip_triggers[:len(new.skip_triggers)]):
            converted = convert_trigger(trigger, source, target, f"{label} skip trigger {k + 1}")
            new.skip_triggers[k] = result.merge(converted, f"skip_triggers[{k}].")
        new.skip_t1_or_t2 = order.skip_t1_or_t2
    return result


# =============================================================================
# Waypoints
# =============================================================================

def _waypoint_slots(source: Platform, target: Platform) -> Dict[int, int]:
    if source is Platform.XWING:
        return dict(_XWING_TO_TIE_WAYPOINTS)
    if target is Platform.XWING:
        return {v: k for k, v in _XWING_TO_TIE_WAYPOINTS.items()}
    if source is Platform.XWA:
        return dict(_XWA_TO_XVT_WAYPOINTS)
    if target is Platform.XWA:
        return {v: k for k, v in _XWA_TO_XVT_WAYPOINTS.items()}
    shared = min(len(WAYPOINT_NAMES[source]), len(WAYPOINT_NAMES[target]))
    return {k: k for k in range(shared)}


def convert_waypoints(waypoints: List[Waypoint], source: Platform, target: Platform,
                      label: str = "FlightGroup") -> ConversionResult:
    """Move waypoints into the target's slots; enabled ones without a slot are reported."""
    names = WAYPOINT_NAMES[source]
    slots = _waypoint_slots(source, target)
    result = ConversionResult([Waypoint() for _ in WAYPOINT_NAMES[target]])
    for k, wp in enumerate(waypoints):
        name = names[k] if k < len(names) else str(k)
        if k not in slots:
            if wp.enabled:
                result.drop(f"waypoints.{name}")
            continue
        region = wp.region
        if target is not Platform.XWA:
            if region:
                result.drop(f"waypoints.{name}.region")
            region = 0
        result.value[slots[k]] = Waypoint(wp.x, wp.y, wp.z, wp.enabled, region)
    logger.debug(f"{label}: waypoints {source.name} -> {target.name}, "
                 f"{len(result.dropped_fields)} dropped")
    return result


# =============================================================================
# Goals
# =============================================================================

def tie_goals_check(goals: List[Goal], label: str = "FlightGroup"):
    """Slide XvT goal amounts onto the TIE amount list in place."""
    for slot in (0, 1, TIE_BONUS_GOAL):
        goal = goals[slot]
        if goal.condition > 24:
            raise UnmappableValue(f"{label} goal {slot}", "condition", goal.condition, "TIE")
        if goal.amount > 6:
            raise UnmappableValue(f"{label} goal {slot}", "amount", goal.amount, "TIE")
        if goal.amount == 1:
            goal.amount = 0
        elif goal.amount > 1:
            goal.amount -= 2


def _goals_to_tie(result: ConversionResult, fg: FlightGroup, new: FlightGroup, label: str):
    scale = Platform.TIE.profile.points
    for j, goal in enumerate(fg.goals):
        slot = TIE_GOAL_SLOTS.get(j)
        if not goal.enabled:
            continue
        if slot is None or goal.team != 0:
            result.drop(f"goals[{j}]")
            continue
        if goal.amount == 1:
            result.drop(f"goals[{j}].amount")
        tie_goal = new.goals[slot]
        tie_goal.condition = goal.condition
        tie_goal.amount = goal.amount
        if slot == TIE_BONUS_GOAL:
            tie_goal.points = scale.align(goal.points)
            if tie_goal.points != goal.points:
                result.drop(f"goals[{j}].points")
        if goal.incomplete_text or goal.complete_text or goal.failed_text:
            result.drop(f"goals[{j}].text")
    tie_goals_check(new.goals, label)


def _goals_from_tie(result: ConversionResult, fg: FlightGroup, new: FlightGroup,
                    target: Platform):
    scale = target.profile.points
    arguments = {0: GoalArgument.MUST, 1: GoalArgument.MUST, TIE_BONUS_GOAL: GoalArgument.BONUS_MUST}
    for j, slot in TIE_GOAL_SLOTS.items():
        tie_goal = fg.goals[slot]
        if tie_goal.condition in (Condition.TRUE, FALSE_CONDITION):
            continue
        amount = tie_goal.amount + 2 if tie_goal.amount else 0
        new.goals[j] = Goal(argument=arguments[slot], condition=tie_goal.condition,
                            amount=amount, enabled=True,
                            points=scale.align(tie_goal.points) if slot == TIE_BONUS_GOAL else 0)
    if fg.goals[TIE_SECRET_GOAL].condition not in (Condition.TRUE, FALSE_CONDITION):
        result.drop(f"goals[{TIE_SECRET_GOAL}]")


def convert_goal(goal: Goal, source: Platform, target: Platform,
                 label: str = "Goal") -> ConversionResult:
    """XvT/BoP <-> XWA flight group goal."""
    result = ConversionResult(Goal(goal.argument, goal.condition, goal.amount, 0, goal.enabled,
                                   goal.team, incomplete_text=goal.incomplete_text,
                                   complete_text=goal.complete_text,
                                   failed_text=goal.failed_text))
    new = result.value
    if source is Platform.XWA and target is not Platform.XWA:
        if goal.condition > 46:
            raise UnmappableValue(label, "condition", goal.condition, target.name)
        if goal.amount == EACH_SPECIAL_AMOUNT:
            new.amount = SPECIAL_AMOUNT
        if goal.parameter:
            result.drop("parameter")
        if goal.active_sequence:
            result.drop("active_sequence")
    elif target is Platform.XWA:
        new.parameter = goal.parameter
        new.active_sequence = goal.active_sequence
    new.points = target.profile.points.align(goal.points)
    if new.points != goal.points:
        result.drop("points")
    return result


# =============================================================================
# Flight groups
# =============================================================================

_COMMON_FIELDS = (
    "special_cargo_craft", "rand_spec_cargo", "number_of_craft", "number_of_waves",
    "status1", "missile", "beam", "iff", "ai", "markings", "formation", "form_distance",
    "global_group", "form_leader_dist", "player_craft", "yaw", "pitch", "roll", "difficulty",
    "arrival_delay_minutes", "arrival_delay_seconds", "departure_timer_minutes",
    "departure_timer_seconds", "abort_trigger", "arrival_craft1", "arrival_method1",
    "arrival_craft2", "arrival_method2", "departure_craft1", "departure_method1",
    "departure_craft2", "departure_method2",
)
_MULTIPLAYER_FIELDS = ("team", "radio", "player_number", "arrive_only_if_human")
_XVT_ONLY_FIELDS = (
    "wave_delay", "stop_arriving_when", "random_arrival_delay_minutes",
    "random_arrival_delay_seconds", "permadeath_enabled", "permadeath_id",
    "alternate_mothership", "alternate_mothership_used", "captured_depart_mothership",
    "captured_depart_via_mothership", "prevent_craft_numbering", "departure_clock_minutes",
    "departure_clock_seconds", "handicap",
)
_XWA_ONLY_FIELDS = (
    "enable_designation1", "enable_designation2", "designation1", "designation2",
    "global_cargo", "global_special_cargo", "global_numbering", "pilot_id", "backdrop",
)
_SHARED_EXTENSION_FIELDS = ("countermeasures", "explosion_time", "status2", "global_unit",
                            "opt_craft_category")


def _check_limits(fg: FlightGroup, target: Platform, label: str):
    if target is Platform.TIE:
        if fg.status1 > MAX_TIE_STATUS:
            raise UnmappableValue(label, "status1", fg.status1, target.name)
        if fg.formation > MAX_TIE_FORMATION:
            raise UnmappableValue(label, "formation", fg.formation, target.name)
        if fg.abort_trigger > MAX_TIE_ABORT:
            raise UnmappableValue(label, "abort_trigger", fg.abort_trigger, target.name)
    elif target.is_xvt_family:
        if fg.status1 > MAX_XVT_STATUS:
            raise UnmappableValue(label, "status1", fg.status1, target.name)
        ext = fg.extension
        if isinstance(ext, XwaFields) and ext.status2 > MAX_XVT_STATUS:
            raise UnmappableValue(label, "status2", ext.status2, target.name)


def _convert_extension(result: ConversionResult, fg: FlightGroup, new: FlightGroup,
                       source: Platform, target: Platform, label: str):
    ext = fg.extension
    if isinstance(ext, TieFields):
        if ext.pilot:
            result.drop("pilot")
        return
    if target is Platform.TIE:
        _drop_changed(result, ext, _SHARED_EXTENSION_FIELDS + ("opt_loadout", "opt_craft"))
        if isinstance(ext, XvtFields):
            _drop_changed(result, ext, _XVT_ONLY_FIELDS + ("roles",))
        else:
            _drop_changed(result, ext, _XWA_ONLY_FIELDS + ("role",))
        return

    new_ext = new.extension
    for name in _SHARED_EXTENSION_FIELDS:
        setattr(new_ext, name, getattr(ext, name))
    new_ext.opt_loadout = ext.opt_loadout.copy()
    new_ext.opt_craft = [
        OptionalCraft(convert_craft_type(c.craft_type, source, target, label,
                                         f"opt_craft[{k}]"),
                      c.number_of_craft, c.number_of_waves)
        for k, c in enumerate(ext.opt_craft)]
    if isinstance(ext, XvtFields):
        _drop_changed(result, ext, _XVT_ONLY_FIELDS)
        new_ext.role = ext.roles[0]
        for k, role in enumerate(ext.roles[1:], start=1):
            if role:
                result.drop(f"roles[{k}]")
    else:
        _drop_changed(result, ext, _XWA_ONLY_FIELDS)
        new_ext.roles[0] = _trimmed(result, "role", ext.role, XVT_ROLE_WIDTH)


def _convert_orders(result: ConversionResult, fg: FlightGroup, new: FlightGroup,
                    source: Platform, target: Platform, label: str):
    count = min(len(new.orders), XVT_ORDERS if source is Platform.XWA else len(fg.orders))
    for j, order in enumerate(fg.orders):
        if j >= count:
            if order.command or any(not t.is_default for t in order.skip_triggers):
                result.drop(f"orders[{j}]")
            continue
        converted = convert_order(order, source, target, f"{label} order {j + 1}")
        new.orders[j] = result.merge(converted, f"orders[{j}].")
    if target.is_xvt_family:
        # Only the fourth order keeps skip triggers
        for j, order in enumerate(new.orders):
            if j == XVT_SKIP_ORDER:
                continue
            if any(not t.is_default for t in order.skip_triggers):
                result.drop(f"orders[{j}].skip_triggers")
            order.skip_triggers = [Trigger(), Trigger()]
            order.skip_t1_or_t2 = False


def convert_flight_group(fg: FlightGroup, source: Platform, target: Platform,
                         label: str = "FlightGroup") -> ConversionResult:
    """Convert one flight group between neighbouring platforms."""
    if source is Platform.XWING:
        return _xwing_to_tie_flight_group(fg, label)
    if target is Platform.XWING:
        return _tie_to_xwing_flight_group(fg, label)

    result = ConversionResult(new_flight_group(target))
    new = result.value
    _check_limits(fg, target, label)
    width = target.profile.name_width
    new.name = _trimmed(result, "name", fg.name, width)
    new.cargo = _trimmed(result, "cargo", fg.cargo, width)
    new.special_cargo = _trimmed(result, "special_cargo", fg.special_cargo, width)
    new.craft_type = convert_craft_type(fg.craft_type, source, target, label)
    for name in _COMMON_FIELDS:
        setattr(new, name, getattr(fg, name))
    if target is Platform.TIE:
        _drop_changed(result, fg, _MULTIPLAYER_FIELDS)
    elif source is not Platform.TIE:
        for name in _MULTIPLAYER_FIELDS:
            setattr(new, name, getattr(fg, name))

    slots = _slot_map(len(fg.arr_dep_triggers), len(new.arr_dep_triggers))
    _convert_triggers(result, fg.arr_dep_triggers, slots, new.arr_dep_triggers,
                      source, target, label, "arr_dep_triggers")
    for k, flag in enumerate(fg.arr_dep_and_or):
        if k < len(new.arr_dep_and_or):
            new.arr_dep_and_or[k] = flag
        elif flag:
            result.drop(f"arr_dep_and_or[{k}]")

    if target is Platform.TIE:
        _goals_to_tie(result, fg, new, label)
    elif source is Platform.TIE:
        _goals_from_tie(result, fg, new, target)
    else:
        for j, goal in enumerate(fg.goals[:GOAL_COUNT]):
            converted = convert_goal(goal, source, target, f"{label} goal {j}")
            new.goals[j] = result.merge(converted, f"goals[{j}].")

    _convert_orders(result, fg, new, source, target, label)
    new.waypoints = result.merge(convert_waypoints(fg.waypoints, source, target, label))
    _convert_extension(result, fg, new, source, target, label)
    return result


# =============================================================================
# X-wing flight groups
# =============================================================================

def xwing_actual_iff(fg: FlightGroup) -> int:
    """IFF of an X-wing group, resolving "default" from the craft or object type."""
    if fg.iff > 0:
        return fg.iff
    ext = fg.extension
    if ext.is_object:
        return 1 if ext.object_type == 25 else 0
    if fg.craft_type in (1, 2, 3, 13, 14):
        return 1
    if 4 <= fg.craft_type <= 8 or fg.craft_type in (16, 17):
        return 2
    if 9 <= fg.craft_type <= 12 or fg.craft_type == 15:
        return 3
    return 0


def xwing_tie_iff(fg: FlightGroup) -> int:
    actual = xwing_actual_iff(fg)
    return actual - 1 if actual >= 1 else 3


def xwing_tie_craft_type(fg: FlightGroup, label: str = "FlightGroup") -> int:
    ext = fg.extension
    if ext.is_object:
        kind = ext.object_type
        if 18 <= kind <= 21:
            return 0x4B
        if kind == 25:
            return TIE_BWING
        if 26 <= kind <= 33:
            return 0x56
        if 34 <= kind <= 49:
            return 0x57
        return {22: 0x46, 23: 0x53, 24: 0x50}.get(kind, 0x53)
    if fg.craft_type not in XWING_TO_TIE_CRAFT:
        raise UnmappableValue(label, "craft_type", fg.craft_type, "TIE")
    if fg.craft_type == 2 and fg.status1 >= XWING_BWING_STATUS:
        return TIE_BWING
    return XWING_TO_TIE_CRAFT[fg.craft_type]


def _signed(raw: int) -> int:
    return raw - 256 if raw > 127 else raw


def _xwing_to_tie_flight_group(fg: FlightGroup, label: str) -> ConversionResult:
    result = ConversionResult(new_flight_group(Platform.TIE))
    new = result.value
    ext: XwingFields = fg.extension
    width = Platform.TIE.profile.name_width
    new.name = _trimmed(result, "name", fg.name, width)
    new.cargo = _trimmed(result, "cargo", fg.cargo, width)
    new.special_cargo = _trimmed(result, "special_cargo", fg.special_cargo, width)
    new.craft_type = xwing_tie_craft_type(fg, label)
    new.iff = xwing_tie_iff(fg)
    new.status1 = fg.status1 - XWING_BWING_STATUS if fg.status1 >= XWING_BWING_STATUS else fg.status1
    new.number_of_craft = fg.number_of_craft
    new.number_of_waves = fg.number_of_waves
    new.special_cargo_craft = fg.special_cargo_craft
    new.player_craft = fg.player_craft
    new.ai = fg.ai
    new.markings = fg.markings
    new.arrival_delay_minutes = fg.arrival_delay_minutes
    new.arrival_delay_seconds = fg.arrival_delay_seconds
    if fg.formation > MAX_TIE_FORMATION:
        raise UnmappableValue(label, "formation", fg.formation, "TIE")
    new.formation = fg.formation

    if ext.is_object:
        new.yaw = angle_from_byte(ext.raw_yaw & 0xFF)
        new.pitch = pitch_from_byte(ext.raw_pitch & 0xFF)
        new.roll = angle_from_byte(ext.raw_roll & 0xFF)

    if ext.arrival_fg >= 0 and ext.arrival_event:
        condition = XWING_ARRIVAL_EVENTS.get(ext.arrival_event)
        if condition is None:
            result.drop("arrival_event")
        else:
            new.arr_dep_triggers[0] = Trigger(condition, VariableType.FLIGHT_GROUP, ext.arrival_fg)

    if ext.mothership >= 0:
        new.arrival_craft1 = ext.mothership
        new.arrival_method1 = ext.arrive_via_hyperspace == 0
        new.departure_craft1 = ext.mothership
        new.departure_method1 = ext.depart_via_hyperspace == 0

    order = new.orders[0]
    if ext.order > MAX_TIE_COMMAND:
        raise UnmappableValue(label, "order", ext.order, "TIE")
    order.command = ext.order
    for i, value in enumerate((ext.target_primary, ext.target_secondary)):
        if value >= 0:
            order.target_types[i] = VariableType.FLIGHT_GROUP
            order.targets[i] = value
    if ext.dock_time_throttle:
        result.drop("dock_time_throttle")

    if ext.objective:
        goal = XWING_OBJECTIVES.get(ext.objective)
        if goal is None:
            result.drop("objective")
        else:
            new.goals[0].condition, new.goals[0].amount = goal

    new.waypoints = result.merge(convert_waypoints(fg.waypoints, Platform.XWING, Platform.TIE, label))
    return result


def _tie_to_xwing_flight_group(fg: FlightGroup, label: str) -> ConversionResult:
    result = ConversionResult(new_flight_group(Platform.XWING))
    new = result.value
    ext: XwingFields = new.extension
    new.name = fg.name
    new.cargo = fg.cargo
    new.special_cargo = fg.special_cargo
    new.status1 = fg.status1
    if fg.craft_type in TIE_TO_XWING_OBJECT:
        new.craft_type = 0
        ext.object_type = TIE_TO_XWING_OBJECT[fg.craft_type]
        ext.raw_yaw = _signed(angle_to_byte(fg.yaw))
        ext.raw_pitch = _signed(pitch_to_byte(fg.pitch, PITCH_THRESHOLD))
        ext.raw_roll = _signed(angle_to_byte(fg.roll))
    elif fg.craft_type == TIE_BWING:
        new.craft_type = 2
        new.status1 = fg.status1 + XWING_BWING_STATUS
    elif fg.craft_type in TIE_TO_XWING_CRAFT:
        new.craft_type = TIE_TO_XWING_CRAFT[fg.craft_type]
        if fg.yaw or fg.pitch or fg.roll:
            result.drop("orientation")
    else:
        raise UnmappableValue(label, "craft_type", fg.craft_type, "XWING")

    if fg.iff <= 2:
        new.iff = fg.iff + 1
    elif fg.iff > 3:
        result.drop("iff")
    new.number_of_craft = fg.number_of_craft
    new.number_of_waves = 1 if ext.is_object else fg.number_of_waves
    new.special_cargo_craft = fg.special_cargo_craft
    new.player_craft = fg.player_craft
    new.formation = fg.formation
    new.ai = fg.ai
    new.markings = fg.markings
    new.arrival_delay_minutes = fg.arrival_delay_minutes
    new.arrival_delay_seconds = fg.arrival_delay_seconds

    events = {int(condition): event for event, condition in XWING_ARRIVAL_EVENTS.items()}
    for k, trigger in enumerate(fg.arr_dep_triggers):
        if k == 0 and trigger.variable_type == VariableType.FLIGHT_GROUP \
                and trigger.condition in events:
            ext.arrival_event = events[trigger.condition]
            ext.arrival_fg = trigger.variable
        elif trigger.condition != Condition.TRUE:
            result.drop(f"arr_dep_triggers[{k}]")

    if fg.arrival_method1 or fg.departure_method1:
        ext.mothership = fg.arrival_craft1 if fg.arrival_method1 else fg.departure_craft1
        ext.arrive_via_hyperspace = 0 if fg.arrival_method1 else 1
        ext.depart_via_hyperspace = 0 if fg.departure_method1 else 1

    first = fg.orders[0]
    ext.order = first.command
    for i, attr in enumerate(("target_primary", "target_secondary")):
        if first.target_types[i] == VariableType.FLIGHT_GROUP:
            setattr(ext, attr, first.targets[i])
        elif first.target_types[i]:
            result.drop(f"orders[0].target{i + 1}")
    for j, order in enumerate(fg.orders[1:], start=1):
        if order.command:
            result.drop(f"orders[{j}]")

    objectives = {goal: objective for objective, goal in XWING_OBJECTIVES.items()}
    primary = fg.goals[0]
    if primary.condition not in (Condition.TRUE, FALSE_CONDITION):
        key = (primary.condition, primary.amount)
        if key in objectives:
            ext.objective = objectives[key]
        else:
            result.drop("goals[0]")
    for j, goal in enumerate(fg.goals[1:], start=1):
        if goal.condition not in (Condition.TRUE, FALSE_CONDITION):
            result.drop(f"goals[{j}]")

    new.waypoints = result.merge(convert_waypoints(fg.waypoints, Platform.TIE, Platform.XWING, label))
    return result


# =============================================================================
# Messages
# =============================================================================

def _aligned_delay(seconds: int, target: Platform) -> int:
    if target is Platform.XWA:
        return xwa_delay_to_seconds(seconds_to_xwa_delay(seconds))
    return ticks_to_seconds(seconds_to_ticks(seconds))


def convert_message(message: Message, source: Platform, target: Platform,
                    label: str = "Message") -> ConversionResult:
    result = ConversionResult(new_message(target))
    new = result.value
    new.text = message.text
    new.color = message.color
    new.note = message.note
    new.delay_seconds = _aligned_delay(message.delay_seconds, target)
    if new.delay_seconds != message.delay_seconds:
        result.drop("delay_seconds")

    slots = {k: k for k in range(min(len(message.triggers), len(new.triggers)))}
    _convert_triggers(result, message.triggers, slots, new.triggers, source, target,
                      label, "triggers")
    for k, flag in enumerate(message.and_or):
        if k < len(new.and_or):
            new.and_or[k] = flag
        elif flag:
            result.drop(f"and_or[{k}]")

    if new.sent_to_team and message.sent_to_team:
        new.sent_to_team = list(message.sent_to_team)
    elif message.sent_to_team and message.sent_to_team != new_message(source).sent_to_team:
        result.drop("sent_to_team")
    if target is Platform.XWA:
        return result
    if message.voice_id:
        result.drop("voice_id")
    if message.originating_fg:
        result.drop("originating_fg")
    return result


# =============================================================================
# Mission level
# =============================================================================

def _check_counts(mission: Mission, target: Platform):
    profile = target.profile
    if mission.flight_groups.count > profile.flight_group_limit:
        raise UnmappableValue("Mission", "flight_groups", mission.flight_groups.count, target.name)
    if profile.message_limit and mission.messages.count > profile.message_limit:
        raise UnmappableValue("Mission", "messages", mission.messages.count, target.name)


def _rescale_ticks(ticks: int, source: Platform, target: Platform) -> int:
    return ticks * target.profile.ticks_per_second // source.profile.ticks_per_second


def _fit_events(result: ConversionResult, events: List[BriefingEvent], target: Platform,
                tag: str) -> List[BriefingEvent]:
    """Trailing events that overflow the target's event area are dropped."""
    area_words = EVENT_AREA_BYTES[target] // 2
    kept = list(events)
    while kept and len(events_to_words(kept)) > area_words:
        kept.pop()
    if len(kept) < len(events):
        result.drop(tag)
    return kept


def convert_briefing(briefing: Briefing, source: Platform, target: Platform,
                     index: int = 0) -> ConversionResult:
    result = ConversionResult(Briefing())
    new = result.value
    count = TAG_COUNTS[target]
    new.length = _rescale_ticks(briefing.length, source, target)
    new.unknown1 = briefing.unknown1
    new.tags = (list(briefing.tags) + [""] * count)[:count]
    new.strings = (list(briefing.strings) + [""] * count)[:count]
    if any(briefing.tags[count:]):
        result.drop(f"briefings[{index}].tags")
    if any(briefing.strings[count:]):
        result.drop(f"briefings[{index}].strings")
    if target is not Platform.TIE:
        new.teams = list(briefing.teams) if briefing.teams else [True] + [False] * 9
    elif briefing.teams and any(briefing.teams[1:]):
        result.drop(f"briefings[{index}].teams")
    if target is Platform.XWA:
        new.string_notes = [""] * count
    elif any(briefing.string_notes):
        result.drop(f"briefings[{index}].string_notes")

    events = []
    for event in briefing.events:
        if event.event_type >= len(EVENT_PARAMETERS):
            result.drop(f"briefings[{index}].events")
            continue
        events.append(BriefingEvent(_rescale_ticks(event.time, source, target),
                                    event.event_type, list(event.parameters)))
    new.events = _fit_events(result, events, target, f"briefings[{index}].events")
    return result


def _convert_briefings(result: ConversionResult, mission: Mission, new: Mission):
    source, target = mission.platform, new.platform
    for i, briefing in enumerate(mission.briefings):
        if i >= new.briefings.count:
            if briefing.events:
                result.drop(f"briefings[{i}]")
            continue
        new.briefings[i] = result.merge(convert_briefing(briefing, source, target, i))


def _convert_globals_to_tie(result: ConversionResult, mission: Mission, new: Mission):
    source = mission.platform
    tie_goals = new.globals[0].goals
    for t, globals_ in enumerate(mission.globals):
        for g, goal in enumerate(globals_.goals):
            prefix = f"globals[{t}].goals[{g}]"
            if t != 0 or g == 1:
                if not all(_is_unused(trigger) for trigger in goal.triggers):
                    result.drop(prefix)
                continue
            _convert_triggers(result, goal.triggers, {0: 0, 1: 1}, tie_goals[g].triggers,
                              source, Platform.TIE, f"Global goal {g}", f"{prefix}.triggers")
            tie_goals[g].and_or[0] = goal.and_or[0]
            if goal.points:
                result.drop(f"{prefix}.points")


def _convert_globals_from_tie(result: ConversionResult, mission: Mission, new: Mission):
    target = new.platform
    goals = new.globals[0].goals
    for g, goal in enumerate(mission.globals[0].goals):
        prefix = f"globals[0].goals[{g}]"
        if g == 1:
            if not all(_is_unused(trigger) for trigger in goal.triggers):
                result.drop(prefix)
            continue
        _convert_triggers(result, goal.triggers, {0: 0, 1: 1}, goals[g].triggers,
                          Platform.TIE, target, f"Global goal {g}", f"{prefix}.triggers")
        goals[g].and_or[0] = goal.and_or[0]


def _convert_globals_between(result: ConversionResult, mission: Mission, new: Mission):
    source, target = mission.platform, new.platform
    scale = target.profile.points
    for t, globals_ in enumerate(mission.globals):
        for g, goal in enumerate(globals_.goals):
            prefix = f"globals[{t}].goals[{g}]"
            dest = new.globals[t].goals[g]
            slots = {k: k for k in range(len(goal.triggers))}
            _convert_triggers(result, goal.triggers, slots, dest.triggers, source, target,
                              f"Global goal {t}.{g}", f"{prefix}.triggers")
            dest.and_or = list(goal.and_or)
            dest.strings = [list(states) for states in goal.strings]
            dest.points = scale.align(goal.points)
            if dest.points != goal.points:
                result.drop(f"{prefix}.points")
            if target is Platform.XWA:
                if goal.name or goal.version or goal.delay:
                    result.drop(f"{prefix}.name")
            else:
                dest.name, dest.version, dest.delay = goal.name, goal.version, goal.delay
                if goal.active_sequence:
                    result.drop(f"{prefix}.active_sequence")
            if target is Platform.XWA:
                dest.active_sequence = goal.active_sequence


def _convert_teams(result: ConversionResult, mission: Mission, new: Mission):
    """XvT/BoP <-> XWA teams. XvT keeps EOM colors apart, XWA inline."""
    target = new.platform
    for i, team in enumerate(mission.teams):
        dest: Team = new.teams[i]
        dest.name = team.name
        if target is Platform.XWA:
            dest.allies = [1 if ally else 0 for ally in team.allies]
            dest.eom_messages = [join_color(color, text)
                                 for color, text in zip(team.eom_colors, team.eom_messages)]
            continue
        dest.allies = [1 if ally == 1 else 0 for ally in team.allies]
        if any(ally == 2 for ally in team.allies):
            result.drop(f"teams[{i}].allies")
        for j, text in enumerate(team.eom_messages[:6]):
            dest.eom_colors[j], dest.eom_messages[j] = split_color(text)
        if any(team.voice_ids):
            result.drop(f"teams[{i}].voice_ids")
        if any(team.eom_notes):
            result.drop(f"teams[{i}].eom_notes")


def _tie_iff_from_teams(result: ConversionResult, mission: Mission, new: Mission):
    header = new.header
    leader = mission.teams[0]
    header.eom_messages = [join_color(color, text)
                           for color, text in zip(leader.eom_colors, leader.eom_messages)]
    for i in range(2, 6):
        header.iff_names[i - 2] = mission.teams[i].name
        header.iff_hostile[i - 2] = not leader.allies[i]
    for i, team in enumerate(mission.teams):
        if i and any(team.eom_messages):
            result.drop(f"teams[{i}].eom_messages")
    _drop_changed(result, mission.header, ("mission_type", "time_limit_minutes",
                                           "time_limit_seconds", "goals_unimportant"), "header.")


def _teams_from_tie_iff(mission: Mission, new: Mission):
    header = mission.header
    leader = new.teams[0]
    for j, text in enumerate(header.eom_messages[:6]):
        leader.eom_colors[j], leader.eom_messages[j] = split_color(text)
    for i in range(2, 6):
        if header.iff_names[i - 2]:
            new.teams[i].name = header.iff_names[i - 2]
        leader.allies[i] = 0 if header.iff_hostile[i - 2] else 1


def _questions_from_text(mission: Mission, new: Mission):
    header = mission.header
    questions = new.questions
    if header.description:
        questions.pre[0] = PreQuestion(_DESCRIPTION_QUESTION, header.description)
    if header.success_text:
        questions.post[0] = PostQuestion(_SUCCESS_QUESTION, header.success_text,
                                         _SUCCESS_TRIGGER, _POST_TRIGGER_TYPE)
    if header.fail_text:
        questions.post[1] = PostQuestion(_FAIL_QUESTION, header.fail_text,
                                         _FAIL_TRIGGER, _POST_TRIGGER_TYPE)


def _text_from_questions(result: ConversionResult, mission: Mission, new: Mission):
    header = new.header
    for i, pre in enumerate(mission.questions.pre):
        if i == 0 and pre.answer:
            header.description = pre.answer
        elif pre.question or pre.answer:
            result.drop(f"questions.pre[{i}]")
    for i, post in enumerate(mission.questions.post):
        if not (post.question or post.answer):
            continue
        if post.trigger == _SUCCESS_TRIGGER and not header.success_text:
            header.success_text = post.answer
        elif post.trigger == _FAIL_TRIGGER and not header.fail_text:
            header.fail_text = post.answer
        else:
            result.drop(f"questions.post[{i}]")
    if new.platform is Platform.XVT:
        if header.success_text or header.fail_text:
            result.drop("header.success_text")
        header.success_text = ""
        header.fail_text = ""


def _convert_header(result: ConversionResult, mission: Mission, new: Mission):
    source, target = mission.platform, new.platform
    old, header = mission.header, new.header
    if target is Platform.TIE:
        _tie_iff_from_teams(result, mission, new)
        _questions_from_text(mission, new)
        return
    if source is Platform.TIE:
        _teams_from_tie_iff(mission, new)
        _text_from_questions(result, mission, new)
        if old.officers_present or old.captured_on_ejection:
            result.drop("header.officers")
        return

    header.iff_names = list(old.iff_names)
    header.mission_type = old.mission_type
    header.time_limit_minutes = old.time_limit_minutes
    header.description = old.description
    header.success_text = old.success_text
    header.fail_text = old.fail_text
    if target is Platform.XWA:
        _drop_changed(result, old, ("legacy_time_limit_minutes", "legacy_time_limit_seconds",
                                    "win_type", "rnd_seed", "legacy_rescue",
                                    "legacy_all_way_shown", "goals_unimportant",
                                    "time_limit_seconds"), "header.")
    else:
        _drop_changed(result, old, ("regions", "global_cargo", "global_groups", "officer",
                                    "logo", "note", "description_note", "success_note",
                                    "fail_note", "end_when_complete"), "header.")
        if target is Platform.XVT and (old.success_text or old.fail_text):
            result.drop("header.success_text")
            header.success_text = ""
            header.fail_text = ""


def _convert_step(mission: Mission, target: Platform) -> ConversionResult:
    """One step between neighbours (or within the XvT family)."""
    source = mission.platform
    if source is Platform.XWING:
        return _xwing_to_tie(mission)
    if target is Platform.XWING:
        return _tie_to_xwing(mission)

    _check_counts(mission, target)
    new = Mission(target)
    result = ConversionResult(new)
    new.flight_groups.load([
        result.merge(convert_flight_group(fg, source, target, f"FlightGroup {i}"),
                     f"flight_groups[{i}].")
        for i, fg in enumerate(mission.flight_groups)])
    new.messages.load([
        result.merge(convert_message(message, source, target, f"Message {i}"),
                     f"messages[{i}].")
        for i, message in enumerate(mission.messages)])
    if target is Platform.TIE:
        _convert_globals_to_tie(result, mission, new)
    elif source is Platform.TIE:
        _convert_globals_from_tie(result, mission, new)
    else:
        _convert_globals_between(result, mission, new)
        _convert_teams(result, mission, new)
    _convert_header(result, mission, new)
    _convert_briefings(result, mission, new)
    return result


# =============================================================================
# X-wing mission level
# =============================================================================

def _xwing_briefing_events(result: ConversionResult, mission: Mission) -> Briefing:
    brf = mission.xwing_briefing
    briefing = Briefing(tags=(list(brf.tags) + [""] * 32)[:32],
                        strings=(list(brf.strings) + [""] * 32)[:32])
    events = []
    offset = 0
    for p, page in enumerate(brf.pages):
        if p:
            events.append(BriefingEvent(_rescale_ticks(offset, Platform.XWING, Platform.TIE),
                                        EventType.PAGE_BREAK))
        for event in page.events:
            tie_event, _ = XWING_TO_TIE_EVENTS.get(event.event_type, (None, 0))
            if tie_event is None:
                result.drop(f"briefing.pages[{p}].events")
                continue
            count = parameter_count(tie_event)
            params = (list(event.parameters) + [0] * count)[:count]
            events.append(BriefingEvent(
                _rescale_ticks(offset + event.time, Platform.XWING, Platform.TIE),
                tie_event, params))
        offset += page.length
    briefing.length = _rescale_ticks(offset, Platform.XWING, Platform.TIE)
    briefing.events = _fit_events(result, events, Platform.TIE, "briefing.events")
    if any(brf.highlights):
        result.drop("briefing.highlights")
    return briefing


def _xwing_to_tie(mission: Mission) -> ConversionResult:
    _check_counts(mission, Platform.TIE)
    new = Mission(Platform.TIE)
    result = ConversionResult(new)
    groups = [result.merge(convert_flight_group(fg, Platform.XWING, Platform.TIE,
                                                f"FlightGroup {i}"), f"flight_groups[{i}].")
              for i, fg in enumerate(mission.flight_groups)]
    new.flight_groups.load(groups)

    old = mission.header
    _drop_changed(result, old, ("time_limit", "end_event", "rnd_seed", "mission_location"),
                  "header.")
    new.header.eom_messages[:3] = old.eom_messages[:3]

    brf = mission.xwing_briefing
    if brf is not None:
        new.briefings[0] = _xwing_briefing_events(result, mission)
        if len(brf.ships) == len(groups):
            for fg, ship in zip(groups, brf.ships):
                if ship.coordinates:
                    fg.waypoints[TIE_BRIEFING_WAYPOINT] = briefing_waypoints(ship)[0]
        elif brf.ships:
            result.drop("briefing.ships")
    return result


def _tie_to_xwing(mission: Mission) -> ConversionResult:
    _check_counts(mission, Platform.XWING)
    new = Mission(Platform.XWING)
    result = ConversionResult(new)
    new.flight_groups.load([
        result.merge(convert_flight_group(fg, Platform.TIE, Platform.XWING, f"FlightGroup {i}"),
                     f"flight_groups[{i}].")
        for i, fg in enumerate(mission.flight_groups)])
    if mission.messages.count:
        result.drop("messages")
    for g, goal in enumerate(mission.globals[0].goals):
        if not all(_is_unused(trigger) for trigger in goal.triggers):
            result.drop(f"globals[0].goals[{g}]")
    if any(q.question or q.answer for q in mission.questions.pre + mission.questions.post):
        result.drop("questions")
    new.header.eom_messages = list(mission.header.eom_messages[:3])
    if any(mission.header.eom_messages[3:]):
        result.drop("header.eom_messages")

    briefing = mission.briefings[0]
    brf = new.xwing_briefing
    brf.tags = (list(briefing.tags) + [""] * 32)[:32]
    brf.strings = (list(briefing.strings) + [""] * 32)[:32]
    if briefing.events:
        result.drop("briefings[0].events")
    return result


# =============================================================================
# Public entry point
# =============================================================================

def _steps(source: Platform, target: Platform) -> List[Platform]:
    """Platforms visited after source, ending at target."""
    start, end = lineage_index(source), lineage_index(target)
    if start == end:
        return [target] if source is not target else []
    direction = 1 if end > start else -1
    steps = [LINEAGE[k] for k in range(start + direction, end + direction, direction)]
    steps[-1] = target
    return steps


def _convert_within_family(mission: Mission, target: Platform) -> ConversionResult:
    """XvT <-> BoP share one layout; only BoP keeps the debriefing texts."""
    new = copy.deepcopy(mission)
    new.platform = target
    result = ConversionResult(new)
    if target is Platform.XVT and (new.header.success_text or new.header.fail_text):
        result.drop("header.success_text")
        new.header.success_text = ""
        new.header.fail_text = ""
    return result


def convert_mission(mission: Mission, target: Platform) -> ConversionResult:
    """Convert a whole mission, chaining through intermediate platforms."""
    result = ConversionResult(mission)
    current = mission
    for step in _steps(mission.platform, target):
        logger.info(f"Converting {current.platform.name} -> {step.name}")
        if lineage_index(step) == lineage_index(current.platform):
            converted = _convert_within_family(current, step)
        else:
            converted = _convert_step(current, step)
        current = result.merge(converted)
    result.value = current
    if mission.path and current is not mission:
        base = mission.path.rsplit('.', 1)[0]
        current.path = f"{base}_{target.value}{target.profile.extension}"
    for tag in sorted(result.dropped_fields):
        logger.warning(f"{mission.platform.name} -> {target.name}: dropped {tag}")
    return result
