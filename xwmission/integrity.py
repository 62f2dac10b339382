#!/usr/bin/env python3
"""
Referential Integrity
=====================

Keeps slot indices that point into the flight group and message collections
valid across structural edits. Every pass runs over the whole mission before
the collection itself is touched.

Flight group references:
-----------------------
| Owner               | Field                                          | On delete            |
|---------------------|------------------------------------------------|----------------------|
| Trigger (all kinds) | variable when type is FG / not-FG              | trigger reset        |
| Trigger (XWA)       | parameter1 of proximity conditions (index + 1) | parameter1 = 0       |
| Order               | target value when target type is FG / not-FG   | target type = none   |
| Goal (XWA)          | parameter of proximity conditions              | condition = FALSE    |
| FlightGroup         | arrival / departure mothership craft           | craft 0, method off  |
| XvtFields           | alternate and captured-departure motherships   | craft 0, flag off    |
| XwingFields         | arrival FG, mothership, primary/secondary target | -1 (with side flags) |
| Message (XWA)       | originating FG                                 | 0                    |
| Briefing            | FG tag events                                  | event removed        |

Message references are trigger variables of type 0x1B and order targets of
the same type.

Primitives:
----------
    transform_references(mission, kind, src, dst)    # src -> dst, others untouched
    transform_references(mission, kind, src, None)   # src nulled, > src decremented

Swap runs three transforms through an out-of-range sentinel; insert shifts
upward one slot at a time from the end of the collection.
"""

import logging
from typing import List, Optional

from .bounded import BoundedCollection
from .briefing import BriefingEvent, is_fg_tag
from .flightgroup import FlightGroup, XvtFields, XwingFields
from .mission import Message, Mission
from .platform import Platform
from .trigger import (
    FG_REFERENCE_TYPES, MESSAGE_REFERENCE_TYPES, PROXIMITY_CONDITIONS,
    IndexMap, ReferenceKind, Trigger,
)

logger = logging.getLogger(__name__)

# Out of range for every collection (XWING tops out at index 254)
SENTINEL = 255

_FALSE_CONDITION = 10


def _mapping(src: int, dst: Optional[int]) -> IndexMap:
    if dst is None:
        def delete(index: int) -> Optional[int]:
            if index == src:
                return None
            return index - 1 if index > src else index
        return delete

    def move(index: int) -> Optional[int]:
        return dst if index == src else index
    return move


# =============================================================================
# Reference walkers
# =============================================================================

def _mission_triggers(mission: Mission) -> List[Trigger]:
    triggers = []
    for fg in mission.flight_groups:
        triggers.extend(fg.arr_dep_triggers)
        for order in fg.orders:
            triggers.extend(order.skip_triggers)
    for message in mission.messages:
        triggers.extend(message.triggers)
    for globals_ in mission.globals:
        for goal in globals_.goals:
            triggers.extend(goal.triggers)
    return triggers


def _remap_orders(fg: FlightGroup, types, mapping: IndexMap) -> int:
    changed = 0
    for order in fg.orders:
        for i in range(4):
            if order.target_types[i] not in types:
                continue
            new = mapping(order.targets[i])
            if new is None:
                order.target_types[i] = 0
                order.targets[i] = 0
                changed += 1
            elif new != order.targets[i]:
                order.targets[i] = new
                changed += 1
    return changed


def _remap_slot(value: int, mapping: IndexMap) -> Optional[int]:
    """Map a plain index field; negative values mean "none" and are kept."""
    if value < 0:
        return value
    return mapping(value)


def _remap_motherships(fg: FlightGroup, mapping: IndexMap) -> int:
    changed = 0
    for craft_attr, method_attr in (("arrival_craft1", "arrival_method1"),
                                    ("arrival_craft2", "arrival_method2"),
                                    ("departure_craft1", "departure_method1"),
                                    ("departure_craft2", "departure_method2")):
        old = getattr(fg, craft_attr)
        new = mapping(old)
        if new is None:
            setattr(fg, craft_attr, 0)
            setattr(fg, method_attr, False)
            changed += 1
        elif new != old:
            setattr(fg, craft_attr, new)
            changed += 1
    ext = fg.extension
    if isinstance(ext, XvtFields):
        for craft_attr, flag_attr in (("alternate_mothership", "alternate_mothership_used"),
                                      ("captured_depart_mothership", "captured_depart_via_mothership")):
            old = getattr(ext, craft_attr)
            new = mapping(old)
            if new is None:
                setattr(ext, craft_attr, 0)
                setattr(ext, flag_attr, False)
                changed += 1
            elif new != old:
                setattr(ext, craft_attr, new)
                changed += 1
    return changed


def _remap_xwing(ext: XwingFields, mapping: IndexMap) -> int:
    changed = 0
    new = _remap_slot(ext.arrival_fg, mapping)
    if new is None:
        ext.arrival_fg = -1
        ext.arrival_event = 0
        changed += 1
    elif new != ext.arrival_fg:
        ext.arrival_fg = new
        changed += 1
    new = _remap_slot(ext.mothership, mapping)
    if new is None:
        ext.mothership = -1
        ext.arrive_via_hyperspace = 1
        ext.depart_via_hyperspace = 1
        changed += 1
    elif new != ext.mothership:
        ext.mothership = new
        changed += 1
    for attr in ("target_primary", "target_secondary"):
        old = getattr(ext, attr)
        new = _remap_slot(old, mapping)
        if new is None:
            setattr(ext, attr, -1)
            changed += 1
        elif new != old:
            setattr(ext, attr, new)
            changed += 1
    return changed


def _remap_goals(fg: FlightGroup, mapping: IndexMap) -> int:
    changed = 0
    for goal in fg.goals:
        if goal.condition not in PROXIMITY_CONDITIONS:
            continue
        new = mapping(goal.parameter)
        if new is None:
            goal.condition = _FALSE_CONDITION
            goal.parameter = 0
            changed += 1
        elif new != goal.parameter:
            goal.parameter = new
            changed += 1
    return changed


def _remap_events(events: List[BriefingEvent], mapping: IndexMap, xwing: bool) -> int:
    changed = 0
    kept = []
    for event in events:
        if is_fg_tag(event.event_type, xwing) and event.parameters:
            new = mapping(event.parameters[0])
            if new is None:
                changed += 1
                continue
            if new != event.parameters[0]:
                event.parameters[0] = new
                changed += 1
        kept.append(event)
    events[:] = kept
    return changed


# =============================================================================
# Primitive
# =============================================================================

def transform_references(mission: Mission, kind: ReferenceKind, src: int,
                         dst: Optional[int] = None) -> int:
    """
    Rewrite every reference of the given kind.

    With dst set, references to src become dst. With dst None, references to
    src are nulled and references above src move down by one. Returns the
    number of fields changed.
    """
    mapping = _mapping(src, dst)
    changed = 0
    for trigger in _mission_triggers(mission):
        if trigger.remap(kind, mapping):
            changed += 1

    if kind is ReferenceKind.MESSAGE:
        for fg in mission.flight_groups:
            changed += _remap_orders(fg, MESSAGE_REFERENCE_TYPES, mapping)
        logger.debug(f"Message references {src} -> {dst}: {changed} changed")
        return changed

    for fg in mission.flight_groups:
        changed += _remap_orders(fg, FG_REFERENCE_TYPES, mapping)
        changed += _remap_goals(fg, mapping)
        if isinstance(fg.extension, XwingFields):
            changed += _remap_xwing(fg.extension, mapping)
        else:
            changed += _remap_motherships(fg, mapping)
    for message in mission.messages:
        if mission.platform is Platform.XWA:
            new = mapping(message.originating_fg)
            if new is None:
                message.originating_fg = 0
                changed += 1
            elif new != message.originating_fg:
                message.originating_fg = new
                changed += 1
    for briefing in mission.briefings:
        changed += _remap_events(briefing.events, mapping, xwing=False)
    if mission.xwing_briefing is not None:
        for page in mission.xwing_briefing.pages:
            changed += _remap_events(page.events, mapping, xwing=True)
    logger.debug(f"Flight group references {src} -> {dst}: {changed} changed")
    return changed


# =============================================================================
# Collection operations
# =============================================================================

def _delete(mission: Mission, kind: ReferenceKind, collection: BoundedCollection, index: int) -> int:
    if not 0 <= index < collection.count:
        raise IndexError(f"Index {index} outside 0..{collection.count - 1}")
    transform_references(mission, kind, index, None)
    return collection.remove_at(index)


def _swap(mission: Mission, kind: ReferenceKind, collection: BoundedCollection, a: int, b: int) -> bool:
    count = collection.count
    if a == b or not (0 <= a < count and 0 <= b < count):
        return False
    transform_references(mission, kind, b, SENTINEL)
    transform_references(mission, kind, a, b)
    transform_references(mission, kind, SENTINEL, a)
    return collection.swap(a, b)


def _insert(mission: Mission, kind: ReferenceKind, collection: BoundedCollection,
            index: int, item) -> int:
    if index < 0 or index > collection.count:
        raise IndexError(f"Insert index {index} outside 0..{collection.count}")
    if collection.is_full:
        # Let the collection raise before any reference moves
        return collection.insert(index, item)
    for k in range(collection.count - 1, index - 1, -1):
        transform_references(mission, kind, k, k + 1)
    return collection.insert(index, item)


def delete_flight_group(mission: Mission, index: int) -> int:
    logger.debug(f"Deleting flight group {index}")
    return _delete(mission, ReferenceKind.FLIGHT_GROUP, mission.flight_groups, index)


def swap_flight_groups(mission: Mission, a: int, b: int) -> bool:
    return _swap(mission, ReferenceKind.FLIGHT_GROUP, mission.flight_groups, a, b)


def insert_flight_group(mission: Mission, index: int, fg: Optional[FlightGroup] = None) -> int:
    return _insert(mission, ReferenceKind.FLIGHT_GROUP, mission.flight_groups, index, fg)


def delete_message(mission: Mission, index: int) -> int:
    logger.debug(f"Deleting message {index}")
    return _delete(mission, ReferenceKind.MESSAGE, mission.messages, index)


def swap_messages(mission: Mission, a: int, b: int) -> bool:
    return _swap(mission, ReferenceKind.MESSAGE, mission.messages, a, b)


def insert_message(mission: Mission, index: int, message: Optional[Message] = None) -> int:
    return _insert(mission, ReferenceKind.MESSAGE, mission.messages, index, message)
