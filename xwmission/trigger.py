#!/usr/bin/env python3
"""
Triggers
========

Condition records shared by arrival/departure logic, orders, messages and
global goals.

Layout:
------
| Offset | Field        | Platforms        |
|--------|--------------|------------------|
| 0x00   | Condition    | all              |
| 0x01   | VariableType | all              |
| 0x02   | Variable     | all              |
| 0x03   | Amount       | all              |
| 0x04   | Parameter1   | XWA (6-byte form)|
| 0x05   | Parameter2   | XWA (6-byte form)|

Validation on decode:
--------------------
| Platform | Hard errors                                   | Soft fixes                   |
|----------|-----------------------------------------------|------------------------------|
| TIE      | condition > 24, type > 9, bad target value    | type 10 -> none, amount 16..19 |
| XvT/BoP  | condition > 46, type > 23, bad target value   | amount 19 -> 6               |
| XWA      | condition > 58, type > 27, ship type > 232    | -                            |

Ship-type variables are zero-based (0 = first craft) while flight group
craft types reserve 0 for "none".
"""

import logging
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Callable, Optional

from .errors import FieldOutOfRange
from .platform import Platform

logger = logging.getLogger(__name__)


class VariableType(IntEnum):
    NONE = 0x00
    FLIGHT_GROUP = 0x01
    SHIP_TYPE = 0x02
    SHIP_CLASS = 0x03
    OBJECT_TYPE = 0x04
    IFF = 0x05
    SHIP_ORDERS = 0x06
    CRAFT_WHEN = 0x07
    GLOBAL_GROUP = 0x08
    AI_RATING = 0x09
    STATUS = 0x0A
    ALL = 0x0B
    TEAM = 0x0C
    PLAYER = 0x0D
    DELAY = 0x0E
    NOT_FLIGHT_GROUP = 0x0F
    NOT_SHIP_TYPE = 0x10
    NOT_SHIP_CLASS = 0x11
    NOT_OBJECT_TYPE = 0x12
    NOT_GLOBAL_GROUP = 0x13
    NOT_AI_RATING = 0x14
    NOT_TEAM = 0x15
    NOT_PLAYER = 0x16
    GLOBAL_UNIT = 0x17
    NOT_GLOBAL_UNIT = 0x18
    GLOBAL_CARGO = 0x19
    NOT_GLOBAL_CARGO = 0x1A
    MESSAGE = 0x1B


class Condition(IntEnum):
    TRUE = 0
    ARRIVED = 1
    DESTROYED = 2
    ATTACKED = 3
    CAPTURED = 4
    INSPECTED = 5
    BOARDED = 6
    DOCKED = 7
    DISABLED = 8
    EXIST = 9
    FALSE = 10
    COMPLETE_MISSION = 12
    COMPLETE_PRIMARY = 13
    FAIL_PRIMARY = 14
    COMPLETE_SECONDARY = 15
    FAIL_SECONDARY = 16
    COMPLETE_BONUS = 17
    FAIL_BONUS = 18
    DROPPED_OFF = 19
    REINFORCED = 20
    NO_SHIELDS = 21
    HALF_HULL = 22
    OUT_OF_WARHEADS = 23
    NEARBY = 0x31
    NOT_NEARBY = 0x32


class ReferenceKind(Enum):
    """Which collection a trigger variable or field indexes into."""
    FLIGHT_GROUP = "flight_group"
    MESSAGE = "message"


FG_REFERENCE_TYPES = (VariableType.FLIGHT_GROUP, VariableType.NOT_FLIGHT_GROUP)
MESSAGE_REFERENCE_TYPES = (VariableType.MESSAGE,)
SHIP_TYPE_TYPES = (VariableType.SHIP_TYPE, VariableType.NOT_SHIP_TYPE)
PROXIMITY_CONDITIONS = (Condition.NEARBY, Condition.NOT_NEARBY)

# Parameter1 of a proximity trigger holds the FG index plus this offset (0 = none)
PROXIMITY_FG_OFFSET = 1

# (max condition, max variable type, max ship-type variable)
_LIMITS = {
    Platform.TIE: (24, 9, 91),
    Platform.XVT: (46, 23, 91),
    Platform.BOP: (46, 23, 91),
    Platform.XWA: (58, 27, 232),
}

# Legacy amounts: 66% -> 75%, 33% -> 50%, "each" -> 100%, "each special" -> "100% special"
_TIE_AMOUNT_FIXES = {16: 1, 17: 2, 18: 0, 19: 6}
_XVT_AMOUNT_FIXES = {19: 6}

# Mapping applied to an index: returns the new index, or None when the
# referenced slot was deleted
IndexMap = Callable[[int], Optional[int]]


@dataclass
class Trigger:
    condition: int = 0       # Condition code; 0 = always (TRUE)
    variable_type: int = 0   # VariableType of the target
    variable: int = 0        # Target value, meaning depends on variable_type
    amount: int = 0          # Quantity enumerant (100%, 50%, at least one...)
    parameter1: int = 0      # XWA only
    parameter2: int = 0      # XWA only

    @classmethod
    def parse(cls, data: bytes, offset: int = 0, size: int = 4) -> 'Trigger':
        trigger = cls(data[offset], data[offset + 1], data[offset + 2], data[offset + 3])
        if size >= 6:
            trigger.parameter1 = data[offset + 4]
            trigger.parameter2 = data[offset + 5]
        return trigger

    def to_bytes(self, size: int = 4) -> bytes:
        raw = bytes([self.condition & 0xFF, self.variable_type & 0xFF,
                     self.variable & 0xFF, self.amount & 0xFF])
        if size >= 6:
            raw += bytes([self.parameter1 & 0xFF, self.parameter2 & 0xFF])
        return raw

    def __str__(self):
        return (f"Trigger(cond={self.condition}, type=0x{self.variable_type:02X}, "
                f"var={self.variable}, amount={self.amount})")

    def copy(self) -> 'Trigger':
        return Trigger(self.condition, self.variable_type, self.variable, self.amount,
                       self.parameter1, self.parameter2)

    def clear(self):
        self.condition = 0
        self.variable_type = 0
        self.variable = 0
        self.amount = 0
        self.parameter1 = 0
        self.parameter2 = 0

    @property
    def is_default(self) -> bool:
        return self == Trigger()

    def references(self, kind: ReferenceKind, index: int) -> bool:
        if kind is ReferenceKind.FLIGHT_GROUP:
            if self.variable_type in FG_REFERENCE_TYPES and self.variable == index:
                return True
            return (self.condition in PROXIMITY_CONDITIONS
                    and self.parameter1 == index + PROXIMITY_FG_OFFSET)
        return self.variable_type in MESSAGE_REFERENCE_TYPES and self.variable == index

    def remap(self, kind: ReferenceKind, mapping: IndexMap) -> bool:
        """Rewrite references of the given kind; a deleted target resets the trigger."""
        types = FG_REFERENCE_TYPES if kind is ReferenceKind.FLIGHT_GROUP else MESSAGE_REFERENCE_TYPES
        changed = False
        if self.variable_type in types:
            new = mapping(self.variable)
            if new is None:
                self.clear()
                return True
            if new != self.variable:
                self.variable = new
                changed = True
        if (kind is ReferenceKind.FLIGHT_GROUP and self.condition in PROXIMITY_CONDITIONS
                and self.parameter1 >= PROXIMITY_FG_OFFSET):
            new = mapping(self.parameter1 - PROXIMITY_FG_OFFSET)
            if new is None:
                self.parameter1 = 0
                changed = True
            elif new + PROXIMITY_FG_OFFSET != self.parameter1:
                self.parameter1 = new + PROXIMITY_FG_OFFSET
                changed = True
        return changed


# =============================================================================
# Validation
# =============================================================================

def check_target(platform: Platform, variable_type: int, variable: int, label: str):
    """Reject (category, value) pairings outside the category's range."""
    max_type = _LIMITS[platform][1]
    if variable_type > max_type:
        raise FieldOutOfRange(label, "variable_type", variable_type, f"max {max_type}")
    if variable_type in SHIP_TYPE_TYPES and variable > _LIMITS[platform][2]:
        raise FieldOutOfRange(label, "variable", variable, "unknown craft type")
    if platform is Platform.XWA:
        return
    limits = {
        VariableType.SHIP_CLASS: 6,
        VariableType.OBJECT_TYPE: 2,
        VariableType.IFF: 5,
        VariableType.SHIP_ORDERS: 39,
    }
    if platform is not Platform.TIE:
        limits[VariableType.TEAM] = 9
        limits[VariableType.NOT_TEAM] = 9
    limit = limits.get(variable_type)
    if limit is not None and variable > limit:
        raise FieldOutOfRange(label, "variable", variable,
                              f"{VariableType(variable_type).name} max {limit}")


def check_trigger(trigger: Trigger, platform: Platform, label: str = "Trigger") -> Trigger:
    """Validate a decoded trigger in place, applying the platform's soft fixes."""
    max_condition = _LIMITS[platform][0]
    if trigger.condition > max_condition:
        raise FieldOutOfRange(label, "condition", trigger.condition, f"max {max_condition}")
    if platform is Platform.TIE and trigger.variable_type == VariableType.STATUS:
        logger.warning(f"{label}: variable type 0x0A reverted to none")
        trigger.variable_type = 0
        trigger.variable = 0
    check_target(platform, trigger.variable_type, trigger.variable, label)
    fixes = {}
    if platform is Platform.TIE:
        fixes = _TIE_AMOUNT_FIXES
    elif platform.is_xvt_family:
        fixes = _XVT_AMOUNT_FIXES
    if trigger.amount in fixes:
        logger.warning(f"{label}: legacy amount {trigger.amount} -> {fixes[trigger.amount]}")
        trigger.amount = fixes[trigger.amount]
    return trigger


def read_trigger(data: bytes, offset: int, platform: Platform, label: str) -> Trigger:
    size = 6 if platform is Platform.XWA else 4
    return check_trigger(Trigger.parse(data, offset, size), platform, label)
