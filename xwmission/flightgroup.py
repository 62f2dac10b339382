#!/usr/bin/env python3
"""
Flight Groups
=============

Common flight group shape plus one extension record per platform.

| Part          | XWING | TIE | XVT/BOP | XWA |
|---------------|-------|-----|---------|-----|
| Arr/dep trigs | -     | 3   | 6       | 6   |
| And/Or flags  | -     | 1   | 4       | 4   |
| Orders        | 1*    | 3   | 4       | 16 (4 regions x 4) |
| Goals         | -*    | 4   | 8       | 8   |
| Waypoints     | 15    | 15  | 22      | 4 (+ 8 per order)  |

(*) X-wing keeps its single order, objective and targets in XwingFields.

Order Layout (19 bytes, TIE stops at 18):
----------------------------------------
| Offset | Field     | Offset | Field      |
|--------|-----------|--------|------------|
| 0x00   | Command   | 0x09   | Target4    |
| 0x01   | Throttle  | 0x0A   | T3OrT4     |
| 0x02   | Variable1 | 0x0C   | Target1Type|
| 0x03   | Variable2 | 0x0D   | Target1    |
| 0x04   | Variable3 | 0x0E   | Target2Type|
| 0x06   | Target3Type | 0x0F | Target2    |
| 0x07   | Target4Type | 0x10 | T1OrT2     |
| 0x08   | Target3   | 0x12   | Speed      |
"""

import struct
from dataclasses import dataclass, field
from typing import List, Optional, Union

from .errors import FieldOutOfRange
from .loadout import OptLoadout
from .platform import Platform
from .trigger import Trigger
from .units import COORDINATE_LIMIT, km_to_raw, raw_to_km


# =============================================================================
# Waypoints
# =============================================================================

TIE_WAYPOINTS = ["Start1", "Start2", "Start3", "Start4", "WP1", "WP2", "WP3", "WP4",
                 "WP5", "WP6", "WP7", "WP8", "Rendezvous", "Hyperspace", "Briefing"]
XVT_WAYPOINTS = TIE_WAYPOINTS[:14] + [f"Briefing{i}" for i in range(1, 9)]
XWA_WAYPOINTS = ["Start1", "Start2", "Start3", "Hyperspace"]
XWING_WAYPOINTS = (["Start1", "WP1", "WP2", "WP3", "Start2", "Start3", "Hyperspace"]
                   + [f"Briefing{i}" for i in range(1, 9)])

WAYPOINT_NAMES = {
    Platform.XWING: XWING_WAYPOINTS,
    Platform.TIE: TIE_WAYPOINTS,
    Platform.XVT: XVT_WAYPOINTS,
    Platform.BOP: XVT_WAYPOINTS,
    Platform.XWA: XWA_WAYPOINTS,
}

REGION_COUNT = 4


@dataclass
class Waypoint:
    x: int = 0              # Raw map units, 160 per km
    y: int = 0
    z: int = 0
    enabled: bool = False
    region: int = 0         # XWA only, 0..3

    def __post_init__(self):
        if not 0 <= self.region < REGION_COUNT:
            raise FieldOutOfRange("Waypoint", "region", self.region, "0..3")

    @property
    def x_km(self) -> float:
        return raw_to_km(self.x)

    @x_km.setter
    def x_km(self, value: float):
        self.x = km_to_raw(value)

    @property
    def y_km(self) -> float:
        return raw_to_km(self.y)

    @y_km.setter
    def y_km(self, value: float):
        self.y = km_to_raw(value)

    @property
    def z_km(self) -> float:
        return raw_to_km(self.z)

    @z_km.setter
    def z_km(self, value: float):
        self.z = km_to_raw(value)

    def copy(self) -> 'Waypoint':
        return Waypoint(self.x, self.y, self.z, self.enabled, self.region)


# =============================================================================
# Orders
# =============================================================================

# byte offsets of (type, value) for targets 1..4
ORDER_TARGET_OFFSETS = [(0x0C, 0x0D), (0x0E, 0x0F), (0x06, 0x08), (0x07, 0x09)]

ORDER_SIZE_TIE = 18
ORDER_SIZE = 19


@dataclass
class Order:
    command: int = 0
    throttle: int = 10
    variable1: int = 0
    variable2: int = 0
    variable3: int = 0
    target_types: List[int] = field(default_factory=lambda: [0] * 4)
    targets: List[int] = field(default_factory=lambda: [0] * 4)
    t1_or_t2: bool = True
    t3_or_t4: bool = True
    speed: int = 0                  # XvT / XWA
    designation: str = ""           # XvT 16 chars, XWA custom text 63 chars
    waypoints: List[Waypoint] = field(default_factory=list)        # XWA, 8 per order
    skip_triggers: List[Trigger] = field(default_factory=list)     # XvT order 4, every XWA order
    skip_t1_or_t2: bool = False

    @classmethod
    def parse(cls, data: bytes, offset: int = 0, size: int = ORDER_SIZE) -> 'Order':
        raw = data[offset:offset + size]
        order = cls(command=raw[0], throttle=raw[1], variable1=raw[2],
                    variable2=raw[3], variable3=raw[4])
        for i, (type_offset, value_offset) in enumerate(ORDER_TARGET_OFFSETS):
            order.target_types[i] = raw[type_offset]
            order.targets[i] = raw[value_offset]
        order.t3_or_t4 = raw[0x0A] != 0
        order.t1_or_t2 = raw[0x10] != 0
        if size > 0x12:
            order.speed = raw[0x12]
        return order

    def to_bytes(self, size: int = ORDER_SIZE) -> bytes:
        raw = bytearray(size)
        raw[0] = self.command
        raw[1] = self.throttle
        raw[2] = self.variable1
        raw[3] = self.variable2
        raw[4] = self.variable3
        for i, (type_offset, value_offset) in enumerate(ORDER_TARGET_OFFSETS):
            raw[type_offset] = self.target_types[i] & 0xFF
            raw[value_offset] = self.targets[i] & 0xFF
        raw[0x0A] = int(self.t3_or_t4)
        raw[0x10] = int(self.t1_or_t2)
        if size > 0x12:
            raw[0x12] = self.speed
        return bytes(raw)

    def __str__(self):
        return f"Order(command={self.command}, throttle={self.throttle}, targets={self.targets})"


def new_order(platform: Platform) -> Order:
    order = Order()
    if platform is Platform.XWA:
        order.waypoints = [Waypoint() for _ in range(8)]
        order.skip_triggers = [Trigger(), Trigger()]
    elif platform.is_xvt_family:
        order.skip_triggers = [Trigger(), Trigger()]
    return order


# =============================================================================
# Goals
# =============================================================================

class GoalArgument:
    MUST = 0
    MUST_NOT = 1
    BONUS_MUST = 2
    BONUS_MUST_NOT = 3


TIE_GOAL_NAMES = ["primary", "secondary", "secret", "bonus"]
GOAL_COUNT = 8


@dataclass
class Goal:
    argument: int = GoalArgument.MUST
    condition: int = 10             # FALSE: never satisfied
    amount: int = 0
    points: int = 0                 # Real points, quantized per platform on encode
    enabled: bool = False
    team: int = 0
    parameter: int = 0              # XWA: FG index for proximity conditions
    active_sequence: int = 0        # XWA
    incomplete_text: str = ""
    complete_text: str = ""
    failed_text: str = ""

    @property
    def has_failed_text(self) -> bool:
        """Prevent goals (must not) have no meaningful failed state text."""
        return self.argument in (GoalArgument.MUST, GoalArgument.BONUS_MUST)


# =============================================================================
# Platform extension records
# =============================================================================

@dataclass
class OptionalCraft:
    craft_type: int = 0
    number_of_craft: int = 0
    number_of_waves: int = 0


@dataclass
class XwingFields:
    object_type: int = 0            # Non-zero marks an object group (mines, buoys...)
    arrival_event: int = 0
    arrival_fg: int = -1
    mothership: int = -1
    arrive_via_hyperspace: int = 1
    depart_via_hyperspace: int = 1
    order: int = 0
    objective: int = 0
    target_primary: int = -1
    target_secondary: int = -1
    dock_time_throttle: int = 0
    raw_yaw: int = 0                # 64 = 90 degrees, unbounded for platforms
    raw_pitch: int = 64
    raw_roll: int = 0

    @property
    def is_object(self) -> bool:
        return self.object_type != 0


@dataclass
class TieFields:
    pilot: str = ""


@dataclass
class XvtFields:
    roles: List[str] = field(default_factory=lambda: [""] * 4)
    wave_delay: int = 0
    stop_arriving_when: int = 0
    random_arrival_delay_minutes: int = 0
    random_arrival_delay_seconds: int = 0
    permadeath_enabled: bool = False
    permadeath_id: int = 0
    alternate_mothership: int = 0
    alternate_mothership_used: bool = False
    captured_depart_mothership: int = 0
    captured_depart_via_mothership: bool = False
    prevent_craft_numbering: bool = False
    departure_clock_minutes: int = 0
    departure_clock_seconds: int = 0
    countermeasures: int = 0
    explosion_time: int = 0
    status2: int = 0
    global_unit: int = 0
    handicap: int = 0
    opt_loadout: OptLoadout = field(default_factory=OptLoadout)
    opt_craft_category: int = 0
    opt_craft: List[OptionalCraft] = field(default_factory=lambda: [OptionalCraft() for _ in range(10)])


@dataclass
class XwaFields:
    role: str = ""
    enable_designation1: int = 0xFF
    enable_designation2: int = 0xFF
    designation1: int = 0
    designation2: int = 0
    global_cargo: int = 0           # 0 = none, else global cargo index + 1
    global_special_cargo: int = 0
    global_numbering: bool = False
    countermeasures: int = 0
    explosion_time: int = 0
    status2: int = 0
    global_unit: int = 0
    opt_loadout: OptLoadout = field(default_factory=OptLoadout)
    opt_craft_category: int = 0
    opt_craft: List[OptionalCraft] = field(default_factory=lambda: [OptionalCraft() for _ in range(10)])
    pilot_id: str = ""
    backdrop: int = 0


Extension = Union[XwingFields, TieFields, XvtFields, XwaFields]


# =============================================================================
# Field ranges
# =============================================================================

# Flight group fields stored as one unsigned byte (int16 in X-wing craft groups)
_BYTE_FIELDS = (
    "number_of_craft", "status1", "missile", "beam", "iff", "team", "ai", "markings",
    "radio", "formation", "form_distance", "global_group", "form_leader_dist",
    "player_number", "player_craft", "difficulty", "arrival_delay_minutes",
    "arrival_delay_seconds", "departure_timer_minutes", "departure_timer_seconds",
    "abort_trigger", "arrival_craft1", "arrival_craft2", "departure_craft1", "departure_craft2",
)
ORDER_BYTE_FIELDS = ("command", "throttle", "variable1", "variable2", "variable3", "speed")
GOAL_BYTE_FIELDS = ("argument", "condition", "amount", "team", "parameter", "active_sequence")


def _field_range(platform: Platform):
    if platform is Platform.XWING:
        return -0x8000, 0x7FFF
    return 0, 0xFF


def check_fields(record, names, low: int, high: int, label: str):
    """Raise FieldOutOfRange for the first named attribute outside low..high."""
    for name in names:
        value = getattr(record, name)
        if not low <= value <= high:
            raise FieldOutOfRange(label, name, value, f"{low}..{high}")


def check_waypoints(waypoints: List[Waypoint], platform: Platform, label: str):
    # XvT and XWA store Y negated
    low_y = -COORDINATE_LIMIT if platform.is_xvt_family or platform is Platform.XWA else -0x8000
    for k, wp in enumerate(waypoints):
        for axis, low in (("x", -0x8000), ("y", low_y), ("z", -0x8000)):
            value = getattr(wp, axis)
            if not low <= value <= COORDINATE_LIMIT:
                raise FieldOutOfRange(f"{label} {k}", axis, value, f"{low}..{COORDINATE_LIMIT}")


# =============================================================================
# Flight group
# =============================================================================

@dataclass
class FlightGroup:
    name: str = "New Ship"
    cargo: str = ""
    special_cargo: str = ""
    special_cargo_craft: int = 0    # 0 = none, n = craft n of the group
    rand_spec_cargo: bool = False
    craft_type: int = 1
    number_of_craft: int = 1
    number_of_waves: int = 1
    status1: int = 0
    missile: int = 0
    beam: int = 0
    iff: int = 0
    team: int = 0
    ai: int = 0
    markings: int = 0
    radio: int = 0
    formation: int = 0
    form_distance: int = 0
    global_group: int = 0
    form_leader_dist: int = 0
    player_number: int = 0
    arrive_only_if_human: bool = False
    player_craft: int = 0
    yaw: int = 0                    # Degrees, -180..179
    pitch: int = 0
    roll: int = 0
    difficulty: int = 0
    arr_dep_triggers: List[Trigger] = field(default_factory=list)
    arr_dep_and_or: List[bool] = field(default_factory=list)
    arrival_delay_minutes: int = 0
    arrival_delay_seconds: int = 0
    departure_timer_minutes: int = 0
    departure_timer_seconds: int = 0
    abort_trigger: int = 0
    arrival_craft1: int = 0         # Mothership FG indexes and methods
    arrival_method1: bool = False
    arrival_craft2: int = 0
    arrival_method2: bool = False
    departure_craft1: int = 0
    departure_method1: bool = False
    departure_craft2: int = 0
    departure_method2: bool = False
    orders: List[Order] = field(default_factory=list)
    goals: List[Goal] = field(default_factory=list)
    waypoints: List[Waypoint] = field(default_factory=list)
    extension: Optional[Extension] = None

    def __str__(self):
        return f"{self.name} (craft {self.craft_type}, {self.number_of_craft}x{self.number_of_waves})"

    @property
    def arrival_triggers(self) -> List[Trigger]:
        count = 2 if len(self.arr_dep_triggers) == 3 else 4
        return self.arr_dep_triggers[:count]

    @property
    def departure_triggers(self) -> List[Trigger]:
        count = 2 if len(self.arr_dep_triggers) == 3 else 4
        return self.arr_dep_triggers[count:]

    def set_special_cargo_craft(self, value: int):
        """Assign a special craft; clears the random special cargo option."""
        if value < 0 or value > self.number_of_craft:
            raise FieldOutOfRange("FlightGroup", "special_cargo_craft", value,
                                  f"0..{self.number_of_craft}")
        self.special_cargo_craft = value
        if value:
            self.rand_spec_cargo = False

    def set_rand_spec_cargo(self, value: bool):
        self.rand_spec_cargo = value
        if value:
            self.special_cargo_craft = 0

    def check(self, platform: Platform, label: str = "FlightGroup"):
        """Reject values the platform's record cannot hold."""
        for axis in ("yaw", "pitch", "roll"):
            value = getattr(self, axis)
            if not -180 <= value <= 179:
                raise FieldOutOfRange(label, axis, value, "-180..179")
        low, high = _field_range(platform)
        if not 1 <= self.number_of_waves <= high + 1:
            raise FieldOutOfRange(label, "number_of_waves", self.number_of_waves, f"1..{high + 1}")
        check_fields(self, _BYTE_FIELDS, low, high, label)
        max_craft = platform.profile.craft_type_count - 1
        if not 0 <= self.craft_type <= max_craft:
            raise FieldOutOfRange(label, "craft_type", self.craft_type, f"0..{max_craft}")
        if self.special_cargo_craft > self.number_of_craft:
            raise FieldOutOfRange(label, "special_cargo_craft", self.special_cargo_craft,
                                  f"0..{self.number_of_craft}")
        check_waypoints(self.waypoints, platform, f"{label} waypoint")
        for i, order in enumerate(self.orders):
            check_fields(order, ORDER_BYTE_FIELDS, 0, 0xFF, f"{label} order {i}")
            check_waypoints(order.waypoints, platform, f"{label} order {i} waypoint")
        scale = platform.profile.points
        for i, goal in enumerate(self.goals):
            check_fields(goal, GOAL_BYTE_FIELDS, 0, 0xFF, f"{label} goal {i}")
            if scale is not None:
                scale.check(f"{label} goal {i}", "points", goal.points)


def new_flight_group(platform: Platform) -> FlightGroup:
    """Default flight group with the platform's trigger, order and waypoint tables."""
    fg = FlightGroup()
    if platform is Platform.XWING:
        fg.waypoints = [Waypoint() for _ in XWING_WAYPOINTS]
        fg.waypoints[0].enabled = True
        fg.extension = XwingFields()
        fg.ai = 1
        return fg
    if platform is Platform.TIE:
        fg.arr_dep_triggers = [Trigger() for _ in range(3)]
        fg.arr_dep_and_or = [False]
        fg.goals = [Goal() for _ in TIE_GOAL_NAMES]
        fg.extension = TieFields()
    else:
        fg.arr_dep_triggers = [Trigger() for _ in range(6)]
        fg.arr_dep_and_or = [False] * 4
        fg.goals = [Goal() for _ in range(GOAL_COUNT)]
        fg.extension = XwaFields() if platform is Platform.XWA else XvtFields()
    fg.orders = [new_order(platform) for _ in range(platform.profile.order_count)]
    fg.waypoints = [Waypoint() for _ in WAYPOINT_NAMES[platform]]
    fg.waypoints[0].enabled = True
    fg.ai = 2
    fg.form_distance = 2
    return fg


# =============================================================================
# Disk helpers shared by the codecs
# =============================================================================

def special_craft_from_disk(raw: int, number_of_craft: int, rand: bool = False) -> int:
    """Disk stores craft n as n - 1 and "none" as any value >= the craft count."""
    if rand or raw >= number_of_craft:
        return 0
    return raw + 1


def special_craft_to_disk(fg: FlightGroup) -> int:
    if fg.rand_spec_cargo or fg.special_cargo_craft == 0:
        return fg.number_of_craft & 0xFF
    return fg.special_cargo_craft - 1


def read_waypoints(data: bytes, offset: int, count: int, negate_y: bool) -> List[Waypoint]:
    """Coordinate-major int16 table: all X, then all Y, all Z, all enabled."""
    values = struct.unpack_from(f'<{count * 4}h', data, offset)
    sign = -1 if negate_y else 1
    return [Waypoint(values[k], values[count + k] * sign, values[2 * count + k],
                     values[3 * count + k] != 0)
            for k in range(count)]


def waypoints_to_bytes(waypoints: List[Waypoint], negate_y: bool) -> bytes:
    sign = -1 if negate_y else 1
    values = ([wp.x for wp in waypoints] + [wp.y * sign for wp in waypoints]
              + [wp.z for wp in waypoints] + [int(wp.enabled) for wp in waypoints])
    return struct.pack(f'<{len(values)}h', *values)
