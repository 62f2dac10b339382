#!/usr/bin/env python3
"""
Mission Model
=============

Root aggregate of one decoded mission plus the smaller records it owns.

| Part          | XWING   | TIE      | XVT/BOP  | XWA       |
|---------------|---------|----------|----------|-----------|
| Flight groups | 255     | 48       | 48       | 192       |
| Messages      | -       | 16       | 64       | 64        |
| Msg triggers  | -       | 2        | 4        | 4 + 2 cancel |
| Globals       | -       | 1 x 3 goals, 2 triggers | 10 x 3 goals, 4 triggers | as XvT |
| Teams         | -       | -        | 10       | 10        |
| Briefings     | .brf    | 1        | 8        | 2         |
| Questions     | -       | 10 + 10  | -        | -         |

Structural edits (delete / swap / insert of flight groups and messages)
go through the Mission methods so that every index that points into the
edited collection is rewritten first (see integrity.py).
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Union

from .bounded import FixedCollection, FlightGroupCollection, MessageCollection
from .briefing import Briefing, XwingBriefing, new_briefing, new_xwing_briefing
from .errors import FieldOutOfRange
from .flightgroup import FlightGroup, check_fields, new_flight_group
from .platform import Platform
from .trigger import Trigger

logger = logging.getLogger(__name__)

TEAM_COUNT = 10
GLOBAL_GOAL_COUNT = 3
QUESTION_COUNT = 10

# XvT / XWA global goals: primary, prevent, secondary
GLOBAL_GOAL_NAMES = ["primary", "prevent", "secondary"]
TIE_GLOBAL_GOAL_NAMES = ["primary", "secondary", "bonus"]
GOAL_STATES = ["incomplete", "complete", "failed"]


# =============================================================================
# Messages
# =============================================================================

@dataclass
class Message:
    text: str = ""
    color: int = 0                  # 0 red, 1 green, 2 blue, 3 yellow
    delay_seconds: int = 0
    note: str = ""
    triggers: List[Trigger] = field(default_factory=list)
    and_or: List[bool] = field(default_factory=list)
    sent_to_team: List[bool] = field(default_factory=list)   # XvT / XWA
    voice_id: str = ""              # XWA
    originating_fg: int = 0         # XWA, flight group index

    def __str__(self):
        return self.text or "(empty message)"

    @property
    def cancel_triggers(self) -> List[Trigger]:
        """XWA only: triggers 5 and 6 withdraw a pending message."""
        return self.triggers[4:]


def split_color(text: str):
    """Strip a leading '1'..'3' color digit; returns (color, text)."""
    if text and text[0] in "123":
        return int(text[0]), text[1:]
    return 0, text


def join_color(color: int, text: str) -> str:
    if 1 <= color <= 3:
        return f"{color}{text}"
    return text


def new_message(platform: Platform) -> Message:
    message = Message()
    if platform is Platform.TIE:
        message.triggers = [Trigger(), Trigger()]
        message.and_or = [False]
    elif platform is Platform.XWA:
        message.triggers = [Trigger() for _ in range(6)]
        message.and_or = [False] * 4
        message.sent_to_team = [True] + [False] * (TEAM_COUNT - 1)
    else:
        message.triggers = [Trigger() for _ in range(4)]
        message.and_or = [False] * 3
        message.sent_to_team = [True] + [False] * (TEAM_COUNT - 1)
    return message


# =============================================================================
# Global goals
# =============================================================================

@dataclass
class GlobalGoal:
    triggers: List[Trigger] = field(default_factory=list)
    and_or: List[bool] = field(default_factory=list)
    name: str = ""                  # XvT
    version: int = 0                # XvT
    delay: int = 0                  # XvT
    points: int = 0                 # XvT / XWA
    active_sequence: int = 0        # XWA
    # [trigger][state] text, state order incomplete / complete / failed
    strings: List[List[str]] = field(default_factory=list)


_GLOBAL_GOAL_BYTE_FIELDS = ("version", "delay", "active_sequence")


def new_global_goal(platform: Platform) -> GlobalGoal:
    # Condition FALSE marks an unused global goal trigger
    if platform is Platform.TIE:
        return GlobalGoal(triggers=[Trigger(condition=10) for _ in range(2)], and_or=[False])
    return GlobalGoal(triggers=[Trigger(condition=10) for _ in range(4)], and_or=[False] * 3,
                      strings=[["", "", ""] for _ in range(4)])


@dataclass
class Globals:
    goals: List[GlobalGoal] = field(default_factory=list)


def new_globals(platform: Platform) -> Globals:
    return Globals([new_global_goal(platform) for _ in range(GLOBAL_GOAL_COUNT)])


# =============================================================================
# Teams
# =============================================================================

@dataclass
class Team:
    name: str = ""
    allies: List[int] = field(default_factory=lambda: [0] * TEAM_COUNT)
    eom_messages: List[str] = field(default_factory=lambda: [""] * 6)
    eom_colors: List[int] = field(default_factory=lambda: [0] * 6)
    eom_notes: List[str] = field(default_factory=list)    # XWA, 3
    voice_ids: List[str] = field(default_factory=list)    # XWA, 3


def new_team(platform: Platform, index: int = 0) -> Team:
    team = Team(name=f"Team {index + 1}")
    team.allies[index] = 1
    if platform is Platform.XWA:
        team.eom_notes = ["", "", ""]
        team.voice_ids = ["", "", ""]
    return team


# =============================================================================
# TIE officer questions
# =============================================================================

@dataclass
class PreQuestion:
    question: str = ""
    answer: str = ""


@dataclass
class PostQuestion:
    question: str = ""
    answer: str = ""
    trigger: int = 0
    trigger_type: int = 0


@dataclass
class Questions:
    pre: List[PreQuestion] = field(
        default_factory=lambda: [PreQuestion() for _ in range(QUESTION_COUNT)])
    post: List[PostQuestion] = field(
        default_factory=lambda: [PostQuestion() for _ in range(QUESTION_COUNT)])


# =============================================================================
# Headers
# =============================================================================

@dataclass
class XwingHeader:
    time_limit: int = 0             # Minutes
    end_event: int = 0
    rnd_seed: int = 0
    mission_location: int = 0
    eom_messages: List[str] = field(default_factory=lambda: [""] * 3)


@dataclass
class TieHeader:
    officers_present: int = 0
    captured_on_ejection: bool = False
    eom_messages: List[str] = field(default_factory=lambda: [""] * 6)
    iff_names: List[str] = field(default_factory=lambda: [""] * 4)    # IFF 3..6
    iff_hostile: List[bool] = field(default_factory=lambda: [False] * 4)


@dataclass
class XvtHeader:
    legacy_time_limit_minutes: int = 0
    legacy_time_limit_seconds: int = 0
    win_type: int = 0
    rnd_seed: int = 0
    legacy_rescue: int = 0
    legacy_all_way_shown: bool = False
    iff_names: List[str] = field(default_factory=lambda: [""] * 4)
    mission_type: int = 0
    goals_unimportant: bool = False
    time_limit_minutes: int = 0
    time_limit_seconds: int = 0
    description: str = ""
    success_text: str = ""          # BoP
    fail_text: str = ""             # BoP


@dataclass
class GlobalCargo:
    cargo: str = ""


@dataclass
class XwaHeader:
    iff_names: List[str] = field(default_factory=lambda: [""] * 4)
    regions: List[str] = field(default_factory=lambda: [f"Region {i}" for i in range(1, 5)])
    global_cargo: List[GlobalCargo] = field(default_factory=lambda: [GlobalCargo() for _ in range(16)])
    global_groups: List[str] = field(default_factory=lambda: [""] * 16)
    mission_type: int = 0
    time_limit_minutes: int = 0
    end_when_complete: bool = False
    officer: int = 0
    logo: int = 0
    note: str = ""
    description: str = ""
    success_text: str = ""
    fail_text: str = ""
    description_note: str = ""
    success_note: str = ""
    fail_note: str = ""


Header = Union[XwingHeader, TieHeader, XvtHeader, XwaHeader]


def new_header(platform: Platform) -> Header:
    if platform is Platform.XWING:
        return XwingHeader()
    if platform is Platform.TIE:
        return TieHeader()
    if platform is Platform.XWA:
        return XwaHeader()
    return XvtHeader()


# =============================================================================
# Mission
# =============================================================================

class Mission:
    """One mission of any platform; collections are sized from its profile."""

    def __init__(self, platform: Platform):
        profile = platform.profile
        self.platform = platform
        self.path: Optional[str] = None
        self.header: Header = new_header(platform)
        self.flight_groups: FlightGroupCollection[FlightGroup] = FlightGroupCollection(
            profile.flight_group_limit, lambda: new_flight_group(platform))
        self.messages: MessageCollection[Message] = MessageCollection(
            profile.message_limit, lambda: new_message(platform))
        self.globals: FixedCollection[Globals] = FixedCollection(
            profile.global_count, lambda: new_globals(platform))
        self.teams: FixedCollection[Team] = FixedCollection(
            profile.team_count, lambda: new_team(platform),
            [new_team(platform, i) for i in range(profile.team_count)])
        self.briefings: FixedCollection[Briefing] = FixedCollection(
            0 if platform is Platform.XWING else profile.briefing_count,
            lambda: new_briefing(platform))
        self.questions: Optional[Questions] = Questions() if platform is Platform.TIE else None
        self.xwing_briefing: Optional[XwingBriefing] = (
            new_xwing_briefing() if platform is Platform.XWING else None)

    def __repr__(self):
        return (f"Mission({self.platform.name}, {self.flight_groups.count} flight groups, "
                f"{self.messages.count} messages)")

    def __eq__(self, other) -> bool:
        if not isinstance(other, Mission):
            return NotImplemented
        return (self.platform is other.platform
                and self.header == other.header
                and self.flight_groups == other.flight_groups
                and self.messages == other.messages
                and self.globals == other.globals
                and self.teams == other.teams
                and self.briefings == other.briefings
                and self.questions == other.questions
                and self.xwing_briefing == other.xwing_briefing)

    # -------------------------------------------------------------------------
    # Structural edits
    # -------------------------------------------------------------------------

    def delete_flight_group(self, index: int) -> int:
        from .integrity import delete_flight_group
        return delete_flight_group(self, index)

    def swap_flight_groups(self, a: int, b: int) -> bool:
        from .integrity import swap_flight_groups
        return swap_flight_groups(self, a, b)

    def insert_flight_group(self, index: int, fg: Optional[FlightGroup] = None) -> int:
        from .integrity import insert_flight_group
        return insert_flight_group(self, index, fg)

    def delete_message(self, index: int) -> int:
        from .integrity import delete_message
        return delete_message(self, index)

    def swap_messages(self, a: int, b: int) -> bool:
        from .integrity import swap_messages
        return swap_messages(self, a, b)

    def insert_message(self, index: int, message: Optional[Message] = None) -> int:
        from .integrity import insert_message
        return insert_message(self, index, message)

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def check(self):
        """Validate every flight group, message and goal against the platform limits."""
        for i, fg in enumerate(self.flight_groups):
            fg.check(self.platform, f"FlightGroup {i} ({fg.name})")
        xwa = self.platform is Platform.XWA
        # Colors other than XWA's ride in the text as a '1'..'3' prefix
        max_color = 0xFF if xwa else 3
        for i, message in enumerate(self.messages):
            if not 0 <= message.color <= max_color:
                raise FieldOutOfRange(f"Message {i}", "color", message.color, f"0..{max_color}")
            if xwa:
                check_fields(message, ("originating_fg",), 0, 0xFF, f"Message {i}")
        scale = self.platform.profile.points
        if scale is None or self.platform is Platform.TIE:
            return
        for t, globals_ in enumerate(self.globals):
            for g, goal in enumerate(globals_.goals):
                label = f"Globals {t} goal {g}"
                check_fields(goal, _GLOBAL_GOAL_BYTE_FIELDS, 0, 0xFF, label)
                scale.check(label, "points", goal.points)


def new_mission(platform: Platform) -> Mission:
    mission = Mission(platform)
    logger.debug(f"New {platform.name} mission")
    return mission
