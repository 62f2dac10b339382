import pytest

from xwmission.mission import Mission, new_message
from xwmission.platform import Platform


def build_mission(platform: Platform, flight_groups: int = 1, messages: int = 0) -> Mission:
    """Mission with numbered flight groups ("FG 0", "FG 1", ...) and messages."""
    mission = Mission(platform)
    mission.flight_groups.set_count(flight_groups)
    for i, fg in enumerate(mission.flight_groups):
        fg.name = f"FG {i}"
    for i in range(messages):
        message = new_message(platform)
        message.text = f"Message {i}"
        mission.messages.add(message)
    return mission


@pytest.fixture
def tie_mission():
    return build_mission(Platform.TIE, flight_groups=3, messages=2)


@pytest.fixture
def xvt_mission():
    return build_mission(Platform.XVT, flight_groups=3, messages=2)


@pytest.fixture
def xwa_mission():
    return build_mission(Platform.XWA, flight_groups=3, messages=3)


@pytest.fixture
def xwing_mission():
    return build_mission(Platform.XWING, flight_groups=2)
