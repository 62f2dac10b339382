import json
import os

import pytest

from xwmission.cli import describe, main
from xwmission.loadout import Loadout
from xwmission.platform import Platform
from xwmission.savefile import load_mission, save_mission


@pytest.fixture
def tie_file(tmp_path, tie_mission):
    tie_mission.flight_groups[0].craft_type = 10
    return save_mission(tie_mission, str(tmp_path / "battle.tie"))


def test_info(tie_file, capsys):
    assert main(["info", tie_file]) == 0
    out = capsys.readouterr().out
    assert "Platform:      TIE" in out
    assert "Flight groups: 3/48" in out
    assert "FG 2" in out


def test_describe_xwing(xwing_mission):
    text = describe(xwing_mission)
    assert "Briefing pages: 1" in text
    assert "Messages" not in text


def test_convert_default_output(tie_file, tmp_path, capsys):
    assert main(["convert", tie_file, "--to", "xvt"]) == 0
    output = str(tmp_path / "battle_xvt.tie")
    assert os.path.exists(output)
    converted = load_mission(output)
    assert converted.platform is Platform.XVT
    assert converted.flight_groups[0].craft_type == 89
    assert "Converted TIE -> XVT" in capsys.readouterr().out


def test_convert_lists_dropped_fields(tmp_path, tie_mission, capsys):
    source = save_mission(tie_mission, str(tmp_path / "plain.tie"))
    output = str(tmp_path / "classic.xwi")
    assert main(["convert", source, "--to", "xwing", "-o", output]) == 0
    out = capsys.readouterr().out
    assert "Dropped fields" in out
    assert "    messages" in out
    assert os.path.exists(tmp_path / "classic.brf")


def test_convert_refuses_to_overwrite_input(tie_file, capsys):
    assert main(["convert", tie_file, "--to", "xvt", "-o", tie_file]) == 1
    assert "refusing" in capsys.readouterr().err


def test_convert_unmappable(tmp_path, xvt_mission, capsys):
    xvt_mission.flight_groups[0].craft_type = 10
    path = save_mission(xvt_mission, str(tmp_path / "xvt.tie"))
    assert main(["convert", path, "--to", "tie"]) == 1
    assert "ERROR" in capsys.readouterr().err


def test_check(tie_file, capsys):
    assert main(["check", tie_file]) == 0
    assert "mission: OK" in capsys.readouterr().out


def test_check_reports_mismatch(tie_file, capsys):
    with open(tie_file, 'ab') as f:
        f.write(b'\x00\x00')
    assert main(["check", tie_file]) == 1
    assert "MISMATCH" in capsys.readouterr().out


def test_check_xwing_pair(tmp_path, xwing_mission, capsys):
    path = save_mission(xwing_mission, str(tmp_path / "m.xwi"))
    assert main(["check", path]) == 0
    out = capsys.readouterr().out
    assert "mission: OK" in out
    assert "briefing: OK" in out


def test_dump_stdout(tie_file, capsys):
    assert main(["dump", tie_file]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["platform"] == "TIE"
    assert data["flight_groups"][1]["name"] == "FG 1"
    assert "questions" in data


def test_dump_file(tmp_path, xwa_mission):
    xwa_mission.flight_groups[0].extension.opt_loadout.set(Loadout.MISSILE, True)
    path = save_mission(xwa_mission, str(tmp_path / "xwa.tie"))
    output = str(tmp_path / "xwa.json")
    assert main(["dump", path, "-o", output, "--pretty"]) == 0
    with open(output) as f:
        data = json.load(f)
    assert data["platform"] == "XWA"
    assert len(data["messages"]) == 3
    assert data["flight_groups"][0]["extension"]["opt_loadout"] == ["MISSILE"]
    assert data["header"]["regions"][0] == "Region 1"


def test_missing_file(tmp_path, capsys):
    assert main(["info", str(tmp_path / "absent.tie")]) == 1
    assert "ERROR" in capsys.readouterr().err
