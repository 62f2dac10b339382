import os

import pytest

from xwmission import savefile
from xwmission.codec import encode
from xwmission.errors import SaveIoFailure
from xwmission.platform import Platform
from xwmission.savefile import backup_path, briefing_path, load_mission, save_mission


def test_backup_path():
    assert backup_path("missions/battle.tie") == "missions/battle_tie.bak"
    assert backup_path("B1M1.XWI") == "B1M1_xwi.bak"


def test_briefing_path_matches_case():
    assert briefing_path("1b6m1.xwi") == "1b6m1.brf"
    assert briefing_path("1B6M1.XWI") == "1B6M1.BRF"


def test_save_then_load(tmp_path, tie_mission):
    path = str(tmp_path / "mission.tie")
    assert save_mission(tie_mission, path) == path
    assert tie_mission.path == path

    loaded = load_mission(path)
    assert loaded == tie_mission
    assert loaded.path == path
    assert not os.path.exists(backup_path(path))


def test_save_without_path(tie_mission):
    with pytest.raises(ValueError):
        save_mission(tie_mission)


def test_overwrite_removes_backup(tmp_path, xvt_mission):
    path = str(tmp_path / "mission.tie")
    save_mission(xvt_mission, path)
    xvt_mission.flight_groups[0].name = "Renamed"
    save_mission(xvt_mission)
    assert load_mission(path).flight_groups[0].name == "Renamed"
    assert sorted(os.listdir(tmp_path)) == ["mission.tie"]


def test_failed_write_restores_original(tmp_path, monkeypatch, tie_mission):
    path = str(tmp_path / "mission.tie")
    save_mission(tie_mission, path)
    with open(path, 'rb') as f:
        original = f.read()

    def broken(target, data):
        with open(target, 'wb') as f:
            f.write(data[:10])
        raise OSError("disk full")

    monkeypatch.setattr(savefile, "_write_payload", broken)
    tie_mission.flight_groups[0].name = "Changed"
    with pytest.raises(SaveIoFailure) as excinfo:
        save_mission(tie_mission, path)

    assert excinfo.value.path == path
    with open(path, 'rb') as f:
        assert f.read() == original
    assert not os.path.exists(backup_path(path))


def test_validation_error_leaves_file(tmp_path, tie_mission):
    path = str(tmp_path / "mission.tie")
    save_mission(tie_mission, path)
    tie_mission.flight_groups[0].yaw = 400
    with pytest.raises(ValueError):
        save_mission(tie_mission, path)
    assert load_mission(path).flight_groups[0].yaw == 0


@pytest.mark.skipif(not hasattr(os, "geteuid") or os.geteuid() == 0,
                    reason="root ignores file permissions")
def test_read_only_target(tmp_path, tie_mission):
    path = tmp_path / "mission.tie"
    path.write_bytes(b"original")
    path.chmod(0o444)
    with pytest.raises(SaveIoFailure):
        save_mission(tie_mission, str(path))
    assert path.read_bytes() == b"original"


def test_xwing_saves_briefing(tmp_path, xwing_mission):
    xwing_mission.xwing_briefing.strings[0] = "Hold the line."
    path = str(tmp_path / "MISSION.XWI")
    save_mission(xwing_mission, path)
    assert os.path.exists(tmp_path / "MISSION.BRF")

    loaded = load_mission(path)
    assert loaded.platform is Platform.XWING
    assert loaded.xwing_briefing.strings[0] == "Hold the line."
    with open(path, 'rb') as f:
        assert f.read() == encode(xwing_mission)


def test_xwing_without_briefing(tmp_path, xwing_mission):
    path = tmp_path / "lonely.xwi"
    path.write_bytes(encode(xwing_mission))
    loaded = load_mission(str(path))
    assert loaded.xwing_briefing.ships == []
    assert loaded.flight_groups.count == 2
