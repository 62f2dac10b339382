#!/usr/bin/env python3
"""
Mission Files
=============

Loading and saving missions on disk.

Save discipline (one file at a time):
------------------------------------
| Step | Action                                                   |
|------|----------------------------------------------------------|
| 1    | Encode to bytes; validation errors abort before any I/O  |
| 2    | Refuse a read-only target                                |
| 3    | Copy the existing file to the sibling backup             |
| 4    | Delete and rewrite the target                            |
| 5a   | Success: remove the backup                               |
| 5b   | Failure: restore the backup, remove it, raise SaveIoFailure |

Backup names replace the extension: mission.tie -> mission_tie.bak,
mission.xwi -> mission_xwi.bak, mission.brf -> mission_brf.bak.

X-wing missions are two files: the .xwi and a companion .brf with the same
base name. They load together and save as two separate exchanges.
"""

import logging
import os
import shutil
from typing import Optional

from .codec import decode, encode
from .errors import SaveIoFailure
from .mission import Mission
from .platform import Platform
from .xwing_codec import encode_xwing_briefing

logger = logging.getLogger(__name__)


def backup_path(path: str) -> str:
    base, ext = os.path.splitext(path)
    return f"{base}_{ext.lstrip('.').lower()}.bak"


def briefing_path(path: str) -> str:
    """Companion .brf path, matching the case of the .xwi extension."""
    base, ext = os.path.splitext(path)
    upper = ext[1:2].isupper() if len(ext) > 1 else path[-1:].isupper()
    return base + ('.BRF' if upper else '.brf')


def _find_briefing(path: str) -> Optional[str]:
    base, _ = os.path.splitext(path)
    for candidate in (briefing_path(path), base + '.brf', base + '.BRF'):
        if os.path.exists(candidate):
            return candidate
    return None


# =============================================================================
# Load
# =============================================================================

def load_mission(path: str) -> Mission:
    with open(path, 'rb') as f:
        data = f.read()
    briefing = None
    brf = None
    if path.lower().endswith('.xwi'):
        brf = _find_briefing(path)
        if brf:
            with open(brf, 'rb') as f:
                briefing = f.read()
    mission = decode(data, briefing)
    mission.path = path
    logger.info(f"Loaded {mission.platform.name} mission {path}"
                + (f" with briefing {brf}" if brf else ""))
    return mission


# =============================================================================
# Save
# =============================================================================

def _write_payload(path: str, data: bytes):
    with open(path, 'wb') as f:
        f.write(data)


def safe_write(path: str, data: bytes):
    """Replace path with data, restoring the previous file if the write fails."""
    if os.path.exists(path) and not os.access(path, os.W_OK):
        raise SaveIoFailure(path, PermissionError(f"Cannot save, {path} is read-only"))

    backup = backup_path(path)
    has_backup = False
    if os.path.exists(path) and os.path.normcase(path) != os.path.normcase(backup):
        if os.path.exists(backup):
            os.remove(backup)
        shutil.copyfile(path, backup)
        has_backup = True
        logger.info(f"Backed up {path} to {backup}")

    try:
        if os.path.exists(path):
            os.remove(path)
        _write_payload(path, data)
    except OSError as e:
        if has_backup:
            if os.path.exists(path):
                os.remove(path)
            shutil.copyfile(backup, path)
            os.remove(backup)
            logger.error(f"Save of {path} failed, restored previous file: {e}")
        else:
            logger.error(f"Save of {path} failed: {e}")
        raise SaveIoFailure(path, e) from e

    if has_backup:
        os.remove(backup)
    logger.info(f"Wrote {path} ({len(data)} bytes)")


def save_mission(mission: Mission, path: Optional[str] = None) -> str:
    """Encode and write the mission; returns the path written."""
    path = path or mission.path
    if not path:
        raise ValueError("No path given and the mission has never been saved")
    payload = encode(mission)
    briefing = None
    if mission.platform is Platform.XWING and mission.xwing_briefing is not None:
        briefing = encode_xwing_briefing(mission)

    safe_write(path, payload)
    if briefing is not None:
        safe_write(briefing_path(path), briefing)
    mission.path = path
    return path
