#!/usr/bin/env python3
"""
Optional Loadout
================

Per flight group bitset of weapons the player may pick (XvT, BoP, XWA).

Flags:
-----
| Index | Flag           | Index | Flag         | Index | Flag            |
|-------|----------------|-------|--------------|-------|-----------------|
| 0     | NoWarheads     | 9     | NoBeam       | 14    | NoCountermeasures |
| 1     | SpaceBomb      | 10    | TractorBeam  | 15    | Chaff           |
| 2     | HeavyRocket    | 11    | JammingBeam  | 16    | Flare           |
| 3     | Missile        | 12    | DecoyBeam    | 17    | ClusterMine     |
| 4     | Torpedo        | 13    | EnergyBeam   |       |                 |
| 5     | AdvMissile     |       |              |       |                 |
| 6     | AdvTorpedo     |       |              |       |                 |
| 7     | MagPulse       |       |              |       |                 |
| 8     | IonPulse       |       |              |       |                 |

Within each family the "No" flag is set exactly when no specific flag is.
It cannot be cleared directly; setting a specific flag clears it.

Disk Layout:
-----------
| Block           | Size | Content                              |
|-----------------|------|--------------------------------------|
| Warheads        | 8    | ids 1..8 of set flags, zero padded   |
| Beams           | 4+2  | ids 1..4, then 2 reserved bytes      |
| Countermeasures | 3+1  | ids 1..3, then 1 reserved byte       |
"""

from enum import IntEnum
from typing import List


class Loadout(IntEnum):
    NO_WARHEADS = 0
    SPACE_BOMB = 1
    HEAVY_ROCKET = 2
    MISSILE = 3
    TORPEDO = 4
    ADV_MISSILE = 5
    ADV_TORPEDO = 6
    MAG_PULSE = 7
    ION_PULSE = 8
    NO_BEAM = 9
    TRACTOR_BEAM = 10
    JAMMING_BEAM = 11
    DECOY_BEAM = 12
    ENERGY_BEAM = 13
    NO_COUNTERMEASURES = 14
    CHAFF = 15
    FLARE = 16
    CLUSTER_MINE = 17


# (none flag, first specific, last specific, disk block size, reserved bytes)
FAMILIES = [
    (0, 1, 8, 8, 0),
    (9, 10, 13, 4, 2),
    (14, 15, 17, 3, 1),
]

FLAG_COUNT = 18
DISK_SIZE = sum(size + reserved for _, _, _, size, reserved in FAMILIES)


def _family(index: int):
    for family in FAMILIES:
        if family[0] <= index <= family[2]:
            return family
    raise IndexError(f"Loadout index {index} outside 0..{FLAG_COUNT - 1}")


class OptLoadout:
    """Opaque loadout bitset; set() is the only mutator."""

    def __init__(self):
        self._flags = [False] * FLAG_COUNT
        for none_flag, _, _, _, _ in FAMILIES:
            self._flags[none_flag] = True

    def __getitem__(self, index: int) -> bool:
        return self._flags[int(index)]

    def __eq__(self, other) -> bool:
        if isinstance(other, OptLoadout):
            return self._flags == other._flags
        return NotImplemented

    def __repr__(self):
        names = [Loadout(i).name for i, flag in enumerate(self._flags) if flag]
        return f"OptLoadout({', '.join(names)})"

    def set(self, index: int, value: bool):
        index = int(index)
        none_flag, first, last, _, _ = _family(index)
        if index == none_flag:
            if not value:
                return
            for i in range(first, last + 1):
                self._flags[i] = False
            self._flags[none_flag] = True
            return
        self._flags[index] = value
        if value:
            self._flags[none_flag] = False
        elif not any(self._flags[first:last + 1]):
            self._flags[none_flag] = True

    def specific(self) -> List[Loadout]:
        none_flags = {family[0] for family in FAMILIES}
        return [Loadout(i) for i, flag in enumerate(self._flags) if flag and i not in none_flags]

    def copy(self) -> 'OptLoadout':
        clone = OptLoadout()
        clone._flags = list(self._flags)
        return clone

    # -------------------------------------------------------------------------
    # Disk form
    # -------------------------------------------------------------------------

    @classmethod
    def parse(cls, data: bytes, offset: int = 0) -> 'OptLoadout':
        loadout = cls()
        pos = offset
        for none_flag, first, last, size, reserved in FAMILIES:
            for raw in data[pos:pos + size]:
                if 0 < raw <= last - none_flag:
                    loadout.set(none_flag + raw, True)
            pos += size + reserved
        return loadout

    def to_bytes(self) -> bytes:
        out = bytearray()
        for none_flag, first, last, size, reserved in FAMILIES:
            ids = [i - none_flag for i in range(first, last + 1) if self._flags[i]]
            out += bytes(ids) + b'\x00' * (size - len(ids) + reserved)
        return bytes(out)
