#!/usr/bin/env python3
"""
xwmission - Inspect, convert and verify X-wing series mission files
===================================================================

Commands:
--------
| Command | Purpose                                                   |
|---------|-----------------------------------------------------------|
| info    | Platform, collection counts and a flight group listing    |
| convert | Convert to another platform, listing fields that were lost |
| check   | Decode and re-encode, comparing against the original bytes |
| dump    | JSON of the decoded model                                 |

Usage:
------
    xwmission info B1M1FW.TIE
    xwmission convert B1M1FW.TIE --to xvt                 # writes B1M1FW_xvt.tie
    xwmission convert 1B6M1.XWI --to tie -o 1B6M1.TIE
    xwmission check 7B2M3.tie
    xwmission dump 7B2M3.tie -o 7B2M3.json --pretty
"""

import argparse
import json
import logging
import os
import sys
from dataclasses import asdict, is_dataclass

from .codec import encode
from .converter import convert_mission
from .errors import XwMissionError
from .loadout import OptLoadout
from .mission import Mission
from .platform import Platform
from .savefile import briefing_path, load_mission, save_mission
from .xwing_codec import encode_xwing_briefing


# =============================================================================
# INFO
# =============================================================================

def describe(mission: Mission) -> str:
    lines = [
        f"Platform:      {mission.platform.name}",
        f"Flight groups: {mission.flight_groups.count}/{mission.flight_groups.limit}",
    ]
    if mission.platform is not Platform.XWING:
        lines.append(f"Messages:      {mission.messages.count}/{mission.messages.limit}")
        lines.append(f"Briefings:     {mission.briefings.count}")
    else:
        pages = len(mission.xwing_briefing.pages) if mission.xwing_briefing else 0
        lines.append(f"Briefing pages: {pages}")
    if mission.teams.count:
        names = ", ".join(team.name for team in mission.teams if team.name)
        lines.append(f"Teams:         {names}")

    lines.append("")
    lines.append(f"{'#':>3}  {'Name':<20} {'Craft':>5} {'IFF':>3} {'Size':>5}")
    for i, fg in enumerate(mission.flight_groups):
        size = f"{fg.number_of_craft}x{fg.number_of_waves}"
        lines.append(f"{i:>3}  {fg.name:<20} {fg.craft_type:>5} {fg.iff:>3} {size:>5}")
    return "\n".join(lines)


def cmd_info(args) -> int:
    mission = load_mission(args.input)
    print(describe(mission))
    return 0


# =============================================================================
# CONVERT
# =============================================================================

def cmd_convert(args) -> int:
    mission = load_mission(args.input)
    target = Platform(args.to)
    result = convert_mission(mission, target)
    output = args.output or result.value.path
    if os.path.abspath(output) == os.path.abspath(args.input):
        print(f"ERROR: refusing to overwrite the input file {args.input}", file=sys.stderr)
        return 1
    save_mission(result.value, output)

    print(f"Converted {mission.platform.name} -> {target.name}")
    print(f"  Output: {output}")
    if result.dropped_fields:
        print(f"  Dropped fields ({len(result.dropped_fields)}):")
        for tag in sorted(result.dropped_fields):
            print(f"    {tag}")
    return 0


# =============================================================================
# CHECK
# =============================================================================

def _first_difference(a: bytes, b: bytes) -> int:
    for i, (x, y) in enumerate(zip(a, b)):
        if x != y:
            return i
    return min(len(a), len(b))


def _compare(label: str, original: bytes, rebuilt: bytes) -> bool:
    if original == rebuilt:
        print(f"  {label}: OK ({len(original)} bytes)")
        return True
    offset = _first_difference(original, rebuilt)
    print(f"  {label}: MISMATCH at 0x{offset:X} "
          f"(original {len(original)} bytes, rebuilt {len(rebuilt)} bytes)")
    return False


def cmd_check(args) -> int:
    mission = load_mission(args.input)
    print(f"Round-trip {args.input} ({mission.platform.name})")
    with open(args.input, 'rb') as f:
        matches = _compare("mission", f.read(), encode(mission))

    if mission.platform is Platform.XWING and mission.xwing_briefing is not None:
        brf = briefing_path(args.input)
        if os.path.exists(brf):
            with open(brf, 'rb') as f:
                matches = _compare("briefing", f.read(), encode_xwing_briefing(mission)) and matches
    return 0 if matches else 1


# =============================================================================
# DUMP
# =============================================================================

def _json_default(value):
    if isinstance(value, OptLoadout):
        return [flag.name for flag in value.specific()]
    if isinstance(value, bytes):
        return value.hex()
    if isinstance(value, Platform):
        return value.name
    raise TypeError(f"Cannot serialize {type(value).__name__}")


def _records(items) -> list:
    return [asdict(item) if is_dataclass(item) else item for item in items]


def mission_to_dict(mission: Mission) -> dict:
    data = {
        'platform': mission.platform.name,
        'header': asdict(mission.header),
        'flight_groups': _records(mission.flight_groups),
        'messages': _records(mission.messages),
        'globals': _records(mission.globals),
        'teams': _records(mission.teams),
        'briefings': _records(mission.briefings),
    }
    if mission.questions is not None:
        data['questions'] = asdict(mission.questions)
    if mission.xwing_briefing is not None:
        data['xwing_briefing'] = asdict(mission.xwing_briefing)
    return data


def cmd_dump(args) -> int:
    mission = load_mission(args.input)
    text = json.dumps(mission_to_dict(mission), indent=2 if args.pretty else None,
                      default=_json_default)
    if args.output:
        with open(args.output, 'w') as f:
            f.write(text)
        print(f"Wrote {args.output}")
    else:
        print(text)
    return 0


# =============================================================================
# MAIN
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='xwmission',
        description='Inspect, convert and verify X-wing series mission files',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  xwmission info B1M1FW.TIE
  xwmission convert B1M1FW.TIE --to xvt
  xwmission check 7B2M3.tie
        """
    )
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    parser.add_argument('--quiet', '-q', action='store_true', help='Only log errors')
    commands = parser.add_subparsers(dest='command', required=True)

    info = commands.add_parser('info', help='Summarize a mission')
    info.add_argument('input', help='Mission file (.xwi or .tie)')
    info.set_defaults(func=cmd_info)

    convert = commands.add_parser('convert', help='Convert to another platform')
    convert.add_argument('input', help='Mission file (.xwi or .tie)')
    convert.add_argument('--to', required=True, choices=[p.value for p in Platform],
                         help='Target platform')
    convert.add_argument('-o', '--output',
                         help='Output file (default: <input>_<platform>.<ext>)')
    convert.set_defaults(func=cmd_convert)

    check = commands.add_parser('check', help='Decode/encode round-trip comparison')
    check.add_argument('input', help='Mission file (.xwi or .tie)')
    check.set_defaults(func=cmd_check)

    dump = commands.add_parser('dump', help='Write the decoded model as JSON')
    dump.add_argument('input', help='Mission file (.xwi or .tie)')
    dump.add_argument('-o', '--output', help='Output JSON file (default: stdout)')
    dump.add_argument('--pretty', action='store_true', help='Indent JSON output')
    dump.set_defaults(func=cmd_dump)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    level = logging.DEBUG if args.verbose else logging.ERROR if args.quiet else logging.WARNING
    logging.basicConfig(level=level, format='%(levelname)s %(name)s: %(message)s')

    try:
        return args.func(args)
    except (XwMissionError, OSError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
