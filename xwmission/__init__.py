"""
xwmission - Mission files of the X-wing series
==============================================

Codecs for X-wing (.xwi + .brf), TIE Fighter, X-wing vs. TIE Fighter /
Balance of Power and X-wing Alliance missions, a converter between them
and the reference bookkeeping behind flight group and message edits.
"""

from .codec import decode, encode
from .converter import ConversionResult, convert_mission
from .errors import (
    CollectionEmpty, CollectionFull, ConversionError, FieldOutOfRange, FormatMismatch,
    SaveIoFailure, TruncatedInput, UnmappableValue, WouldTruncate, XwMissionError,
)
from .mission import Mission, new_mission
from .platform import Platform, detect_platform
from .savefile import load_mission, save_mission

__version__ = "0.1.0"
