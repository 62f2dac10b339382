#!/usr/bin/env python3
"""
Mission Library Errors
======================

Exception taxonomy shared by the codecs, collections, converter and save path.

| Exception         | Base       | Raised when                                   |
|-------------------|------------|-----------------------------------------------|
| FormatMismatch    | ValueError | Signature at offset 0 is not the expected one |
| TruncatedInput    | ValueError | Stream ends inside a fixed region             |
| FieldOutOfRange   | ValueError | Value breaks a documented field invariant     |
| UnmappableValue   | ValueError | Conversion has no destination representation |
| CollectionFull    | -          | Bounded collection at capacity                |
| CollectionEmpty   | -          | Removal from an empty collection              |
| WouldTruncate     | -          | set_count() would drop items                  |
| SaveIoFailure     | OSError    | Save failed, prior file restored              |
"""


class XwMissionError(Exception):
    """Base class for every error raised by this package."""


# =============================================================================
# Decode / validation
# =============================================================================

class FormatMismatch(XwMissionError, ValueError):
    def __init__(self, expected, actual):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Invalid signature: expected {expected}, got {actual}")


class TruncatedInput(XwMissionError, ValueError):
    def __init__(self, offset: int, needed: int, available: int):
        self.offset = offset
        self.needed = needed
        self.available = available
        super().__init__(
            f"Truncated input at 0x{offset:X}: need {needed} bytes, {available} available")


class FieldOutOfRange(XwMissionError, ValueError):
    """A value violates the invariant of the named entity field."""

    def __init__(self, entity: str, field: str, value, detail: str = ""):
        self.entity = entity
        self.field = field
        self.value = value
        message = f"{entity}.{field} = {value!r} out of range"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


# =============================================================================
# Conversion
# =============================================================================

class ConversionError(XwMissionError, ValueError):
    pass


class UnmappableValue(ConversionError):
    def __init__(self, label: str, field: str, value, target):
        self.label = label
        self.field = field
        self.value = value
        self.target = target
        super().__init__(f"{label}: {field} value {value!r} has no {target} equivalent")


# =============================================================================
# Collections
# =============================================================================

class CollectionFull(XwMissionError):
    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Collection is full ({limit} items)")


class CollectionEmpty(XwMissionError):
    pass


class WouldTruncate(XwMissionError):
    def __init__(self, count: int, requested: int):
        self.count = count
        self.requested = requested
        super().__init__(f"Reducing {count} items to {requested} requires allow_truncate")


# =============================================================================
# Save
# =============================================================================

class SaveIoFailure(XwMissionError, OSError):
    """Raised after a failed save has been rolled back to the previous file."""

    def __init__(self, path: str, cause: BaseException):
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to save {path}: {cause}")
