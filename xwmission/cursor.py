#!/usr/bin/env python3
"""
Binary Cursor
=============

Little-endian reader and writer used by every mission codec.

Reads never run past the end of the buffer: any short read raises
TruncatedInput with the offset and the missing byte count. Writes address
the output by absolute position, growing the buffer with zeros so that
reserved gaps between records stay zero-filled.

Strings:
-------
| Kind          | Layout                                   |
|---------------|------------------------------------------|
| C string      | fixed-width buffer, trimmed at first 0   |
| Prefixed      | int16 length, then that many bytes       |
"""

import struct
from typing import List

from .errors import TruncatedInput

DEFAULT_ENCODING = 'cp1252'


class MissionReader:
    """Forward cursor over an immutable byte buffer."""

    def __init__(self, data: bytes, encoding: str = DEFAULT_ENCODING):
        self.data = bytes(data)
        self.position = 0
        self.encoding = encoding

    def __len__(self):
        return len(self.data)

    @property
    def remaining(self) -> int:
        return len(self.data) - self.position

    def _require(self, size: int, offset: int = None):
        if offset is None:
            offset = self.position
        if size < 0 or offset < 0 or offset + size > len(self.data):
            raise TruncatedInput(offset, size, max(0, len(self.data) - offset))

    # -------------------------------------------------------------------------
    # Positioning
    # -------------------------------------------------------------------------

    def seek_absolute(self, offset: int):
        if offset < 0 or offset > len(self.data):
            raise TruncatedInput(offset, 0, len(self.data) - offset if offset >= 0 else 0)
        self.position = offset

    def skip(self, count: int):
        self._require(count)
        self.position += count

    # -------------------------------------------------------------------------
    # Raw reads
    # -------------------------------------------------------------------------

    def read_fixed(self, size: int) -> bytes:
        self._require(size)
        chunk = self.data[self.position:self.position + size]
        self.position += size
        return chunk

    def peek_fixed(self, size: int) -> bytes:
        self._require(size)
        return self.data[self.position:self.position + size]

    def read_u8(self) -> int:
        return self.read_fixed(1)[0]

    def read_s8(self) -> int:
        return struct.unpack('<b', self.read_fixed(1))[0]

    def read_bool(self) -> bool:
        return self.read_fixed(1)[0] != 0

    def read_i16(self) -> int:
        return struct.unpack('<h', self.read_fixed(2))[0]

    def read_u16(self) -> int:
        return struct.unpack('<H', self.read_fixed(2))[0]

    def read_i32(self) -> int:
        return struct.unpack('<i', self.read_fixed(4))[0]

    def read_i16_array(self, count: int) -> List[int]:
        return list(struct.unpack(f'<{count}h', self.read_fixed(count * 2)))

    # -------------------------------------------------------------------------
    # Strings
    # -------------------------------------------------------------------------

    def read_cstring(self, width: int) -> str:
        """Read a fixed-width buffer and trim it at the first terminator."""
        raw = self.read_fixed(width)
        end = raw.find(b'\x00')
        if end >= 0:
            raw = raw[:end]
        return raw.decode(self.encoding, errors='replace')

    def read_prefixed_string(self) -> str:
        length = self.read_i16()
        if length <= 0:
            return ""
        return self.read_fixed(length).decode(self.encoding, errors='replace')


class MissionWriter:
    """Absolute-position writer over a growable, zero-filled buffer."""

    def __init__(self, size: int = 0, encoding: str = DEFAULT_ENCODING):
        self.buffer = bytearray(size)
        self.position = 0
        self.encoding = encoding

    def getvalue(self) -> bytes:
        return bytes(self.buffer)

    def _ensure(self, end: int):
        if end > len(self.buffer):
            self.buffer.extend(b'\x00' * (end - len(self.buffer)))

    def seek_absolute(self, offset: int):
        if offset < 0:
            raise ValueError(f"Negative write offset: {offset}")
        self._ensure(offset)
        self.position = offset

    def skip(self, count: int):
        self.seek_absolute(self.position + count)

    def write_bytes(self, data: bytes):
        end = self.position + len(data)
        self._ensure(end)
        self.buffer[self.position:end] = data
        self.position = end

    def write_u8(self, value: int):
        self.write_bytes(struct.pack('<B', value & 0xFF))

    def write_s8(self, value: int):
        self.write_bytes(struct.pack('<b', value))

    def write_bool(self, value: bool):
        self.write_u8(1 if value else 0)

    def write_i16(self, value: int):
        self.write_bytes(struct.pack('<h', value))

    def write_u16(self, value: int):
        self.write_bytes(struct.pack('<H', value & 0xFFFF))

    def write_i32(self, value: int):
        self.write_bytes(struct.pack('<i', value))

    def write_i16_array(self, values):
        self.write_bytes(struct.pack(f'<{len(values)}h', *values))

    def encode_text(self, text: str) -> bytes:
        return text.encode(self.encoding, errors='replace')

    def write_cstring(self, text: str, width: int):
        """Write text into a fixed-width buffer, keeping room for the terminator."""
        raw = self.encode_text(text)[:width - 1]
        self.write_bytes(raw + b'\x00' * (width - len(raw)))

    def write_prefixed_string(self, text: str):
        raw = self.encode_text(text)
        self.write_i16(len(raw))
        self.write_bytes(raw)
