"""binframe wire format constants.

Single source of truth for the part header layout and default sizes.
Keep this file stable. Writer and Reader must remain synchronized.
"""
from __future__ import annotations

import struct

from .errors import DataTooLargeError

# Header: [Flag(1) | Length(4)] = 5 bytes, little-endian
HEADER_FMT = "<BI"
HEADER_LEN = 5

MAX_FLAG = 0xFF
MAX_PART_LENGTH = 0xFFFFFFFF  # 2**32 - 1

# Buffer sizing
DEFAULT_BUFFER_SIZE = 1 << 20  # 1 MiB

# Default safety bound for the inspection tools
DEFAULT_MAX_SCAN_PART_SIZE = 256 * 1024 * 1024  # 256 MiB


def pack_header(flag: int, length: int) -> bytes:
    """Pack a part header. Nothing is emitted for out-of-range values."""
    if not 0 <= flag <= MAX_FLAG:
        raise ValueError(f"part flag {flag} does not fit in one byte")
    if length > MAX_PART_LENGTH:
        raise DataTooLargeError(length, MAX_PART_LENGTH)
    return struct.pack(HEADER_FMT, flag, length)


def unpack_header(header: bytes) -> tuple[int, int]:
    flag, length = struct.unpack(HEADER_FMT, header)
    return flag, length


def encode_part(flag: int, payload: bytes) -> bytes:
    """Serialize one part: tag, little-endian length, payload."""
    return pack_header(flag, len(payload)) + bytes(payload)
