"""Part data model."""
from __future__ import annotations

from enum import IntEnum
from typing import NamedTuple

from .errors import UnknownFlagError


class PartFlag(IntEnum):
    BINARY = 1
    METADATA = 2
    HEADER = 3


class Part(NamedTuple):
    flag: int
    payload: bytes

    @property
    def length(self) -> int:
        return len(self.payload)


def as_flag(value: int) -> int:
    """Return the PartFlag member for known tags, the plain int otherwise."""
    try:
        return PartFlag(value)
    except ValueError:
        return value


def flag_name(value: int) -> str:
    flag = as_flag(value)
    if isinstance(flag, PartFlag):
        return flag.name.lower()
    return f"unknown:{int(value)}"


def parse_flag(text: str) -> int:
    """Parse a flag given by name (`header`) or by number (`3`, `0x03`)."""
    try:
        return PartFlag[text.strip().upper()]
    except KeyError:
        pass
    value = int(text, 0)
    if not 0 <= value <= 0xFF:
        raise ValueError(f"part flag {value} does not fit in one byte")
    return as_flag(value)


def require_known_flag(flag: int) -> PartFlag:
    """Strict validation layered on top of the codec, which passes unknown tags through."""
    try:
        return PartFlag(flag)
    except ValueError:
        raise UnknownFlagError(flag) from None
