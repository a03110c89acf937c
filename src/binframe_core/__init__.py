"""binframe core - part stream wire format, writer and reader."""
from .errors import (
    BinframeError,
    DataTooLargeError,
    EndOfStream,
    NilSinkError,
    NilSourceError,
    TruncatedStreamError,
    UnknownFlagError,
)
from .parts import Part, PartFlag, require_known_flag
from .protocol import DEFAULT_BUFFER_SIZE, HEADER_LEN, MAX_PART_LENGTH, encode_part
from .reader import PartReader
from .writer import PartWriter

__all__ = [
    "BinframeError",
    "DataTooLargeError",
    "EndOfStream",
    "NilSinkError",
    "NilSourceError",
    "TruncatedStreamError",
    "UnknownFlagError",
    "Part",
    "PartFlag",
    "require_known_flag",
    "DEFAULT_BUFFER_SIZE",
    "HEADER_LEN",
    "MAX_PART_LENGTH",
    "encode_part",
    "PartReader",
    "PartWriter",
]
