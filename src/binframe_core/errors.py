"""binframe error taxonomy.

I/O failures from the underlying sink or source are never wrapped in these;
they propagate as whatever the sink or source raised.
"""
from __future__ import annotations


class BinframeError(Exception):
    """Base class for codec errors."""


class NilSinkError(BinframeError):
    def __init__(self) -> None:
        super().__init__("binary writer is nil: attach a sink first")


class NilSourceError(BinframeError):
    def __init__(self) -> None:
        super().__init__("binary reader is nil: attach a source first")


class DataTooLargeError(BinframeError, ValueError):
    def __init__(self, length: int, limit: int) -> None:
        super().__init__(f"binary data too large: {length} bytes exceeds limit {limit}")
        self.length = length
        self.limit = limit


class EndOfStream(BinframeError, EOFError):
    """Clean end of stream at a part boundary. Not a failure."""

    def __init__(self) -> None:
        super().__init__("end of part stream")


class TruncatedStreamError(BinframeError):
    """Stream ended inside a part. Not an EOFError, unlike EndOfStream."""

    def __init__(self, stage: str, expected: int, received: int, offset: int | None = None) -> None:
        where = f" at offset {offset}" if offset is not None else ""
        super().__init__(
            f"truncated part{where}: expected {expected} {stage} bytes, got {received}"
        )
        self.stage = stage
        self.expected = expected
        self.received = received
        self.offset = offset


class UnknownFlagError(BinframeError, ValueError):
    def __init__(self, flag: int) -> None:
        super().__init__(f"unknown part flag {flag}")
        self.flag = flag
