"""Part Reader: rebuilds parts from a caller-owned source through an internal buffer."""
from __future__ import annotations

from typing import Any, Iterator

from .errors import DataTooLargeError, EndOfStream, NilSourceError, TruncatedStreamError
from .parts import Part, as_flag
from .protocol import DEFAULT_BUFFER_SIZE, HEADER_LEN, MAX_PART_LENGTH, unpack_header


class PartReader:
    """Deserialize parts one at a time from an attached source.

    The source is anything with ``read(n)`` returning at most ``n`` bytes and
    ``b""`` at end of stream. Short reads are fine; reads block until data or
    end of stream. The source is never closed here.

    Per part: ExpectType -> ExpectLength -> ExpectPayload -> Complete.
    End of stream before the type tag is a clean end (EndOfStream). End of
    stream anywhere after it is a TruncatedStreamError.
    """

    def __init__(self, buffer_size: int | None = None, max_part_size: int | None = None):
        self.buffer_size = buffer_size
        if max_part_size is not None and max_part_size < 0:
            raise ValueError(f"max part size must not be negative, got {max_part_size}")
        self.max_part_size = MAX_PART_LENGTH if max_part_size is None else int(max_part_size)
        self._source: Any = None
        self._buf = bytearray()
        self._pos = 0
        self._consumed = 0

    @property
    def buffer_size(self) -> int:
        return self._buffer_size

    @buffer_size.setter
    def buffer_size(self, size: int | None) -> None:
        if size is None or size == 0:
            size = DEFAULT_BUFFER_SIZE
        if size < 0:
            raise ValueError(f"buffer size must be positive, got {size}")
        self._buffer_size = int(size)

    @property
    def attached(self) -> bool:
        return self._source is not None

    @property
    def buffered(self) -> int:
        return len(self._buf) - self._pos

    @property
    def offset(self) -> int:
        """Bytes consumed from the current source since attach."""
        return self._consumed

    def attach(self, source: Any, buffer_size: int | None = None) -> None:
        if buffer_size is not None:
            self.buffer_size = buffer_size
        self._source = source
        self._buf = bytearray()
        self._pos = 0
        self._consumed = 0

    def read_part(self) -> Part:
        if self._source is None:
            raise NilSourceError()

        start = self._consumed

        # ExpectType
        tag = self._read_exact(1)
        if not tag:
            raise EndOfStream()

        # ExpectLength
        rest = self._read_exact(HEADER_LEN - 1)
        if len(rest) < HEADER_LEN - 1:
            raise TruncatedStreamError("length", HEADER_LEN - 1, len(rest), offset=start)
        flag, length = unpack_header(tag + rest)

        # Never trips with the default cap; a 32-bit field cannot exceed it.
        if length > self.max_part_size:
            raise DataTooLargeError(length, self.max_part_size)

        # ExpectPayload
        payload = self._read_exact(length)
        if len(payload) < length:
            raise TruncatedStreamError("payload", length, len(payload), offset=start)

        return Part(as_flag(flag), payload)

    def __iter__(self) -> Iterator[Part]:
        while True:
            try:
                part = self.read_part()
            except EndOfStream:
                return
            yield part

    def _read_exact(self, n: int) -> bytes:
        """Read up to n bytes, stopping early only at end of stream."""
        if n == 0:
            return b""

        chunks: list[bytes] = []
        need = n
        while need:
            if self._pos < len(self._buf):
                take = min(need, len(self._buf) - self._pos)
                chunks.append(bytes(self._buf[self._pos:self._pos + take]))
                self._pos += take
                need -= take
                continue

            # Buffer drained. Large remainders bypass it.
            if need >= self._buffer_size:
                data = self._source.read(need)
                if not data:
                    break
                chunks.append(bytes(data))
                need -= len(data)
                continue

            if not self._fill():
                break

        out = b"".join(chunks)
        self._consumed += len(out)
        return out

    def _fill(self) -> bool:
        data = self._source.read(self._buffer_size)
        if not data:
            return False
        self._buf = bytearray(data)
        self._pos = 0
        return True
