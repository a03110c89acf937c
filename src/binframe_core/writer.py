"""Part Writer: frames parts into a caller-owned sink through an internal buffer."""
from __future__ import annotations

from typing import Any, Iterable

from .errors import DataTooLargeError, NilSinkError
from .protocol import DEFAULT_BUFFER_SIZE, MAX_PART_LENGTH, pack_header


def _resolve_buffer_size(size: int | None) -> int:
    if size is None or size == 0:
        return DEFAULT_BUFFER_SIZE
    if size < 0:
        raise ValueError(f"buffer size must be positive, got {size}")
    return int(size)


class PartWriter:
    """Serialize parts into an attached sink, in call order.

    - The sink is anything with ``write(bytes)``. It is never closed here.
    - Bytes sit in the internal buffer until it fills or ``flush()`` is called.
    - Nothing is flushed implicitly: not on re-attach, not on garbage collection.
    - Not thread-safe.
    """

    def __init__(self, buffer_size: int | None = None):
        self._buffer_size = _resolve_buffer_size(buffer_size)
        self._sink: Any = None
        self._buf = bytearray()

    @property
    def buffer_size(self) -> int:
        return self._buffer_size

    @buffer_size.setter
    def buffer_size(self, size: int | None) -> None:
        self._buffer_size = _resolve_buffer_size(size)

    @property
    def attached(self) -> bool:
        return self._sink is not None

    @property
    def buffered(self) -> int:
        return len(self._buf)

    def attach(self, sink: Any, buffer_size: int | None = None) -> None:
        # Unflushed bytes from a previous sink are dropped; flush before re-attaching.
        if buffer_size is not None:
            self.buffer_size = buffer_size
        self._sink = sink
        self._buf = bytearray()

    def write_part(self, flag: int, payload: bytes | bytearray | memoryview) -> None:
        if self._sink is None:
            raise NilSinkError()

        view = memoryview(payload).cast("B")
        if view.nbytes > MAX_PART_LENGTH:
            raise DataTooLargeError(view.nbytes, MAX_PART_LENGTH)

        header = pack_header(int(flag), view.nbytes)
        self._write(header)
        self._write(view)

    def write_parts(self, parts: Iterable[tuple[int, bytes]]) -> None:
        for flag, payload in parts:
            self.write_part(flag, payload)

    def flush(self) -> None:
        if self._sink is None:
            raise NilSinkError()
        self._flush_buffer()
        sink_flush = getattr(self._sink, "flush", None)
        if callable(sink_flush):
            sink_flush()

    def _write(self, data: bytes | memoryview) -> None:
        view = memoryview(data)
        while len(view) > self._buffer_size - len(self._buf):
            if not self._buf:
                # Large write, empty buffer: go straight to the sink.
                self._write_all(view)
                return
            room = self._buffer_size - len(self._buf)
            self._buf += view[:room]
            view = view[room:]
            self._flush_buffer()
        self._buf += view

    def _flush_buffer(self) -> None:
        if not self._buf:
            return
        pending = memoryview(bytes(self._buf))
        sent = 0
        try:
            while sent < len(pending):
                sent += self._write_some(pending[sent:])
        finally:
            # Whatever the sink did not accept stays buffered.
            del self._buf[:sent]

    def _write_all(self, view: memoryview) -> None:
        done = 0
        while done < len(view):
            done += self._write_some(view[done:])

    def _write_some(self, view: memoryview) -> int:
        n = self._sink.write(view)
        if n is None:
            # Buffered sinks may return None once everything is consumed.
            return len(view)
        if n == 0:
            raise OSError(f"short write: sink accepted 0 of {len(view)} bytes")
        return n
