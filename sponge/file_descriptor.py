"""Reference-counted handles to kernel file descriptors."""

from __future__ import annotations

import os
import sys
from collections import deque
from typing import Union

from .buffer import Buffer, BufferList, BufferViewList
from .util import system_call

_MAX_READ = 1024 * 1024

WriteData = Union[bytes, bytearray, memoryview, str, Buffer, BufferList, BufferViewList]


class _FDWrapper:
    """The shared state behind one kernel file descriptor."""

    __slots__ = ("fd", "eof", "closed", "read_count", "write_count")

    def __init__(self, fd: int) -> None:
        if fd < 0:
            raise ValueError(f"invalid fd number:{fd}")
        self.fd = fd
        self.eof = False
        self.closed = False
        self.read_count = 0
        self.write_count = 0

    def close(self) -> None:
        system_call("close", lambda: os.close(self.fd))
        self.eof = self.closed = True

    def __del__(self) -> None:
        if getattr(self, "closed", True):
            return
        try:
            self.close()
        except OSError as exc:
            if sys.stderr is not None:
                print(f"Exception destructing FDWrapper: {exc}", file=sys.stderr)


def _as_views(data: WriteData) -> deque[memoryview]:
    if isinstance(data, str):
        data = data.encode("utf-8")
    source = data if isinstance(data, BufferViewList) else BufferViewList(data)
    return deque(view for view in source if len(view))


def _drop_prefix(views: deque[memoryview], n: int) -> None:
    while n > 0:
        front = views[0]
        if n < len(front):
            views[0] = front[n:]
            n = 0
        else:
            n -= len(front)
            views.popleft()


class FileDescriptor:
    """A handle to a file descriptor that tracks EOF, closure and read/write counts.

    Handles made with :meth:`duplicate` share that state; the descriptor is
    closed when the last handle is garbage collected, unless closed earlier.
    """

    def __init__(self, fd: int) -> None:
        self._wrapper = _FDWrapper(fd)

    def _register_read(self) -> None:
        self._wrapper.read_count += 1

    def _register_write(self) -> None:
        self._wrapper.write_count += 1

    def read(self, limit: int | None = None) -> bytes:
        """Read up to ``limit`` bytes (at most 1 MiB per call); fewer may be returned."""
        if limit is not None and limit < 0:
            raise ValueError("limit must not be negative")
        size = _MAX_READ if limit is None else min(_MAX_READ, limit)
        data = system_call("read", lambda: os.read(self.fd_num(), size))
        if size > 0 and not data:
            self._wrapper.eof = True
        if len(data) > size:
            raise RuntimeError("read() read more than requested")
        self._register_read()
        return data

    def write(self, data: WriteData, write_all: bool = True) -> int:
        """Write ``data``; unless ``write_all`` is false, keep going until all is written.

        Returns the number of bytes written. A BufferViewList passed in is not
        modified.
        """
        views = _as_views(data)
        total = 0
        while True:
            remaining = sum(len(view) for view in views)
            iovecs = list(views) or [b""]
            written = system_call("writev", lambda: os.writev(self.fd_num(), iovecs))
            if written == 0 and remaining != 0:
                raise RuntimeError("write returned 0 given non-empty input buffer")
            if written > remaining:
                raise RuntimeError("write wrote more than length of input buffer")
            self._register_write()
            _drop_prefix(views, written)
            total += written
            if not (write_all and views):
                return total

    def close(self) -> None:
        """Close the underlying file descriptor."""
        self._wrapper.close()

    def duplicate(self) -> FileDescriptor:
        """Another handle sharing this descriptor and its state."""
        clone = FileDescriptor.__new__(FileDescriptor)
        clone._wrapper = self._wrapper
        return clone

    def set_blocking(self, blocking: bool) -> None:
        """Switch the descriptor between blocking and non-blocking mode."""
        system_call("fcntl", lambda: os.set_blocking(self.fd_num(), blocking))

    def fd_num(self) -> int:
        """The underlying descriptor number."""
        return self._wrapper.fd

    def fileno(self) -> int:
        return self._wrapper.fd

    def eof(self) -> bool:
        return self._wrapper.eof

    def closed(self) -> bool:
        return self._wrapper.closed

    def read_count(self) -> int:
        """Number of reads performed through any handle."""
        return self._wrapper.read_count

    def write_count(self) -> int:
        """Number of writes performed through any handle."""
        return self._wrapper.write_count

    def __enter__(self) -> FileDescriptor:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self.closed():
            self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(fd={self.fd_num()}, closed={self.closed()})"