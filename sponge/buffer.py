"""Shared read-only byte buffers that can discard bytes from the front."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable


class Buffer:
    """A read-only byte string that can discard a prefix without copying.

    Copies made with :func:`copy.copy` share the underlying storage but keep
    their own starting offset.
    """

    __slots__ = ("_storage", "_offset")

    def __init__(self, data: bytes = b"") -> None:
        self._storage = bytes(data)
        self._offset = 0

    def __copy__(self) -> Buffer:
        clone = Buffer.__new__(Buffer)
        clone._storage = self._storage
        clone._offset = self._offset
        return clone

    def view(self) -> memoryview:
        """A zero-copy view of the remaining bytes."""
        return memoryview(self._storage)[self._offset :]

    def at(self, n: int) -> int:
        """The byte value at position ``n``."""
        if not 0 <= n < len(self):
            raise IndexError("Buffer.at: index out of range")
        return self._storage[self._offset + n]

    def __len__(self) -> int:
        return len(self._storage) - self._offset

    def __bytes__(self) -> bytes:
        return self._storage[self._offset :]

    def copy(self) -> bytes:
        """Copy the remaining bytes into a new ``bytes`` object."""
        return bytes(self)

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes."""
        if n < 0 or n > len(self):
            raise IndexError("Buffer.remove_prefix")
        self._offset += n
        if self._offset == len(self._storage):
            self._storage = b""
            self._offset = 0

    def __repr__(self) -> str:
        return f"Buffer({bytes(self)!r})"


class BufferList:
    """A discontiguous byte string made of Buffers, able to discard a prefix."""

    def __init__(self, data: Buffer | bytes | None = None) -> None:
        self._buffers: deque[Buffer] = deque()
        if data is None:
            return
        if isinstance(data, Buffer):
            self._buffers.append(data.__copy__())
        else:
            self._buffers.append(Buffer(data))

    def buffers(self) -> tuple[Buffer, ...]:
        """The underlying Buffers, in order."""
        return tuple(self._buffers)

    def append(self, other: BufferList) -> None:
        """Append every Buffer of ``other`` (sharing storage, not offsets)."""
        self._buffers.extend(buf.__copy__() for buf in other._buffers)

    def to_buffer(self) -> Buffer:
        """Return the contents as a single Buffer; only valid when contiguous."""
        if not self._buffers:
            return Buffer()
        if len(self._buffers) == 1:
            return self._buffers[0].__copy__()
        raise ValueError(
            "BufferList: use concatenate() to combine a multi-Buffer BufferList into one Buffer"
        )

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes across the Buffers."""
        while n > 0:
            if not self._buffers:
                raise IndexError("BufferList.remove_prefix")
            front = self._buffers[0]
            if n < len(front):
                front.remove_prefix(n)
                n = 0
            else:
                n -= len(front)
                self._buffers.popleft()

    def __len__(self) -> int:
        return sum(len(buf) for buf in self._buffers)

    def concatenate(self) -> bytes:
        """Copy all bytes into one ``bytes`` object."""
        return b"".join(buf.view() for buf in self._buffers)


class BufferViewList:
    """A non-owning view of a possibly discontiguous byte string."""

    def __init__(self, source: BufferList | Buffer | bytes) -> None:
        self._views: deque[memoryview] = deque()
        if isinstance(source, BufferList):
            self._views.extend(buf.view() for buf in source.buffers())
        elif isinstance(source, Buffer):
            self._views.append(source.view())
        else:
            self._views.append(memoryview(source).cast("B"))

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes across the views."""
        while n > 0:
            if not self._views:
                raise IndexError("BufferViewList.remove_prefix")
            front = self._views[0]
            if n < len(front):
                self._views[0] = front[n:]
                n = 0
            else:
                n -= len(front)
                self._views.popleft()

    def __len__(self) -> int:
        return sum(len(view) for view in self._views)

    def as_iovecs(self) -> list[memoryview]:
        """The views as a list suitable for ``os.writev`` or ``socket.sendmsg``."""
        return list(self._views)

    def __iter__(self) -> Iterable[memoryview]:
        return iter(list(self._views))