"""A flow-controlled, in-order byte stream held in memory."""

from __future__ import annotations


class ByteStream:
    """An in-order byte stream with room for at most ``capacity`` unread bytes.

    Bytes are written on the input side and read from the output side. The
    writer can end the input; once all buffered bytes are read the stream is
    at EOF.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError("capacity must not be negative")
        self._capacity = capacity
        self._buffer = bytearray()
        self._bytes_written = 0
        self._bytes_read = 0
        self._input_ended = False
        self._error = False

    # Input side

    def write(self, data: bytes) -> int:
        """Write as much of ``data`` as fits and return how many bytes were accepted."""
        accepted = memoryview(data).cast("B")[: self.remaining_capacity()]
        self._buffer += accepted
        self._bytes_written += len(accepted)
        return len(accepted)

    def remaining_capacity(self) -> int:
        """Number of additional bytes the stream has room for."""
        return self._capacity - len(self._buffer)

    def end_input(self) -> None:
        """Signal that no more bytes will be written."""
        self._input_ended = True

    def set_error(self) -> None:
        """Mark the stream as having suffered an error."""
        self._error = True

    # Output side

    def peek_output(self, length: int) -> bytes:
        """Return up to ``length`` bytes from the front without removing them."""
        return bytes(self._buffer[:length])

    def pop_output(self, length: int) -> None:
        """Discard up to ``length`` bytes from the front of the stream."""
        count = min(len(self._buffer), length)
        del self._buffer[:count]
        self._bytes_read += count

    def read(self, length: int) -> bytes:
        """Remove and return up to ``length`` bytes from the front of the stream."""
        output = self.peek_output(length)
        self.pop_output(length)
        return output

    def input_ended(self) -> bool:
        return self._input_ended

    def error(self) -> bool:
        return self._error

    def buffer_size(self) -> int:
        """Number of bytes that can currently be read."""
        return len(self._buffer)

    def buffer_empty(self) -> bool:
        return not self._buffer

    def eof(self) -> bool:
        """True once input has ended and every byte has been read."""
        return self._input_ended and not self._buffer

    # Accounting

    def bytes_written(self) -> int:
        """Total number of bytes accepted by ``write``."""
        return self._bytes_written

    def bytes_read(self) -> int:
        """Total number of bytes removed from the stream."""
        return self._bytes_read