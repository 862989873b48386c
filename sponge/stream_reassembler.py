"""Reassembly of possibly out-of-order, overlapping substrings into a byte stream."""

from __future__ import annotations

from .byte_stream import ByteStream


class StreamReassembler:
    """Assembles indexed substrings of a stream into an in-order ByteStream.

    At most ``capacity`` bytes are held, counting both assembled bytes not yet
    read from the output and bytes waiting to be assembled. Bytes beyond that
    limit are silently discarded.
    """

    def __init__(self, capacity: int) -> None:
        self._output = ByteStream(capacity)
        self._capacity = capacity
        self._pending: dict[int, int] = {}
        self._next_index = 0
        self._eof = False
        self._eof_index = 0

    def push_substring(self, data: bytes, index: int, eof: bool = False) -> None:
        """Accept ``data`` starting at stream position ``index``.

        If ``eof`` is true, the last byte of ``data`` is the last byte of the
        whole stream.
        """
        data = bytes(data)
        window_end = self._next_index + self._output.remaining_capacity()
        data_end = index + len(data)

        for position in range(max(index, self._next_index), min(data_end, window_end)):
            self._pending.setdefault(position, data[position - index])

        if eof and data_end <= window_end:
            self._eof = True
            self._eof_index = data_end

        assembled = bytearray()
        while self._next_index in self._pending:
            assembled.append(self._pending.pop(self._next_index))
            self._next_index += 1

        if assembled:
            self._output.write(assembled)

        if self._eof and not self._pending and self._next_index == self._eof_index:
            self._output.end_input()

    def stream_out(self) -> ByteStream:
        """The reassembled in-order byte stream."""
        return self._output

    def unassembled_bytes(self) -> int:
        """Number of distinct bytes stored but not yet assembled."""
        return len(self._pending)

    def empty(self) -> bool:
        """True if no bytes are waiting to be assembled."""
        return not self._pending