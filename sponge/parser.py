"""Network-byte-order integer parsing and serialisation."""

from __future__ import annotations

import copy
from enum import IntEnum

from .buffer import Buffer


class ParseResult(IntEnum):
    """Outcome of parsing or unparsing a datagram, segment, frame or message."""

    NoError = 0
    BadChecksum = 1
    PacketTooShort = 2
    WrongIPVersion = 3
    HeaderTooShort = 4
    TruncatedPacket = 5
    Unsupported = 6


def as_string(result: ParseResult) -> str:
    """The name of a ParseResult."""
    return ParseResult(result).name


class NetParser:
    """Reads big-endian integers from the front of a Buffer.

    The first failure is recorded; once an error is set, further reads
    return 0 and leave the buffer untouched.
    """

    def __init__(self, buffer: Buffer | bytes) -> None:
        self._buffer = copy.copy(buffer) if isinstance(buffer, Buffer) else Buffer(buffer)
        self._error = ParseResult.NoError

    def buffer(self) -> Buffer:
        """The bytes not yet consumed."""
        return copy.copy(self._buffer)

    def get_error(self) -> ParseResult:
        return self._error

    def set_error(self, result: ParseResult) -> None:
        self._error = result

    def error(self) -> bool:
        """True if an error has been recorded."""
        return self._error != ParseResult.NoError

    def _check_size(self, size: int) -> None:
        if size > len(self._buffer):
            self.set_error(ParseResult.PacketTooShort)

    def _parse_int(self, size: int) -> int:
        self._check_size(size)
        if self.error():
            return 0
        value = int.from_bytes(self._buffer.view()[:size], "big")
        self._buffer.remove_prefix(size)
        return value

    def u32(self) -> int:
        """Parse a 32-bit unsigned integer in network byte order."""
        return self._parse_int(4)

    def u16(self) -> int:
        """Parse a 16-bit unsigned integer in network byte order."""
        return self._parse_int(2)

    def u8(self) -> int:
        """Parse an 8-bit unsigned integer."""
        return self._parse_int(1)

    def remove_prefix(self, n: int) -> None:
        """Skip ``n`` bytes, recording an error if there are not enough."""
        self._check_size(n)
        if self.error():
            return
        self._buffer.remove_prefix(n)


def _unparse_int(out: bytearray, value: int, size: int) -> None:
    mask = (1 << (8 * size)) - 1
    out.extend((value & mask).to_bytes(size, "big"))


def unparse_u32(out: bytearray, value: int) -> None:
    """Append ``value`` to ``out`` as a 32-bit integer in network byte order."""
    _unparse_int(out, value, 4)


def unparse_u16(out: bytearray, value: int) -> None:
    """Append ``value`` to ``out`` as a 16-bit integer in network byte order."""
    _unparse_int(out, value, 2)


def unparse_u8(out: bytearray, value: int) -> None:
    """Append ``value`` to ``out`` as an 8-bit integer."""
    _unparse_int(out, value, 1)