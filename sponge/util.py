"""System-call error handling, random seeding, timing, checksums and hexdumps."""

from __future__ import annotations

import functools
import os
import random
import sys
import time
from collections.abc import Callable
from typing import TextIO, TypeVar

T = TypeVar("T")

_MT19937_STATE_BYTES = 624 * 4


class TaggedError(OSError):
    """An OSError that also records what was being attempted."""

    def __init__(self, attempt: str, code: int, message: str) -> None:
        super().__init__(code, message)
        self.attempt = attempt

    def __str__(self) -> str:
        return f"{self.attempt}: {self.strerror}"


class UnixError(TaggedError):
    """A TaggedError for a failed system call, described by its errno."""

    def __init__(self, attempt: str, error: int) -> None:
        super().__init__(attempt, error, os.strerror(error))


def system_call(attempt: str, return_value: Callable[[], T] | T, errno_mask: int = 0) -> T | int:
    """Run or check a system call, raising UnixError on failure.

    ``return_value`` is either a callable performing the call, or the integer
    the call returned. A callable that raises OSError with errno equal to
    ``errno_mask`` yields -1 instead of an error. A negative integer result
    raises UnixError.
    """
    if callable(return_value):
        try:
            return return_value()
        except OSError as exc:
            if exc.errno is not None and exc.errno == errno_mask:
                return -1
            raise UnixError(attempt, exc.errno or 0) from exc
    if return_value >= 0:
        return return_value
    raise UnixError(attempt, 0)


def get_random_generator() -> random.Random:
    """A Mersenne Twister generator seeded with a full state's worth of entropy."""
    return random.Random(int.from_bytes(os.urandom(_MT19937_STATE_BYTES), "little"))


@functools.lru_cache(maxsize=None)
def _program_start_ns() -> int:
    return time.monotonic_ns()


_program_start_ns()


def timestamp_ms() -> int:
    """Milliseconds elapsed since the program started."""
    return (time.monotonic_ns() - _program_start_ns()) // 1_000_000


class InternetChecksum:
    """The Internet checksum (ones' complement sum of 16-bit words).

    Evaluating it over data that already contains a correct checksum field
    gives 0. The value is returned in host byte order.
    """

    def __init__(self, initial_sum: int = 0) -> None:
        self._sum = initial_sum & 0xFFFFFFFF
        self._parity = False

    def add(self, data: bytes) -> None:
        """Add ``data``; successive calls continue across odd byte boundaries."""
        total = self._sum
        parity = self._parity
        for byte in memoryview(data).cast("B"):
            total += byte if parity else byte << 8
            parity = not parity
        self._sum = total & 0xFFFFFFFF
        self._parity = parity

    def value(self) -> int:
        """The 16-bit checksum of everything added so far."""
        ret = self._sum
        while ret > 0xFFFF:
            ret = (ret >> 16) + (ret & 0xFFFF)
        return ~ret & 0xFFFF


def _printable(byte: int) -> str:
    return chr(byte) if 0x20 <= byte <= 0x7E else "."


def format_hexdump(data: bytes, indent: int = 0) -> str:
    """Render ``data`` as a hexdump, sixteen bytes per line."""
    indent_string = " " * indent
    parts: list[str] = []
    chars: list[str] = []
    printed = 0
    for byte in memoryview(data).cast("B"):
        if printed & 0xF == 0:
            if printed:
                parts.append("    " + "".join(chars) + "\n")
                chars = []
            parts.append(f"{indent_string}{printed:08x}:    ")
        elif printed & 1 == 0:
            parts.append(" ")
        parts.append(f"{byte:02x}")
        chars.append(_printable(byte))
        printed += 1
    remainder = (16 - (printed & 0xF)) % 16
    parts.append(" " * (2 * remainder + remainder // 2 + 4))
    parts.append("".join(chars) if chars else " ")
    parts.append("\n\n")
    return "".join(parts)


def hexdump(data: bytes, indent: int = 0, file: TextIO | None = None) -> None:
    """Write a hexdump of ``data`` to ``file`` (standard output by default)."""
    out = sys.stdout if file is None else file
    out.write(format_hexdump(data, indent))
    out.flush()