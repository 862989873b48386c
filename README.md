# sponge

Building blocks for networking code in user space, written in plain Python
with no third-party dependencies. The package needs a POSIX system, because
the descriptor, socket and event-loop parts use `os.writev`, `select.poll` and
Unix-domain sockets.

## Modules

- `sponge.byte_stream.ByteStream`: an in-order byte stream held in memory,
  with a fixed capacity. On the input side there are `write` (returns how many
  bytes fit), `remaining_capacity`, `end_input` and `set_error`. On the output
  side there are `peek_output`, `pop_output`, `read`, `buffer_size`,
  `buffer_empty`, `input_ended`, `eof` and `error`. `bytes_written` and
  `bytes_read` give the running totals.
- `sponge.stream_reassembler.StreamReassembler`: takes indexed substrings
  through `push_substring(data, index, eof)`. They may arrive out of order or
  overlap. The reassembler writes every contiguous run into the `ByteStream`
  returned by `stream_out()`. It holds at most `capacity` bytes, counting both
  unread output and bytes that are not yet assembled, and drops anything
  beyond that. `unassembled_bytes()` counts each stored position once, and
  `empty()` is true when nothing is waiting.
- `sponge.buffer`:
  - `Buffer` is a read-only byte string that can drop a prefix without copying.
  - `BufferList` is a sequence of `Buffer`s with `append`, `remove_prefix`,
    `concatenate` and `to_buffer`. `to_buffer` raises `ValueError` when the
    list holds more than one buffer.
  - `BufferViewList` is a non-owning list of `memoryview`s. Its `as_iovecs()`
    output is suitable for `os.writev` or `socket.sendmsg`.
- `sponge.parser`:
  - `NetParser` reads big-endian integers with `u8`, `u16` and `u32`, and
    skips bytes with `remove_prefix`. It records the first failure as a
    `ParseResult` (`PacketTooShort` when data runs out). After that, reads
    return 0.
  - `unparse_u8`, `unparse_u16` and `unparse_u32` append integers in network
    byte order to a `bytearray`.
  - `as_string` returns the name of a `ParseResult`.
- `sponge.util`:
  - `InternetChecksum` computes the ones'-complement Internet checksum
    incrementally.
  - `format_hexdump` and `hexdump` render bytes sixteen per line.
  - `timestamp_ms` gives milliseconds since the module was loaded.
  - `get_random_generator` returns a `random.Random` seeded from
    `os.urandom`.
  - `system_call` runs an operation and turns an `OSError` into `UnixError`.
    `UnixError` is a subclass of `TaggedError`, which is an `OSError` that
    also carries `attempt`.
- `sponge.address.Address`: a socket address.
  - It can be built from a dotted quad and a port (`Address("1.2.3.4", 80)`,
    without resolving names), from a hostname and service
    (`Address.resolve`), from a socket-module address tuple or path
    (`Address.from_sockaddr`), or from a 32-bit integer
    (`Address.from_ipv4_numeric`).
  - It offers `ip_port`, `ip`, `port`, `ipv4_numeric`, `sockaddr`, `family`
    and `str()` (`"ip:port"`).
  - Addresses compare equal and hash by family and socket address.
- `sponge.file_descriptor.FileDescriptor`: a handle to a kernel file
  descriptor.
  - `read(limit)` reads at most 1 MiB per call. `write(data, write_all=True)`
    accepts bytes, `str`, `Buffer`, `BufferList` or `BufferViewList`.
  - Handles made with `duplicate()` share EOF state, closed state and the
    `read_count`/`write_count` counters.
  - It also has `set_blocking`, `fd_num`, `fileno` and `close`, and works as a
    context manager that closes the descriptor on exit.
- `sponge.eventloop.EventLoop`: `add_rule(fd, direction, callback, interest,
  cancel)` and `wait_next_event(timeout_ms)`.
  - `wait_next_event` returns a `Result`: `Success`, `Timeout` or `Exit`.
  - A rule is dropped, and its `cancel` callback called, on EOF (for
    `Direction.In`), when the descriptor is closed, or on a bare hangup.
  - A callback that neither reads nor writes its descriptor while still
    interested raises `RuntimeError` (busy wait).
- `sponge.sockets`:
  - `UDPSocket` has `recv(mtu)`, which returns a `ReceivedDatagram` with
    `source_address` and `payload`. It also has `sendto` and `send`.
  - `TCPSocket` has `listen` and `accept`.
  - `LocalStreamSocket` wraps an existing `AF_UNIX` stream descriptor.
  - All three share `bind`, `connect`, `shutdown`, `local_address`,
    `peer_address` and `set_reuseaddr` from `Socket`.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Examples

A byte stream with limited capacity:

```python
from sponge.byte_stream import ByteStream

stream = ByteStream(4)
stream.write(b"hello")      # returns 4: only b"hell" fits
stream.read(2)              # b"he"
stream.end_input()
stream.read(10)             # b"ll"
stream.eof()                # True
```

Putting out-of-order segments back in order:

```python
from sponge.stream_reassembler import StreamReassembler

reassembler = StreamReassembler(65000)
reassembler.push_substring(b"b", 1, True)
reassembler.unassembled_bytes()          # 1
reassembler.push_substring(b"a", 0, False)
reassembler.stream_out().read(2)         # b"ab"
reassembler.stream_out().eof()           # True
```

Reading and writing network-order integers:

```python
from sponge.parser import NetParser, ParseResult, unparse_u16, unparse_u32

out = bytearray()
unparse_u16(out, 0x1234)
unparse_u32(out, 0xDEADBEEF)

parser = NetParser(bytes(out))
parser.u16()                                 # 0x1234
parser.u32()                                 # 0xDEADBEEF
parser.u8()                                  # 0: no data left
parser.get_error() is ParseResult.PacketTooShort   # True
```

Computing an Internet checksum:

```python
from sponge.util import InternetChecksum

checksum = InternetChecksum()
checksum.add(b"\x45\x00\x00\x1c")
checksum.value()
```

## What this package does not do

This package provides only the pieces listed above. It has no TCP sender,
receiver or connection state machine. It has no IPv4, TCP, Ethernet or ARP
header types. It cannot open TUN/TAP devices and installs no command-line
programs. `NetParser` and the `unparse_*` functions are the primitives such
header types would be built on, but the headers themselves are not included.