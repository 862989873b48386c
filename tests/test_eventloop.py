import os

import pytest

from sponge.eventloop import Direction, EventLoop, Result
from sponge.file_descriptor import FileDescriptor


@pytest.fixture
def pipe():
    read_fd, write_fd = os.pipe()
    reader = FileDescriptor(read_fd)
    writer = FileDescriptor(write_fd)
    yield reader, writer
    for fd in (reader, writer):
        if not fd.closed():
            fd.close()


def test_direction_selects_readiness_kind(pipe):
    reader, writer = pipe
    fired = []
    sent = []

    def send():
        writer.write(b"q")
        sent.append(True)
        fired.append(Direction.Out)

    loop = EventLoop()
    loop.add_rule(reader, Direction.In, lambda: fired.append(reader.read()))
    loop.add_rule(writer, Direction.Out, send, interest=lambda: not sent)
    assert loop.wait_next_event(0) is Result.Success
    assert fired == [Direction.Out]


def test_no_rules_exits():
    assert EventLoop().wait_next_event(0) is Result.Exit


def test_readable_rule_runs_callback(pipe):
    reader, writer = pipe
    received = []
    loop = EventLoop()
    loop.add_rule(reader, Direction.In, lambda: received.append(reader.read()))
    writer.write(b"data")
    assert loop.wait_next_event(100) is Result.Success
    assert received == [b"data"]


def test_timeout_when_nothing_ready(pipe):
    reader, _writer = pipe
    called = []
    loop = EventLoop()
    loop.add_rule(reader, Direction.In, lambda: called.append(True))
    assert loop.wait_next_event(0) is Result.Timeout
    assert called == []


def test_uninterested_rules_exit(pipe):
    reader, writer = pipe
    writer.write(b"x")
    called = []
    loop = EventLoop()
    loop.add_rule(reader, Direction.In, lambda: called.append("cb"), interest=lambda: False,
                  cancel=lambda: called.append("cancel"))
    assert loop.wait_next_event(0) is Result.Exit
    assert called == []


def test_writable_rule(pipe):
    reader, writer = pipe
    done = []

    def send():
        writer.write(b"hi")
        done.append(True)

    loop = EventLoop()
    loop.add_rule(writer, Direction.Out, send, interest=lambda: not done)
    assert loop.wait_next_event(100) is Result.Success
    assert reader.read() == b"hi"
    assert loop.wait_next_event(0) is Result.Exit


def test_busy_wait_detected(pipe):
    reader, writer = pipe
    writer.write(b"x")
    loop = EventLoop()
    loop.add_rule(reader, Direction.In, lambda: None)
    with pytest.raises(RuntimeError, match="busy wait"):
        loop.wait_next_event(100)


def test_rule_at_eof_is_cancelled(pipe):
    reader, writer = pipe
    writer.close()
    assert reader.read() == b""
    cancelled = []
    loop = EventLoop()
    loop.add_rule(reader, Direction.In, lambda: reader.read(), cancel=lambda: cancelled.append(True))
    assert loop.wait_next_event(0) is Result.Exit
    assert cancelled == [True]


def test_closed_fd_rule_is_cancelled(pipe):
    reader, _writer = pipe
    cancelled = []
    loop = EventLoop()
    loop.add_rule(reader, Direction.In, lambda: reader.read(), cancel=lambda: cancelled.append(True))
    reader.close()
    assert loop.wait_next_event(0) is Result.Exit
    assert cancelled == [True]


def test_hangup_eventually_cancels(pipe):
    reader, writer = pipe
    received = []
    cancelled = []
    loop = EventLoop()
    loop.add_rule(reader, Direction.In, lambda: received.append(reader.read()),
                  cancel=lambda: cancelled.append(True))
    writer.write(b"x")
    writer.close()
    results = [loop.wait_next_event(100) for _ in range(3)]
    assert results[0] is Result.Success
    assert results[-1] is Result.Exit
    assert received[0] == b"x"
    assert cancelled == [True]


def test_multiple_rules_only_ready_ones_fire(pipe):
    reader, writer = pipe
    order = []
    sent = []

    def send():
        writer.write(b"z")
        sent.append(True)
        order.append("write")

    def receive():
        order.append(reader.read())

    loop = EventLoop()
    loop.add_rule(reader, Direction.In, receive)
    loop.add_rule(writer, Direction.Out, send, interest=lambda: not sent)
    assert loop.wait_next_event(100) is Result.Success
    assert order == ["write"]
    assert loop.wait_next_event(100) is Result.Success
    assert order == ["write", b"z"]