import pytest

from sponge.byte_stream import ByteStream


def test_new_stream_is_empty():
    stream = ByteStream(15)
    assert stream.buffer_empty()
    assert stream.buffer_size() == 0
    assert stream.remaining_capacity() == 15
    assert stream.bytes_written() == 0
    assert stream.bytes_read() == 0
    assert not stream.input_ended()
    assert not stream.eof()
    assert not stream.error()


def test_write_then_read_round_trip():
    data = b"hello world"
    stream = ByteStream(64)
    assert stream.write(data) == len(data)
    assert stream.buffer_size() == len(data)
    assert stream.read(len(data)) == data
    assert stream.buffer_empty()
    assert stream.bytes_written() == len(data)
    assert stream.bytes_read() == len(data)


def test_write_is_limited_by_capacity():
    capacity = 4
    data = b"abcdefgh"
    stream = ByteStream(capacity)
    assert stream.write(data) == capacity
    assert stream.remaining_capacity() == 0
    assert stream.write(data) == 0
    assert stream.peek_output(len(data)) == data[:capacity]
    assert stream.bytes_written() == capacity


def test_reading_frees_capacity():
    capacity = 4
    stream = ByteStream(capacity)
    stream.write(b"abcd")
    stream.pop_output(2)
    assert stream.remaining_capacity() == 2
    assert stream.write(b"efgh") == 2
    assert stream.read(capacity) == b"cdef"


def test_peek_does_not_consume():
    stream = ByteStream(10)
    stream.write(b"xyz")
    assert stream.peek_output(2) == b"xy"
    assert stream.peek_output(2) == b"xy"
    assert stream.buffer_size() == 3
    assert stream.bytes_read() == 0


def test_pop_and_read_beyond_buffer_take_what_is_there():
    stream = ByteStream(10)
    stream.write(b"abc")
    assert stream.read(100) == b"abc"
    stream.pop_output(5)
    assert stream.bytes_read() == 3
    assert stream.read(1) == b""


def test_eof_requires_end_and_empty_buffer():
    stream = ByteStream(10)
    stream.write(b"ab")
    stream.end_input()
    assert stream.input_ended()
    assert not stream.eof()
    stream.read(2)
    assert stream.eof()


def test_end_input_on_empty_stream_is_eof():
    stream = ByteStream(10)
    stream.end_input()
    assert stream.eof()


def test_set_error():
    stream = ByteStream(1)
    stream.set_error()
    assert stream.error()


def test_accepts_bytearray_and_memoryview():
    stream = ByteStream(10)
    stream.write(bytearray(b"ab"))
    stream.write(memoryview(b"cd"))
    assert stream.read(10) == b"abcd"


def test_negative_capacity_rejected():
    with pytest.raises(ValueError):
        ByteStream(-1)


def test_counters_are_consistent_over_many_operations():
    stream = ByteStream(7)
    chunk = b"0123456789"
    for _ in range(50):
        stream.write(chunk)
        stream.pop_output(3)
        assert stream.bytes_written() - stream.bytes_read() == stream.buffer_size()
        assert stream.buffer_size() + stream.remaining_capacity() == 7