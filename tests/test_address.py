import socket

import pytest

from sponge.address import Address
from sponge.util import TaggedError


def test_dotted_quad_and_port():
    address = Address("18.243.0.1", 53)
    assert address.ip_port() == ("18.243.0.1", 53)
    assert address.ip() == "18.243.0.1"
    assert address.port() == 53


def test_default_port_is_zero():
    assert Address("10.0.0.1").port() == 0


def test_to_string():
    assert str(Address("8.8.8.8", 53)) == "8.8.8.8:53"


def test_numeric_round_trip():
    address = Address("18.243.0.1")
    assert Address.from_ipv4_numeric(address.ipv4_numeric()) == address


def test_numeric_matches_socket_packing():
    address = Address("18.243.0.1")
    packed = socket.inet_aton("18.243.0.1")
    assert address.ipv4_numeric() == int.from_bytes(packed, "big")


def test_from_ipv4_numeric_range_checked():
    with pytest.raises(ValueError):
        Address.from_ipv4_numeric(1 << 32)


def test_equality_and_hash():
    a = Address("127.0.0.1", 80)
    b = Address.from_sockaddr(("127.0.0.1", 80))
    c = Address("127.0.0.1", 81)
    assert a == b
    assert hash(a) == hash(b)
    assert not (a == c)
    assert len({a, b, c}) == 2


def test_sockaddr_usable_with_socket():
    address = Address("127.0.0.1", 0)
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.bind(address.sockaddr())
        bound = Address.from_sockaddr(sock.getsockname())
    assert bound.ip() == "127.0.0.1"
    assert 0 < bound.port() <= 0xFFFF


def test_resolve_numeric_service():
    address = Address.resolve("127.0.0.1", "80")
    assert address == Address("127.0.0.1", 80)


def test_invalid_ip_raises_tagged_error():
    with pytest.raises(TaggedError) as info:
        Address("not-an-ip", 0)
    assert str(info.value).startswith("getaddrinfo(not-an-ip, 0): ")


def test_port_out_of_range():
    with pytest.raises(ValueError):
        Address("127.0.0.1", 70000)


def test_ipv6_address_has_no_ipv4_numeric():
    address = Address.from_sockaddr(("::1", 80, 0, 0))
    assert address.ip_port() == ("::1", 80)
    with pytest.raises(ValueError):
        address.ipv4_numeric()


def test_invalid_sockaddr_rejected():
    with pytest.raises(ValueError):
        Address.from_sockaddr(("127.0.0.1",))


def test_unix_address_cannot_be_named():
    address = Address.from_sockaddr("/tmp/sock")
    assert address.family == socket.AF_UNIX
    with pytest.raises(TaggedError):
        address.ip_port()