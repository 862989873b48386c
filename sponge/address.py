"""IPv4 socket addresses and name resolution."""

from __future__ import annotations

import ipaddress
import socket
from typing import Union

from .util import TaggedError

SockAddr = Union[tuple, str, bytes]


def _getaddrinfo(node: str, service: str, flags: int) -> tuple[int, SockAddr]:
    try:
        results = socket.getaddrinfo(node, service, socket.AF_INET, 0, 0, flags)
    except socket.gaierror as exc:
        raise TaggedError(f"getaddrinfo({node}, {service})", exc.errno, exc.strerror) from exc
    if not results:
        raise RuntimeError("getaddrinfo returned successfully but with no results")
    family, _type, _proto, _canonname, sockaddr = results[0]
    return family, sockaddr


class Address:
    """A socket address, normally IPv4, with DNS and numeric conversions."""

    __slots__ = ("_family", "_sockaddr")

    def __init__(self, ip: str, port: int = 0) -> None:
        """Build from a dotted-quad string and a numeric port, without resolving names."""
        if not 0 <= port <= 0xFFFF:
            raise ValueError(f"port out of range: {port}")
        self._family, self._sockaddr = _getaddrinfo(
            ip, str(port), socket.AI_NUMERICHOST | socket.AI_NUMERICSERV
        )

    @classmethod
    def resolve(cls, hostname: str, service: str) -> Address:
        """Resolve a hostname and a service name or number to an IPv4 address."""
        family, sockaddr = _getaddrinfo(hostname, str(service), socket.AI_ALL)
        return cls._make(family, sockaddr)

    @classmethod
    def from_sockaddr(cls, sockaddr: SockAddr) -> Address:
        """Wrap a socket-module address (as returned by getsockname and the like)."""
        if isinstance(sockaddr, (str, bytes)):
            return cls._make(socket.AF_UNIX, sockaddr)
        if isinstance(sockaddr, tuple) and len(sockaddr) == 2:
            return cls._make(socket.AF_INET, (str(sockaddr[0]), int(sockaddr[1])))
        if isinstance(sockaddr, tuple) and len(sockaddr) == 4:
            host, port, flowinfo, scope_id = sockaddr
            return cls._make(socket.AF_INET6, (str(host), int(port), int(flowinfo), int(scope_id)))
        raise ValueError("invalid sockaddr size")

    @classmethod
    def from_ipv4_numeric(cls, ip_address: int) -> Address:
        """An IPv4 address (port 0) from its 32-bit numeric value."""
        return cls._make(socket.AF_INET, (str(ipaddress.IPv4Address(ip_address)), 0))

    @classmethod
    def _make(cls, family: int, sockaddr: SockAddr) -> Address:
        address = cls.__new__(cls)
        address._family = family
        address._sockaddr = sockaddr
        return address

    @property
    def family(self) -> int:
        """The address family (AF_INET, AF_INET6 or AF_UNIX)."""
        return self._family

    def ip_port(self) -> tuple[str, int]:
        """The numeric host string and the port."""
        if not isinstance(self._sockaddr, tuple):
            raise TaggedError("getnameinfo", socket.EAI_FAMILY, "ai_family not supported")
        try:
            host, port = socket.getnameinfo(
                self._sockaddr, socket.NI_NUMERICHOST | socket.NI_NUMERICSERV
            )
        except socket.gaierror as exc:
            raise TaggedError("getnameinfo", exc.errno, exc.strerror) from exc
        return host, int(port)

    def ip(self) -> str:
        """The dotted-quad IP address string."""
        return self.ip_port()[0]

    def port(self) -> int:
        """The numeric port."""
        return self.ip_port()[1]

    def ipv4_numeric(self) -> int:
        """The IPv4 address as a 32-bit integer."""
        if self._family != socket.AF_INET:
            raise ValueError("ipv4_numeric called on non-IPV4 address")
        return int(ipaddress.IPv4Address(self._sockaddr[0]))

    def sockaddr(self) -> SockAddr:
        """The address in the form the socket module expects."""
        return self._sockaddr

    def __str__(self) -> str:
        ip, port = self.ip_port()
        return f"{ip}:{port}"

    def __repr__(self) -> str:
        return f"Address.from_sockaddr({self._sockaddr!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self._family == other._family and self._sockaddr == other._sockaddr

    def __hash__(self) -> int:
        return hash((self._family, self._sockaddr))