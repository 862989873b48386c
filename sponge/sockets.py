"""Network sockets built on reference-counted file descriptors."""

from __future__ import annotations

import socket
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar, Union

from .address import Address
from .buffer import Buffer, BufferList, BufferViewList
from .file_descriptor import FileDescriptor
from .util import system_call

T = TypeVar("T")

Payload = Union[bytes, bytearray, memoryview, str, Buffer, BufferList, BufferViewList]

_DEFAULT_MTU = 65536


def _payload_views(payload: Payload) -> BufferViewList:
    if isinstance(payload, BufferViewList):
        return payload
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    return BufferViewList(payload)


class Socket(FileDescriptor):
    """Base class for network sockets; normally used through a subclass."""

    def __init__(self, domain: int, sock_type: int, fd: FileDescriptor | None = None) -> None:
        """Open a new socket, or take over ``fd`` after checking its domain and type."""
        if fd is None:
            number = system_call("socket", lambda: socket.socket(domain, sock_type).detach())
            super().__init__(number)
            return

        self._wrapper = fd._wrapper
        actual_domain = self._call("getsockopt", self._domain_of)
        if actual_domain != domain:
            raise RuntimeError("socket domain mismatch")
        actual_type = self._call(
            "getsockopt", lambda s: s.getsockopt(socket.SOL_SOCKET, socket.SO_TYPE)
        )
        if actual_type != sock_type:
            raise RuntimeError("socket type mismatch")

    @staticmethod
    def _domain_of(sock: socket.socket) -> int:
        so_domain = getattr(socket, "SO_DOMAIN", None)
        if so_domain is not None:
            return sock.getsockopt(socket.SOL_SOCKET, so_domain)
        return int(sock.family)

    def _call(self, attempt: str, operation: Callable[[socket.socket], T]) -> T:
        """Run ``operation`` on a socket object borrowing this descriptor."""

        def run() -> T:
            sock = socket.socket(fileno=self.fd_num())
            try:
                return operation(sock)
            finally:
                sock.detach()

        return system_call(attempt, run)

    def _setsockopt(self, level: int, option: int, value: int | bytes) -> None:
        self._call("setsockopt", lambda s: s.setsockopt(level, option, value))

    def bind(self, address: Address) -> None:
        """Bind the socket to a local address."""
        self._call("bind", lambda s: s.bind(address.sockaddr()))

    def connect(self, address: Address) -> None:
        """Connect the socket to a peer address."""
        self._call("connect", lambda s: s.connect(address.sockaddr()))

    def shutdown(self, how: int) -> None:
        """Shut down reading (SHUT_RD), writing (SHUT_WR) or both (SHUT_RDWR)."""
        self._call("shutdown", lambda s: s.shutdown(how))
        if how == socket.SHUT_RD:
            self._register_read()
        elif how == socket.SHUT_WR:
            self._register_write()
        elif how == socket.SHUT_RDWR:
            self._register_read()
            self._register_write()
        else:
            raise RuntimeError("Socket.shutdown() called with invalid `how`")

    def local_address(self) -> Address:
        """The local address of the socket."""
        return Address.from_sockaddr(self._call("getsockname", lambda s: s.getsockname()))

    def peer_address(self) -> Address:
        """The address of the socket's peer."""
        return Address.from_sockaddr(self._call("getpeername", lambda s: s.getpeername()))

    def set_reuseaddr(self) -> None:
        """Allow the local address to be reused sooner (SO_REUSEADDR)."""
        self._setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)


@dataclass
class ReceivedDatagram:
    """A received datagram and the address it came from."""

    source_address: Address
    payload: bytes


class UDPSocket(Socket):
    """An IPv4 UDP socket."""

    def __init__(self) -> None:
        """An unbound, unconnected UDP socket."""
        super().__init__(socket.AF_INET, socket.SOCK_DGRAM)

    @classmethod
    def _from_fd(cls, fd: FileDescriptor) -> UDPSocket:
        udp = cls.__new__(cls)
        Socket.__init__(udp, socket.AF_INET, socket.SOCK_DGRAM, fd)
        return udp

    def recv(self, mtu: int = _DEFAULT_MTU) -> ReceivedDatagram:
        """Receive one datagram of at most ``mtu`` bytes; larger ones raise RuntimeError."""
        data, _ancdata, flags, source = self._call("recvfrom", lambda s: s.recvmsg(mtu))
        if flags & socket.MSG_TRUNC:
            raise RuntimeError("recvfrom (oversized datagram)")
        self._register_read()
        return ReceivedDatagram(Address.from_sockaddr(source), data)

    def _sendmsg(self, payload: Payload, destination: Address | None) -> None:
        views = _payload_views(payload)
        iovecs = views.as_iovecs() or [b""]
        if destination is None:
            sent = self._call("sendmsg", lambda s: s.sendmsg(iovecs))
        else:
            sent = self._call(
                "sendmsg", lambda s: s.sendmsg(iovecs, [], 0, destination.sockaddr())
            )
        if sent != len(views):
            raise RuntimeError("datagram payload too big for sendmsg()")
        self._register_write()

    def sendto(self, destination: Address, payload: Payload) -> None:
        """Send a datagram to ``destination``."""
        self._sendmsg(payload, destination)

    def send(self, payload: Payload) -> None:
        """Send a datagram to the connected peer (``connect`` must come first)."""
        self._sendmsg(payload, None)


class TCPSocket(Socket):
    """An IPv4 TCP socket."""

    def __init__(self) -> None:
        """An unbound, unconnected TCP socket."""
        super().__init__(socket.AF_INET, socket.SOCK_STREAM)

    @classmethod
    def _from_fd(cls, fd: FileDescriptor) -> TCPSocket:
        tcp = cls.__new__(cls)
        Socket.__init__(tcp, socket.AF_INET, socket.SOCK_STREAM, fd)
        return tcp

    def listen(self, backlog: int = 16) -> None:
        """Mark the socket as accepting incoming connections."""
        self._call("listen", lambda s: s.listen(backlog))

    def accept(self) -> TCPSocket:
        """Wait for and return a new connection."""
        self._register_read()
        number = self._call("accept", lambda s: s.accept()[0].detach())
        return TCPSocket._from_fd(FileDescriptor(number))


class LocalStreamSocket(Socket):
    """A Unix-domain stream socket."""

    def __init__(self, fd: FileDescriptor) -> None:
        """Take over ``fd``, which must be an AF_UNIX stream socket."""
        super().__init__(socket.AF_UNIX, socket.SOCK_STREAM, fd)