"""Thin wrappers over UDP, TCP and Unix-domain stream sockets."""

from __future__ import annotations

import socket
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Union

from .address import Address
from .buffer import Buffer, BufferList, BufferViewList, BytesLike
from .file_descriptor import FileDescriptor
from .util import system_call

Payload = Union[str, Buffer, BufferList, BufferViewList, BytesLike]


def _iovecs(payload: Payload) -> tuple[list[memoryview], int]:
    if isinstance(payload, str):
        payload = payload.encode()
    views = payload if isinstance(payload, BufferViewList) else BufferViewList(payload)
    return views.as_iovecs(), len(views)


def _sendmsg(sock: socket.socket, payload: Payload, destination: Optional[Address]) -> None:
    iovecs, size = _iovecs(payload)
    if destination is None:
        sent = system_call("sendmsg", sock.sendmsg, iovecs)
    else:
        sent = system_call("sendmsg", sock.sendmsg, iovecs, [], 0, destination.sockaddr())
    if sent != size:
        raise RuntimeError("datagram payload too big for sendmsg()")


class Socket(FileDescriptor):
    """Base class for network sockets; normally used through a subclass."""

    def __init__(self, domain: int, sock_type: int, fd: Optional[FileDescriptor] = None) -> None:
        if fd is None:
            created = system_call("socket", socket.socket, domain, sock_type)
            super().__init__(created.detach())
            return
        self._internal = fd._internal
        with self._socket() as sock:
            actual_domain = int(sock.family)
            actual_type = system_call("getsockopt", sock.getsockopt, socket.SOL_SOCKET, socket.SO_TYPE)
        if actual_domain != domain:
            raise RuntimeError("socket domain mismatch")
        if actual_type != sock_type:
            raise RuntimeError("socket type mismatch")

    @contextmanager
    def _socket(self) -> Iterator[socket.socket]:
        """A temporary socket object over this descriptor that does not own it."""
        sock = system_call("getsockopt", socket.socket, -1, -1, -1, self.fd_num())
        try:
            yield sock
        finally:
            sock.detach()

    def _setsockopt(self, level: int, option: int, value: Any) -> None:
        with self._socket() as sock:
            system_call("setsockopt", sock.setsockopt, level, option, value)

    def _get_address(self, name_of_function: str) -> Address:
        with self._socket() as sock:
            raw = system_call(name_of_function, getattr(sock, name_of_function))
            return Address.from_sockaddr(sock.family, raw)

    def bind(self, address: Address) -> None:
        """Bind the socket to a local address."""
        with self._socket() as sock:
            system_call("bind", sock.bind, address.sockaddr())

    def connect(self, address: Address) -> None:
        """Connect the socket to a peer address."""
        with self._socket() as sock:
            system_call("connect", sock.connect, address.sockaddr())

    def shutdown(self, how: int) -> None:
        """Shut down reading, writing or both (``socket.SHUT_RD`` and friends)."""
        with self._socket() as sock:
            system_call("shutdown", sock.shutdown, how)
        if how == socket.SHUT_RD:
            self.register_read()
        elif how == socket.SHUT_WR:
            self.register_write()
        elif how == socket.SHUT_RDWR:
            self.register_read()
            self.register_write()
        else:
            raise RuntimeError("Socket::shutdown() called with invalid `how`")

    def local_address(self) -> Address:
        """The local address the socket is bound to."""
        return self._get_address("getsockname")

    def peer_address(self) -> Address:
        """The address of the connected peer."""
        return self._get_address("getpeername")

    def set_reuseaddr(self) -> None:
        """Allow the local address to be reused sooner (``SO_REUSEADDR``)."""
        self._setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)


@dataclass
class ReceivedDatagram:
    """A received UDP datagram and the address it came from."""

    source_address: Address
    payload: bytes


class UDPSocket(Socket):
    """An IPv4 UDP socket."""

    def __init__(self, fd: Optional[FileDescriptor] = None) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_DGRAM, fd)

    def recv(self, mtu: int = 65536) -> ReceivedDatagram:
        """Receive one datagram; raise ``RuntimeError`` if it is larger than ``mtu``."""
        with self._socket() as sock:
            data, _ancdata, msg_flags, source = system_call("recvfrom", sock.recvmsg, mtu)
            family = sock.family
        if msg_flags & socket.MSG_TRUNC:
            raise RuntimeError("recvfrom (oversized datagram)")
        self.register_read()
        return ReceivedDatagram(Address.from_sockaddr(family, source), data)

    def sendto(self, destination: Address, payload: Payload) -> None:
        """Send a datagram to ``destination``."""
        with self._socket() as sock:
            _sendmsg(sock, payload, destination)
        self.register_write()

    def send(self, payload: Payload) -> None:
        """Send a datagram to the connected address."""
        with self._socket() as sock:
            _sendmsg(sock, payload, None)
        self.register_write()


class TCPSocket(Socket):
    """An IPv4 TCP socket."""

    def __init__(self, fd: Optional[FileDescriptor] = None) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_STREAM, fd)

    def listen(self, backlog: int = 16) -> None:
        """Mark the socket as accepting incoming connections."""
        with self._socket() as sock:
            system_call("listen", sock.listen, backlog)

    def accept(self) -> TCPSocket:
        """Wait for and return a new connection."""
        self.register_read()
        with self._socket() as sock:
            conn, _address = system_call("accept", sock.accept)
        return TCPSocket(FileDescriptor(conn.detach()))


class LocalStreamSocket(Socket):
    """A Unix-domain stream socket built from an existing descriptor."""

    def __init__(self, fd: FileDescriptor) -> None:
        super().__init__(socket.AF_UNIX, socket.SOCK_STREAM, fd)