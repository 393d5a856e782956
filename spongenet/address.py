"""IPv4 socket addresses and name resolution."""

from __future__ import annotations

import socket
from typing import Any

from .util import TaggedError


def _lookup(node: str, service: str, flags: int) -> tuple[int, Any]:
    try:
        results = socket.getaddrinfo(node, service, socket.AF_INET, 0, 0, flags)
    except socket.gaierror as exc:
        code = exc.errno if exc.errno is not None else 0
        raise TaggedError(f"getaddrinfo({node}, {service})", code, exc.strerror or str(exc)) from exc
    if not results:
        raise RuntimeError("getaddrinfo returned successfully but with no results")
    family, _type, _proto, _canonname, sockaddr = results[0]
    return int(family), sockaddr


class Address:
    """A socket address, usually IPv4, with conversions to common forms."""

    __slots__ = ("_family", "_sockaddr")

    def __init__(self, ip: str, port: int = 0) -> None:
        """Build from a dotted-quad string and a numeric port; nothing is resolved."""
        if not 0 <= port <= 0xFFFF:
            raise ValueError(f"port out of range: {port}")
        flags = socket.AI_NUMERICHOST | socket.AI_NUMERICSERV
        self._family, self._sockaddr = _lookup(ip, str(port), flags)

    @classmethod
    def resolve(cls, hostname: str, service: str) -> Address:
        """Resolve a host name and a service name (e.g. ``"http"``) to an address."""
        family, sockaddr = _lookup(hostname, service, getattr(socket, "AI_ALL", 0))
        return cls.from_sockaddr(family, sockaddr)

    @classmethod
    def from_sockaddr(cls, family: int, sockaddr: Any) -> Address:
        """Wrap an address as returned by the ``socket`` module for ``family``."""
        address = cls.__new__(cls)
        address._family = int(family)
        address._sockaddr = tuple(sockaddr) if isinstance(sockaddr, list) else sockaddr
        return address

    @classmethod
    def from_ipv4_numeric(cls, ip_address: int) -> Address:
        """Build an address (port 0) from a 32-bit numeric IPv4 address."""
        if not 0 <= ip_address <= 0xFFFFFFFF:
            raise ValueError(f"IPv4 address out of range: {ip_address}")
        ip = socket.inet_ntoa(ip_address.to_bytes(4, "big"))
        return cls.from_sockaddr(socket.AF_INET, (ip, 0))

    @property
    def family(self) -> int:
        """The address family, e.g. ``socket.AF_INET``."""
        return self._family

    def ip_port(self) -> tuple[str, int]:
        """Return the numeric host string and the port."""
        if self._family not in (socket.AF_INET, socket.AF_INET6):
            raise TaggedError("getnameinfo", socket.EAI_FAMILY, "ai_family not supported")
        try:
            host, port = socket.getnameinfo(
                self._sockaddr, socket.NI_NUMERICHOST | socket.NI_NUMERICSERV
            )
        except socket.gaierror as exc:
            code = exc.errno if exc.errno is not None else 0
            raise TaggedError("getnameinfo", code, exc.strerror or str(exc)) from exc
        return host, int(port)

    def ip(self) -> str:
        """Dotted-quad IP address string."""
        return self.ip_port()[0]

    def port(self) -> int:
        """Numeric port."""
        return self.ip_port()[1]

    def ipv4_numeric(self) -> int:
        """The IPv4 address as a 32-bit integer."""
        if self._family != socket.AF_INET or not isinstance(self._sockaddr, tuple):
            raise RuntimeError("ipv4_numeric called on non-IPV4 address")
        return int.from_bytes(socket.inet_aton(self._sockaddr[0]), "big")

    def sockaddr(self) -> Any:
        """The address in the form the ``socket`` module expects."""
        return self._sockaddr

    def __str__(self) -> str:
        ip, port = self.ip_port()
        return f"{ip}:{port}"

    def __repr__(self) -> str:
        return f"Address(family={self._family}, sockaddr={self._sockaddr!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self._family == other._family and self._sockaddr == other._sockaddr

    def __hash__(self) -> int:
        return hash((self._family, self._sockaddr))