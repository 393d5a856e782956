"""Network-byte-order integer parsing and serialization."""

from __future__ import annotations

from enum import IntEnum
from typing import Union

from .buffer import Buffer, BytesLike


class ParseResult(IntEnum):
    """The result of parsing a datagram, segment, frame or message."""

    NO_ERROR = 0
    BAD_CHECKSUM = 1
    PACKET_TOO_SHORT = 2
    WRONG_IP_VERSION = 3
    HEADER_TOO_SHORT = 4
    TRUNCATED_PACKET = 5
    UNSUPPORTED = 6


_NAMES = {
    ParseResult.NO_ERROR: "NoError",
    ParseResult.BAD_CHECKSUM: "BadChecksum",
    ParseResult.PACKET_TOO_SHORT: "PacketTooShort",
    ParseResult.WRONG_IP_VERSION: "WrongIPVersion",
    ParseResult.HEADER_TOO_SHORT: "HeaderTooShort",
    ParseResult.TRUNCATED_PACKET: "TruncatedPacket",
    ParseResult.UNSUPPORTED: "Unsupported",
}


def as_string(r: ParseResult) -> str:
    """Return the name of a parse result."""
    return _NAMES[ParseResult(r)]


class NetParser:
    """Reads big-endian integers from a buffer, recording the first failure.

    Once ``result`` holds an error, every further read returns 0 and
    consumes nothing.
    """

    def __init__(self, buffer: Union[Buffer, BytesLike]) -> None:
        self._buffer = buffer._clone() if isinstance(buffer, Buffer) else Buffer(buffer)
        self.result = ParseResult.NO_ERROR

    @property
    def buffer(self) -> Buffer:
        """A copy of the bytes not yet consumed."""
        return self._buffer._clone()

    @property
    def error(self) -> bool:
        """True once any error has been recorded."""
        return self.result != ParseResult.NO_ERROR

    def _check_size(self, size: int) -> None:
        if size > len(self._buffer):
            self.result = ParseResult.PACKET_TOO_SHORT

    def _parse_int(self, width: int) -> int:
        self._check_size(width)
        if self.error:
            return 0
        value = int.from_bytes(self._buffer.view()[:width], "big")
        self._buffer.remove_prefix(width)
        return value

    def u32(self) -> int:
        """Parse a 32-bit integer in network byte order."""
        return self._parse_int(4)

    def u16(self) -> int:
        """Parse a 16-bit integer in network byte order."""
        return self._parse_int(2)

    def u8(self) -> int:
        """Parse an 8-bit integer."""
        return self._parse_int(1)

    def remove_prefix(self, n: int) -> None:
        """Skip ``n`` bytes."""
        self._check_size(n)
        if self.error:
            return
        self._buffer.remove_prefix(n)


class NetUnparser:
    """Serializes integers in network byte order."""

    @staticmethod
    def u32(val: int) -> bytes:
        """Serialize the low 32 bits of ``val``."""
        return (val & 0xFFFFFFFF).to_bytes(4, "big")

    @staticmethod
    def u16(val: int) -> bytes:
        """Serialize the low 16 bits of ``val``."""
        return (val & 0xFFFF).to_bytes(2, "big")

    @staticmethod
    def u8(val: int) -> bytes:
        """Serialize the low 8 bits of ``val``."""
        return (val & 0xFF).to_bytes(1, "big")