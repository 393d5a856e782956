"""Error types, system-call checking, checksums and hex dumps."""

from __future__ import annotations

import functools
import os
import random
import sys
import time
from typing import Any, Callable, Optional, TextIO


class TaggedError(OSError):
    """An OS-level error carrying the name of what was attempted."""

    def __init__(self, attempt: str, code: int, message: Optional[str] = None) -> None:
        if message is None:
            message = os.strerror(code)
        super().__init__(code, message)
        self.attempt = attempt

    def __str__(self) -> str:
        return f"{self.attempt}: {self.strerror}"


class UnixError(TaggedError):
    """A failed system call and the errno it produced."""

    def __init__(self, attempt: str, error: int) -> None:
        super().__init__(attempt, error)


def system_call(attempt: str, func: Callable[..., Any], *args: Any, errno_mask: int = 0) -> Any:
    """Call ``func(*args)``, turning an ``OSError`` into a ``UnixError``.

    If the error's errno equals ``errno_mask``, ``None`` is returned instead.
    """
    try:
        return func(*args)
    except OSError as exc:
        if errno_mask and exc.errno == errno_mask:
            return None
        raise UnixError(attempt, exc.errno if exc.errno is not None else 0) from exc


def get_random_generator() -> random.Random:
    """Return a Mersenne Twister generator seeded with plenty of entropy."""
    return random.Random(int.from_bytes(os.urandom(624 * 4), "little"))


@functools.lru_cache(maxsize=None)
def _program_start_ns() -> int:
    return time.monotonic_ns()


def timestamp_ms() -> int:
    """Milliseconds elapsed since the first call."""
    start = _program_start_ns()
    return (time.monotonic_ns() - start) // 1_000_000


class InternetChecksum:
    """The Internet checksum, accumulated over any number of chunks."""

    def __init__(self, initial_sum: int = 0) -> None:
        self._sum = initial_sum & 0xFFFFFFFF
        self._parity = False

    def add(self, data) -> None:
        """Add bytes to the running sum."""
        total = self._sum
        parity = self._parity
        for byte in bytes(data):
            total += byte if parity else byte << 8
            parity = not parity
        self._sum = total & 0xFFFFFFFF
        self._parity = parity

    def value(self) -> int:
        """Return the checksum (host byte order)."""
        ret = self._sum
        while ret > 0xFFFF:
            ret = (ret >> 16) + (ret & 0xFFFF)
        return ~ret & 0xFFFF


def hexdump(data, indent: int = 0, file: Optional[TextIO] = None) -> None:
    """Write a hex dump of ``data`` to ``file`` (standard output by default)."""
    raw = bytes(data)
    pad = " " * indent
    out: list[str] = []
    chars: list[str] = []
    for printed, byte in enumerate(raw):
        if printed % 16 == 0:
            if printed:
                out.append("    " + ("".join(chars) or " ") + "\n")
                chars = []
            out.append(f"{pad}{printed:08x}:    ")
        elif printed % 2 == 0:
            out.append(" ")
        out.append(f"{byte:02x}")
        chars.append(chr(byte) if 0x20 <= byte < 0x7F else ".")
    remainder = (16 - len(raw) % 16) % 16
    out.append(" " * (2 * remainder + remainder // 2 + 4) + ("".join(chars) or " "))
    out.append("\n\n")
    stream = sys.stdout if file is None else file
    stream.write("".join(out))
    stream.flush()