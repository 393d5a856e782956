"""A reference-counted handle to a kernel file descriptor."""

from __future__ import annotations

import os
import sys
from typing import Optional, Union

from .buffer import Buffer, BufferList, BufferViewList, BytesLike
from .util import system_call

_MAX_READ = 1024 * 1024

Writable = Union[str, Buffer, BufferList, BufferViewList, BytesLike]


class _FDWrapper:
    """Owns a descriptor number; closes it when the last handle goes away."""

    __slots__ = ("fd", "eof", "closed", "read_count", "write_count")

    def __init__(self, fd: int) -> None:
        if fd < 0:
            raise RuntimeError(f"invalid fd number:{fd}")
        self.fd = fd
        self.eof = False
        self.closed = False
        self.read_count = 0
        self.write_count = 0

    def close(self) -> None:
        system_call("close", os.close, self.fd)
        self.eof = True
        self.closed = True

    def __del__(self) -> None:
        if getattr(self, "closed", True):
            return
        try:
            self.close()
        except Exception as exc:  # never raise from a finalizer
            print(f"Exception destructing FDWrapper: {exc}", file=sys.stderr)


def _as_view_list(data: Writable) -> BufferViewList:
    if isinstance(data, str):
        return BufferViewList(data.encode())
    if isinstance(data, BufferViewList):
        copied = BufferList()
        for view in data.as_iovecs():
            copied.append(view)
        return BufferViewList(copied)
    return BufferViewList(data)


class FileDescriptor:
    """A handle to a file descriptor that tracks EOF and read/write counts.

    Handles made with :meth:`duplicate` share the descriptor and its state;
    the descriptor is closed when the last handle is collected.
    """

    def __init__(self, fd: int) -> None:
        self._internal = _FDWrapper(fd)

    def duplicate(self) -> FileDescriptor:
        """Return another handle sharing this descriptor."""
        other = FileDescriptor.__new__(FileDescriptor)
        other._internal = self._internal
        return other

    def read(self, limit: Optional[int] = None) -> bytes:
        """Read up to ``limit`` bytes (at most 1 MiB); fewer may be returned."""
        size = _MAX_READ if limit is None else min(_MAX_READ, limit)
        if size < 0:
            raise ValueError("read limit must not be negative")
        data = system_call("read", os.read, self.fd_num(), size)
        if size > 0 and not data:
            self._internal.eof = True
        if len(data) > size:
            raise RuntimeError("read() read more than requested")
        self.register_read()
        return data

    def write(self, data: Writable, write_all: bool = True) -> int:
        """Write ``data``; with ``write_all``, keep going until all of it is written."""
        buffer = _as_view_list(data)
        total = 0
        while True:
            iovecs = [view for view in buffer.as_iovecs() if len(view)]
            if iovecs:
                written = system_call("writev", os.writev, self.fd_num(), iovecs)
            else:
                written = system_call("writev", os.write, self.fd_num(), b"")
            remaining = len(buffer)
            if written == 0 and remaining != 0:
                raise RuntimeError("write returned 0 given non-empty input buffer")
            if written > remaining:
                raise RuntimeError("write wrote more than length of input buffer")
            self.register_write()
            buffer.remove_prefix(written)
            total += written
            if not (write_all and len(buffer)):
                return total

    def close(self) -> None:
        """Close the underlying descriptor."""
        self._internal.close()

    def set_blocking(self, blocking_state: bool) -> None:
        """Make the descriptor blocking (True) or non-blocking (False)."""
        system_call("fcntl", os.set_blocking, self.fd_num(), blocking_state)

    def fileno(self) -> int:
        """The descriptor number, for ``select`` and friends."""
        return self._internal.fd

    def fd_num(self) -> int:
        """The descriptor number."""
        return self._internal.fd

    def eof(self) -> bool:
        """Whether a read has hit end of file."""
        return self._internal.eof

    def closed(self) -> bool:
        """Whether the descriptor has been closed."""
        return self._internal.closed

    def read_count(self) -> int:
        """Number of reads performed."""
        return self._internal.read_count

    def write_count(self) -> int:
        """Number of writes performed."""
        return self._internal.write_count

    def register_read(self) -> None:
        """Count one read."""
        self._internal.read_count += 1

    def register_write(self) -> None:
        """Count one write."""
        self._internal.write_count += 1

    def __enter__(self) -> FileDescriptor:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self.closed():
            self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(fd={self.fd_num()}, closed={self.closed()})"