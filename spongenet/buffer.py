"""Byte buffers that can cheaply discard bytes from the front."""

from __future__ import annotations

from collections import deque
from typing import Iterator, Union

BytesLike = Union[bytes, bytearray, memoryview]


def _byte_view(data: BytesLike) -> memoryview:
    view = memoryview(data)
    if view.ndim != 1 or view.format != "B":
        view = view.cast("B")
    return view


class Buffer:
    """A read-only byte string that can discard bytes from the front.

    Copies of a buffer share the underlying storage but track their own
    starting offset.
    """

    __slots__ = ("_storage", "_offset")

    def __init__(self, data: BytesLike = b"") -> None:
        self._storage = bytes(data)
        self._offset = 0

    def _clone(self) -> Buffer:
        other = Buffer.__new__(Buffer)
        other._storage = self._storage
        other._offset = self._offset
        return other

    def view(self) -> memoryview:
        """Return a read-only view of the remaining bytes."""
        return memoryview(self._storage)[self._offset :]

    def at(self, n: int) -> int:
        """Return the byte at position ``n`` of the remaining bytes."""
        if not 0 <= n < len(self):
            raise IndexError(f"Buffer.at: index {n} out of range")
        return self._storage[self._offset + n]

    def copy(self) -> bytes:
        """Return the remaining bytes as a new ``bytes`` object."""
        return self._storage[self._offset :]

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes."""
        if n < 0 or n > len(self):
            raise IndexError("Buffer::remove_prefix")
        self._offset += n
        if self._offset == len(self._storage):
            self._storage = b""
            self._offset = 0

    def __len__(self) -> int:
        return len(self._storage) - self._offset

    def __bytes__(self) -> bytes:
        return self.copy()

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Buffer):
            return self.copy() == other.copy()
        if isinstance(other, (bytes, bytearray, memoryview)):
            return self.copy() == bytes(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Buffer({self.copy()!r})"


class BufferList:
    """A discontiguous byte string made of several buffers."""

    def __init__(self, data: Union[None, Buffer, "BufferList", BytesLike] = None) -> None:
        self._buffers: deque[Buffer] = deque()
        if data is None:
            return
        if isinstance(data, BufferList):
            self._buffers.extend(buf._clone() for buf in data._buffers)
        elif isinstance(data, Buffer):
            self._buffers.append(data._clone())
        else:
            self._buffers.append(Buffer(data))

    def buffers(self) -> tuple[Buffer, ...]:
        """Return copies of the underlying buffers, in order."""
        return tuple(buf._clone() for buf in self._buffers)

    def __iter__(self) -> Iterator[Buffer]:
        return iter(self.buffers())

    def append(self, other: Union["BufferList", Buffer, BytesLike]) -> None:
        """Append the buffers of ``other``."""
        if not isinstance(other, BufferList):
            other = BufferList(other)
        self._buffers.extend(buf._clone() for buf in other._buffers)

    def to_buffer(self) -> Buffer:
        """Return the contents as one buffer; the list must be contiguous."""
        if not self._buffers:
            return Buffer()
        if len(self._buffers) == 1:
            return self._buffers[0]._clone()
        raise RuntimeError(
            "BufferList: please use concatenate() to combine a multi-Buffer BufferList into one Buffer"
        )

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes, dropping buffers that become empty."""
        while n > 0:
            if not self._buffers:
                raise IndexError("BufferList::remove_prefix")
            front = self._buffers[0]
            if n < len(front):
                front.remove_prefix(n)
                n = 0
            else:
                n -= len(front)
                self._buffers.popleft()

    def __len__(self) -> int:
        return sum(len(buf) for buf in self._buffers)

    def concatenate(self) -> bytes:
        """Return all bytes joined into one ``bytes`` object."""
        return b"".join(buf.copy() for buf in self._buffers)

    def __repr__(self) -> str:
        return f"BufferList({[buf.copy() for buf in self._buffers]!r})"


class BufferViewList:
    """A non-owning view of a discontiguous byte string."""

    def __init__(self, data: Union[Buffer, BufferList, BytesLike]) -> None:
        self._views: deque[memoryview] = deque()
        if isinstance(data, BufferList):
            self._views.extend(buf.view() for buf in data.buffers())
        elif isinstance(data, Buffer):
            self._views.append(data.view())
        else:
            self._views.append(_byte_view(data))

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes of the view."""
        while n > 0:
            if not self._views:
                raise IndexError("BufferListView::remove_prefix")
            front = self._views[0]
            if n < len(front):
                self._views[0] = front[n:]
                n = 0
            else:
                n -= len(front)
                self._views.popleft()

    def __len__(self) -> int:
        return sum(len(view) for view in self._views)

    def as_iovecs(self) -> list[memoryview]:
        """Return the views as a list suitable for ``os.writev`` or ``socket.sendmsg``."""
        return list(self._views)