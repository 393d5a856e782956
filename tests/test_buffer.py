import os

import pytest

from spongenet.buffer import Buffer, BufferList, BufferViewList


def test_default_buffer_is_empty():
    buf = Buffer()
    assert len(buf) == 0
    assert bytes(buf) == b""


def test_buffer_remove_prefix_and_access():
    buf = Buffer(b"hello")
    buf.remove_prefix(2)
    assert bytes(buf) == b"llo"
    assert buf.copy() == b"llo"
    assert buf.at(0) == ord("l")
    assert buf.view().tobytes() == b"llo"
    assert len(buf) == 3


def test_buffer_remove_whole_prefix():
    buf = Buffer(b"abc")
    buf.remove_prefix(3)
    assert len(buf) == 0
    assert buf.copy() == b""


def test_buffer_remove_too_much_raises():
    buf = Buffer(b"abc")
    with pytest.raises(IndexError):
        buf.remove_prefix(4)
    assert bytes(buf) == b"abc"


@pytest.mark.parametrize("index", [-1, 3, 10])
def test_buffer_at_out_of_range(index):
    with pytest.raises(IndexError):
        Buffer(b"abc").at(index)


def test_buffer_equality_with_bytes():
    assert Buffer(b"xyz") == b"xyz"
    assert Buffer(b"xyz") == Buffer(bytearray(b"xyz"))


def test_bufferlist_concatenate_round_trip():
    parts = [b"ab", b"cde", b"", b"f"]
    bl = BufferList()
    for part in parts:
        bl.append(BufferList(part))
    assert bl.concatenate() == b"".join(parts)
    assert len(bl) == sum(len(p) for p in parts)
    assert len(bl.buffers()) == len(parts)


@pytest.mark.parametrize("n", range(7))
def test_bufferlist_remove_prefix_matches_slice(n):
    parts = [b"ab", b"cde", b"f"]
    full = b"".join(parts)
    bl = BufferList()
    for part in parts:
        bl.append(part)
    bl.remove_prefix(n)
    assert bl.concatenate() == full[n:]
    assert len(bl) == len(full) - n


def test_bufferlist_remove_prefix_too_much():
    bl = BufferList(b"abc")
    bl.append(b"de")
    with pytest.raises(IndexError):
        bl.remove_prefix(6)


def test_bufferlist_does_not_alter_source_buffer():
    original = Buffer(b"payload")
    bl = BufferList(original)
    bl.remove_prefix(3)
    assert bytes(original) == b"payload"
    assert bl.concatenate() == b"payload"[3:]


def test_bufferlist_to_buffer():
    assert len(BufferList().to_buffer()) == 0
    assert BufferList(b"one").to_buffer() == b"one"
    bl = BufferList(b"one")
    bl.append(b"two")
    with pytest.raises(RuntimeError):
        bl.to_buffer()


def test_bufferviewlist_from_bufferlist():
    bl = BufferList(b"head")
    bl.append(b"body")
    views = BufferViewList(bl)
    assert len(views) == len(bl)
    views.remove_prefix(5)
    assert b"".join(bytes(v) for v in views.as_iovecs()) == bl.concatenate()[5:]


def test_bufferviewlist_from_bytes_and_error():
    views = BufferViewList(b"abcdef")
    views.remove_prefix(6)
    assert len(views) == 0
    with pytest.raises(IndexError):
        views.remove_prefix(1)


def test_bufferviewlist_iovecs_work_with_writev():
    bl = BufferList(b"first-")
    bl.append(b"second")
    views = BufferViewList(bl)
    r, w = os.pipe()
    try:
        written = os.writev(w, views.as_iovecs())
        data = os.read(r, 100)
    finally:
        os.close(r)
        os.close(w)
    assert written == len(bl)
    assert data == bl.concatenate()