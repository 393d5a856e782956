import errno
import os

import pytest

from spongenet.buffer import Buffer, BufferList, BufferViewList
from spongenet.file_descriptor import FileDescriptor
from spongenet.util import UnixError


@pytest.fixture
def pipe():
    r, w = os.pipe()
    reader, writer = FileDescriptor(r), FileDescriptor(w)
    yield reader, writer
    for fd in (reader, writer):
        if not fd.closed():
            fd.close()


def test_write_then_read(pipe):
    reader, writer = pipe
    assert writer.write(b"hello") == 5
    assert reader.read() == b"hello"
    assert writer.write_count() == 1
    assert reader.read_count() == 1


def test_write_str_encodes(pipe):
    reader, writer = pipe
    writer.write("cat")
    assert reader.read(3) == b"cat"


def test_read_limit(pipe):
    reader, writer = pipe
    writer.write(b"abcdef")
    assert reader.read(2) == b"ab"
    assert reader.read(10) == b"cdef"


def test_write_buffer_and_buffer_list(pipe):
    reader, writer = pipe
    bl = BufferList(b"ab")
    bl.append(b"cd")
    assert writer.write(bl) == 4
    assert writer.write(Buffer(b"ef")) == 2
    assert reader.read() == b"abcdef"


def test_write_does_not_consume_view_list(pipe):
    reader, writer = pipe
    views = BufferViewList(b"xyz")
    writer.write(views)
    assert len(views) == 3
    assert reader.read() == b"xyz"


def test_eof_after_writer_closes(pipe):
    reader, writer = pipe
    writer.close()
    assert reader.eof() is False
    assert reader.read() == b""
    assert reader.eof() is True


def test_zero_limit_read_does_not_set_eof(pipe):
    reader, writer = pipe
    writer.close()
    assert reader.read(0) == b""
    assert reader.eof() is False


def test_close_sets_flags(pipe):
    reader, _ = pipe
    reader.close()
    assert reader.closed() is True
    assert reader.eof() is True


def test_close_twice_raises(pipe):
    reader, _ = pipe
    reader.close()
    with pytest.raises(UnixError) as info:
        reader.close()
    assert info.value.errno == errno.EBADF
    assert info.value.attempt == "close"


def test_duplicate_shares_state(pipe):
    reader, writer = pipe
    dup = writer.duplicate()
    assert dup.fd_num() == writer.fd_num()
    dup.write(b"z")
    assert writer.write_count() == 1
    writer.close()
    assert dup.closed() is True
    assert reader.read() == b"z"


def test_negative_fd_rejected():
    with pytest.raises(RuntimeError, match="invalid fd number"):
        FileDescriptor(-1)


def test_nonblocking_read_without_data_raises_eagain(pipe):
    reader, _ = pipe
    reader.set_blocking(False)
    with pytest.raises(UnixError) as info:
        reader.read()
    assert info.value.errno in (errno.EAGAIN, errno.EWOULDBLOCK)
    assert os.get_blocking(reader.fd_num()) is False
    reader.set_blocking(True)
    assert os.get_blocking(reader.fd_num()) is True


def test_context_manager_closes():
    r, w = os.pipe()
    writer = FileDescriptor(w)
    with FileDescriptor(r) as reader:
        assert reader.fileno() == r
    assert reader.closed() is True
    writer.close()
    assert writer.closed() is True


def test_register_counts(pipe):
    reader, _ = pipe
    reader.register_read()
    reader.register_write()
    reader.register_write()
    assert reader.read_count() == 1
    assert reader.write_count() == 2


def test_write_to_closed_reader_raises(pipe):
    reader, writer = pipe
    reader.close()
    with pytest.raises(UnixError) as info:
        writer.write(b"data")
    assert info.value.errno == errno.EPIPE