# spongenet

Small pieces for writing user-space network code on Linux.

| Module | What it holds |
| --- | --- |
| `spongenet.buffer` | `Buffer`, `BufferList` and `BufferViewList`. These are read-only byte buffers that can drop bytes from the front without copying. |
| `spongenet.parser` | `NetParser` reads big-endian 8/16/32-bit integers. `NetUnparser` writes them. `ParseResult` gives the parse outcome and `as_string` gives its name. |
| `spongenet.util` | `InternetChecksum`, `hexdump`, `timestamp_ms`, `get_random_generator`, and `system_call`, which raises `UnixError` (a `TaggedError`, itself an `OSError`) when the wrapped call fails. |
| `spongenet.address` | `Address` is an IPv4 address and port. It supports numeric construction, name resolution (`Address.resolve`) and conversions. |
| `spongenet.file_descriptor` | `FileDescriptor` is a shared handle on an OS descriptor. It counts reads and writes and tracks EOF. It is also a context manager. |
| `spongenet.sockets` | `UDPSocket` (with `ReceivedDatagram`), `TCPSocket` and `LocalStreamSocket`. |
| `spongenet.tun` | `TunFD` and `TapFD` attach to existing Linux TUN/TAP devices. |
| `spongenet.eventloop` | `EventLoop` runs callbacks when descriptors become readable or writable. `Direction` and `Result` go with it. |

## Installation

```
pip install .
```

## Examples

Compute an Internet checksum:

```python
from spongenet.util import InternetChecksum

cksum = InternetChecksum()
cksum.add(b"\x45\x00\x00\x1c")
print(hex(cksum.value()))
```

Parse and build wire-format integers:

```python
from spongenet.buffer import Buffer
from spongenet.parser import NetParser, NetUnparser, ParseResult

data = NetUnparser.u16(0x1234) + NetUnparser.u32(7)
p = NetParser(Buffer(data))
assert p.u16() == 0x1234 and p.u32() == 7 and not p.error
p.u8()                      # nothing left: records an error and returns 0
assert p.result is ParseResult.PACKET_TOO_SHORT
```

Send a datagram:

```python
from spongenet.address import Address
from spongenet.sockets import UDPSocket

sock = UDPSocket()
sock.sendto(Address("127.0.0.1", 9000), b"hello")
```

Wait for a pipe to become readable:

```python
import os
from spongenet.eventloop import Direction, EventLoop, Result
from spongenet.file_descriptor import FileDescriptor

r, w = os.pipe()
reader, writer = FileDescriptor(r), FileDescriptor(w)
writer.write(b"ping")

received = []
loop = EventLoop()
loop.add_rule(reader, Direction.IN, lambda: received.append(reader.read()))
assert loop.wait_next_event(1000) is Result.SUCCESS
assert received == [b"ping"]
```

`EventLoop` raises `RuntimeError` in one case: a callback neither reads nor writes its descriptor, and its rule stays interested. This guards against busy loops.

## Notes

- The package targets Linux. `EventLoop` uses `select.poll`. `TunFD` and `TapFD` need `/dev/net/tun` and a device that already exists and that the user may open.
- `hexdump(data, indent=0, file=None)` writes to standard output unless `file` is given.
- `system_call(attempt, func, *args, errno_mask=0)` returns `None` when the call fails with exactly `errno_mask`.

## What it does not do

This package holds building blocks only. It has no TCP implementation: there is no segment format, no sender, receiver or connection state machine, and no stream reassembly. It also has no command-line program.

## Tests

```
pip install .[test]
pytest
```