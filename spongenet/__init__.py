"""Byte buffers, wire-format integer parsing, checksums, addresses, file descriptors, sockets, TUN/TAP devices and a poll-based event loop."""

__version__ = "0.1.0"