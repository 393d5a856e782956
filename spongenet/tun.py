"""Handles to existing persistent Linux TUN and TAP devices."""

from __future__ import annotations

import fcntl
import os
import struct

from .file_descriptor import FileDescriptor
from .util import system_call

CLONEDEV = "/dev/net/tun"

IFNAMSIZ = 16
IFF_TUN = 0x0001
IFF_TAP = 0x0002
IFF_NO_PI = 0x1000
TUNSETIFF = 0x400454CA

_IFREQ = struct.Struct(f"{IFNAMSIZ}sH22x")


def _ifreq(devname: str, is_tun: bool) -> bytes:
    """Build the ``struct ifreq`` that attaches to ``devname``, without packet info."""
    name = devname.encode()[: IFNAMSIZ - 1]
    flags = (IFF_TUN if is_tun else IFF_TAP) | IFF_NO_PI
    return _IFREQ.pack(name, flags)


class TunTapFD(FileDescriptor):
    """A descriptor attached to an existing TUN (IP) or TAP (Ethernet) device.

    The device must already exist, e.g. created with
    ``ip tuntap add mode tun user <user> name <devname>``.
    """

    def __init__(self, devname: str, is_tun: bool) -> None:
        fd = system_call("open", os.open, CLONEDEV, os.O_RDWR)
        super().__init__(fd)
        try:
            system_call("ioctl", fcntl.ioctl, self.fd_num(), TUNSETIFF, _ifreq(devname, is_tun))
        except BaseException:
            self.close()
            raise


class TunFD(TunTapFD):
    """A descriptor for an existing TUN device, carrying IP datagrams."""

    def __init__(self, devname: str) -> None:
        super().__init__(devname, True)


class TapFD(TunTapFD):
    """A descriptor for an existing TAP device, carrying Ethernet frames."""

    def __init__(self, devname: str) -> None:
        super().__init__(devname, False)