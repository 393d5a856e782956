"""Waits for events on file descriptors and runs the matching callbacks."""

from __future__ import annotations

import select
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Callable, Optional

from .file_descriptor import FileDescriptor

Callback = Callable[[], None]
Interest = Callable[[], bool]


class Direction(IntEnum):
    """Whether a rule waits for its descriptor to become readable or writable."""

    IN = select.POLLIN
    OUT = select.POLLOUT


class Result(Enum):
    """The outcome of one call to :meth:`EventLoop.wait_next_event`."""

    SUCCESS = "success"
    TIMEOUT = "timeout"
    EXIT = "exit"


def _always_interested() -> bool:
    return True


@dataclass(eq=False)
class _Rule:
    fd: FileDescriptor
    direction: Direction
    callback: Callback
    interest: Interest
    cancel: Optional[Callback]

    def service_count(self) -> int:
        """How often the descriptor has been read or written, per the direction."""
        if self.direction is Direction.IN:
            return self.fd.read_count()
        return self.fd.write_count()


class EventLoop:
    """Polls a set of rules and calls back when their descriptors are ready.

    A rule is dropped (and its ``cancel`` callback run) when its descriptor
    is closed, reaches EOF while being read, or hangs up.
    """

    def __init__(self) -> None:
        self._rules: list[_Rule] = []

    def add_rule(
        self,
        fd: FileDescriptor,
        direction: Direction,
        callback: Callback,
        interest: Optional[Interest] = None,
        cancel: Optional[Callback] = None,
    ) -> None:
        """Call ``callback`` whenever ``fd`` is ready in ``direction``.

        ``interest`` is asked before every poll whether ``fd`` should be
        watched; ``cancel`` is called when the rule is dropped.
        """
        self._rules.append(
            _Rule(
                fd=fd.duplicate(),
                direction=Direction(direction),
                callback=callback,
                interest=_always_interested if interest is None else interest,
                cancel=cancel,
            )
        )

    def _drop(self, rule: _Rule) -> None:
        if rule.cancel is not None:
            rule.cancel()
        self._rules = [other for other in self._rules if other is not rule]

    def wait_next_event(self, timeout_ms: int) -> Result:
        """Poll once, waiting at most ``timeout_ms`` (negative: forever), and dispatch.

        Raises ``RuntimeError`` on an error reported for a polled descriptor,
        or when a callback neither read nor wrote its descriptor while its
        rule stays interested.
        """
        polled: list[tuple[_Rule, int]] = []
        something_to_poll = False

        for rule in list(self._rules):
            if (rule.direction is Direction.IN and rule.fd.eof()) or rule.fd.closed():
                self._drop(rule)
                continue
            if rule.interest():
                polled.append((rule, int(rule.direction)))
                something_to_poll = True
            else:
                polled.append((rule, 0))  # still registered so errors are reported

        if not something_to_poll:
            return Result.EXIT

        masks: dict[int, int] = {}
        for rule, events in polled:
            fd_num = rule.fd.fd_num()
            masks[fd_num] = masks.get(fd_num, 0) | events
        poller = select.poll()
        for fd_num, mask in masks.items():
            poller.register(fd_num, mask)

        try:
            ready = dict(poller.poll(timeout_ms))
            if not ready:
                return Result.TIMEOUT
        except InterruptedError:
            return Result.EXIT
        except OSError:
            ready = {}

        for rule, events in polled:
            revents = ready.get(rule.fd.fd_num(), 0)
            if revents & (select.POLLERR | select.POLLNVAL):
                raise RuntimeError("EventLoop: error on polled file descriptor")

            poll_ready = bool(revents & events)
            poll_hup = bool(revents & select.POLLHUP)
            if poll_hup and events and not poll_ready:
                # a hangup with nothing else to do: this descriptor is defunct
                self._drop(rule)
                continue

            if poll_ready:
                count_before = rule.service_count()
                rule.callback()
                if count_before == rule.service_count() and rule.interest():
                    raise RuntimeError(
                        "EventLoop: busy wait detected: callback did not read/write fd and is still interested"
                    )

        return Result.SUCCESS