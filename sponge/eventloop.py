"""A poll-based loop that runs callbacks when file descriptors are ready."""

from __future__ import annotations

import select
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, IntEnum

from .file_descriptor import FileDescriptor

Callback = Callable[[], None]
Interest = Callable[[], bool]

_ERROR_EVENTS = select.POLLERR | select.POLLNVAL
_ALWAYS_REPORTED = select.POLLERR | select.POLLHUP | select.POLLNVAL


class Direction(IntEnum):
    """Whether a rule waits for its descriptor to be readable or writable."""

    In = select.POLLIN
    Out = select.POLLOUT


class Result(Enum):
    """Outcome of one call to :meth:`EventLoop.wait_next_event`."""

    Success = "success"
    Timeout = "timeout"
    Exit = "exit"


@dataclass(eq=False)
class _Rule:
    fd: FileDescriptor
    direction: Direction
    callback: Callback
    interest: Interest
    cancel: Callback

    def service_count(self) -> int:
        if self.direction is Direction.In:
            return self.fd.read_count()
        return self.fd.write_count()


def _always_interested() -> bool:
    return True


def _do_nothing() -> None:
    return None


class EventLoop:
    """Waits for events on file descriptors and runs the matching callbacks.

    Every callback must read from or write to its descriptor, or the rule's
    interest must become false; otherwise a busy wait is reported.
    """

    def __init__(self) -> None:
        self._rules: list[_Rule] = []

    def add_rule(
        self,
        fd: FileDescriptor,
        direction: Direction,
        callback: Callback,
        interest: Interest | None = None,
        cancel: Callback | None = None,
    ) -> None:
        """Run ``callback`` whenever ``fd`` is ready in ``direction`` and ``interest()`` is true.

        ``cancel`` is called when the rule is dropped (EOF, closure or hangup).
        """
        self._rules.append(
            _Rule(
                fd.duplicate(),
                Direction(direction),
                callback,
                interest or _always_interested,
                cancel or _do_nothing,
            )
        )

    def _drop(self, rule: _Rule) -> None:
        rule.cancel()
        if rule in self._rules:
            self._rules.remove(rule)

    def wait_next_event(self, timeout_ms: int) -> Result:
        """Poll once (negative ``timeout_ms`` waits forever) and run ready callbacks."""
        entries: list[tuple[_Rule, int]] = []
        something_to_poll = False
        for rule in list(self._rules):
            if (rule.direction is Direction.In and rule.fd.eof()) or rule.fd.closed():
                self._drop(rule)
                continue
            if rule.interest():
                events = int(rule.direction)
                something_to_poll = True
            else:
                events = 0  # still registered so that errors are reported
            entries.append((rule, events))

        if not something_to_poll:
            return Result.Exit

        masks: dict[int, int] = {}
        for rule, events in entries:
            fd_num = rule.fd.fd_num()
            masks[fd_num] = masks.get(fd_num, 0) | events
        poller = select.poll()
        for fd_num, mask in masks.items():
            poller.register(fd_num, mask)

        try:
            ready = poller.poll(timeout_ms)
        except InterruptedError:
            return Result.Exit
        except OSError:
            ready = []
        else:
            if not ready:
                return Result.Timeout

        revents_by_fd = dict(ready)
        for rule, events in entries:
            revents = revents_by_fd.get(rule.fd.fd_num(), 0) & (events | _ALWAYS_REPORTED)
            if revents & _ERROR_EVENTS:
                raise RuntimeError("EventLoop: error on polled file descriptor")

            poll_ready = bool(revents & events)
            poll_hup = bool(revents & select.POLLHUP)
            if poll_hup and events and not poll_ready:
                # Only a hangup: nothing more will ever be readable or writable.
                self._drop(rule)
                continue

            if poll_ready:
                count_before = rule.service_count()
                rule.callback()
                if count_before == rule.service_count() and rule.interest():
                    raise RuntimeError(
                        "EventLoop: busy wait detected: callback did not read/write fd "
                        "and is still interested"
                    )

        return Result.Success