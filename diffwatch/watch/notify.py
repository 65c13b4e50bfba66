# Copyright Red Hat
#
# diffwatch/watch/notify.py - Diff watcher notification sources
#
# This file is part of the diffwatch project.
#
# SPDX-License-Identifier: Apache-2.0
"""
File system change notification sources.

A notification source delivers raw change events for a watched root, one
at a time, to a single consumer. Failures of the underlying watch
mechanism are delivered in-band as events with ``error`` set.
"""
from typing import Iterator, NamedTuple, Optional
from abc import ABC, abstractmethod
from enum import Enum
import threading
import logging

from watchfiles import Change, watch

from diffwatch import DEFAULT_DEBOUNCE_MS, DIFFWATCH_SUBSYSTEM_WATCH

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_watch(msg, *args, **kwargs):
    """A wrapper for watch subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": DIFFWATCH_SUBSYSTEM_WATCH}, **kwargs)


class EventKind(Enum):
    """
    Enum for kinds of file system change.
    """

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"


_CHANGE_TO_KIND = {
    Change.added: EventKind.ADDED,
    Change.modified: EventKind.MODIFIED,
    Change.deleted: EventKind.DELETED,
}


class RawEvent(NamedTuple):
    """
    A single change notification.
    """

    #: The changed path as reported by the source
    path: str
    #: The kind of change, or ``None`` for error events
    kind: Optional[EventKind] = None
    #: The failure of the watch mechanism, if any
    error: Optional[BaseException] = None


class Subscription:
    """
    Handle for an active subscription to a notification source.
    """

    def __init__(self, root: str, recursive: bool):
        self.root = root
        self.recursive = recursive
        #: Set to end the subscription
        self.stop_event = threading.Event()

    @property
    def active(self) -> bool:
        """``True`` until the subscription is cancelled."""
        return not self.stop_event.is_set()

    def __repr__(self):
        return (
            f"Subscription(root={self.root!r}, recursive={self.recursive}, "
            f"active={self.active})"
        )


class NotificationSource(ABC):
    """
    Base class for file system notification sources.
    """

    def subscribe(self, root: str, recursive: bool) -> Subscription:
        """
        Start watching ``root``.

        :param root: The directory to watch.
        :type root: ``str``
        :param recursive: Include subdirectories.
        :type recursive: ``bool``
        :returns: A handle for the new subscription.
        :rtype: ``Subscription``
        """
        _log_debug_watch("Subscribing to %s (recursive=%s)", root, recursive)
        return Subscription(root, recursive)

    def unsubscribe(self, subscription: Subscription):
        """
        Cancel ``subscription``. Iteration of ``events()`` for the
        subscription ends promptly.

        :param subscription: The subscription to cancel.
        :type subscription: ``Subscription``
        """
        _log_debug_watch("Unsubscribing from %s", subscription.root)
        subscription.stop_event.set()

    @abstractmethod
    def events(self, subscription: Subscription) -> Iterator[RawEvent]:
        """
        Yield events for ``subscription`` until it is cancelled or the
        watch mechanism fails. A failure is yielded as a final event with
        ``error`` set.

        :param subscription: The subscription to deliver events for.
        :type subscription: ``Subscription``
        :returns: An iterator of ``RawEvent`` objects.
        :rtype: ``Iterator[RawEvent]``
        """


class WatchfilesSource(NotificationSource):
    """
    Notification source backed by the ``watchfiles`` package.
    """

    def __init__(self, debounce: int = DEFAULT_DEBOUNCE_MS):
        """
        Initialise a new ``WatchfilesSource``.

        :param debounce: Time in milliseconds to group changes before
                         delivery.
        :type debounce: ``int``
        """
        self.debounce = debounce

    def events(self, subscription: Subscription) -> Iterator[RawEvent]:
        try:
            for changes in watch(
                subscription.root,
                watch_filter=None,
                debounce=self.debounce,
                stop_event=subscription.stop_event,
                recursive=subscription.recursive,
                raise_interrupt=False,
            ):
                for change, path in sorted(changes, key=lambda c: (c[1], c[0])):
                    if not subscription.active:
                        return
                    yield RawEvent(path, _CHANGE_TO_KIND.get(change))
        except (OSError, RuntimeError) as err:
            _log_debug_watch("Watch of %s failed: %s", subscription.root, err)
            yield RawEvent(subscription.root, None, err)
