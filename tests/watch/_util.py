# Copyright Red Hat
#
# tests/watch/_util.py - Diff watcher core test utilities
#
# This file is part of the diffwatch project.
#
# SPDX-License-Identifier: Apache-2.0
import logging

from diffwatch.watch.notify import NotificationSource, RawEvent, EventKind

log = logging.getLogger()


class FakeSource(NotificationSource):
    """
    A notification source delivering a scripted list of events.

    Items in ``script`` may be ``RawEvent`` objects or callables taking
    no arguments and returning a ``RawEvent`` (or ``None`` to deliver
    nothing), which allows a test to modify files between events.
    """

    def __init__(self, script=()):
        self.script = list(script)
        self.subscriptions = []
        self.unsubscribed = []

    def subscribe(self, root, recursive):
        subscription = super().subscribe(root, recursive)
        self.subscriptions.append(subscription)
        return subscription

    def unsubscribe(self, subscription):
        self.unsubscribed.append(subscription)
        super().unsubscribe(subscription)

    def events(self, subscription):
        for item in self.script:
            if not subscription.active:
                return
            event = item() if callable(item) else item
            if event is None:
                continue
            log.debug("FakeSource delivering %s", event)
            yield event


def modified(path):
    """Return a ``MODIFIED`` event for ``path``."""
    return RawEvent(path, EventKind.MODIFIED)


class RecordingObserver:
    """
    An observer recording the path and history length of each call.
    """

    def __init__(self, name="recorder", calls=None):
        self.__name__ = name
        self.calls = calls if calls is not None else []

    def __call__(self, path, store_view):
        self.calls.append((self.__name__, path, len(store_view.history_of(path))))
