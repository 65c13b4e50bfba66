# Copyright Red Hat
#
# tests/watch/test_notify.py - Notification source tests
#
# This file is part of the diffwatch project.
#
# SPDX-License-Identifier: Apache-2.0
from unittest.mock import patch
import unittest
import logging

from watchfiles import Change

from diffwatch.watch.notify import (
    EventKind,
    RawEvent,
    Subscription,
    WatchfilesSource,
)

log = logging.getLogger()


class SubscriptionTests(unittest.TestCase):
    def test_active_until_unsubscribed(self):
        source = WatchfilesSource()
        subscription = source.subscribe("/watched", True)
        self.assertIsInstance(subscription, Subscription)
        self.assertTrue(subscription.active)
        source.unsubscribe(subscription)
        self.assertFalse(subscription.active)

    def test_repr(self):
        subscription = Subscription("/watched", False)
        self.assertEqual(
            repr(subscription),
            "Subscription(root='/watched', recursive=False, active=True)",
        )


class WatchfilesSourceTests(unittest.TestCase):
    def setUp(self):
        log.debug("Preparing %s", self._testMethodName)
        self.source = WatchfilesSource(debounce=10)
        self.subscription = self.source.subscribe("/watched", True)

    @patch("diffwatch.watch.notify.watch")
    def test_events_sorted_per_batch(self, watch_mock):
        watch_mock.return_value = iter(
            [
                {(Change.modified, "/watched/b.txt"), (Change.added, "/watched/a.txt")},
                {(Change.deleted, "/watched/c.txt")},
            ]
        )
        events = list(self.source.events(self.subscription))
        self.assertEqual(
            events,
            [
                RawEvent("/watched/a.txt", EventKind.ADDED),
                RawEvent("/watched/b.txt", EventKind.MODIFIED),
                RawEvent("/watched/c.txt", EventKind.DELETED),
            ],
        )

    @patch("diffwatch.watch.notify.watch")
    def test_watch_arguments(self, watch_mock):
        watch_mock.return_value = iter([])
        list(self.source.events(self.subscription))
        watch_mock.assert_called_once_with(
            "/watched",
            watch_filter=None,
            debounce=10,
            stop_event=self.subscription.stop_event,
            recursive=True,
            raise_interrupt=False,
        )

    @patch("diffwatch.watch.notify.watch")
    def test_stops_when_unsubscribed(self, watch_mock):
        source = self.source
        subscription = self.subscription

        def batches():
            yield {(Change.modified, "/watched/a.txt")}
            source.unsubscribe(subscription)
            yield {(Change.modified, "/watched/b.txt")}

        watch_mock.return_value = batches()
        events = list(source.events(subscription))
        self.assertEqual(events, [RawEvent("/watched/a.txt", EventKind.MODIFIED)])

    @patch("diffwatch.watch.notify.watch")
    def test_failure_is_error_event(self, watch_mock):
        err = FileNotFoundError("no such directory")
        watch_mock.side_effect = err
        events = list(self.source.events(self.subscription))
        self.assertEqual(len(events), 1)
        self.assertEqual(events[0].path, "/watched")
        self.assertIsNone(events[0].kind)
        self.assertIs(events[0].error, err)
