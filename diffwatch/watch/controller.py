# Copyright Red Hat
#
# diffwatch/watch/controller.py - Diff watcher controller
#
# This file is part of the diffwatch project.
#
# SPDX-License-Identifier: Apache-2.0
"""
The watch controller: ties change notifications, the snapshot store and
observer dispatch together.
"""
from typing import Iterable, Optional
from pathlib import Path
from enum import Enum
import threading
import logging
import os

from diffwatch import (
    DIFFWATCH_SUBSYSTEM_WATCH,
    DiffwatchNotifyError,
    DiffwatchStateError,
    bool_to_yes_no,
)

from .dispatch import Dispatcher, Observer
from .filetypes import FileTypeDetector
from .notify import NotificationSource, RawEvent, Subscription, WatchfilesSource
from .options import WatchOptions
from .snapshots import Snapshot, SnapshotStore, StoreView
from .suffix import SuffixFilter
from .treewalk import is_excluded, list_files, relative_path

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_watch(msg, *args, **kwargs):
    """A wrapper for watch subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": DIFFWATCH_SUBSYSTEM_WATCH}, **kwargs)


class WatchState(Enum):
    """
    Enum for watch controller states.
    """

    IDLE = "idle"
    SCANNING = "scanning"
    WATCHING = "watching"
    STOPPED = "stopped"


class WatchController:
    """
    Watch a directory tree, record content snapshots of matching files and
    notify observers of each accepted change.

    Controller states move ``IDLE`` -> (``SCANNING``) -> ``WATCHING`` ->
    ``STOPPED``. ``STOPPED`` is terminal.
    """

    def __init__(
        self,
        options: Optional[WatchOptions] = None,
        source: Optional[NotificationSource] = None,
        observers: Iterable[Observer] = (),
    ):
        """
        Initialise a new ``WatchController``. No I/O is performed until
        ``start()`` or ``watch()`` is called.

        :param options: Options to control this ``WatchController``.
        :type options: ``Optional[WatchOptions]``
        :param source: The notification source to consume (defaults to a
                       ``WatchfilesSource``).
        :type source: ``Optional[NotificationSource]``
        :param observers: Observers to register, in invocation order.
        :type observers: ``Iterable[Observer]``
        :raises: ``DiffwatchConfigError`` if ``options`` are invalid.
        """
        options = options or WatchOptions()
        options.validate()

        self.options: WatchOptions = options
        self.root: str = options.root
        self.suffix_filter = SuffixFilter(
            options.suffixes, ignore_case=options.ignore_case
        )
        self.store = SnapshotStore(options.max_history)
        self.dispatcher = Dispatcher(observers)
        self.file_type_detector = FileTypeDetector(options.use_magic_file_type)
        self.source: NotificationSource = source or WatchfilesSource(
            debounce=options.debounce
        )
        self._subscription: Optional[Subscription] = None
        self._state = WatchState.IDLE
        self._dispatching = False
        # Serializes event handling against stop() from other threads.
        self._lock = threading.RLock()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.stop()

    @property
    def state(self) -> WatchState:
        """The current controller state."""
        return self._state

    @property
    def store_view(self) -> StoreView:
        """Read-only access to the snapshot store."""
        return self.store.view()

    def add_suffixes(self, suffixes: Iterable[str]):
        """
        Accept additional file suffixes.

        :param suffixes: Suffixes to add (without a leading dot).
        :type suffixes: ``Iterable[str]``
        """
        self.suffix_filter.add(suffixes)

    def add_observers(self, *observers: Observer):
        """
        Register ``observers`` after any already registered.
        """
        self.dispatcher.add_observers(*observers)

    def set_observers(self, observers: Iterable[Observer]):
        """
        Replace the registered observers with ``observers``.
        """
        self.dispatcher.set_observers(observers)

    def _check_state(self, *allowed: WatchState, action: str):
        if self._state not in allowed:
            raise DiffwatchStateError(
                f"Cannot {action} in state '{self._state.value}'"
            )

    def canonical_path(self, path: str) -> str:
        """
        Return the canonical form of a path reported by the notification
        source. Relative paths are taken relative to the watch root.

        :param path: The reported path.
        :type path: ``str``
        :returns: The root-relative path with any "./" marker removed.
        :rtype: ``str``
        """
        if not os.path.isabs(path):
            path = os.path.join(self.root, path)
        return relative_path(path, self.root)

    def _read_content(self, rel_path: str) -> Optional[str]:
        """
        Read the full text content of ``rel_path``.

        :returns: The content, or ``None`` if the file could not be read
                  or is binary.
        """
        file_path = Path(self.root) / rel_path
        try:
            file_type_info = self.file_type_detector.detect_file_type(file_path)
            if file_type_info.is_binary:
                _log_debug_watch("Skipping binary file '%s'", rel_path)
                return None
            with open(
                file_path, "r", encoding=file_type_info.read_encoding, errors="replace"
            ) as fp:
                return fp.read()
        except (OSError, LookupError, UnicodeError) as err:
            _log_debug_watch("Dropping change for '%s': %s", rel_path, err)
            return None

    def _capture(self, rel_path: str) -> Optional[Snapshot]:
        """
        Filter, read and record one file.

        :returns: The new ``Snapshot`` or ``None`` if the path was
                  filtered or could not be read.
        """
        if not self.suffix_filter.accept(rel_path):
            return None
        if is_excluded(rel_path, self.options.exclude_patterns):
            return None
        content = self._read_content(rel_path)
        if content is None:
            return None
        return self.store.append(rel_path, content)

    def pre_read(self) -> int:
        """
        Record an initial snapshot of every matching regular file below
        the watch root, then subscribe to the notification source.

        No observers are notified during the scan.

        :returns: The number of files recorded.
        :rtype: ``int``
        :raises: ``DiffwatchStateError`` if the controller is not idle.
        """
        with self._lock:
            self._check_state(WatchState.IDLE, action="pre-read files")
            self._state = WatchState.SCANNING
            _log_info("Scanning %s for initial file contents", self.root)

            count = 0
            for entry in list_files(
                self.root,
                recursive=self.options.recursive,
                exclude_patterns=self.options.exclude_patterns,
            ):
                if not entry.is_regular:
                    continue
                if self._capture(relative_path(entry.path, self.root)):
                    count += 1

            _log_info("Recorded initial snapshots of %d files", count)
            self._subscribe()
            return count

    def _subscribe(self):
        self._subscription = self.source.subscribe(self.root, self.options.recursive)
        self._state = WatchState.WATCHING
        _log_info(
            "Watching %s (recursive=%s, suffixes=%s)",
            self.root,
            bool_to_yes_no(self.options.recursive),
            ",".join(sorted(self.suffix_filter.suffixes)),
        )

    def start(self):
        """
        Leave the ``IDLE`` state: pre-read files if configured, then
        subscribe to the notification source.

        :raises: ``DiffwatchStateError`` if the controller is not idle.
        """
        with self._lock:
            self._check_state(WatchState.IDLE, action="start watching")
            if self.options.pre_read:
                self.pre_read()
            else:
                self._subscribe()

    def on_event(self, event: RawEvent) -> bool:
        """
        Handle one raw notification.

        :param event: The event to handle.
        :type event: ``RawEvent``
        :returns: ``True`` if the event was recorded, or ``False`` if it
                  was filtered, unreadable or arrived when not watching.
        :rtype: ``bool``
        :raises: ``DiffwatchNotifyError`` if the event reports a failure of
                 the notification source. The controller is stopped first.
        """
        with self._lock:
            if self._state != WatchState.WATCHING:
                _log_debug_watch(
                    "Ignoring event for '%s' in state '%s'",
                    event.path,
                    self._state.value,
                )
                return False

            if event.error is not None:
                _log_error("Error watching %s: %s", self.root, event.error)
                self.stop()
                raise DiffwatchNotifyError(
                    f"Watching {self.root} failed: {event.error}"
                ) from event.error

            rel_path = self.canonical_path(event.path)
            snapshot = self._capture(rel_path)
            if snapshot is None:
                return False

            _log_debug_watch(
                "Recorded %s event for '%s'",
                event.kind.value if event.kind else "unknown",
                rel_path,
            )
            if self.options.show:
                self._dispatching = True
                try:
                    self.dispatcher.notify(rel_path, self.store_view)
                finally:
                    self._dispatching = False
                    # An observer may have stopped the controller.
                    if self._state == WatchState.STOPPED:
                        self._release()
            return True

    def watch(self):
        """
        Consume events from the notification source until the controller
        is stopped or the source ends. Calls ``start()`` first if the
        controller is idle.

        :raises: ``DiffwatchNotifyError`` if the notification source fails.
        :raises: ``DiffwatchStateError`` if the controller was stopped.
        """
        if self._state == WatchState.IDLE:
            self.start()
        self._check_state(WatchState.WATCHING, action="watch")

        try:
            for event in self.source.events(self._subscription):
                if self._state != WatchState.WATCHING:
                    break
                self.on_event(event)
        finally:
            self.stop()

    def stop(self):
        """
        Stop watching: unsubscribe from the notification source and release
        all snapshot histories. Events delivered after this call are not
        processed. Calling ``stop()`` more than once has no effect.

        When called by an observer, the histories are released after the
        remaining observers for the current change have run.
        """
        with self._lock:
            if self._state == WatchState.STOPPED:
                return
            self._state = WatchState.STOPPED
            if self._subscription is not None:
                self.source.unsubscribe(self._subscription)
                self._subscription = None
            if not self._dispatching:
                self._release()

    def _release(self):
        self.store.clear()
        _log_info("good bye")
