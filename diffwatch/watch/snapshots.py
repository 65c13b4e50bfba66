# Copyright Red Hat
#
# diffwatch/watch/snapshots.py - Diff watcher snapshot store
#
# This file is part of the diffwatch project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Bounded per-file content snapshot histories.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterator, Optional, Tuple
import logging

from diffwatch import (
    DEFAULT_MAX_HISTORY,
    DIFFWATCH_SUBSYSTEM_STORE,
    TIMESTAMP_FORMAT,
    DiffwatchConfigError,
)

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_store(msg, *args, **kwargs):
    """A wrapper for store subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": DIFFWATCH_SUBSYSTEM_STORE}, **kwargs)


@dataclass(frozen=True)
class Snapshot:
    """
    An immutable capture of one file's content.
    """

    #: Canonical (root-relative) path of the file
    path: str
    #: Full text content at capture time
    content: str
    #: Time of capture
    captured_at: datetime

    @property
    def timestamp(self) -> str:
        """
        The capture time formatted for display.

        :returns: A ``TIMESTAMP_FORMAT`` string in local time.
        :rtype: ``str``
        """
        return self.captured_at.strftime(TIMESTAMP_FORMAT)

    def __str__(self):
        return (
            f"path: {self.path}, captured_at: {self.timestamp}, "
            f"size: {len(self.content)}"
        )


class VersionHistory:
    """
    The ordered, bounded sequence of snapshots kept for one path.

    Entries are held oldest first. When appending would exceed
    ``max_history`` the history collapses to the most recent existing
    snapshot before the new one is added: this is not a sliding window.
    """

    def __init__(self, path: str, max_history: int = DEFAULT_MAX_HISTORY):
        if max_history < 1:
            raise DiffwatchConfigError(
                f"Invalid history limit: {max_history} (must be positive)"
            )
        self.path = path
        self.max_history = max_history
        self._entries: Tuple[Snapshot, ...] = ()

    def __len__(self):
        return len(self._entries)

    def __iter__(self) -> Iterator[Snapshot]:
        return iter(self._entries)

    def __getitem__(self, index):
        return self._entries[index]

    @property
    def entries(self) -> Tuple[Snapshot, ...]:
        """The snapshots in this history, oldest first."""
        return self._entries

    def append(self, snapshot: Snapshot) -> bool:
        """
        Add ``snapshot`` to this history, collapsing it first if needed.

        :param snapshot: The snapshot to add.
        :type snapshot: ``Snapshot``
        :returns: ``True`` if the history was collapsed.
        :rtype: ``bool``
        """
        collapsed = False
        if len(self._entries) + 1 > self.max_history:
            # With a limit of one there is no room for the previous entry.
            keep = self._entries[-1:] if self.max_history > 1 else ()
            _log_debug_store(
                "Collapsing history for %s (%d entries, limit %d)",
                self.path,
                len(self._entries),
                self.max_history,
            )
            self._entries = keep
            collapsed = True
        self._entries = self._entries + (snapshot,)
        return collapsed

    def latest_two(self) -> Optional[Tuple[Snapshot, Snapshot]]:
        """
        Return the two most recent snapshots as ``(older, newer)``, or
        ``None`` if fewer than two exist.
        """
        if len(self._entries) < 2:
            return None
        return self._entries[-2], self._entries[-1]


class StoreView:
    """
    Read-only access to a ``SnapshotStore``.
    """

    def __init__(self, store: "SnapshotStore"):
        self._store = store

    def latest_two(self, path: str) -> Optional[Tuple[Snapshot, Snapshot]]:
        """See ``SnapshotStore.latest_two()``."""
        return self._store.latest_two(path)

    def history_of(self, path: str) -> Tuple[Snapshot, ...]:
        """See ``SnapshotStore.history_of()``."""
        return self._store.history_of(path)

    def paths(self) -> Tuple[str, ...]:
        """See ``SnapshotStore.paths()``."""
        return self._store.paths()

    def __contains__(self, path):
        return path in self._store

    def __len__(self):
        return len(self._store)


class SnapshotStore:
    """
    Owns the version history of every watched file.
    """

    def __init__(self, max_history: int = DEFAULT_MAX_HISTORY):
        """
        Initialise a new, empty ``SnapshotStore``.

        :param max_history: The maximum number of snapshots retained for
                            each path.
        :type max_history: ``int``
        """
        if max_history < 1:
            raise DiffwatchConfigError(
                f"Invalid history limit: {max_history} (must be positive)"
            )
        self.max_history = max_history
        self._histories: Dict[str, VersionHistory] = {}

    def __contains__(self, path):
        return path in self._histories

    def __len__(self):
        return len(self._histories)

    def append(
        self, path: str, content: str, timestamp: Optional[datetime] = None
    ) -> Snapshot:
        """
        Record a new snapshot of ``path``.

        The history for ``path`` is created on first use. The eviction
        policy of ``VersionHistory`` is applied before the new snapshot is
        added.

        :param path: The canonical path of the file.
        :type path: ``str``
        :param content: The full file content.
        :type content: ``str``
        :param timestamp: The capture time (defaults to now).
        :type timestamp: ``Optional[datetime]``
        :returns: The new ``Snapshot``.
        :rtype: ``Snapshot``
        """
        snapshot = Snapshot(path, content, timestamp or datetime.now())
        history = self._histories.get(path)
        if history is None:
            history = VersionHistory(path, self.max_history)
            self._histories[path] = history
        history.append(snapshot)
        _log_debug_store(
            "Appended snapshot of %s (%d bytes, %d in history)",
            path,
            len(content),
            len(history),
        )
        return snapshot

    def latest_two(self, path: str) -> Optional[Tuple[Snapshot, Snapshot]]:
        """
        Return the two most recent snapshots of ``path``.

        :param path: The canonical path of the file.
        :type path: ``str``
        :returns: ``(older, newer)`` or ``None`` if fewer than two
                  snapshots of ``path`` exist.
        :rtype: ``Optional[Tuple[Snapshot, Snapshot]]``
        """
        history = self._histories.get(path)
        return history.latest_two() if history else None

    def history_of(self, path: str) -> Tuple[Snapshot, ...]:
        """
        Return the snapshots of ``path``, oldest first.

        :param path: The canonical path of the file.
        :type path: ``str``
        :returns: A tuple of snapshots; empty for unknown paths.
        :rtype: ``Tuple[Snapshot, ...]``
        """
        history = self._histories.get(path)
        return history.entries if history else ()

    def paths(self) -> Tuple[str, ...]:
        """Return the paths with a history, in first-seen order."""
        return tuple(self._histories)

    def view(self) -> StoreView:
        """Return a read-only view of this store."""
        return StoreView(self)

    def clear(self):
        """
        Release all histories.
        """
        _log_debug_store("Clearing %d file histories", len(self._histories))
        self._histories.clear()
