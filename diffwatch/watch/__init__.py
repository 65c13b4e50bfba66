# Copyright Red Hat
#
# diffwatch/watch/__init__.py - Diff watcher core package
#
# This file is part of the diffwatch project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Diff watcher core package.

Provides suffix filtering, bounded per-file snapshot histories, minimal
line diffs, observer dispatch and the watch controller that ties them to
a file system notification source. The main entry points are
``WatchController`` and ``WatchOptions``.
"""
from .contentdiff import ContentDiff, DiffEngine, MinimalSequenceMatcher
from .controller import WatchController, WatchState
from .dispatch import NO_OBSERVER_NOTICE, Dispatcher, Observer
from .filetypes import FileTypeDetector, FileTypeInfo
from .notify import (
    EventKind,
    NotificationSource,
    RawEvent,
    Subscription,
    WatchfilesSource,
)
from .observers import DiffObserver, TitleObserver
from .options import WatchOptions
from .snapshots import Snapshot, SnapshotStore, StoreView, VersionHistory
from .suffix import SuffixFilter, get_suffix
from .treewalk import FileEntry, list_files, relative_path

__all__ = [
    "ContentDiff",
    "DiffEngine",
    "DiffObserver",
    "Dispatcher",
    "EventKind",
    "FileEntry",
    "FileTypeDetector",
    "FileTypeInfo",
    "MinimalSequenceMatcher",
    "NO_OBSERVER_NOTICE",
    "NotificationSource",
    "Observer",
    "RawEvent",
    "Snapshot",
    "SnapshotStore",
    "StoreView",
    "Subscription",
    "SuffixFilter",
    "TitleObserver",
    "VersionHistory",
    "WatchController",
    "WatchOptions",
    "WatchState",
    "WatchfilesSource",
    "get_suffix",
    "list_files",
    "relative_path",
]
