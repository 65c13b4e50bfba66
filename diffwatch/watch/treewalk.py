# Copyright Red Hat
#
# diffwatch/watch/treewalk.py - Diff watcher tree walk
#
# This file is part of the diffwatch project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Directory traversal for the initial snapshot scan.
"""
from typing import Iterator, NamedTuple, Tuple
from fnmatch import fnmatch
import logging
import os

from diffwatch import DIFFWATCH_SUBSYSTEM_WATCH

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_watch(msg, *args, **kwargs):
    """A wrapper for watch subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": DIFFWATCH_SUBSYSTEM_WATCH}, **kwargs)


class FileEntry(NamedTuple):
    """
    A path found during traversal.
    """

    #: Path of the entry, joined to the traversal root
    path: str
    #: True if the entry is a regular file
    is_regular: bool


def relative_path(path: str, root: str) -> str:
    """
    Return the canonical form of ``path``: relative to ``root``, normalized
    and without a leading "./" marker. Paths outside ``root`` are returned
    normalized but otherwise unchanged.

    :param path: The path to canonicalize (absolute or relative to the
                 current directory).
    :type path: ``str``
    :param root: The watch root.
    :type root: ``str``
    :returns: The canonical path.
    :rtype: ``str``
    """
    abs_root = os.path.abspath(root)
    abs_path = os.path.abspath(path)
    if abs_path == abs_root or abs_path.startswith(abs_root.rstrip(os.sep) + os.sep):
        rel = os.path.relpath(abs_path, abs_root)
    else:
        rel = os.path.normpath(path)
    if rel.startswith("." + os.sep):
        rel = rel[2:]
    return rel


def is_excluded(rel_path: str, exclude_patterns: Tuple[str, ...]) -> bool:
    """
    Return ``True`` if ``rel_path``, or any directory containing it,
    matches one of ``exclude_patterns``.

    Parent directories are tested so that a live change below an excluded
    directory is rejected in the same way as the scan that skips it.

    :param rel_path: A root-relative path.
    :type rel_path: ``str``
    :param exclude_patterns: Glob patterns to test.
    :type exclude_patterns: ``Tuple[str, ...]``
    :rtype: ``bool``
    """
    if not exclude_patterns:
        return False
    parts = rel_path.split(os.sep)
    for i in range(1, len(parts) + 1):
        prefix = os.sep.join(parts[:i])
        if any(fnmatch(prefix, pat) for pat in exclude_patterns):
            return True
    return False


def list_files(
    root: str, recursive: bool = True, exclude_patterns: Tuple[str, ...] = ()
) -> Iterator[FileEntry]:
    """
    Lazily enumerate the entries below ``root``.

    Directories are not reported. Entries that vanish during traversal are
    skipped.

    :param root: The directory to walk.
    :type root: ``str``
    :param recursive: Descend into subdirectories.
    :type recursive: ``bool``
    :param exclude_patterns: Root-relative glob patterns to skip; a matching
                             directory is not descended into.
    :type exclude_patterns: ``Tuple[str, ...]``
    :returns: An iterator of ``FileEntry`` objects in sorted order per
              directory.
    :rtype: ``Iterator[FileEntry]``
    """
    to_visit = [root]
    while to_visit:
        current = to_visit.pop()
        try:
            with os.scandir(current) as it:
                entries = sorted(it, key=lambda e: e.name)
        except (FileNotFoundError, NotADirectoryError):
            # Directory vanished between discovery and scan; skip it.
            _log_debug_watch("Skipping vanished directory '%s'", current)
            continue

        subdirs = []
        for entry in entries:
            path = os.path.join(current, entry.name)
            if is_excluded(relative_path(path, root), exclude_patterns):
                _log_debug_watch("Excluding '%s'", path)
                continue
            try:
                if entry.is_dir(follow_symlinks=False):
                    if recursive:
                        subdirs.append(path)
                    continue
                is_regular = entry.is_file(follow_symlinks=True)
            except FileNotFoundError:
                continue
            yield FileEntry(path, is_regular)

        to_visit.extend(reversed(subdirs))
