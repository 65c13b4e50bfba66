# Copyright Red Hat
#
# diffwatch/watch/suffix.py - Diff watcher suffix filter
#
# This file is part of the diffwatch project.
#
# SPDX-License-Identifier: Apache-2.0
"""
File suffix filtering.
"""
from typing import Iterable, Set
import posixpath
import os


def get_suffix(path: str) -> str:
    """
    Return the extension of the final component of ``path`` without the
    leading dot, or the empty string if it has none.

    :param path: The path to examine.
    :type path: ``str``
    :returns: The file suffix.
    :rtype: ``str``
    """
    name = posixpath.basename(path.replace(os.sep, "/"))
    _, dot, ext = name.rpartition(".")
    return ext if dot else ""


class SuffixFilter:
    """
    Decide whether a path is of interest based on its suffix.
    """

    def __init__(self, suffixes: Iterable[str], ignore_case: bool = False):
        """
        Initialise a new ``SuffixFilter``.

        :param suffixes: Accepted suffixes. A leading dot is ignored, and
                         the empty string accepts paths with no suffix.
        :type suffixes: ``Iterable[str]``
        :param ignore_case: Compare suffixes case-insensitively.
        :type ignore_case: ``bool``
        """
        self.ignore_case = ignore_case
        self._suffixes: Set[str] = set()
        self.add(suffixes)

    def _normalize(self, suffix: str) -> str:
        suffix = suffix[1:] if suffix.startswith(".") else suffix
        return suffix.lower() if self.ignore_case else suffix

    @property
    def suffixes(self) -> Set[str]:
        """The set of accepted suffixes (a copy)."""
        return set(self._suffixes)

    def add(self, suffixes: Iterable[str]):
        """
        Add ``suffixes`` to the accepted set.

        :param suffixes: The suffixes to add.
        :type suffixes: ``Iterable[str]``
        """
        if isinstance(suffixes, str):
            suffixes = [suffixes]
        self._suffixes.update(self._normalize(suffix) for suffix in suffixes)

    def accept(self, path: str) -> bool:
        """
        Return ``True`` if the suffix of ``path`` is in the accepted set.

        :param path: The path to test.
        :type path: ``str``
        :returns: ``True`` if ``path`` is of interest or ``False``
                  otherwise.
        :rtype: ``bool``
        """
        return self._normalize(get_suffix(path)) in self._suffixes

    def __call__(self, path: str) -> bool:
        return self.accept(path)

    def __repr__(self):
        return (
            f"SuffixFilter({sorted(self._suffixes)!r}, "
            f"ignore_case={self.ignore_case})"
        )
