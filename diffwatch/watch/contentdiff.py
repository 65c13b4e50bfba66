# Copyright Red Hat
#
# diffwatch/watch/contentdiff.py - Diff watcher content diffs
#
# This file is part of the diffwatch project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Line based content diff support.

Diffs are computed from a minimal edit script (Myers' O(ND) shortest edit
script algorithm) and rendered in unified diff format.
"""
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple
from difflib import Match, SequenceMatcher
import logging

from diffwatch import DEFAULT_CONTEXT_LINES, DIFFWATCH_SUBSYSTEM_DIFF

from .snapshots import Snapshot

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_diff(msg, *args, **kwargs):
    """A wrapper for diff subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": DIFFWATCH_SUBSYSTEM_DIFF}, **kwargs)


#: Edit script operation for an unchanged line
OP_EQUAL = " "
#: Edit script operation for a removed line
OP_DELETE = "-"
#: Edit script operation for an added line
OP_INSERT = "+"


def split_lines(text: str) -> List[str]:
    """
    Split ``text`` into lines at newline boundaries.

    A trailing line without a terminating newline is still a line, and the
    empty string has no lines. Line terminators are not included.

    :param text: The text to split.
    :type text: ``str``
    :returns: A list of lines.
    :rtype: ``List[str]``
    """
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def _shortest_edit_matches(
    a: Sequence[str], b: Sequence[str]
) -> List[Tuple[int, int]]:
    """
    Return the ``(i, j)`` index pairs of equal elements on a shortest edit
    path from ``a`` to ``b``, in ascending order.

    :param a: The original sequence.
    :param b: The updated sequence.
    :returns: A list of matched index pairs.
    """
    n, m = len(a), len(b)
    max_d = n + m
    offset = max_d + 1
    v = [0] * (2 * max_d + 3)
    trace = []

    for d in range(max_d + 1):
        # Only diagonals -d-1 .. d+1 are consulted when backtracking.
        trace.append(v[offset - d - 1 : offset + d + 2])
        for k in range(-d, d + 1, 2):
            if k == -d or (k != d and v[offset + k - 1] < v[offset + k + 1]):
                x = v[offset + k + 1]
            else:
                x = v[offset + k - 1] + 1
            y = x - k
            while x < n and y < m and a[x] == b[y]:
                x += 1
                y += 1
            v[offset + k] = x
            if x >= n and y >= m:
                return _backtrack(trace, n, m)
    return []  # pragma: no cover


def _backtrack(trace: List[List[int]], n: int, m: int) -> List[Tuple[int, int]]:
    """
    Walk the saved ``V`` arrays from the end point back to the origin
    collecting diagonal (matching) moves.
    """
    matches = []
    x, y = n, m
    for d in range(len(trace) - 1, -1, -1):
        saved = trace[d]

        def v_at(k, saved=saved, d=d):
            return saved[k + d + 1]

        k = x - y
        if k == -d or (k != d and v_at(k - 1) < v_at(k + 1)):
            prev_k = k + 1
        else:
            prev_k = k - 1
        prev_x = v_at(prev_k)
        prev_y = prev_x - prev_k
        while x > prev_x and y > prev_y:
            x -= 1
            y -= 1
            matches.append((x, y))
        if d > 0:
            x, y = prev_x, prev_y
    matches.reverse()
    return matches


class MinimalSequenceMatcher(SequenceMatcher):
    """
    A ``SequenceMatcher`` whose matching blocks form a longest common
    subsequence, so that the derived opcodes are a minimal edit script.

    ``difflib.SequenceMatcher`` finds matches with the Ratcliff/Obershelp
    heuristic, which does not guarantee minimality.
    """

    def __init__(self, a: Sequence[str] = "", b: Sequence[str] = ""):
        super().__init__(None, a, b, autojunk=False)

    def get_matching_blocks(self) -> List[Match]:
        if self.matching_blocks is not None:
            return self.matching_blocks

        a, b = self.a, self.b
        la, lb = len(a), len(b)

        # Common prefix and suffix are always part of some LCS.
        prefix = 0
        while prefix < la and prefix < lb and a[prefix] == b[prefix]:
            prefix += 1
        suffix = 0
        while (
            suffix < la - prefix
            and suffix < lb - prefix
            and a[la - suffix - 1] == b[lb - suffix - 1]
        ):
            suffix += 1

        pairs = [(i, i) for i in range(prefix)]
        inner = _shortest_edit_matches(
            a[prefix : la - suffix], b[prefix : lb - suffix]
        )
        pairs.extend((i + prefix, j + prefix) for i, j in inner)
        pairs.extend((la - suffix + i, lb - suffix + i) for i in range(suffix))

        blocks = []
        for i, j in pairs:
            if blocks:
                last_i, last_j, size = blocks[-1]
                if last_i + size == i and last_j + size == j:
                    blocks[-1] = (last_i, last_j, size + 1)
                    continue
            blocks.append((i, j, 1))
        blocks.append((la, lb, 0))

        self.matching_blocks = [Match._make(block) for block in blocks]
        return self.matching_blocks


def _format_range_unified(start: int, stop: int) -> str:
    """
    Convert a half-open line range to the unified diff "start,length"
    notation.
    """
    beginning = start + 1
    length = stop - start
    if length == 1:
        return f"{beginning}"
    if not length:
        beginning -= 1
    return f"{beginning},{length}"


class ContentDiff:
    """
    Represents a line based diff between two versions of a file.
    """

    def __init__(
        self,
        old_content: Optional[str] = None,
        new_content: Optional[str] = None,
        summary: str = "",
    ):
        """
        Initialise a new ``ContentDiff`` object.

        :param old_content: The original content.
        :type old_content: ``str``
        :param new_content: The updated content.
        :type new_content: ``str``
        :param summary: A summary of the difference.
        :type summary: ``str``
        """
        self.diff_type = "unified"
        self.old_content = old_content
        self.new_content = new_content
        #: Report lines without line terminators
        self.diff_data: List[str] = []
        self.summary = summary
        self.has_changes = False
        self.additions = 0
        self.deletions = 0

    def __str__(self):
        """
        Return the unified diff report for this ``ContentDiff``.

        :returns: The report text, or the empty string if there are no
                  changes.
        :rtype: ``str``
        """
        if not self.diff_data:
            return ""
        return "\n".join(self.diff_data) + "\n"

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert this ``ContentDiff`` object into a dictionary representation
        suitable for encoding as JSON.

        :returns: A dictionary mapping this instance's keys to values.
        :rtype: ``Dict[str, Any]``
        """
        return {
            "diff_type": self.diff_type,
            "old_content": self.old_content,
            "new_content": self.new_content,
            "diff_data": self.diff_data,
            "summary": self.summary,
            "has_changes": self.has_changes,
            "additions": self.additions,
            "deletions": self.deletions,
        }


class DiffEngine:
    """
    Compute line based diffs between two text blobs.
    """

    def __init__(self, context_lines: int = DEFAULT_CONTEXT_LINES):
        """
        Initialise a new ``DiffEngine``.

        :param context_lines: Unchanged lines shown around each hunk.
        :type context_lines: ``int``
        """
        if context_lines < 0:
            raise ValueError(f"Invalid context line count: {context_lines}")
        self.context_lines = context_lines

    @staticmethod
    def edit_script(before: str, after: str) -> List[Tuple[str, str]]:
        """
        Return the complete minimal edit script transforming ``before``
        into ``after``.

        :param before: The original text.
        :type before: ``str``
        :param after: The updated text.
        :type after: ``str``
        :returns: A list of ``(op, line)`` pairs where ``op`` is one of
                  ``OP_EQUAL``, ``OP_DELETE`` or ``OP_INSERT``.
        :rtype: ``List[Tuple[str, str]]``
        """
        a, b = split_lines(before), split_lines(after)
        script = []
        for tag, i1, i2, j1, j2 in MinimalSequenceMatcher(a, b).get_opcodes():
            if tag == "equal":
                script.extend((OP_EQUAL, line) for line in a[i1:i2])
                continue
            if tag in ("replace", "delete"):
                script.extend((OP_DELETE, line) for line in a[i1:i2])
            if tag in ("replace", "insert"):
                script.extend((OP_INSERT, line) for line in b[j1:j2])
        return script

    def _unified_lines(
        self,
        matcher: MinimalSequenceMatcher,
        fromfile: str,
        tofile: str,
        fromdate: str,
        todate: str,
    ) -> Iterator[str]:
        """
        Generate unified diff report lines for the sequences of ``matcher``.
        """
        a, b = matcher.a, matcher.b
        started = False
        for group in matcher.get_grouped_opcodes(self.context_lines):
            if not started:
                started = True
                if fromfile or tofile:
                    fromdate_str = f"\t{fromdate}" if fromdate else ""
                    todate_str = f"\t{todate}" if todate else ""
                    yield f"--- {fromfile}{fromdate_str}"
                    yield f"+++ {tofile}{todate_str}"

            first, last = group[0], group[-1]
            file1_range = _format_range_unified(first[1], last[2])
            file2_range = _format_range_unified(first[3], last[4])
            yield f"@@ -{file1_range} +{file2_range} @@"

            for tag, i1, i2, j1, j2 in group:
                if tag == "equal":
                    for line in a[i1:i2]:
                        yield OP_EQUAL + line
                    continue
                if tag in ("replace", "delete"):
                    for line in a[i1:i2]:
                        yield OP_DELETE + line
                if tag in ("replace", "insert"):
                    for line in b[j1:j2]:
                        yield OP_INSERT + line

    def compare(
        self,
        before: str,
        after: str,
        fromfile: str = "",
        tofile: str = "",
        fromdate: str = "",
        todate: str = "",
    ) -> ContentDiff:
        """
        Compare ``before`` with ``after``.

        :param before: The original text.
        :type before: ``str``
        :param after: The updated text.
        :type after: ``str``
        :param fromfile: Name for the original in the report header.
        :type fromfile: ``str``
        :param tofile: Name for the update in the report header.
        :type tofile: ``str``
        :param fromdate: Timestamp for the original in the report header.
        :type fromdate: ``str``
        :param todate: Timestamp for the update in the report header.
        :type todate: ``str``
        :returns: A ``ContentDiff`` describing the changes.
        :rtype: ``ContentDiff``
        """
        a, b = split_lines(before), split_lines(after)
        matcher = MinimalSequenceMatcher(a, b)
        content_diff = ContentDiff(old_content=before, new_content=after)
        content_diff.diff_data = list(
            self._unified_lines(matcher, fromfile, tofile, fromdate, todate)
        )

        for tag, i1, i2, j1, j2 in matcher.get_opcodes():
            if tag in ("replace", "delete"):
                content_diff.deletions += i2 - i1
            if tag in ("replace", "insert"):
                content_diff.additions += j2 - j1
        content_diff.has_changes = bool(content_diff.deletions or content_diff.additions)
        content_diff.summary = (
            f"{content_diff.deletions} deletions, {content_diff.additions} additions"
        )
        _log_debug_diff(
            "Compared %s (%d lines) with %s (%d lines): %s",
            fromfile or "<before>",
            len(a),
            tofile or "<after>",
            len(b),
            content_diff.summary,
        )
        return content_diff

    def compare_snapshots(self, older: Snapshot, newer: Snapshot) -> ContentDiff:
        """
        Compare two snapshots, naming both in the report header.

        :param older: The earlier snapshot.
        :type older: ``Snapshot``
        :param newer: The later snapshot.
        :type newer: ``Snapshot``
        :returns: A ``ContentDiff`` describing the changes.
        :rtype: ``ContentDiff``
        """
        return self.compare(
            older.content,
            newer.content,
            fromfile=older.path,
            tofile=newer.path,
            fromdate=older.timestamp,
            todate=newer.timestamp,
        )

    def diff(self, before: str, after: str, fromfile: str = "", tofile: str = "") -> str:
        """
        Return the unified diff report between ``before`` and ``after``.

        :param before: The original text.
        :type before: ``str``
        :param after: The updated text.
        :type after: ``str``
        :returns: The report text; empty if the inputs have the same lines.
        :rtype: ``str``
        """
        return str(self.compare(before, after, fromfile=fromfile, tofile=tofile))
