# Copyright Red Hat
#
# diffwatch/watch/observers.py - Diff watcher built-in observers
#
# This file is part of the diffwatch project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Built-in observers printing change titles and diffs to a terminal.
"""
from typing import Optional, TextIO
import sys

from diffwatch import DEFAULT_CONTEXT_LINES
from diffwatch.term import TermControl, flush_with_broken_pipe_guard

from .contentdiff import OP_DELETE, OP_INSERT, DiffEngine
from .snapshots import StoreView

#: Blank lines written after each printed diff.
DIFF_TRAILER = "\n\n\n\n"


class _TermObserver:
    """
    Common base for observers writing to a terminal stream.
    """

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        color: str = "auto",
        term_control: Optional[TermControl] = None,
    ):
        """
        :param stream: The output stream (defaults to ``sys.stdout``).
        :type stream: ``Optional[TextIO]``
        :param color: Color mode: "auto", "always" or "never".
        :type color: ``str``
        :param term_control: An optional pre-initialised ``TermControl``
                             that overrides ``color``.
        :type term_control: ``Optional[TermControl]``
        """
        self.stream = stream or sys.stdout
        self.term = term_control or TermControl(term_stream=self.stream, color=color)

    def _write(self, text: str):
        self.stream.write(text)
        flush_with_broken_pipe_guard(self.stream)


class TitleObserver(_TermObserver):
    """
    Print a one line title naming the changed file and its capture time.
    """

    def __call__(self, path: str, store_view: StoreView):
        history = store_view.history_of(path)
        if not history:
            return
        newest = history[-1]
        # Formatted per call: no buffer is shared between invocations.
        self._write(
            f"{self.term.YELLOW}The file [{newest.path}] was modified at "
            f"{newest.timestamp}{self.term.NORMAL}\n"
        )


class DiffObserver(_TermObserver):
    """
    Print the diff between the two most recent snapshots of the changed
    file, if there are two.
    """

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        color: str = "auto",
        term_control: Optional[TermControl] = None,
        context_lines: int = DEFAULT_CONTEXT_LINES,
    ):
        super().__init__(stream=stream, color=color, term_control=term_control)
        self.engine = DiffEngine(context_lines=context_lines)

    def _colorize(self, line: str, header: bool) -> str:
        term = self.term
        if header:
            return f"{term.BOLD}{line}{term.NORMAL}"
        if line.startswith("@@"):
            return f"{term.CYAN}{line}{term.NORMAL}"
        if line.startswith(OP_DELETE):
            return f"{term.RED}{line}{term.NORMAL}"
        if line.startswith(OP_INSERT):
            return f"{term.GREEN}{line}{term.NORMAL}"
        return line

    def __call__(self, path: str, store_view: StoreView):
        pair = store_view.latest_two(path)
        if pair is None:
            return
        content_diff = self.engine.compare_snapshots(*pair)
        if not content_diff.has_changes:
            return
        # The first two lines are the "---"/"+++" file headers.
        text = "".join(
            self._colorize(line, index < 2) + "\n"
            for index, line in enumerate(content_diff.diff_data)
        )
        self._write(text + DIFF_TRAILER)
