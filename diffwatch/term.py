# Copyright Red Hat
#
# diffwatch/term.py - Diff watcher terminal control
#
# This file is part of the diffwatch project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Terminal control for colored output.
"""
from typing import List, Optional, TextIO
import curses
import sys
import os


class TermControl:
    """
    A class for portable terminal color output.

    Uses the curses package to set up appropriate terminal control
    sequences for the current terminal.

    Inspired by and adapted from:

      https://code.activestate.com/recipes/475116-using-terminfo-for-portable-color-output-cursor-co/

      Copyright Edward Loper and released under the PSF license.

    `TermControl` defines a set of instance variables whose values are
    initialized to the control sequence necessary to select a color or
    output mode. These can be simply included in normal output:

        >>> term = TermControl()
        >>> print("This is " + term.GREEN + "green" + term.NORMAL)

    If the stream is not a terminal, or color is disabled, every control
    attribute is the empty string and output is left uncolored.
    """

    # Output modes:
    BOLD: str = ""  #: Turn on bold mode
    NORMAL: str = ""  #: Turn off all modes

    # Foreground colors:
    BLACK: str = ""  #: Black foreground color
    BLUE: str = ""  #: Blue foreground color
    GREEN: str = ""  #: Green foreground color
    CYAN: str = ""  #: Cyan foreground color
    RED: str = ""  #: Red foreground color
    MAGENTA: str = ""  #: Magenta foreground color
    YELLOW: str = ""  #: Yellow foreground color
    WHITE: str = ""  #: White foreground color

    _STRING_CAPABILITIES: List[str] = "BOLD:bold NORMAL:sgr0".split()
    _LEGACY_COLORS: List[str] = "BLACK BLUE GREEN CYAN RED MAGENTA YELLOW WHITE".split()
    _ANSI_COLORS: List[str] = "BLACK RED GREEN YELLOW BLUE MAGENTA CYAN WHITE".split()

    def _force_ansi(self):
        ansi_codes = {
            "BLACK": "\033[0;30m",
            "RED": "\033[0;31m",
            "GREEN": "\033[0;32m",
            "YELLOW": "\033[0;33m",
            "BLUE": "\033[0;34m",
            "MAGENTA": "\033[0;35m",
            "CYAN": "\033[0;36m",
            "WHITE": "\033[0;37m",
        }
        for color, code in ansi_codes.items():
            setattr(self, color, code)
        setattr(self, "BOLD", "\033[1m")
        setattr(self, "NORMAL", "\033[0m")

    def _init_colors(self):
        """
        Initialize terminal color codes.
        """
        set_fg = self._tigetstr("setf")
        if set_fg:
            set_fg = set_fg.encode("utf8")
            for i, color in enumerate(self._LEGACY_COLORS):
                setattr(self, color, curses.tparm(set_fg, i).decode("utf8") or "")
        set_fg_ansi = self._tigetstr("setaf")
        if set_fg_ansi:
            set_fg_ansi = set_fg_ansi.encode("utf8")
            for i, color in enumerate(self._ANSI_COLORS):
                setattr(self, color, curses.tparm(set_fg_ansi, i).decode("utf8") or "")

    def __init__(self, term_stream: Optional[TextIO] = None, color: str = "auto"):
        """
        Initialize terminal capabilities.

        If the output stream is not a tty or terminal setup fails, the
        instance has no capabilities unless ``color`` is "always", in which
        case plain ANSI sequences are used.

        :param term_stream: Output stream to probe for capabilities.
        :type term_stream: ``Optional[TextIO]``
        :param color: A string to control color rendering: "auto", "always",
                      or "never".
        :type color: ``str``
        """
        if term_stream is None:
            term_stream = sys.stdout

        self.term_stream = term_stream

        if color == "never":
            return

        # If the stream isn't a tty, then assume it has no capabilities.
        if color != "always":
            if not hasattr(term_stream, "isatty") or not term_stream.isatty():
                return

        try:
            curses.setupterm()
        # curses.error cannot be caught directly before setupterm() succeeds.
        except BaseException as err:  # pylint: disable=broad-exception-caught
            if isinstance(err, (KeyboardInterrupt, SystemExit)):  # pragma: no cover
                raise
            if color == "always":
                self._force_ansi()
            return

        for capability in self._STRING_CAPABILITIES:
            (attr, cap_name) = capability.split(":")
            setattr(self, attr, self._tigetstr(cap_name) or "")

        self._init_colors()

        if color == "always" and not self.RED:
            self._force_ansi()

    def _tigetstr(self, cap_name):
        # String capabilities can include "delays" of the form "$<2>".
        cap = curses.tigetstr(cap_name)
        cap = cap.decode(encoding="utf8") if cap else ""
        return cap.split("$", maxsplit=1)[0]


def flush_with_broken_pipe_guard(stream: TextIO) -> None:
    """
    Handle ``BrokenPipeError`` when attempting to flush output streams.

    :param stream: The stream to flush.
    :type stream: TextIO
    """
    if stream is None or not hasattr(stream, "flush"):
        return
    try:
        stream.flush()
    except BrokenPipeError as err:
        devnull = os.open(os.devnull, os.O_WRONLY)
        try:
            if hasattr(stream, "fileno"):
                os.dup2(devnull, stream.fileno())
        finally:
            os.close(devnull)
        raise SystemExit() from err
