# Copyright Red Hat
#
# tests/test_term.py - TermControl tests
#
# This file is part of the diffwatch project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
from unittest.mock import MagicMock, patch
import curses

from diffwatch.term import TermControl, flush_with_broken_pipe_guard


def _tty_stream():
    mock_stream = MagicMock()
    mock_stream.isatty.return_value = True
    return mock_stream


class TestTermControl(unittest.TestCase):
    def test_term_control_default_stdout(self):
        """Test TermControl when stream is None"""
        tc = TermControl()
        self.assertIsNotNone(tc)

    def test_term_control_no_tty(self):
        """Test TermControl when stream is not a TTY."""
        mock_stream = MagicMock()
        mock_stream.isatty.return_value = False

        tc = TermControl(term_stream=mock_stream)

        # attributes should be empty strings
        self.assertEqual(tc.RED, "")
        self.assertEqual(tc.GREEN, "")

    def test_term_control_never(self):
        """Test that color="never" skips terminal setup."""
        with patch("diffwatch.term.curses") as mock_curses:
            tc = TermControl(term_stream=_tty_stream(), color="never")
            mock_curses.setupterm.assert_not_called()
        self.assertEqual(tc.YELLOW, "")

    def test_term_control_curses_error(self):
        """Test TermControl handles curses setup errors gracefully."""
        with patch("diffwatch.term.curses") as mock_curses:
            mock_curses.setupterm.side_effect = curses.error("Curses error")

            tc = TermControl(term_stream=_tty_stream())
            self.assertEqual(tc.RED, "")

    def test_term_control_always_forces_ansi(self):
        """Test that color="always" falls back to ANSI sequences."""
        mock_stream = MagicMock()
        mock_stream.isatty.return_value = False

        with patch("diffwatch.term.curses") as mock_curses:
            mock_curses.setupterm.side_effect = curses.error("Curses error")

            tc = TermControl(term_stream=mock_stream, color="always")
            self.assertEqual(tc.RED, "\033[0;31m")
            self.assertEqual(tc.NORMAL, "\033[0m")
            self.assertEqual(tc.BOLD, "\033[1m")

    def test_term_control_init_success(self):
        """Test successful TermControl initialization with mocked curses."""
        with patch("diffwatch.term.curses") as mock_curses:
            mock_curses.tigetstr.side_effect = lambda x: (
                b"seq" if x in ["bold", "setf"] else None
            )
            mock_curses.tparm.return_value = b"\x1b[30m"

            tc = TermControl(term_stream=_tty_stream())

            self.assertEqual(tc.BOLD, "seq")
            self.assertEqual(tc.NORMAL, "")
            self.assertEqual(tc.BLACK, "\x1b[30m")

    def test_term_control_init_keyboard_interrupt(self):
        """Test that KeyboardInterrupt in setupterm is re-raised."""
        with patch("diffwatch.term.curses") as mock_curses:
            mock_curses.setupterm.side_effect = KeyboardInterrupt()
            with self.assertRaises(KeyboardInterrupt):
                TermControl(term_stream=_tty_stream())


class TestFlushGuard(unittest.TestCase):
    def test_flush_guard_broken_pipe(self):
        """Test BrokenPipeError handling in flush guard."""
        mock_stream = MagicMock()
        mock_stream.flush.side_effect = BrokenPipeError()
        mock_stream.fileno.return_value = 10

        with patch("diffwatch.term.os") as mock_os:
            mock_os.open.return_value = 999
            mock_os.devnull = "/dev/null"
            mock_os.O_WRONLY = 1

            with self.assertRaises(SystemExit):
                flush_with_broken_pipe_guard(mock_stream)

            mock_os.open.assert_called_with("/dev/null", 1)
            mock_os.dup2.assert_called_with(999, 10)
            mock_os.close.assert_called_with(999)

    def test_flush_guard_no_flush_attr(self):
        """Test flush guard with stream lacking flush method."""
        mock_stream = MagicMock()
        del mock_stream.flush
        flush_with_broken_pipe_guard(mock_stream)
