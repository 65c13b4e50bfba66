# Copyright Red Hat
#
# tests/watch/test_options.py - Watch options tests
#
# This file is part of the diffwatch project.
#
# SPDX-License-Identifier: Apache-2.0
from argparse import Namespace
import tempfile
import unittest
import logging
import os

from diffwatch import DEFAULT_SUFFIXES, DiffwatchConfigError
from diffwatch.watch.options import WatchOptions

from tests import MockArgs, write_file

log = logging.getLogger()


class WatchOptionsTests(unittest.TestCase):
    def setUp(self):
        log.debug("Preparing %s", self._testMethodName)
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.root = self._tmp.name

    def test_defaults(self):
        opts = WatchOptions()
        self.assertEqual(opts.root, ".")
        self.assertTrue(opts.recursive)
        self.assertTrue(opts.pre_read)
        self.assertEqual(opts.suffixes, DEFAULT_SUFFIXES)
        self.assertEqual(opts.max_history, 16)
        self.assertTrue(opts.show)
        opts.validate()

    def test_validate_missing_root(self):
        opts = WatchOptions(root=os.path.join(self.root, "nosuch"))
        with self.assertRaises(DiffwatchConfigError):
            opts.validate()

    def test_validate_root_is_file(self):
        path = write_file(self.root, "a.txt", "hello\n")
        with self.assertRaises(DiffwatchConfigError):
            WatchOptions(root=path).validate()

    def test_validate_bad_max_history(self):
        for value in (0, -1, "16", True):
            with self.subTest(value=value):
                with self.assertRaises(DiffwatchConfigError):
                    WatchOptions(root=self.root, max_history=value).validate()

    def test_validate_bad_context_lines(self):
        with self.assertRaises(DiffwatchConfigError):
            WatchOptions(root=self.root, context_lines=-1).validate()

    def test_validate_bad_debounce(self):
        with self.assertRaises(DiffwatchConfigError):
            WatchOptions(root=self.root, debounce=-5).validate()

    def test_validate_bad_color(self):
        with self.assertRaises(DiffwatchConfigError):
            WatchOptions(root=self.root, color="sometimes").validate()

    def test_validate_bad_suffix(self):
        with self.assertRaises(DiffwatchConfigError):
            WatchOptions(root=self.root, suffixes=("txt", 1)).validate()

    def test_str(self):
        opts = WatchOptions(root=self.root, suffixes=("txt", "md"))
        text = str(opts)
        self.assertIn(f"root={self.root}", text)
        self.assertIn("suffixes=txt md", text)
        self.assertIn("max_history=16", text)

    def test_from_cmd_args_defaults(self):
        opts = WatchOptions.from_cmd_args(MockArgs())
        self.assertEqual(opts, WatchOptions())

    def test_from_cmd_args(self):
        args = MockArgs()
        args.root = self.root
        args.suffixes = ["txt", "md"]
        args.max_history = 4
        args.recursive = False
        args.show = False
        opts = WatchOptions.from_cmd_args(args)
        self.assertEqual(opts.root, self.root)
        self.assertEqual(opts.suffixes, ("txt", "md"))
        self.assertEqual(opts.max_history, 4)
        self.assertFalse(opts.recursive)
        self.assertFalse(opts.show)
        self.assertTrue(opts.pre_read)

    def test_from_cmd_args_overrides_base(self):
        base = WatchOptions(root=self.root, max_history=8, context_lines=1)
        opts = WatchOptions.from_cmd_args(Namespace(max_history=3, debug=None), base)
        self.assertEqual(opts.max_history, 3)
        self.assertEqual(opts.context_lines, 1)
        self.assertEqual(opts.root, self.root)

    def test_from_file_missing(self):
        opts = WatchOptions.from_file(os.path.join(self.root, "nosuch.conf"))
        self.assertEqual(opts, WatchOptions())

    def test_from_file_no_section(self):
        path = write_file(self.root, "diffwatch.conf", "[other]\nkey = value\n")
        self.assertEqual(WatchOptions.from_file(path), WatchOptions())

    def test_from_file(self):
        path = write_file(
            self.root,
            "diffwatch.conf",
            "[watch]\n"
            f"root = {self.root}\n"
            "suffixes = txt, md,\n"
            "max_history = 4\n"
            "recursive = no\n"
            "ignore_case = yes\n"
            "exclude_patterns = build/*, *.tmp\n"
            "color = never\n",
        )
        opts = WatchOptions.from_file(path)
        self.assertEqual(opts.root, self.root)
        self.assertEqual(opts.suffixes, ("txt", "md"))
        self.assertEqual(opts.max_history, 4)
        self.assertFalse(opts.recursive)
        self.assertTrue(opts.ignore_case)
        self.assertEqual(opts.exclude_patterns, ("build/*", "*.tmp"))
        self.assertEqual(opts.color, "never")
        self.assertTrue(opts.pre_read)

    def test_from_file_bad_int(self):
        path = write_file(self.root, "diffwatch.conf", "[watch]\nmax_history = lots\n")
        with self.assertRaises(DiffwatchConfigError):
            WatchOptions.from_file(path)

    def test_from_file_bad_bool(self):
        path = write_file(self.root, "diffwatch.conf", "[watch]\nrecursive = maybe\n")
        with self.assertRaises(DiffwatchConfigError):
            WatchOptions.from_file(path)

    def test_from_file_unknown_key(self):
        path = write_file(self.root, "diffwatch.conf", "[watch]\nnosuch = 1\n")
        with self.assertLogs("diffwatch.watch.options", level="WARNING"):
            WatchOptions.from_file(path)

    def test_from_file_parse_error(self):
        path = write_file(self.root, "diffwatch.conf", "no section header\n")
        with self.assertRaises(DiffwatchConfigError):
            WatchOptions.from_file(path)
