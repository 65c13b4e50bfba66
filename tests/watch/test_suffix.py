# Copyright Red Hat
#
# tests/watch/test_suffix.py - Suffix filter tests
#
# This file is part of the diffwatch project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
import logging

from diffwatch import DEFAULT_SUFFIXES
from diffwatch.watch.suffix import SuffixFilter, get_suffix

log = logging.getLogger()


class GetSuffixTests(unittest.TestCase):
    def test_get_suffix_simple(self):
        self.assertEqual(get_suffix("a.txt"), "txt")

    def test_get_suffix_last_dot(self):
        self.assertEqual(get_suffix("archive.tar.gz"), "gz")

    def test_get_suffix_directory_dot(self):
        self.assertEqual(get_suffix("src.d/Makefile"), "")

    def test_get_suffix_none(self):
        self.assertEqual(get_suffix("README"), "")

    def test_get_suffix_trailing_dot(self):
        self.assertEqual(get_suffix("name."), "")

    def test_get_suffix_nested(self):
        self.assertEqual(get_suffix("src/lib/util.hpp"), "hpp")


class SuffixFilterTests(unittest.TestCase):
    def setUp(self):
        log.debug("Preparing %s", self._testMethodName)

    def test_default_suffixes(self):
        sf = SuffixFilter(DEFAULT_SUFFIXES)
        for path in ("a.cc", "b.h", "c.txt", "d.hpp", "sub/dir/e.txt"):
            with self.subTest(path=path):
                self.assertTrue(sf.accept(path))

    def test_rejects_other_suffixes(self):
        sf = SuffixFilter(DEFAULT_SUFFIXES)
        for path in ("b.md", "c.cpp", "Makefile", "a.txt.bak"):
            with self.subTest(path=path):
                self.assertFalse(sf.accept(path))

    def test_case_sensitive_by_default(self):
        sf = SuffixFilter(["txt"])
        self.assertFalse(sf.accept("A.TXT"))

    def test_ignore_case(self):
        sf = SuffixFilter(["TXT"], ignore_case=True)
        self.assertTrue(sf.accept("a.txt"))
        self.assertTrue(sf.accept("A.Txt"))

    def test_leading_dot_ignored(self):
        sf = SuffixFilter([".txt"])
        self.assertTrue(sf.accept("a.txt"))
        self.assertEqual(sf.suffixes, {"txt"})

    def test_empty_suffix_accepts_extensionless(self):
        sf = SuffixFilter([""])
        self.assertTrue(sf.accept("Makefile"))
        self.assertFalse(sf.accept("a.txt"))

    def test_empty_set_accepts_nothing(self):
        sf = SuffixFilter([])
        self.assertFalse(sf.accept("a.txt"))
        self.assertFalse(sf.accept("Makefile"))

    def test_add(self):
        sf = SuffixFilter(["txt"])
        sf.add(["md", "rst"])
        self.assertTrue(sf.accept("b.md"))
        self.assertTrue(sf.accept("c.rst"))
        self.assertTrue(sf.accept("a.txt"))

    def test_add_single_string(self):
        sf = SuffixFilter([])
        sf.add("md")
        self.assertEqual(sf.suffixes, {"md"})

    def test_suffixes_is_copy(self):
        sf = SuffixFilter(["txt"])
        sf.suffixes.add("md")
        self.assertFalse(sf.accept("b.md"))

    def test_callable(self):
        sf = SuffixFilter(["txt"])
        self.assertTrue(sf("a.txt"))
        self.assertFalse(sf("a.md"))

    def test_repr(self):
        sf = SuffixFilter(["txt", "h"])
        self.assertEqual(repr(sf), "SuffixFilter(['h', 'txt'], ignore_case=False)")
