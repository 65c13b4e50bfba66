# Copyright Red Hat
#
# tests/__init__.py - Diff watcher test package
#
# This file is part of the diffwatch project.
#
# SPDX-License-Identifier: Apache-2.0
import logging
import os
import time

log = logging.getLogger()
log.setLevel(logging.DEBUG)
formatter = logging.Formatter('%(asctime)s %(levelname)s %(name)s %(message)s')
file_handler = logging.FileHandler("test.log")
file_handler.setFormatter(formatter)
console_handler = logging.StreamHandler()
console_handler.setFormatter(formatter)
log.addHandler(file_handler)
log.addHandler(console_handler)

os.environ["TZ"] = "UTC"
time.tzset()


class MockArgs(object):
    debug = None
    verbose = 0
    version = False
    config = None
    root = None
    suffixes = None
    max_history = None
    recursive = None
    pre_read = None
    ignore_case = None
    show = None
    context_lines = None
    exclude_patterns = None
    use_magic_file_type = None
    color = None


def write_file(root, rel_path, content):
    """
    Write ``content`` to ``rel_path`` below ``root``, creating parent
    directories as needed.

    :returns: The full path of the file written.
    """
    path = os.path.join(root, rel_path)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf8") as fp:
        fp.write(content)
    return path
