# Copyright Red Hat
#
# diffwatch/__main__.py - Diff watcher module entry point
#
# This file is part of the diffwatch project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Run the diffwatch command line interface with ``python -m diffwatch``.
"""
import sys

from diffwatch.command import main

if __name__ == "__main__":
    sys.exit(main(sys.argv))
