# Copyright Red Hat
#
# diffwatch/__init__.py - Diff watcher package initialisation
#
# This file is part of the diffwatch project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Diffwatch top-level package.
"""
from ._diffwatch import *  # noqa: F401, F403
from ._diffwatch import __all__  # noqa: F401

__version__ = "0.1.0"
