# Copyright Red Hat
#
# tests/watch/__init__.py - Diff watcher core test package
#
# This file is part of the diffwatch project.
#
# SPDX-License-Identifier: Apache-2.0
