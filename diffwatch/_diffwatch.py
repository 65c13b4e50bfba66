# Copyright Red Hat
#
# diffwatch/_diffwatch.py - Diff watcher global definitions
#
# This file is part of the diffwatch project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Global definitions for the top-level diffwatch package.
"""
from typing import Any, List, Sequence, Tuple
import logging

_log = logging.getLogger("diffwatch")

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

# Diffwatch debugging subsystem mask (legacy interface)
DIFFWATCH_DEBUG_STORE = 1
DIFFWATCH_DEBUG_DIFF = 2
DIFFWATCH_DEBUG_DISPATCH = 4
DIFFWATCH_DEBUG_WATCH = 8
DIFFWATCH_DEBUG_COMMAND = 16
DIFFWATCH_DEBUG_ALL = (
    DIFFWATCH_DEBUG_STORE
    | DIFFWATCH_DEBUG_DIFF
    | DIFFWATCH_DEBUG_DISPATCH
    | DIFFWATCH_DEBUG_WATCH
    | DIFFWATCH_DEBUG_COMMAND
)

# Diffwatch debugging subsystem names
DIFFWATCH_SUBSYSTEM_STORE = "diffwatch.store"
DIFFWATCH_SUBSYSTEM_DIFF = "diffwatch.diff"
DIFFWATCH_SUBSYSTEM_DISPATCH = "diffwatch.dispatch"
DIFFWATCH_SUBSYSTEM_WATCH = "diffwatch.watch"
DIFFWATCH_SUBSYSTEM_COMMAND = "diffwatch.command"

_DEBUG_MASK_TO_SUBSYSTEM = {
    DIFFWATCH_DEBUG_STORE: DIFFWATCH_SUBSYSTEM_STORE,
    DIFFWATCH_DEBUG_DIFF: DIFFWATCH_SUBSYSTEM_DIFF,
    DIFFWATCH_DEBUG_DISPATCH: DIFFWATCH_SUBSYSTEM_DISPATCH,
    DIFFWATCH_DEBUG_WATCH: DIFFWATCH_SUBSYSTEM_WATCH,
    DIFFWATCH_DEBUG_COMMAND: DIFFWATCH_SUBSYSTEM_COMMAND,
}

_debug_subsystems = set()

#: Suffixes watched when none are configured.
DEFAULT_SUFFIXES: Tuple[str, ...] = ("cc", "h", "txt", "hpp")

#: Maximum number of snapshots retained per file before collapsing.
DEFAULT_MAX_HISTORY = 16

#: Number of unchanged lines shown around each hunk.
DEFAULT_CONTEXT_LINES = 3

#: Notification source debounce interval in milliseconds.
DEFAULT_DEBOUNCE_MS = 50

#: Format used for snapshot capture times in titles and diff headers.
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

#: Valid values for color mode options.
COLOR_MODES = ("auto", "always", "never")


class SubsystemFilter(logging.Filter):
    """
    Filters DEBUG records based on a set of enabled subsystem names.
    Non-DEBUG records or DEBUG records without a 'subsystem' attribute
    are always passed through.
    """

    def __init__(self, name=""):
        super().__init__(name)
        self.enabled_subsystems = set(_debug_subsystems)

    def filter(self, record):
        if record.levelno != logging.DEBUG:
            return True

        if not hasattr(record, "subsystem"):
            return True

        return record.subsystem in self.enabled_subsystems

    def set_debug_subsystems(self, subsystems):
        """Sets the collection of subsystems to allow."""
        self.enabled_subsystems = set(subsystems)


def get_debug_mask():
    """
    Return the current debug mask for the ``diffwatch`` package.

    :returns: The current debug mask value
    :rtype: int
    """
    enabled_subsystems = set(_debug_subsystems)
    diffwatch_log = logging.getLogger("diffwatch")

    for handler in diffwatch_log.handlers:
        for f in handler.filters:
            if isinstance(f, SubsystemFilter):
                enabled_subsystems.update(f.enabled_subsystems)

    mask_map = {v: k for k, v in _DEBUG_MASK_TO_SUBSYSTEM.items()}
    mask = 0
    for subsystem_name in enabled_subsystems:
        mask |= mask_map.get(subsystem_name, 0)
    return mask


def set_debug_mask(mask):
    """
    Set the debug mask for the ``diffwatch`` package.

    :param mask: the logical OR of the ``DIFFWATCH_DEBUG_*``
                 values to log.
    :rtype: None
    """
    # pylint: disable=global-statement
    global _debug_subsystems

    if mask < 0 or mask > DIFFWATCH_DEBUG_ALL:
        raise ValueError(f"Invalid diffwatch debug mask: {mask}")

    enabled_subsystems = []
    for flag, subsystem_name in _DEBUG_MASK_TO_SUBSYSTEM.items():
        if mask & flag:
            enabled_subsystems.append(subsystem_name)

    diffwatch_log = logging.getLogger("diffwatch")
    for handler in diffwatch_log.handlers:
        for f in handler.filters:
            if isinstance(f, SubsystemFilter):
                f.set_debug_subsystems(enabled_subsystems)

    _debug_subsystems = set(enabled_subsystems)


#
# Diffwatch exception types
#


class DiffwatchError(Exception):
    """
    Base class for diff watcher errors.
    """


class DiffwatchConfigError(DiffwatchError):
    """
    An invalid configuration value was supplied: for e.g. a root path
    that is not a directory or a non-positive history limit.
    """


class DiffwatchStateError(DiffwatchError):
    """
    The state of the watcher does not allow an operation to proceed.
    """


class DiffwatchNotifyError(DiffwatchError):
    """
    The file system notification source failed and watching cannot
    continue.
    """


class DiffwatchObserverError(DiffwatchError):
    """
    One or more observers raised an exception while handling a change.
    """

    def __init__(self, path: str, failures: Sequence[Tuple[Any, BaseException]]):
        """
        Initialise a new ``DiffwatchObserverError`` exception.

        :param path: The changed path being dispatched.
        :param failures: A sequence of ``(observer, exception)`` pairs.
        """
        self.path = path
        self.failures: List[Tuple[Any, BaseException]] = list(failures)
        names = ", ".join(
            getattr(obs, "__name__", type(obs).__name__) for obs, _ in self.failures
        )
        msg = f"{len(self.failures)} observer(s) failed for {path}: {names}"
        super().__init__(msg)


def bool_to_yes_no(value):
    """
    Convert boolean-like values to "yes" or "no".

    :param value: The value to convert.
    :returns: "yes" if ``value`` evaluates true, or "no" otherwise.
    :rtype: ``str``
    """
    return "yes" if value else "no"


__all__ = [
    "DIFFWATCH_DEBUG_STORE",
    "DIFFWATCH_DEBUG_DIFF",
    "DIFFWATCH_DEBUG_DISPATCH",
    "DIFFWATCH_DEBUG_WATCH",
    "DIFFWATCH_DEBUG_COMMAND",
    "DIFFWATCH_DEBUG_ALL",
    # Debug logging - subsystem name interface
    "SubsystemFilter",
    "DIFFWATCH_SUBSYSTEM_STORE",
    "DIFFWATCH_SUBSYSTEM_DIFF",
    "DIFFWATCH_SUBSYSTEM_DISPATCH",
    "DIFFWATCH_SUBSYSTEM_WATCH",
    "DIFFWATCH_SUBSYSTEM_COMMAND",
    # Debug logging - legacy interface
    "set_debug_mask",
    "get_debug_mask",
    # Defaults
    "DEFAULT_SUFFIXES",
    "DEFAULT_MAX_HISTORY",
    "DEFAULT_CONTEXT_LINES",
    "DEFAULT_DEBOUNCE_MS",
    "TIMESTAMP_FORMAT",
    "COLOR_MODES",
    "DiffwatchError",
    "DiffwatchConfigError",
    "DiffwatchStateError",
    "DiffwatchNotifyError",
    "DiffwatchObserverError",
    "bool_to_yes_no",
]
