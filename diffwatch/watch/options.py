# Copyright Red Hat
#
# diffwatch/watch/options.py - Diff watcher options
#
# This file is part of the diffwatch project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Diff watcher configuration options.
"""
from dataclasses import dataclass, field, fields, replace
from typing import Optional, Tuple, Union
from argparse import Namespace
from configparser import ConfigParser, Error as ConfigParserError
from os.path import exists, isdir
import logging

from diffwatch import (
    COLOR_MODES,
    DEFAULT_CONTEXT_LINES,
    DEFAULT_DEBOUNCE_MS,
    DEFAULT_MAX_HISTORY,
    DEFAULT_SUFFIXES,
    DiffwatchConfigError,
)

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

#: Configuration file section holding watch options.
_DIFFWATCH_CFG_WATCH = "watch"

_TUPLE_FIELDS = ("suffixes", "exclude_patterns")
_BOOL_FIELDS = ("recursive", "pre_read", "ignore_case", "show", "use_magic_file_type")
_INT_FIELDS = ("max_history", "context_lines", "debounce")


def _split_list(value: str) -> Tuple[str, ...]:
    """
    Split a comma separated configuration value into a tuple of stripped,
    non-empty strings.
    """
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class WatchOptions:
    """
    Diff watcher options.
    """

    #: Root directory to watch
    root: str = "."
    #: Include subdirectories of ``root``
    recursive: bool = True
    #: Capture an initial snapshot of every matching file before watching
    pre_read: bool = True
    #: Accepted file suffixes (without a leading dot)
    suffixes: Tuple[str, ...] = DEFAULT_SUFFIXES
    #: Maximum snapshots kept per file before the history is collapsed
    max_history: int = DEFAULT_MAX_HISTORY
    #: Match suffixes without regard to case
    ignore_case: bool = False
    #: Invoke observers for accepted changes
    show: bool = True
    #: Unchanged lines shown around each diff hunk
    context_lines: int = DEFAULT_CONTEXT_LINES
    #: Root-relative paths to exclude (glob notation)
    exclude_patterns: Tuple[str, ...] = field(default_factory=tuple)
    #: Detect file encodings using magic
    use_magic_file_type: bool = False
    #: Notification debounce interval in milliseconds
    debounce: int = DEFAULT_DEBOUNCE_MS
    #: Color mode for built-in observers: "auto", "always" or "never"
    color: str = "auto"

    def __str__(self):
        """
        Return a human readable string representation of this
        ``WatchOptions`` instance.

        :returns: A human readable string.
        :rtype: ``str``
        """
        items = [
            (key, val) if not isinstance(val, tuple) else (key, " ".join(val))
            for key, val in self.__dict__.items()
        ]
        return "\n".join(f"{key}={val}" for key, val in items)

    def validate(self):
        """
        Check this ``WatchOptions`` instance for invalid values.

        :raises: ``DiffwatchConfigError`` if any option value is invalid.
        """
        if not self.root or not isdir(self.root):
            raise DiffwatchConfigError(
                f"Watch root '{self.root}' does not exist or is not a directory"
            )
        if isinstance(self.max_history, bool) or not isinstance(self.max_history, int):
            raise DiffwatchConfigError(
                f"Invalid history limit: {self.max_history!r} (must be an integer)"
            )
        if self.max_history < 1:
            raise DiffwatchConfigError(
                f"Invalid history limit: {self.max_history} (must be positive)"
            )
        if self.context_lines < 0:
            raise DiffwatchConfigError(
                f"Invalid context line count: {self.context_lines}"
            )
        if self.debounce < 0:
            raise DiffwatchConfigError(f"Invalid debounce interval: {self.debounce}")
        if self.color not in COLOR_MODES:
            raise DiffwatchConfigError(
                f"Invalid color mode: '{self.color}' "
                f"(must be one of {', '.join(COLOR_MODES)})"
            )
        for suffix in self.suffixes:
            if not isinstance(suffix, str):
                raise DiffwatchConfigError(f"Invalid file suffix: {suffix!r}")

    @classmethod
    def from_cmd_args(
        cls, cmd_args: Namespace, base: Optional["WatchOptions"] = None
    ) -> "WatchOptions":
        """
        Initialise WatchOptions from command line arguments.

        Construct a new ``WatchOptions`` object from the command line
        arguments in ``cmd_args``. Arguments that are absent or ``None``
        keep the value from ``base`` (or the defaults if ``base`` is not
        given).

        :param cmd_args: The command line arguments.
        :type cmd_args: ``Namespace``
        :param base: Options to override.
        :type base: ``Optional[WatchOptions]``
        :returns: A new ``WatchOptions`` instance
        :rtype: ``WatchOptions``
        """

        def get_value(name: str) -> Union[bool, int, str, Tuple[str, ...]]:
            """
            Get a value from ``cmd_args``, converting lists to tuples.

            :param name: The name of the argument.
            :type name: ``str``
            :returns: The argument converted to a tuple if appropriate.
            """
            attr = getattr(cmd_args, name)
            if isinstance(attr, list):
                return tuple(attr)
            return attr

        field_names = {f.name for f in fields(cls)}
        kwargs = {
            name: get_value(name)
            for name in field_names
            if hasattr(cmd_args, name) and getattr(cmd_args, name) is not None
        }
        options = replace(base, **kwargs) if base else cls(**kwargs)
        _log_debug("Initialised WatchOptions from arguments: %s", repr(options))
        return options

    @classmethod
    def from_file(cls, config_file: str) -> "WatchOptions":
        """
        Load ``WatchOptions`` from an INI-style configuration file located at
        ``config_file``.

        Values are read from the ``[watch]`` section. List values
        (``suffixes``, ``exclude_patterns``) are comma separated.

        :param config_file: path to the configuration file.
        :type config_file: ``str``.
        :returns: A ``WatchOptions`` instance initialised from ``config_file``.
        :rtype: ``WatchOptions``
        :raises: ``DiffwatchConfigError`` if a value cannot be parsed.
        """
        if not exists(config_file):
            _log_debug("No configuration file found at '%s'", config_file)
            return cls()

        _log_debug("Loading configuration from '%s'", config_file)
        cfg = ConfigParser()
        try:
            cfg.read([config_file])
        except ConfigParserError as err:
            raise DiffwatchConfigError(
                f"Error parsing configuration file '{config_file}': {err}"
            ) from err

        if not cfg.has_section(_DIFFWATCH_CFG_WATCH):
            return cls()

        section = cfg[_DIFFWATCH_CFG_WATCH]
        kwargs = {}
        try:
            for name in (f.name for f in fields(cls)):
                if not section.get(name):
                    continue
                if name in _TUPLE_FIELDS:
                    kwargs[name] = _split_list(section[name])
                elif name in _BOOL_FIELDS:
                    kwargs[name] = section.getboolean(name)
                elif name in _INT_FIELDS:
                    kwargs[name] = section.getint(name)
                else:
                    kwargs[name] = section[name].strip()
        except ValueError as err:
            raise DiffwatchConfigError(
                f"Invalid value in configuration file '{config_file}': {err}"
            ) from err

        for unknown in set(section.keys()) - {f.name for f in fields(cls)}:
            _log_warn("Ignoring unknown configuration option '%s'", unknown)

        return cls(**kwargs)
