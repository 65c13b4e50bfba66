# Copyright Red Hat
#
# diffwatch/command.py - Diff watcher command interface
#
# This file is part of the diffwatch project.
#
# SPDX-License-Identifier: Apache-2.0
"""The ``diffwatch.command`` module provides both the diffwatch command
line interface infrastructure, and a simple procedural interface to the
``diffwatch.watch`` library modules.

The procedural interface is used by the ``diffwatch`` command line tool,
and may be used by application programs, or interactively in the
Python shell by users who do not require all the features present
in the diffwatch object API.
"""
from argparse import ArgumentParser
from typing import Optional, TextIO
from os.path import basename, exists
import logging
import sys

from diffwatch import (
    COLOR_MODES,
    DIFFWATCH_DEBUG_STORE,
    DIFFWATCH_DEBUG_DIFF,
    DIFFWATCH_DEBUG_DISPATCH,
    DIFFWATCH_DEBUG_WATCH,
    DIFFWATCH_DEBUG_COMMAND,
    DIFFWATCH_DEBUG_ALL,
    DIFFWATCH_SUBSYSTEM_COMMAND,
    DiffwatchConfigError,
    DiffwatchError,
    SubsystemFilter,
    set_debug_mask,
    __version__,
)
from .term import TermControl
from .watch import (
    DiffObserver,
    NotificationSource,
    TitleObserver,
    WatchController,
    WatchfilesSource,
    WatchOptions,
)

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_command(msg, *args, **kwargs):
    """A wrapper for command subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": DIFFWATCH_SUBSYSTEM_COMMAND}, **kwargs)


_DEFAULT_LOG_LEVEL = logging.WARNING
_CONSOLE_HANDLER = None


def create_controller(
    options: WatchOptions,
    source: Optional[NotificationSource] = None,
    stream: Optional[TextIO] = None,
) -> WatchController:
    """
    Create a ``WatchController`` for ``options`` with the built-in title
    and diff observers registered, unless ``options.show`` is disabled.

    :param options: The watch options to use.
    :type options: ``WatchOptions``
    :param source: The notification source (defaults to a
                   ``WatchfilesSource`` using ``options.debounce``).
    :type source: ``Optional[NotificationSource]``
    :param stream: The stream observers write to (default ``sys.stdout``).
    :type stream: ``Optional[TextIO]``
    :returns: A new, idle ``WatchController``.
    :rtype: ``WatchController``
    """
    source = source or WatchfilesSource(debounce=options.debounce)
    controller = WatchController(options, source=source)
    if options.show:
        stream = stream or sys.stdout
        term_control = TermControl(term_stream=stream, color=options.color)
        controller.add_observers(
            TitleObserver(stream=stream, term_control=term_control),
            DiffObserver(
                stream=stream,
                term_control=term_control,
                context_lines=options.context_lines,
            ),
        )
    return controller


def watch_tree(
    options: WatchOptions,
    source: Optional[NotificationSource] = None,
    stream: Optional[TextIO] = None,
) -> int:
    """
    Watch the tree described by ``options`` until interrupted, printing
    a title and a diff for each accepted change.

    :param options: The watch options to use.
    :type options: ``WatchOptions``
    :param source: The notification source to consume.
    :type source: ``Optional[NotificationSource]``
    :param stream: The stream observers write to (default ``sys.stdout``).
    :type stream: ``Optional[TextIO]``
    :returns: Zero after a clean stop.
    :rtype: ``int``
    :raises: ``DiffwatchNotifyError`` if the notification source fails.
    """
    with create_controller(options, source=source, stream=stream) as controller:
        _log_debug_command("Watching with options:\n%s", str(options))
        controller.watch()
    return 0


def _options_from_args(cmd_args) -> WatchOptions:
    """
    Build ``WatchOptions`` from an optional configuration file overridden
    by command line arguments.
    """
    base = None
    if cmd_args.config:
        if not exists(cmd_args.config):
            raise DiffwatchConfigError(
                f"Configuration file '{cmd_args.config}' not found"
            )
        base = WatchOptions.from_file(cmd_args.config)
    return WatchOptions.from_cmd_args(cmd_args, base=base)


def setup_logging(cmd_args):
    """
    Set up diffwatch logging.
    """
    # pylint: disable=global-statement
    global _CONSOLE_HANDLER
    level = _DEFAULT_LOG_LEVEL
    if cmd_args.verbose and cmd_args.verbose > 1:
        level = logging.DEBUG
    elif cmd_args.verbose and cmd_args.verbose > 0:
        level = logging.INFO

    diffwatch_log = logging.getLogger("diffwatch")
    formatter = logging.Formatter("%(levelname)s - %(message)s")
    diffwatch_log.setLevel(level)
    if diffwatch_log.hasHandlers():
        diffwatch_log.handlers.clear()

    # Subsystem log filtering
    _diffwatch_subsystem_filter = SubsystemFilter("diffwatch")

    # Main console handler
    _CONSOLE_HANDLER = logging.StreamHandler()

    _CONSOLE_HANDLER.setLevel(level)
    _CONSOLE_HANDLER.setFormatter(formatter)
    _CONSOLE_HANDLER.addFilter(_diffwatch_subsystem_filter)

    diffwatch_log.addHandler(_CONSOLE_HANDLER)


def shutdown_logging():
    """
    Shut down diffwatch logging.
    """
    logging.shutdown()


def set_debug(debug_arg):
    """
    Set debugging mask from command line argument.
    """
    if not debug_arg:
        return

    mask_map = {
        "store": DIFFWATCH_DEBUG_STORE,
        "diff": DIFFWATCH_DEBUG_DIFF,
        "dispatch": DIFFWATCH_DEBUG_DISPATCH,
        "watch": DIFFWATCH_DEBUG_WATCH,
        "command": DIFFWATCH_DEBUG_COMMAND,
        "all": DIFFWATCH_DEBUG_ALL,
    }

    mask = 0
    for name in debug_arg.split(","):
        if name not in mask_map:
            raise ValueError(f"Unknown debug option: {name}")
        mask |= mask_map[name]
    set_debug_mask(mask)


def _add_watch_args(parser):
    """
    Add arguments controlling what is watched and how changes are shown.
    """
    parser.add_argument(
        "-c",
        "--config",
        metavar="CONFIG",
        type=str,
        help="Read watch options from the [watch] section of CONFIG",
    )
    parser.add_argument(
        "-s",
        "--suffix",
        metavar="SUFFIX",
        dest="suffixes",
        action="append",
        help="A file suffix to watch (may be repeated)",
    )
    parser.add_argument(
        "-m",
        "--max-history",
        metavar="MAX_HISTORY",
        dest="max_history",
        type=int,
        help="Maximum snapshots kept per file before the history is collapsed",
    )
    parser.add_argument(
        "-R",
        "--no-recursive",
        dest="recursive",
        action="store_const",
        const=False,
        help="Do not watch subdirectories of ROOT",
    )
    parser.add_argument(
        "-P",
        "--no-pre-read",
        dest="pre_read",
        action="store_const",
        const=False,
        help="Do not record initial file contents before watching",
    )
    parser.add_argument(
        "-i",
        "--ignore-case",
        dest="ignore_case",
        action="store_const",
        const=True,
        help="Match file suffixes without regard to case",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        dest="show",
        action="store_const",
        const=False,
        help="Record changes without printing titles or diffs",
    )
    parser.add_argument(
        "-U",
        "--unified",
        metavar="N",
        dest="context_lines",
        type=int,
        help="Show N lines of context around each change",
    )
    parser.add_argument(
        "-x",
        "--exclude",
        metavar="PATTERN",
        dest="exclude_patterns",
        action="append",
        help="Exclude paths matching the glob PATTERN (may be repeated)",
    )
    parser.add_argument(
        "--magic",
        dest="use_magic_file_type",
        action="store_const",
        const=True,
        help="Detect file encodings with libmagic and skip binary files",
    )
    parser.add_argument(
        "--color",
        choices=COLOR_MODES,
        type=str,
        help="Control colored output",
    )
    parser.add_argument(
        "root",
        metavar="ROOT",
        nargs="?",
        default=None,
        help="The directory to watch (default: the current directory)",
    )


def main(args):
    """
    Main entry point for diffwatch.
    """
    parser = ArgumentParser(
        description="Print diffs of files as they change",
        prog=basename(args[0]),
    )

    # Global arguments
    parser.add_argument(
        "-d",
        "--debug",
        metavar="DEBUGOPTS",
        type=str,
        help="A list of debug options to enable",
    )
    parser.add_argument("-v", "--verbose", help="Enable verbose output", action="count")
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        help="Report the version number of diffwatch",
        version=__version__,
    )
    _add_watch_args(parser)

    cmd_args = parser.parse_args(args[1:])

    status = 1

    try:
        set_debug(cmd_args.debug)
    except ValueError as err:
        print(err)
        parser.print_help()
        return status

    setup_logging(cmd_args)

    _log_debug_command("Parsed %s", " ".join(args[1:]))

    try:
        options = _options_from_args(cmd_args)
        status = watch_tree(options)
    except KeyboardInterrupt:  # pragma: no cover
        _log_info("Exiting on user cancel")
        status = 0
    except DiffwatchError as err:
        _log_error("Command failed: %s", err)
    # pylint: disable=broad-except
    except Exception as err:
        if cmd_args.debug:
            raise
        _log_error("Command failed: %s", err)

    shutdown_logging()
    return status


def console_main():
    """
    Console script entry point for diffwatch.
    """
    sys.exit(main(sys.argv))


# vim: set et ts=4 sw=4 :
