# Copyright Red Hat
#
# diffwatch/watch/filetypes.py - Diff watcher file types
#
# This file is part of the diffwatch project.
#
# SPDX-License-Identifier: Apache-2.0
"""
File type and encoding detection for watched files.
"""
from typing import Optional
from pathlib import Path
import mimetypes
import logging
import magic

from diffwatch import DIFFWATCH_SUBSYSTEM_WATCH

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_watch(msg, *args, **kwargs):
    """A wrapper for watch subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": DIFFWATCH_SUBSYSTEM_WATCH}, **kwargs)


#: Encoding used when no better information is available.
DEFAULT_ENCODING = "utf8"

#: Encoding reported by magic for non-text content.
BINARY_ENCODING = "binary"


class FileTypeInfo:
    """
    Class representing file type information and encoding.
    """

    def __init__(self, mime_type: str, encoding: Optional[str] = None):
        """
        Initialise a new ``FileTypeInfo`` object.

        :param mime_type: The detected MIME type.
        :type mime_type: ``str``
        :param encoding: Optional file encoding.
        :type encoding: ``Optional[str]``
        """
        self.mime_type = mime_type
        self.encoding = encoding
        self.is_binary = encoding == BINARY_ENCODING and mime_type != "inode/x-empty"

    @property
    def read_encoding(self) -> str:
        """
        The encoding to use when reading the file as text.

        :returns: A codec name accepted by ``open()``.
        :rtype: ``str``
        """
        if not self.encoding or self.encoding in (BINARY_ENCODING, "unknown-8bit"):
            return DEFAULT_ENCODING
        return self.encoding

    def __str__(self):
        return (
            f"MIME type: {self.mime_type}, "
            f"Encoding: {self.encoding if self.encoding else 'unknown'}"
        )


class FileTypeDetector:
    """
    Detect file types, optionally using ``magic`` from python3-file-magic.
    """

    def __init__(self, use_magic: bool = False):
        self.use_magic = use_magic

    def detect_file_type(self, file_path: Path) -> FileTypeInfo:
        """
        Detect the MIME type and encoding of ``file_path``.

        Without magic the type is guessed from the file name and the
        encoding is assumed to be ``DEFAULT_ENCODING``.

        :param file_path: The path to the file to inspect.
        :type file_path: ``Path``
        :returns: File type information for ``file_path``.
        :rtype: ``FileTypeInfo``
        """
        if self.use_magic:
            # c9s magic does not have magic.error
            if hasattr(magic, "error"):
                magic_errors = (magic.error, OSError, ValueError)
            else:
                magic_errors = (OSError, ValueError)

            try:
                fm = magic.detect_from_filename(str(file_path))
                _log_debug_watch(
                    "Detected %s as %s (%s)", file_path, fm.mime_type, fm.encoding
                )
                return FileTypeInfo(fm.mime_type, fm.encoding)
            except magic_errors as err:
                _log_warn("Error detecting file type for %s: %s", str(file_path), err)

        mime_type, _ = mimetypes.guess_type(str(file_path))
        return FileTypeInfo(mime_type or "text/plain", DEFAULT_ENCODING)
