# Copyright Red Hat
#
# branchdiff/compare/filetypes.py - Branch comparison file types
#
# This file is part of the branchdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
File type information support.
"""
from typing import Dict, Optional
import logging
import magic

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

#: MIME type reported when libmagic detection fails
UNKNOWN_MIME_TYPE = "application/octet-stream"


class FileTypeInfo:
    """
    Class representing file type information and encoding.
    """

    def __init__(
        self,
        mime_type: str,
        description: str,
        encoding: Optional[str] = None,
    ):
        """
        Initialise a new ``FileTypeInfo`` object.

        :param mime_type: The detected MIME type.
        :type mime_type: ``str``
        :param description: Type description returned by magic.
        :type description: ``str``
        :param encoding: Optional file encoding.
        :type encoding: ``Optional[str]``
        """
        self.mime_type = mime_type
        self.description = description
        self.encoding = encoding

    def __str__(self):
        return (
            f"MIME type: {self.mime_type}, "
            f"Encoding: {self.encoding if self.encoding else 'unknown'}, "
            f"Description: {self.description}"
        )

    def to_dict(self) -> Dict[str, Optional[str]]:
        """
        Convert this ``FileTypeInfo`` into a dictionary representation
        suitable for encoding as JSON.

        :returns: A dictionary mapping this instance's keys to values.
        :rtype: ``Dict[str, Optional[str]]``
        """
        return {
            "mime_type": self.mime_type,
            "description": self.description,
            "encoding": self.encoding,
        }


class FileTypeDetector:
    """
    Detect file types using ``magic`` from python3-file-magic.
    """

    def detect_file_type(self, file_path: str) -> FileTypeInfo:
        """
        Detect the MIME type, encoding and description of ``file_path``.

        Detection errors are logged and reported as an unknown binary type.

        :param file_path: The path to the file to inspect.
        :type file_path: ``str``.
        :returns: File type information for ``file_path``.
        :rtype: ``FileTypeInfo``
        """
        # c9s magic does not have magic.error
        if hasattr(magic, "error"):
            magic_errors = (magic.error, OSError, ValueError)
        else:
            magic_errors = (OSError, ValueError)

        try:
            fm = magic.detect_from_filename(str(file_path))
        except magic_errors as err:
            _log_warn("Error detecting file type for %s: %s", str(file_path), err)
            return FileTypeInfo(UNKNOWN_MIME_TYPE, "unknown")

        _log_debug("Detected %s for %s", fm.mime_type, file_path)
        return FileTypeInfo(fm.mime_type, fm.name, fm.encoding)
