# Copyright Red Hat
#
# branchdiff/compare/metadata.py - Branch comparison file metadata
#
# This file is part of the branchdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
File metadata resolution.

Metadata is read from the files currently present in the working
directory, not from the historical blob content of either branch: the
reported size and modification date describe the checked-out file.
"""
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Optional
from math import ceil
import logging
import os

from branchdiff import BRANCHDIFF_SUBSYSTEM_COMPARE, MetadataUnavailableError

from .filetypes import FileTypeDetector, FileTypeInfo

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

#: Bytes per reported kilobyte
KB_SIZE = 1024


def _log_debug_compare(msg, *args, **kwargs):
    """A wrapper for compare subsystem debug logs."""
    _log.debug(
        msg, *args, extra={"subsystem": BRANCHDIFF_SUBSYSTEM_COMPARE}, **kwargs
    )


def file_extension(path: str) -> str:
    """
    Return the upper case extension of ``path``: the text following the
    final ``.``. A path with no ``.`` is its own extension, so that
    "a/b/NOEXT" yields "A/B/NOEXT". A dot in a directory name is not
    special: "lib.d/README" yields "D/README".

    :param path: A repository relative path.
    :type path: ``str``
    :returns: The upper case extension.
    :rtype: ``str``
    """
    return path.rsplit(".", 1)[-1].upper()


def size_in_kb(size: int) -> int:
    """
    Convert a size in bytes to whole kilobytes, rounding up.

    :param size: The size in bytes.
    :type size: ``int``
    :returns: The size in kilobytes.
    :rtype: ``int``
    """
    return ceil(size / KB_SIZE)


class FileMetadata:
    """
    On-disk metadata for a single file.
    """

    def __init__(
        self,
        mtime: float,
        size: int,
        file_type_info: Optional[FileTypeInfo] = None,
    ):
        """
        Initialise a new ``FileMetadata`` object.

        :param mtime: The modification time in seconds since the epoch.
        :type mtime: ``float``
        :param size: The file size in bytes.
        :type size: ``int``
        :param file_type_info: Optional detected file type.
        :type file_type_info: ``Optional[FileTypeInfo]``
        """
        self.mtime = mtime
        self.size = size
        self.file_type_info = file_type_info

    def __repr__(self):
        return f"FileMetadata({self.mtime!r}, {self.size!r})"

    @property
    def last_modified(self) -> date:
        """The local calendar date of the last modification."""
        return datetime.fromtimestamp(self.mtime).date()

    @property
    def size_kb(self) -> int:
        """The file size in whole kilobytes, rounded up."""
        return size_in_kb(self.size)


class MetadataResolver(ABC):
    """
    Abstract interface for looking up file metadata by repository path.
    """

    @abstractmethod
    def resolve(self, path: str) -> FileMetadata:
        """
        Return metadata for the repository relative ``path``.

        :param path: A repository relative path.
        :type path: ``str``
        :returns: The file metadata.
        :rtype: ``FileMetadata``
        :raises MetadataUnavailableError: If the metadata cannot be read.
        """


class WorkingTreeMetadataResolver(MetadataResolver):
    """
    Resolve file metadata from the files in a working directory.
    """

    def __init__(self, working_directory: str, use_magic: bool = False):
        """
        Initialise a new ``WorkingTreeMetadataResolver``.

        :param working_directory: The directory paths are resolved against.
        :type working_directory: ``str``
        :param use_magic: Detect file types using libmagic.
        :type use_magic: ``bool``
        """
        self.working_directory = working_directory
        self.use_magic = use_magic
        self.file_type_detector = FileTypeDetector() if use_magic else None

    def resolve(self, path: str) -> FileMetadata:
        full_path = os.path.join(self.working_directory, path)
        try:
            st = os.stat(full_path)
        except OSError as err:
            _log_debug_compare("Could not stat '%s': %s", full_path, err)
            raise MetadataUnavailableError(path, err.strerror or str(err)) from err

        file_type_info = None
        if self.file_type_detector:
            file_type_info = self.file_type_detector.detect_file_type(full_path)

        _log_debug_compare(
            "Resolved metadata for '%s' (size=%d, mtime=%s)",
            full_path,
            st.st_size,
            st.st_mtime,
        )
        return FileMetadata(st.st_mtime, st.st_size, file_type_info)
