# Copyright Red Hat
#
# branchdiff/compare/classifier.py - Branch comparison change classifier
#
# This file is part of the branchdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Classify structural changes into before/after file descriptor pairs.
"""
from typing import Any, Dict, List, Optional
from datetime import date
import logging

from branchdiff import BRANCHDIFF_SUBSYSTEM_COMPARE

from .filetypes import FileTypeInfo
from .metadata import (
    MetadataResolver,
    WorkingTreeMetadataResolver,
    file_extension,
)
from .treediff import DiffType, StructuralChange

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

#: Date format used for report output (DD/MM/YYYY)
DATE_FORMAT = "%d/%m/%Y"


def _log_debug_compare(msg, *args, **kwargs):
    """A wrapper for compare subsystem debug logs."""
    _log.debug(
        msg, *args, extra={"subsystem": BRANCHDIFF_SUBSYSTEM_COMPARE}, **kwargs
    )


class FileDescriptor:
    """
    Report fields for one side of a change.
    """

    __slots__ = (
        "path",
        "extension",
        "mtime",
        "last_modified",
        "size",
        "size_kb",
        "file_type_info",
    )

    # pylint: disable=too-many-arguments
    def __init__(
        self,
        path: str,
        extension: str,
        mtime: float,
        last_modified: date,
        size: int,
        size_kb: int,
        file_type_info: Optional[FileTypeInfo] = None,
    ):
        self.path = path
        self.extension = extension
        self.mtime = mtime
        self.last_modified = last_modified
        self.size = size
        self.size_kb = size_kb
        self.file_type_info = file_type_info

    def __setattr__(self, name, value):
        if hasattr(self, name):
            raise AttributeError(f"FileDescriptor.{name} is read-only")
        object.__setattr__(self, name, value)

    def __repr__(self):
        return (
            f"FileDescriptor({self.path!r}, {self.extension!r}, "
            f"{self.last_modified!r}, {self.size_kb!r})"
        )

    def to_row(self) -> List[str]:
        """
        Return the report columns for this side: path, type, date and size
        in kilobytes.

        :returns: A list of four strings.
        :rtype: ``List[str]``
        """
        return [
            self.path,
            self.extension,
            self.last_modified.strftime(DATE_FORMAT),
            str(self.size_kb),
        ]

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert this ``FileDescriptor`` into a dictionary representation
        suitable for encoding as JSON.

        :returns: A dictionary mapping this instance's keys to values.
        :rtype: ``Dict[str, Any]``
        """
        out = {
            "path": self.path,
            "extension": self.extension,
            "last_modified": self.last_modified.strftime(DATE_FORMAT),
            "mtime": self.mtime,
            "size": self.size,
            "size_kb": self.size_kb,
        }
        if self.file_type_info:
            out["file_type"] = self.file_type_info.to_dict()
        return out


#: Report columns for a side with no file
_EMPTY_ROW = ["", "", "", ""]


class FileDescriptorPair:
    """
    The before (side A) and after (side B) descriptors of one change.

    A side is ``None`` when no file exists on that side; a file of size
    zero is a populated descriptor with ``size == 0``.
    """

    __slots__ = ("_side_a", "_side_b", "_diff_type")

    def __init__(
        self,
        side_a: Optional[FileDescriptor],
        side_b: Optional[FileDescriptor],
        diff_type: DiffType,
    ):
        if side_a is None and side_b is None:
            raise ValueError("FileDescriptorPair requires at least one side")
        self._side_a = side_a
        self._side_b = side_b
        self._diff_type = diff_type

    @property
    def side_a(self) -> Optional[FileDescriptor]:
        """The source branch descriptor or ``None``."""
        return self._side_a

    @property
    def side_b(self) -> Optional[FileDescriptor]:
        """The target branch descriptor or ``None``."""
        return self._side_b

    @property
    def diff_type(self) -> DiffType:
        """The type of the originating structural change."""
        return self._diff_type

    @property
    def path_a(self) -> str:
        """The source path or ""."""
        return self._side_a.path if self._side_a else ""

    @property
    def path_b(self) -> str:
        """The target path or ""."""
        return self._side_b.path if self._side_b else ""

    @property
    def path(self) -> str:
        """The primary path of this pair."""
        return self.path_a or self.path_b

    def __repr__(self):
        return (
            f"FileDescriptorPair({self._side_a!r}, {self._side_b!r}, "
            f"{self._diff_type})"
        )

    def __str__(self):
        def _side_str(label, side):
            if side is None:
                return f"  {label}:"
            text = (
                f"  {label}:\n"
                f"    path: {side.path}\n"
                f"    extension: {side.extension}\n"
                f"    last_modified: {side.last_modified.strftime(DATE_FORMAT)}\n"
                f"    size_kb: {side.size_kb}"
            )
            if side.file_type_info:
                text += f"\n    file_type: {side.file_type_info}"
            return text

        return (
            f"Path: {self.path}\n"
            f"  diff_type: {self._diff_type.value}\n"
            f"{_side_str('side_a', self._side_a)}\n"
            f"{_side_str('side_b', self._side_b)}"
        )

    def to_row(self) -> List[str]:
        """
        Return the eight report columns for this pair: side A fields
        followed by side B fields, with empty strings for a missing side.

        :returns: A list of eight strings.
        :rtype: ``List[str]``
        """
        row_a = self._side_a.to_row() if self._side_a else _EMPTY_ROW
        row_b = self._side_b.to_row() if self._side_b else _EMPTY_ROW
        return row_a + row_b

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert this ``FileDescriptorPair`` into a dictionary representation
        suitable for encoding as JSON.

        :returns: A dictionary mapping this instance's keys to values.
        :rtype: ``Dict[str, Any]``
        """
        return {
            "diff_type": self._diff_type.value,
            "side_a": self._side_a.to_dict() if self._side_a else None,
            "side_b": self._side_b.to_dict() if self._side_b else None,
        }


class ChangeClassifier:
    """
    Build ``FileDescriptorPair`` objects from ``StructuralChange`` objects.
    """

    def __init__(self, metadata_resolver: MetadataResolver):
        """
        Initialise a new ``ChangeClassifier``.

        :param metadata_resolver: The resolver used to look up the metadata
                                  of each side.
        :type metadata_resolver: ``MetadataResolver``
        """
        self.metadata_resolver = metadata_resolver

    def _describe(self, path: str) -> Optional[FileDescriptor]:
        """
        Build the descriptor for one side of a change.

        :param path: The path for this side, or "" if the side is absent.
        :type path: ``str``
        :returns: A populated descriptor, or ``None`` for an absent side.
        :rtype: ``Optional[FileDescriptor]``
        :raises MetadataUnavailableError: If metadata cannot be read.
        """
        if not path:
            return None
        metadata = self.metadata_resolver.resolve(path)
        return FileDescriptor(
            path,
            file_extension(path),
            metadata.mtime,
            metadata.last_modified,
            metadata.size,
            metadata.size_kb,
            file_type_info=metadata.file_type_info,
        )

    def classify(self, change: StructuralChange) -> FileDescriptorPair:
        """
        Classify ``change`` into a populated ``FileDescriptorPair``.

        Both sides are resolved before the pair is built: if either side
        fails no pair is returned.

        :param change: The structural change to classify.
        :type change: ``StructuralChange``
        :returns: The descriptor pair for ``change``.
        :rtype: ``FileDescriptorPair``
        :raises MetadataUnavailableError: If metadata for either side cannot
                                          be read.
        """
        _log_debug_compare("Classifying change %s", change)
        side_a = self._describe(change.from_path)
        side_b = self._describe(change.to_path)
        return FileDescriptorPair(side_a, side_b, change.diff_type)


def classify(
    change: StructuralChange, working_directory: str, use_magic: bool = False
) -> FileDescriptorPair:
    """
    Classify ``change`` using metadata from ``working_directory``.

    :param change: The structural change to classify.
    :type change: ``StructuralChange``
    :param working_directory: The directory paths are resolved against.
    :type working_directory: ``str``
    :param use_magic: Detect file types using libmagic.
    :type use_magic: ``bool``
    :returns: The descriptor pair for ``change``.
    :rtype: ``FileDescriptorPair``
    """
    resolver = WorkingTreeMetadataResolver(working_directory, use_magic=use_magic)
    return ChangeClassifier(resolver).classify(change)
