# Copyright Red Hat
#
# branchdiff/compare/__init__.py - Branch comparison package
#
# This file is part of the branchdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Branch comparison package.

Provides branch snapshot resolution, tree differencing and change
classification. The main entry points are ``BranchComparer``,
``CompareOptions`` and ``compare()``.
"""
from .classifier import ChangeClassifier, FileDescriptor, FileDescriptorPair
from .comparer import BranchComparer, ComparisonResult, compare
from .metadata import (
    FileMetadata,
    MetadataResolver,
    WorkingTreeMetadataResolver,
    file_extension,
    size_in_kb,
)
from .options import CompareOptions
from .repository import open_repository
from .resolver import Snapshot, SnapshotResolver
from .treediff import DiffType, StructuralChange, TreeDiffer

__all__ = [
    "BranchComparer",
    "ChangeClassifier",
    "CompareOptions",
    "ComparisonResult",
    "DiffType",
    "FileDescriptor",
    "FileDescriptorPair",
    "FileMetadata",
    "MetadataResolver",
    "Snapshot",
    "SnapshotResolver",
    "StructuralChange",
    "TreeDiffer",
    "WorkingTreeMetadataResolver",
    "compare",
    "file_extension",
    "open_repository",
    "size_in_kb",
]
