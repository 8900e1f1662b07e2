# Copyright Red Hat
#
# branchdiff/compare/comparer.py - Branch comparison orchestration
#
# This file is part of the branchdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Top-level branch comparison interface.
"""
from typing import Iterator, List, Optional, Tuple
from dataclasses import replace
from datetime import datetime
from math import floor
import logging
import json

from git import Repo

from branchdiff import (
    BRANCHDIFF_SUBSYSTEM_COMPARE,
    MetadataUnavailableError,
    PartialComparisonError,
)

from .classifier import ChangeClassifier, FileDescriptorPair
from .metadata import MetadataResolver, WorkingTreeMetadataResolver
from .options import CompareOptions
from .resolver import SnapshotResolver
from .treediff import DiffType, StructuralChange, TreeDiffer

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_compare(msg, *args, **kwargs):
    """A wrapper for compare subsystem debug logs."""
    _log.debug(
        msg, *args, extra={"subsystem": BRANCHDIFF_SUBSYSTEM_COMPARE}, **kwargs
    )


# pylint: disable=too-many-instance-attributes
class ComparisonResult:
    """Container for branch comparison results with formatting methods."""

    # pylint: disable=too-many-arguments
    def __init__(
        self,
        branch_a: str,
        branch_b: str,
        pairs: List[FileDescriptorPair],
        errors: Optional[List[Tuple[StructuralChange, MetadataUnavailableError]]] = None,
        options: Optional[CompareOptions] = None,
        timestamp: Optional[int] = None,
        commit_a: str = "",
        commit_b: str = "",
    ):
        self.branch_a = branch_a
        self.branch_b = branch_b
        self._pairs = pairs
        self.errors = errors or []
        self.options = options or CompareOptions()
        self.timestamp = (
            timestamp if timestamp is not None else floor(datetime.now().timestamp())
        )
        self.commit_a = commit_a
        self.commit_b = commit_b

    def __repr__(self) -> str:
        return (
            f"ComparisonResult({self.branch_a!r}, {self.branch_b!r}, [...], "
            f"failures={self.failures})"
        )

    # List-like interface
    def __iter__(self) -> Iterator[FileDescriptorPair]:
        return iter(self._pairs)

    def __len__(self):
        return len(self._pairs)

    def __getitem__(self, index: int) -> FileDescriptorPair:
        return self._pairs[index]

    @property
    def pairs(self) -> List[FileDescriptorPair]:
        """
        Return a copy of the ordered list of classified pairs.

        :returns: The classified descriptor pairs.
        :rtype: ``List[FileDescriptorPair]``
        """
        return list(self._pairs)

    @property
    def failures(self) -> int:
        """
        Return the number of changes that could not be classified.

        :returns: Count of failed changes.
        :rtype: ``int``
        """
        return len(self.errors)

    def _of_type(self, diff_type: DiffType) -> List[FileDescriptorPair]:
        return [p for p in self._pairs if p.diff_type == diff_type]

    @property
    def added(self) -> List[FileDescriptorPair]:
        """Pairs for files present only on the target branch."""
        return self._of_type(DiffType.ADDED)

    @property
    def removed(self) -> List[FileDescriptorPair]:
        """Pairs for files present only on the source branch."""
        return self._of_type(DiffType.REMOVED)

    @property
    def modified(self) -> List[FileDescriptorPair]:
        """Pairs for files whose content differs between branches."""
        return self._of_type(DiffType.MODIFIED)

    @property
    def renamed(self) -> List[FileDescriptorPair]:
        """Pairs for files moved to a new path with unchanged content."""
        return self._of_type(DiffType.RENAMED)

    def check(self):
        """
        Raise ``PartialComparisonError`` if any change failed.

        :raises PartialComparisonError: If ``failures`` is non-zero.
        """
        if self.failures:
            raise PartialComparisonError(self.failures, self)

    # Output formats
    def paths(self) -> List[str]:
        """
        Return a list of paths that changed in this ``ComparisonResult``.

        :returns: Path list.
        :rtype: ``List[str]``
        """
        return [pair.path for pair in self._pairs]

    def rows(self) -> List[List[str]]:
        """
        Return the eight-column report rows for this result.

        :returns: A list of rows in comparison order.
        :rtype: ``List[List[str]]``
        """
        return [pair.to_row() for pair in self._pairs]

    def to_dict(self):
        """
        Convert this ``ComparisonResult`` into a dictionary representation
        suitable for encoding as JSON.
        """
        return {
            "source": {"branch": self.branch_a, "commit": self.commit_a},
            "target": {"branch": self.branch_b, "commit": self.commit_b},
            "timestamp": self.timestamp,
            "changes": [pair.to_dict() for pair in self._pairs],
            "failures": [
                {"change": change.to_dict(), "error": str(err)}
                for change, err in self.errors
            ],
        }

    def json(self, pretty: bool = False) -> str:
        """
        Return JSON representation of this ``ComparisonResult``.

        :param pretty: Indent JSON to be human readable.
        :type pretty: ``bool``
        :returns: JSON string description of the branch differences.
        :rtype: ``str``
        """
        return json.dumps(self.to_dict(), indent=4 if pretty else None)

    def summary(self) -> str:
        """
        Return a summary of this ``ComparisonResult`` instance.

        :returns: A string summarizing this instance.
        :rtype: ``str``
        """
        return (
            f"Comparing '{self.branch_a}' and '{self.branch_b}'\n"
            f"Total changes:     {len(self)}\n"
            f"  Paths added:     {len(self.added)}\n"
            f"  Paths removed:   {len(self.removed)}\n"
            f"  Paths modified:  {len(self.modified)}\n"
            f"  Paths renamed:   {len(self.renamed)}\n"
            f"  Failed changes:  {self.failures}"
        )


class BranchComparer:
    """
    Top-level interface for generating branch comparisons.
    """

    def __init__(
        self,
        repo: Repo,
        options: Optional[CompareOptions] = None,
        metadata_resolver: Optional[MetadataResolver] = None,
    ):
        """
        Initialise a new ``BranchComparer``.

        :param repo: An open repository handle.
        :type repo: ``git.Repo``
        :param options: Options to control this ``BranchComparer`` instance.
        :type options: ``Optional[CompareOptions]``
        :param metadata_resolver: An optional resolver to use in place of
                                  the working tree resolver built from
                                  ``options``.
        :type metadata_resolver: ``Optional[MetadataResolver]``
        """
        options = options or CompareOptions()
        self.repo = repo
        self.options: CompareOptions = options
        self.snapshot_resolver = SnapshotResolver(repo)
        self.tree_differ = TreeDiffer(detect_renames=options.detect_renames)
        self.classifier = ChangeClassifier(
            metadata_resolver
            or WorkingTreeMetadataResolver(
                options.working_directory, use_magic=options.use_magic_file_type
            )
        )

    def classify_changes(
        self, changes: List[StructuralChange]
    ) -> Tuple[List[FileDescriptorPair], List[Tuple[StructuralChange, MetadataUnavailableError]]]:
        """
        Classify ``changes`` in order, collecting failures.

        :param changes: The ordered structural changes.
        :type changes: ``List[StructuralChange]``
        :returns: A 2-tuple of (pairs, errors).
        """
        pairs = []
        errors = []
        for change in changes:
            try:
                pairs.append(self.classifier.classify(change))
            except MetadataUnavailableError as err:
                _log_error("Error processing change %s: %s", change, err)
                errors.append((change, err))
        return pairs, errors

    def compare(self, branch_a: str, branch_b: str) -> ComparisonResult:
        """
        Compare the most recent commits of ``branch_a`` and ``branch_b``.

        Changes whose metadata cannot be read are logged and skipped; the
        returned result holds the remaining pairs and the failure count.

        :param branch_a: The source (left hand) branch name.
        :type branch_a: ``str``
        :param branch_b: The target (right hand) branch name.
        :type branch_b: ``str``
        :returns: The comparison result.
        :rtype: ``ComparisonResult``
        """
        start_time = datetime.now()
        snapshot_a = self.snapshot_resolver.resolve(branch_a)
        snapshot_b = self.snapshot_resolver.resolve(branch_b)

        changes = self.tree_differ.diff(snapshot_a, snapshot_b)
        _log_debug_compare(
            "Classifying %d changes between %s and %s",
            len(changes),
            snapshot_a,
            snapshot_b,
        )

        pairs, errors = self.classify_changes(changes)
        if errors:
            _log_warn("Failed to process %d changes", len(errors))

        end_time = datetime.now()
        _log_info(
            "Found %d differences between '%s' and '%s' in %s",
            len(pairs),
            branch_a,
            branch_b,
            end_time - start_time,
        )
        return ComparisonResult(
            branch_a,
            branch_b,
            pairs,
            errors=errors,
            options=self.options,
            timestamp=floor(start_time.timestamp()),
            commit_a=snapshot_a.commit_id,
            commit_b=snapshot_b.commit_id,
        )


def compare(
    repo: Repo,
    branch_a: str,
    branch_b: str,
    working_directory: Optional[str] = None,
    options: Optional[CompareOptions] = None,
) -> ComparisonResult:
    """
    Compare two branches of ``repo`` using metadata from
    ``working_directory``.

    :param repo: An open repository handle.
    :type repo: ``git.Repo``
    :param branch_a: The source branch name.
    :type branch_a: ``str``
    :param branch_b: The target branch name.
    :type branch_b: ``str``
    :param working_directory: The directory used for metadata lookups. If
                              not given the repository work tree is used.
    :type working_directory: ``Optional[str]``
    :param options: Additional comparison options.
    :type options: ``Optional[CompareOptions]``
    :returns: The comparison result.
    :rtype: ``ComparisonResult``
    """
    options = options or CompareOptions()
    if working_directory is None and not options.work_tree:
        working_directory = repo.working_tree_dir or options.repository_dir
    if working_directory is not None:
        options = replace(options, work_tree=working_directory)
    return BranchComparer(repo, options).compare(branch_a, branch_b)
