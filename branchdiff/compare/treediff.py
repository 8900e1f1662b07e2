# Copyright Red Hat
#
# branchdiff/compare/treediff.py - Branch comparison tree differ
#
# This file is part of the branchdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Structural differences between two commit snapshots.
"""
from typing import Dict, List, Tuple
from collections import defaultdict
from enum import Enum
import logging

from git import Tree
from git.exc import BadName, BadObject, GitCommandError

from branchdiff import BRANCHDIFF_SUBSYSTEM_COMPARE, DiffComputationError

from .resolver import Snapshot

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

_TREE_READ_ERRORS = (ValueError, BadName, BadObject, GitCommandError, OSError)


def _log_debug_compare(msg, *args, **kwargs):
    """A wrapper for compare subsystem debug logs."""
    _log.debug(
        msg, *args, extra={"subsystem": BRANCHDIFF_SUBSYSTEM_COMPARE}, **kwargs
    )


class DiffType(Enum):
    """
    Enum for different structural change types.
    """

    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"
    RENAMED = "renamed"


class StructuralChange:
    """
    One path-level difference between two snapshots.

    An empty ``from_path`` means the file does not exist in the source
    snapshot, an empty ``to_path`` that it does not exist in the target.
    """

    __slots__ = ("_from_path", "_to_path", "_diff_type")

    def __init__(self, from_path: str = "", to_path: str = "", diff_type=None):
        """
        Initialise a new ``StructuralChange``.

        :param from_path: The path in the source snapshot or "".
        :type from_path: ``str``
        :param to_path: The path in the target snapshot or "".
        :type to_path: ``str``
        :param diff_type: An explicit change type. Inferred from the paths
                          if not given.
        :type diff_type: ``Optional[DiffType]``
        """
        from_path = from_path or ""
        to_path = to_path or ""
        if not from_path and not to_path:
            raise ValueError("StructuralChange requires from_path or to_path")
        if diff_type is None:
            if not from_path:
                diff_type = DiffType.ADDED
            elif not to_path:
                diff_type = DiffType.REMOVED
            elif from_path == to_path:
                diff_type = DiffType.MODIFIED
            else:
                diff_type = DiffType.RENAMED
        self._from_path = from_path
        self._to_path = to_path
        self._diff_type = diff_type

    @property
    def from_path(self) -> str:
        """The path in the source snapshot, or "" if absent."""
        return self._from_path

    @property
    def to_path(self) -> str:
        """The path in the target snapshot, or "" if absent."""
        return self._to_path

    @property
    def diff_type(self) -> DiffType:
        """The type of this change."""
        return self._diff_type

    @property
    def path(self) -> str:
        """The primary path of this change: ``from_path`` if set."""
        return self._from_path or self._to_path

    def sort_key(self):
        """Return the key defining the report row order for this change."""
        return (self.path, self._to_path)

    def __eq__(self, other):
        if not isinstance(other, StructuralChange):
            return NotImplemented
        return (self._from_path, self._to_path, self._diff_type) == (
            other.from_path,
            other.to_path,
            other.diff_type,
        )

    def __hash__(self):
        return hash((self._from_path, self._to_path, self._diff_type))

    def __repr__(self):
        return (
            f"StructuralChange({self._from_path!r}, {self._to_path!r}, "
            f"{self._diff_type})"
        )

    def __str__(self):
        if self._diff_type == DiffType.RENAMED:
            return f"{self._diff_type.value}: {self._from_path} -> {self._to_path}"
        return f"{self._diff_type.value}: {self.path}"

    def to_dict(self) -> Dict[str, str]:
        """
        Convert this ``StructuralChange`` into a dictionary representation
        suitable for encoding as JSON.

        :returns: A dictionary mapping this instance's keys to values.
        :rtype: ``Dict[str, str]``
        """
        return {
            "from_path": self._from_path,
            "to_path": self._to_path,
            "diff_type": self._diff_type.value,
        }


#: A tree entry as (file mode, hex object id)
TreeEntry = Tuple[int, str]


def _index_tree(tree: Tree) -> Dict[str, TreeEntry]:
    """
    Build a mapping of path to mode and object id for every non-tree entry
    (blobs, symbolic links and submodule links) reachable from ``tree``.

    :param tree: The root tree to index.
    :type tree: ``git.Tree``
    :returns: A dictionary of repository relative path -> (mode, object id).
    :rtype: ``Dict[str, TreeEntry]``
    """
    return {
        item.path: (item.mode, item.hexsha)
        for item in tree.traverse()
        if item.type != "tree"
    }


class TreeDiffer:
    """
    Compute the ordered structural changes between two snapshots.
    """

    def __init__(self, detect_renames: bool = True):
        """
        Initialise a new ``TreeDiffer``.

        :param detect_renames: Pair exact-content removals and additions into
                               a single ``RENAMED`` change.
        :type detect_renames: ``bool``
        """
        self.detect_renames = detect_renames

    def _read_tree(self, snapshot: Snapshot) -> Dict[str, TreeEntry]:
        """
        Index the tree of ``snapshot``.

        :param snapshot: The snapshot to read.
        :type snapshot: ``Snapshot``
        :returns: A dictionary of path -> (mode, object id).
        :rtype: ``Dict[str, TreeEntry]``
        :raises DiffComputationError: If the tree cannot be read.
        """
        try:
            return _index_tree(snapshot.tree)
        except _TREE_READ_ERRORS as err:
            raise DiffComputationError(
                f"Could not read tree for {snapshot}: {err}"
            ) from err

    def diff(
        self, snapshot_a: Snapshot, snapshot_b: Snapshot
    ) -> List[StructuralChange]:
        """
        Compute the structural changes from ``snapshot_a`` to ``snapshot_b``.

        A path is changed if it exists on one side only, or if its object id
        or file mode differs between the two sides. A change of mode alone
        (``chmod +x``, or a file replaced by a symbolic link with the same
        text) is reported as ``MODIFIED``. The returned list is sorted by
        path.

        :param snapshot_a: The source (left hand) snapshot.
        :type snapshot_a: ``Snapshot``
        :param snapshot_b: The target (right hand) snapshot.
        :type snapshot_b: ``Snapshot``
        :returns: The ordered structural changes.
        :rtype: ``List[StructuralChange]``
        :raises DiffComputationError: If either tree cannot be read.
        """
        try:
            if snapshot_a.tree_id == snapshot_b.tree_id:
                _log_debug("Snapshots %s and %s share a tree", snapshot_a, snapshot_b)
                return []
        except _TREE_READ_ERRORS as err:
            raise DiffComputationError(f"Could not read snapshot trees: {err}") from err

        tree_a = self._read_tree(snapshot_a)
        tree_b = self._read_tree(snapshot_b)
        _log_debug(
            "Starting tree diff with %d/%d paths", len(tree_a), len(tree_b)
        )

        changes: List[StructuralChange] = []
        removed: List[str] = []
        added: List[str] = []

        for path in sorted(set(tree_a) | set(tree_b)):
            entry_a = tree_a.get(path)
            entry_b = tree_b.get(path)
            if entry_a is None:
                added.append(path)
            elif entry_b is None:
                removed.append(path)
            elif entry_a != entry_b:
                _log_debug_compare(
                    "Entry '%s' changed (%o %s -> %o %s)", path, *entry_a, *entry_b
                )
                changes.append(StructuralChange(path, path, DiffType.MODIFIED))

        if self.detect_renames:
            renames = self._detect_renames(removed, added, tree_a, tree_b)
            changes.extend(
                StructuralChange(src, dest, DiffType.RENAMED)
                for src, dest in renames.items()
            )
            moved_dests = set(renames.values())
            removed = [path for path in removed if path not in renames]
            added = [path for path in added if path not in moved_dests]

        changes.extend(StructuralChange(path, "", DiffType.REMOVED) for path in removed)
        changes.extend(StructuralChange("", path, DiffType.ADDED) for path in added)
        changes.sort(key=StructuralChange.sort_key)

        _log_debug("Found %d structural changes", len(changes))
        return changes

    @staticmethod
    def _detect_renames(
        removed: List[str],
        added: List[str],
        tree_a: Dict[str, TreeEntry],
        tree_b: Dict[str, TreeEntry],
    ) -> Dict[str, str]:
        """
        Match removed paths to added paths with identical content.

        Content is matched on object id alone: a rename that also changes
        the file mode is still a rename. Each destination is used at most
        once. If several added paths carry the content of a removed path the
        first one in path order is chosen.

        :param removed: Sorted paths present only in ``tree_a``.
        :type removed: ``List[str]``
        :param added: Sorted paths present only in ``tree_b``.
        :type added: ``List[str]``
        :param tree_a: Path -> (mode, object id) mapping for the source tree.
        :type tree_a: ``Dict[str, TreeEntry]``
        :param tree_b: Path -> (mode, object id) mapping for the target tree.
        :type tree_b: ``Dict[str, TreeEntry]``
        :returns: A mapping of source path -> destination path.
        :rtype: ``Dict[str, str]``
        """
        dest_ids = defaultdict(list)
        for path in added:
            _mode, hexsha = tree_b[path]
            dest_ids[hexsha].append(path)

        used_dests = set()
        renames = {}
        for path in removed:
            _mode, hexsha = tree_a[path]
            for dest_path in dest_ids.get(hexsha, []):
                if dest_path in used_dests:
                    continue
                _log_debug_compare("Detected rename '%s' -> '%s'", path, dest_path)
                used_dests.add(dest_path)
                renames[path] = dest_path
                break
        return renames


def diff(
    snapshot_a: Snapshot, snapshot_b: Snapshot, detect_renames: bool = True
) -> List[StructuralChange]:
    """
    Compute the ordered structural changes between two snapshots.

    :param snapshot_a: The source snapshot.
    :type snapshot_a: ``Snapshot``
    :param snapshot_b: The target snapshot.
    :type snapshot_b: ``Snapshot``
    :param detect_renames: Pair exact-content renames into one change.
    :type detect_renames: ``bool``
    :returns: The ordered structural changes.
    :rtype: ``List[StructuralChange]``
    """
    return TreeDiffer(detect_renames=detect_renames).diff(snapshot_a, snapshot_b)
