# Copyright Red Hat
#
# branchdiff/compare/resolver.py - Branch snapshot resolution
#
# This file is part of the branchdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Resolve branch names to commit snapshots.
"""
from dataclasses import dataclass
import logging

from git import Commit, Object, Repo, SymbolicReference, Tree
from git.exc import BadName, BadObject
from git.util import hex_to_bin

from branchdiff import (
    BRANCHDIFF_SUBSYSTEM_REPO,
    BranchNotFoundError,
    CommitNotFoundError,
)

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

#: Namespace of local branch references
_BRANCH_REF_PREFIX = "refs/heads/"


def _log_debug_repo(msg, *args, **kwargs):
    """A wrapper for repo subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": BRANCHDIFF_SUBSYSTEM_REPO}, **kwargs)


@dataclass(frozen=True)
class Snapshot:
    """
    The tree of the most recent commit of a branch.
    """

    #: The branch name this snapshot was resolved from
    branch: str
    #: Hex object id of the branch head commit
    commit_id: str
    #: The root tree of the commit
    tree: Tree

    def __str__(self):
        return f"{self.branch}@{self.commit_id[0:12]}"

    @property
    def tree_id(self) -> str:
        """
        Return the hex object id of this snapshot's root tree.

        :returns: The tree object id.
        :rtype: ``str``
        """
        return self.tree.hexsha


class SnapshotResolver:
    """
    Resolve branch names to ``Snapshot`` objects.
    """

    def __init__(self, repo: Repo):
        """
        Initialise a new ``SnapshotResolver``.

        :param repo: An open repository handle.
        :type repo: ``git.Repo``
        """
        self.repo = repo

    def _branch_commit_id(self, branch_name: str) -> str:
        """
        Return the commit id a branch reference points to.

        :param branch_name: The exact branch name to look up.
        :type branch_name: ``str``
        :returns: The hex object id the reference resolves to.
        :rtype: ``str``
        :raises BranchNotFoundError: If no such branch exists.
        """
        if not branch_name:
            raise BranchNotFoundError(branch_name)
        ref_path = f"{_BRANCH_REF_PREFIX}{branch_name}"
        try:
            return SymbolicReference.dereference_recursive(self.repo, ref_path)
        except ValueError as err:
            _log_debug_repo("Reference lookup for '%s' failed: %s", ref_path, err)
            raise BranchNotFoundError(branch_name) from err

    def resolve(self, branch_name: str) -> Snapshot:
        """
        Resolve ``branch_name`` to the snapshot of its most recent commit.

        The name must match a local branch exactly: no partial, remote or
        revision matching is performed.

        :param branch_name: The branch name to resolve.
        :type branch_name: ``str``
        :returns: The snapshot for the branch head commit.
        :rtype: ``Snapshot``
        :raises BranchNotFoundError: If no branch named ``branch_name``
                                     exists.
        :raises CommitNotFoundError: If the branch commit cannot be loaded.
        """
        commit_id = self._branch_commit_id(branch_name)
        _log_debug_repo("Branch '%s' points to %s", branch_name, commit_id)
        try:
            commit = Object.new_from_sha(self.repo, hex_to_bin(commit_id))
            if not isinstance(commit, Commit):
                raise ValueError(f"object {commit_id} is a {commit.type}")
            tree = commit.tree
        except (ValueError, BadName, BadObject) as err:
            _log_debug_repo("Failed to load commit %s: %s", commit_id, err)
            raise CommitNotFoundError(commit_id) from err

        snapshot = Snapshot(branch_name, commit_id, tree)
        _log_debug("Resolved branch '%s' to snapshot %s", branch_name, snapshot)
        return snapshot


def resolve(repo: Repo, branch_name: str) -> Snapshot:
    """
    Resolve ``branch_name`` in ``repo`` to its most recent commit snapshot.

    :param repo: An open repository handle.
    :type repo: ``git.Repo``
    :param branch_name: The branch name to resolve.
    :type branch_name: ``str``
    :returns: The snapshot for the branch head commit.
    :rtype: ``Snapshot``
    """
    return SnapshotResolver(repo).resolve(branch_name)
