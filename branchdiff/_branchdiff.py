# Copyright Red Hat
#
# branchdiff/_branchdiff.py - Branch comparison global definitions
#
# This file is part of the branchdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Global definitions for the top-level branchdiff package.
"""
from typing import TYPE_CHECKING
import logging

if TYPE_CHECKING:
    from .compare.comparer import ComparisonResult

_log = logging.getLogger("branchdiff")

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

# Branchdiff debugging subsystem mask
BRANCHDIFF_DEBUG_COMMAND = 1
BRANCHDIFF_DEBUG_REPO = 2
BRANCHDIFF_DEBUG_COMPARE = 4
BRANCHDIFF_DEBUG_REPORT = 8
BRANCHDIFF_DEBUG_ALL = (
    BRANCHDIFF_DEBUG_COMMAND
    | BRANCHDIFF_DEBUG_REPO
    | BRANCHDIFF_DEBUG_COMPARE
    | BRANCHDIFF_DEBUG_REPORT
)

# Branchdiff debugging subsystem names
BRANCHDIFF_SUBSYSTEM_COMMAND = "branchdiff.command"
BRANCHDIFF_SUBSYSTEM_REPO = "branchdiff.repo"
BRANCHDIFF_SUBSYSTEM_COMPARE = "branchdiff.compare"
BRANCHDIFF_SUBSYSTEM_REPORT = "branchdiff.report"

_DEBUG_MASK_TO_SUBSYSTEM = {
    BRANCHDIFF_DEBUG_COMMAND: BRANCHDIFF_SUBSYSTEM_COMMAND,
    BRANCHDIFF_DEBUG_REPO: BRANCHDIFF_SUBSYSTEM_REPO,
    BRANCHDIFF_DEBUG_COMPARE: BRANCHDIFF_SUBSYSTEM_COMPARE,
    BRANCHDIFF_DEBUG_REPORT: BRANCHDIFF_SUBSYSTEM_REPORT,
}

_debug_subsystems = set()

#: Default location of the branchdiff configuration file
BRANCHDIFF_CONFIG_FILE = "/etc/branchdiff/branchdiff.conf"


class SubsystemFilter(logging.Filter):
    """
    Filters DEBUG records based on a set of enabled subsystem names.
    Non-DEBUG records or DEBUG records without a 'subsystem' attribute
    are always passed through.
    """

    def __init__(self, name=""):
        super().__init__(name)
        self.enabled_subsystems = set(_debug_subsystems)

    def filter(self, record):
        if record.levelno != logging.DEBUG:
            return True

        if not hasattr(record, "subsystem"):
            return True

        return record.subsystem in self.enabled_subsystems

    def set_debug_subsystems(self, subsystems):
        """Sets the collection of subsystems to allow."""
        self.enabled_subsystems = set(subsystems)


def get_debug_mask():
    """
    Return the current debug mask for the ``branchdiff`` package.

    :returns: The current debug mask value
    :rtype: int
    """
    enabled_subsystems = set(_debug_subsystems)
    branchdiff_log = logging.getLogger("branchdiff")

    for handler in branchdiff_log.handlers:
        for f in handler.filters:
            if isinstance(f, SubsystemFilter):
                enabled_subsystems.update(f.enabled_subsystems)

    mask_map = {v: k for k, v in _DEBUG_MASK_TO_SUBSYSTEM.items()}
    mask = 0
    for subsystem_name in enabled_subsystems:
        mask |= mask_map.get(subsystem_name, 0)
    return mask


def set_debug_mask(mask):
    """
    Set the debug mask for the ``branchdiff`` package.

    :param mask: the logical OR of the ``BRANCHDIFF_DEBUG_*``
                 values to log.
    :rtype: None
    """
    # pylint: disable=global-statement
    global _debug_subsystems

    if mask < 0 or mask > BRANCHDIFF_DEBUG_ALL:
        raise ValueError(f"Invalid branchdiff debug mask: {mask}")

    enabled_subsystems = [
        subsystem_name
        for flag, subsystem_name in _DEBUG_MASK_TO_SUBSYSTEM.items()
        if mask & flag
    ]

    branchdiff_log = logging.getLogger("branchdiff")
    for handler in branchdiff_log.handlers:
        for f in handler.filters:
            if isinstance(f, SubsystemFilter):
                f.set_debug_subsystems(enabled_subsystems)

    _debug_subsystems = set(enabled_subsystems)


#
# Branchdiff exception types
#


class BranchDiffError(Exception):
    """
    Base class for branch comparison errors.
    """


class BranchDiffArgumentError(BranchDiffError):
    """
    An invalid argument or configuration value was supplied.
    """


class RepositoryNotFoundError(BranchDiffError):
    """
    The repository directory does not exist or is not a git repository.
    """

    def __init__(self, path: str, reason: str = ""):
        """
        Initialise a new ``RepositoryNotFoundError`` exception.

        :param path: The repository path that could not be opened.
        :param reason: An optional description of the failure.
        """
        self.path = path
        msg = f"Could not open repository at '{path}'"
        super().__init__(f"{msg}: {reason}" if reason else msg)


class BranchNotFoundError(BranchDiffError):
    """
    No branch reference exists with the requested name.
    """

    def __init__(self, branch_name: str):
        """
        Initialise a new ``BranchNotFoundError`` exception.

        :param branch_name: The branch name that failed to resolve.
        """
        self.branch_name = branch_name
        super().__init__(f"Could not find branch '{branch_name}'")


class CommitNotFoundError(BranchDiffError):
    """
    A branch reference points to a commit that cannot be loaded.
    """

    def __init__(self, commit_id: str):
        """
        Initialise a new ``CommitNotFoundError`` exception.

        :param commit_id: The hex object id of the missing commit.
        """
        self.commit_id = commit_id
        super().__init__(f"Could not find commit {commit_id}")


class DiffComputationError(BranchDiffError):
    """
    The structural difference between two snapshots could not be computed.
    """


class MetadataUnavailableError(BranchDiffError):
    """
    File metadata could not be read from the working directory.
    """

    def __init__(self, path: str, reason: str = ""):
        """
        Initialise a new ``MetadataUnavailableError`` exception.

        :param path: The repository relative path of the file.
        :param reason: An optional description of the failure.
        """
        self.path = path
        msg = f"Metadata unavailable for '{path}'"
        super().__init__(f"{msg}: {reason}" if reason else msg)


class PartialComparisonError(BranchDiffError):
    """
    One or more changes could not be classified. The successfully
    classified part of the comparison is available as ``result``.
    """

    def __init__(self, failures: int, result: "ComparisonResult"):
        """
        Initialise a new ``PartialComparisonError`` exception.

        :param failures: The number of changes that failed.
        :param result: The partial comparison result.
        """
        self.failures = failures
        self.result = result
        super().__init__(f"Failed to process {failures} changes")


class ReportWriteError(BranchDiffError):
    """
    An error writing a comparison report.
    """


__all__ = [
    "BRANCHDIFF_CONFIG_FILE",
    # Debug logging - subsystem mask interface
    "BRANCHDIFF_DEBUG_COMMAND",
    "BRANCHDIFF_DEBUG_REPO",
    "BRANCHDIFF_DEBUG_COMPARE",
    "BRANCHDIFF_DEBUG_REPORT",
    "BRANCHDIFF_DEBUG_ALL",
    # Debug logging - subsystem name interface
    "BRANCHDIFF_SUBSYSTEM_COMMAND",
    "BRANCHDIFF_SUBSYSTEM_REPO",
    "BRANCHDIFF_SUBSYSTEM_COMPARE",
    "BRANCHDIFF_SUBSYSTEM_REPORT",
    "SubsystemFilter",
    "set_debug_mask",
    "get_debug_mask",
    # Exceptions
    "BranchDiffError",
    "BranchDiffArgumentError",
    "RepositoryNotFoundError",
    "BranchNotFoundError",
    "CommitNotFoundError",
    "DiffComputationError",
    "MetadataUnavailableError",
    "PartialComparisonError",
    "ReportWriteError",
]
