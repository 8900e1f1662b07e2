# Copyright Red Hat
#
# branchdiff/compare/repository.py - Branch comparison repository access
#
# This file is part of the branchdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Repository access for branch comparison.
"""
import logging

from git import Repo
from git.exc import InvalidGitRepositoryError, NoSuchPathError

from branchdiff import BRANCHDIFF_SUBSYSTEM_REPO, RepositoryNotFoundError

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_repo(msg, *args, **kwargs):
    """A wrapper for repo subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": BRANCHDIFF_SUBSYSTEM_REPO}, **kwargs)


def open_repository(path: str) -> Repo:
    """
    Open the existing git repository at ``path``.

    Parent directories are not searched: ``path`` must be the top level
    of a work tree or a bare repository.

    :param path: The repository directory.
    :type path: ``str``
    :returns: An open repository handle.
    :rtype: ``git.Repo``
    :raises RepositoryNotFoundError: If ``path`` does not exist or is not a
                                     git repository.
    """
    _log_debug_repo("Opening repository at '%s'", path)
    try:
        repo = Repo(path, search_parent_directories=False)
    except NoSuchPathError as err:
        raise RepositoryNotFoundError(path, "no such directory") from err
    except InvalidGitRepositoryError as err:
        raise RepositoryNotFoundError(path, "not a git repository") from err
    _log_debug_repo("Opened repository with git dir '%s'", repo.git_dir)
    return repo
